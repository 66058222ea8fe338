# auth/tokens.py
from flask import session

from services import client_store

ACCESS_KEY = "authToken"
REFRESH_KEY = "refreshToken"
USER_KEY = "userData"
SUBSCRIBED_BEFORE_KEY = "hasSubscribedBefore"


def get_access_token():
    return session.get(ACCESS_KEY)


def get_refresh_token():
    return session.get(REFRESH_KEY)


def store_tokens(access: str, refresh: str = None) -> None:
    session[ACCESS_KEY] = access
    if refresh:
        session[REFRESH_KEY] = refresh
    session.permanent = True


def is_authenticated() -> bool:
    return bool(session.get(ACCESS_KEY))


def get_user_data() -> dict:
    return session.get(USER_KEY) or {}


def store_user_data(data: dict) -> None:
    # 세션 쿠키에 필요한 필드만 요약해서 저장
    keep = ("id", "username", "email", "wordpress_username", "wordpress_url",
            "has_subscribed", "has_active_subscription")
    session[USER_KEY] = {k: data.get(k) for k in keep if k in data}
    if "has_subscribed" in data:
        session[SUBSCRIBED_BEFORE_KEY] = bool(data.get("has_subscribed"))


def update_user_data(**changes) -> None:
    user = dict(get_user_data())
    user.update(changes)
    session[USER_KEY] = user


def has_subscribed_before() -> bool:
    return bool(session.get(SUBSCRIBED_BEFORE_KEY))


def mark_subscribed_before() -> None:
    session[SUBSCRIBED_BEFORE_KEY] = True


def clear_auth_tokens() -> None:
    session.pop(ACCESS_KEY, None)
    session.pop(REFRESH_KEY, None)
    session.pop(USER_KEY, None)
    client_store.remove_items(client_store.SUBSCRIPTION_DATA, client_store.SUBSCRIPTION_DATA_TS)
