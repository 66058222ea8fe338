from dataclasses import dataclass
from typing import Optional

from flask import g, current_app

from auth.tokens import get_access_token, get_user_data, has_subscribed_before
from domain.models import Subscription
from services import client_store
from services.api_client import ApiError
from services.subscriptions import fetch_subscription_details
from utils.time_utils import now_ms

# 현재 사용자(세션 요약)를 g 에 저장하는 훅
# app 시작 시 before_request 로 load_current_user() 호출 후
# 필요 할 때 마다 get_current_user() 로 가져옴


@dataclass
class SubscriptionState:
    subscription: Optional[Subscription] = None
    has_active_plan: bool = False
    has_subscribed_before: bool = False

    @property
    def plan_name(self) -> str:
        return self.subscription.plan_name if self.subscription else ""


def load_current_user():
    if not get_access_token():
        g.current_user = None
        return None
    g.current_user = get_user_data()
    return g.current_user


def get_current_user() -> Optional[dict]:
    return getattr(g, "current_user", None)


def _cached_subscription_data():
    data = client_store.get_item(client_store.SUBSCRIPTION_DATA)
    ts = client_store.get_item(client_store.SUBSCRIPTION_DATA_TS)
    if data is None or ts is None:
        return None
    ttl_ms = int(current_app.config.get("SUBSCRIPTION_CACHE_TTL", 3600)) * 1000
    if now_ms() - int(ts) < ttl_ms:
        return data
    return None


def invalidate_subscription() -> None:
    client_store.remove_items(client_store.SUBSCRIPTION_DATA, client_store.SUBSCRIPTION_DATA_TS)
    g.pop("subscription_state", None)


def refresh_subscription(force: bool = False) -> SubscriptionState:
    """
    구독 상태 조회.
    - 토큰 없음 → 구독 없음
    - 캐시(SUBSCRIPTION_CACHE_TTL 이내)가 있으면 요청 없이 사용
    - 실패/오류는 '구독 없음'으로 보고 전파하지 않음
    """
    before = has_subscribed_before()
    if not get_access_token():
        return SubscriptionState(None, False, False)

    if not force:
        cached = _cached_subscription_data()
        if cached is not None:
            sub = Subscription.from_api(cached)
            return SubscriptionState(sub, sub.is_active, before)

    try:
        resp = fetch_subscription_details()
    except ApiError as e:
        current_app.logger.warning("[SUBSCRIPTION] details fetch failed: %s", e.message)
        return SubscriptionState(None, False, before)

    if not resp.ok or not isinstance(resp.data, dict):
        return SubscriptionState(None, False, before)

    client_store.set_item(client_store.SUBSCRIPTION_DATA, resp.data)
    client_store.set_item(client_store.SUBSCRIPTION_DATA_TS, now_ms())
    sub = Subscription.from_api(resp.data)
    return SubscriptionState(sub, sub.is_active, before)


def get_subscription_state(force: bool = False) -> SubscriptionState:
    """요청 단위로 한 번만 조회"""
    state = None if force else getattr(g, "subscription_state", None)
    if state is None:
        state = refresh_subscription(force=force)
        g.subscription_state = state
    return state
