# services/client_store.py
"""
브라우저별 저장소.

- 작은 값(토큰, 사용자 요약, 플래그)은 서명된 세션 쿠키에 둔다.
- 큰 값(패러프레이즈 결과, 가져온 글 목록, WordPress 카테고리/태그 등)은
  Flask-Caching 에 두고, 세션에 보관한 브라우저 id(cid)로 네임스페이스를 나눈다.
"""
import secrets

from flask import session, current_app

from core.extensions import cache

# cache 에 들어가는 키
PARAPHRASED_CONTENT = "paraphrasedContent"
FETCHED_POSTS = "fetchedPosts"
RECENT_POSTS = "recentPosts"
SUBSCRIPTION_DATA = "subscriptionData"
SUBSCRIPTION_DATA_TS = "subscriptionDataTimestamp"
WP_CATEGORIES = "wordpress_categories"
WP_TAGS = "wordpress_tags"
SELECTED_CATEGORY = "selected_category"
SELECTED_TAGS = "selected_tags"


def _client_id(create: bool = True):
    key = current_app.config.get("CLIENT_ID_KEY", "cid")
    cid = session.get(key)
    if not cid and create:
        cid = secrets.token_urlsafe(18)
        session[key] = cid
        session.permanent = True
    return cid


def _ns(name: str, cid: str) -> str:
    return f"{cid}:{name}"


def get_item(name: str, default=None):
    cid = _client_id(create=False)
    if not cid:
        return default
    value = cache.get(_ns(name, cid))
    return default if value is None else value


def set_item(name: str, value) -> None:
    cid = _client_id()
    cache.set(_ns(name, cid), value)


def remove_item(name: str) -> None:
    cid = _client_id(create=False)
    if cid:
        cache.delete(_ns(name, cid))


def remove_items(*names: str) -> None:
    for name in names:
        remove_item(name)
