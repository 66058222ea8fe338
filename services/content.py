# services/content.py
"""
글 가져오기 / 패러프레이즈 / WordPress 발행.

백엔드는 실패를 두 가지로 알려준다.
  - 4xx/5xx + detail|message|error
  - 200 + {"error": "..."}
두 경우 모두 ContentError 로 바꾸고, 화면 안내가 정해진 메시지는 ui 에 담는다.
"""
from datetime import datetime, timezone
from typing import List, Optional

from flask import current_app

from domain.models import FetchedPost, ParaphraseResult, RecentPost, UserActivity, WordPressPost
from domain.ui_errors import UiError, classify_backend_error
from services import client_store
from services.api_client import ApiError, ApiResponse, api_request
from utils.text import split_title


class ContentError(ApiError):
    def __init__(self, message: str, status: int = 400, data=None, ui: Optional[UiError] = None):
        super().__init__(message, status=status, data=data)
        self.ui = ui


def _check(resp: ApiResponse, default: str) -> ApiResponse:
    if resp.status == 401:
        resp.raise_for_error(default)

    if not resp.ok:
        message = resp.error_message(default)
        raise ContentError(message, resp.status, resp.data, classify_backend_error(resp.status, message))

    error = resp.get("error")
    if error:
        message = str(error)
        raise ContentError(message, resp.status, resp.data, classify_backend_error(resp.status, message))

    if not resp.is_json:
        current_app.logger.error("[CONTENT] non-JSON response: %s", resp.text[:200])
        raise ContentError("Invalid response format from server", resp.status)
    return resp


# -------------------- 글 가져오기 --------------------
def fetch_news() -> List[FetchedPost]:
    resp = _check(api_request("POST", "/fetch-news/", json={}), "An error occurred while fetching posts.")
    data = resp.data if isinstance(resp.data, dict) else {}
    client_store.set_item(client_store.FETCHED_POSTS, data)
    posts = FetchedPost.list_from_map(data)
    current_app.logger.info("[CONTENT] fetched posts=%d", len(posts))
    return posts


def stored_fetched_posts() -> List[FetchedPost]:
    return FetchedPost.list_from_map(client_store.get_item(client_store.FETCHED_POSTS) or {})


# -------------------- 패러프레이즈 --------------------
def _store_result(data: dict) -> None:
    client_store.set_item(client_store.PARAPHRASED_CONTENT, data)


def get_stored_result() -> Optional[ParaphraseResult]:
    data = client_store.get_item(client_store.PARAPHRASED_CONTENT)
    if not isinstance(data, dict):
        return None
    result = ParaphraseResult.from_api(data)
    return result if result.content else None


def clear_stored_result() -> None:
    client_store.remove_item(client_store.PARAPHRASED_CONTENT)


def paraphrase(title: str, url: str) -> ParaphraseResult:
    resp = _check(
        api_request("POST", "/paraphrase/", json={"title": title, "url": url}),
        "An error occurred while paraphrasing. Please try again.",
    )
    data = dict(resp.data or {})
    data.setdefault("title", title)
    data.setdefault("url", url)
    _store_result(data)

    result = ParaphraseResult.from_api(data)
    add_recent_post(title, url, excerpt=split_title(result.content)[1][:160])
    return result


def paraphrase_url(url: str) -> ParaphraseResult:
    resp = _check(
        api_request("POST", "/paraphrase/", json={"url": url}),
        "Failed to paraphrase URL. Please try again.",
    )
    data = dict(resp.data or {})
    result = ParaphraseResult.from_api(data)
    if not result.content:
        raise ContentError("No content received from server", resp.status, resp.data)

    # 백엔드 필드(title, seo ...)는 그대로 보존
    _store_result({
        **data,
        "content": result.content,
        "originalUrl": url,
        "originalTitle": data.get("title") or "",
    })
    title = split_title(result.content)[0] or url
    add_recent_post(title, url, excerpt=split_title(result.content)[1][:160])
    return result


def reparaphrase(content: str, word_length, keyword: str = "", url: str = "", title: str = "") -> ParaphraseResult:
    word_length = int(word_length or current_app.config.get("DEFAULT_WORD_LENGTH", 500))
    resp = _check(
        api_request("POST", "/reparaphrase/", json={
            "content": content,
            "word_length": word_length,
            "keyword": keyword or "",
            "url": url,
            "title": title,
        }),
        "Failed to paraphrase. Please try again.",
    )
    data = dict(resp.data or {})
    result = ParaphraseResult.from_api(data)
    if not result.content:
        raise ContentError("No content received from server", resp.status, resp.data)

    # 원문 url/title 은 다음 재작성에도 필요
    data.setdefault("url", url)
    data.setdefault("title", title)
    _store_result(data)
    return ParaphraseResult.from_api(data)


def save_edited_content(content: str) -> None:
    """편집기에서 수정한 본문 저장 (원문 url/title 유지)"""
    data = client_store.get_item(client_store.PARAPHRASED_CONTENT) or {}
    result = ParaphraseResult.from_api(data)
    _store_result({
        "content": content,
        "originalUrl": result.url,
        "originalTitle": result.title,
    })


# -------------------- 발행 --------------------
def publish(*, title: str, content: str, status: str = "publish", categories=None, tags=None, image=None) -> dict:
    """
    WordPress 발행 (multipart).
    content 는 편집기 본문 전체. 앞 두 줄(제목)은 빼고 보낸다.
    image 는 werkzeug FileStorage (선택)
    """
    body = split_title(content)[1]
    fields = [("title", title), ("content", body), ("status", status)]
    fields += [("categories", str(c)) for c in (categories or []) if c]
    fields += [("tags", str(t)) for t in (tags or []) if t]

    files = None
    if image is not None and getattr(image, "filename", ""):
        files = {"image": (image.filename, image.stream, image.mimetype or "application/octet-stream")}

    resp = _check(
        api_request("POST", "/publish/", data=fields, files=files),
        "Failed to publish post",
    )
    clear_stored_result()
    current_app.logger.info("[CONTENT] published status=%s", status)
    return resp.data or {}


# -------------------- WordPress --------------------
def get_categories() -> dict:
    resp = api_request("GET", "/get-categories/")
    resp.raise_for_error("Failed to fetch categories")
    data = resp.data if isinstance(resp.data, dict) else {}
    if data.get("Message") == "Error":
        raise ContentError("Failed to fetch categories", resp.status, data)
    client_store.set_item(client_store.WP_CATEGORIES, data)
    return data


def get_tags() -> dict:
    resp = api_request("GET", "/get-tags/")
    resp.raise_for_error("Failed to fetch tags")
    data = resp.data if isinstance(resp.data, dict) else {}
    if data.get("error"):
        raise ContentError("Failed to fetch tags", resp.status, data)
    client_store.set_item(client_store.WP_TAGS, data)
    return data


def get_posts() -> List[WordPressPost]:
    resp = api_request("GET", "/get-posts/")
    resp.raise_for_error("Failed to fetch posts")
    return WordPressPost.list_from_map(resp.data)


def stored_categories() -> dict:
    return client_store.get_item(client_store.WP_CATEGORIES) or {}


def stored_tags() -> dict:
    return client_store.get_item(client_store.WP_TAGS) or {}


def store_selection(category: Optional[str], tags: List[str]) -> None:
    if category:
        client_store.set_item(client_store.SELECTED_CATEGORY, category)
    else:
        client_store.remove_item(client_store.SELECTED_CATEGORY)
    client_store.set_item(client_store.SELECTED_TAGS, list(tags or []))


def stored_selection():
    return (
        client_store.get_item(client_store.SELECTED_CATEGORY),
        client_store.get_item(client_store.SELECTED_TAGS) or [],
    )


# -------------------- 활동 / 최근 글 --------------------
def get_activity() -> UserActivity:
    """실패 시 0 으로 채운 통계 (안내 없음)"""
    try:
        resp = api_request("GET", "/details/")
    except ApiError as e:
        if e.status == 401:
            raise
        current_app.logger.info("[CONTENT] activity fetch failed: %s", e.message)
        return UserActivity()
    if not resp.ok:
        if resp.status == 401:
            resp.raise_for_error()
        return UserActivity()
    return UserActivity.from_api(resp.data)


def add_recent_post(title: str, url: str, excerpt: str = "") -> List[dict]:
    """최근 글 (최신순, RECENT_POSTS_MAX 개 유지)"""
    limit = int(current_app.config.get("RECENT_POSTS_MAX", 10))
    posts = [p for p in (client_store.get_item(client_store.RECENT_POSTS) or []) if p.get("url") != url]
    item = RecentPost(
        title=title,
        date=datetime.now(timezone.utc).isoformat(),
        url=url,
        excerpt=excerpt,
    )
    posts = [item.to_dict()] + posts
    posts = posts[:limit]
    client_store.set_item(client_store.RECENT_POSTS, posts)
    return posts


def recent_posts() -> List[dict]:
    return client_store.get_item(client_store.RECENT_POSTS) or []
