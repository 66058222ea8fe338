# domain/models.py
# 백엔드 JSON 을 화면에서 쓰기 좋은 형태로 옮겨 담는 값 객체들 (DB 없음)
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict
from urllib.parse import urlparse

from utils.text import slug_to_title


@dataclass
class SubscriptionPlan:
    id: int
    name: str
    price: str
    daily_limit: int = 0
    duration: int = 0
    title: str = ""
    details: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "SubscriptionPlan":
        desc = data.get("description") or {}
        return cls(
            id=data.get("id"),
            name=data.get("name") or "",
            price=str(data.get("price") or "0"),
            daily_limit=data.get("daily_limit") or 0,
            duration=data.get("duration") or 0,
            title=desc.get("title") or "",
            details=list(desc.get("details") or []),
        )


@dataclass
class Subscription:
    status: str
    plan: Optional[SubscriptionPlan]
    expires_at: str = ""
    start_date: str = ""
    requests_today: int = 0
    id: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def plan_name(self) -> str:
        return self.plan.name if self.plan else ""

    @property
    def requests_remaining(self) -> int:
        if not self.plan:
            return 0
        return max(0, (self.plan.daily_limit or 0) - (self.requests_today or 0))

    @classmethod
    def from_api(cls, data: dict) -> "Subscription":
        plan = data.get("plan")
        return cls(
            id=data.get("id"),
            status=data.get("status") or "",
            plan=SubscriptionPlan.from_api(plan) if isinstance(plan, dict) else None,
            expires_at=data.get("expires_at") or "",
            start_date=data.get("start_date") or "",
            requests_today=data.get("requests_today") or 0,
        )


@dataclass
class UserActivity:
    id: int = 0
    user: int = 0
    fetched_posts: int = 0
    paraphrased: int = 0
    daily_api_requests: int = 0
    severity: str = "none"

    @classmethod
    def from_api(cls, data) -> "UserActivity":
        # 백엔드는 리스트로 돌려준다. 첫 항목만 사용
        row = data[0] if isinstance(data, list) and data else None
        if not isinstance(row, dict):
            return cls()
        return cls(
            id=row.get("id") or 0,
            user=row.get("user") or 0,
            fetched_posts=row.get("fetched_posts") or 0,
            paraphrased=row.get("paraphrased") or 0,
            daily_api_requests=row.get("daily_api_requests") or 0,
        )


@dataclass
class FetchedPost:
    title: str
    url: str

    @classmethod
    def list_from_map(cls, data) -> List["FetchedPost"]:
        if not isinstance(data, dict):
            return []
        return [cls(title=str(t), url=str(u)) for t, u in data.items()]


@dataclass
class WordPressPost:
    id: int
    url: str
    title: str

    @classmethod
    def list_from_map(cls, data) -> List["WordPressPost"]:
        if not isinstance(data, dict):
            return []
        posts = []
        for index, url in data.items():
            try:
                pid = int(index)
            except (TypeError, ValueError):
                pid = len(posts)
            posts.append(cls(id=pid, url=str(url), title=title_from_url(str(url))))
        return posts


def title_from_url(url: str) -> str:
    """URL 마지막 경로 조각(slug)을 제목으로. 파싱 실패 시 URL 그대로"""
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    if not parsed.scheme or not parsed.netloc:
        return url
    parts = [p for p in parsed.path.split("/") if p]
    return slug_to_title(parts[-1]) if parts else ""


@dataclass
class RecentPost:
    title: str
    date: str
    url: str
    excerpt: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ParaphraseResult:
    """paraphrase / reparaphrase 응답. 백엔드 버전에 따라 본문 키가 다르다"""
    content: str
    title: str = ""
    url: str = ""
    raw: Dict = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> "ParaphraseResult":
        data = data or {}
        content = (
            data.get("Paraphrased")
            or data.get("paraphrased_content")
            or data.get("Post")
            or data.get("content")
            or ""
        )
        title = data.get("title") or data.get("originalTitle") or ""
        url = data.get("url") or data.get("originalUrl") or ""
        return cls(content=content, title=title, url=url, raw=dict(data))

    @property
    def seo(self) -> dict:
        return self.raw.get("seo") or {}
