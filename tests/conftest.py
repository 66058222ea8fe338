"""
Pytest configuration and shared helpers.

The remote backend is replaced by FakeBackend: requests.request is
monkeypatched so every backend call is routed by (method, path) to canned
requests.Response objects.
"""
import json
from dataclasses import dataclass, field

import pytest
import requests

from app import create_app

BASE = "https://backend.test/api"

PLANS = [
    {"id": 1, "name": "Basic", "price": "2000.00", "daily_limit": 10, "duration": 30,
     "description": {"title": "Starter", "details": ["10 requests per day"]}},
    {"id": 2, "name": "Pro", "price": "5000.00", "daily_limit": 50, "duration": 30,
     "description": {"title": "Most popular", "details": ["50 requests per day"]}},
    {"id": 3, "name": "Ultimate", "price": "10000.00", "daily_limit": 200, "duration": 30,
     "description": {"title": "Everything", "details": ["URL paraphraser"]}},
]

USER = {
    "id": 7,
    "username": "alice",
    "email": "alice@example.com",
    "wordpress_username": "alice_wp",
    "wordpress_url": "https://blog.example.com",
    "has_subscribed": True,
}


def subscription(plan_name="Pro", status="active", requests_today=3):
    plan = next(p for p in PLANS if p["name"] == plan_name)
    return {
        "id": 11,
        "status": status,
        "plan": plan,
        "start_date": "2025-01-01T00:00:00Z",
        "expires_at": "2025-01-31T12:00:00Z",
        "requests_today": requests_today,
    }


def make_response(status=200, json_body=None, text=None, url=BASE):
    r = requests.Response()
    r.status_code = status
    r.url = url
    r.encoding = "utf-8"
    if json_body is not None:
        r._content = json.dumps(json_body).encode("utf-8")
        r.headers["Content-Type"] = "application/json"
    else:
        r._content = (text or "").encode("utf-8")
        r.headers["Content-Type"] = "text/html; charset=utf-8"
    return r


@dataclass
class Call:
    method: str
    path: str
    headers: dict
    kwargs: dict = field(default_factory=dict)

    @property
    def json(self):
        return self.kwargs.get("json")

    @property
    def bearer(self):
        auth = self.headers.get("Authorization") or ""
        return auth[len("Bearer "):] if auth.startswith("Bearer ") else None


class FakeBackend:
    """(METHOD, path) -> queued responses. The last queued response repeats."""

    def __init__(self, base=BASE):
        self.base = base
        self.routes = {}
        self.calls = []

    def add(self, method, path, status=200, json=None, text=None):
        self._queue(method, path).append(make_response(status, json, text, self.base + path))
        return self

    def set(self, method, path, status=200, json=None, text=None):
        self.routes[(method.upper(), path)] = []
        return self.add(method, path, status, json, text)

    def fail(self, method, path, exc=None):
        self.routes[(method.upper(), path)] = [exc or requests.ConnectionError("connection refused")]
        return self

    def _queue(self, method, path):
        return self.routes.setdefault((method.upper(), path), [])

    def calls_to(self, method, path):
        return [c for c in self.calls if c.method == method.upper() and c.path == path]

    def __call__(self, method, url, headers=None, timeout=None, **kwargs):
        assert url.startswith(self.base), url
        path = url[len(self.base):]
        self.calls.append(Call(method.upper(), path, dict(headers or {}), kwargs))

        queue = self.routes.get((method.upper(), path))
        if not queue:
            return make_response(404, {"detail": "Not found."}, url=url)
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def backend(monkeypatch):
    fake = FakeBackend()
    fake.set("GET", "/subscription/plans/", json=PLANS)
    fake.set("GET", "/subscription/details/", json=subscription())
    fake.set("GET", "/users/user/", json=USER)
    fake.set("GET", "/details/", json=[{"id": 1, "user": 7, "fetched_posts": 12,
                                         "paraphrased": 5, "daily_api_requests": 3}])
    monkeypatch.setattr(requests, "request", fake)
    return fake


@pytest.fixture
def app(backend):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "WTF_CSRF_ENABLED": False,
        "RATELIMIT_ENABLED": False,
        "CACHE_TYPE": "SimpleCache",
        "CACHE_REDIS_URL": None,
        "BACKEND_API_BASE": BASE,
        "PAYMENT_VERIFY_TIMEOUT": 5,
        "PAYMENT_VERIFY_INTERVAL": 0.01,
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def login_session(client, access="access-1", refresh="refresh-1", user=None, subscribed=True):
    with client.session_transaction() as sess:
        sess["authToken"] = access
        sess["refreshToken"] = refresh
        sess["userData"] = dict(user or USER)
        sess["hasSubscribedBefore"] = subscribed


def flashes(client):
    with client.session_transaction() as sess:
        return list(sess.get("_flashes", []))


def flash_text(client):
    return " | ".join(message for _category, message in flashes(client))


@pytest.fixture
def logged_in(client):
    login_session(client)
    return client
