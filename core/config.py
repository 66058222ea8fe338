import os

from dotenv import load_dotenv

load_dotenv()


def _csv(v: str):
    return [x.strip() for x in (v or "").split(",") if x.strip()]


def _env_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Config:
    # Flask 보안 키
    SECRET_KEY = os.getenv("SECRET_KEY", "local-dev-secret")

    ENV = os.getenv("FLASK_ENV", "production")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # -------------------------
    # Backend API (외부 서비스)
    # -------------------------
    BACKEND_API_BASE = os.getenv(
        "BACKEND_API_BASE", "https://blogbackend-crimson-frog-3248.fly.dev/api"
    ).rstrip("/")
    BACKEND_TIMEOUT = _env_int("BACKEND_TIMEOUT", 30)

    # 구독 정보 캐시 유효기간 (초)
    SUBSCRIPTION_CACHE_TTL = _env_int("SUBSCRIPTION_CACHE_TTL", 60 * 60)

    # 결제 확인 대기 (paystack verify 가 pending 일 때)
    PAYMENT_VERIFY_TIMEOUT = _env_int("PAYMENT_VERIFY_TIMEOUT", 60)
    PAYMENT_VERIFY_INTERVAL = float(os.getenv("PAYMENT_VERIFY_INTERVAL", "2.0"))

    RECENT_POSTS_MAX = 10
    DEFAULT_WORD_LENGTH = 500

    # 업로드(대표 이미지) 포함 요청 본문 상한
    MAX_UPLOAD_BYTES = _env_int("MAX_UPLOAD_BYTES", 8 * 1024 * 1024)

    # -------------------------
    # Client store (Flask-Caching)
    # -------------------------
    REDIS_URL = os.getenv("REDIS_URL", "")
    CACHE_TYPE = "RedisCache" if REDIS_URL else "SimpleCache"
    CACHE_REDIS_URL = REDIS_URL or None
    CACHE_DEFAULT_TIMEOUT = 60 * 60 * 24 * 30
    CACHE_KEY_PREFIX = "bs:"
    CLIENT_ID_KEY = "cid"

    # -------------------------
    # CORS (/api/* 만)
    # -------------------------
    CORS_ORIGINS = _csv(os.getenv("CORS_ORIGINS", "http://localhost:5000,http://127.0.0.1:5000"))

    # -------------------------
    # Rate limiting (Flask-Limiter 표준 키)
    # -------------------------
    RATELIMIT_STORAGE_URI = REDIS_URL if REDIS_URL else "memory://"
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "300 per hour")
    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED", True)

    # payments toggle
    PAYMENTS_ENABLED = _env_bool("PAYMENTS_ENABLED", default=True)

    # -------------------------
    # i18n (Flask-Babel)
    # -------------------------
    LANGUAGES = ["en"]
    BABEL_DEFAULT_LOCALE = "en"
    BABEL_DEFAULT_TIMEZONE = "Africa/Lagos"

    # 지원 요청 메일
    SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", "support@blogscribe.app")
