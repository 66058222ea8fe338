# extensions.py
from flask_babel import Babel
from flask_caching import Cache
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_wtf.csrf import CSRFProtect

from core.i18n import select_locale


csrf = CSRFProtect()

# limiter는 객체만 만들고, 실제 설정(storage/default_limits)은 app.config에서 가져오도록
limiter = Limiter(key_func=get_remote_address)

cors = CORS()
babel = Babel()

# 브라우저별 client store 저장소 (SimpleCache / RedisCache)
cache = Cache()


def init_extensions(app):
    csrf.init_app(app)
    limiter.init_app(app)
    babel.init_app(app, locale_selector=select_locale)
    cache.init_app(app)

    # CORS: /api/*만 허용
    cors.init_app(
        app,
        supports_credentials=True,
        resources={
            r"/api/*": {
                "origins": app.config.get("CORS_ORIGINS") or [],
                "methods": ["POST", "GET"],
                "allow_headers": ["Content-Type", "X-CSRFToken"],
            }
        },
    )
