import logging
from datetime import timedelta

from flask import Flask, redirect, request, url_for, flash, render_template, jsonify, current_app
from flask_babel import gettext as _
from werkzeug.exceptions import RequestEntityTooLarge
from werkzeug.middleware.proxy_fix import ProxyFix

import routes
from auth.tokens import clear_auth_tokens
from core.config import Config
from core.context import init_context_processors
from core.extensions import init_extensions
from core.hooks import register_hooks
from security.headers import init_security_headers
from services.api_client import AuthenticationRequired, BackendUnavailable, SessionExpired
from utils.text import is_local_path


def _wants_json() -> bool:
    return request.path.startswith("/api/")


def _back_target(default_endpoint="pages.home") -> str:
    # 같은 사이트의 이전 화면으로. 외부 referrer 는 무시
    ref = request.referrer or ""
    host = request.host_url.rstrip("/")
    if ref.startswith(host):
        path = ref[len(host):] or "/"
        if is_local_path(path):
            return path
    return url_for(default_endpoint)


def register_error_handlers(app):

    @app.errorhandler(AuthenticationRequired)
    def _auth_required(e):
        clear_auth_tokens()
        current_app.logger.info("[AUTH] %s path=%s", type(e).__name__, request.path)
        if _wants_json():
            return jsonify({"ok": False, "error": "auth_required", "message": e.message}), 401

        if isinstance(e, SessionExpired):
            flash(_("Session expired. Please log in again."), "error")
        else:
            flash(_("Authentication required"), "error")
        return_url = request.full_path.rstrip("?") if request.method == "GET" else _back_target()
        return redirect(url_for("auth.login_page", returnUrl=return_url))

    @app.errorhandler(BackendUnavailable)
    def _backend_unavailable(e):
        current_app.logger.warning("[API] backend unavailable path=%s", request.path)
        message = _("Network error. Please check your connection and try again.")
        if _wants_json():
            return jsonify({"ok": False, "error": "backend_unavailable", "message": message}), 503
        if request.method == "GET":
            return render_template("error.html", title=_("Service unavailable"), message=message), 503
        flash(message, "error")
        return redirect(_back_target())

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(e):
        message = _("The uploaded file is too large.")
        if _wants_json():
            return jsonify({"ok": False, "error": "payload_too_large", "message": message}), 413
        flash(message, "error")
        return redirect(_back_target())


def create_app(config_overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.secret_key = app.config.get("SECRET_KEY")
    if not app.config.get("TESTING") and app.config.get("ENV") != "development":
        assert app.secret_key and app.secret_key != "local-dev-secret", \
            "SECURITY: 환경변수 SECRET_KEY를 강력한 값으로 설정하세요."

    app.logger.setLevel(getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO))

    # 쿠키 기본 설정
    app.config.update(
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        PERMANENT_SESSION_LIFETIME=timedelta(days=30),
        MAX_CONTENT_LENGTH=app.config.get("MAX_UPLOAD_BYTES"),
    )
    # dev/prod 분기
    app.config["SESSION_COOKIE_SECURE"] = (
        app.config.get("ENV") != "development" and not app.config.get("TESTING")
    )

    init_extensions(app)
    init_security_headers(app)
    init_context_processors(app)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    routes.register_routes(app)
    register_hooks(app)
    register_error_handlers(app)

    app.logger.info("[BOOT] backend=%s cache=%s", app.config.get("BACKEND_API_BASE"), app.config.get("CACHE_TYPE"))

    return app
