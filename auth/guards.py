# guards.py
from functools import wraps

from flask import request, redirect, url_for, flash, current_app
from flask_babel import gettext as _

from auth.entitlements import get_subscription_state
from auth.tokens import is_authenticated
from core.http_utils import flash_ui_error
from domain.policies import ALL_FEATURES, FEATURES_BY_PLAN, PLANS
from domain.ui_errors import UiError


def resolve_plan() -> str:
    """
    현재 사용자의 플랜 이름.
    - 비로그인 / 구독 없음 / 만료 → ""
    """
    if not is_authenticated():
        return ""
    state = get_subscription_state()
    if not state.has_active_plan:
        return ""
    return state.plan_name if state.plan_name in PLANS else ""


def feature_allowed(plan: str, feature_key: str) -> bool:
    allowed = FEATURES_BY_PLAN.get(plan, set())
    return "*" in allowed or feature_key in allowed


def allowed_features(plan: str) -> list:
    allowed = FEATURES_BY_PLAN.get(plan, set())
    if "*" in allowed:
        allowed = ALL_FEATURES
    return sorted(allowed)


def _login_redirect():
    return redirect(url_for("auth.login_page", returnUrl=request.full_path.rstrip("?")))


def login_required(f):
    """토큰 없으면 로그인 화면으로 (returnUrl = 현재 경로)"""
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not is_authenticated():
            flash(_("Authentication required"), "error")
            return _login_redirect()
        return f(*args, **kwargs)
    return wrapper


def active_plan_required(f):
    """활성 구독 없으면 요금제 화면으로"""
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not is_authenticated():
            flash(_("Authentication required"), "error")
            return _login_redirect()
        if not get_subscription_state().has_active_plan:
            current_app.logger.info("[GATE] no active plan path=%s", request.path)
            flash(_("Subscription required"), "warn")
            return redirect(url_for("subscribe.pricing"))
        return f(*args, **kwargs)
    return wrapper


def feature_required(feature_key: str, *, methods=("POST",), redirect_to="subscribe.pricing", error: UiError = None):
    """
    기능 권한 게이트.
    methods 에 해당하는 요청만 검사 (GET 화면은 잠금 배너로 처리)
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if methods and request.method.upper() not in methods:
                return f(*args, **kwargs)
            plan = resolve_plan()
            if not feature_allowed(plan, feature_key):
                current_app.logger.info("[GATE] feature=%s denied plan=%r", feature_key, plan)
                if error is not None:
                    flash_ui_error(error)
                else:
                    flash(_("This feature is not available on your current plan."), "warn")
                return redirect(url_for(redirect_to))
            return f(*args, **kwargs)
        return wrapper
    return decorator
