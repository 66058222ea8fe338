# routes/web/dashboard.py
from flask import Blueprint, render_template, redirect, url_for, flash, g, current_app

from flask_babel import gettext as _

from auth.entitlements import get_subscription_state
from auth.guards import login_required
from auth.tokens import clear_auth_tokens, get_user_data, has_subscribed_before, mark_subscribed_before
from core.http_utils import nocache
from domain.schema import profile_schema
from security.security import require_safe_input
from services import accounts, content
from services.api_client import ApiError, AuthenticationRequired
from utils.time_utils import format_date

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/dashboard")

PASSWORD_FIELDS = ("current_password", "new_password", "wordpress_password")


def _load_user_or_redirect():
    """
    대시보드 진입 시 사용자 확인.
    - 401 → 토큰 삭제 후 로그인
    - 한 번도 구독한 적 없음 → 요금제 화면
    반환: (user, redirect 응답)
    """
    try:
        user = accounts.fetch_current_user()
    except AuthenticationRequired:
        clear_auth_tokens()
        flash(_("Session expired. Your session has expired. Please log in again."), "error")
        return None, redirect(url_for("auth.login_page"))
    except ApiError as e:
        current_app.logger.warning("[DASHBOARD] user load failed: %s", e.message)
        flash(_("Failed to load your account. Please try again."), "error")
        return None, redirect(url_for("pages.home"))

    if user.get("has_subscribed"):
        mark_subscribed_before()
    if not (user.get("has_subscribed") or has_subscribed_before()):
        flash(_("Subscription required. Choose a plan to get started."), "warn")
        return None, redirect(url_for("subscribe.pricing"))
    return user, None


def _usage(state) -> dict:
    sub = state.subscription
    limit = (sub.plan.daily_limit if sub and sub.plan else 0) or 0
    used = (sub.requests_today if sub else 0) or 0
    percent = min(100, round(used * 100 / limit)) if limit else 0
    return {"used": used, "limit": limit, "percent": percent}


@dashboard_bp.route("", methods=["GET"])
@login_required
@nocache
def dashboard():
    user, resp = _load_user_or_redirect()
    if resp is not None:
        return resp

    state = get_subscription_state()
    activity = content.get_activity()
    stats = {
        "total_posts": activity.fetched_posts,
        "total_paraphrased": activity.paraphrased,
        "daily_api_requests": activity.daily_api_requests,
    }
    expires = format_date(state.subscription.expires_at) if state.subscription else ""
    return render_template(
        "dashboard/index.html",
        user=user,
        state=state,
        stats=stats,
        usage=_usage(state),
        expires=expires,
        recent_posts=content.recent_posts(),
    )


@dashboard_bp.route("/refresh-subscription", methods=["POST"])
@login_required
def refresh_subscription():
    state = get_subscription_state(force=True)
    if state.has_active_plan:
        flash(_("Subscription refreshed."), "success")
    else:
        flash(_("No active subscription found."), "info")
    return redirect(url_for("dashboard.dashboard"))


@dashboard_bp.route("/profile", methods=["GET", "POST"])
@login_required
@require_safe_input(profile_schema, form=True, raw_fields=set(PASSWORD_FIELDS))
def profile():
    if g.safe_input is None:
        try:
            user = accounts.fetch_current_user()
        except AuthenticationRequired:
            raise
        except ApiError as e:
            current_app.logger.warning("[PROFILE] load failed: %s", e.message)
            flash(_("Failed to fetch profile data"), "error")
            user = get_user_data()
        return render_template("dashboard/profile.html", form=user, errors={})

    data = g.safe_input
    form = {k: v for k, v in data.items() if k not in PASSWORD_FIELDS}
    if g.input_errors:
        return render_template("dashboard/profile.html", form=form, errors=g.input_errors), 400

    resp = accounts.update_profile(data)
    if resp.status == 401:
        resp.raise_for_error()
    if not resp.ok:
        message = resp.get("detail") if isinstance(resp.get("detail"), str) else _("Failed to update profile")
        flash(f"{_('Error')}: {message}", "error")
        return render_template("dashboard/profile.html", form=form, errors=resp.field_errors()), 400

    current_app.logger.info("[PROFILE] updated")
    flash(_("Profile updated successfully"), "success")
    # 비밀번호 칸은 비운 채로 다시 표시
    return redirect(url_for("dashboard.profile"))
