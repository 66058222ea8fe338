# routes/api/subscription.py
from flask import Blueprint

from auth.entitlements import get_subscription_state
from auth.tokens import is_authenticated
from core.extensions import csrf, limiter
from core.http_utils import _json_err, _json_ok
from utils.time_utils import format_date

api_subscription_bp = Blueprint("api_subscription", __name__)


@csrf.exempt
@api_subscription_bp.route("/api/subscription/refresh", methods=["POST"])
@limiter.limit("10/minute")
def refresh_subscription():
    if not is_authenticated():
        return _json_err("login_required", "Authentication required", 401)

    state = get_subscription_state(force=True)
    sub = state.subscription
    return _json_ok({
        "has_active_plan": state.has_active_plan,
        "has_subscribed_before": state.has_subscribed_before,
        "subscription": None if sub is None else {
            "status": sub.status,
            "plan": sub.plan_name,
            "daily_limit": sub.plan.daily_limit if sub.plan else 0,
            "requests_today": sub.requests_today,
            "requests_remaining": sub.requests_remaining,
            "expires_at": sub.expires_at,
            "expires_display": format_date(sub.expires_at) if sub.expires_at else "",
        },
    })
