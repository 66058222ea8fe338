from flask import jsonify, Blueprint

from auth.entitlements import get_current_user, get_subscription_state
from auth.guards import allowed_features, resolve_plan
from core.extensions import csrf

api_auth_status_bp = Blueprint("api_auth_status", __name__)


# 페이지 스크립트(네비게이션/잠금 배너)에서 사용
@csrf.exempt
@api_auth_status_bp.route("/api/auth/status", methods=["GET"])
def api_auth_status():
    u = get_current_user()
    if u is None:
        return jsonify({"logged_in": False, "plan": "", "has_active_plan": False, "features": []}), 200

    state = get_subscription_state()
    plan = resolve_plan()
    return jsonify({
        "logged_in": True,
        "username": u.get("username"),
        "email": u.get("email"),
        "plan": plan,
        "has_active_plan": state.has_active_plan,
        "has_subscribed_before": state.has_subscribed_before,
        "features": allowed_features(plan) if plan else [],
    }), 200
