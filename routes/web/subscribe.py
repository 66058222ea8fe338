# routes/web/subscribe.py
from urllib.parse import urlencode

from flask import render_template, Blueprint, request, redirect, url_for, flash, g, current_app, abort
from flask_babel import gettext as _

from auth.entitlements import invalidate_subscription
from auth.guards import login_required
from auth.tokens import is_authenticated, mark_subscribed_before, update_user_data
from core.extensions import limiter
from core.http_utils import nocache
from domain.policies import FEATURED_PLAN
from domain.schema import subscribe_schema
from security.security import require_safe_input
from services.api_client import ApiError, AuthenticationRequired
from services.subscriptions import get_plan, initiate_payment, list_plans, verify_payment

subscribe_bp = Blueprint("subscribe", __name__)

VERIFY_CONNECTION_ERROR = "An error occurred while verifying your payment. Please try again or contact support."


def featured_plan(plans):
    """강조할 플랜: FEATURED_PLAN 이 있으면 그것, 없으면 첫 번째"""
    for p in plans:
        if p.name == FEATURED_PLAN:
            return p
    return plans[0] if plans else None


def _payments_enabled():
    if not current_app.config.get("PAYMENTS_ENABLED", True):
        abort(404)


@subscribe_bp.route("/pricing", methods=["GET"])
def pricing():
    error = None
    plans = []
    try:
        plans = list_plans()
    except ApiError as e:
        current_app.logger.warning("[PLANS] load failed: %s", e.message)
        error = _("Failed to load subscription plans")

    selected = (request.args.get("plan_id") or "").strip()
    return render_template(
        "subscribe/pricing.html",
        plans=plans,
        error=error,
        featured=featured_plan(plans),
        selected_plan_id=selected,
    )


@subscribe_bp.route("/payment", methods=["GET"])
@login_required
def payment():
    plan_id = (request.args.get("plan_id") or "").strip()
    if plan_id and not plan_id.isdigit():
        return render_template("subscribe/payment.html", plan=None, error=_("Plan Not Found")), 404
    try:
        plan = get_plan(plan_id)
    except AuthenticationRequired:
        raise
    except ApiError as e:
        current_app.logger.warning("[PLANS] plan %s load failed: %s", plan_id, e.message)
        return render_template("subscribe/payment.html", plan=None, error=_("Plan Not Found")), 404

    if plan is None:
        return render_template("subscribe/payment.html", plan=None, error=_("Plan Not Found")), 404
    return render_template("subscribe/payment.html", plan=plan, error=None)


@subscribe_bp.route("/payment", methods=["POST"])
@require_safe_input(subscribe_schema, form=True)
@limiter.limit("10/minute")
def subscribe():
    _payments_enabled()
    data = g.safe_input or {}
    plan_id = data.get("plan_id", "")

    if not is_authenticated():
        flash(_("Authentication required. Please log in to subscribe to a plan."), "error")
        return_url = f"/pricing?{urlencode({'plan_id': plan_id})}" if plan_id else "/pricing"
        return redirect(url_for("auth.login_page", returnUrl=return_url))

    if g.input_errors:
        flash(_("Please choose a valid plan."), "error")
        return redirect(url_for("subscribe.pricing"))

    try:
        payment_url = initiate_payment(plan_id)
    except AuthenticationRequired:
        raise
    except ApiError as e:
        flash(f"{_('Subscription failed')}: {e.message}", "error")
        return redirect(url_for("subscribe.pricing", plan_id=plan_id))

    flash(_("Payment Initiated. You'll be redirected to complete your payment. Please don't close your browser."), "info")
    return redirect(payment_url)


@subscribe_bp.route("/payment-success", methods=["GET"])
@nocache
def payment_success():
    reference = (request.args.get("reference") or "").strip()
    if not reference:
        return render_template(
            "subscribe/payment_success.html", success=False,
            message=_("Payment reference not found. Please contact support if you believe this is an error."),
        ), 400

    if not is_authenticated():
        return render_template(
            "subscribe/payment_success.html", success=False,
            message=_("Authentication required. Please log in to verify your payment."),
            login_url=url_for("auth.login_page", returnUrl=request.full_path.rstrip("?")),
        ), 401

    try:
        result = verify_payment(reference)
    except AuthenticationRequired:
        raise
    except ApiError as e:
        current_app.logger.warning("[PAYMENT] verify error reference=%s: %s", reference, e.message)
        flash(_("Verification Error. Connection error. Please check your internet connection and try again."), "error")
        return render_template("subscribe/payment_success.html", success=False,
                               message=_(VERIFY_CONNECTION_ERROR)), 502

    if not result.ok:
        flash(f"{_('Verification Failed')}: {result.message}", "error")
        return render_template("subscribe/payment_success.html", success=False,
                               message=result.message, timed_out=result.timed_out,
                               reference=reference), 400

    update_user_data(has_active_subscription=True)
    mark_subscribed_before()
    invalidate_subscription()
    flash(_("Payment Successful. Your subscription has been activated successfully."), "success")
    return render_template("subscribe/payment_success.html", success=True, message=result.message)
