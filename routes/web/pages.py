from flask import Blueprint, render_template, redirect, url_for, flash, g, current_app
from flask_babel import gettext as _

from auth.tokens import get_user_data
from core.extensions import limiter
from domain.schema import contact_schema
from routes.web.subscribe import featured_plan
from security.security import require_safe_input
from services import accounts
from services.api_client import ApiError
from services.subscriptions import list_plans

pages_bp = Blueprint("pages", __name__)


@pages_bp.route("/")
def home():
    plans = []
    try:
        plans = list_plans()
    except ApiError as e:
        current_app.logger.info("[PLANS] home plans unavailable: %s", e.message)
    return render_template("index.html", featured=featured_plan(plans))


@pages_bp.route("/terms")
def terms():
    return render_template("terms.html")


@pages_bp.route("/how-to-use")
def how_to_use():
    return render_template("how_to_use.html")


@pages_bp.route("/contact", methods=["GET", "POST"])
@require_safe_input(contact_schema, form=True)
@limiter.limit("5/minute;30/hour", methods=["POST"])
def contact():
    user = get_user_data()
    if g.safe_input is None:
        form = {"email": user.get("email", ""), "name": user.get("username", "")}
        return render_template("contact.html", form=form, errors={})

    data = g.safe_input
    if g.input_errors:
        return render_template("contact.html", form=data, errors=g.input_errors), 400

    try:
        resp = accounts.send_contact_message(
            subject=data["subject"],
            message=data["message"],
            email=data["email"],
            name=data["name"],
        )
    except ApiError as e:
        current_app.logger.warning("[CONTACT] send failed: %s", e.message)
        resp = None

    if resp is None or not resp.ok:
        flash(_("Something went wrong. Please try again."), "error")
        return render_template("contact.html", form=data, errors={}), 400

    current_app.logger.info("[CONTACT] message sent")
    flash(_("Message sent. Thank you for reaching out! We'll get back to you soon."), "success")
    return redirect(url_for("pages.contact"))
