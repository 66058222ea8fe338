from flask import request, render_template, Blueprint, current_app, g, flash
from flask_babel import gettext as _

from core.extensions import limiter
from domain.schema import email_schema
from routes.web.password_reset import flash_backend_errors
from security.security import require_safe_input
from services import accounts

email_verify_bp = Blueprint("email_verify", __name__)


# 인증 메일 재발송
@email_verify_bp.route("/auth/verify-email", methods=["GET", "POST"])
@require_safe_input(email_schema, form=True)
@limiter.limit("5/minute;20/hour", methods=["POST"])
def verify_email():
    if g.safe_input is None:
        email = (request.args.get("email") or "").strip()
        return render_template("auth/verify_email.html", errors={}, email=email, sent=False)

    email = (g.safe_input.get("email") or "").lower()
    if g.input_errors:
        return render_template("auth/verify_email.html", errors=g.input_errors, email=email, sent=False), 400

    resp = accounts.resend_verification(email)
    if not resp.ok:
        errors = flash_backend_errors(resp, title="Verification failed")
        return render_template("auth/verify_email.html", errors=errors, email=email, sent=False), 400

    current_app.logger.info("[MAIL verify] verification resent")
    flash(_("Verification email sent. Please check your email for the verification link."), "success")
    return render_template("auth/verify_email.html", errors={}, email=email, sent=True)


# 메일 링크 확인
@email_verify_bp.route("/email-verify", methods=["GET"])
def confirm():
    token = (request.args.get("token") or "").strip()
    if not token:
        return render_template(
            "auth/email_confirm.html", success=False,
            message=_("Verification token is missing."),
        ), 400

    resp = accounts.confirm_email(token)
    if resp.ok:
        message = resp.get("message") or _("Your email has been successfully verified!")
        return render_template("auth/email_confirm.html", success=True, message=message)

    message = (
        resp.get("detail")
        or resp.get("message")
        or _("Email verification failed. The token may be invalid or expired.")
    )
    return render_template("auth/email_confirm.html", success=False, message=message), 400
