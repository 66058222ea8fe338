from flask import request, render_template, redirect, url_for, Blueprint, current_app, g, flash
from flask_babel import gettext as _

from core.extensions import limiter
from domain.schema import email_schema, password_reset_schema
from security.security import require_safe_input
from services import accounts

password_reset_bp = Blueprint("password_reset", __name__)

# 완료 후 로그인 화면으로 이동하기까지 (초)
LOGIN_REDIRECT_DELAY = 3


def flash_backend_errors(resp, field: str = "email", title: str = "Request failed") -> dict:
    """
    실패 응답 안내
      - detail 문자열 → toast
      - email 목록 → 필드 오류
      - 그 밖의 필드 목록 → 필드마다 toast
    반환: 폼에 붙일 {필드: 메시지}
    """
    detail = resp.get("detail")
    if isinstance(detail, str) and detail:
        flash(f"{_(title)}: {detail}", "error")
        return {}

    field_errors = resp.field_errors()
    if field in field_errors:
        return {field: field_errors[field]}
    if field_errors:
        for name, msg in field_errors.items():
            flash(f"{name}: {msg}", "error")
        return {}

    flash(f"{_(title)}: {_('An error occurred. Please try again.')}", "error")
    return {}


# 비밀번호 재설정 메일 요청
@password_reset_bp.route("/auth/reset-password", methods=["GET", "POST"])
@require_safe_input(email_schema, form=True)
@limiter.limit("5/minute;20/hour", methods=["POST"])
def request_reset():
    if g.safe_input is None:
        return render_template("auth/reset_password.html", errors={}, email="", sent=False)

    email = (g.safe_input.get("email") or "").lower()
    if g.input_errors:
        return render_template("auth/reset_password.html", errors=g.input_errors, email=email, sent=False), 400

    resp = accounts.request_password_reset(email)
    if not resp.ok:
        errors = flash_backend_errors(resp, title="Request failed")
        current_app.logger.info("[MAIL reset] request rejected status=%s", resp.status)
        return render_template("auth/reset_password.html", errors=errors, email=email, sent=False), 400

    current_app.logger.info("[MAIL reset] requested")
    flash(_("Reset link sent. Please check your email for the password reset link."), "success")
    return render_template("auth/reset_password.html", errors={}, email=email, sent=True)


# 메일 링크 → 새 비밀번호 입력
@password_reset_bp.route("/password-reset/<uidb64>/<token>", methods=["GET", "POST"])
@password_reset_bp.route("/password-reset/<uidb64>/<token>/", methods=["GET", "POST"])
@require_safe_input(password_reset_schema, form=True, raw_fields={"password", "confirm_password"})
@limiter.limit("10/minute", methods=["POST"])
def reset_password(uidb64, token):
    if g.safe_input is None:
        resp = accounts.validate_reset_link(uidb64, token)
        if not resp.ok:
            error = resp.get("error") or _("Invalid or expired token. Please request a new password reset link.")
            return render_template("auth/password_reset.html", valid=False, error=error, errors={}), 400
        if not resp.get("success"):
            error = _("Invalid token. Please request a new password reset link.")
            return render_template("auth/password_reset.html", valid=False, error=error, errors={}), 400
        return render_template("auth/password_reset.html", valid=True, errors={})

    data = g.safe_input
    errors = dict(g.input_errors)
    if not errors and data.get("password") != data.get("confirm_password"):
        errors["confirm_password"] = _("Passwords do not match")
    if errors:
        return render_template("auth/password_reset.html", valid=True, errors=errors), 400

    resp = accounts.complete_password_reset(uidb64, token, data["password"])
    if not resp.ok:
        message = resp.error_message(_("Failed to reset password. Please try again."))
        flash(f"{_('Reset failed')}: {message}", "error")
        return render_template("auth/password_reset.html", valid=True, errors={}), 400

    current_app.logger.info("[MAIL reset] password reset completed")
    flash(_("Password reset successful. You can now log in with your new password."), "success")
    return render_template(
        "auth/password_reset.html",
        valid=True,
        done=True,
        errors={},
        login_url=url_for("auth.login_page"),
        redirect_delay=LOGIN_REDIRECT_DELAY,
    )
