from urllib.parse import urlencode

from flask import Blueprint, render_template, request, redirect, url_for, g, flash, current_app
from flask_babel import gettext as _

from auth.entitlements import invalidate_subscription
from auth.tokens import mark_subscribed_before
from core.extensions import limiter
from domain.schema import login_schema, register_schema
from security.security import require_safe_input
from services import accounts
from utils.text import is_local_path

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

DEFAULT_RETURN_URL = "/dashboard"
REGISTER_RETURN_URL = "/auth/login"


def _return_url(default=DEFAULT_RETURN_URL) -> str:
    target = (request.args.get("returnUrl") or request.form.get("returnUrl") or "").strip()
    return target if is_local_path(target) else default


@auth_bp.route("/login", methods=["GET", "POST"])
# require_safe_input -> 이 라우트에서 입력받는 정보들은 login_schema 를 지켜야한다
@require_safe_input(login_schema, form=True, raw_fields={"password"})
@limiter.limit("10/minute", methods=["POST"])
def login_page():
    return_url = _return_url()
    if g.safe_input is None:
        return render_template("auth/login.html", return_url=return_url, errors={}, form={})

    data = g.safe_input
    form = {"username": data.get("username", "")}
    if g.input_errors:
        return render_template("auth/login.html", return_url=return_url, errors=g.input_errors, form=form), 400

    resp = accounts.login(data["username"], data["password"])
    if not resp.ok or not resp.get("access"):
        detail = resp.get("detail")
        # 이메일 미인증 → 인증 메일 재발송 안내
        if detail == "Email Not Verified":
            email = data["username"] if "@" in data["username"] else ""
            verify_url = url_for("email_verify.verify_email", **({"email": email} if email else {}))
            return render_template(
                "auth/login.html", return_url=return_url, errors={}, form=form,
                email_not_verified=True, verify_url=verify_url,
            ), 403

        errors = {}
        if isinstance(detail, str) and detail:
            flash(f"{_('Login failed')}: {detail}", "error")
        else:
            errors = {k: v for k, v in resp.field_errors().items() if k in ("username", "password")}
            if not errors:
                flash(_("Login failed. An error occurred. Please try again."), "error")
        current_app.logger.info("[AUTH] login rejected status=%s", resp.status)
        return render_template("auth/login.html", return_url=return_url, errors=errors, form=form), 400

    user = accounts.load_user_after_login()
    if user.get("has_subscribed"):
        mark_subscribed_before()
    invalidate_subscription()

    flash(_("Login successful. Welcome back!"), "success")
    return redirect(return_url)


@auth_bp.route("/register", methods=["GET", "POST"])
@require_safe_input(register_schema, form=True, raw_fields={"password", "wordpress_password"}, bool_fields={"agree"})
@limiter.limit("5/minute", methods=["POST"])
def register_page():
    return_url = _return_url(REGISTER_RETURN_URL)
    if g.safe_input is None:
        return render_template("auth/register.html", return_url=return_url, errors={}, form={})

    data = g.safe_input
    form = {k: data.get(k, "") for k in ("username", "email", "wordpress_username", "wordpress_url")}
    errors = dict(g.input_errors)
    if not data.get("agree"):
        errors["agree"] = _("You must agree to the Terms and Conditions")
    if errors:
        return render_template("auth/register.html", return_url=return_url, errors=errors, form=form), 400

    resp = accounts.register(
        username=data["username"],
        email=data["email"],
        password=data["password"],
        wordpress_username=data["wordpress_username"],
        wordpress_password=data["wordpress_password"],
        wordpress_url=data["wordpress_url"],
    )
    if not resp.ok:
        errors = resp.field_errors()
        if not errors:
            flash(f"{_('Registration failed')}: {resp.error_message(_('An error occurred. Please try again.'))}", "error")
        current_app.logger.info("[AUTH] register rejected status=%s fields=%s", resp.status, sorted(errors))
        return render_template("auth/register.html", return_url=return_url, errors=errors, form=form), 400

    flash(_("Registration successful. Your account has been created. Please log in."), "success")
    if return_url == REGISTER_RETURN_URL:
        return redirect(REGISTER_RETURN_URL)
    return redirect(f"{REGISTER_RETURN_URL}?{urlencode({'returnUrl': return_url})}")


@auth_bp.route("/logout", methods=["POST"])
def logout():
    accounts.logout()
    flash(_("Logged out. You have been successfully logged out."), "success")
    return redirect(url_for("pages.home"))
