# services/accounts.py
from flask import current_app

from auth.tokens import (
    clear_auth_tokens,
    get_refresh_token,
    is_authenticated,
    store_tokens,
    store_user_data,
)
from services.api_client import ApiError, ApiResponse, api_request, BackendUnavailable


def login(username: str, password: str) -> ApiResponse:
    resp = api_request("POST", "/users/login/", auth=False,
                       json={"username": username, "password": password})
    if resp.ok and resp.get("access"):
        store_tokens(resp.get("access"), resp.get("refresh"))
        current_app.logger.info("[AUTH] login ok username=%s", username)
    return resp


def register(*, username, email, password, wordpress_username, wordpress_password, wordpress_url) -> ApiResponse:
    return api_request("POST", "/auth/register/", auth=False, json={
        "username": username,
        "email": email,
        "password": password,
        "wordpress_username": wordpress_username,
        "wordpress_password": wordpress_password,
        "wordpress_url": wordpress_url,
    })


def logout() -> None:
    """서버 로그아웃은 최선 시도. 토큰은 항상 지운다"""
    refresh = get_refresh_token()
    try:
        if is_authenticated() and refresh:
            resp = api_request("POST", "/users/logout/", json={"refresh": refresh})
            if not resp.ok:
                current_app.logger.info("[AUTH] backend logout returned %s", resp.status)
    except ApiError as e:
        current_app.logger.info("[AUTH] backend logout failed: %s", e.message)
    finally:
        clear_auth_tokens()


def fetch_current_user() -> dict:
    """현재 사용자 조회 후 세션 요약 갱신. 401 은 AuthenticationRequired"""
    resp = api_request("GET", "/users/user/")
    resp.raise_for_error("Failed to fetch profile data")
    if not isinstance(resp.data, dict):
        raise ApiError("Invalid response format from server", status=resp.status)
    store_user_data(resp.data)
    return resp.data


def load_user_after_login() -> dict:
    try:
        return fetch_current_user()
    except BackendUnavailable:
        return {}
    except ApiError as e:
        current_app.logger.warning("[AUTH] user load after login failed: %s", e.message)
        return {}


def update_profile(fields: dict) -> ApiResponse:
    payload = {
        "username": fields.get("username", ""),
        "email": fields.get("email", ""),
        "current_password": fields.get("current_password", ""),
        "new_password": fields.get("new_password", ""),
        "wordpress_username": fields.get("wordpress_username", ""),
        "wordpress_url": fields.get("wordpress_url", ""),
        "wordpress_password": fields.get("wordpress_password", ""),
    }
    resp = api_request("PUT", "/users/update/", json=payload)
    if resp.ok and isinstance(resp.data, dict):
        store_user_data(resp.data)
    return resp


# -------------------- 비밀번호 재설정 / 이메일 인증 --------------------
def request_password_reset(email: str) -> ApiResponse:
    return api_request("POST", "/users/reset-password/", auth=False, json={"email": email})


def validate_reset_link(uidb64: str, token: str) -> ApiResponse:
    return api_request("GET", f"/users/password-reset/{uidb64}/{token}/", auth=False)


def complete_password_reset(uidb64: str, token: str, password: str) -> ApiResponse:
    return api_request("PATCH", "/users/password-reset-complete", auth=False,
                       json={"password": password, "uidb64": uidb64, "token": token})


def resend_verification(email: str) -> ApiResponse:
    return api_request("POST", "/users/email-verify/", auth=False, json={"email": email})


def confirm_email(token: str) -> ApiResponse:
    return api_request("GET", "/users/email-verify/", auth=False, params={"token": token},
                       headers={"Content-Type": "application/json"})


def send_contact_message(*, subject, message, email, name) -> ApiResponse:
    return api_request("POST", "/contact/", auth=False,
                       json={"subject": subject, "message": message, "email": email, "name": name})
