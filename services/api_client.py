# services/api_client.py
"""
BlogScribe 백엔드 API 호출 공통 모듈.

- Bearer 토큰 자동 첨부
- 401 + code=token_not_valid 이면 refresh 토큰으로 access 토큰을 재발급 받고 1회 재시도
- JSON 응답일 때만 본문 파싱
"""
import requests
from flask import current_app

from auth.tokens import get_access_token, get_refresh_token, store_tokens

TOKEN_NOT_VALID = "token_not_valid"


class ApiError(Exception):
    """백엔드 응답이 실패로 끝났을 때"""

    def __init__(self, message: str, status: int = 400, data=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data if data is not None else {}


class AuthenticationRequired(ApiError):
    def __init__(self, message: str = "Authentication required", data=None):
        super().__init__(message, status=401, data=data)


class SessionExpired(AuthenticationRequired):
    def __init__(self, message: str = "Your session has expired. Please log in again.", data=None):
        super().__init__(message, data=data)


class BackendUnavailable(ApiError):
    def __init__(self, message: str = "Network error", data=None):
        super().__init__(message, status=503, data=data)


class ApiResponse:
    def __init__(self, status: int, data=None, text: str = "", is_json: bool = False):
        self.status = status
        self.data = data
        self.text = text
        self.is_json = is_json

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @classmethod
    def from_requests(cls, r: requests.Response) -> "ApiResponse":
        ctype = r.headers.get("Content-Type") or ""
        if "application/json" in ctype:
            try:
                return cls(r.status_code, r.json(), r.text, True)
            except ValueError:
                current_app.logger.warning("[API] invalid JSON body status=%s", r.status_code)
        return cls(r.status_code, None, r.text, False)

    def get(self, key, default=None):
        if isinstance(self.data, dict):
            return self.data.get(key, default)
        return default

    def error_message(self, default: str = "") -> str:
        for key in ("detail", "message", "error"):
            value = self.get(key)
            if isinstance(value, str) and value:
                return value
        return default

    def field_errors(self) -> dict:
        """{"email": ["..."], ...} 형태의 필드 오류 → {필드: 첫 메시지}"""
        if not isinstance(self.data, dict):
            return {}
        errors = {}
        for key, value in self.data.items():
            if isinstance(value, list) and value:
                errors[key] = str(value[0])
        return errors

    def raise_for_error(self, default: str = "Request failed"):
        if self.ok:
            return self
        if self.status == 401:
            raise AuthenticationRequired(self.error_message(default), data=self.data)
        raise ApiError(self.error_message(default), status=self.status, data=self.data)

    def __repr__(self):
        return f"<ApiResponse {self.status} json={self.is_json}>"


def _url(path: str) -> str:
    base = current_app.config.get("BACKEND_API_BASE", "").rstrip("/")
    return f"{base}/{path.lstrip('/')}"


def _send(method: str, path: str, headers: dict, **kwargs) -> ApiResponse:
    timeout = current_app.config.get("BACKEND_TIMEOUT", 30)
    try:
        r = requests.request(method.upper(), _url(path), headers=headers, timeout=timeout, **kwargs)
    except requests.RequestException as e:
        current_app.logger.warning("[API] %s %s transport error: %r", method.upper(), path, e)
        raise BackendUnavailable() from e
    resp = ApiResponse.from_requests(r)
    current_app.logger.debug("[API] %s %s -> %s", method.upper(), path, resp.status)
    return resp


def refresh_access_token() -> bool:
    """refresh 토큰으로 access 토큰 재발급. 성공 시 세션 갱신"""
    refresh = get_refresh_token()
    if not refresh:
        return False

    try:
        resp = _send(
            "POST",
            "/users/token/refresh/",
            headers={"Content-Type": "application/json", "Authorization": f"Bearer {refresh}"},
            json={"refresh": refresh},
        )
    except BackendUnavailable:
        return False

    if not resp.ok:
        return False
    if not resp.is_json:
        current_app.logger.error("[AUTH] non-JSON refresh response: %s", resp.text[:200])
        return False

    access = resp.get("access")
    if not access:
        return False

    # 백엔드가 refresh 토큰을 회전시키면 같이 저장
    store_tokens(access, resp.get("refresh"))
    current_app.logger.info("[AUTH] access token refreshed")
    return True


def api_request(method: str, path: str, *, auth: bool = True, headers: dict = None, **kwargs) -> ApiResponse:
    """
    백엔드 호출
      - auth=True  : 토큰 없으면 AuthenticationRequired (요청 자체를 보내지 않음)
      - 401 token_not_valid : refresh 후 1회 재시도, refresh 실패 시 SessionExpired
      - 그 외 401 은 그대로 반환
    """
    base_headers = dict(headers or {})
    if "json" in kwargs:
        base_headers.setdefault("Content-Type", "application/json")

    if not auth:
        return _send(method, path, base_headers, **kwargs)

    token = get_access_token()
    if not token:
        raise AuthenticationRequired("No authentication token")

    resp = _send(method, path, {**base_headers, "Authorization": f"Bearer {token}"}, **kwargs)
    if resp.status != 401 or resp.get("code") != TOKEN_NOT_VALID:
        return resp

    current_app.logger.info("[AUTH] token expired, attempting refresh (%s %s)", method.upper(), path)
    if not refresh_access_token():
        current_app.logger.warning("[AUTH] token refresh failed")
        raise SessionExpired(data=resp.data)

    # 파일 업로드는 스트림을 처음부터 다시 읽어야 함
    for f in (kwargs.get("files") or {}).values():
        stream = f[1] if isinstance(f, tuple) else f
        if hasattr(stream, "seek"):
            stream.seek(0)

    return _send(method, path, {**base_headers, "Authorization": f"Bearer {get_access_token()}"}, **kwargs)
