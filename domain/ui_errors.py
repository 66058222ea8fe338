from dataclasses import dataclass
from typing import Optional, Dict


@dataclass
class UiError:
    code: str
    title: str
    message: str
    severity: str = "error"        # error | warn | info
    redirect_to: Optional[str] = None  # 이동할 화면 (endpoint)


SUBSCRIPTION_REQUIRED = UiError(
    "SUBSCRIPTION_REQUIRED",
    "Subscription required",
    "Your subscription has expired. Please renew to use this feature.",
    redirect_to="subscribe.pricing",
)
DAILY_LIMIT_REACHED = UiError(
    "DAILY_LIMIT_REACHED",
    "Daily limit reached",
    "You've reached your daily request limit. Upgrade to a higher plan for more requests or try again tomorrow.",
    "warn",
    redirect_to="subscribe.pricing",
)
FREE_TRIAL_USED = UiError(
    "FREE_TRIAL_USED",
    "Free Trial Used",
    "Please subscribe to continue using this feature.",
    "warn",
    redirect_to="subscribe.pricing",
)
EMAIL_NOT_VERIFIED = UiError(
    "EMAIL_NOT_VERIFIED",
    "Email not verified",
    "Please verify your email address before logging in.",
    "warn",
    redirect_to="email_verify.verify_email",
)
SESSION_EXPIRED = UiError(
    "SESSION_EXPIRED",
    "Session expired",
    "Your session has expired. Please log in again.",
    "warn",
    redirect_to="auth.login_page",
)
FEATURE_LOCKED = UiError(
    "FEATURE_LOCKED",
    "Feature locked",
    "The URL Paraphraser is only available to Ultimate plan subscribers.",
    "warn",
)

# 백엔드가 돌려주는 고정 문자열 -> UiError
BACKEND_ERROR_MAP: Dict[str, UiError] = {
    "Your daily request limit is reached": DAILY_LIMIT_REACHED,
    "User has already used free trial. No access!": FREE_TRIAL_USED,
    "Email Not Verified": EMAIL_NOT_VERIFIED,
}


def classify_backend_error(status: int, message: str) -> Optional[UiError]:
    """
    백엔드 실패 응답을 화면 안내로 변환.
    - 고정 문자열은 그대로 매핑
    - 'subscription' 이 들어간 메시지는 구독 만료 안내 (403 또는 error 필드)
    """
    message = message or ""
    if message in BACKEND_ERROR_MAP:
        return BACKEND_ERROR_MAP[message]
    if "subscription" in message.lower():
        return SUBSCRIPTION_REQUIRED
    return None
