# services/subscriptions.py
import time
from typing import List, Optional

from flask import current_app

from domain.models import SubscriptionPlan
from services.api_client import ApiError, ApiResponse, BackendUnavailable, api_request
from utils.retry import _retry, backoff_delays

INVALID_FORMAT = "Invalid response format from server"


def list_plans() -> List[SubscriptionPlan]:
    """요금제 목록 (비로그인 허용). 네트워크 오류는 한 번 더 시도"""
    resp = _retry(
        lambda: api_request("GET", "/subscription/plans/", auth=False),
        tries=2,
        exceptions=(BackendUnavailable,),
    )
    if not resp.ok:
        raise ApiError(f"Failed to fetch plans: {resp.status}", status=resp.status)
    if not resp.is_json:
        current_app.logger.error("[PLANS] non-JSON response: %s", resp.text[:200])
        raise ApiError(INVALID_FORMAT, status=resp.status)
    return [SubscriptionPlan.from_api(p) for p in (resp.data or []) if isinstance(p, dict)]


def get_plan(plan_id) -> Optional[SubscriptionPlan]:
    """
    plan_id 가 있으면 해당 플랜, 없으면 목록의 첫 번째 플랜.
    응답에 error 가 있으면 ApiError
    """
    if not plan_id:
        resp = api_request("GET", "/subscription/plans/")
        resp.raise_for_error(f"API request failed with status {resp.status}")
        plans = resp.data if isinstance(resp.data, list) else []
        return SubscriptionPlan.from_api(plans[0]) if plans else None

    resp = api_request("GET", f"/subscription/plan/{plan_id}/")
    resp.raise_for_error(f"API request failed with status {resp.status}")
    if not isinstance(resp.data, dict):
        return None
    if resp.get("error"):
        raise ApiError(resp.get("error"), status=resp.status, data=resp.data)
    return SubscriptionPlan.from_api(resp.data)


def fetch_subscription_details() -> ApiResponse:
    return api_request("GET", "/subscription/details/")


def initiate_payment(plan_id) -> str:
    """Paystack 결제 시작 → 결제 페이지 URL"""
    resp = api_request("POST", "/subscription/paystack/initiate/", json={"plan_id": int(plan_id)})
    if not resp.is_json:
        current_app.logger.error("[PAYMENT] non-JSON initiate response: %s", resp.text[:200])
        raise ApiError(INVALID_FORMAT, status=resp.status)
    if not resp.ok:
        if resp.status == 401:
            resp.raise_for_error()
        raise ApiError(resp.error_message("Failed to initiate payment"), status=resp.status, data=resp.data)

    url = resp.get("payment_url")
    if not url:
        raise ApiError("No payment URL received from server", status=resp.status, data=resp.data)
    current_app.logger.info("[PAYMENT] initiated plan_id=%s", plan_id)
    return url


# -------------------- 결제 확인 --------------------
class PaymentVerification:
    def __init__(self, ok: bool, message: str, data=None, timed_out: bool = False):
        self.ok = ok
        self.message = message
        self.data = data or {}
        self.timed_out = timed_out

    def __repr__(self):
        return f"<PaymentVerification ok={self.ok} timed_out={self.timed_out}>"


def _is_pending(resp: ApiResponse) -> bool:
    status = str(resp.get("status") or "").lower()
    return resp.status == 202 or status == "pending"


def _verify_once(reference: str) -> ApiResponse:
    resp = api_request("POST", "/subscription/paystack/verify/", json={"reference": reference})
    if not resp.is_json:
        current_app.logger.error("[PAYMENT] non-JSON verify response: %s", resp.text[:200])
        raise ApiError(INVALID_FORMAT, status=resp.status)
    return resp


def verify_payment(reference: str, timeout: float = None, interval: float = None,
                   sleep=time.sleep, clock=time.monotonic) -> PaymentVerification:
    """
    Paystack 결제 확인.
    백엔드가 아직 웹훅을 받지 못해 pending 으로 답하면, 확정 응답과 timeout 중 먼저 오는 쪽으로 끝낸다.
    """
    cfg = current_app.config
    timeout = cfg.get("PAYMENT_VERIFY_TIMEOUT", 60) if timeout is None else timeout
    interval = cfg.get("PAYMENT_VERIFY_INTERVAL", 2.0) if interval is None else interval
    deadline = clock() + timeout

    delays = backoff_delays(base_delay=interval, max_delay=interval * 4)
    while True:
        resp = _verify_once(reference)

        if resp.status == 401:
            resp.raise_for_error()

        if not _is_pending(resp):
            if resp.ok:
                current_app.logger.info("[PAYMENT] verified reference=%s", reference)
                return PaymentVerification(
                    True,
                    resp.get("message") or "Payment verified successfully! Your subscription is now active.",
                    resp.data,
                )
            current_app.logger.warning("[PAYMENT] verify failed reference=%s status=%s", reference, resp.status)
            return PaymentVerification(
                False,
                resp.error_message("Payment verification failed. Please contact support."),
                resp.data,
            )

        remaining = deadline - clock()
        if remaining <= 0:
            current_app.logger.warning("[PAYMENT] verify timed out reference=%s", reference)
            return PaymentVerification(
                False,
                "We could not confirm your payment in time. If you were charged, your plan will "
                "activate shortly. Please contact support if it does not.",
                resp.data,
                timed_out=True,
            )
        sleep(min(next(delays), remaining))
