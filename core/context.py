from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from flask import request

from auth.entitlements import get_current_user, get_subscription_state
from auth.guards import allowed_features, resolve_plan
from auth.tokens import is_authenticated
from utils.time_utils import format_date

NAV_PUBLIC = [
    ("pages.home", "Home"),
    ("subscribe.pricing", "Pricing"),
    ("pages.how_to_use", "How to use"),
    ("pages.contact", "Contact"),
]

NAV_MEMBER = [
    ("dashboard.dashboard", "Dashboard"),
    ("posts.make_post", "Make post"),
    ("posts.url_paraphraser", "URL paraphraser"),
    ("wordpress.management", "WordPress"),
    ("dashboard.profile", "Profile"),
]


def format_currency(value) -> str:
    """나이라 표기, 소수점 없음 (예: ₦5,000). 숫자가 아니면 ₦원문"""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return f"₦{value}"
    if not amount.is_finite():
        return f"₦{value}"
    return f"₦{amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP):,}"


def init_context_processors(app):
    app.add_template_filter(format_currency, "naira")
    app.add_template_filter(format_date, "long_date")

    @app.context_processor
    def inject_user_state():
        logged_in = is_authenticated()
        # 정적 파일/헬스체크는 구독 조회 생략
        state = get_subscription_state() if logged_in and request.endpoint not in (None, "static", "api_health.health") else None
        plan = resolve_plan() if state else ""
        return {
            "current_user": get_current_user(),
            "logged_in": logged_in,
            "subscription_state": state,
            "current_plan": plan,
            "plan_features": allowed_features(plan) if plan else [],
            "nav_items": NAV_PUBLIC + (NAV_MEMBER if logged_in else []),
            "format_currency": format_currency,
        }
