"""Subscription plan limits"""

from finance_tracker.domain.exceptions import CardLimitReachedError
from finance_tracker.domain.models import PlanType


def card_limit(plan_type: str, basic_limit: int = 1, premium_limit: int = 5) -> int:
    """Cards allowed on a plan; anything that is not premium gets the basic allowance"""
    return premium_limit if plan_type == PlanType.PREMIUM.value else basic_limit


def ensure_can_add_card(plan_type: str, current_count: int, basic_limit: int = 1, premium_limit: int = 5) -> None:
    """
    Raises:
        CardLimitReachedError: owner already holds as many cards as the plan allows
    """
    limit = card_limit(plan_type, basic_limit, premium_limit)
    if current_count >= limit:
        raise CardLimitReachedError(f"Plan '{plan_type}' allows at most {limit} credit card(s)")
