"""Goal sizing and progress.

Goal creation is pure construction. ``current_amount`` moves only through
``advance_goal``; it is never derived from account or investment balances.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import structlog

from .constants import (
    DEBT_PAYOFF_FALLBACK,
    EMERGENCY_FUND_FALLBACK,
    EMERGENCY_FUND_MONTHS,
    ONBOARDING_PURCHASE_TARGET,
    ONBOARDING_RETIREMENT_TARGET,
    WITHDRAWAL_RATE,
)
from .exceptions import ValidationError
from .models import Goal, GoalType, RetirementDetails, UserProfile
from .utils import coerce_decimal, round_money, safe_ratio

logger = structlog.get_logger()

ONBOARDING_TITLES = {
    GoalType.RETIREMENT: "Viver de Renda",
    GoalType.PURCHASE: "Realizar Sonho (Casa/Carro)",
    GoalType.DEBT_PAYOFF: "Sair das Dívidas",
    GoalType.EMERGENCY_FUND: "Reserva de Emergência",
}


def size_retirement_goal(desired_monthly_income: Decimal) -> Decimal:
    """Principal that yields ``desired_monthly_income`` at 0.5% a month.

    5000 a month needs exactly 1,000,000.00.
    """
    income = coerce_decimal(desired_monthly_income)
    if income <= 0:
        raise ValidationError(
            "Desired monthly income must be positive",
            field="desired_monthly_income",
            value=str(income),
            constraint="> 0",
        )
    return round_money(income / WITHDRAWAL_RATE)


def size_purchase_goal(amount: Decimal) -> Decimal:
    amount = coerce_decimal(amount)
    if amount <= 0:
        raise ValidationError(
            "Purchase amount must be positive",
            field="amount",
            value=str(amount),
            constraint="> 0",
        )
    return amount


def size_emergency_fund_goal(
    monthly_cost_of_living: Optional[Decimal] = None,
    fallback: Decimal = EMERGENCY_FUND_FALLBACK,
) -> Decimal:
    """Six months of living costs, or ``fallback`` when costs are unknown."""
    if monthly_cost_of_living is None or coerce_decimal(monthly_cost_of_living) <= 0:
        return fallback
    return coerce_decimal(monthly_cost_of_living) * EMERGENCY_FUND_MONTHS


def size_debt_payoff_goal(total_debt: Optional[Decimal] = None) -> Decimal:
    if total_debt is None or coerce_decimal(total_debt) <= 0:
        return DEBT_PAYOFF_FALLBACK
    return coerce_decimal(total_debt)


def _goal_id(prefix: str = "goal") -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


def create_retirement_goal(
    title: str,
    current_age: int,
    retirement_age: int,
    desired_monthly_income: Decimal,
    deadline: Optional[date] = None,
) -> Goal:
    details = RetirementDetails(
        current_age=current_age,
        retirement_age=retirement_age,
        desired_monthly_income=coerce_decimal(desired_monthly_income),
    )
    target = size_retirement_goal(details.desired_monthly_income)
    logger.info(
        "retirement_goal_sized",
        desired_monthly_income=str(details.desired_monthly_income),
        target_amount=str(target),
    )
    return Goal(
        id=_goal_id(),
        title=title,
        type=GoalType.RETIREMENT,
        target_amount=target,
        deadline=deadline,
        retirement_details=details,
    )


def create_goal(
    title: str,
    goal_type: GoalType,
    amount: Optional[Decimal] = None,
    *,
    deadline: Optional[date] = None,
    fallback: Decimal = EMERGENCY_FUND_FALLBACK,
) -> Goal:
    """Create a non-retirement goal.

    ``amount`` is the purchase price, the monthly cost of living (emergency
    fund) or the total debt (debt payoff).
    """
    if goal_type == GoalType.RETIREMENT:
        raise ValidationError(
            "Use create_retirement_goal for retirement goals",
            field="goal_type",
            value=goal_type.value,
        )
    if goal_type == GoalType.PURCHASE:
        target = size_purchase_goal(coerce_decimal(amount))
    elif goal_type == GoalType.EMERGENCY_FUND:
        target = size_emergency_fund_goal(amount, fallback)
    else:
        target = size_debt_payoff_goal(amount)
    return Goal(
        id=_goal_id(),
        title=title,
        type=goal_type,
        target_amount=target,
        deadline=deadline,
    )


def initial_goal_for(
    goal_type: GoalType,
    profile: UserProfile,
    fallback: Decimal = EMERGENCY_FUND_FALLBACK,
) -> Goal:
    """Starter goal proposed at the end of onboarding.

    Targets are placeholders the user edits later; the emergency fund starts
    with the liquid assets already saved.
    """
    if goal_type == GoalType.RETIREMENT:
        target = ONBOARDING_RETIREMENT_TARGET
    elif goal_type == GoalType.PURCHASE:
        target = ONBOARDING_PURCHASE_TARGET
    elif goal_type == GoalType.DEBT_PAYOFF:
        target = size_debt_payoff_goal(profile.total_debt)
    else:
        target = fallback

    current = profile.liquid_assets if goal_type == GoalType.EMERGENCY_FUND else Decimal("0")
    return Goal(
        id=_goal_id("goal_init"),
        title=ONBOARDING_TITLES[goal_type],
        type=goal_type,
        target_amount=target,
        current_amount=current,
    )


def goal_progress(goal: Goal) -> Decimal:
    """Percentage reached, capped at 100 and 0 for a zero target."""
    return min(safe_ratio(goal.current_amount, goal.target_amount) * 100, Decimal("100"))


def advance_goal(goal: Goal, amount: Decimal) -> Goal:
    """Record progress made outside the ledger (e.g. a logged contribution)."""
    amount = coerce_decimal(amount)
    new_amount = goal.current_amount + amount
    if new_amount < 0:
        raise ValidationError(
            "Goal progress cannot go below zero",
            field="amount",
            value=str(amount),
            constraint=f">= -{goal.current_amount}",
        )
    return goal.model_copy(update={"current_amount": new_amount})


__all__ = [
    "size_retirement_goal",
    "size_purchase_goal",
    "size_emergency_fund_goal",
    "size_debt_payoff_goal",
    "create_retirement_goal",
    "create_goal",
    "initial_goal_for",
    "goal_progress",
    "advance_goal",
]
