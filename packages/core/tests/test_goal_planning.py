"""Tests for goal sizing and progress."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from wealthwise_core.exceptions import ValidationError
from wealthwise_core.goals import (
    advance_goal,
    create_goal,
    create_retirement_goal,
    goal_progress,
    initial_goal_for,
    size_debt_payoff_goal,
    size_emergency_fund_goal,
    size_retirement_goal,
)
from wealthwise_core.models import Goal, GoalType, RetirementDetails, UserProfile


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        name="Ana",
        total_debt=Decimal("12000"),
        liquid_assets=Decimal("4000"),
    )


class TestGoalSizing:
    """Test suite for target sizing."""

    def test_retirement_target(self):
        """5000 a month at a 0.5% monthly withdrawal needs 1,000,000.00."""
        assert size_retirement_goal(Decimal("5000")) == Decimal("1000000.00")

    def test_retirement_target_rounds_to_cents(self):
        assert size_retirement_goal(Decimal("1234.567")) == Decimal("246913.40")

    def test_retirement_income_must_be_positive(self):
        with pytest.raises(ValidationError):
            size_retirement_goal(Decimal("0"))

    def test_emergency_fund_is_six_months(self):
        assert size_emergency_fund_goal(Decimal("3000")) == Decimal("18000")

    def test_emergency_fund_fallback(self):
        """Unknown living costs fall back to 15000."""
        assert size_emergency_fund_goal(None) == Decimal("15000")

    def test_debt_payoff(self):
        assert size_debt_payoff_goal(Decimal("12000")) == Decimal("12000")
        assert size_debt_payoff_goal(Decimal("0")) == Decimal("5000")


class TestGoalCreation:
    """Test suite for goal construction."""

    def test_create_retirement_goal(self):
        goal = create_retirement_goal("Aposentar", 30, 60, Decimal("5000"))

        assert goal.type == GoalType.RETIREMENT
        assert goal.target_amount == Decimal("1000000.00")
        assert goal.current_amount == Decimal("0")
        assert goal.retirement_details.retirement_age == 60

    def test_retirement_age_before_current_age(self):
        with pytest.raises(PydanticValidationError):
            create_retirement_goal("Aposentar", 60, 30, Decimal("5000"))

    def test_mismatched_retirement_target_rejected(self):
        """A retirement goal must hold the sized target."""
        with pytest.raises(PydanticValidationError):
            Goal(
                id="g1",
                title="Aposentar",
                type=GoalType.RETIREMENT,
                target_amount=Decimal("500000"),
                retirement_details=RetirementDetails(
                    current_age=30,
                    retirement_age=60,
                    desired_monthly_income=Decimal("5000"),
                ),
            )

    def test_create_purchase_goal(self):
        goal = create_goal("Carro", GoalType.PURCHASE, Decimal("80000"), deadline=date(2027, 1, 1))
        assert goal.target_amount == Decimal("80000")
        assert goal.deadline == date(2027, 1, 1)

    def test_create_goal_rejects_retirement(self):
        with pytest.raises(ValidationError):
            create_goal("Aposentar", GoalType.RETIREMENT, Decimal("1"))


class TestInitialGoal:
    """Test suite for onboarding starter goals."""

    def test_retirement_default(self, profile: UserProfile):
        assert initial_goal_for(GoalType.RETIREMENT, profile).target_amount == Decimal("1000000")

    def test_debt_payoff_uses_profile_debt(self, profile: UserProfile):
        assert initial_goal_for(GoalType.DEBT_PAYOFF, profile).target_amount == Decimal("12000")

    def test_emergency_fund_seeded_with_liquid_assets(self, profile: UserProfile):
        goal = initial_goal_for(GoalType.EMERGENCY_FUND, profile)
        assert goal.target_amount == Decimal("15000")
        assert goal.current_amount == Decimal("4000")


class TestGoalProgress:
    """Test suite for progress tracking."""

    def test_progress_percentage(self):
        goal = create_goal("Carro", GoalType.PURCHASE, Decimal("80000"))
        assert goal_progress(advance_goal(goal, Decimal("20000"))) == Decimal("25")

    def test_progress_capped_at_hundred(self):
        goal = create_goal("Carro", GoalType.PURCHASE, Decimal("100"))
        assert goal_progress(advance_goal(goal, Decimal("250"))) == Decimal("100")

    def test_advance_below_zero_rejected(self):
        goal = create_goal("Carro", GoalType.PURCHASE, Decimal("100"))
        with pytest.raises(ValidationError):
            advance_goal(goal, Decimal("-1"))

    def test_advance_does_not_mutate(self):
        goal = create_goal("Carro", GoalType.PURCHASE, Decimal("100"))
        advance_goal(goal, Decimal("10"))
        assert goal.current_amount == Decimal("0")
