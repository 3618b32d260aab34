"""Budget evaluation against current-month category spending."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional
from uuid import uuid4

import structlog
from pydantic import BaseModel, computed_field

from .constants import BUDGET_WARNING_RATIO
from .exceptions import ValidationError
from .models import Budget, LedgerState, Transaction, TransactionCategory
from .utils import safe_ratio, same_month

logger = structlog.get_logger()


class BudgetStatus(str, Enum):
    """Budget status tiers, checked in this order: exceeded, warning, ok."""

    EXCEEDED = "exceeded"
    WARNING = "warning"
    OK = "ok"


class BudgetEvaluation(BaseModel):
    """Spending against one budget for the current month."""

    budget_id: str
    category: TransactionCategory
    limit: Decimal
    spent: Decimal
    status: BudgetStatus

    @computed_field
    @property
    def remaining(self) -> Decimal:
        """Limit minus spent; negative once exceeded."""
        return self.limit - self.spent

    @computed_field
    @property
    def progress(self) -> Decimal:
        """Progress-bar fraction, capped at 1."""
        return min(safe_ratio(self.spent, self.limit), Decimal("1"))


def category_spending(
    transactions: Iterable[Transaction],
    category: TransactionCategory,
    today: Optional[date] = None,
) -> Decimal:
    """Absolute negative amounts of ``category`` in the current month."""
    today = today or date.today()
    return sum(
        (
            t.abs_amount
            for t in transactions
            if t.amount < 0 and t.category == category and same_month(t.date, today)
        ),
        Decimal("0"),
    )


def budget_status(spent: Decimal, limit: Decimal) -> BudgetStatus:
    """Classify spending: over the limit, at 80% or more of it, or fine."""
    if spent > limit:
        return BudgetStatus.EXCEEDED
    if safe_ratio(spent, limit) >= BUDGET_WARNING_RATIO:
        return BudgetStatus.WARNING
    return BudgetStatus.OK


def evaluate_budget(
    budget: Budget,
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
) -> BudgetEvaluation:
    spent = category_spending(transactions, budget.category, today)
    return BudgetEvaluation(
        budget_id=budget.id,
        category=budget.category,
        limit=budget.limit,
        spent=spent,
        status=budget_status(spent, budget.limit),
    )


def evaluate_budgets(
    budgets: Iterable[Budget],
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
) -> list[BudgetEvaluation]:
    """Evaluate every budget against the same transaction set."""
    txns = list(transactions)
    evaluations = [evaluate_budget(b, txns, today) for b in budgets]
    for evaluation in evaluations:
        if evaluation.status != BudgetStatus.OK:
            logger.info(
                "budget_threshold_reached",
                category=evaluation.category.value,
                status=evaluation.status.value,
                spent=str(evaluation.spent),
                limit=str(evaluation.limit),
            )
    return evaluations


def add_budget(state: LedgerState, category: TransactionCategory, limit: Decimal) -> LedgerState:
    """Return a state with a new budget; one budget per category."""
    if any(b.category == category for b in state.budgets):
        raise ValidationError(
            "A budget for this category already exists",
            field="category",
            value=category.value,
            constraint="unique per budget set",
        )
    budget = Budget(id=f"bud_{uuid4().hex[:12]}", category=category, limit=limit)
    return state.model_copy(update={"budgets": [*state.budgets, budget]})


def delete_budget(state: LedgerState, budget_id: str) -> LedgerState:
    return state.model_copy(update={"budgets": [b for b in state.budgets if b.id != budget_id]})


__all__ = [
    "BudgetStatus",
    "BudgetEvaluation",
    "category_spending",
    "budget_status",
    "evaluate_budget",
    "evaluate_budgets",
    "add_budget",
    "delete_budget",
]
