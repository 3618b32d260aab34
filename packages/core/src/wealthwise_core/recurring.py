"""Recurring bill detection from transactions flagged as recurring."""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel, computed_field

from .models import Transaction, TransactionCategory
from .utils import same_month


class RecurringBill(BaseModel):
    """A monthly fixed obligation inferred from one merchant label."""

    merchant: str
    amount: Decimal
    category: TransactionCategory
    paid_this_month: bool

    @property
    def is_pending(self) -> bool:
        return not self.paid_this_month


class FixedExpenses(BaseModel):
    bills: list[RecurringBill]

    @computed_field
    @property
    def total(self) -> Decimal:
        """Sum of each bill's representative amount."""
        return sum((b.amount for b in self.bills), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return not self.bills


def detect_recurring_bills(
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
) -> FixedExpenses:
    """Group recurring expenses into one bill per merchant.

    Merchants are matched exactly (case-sensitive). A bill's amount and
    category come from the first matching transaction in input order, and
    it counts as paid when any of its transactions falls in the current
    month.
    """
    today = today or date.today()
    bills: dict[str, RecurringBill] = {}
    for txn in transactions:
        if not txn.is_recurring or txn.amount >= 0:
            continue
        paid = same_month(txn.date, today)
        bill = bills.get(txn.merchant)
        if bill is None:
            bills[txn.merchant] = RecurringBill(
                merchant=txn.merchant,
                amount=txn.abs_amount,
                category=txn.category,
                paid_this_month=paid,
            )
        elif paid and not bill.paid_this_month:
            bills[txn.merchant] = bill.model_copy(update={"paid_this_month": True})
    return FixedExpenses(bills=list(bills.values()))


__all__ = ["RecurringBill", "FixedExpenses", "detect_recurring_bills"]
