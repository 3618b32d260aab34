"""Tests for recurring bill detection."""

from datetime import date
from decimal import Decimal

from wealthwise_core.models import Transaction, TransactionCategory
from wealthwise_core.recurring import detect_recurring_bills

TODAY = date(2025, 3, 20)


def bill(txn_id: str, merchant: str, amount: str, when: date, recurring: bool = True) -> Transaction:
    return Transaction(
        id=txn_id,
        account_id="acc_1",
        date=when,
        amount=Decimal(amount),
        merchant=merchant,
        category=TransactionCategory.BILLS,
        is_recurring=recurring,
    )


class TestDetectRecurringBills:
    """Test suite for detect_recurring_bills."""

    def test_groups_by_merchant(self):
        txns = [
            bill("a", "Netflix", "-55.90", date(2025, 3, 5)),
            bill("b", "Netflix", "-55.90", date(2025, 2, 5)),
            bill("c", "Aluguel", "-2500", date(2025, 2, 10)),
        ]
        fixed = detect_recurring_bills(txns, TODAY)

        assert [b.merchant for b in fixed.bills] == ["Netflix", "Aluguel"]
        assert fixed.total == Decimal("2555.90")

    def test_paid_this_month(self):
        txns = [
            bill("a", "Netflix", "-55.90", date(2025, 3, 5)),
            bill("c", "Aluguel", "-2500", date(2025, 2, 10)),
        ]
        netflix, rent = detect_recurring_bills(txns, TODAY).bills

        assert netflix.paid_this_month is True
        assert rent.is_pending is True

    def test_same_month_last_year_is_not_paid(self):
        fixed = detect_recurring_bills([bill("a", "Internet", "-120", date(2024, 3, 5))], TODAY)
        assert fixed.bills[0].paid_this_month is False

    def test_first_match_sets_amount(self):
        """The first transaction in input order sets the bill amount."""
        txns = [
            bill("new", "Luz", "-210", date(2025, 3, 1)),
            bill("old", "Luz", "-180", date(2025, 2, 1)),
        ]
        assert detect_recurring_bills(txns, TODAY).bills[0].amount == Decimal("210")

    def test_merchant_match_is_case_sensitive(self):
        txns = [
            bill("a", "Spotify", "-21.90", date(2025, 3, 1)),
            bill("b", "spotify", "-21.90", date(2025, 2, 1)),
        ]
        assert len(detect_recurring_bills(txns, TODAY).bills) == 2

    def test_non_recurring_ignored(self):
        fixed = detect_recurring_bills([bill("a", "Mercado", "-80", TODAY, recurring=False)], TODAY)
        assert fixed.is_empty
        assert fixed.total == Decimal("0")
