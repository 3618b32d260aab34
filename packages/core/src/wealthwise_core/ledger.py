"""Ledger aggregation: balances, net worth and period totals.

Every function here is pure: it reads accounts, transactions and
investments and returns derived figures without touching its inputs.
"""

import calendar
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

import structlog
from pydantic import BaseModel, Field, computed_field

from .constants import CREDIT_HIGH_USAGE_RATIO
from .models import (
    Account,
    AccountOwner,
    AccountType,
    Investment,
    LedgerState,
    Transaction,
    TransactionCategory,
)
from .utils import safe_ratio, same_month

logger = structlog.get_logger()

ZERO = Decimal("0")

NON_INCOME_CATEGORIES = frozenset(
    {TransactionCategory.INVESTMENTS, TransactionCategory.INVESTMENT_REDEMPTION}
)


class Period(str, Enum):
    """Dashboard period filter."""

    MONTHLY = "monthly"
    """Current calendar month of the current year."""

    YEARLY = "yearly"
    """Current calendar year to date."""


class DashboardSummary(BaseModel):
    """Headline figures for one ownership view and period."""

    bank_balance: Decimal
    investment_balance: Decimal
    period_income: Decimal
    period_expense: Decimal
    period_invested: Decimal
    invested_principal: Decimal
    portfolio_yield_percentage: Decimal

    @computed_field
    @property
    def net_worth(self) -> Decimal:
        return self.bank_balance + self.investment_balance

    @computed_field
    @property
    def period_net(self) -> Decimal:
        """Income minus expenses for the period."""
        return self.period_income - self.period_expense


class SeriesBucket(BaseModel):
    """Income and expense totals for one day or month of a chart series."""

    label: str
    index: int = Field(description="Day of month (monthly) or month number (yearly)")
    income: Decimal = ZERO
    expense: Decimal = ZERO


class CreditUtilization(BaseModel):
    """How much of a credit account's limit is in use."""

    account_id: str
    used: Decimal
    limit: Decimal
    available: Decimal
    usage_ratio: Decimal

    @computed_field
    @property
    def is_high(self) -> bool:
        return self.usage_ratio > CREDIT_HIGH_USAGE_RATIO

    @computed_field
    @property
    def bar_fraction(self) -> Decimal:
        return min(self.usage_ratio, Decimal("1"))


# =============================================================================
# OWNERSHIP VIEW
# =============================================================================

def _visible(owner: AccountOwner, view: AccountOwner) -> bool:
    return view == AccountOwner.JOINT or owner == view or owner == AccountOwner.JOINT


def filter_accounts_by_view(accounts: Iterable[Account], view: AccountOwner) -> list[Account]:
    """Accounts visible in an ownership view.

    The joint view shows everything; a personal view shows that person's
    accounts plus joint ones.
    """
    return [a for a in accounts if _visible(a.owner, view)]


def filter_transactions_by_view(
    transactions: Iterable[Transaction], view: AccountOwner
) -> list[Transaction]:
    """Transactions visible in an ownership view."""
    return [t for t in transactions if _visible(t.owner, view)]


# =============================================================================
# BALANCES
# =============================================================================

def bank_balance(accounts: Iterable[Account]) -> Decimal:
    """Sum of balances of every non-investment account."""
    return sum((a.balance for a in accounts if a.type != AccountType.INVESTMENT), ZERO)


def investment_balance(investments: Iterable[Investment]) -> Decimal:
    """Sum of current values across positions."""
    return sum((i.current_value for i in investments), ZERO)


def net_worth(accounts: Iterable[Account], investments: Iterable[Investment]) -> Decimal:
    """Bank balance plus investment balance."""
    return bank_balance(accounts) + investment_balance(investments)


# =============================================================================
# PERIOD TOTALS
# =============================================================================

def in_period(value: date, period: Period, today: date) -> bool:
    if period == Period.MONTHLY:
        return same_month(value, today)
    return value.year == today.year


def filter_by_period(
    transactions: Iterable[Transaction],
    period: Period,
    today: Optional[date] = None,
) -> list[Transaction]:
    """Transactions dated in the current month or current year."""
    today = today or date.today()
    return [t for t in transactions if in_period(t.date, period, today)]


def period_income(transactions: Iterable[Transaction]) -> Decimal:
    """Positive amounts, excluding investment outflows and redemption proceeds."""
    return sum(
        (t.amount for t in transactions if t.amount > 0 and t.category not in NON_INCOME_CATEGORIES),
        ZERO,
    )


def period_expense(transactions: Iterable[Transaction]) -> Decimal:
    """Absolute negative amounts, excluding investment contributions."""
    return sum(
        (
            t.abs_amount
            for t in transactions
            if t.amount < 0 and t.category != TransactionCategory.INVESTMENTS
        ),
        ZERO,
    )


def period_invested(transactions: Iterable[Transaction]) -> Decimal:
    """Absolute negative amounts in the investments category."""
    return sum(
        (
            t.abs_amount
            for t in transactions
            if t.amount < 0 and t.category == TransactionCategory.INVESTMENTS
        ),
        ZERO,
    )


# =============================================================================
# PORTFOLIO
# =============================================================================

def yield_percentage(current_value: Decimal, amount_invested: Decimal) -> Decimal:
    """(value - cost) / cost * 100, or 0 when nothing was invested."""
    return safe_ratio(current_value - amount_invested, amount_invested) * Decimal("100")


def portfolio_yield(investments: Iterable[Investment]) -> tuple[Decimal, Decimal, Decimal]:
    """Aggregate cost basis, current value and yield percentage.

    Returns:
        Tuple of (invested_principal, current_value, yield_percentage)
    """
    positions = list(investments)
    principal = sum((i.amount_invested for i in positions), ZERO)
    value = investment_balance(positions)
    return principal, value, yield_percentage(value, principal)


# =============================================================================
# DASHBOARD
# =============================================================================

def summarize_dashboard(
    state: LedgerState,
    view: AccountOwner = AccountOwner.ME,
    period: Period = Period.MONTHLY,
    today: Optional[date] = None,
) -> DashboardSummary:
    """Compute the dashboard figures for an ownership view and period.

    Income and expense follow the ownership view. Invested totals use every
    transaction in the period regardless of owner, and investments are not
    owner-tagged.
    """
    today = today or date.today()
    accounts = filter_accounts_by_view(state.accounts, view)
    visible = filter_transactions_by_view(state.transactions, view)
    in_range = filter_by_period(visible, period, today)
    principal, _, yield_pct = portfolio_yield(state.investments)

    summary = DashboardSummary(
        bank_balance=bank_balance(accounts),
        investment_balance=investment_balance(state.investments),
        period_income=period_income(in_range),
        period_expense=period_expense(in_range),
        period_invested=period_invested(filter_by_period(state.transactions, period, today)),
        invested_principal=principal,
        portfolio_yield_percentage=yield_pct,
    )
    logger.debug(
        "dashboard_summarized",
        view=view.value,
        period=period.value,
        net_worth=str(summary.net_worth),
    )
    return summary


def spending_series(
    transactions: Iterable[Transaction],
    period: Period = Period.MONTHLY,
    today: Optional[date] = None,
) -> list[SeriesBucket]:
    """Income/expense buckets for charting.

    Monthly gives one bucket per day of the current month; yearly gives one
    bucket per month of the current year, future months included as zeros.
    """
    today = today or date.today()
    if period == Period.MONTHLY:
        days = calendar.monthrange(today.year, today.month)[1]
        buckets = [
            SeriesBucket(label=f"{day:02d}/{today.month:02d}", index=day)
            for day in range(1, days + 1)
        ]
    else:
        buckets = [
            SeriesBucket(label=f"{month:02d}/{today.year}", index=month)
            for month in range(1, 13)
        ]

    for txn in transactions:
        if not in_period(txn.date, period, today):
            continue
        slot = txn.date.day if period == Period.MONTHLY else txn.date.month
        bucket = buckets[slot - 1]
        if txn.amount > 0:
            bucket.income += txn.amount
        else:
            bucket.expense += txn.abs_amount
    return buckets


# =============================================================================
# CREDIT
# =============================================================================

def credit_utilization(account: Account) -> CreditUtilization:
    """Limit usage of a credit account.

    A positive balance (credit in the user's favor) counts as nothing used.
    """
    limit = account.credit_limit or ZERO
    used = account.amount_owed
    return CreditUtilization(
        account_id=account.id,
        used=used,
        limit=limit,
        available=limit - used,
        usage_ratio=safe_ratio(used, limit) if limit > 0 else ZERO,
    )


__all__ = [
    "Period",
    "DashboardSummary",
    "SeriesBucket",
    "CreditUtilization",
    "filter_accounts_by_view",
    "filter_transactions_by_view",
    "bank_balance",
    "investment_balance",
    "net_worth",
    "in_period",
    "filter_by_period",
    "period_income",
    "period_expense",
    "period_invested",
    "yield_percentage",
    "portfolio_yield",
    "summarize_dashboard",
    "spending_series",
    "credit_utilization",
]
