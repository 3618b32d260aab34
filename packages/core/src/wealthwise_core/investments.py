"""Investment calculations: contributions, redemptions and income projections.

Contributions to quantity-bearing positions recompute a weighted-average
cost basis. Redemptions shrink the cost basis in proportion to the value
withdrawn, so the yield percentage stays meaningful afterwards.

All calculation steps are logged for traceability.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import structlog

from .config import LedgerSettings
from .constants import (
    DAYS_PER_ELAPSED_MONTH,
    FII_PAYMENT_DAY,
    MARKET_DATA,
    MONTHS_PER_YEAR,
    UNKNOWN_TICKER_DIVIDEND_RATIO,
)
from .exceptions import ValidationError
from .ledger import yield_percentage
from .models import (
    AccountOwner,
    BenchmarkIndex,
    Investment,
    InvestmentType,
    LedgerState,
    Liquidity,
    Transaction,
    TransactionCategory,
)
from .utils import add_months, coerce_decimal, safe_ratio

logger = structlog.get_logger()

ZERO = Decimal("0")

CONTRIBUTION_MERCHANT = "Aporte Investimento"
REDEMPTION_MERCHANT = "Resgate Investimento"


def monthly_equivalent_rate(annual_rate: Decimal) -> Decimal:
    """Convert an annual rate to its compound monthly equivalent.

    ``(1 + annual) ** (1/12) - 1``; 11.25% a year is about 0.8924% a month.
    """
    annual_rate = coerce_decimal(annual_rate)
    return (Decimal("1") + annual_rate) ** (Decimal("1") / Decimal(MONTHS_PER_YEAR)) - Decimal("1")


def investment_yield(investment: Investment) -> Decimal:
    """Yield percentage of a single position."""
    return yield_percentage(investment.current_value, investment.amount_invested)


def monthly_projected_income(investment: Investment, cdi_annual_rate: Decimal) -> Decimal:
    """Expected monthly income of a position.

    FII pay ``quantity * last_dividend``. CDI-indexed fixed income accrues
    ``current_value * monthly_cdi * percentage / 100``. Stocks, crypto and
    fixed income on other benchmarks project nothing.
    """
    if investment.type == InvestmentType.FII:
        if investment.quantity is None or investment.last_dividend is None:
            return ZERO
        return investment.quantity * investment.last_dividend

    if investment.type == InvestmentType.FIXED_INCOME:
        if investment.index != BenchmarkIndex.CDI or not investment.percentage:
            return ZERO
        rate = monthly_equivalent_rate(cdi_annual_rate) * (investment.percentage / Decimal("100"))
        return investment.current_value * rate

    return ZERO


def next_distribution_date(investment: Investment, today: Optional[date] = None) -> Optional[date]:
    """Next FII distribution date, assumed to be the 15th of the month.

    Other position types accrue daily or pay nothing, so they return None.
    """
    if investment.type != InvestmentType.FII:
        return None
    today = today or date.today()
    payment = today.replace(day=FII_PAYMENT_DAY)
    if today.day > FII_PAYMENT_DAY:
        payment = add_months(payment, 1)
    return payment


def elapsed_months(investment: Investment, today: Optional[date] = None) -> int:
    """Whole 30-day periods since the position started."""
    today = today or date.today()
    days = abs((today - investment.start_date).days)
    return days // DAYS_PER_ELAPSED_MONTH


def build_investment(
    *,
    name: Optional[str],
    type: InvestmentType,
    start_date: date,
    ticker: Optional[str] = None,
    quantity: Optional[Decimal] = None,
    average_price: Optional[Decimal] = None,
    amount: Optional[Decimal] = None,
    index: BenchmarkIndex = BenchmarkIndex.CDI,
    percentage: Decimal = Decimal("100"),
    investment_id: Optional[str] = None,
) -> Investment:
    """Create a new position from user input.

    Quantity-bearing positions are priced from MARKET_DATA when the ticker
    is known; otherwise the average price stands in for the market price
    and the last dividend is estimated at 0.8% of it. Fixed income starts
    at its invested amount with daily liquidity.
    """
    investment_id = investment_id or f"inv_{uuid4().hex[:12]}"

    if type.is_quantity_bearing:
        if not ticker or quantity is None or average_price is None:
            raise ValidationError(
                "Ticker, quantity and average price are required",
                field="ticker",
                constraint="required for quantity-bearing investments",
            )
        quantity = coerce_decimal(quantity)
        average_price = coerce_decimal(average_price)
        clean_ticker = ticker.strip().upper()
        market = MARKET_DATA.get(clean_ticker)
        if market:
            price, dividend, display_name = market
        else:
            price = average_price
            dividend = average_price * UNKNOWN_TICKER_DIVIDEND_RATIO
            display_name = clean_ticker
        return Investment(
            id=investment_id,
            name=name or display_name,
            type=type,
            ticker=clean_ticker,
            quantity=quantity,
            average_price=average_price,
            amount_invested=quantity * average_price,
            current_value=quantity * price,
            last_dividend=dividend,
            start_date=start_date,
        )

    if amount is None or coerce_decimal(amount) <= 0:
        raise ValidationError(
            "Fixed income requires a positive amount",
            field="amount",
            value=amount,
            constraint="> 0",
        )
    amount = coerce_decimal(amount)
    return Investment(
        id=investment_id,
        name=name or index.value,
        type=type,
        amount_invested=amount,
        current_value=amount,
        start_date=start_date,
        index=index,
        percentage=coerce_decimal(percentage),
        liquidity=Liquidity.DAILY,
    )


class InvestmentCalculator:
    """
    Apply contributions and redemptions to portfolio positions.

    Each operation validates everything up front and returns a new
    LedgerState, so a rejected operation leaves the caller's state intact
    and a successful one updates the position, the account and the audit
    transaction together.
    """

    def __init__(self, settings: Optional[LedgerSettings] = None):
        """
        Initialize the calculator.

        Args:
            settings: Ledger settings (default: loaded from the environment)
        """
        self.settings = settings or LedgerSettings()

    def _log_step(self, step: str, input_value: str, output_value: str, **context) -> None:
        logger.info(
            "investment_calculation_step",
            step=step,
            input=input_value,
            output=output_value,
            **context,
        )

    def _require_investment(self, state: LedgerState, investment_id: str) -> Investment:
        investment = state.find_investment(investment_id)
        if investment is None:
            raise ValidationError(
                "Investment not found",
                field="investment_id",
                value=investment_id,
            )
        return investment

    def _require_account(self, state: LedgerState, account_id: Optional[str], field: str):
        account = state.find_account(account_id)
        if account is None:
            raise ValidationError(
                "Account not found",
                field=field,
                value=account_id,
            )
        return account

    def monthly_income(self, investment: Investment) -> Decimal:
        """Projected monthly income at the configured CDI rate."""
        return monthly_projected_income(investment, self.settings.cdi_annual_rate)

    def contribute(
        self,
        state: LedgerState,
        investment_id: str,
        amount: Optional[Decimal] = None,
        *,
        quantity: Optional[Decimal] = None,
        unit_price: Optional[Decimal] = None,
        source_account_id: Optional[str] = None,
        on: Optional[date] = None,
        owner: AccountOwner = AccountOwner.ME,
    ) -> LedgerState:
        """
        Add money to a position.

        With quantity and unit price on a quantity-bearing position the
        average price is recomputed by weight; otherwise ``amount`` is added
        to both cost basis and current value. When a source account is
        given, it is debited and an ``Investimentos`` expense is recorded.

        Args:
            state: Current ledger state
            investment_id: Position receiving the contribution
            amount: Cash contributed. Defaults to quantity * unit_price
            quantity: Units bought (quantity-bearing positions)
            unit_price: Price per unit paid
            source_account_id: Account the cash leaves from
            on: Contribution date (default: today)
            owner: Owner tag of the audit transaction

        Returns:
            New LedgerState with the contribution applied
        """
        on = on or date.today()
        investment = self._require_investment(state, investment_id)
        by_units = (
            investment.type.is_quantity_bearing
            and quantity is not None
            and unit_price is not None
        )

        if by_units:
            quantity = coerce_decimal(quantity)
            unit_price = coerce_decimal(unit_price)
            if quantity <= 0 or unit_price <= 0:
                raise ValidationError(
                    "Quantity and unit price must be positive",
                    field="quantity",
                    value=str(quantity),
                    constraint="> 0",
                )
            cost = quantity * unit_price
            cash = coerce_decimal(amount) if amount is not None else cost
        else:
            if amount is None or coerce_decimal(amount) <= 0:
                raise ValidationError(
                    "Contribution amount must be positive",
                    field="amount",
                    value=amount,
                    constraint="> 0",
                )
            cash = coerce_decimal(amount)

        if source_account_id is not None:
            self._require_account(state, source_account_id, "source_account_id")

        if by_units:
            new_quantity = (investment.quantity or ZERO) + quantity
            new_invested = investment.amount_invested + cost
            updated = investment.model_copy(
                update={
                    "quantity": new_quantity,
                    "average_price": new_invested / new_quantity,
                    "amount_invested": new_invested,
                    "current_value": investment.current_value + cost,
                }
            )
            self._log_step(
                step="weighted_average_price",
                input_value=f"({investment.amount_invested} + {quantity} * {unit_price}) / {new_quantity}",
                output_value=str(updated.average_price),
                investment_id=investment_id,
            )
        else:
            updated = investment.model_copy(
                update={
                    "amount_invested": investment.amount_invested + cash,
                    "current_value": investment.current_value + cash,
                }
            )
            self._log_step(
                step="cash_contribution",
                input_value=f"{investment.amount_invested} + {cash}",
                output_value=str(updated.amount_invested),
                investment_id=investment_id,
            )

        new_state = state.with_investment(updated)
        if source_account_id is not None:
            audit = Transaction(
                id=f"txn_inv_{uuid4().hex[:12]}",
                account_id=source_account_id,
                date=on,
                amount=-cash,
                merchant=CONTRIBUTION_MERCHANT,
                category=TransactionCategory.INVESTMENTS,
                owner=owner,
            )
            new_state = new_state.with_balance_deltas({source_account_id: -cash}).with_transactions(
                [audit]
            )

        logger.info(
            "investment_contributed",
            investment_id=investment_id,
            amount=str(cash),
            source_account_id=source_account_id,
        )
        return new_state

    def redeem(
        self,
        state: LedgerState,
        investment_id: str,
        amount: Decimal,
        destination_account_id: Optional[str],
        *,
        on: Optional[date] = None,
        owner: AccountOwner = AccountOwner.ME,
    ) -> LedgerState:
        """
        Withdraw money from a position into an account.

        The cost basis shrinks by ``amount / current_value`` of itself; a
        zero current value gives a zero ratio. In strict mode redeeming more
        than the current value is rejected, otherwise the value is clamped
        at zero.

        Args:
            state: Current ledger state
            investment_id: Position being redeemed
            amount: Cash withdrawn
            destination_account_id: Account receiving the cash
            on: Redemption date (default: today)
            owner: Owner tag of the income transaction

        Returns:
            New LedgerState with the redemption applied
        """
        on = on or date.today()
        amount = coerce_decimal(amount)
        investment = self._require_investment(state, investment_id)
        if amount <= 0:
            raise ValidationError(
                "Redemption amount must be positive",
                field="amount",
                value=str(amount),
                constraint="> 0",
            )
        if destination_account_id is None:
            raise ValidationError(
                "A destination account is required to redeem",
                field="destination_account_id",
                constraint="required",
            )
        self._require_account(state, destination_account_id, "destination_account_id")
        if self.settings.strict_redemption and amount > investment.current_value:
            raise ValidationError(
                "Redemption exceeds the position's current value",
                field="amount",
                value=str(amount),
                constraint=f"<= {investment.current_value}",
            )

        ratio = safe_ratio(amount, investment.current_value)
        new_value = max(ZERO, investment.current_value - amount)
        new_invested = max(ZERO, investment.amount_invested - investment.amount_invested * ratio)
        updated = investment.model_copy(
            update={"current_value": new_value, "amount_invested": new_invested}
        )
        self._log_step(
            step="proportional_cost_reduction",
            input_value=f"{investment.amount_invested} * (1 - {amount} / {investment.current_value})",
            output_value=str(new_invested),
            investment_id=investment_id,
        )

        proceeds = Transaction(
            id=f"txn_red_{uuid4().hex[:12]}",
            account_id=destination_account_id,
            date=on,
            amount=amount,
            merchant=REDEMPTION_MERCHANT,
            category=TransactionCategory.INCOME,
            owner=owner,
        )
        new_state = (
            state.with_investment(updated)
            .with_balance_deltas({destination_account_id: amount})
            .with_transactions([proceeds])
        )
        logger.info(
            "investment_redeemed",
            investment_id=investment_id,
            amount=str(amount),
            destination_account_id=destination_account_id,
        )
        return new_state


__all__ = [
    "CONTRIBUTION_MERCHANT",
    "REDEMPTION_MERCHANT",
    "monthly_equivalent_rate",
    "investment_yield",
    "monthly_projected_income",
    "next_distribution_date",
    "elapsed_months",
    "build_investment",
    "InvestmentCalculator",
]
