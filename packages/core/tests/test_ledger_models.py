"""Tests for ledger domain models."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from wealthwise_core.models import (
    Account,
    AccountType,
    InstallmentInfo,
    Investment,
    InvestmentType,
    LedgerState,
    Transaction,
    TransactionCategory,
    UserProfile,
)


class TestAccount:
    """Test suite for Account."""

    def test_string_balance_coerced(self):
        account = Account(
            id="a", name="Itaú", type=AccountType.CHECKING, balance="1234.56", institution="Itaú"
        )
        assert account.balance == Decimal("1234.56")

    def test_credit_limit_only_on_credit_accounts(self):
        with pytest.raises(PydanticValidationError):
            Account(
                id="a",
                name="Itaú",
                type=AccountType.CHECKING,
                balance=Decimal("0"),
                institution="Itaú",
                credit_limit=Decimal("1000"),
            )

    def test_amount_owed(self):
        card = Account(
            id="c",
            name="Nubank",
            type=AccountType.CREDIT,
            balance=Decimal("-320.10"),
            institution="Nubank",
            credit_limit=Decimal("5000"),
        )
        assert card.is_credit
        assert card.amount_owed == Decimal("320.10")


class TestTransaction:
    """Test suite for Transaction."""

    @pytest.fixture
    def txn(self) -> Transaction:
        return Transaction(
            id="t1",
            account_id="a",
            date=date(2025, 3, 1),
            amount="-49.99",
            merchant="iFood",
            category=TransactionCategory.FOOD,
        )

    def test_sign_helpers(self, txn: Transaction):
        assert txn.is_debit
        assert not txn.is_credit
        assert txn.abs_amount == Decimal("49.99")

    def test_frozen(self, txn: Transaction):
        """Transactions are immutable once recorded."""
        with pytest.raises(PydanticValidationError):
            txn.amount = Decimal("1")

    def test_category_values_are_portuguese(self):
        assert TransactionCategory("Resgate de Investimento") == TransactionCategory.INVESTMENT_REDEMPTION
        assert TransactionCategory.BILLS.value == "Contas"


class TestInstallmentInfo:
    def test_current_within_total(self):
        with pytest.raises(PydanticValidationError):
            InstallmentInfo(current=4, total=3, original_id="o")


class TestInvestment:
    def test_ticker_normalized(self):
        inv = Investment(
            id="i",
            name="Petrobras",
            type=InvestmentType.STOCK,
            amount_invested="365",
            current_value="380",
            start_date=date(2025, 1, 2),
            ticker=" petr4 ",
        )
        assert inv.ticker == "PETR4"
        assert inv.absolute_yield == Decimal("15")

    def test_negative_value_rejected(self):
        with pytest.raises(PydanticValidationError):
            Investment(
                id="i",
                name="x",
                type=InvestmentType.CRYPTO,
                amount_invested=Decimal("1"),
                current_value=Decimal("-1"),
                start_date=date(2025, 1, 2),
            )


class TestUserProfile:
    def test_blank_name_rejected(self):
        with pytest.raises(PydanticValidationError):
            UserProfile(name="   ")


class TestLedgerState:
    """Test suite for LedgerState helpers."""

    def test_balance_deltas_return_new_state(self):
        state = LedgerState(
            accounts=[
                Account(id="a", name="a", type=AccountType.CHECKING, balance=Decimal("10"), institution="x")
            ]
        )
        updated = state.with_balance_deltas({"a": Decimal("-15")})

        assert updated.find_account("a").balance == Decimal("-5")
        assert state.find_account("a").balance == Decimal("10")

    def test_missing_lookups(self):
        state = LedgerState()
        assert state.find_account(None) is None
        assert state.find_investment("nope") is None
