"""Transaction composition: turn one user intent into ledger entries.

Intents are a tagged union on ``mode``:

- ``expense``: one entry, or N monthly installments when ``installments > 1``
- ``income``: one positive entry
- ``transfer``: one negative entry on the source account pointing at the
  destination, with both balances adjusted

Composing is pure and returns the entries plus the balance deltas they
imply; applying merges both into a new LedgerState.
"""

import datetime as dt
from decimal import Decimal
from typing import Annotated, Any, Literal, Optional, Union
from uuid import uuid4

import structlog
from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .config import InstallmentDebitMode, LedgerSettings
from .exceptions import ValidationError
from .models import (
    AccountOwner,
    InstallmentInfo,
    LedgerState,
    Transaction,
    TransactionCategory,
)
from .utils import add_months, round_money

logger = structlog.get_logger()

TRANSFER_MERCHANT = "Transferência"


class _IntentBase(BaseModel):
    amount: Decimal = Field(gt=Decimal("0"), description="Unsigned amount entered by the user")
    date: dt.date
    owner: AccountOwner = AccountOwner.ME

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        """Coerce string and float amounts to Decimal; the sign is dropped."""
        if isinstance(v, (str, float, int)):
            v = Decimal(str(v))
        if isinstance(v, Decimal):
            return abs(v)
        return v


class ExpenseIntent(_IntentBase):
    """Money spent from an account, optionally split into installments."""

    mode: Literal["expense"] = "expense"
    account_id: str
    merchant: str = Field(min_length=1)
    category: TransactionCategory = TransactionCategory.OTHER
    installments: int = Field(default=1, ge=1, le=120)
    is_recurring: bool = False


class IncomeIntent(_IntentBase):
    """Money received into an account."""

    mode: Literal["income"] = "income"
    account_id: str
    merchant: str = Field(min_length=1)
    category: TransactionCategory = TransactionCategory.INCOME


class TransferIntent(_IntentBase):
    """Money moved between two of the user's accounts."""

    mode: Literal["transfer"] = "transfer"
    from_account_id: str
    to_account_id: str

    @model_validator(mode="after")
    def distinct_accounts(self) -> "TransferIntent":
        if self.from_account_id == self.to_account_id:
            raise ValueError("from_account_id and to_account_id must differ")
        return self


TransactionIntent = Annotated[
    Union[ExpenseIntent, IncomeIntent, TransferIntent],
    Field(discriminator="mode"),
]

_intent_adapter: TypeAdapter[TransactionIntent] = TypeAdapter(TransactionIntent)


def parse_intent(payload: dict[str, Any]) -> Union[ExpenseIntent, IncomeIntent, TransferIntent]:
    """Validate a loosely-typed form payload into a typed intent.

    Raises:
        ValidationError: If the payload does not describe a valid intent.
    """
    try:
        return _intent_adapter.validate_python(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        raise ValidationError(
            f"Invalid transaction intent: {first['msg']}",
            field=".".join(str(p) for p in first["loc"]) or None,
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e


class Composition(BaseModel):
    """Ledger entries and balance changes produced by one intent."""

    transactions: list[Transaction]
    balance_deltas: dict[str, Decimal]


class TransactionComposer:
    """
    Expand user intents into ledger entries.

    Installment purchases produce one entry per month, each for
    ``round(total / N, 2)``. By default the account is debited the full
    purchase at creation, like card statement debt; the
    ``first_installment`` setting debits only the first share instead.
    """

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self.settings = settings or LedgerSettings()

    def compose(
        self,
        state: LedgerState,
        intent: Union[ExpenseIntent, IncomeIntent, TransferIntent],
    ) -> Composition:
        """Build the entries for ``intent`` without changing ``state``.

        Raises:
            ValidationError: If a referenced account does not exist.
        """
        if isinstance(intent, TransferIntent):
            return self._compose_transfer(state, intent)
        if isinstance(intent, ExpenseIntent):
            return self._compose_expense(state, intent)
        return self._compose_income(state, intent)

    def apply(
        self,
        state: LedgerState,
        intent: Union[ExpenseIntent, IncomeIntent, TransferIntent],
    ) -> LedgerState:
        """Compose ``intent`` and return the state with it applied."""
        composition = self.compose(state, intent)
        new_state = state.with_balance_deltas(composition.balance_deltas).with_transactions(
            composition.transactions
        )
        logger.info(
            "transaction_composed",
            mode=intent.mode,
            entries=len(composition.transactions),
            deltas={k: str(v) for k, v in composition.balance_deltas.items()},
        )
        return new_state

    def _require_account(self, state: LedgerState, account_id: str, field: str) -> None:
        if state.find_account(account_id) is None:
            raise ValidationError("Account not found", field=field, value=account_id)

    def _compose_transfer(self, state: LedgerState, intent: TransferIntent) -> Composition:
        self._require_account(state, intent.from_account_id, "from_account_id")
        self._require_account(state, intent.to_account_id, "to_account_id")
        txn = Transaction(
            id=f"txn_tr_{uuid4().hex[:12]}",
            account_id=intent.from_account_id,
            to_account_id=intent.to_account_id,
            date=intent.date,
            amount=-intent.amount,
            merchant=TRANSFER_MERCHANT,
            category=TransactionCategory.TRANSFER,
            owner=intent.owner,
        )
        return Composition(
            transactions=[txn],
            balance_deltas={
                intent.from_account_id: -intent.amount,
                intent.to_account_id: intent.amount,
            },
        )

    def _compose_income(self, state: LedgerState, intent: IncomeIntent) -> Composition:
        self._require_account(state, intent.account_id, "account_id")
        txn = Transaction(
            id=f"txn_{uuid4().hex[:12]}",
            account_id=intent.account_id,
            date=intent.date,
            amount=intent.amount,
            merchant=intent.merchant,
            category=intent.category,
            owner=intent.owner,
        )
        return Composition(transactions=[txn], balance_deltas={intent.account_id: intent.amount})

    def _compose_expense(self, state: LedgerState, intent: ExpenseIntent) -> Composition:
        self._require_account(state, intent.account_id, "account_id")
        signed = -intent.amount
        count = intent.installments

        if count == 1:
            txn = Transaction(
                id=f"txn_{uuid4().hex[:12]}",
                account_id=intent.account_id,
                date=intent.date,
                amount=signed,
                merchant=intent.merchant,
                category=intent.category,
                owner=intent.owner,
                is_recurring=intent.is_recurring,
            )
            return Composition(transactions=[txn], balance_deltas={intent.account_id: signed})

        share = round_money(signed / count)
        original_id = f"origin_{uuid4().hex[:12]}"
        entries = [
            Transaction(
                id=f"txn_{uuid4().hex[:12]}",
                account_id=intent.account_id,
                date=add_months(intent.date, i),
                amount=share,
                merchant=f"{intent.merchant} ({i + 1}/{count})",
                category=intent.category,
                owner=intent.owner,
                is_recurring=intent.is_recurring,
                installments=InstallmentInfo(current=i + 1, total=count, original_id=original_id),
            )
            for i in range(count)
        ]

        if self.settings.installment_debit == InstallmentDebitMode.FIRST_INSTALLMENT:
            debit = share
        else:
            debit = signed
        logger.debug(
            "installments_expanded",
            original_id=original_id,
            count=count,
            share=str(share),
            rounding_loss=str(signed - share * count),
        )
        return Composition(transactions=entries, balance_deltas={intent.account_id: debit})


__all__ = [
    "ExpenseIntent",
    "IncomeIntent",
    "TransferIntent",
    "TransactionIntent",
    "parse_intent",
    "Composition",
    "TransactionComposer",
]
