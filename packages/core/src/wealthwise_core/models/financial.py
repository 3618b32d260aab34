"""Ledger data models: accounts and transactions.

Accounts are named money containers whose balance sign depends on their
type. Transactions are immutable ledger entries; corrections happen through
new offsetting entries, never by editing an existing one.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


class AccountType(str, Enum):
    """Kinds of accounts a user can connect."""

    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    INVESTMENT = "investment"
    LOAN = "loan"


class AccountOwner(str, Enum):
    """Who an account or transaction belongs to in a couple's view."""

    ME = "me"
    PARTNER = "partner"
    JOINT = "joint"


class TransactionStatus(str, Enum):
    """Settlement status of a transaction."""

    PENDING = "pending"
    COMPLETED = "completed"


class TransactionCategory(str, Enum):
    """Closed list of transaction categories.

    Values are the user-facing Portuguese labels and double as the matching
    key for budgets and recurring bills.
    """

    FOOD = "Alimentação"
    SHOPPING = "Compras"
    HOUSING = "Moradia"
    TRANSPORT = "Transporte"
    LEISURE = "Lazer"
    HEALTH = "Saúde"
    INCOME = "Renda"
    INVESTMENTS = "Investimentos"
    INVESTMENT_REDEMPTION = "Resgate de Investimento"
    BILLS = "Contas"
    EDUCATION = "Educação"
    TRANSFER = "Transferência"
    OTHER = "Outros"


class Account(BaseModel):
    """A named money container.

    For credit accounts a negative balance is money owed and a positive
    balance is a credit in the user's favor.
    """

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "acc_nubank",
                    "name": "Nubank Roxinho",
                    "type": "credit",
                    "balance": "-1840.30",
                    "institution": "Nubank",
                    "owner": "me",
                    "credit_limit": "5000",
                }
            ]
        }
    }

    id: str = Field(description="Unique account identifier")
    name: str = Field(description="Display name")
    type: AccountType = Field(description="Account type")
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Signed balance. For credit accounts negative means debt",
    )
    institution: str = Field(description="Institution label")
    owner: AccountOwner = Field(default=AccountOwner.ME)
    credit_limit: Optional[Decimal] = Field(
        default=None,
        ge=Decimal("0"),
        description="Credit limit, credit accounts only",
    )
    is_default: bool = Field(
        default=False,
        description="Preferred checking account for bill payments",
    )
    last_updated: dt.datetime = Field(default_factory=dt.datetime.now)

    @field_validator("balance", "credit_limit", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        """Coerce string and float amounts to Decimal."""
        if isinstance(v, (str, float)):
            return Decimal(str(v))
        return v

    @model_validator(mode="after")
    def credit_limit_only_for_credit(self) -> "Account":
        """Only credit accounts carry a credit limit."""
        if self.credit_limit is not None and self.type != AccountType.CREDIT:
            raise ValueError("credit_limit is only valid for credit accounts")
        return self

    @computed_field
    @property
    def is_credit(self) -> bool:
        """Returns True for credit card accounts."""
        return self.type == AccountType.CREDIT

    @computed_field
    @property
    def amount_owed(self) -> Decimal:
        """Debt on a credit account as a positive number, else 0."""
        if self.is_credit and self.balance < 0:
            return -self.balance
        return Decimal("0")


class InstallmentInfo(BaseModel):
    """Position of a transaction inside an installment purchase."""

    model_config = ConfigDict(frozen=True)

    current: int = Field(ge=1, description="1-based installment number")
    total: int = Field(ge=2, description="Number of installments in the purchase")
    original_id: str = Field(description="Identifier shared by all installments")

    @model_validator(mode="after")
    def current_within_total(self) -> "InstallmentInfo":
        if self.current > self.total:
            raise ValueError("current installment cannot exceed total")
        return self


class Transaction(BaseModel):
    """A single immutable ledger entry.

    Expenses are negative, income and refunds positive. Transfers store the
    outgoing leg only, with ``to_account_id`` pointing at the destination.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "id": "txn_01",
                    "account_id": "acc_nubank",
                    "date": "2025-01-15",
                    "amount": "-49.99",
                    "merchant": "iFood",
                    "category": "Alimentação",
                    "status": "completed",
                    "owner": "me",
                }
            ]
        },
    )

    id: str = Field(description="Unique transaction identifier")
    account_id: str = Field(description="Owning account")
    to_account_id: Optional[str] = Field(
        default=None,
        description="Destination account, transfers only",
    )
    date: dt.date = Field(description="Date the transaction occurred")
    amount: Decimal = Field(
        description="Signed amount. Negative for expenses, positive for income",
    )
    merchant: str = Field(description="Merchant or description label")
    category: TransactionCategory = Field(default=TransactionCategory.OTHER)
    status: TransactionStatus = Field(default=TransactionStatus.COMPLETED)
    owner: AccountOwner = Field(default=AccountOwner.ME)
    installments: Optional[InstallmentInfo] = None
    is_recurring: bool = False

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        """Coerce string and float amounts to Decimal."""
        if isinstance(v, (str, float)):
            return Decimal(str(v))
        return v

    @computed_field
    @property
    def is_debit(self) -> bool:
        """Returns True if this is a debit (expense) transaction."""
        return self.amount < 0

    @computed_field
    @property
    def is_credit(self) -> bool:
        """Returns True if this is a credit (income) transaction."""
        return self.amount > 0

    @computed_field
    @property
    def abs_amount(self) -> Decimal:
        """Returns the absolute value of the transaction amount."""
        return abs(self.amount)

    @property
    def is_transfer(self) -> bool:
        return self.to_account_id is not None
