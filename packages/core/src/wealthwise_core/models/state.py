"""Ledger state container and application phase."""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .financial import Account, AccountType, Transaction
from .investments import Investment
from .planning import Budget, Goal


class AppPhase(str, Enum):
    """Whether the session still needs onboarding."""

    ONBOARDING = "onboarding"
    ACTIVE = "active"


class LedgerState(BaseModel):
    """Everything the engine computes over.

    Treated as a value: operations build a new state with the ``with_*``
    helpers and callers swap it in once the whole operation succeeded.
    Transactions are kept sorted by date, most recent first.
    """

    model_config = ConfigDict(frozen=True)

    accounts: list[Account] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)
    investments: list[Investment] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)

    def find_account(self, account_id: Optional[str]) -> Optional[Account]:
        if account_id is None:
            return None
        return next((a for a in self.accounts if a.id == account_id), None)

    def find_investment(self, investment_id: str) -> Optional[Investment]:
        return next((i for i in self.investments if i.id == investment_id), None)

    def checking_accounts(self) -> list[Account]:
        return [a for a in self.accounts if a.type == AccountType.CHECKING]

    def with_balance_deltas(
        self,
        deltas: Mapping[str, Decimal],
        *,
        now: Optional[dt.datetime] = None,
    ) -> "LedgerState":
        """Return a copy with each account balance shifted by its delta."""
        if not deltas:
            return self
        stamp = now or dt.datetime.now()
        accounts = [
            a.model_copy(update={"balance": a.balance + deltas[a.id], "last_updated": stamp})
            if a.id in deltas
            else a
            for a in self.accounts
        ]
        return self.model_copy(update={"accounts": accounts})

    def with_account(self, account: Account) -> "LedgerState":
        """Return a copy with ``account`` replacing the one sharing its id, or appended."""
        if self.find_account(account.id) is None:
            return self.model_copy(update={"accounts": [*self.accounts, account]})
        accounts = [account if a.id == account.id else a for a in self.accounts]
        return self.model_copy(update={"accounts": accounts})

    def with_investment(self, investment: Investment) -> "LedgerState":
        if self.find_investment(investment.id) is None:
            return self.model_copy(update={"investments": [*self.investments, investment]})
        investments = [investment if i.id == investment.id else i for i in self.investments]
        return self.model_copy(update={"investments": investments})

    def with_transactions(self, new: Iterable[Transaction]) -> "LedgerState":
        """Return a copy with ``new`` merged in and the whole list re-sorted by date."""
        merged = [*new, *self.transactions]
        merged.sort(key=lambda t: t.date, reverse=True)
        return self.model_copy(update={"transactions": merged})
