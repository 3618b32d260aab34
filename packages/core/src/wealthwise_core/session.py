"""Session state: the profile gate plus the ledger operations a UI invokes.

A session starts in the ONBOARDING phase and becomes ACTIVE once a profile
exists. Every mutating operation builds a new LedgerState and swaps it in
only after the whole operation succeeded.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union
from uuid import uuid4

import structlog

from . import billing, budgets, goals, ledger, recurring
from .composer import ExpenseIntent, IncomeIntent, TransactionComposer, TransferIntent, parse_intent
from .config import LedgerSettings
from .exceptions import OnboardingRequiredError, ValidationError
from .investments import InvestmentCalculator
from .models import (
    Account,
    AccountOwner,
    AccountType,
    AppPhase,
    Goal,
    GoalType,
    Investment,
    LedgerState,
    PartnerConfig,
    TransactionCategory,
    UserProfile,
)
from .utils import coerce_decimal

logger = structlog.get_logger()

Intent = Union[ExpenseIntent, IncomeIntent, TransferIntent]


class FinanceSession:
    """
    One user's (or couple's) finance session.

    Holds the profile and the current LedgerState, and exposes the
    operations of the ledger, portfolio, budget and goal screens.
    """

    def __init__(
        self,
        settings: Optional[LedgerSettings] = None,
        profile: Optional[UserProfile] = None,
        state: Optional[LedgerState] = None,
    ):
        self.settings = settings or LedgerSettings()
        self.profile = profile
        self.state = state or LedgerState()
        self.composer = TransactionComposer(self.settings)
        self.calculator = InvestmentCalculator(self.settings)

    @property
    def phase(self) -> AppPhase:
        return AppPhase.ACTIVE if self.profile is not None else AppPhase.ONBOARDING

    def _require_active(self, operation: str) -> None:
        if self.phase != AppPhase.ACTIVE:
            raise OnboardingRequiredError(operation=operation)

    def _commit(self, new_state: LedgerState) -> LedgerState:
        self.state = new_state
        return new_state

    # -------------------------------------------------------------------------
    # Onboarding and profile
    # -------------------------------------------------------------------------

    def complete_onboarding(
        self,
        profile: UserProfile,
        goal_type: Optional[GoalType] = None,
    ) -> list[Goal]:
        """Store the profile and seed the starter goal for ``goal_type``.

        Raises:
            ValidationError: If the session already has a profile.
        """
        if self.phase == AppPhase.ACTIVE:
            raise ValidationError(
                "Onboarding was already completed",
                field="profile",
                value=self.profile.name,
                constraint="profile is created once",
            )
        seeded = (
            [goals.initial_goal_for(goal_type, profile, self.settings.emergency_fund_fallback)]
            if goal_type
            else []
        )
        self.profile = profile
        self._commit(self.state.model_copy(update={"goals": seeded}))
        logger.info("onboarding_completed", knowledge_level=profile.knowledge_level.value)
        return seeded

    def connect_partner(self, config: PartnerConfig) -> UserProfile:
        self._require_active("connect_partner")
        self.profile = self.profile.model_copy(update={"partner_config": config})
        logger.info("partner_connected", is_connected=config.is_connected)
        return self.profile

    # -------------------------------------------------------------------------
    # Accounts and transactions
    # -------------------------------------------------------------------------

    def connect_account(
        self,
        institution: str,
        initial_balance: Decimal = Decimal("0"),
        account_type: AccountType = AccountType.CHECKING,
        name: Optional[str] = None,
        owner: AccountOwner = AccountOwner.ME,
        is_default: bool = False,
    ) -> Account:
        """Register a manually tracked account with its opening balance."""
        self._require_active("connect_account")
        account = Account(
            id=f"acc_{uuid4().hex[:12]}",
            name=name or institution,
            type=account_type,
            balance=coerce_decimal(initial_balance),
            institution=institution,
            owner=owner,
            is_default=is_default,
            credit_limit=(
                self.settings.default_credit_limit if account_type == AccountType.CREDIT else None
            ),
        )
        self._commit(self.state.with_account(account))
        logger.info("account_connected", account_id=account.id, type=account_type.value)
        return account

    def update_balance(self, account_id: str, new_balance: Decimal) -> Account:
        """Overwrite an account balance by hand."""
        self._require_active("update_balance")
        account = self.state.find_account(account_id)
        if account is None:
            raise ValidationError("Account not found", field="account_id", value=account_id)
        delta = coerce_decimal(new_balance) - account.balance
        self._commit(self.state.with_balance_deltas({account_id: delta}))
        return self.state.find_account(account_id)

    def add_transaction(self, intent: Union[Intent, dict[str, Any]]) -> LedgerState:
        """Apply an expense, income or transfer intent (typed or raw payload)."""
        self._require_active("add_transaction")
        if isinstance(intent, dict):
            intent = parse_intent(intent)
        return self._commit(self.composer.apply(self.state, intent))

    def pay_bill(self, credit_account_id: str, on: Optional[date] = None) -> LedgerState:
        self._require_active("pay_bill")
        return self._commit(billing.pay_bill(self.state, credit_account_id, on))

    # -------------------------------------------------------------------------
    # Investments
    # -------------------------------------------------------------------------

    def add_investment(self, investment: Investment) -> Investment:
        self._require_active("add_investment")
        if self.state.find_investment(investment.id) is not None:
            raise ValidationError(
                "Investment already exists",
                field="id",
                value=investment.id,
            )
        self._commit(self.state.with_investment(investment))
        return investment

    def contribute(self, investment_id: str, amount: Optional[Decimal] = None, **kwargs) -> LedgerState:
        """See InvestmentCalculator.contribute."""
        self._require_active("contribute")
        return self._commit(self.calculator.contribute(self.state, investment_id, amount, **kwargs))

    def redeem(
        self,
        investment_id: str,
        amount: Decimal,
        destination_account_id: Optional[str],
        **kwargs,
    ) -> LedgerState:
        """See InvestmentCalculator.redeem."""
        self._require_active("redeem")
        return self._commit(
            self.calculator.redeem(self.state, investment_id, amount, destination_account_id, **kwargs)
        )

    # -------------------------------------------------------------------------
    # Budgets and goals
    # -------------------------------------------------------------------------

    def add_budget(self, category: TransactionCategory, limit: Decimal) -> LedgerState:
        self._require_active("add_budget")
        return self._commit(budgets.add_budget(self.state, category, coerce_decimal(limit)))

    def delete_budget(self, budget_id: str) -> LedgerState:
        self._require_active("delete_budget")
        return self._commit(budgets.delete_budget(self.state, budget_id))

    def add_goal(self, goal: Goal) -> Goal:
        self._require_active("add_goal")
        self._commit(self.state.model_copy(update={"goals": [*self.state.goals, goal]}))
        return goal

    def advance_goal(self, goal_id: str, amount: Decimal) -> Goal:
        self._require_active("advance_goal")
        goal = next((g for g in self.state.goals if g.id == goal_id), None)
        if goal is None:
            raise ValidationError("Goal not found", field="goal_id", value=goal_id)
        updated = goals.advance_goal(goal, amount)
        self._commit(
            self.state.model_copy(
                update={"goals": [updated if g.id == goal_id else g for g in self.state.goals]}
            )
        )
        return updated

    # -------------------------------------------------------------------------
    # Read models
    # -------------------------------------------------------------------------

    def dashboard(
        self,
        view: AccountOwner = AccountOwner.ME,
        period: ledger.Period = ledger.Period.MONTHLY,
        today: Optional[date] = None,
    ) -> ledger.DashboardSummary:
        return ledger.summarize_dashboard(self.state, view, period, today)

    def budget_report(
        self,
        view: AccountOwner = AccountOwner.ME,
        today: Optional[date] = None,
    ) -> list[budgets.BudgetEvaluation]:
        visible = ledger.filter_transactions_by_view(self.state.transactions, view)
        return budgets.evaluate_budgets(self.state.budgets, visible, today)

    def fixed_expenses(
        self,
        view: AccountOwner = AccountOwner.ME,
        today: Optional[date] = None,
    ) -> recurring.FixedExpenses:
        visible = ledger.filter_transactions_by_view(self.state.transactions, view)
        return recurring.detect_recurring_bills(visible, today)


__all__ = ["FinanceSession"]
