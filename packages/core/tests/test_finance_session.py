"""Tests for the finance session and its onboarding gate."""

from datetime import date
from decimal import Decimal

import pytest

from wealthwise_core.config import LedgerSettings
from wealthwise_core.exceptions import OnboardingRequiredError, ValidationError
from wealthwise_core.goals import create_goal
from wealthwise_core.ledger import Period
from wealthwise_core.models import (
    AccountOwner,
    AccountType,
    AppPhase,
    GoalType,
    Investment,
    InvestmentType,
    KnowledgeLevel,
    PartnerConfig,
    TransactionCategory,
    UserProfile,
)
from wealthwise_core.session import FinanceSession


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        name="  Bruno ",
        knowledge_level=KnowledgeLevel.INTERMEDIATE,
        liquid_assets=Decimal("2500"),
    )


@pytest.fixture
def session(profile: UserProfile) -> FinanceSession:
    session = FinanceSession(LedgerSettings())
    session.complete_onboarding(profile)
    return session


@pytest.fixture
def cdb() -> Investment:
    return Investment(
        id="inv_cdb",
        name="CDB",
        type=InvestmentType.FIXED_INCOME,
        amount_invested=Decimal("1000"),
        current_value=Decimal("1200"),
        start_date=date(2024, 5, 1),
    )


class TestOnboarding:
    """Test suite for the onboarding phase."""

    def test_new_session_is_onboarding(self):
        assert FinanceSession().phase == AppPhase.ONBOARDING

    def test_operations_blocked_until_onboarded(self):
        """Ledger operations require a profile."""
        session = FinanceSession()
        with pytest.raises(OnboardingRequiredError) as exc_info:
            session.connect_account("Nubank", Decimal("100"))

        assert exc_info.value.operation == "connect_account"
        assert session.state.accounts == []

    def test_complete_onboarding_activates(self, profile: UserProfile):
        session = FinanceSession()
        seeded = session.complete_onboarding(profile, GoalType.EMERGENCY_FUND)

        assert session.phase == AppPhase.ACTIVE
        assert session.profile.name == "Bruno"
        assert seeded[0].current_amount == Decimal("2500")
        assert session.state.goals == seeded

    def test_second_onboarding_rejected(self, session: FinanceSession):
        """An active session keeps its profile and every goal added since."""
        session.add_goal(create_goal("Carro", GoalType.PURCHASE, Decimal("40000")))
        goals_before = list(session.state.goals)

        with pytest.raises(ValidationError) as exc_info:
            session.complete_onboarding(UserProfile(name="Outro"), GoalType.EMERGENCY_FUND)

        assert exc_info.value.field == "profile"
        assert session.profile.name == "Bruno"
        assert session.state.goals == goals_before

    def test_onboarding_uses_configured_emergency_fallback(self, profile: UserProfile):
        session = FinanceSession(LedgerSettings(emergency_fund_fallback=Decimal("99999")))
        seeded = session.complete_onboarding(profile, GoalType.EMERGENCY_FUND)
        assert seeded[0].target_amount == Decimal("99999")

    def test_connect_partner(self, session: FinanceSession):
        profile = session.connect_partner(PartnerConfig(is_connected=True, partner_name="Carla"))
        assert profile.partner_config.partner_name == "Carla"


class TestAccounts:
    """Test suite for account operations."""

    def test_connect_credit_account_gets_default_limit(self, session: FinanceSession):
        card = session.connect_account("Nubank", account_type=AccountType.CREDIT)
        assert card.credit_limit == Decimal("5000")

    def test_connect_checking_has_no_limit(self, session: FinanceSession):
        account = session.connect_account("Itaú", Decimal("1500.25"))
        assert account.credit_limit is None
        assert account.balance == Decimal("1500.25")

    def test_update_balance(self, session: FinanceSession):
        account = session.connect_account("Itaú", Decimal("100"))
        updated = session.update_balance(account.id, Decimal("80"))
        assert updated.balance == Decimal("80")

    def test_update_unknown_balance(self, session: FinanceSession):
        with pytest.raises(ValidationError):
            session.update_balance("acc_missing", Decimal("1"))


class TestSessionFlows:
    """End-to-end flows through the session."""

    def test_add_transaction_from_payload(self, session: FinanceSession):
        account = session.connect_account("Itaú", Decimal("1000"))
        session.add_transaction(
            {
                "mode": "expense",
                "account_id": account.id,
                "amount": "200",
                "date": "2025-03-10",
                "merchant": "Mercado",
                "category": "Alimentação",
            }
        )

        assert session.state.find_account(account.id).balance == Decimal("800")
        assert len(session.state.transactions) == 1

    def test_failed_redeem_keeps_previous_state(self, session: FinanceSession, cdb: Investment):
        """A rejected operation leaves the committed state untouched."""
        session.add_investment(cdb)
        before = session.state

        with pytest.raises(ValidationError):
            session.redeem("inv_cdb", Decimal("100"), None)

        assert session.state is before

    def test_contribute_and_redeem(self, session: FinanceSession, cdb: Investment):
        account = session.connect_account("Itaú", Decimal("1000"))
        session.add_investment(cdb)
        session.contribute("inv_cdb", Decimal("300"), source_account_id=account.id)
        session.redeem("inv_cdb", Decimal("150"), account.id)

        position = session.state.find_investment("inv_cdb")
        assert position.current_value == Decimal("1350")
        assert session.state.find_account(account.id).balance == Decimal("850")

    def test_duplicate_investment_rejected(self, session: FinanceSession, cdb: Investment):
        session.add_investment(cdb)
        with pytest.raises(ValidationError):
            session.add_investment(cdb)

    def test_pay_bill(self, session: FinanceSession):
        session.connect_account("Itaú", Decimal("1000"))
        card = session.connect_account("Nubank", Decimal("-300"), account_type=AccountType.CREDIT)
        session.pay_bill(card.id, date(2025, 3, 10))
        assert session.state.find_account(card.id).balance == Decimal("0")

    def test_budget_report(self, session: FinanceSession):
        account = session.connect_account("Itaú", Decimal("1000"))
        session.add_budget(TransactionCategory.FOOD, Decimal("100"))
        session.add_transaction(
            {
                "mode": "expense",
                "account_id": account.id,
                "amount": "90",
                "date": "2025-03-10",
                "merchant": "Mercado",
                "category": "Alimentação",
            }
        )

        report = session.budget_report(today=date(2025, 3, 15))
        assert report[0].status.value == "warning"

        session.delete_budget(report[0].budget_id)
        assert session.state.budgets == []

    def test_advance_goal(self, session: FinanceSession):
        goal = session.add_goal(create_goal("Viagem", GoalType.PURCHASE, Decimal("6000")))
        updated = session.advance_goal(goal.id, Decimal("600"))

        assert updated.current_amount == Decimal("600")
        assert session.state.goals[0].current_amount == Decimal("600")

    def test_dashboard_and_fixed_expenses(self, session: FinanceSession):
        account = session.connect_account("Itaú", Decimal("1000"), owner=AccountOwner.JOINT)
        session.add_transaction(
            {
                "mode": "expense",
                "account_id": account.id,
                "amount": "59.90",
                "date": "2025-03-05",
                "merchant": "Netflix",
                "category": "Contas",
                "is_recurring": True,
            }
        )

        summary = session.dashboard(AccountOwner.ME, Period.MONTHLY, date(2025, 3, 20))
        fixed = session.fixed_expenses(today=date(2025, 3, 20))

        assert summary.period_expense == Decimal("59.90")
        assert fixed.bills[0].merchant == "Netflix"
        assert fixed.bills[0].paid_this_month is True
