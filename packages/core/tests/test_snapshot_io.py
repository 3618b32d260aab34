"""Tests for snapshot export and import."""

import json
from datetime import date
from decimal import Decimal

import pytest

from wealthwise_core.exceptions import SnapshotError
from wealthwise_core.models import AccountType, AppPhase, GoalType, UserProfile
from wealthwise_core.session import FinanceSession
from wealthwise_core.snapshot import export_snapshot, load_snapshot


@pytest.fixture
def session() -> FinanceSession:
    session = FinanceSession()
    session.complete_onboarding(UserProfile(name="Ana"), GoalType.RETIREMENT)
    account = session.connect_account("Itaú", Decimal("1000"))
    session.connect_account("Nubank", Decimal("-250.75"), account_type=AccountType.CREDIT)
    for day, amount in ((3, "40"), (15, "60"), (9, "25.5")):
        session.add_transaction(
            {
                "mode": "expense",
                "account_id": account.id,
                "amount": amount,
                "date": date(2025, 3, day).isoformat(),
                "merchant": "Padaria",
            }
        )
    return session


class TestExportSnapshot:
    """Test suite for export_snapshot."""

    def test_export_has_all_sections(self, session: FinanceSession):
        payload = json.loads(export_snapshot(session))
        assert set(payload) == {
            "accounts",
            "transactions",
            "budgets",
            "investments",
            "goals",
            "user_profile",
        }
        assert payload["user_profile"]["name"] == "Ana"

    def test_reload_preserves_state(self, session: FinanceSession):
        """Loading an export restores balances, entries and the profile."""
        restored = load_snapshot(export_snapshot(session))

        assert restored.phase == AppPhase.ACTIVE
        assert [a.balance for a in restored.state.accounts] == [
            Decimal("1000") - Decimal("125.5"),
            Decimal("-250.75"),
        ]
        assert [t.date.day for t in restored.state.transactions] == [15, 9, 3]
        assert restored.state.goals[0].target_amount == Decimal("1000000")


class TestLoadSnapshot:
    """Test suite for load_snapshot."""

    def test_invalid_json(self):
        with pytest.raises(SnapshotError):
            load_snapshot("{not json")

    def test_requires_accounts_or_profile(self):
        """A payload with neither accounts nor a profile is rejected."""
        with pytest.raises(SnapshotError):
            load_snapshot(json.dumps({"transactions": [], "budgets": []}))

    def test_profile_only_is_accepted(self):
        restored = load_snapshot(json.dumps({"user_profile": {"name": "Ana"}}))
        assert restored.profile.name == "Ana"
        assert restored.state.accounts == []

    def test_camel_case_profile_key_is_accepted(self):
        """Snapshots written with the userProfile key load the same profile."""
        restored = load_snapshot(json.dumps({"userProfile": {"name": "Ana"}}))
        assert restored.phase == AppPhase.ACTIVE
        assert restored.profile.name == "Ana"

    def test_any_invalid_entity_rejects_everything(self, session: FinanceSession):
        payload = json.loads(export_snapshot(session))
        payload["transactions"][1]["date"] = "not-a-date"

        with pytest.raises(SnapshotError) as exc_info:
            load_snapshot(json.dumps(payload))

        assert any("transactions.1.date" in err for err in exc_info.value.errors)

    def test_transactions_resorted(self):
        payload = {
            "accounts": [
                {
                    "id": "acc_1",
                    "name": "Itaú",
                    "type": "checking",
                    "balance": "10",
                    "institution": "Itaú",
                }
            ],
            "transactions": [
                {"id": "old", "account_id": "acc_1", "date": "2025-01-01", "amount": "-1", "merchant": "a"},
                {"id": "new", "account_id": "acc_1", "date": "2025-02-01", "amount": "-1", "merchant": "b"},
            ],
        }
        restored = load_snapshot(json.dumps(payload))
        assert [t.id for t in restored.state.transactions] == ["new", "old"]
        assert restored.phase == AppPhase.ONBOARDING
