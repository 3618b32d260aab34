"""Full-state snapshot export and import.

A snapshot is a flat JSON document with the keys accounts, transactions,
budgets, investments, goals and user_profile (``userProfile`` is also
accepted on load). Loading validates the whole document before building a
session: either everything loads or nothing does.
"""

import json
from typing import Optional

import structlog
from pydantic import AliasChoices, BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .config import LedgerSettings
from .exceptions import SnapshotError
from .models import Account, Budget, Goal, Investment, LedgerState, Transaction, UserProfile
from .session import FinanceSession

logger = structlog.get_logger()


class FinanceSnapshot(BaseModel):
    """Serializable copy of a session."""

    accounts: list[Account] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)
    investments: list[Investment] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)
    user_profile: Optional[UserProfile] = Field(
        default=None,
        validation_alias=AliasChoices("user_profile", "userProfile"),
    )


def take_snapshot(session: FinanceSession) -> FinanceSnapshot:
    state = session.state
    return FinanceSnapshot(
        accounts=state.accounts,
        transactions=state.transactions,
        budgets=state.budgets,
        investments=state.investments,
        goals=state.goals,
        user_profile=session.profile,
    )


def export_snapshot(session: FinanceSession, indent: Optional[int] = 2) -> str:
    """Serialize the session to JSON."""
    snapshot = take_snapshot(session)
    logger.info(
        "snapshot_exported",
        accounts=len(snapshot.accounts),
        transactions=len(snapshot.transactions),
    )
    return snapshot.model_dump_json(indent=indent)


def load_snapshot(text: str, settings: Optional[LedgerSettings] = None) -> FinanceSession:
    """Build a new session from exported JSON.

    Raises:
        SnapshotError: If the text is not JSON, has neither accounts nor a
            user profile, or any entity fails validation.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotError("Snapshot is not valid JSON", errors=[str(e)]) from e

    if not isinstance(raw, dict) or not (
        raw.get("accounts") or raw.get("user_profile") or raw.get("userProfile")
    ):
        raise SnapshotError("Snapshot has neither accounts nor a user profile")

    try:
        snapshot = FinanceSnapshot.model_validate(raw)
    except PydanticValidationError as e:
        raise SnapshotError(
            "Snapshot failed validation",
            errors=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
        ) from e

    state = LedgerState(
        accounts=snapshot.accounts,
        transactions=snapshot.transactions,
        budgets=snapshot.budgets,
        investments=snapshot.investments,
        goals=snapshot.goals,
    ).with_transactions([])
    logger.info(
        "snapshot_loaded",
        accounts=len(state.accounts),
        transactions=len(state.transactions),
    )
    return FinanceSession(settings=settings, profile=snapshot.user_profile, state=state)


__all__ = ["FinanceSnapshot", "take_snapshot", "export_snapshot", "load_snapshot"]
