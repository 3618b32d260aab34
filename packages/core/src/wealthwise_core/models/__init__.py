"""Domain models for wealthwise-core.

- Ledger entities: accounts and transactions (financial.py)
- Portfolio positions (investments.py)
- Budgets, goals and the user profile (planning.py)
- Ledger state container and application phase (state.py)
"""

from wealthwise_core.models.financial import (
    Account,
    AccountOwner,
    AccountType,
    InstallmentInfo,
    Transaction,
    TransactionCategory,
    TransactionStatus,
)
from wealthwise_core.models.investments import (
    BenchmarkIndex,
    Investment,
    InvestmentType,
    Liquidity,
)
from wealthwise_core.models.planning import (
    Budget,
    Goal,
    GoalType,
    KnowledgeLevel,
    PartnerConfig,
    PartnerPermissions,
    RetirementDetails,
    UserProfile,
)
from wealthwise_core.models.state import AppPhase, LedgerState

__all__ = [
    # Ledger
    "Account",
    "AccountOwner",
    "AccountType",
    "InstallmentInfo",
    "Transaction",
    "TransactionCategory",
    "TransactionStatus",
    # Portfolio
    "BenchmarkIndex",
    "Investment",
    "InvestmentType",
    "Liquidity",
    # Planning
    "Budget",
    "Goal",
    "GoalType",
    "KnowledgeLevel",
    "PartnerConfig",
    "PartnerPermissions",
    "RetirementDetails",
    "UserProfile",
    # State
    "AppPhase",
    "LedgerState",
]
