"""WealthWise Core - Derived financial computations for a household ledger."""

__version__ = "0.1.0"

from .composer import ExpenseIntent, IncomeIntent, TransactionComposer, TransferIntent, parse_intent
from .config import InstallmentDebitMode, LedgerSettings
from .investments import InvestmentCalculator
from .ledger import DashboardSummary, Period, summarize_dashboard
from .session import FinanceSession
from .snapshot import export_snapshot, load_snapshot

__all__ = [
    "ExpenseIntent",
    "IncomeIntent",
    "TransferIntent",
    "TransactionComposer",
    "parse_intent",
    "InstallmentDebitMode",
    "LedgerSettings",
    "InvestmentCalculator",
    "DashboardSummary",
    "Period",
    "summarize_dashboard",
    "FinanceSession",
    "export_snapshot",
    "load_snapshot",
]
