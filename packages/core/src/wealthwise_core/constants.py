"""Reference rates and planning constants for WealthWise calculations.

Values here are rules of thumb for Brazilian personal finance, not
regulatory-grade figures. Rates are expressed as fractions (0.1125 == 11.25%).
"""

from decimal import Decimal


# =============================================================================
# MARKET RATES
# =============================================================================

CURRENT_CDI_RATE = Decimal("0.1125")
"""Annual CDI reference rate."""

MONTHS_PER_YEAR = 12


# =============================================================================
# PLANNING HEURISTICS
# =============================================================================

WITHDRAWAL_RATE = Decimal("0.005")
"""Monthly safe-withdrawal rate (0.5%/month) used to size retirement goals."""

EMERGENCY_FUND_MONTHS = 6
EMERGENCY_FUND_FALLBACK = Decimal("15000")
DEBT_PAYOFF_FALLBACK = Decimal("5000")

ONBOARDING_RETIREMENT_TARGET = Decimal("1000000")
ONBOARDING_PURCHASE_TARGET = Decimal("50000")


# =============================================================================
# BUDGETS AND CREDIT
# =============================================================================

BUDGET_WARNING_RATIO = Decimal("0.80")
CREDIT_HIGH_USAGE_RATIO = Decimal("0.9")
DEFAULT_CREDIT_LIMIT = Decimal("5000")


# =============================================================================
# INVESTMENTS
# =============================================================================

FII_PAYMENT_DAY = 15
DAYS_PER_ELAPSED_MONTH = 30

UNKNOWN_TICKER_DIVIDEND_RATIO = Decimal("0.008")
"""Monthly distribution assumed for tickers missing from MARKET_DATA."""

# Ticker: (price, last dividend, display name)
MARKET_DATA: dict[str, tuple[Decimal, Decimal, str]] = {
    "MXRF11": (Decimal("10.45"), Decimal("0.11"), "Maxi Renda"),
    "HGLG11": (Decimal("162.30"), Decimal("1.10"), "CSHG Logística"),
    "XPML11": (Decimal("115.50"), Decimal("0.92"), "XP Malls"),
    "KNRI11": (Decimal("158.20"), Decimal("1.00"), "Kinea Renda"),
    "VISC11": (Decimal("118.90"), Decimal("0.85"), "Vinci Shopping"),
    "BTLG11": (Decimal("101.15"), Decimal("0.76"), "BTG Logística"),
    "PETR4": (Decimal("36.50"), Decimal("0.00"), "Petrobras PN"),
    "VALE3": (Decimal("60.20"), Decimal("0.00"), "Vale ON"),
    "BBAS3": (Decimal("27.10"), Decimal("0.00"), "Banco do Brasil ON"),
}
