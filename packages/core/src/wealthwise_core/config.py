"""Ledger settings for the WealthWise finance engine.

Usage:
    from wealthwise_core.config import LedgerSettings

    # Load from environment variables and .env file
    settings = LedgerSettings()
    print(settings.cdi_annual_rate)
"""

from decimal import Decimal
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import CURRENT_CDI_RATE, DEFAULT_CREDIT_LIMIT, EMERGENCY_FUND_FALLBACK


class InstallmentDebitMode(str, Enum):
    """How an installment purchase affects the account balance at creation."""

    FULL = "full"
    """Debit the whole purchase now (card statement debt)."""

    FIRST_INSTALLMENT = "first_installment"
    """Debit only the first installment's share."""


class LedgerSettings(BaseSettings):
    """Calculation settings for the ledger and investment engine.

    Environment Variables:
        WEALTHWISE_LEDGER_CDI_ANNUAL_RATE: Annual CDI rate as a fraction
        WEALTHWISE_LEDGER_STRICT_REDEMPTION: Reject redemptions above current value
        WEALTHWISE_LEDGER_INSTALLMENT_DEBIT: full or first_installment
        WEALTHWISE_LEDGER_DEFAULT_CREDIT_LIMIT: Limit given to new credit accounts
        WEALTHWISE_LEDGER_EMERGENCY_FUND_FALLBACK: Emergency fund target without cost data
    """

    model_config = SettingsConfigDict(
        env_prefix="WEALTHWISE_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    cdi_annual_rate: Decimal = Field(
        default=CURRENT_CDI_RATE,
        ge=Decimal("0"),
        le=Decimal("1"),
        description="Annual CDI reference rate as a fraction",
    )
    strict_redemption: bool = Field(
        default=True,
        description="Reject redemptions larger than the position's current value",
    )
    installment_debit: InstallmentDebitMode = Field(
        default=InstallmentDebitMode.FULL,
        description="Balance effect of installment purchases at creation time",
    )
    default_credit_limit: Decimal = Field(
        default=DEFAULT_CREDIT_LIMIT,
        ge=Decimal("0"),
        description="Credit limit assigned to newly connected credit accounts",
    )
    emergency_fund_fallback: Decimal = Field(
        default=EMERGENCY_FUND_FALLBACK,
        gt=Decimal("0"),
        description="Emergency fund target used when living costs are unknown",
    )

    @field_validator("cdi_annual_rate", mode="before")
    @classmethod
    def coerce_rate(cls, v):
        """Accept float rates without binary noise."""
        if isinstance(v, float):
            return Decimal(str(v))
        return v


__all__ = ["InstallmentDebitMode", "LedgerSettings"]
