"""Investment position models.

A position is either quantity-bearing (FII, stock, crypto), where cost basis
is derived from quantity and average price, or cash-based fixed income
indexed to a benchmark.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field, field_validator


class InvestmentType(str, Enum):
    """Investment categories tracked by the portfolio."""

    FII = "FII"
    FIXED_INCOME = "FIXED_INCOME"
    STOCK = "STOCK"
    CRYPTO = "CRYPTO"

    @property
    def is_quantity_bearing(self) -> bool:
        """Listed and crypto assets are tracked by units and average price."""
        return self in (InvestmentType.FII, InvestmentType.STOCK, InvestmentType.CRYPTO)


class BenchmarkIndex(str, Enum):
    """Benchmarks for fixed income yield."""

    CDI = "CDI"
    IPCA = "IPCA"
    PRE = "PRE"


class Liquidity(str, Enum):
    DAILY = "daily"
    MATURITY = "maturity"


class Investment(BaseModel):
    """A single portfolio position.

    ``amount_invested`` is the cumulative cost basis and ``current_value``
    the marked value. For quantity-bearing types the cost basis equals
    ``quantity * average_price`` right after every contribution.
    """

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "inv_mxrf",
                    "name": "Maxi Renda",
                    "type": "FII",
                    "amount_invested": "1000.00",
                    "current_value": "1045.00",
                    "start_date": "2024-06-01",
                    "ticker": "MXRF11",
                    "quantity": "100",
                    "average_price": "10.00",
                    "last_dividend": "0.11",
                },
                {
                    "id": "inv_cdb",
                    "name": "CDB Banco Inter",
                    "type": "FIXED_INCOME",
                    "amount_invested": "5000.00",
                    "current_value": "5230.00",
                    "start_date": "2024-01-10",
                    "index": "CDI",
                    "percentage": "110",
                    "liquidity": "daily",
                },
            ]
        }
    }

    id: str = Field(description="Unique investment identifier")
    name: str = Field(description="Display name")
    type: InvestmentType
    amount_invested: Decimal = Field(
        default=Decimal("0"),
        ge=Decimal("0"),
        description="Cumulative cost basis",
    )
    current_value: Decimal = Field(
        default=Decimal("0"),
        ge=Decimal("0"),
        description="Current marked value",
    )
    start_date: date

    # Quantity-bearing attributes
    ticker: Optional[str] = None
    quantity: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    average_price: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    last_dividend: Optional[Decimal] = Field(
        default=None,
        ge=Decimal("0"),
        description="Last known per-unit monthly distribution",
    )

    # Fixed income attributes
    index: Optional[BenchmarkIndex] = None
    percentage: Optional[Decimal] = Field(
        default=None,
        ge=Decimal("0"),
        description="Percentage of the benchmark index (e.g. 110 for 110% CDI)",
    )
    liquidity: Optional[Liquidity] = None
    maturity_date: Optional[date] = None

    @field_validator(
        "amount_invested",
        "current_value",
        "quantity",
        "average_price",
        "last_dividend",
        "percentage",
        mode="before",
    )
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        """Coerce string and float amounts to Decimal."""
        if isinstance(v, (str, float)):
            return Decimal(str(v))
        return v

    @field_validator("ticker")
    @classmethod
    def normalize_ticker(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip().upper() or None

    @computed_field
    @property
    def absolute_yield(self) -> Decimal:
        """Current value minus cost basis."""
        return self.current_value - self.amount_invested
