"""Planning models: budgets, goals and the user profile."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..constants import WITHDRAWAL_RATE
from ..utils import round_money
from .financial import TransactionCategory


class Budget(BaseModel):
    """Monthly spending ceiling for one category.

    Budgets are replaced rather than edited: delete and recreate to change
    the limit.
    """

    id: str
    category: TransactionCategory
    limit: Decimal = Field(gt=Decimal("0"), description="Monthly spending limit")

    @field_validator("limit", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        if isinstance(v, (str, float)):
            return Decimal(str(v))
        return v


class GoalType(str, Enum):
    PURCHASE = "PURCHASE"
    RETIREMENT = "RETIREMENT"
    EMERGENCY_FUND = "EMERGENCY_FUND"
    DEBT_PAYOFF = "DEBT_PAYOFF"


class KnowledgeLevel(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class RetirementDetails(BaseModel):
    """Inputs used to size a retirement goal."""

    current_age: int = Field(ge=0, le=120)
    retirement_age: int = Field(ge=0, le=120)
    desired_monthly_income: Decimal = Field(gt=Decimal("0"))

    @field_validator("desired_monthly_income", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        if isinstance(v, (str, float)):
            return Decimal(str(v))
        return v

    @model_validator(mode="after")
    def retirement_after_current_age(self) -> "RetirementDetails":
        if self.retirement_age < self.current_age:
            raise ValueError("retirement_age must not be before current_age")
        return self

    @property
    def years_to_retirement(self) -> int:
        return self.retirement_age - self.current_age


class Goal(BaseModel):
    """A target amount to reach over time.

    ``current_amount`` is advanced by callers; it is not derived from
    account or investment balances.
    """

    id: str
    title: str
    type: GoalType
    target_amount: Decimal = Field(ge=Decimal("0"))
    current_amount: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    deadline: Optional[date] = None
    monthly_contribution: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    ai_analysis: Optional[str] = Field(
        default=None,
        description="Stored strategy advice from the advisor",
    )
    retirement_details: Optional[RetirementDetails] = None

    @field_validator("target_amount", "current_amount", "monthly_contribution", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        if isinstance(v, (str, float)):
            return Decimal(str(v))
        return v

    @model_validator(mode="after")
    def retirement_target_matches_income(self) -> "Goal":
        """A sized retirement goal must hold income / WITHDRAWAL_RATE."""
        if self.retirement_details is None:
            return self
        if self.type != GoalType.RETIREMENT:
            raise ValueError("retirement_details is only valid for RETIREMENT goals")
        expected = round_money(self.retirement_details.desired_monthly_income / WITHDRAWAL_RATE)
        if self.target_amount != expected:
            raise ValueError(
                f"target_amount must be {expected} for a desired income of "
                f"{self.retirement_details.desired_monthly_income}"
            )
        return self


class PartnerPermissions(BaseModel):
    share_net_worth: bool = False
    share_transactions: bool = False
    share_goals: bool = False


class PartnerConfig(BaseModel):
    """Partner sharing configuration."""

    is_connected: bool = False
    partner_name: Optional[str] = None
    permissions: PartnerPermissions = Field(default_factory=PartnerPermissions)


class UserProfile(BaseModel):
    """The single profile of a session, created by onboarding."""

    name: str = Field(min_length=1)
    knowledge_level: KnowledgeLevel = KnowledgeLevel.BEGINNER
    total_debt: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    liquid_assets: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))
    partner_config: PartnerConfig = Field(default_factory=PartnerConfig)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("total_debt", "liquid_assets", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        if isinstance(v, (str, float)):
            return Decimal(str(v))
        return v
