"""Configuration system for WealthWise.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults for the advisor and the ledger
engine.

Usage:
    from wealthwise_agents.config import WealthWiseConfig

    # Load from environment variables and .env file
    config = WealthWiseConfig()

    # Access LLM settings
    print(config.llm.model)
    print(config.llm.temperature)

    # Access ledger settings
    print(config.ledger.cdi_annual_rate)
"""

from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wealthwise_core.config import LedgerSettings
from wealthwise_core.exceptions import ConfigurationError


class LLMConfig(BaseSettings):
    """LLM configuration settings.

    Configuration for the language model behind the advisor. Supports
    environment variables with the prefix WEALTHWISE_LLM_.

    Environment Variables:
        WEALTHWISE_LLM_MODEL: Model name (e.g., claude-sonnet-4-20250514)
        WEALTHWISE_LLM_TEMPERATURE: Sampling temperature (0.0-1.0)
        WEALTHWISE_LLM_MAX_TOKENS: Maximum output tokens
        WEALTHWISE_LLM_API_KEY: Anthropic API key
        WEALTHWISE_LLM_TIMEOUT: Request timeout in seconds
    """

    model_config = SettingsConfigDict(
        env_prefix="WEALTHWISE_LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model identifier for the LLM",
    )
    temperature: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Sampling temperature for generation",
    )
    max_tokens: int = Field(
        default=1024,
        gt=0,
        le=200000,
        description="Maximum tokens in response",
    )
    api_key: Optional[str] = Field(
        default=None,
        description="API key for the LLM provider",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds",
    )

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        """Ensure model name is not empty."""
        if not v or not v.strip():
            raise ValueError("Model name cannot be empty")
        return v.strip()


class AdvisorConfig(BaseSettings):
    """Advisor behavior settings.

    Environment Variables:
        WEALTHWISE_ADVISOR_ENABLED: Turn advisory calls on or off
        WEALTHWISE_ADVISOR_RECENT_TRANSACTION_LIMIT: Transactions included in prompts
        WEALTHWISE_ADVISOR_NEWS_COUNT: Headlines requested for personalized news
        WEALTHWISE_ADVISOR_LANGUAGE: Answer language
    """

    model_config = SettingsConfigDict(
        env_prefix="WEALTHWISE_ADVISOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = Field(
        default=True,
        description="Call the LLM; when False every method returns its fallback",
    )
    recent_transaction_limit: int = Field(
        default=30,
        ge=0,
        le=500,
        description="Most recent transactions included in the context",
    )
    news_count: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Number of personalized headlines requested",
    )
    language: str = Field(
        default="Portuguese",
        description="Language the advisor answers in",
    )


class WealthWiseConfig(BaseSettings):
    """Root configuration for WealthWise.

    Environment Variables:
        WEALTHWISE_ENV: Environment name (development, staging, production, test)
        WEALTHWISE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        # Load all configuration from environment
        config = WealthWiseConfig()

        # Override specific settings
        config = WealthWiseConfig(
            llm=LLMConfig(model="claude-3-5-haiku-latest"),
            advisor=AdvisorConfig(enabled=False),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="WEALTHWISE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    # Nested configuration
    llm: LLMConfig = Field(default_factory=LLMConfig)
    advisor: AdvisorConfig = Field(default_factory=AdvisorConfig)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.env == "development"

    @property
    def is_debug(self) -> bool:
        return self.log_level == "DEBUG"


def load_config(**overrides) -> WealthWiseConfig:
    """Load configuration from the environment, failing with one clear error.

    Raises:
        ConfigurationError: If any setting is missing or invalid.
    """
    try:
        return WealthWiseConfig(**overrides)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(p) for p in first["loc"])
        raise ConfigurationError(
            f"Invalid configuration: {first['msg']}",
            config_key=key or None,
            expected=first["msg"],
            actual=first.get("input"),
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e
