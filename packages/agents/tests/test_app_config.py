"""Tests for the configuration system."""

import logging
from decimal import Decimal

import pytest
import structlog

from wealthwise_agents.config import AdvisorConfig, LLMConfig, WealthWiseConfig, load_config
from wealthwise_agents.log import configure_logging
from wealthwise_core.config import InstallmentDebitMode, LedgerSettings
from wealthwise_core.exceptions import ConfigurationError


class TestLLMConfig:
    """Test suite for LLMConfig."""

    def test_default_values(self):
        """LLMConfig should have sensible defaults."""
        config = LLMConfig()

        assert config.model == "claude-sonnet-4-20250514"
        assert config.temperature == 0.5
        assert config.max_tokens == 1024
        assert config.timeout == 30.0

    def test_temperature_validation(self):
        """Temperature should be between 0.0 and 1.0."""
        with pytest.raises(ValueError):
            LLMConfig(temperature=-0.1)

        with pytest.raises(ValueError):
            LLMConfig(temperature=1.5)

    def test_model_validation(self):
        """Model name cannot be empty."""
        with pytest.raises(ValueError):
            LLMConfig(model="   ")

    def test_from_environment(self, monkeypatch):
        """LLMConfig should load from environment variables."""
        monkeypatch.setenv("WEALTHWISE_LLM_MODEL", "claude-3-5-haiku-latest")
        monkeypatch.setenv("WEALTHWISE_LLM_MAX_TOKENS", "2048")
        monkeypatch.setenv("WEALTHWISE_LLM_API_KEY", "env-api-key")

        config = LLMConfig()

        assert config.model == "claude-3-5-haiku-latest"
        assert config.max_tokens == 2048
        assert config.api_key == "env-api-key"


class TestAdvisorConfig:
    """Test suite for AdvisorConfig."""

    def test_default_values(self):
        config = AdvisorConfig()

        assert config.enabled is True
        assert config.recent_transaction_limit == 30
        assert config.news_count == 3

    def test_news_count_bounds(self):
        with pytest.raises(ValueError):
            AdvisorConfig(news_count=0)

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("WEALTHWISE_ADVISOR_ENABLED", "false")
        assert AdvisorConfig().enabled is False


class TestLedgerSettings:
    """Test suite for LedgerSettings."""

    def test_default_values(self):
        settings = LedgerSettings()

        assert settings.cdi_annual_rate == Decimal("0.1125")
        assert settings.strict_redemption is True
        assert settings.installment_debit == InstallmentDebitMode.FULL
        assert settings.default_credit_limit == Decimal("5000")

    def test_float_rate_coerced(self):
        assert LedgerSettings(cdi_annual_rate=0.105).cdi_annual_rate == Decimal("0.105")

    def test_rate_bounds(self):
        with pytest.raises(ValueError):
            LedgerSettings(cdi_annual_rate=Decimal("1.5"))

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("WEALTHWISE_LEDGER_INSTALLMENT_DEBIT", "first_installment")
        monkeypatch.setenv("WEALTHWISE_LEDGER_STRICT_REDEMPTION", "false")

        settings = LedgerSettings()

        assert settings.installment_debit == InstallmentDebitMode.FIRST_INSTALLMENT
        assert settings.strict_redemption is False


class TestWealthWiseConfig:
    """Test suite for WealthWiseConfig."""

    def test_nested_config_access(self):
        config = WealthWiseConfig()

        assert config.llm.model == "claude-sonnet-4-20250514"
        assert config.ledger.cdi_annual_rate == Decimal("0.1125")
        assert config.advisor.language == "Portuguese"

    def test_environment_validation(self):
        with pytest.raises(ValueError):
            WealthWiseConfig(env="invalid-env")

    def test_environment_case_insensitive(self):
        assert WealthWiseConfig(env="PRODUCTION").env == "production"

    def test_log_level_validation(self):
        with pytest.raises(ValueError):
            WealthWiseConfig(log_level="NOTVALID")

        assert WealthWiseConfig(log_level="debug").log_level == "DEBUG"

    def test_environment_properties(self):
        assert WealthWiseConfig(env="production").is_production is True
        assert WealthWiseConfig(env="development").is_development is True
        assert WealthWiseConfig(log_level="DEBUG").is_debug is True

    def test_loads_from_dotenv_file(self, tmp_path, monkeypatch):
        """WealthWiseConfig should load from .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text(
            "WEALTHWISE_ENV=staging\n"
            "WEALTHWISE_LOG_LEVEL=ERROR\n"
            "WEALTHWISE_LLM_MODEL=test-model\n"
            "WEALTHWISE_LEDGER_CDI_ANNUAL_RATE=0.1\n"
        )
        monkeypatch.chdir(tmp_path)

        config = WealthWiseConfig()

        assert config.env == "staging"
        assert config.log_level == "ERROR"
        assert config.llm.model == "test-model"
        assert config.ledger.cdi_annual_rate == Decimal("0.1")


class TestLoadConfig:
    """Test suite for load_config."""

    def test_loads_defaults(self):
        assert load_config().env == "development"

    def test_invalid_setting_raises_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(log_level="LOUD")

        assert exc_info.value.config_key == "log_level"
        assert exc_info.value.recoverable is False

    def test_invalid_env_variable(self, monkeypatch):
        monkeypatch.setenv("WEALTHWISE_ENV", "qa")
        with pytest.raises(ConfigurationError):
            load_config()


class TestConfigureLogging:
    """Test suite for configure_logging."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def test_production_renders_json(self, capsys):
        configure_logging(WealthWiseConfig(env="production", log_level="INFO"))
        structlog.get_logger("wealthwise.test").info("bill_paid", amount="10.00")

        out = capsys.readouterr().out
        assert '"event": "bill_paid"' in out
        assert '"amount": "10.00"' in out

    def test_level_filters_debug(self, capsys):
        configure_logging(WealthWiseConfig(env="development", log_level="WARNING"))
        structlog.get_logger("wealthwise.test").info("hidden_event")

        assert "hidden_event" not in capsys.readouterr().out
