"""WealthWise Agents - LLM advisory services and application configuration."""

__version__ = "0.1.0"

from .advisor import FinancialAdvisor, NewsItem, StatementItem, create_advisor
from .config import AdvisorConfig, LLMConfig, WealthWiseConfig, load_config
from .log import configure_logging

__all__ = [
    "FinancialAdvisor",
    "NewsItem",
    "StatementItem",
    "create_advisor",
    "AdvisorConfig",
    "LLMConfig",
    "WealthWiseConfig",
    "load_config",
    "configure_logging",
]
