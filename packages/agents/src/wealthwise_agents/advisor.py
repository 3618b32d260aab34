"""
Financial Advisor backed by the Anthropic Messages API.

Builds a plain-text context from the user's ledger (net worth, CDI rate,
profile, investments and recent transactions) and asks Claude for advice,
goal strategies, news headlines or bank statement extraction.

Advisory output is optional: every public method answers with a fixed
fallback when the advisor is offline, disabled, the API call fails or the
response cannot be parsed. Nothing here raises to the caller.
"""

import datetime as dt
import json
import os
import re
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

import structlog
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from wealthwise_core.exceptions import AdvisorError
from wealthwise_core.ledger import net_worth
from wealthwise_core.models import (
    Account,
    Goal,
    GoalType,
    Investment,
    KnowledgeLevel,
    Transaction,
    TransactionCategory,
    UserProfile,
)

from .config import WealthWiseConfig

logger = structlog.get_logger()


# =============================================================================
# FALLBACK ANSWERS
# =============================================================================

OFFLINE_ANSWER = "Erro: Chave de API não configurada. Configure WEALTHWISE_LLM_API_KEY."
CONNECTION_ERROR_ANSWER = "Desculpe, não foi possível conectar ao serviço de IA agora."
OFFLINE_INSIGHT = "Organize suas finanças para crescer (Modo Offline)."
EMPTY_INSIGHT = "Analise seus gastos mensais."
ERROR_INSIGHT = "Mantenha o foco nos objetivos."
OFFLINE_GOAL_ANALYSIS = "Configuração de IA necessária para análise detalhada."
EMPTY_GOAL_ANALYSIS = "Não foi possível gerar análise no momento."
ERROR_GOAL_ANALYSIS = "Erro ao conectar com o estrategista financeiro."


class NewsItem(BaseModel):
    """A headline with a one-sentence summary."""

    title: str = Field(min_length=1)
    summary: str


class StatementItem(BaseModel):
    """A line read from a bank statement image."""

    date: dt.date
    description: str
    amount: Decimal = Field(description="Negative for debits, positive for credits")
    category: TransactionCategory = TransactionCategory.OTHER

    @field_validator("category", mode="before")
    @classmethod
    def unknown_category_is_other(cls, v: Any) -> Any:
        if v is None:
            return TransactionCategory.OTHER
        if isinstance(v, str):
            if v in TransactionCategory.__members__:
                return TransactionCategory[v]
            if v not in {c.value for c in TransactionCategory}:
                return TransactionCategory.OTHER
        return v


START_INVESTING_NEWS = [
    NewsItem(
        title="Comece a investir",
        summary="Adicione ativos para receber notícias personalizadas.",
    )
]
OFFLINE_NEWS = [
    NewsItem(title="Mercado Financeiro", summary="Acompanhe os indicadores econômicos.")
]
ERROR_NEWS = [
    NewsItem(title="Mercado Financeiro", summary="Acompanhe a volatilidade do Ibovespa.")
]


def _money(value: Decimal) -> str:
    return f"R$ {value:.2f}"


class FinancialAdvisor:
    """
    Conversational financial planner for Brazilian households.

    The Anthropic client is injected so tests and offline sessions can run
    without network access. Use ``create_advisor`` to build one from
    configuration.
    """

    def __init__(self, config: Optional[WealthWiseConfig] = None, client: Any = None):
        """
        Initialize the advisor.

        Args:
            config: Application configuration. Defaults to one loaded from
                the environment.
            client: An ``anthropic.Anthropic`` compatible client, or None for
                offline mode.
        """
        self.config = config or WealthWiseConfig()
        self.client = client

    @property
    def is_online(self) -> bool:
        return self.client is not None and self.config.advisor.enabled

    # =========================================================================
    # CONTEXT
    # =========================================================================

    def build_context(
        self,
        accounts: Sequence[Account],
        transactions: Sequence[Transaction],
        investments: Sequence[Investment] = (),
        profile: Optional[UserProfile] = None,
    ) -> str:
        """
        Build the system prompt describing the user's finances.

        Transactions are expected newest first; only the configured number
        of most recent ones is included.
        """
        cdi = self.config.ledger.cdi_annual_rate
        limit = self.config.advisor.recent_transaction_limit
        level = profile.knowledge_level.value if profile else KnowledgeLevel.BEGINNER.value
        debt = profile.total_debt if profile else Decimal("0")
        assets = profile.liquid_assets if profile else Decimal("0")

        recent = "\n".join(
            f"- {t.date.isoformat()}: {t.merchant} ({_money(t.amount)}) [{t.category.value}]"
            for t in list(transactions)[:limit]
        ) or "No transactions yet."

        lines = []
        for inv in investments:
            if inv.type.is_quantity_bearing:
                lines.append(
                    f"- {inv.type.value} {inv.ticker or inv.name} ({inv.quantity or 0} cotas): "
                    f"{_money(inv.current_value)} (Div: {inv.last_dividend or 0}) "
                    f"- Início: {inv.start_date.isoformat()}"
                )
            else:
                index = inv.index.value if inv.index else "PRE"
                lines.append(
                    f"- Renda Fixa {inv.name} ({inv.percentage or 0}% {index}): "
                    f"{_money(inv.current_value)} - Início: {inv.start_date.isoformat()}"
                )
        investment_summary = "\n".join(lines) or "No specific investments tracked yet."

        return f"""You are WealthWise AI, an advanced financial planner for Brazil.
User Level: {level}
User Debt: {_money(debt)}
User Assets: {_money(assets)}

Context (BRL):
- Total Net Worth: {_money(net_worth(accounts, investments))}
- CDI: {cdi * 100:.2f}%

Investments:
{investment_summary}

Recent Txns:
{recent}

Tasks:
1. Answer questions based on their specific context.
2. If they are beginner, explain simple concepts. If advanced, go deep into technicals.
3. Always respect Brazilian tax laws (IR, IOF).
4. Answer in {self.config.advisor.language}."""

    # =========================================================================
    # API CALL
    # =========================================================================

    def _complete(
        self,
        operation: str,
        content: Any,
        system: Optional[str] = None,
    ) -> str:
        """Send one user message and return the concatenated text blocks."""
        kwargs: dict[str, Any] = {
            "model": self.config.llm.model,
            "max_tokens": self.config.llm.max_tokens,
            "temperature": self.config.llm.temperature,
            "messages": [{"role": "user", "content": content}],
        }
        if system:
            kwargs["system"] = system

        try:
            response = self.client.messages.create(**kwargs)
            text = "".join(
                getattr(block, "text", "") or ""
                for block in response.content
                if getattr(block, "type", "text") == "text"
            )
        except Exception as e:
            raise AdvisorError(
                "Advisory call failed",
                operation=operation,
                api_error=str(e),
            ) from e

        logger.debug("advisor_response", operation=operation, length=len(text))
        return text.strip()

    def _parse_json_array(self, response: str) -> Optional[list[Any]]:
        """Parse a JSON array from the response, tolerating code fences."""
        try:
            parsed = json.loads(response.strip())
            return parsed if isinstance(parsed, list) else None
        except json.JSONDecodeError:
            pass

        # Look for JSON in code blocks, then for a bare array
        for pattern in (r"```(?:json)?\s*(\[.*?\])\s*```", r"(\[.*\])"):
            json_match = re.search(pattern, response, re.DOTALL)
            if json_match:
                try:
                    parsed = json.loads(json_match.group(1))
                except json.JSONDecodeError:
                    continue
                return parsed if isinstance(parsed, list) else None

        return None

    # =========================================================================
    # ADVISORY OPERATIONS
    # =========================================================================

    def ask(
        self,
        question: str,
        accounts: Sequence[Account] = (),
        transactions: Sequence[Transaction] = (),
        investments: Sequence[Investment] = (),
        profile: Optional[UserProfile] = None,
    ) -> str:
        """Answer a free-form question in the user's financial context."""
        if not self.is_online:
            return OFFLINE_ANSWER

        system = self.build_context(accounts, transactions, investments, profile)
        try:
            answer = self._complete("ask", question, system=system)
        except AdvisorError as e:
            logger.warning("advisor_call_failed", operation="ask", error=e.api_error)
            return CONNECTION_ERROR_ANSWER
        return answer or CONNECTION_ERROR_ANSWER

    def monthly_insight(
        self,
        accounts: Sequence[Account],
        profile: Optional[UserProfile] = None,
    ) -> str:
        """One short financial tip based on the current balance."""
        if not self.is_online:
            return OFFLINE_INSIGHT

        total_balance = sum((a.balance for a in accounts), Decimal("0"))
        level = profile.knowledge_level.value if profile else KnowledgeLevel.BEGINNER.value
        prompt = (
            f"Context: User level is {level}.\n"
            f"Based on balance {_money(total_balance)} and recent activity, "
            f"give 1 short financial tip in {self.config.advisor.language}."
        )
        try:
            tip = self._complete("monthly_insight", prompt)
        except AdvisorError as e:
            logger.warning("advisor_call_failed", operation="monthly_insight", error=e.api_error)
            return ERROR_INSIGHT
        return tip or EMPTY_INSIGHT

    def analyze_goal(
        self,
        goal: Goal,
        profile: UserProfile,
        investments: Sequence[Investment] = (),
    ) -> str:
        """
        Suggest a strategy for reaching a goal.

        Purchases compare paying cash against financing; retirement goals
        check the current pace and suggest an allocation for the horizon.
        """
        if not self.is_online:
            return OFFLINE_GOAL_ANALYSIS

        specifics = ""
        if goal.type == GoalType.RETIREMENT and goal.retirement_details:
            details = goal.retirement_details
            specifics = (
                "RETIREMENT SPECIFICS:\n"
                f"Current Age: {details.current_age}\n"
                f"Retirement Age: {details.retirement_age}\n"
                f"Desired Monthly Income: {details.desired_monthly_income}\n"
            )

        portfolio = ", ".join(inv.ticker or inv.name for inv in investments) or "none"
        deadline = goal.deadline.isoformat() if goal.deadline else "Undefined"
        cdi = self.config.ledger.cdi_annual_rate

        prompt = f"""I am {profile.name}, my knowledge level is {profile.knowledge_level.value}.
I have a goal: "{goal.title}"
Target: {_money(goal.target_amount)}
Current Saved: {_money(goal.current_amount)}
Type: {goal.type.value}
Deadline: {deadline}
{specifics}
My Total Liquid Assets: {_money(profile.liquid_assets)}
My Total Debt: {_money(profile.total_debt)}
My Portfolio: {portfolio}

Current Brazil Market: CDI is {cdi * 100:.2f}%.

Task:
Analyze the best strategy for this goal.
If it's a purchase (e.g., car/house), compare paying cash vs financing and keeping money invested.
If it's retirement, calculate if the current pace is enough, suggest asset allocation (e.g., % in IPCA+ bonds vs Stocks) based on the time horizon.

Return a concise, markdown formatted strategy advice (max 200 words) in {self.config.advisor.language}. Use bullet points."""

        try:
            analysis = self._complete("analyze_goal", prompt)
        except AdvisorError as e:
            logger.warning("advisor_call_failed", operation="analyze_goal", error=e.api_error)
            return ERROR_GOAL_ANALYSIS

        logger.info("goal_analyzed", goal_id=goal.id, goal_type=goal.type.value)
        return analysis or EMPTY_GOAL_ANALYSIS

    def personalized_news(self, investments: Iterable[Investment]) -> list[NewsItem]:
        """Headlines relevant to the assets the user holds."""
        investments = list(investments)
        if not investments:
            return list(START_INVESTING_NEWS)
        if not self.is_online:
            return list(OFFLINE_NEWS)

        tickers = ", ".join(inv.ticker or inv.name for inv in investments)
        prompt = (
            f"Generate {self.config.advisor.news_count} fictional but realistic financial news "
            f"headlines and one-sentence summaries relevant to these assets: {tickers}.\n"
            "Context: Brazil Market, recent trends.\n"
            'Return ONLY a JSON array: [{"title": "...", "summary": "..."}]'
        )

        try:
            raw = self._complete("personalized_news", prompt)
        except AdvisorError as e:
            logger.warning("advisor_call_failed", operation="personalized_news", error=e.api_error)
            return list(ERROR_NEWS)

        parsed = self._parse_json_array(raw)
        if parsed is None:
            logger.warning("advisor_unparseable_response", operation="personalized_news")
            return list(ERROR_NEWS)
        try:
            return [NewsItem.model_validate(item) for item in parsed]
        except PydanticValidationError as e:
            logger.warning(
                "advisor_unparseable_response",
                operation="personalized_news",
                error_count=e.error_count(),
            )
            return list(ERROR_NEWS)

    def extract_statement(
        self,
        image_base64: str,
        media_type: str = "image/png",
    ) -> list[StatementItem]:
        """
        Read transactions from a bank statement image.

        Returns an empty list when nothing could be extracted; callers
        review the items before importing them as transactions.
        """
        if not self.is_online or not image_base64:
            return []

        categories = ", ".join(c.value for c in TransactionCategory)
        prompt = f"""Extract every transaction from this bank statement image.

INSTRUCTIONS:
1. Dates in YYYY-MM-DD format
2. Amounts as numbers, negative for debits and positive for credits
3. Category must be one of: {categories}

Return ONLY a JSON array. No explanation or additional text.

Example format:
[{{"date": "2024-05-10", "description": "Supermercado", "amount": -150.25, "category": "Alimentação"}}]"""

        content = [
            {
                "type": "image",
                "source": {"type": "base64", "media_type": media_type, "data": image_base64},
            },
            {"type": "text", "text": prompt},
        ]

        try:
            raw = self._complete("extract_statement", content)
        except AdvisorError as e:
            logger.warning("advisor_call_failed", operation="extract_statement", error=e.api_error)
            return []

        parsed = self._parse_json_array(raw) or []
        items = []
        skipped = 0
        for entry in parsed:
            try:
                items.append(StatementItem.model_validate(entry))
            except PydanticValidationError:
                skipped += 1

        logger.info("statement_extracted", items=len(items), skipped=skipped)
        return items


def create_advisor(config: Optional[WealthWiseConfig] = None) -> FinancialAdvisor:
    """
    Factory function to create a FinancialAdvisor from configuration.

    Falls back to an offline advisor when the anthropic package is not
    installed or no API key is available, so advisory features degrade
    gracefully when the LLM is not configured.
    """
    config = config or WealthWiseConfig()
    if not config.advisor.enabled:
        return FinancialAdvisor(config)

    api_key = config.llm.api_key or os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        logger.info("advisor_offline", reason="missing_api_key")
        return FinancialAdvisor(config)

    try:
        import anthropic
    except ImportError:
        logger.info("advisor_offline", reason="anthropic_not_installed")
        return FinancialAdvisor(config)

    client = anthropic.Anthropic(api_key=api_key, timeout=config.llm.timeout)
    return FinancialAdvisor(config, client=client)
