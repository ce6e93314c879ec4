"""AI advisor API interactions.

The advisor only ever adds free text on top of local analysis. Every
enrichment path falls back to the local result when the provider is
unavailable, slow, or answers with something unparseable.
"""

import json
import re
import sqlite3
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

import requests

from budgetlens.config import AdvisorSettings
from budgetlens.domain.analysis import (
    BudgetAnalysis,
    analysis_from_dict,
    analysis_to_dict,
    perform_full_analysis,
    prepare_budget_data_for_ai,
)
from budgetlens.domain.models import Money
from budgetlens.domain.report import MonthlyReport
from budgetlens.domain.transactions import Transaction, transaction_to_dict
from budgetlens.store.cache import Cache, cache_key

ANALYSIS_SYSTEM_PROMPT = (
    "You are a professional financial advisor. Provide specific, actionable budget advice "
    "based on the data provided. Be concise and practical."
)
REPORT_SYSTEM_PROMPT = (
    "You are a financial advisor creating a monthly report. Be encouraging but honest about financial health."
)
CHAT_SYSTEM_PROMPT = (
    "You are a helpful financial advisor. Answer questions about budgeting, saving, and personal finance. "
    "Be specific and reference the user's budget data when available. Keep responses concise (under 200 words)."
)
MISSING_KEY_MESSAGE = (
    "AI chat requires an OpenRouter API key. Please configure OPENROUTER_API_KEY in your environment."
)

_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"\s*```$")


class RateLimitExceeded(Exception):
    """Raised when a session has used up its chat requests for the window."""


class AdvisorUnavailable(Exception):
    """Raised when the chat provider cannot produce an answer."""


@dataclass(frozen=True)
class EnrichedAnalysis:
    """Analysis returned by the enrichment path."""

    analysis: BudgetAnalysis
    source: str  # "openrouter" or "local"
    reason: str  # "success", "missing-key", "error" or "unparseable"
    cached: bool = False


@dataclass(frozen=True)
class ChatReply:
    """Advisor chat answer."""

    message: str
    model: str
    timestamp: str


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def request_completion(
    settings: AdvisorSettings,
    system: str,
    user: str,
    max_tokens: int,
    title: str,
) -> tuple[str, str]:
    """Send one chat-completion request.

    Args:
        settings: Advisor settings; api_key must be set.
        system: System prompt.
        user: User prompt.
        max_tokens: Completion token cap.
        title: Request title sent in the X-Title header.

    Returns:
        Tuple of (content, model) where content is stripped text.

    Raises:
        requests.RequestException: If the request fails or returns an error status.
        ValueError: If the response body is not JSON.
        KeyError, IndexError, TypeError: If the response has an unexpected shape.
    """
    headers = {
        "Authorization": f"Bearer {settings.api_key}",
        "Content-Type": "application/json",
        "HTTP-Referer": "http://localhost",
        "X-Title": title,
    }
    body = {
        "model": settings.model,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        "max_tokens": max_tokens,
    }

    response = requests.post(
        f"{settings.base_url}/chat/completions",
        headers=headers,
        json=body,
        timeout=settings.timeout,
    )
    response.raise_for_status()
    data = response.json()
    content = (data["choices"][0]["message"]["content"] or "").strip()
    return content, data.get("model") or settings.model


def parse_recommendations(content: str) -> list[str] | None:
    """Parse a JSON array of recommendation strings, tolerating code fences.

    Returns:
        List of strings, or None if the content is not a JSON array.
    """
    text = _FENCE_END.sub("", _FENCE_START.sub("", content.strip())).strip()
    try:
        parsed = json.loads(text)
    except ValueError:
        return None

    if not isinstance(parsed, list):
        return None
    return [str(item) for item in parsed]


def enrich_analysis(
    starting_balance: Money,
    transactions: Sequence[Transaction],
    settings: AdvisorSettings,
    cache: Cache | None = None,
) -> EnrichedAnalysis:
    """Full analysis with AI recommendations appended after the local ones.

    Only successful enrichments are cached, keyed by a hash of the request.

    Args:
        starting_balance: Opening balance.
        transactions: Transactions to analyze.
        settings: Advisor settings.
        cache: Optional cache for enriched results.

    Returns:
        EnrichedAnalysis; the analysis is the local one when enrichment fails.
    """
    local = perform_full_analysis(starting_balance, transactions)

    if not settings.api_key:
        return EnrichedAnalysis(analysis=local, source="local", reason="missing-key")

    key = cache_key(
        "analysis",
        {
            "startingBalance": starting_balance,
            "transactions": [transaction_to_dict(t) for t in transactions],
            "model": settings.model,
        },
    )
    # Cache errors never change the outcome of an enrichment.
    hit = None
    if cache is not None:
        try:
            hit = cache.get(key)
        except sqlite3.Error:
            pass
    if hit is not None:
        return EnrichedAnalysis(analysis=analysis_from_dict(hit), source="openrouter", reason="success", cached=True)

    budget_data = prepare_budget_data_for_ai(starting_balance, transactions)
    user = (
        f"Analyze this budget data and provide 3-5 personalized recommendations:\n\n{budget_data}\n\n"
        "Return a JSON array of recommendation strings."
    )

    try:
        content, _ = request_completion(settings, ANALYSIS_SYSTEM_PROMPT, user, 400, "Budget Analysis")
    except (requests.RequestException, ValueError, KeyError, IndexError, TypeError):
        return EnrichedAnalysis(analysis=local, source="local", reason="error")

    extra = parse_recommendations(content) if content else None
    if not extra:
        return EnrichedAnalysis(analysis=local, source="local", reason="unparseable")

    enriched = replace(local, recommendations=[*local.recommendations, *extra])
    if cache is not None:
        try:
            cache.set(key, analysis_to_dict(enriched))
        except sqlite3.Error:
            pass

    return EnrichedAnalysis(analysis=enriched, source="openrouter", reason="success")


def enrich_report(
    report: MonthlyReport,
    starting_balance: Money,
    transactions: Sequence[Transaction],
    settings: AdvisorSettings,
) -> MonthlyReport:
    """Replace the report summary with an AI-written one when available.

    Returns:
        The enriched report, or the given report unchanged on any failure.
    """
    if not settings.api_key:
        return report

    budget_data = prepare_budget_data_for_ai(starting_balance, transactions)
    user = f"Create a brief monthly financial summary (2-3 sentences) based on this data:\n\n{budget_data}"

    try:
        summary, model = request_completion(settings, REPORT_SYSTEM_PROMPT, user, 200, "Monthly Report")
    except (requests.RequestException, ValueError, KeyError, IndexError, TypeError):
        return report

    if not summary:
        return report
    return replace(report, summary=summary, model=model)


class SlidingWindowRateLimiter:
    """Allow at most N requests per rolling window for each session.

    Request timestamps live in the injected store under
    ``ratelimit:<session_id>``.
    """

    def __init__(
        self,
        store: Cache,
        max_requests: int = 5,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock

    def allow(self, session_id: str) -> bool:
        """Record a request if the session still has room in its window.

        Returns:
            True if the request is allowed, False if the limit is reached.
        """
        now = self.clock()
        key = f"ratelimit:{session_id}"
        history: list[float] = self.store.get(key) or []
        recent = [stamp for stamp in history if now - stamp < self.window_seconds]

        if len(recent) >= self.max_requests:
            self.store.set(key, recent)
            return False

        recent.append(now)
        self.store.set(key, recent)
        return True


def ask_advisor(
    message: str,
    settings: AdvisorSettings,
    limiter: SlidingWindowRateLimiter,
    session_id: str = "default",
    context: dict[str, Any] | None = None,
) -> ChatReply:
    """Answer a budgeting question, optionally with the user's budget data.

    Args:
        message: Question text.
        settings: Advisor settings.
        limiter: Per-session rate limiter.
        session_id: Session identifier for rate limiting.
        context: Optional dict with "starting_balance" and "transactions".

    Returns:
        ChatReply from the provider, or a fixed notice when no key is set.

    Raises:
        ValueError: If the message is empty.
        RateLimitExceeded: If the session exceeded its request budget.
        AdvisorUnavailable: If the provider request fails.
    """
    if not message.strip():
        raise ValueError("Missing message")

    if not limiter.allow(session_id):
        raise RateLimitExceeded("Rate limit exceeded. Please wait before sending more messages.")

    if not settings.api_key:
        return ChatReply(message=MISSING_KEY_MESSAGE, model="fallback", timestamp=_now_iso())

    user = message
    if context and context.get("transactions"):
        budget_data = prepare_budget_data_for_ai(
            Money(context.get("starting_balance") or 0.0), context["transactions"]
        )
        user = f"{message}\n\nUser's current budget data:\n{budget_data}"

    try:
        content, model = request_completion(settings, CHAT_SYSTEM_PROMPT, user, 300, "Budget Chat")
    except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as e:
        raise AdvisorUnavailable(f"Advisor request failed: {e}") from e

    return ChatReply(
        message=content or "Sorry, I could not generate a response.",
        model=model,
        timestamp=_now_iso(),
    )
