"""Pure functions for building the local monthly report.

This module contains the functional core for monthly reporting:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test
"""

from collections.abc import Sequence
from dataclasses import dataclass

from budgetlens.dates import month_label
from budgetlens.domain.analysis import BudgetAnalysis, CategorySpending, top_categories
from budgetlens.domain.models import CategoryName, FinancialHealth, Money, Month, Trend

REPORT_CATEGORY_LIMIT = 5
REPORT_ACTION_LIMIT = 5
HIGH_SHARE_THRESHOLD = 30.0
TREND_BAND = 0.10
LOCAL_MODEL = "local-analysis"


@dataclass(frozen=True)
class KeyMetrics:
    """Immutable headline figures for a report."""

    income: Money
    expenses: Money
    savings: Money
    savings_rate: float


@dataclass(frozen=True)
class CategoryInsight:
    """Immutable per-category line of a monthly report."""

    category: CategoryName
    spent: Money
    trend: Trend
    recommendation: str


@dataclass(frozen=True)
class MonthlyReport:
    """Immutable monthly financial report."""

    month: str
    summary: str
    financial_health: FinancialHealth
    key_metrics: KeyMetrics
    category_insights: list[CategoryInsight]
    action_items: list[str]
    generated_at: str
    model: str = LOCAL_MODEL


def financial_health(savings_rate: float) -> FinancialHealth:
    """Classify financial health by savings rate.

    Args:
        savings_rate: Savings rate as a percentage of income.

    Returns:
        "excellent" (>= 20), "good" (>= 10), "needs-attention" (< 0), else "fair".
    """
    if savings_rate >= 20:
        return "excellent"
    if savings_rate >= 10:
        return "good"
    if savings_rate < 0:
        return "needs-attention"
    return "fair"


def spending_trend(current: float, previous: float | None) -> Trend:
    """Compare a category's spending with the previous month.

    Changes within 10% of the previous amount count as stable.
    """
    if previous is None:
        return "stable"
    if previous <= 0:
        return "up" if current > 0 else "stable"

    change = (current - previous) / previous
    if change > TREND_BAND:
        return "up"
    if change < -TREND_BAND:
        return "down"
    return "stable"


def summarize(analysis: BudgetAnalysis) -> str:
    """One-sentence summary of income, spending and savings rate."""
    return (
        f"You earned ${analysis.total_income:,.2f} and spent ${analysis.total_expenses:,.2f}, "
        f"with a savings rate of {analysis.savings_rate:.1f}%."
    )


def build_monthly_report(
    analysis: BudgetAnalysis,
    month: Month,
    generated_at: str,
    previous_breakdown: Sequence[CategorySpending] | None = None,
) -> MonthlyReport:
    """Build the local monthly report for an analyzed month.

    Args:
        analysis: Full analysis of the month's transactions.
        month: Month in YYYY-MM format.
        generated_at: ISO timestamp to stamp the report with.
        previous_breakdown: Category breakdown of the previous month, if known.

    Returns:
        MonthlyReport produced by local analysis.
    """
    previous = None
    if previous_breakdown is not None:
        previous = {c.category: c.amount for c in previous_breakdown}

    insights = [
        CategoryInsight(
            category=c.category,
            spent=c.amount,
            trend=spending_trend(c.amount, previous.get(c.category, 0.0) if previous is not None else None),
            recommendation=(
                f"Consider reducing {c.category} spending"
                if c.percentage > HIGH_SHARE_THRESHOLD
                else "Keep up the good work"
            ),
        )
        for c in top_categories(analysis.category_breakdown, REPORT_CATEGORY_LIMIT)
    ]

    return MonthlyReport(
        month=month_label(month),
        summary=summarize(analysis),
        financial_health=financial_health(analysis.savings_rate),
        key_metrics=KeyMetrics(
            income=analysis.total_income,
            expenses=analysis.total_expenses,
            savings=analysis.net_savings,
            savings_rate=analysis.savings_rate,
        ),
        category_insights=insights,
        action_items=analysis.recommendations[:REPORT_ACTION_LIMIT],
        generated_at=generated_at,
    )


def calculate_histogram_bar_length(
    amount: Money,
    max_amount: Money,
    bar_width: int,
) -> int:
    """Calculate histogram bar length.

    Args:
        amount: Amount to display.
        max_amount: Maximum amount in dataset.
        bar_width: Maximum bar width in characters.

    Returns:
        Bar length in characters.
    """
    if max_amount <= 0:
        return 0
    return int((abs(amount) / max_amount) * bar_width)
