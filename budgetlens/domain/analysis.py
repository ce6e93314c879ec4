"""Pure functions for budget analysis and rule-based guidance.

This module contains the functional core for budget analysis:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

The heuristics loosely follow the 50/30/20 rule: 50% needs, 30% wants,
20% savings.
"""

import json
from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from budgetlens.domain.calculations import compute_totals, group_by_category
from budgetlens.domain.models import CategoryName, Money
from budgetlens.domain.transactions import Transaction

LARGE_TRANSACTION_SHARE = 0.2
MAX_EXPENSE_CATEGORIES = 10
DIVERSIFICATION_THRESHOLD = 50.0


@dataclass(frozen=True)
class CategorySpending:
    """Immutable share of total expenses for one category."""

    category: CategoryName
    amount: Money
    percentage: float


@dataclass(frozen=True)
class BudgetAnalysisBase:
    """Immutable numeric analysis of a transaction snapshot."""

    total_income: Money
    total_expenses: Money
    net_savings: Money
    savings_rate: float
    category_breakdown: list[CategorySpending]


@dataclass(frozen=True)
class BudgetAnalysis(BudgetAnalysisBase):
    """Immutable analysis with generated guidance."""

    recommendations: list[str] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)
    alerts: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryRule:
    """Threshold rule applied to the first category a predicate accepts.

    The message template receives ``category`` and ``percentage``.
    """

    name: str
    matches: Callable[[str], bool]
    threshold: float
    message: str

    def evaluate(self, breakdown: Sequence[CategorySpending]) -> str | None:
        """Return the rule's message if the first matching category is over threshold."""
        match = next((c for c in breakdown if self.matches(c.category)), None)
        if match is None or match.percentage <= self.threshold:
            return None
        return self.message.format(category=match.category, percentage=match.percentage)


def keyword_predicate(*keywords: str) -> Callable[[str], bool]:
    """Case-insensitive substring match against any of the keywords."""
    lowered = tuple(k.lower() for k in keywords)

    def matches(category: str) -> bool:
        name = category.lower()
        return any(keyword in name for keyword in lowered)

    return matches


DEFAULT_CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        name="housing",
        matches=keyword_predicate("housing", "rent"),
        threshold=35.0,
        message="🏠 Housing costs ({percentage:.1f}%) exceed the recommended 30%. Consider housing alternatives.",
    ),
    CategoryRule(
        name="food",
        matches=keyword_predicate("food", "groceries"),
        threshold=15.0,
        message="🍽️ Food spending ({percentage:.1f}%) is high. Meal planning could help reduce costs.",
    ),
)


def top_categories(breakdown: Sequence[CategorySpending], limit: int | None = None) -> list[CategorySpending]:
    """Order categories by amount, largest first.

    Ties keep their breakdown order.

    Args:
        breakdown: Category breakdown in any order.
        limit: Maximum number of categories to return (all when None).

    Returns:
        Sorted list of CategorySpending.
    """
    ranked = sorted(breakdown, key=lambda c: c.amount, reverse=True)
    return ranked if limit is None else ranked[:limit]


def analyze_budget(starting_balance: Money, transactions: Sequence[Transaction]) -> BudgetAnalysisBase:
    """Compute totals, savings rate and category breakdown.

    Args:
        starting_balance: Opening balance. Currently not used by any figure;
            savings rate is relative to income.
        transactions: Transactions to analyze.

    Returns:
        BudgetAnalysisBase with the breakdown in first-seen category order.
    """
    totals = compute_totals(transactions)
    income = totals.income_total
    expenses = totals.expense_total
    net_savings = Money(income - expenses)
    savings_rate = (net_savings / income) * 100 if income > 0 else 0.0

    breakdown = [
        CategorySpending(
            category=entry.category,
            amount=entry.total,
            percentage=(entry.total / expenses) * 100 if expenses > 0 else 0.0,
        )
        for entry in group_by_category(transactions, "expense")
    ]

    return BudgetAnalysisBase(
        total_income=income,
        total_expenses=expenses,
        net_savings=net_savings,
        savings_rate=savings_rate,
        category_breakdown=breakdown,
    )


def generate_recommendations(
    analysis: BudgetAnalysisBase,
    rules: Sequence[CategoryRule] = DEFAULT_CATEGORY_RULES,
) -> list[str]:
    """Generate budget recommendations from an analysis.

    Args:
        analysis: Numeric analysis.
        rules: Category rules evaluated after the savings-rate tier.

    Returns:
        Recommendations in a fixed order: savings tier, category rules,
        diversification.
    """
    recommendations: list[str] = []

    if analysis.savings_rate < 0:
        recommendations.append("⚠️ You are spending more than you earn. Reduce expenses or increase income urgently.")
    elif analysis.savings_rate < 10:
        recommendations.append("💡 Your savings rate is below 10%. Try to save at least 10-20% of your income.")
    elif analysis.savings_rate >= 20:
        recommendations.append("✅ Great job! You are saving 20% or more of your income.")

    for rule in rules:
        message = rule.evaluate(analysis.category_breakdown)
        if message:
            recommendations.append(message)

    largest = top_categories(analysis.category_breakdown, 1)
    if largest and largest[0].percentage > DIVERSIFICATION_THRESHOLD:
        recommendations.append(
            f"📊 {largest[0].category} represents {largest[0].percentage:.1f}% of spending. "
            "Consider diversifying expenses."
        )

    return recommendations


def generate_insights(analysis: BudgetAnalysisBase) -> list[str]:
    """Generate descriptive statements about income, savings and top categories."""
    insights: list[str] = []

    if analysis.total_income > 0:
        insights.append(
            f"📈 Monthly income: ${analysis.total_income:.2f}, Expenses: ${analysis.total_expenses:.2f}"
        )

    if analysis.net_savings > 0:
        insights.append(f"💰 Net savings this month: ${analysis.net_savings:.2f} ({analysis.savings_rate:.1f}%)")
    elif analysis.net_savings < 0:
        insights.append(f"⚠️ Deficit this month: ${abs(analysis.net_savings):.2f}")

    if analysis.category_breakdown:
        top3 = ", ".join(f"{c.category} ({c.percentage:.1f}%)" for c in top_categories(analysis.category_breakdown, 3))
        insights.append(f"📊 Top spending categories: {top3}")

    return insights


def generate_alerts(analysis: BudgetAnalysisBase, transactions: Sequence[Transaction]) -> list[str]:
    """Generate alerts for unusual spending patterns.

    Args:
        analysis: Numeric analysis of ``transactions``.
        transactions: The analyzed transactions.

    Returns:
        Alerts for large transactions, overspending and category sprawl.
    """
    alerts: list[str] = []

    if analysis.total_expenses > 0:
        threshold = analysis.total_expenses * LARGE_TRANSACTION_SHARE
        large = [t for t in transactions if t.type == "expense" and t.amount > threshold]
        if large:
            alerts.append(f"🔔 {len(large)} large transaction(s) detected (>{threshold:.2f})")

    if analysis.net_savings < 0:
        alerts.append("⚠️ Warning: Spending exceeds income this period")

    if len(analysis.category_breakdown) > MAX_EXPENSE_CATEGORIES:
        alerts.append("📝 Consider consolidating categories - you have many expense categories")

    return alerts


def perform_full_analysis(starting_balance: Money, transactions: Sequence[Transaction]) -> BudgetAnalysis:
    """Run the analyzer and every generator in a fixed order.

    Args:
        starting_balance: Opening balance (passed through to analyze_budget).
        transactions: Transactions to analyze.

    Returns:
        Complete BudgetAnalysis.
    """
    base = analyze_budget(starting_balance, transactions)

    return BudgetAnalysis(
        total_income=base.total_income,
        total_expenses=base.total_expenses,
        net_savings=base.net_savings,
        savings_rate=base.savings_rate,
        category_breakdown=base.category_breakdown,
        recommendations=generate_recommendations(base),
        insights=generate_insights(base),
        alerts=generate_alerts(base, transactions),
    )


def prepare_budget_data_for_ai(starting_balance: Money, transactions: Sequence[Transaction]) -> str:
    """Serialize an aggregate-only summary for an external advisor.

    Transaction ids and descriptions are never included.

    Returns:
        Indented JSON document.
    """
    analysis = analyze_budget(starting_balance, transactions)

    summary = {
        "income": analysis.total_income,
        "expenses": analysis.total_expenses,
        "savings": analysis.net_savings,
        "savingsRate": analysis.savings_rate,
        "categories": [
            {"category": c.category, "amount": c.amount, "percentage": c.percentage}
            for c in analysis.category_breakdown
        ],
        "transactionCount": len(transactions),
    }

    return json.dumps(summary, indent=2)


def analysis_to_dict(analysis: BudgetAnalysis) -> dict[str, Any]:
    """Convert an analysis to a JSON-serializable dictionary."""
    return asdict(analysis)


def analysis_from_dict(raw: dict[str, Any]) -> BudgetAnalysis:
    """Rebuild an analysis from ``analysis_to_dict`` output."""
    return BudgetAnalysis(
        total_income=Money(raw["total_income"]),
        total_expenses=Money(raw["total_expenses"]),
        net_savings=Money(raw["net_savings"]),
        savings_rate=raw["savings_rate"],
        category_breakdown=[
            CategorySpending(
                category=CategoryName(c["category"]),
                amount=Money(c["amount"]),
                percentage=c["percentage"],
            )
            for c in raw["category_breakdown"]
        ],
        recommendations=list(raw.get("recommendations", [])),
        insights=list(raw.get("insights", [])),
        alerts=list(raw.get("alerts", [])),
    )
