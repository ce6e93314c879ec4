"""Tests for budgetlens.domain.analysis pure functions."""

import json

import pytest

from budgetlens.domain.analysis import (
    BudgetAnalysisBase,
    CategoryRule,
    CategorySpending,
    analysis_from_dict,
    analysis_to_dict,
    analyze_budget,
    generate_alerts,
    generate_insights,
    generate_recommendations,
    keyword_predicate,
    perform_full_analysis,
    prepare_budget_data_for_ai,
    top_categories,
)
from budgetlens.domain.models import CategoryName, Description, Money
from budgetlens.domain.transactions import Transaction

SAVE_MORE = "💡 Your savings rate is below 10%. Try to save at least 10-20% of your income."
PRAISE = "✅ Great job! You are saving 20% or more of your income."
OVERSPEND = "⚠️ You are spending more than you earn. Reduce expenses or increase income urgently."


def make_txn(txn_type: str, amount: float, category: str = "Misc", txn_id: str = "t") -> Transaction:
    return Transaction(
        id=txn_id,
        type=txn_type,
        date="2024-05-10",
        amount=Money(amount),
        category=CategoryName(category),
        description=Description("secret note"),
    )


def make_base(breakdown: list[tuple[str, float, float]], income: float = 1000.0) -> BudgetAnalysisBase:
    """Build an analysis from (category, amount, percentage) tuples."""
    expenses = sum(amount for _, amount, _ in breakdown)
    net = income - expenses
    return BudgetAnalysisBase(
        total_income=Money(income),
        total_expenses=Money(expenses),
        net_savings=Money(net),
        savings_rate=(net / income) * 100 if income else 0.0,
        category_breakdown=[
            CategorySpending(category=CategoryName(c), amount=Money(a), percentage=p) for c, a, p in breakdown
        ],
    )


SCENARIO = [
    make_txn("income", 3200, "Salary", "1"),
    make_txn("expense", 1200, "Housing", "2"),
    make_txn("expense", 150, "Food", "3"),
]


class TestAnalyzeBudget:
    """Tests for analyze_budget."""

    def test_empty_snapshot_is_all_zero(self) -> None:
        """Should return zeroes, never NaN, for no transactions."""
        base = analyze_budget(Money(0), [])

        assert base.total_income == 0
        assert base.total_expenses == 0
        assert base.net_savings == 0
        assert base.savings_rate == 0
        assert base.category_breakdown == []

    def test_scenario_figures(self) -> None:
        """Should compute savings rate and category shares."""
        base = analyze_budget(Money(0), SCENARIO)

        assert base.total_income == 3200
        assert base.total_expenses == 1350
        assert base.net_savings == 1850
        assert base.savings_rate == pytest.approx(57.8125)
        assert [c.category for c in base.category_breakdown] == ["Housing", "Food"]
        assert base.category_breakdown[0].amount == 1200
        assert base.category_breakdown[0].percentage == pytest.approx(88.888, abs=0.01)
        assert base.category_breakdown[1].percentage == pytest.approx(11.111, abs=0.01)

    def test_starting_balance_does_not_affect_figures(self) -> None:
        """Should ignore the starting balance in every figure."""
        assert analyze_budget(Money(0), SCENARIO) == analyze_budget(Money(99999), SCENARIO)

    def test_expenses_without_income(self) -> None:
        """Should report a zero savings rate when there is no income."""
        base = analyze_budget(Money(0), [make_txn("expense", 50, "Food")])

        assert base.savings_rate == 0
        assert base.net_savings == -50
        assert base.category_breakdown[0].percentage == pytest.approx(100)

    def test_income_only_has_zero_percentages(self) -> None:
        """Should produce an empty breakdown with only income."""
        base = analyze_budget(Money(0), [make_txn("income", 50, "Salary")])

        assert base.category_breakdown == []
        assert base.savings_rate == pytest.approx(100)


class TestTopCategories:
    """Tests for top_categories."""

    def test_sorts_by_amount_descending(self) -> None:
        """Should rank the largest categories first."""
        base = make_base([("A", 10, 10), ("B", 50, 50), ("C", 40, 40)])

        assert [c.category for c in top_categories(base.category_breakdown, 2)] == ["B", "C"]

    def test_ties_keep_breakdown_order(self) -> None:
        """Should be stable for equal amounts."""
        base = make_base([("A", 10, 50), ("B", 10, 50)])

        assert [c.category for c in top_categories(base.category_breakdown)] == ["A", "B"]


class TestGenerateRecommendations:
    """Tests for generate_recommendations."""

    def test_scenario_recommendations(self) -> None:
        """Should praise savings and flag housing and concentration."""
        recommendations = generate_recommendations(analyze_budget(Money(0), SCENARIO))

        assert recommendations == [
            PRAISE,
            "🏠 Housing costs (88.9%) exceed the recommended 30%. Consider housing alternatives.",
            "📊 Housing represents 88.9% of spending. Consider diversifying expenses.",
        ]

    def test_zero_activity_triggers_save_more(self) -> None:
        """Should treat a zero savings rate as below 10%."""
        assert generate_recommendations(analyze_budget(Money(0), [])) == [SAVE_MORE]

    def test_negative_savings_rate(self) -> None:
        """Should warn urgently when spending exceeds income."""
        base = make_base([("Misc", 1500, 100)])

        assert generate_recommendations(base)[0] == OVERSPEND

    def test_middle_tier_has_no_savings_message(self) -> None:
        """Should emit nothing for a savings rate between 10% and 20%."""
        base = make_base([("Misc", 850, 40)])

        assert base.savings_rate == pytest.approx(15)
        assert generate_recommendations(base) == []

    def test_boundary_at_twenty_percent(self) -> None:
        """Should praise a savings rate of exactly 20%."""
        base = make_base([("Misc", 800, 40)])

        assert generate_recommendations(base) == [PRAISE]

    def test_rent_matches_housing_rule_case_insensitively(self) -> None:
        """Should match 'rent' anywhere in the name regardless of case."""
        base = make_base([("Apartment RENT", 400, 40), ("Misc", 400, 40)])

        recommendations = generate_recommendations(base)

        assert "🏠 Housing costs (40.0%) exceed the recommended 30%. Consider housing alternatives." in recommendations

    def test_housing_rule_uses_first_match_only(self) -> None:
        """Should evaluate only the first matching category in breakdown order."""
        base = make_base([("Rent", 100, 10), ("Housing", 600, 60)])

        recommendations = generate_recommendations(base)

        assert not any(r.startswith("🏠") for r in recommendations)

    def test_food_rule(self) -> None:
        """Should flag food spending above 15%."""
        base = make_base([("Groceries", 160, 16), ("Misc", 640, 64)])

        recommendations = generate_recommendations(base)

        assert "🍽️ Food spending (16.0%) is high. Meal planning could help reduce costs." in recommendations

    def test_food_rule_at_threshold_is_silent(self) -> None:
        """Should require strictly more than 15%."""
        base = make_base([("Food", 150, 15), ("Misc", 650, 65)])

        assert not any(r.startswith("🍽️") for r in generate_recommendations(base))

    def test_diversification_uses_largest_category(self) -> None:
        """Should name the largest category even when it was seen later."""
        base = make_base([("Coffee", 100, 10), ("Travel", 700, 70)])

        recommendations = generate_recommendations(base)

        assert "📊 Travel represents 70.0% of spending. Consider diversifying expenses." in recommendations

    def test_custom_rules_replace_defaults(self) -> None:
        """Should apply caller-supplied category rules."""
        rule = CategoryRule(
            name="leisure",
            matches=lambda name: name == "Leisure",
            threshold=5.0,
            message="{category} at {percentage:.0f}%",
        )
        base = make_base([("Leisure", 100, 10), ("Housing", 700, 70)])

        recommendations = generate_recommendations(base, rules=[rule])

        assert "Leisure at 10%" in recommendations
        assert not any(r.startswith("🏠") for r in recommendations)


class TestKeywordPredicate:
    """Tests for keyword_predicate."""

    def test_substring_case_insensitive(self) -> None:
        """Should match any keyword as a substring."""
        matches = keyword_predicate("food", "groceries")

        assert matches("Fast Food")
        assert matches("GROCERIES")
        assert not matches("Fuel")


class TestGenerateInsights:
    """Tests for generate_insights."""

    def test_scenario_insights(self) -> None:
        """Should summarize income, savings and top categories."""
        insights = generate_insights(analyze_budget(Money(0), SCENARIO))

        assert insights == [
            "📈 Monthly income: $3200.00, Expenses: $1350.00",
            "💰 Net savings this month: $1850.00 (57.8%)",
            "📊 Top spending categories: Housing (88.9%), Food (11.1%)",
        ]

    def test_deficit(self) -> None:
        """Should report a deficit instead of savings."""
        insights = generate_insights(make_base([("Misc", 150, 100)], income=100))

        assert "⚠️ Deficit this month: $50.00" in insights

    def test_zero_net_emits_no_savings_statement(self) -> None:
        """Should stay silent on exactly zero net savings."""
        insights = generate_insights(make_base([("Misc", 100, 100)], income=100))

        assert not any("savings" in i.lower() or "deficit" in i.lower() for i in insights)

    def test_top_three_sorted_by_amount(self) -> None:
        """Should list the three largest categories."""
        base = make_base([("A", 10, 10), ("B", 40, 40), ("C", 30, 30), ("D", 20, 20)])

        insights = generate_insights(base)

        assert insights[-1] == "📊 Top spending categories: B (40.0%), C (30.0%), D (20.0%)"

    def test_empty_analysis(self) -> None:
        """Should produce no insights without activity."""
        assert generate_insights(analyze_budget(Money(0), [])) == []


class TestGenerateAlerts:
    """Tests for generate_alerts."""

    def test_large_transactions(self) -> None:
        """Should count expenses above 20% of total expenses."""
        txns = [make_txn("expense", 100), make_txn("expense", 10), make_txn("expense", 10), make_txn("income", 500)]

        alerts = generate_alerts(analyze_budget(Money(0), txns), txns)

        assert alerts == ["🔔 1 large transaction(s) detected (>24.00)"]

    def test_large_threshold_has_plain_number_format(self) -> None:
        """Should print the threshold without a currency sign or grouping."""
        txns = [make_txn("expense", 10000), make_txn("expense", 2000), make_txn("income", 20000)]

        alerts = generate_alerts(analyze_budget(Money(0), txns), txns)

        assert alerts == ["🔔 1 large transaction(s) detected (>2400.00)"]

    def test_negative_net(self) -> None:
        """Should warn when spending exceeds income."""
        txns = [make_txn("income", 10), *[make_txn("expense", 5, f"C{i}") for i in range(5)]]

        alerts = generate_alerts(analyze_budget(Money(0), txns), txns)

        assert alerts == ["⚠️ Warning: Spending exceeds income this period"]

    def test_many_categories(self) -> None:
        """Should suggest consolidation above ten categories."""
        txns = [make_txn("income", 10000)] + [make_txn("expense", 1, f"C{i}") for i in range(11)]

        alerts = generate_alerts(analyze_budget(Money(0), txns), txns)

        assert alerts == ["📝 Consider consolidating categories - you have many expense categories"]

    def test_ten_categories_is_fine(self) -> None:
        """Should not alert at exactly ten categories."""
        txns = [make_txn("income", 10000)] + [make_txn("expense", 1, f"C{i}") for i in range(10)]

        assert generate_alerts(analyze_budget(Money(0), txns), txns) == []

    def test_no_expenses(self) -> None:
        """Should skip the large-transaction check without expenses."""
        txns = [make_txn("income", 100)]

        assert generate_alerts(analyze_budget(Money(0), txns), txns) == []


class TestPerformFullAnalysis:
    """Tests for perform_full_analysis."""

    def test_zero_activity(self) -> None:
        """Should return zeroed totals and only the save-more recommendation."""
        analysis = perform_full_analysis(Money(0), [])

        assert analysis.total_income == 0
        assert analysis.category_breakdown == []
        assert analysis.alerts == []
        assert analysis.insights == []
        assert analysis.recommendations == [SAVE_MORE]

    def test_idempotent(self) -> None:
        """Should give identical results for identical input."""
        assert perform_full_analysis(Money(100), SCENARIO) == perform_full_analysis(Money(100), SCENARIO)

    def test_does_not_mutate_input(self) -> None:
        """Should leave the transaction list untouched."""
        txns = list(SCENARIO)

        perform_full_analysis(Money(0), txns)

        assert txns == SCENARIO

    def test_dict_round_trip(self) -> None:
        """Should rebuild an identical analysis from its dictionary form."""
        analysis = perform_full_analysis(Money(0), SCENARIO)

        assert analysis_from_dict(json.loads(json.dumps(analysis_to_dict(analysis)))) == analysis


class TestPrepareBudgetDataForAi:
    """Tests for prepare_budget_data_for_ai."""

    def test_contains_only_aggregates(self) -> None:
        """Should include totals and categories but no ids or descriptions."""
        payload = prepare_budget_data_for_ai(Money(0), SCENARIO)
        data = json.loads(payload)

        assert data["income"] == 3200
        assert data["expenses"] == 1350
        assert data["savings"] == 1850
        assert data["savingsRate"] == pytest.approx(57.8125)
        assert data["transactionCount"] == 3
        assert [c["category"] for c in data["categories"]] == ["Housing", "Food"]
        assert set(data["categories"][0]) == {"category", "amount", "percentage"}
        assert "secret note" not in payload
        assert "description" not in payload
        assert '"id"' not in payload
