"""Tests for budgetlens.domain.calculations pure functions."""

import pytest

from budgetlens.domain.calculations import (
    CategoryTotal,
    calculate_budget_progress,
    classify_progress,
    compute_ending_balance,
    compute_savings_percent,
    compute_totals,
    filter_by_category,
    filter_by_date_range,
    group_by_category,
    monthly_trend,
    running_balance,
)
from budgetlens.domain.models import CategoryName, Description, Money, Month
from budgetlens.domain.transactions import BudgetGoal, Transaction


def make_txn(
    txn_type: str,
    amount: float,
    category: str = "Misc",
    date: str = "2024-05-10",
    txn_id: str = "t",
) -> Transaction:
    return Transaction(
        id=txn_id,
        type=txn_type,
        date=date,
        amount=Money(amount),
        category=CategoryName(category),
        description=Description(""),
    )


def make_goal(category: str, limit: float, month: str = "2024-05") -> BudgetGoal:
    return BudgetGoal(category=CategoryName(category), monthly_limit=Money(limit), month=Month(month))


class TestComputeTotals:
    """Tests for compute_totals."""

    def test_sums_by_type(self) -> None:
        """Should sum income and expenses separately."""
        totals = compute_totals(
            [
                make_txn("income", 3200),
                make_txn("expense", 1200, "Housing"),
                make_txn("expense", 150, "Food"),
            ]
        )

        assert totals.income_total == 3200
        assert totals.expense_total == 1350

    def test_empty_input(self) -> None:
        """Should return zero totals for no transactions."""
        totals = compute_totals([])

        assert totals.income_total == 0
        assert totals.expense_total == 0

    def test_unknown_type_is_excluded(self) -> None:
        """Should skip transactions with an unrecognized type."""
        totals = compute_totals([make_txn("income", 100), make_txn("transfer", 999), make_txn("expense", 40)])

        assert totals.income_total == 100
        assert totals.expense_total == 40

    def test_sum_of_totals_matches_recognized_amounts(self) -> None:
        """Should account for every recognized amount exactly once."""
        txns = [make_txn("income", 10.5), make_txn("expense", 2.25), make_txn("refund", 7), make_txn("expense", 3)]
        totals = compute_totals(txns)

        assert totals.income_total + totals.expense_total == pytest.approx(15.75)

    def test_negative_amounts_propagate(self) -> None:
        """Should not validate amounts."""
        totals = compute_totals([make_txn("expense", -50)])

        assert totals.expense_total == -50


class TestGroupByCategory:
    """Tests for group_by_category."""

    def test_first_seen_order(self) -> None:
        """Should emit categories in order of first occurrence."""
        txns = [
            make_txn("expense", 5, "Food"),
            make_txn("expense", 500, "Housing"),
            make_txn("expense", 10, "Food"),
        ]

        assert group_by_category(txns, "expense") == [
            CategoryTotal(category=CategoryName("Food"), total=Money(15)),
            CategoryTotal(category=CategoryName("Housing"), total=Money(500)),
        ]

    def test_filters_by_type(self) -> None:
        """Should only include transactions of the requested type."""
        txns = [make_txn("income", 1000, "Salary"), make_txn("expense", 20, "Food")]

        result = group_by_category(txns, "income")

        assert [entry.category for entry in result] == ["Salary"]

    def test_case_sensitive_grouping(self) -> None:
        """Should treat differently-cased names as separate categories."""
        txns = [make_txn("expense", 5, "food"), make_txn("expense", 5, "Food"), make_txn("expense", 5, "Food ")]

        assert len(group_by_category(txns, "expense")) == 3


class TestClassifyProgress:
    """Tests for classify_progress."""

    @pytest.mark.parametrize(
        ("spent", "limit", "expected"),
        [
            (0, 100, "safe"),
            (79.99, 100, "safe"),
            (80, 100, "warning"),
            (100, 100, "warning"),
            (100.01, 100, "exceeded"),
            (500, 100, "exceeded"),
        ],
    )
    def test_status_boundaries(self, spent: float, limit: float, expected: str) -> None:
        """Should classify exactly one status with exceeded iff spent > limit."""
        _, status = classify_progress(spent, limit)

        assert status == expected

    def test_zero_limit_yields_zero_percentage(self) -> None:
        """Should not divide by a zero limit."""
        percentage, status = classify_progress(10, 0)

        assert percentage == 0
        assert status == "exceeded"


class TestCalculateBudgetProgress:
    """Tests for calculate_budget_progress."""

    def test_exceeded_goal(self) -> None:
        """Should report an exceeded goal with negative remaining."""
        txns = [make_txn("expense", 70, "Food"), make_txn("expense", 50, "Food", date="2024-05-28")]

        progress = calculate_budget_progress(txns, [make_goal("Food", 100)], Month("2024-05"))

        assert len(progress) == 1
        assert progress[0].spent == 120
        assert progress[0].limit == 100
        assert progress[0].percentage == pytest.approx(120)
        assert progress[0].remaining == -20
        assert progress[0].status == "exceeded"

    def test_filters_to_month_and_expenses(self) -> None:
        """Should ignore income and other months."""
        txns = [
            make_txn("expense", 40, "Food", date="2024-04-30"),
            make_txn("income", 40, "Food"),
            make_txn("expense", 10, "Food", date="2024-05-01T08:00:00Z"),
        ]

        progress = calculate_budget_progress(txns, [make_goal("Food", 100)], Month("2024-05"))

        assert progress[0].spent == 10
        assert progress[0].status == "safe"

    def test_goal_without_spending(self) -> None:
        """Should default spending to zero."""
        progress = calculate_budget_progress([], [make_goal("Travel", 300)], Month("2024-05"))

        assert progress[0].spent == 0
        assert progress[0].remaining == 300
        assert progress[0].percentage == 0
        assert progress[0].status == "safe"

    def test_goals_for_other_months_are_excluded(self) -> None:
        """Should silently skip goals for other months."""
        goals = [make_goal("Food", 100, "2024-04"), make_goal("Fun", 50, "2024-05")]

        progress = calculate_budget_progress([], goals, Month("2024-05"))

        assert [p.category for p in progress] == ["Fun"]

    def test_no_goals(self) -> None:
        """Should return an empty list when there are no goals."""
        assert calculate_budget_progress([make_txn("expense", 10)], [], Month("2024-05")) == []


class TestBalances:
    """Tests for compute_ending_balance and compute_savings_percent."""

    def test_ending_balance(self) -> None:
        """Should add income and subtract expenses."""
        assert compute_ending_balance(Money(1000), Money(500), Money(200)) == 1300

    def test_savings_percent(self) -> None:
        """Should express net savings relative to the starting balance."""
        assert compute_savings_percent(Money(1000), Money(250)) == pytest.approx(25)

    def test_savings_percent_without_balance(self) -> None:
        """Should return None for a non-positive starting balance."""
        assert compute_savings_percent(Money(0), Money(250)) is None


class TestFilters:
    """Tests for filter_by_date_range and filter_by_category."""

    def test_date_range_is_half_open(self) -> None:
        """Should include since and exclude until."""
        txns = [
            make_txn("expense", 1, date="2024-04-30", txn_id="a"),
            make_txn("expense", 1, date="2024-05-01", txn_id="b"),
            make_txn("expense", 1, date="2024-05-31T23:59:00Z", txn_id="c"),
            make_txn("expense", 1, date="2024-06-01", txn_id="d"),
        ]

        result = filter_by_date_range(txns, "2024-05-01", "2024-06-01")

        assert [t.id for t in result] == ["b", "c"]

    def test_category_filter_empty_keeps_all(self) -> None:
        """Should keep everything when no categories are given."""
        txns = [make_txn("expense", 1, "A"), make_txn("expense", 1, "B")]

        assert filter_by_category(txns, []) == txns
        assert [t.category for t in filter_by_category(txns, ["B"])] == ["B"]


class TestTrends:
    """Tests for monthly_trend and running_balance."""

    def test_monthly_trend_covers_trailing_months(self) -> None:
        """Should produce one point per month, oldest first."""
        txns = [
            make_txn("income", 1000, date="2024-04-01"),
            make_txn("expense", 300, date="2024-04-15"),
            make_txn("expense", 200, date="2024-05-15"),
        ]

        trend = monthly_trend(txns, Month("2024-05"), months=3)

        assert [p.month for p in trend] == ["2024-03", "2024-04", "2024-05"]
        assert [p.label for p in trend] == ["Mar 2024", "Apr 2024", "May 2024"]
        assert [p.net for p in trend] == [0, 700, -200]

    def test_running_balance_accumulates(self) -> None:
        """Should carry the balance forward month to month."""
        txns = [make_txn("income", 1000, date="2024-04-01"), make_txn("expense", 200, date="2024-05-15")]

        balances = running_balance(txns, Money(500), Month("2024-05"), months=2)

        assert [b.balance for b in balances] == [1500, 1300]

    def test_running_balance_ignores_months_outside_range(self) -> None:
        """Should not apply transactions before the series starts."""
        txns = [make_txn("income", 1000, date="2023-01-01")]

        balances = running_balance(txns, Money(0), Month("2024-05"), months=1)

        assert balances[0].balance == 0
