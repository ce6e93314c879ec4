"""Pure aggregation functions over transaction snapshots.

This module contains the functional core for totals and budget progress:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

Every function receives its full input and retains nothing between calls.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from budgetlens.dates import month_label, month_of, shift_month
from budgetlens.domain.models import CategoryName, Money, Month, ProgressStatus
from budgetlens.domain.transactions import BudgetGoal, Transaction

WARNING_THRESHOLD = 80.0


@dataclass(frozen=True)
class Totals:
    """Immutable income and expense totals."""

    income_total: Money
    expense_total: Money


@dataclass(frozen=True)
class CategoryTotal:
    """Immutable total for one category."""

    category: CategoryName
    total: Money


@dataclass(frozen=True)
class BudgetProgress:
    """Immutable spending-vs-limit progress for one goal."""

    category: CategoryName
    spent: Money
    limit: Money
    percentage: float
    remaining: Money
    status: ProgressStatus


@dataclass(frozen=True)
class MonthlyTrendPoint:
    """Immutable income/expense totals for one month."""

    month: Month
    label: str
    income: Money
    expenses: Money
    net: Money


@dataclass(frozen=True)
class BalancePoint:
    """Immutable running balance at the end of one month."""

    month: Month
    label: str
    balance: Money


def compute_totals(transactions: Iterable[Transaction]) -> Totals:
    """Sum transaction amounts by type.

    Transactions whose type is neither income nor expense are skipped.

    Args:
        transactions: Transactions to aggregate.

    Returns:
        Totals with income and expense sums.
    """
    income = 0.0
    expense = 0.0
    for txn in transactions:
        if txn.type == "income":
            income += txn.amount
        elif txn.type == "expense":
            expense += txn.amount
    return Totals(income_total=Money(income), expense_total=Money(expense))


def group_by_category(transactions: Iterable[Transaction], type: str) -> list[CategoryTotal]:
    """Total the transactions of one type per category.

    Args:
        transactions: Transactions to group.
        type: Transaction type to keep ("income" or "expense").

    Returns:
        List of CategoryTotal in order of first occurrence.
    """
    totals: dict[CategoryName, float] = {}
    for txn in transactions:
        if txn.type != type:
            continue
        totals[txn.category] = totals.get(txn.category, 0.0) + txn.amount
    return [CategoryTotal(category=category, total=Money(total)) for category, total in totals.items()]


def classify_progress(spent: float, limit: float) -> tuple[float, ProgressStatus]:
    """Classify spending against a limit.

    Args:
        spent: Amount spent.
        limit: Spending ceiling.

    Returns:
        Tuple of (percentage, status). Exceeding the limit takes priority
        over the 80% warning threshold.
    """
    percentage = (spent / limit) * 100 if limit > 0 else 0.0

    status: ProgressStatus = "safe"
    if spent > limit:
        status = "exceeded"
    elif percentage >= WARNING_THRESHOLD:
        status = "warning"

    return percentage, status


def calculate_budget_progress(
    transactions: Iterable[Transaction],
    goals: Iterable[BudgetGoal],
    month: Month,
) -> list[BudgetProgress]:
    """Calculate progress for every goal of a month.

    Args:
        transactions: All transactions (filtered here to the month's expenses).
        goals: Budget goals; goals for other months are ignored.
        month: Month in YYYY-MM format.

    Returns:
        List of BudgetProgress in goal order.
    """
    month_expenses = [txn for txn in transactions if txn.type == "expense" and month_of(txn.date) == month]
    spending = {entry.category: entry.total for entry in group_by_category(month_expenses, "expense")}

    progress: list[BudgetProgress] = []
    for goal in goals:
        if goal.month != month:
            continue

        spent = spending.get(goal.category, Money(0.0))
        percentage, status = classify_progress(spent, goal.monthly_limit)

        progress.append(
            BudgetProgress(
                category=goal.category,
                spent=spent,
                limit=goal.monthly_limit,
                percentage=percentage,
                remaining=Money(goal.monthly_limit - spent),
                status=status,
            )
        )

    return progress


def compute_ending_balance(starting_balance: Money, income_total: Money, expense_total: Money) -> Money:
    """Calculate the balance after applying income and expenses."""
    return Money(starting_balance + income_total - expense_total)


def compute_savings_percent(starting_balance: Money, net_savings: Money) -> float | None:
    """Express net savings relative to the starting balance.

    Returns:
        Percentage, or None when the starting balance is not positive.
    """
    if starting_balance <= 0:
        return None
    return (net_savings / starting_balance) * 100


def filter_by_month(transactions: Iterable[Transaction], month: Month) -> list[Transaction]:
    """Keep transactions whose date falls in the given YYYY-MM month."""
    return [txn for txn in transactions if month_of(txn.date) == month]


def filter_by_date_range(
    transactions: Iterable[Transaction],
    since: str | None = None,
    until: str | None = None,
) -> list[Transaction]:
    """Keep transactions dated within [since, until).

    Dates are compared as ISO strings on their YYYY-MM-DD prefix.

    Args:
        transactions: Transactions to filter.
        since: Inclusive lower bound (YYYY-MM-DD), or None.
        until: Exclusive upper bound (YYYY-MM-DD), or None.

    Returns:
        Filtered transactions in input order.
    """
    result: list[Transaction] = []
    for txn in transactions:
        day = txn.date[:10]
        if since is not None and day < since:
            continue
        if until is not None and day >= until:
            continue
        result.append(txn)
    return result


def filter_by_category(transactions: Iterable[Transaction], categories: Sequence[str]) -> list[Transaction]:
    """Keep transactions in any of the given categories (all when empty)."""
    if not categories:
        return list(transactions)
    return [txn for txn in transactions if txn.category in categories]


def _trailing_months(end_month: Month, months: int) -> list[Month]:
    return [shift_month(end_month, offset) for offset in range(-(months - 1), 1)]


def monthly_trend(
    transactions: Sequence[Transaction],
    end_month: Month,
    months: int = 6,
) -> list[MonthlyTrendPoint]:
    """Income, expenses and net for each of the last N months.

    Args:
        transactions: All transactions.
        end_month: Last month of the series (inclusive).
        months: Number of months in the series.

    Returns:
        List of MonthlyTrendPoint, oldest first.
    """
    points: list[MonthlyTrendPoint] = []
    for month in _trailing_months(end_month, months):
        totals = compute_totals(filter_by_month(transactions, month))
        points.append(
            MonthlyTrendPoint(
                month=month,
                label=month_label(month, short=True),
                income=totals.income_total,
                expenses=totals.expense_total,
                net=Money(totals.income_total - totals.expense_total),
            )
        )
    return points


def running_balance(
    transactions: Sequence[Transaction],
    starting_balance: Money,
    end_month: Month,
    months: int = 6,
) -> list[BalancePoint]:
    """Balance at the end of each of the last N months.

    The starting balance is the balance before the first month of the series;
    transactions outside the series do not move it.

    Args:
        transactions: All transactions.
        starting_balance: Opening balance.
        end_month: Last month of the series (inclusive).
        months: Number of months in the series.

    Returns:
        List of BalancePoint, oldest first.
    """
    balance = float(starting_balance)
    points: list[BalancePoint] = []
    for point in monthly_trend(transactions, end_month, months):
        balance += point.net
        points.append(BalancePoint(month=point.month, label=point.label, balance=Money(balance)))
    return points
