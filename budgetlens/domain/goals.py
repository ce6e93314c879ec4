"""Budget goal collection with one limit per category per month.

Goals are keyed by (category, month), so upserting or copying a goal can
never create a duplicate entry. The collection itself does no I/O; the
store layer loads and saves it.
"""

from collections.abc import Iterable

from budgetlens.dates import next_month
from budgetlens.domain.calculations import BudgetProgress, calculate_budget_progress
from budgetlens.domain.models import CategoryName, Money, Month
from budgetlens.domain.transactions import BudgetGoal, Transaction

GoalKey = tuple[CategoryName, Month]


class GoalBook:
    """Mutable collection of budget goals.

    Insertion order is preserved; replacing an existing goal keeps its
    position.
    """

    def __init__(self, goals: Iterable[BudgetGoal] = ()) -> None:
        self._goals: dict[GoalKey, BudgetGoal] = {}
        for goal in goals:
            self._goals[(goal.category, goal.month)] = goal

    def __len__(self) -> int:
        return len(self._goals)

    def __contains__(self, key: object) -> bool:
        return key in self._goals

    def goals(self) -> list[BudgetGoal]:
        """All goals in insertion order."""
        return list(self._goals.values())

    def goals_for(self, month: Month) -> list[BudgetGoal]:
        """Goals set for a single month."""
        return [goal for goal in self._goals.values() if goal.month == month]

    def get(self, category: CategoryName, month: Month) -> BudgetGoal | None:
        return self._goals.get((category, month))

    def set_goal(self, category: CategoryName, monthly_limit: Money, month: Month) -> BudgetGoal:
        """Add a goal, or replace the limit of the existing (category, month) goal.

        Returns:
            The stored goal.
        """
        goal = BudgetGoal(category=category, monthly_limit=monthly_limit, month=month)
        self._goals[(category, month)] = goal
        return goal

    def remove_goal(self, category: CategoryName, month: Month) -> bool:
        """Remove a goal.

        Returns:
            True if a goal was removed, False if none matched.
        """
        return self._goals.pop((category, month), None) is not None

    def copy_to_next_month(self, month: Month) -> list[BudgetGoal]:
        """Copy every goal of ``month`` into the following calendar month.

        Goals already present in the target month for the same category are
        overwritten by the copy, so repeated copies are idempotent.

        Returns:
            The goals written to the target month.
        """
        target = next_month(month)
        return [self.set_goal(goal.category, goal.monthly_limit, target) for goal in self.goals_for(month)]

    def progress(self, transactions: Iterable[Transaction], month: Month) -> list[BudgetProgress]:
        """Spending progress for every goal of ``month``."""
        return calculate_budget_progress(transactions, self.goals_for(month), month)
