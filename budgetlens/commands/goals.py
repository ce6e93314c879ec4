"""Budget goal commands (set, remove, copy, status)."""

import sqlite3
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from budgetlens.commands.transactions import load_transactions, resolve_month
from budgetlens.dates import month_label
from budgetlens.domain.calculations import BudgetProgress
from budgetlens.domain.goals import GoalBook
from budgetlens.domain.models import CategoryName, Money
from budgetlens.domain.transactions import goal_from_dict, validate_goal_input
from budgetlens.store.queries import delete_goal, get_goals, upsert_goal
from budgetlens.store.schema import get_db_path

console = Console()

STATUS_STYLES = {
    "safe": "green",
    "warning": "yellow",
    "exceeded": "red",
}


def load_goal_book(db_path: Path) -> GoalBook:
    """Load every stored goal into a GoalBook.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    return GoalBook(goal_from_dict(row) for row in get_goals(db_path))


def format_progress_row(progress: BudgetProgress) -> tuple[str, str, str, str, str, str]:
    """Format one progress entry for the status table."""
    style = STATUS_STYLES[progress.status]

    if progress.remaining < 0:
        remaining_display = f"[red]-${abs(progress.remaining):,.2f}[/red]"
    else:
        remaining_display = f"${progress.remaining:,.2f}"

    return (
        progress.category,
        f"${progress.spent:,.2f}",
        f"${progress.limit:,.2f}",
        f"[{style}]{progress.percentage:.0f}%[/{style}]",
        remaining_display,
        f"[{style}]{progress.status}[/{style}]",
    )


def set_goal_command(category: str, limit: float, month: str | None = None) -> None:
    """Set or update the monthly limit for a category."""
    db_path = get_db_path()
    target_month = resolve_month(month)

    is_valid, error = validate_goal_input(category, limit)
    if not is_valid:
        console.print(f"[red]{error}[/red]")
        sys.exit(1)

    try:
        book = load_goal_book(db_path)
        existing = book.get(CategoryName(category), target_month)
        goal = book.set_goal(CategoryName(category), Money(limit), target_month)
        upsert_goal(goal.category, goal.month, goal.monthly_limit, db_path)

        if existing:
            console.print(
                f"[green]✓ {goal.category} limit for {month_label(target_month)} updated: "
                f"${existing.monthly_limit:,.2f} → ${goal.monthly_limit:,.2f}[/green]"
            )
        else:
            console.print(
                f"[green]✓ {goal.category} limit for {month_label(target_month)} set to "
                f"${goal.monthly_limit:,.2f}[/green]"
            )

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def remove_goal_command(category: str, month: str | None = None) -> None:
    """Remove the goal for a category and month."""
    db_path = get_db_path()
    target_month = resolve_month(month)

    try:
        if not delete_goal(CategoryName(category), target_month, db_path):
            console.print(f"[yellow]No goal for {category} in {month_label(target_month)}[/yellow]")
            return
        console.print(f"[green]✓[/green] Removed {category} goal for {month_label(target_month)}")

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def copy_goals_command(month: str | None = None) -> None:
    """Copy a month's goals into the following month."""
    db_path = get_db_path()
    source_month = resolve_month(month)

    try:
        book = load_goal_book(db_path)
        copied = book.copy_to_next_month(source_month)

        if not copied:
            console.print(f"[yellow]No goals set for {month_label(source_month)}[/yellow]")
            return

        for goal in copied:
            upsert_goal(goal.category, goal.month, goal.monthly_limit, db_path)

        target_month = copied[0].month
        console.print(
            f"[green]✓ Copied {len(copied)} goal(s) from {month_label(source_month)} "
            f"to {month_label(target_month)}[/green]"
        )

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def goals_status_command(month: str | None = None) -> None:
    """Show spending progress against each goal for a month."""
    db_path = get_db_path()
    target_month = resolve_month(month)

    try:
        book = load_goal_book(db_path)
        transactions = load_transactions(db_path, target_month)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    progress = book.progress(transactions, target_month)

    if not progress:
        console.print(f"[yellow]No goals set for {month_label(target_month)}[/yellow]")
        console.print("[dim]Use 'budgetlens goals set <category> <limit>' to add one[/dim]")
        return

    table = Table(title=f"{month_label(target_month)} Budget Goals")
    table.add_column("Category", style="white")
    table.add_column("Spent", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Used", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Status", justify="center")

    for entry in progress:
        table.add_row(*format_progress_row(entry))

    console.print(table)

    exceeded = [p.category for p in progress if p.status == "exceeded"]
    warning = [p.category for p in progress if p.status == "warning"]
    if exceeded:
        console.print(f"\n[red]Over limit:[/red] {', '.join(exceeded)}")
    if warning:
        console.print(f"[yellow]Above 80%:[/yellow] {', '.join(warning)}")
