"""CLI entry point for budgetlens."""

import typer

from budgetlens.commands.admin import balance_command, init_command
from budgetlens.commands.advisor import chat_command
from budgetlens.commands.goals import copy_goals_command, goals_status_command, remove_goal_command, set_goal_command
from budgetlens.commands.report import analyze_command, report_command, trend_command
from budgetlens.commands.transactions import add_command, delete_command, import_command, list_command

app = typer.Typer(
    name="budgetlens",
    help="budgetlens - track your income and spending, and get budgeting advice",
    add_completion=False,
)

goals_app = typer.Typer(help="Manage monthly spending limits per category.")
app.add_typer(goals_app, name="goals")


@app.callback()
def main() -> None:
    """budgetlens - track your income and spending, and get budgeting advice."""
    pass


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing database and config"),
) -> None:
    """Initialize the budgetlens database and configuration."""
    init_command(force)


@app.command()
def balance(
    amount: float = typer.Argument(None, help="New starting balance (omit to show the current one)"),
) -> None:
    """Show or set your starting balance."""
    balance_command(amount)


@app.command()
def add(
    txn_type: str = typer.Argument(..., metavar="TYPE", help="'income' or 'expense'"),
    amount: float = typer.Argument(..., help="Amount (positive)"),
    category: str = typer.Argument(..., help="Category name"),
    date: str = typer.Option(None, "--date", "-d", help="Transaction date (default: today)"),
    description: str = typer.Option("", "--description", "-m", help="Optional description"),
) -> None:
    """Record an income or expense transaction."""
    add_command(txn_type, amount, category, date, description)


@app.command(name="list")
def list_transactions(
    limit: int = typer.Option(50, help="Maximum transactions to show"),
    all: bool = typer.Option(False, "--all", "-a", help="Show all your transactions"),
    month: str = typer.Option(None, "--month", help="Only this month (YYYY-MM)"),
) -> None:
    """List your transactions, newest first."""
    list_command(limit, all, month)


@app.command()
def delete(
    txn_id: str = typer.Argument(..., metavar="ID", help="Transaction id (or unique prefix)"),
) -> None:
    """Delete a transaction."""
    delete_command(txn_id)


@app.command(name="import")
def import_csv(
    csv_path: str = typer.Argument(..., metavar="CSV", help="Path to a CSV export"),
) -> None:
    """Import transactions from a CSV file."""
    import_command(csv_path)


@app.command()
def analyze(
    month: str = typer.Option(None, "--month", help="Month to analyze (YYYY-MM, default: current)"),
    all: bool = typer.Option(False, "--all", "-a", help="Analyze all time"),
    since: str = typer.Option(None, "--since", help="Start date, inclusive (overrides --month)"),
    until: str = typer.Option(None, "--until", help="End date, exclusive (overrides --month)"),
    category: list[str] = typer.Option(None, "--category", "-c", help="Only these categories (repeatable)"),
    ai: bool = typer.Option(False, "--ai", help="Add AI recommendations (needs OPENROUTER_API_KEY)"),
    histogram: bool = typer.Option(True, help="Show histogram of your spending"),
) -> None:
    """Analyze your income, spending, and savings."""
    analyze_command(month, all, ai, histogram, since, until, category)


@app.command()
def report(
    month: str = typer.Option(None, "--month", help="Month to report on (YYYY-MM, default: current)"),
    ai: bool = typer.Option(False, "--ai", help="Use an AI-written summary (needs OPENROUTER_API_KEY)"),
) -> None:
    """Show your monthly financial report."""
    report_command(month, ai)


@app.command()
def trend(
    months: int = typer.Option(6, "--months", "-n", help="Number of months to show"),
    month: str = typer.Option(None, "--month", help="Last month of the range (YYYY-MM)"),
    category: list[str] = typer.Option(None, "--category", "-c", help="Only these categories (repeatable)"),
) -> None:
    """Show monthly income, expenses, and running balance."""
    trend_command(months, month, category)


@app.command()
def chat(
    message: str = typer.Argument(..., help="Your question"),
    session: str = typer.Option("default", "--session", help="Session id used for rate limiting"),
    include_budget: bool = typer.Option(True, help="Share aggregate budget figures with the advisor"),
    month: str = typer.Option(None, "--month", help="Month of budget data to share (YYYY-MM)"),
) -> None:
    """Ask the AI financial advisor a question."""
    chat_command(message, session, include_budget, month)


@goals_app.command(name="set")
def goals_set(
    category: str = typer.Argument(..., help="Category name"),
    limit: float = typer.Argument(..., help="Monthly spending limit"),
    month: str = typer.Option(None, "--month", help="Month (YYYY-MM, default: current)"),
) -> None:
    """Set or update a category's monthly limit."""
    set_goal_command(category, limit, month)


@goals_app.command(name="remove")
def goals_remove(
    category: str = typer.Argument(..., help="Category name"),
    month: str = typer.Option(None, "--month", help="Month (YYYY-MM, default: current)"),
) -> None:
    """Remove a category's monthly limit."""
    remove_goal_command(category, month)


@goals_app.command(name="copy")
def goals_copy(
    month: str = typer.Option(None, "--month", help="Month to copy from (YYYY-MM, default: current)"),
) -> None:
    """Copy this month's goals into next month."""
    copy_goals_command(month)


@goals_app.command(name="status")
def goals_status(
    month: str = typer.Option(None, "--month", help="Month (YYYY-MM, default: current)"),
) -> None:
    """Show spending progress against your goals."""
    goals_status_command(month)


if __name__ == "__main__":
    app()
