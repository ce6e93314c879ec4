"""Analysis, report and trend commands."""

import sqlite3
import sys
from collections.abc import Sequence
from datetime import datetime, timezone

from rich.console import Console
from rich.table import Table

from budgetlens.advisor import enrich_analysis, enrich_report
from budgetlens.commands.transactions import load_transactions, normalize_date, resolve_month
from budgetlens.config import load_advisor_settings
from budgetlens.dates import month_label, previous_month
from budgetlens.domain.analysis import BudgetAnalysis, analyze_budget, perform_full_analysis
from budgetlens.domain.calculations import (
    CategoryTotal,
    compute_ending_balance,
    compute_savings_percent,
    filter_by_category,
    filter_by_date_range,
    group_by_category,
    monthly_trend,
    running_balance,
)
from budgetlens.domain.models import Money, Month
from budgetlens.domain.report import MonthlyReport, build_monthly_report, calculate_histogram_bar_length
from budgetlens.store.cache import SqliteCache
from budgetlens.store.queries import get_starting_balance
from budgetlens.store.schema import get_db_path

console = Console()

HEALTH_STYLES = {
    "excellent": "green",
    "good": "cyan",
    "fair": "yellow",
    "needs-attention": "red",
}

TREND_SYMBOLS = {
    "up": "[red]▲ up[/red]",
    "down": "[green]▼ down[/green]",
    "stable": "[dim]● stable[/dim]",
}


def render_analysis(
    analysis: BudgetAnalysis,
    starting_balance: Money,
    period: str,
    histogram: bool,
    income_breakdown: Sequence[CategoryTotal] = (),
) -> None:
    """Render a full analysis to the console."""
    console.print(f"[bold cyan]{period}[/bold cyan]\n")

    console.print(f"  [bold]Starting balance:[/bold] ${starting_balance:,.2f}")
    console.print(f"  [bold]Income:[/bold]           [green]${analysis.total_income:,.2f}[/green]")
    console.print(f"  [bold]Expenses:[/bold]         [red]${analysis.total_expenses:,.2f}[/red]")

    net_style = "green" if analysis.net_savings >= 0 else "red"
    console.print(f"  [bold]Net savings:[/bold]      [{net_style}]${analysis.net_savings:,.2f}[/{net_style}]")
    console.print(f"  [bold]Savings rate:[/bold]     {analysis.savings_rate:.1f}%")

    balance_percent = compute_savings_percent(starting_balance, analysis.net_savings)
    if balance_percent is not None:
        console.print(f"  [bold]Balance growth:[/bold]   {balance_percent:+.1f}%")

    ending = compute_ending_balance(starting_balance, analysis.total_income, analysis.total_expenses)
    console.print(f"  [bold]Ending balance:[/bold]   ${ending:,.2f}\n")

    if income_breakdown:
        console.print("[bold green]Income by category:[/bold green]\n")
        for entry in income_breakdown:
            share = (entry.total / analysis.total_income) * 100 if analysis.total_income > 0 else 0.0
            console.print(f"  {entry.category:20} ${entry.total:>11,.2f} {share:5.1f}%")
        console.print()

    if analysis.category_breakdown:
        console.print("[bold red]Expenses by category:[/bold red]\n")
        max_amount = Money(max(c.amount for c in analysis.category_breakdown))
        for entry in analysis.category_breakdown:
            line = f"  {entry.category:20} ${entry.amount:>11,.2f} {entry.percentage:5.1f}%"
            if histogram:
                line += " " + "█" * calculate_histogram_bar_length(entry.amount, max_amount, 30)
            console.print(line)
        console.print()

    sections = (
        ("Alerts", "red", analysis.alerts),
        ("Insights", "cyan", analysis.insights),
        ("Recommendations", "yellow", analysis.recommendations),
    )
    for title, color, items in sections:
        if not items:
            continue
        console.print(f"[bold {color}]{title}:[/bold {color}]")
        for item in items:
            console.print(f"  • {item}")
        console.print()


def range_label(since_date: str | None, until_date: str | None) -> str:
    """Describe a half-open [since, until) date range."""
    if since_date and until_date:
        return f"{since_date} to {until_date} (exclusive)"
    if since_date:
        return f"Since {since_date}"
    return f"Before {until_date}"


def compute_analysis_scope(
    month: str | None,
    all: bool,
    since: str | None,
    until: str | None,
) -> tuple[Month | None, str | None, str | None, str]:
    """Resolve command options to a month or a date range.

    A --since/--until range takes priority over --month and --all.

    Returns:
        Tuple of (month, since_date, until_date, period_label).
    """
    if since or until:
        try:
            since_date = normalize_date(since) if since else None
            until_date = normalize_date(until) if until else None
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
        return None, since_date, until_date, range_label(since_date, until_date)

    if all:
        return None, None, None, "All Time"

    target_month = resolve_month(month)
    return target_month, None, None, month_label(target_month)


def analyze_command(
    month: str | None = None,
    all: bool = False,
    ai: bool = False,
    histogram: bool = True,
    since: str | None = None,
    until: str | None = None,
    categories: list[str] | None = None,
) -> None:
    """Analyze income, spending and savings for a month, a date range or all time."""
    db_path = get_db_path()

    target_month, since_date, until_date, period = compute_analysis_scope(month, all, since, until)
    if categories:
        period += f" [dim]({', '.join(categories)})[/dim]"

    try:
        starting_balance = get_starting_balance(db_path)
        transactions = load_transactions(db_path, target_month)
        if since_date or until_date:
            transactions = filter_by_date_range(transactions, since_date, until_date)
        transactions = filter_by_category(transactions, categories or [])
        income_breakdown = group_by_category(transactions, "income")

        if not ai:
            render_analysis(
                perform_full_analysis(starting_balance, transactions),
                starting_balance,
                period,
                histogram,
                income_breakdown,
            )
            return

        settings = load_advisor_settings()
        result = enrich_analysis(starting_balance, transactions, settings, cache=SqliteCache(db_path))

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    render_analysis(result.analysis, starting_balance, period, histogram, income_breakdown)

    if result.source == "local":
        if result.reason == "missing-key":
            console.print("[dim]AI advice skipped: set OPENROUTER_API_KEY to enable it[/dim]")
        else:
            console.print(f"[dim]AI advice unavailable ({result.reason}); showing local analysis only[/dim]")
    elif result.cached:
        console.print(f"[dim]AI advice from cache ({settings.model})[/dim]")
    else:
        console.print(f"[dim]AI advice by {settings.model}[/dim]")


def render_report(report: MonthlyReport) -> None:
    """Render a monthly report to the console."""
    style = HEALTH_STYLES[report.financial_health]
    health = report.financial_health.replace("-", " ").title()

    console.print(f"[bold cyan]Monthly Report: {report.month}[/bold cyan]")
    console.print(f"Financial health: [{style}]{health}[/{style}]\n")
    console.print(f"{report.summary}\n")

    metrics = report.key_metrics
    console.print(f"  [bold]Income:[/bold]       ${metrics.income:,.2f}")
    console.print(f"  [bold]Expenses:[/bold]     ${metrics.expenses:,.2f}")
    console.print(f"  [bold]Savings:[/bold]      ${metrics.savings:,.2f}")
    console.print(f"  [bold]Savings rate:[/bold] {metrics.savings_rate:.1f}%\n")

    if report.category_insights:
        table = Table(title="Top Categories")
        table.add_column("Category", style="white")
        table.add_column("Spent", justify="right")
        table.add_column("Trend", justify="center")
        table.add_column("Recommendation", style="dim")
        for insight in report.category_insights:
            table.add_row(
                insight.category,
                f"${insight.spent:,.2f}",
                TREND_SYMBOLS[insight.trend],
                insight.recommendation,
            )
        console.print(table)

    if report.action_items:
        console.print("\n[bold yellow]Action items:[/bold yellow]")
        for item in report.action_items:
            console.print(f"  • {item}")

    console.print(f"\n[dim]Generated {report.generated_at} by {report.model}[/dim]")


def report_command(month: str | None = None, ai: bool = False) -> None:
    """Generate the monthly report."""
    db_path = get_db_path()
    target_month = resolve_month(month)

    try:
        starting_balance = get_starting_balance(db_path)
        transactions = load_transactions(db_path, target_month)
        previous = load_transactions(db_path, previous_month(target_month))
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    analysis = perform_full_analysis(starting_balance, transactions)
    previous_breakdown = analyze_budget(starting_balance, previous).category_breakdown if previous else None

    report = build_monthly_report(
        analysis,
        target_month,
        generated_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        previous_breakdown=previous_breakdown,
    )

    if ai:
        report = enrich_report(report, starting_balance, transactions, load_advisor_settings())

    render_report(report)


def trend_command(months: int = 6, month: str | None = None, categories: list[str] | None = None) -> None:
    """Show monthly income, expenses, net and running balance."""
    db_path = get_db_path()
    end_month = resolve_month(month)

    if months < 1:
        console.print("[red]Months must be at least 1[/red]")
        sys.exit(1)

    try:
        starting_balance = get_starting_balance(db_path)
        transactions = filter_by_category(load_transactions(db_path), categories or [])
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    trend = monthly_trend(transactions, end_month, months)
    balances = running_balance(transactions, starting_balance, end_month, months)

    title = f"Last {months} month(s)"
    if categories:
        title += f" for {', '.join(categories)}"
    table = Table(title=title)
    table.add_column("Month", style="cyan")
    table.add_column("Income", justify="right", style="green")
    table.add_column("Expenses", justify="right", style="red")
    table.add_column("Net", justify="right")
    table.add_column("Balance", justify="right")

    for point, balance in zip(trend, balances):
        net_style = "green" if point.net >= 0 else "red"
        table.add_row(
            point.label,
            f"${point.income:,.2f}",
            f"${point.expenses:,.2f}",
            f"[{net_style}]${point.net:,.2f}[/{net_style}]",
            f"${balance.balance:,.2f}",
        )

    console.print(table)
    console.print(f"[dim]Starting balance: ${starting_balance:,.2f}[/dim]")
