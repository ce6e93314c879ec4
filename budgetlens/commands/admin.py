"""Admin commands for initialization and the starting balance."""

import sqlite3
import sys
from pathlib import Path

from rich.console import Console

from budgetlens.config import create_default_config, get_config_path
from budgetlens.domain.models import Money
from budgetlens.store.queries import get_starting_balance, set_starting_balance
from budgetlens.store.schema import get_db_path, init_database

console = Console()


def run_full_init(db_path: Path, config_path: Path) -> None:
    """Initialize new database and config."""
    console.print(f"[cyan]Initializing database at {db_path}...[/cyan]")
    init_database(db_path)
    console.print("[green]✓[/green] Database initialized")

    console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
    create_default_config(config_path)
    console.print("[green]✓[/green] Config file created (permissions: 600)")

    console.print("\n[green]Initialization complete![/green]", style="bold")
    console.print(f"[dim]Database: {db_path}[/dim]")
    console.print(f"[dim]Config: {config_path}[/dim]")
    console.print("[dim]Set OPENROUTER_API_KEY to enable AI-enhanced advice[/dim]")


def init_command(force: bool = False) -> None:
    """Initialize budgetlens database and configuration."""
    db_path = get_db_path()
    config_path = get_config_path()

    db_exists = db_path.exists()
    config_exists = config_path.exists()

    try:
        if not force and (db_exists or config_exists):
            console.print("[red]Initialization failed:[/red]", style="bold")
            if db_exists:
                console.print(f"  Database already exists: {db_path}")
            if config_exists:
                console.print(f"  Config already exists: {config_path}")
            console.print("\n[yellow]Use 'budgetlens init --force' to overwrite[/yellow]")
            sys.exit(1)

        run_full_init(db_path, config_path)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)


def balance_command(amount: float | None = None) -> None:
    """Show or set the starting balance."""
    db_path = get_db_path()

    try:
        if amount is None:
            balance = get_starting_balance(db_path)
            console.print(f"[bold]Starting balance:[/bold] ${balance:,.2f}")
            return

        previous = get_starting_balance(db_path)
        set_starting_balance(Money(amount), db_path)
        console.print(f"[green]✓[/green] Starting balance set to ${amount:,.2f}")
        console.print(f"[dim]Previously ${previous:,.2f}[/dim]")

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
