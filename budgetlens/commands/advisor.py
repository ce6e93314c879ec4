"""Chat command for asking the AI advisor questions."""

import sqlite3
import sys

from rich.console import Console

from budgetlens.advisor import AdvisorUnavailable, RateLimitExceeded, SlidingWindowRateLimiter, ask_advisor
from budgetlens.commands.transactions import load_transactions, resolve_month
from budgetlens.config import load_advisor_settings
from budgetlens.store.cache import SqliteCache
from budgetlens.store.queries import get_starting_balance
from budgetlens.store.schema import get_db_path

console = Console()


def chat_command(
    message: str,
    session: str = "default",
    include_budget: bool = True,
    month: str | None = None,
) -> None:
    """Ask the advisor a question, sharing only aggregate budget figures."""
    db_path = get_db_path()
    settings = load_advisor_settings()

    try:
        store = SqliteCache(db_path)
        limiter = SlidingWindowRateLimiter(
            store,
            max_requests=settings.chat_max_requests,
            window_seconds=settings.chat_window_seconds,
        )

        context = None
        if include_budget:
            context = {
                "starting_balance": get_starting_balance(db_path),
                "transactions": load_transactions(db_path, resolve_month(month)),
            }

        reply = ask_advisor(message, settings, limiter, session_id=session, context=context)

    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    except RateLimitExceeded as e:
        console.print(f"[yellow]{e}[/yellow]")
        sys.exit(1)
    except AdvisorUnavailable as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[bold cyan]Advisor:[/bold cyan] {reply.message}")
    console.print(f"\n[dim]{reply.model} · {reply.timestamp}[/dim]")
