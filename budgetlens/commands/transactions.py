"""Transaction management commands (add, list, delete, import)."""

import sqlite3
import sys
import uuid
from datetime import datetime
from pathlib import Path

import pandas as pd
from rich.console import Console
from rich.table import Table

from budgetlens.dates import current_month, month_range, period_tag
from budgetlens.domain.models import Month
from budgetlens.domain.transactions import (
    Transaction,
    parse_import_row,
    suggest_import_mapping,
    transaction_from_dict,
    validate_transaction_input,
)
from budgetlens.store.queries import delete_transaction, get_all_transactions, insert_transaction
from budgetlens.store.schema import get_db_path

console = Console()


def normalize_date(raw_date: str) -> str:
    """Normalize a date string to ISO format (YYYY-MM-DD).

    ISO 8601 input is read as written. Anything else goes through
    pandas.to_datetime with dayfirst=True, so European-style bank exports
    (DD/MM/YYYY) are accepted too. Timestamps keep their own calendar day.

    Args:
        raw_date: Raw date string.

    Returns:
        Normalized date in YYYY-MM-DD format.

    Raises:
        ValueError: If date cannot be parsed.
    """
    try:
        parsed_date = pd.to_datetime(raw_date, format="ISO8601")
    except (ValueError, pd.errors.ParserError):
        try:
            parsed_date = pd.to_datetime(raw_date, dayfirst=True)
        except (ValueError, pd.errors.ParserError) as e:
            raise ValueError(f"Could not parse date '{raw_date}': {e}") from e
    if pd.isna(parsed_date):
        raise ValueError(f"Could not parse date '{raw_date}'")
    return parsed_date.strftime("%Y-%m-%d")


def resolve_month(month: str | None) -> Month:
    """Validate a --month option, defaulting to the current month.

    Exits with an error message if the month is not YYYY-MM.
    """
    if month is None:
        return current_month()
    try:
        datetime.strptime(month, "%Y-%m")
    except ValueError:
        console.print(f"[red]Invalid month '{month}'. Use YYYY-MM.[/red]")
        sys.exit(1)
    return Month(month)


def load_transactions(db_path: Path, month: Month | None = None) -> list[Transaction]:
    """Load transactions as domain records, optionally for one month.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    if month is None:
        rows = get_all_transactions(db_path)
    else:
        since_date, until_date, _ = month_range(month)
        rows = get_all_transactions(db_path, since_date=since_date, until_date=until_date)
    return [transaction_from_dict(row) for row in rows]


def format_signed_amount(txn_type: str, amount: float) -> str:
    """Color an amount by transaction type for table display."""
    if txn_type == "income":
        return f"[green]+${amount:,.2f}[/green]"
    if txn_type == "expense":
        return f"[red]-${amount:,.2f}[/red]"
    return f"[dim]${amount:,.2f}[/dim]"


def record_transaction(
    txn_type: str,
    amount: float,
    category: str,
    date: str,
    description: str,
    db_path: Path,
) -> tuple[Transaction | None, str | None]:
    """Validate, normalize and store one transaction.

    Returns:
        Tuple of (transaction, error_message).

    Raises:
        sqlite3.Error: If database operation fails.
    """
    try:
        normalized_date = normalize_date(date)
    except ValueError as e:
        return None, str(e)

    is_valid, error = validate_transaction_input(txn_type, amount, category, normalized_date)
    if not is_valid:
        return None, error

    row = {
        "id": uuid.uuid4().hex,
        "type": txn_type,
        "date": normalized_date,
        "period_tag": period_tag(normalized_date),
        "amount": float(amount),
        "category": category.strip(),
        "description": description.strip(),
    }
    insert_transaction(row, db_path)
    return transaction_from_dict(row), None


def add_command(
    txn_type: str,
    amount: float,
    category: str,
    date: str | None = None,
    description: str = "",
) -> None:
    """Add a transaction manually.

    Args:
        txn_type: "income" or "expense".
        amount: Positive amount in dollars.
        category: Category name.
        date: Transaction date (defaults to today).
        description: Optional description.
    """
    db_path = get_db_path()
    date = date or datetime.now().strftime("%Y-%m-%d")

    try:
        transaction, error = record_transaction(txn_type.lower(), amount, category, date, description, db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    if transaction is None:
        console.print(f"[red]{error}[/red]")
        sys.exit(1)

    console.print("[green]✓[/green] Transaction added:")
    console.print(f"  ID: {transaction.id}")
    console.print(f"  Date: {transaction.date} [dim]({transaction.period_tag})[/dim]")
    console.print(f"  Type: {transaction.type}")
    console.print(f"  Amount: ${transaction.amount:,.2f}")
    console.print(f"  Category: {transaction.category}")
    if transaction.description:
        console.print(f"  Description: {transaction.description}")


def list_command(
    limit: int = 50,
    all: bool = False,
    month: str | None = None,
) -> None:
    """List transactions, newest first."""
    db_path = get_db_path()

    try:
        since_date = until_date = None
        if month:
            since_date, until_date, _ = month_range(resolve_month(month))

        actual_limit = None if all else limit
        transactions = get_all_transactions(
            db_path, actual_limit, since_date=since_date, until_date=until_date, newest_first=True
        )

        if not transactions:
            console.print("[yellow]No transactions found[/yellow]")
            return

        table = Table(title=f"Transactions (showing {len(transactions)})")
        table.add_column("ID", style="dim")
        table.add_column("Date", style="cyan")
        table.add_column("Category", style="magenta")
        table.add_column("Description", style="white")
        table.add_column("Amount", justify="right")

        for txn in transactions:
            table.add_row(
                txn["id"][:8],
                txn["date"],
                txn["category"],
                txn["description"] or "[dim]-[/dim]",
                format_signed_amount(txn["type"], txn["amount"]),
            )

        console.print(table)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def delete_command(txn_id: str) -> None:
    """Delete a transaction by id or unique id prefix."""
    db_path = get_db_path()

    try:
        matches = [t for t in get_all_transactions(db_path) if t["id"].startswith(txn_id)]

        if not matches:
            console.print(f"[red]Transaction {txn_id} not found[/red]")
            sys.exit(1)

        if len(matches) > 1:
            console.print(f"[red]ID prefix '{txn_id}' matches {len(matches)} transactions; use more characters[/red]")
            sys.exit(1)

        txn = matches[0]
        delete_transaction(txn["id"], db_path)
        console.print(
            f"[green]✓[/green] Deleted {txn['type']} of ${txn['amount']:,.2f} "
            f"({txn['category']}, {txn['date']})"
        )

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)


def import_command(csv_path: str) -> None:
    """Import transactions from a CSV file.

    Columns are detected from the header row (type, amount, category,
    date, description). Rows without a type column are classified by the
    sign of the amount.
    """
    db_path = get_db_path()
    path = Path(csv_path).expanduser()

    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        sys.exit(1)

    try:
        frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    except (ValueError, pd.errors.ParserError) as e:
        console.print(f"[red]Could not read CSV: {e}[/red]")
        sys.exit(1)

    mapping = suggest_import_mapping(list(frame.columns))
    missing = [name for name in ("date_column", "amount_column") if not mapping[name]]
    if missing:
        console.print("[red]Could not detect date and amount columns in CSV header[/red]")
        console.print(f"[dim]Columns found: {', '.join(frame.columns)}[/dim]")
        sys.exit(1)

    imported = 0
    skipped: list[str] = []

    try:
        for index, row in enumerate(frame.to_dict(orient="records"), start=2):
            parsed = parse_import_row(row, mapping)
            if parsed is None:
                skipped.append(f"line {index}: missing date or amount")
                continue

            transaction, error = record_transaction(
                parsed["type"],
                parsed["amount"],
                parsed["category"],
                parsed["date"],
                parsed["description"],
                db_path,
            )
            if transaction is None:
                skipped.append(f"line {index}: {error}")
                continue
            imported += 1

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]Imported {imported} transactions![/green]", style="bold")
    if skipped:
        console.print(f"[yellow]Skipped {len(skipped)} rows:[/yellow]")
        for reason in skipped:
            console.print(f"  [dim]{reason}[/dim]")
