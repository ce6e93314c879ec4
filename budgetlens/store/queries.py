"""Database query functions."""

import sqlite3
from pathlib import Path
from typing import Any

from budgetlens.domain.models import CategoryName, Money, Month
from budgetlens.store.schema import get_db_path

STARTING_BALANCE_KEY = "starting_balance"


def _connect(db_path: Path | None = None) -> sqlite3.Connection:
    """Create a database connection with row factory.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Database connection with row_factory configured.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def insert_transaction(transaction: dict[str, Any], db_path: Path | None = None) -> bool:
    """Insert a transaction unless its id is already stored.

    Args:
        transaction: Transaction fields (id, type, date, period_tag, amount, category, description).
        db_path: Path to the database file. If None, uses default location.

    Returns:
        True if inserted, False if a transaction with the same id exists.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                INSERT OR IGNORE INTO transactions (id, type, date, period_tag, amount, category, description)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    transaction["id"],
                    transaction["type"],
                    transaction["date"],
                    transaction.get("period_tag", ""),
                    transaction["amount"],
                    transaction["category"],
                    transaction.get("description", ""),
                ),
            )
            conn.commit()
            return cursor.rowcount == 1
        except sqlite3.Error:
            conn.rollback()
            raise


def delete_transaction(txn_id: str, db_path: Path | None = None) -> bool:
    """Delete a transaction by id.

    Returns:
        True if a transaction was deleted.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("DELETE FROM transactions WHERE id = ?", (txn_id,))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error:
            conn.rollback()
            raise


def get_all_transactions(
    db_path: Path | None = None,
    limit: int | None = None,
    since_date: str | None = None,
    until_date: str | None = None,
    newest_first: bool = False,
) -> list[dict[str, Any]]:
    """Get transactions, optionally restricted to a date range.

    Args:
        db_path: Path to the database file. If None, uses default location.
        limit: Maximum number of transactions to return. If None, returns all.
        since_date: Optional start date (YYYY-MM-DD), inclusive.
        until_date: Optional end date (YYYY-MM-DD), exclusive.
        newest_first: If True, order by date descending. Otherwise by date and insertion order.

    Returns:
        List of transaction dictionaries.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        query = "SELECT id, type, date, period_tag, amount, category, description FROM transactions WHERE 1 = 1"
        params: list[Any] = []

        if since_date:
            query += " AND date >= ?"
            params.append(since_date)
        if until_date:
            query += " AND date < ?"
            params.append(until_date)

        order = "DESC" if newest_first else "ASC"
        query += f" ORDER BY date {order}, rowid {order}"

        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        cursor.execute(query, params)
        rows = cursor.fetchall()
        return [dict(row) for row in rows]


def get_goals(db_path: Path | None = None, month: Month | None = None) -> list[dict[str, Any]]:
    """Get budget goals, optionally for one month.

    Returns:
        List of goal dictionaries (category, month, monthly_limit) in insertion order.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        if month is None:
            cursor.execute("SELECT category, month, monthly_limit FROM budget_goals ORDER BY rowid")
        else:
            cursor.execute(
                "SELECT category, month, monthly_limit FROM budget_goals WHERE month = ? ORDER BY rowid",
                (month,),
            )
        return [dict(row) for row in cursor.fetchall()]


def upsert_goal(category: CategoryName, month: Month, monthly_limit: Money, db_path: Path | None = None) -> None:
    """Set the limit for a (category, month) goal, creating it if needed.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                INSERT INTO budget_goals (category, month, monthly_limit) VALUES (?, ?, ?)
                ON CONFLICT(category, month) DO UPDATE SET monthly_limit = excluded.monthly_limit
                """,
                (category, month, monthly_limit),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


def delete_goal(category: CategoryName, month: Month, db_path: Path | None = None) -> bool:
    """Delete a goal.

    Returns:
        True if a goal was deleted.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("DELETE FROM budget_goals WHERE category = ? AND month = ?", (category, month))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error:
            conn.rollback()
            raise


def get_starting_balance(db_path: Path | None = None) -> Money:
    """Get the starting balance (0 when never set).

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT value FROM settings WHERE key = ?", (STARTING_BALANCE_KEY,))
        row = cursor.fetchone()
        return Money(float(row[0])) if row else Money(0.0)


def set_starting_balance(amount: Money, db_path: Path | None = None) -> None:
    """Set the starting balance.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
                (STARTING_BALANCE_KEY, repr(float(amount))),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


def get_cached_response(key: str, db_path: Path | None = None) -> str | None:
    """Get a cached response body by key.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT value FROM response_cache WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row[0] if row else None


def set_cached_response(key: str, value: str, db_path: Path | None = None) -> None:
    """Store a response body, replacing any previous value (last write wins).

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "INSERT OR REPLACE INTO response_cache (key, value) VALUES (?, ?)",
                (key, value),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
