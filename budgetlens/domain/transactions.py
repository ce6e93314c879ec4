"""Pure functions and records for transactions and budget goals.

This module contains the functional core for transaction data:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

The analysis functions never validate their input. Validation helpers here
are meant for callers (the CLI, importers) to run before handing data over.
"""

import math
from dataclasses import dataclass
from typing import Any, TypedDict

from budgetlens.domain.models import TRANSACTION_TYPES, CategoryName, Description, Money, Month


class ImportMapping(TypedDict):
    """CSV column mapping configuration."""

    type_column: str
    amount_column: str
    category_column: str
    date_column: str
    description_column: str


@dataclass(frozen=True)
class Transaction:
    """Immutable record of one income or expense event."""

    id: str
    type: str
    date: str
    amount: Money
    category: CategoryName
    description: Description = Description("")
    period_tag: str = ""


@dataclass(frozen=True)
class BudgetGoal:
    """Immutable monthly spending ceiling for one category."""

    category: CategoryName
    monthly_limit: Money
    month: Month


def validate_transaction_input(
    type: str,
    amount: float,
    category: str,
    date: str,
) -> tuple[bool, str | None]:
    """Validate raw transaction fields before recording them.

    Args:
        type: Transaction type ("income" or "expense").
        amount: Transaction amount.
        category: Category label.
        date: ISO date string.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if type not in TRANSACTION_TYPES:
        return False, f"Type must be one of: {', '.join(TRANSACTION_TYPES)}"

    if math.isnan(amount) or math.isinf(amount):
        return False, "Amount must be a number"

    if amount <= 0:
        return False, "Amount must be positive"

    if not category.strip():
        return False, "Category is required"

    if len(date) < 7:
        return False, "Date must be in ISO format (YYYY-MM-DD)"

    return True, None


def validate_goal_input(category: str, monthly_limit: float) -> tuple[bool, str | None]:
    """Validate a budget goal before storing it.

    Args:
        category: Category label.
        monthly_limit: Monthly spending ceiling.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not category.strip():
        return False, "Category is required"

    if math.isnan(monthly_limit) or monthly_limit <= 0:
        return False, "Monthly limit must be positive"

    return True, None


def transaction_from_dict(raw: dict[str, Any]) -> Transaction:
    """Build a Transaction from a mapping (database row or JSON payload).

    Accepts both ``period_tag`` and the camelCase ``periodTag`` key.

    Raises:
        KeyError: If a required field is missing.
        ValueError: If the amount is not numeric.
    """
    return Transaction(
        id=str(raw["id"]),
        type=str(raw["type"]),
        date=str(raw["date"]),
        amount=Money(float(raw["amount"])),
        category=CategoryName(str(raw["category"])),
        description=Description(str(raw.get("description") or "")),
        period_tag=str(raw.get("period_tag") or raw.get("periodTag") or ""),
    )


def transaction_to_dict(transaction: Transaction) -> dict[str, Any]:
    """Convert a Transaction to a plain dictionary."""
    return {
        "id": transaction.id,
        "type": transaction.type,
        "date": transaction.date,
        "amount": transaction.amount,
        "category": transaction.category,
        "description": transaction.description,
        "period_tag": transaction.period_tag,
    }


def goal_from_dict(raw: dict[str, Any]) -> BudgetGoal:
    """Build a BudgetGoal from a mapping (database row or JSON payload)."""
    limit = raw["monthly_limit"] if "monthly_limit" in raw else raw["monthlyLimit"]
    return BudgetGoal(
        category=CategoryName(str(raw["category"])),
        monthly_limit=Money(float(limit)),
        month=Month(str(raw["month"])),
    )


def suggest_import_mapping(headers: list[str]) -> ImportMapping:
    """Suggest a column mapping for a transaction CSV export.

    Matching is case-insensitive; the first header containing each keyword wins.

    Args:
        headers: List of CSV column names.

    Returns:
        ImportMapping with empty strings for undetected columns.
    """
    keywords = {
        "type_column": ("type", "kind"),
        "amount_column": ("amount", "value"),
        "category_column": ("category",),
        "date_column": ("date",),
        "description_column": ("description", "memo", "note"),
    }
    mapping: dict[str, str] = {key: "" for key in keywords}

    for header in headers:
        lowered = header.lower()
        for key, words in keywords.items():
            if not mapping[key] and any(word in lowered for word in words):
                mapping[key] = header
                break

    return ImportMapping(
        type_column=mapping["type_column"],
        amount_column=mapping["amount_column"],
        category_column=mapping["category_column"],
        date_column=mapping["date_column"],
        description_column=mapping["description_column"],
    )


def parse_import_row(row: dict[str, str], mapping: ImportMapping) -> dict[str, Any] | None:
    """Parse a CSV row into raw transaction fields.

    The date is returned as written; callers normalize it. Rows with a
    signed amount and no type column are classified by sign.

    Args:
        row: CSV row as dictionary.
        mapping: Column mapping configuration.

    Returns:
        Dictionary with type, amount, category, date, description,
        or None if the row should be skipped.
    """
    raw_date = (row.get(mapping["date_column"]) or "").strip()
    raw_amount = (row.get(mapping["amount_column"]) or "").strip().replace("$", "").replace(",", "")
    if not raw_date or not raw_amount:
        return None

    try:
        amount = float(raw_amount)
    except ValueError:
        return None

    raw_type = (row.get(mapping["type_column"]) or "").strip().lower() if mapping["type_column"] else ""
    if raw_type:
        txn_type = raw_type
    else:
        txn_type = "expense" if amount < 0 else "income"

    category = (row.get(mapping["category_column"]) or "").strip() or "Uncategorized"
    description = (row.get(mapping["description_column"]) or "").strip() if mapping["description_column"] else ""

    return {
        "type": txn_type,
        "amount": abs(amount),
        "category": category,
        "date": raw_date,
        "description": description,
    }
