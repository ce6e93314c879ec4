"""Domain type definitions for budgetlens.

These NewTypes provide semantic clarity and help with type checking:
- Money: Amount in dollars (magnitude, sign implied by transaction type)
- Month: Month in YYYY-MM format
- CategoryName: Name of a spending or income category
- Description: Transaction description text
"""

from typing import Literal, NewType

# Money amounts are plain magnitudes; the transaction type carries the sign
Money = NewType("Money", float)

# Month is always in YYYY-MM format (e.g., "2025-01")
Month = NewType("Month", str)

# Category name, free text, grouped by exact match
CategoryName = NewType("CategoryName", str)

# Transaction description text
Description = NewType("Description", str)

TransactionType = Literal["income", "expense"]

TRANSACTION_TYPES: tuple[str, ...] = ("income", "expense")

ProgressStatus = Literal["safe", "warning", "exceeded"]

FinancialHealth = Literal["excellent", "good", "fair", "needs-attention"]

Trend = Literal["up", "down", "stable"]
