"""Database store layer - provides persistence for the application.

This module re-exports all public database functions for easy importing.
"""

from budgetlens.store.cache import Cache, MemoryCache, SqliteCache, cache_key
from budgetlens.store.queries import (
    delete_goal,
    delete_transaction,
    get_all_transactions,
    get_cached_response,
    get_goals,
    get_starting_balance,
    insert_transaction,
    set_cached_response,
    set_starting_balance,
    upsert_goal,
)
from budgetlens.store.schema import database_exists, get_db_path, init_database

__all__ = [
    # Schema
    "database_exists",
    "get_db_path",
    "init_database",
    # Queries
    "delete_goal",
    "delete_transaction",
    "get_all_transactions",
    "get_cached_response",
    "get_goals",
    "get_starting_balance",
    "insert_transaction",
    "set_cached_response",
    "set_starting_balance",
    "upsert_goal",
    # Caches
    "Cache",
    "MemoryCache",
    "SqliteCache",
    "cache_key",
]
