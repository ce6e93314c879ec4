"""Key-value caches injected into the advisor layer.

Anything that needs to remember responses or rate-limit windows receives
one of these instead of keeping module-level state.
"""

import hashlib
import json
from pathlib import Path
from typing import Any, Protocol

from budgetlens.store.queries import get_cached_response, set_cached_response


class Cache(Protocol):
    """Minimal key-value store; last write wins."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryCache:
    """Process-local cache backed by a dict."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class SqliteCache:
    """Cache persisted in the response_cache table.

    Values must be JSON-serializable.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path

    def get(self, key: str) -> Any | None:
        raw = get_cached_response(key, self.db_path)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        set_cached_response(key, json.dumps(value), self.db_path)


def cache_key(namespace: str, payload: Any) -> str:
    """Hash a JSON-serializable request payload into a cache key.

    Args:
        namespace: Prefix separating different kinds of cached responses.
        payload: Request content; key order does not affect the hash.

    Returns:
        Key of the form "<namespace>:<sha256 hex>".
    """
    body = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return f"{namespace}:{hashlib.sha256(body.encode('utf-8')).hexdigest()}"
