"""In-memory implementation of the key/value store."""

from __future__ import annotations

from typing import Any, Dict, Tuple

from .base import KeyValueStore


class InMemoryStore(KeyValueStore):
    """Keep published values in a local dict.

    Used by the CLI and by tests. Nothing survives the process.
    """

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def get_ok(self, key: str) -> Tuple[Any, bool]:
        if key in self._data:
            return self._data[key], True
        return None, False
