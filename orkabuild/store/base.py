"""Key/value store abstraction shared with the build host."""

from __future__ import annotations

from typing import Any, Protocol, Tuple


class KeyValueStore(Protocol):
    """Protocol for the host-side state bag the build publishes into."""

    def put(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for ``key`` or ``default``."""

    def get_ok(self, key: str) -> Tuple[Any, bool]:
        """Return ``(value, True)`` if ``key`` is set, else ``(None, False)``."""
