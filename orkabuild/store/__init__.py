"""Host state stores for published build values."""

from __future__ import annotations

from .base import KeyValueStore
from .inmemory import InMemoryStore

__all__ = ["KeyValueStore", "InMemoryStore"]
