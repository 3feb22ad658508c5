"""Typed error hierarchy for Orka API and build operations.

Every error carries the API ``operation`` that produced it so reports can
name the failing call without leaking credentials.
"""

from __future__ import annotations

from typing import Optional

from .constants import API_REQUEST_ERROR_MESSAGE, API_RESPONSE_ERROR_MESSAGE


class OrkaError(Exception):
    """Base error for all Orka build operations."""

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        super().__init__(message)

    def __repr__(self) -> str:
        parts = [f"{type(self).__name__}({self.args[0]!r}"]
        if self.operation:
            parts.append(f"operation={self.operation!r}")
        if self.status_code is not None:
            parts.append(f"status_code={self.status_code!r}")
        return ", ".join(parts) + ")"


class RequestError(OrkaError):
    """The Orka API could not be reached."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"{API_REQUEST_ERROR_MESSAGE} [{reason}]", operation=operation
        )


class ResponseError(OrkaError):
    """The Orka API answered with a non-success status code."""

    def __init__(self, operation: str, status_code: int, reason: str = "") -> None:
        status = f"{status_code} {reason}".strip()
        self.reason = reason
        super().__init__(
            f"{API_RESPONSE_ERROR_MESSAGE} [{status}]",
            operation=operation,
            status_code=status_code,
        )


class ParseError(OrkaError):
    """An API response could not be turned into usable values."""

    pass


class ConfigError(Exception):
    """Build configuration is missing or invalid."""

    pass
