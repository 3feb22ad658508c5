"""User-visible reporting sinks for build progress."""

from __future__ import annotations

import logging
from typing import List, Protocol, Tuple

import typer

logger = logging.getLogger(__name__)


class Reporter(Protocol):
    """Protocol for the sink build steps report progress to."""

    def say(self, message: str) -> None:
        """Report normal progress."""

    def error(self, message: str) -> None:
        """Report a failure."""


class LoggingReporter:
    """Send progress to the ``orkabuild`` logger."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def say(self, message: str) -> None:
        self._log.info(message)

    def error(self, message: str) -> None:
        self._log.error(message)


class ConsoleReporter(LoggingReporter):
    """Echo progress to the terminal and log it at debug level."""

    def __init__(self, prefix: str = "==> orka: ") -> None:
        super().__init__()
        self.prefix = prefix

    def say(self, message: str) -> None:
        self._log.debug(message)
        typer.echo(f"{self.prefix}{message}")

    def error(self, message: str) -> None:
        self._log.debug(message)
        typer.secho(f"{self.prefix}{message}", fg=typer.colors.RED, err=True)


class RecordingReporter:
    """Collect messages in memory; handy for embedding and tests."""

    def __init__(self) -> None:
        self.messages: List[Tuple[str, str]] = []

    def say(self, message: str) -> None:
        self.messages.append(("say", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    @property
    def errors(self) -> List[str]:
        return [m for kind, m in self.messages if kind == "error"]

    @property
    def said(self) -> List[str]:
        return [m for kind, m in self.messages if kind == "say"]
