"""Diagnostic observer hooks and logging setup."""

import logging
from typing import Any, Protocol, runtime_checkable

from ms_local.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@runtime_checkable
class DiagnosticObserver(Protocol):
    """Receives debug/error events from a provider. Messages use %-style args."""

    def debug(self, message: str, *args: Any) -> None: ...

    def error(self, message: str, *args: Any) -> None: ...


class LoggingObserver:
    """Observer that forwards events to a stdlib logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("ms_local.diagnostics")

    def debug(self, message: str, *args: Any) -> None:
        self.logger.debug(message, *args)

    def error(self, message: str, *args: Any) -> None:
        self.logger.error(message, *args)


def configure_logging(level: str | int | None = None) -> None:
    """Configure root logging for scripts embedding the provider."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
