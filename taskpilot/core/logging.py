"""Contextual logging for taskpilot.

Every component logs through a ``ContextualLogger``: a ``LoggerAdapter`` that stamps a set of
dimensions (component, batch id, action index, ...) on each record. Child loggers are derived
with ``with_context`` so dimensions accumulate along the call path.
"""

import logging
import sys
from typing import Any, Dict, MutableMapping, Optional, Tuple

from rich.console import Console
from rich.logging import RichHandler

from taskpilot.core.config import settings

_DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class _DimensionFormatter(logging.Formatter):
    """Plain formatter that appends the record's dimensions as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        dimensions = getattr(record, "dimensions", None)
        if not dimensions:
            return message
        rendered = " ".join(f"{key}={value}" for key, value in dimensions.items())
        return f"{message} [{rendered}]"


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter carrying structured dimensions."""

    def __init__(self, logger: logging.Logger, dimensions: Optional[Dict[str, Any]] = None):
        """Initialize the adapter.

        Args:
            logger: Underlying stdlib logger
            dimensions: Key/value pairs attached to every record
        """
        self.dimensions: Dict[str, Any] = dict(dimensions or {})
        super().__init__(logger, self.dimensions)

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        """Merge the adapter dimensions into the record's ``extra``."""
        extra = dict(kwargs.get("extra") or {})
        extra["dimensions"] = {**self.dimensions, **extra.get("dimensions", {})}
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a child logger with additional dimensions.

        Args:
            **dimensions: Dimensions to add (existing keys are overridden)

        Returns:
            A new ContextualLogger sharing the same underlying logger
        """
        return ContextualLogger(self.logger, {**self.dimensions, **dimensions})


class LoggerConfigurator:
    """Builds configured contextual loggers."""

    @staticmethod
    def _build_handler() -> logging.Handler:
        if settings.LOCAL_DEVELOPMENT:
            console = Console(width=200, force_terminal=True)
            handler: logging.Handler = RichHandler(
                console=console, show_time=True, show_path=False, rich_tracebacks=True
            )
            handler.setFormatter(_DimensionFormatter("%(message)s"))
            return handler

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_DimensionFormatter(_DEFAULT_FORMAT))
        return handler

    @classmethod
    def configure_logger(
        cls, name: str, dimensions: Optional[Dict[str, Any]] = None
    ) -> ContextualLogger:
        """Configure a named logger and wrap it in a ContextualLogger.

        Args:
            name: Logger name
            dimensions: Initial dimensions for the adapter

        Returns:
            Configured ContextualLogger
        """
        base_logger = logging.getLogger(name)

        # Avoid adding handlers multiple times
        if not base_logger.handlers:
            base_logger.addHandler(cls._build_handler())
            base_logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))

        return ContextualLogger(base_logger, dimensions)


logger = LoggerConfigurator.configure_logger("taskpilot")
