"""
Rich-based logger with request context support for rediskv.

Log lines emitted while a request context is active are prefixed with the
request id and caller, so store commands can be traced back to the unit of work
that issued them.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from rediskv.core.config.settings import settings


class CompactFormatter(logging.Formatter):
    """Shortens ``rediskv.persistence.redis.redis_client`` to ``redis.redis_client``."""

    def format(self, record):
        if record.name.startswith("rediskv."):
            parts = record.name.split(".")
            if len(parts) > 2:
                record.name = ".".join(parts[-2:])

        return super().format(record)


_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "debug": "dim white",
    }
)
_console = Console(theme=_theme)


class ContextLogger:
    """
    Logger wrapper that adds request and caller context to messages.

    Context is added as a message prefix instead of a format-string field, so
    third-party handlers keep working with plain formats.
    """

    def __init__(
        self,
        logger: logging.Logger,
        request_id: str | None = None,
        caller: str | None = None,
    ):
        self.logger = logger
        self.request_id = request_id or "---"
        self.caller = caller or "---"

    def _format_message(self, message: str) -> str:
        """Add context prefix to message."""
        # Read context variables on each call so one logger serves many requests
        from .context import get_current_caller_context, get_current_request_context

        current_request = get_current_request_context() or self.request_id
        current_caller = get_current_caller_context() or self.caller

        prefix = ""
        if current_request != "---":
            prefix += f"[R:{current_request}]"
        if current_caller != "---":
            prefix += f"[C:{current_caller}]"
        return f"{prefix} {message}" if prefix else message

    def debug(self, message: str, *args, **kwargs) -> None:
        self.logger.debug(self._format_message(message), *args, **kwargs)

    def info(self, message: str, *args, **kwargs) -> None:
        self.logger.info(self._format_message(message), *args, **kwargs)

    def warning(self, message: str, *args, **kwargs) -> None:
        self.logger.warning(self._format_message(message), *args, **kwargs)

    def error(self, message: str, *args, **kwargs) -> None:
        self.logger.error(self._format_message(message), *args, **kwargs)

    def bind(self, **kwargs) -> ContextLogger:
        """
        Create a new ContextLogger with additional or updated context.

        Example:
            worker_logger = logger.bind(caller="cleanup-worker")
        """
        return ContextLogger(
            self.logger,
            request_id=kwargs.get("request_id", self.request_id),
            caller=kwargs.get("caller", self.caller),
        )


def setup_logging(
    *,
    level: str = "INFO",
    mode: str = "PROD",
    log_dir: str | None = None,
    console_fmt: str | None = None,
    file_fmt: str | None = None,
) -> None:
    """
    Initialize the root logger with Rich formatting.

    Parameters
    ----------
    level : str
        Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
    mode : str
        "DEV" creates daily log files + console; anything else → console only
    log_dir : str, optional
        Directory for log files (DEV mode only)
    console_fmt : str, optional
        Console format string
    file_fmt : str, optional
        File format string
    """
    lvl = level.upper()
    lvl = lvl if lvl in ("DEBUG", "INFO", "WARNING", "ERROR") else "INFO"

    # RichHandler already shows level and time
    console_format = console_fmt or "[%(name)s] %(message)s"
    file_format = file_fmt or "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    rich_handler = RichHandler(
        console=_console,
        rich_tracebacks=True,
        show_time=True,
        show_level=True,
        markup=False,
    )
    rich_handler.setFormatter(CompactFormatter(console_format))

    handlers: list[logging.Handler] = [rich_handler]

    if mode.upper() == "DEV" and log_dir:
        os.makedirs(log_dir, exist_ok=True)
        logfile = os.path.join(log_dir, f"rediskv_{datetime.now():%Y%m%d}.log")
        file_handler = logging.FileHandler(logfile, encoding="utf-8")
        file_handler.setFormatter(CompactFormatter(file_format))
        handlers.append(file_handler)

    logging.basicConfig(level=lvl, handlers=handlers, force=True)

    # redis-py is chatty at DEBUG
    logging.getLogger("redis").setLevel(max(logging.INFO, logging.getLevelName(lvl)))

    logging.getLogger("rediskv.logging").info(f"Logging initialized ({lvl})")


def setup_app_logging() -> None:
    """Initialize logging from ``settings`` (LOG_LEVEL, ENVIRONMENT, LOG_DIR)."""
    setup_logging(
        level=settings.log_level,
        mode="DEV" if settings.is_development else "PROD",
        log_dir=settings.log_dir if settings.is_development else None,
    )


def get_logger(name: str) -> ContextLogger:
    """
    Get a logger that automatically uses request context variables.

    Args:
        name: Logger name (usually __name__)

    Returns:
        ContextLogger instance picking up request_id and caller on every call
    """
    from .context import get_current_caller_context, get_current_request_context

    return ContextLogger(
        logging.getLogger(name),
        request_id=get_current_request_context(),
        caller=get_current_caller_context(),
    )
