"""Logging module for rediskv."""

from .context import clear_request_context, request_context, set_request_context
from .logger import get_logger, setup_app_logging, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "setup_app_logging",
    "request_context",
    "set_request_context",
    "clear_request_context",
]
