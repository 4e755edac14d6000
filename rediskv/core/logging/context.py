"""
Request context management using contextvars for automatic propagation.

The context is set once by the caller (a web handler, a worker job...) and is
then visible to every facade call awaited in the same task, and to tasks
spawned from it, without passing it through each function.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_request_context: ContextVar[str | None] = ContextVar("request_id", default=None)
_caller_context: ContextVar[str | None] = ContextVar("caller", default=None)


def set_request_context(
    request_id: str | None = None,
    caller: str | None = None,
) -> None:
    """
    Set the request context for the current async context.

    Args:
        request_id: Correlation identifier of the current unit of work
        caller: Name of the component issuing store commands
    """
    if request_id is not None:
        _request_context.set(request_id)
    if caller is not None:
        _caller_context.set(caller)


def get_current_request_context() -> str | None:
    """Get the current request ID, or None if not set."""
    return _request_context.get()


def get_current_caller_context() -> str | None:
    """Get the current caller name, or None if not set."""
    return _caller_context.get()


def clear_request_context() -> None:
    """
    Clear the request context.

    Context is isolated per task already; this is mostly useful in tests.
    """
    _request_context.set(None)
    _caller_context.set(None)


@contextmanager
def request_context(
    request_id: str | None = None, caller: str | None = None
) -> Iterator[None]:
    """
    Scope a request context to a ``with`` block, restoring the previous one on exit.

    Usage::

        with request_context(request_id="req-42", caller="checkout"):
            await kv.set("cart:42", "3")
    """
    tokens = []
    if request_id is not None:
        tokens.append((_request_context, _request_context.set(request_id)))
    if caller is not None:
        tokens.append((_caller_context, _caller_context.set(caller)))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def get_context_info() -> dict[str, str | None]:
    """
    Get current context information for debugging.

    Returns:
        Dictionary with current request_id and caller
    """
    return {
        "request_id": get_current_request_context(),
        "caller": get_current_caller_context(),
    }
