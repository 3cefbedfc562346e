"""Request-scoped context for the canonical per-request log line.

Handlers and services add fields while a request is in flight;
``RequestLoggingMiddleware`` creates the dict at request start and logs it
once at request end.

Usage:
    from core.wide_event import set_wide_event_fields

    set_wide_event_fields(certificate_style="tech", certificate_format="pdf")
    set_wide_event_nested("payment", intent_id="pi_123", amount_cents=999)
"""

from contextvars import ContextVar
from typing import Any

_wide_event: ContextVar[dict[str, Any]] = ContextVar("wide_event")


def init_wide_event() -> dict[str, Any]:
    """Start a new event dict for the current async context."""
    event: dict[str, Any] = {}
    _wide_event.set(event)
    return event


def get_wide_event() -> dict[str, Any]:
    """Get the current wide event dict. Returns empty dict if not initialized."""
    try:
        return _wide_event.get()
    except LookupError:
        return {}


def set_wide_event_field(key: str, value: Any) -> None:
    """Set one field. No-op outside a request (CLI, tests without middleware)."""
    event = get_wide_event()
    if event:
        event[key] = value


def set_wide_event_fields(**kwargs: Any) -> None:
    """Set several fields. No-op outside a request."""
    event = get_wide_event()
    if event:
        event.update(kwargs)


def set_wide_event_nested(category: str, **kwargs: Any) -> None:
    """Set fields under a nested category.

    Example:
        set_wide_event_nested("order", style="kids", buyer_email_present=True)
        # Results in: {"order": {"style": "kids", "buyer_email_present": True}}
    """
    event = get_wide_event()
    if not event:
        return
    event.setdefault(category, {}).update(kwargs)


def clear_wide_event() -> None:
    """Reset the event after it has been emitted."""
    _wide_event.set({})
