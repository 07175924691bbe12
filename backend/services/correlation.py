# FILE: backend/services/correlation.py
"""
Correlation ID utilities

The id for the current request lives in a context variable set by
CorrelationIdMiddleware, so any coroutine handling that request can tag its
log lines without threading the id through every call.
"""
import uuid
from contextvars import ContextVar
from typing import Optional

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    """Generate unique correlation ID"""
    return str(uuid.uuid4())


def set_correlation_id(value: Optional[str] = None) -> str:
    """Bind an id to the current context, generating one when absent"""
    value = value or generate_correlation_id()
    _correlation_id.set(value)
    return value


def get_correlation_id() -> str:
    """Current correlation ID, or a fresh one outside a request"""
    return _correlation_id.get() or generate_correlation_id()
