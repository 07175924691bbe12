# FILE: backend/middleware/correlation.py
"""
Correlation ID middleware
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from backend.services.correlation import set_correlation_id

HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Bind X-Request-ID (or a fresh id) to the request context and echo it back"""

    async def dispatch(self, request: Request, call_next):
        correlation_id = set_correlation_id(request.headers.get(HEADER))
        response = await call_next(request)
        response.headers[HEADER] = correlation_id
        return response
