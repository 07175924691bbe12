# FILE: backend/middleware/rate_limit.py
"""
Rate limiting middleware (in-memory sliding window per client IP)
"""
import logging
import time
from collections import deque
from typing import Callable, Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject a client's requests beyond `rpm` in any 60 second window"""

    def __init__(self, app, rpm: int = 100, clock: Callable[[], float] = time.monotonic):
        super().__init__(app)
        self.rpm = rpm
        self.clock = clock
        self.requests: Dict[str, Deque[float]] = {}
        self._last_prune = clock()

    def _prune(self, now: float) -> None:
        """Forget clients with no request inside the window, at most once per window"""
        if now - self._last_prune < WINDOW_SECONDS:
            return
        self._last_prune = now
        idle = [
            ip for ip, window in self.requests.items()
            if not window or now - window[-1] >= WINDOW_SECONDS
        ]
        for ip in idle:
            del self.requests[ip]

    async def dispatch(self, request: Request, call_next):
        # Only the IP is used; it is never stored with content
        client_ip = request.client.host if request.client else "unknown"
        now = self.clock()
        self._prune(now)

        window = self.requests.setdefault(client_ip, deque())
        while window and now - window[0] >= WINDOW_SECONDS:
            window.popleft()

        if len(window) >= self.rpm:
            logger.warning("Rate limit exceeded")
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests",
                    "detail": "Too many requests from this IP, please try again later."
                }
            )

        window.append(now)
        return await call_next(request)
