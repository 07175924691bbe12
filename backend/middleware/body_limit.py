# FILE: backend/middleware/body_limit.py
"""
Body size limit middleware
"""
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject write requests whose declared body exceeds max_size bytes"""

    def __init__(self, app, max_size: int):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next):
        if request.method in ("POST", "PUT", "PATCH"):
            declared = request.headers.get("content-length")
            if declared is not None:
                try:
                    size = int(declared)
                except ValueError:
                    return JSONResponse(
                        status_code=400,
                        content={"error": "Invalid request", "detail": "Malformed Content-Length"}
                    )
                if size > self.max_size:
                    logger.warning(f"Request body too large: {size} > {self.max_size}")
                    return JSONResponse(
                        status_code=413,
                        content={"error": "Request body too large", "detail": f"Limit is {self.max_size} bytes"}
                    )

        return await call_next(request)
