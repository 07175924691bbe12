# FILE: backend/errors.py
"""
Error taxonomy shared by services and routes
"""
from typing import Any, Dict, Optional


class SanjeevaniError(Exception):
    """Base error carrying an HTTP status for the API layer"""

    status_code = 500
    error = "Internal server error"

    def __init__(self, detail: Optional[str] = None, **extra: Any):
        super().__init__(detail or self.error)
        self.detail = detail or self.error
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "detail": self.detail, **self.extra}


class ValidationError(SanjeevaniError):
    """Missing or oversized input; nothing was written"""

    status_code = 400
    error = "Invalid request"


class ContentBlocked(SanjeevaniError):
    """Moderation rejected the content for this content type"""

    status_code = 400
    error = "Content violates community guidelines"

    def __init__(self, detail: Optional[str] = None, **extra: Any):
        super().__init__(detail, blocked=True, **extra)


class NotFoundOrExpired(SanjeevaniError):
    """Record absent; expired and never-existed look the same"""

    status_code = 404
    error = "Not found or expired"


class UpstreamUnavailable(SanjeevaniError):
    """External classifier or generator failed; always absorbed by a fallback"""

    status_code = 502
    error = "Upstream service unavailable"


class StoreUnavailable(SanjeevaniError):
    """Ephemeral store unreachable; requests fail closed"""

    status_code = 503
    error = "Storage temporarily unavailable"
