# FILE: backend/routes/health.py
"""
Health check endpoint
"""
import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend.services.container import ServiceContainer, get_container
from backend.services.diagnostics import run_diagnostics

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def health_check(container: ServiceContainer = Depends(get_container)):
    """
    Health check endpoint
    Returns 503 when the store is unreachable; generation is optional
    """
    diagnostics = await run_diagnostics(container)
    healthy = diagnostics["store"]["status"] == "ok"

    body = {
        "status": "healthy" if healthy else "degraded",
        "service": "Sanjeevani",
        "mode": container.settings.llm_mode,
        "llm_active": bool(container.registry.providers),
        **diagnostics
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)
