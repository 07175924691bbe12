# FILE: backend/routes/session.py
"""
Anonymous session lifecycle endpoints
"""
import logging
from fastapi import APIRouter, Depends

from backend.models.sessions import SessionDestroyed, SessionRotated, SessionToken
from backend.services.container import ServiceContainer, get_container

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", status_code=201, response_model=SessionToken)
async def create_session(container: ServiceContainer = Depends(get_container)):
    return container.sessions.create()


@router.post("/{token}/rotate", response_model=SessionRotated)
async def rotate_session(token: str, container: ServiceContainer = Depends(get_container)):
    """Move every live record to a fresh token"""
    return await container.sessions.rotate(token)


@router.delete("/{token}", response_model=SessionDestroyed)
async def destroy_session(token: str, container: ServiceContainer = Depends(get_container)):
    """Purge everything held under the token"""
    return await container.sessions.destroy(token)
