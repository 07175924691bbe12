# FILE: backend/routes/mood.py
"""
Mood tracking endpoints
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends

from backend.models.mood import MoodAnalytics, MoodCheckIn, MoodCheckInResponse, MoodHistory, MoodOptions
from backend.services.container import ServiceContainer, get_container

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/checkin", status_code=201, response_model=MoodCheckInResponse, response_model_exclude_none=True)
async def check_in(request: MoodCheckIn, container: ServiceContainer = Depends(get_container)):
    """Record a mood check-in"""
    return await container.mood.check_in(
        request.mood, request.session_id, intensity=request.intensity, notes=request.notes
    )


@router.get("/history/{session_id}", response_model=MoodHistory)
async def mood_history(
    session_id: str,
    days: Optional[int] = None,
    limit: Optional[int] = None,
    container: ServiceContainer = Depends(get_container)
):
    return await container.mood.history(session_id, days=days, limit=limit)


@router.get("/analytics/{session_id}", response_model=MoodAnalytics)
async def mood_analytics(
    session_id: str,
    period: Optional[int] = None,
    container: ServiceContainer = Depends(get_container)
):
    """Analytics and personal insights over the last `period` days (default 7)"""
    return await container.mood.analytics(session_id, period_days=period)


@router.get("/options", response_model=MoodOptions)
async def mood_options(container: ServiceContainer = Depends(get_container)):
    return container.mood.options()
