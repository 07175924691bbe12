# FILE: backend/routes/chat.py
"""
Chat endpoints
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends

from backend.models.chat import (
    ChatHistory, ChatMessageRequest, ChatReply, ChatSessionStart, ExerciseSuggestion
)
from backend.services.container import ServiceContainer, get_container

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/session", response_model=ChatSessionStart)
async def start_session(container: ServiceContainer = Depends(get_container)):
    return container.chat.new_session()


@router.post("/message", response_model=ChatReply, response_model_exclude_none=True)
async def send_message(request: ChatMessageRequest, container: ServiceContainer = Depends(get_container)):
    """Send a message and receive a supportive reply"""
    return await container.chat.handle_message(request.message, request.session_id)


@router.get("/history/{session_id}", response_model=ChatHistory, response_model_exclude_none=True)
async def chat_history(
    session_id: str,
    limit: Optional[int] = None,
    container: ServiceContainer = Depends(get_container)
):
    return await container.chat.history(session_id, limit)


@router.get("/breathing-exercise", response_model=ExerciseSuggestion, response_model_exclude_none=True)
async def breathing_exercise(container: ServiceContainer = Depends(get_container)):
    return container.chat.breathing_exercise()


@router.get("/grounding", response_model=ExerciseSuggestion, response_model_exclude_none=True)
async def grounding_technique(container: ServiceContainer = Depends(get_container)):
    return container.chat.grounding_technique()
