# FILE: backend/routes/journal.py
"""
Journal endpoints
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query

from backend.models.journal import (
    JournalCreateResponse, JournalEntries, JournalEntryCreate, JournalEntryResponse,
    JournalPrompt, JournalPrompts
)
from backend.services.container import ServiceContainer, get_container

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/entry", status_code=201, response_model=JournalCreateResponse, response_model_exclude_none=True)
async def create_entry(request: JournalEntryCreate, container: ServiceContainer = Depends(get_container)):
    """Create a private journal entry"""
    return await container.journal.create_entry(
        request.content, request.session_id, mood=request.mood, prompt=request.prompt
    )


@router.get("/entries/{session_id}", response_model=JournalEntries)
async def list_entries(
    session_id: str,
    limit: Optional[int] = None,
    container: ServiceContainer = Depends(get_container)
):
    return await container.journal.list_entries(session_id, limit)


@router.get("/entry/{session_id}/{entry_id}", response_model=JournalEntryResponse)
async def get_entry(session_id: str, entry_id: str, container: ServiceContainer = Depends(get_container)):
    return await container.journal.get_entry(session_id, entry_id)


@router.get("/prompt", response_model=JournalPrompt, response_model_exclude_none=True)
async def journal_prompt(
    mood: Optional[str] = None,
    session_id: Optional[str] = Query(None, alias="sessionId"),
    container: ServiceContainer = Depends(get_container)
):
    return await container.journal.prompt(mood=mood, session_id=session_id)


@router.get("/prompts", response_model=JournalPrompts, response_model_exclude_none=True)
async def journal_prompts(
    count: Optional[int] = None,
    mood: Optional[str] = None,
    container: ServiceContainer = Depends(get_container)
):
    """Several prompts at once (at most 10)"""
    return await container.journal.prompts(count=count, mood=mood)
