# FILE: backend/routes/posts.py
"""
Community post endpoints
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query

from backend.models.posts import (
    CommunityStats, PostCreate, PostCreateResponse, PostFeed, SupportAdded
)
from backend.services.container import ServiceContainer, get_container

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", status_code=201, response_model=PostCreateResponse, response_model_exclude_none=True)
async def create_post(request: PostCreate, container: ServiceContainer = Depends(get_container)):
    """Submit an anonymous post"""
    return await container.community.create(request.content, request.feeling)


@router.get("", response_model=PostFeed, response_model_exclude_none=True)
async def list_posts(
    limit: Optional[int] = None,
    include_support: bool = Query(False, alias="includeSupport"),
    container: ServiceContainer = Depends(get_container)
):
    """Anonymous feed, newest first"""
    return await container.community.feed(limit=limit, include_support=include_support)


@router.get("/stats", response_model=CommunityStats)
async def community_stats(container: ServiceContainer = Depends(get_container)):
    return await container.community.stats()


@router.post("/{post_id}/support", response_model=SupportAdded)
async def add_support(post_id: str, container: ServiceContainer = Depends(get_container)):
    """Anonymous support reaction"""
    return await container.community.add_support(post_id)
