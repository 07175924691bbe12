# FILE: backend/models/posts.py
"""
Community post models
"""
from typing import Dict, List, Optional
from pydantic import BaseModel

from backend.models.base import CamelModel
from backend.models.safety import Severity, SupportBlock


class PostCreate(BaseModel):
    """Submit anonymous post"""
    content: Optional[str] = None
    feeling: Optional[str] = None


class Post(CamelModel):
    """Stored post record"""
    id: str
    content: str
    feeling: str = "anonymous"
    timestamp: str
    support_count: int = 0
    crisis_detected: bool = False
    severity: Severity = "low"


class PostView(CamelModel):
    """Post as shown in the feed"""
    id: str
    content: str
    feeling: str
    timestamp: str
    support_count: int = 0
    needs_support: Optional[bool] = None
    severity: Optional[Severity] = None


class PostCreateResponse(CamelModel):
    success: bool = True
    post: PostView
    support_resources: Optional[SupportBlock] = None


class PostFeed(CamelModel):
    posts: List[PostView]
    total: int
    timestamp: str


class SupportAdded(CamelModel):
    success: bool = True
    support_count: int
    message: str = "Support added to post"


class CommunityStats(CamelModel):
    total_posts: int
    total_support: int
    posts_today: int
    most_common_feelings: Dict[str, int]
    last_updated: str
