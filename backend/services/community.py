# FILE: backend/services/community.py
"""
Anonymous community posts
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from backend.errors import ContentBlocked, NotFoundOrExpired, ValidationError
from backend.governance.redaction import redact_pii
from backend.governance.resources import post_support
from backend.models.posts import (
    CommunityStats, Post, PostCreateResponse, PostFeed, PostView, SupportAdded
)
from backend.services.correlation import get_correlation_id
from backend.services.repositories import PostRepository
from backend.services.safety_gate import SafetyGate
from backend.services.telemetry import record_event

logger = logging.getLogger(__name__)

MAX_POST_LENGTH = 500
DEFAULT_FEED_LIMIT = 20


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommunityService:
    """Create, list and support anonymous posts"""

    def __init__(
        self,
        posts: PostRepository,
        gate: SafetyGate,
        redact: bool = True,
        now: Callable[[], datetime] = _utcnow
    ):
        self.posts = posts
        self.gate = gate
        self.redact = redact
        self.now = now

    async def create(self, content: Optional[str], feeling: Optional[str] = None) -> PostCreateResponse:
        if not content or not content.strip():
            raise ValidationError("Content is required")
        if len(content) > MAX_POST_LENGTH:
            raise ValidationError(f"Content must be {MAX_POST_LENGTH} characters or less")

        screen = await self.gate.screen(content, "post")
        if screen.blocked:
            raise ContentBlocked(
                "Your post contains content that may be harmful. Please revise and try again."
            )
        crisis = screen.crisis

        text = content.strip()
        if self.redact:
            text = redact_pii(text)

        post = Post(
            id=str(uuid.uuid4()),
            content=text,
            feeling=feeling or "anonymous",
            timestamp=self.now().isoformat(),
            support_count=0,
            crisis_detected=crisis.needs_support,
            severity=crisis.severity,
        )
        await self.posts.save(post.to_record())

        logger.info(f"[{get_correlation_id()}] Post stored: {post.id} severity={post.severity}")
        record_event("post_created", severity=post.severity)

        return PostCreateResponse(
            post=PostView(
                id=post.id,
                content=post.content,
                feeling=post.feeling,
                timestamp=post.timestamp,
                support_count=post.support_count,
            ),
            support_resources=post_support(crisis),
        )

    async def feed(self, limit: Optional[int] = None, include_support: bool = False) -> PostFeed:
        """Newest live posts; crisis flags only when explicitly requested"""
        limit = limit if limit and limit > 0 else DEFAULT_FEED_LIMIT
        views = []
        for record in (await self.posts.all())[:limit]:
            flagged = include_support and record.get("crisisDetected")
            views.append(PostView(
                id=record["id"],
                content=record["content"],
                feeling=record.get("feeling") or "anonymous",
                timestamp=record["timestamp"],
                support_count=record.get("supportCount") or 0,
                needs_support=True if flagged else None,
                severity=record.get("severity") if flagged else None,
            ))
        return PostFeed(posts=views, total=len(views), timestamp=self.now().isoformat())

    async def add_support(self, post_id: str) -> SupportAdded:
        count = await self.posts.add_support(post_id)
        if count is None:
            raise NotFoundOrExpired("Post not found or expired")
        record_event("post_supported")
        return SupportAdded(support_count=count)

    async def stats(self) -> CommunityStats:
        posts = await self.posts.all()
        today = self.now().date()

        feelings: Dict[str, int] = {}
        posts_today = 0
        for post in posts:
            feeling = post.get("feeling") or "anonymous"
            feelings[feeling] = feelings.get(feeling, 0) + 1
            if datetime.fromisoformat(post["timestamp"]).astimezone(timezone.utc).date() == today:
                posts_today += 1

        return CommunityStats(
            total_posts=len(posts),
            total_support=sum(p.get("supportCount") or 0 for p in posts),
            posts_today=posts_today,
            most_common_feelings=feelings,
            last_updated=self.now().isoformat(),
        )
