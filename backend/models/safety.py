# FILE: backend/models/safety.py
"""
Safety gate models
"""
from typing import Dict, List, Literal, Optional
from pydantic import Field

from backend.models.base import CamelModel

Severity = Literal["low", "medium", "high"]
ContentKind = Literal["post", "chat", "journal"]


class ModerationVerdict(CamelModel):
    """Moderation output; fallback=True when the local heuristic produced it"""
    flagged: bool
    categories: Dict[str, bool] = Field(default_factory=dict)
    safe: bool
    fallback: bool = False


class CrisisAssessment(CamelModel):
    """Local crisis detection output"""
    immediate_crisis: bool
    emotional_distress: bool
    needs_support: bool
    severity: Severity
    matched_terms: List[str] = Field(default_factory=list)


class SafetyScreen(CamelModel):
    """Both gate outputs plus the policy decision for one content type"""
    kind: ContentKind
    moderation: ModerationVerdict
    crisis: CrisisAssessment
    blocked: bool


class SupportResource(CamelModel):
    """Hotline, text line, website or emergency entry"""
    name: str
    phone: Optional[str] = None
    text: Optional[str] = None
    website: Optional[str] = None
    available: Optional[str] = None
    note: Optional[str] = None


class SupportBlock(CamelModel):
    """Resources attached to a response when distress or crisis is detected"""
    type: Optional[str] = None
    crisis: Optional[bool] = None
    severity: Optional[Severity] = None
    message: str
    resources: List[SupportResource] = Field(default_factory=list)
    coping_strategies: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


class SentimentResult(CamelModel):
    """Same contract for the external service and the lexicon scorer"""
    score: float = Field(ge=-1.0, le=1.0)
    magnitude: float = Field(ge=0.0)
    label: Literal["positive", "neutral", "negative"]
    confidence: float = Field(ge=0.0, le=1.0)
    fallback: bool = False
