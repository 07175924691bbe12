# FILE: backend/models/sessions.py
"""
Anonymous session models
"""
from backend.models.base import CamelModel


class SessionToken(CamelModel):
    session_id: str


class SessionRotated(CamelModel):
    session_id: str
    moved: int


class SessionDestroyed(CamelModel):
    success: bool = True
    purged: int
