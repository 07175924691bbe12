# FILE: backend/models/__init__.py
"""
Pydantic models for request/response validation and stored records
"""
from backend.models.safety import *
from backend.models.posts import *
from backend.models.chat import *
from backend.models.journal import *
from backend.models.mood import *
from backend.models.sessions import *
