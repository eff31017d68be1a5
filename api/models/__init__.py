"""Pydantic models for API requests and responses."""

from .auth import AuthResponse, LoginRequest, UserCreate, UserResponse
from .notes import (
    BulkResult,
    DayActivity,
    Note,
    NoteCreate,
    NoteFlagUpdate,
    NoteListResponse,
    NoteStats,
    NoteUpdate,
    TagListResponse,
)

__all__ = [
    # Auth models
    "AuthResponse",
    "LoginRequest",
    "UserCreate",
    "UserResponse",
    # Notes models
    "BulkResult",
    "DayActivity",
    "Note",
    "NoteCreate",
    "NoteFlagUpdate",
    "NoteListResponse",
    "NoteStats",
    "NoteUpdate",
    "TagListResponse",
]
