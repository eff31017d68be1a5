"""Notes-related Pydantic models."""

from __future__ import annotations

import string
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

Priority = Literal["alta", "media", "baja"]
FlagField = Literal["completed", "pinned", "is_favorite"]
FlagFilter = Literal["all", "favorites", "pinned"]
PriorityFilter = Literal["all", "alta", "media", "baja"]

# Fields a caller may replace through a full update
MUTABLE_FIELDS = (
    "title",
    "content",
    "completed",
    "start_date",
    "due_date",
    "tags",
    "pinned",
    "is_favorite",
    "priority",
)


def normalize_tag(tag: str) -> str:
    """Lowercase a tag and strip whitespace and any leading ``#`` marks."""
    return tag.lstrip("#" + string.whitespace).rstrip().lower()


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Normalize and deduplicate tags, keeping first-seen order."""
    seen: list[str] = []
    for raw in tags or []:
        tag = normalize_tag(raw)
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class Note(BaseModel):
    """A stored note, as returned by the repository and the API."""

    id: str
    owner_id: str
    title: str | None = None
    content: str
    completed: bool = False
    start_date: date | None = None
    due_date: date | None = None
    tags: list[str] = Field(default_factory=list)
    pinned: bool = False
    is_favorite: bool = False
    priority: Priority = "media"
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None


class NoteFields(BaseModel):
    """Mutable note fields with their defaults."""

    title: str | None = None
    content: str = ""
    completed: bool = False
    start_date: date | None = None
    due_date: date | None = None
    tags: list[str] = Field(default_factory=list)
    pinned: bool = False
    is_favorite: bool = False
    priority: Priority = "media"

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: list[str]) -> list[str]:
        return normalize_tags(value)

    @field_validator("title")
    @classmethod
    def _empty_title_is_none(cls, value: str | None) -> str | None:
        return value or None


class NoteCreate(NoteFields):
    """Request model for creating a note."""


class NoteUpdate(NoteFields):
    """Request model for replacing every mutable field of a note."""


class NoteFlagUpdate(BaseModel):
    """Request model for toggling a single boolean field."""

    value: bool


class NoteListResponse(BaseModel):
    """Response model for note lists."""

    notes: list[Note]
    total: int


class NoteStats(BaseModel):
    """Dashboard counters for one owner."""

    total: int
    completed: int
    pending: int
    due_soon: int
    trashed: int


class TagListResponse(BaseModel):
    """Distinct tags in use."""

    tags: list[str]


class DayActivity(BaseModel):
    """Notes created on a single day."""

    day: date
    total: int
    pending: int
    completed: int


class BulkResult(BaseModel):
    """Outcome of a bulk trash or purge operation."""

    affected: int
