"""Filtering, ordering and statistics over a snapshot of one owner's notes.

Everything here is a pure function of its arguments: no I/O, no shared
state. Python's sort is stable, so notes that compare equal keep the order
they came in with (store iteration order for a fresh snapshot).
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from datetime import UTC, date, datetime, time, timedelta

from ..models.notes import DayActivity, FlagFilter, Note, NoteStats, PriorityFilter

DUE_SOON_DAYS = int(os.getenv("DUE_SOON_DAYS", "3"))


def active_notes(notes: Iterable[Note]) -> list[Note]:
    """Notes not in the trash: pinned first, then most recently updated."""
    active = [note for note in notes if note.deleted_at is None]
    active.sort(key=lambda note: note.updated_at, reverse=True)
    # Second stable pass makes pinned status dominate recency
    active.sort(key=lambda note: not note.pinned)
    return active


def trashed_notes(notes: Iterable[Note]) -> list[Note]:
    """Notes in the trash, most recently deleted first."""
    trashed = [note for note in notes if note.deleted_at is not None]
    trashed.sort(key=lambda note: note.deleted_at, reverse=True)
    return trashed


def search(notes: list[Note], term: str | None) -> list[Note]:
    """Case-insensitive substring match on title or content."""
    if not term:
        return notes

    needle = term.lower()
    return [
        note
        for note in notes
        if (note.title and needle in note.title.lower()) or needle in note.content.lower()
    ]


def filter_by_flag(notes: list[Note], flag: FlagFilter = "all") -> list[Note]:
    if flag == "favorites":
        return [note for note in notes if note.is_favorite]
    if flag == "pinned":
        return [note for note in notes if note.pinned]
    return notes


def filter_by_tag(notes: list[Note], tag: str | None) -> list[Note]:
    if not tag:
        return notes
    return [note for note in notes if tag in note.tags]


def filter_by_priority(notes: list[Note], priority: PriorityFilter = "all") -> list[Note]:
    if priority == "all":
        return notes
    return [note for note in notes if note.priority == priority]


def query_notes(
    notes: Iterable[Note],
    search_term: str | None = None,
    flag: FlagFilter = "all",
    tag: str | None = None,
    priority: PriorityFilter = "all",
) -> list[Note]:
    """Active notes for a list view.

    Applied in order: flag, tag, priority, then the pin/recency sort, then
    search (which keeps the sorted order).
    """
    selected = [note for note in notes if note.deleted_at is None]
    selected = filter_by_flag(selected, flag)
    selected = filter_by_tag(selected, tag)
    selected = filter_by_priority(selected, priority)
    return search(active_notes(selected), search_term)


def _due_instant(due: date) -> datetime:
    """A calendar due date read as midnight UTC."""
    return datetime.combine(due, time.min, tzinfo=UTC)


def is_due_soon(note: Note, now: datetime, days: int = DUE_SOON_DAYS) -> bool:
    """Active, open, and due between now and ``days`` days from now inclusive."""
    if note.deleted_at is not None or note.completed or note.due_date is None:
        return False
    due = _due_instant(note.due_date)
    return now <= due <= now + timedelta(days=days)


def is_overdue(note: Note, now: datetime) -> bool:
    """Due date strictly in the past. Display-only; not part of the stats."""
    if note.due_date is None:
        return False
    return _due_instant(note.due_date) < now


def compute_stats(notes: Iterable[Note], trashed: Iterable[Note], now: datetime) -> NoteStats:
    """Dashboard counters.

    ``pending`` is derived from ``total`` so the two always add up, and
    ``due_soon`` only counts pending notes.
    """
    active = [note for note in notes if note.deleted_at is None]
    total = len(active)
    completed = sum(1 for note in active if note.completed)

    return NoteStats(
        total=total,
        completed=completed,
        pending=total - completed,
        due_soon=sum(1 for note in active if is_due_soon(note, now)),
        trashed=sum(1 for _ in trashed),
    )


def collect_tags(notes: Iterable[Note]) -> list[str]:
    """Distinct tags across notes, in first-seen order."""
    seen: dict[str, None] = {}
    for note in notes:
        for tag in note.tags:
            seen.setdefault(tag, None)
    return list(seen)


def notes_for_date(notes: Iterable[Note], day: date) -> list[Note]:
    """Notes that start or are due on ``day``."""
    return [note for note in notes if day in (note.start_date, note.due_date)]


def weekly_activity(notes: Iterable[Note], today: date) -> list[DayActivity]:
    """Per-day counts of notes created over the seven days ending ``today``."""
    notes = list(notes)
    buckets = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        created = [note for note in notes if note.created_at.astimezone(UTC).date() == day]
        completed = sum(1 for note in created if note.completed)
        buckets.append(
            DayActivity(
                day=day,
                total=len(created),
                pending=len(created) - completed,
                completed=completed,
            )
        )
    return buckets
