"""Notes endpoints."""

from datetime import date

import structlog
from fastapi import APIRouter, Depends, Query, Response

from ..auth import get_current_owner_id
from ..database import get_db
from ..models import (
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
from ..models.notes import FlagField, FlagFilter, PriorityFilter
from ..observability import get_tracer
from ..services import note_query
from ..services.note_repository import NoteRepository
from ..services.note_store import NOTES_COLLECTION, MongoNoteStore, NoteStore

# Initialize logger
logger = structlog.get_logger(__name__)

# Get tracer
tracer = get_tracer(__name__)

router = APIRouter(prefix="/notes", tags=["notes"])


def get_note_store() -> NoteStore:
    """Dependency returning the MongoDB-backed note store."""
    return MongoNoteStore(get_db()[NOTES_COLLECTION])


def get_note_repository(store: NoteStore = Depends(get_note_store)) -> NoteRepository:
    return NoteRepository(store)


def _list_response(notes: list[Note]) -> NoteListResponse:
    return NoteListResponse(notes=notes, total=len(notes))


@router.get("", response_model=NoteListResponse)
async def list_notes(
    search: str | None = None,
    flag: FlagFilter = Query("all", alias="filter"),
    tag: str | None = None,
    priority: PriorityFilter = "all",
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """
    List active notes.

    Pinned notes come first, then the most recently updated. Optional
    filters: ``filter`` (all, favorites, pinned), ``tag``, ``priority``
    and a case-insensitive ``search`` over title and content.
    """
    with tracer.start_as_current_span("list_notes") as span:
        span.set_attribute("user.id", owner_id)
        span.set_attribute("query.filter", flag)
        span.set_attribute("query.priority", priority)

        notes = note_query.query_notes(
            await repo.list_all(owner_id),
            search_term=search,
            flag=flag,
            tag=tag,
            priority=priority,
        )

        span.set_attribute("notes.count", len(notes))
        logger.info("notes_listed", user_id=owner_id, count=len(notes))

        return _list_response(notes)


@router.post("", response_model=Note, status_code=201)
async def create_note(
    note: NoteCreate,
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Create a note. Content is required; everything else has a default."""
    return await repo.create(owner_id, note)


@router.delete("", response_model=BulkResult)
async def delete_all_notes(
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Permanently delete every note of the caller, trashed or not."""
    logger.warning("delete_all_notes_requested", user_id=owner_id)
    return await repo.delete_all_for_owner(owner_id)


@router.get("/trash", response_model=NoteListResponse)
async def list_trash(
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """List trashed notes, most recently deleted first."""
    notes = note_query.trashed_notes(await repo.list_all(owner_id))
    logger.info("trash_listed", user_id=owner_id, count=len(notes))
    return _list_response(notes)


@router.delete("/trash", response_model=BulkResult)
async def empty_trash(
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Permanently delete every trashed note. Safe to retry."""
    return await repo.purge_all_trashed(owner_id)


@router.post("/trash/restore", response_model=BulkResult)
async def restore_trash(
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Restore every trashed note."""
    return await repo.restore_all_trashed(owner_id)


@router.get("/stats", response_model=NoteStats)
async def get_stats(
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Dashboard counters: total, completed, pending, due soon and trashed."""
    with tracer.start_as_current_span("get_stats") as span:
        span.set_attribute("user.id", owner_id)

        notes = await repo.list_all(owner_id)
        stats = note_query.compute_stats(
            note_query.active_notes(notes), note_query.trashed_notes(notes), repo.clock()
        )

        logger.info("stats_computed", user_id=owner_id, **stats.model_dump())
        return stats


@router.get("/tags", response_model=TagListResponse)
async def list_tags(
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Distinct tags used by active notes."""
    notes = note_query.active_notes(await repo.list_all(owner_id))
    return TagListResponse(tags=note_query.collect_tags(notes))


@router.get("/activity", response_model=list[DayActivity])
async def get_activity(
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Notes created per day over the last seven days."""
    notes = note_query.active_notes(await repo.list_all(owner_id))
    return note_query.weekly_activity(notes, repo.clock().date())


@router.get("/calendar/{day}", response_model=NoteListResponse)
async def list_notes_for_day(
    day: date,
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Active notes starting or due on the given date (YYYY-MM-DD)."""
    notes = note_query.active_notes(await repo.list_all(owner_id))
    return _list_response(note_query.notes_for_date(notes, day))


@router.get("/{note_id}", response_model=Note)
async def get_note(
    note_id: str,
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Retrieve a single note, active or trashed."""
    return await repo.get(owner_id, note_id)


@router.put("/{note_id}", response_model=Note)
async def update_note(
    note_id: str,
    note_update: NoteUpdate,
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Replace every editable field of a note. Omitted fields reset to defaults."""
    return await repo.update(owner_id, note_id, note_update)


async def _set_flag(
    repo: NoteRepository, owner_id: str, note_id: str, field: FlagField, value: bool
) -> Note:
    with tracer.start_as_current_span("set_note_flag") as span:
        span.set_attribute("user.id", owner_id)
        span.set_attribute("note.id", note_id)
        return await repo.patch_flag(owner_id, note_id, field, value)


@router.patch("/{note_id}/completed", response_model=Note)
async def set_completed(
    note_id: str,
    body: NoteFlagUpdate,
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    return await _set_flag(repo, owner_id, note_id, "completed", body.value)


@router.patch("/{note_id}/pinned", response_model=Note)
async def set_pinned(
    note_id: str,
    body: NoteFlagUpdate,
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    return await _set_flag(repo, owner_id, note_id, "pinned", body.value)


@router.patch("/{note_id}/favorite", response_model=Note)
async def set_favorite(
    note_id: str,
    body: NoteFlagUpdate,
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    return await _set_flag(repo, owner_id, note_id, "is_favorite", body.value)


@router.delete("/{note_id}", status_code=204)
async def trash_note(
    note_id: str,
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Move a note to the trash. It can be restored until purged."""
    await repo.soft_delete(owner_id, note_id)
    return Response(status_code=204)


@router.post("/{note_id}/restore", response_model=Note)
async def restore_note(
    note_id: str,
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Take a note out of the trash."""
    return await repo.restore(owner_id, note_id)


@router.delete("/{note_id}/purge", status_code=204)
async def purge_note(
    note_id: str,
    owner_id: str = Depends(get_current_owner_id),
    repo: NoteRepository = Depends(get_note_repository),
):
    """Delete a note permanently. This cannot be undone."""
    await repo.purge(owner_id, note_id)
    return Response(status_code=204)
