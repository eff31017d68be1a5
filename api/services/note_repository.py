"""Note lifecycle operations on top of a NoteStore."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from time import time
from typing import Any

import structlog

from ..errors import BulkOperationError, NoteNotFoundError, ValidationError
from ..models.notes import MUTABLE_FIELDS, BulkResult, FlagField, Note, NoteCreate, NoteUpdate
from ..observability import get_app_metrics, get_tracer
from .note_store import NoteStore

# Initialize logger
logger = structlog.get_logger(__name__)

# Get tracer
tracer = get_tracer(__name__)

FLAG_FIELDS: tuple[str, ...] = ("completed", "pinned", "is_favorite")


def utc_now() -> datetime:
    """Default clock for server-assigned timestamps."""
    return datetime.now(UTC)


def _fields_to_document(fields: NoteCreate | NoteUpdate) -> dict[str, Any]:
    """Serialize mutable fields for the store (calendar dates as ISO strings)."""
    doc = fields.model_dump(include=set(MUTABLE_FIELDS))
    for key in ("start_date", "due_date"):
        if doc[key] is not None:
            doc[key] = doc[key].isoformat()
    return doc


class NoteRepository:
    """Owner-scoped note lifecycle: create, update, trash, restore, purge.

    Every operation takes the caller's ``owner_id``. A note that exists but
    belongs to someone else is reported exactly like a missing one.
    """

    def __init__(self, store: NoteStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    async def _load_owned(self, owner_id: str, note_id: str) -> Note:
        doc = await self.store.get(note_id)
        if doc is None or doc.get("owner_id") != owner_id:
            logger.warning("note_not_found", owner_id=owner_id, note_id=note_id)
            raise NoteNotFoundError()
        return Note.model_validate(doc)

    async def create(self, owner_id: str, fields: NoteCreate) -> Note:
        """Create a note; content must be non-empty."""
        with tracer.start_as_current_span("note_repository.create") as span:
            span.set_attribute("user.id", owner_id)

            if not fields.content or not fields.content.strip():
                logger.warning("note_creation_failed_empty_content", owner_id=owner_id)
                raise ValidationError("Content is required")

            now = self.clock()
            doc = _fields_to_document(fields)
            doc.update(
                {
                    "owner_id": owner_id,
                    "completed": False,
                    "created_at": now,
                    "updated_at": now,
                    "deleted_at": None,
                }
            )

            note_id = await self.store.insert(doc)
            span.set_attribute("note.id", note_id)

            logger.info("note_created", owner_id=owner_id, note_id=note_id, tags=len(doc["tags"]))
            get_app_metrics().notes_created.add(1)

            return Note.model_validate({**doc, "id": note_id})

    async def get(self, owner_id: str, note_id: str) -> Note:
        return await self._load_owned(owner_id, note_id)

    async def list_all(self, owner_id: str) -> list[Note]:
        """Snapshot of every note the owner has, active and trashed."""
        with tracer.start_as_current_span("note_repository.list_all") as span:
            span.set_attribute("user.id", owner_id)
            start_time = time()
            docs = await self.store.find_by_owner(owner_id)
            duration = (time() - start_time) * 1000
            get_app_metrics().db_query_duration.record(duration, {"operation": "find_by_owner"})

            span.set_attribute("notes.count", len(docs))
            return [Note.model_validate(doc) for doc in docs]

    async def update(self, owner_id: str, note_id: str, fields: NoteUpdate) -> Note:
        """Replace every mutable field of a note in a single store write."""
        with tracer.start_as_current_span("note_repository.update") as span:
            span.set_attribute("user.id", owner_id)
            span.set_attribute("note.id", note_id)

            existing = await self._load_owned(owner_id, note_id)

            doc = _fields_to_document(fields)
            doc["updated_at"] = self.clock()

            if not await self.store.replace(note_id, doc):
                # Purged between the read and the write
                raise NoteNotFoundError()

            logger.info("note_updated", owner_id=owner_id, note_id=note_id)
            return existing.model_copy(
                update={**fields.model_dump(), "updated_at": doc["updated_at"]}
            )

    async def patch_flag(self, owner_id: str, note_id: str, field: FlagField, value: bool) -> Note:
        """Set one boolean field (completed, pinned or is_favorite)."""
        if field not in FLAG_FIELDS:
            raise ValidationError(f"Unknown flag field: {field}")

        with tracer.start_as_current_span("note_repository.patch_flag") as span:
            span.set_attribute("note.id", note_id)
            span.set_attribute("note.flag", field)

            existing = await self._load_owned(owner_id, note_id)

            changes = {field: value, "updated_at": self.clock()}
            if not await self.store.patch(note_id, changes):
                raise NoteNotFoundError()

            logger.info(
                "note_flag_set", owner_id=owner_id, note_id=note_id, field=field, value=value
            )
            return existing.model_copy(update=changes)

    async def soft_delete(self, owner_id: str, note_id: str) -> Note:
        """Move a note to the trash. ``updated_at`` is left alone."""
        existing = await self._load_owned(owner_id, note_id)
        if existing.is_trashed:
            logger.debug("note_already_trashed", owner_id=owner_id, note_id=note_id)
            return existing

        changes = {"deleted_at": self.clock()}
        if not await self.store.patch(note_id, changes):
            raise NoteNotFoundError()

        logger.info("note_trashed", owner_id=owner_id, note_id=note_id)
        get_app_metrics().notes_trashed.add(1)
        return existing.model_copy(update=changes)

    async def _restore(self, owner_id: str, note_id: str) -> tuple[Note, bool]:
        """Restore a note; the flag tells whether it was actually in the trash."""
        existing = await self._load_owned(owner_id, note_id)
        if not existing.is_trashed:
            logger.debug("note_already_active", owner_id=owner_id, note_id=note_id)
            return existing, False

        changes = {"deleted_at": None, "updated_at": self.clock()}
        if not await self.store.patch(note_id, changes):
            raise NoteNotFoundError()

        logger.info("note_restored", owner_id=owner_id, note_id=note_id)
        return existing.model_copy(update=changes), True

    async def restore(self, owner_id: str, note_id: str) -> Note:
        """Bring a trashed note back to the active set."""
        note, _ = await self._restore(owner_id, note_id)
        return note

    async def _restore_if_trashed(self, owner_id: str, note_id: str) -> bool:
        _, restored = await self._restore(owner_id, note_id)
        return restored

    async def purge(self, owner_id: str, note_id: str) -> None:
        """Remove a note permanently."""
        await self._load_owned(owner_id, note_id)
        if not await self.store.delete(note_id):
            raise NoteNotFoundError()

        logger.info("note_purged", owner_id=owner_id, note_id=note_id)
        get_app_metrics().notes_purged.add(1)

    async def _run_bulk(
        self,
        operation: str,
        owner_id: str,
        notes: list[Note],
        action: Callable[[str, str], Awaitable[bool | None]],
    ) -> BulkResult:
        """Apply ``action`` to every note concurrently, without atomicity.

        Notes that disappeared in the meantime, and notes for which
        ``action`` returns False (nothing left to do), are not counted. Any
        other failure is collected and raised once every item has been
        attempted.
        """
        with tracer.start_as_current_span(f"note_repository.{operation}") as span:
            span.set_attribute("user.id", owner_id)
            span.set_attribute("bulk.size", len(notes))

            results = await asyncio.gather(
                *(action(owner_id, note.id) for note in notes), return_exceptions=True
            )

            affected = 0
            failed_ids: list[str] = []
            for note, result in zip(notes, results, strict=True):
                if isinstance(result, NoteNotFoundError):
                    logger.debug("bulk_item_already_gone", operation=operation, note_id=note.id)
                elif isinstance(result, BaseException):
                    logger.error(
                        "bulk_item_failed",
                        operation=operation,
                        note_id=note.id,
                        error=str(result),
                        error_type=type(result).__name__,
                    )
                    failed_ids.append(note.id)
                elif result is False:
                    logger.debug("bulk_item_already_applied", operation=operation, note_id=note.id)
                else:
                    affected += 1

            span.set_attribute("bulk.affected", affected)
            span.set_attribute("bulk.failed", len(failed_ids))
            logger.info(
                "bulk_operation_completed",
                operation=operation,
                owner_id=owner_id,
                affected=affected,
                failed=len(failed_ids),
            )

            if failed_ids:
                raise BulkOperationError(operation, affected, failed_ids)
            return BulkResult(affected=affected)

    async def purge_all_trashed(self, owner_id: str) -> BulkResult:
        """Empty the trash. Safe to retry after a partial failure."""
        notes = [n for n in await self.list_all(owner_id) if n.is_trashed]
        return await self._run_bulk("purge_all_trashed", owner_id, notes, self.purge)

    async def restore_all_trashed(self, owner_id: str) -> BulkResult:
        notes = [n for n in await self.list_all(owner_id) if n.is_trashed]
        return await self._run_bulk(
            "restore_all_trashed", owner_id, notes, self._restore_if_trashed
        )

    async def delete_all_for_owner(self, owner_id: str) -> BulkResult:
        """Purge every note of the owner, trashed or not."""
        notes = await self.list_all(owner_id)
        return await self._run_bulk("delete_all_for_owner", owner_id, notes, self.purge)
