"""Note store collaborator: the keyed collection notes are persisted in."""

from __future__ import annotations

from typing import Any, Protocol

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import ConnectionFailure

from ..errors import StoreUnavailableError

# Initialize logger
logger = structlog.get_logger(__name__)

NOTES_COLLECTION = "notes"


class NoteStore(Protocol):
    """Keyed collection of note documents.

    Documents are plain dicts carrying an ``id`` key on the way out; the
    ``id`` is assigned by the store on insert and never part of a write.
    """

    async def insert(self, doc: dict[str, Any]) -> str: ...

    async def get(self, note_id: str) -> dict[str, Any] | None: ...

    async def find_by_owner(self, owner_id: str) -> list[dict[str, Any]]: ...

    async def patch(self, note_id: str, fields: dict[str, Any]) -> bool: ...

    async def replace(self, note_id: str, fields: dict[str, Any]) -> bool: ...

    async def delete(self, note_id: str) -> bool: ...


def _object_id(note_id: str) -> ObjectId | None:
    try:
        return ObjectId(note_id)
    except (InvalidId, TypeError):
        return None


def _from_mongo(doc: dict[str, Any]) -> dict[str, Any]:
    out = dict(doc)
    out["id"] = str(out.pop("_id"))
    return out


class MongoNoteStore:
    """NoteStore backed by a Motor collection."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def insert(self, doc: dict[str, Any]) -> str:
        try:
            result = await self.collection.insert_one(dict(doc))
        except ConnectionFailure as e:
            logger.error("note_store_unavailable", operation="insert", error=str(e))
            raise StoreUnavailableError() from e
        return str(result.inserted_id)

    async def get(self, note_id: str) -> dict[str, Any] | None:
        obj_id = _object_id(note_id)
        if obj_id is None:
            logger.debug("note_store_invalid_id", note_id=note_id)
            return None

        try:
            doc = await self.collection.find_one({"_id": obj_id})
        except ConnectionFailure as e:
            logger.error("note_store_unavailable", operation="get", error=str(e))
            raise StoreUnavailableError() from e
        return _from_mongo(doc) if doc else None

    async def find_by_owner(self, owner_id: str) -> list[dict[str, Any]]:
        try:
            # Natural order; callers sort in memory
            docs = await self.collection.find({"owner_id": owner_id}).to_list(length=None)
        except ConnectionFailure as e:
            logger.error("note_store_unavailable", operation="find_by_owner", error=str(e))
            raise StoreUnavailableError() from e
        return [_from_mongo(doc) for doc in docs]

    async def patch(self, note_id: str, fields: dict[str, Any]) -> bool:
        obj_id = _object_id(note_id)
        if obj_id is None:
            return False

        try:
            result = await self.collection.update_one({"_id": obj_id}, {"$set": fields})
        except ConnectionFailure as e:
            logger.error("note_store_unavailable", operation="patch", error=str(e))
            raise StoreUnavailableError() from e
        return result.matched_count > 0

    async def replace(self, note_id: str, fields: dict[str, Any]) -> bool:
        obj_id = _object_id(note_id)
        if obj_id is None:
            return False

        try:
            # One document, one $set: every field changes or none does
            result = await self.collection.update_one({"_id": obj_id}, {"$set": fields})
        except ConnectionFailure as e:
            logger.error("note_store_unavailable", operation="replace", error=str(e))
            raise StoreUnavailableError() from e
        return result.matched_count > 0

    async def delete(self, note_id: str) -> bool:
        obj_id = _object_id(note_id)
        if obj_id is None:
            return False

        try:
            result = await self.collection.delete_one({"_id": obj_id})
        except ConnectionFailure as e:
            logger.error("note_store_unavailable", operation="delete", error=str(e))
            raise StoreUnavailableError() from e
        return result.deleted_count > 0
