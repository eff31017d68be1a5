"""In-memory stand-ins for MongoDB used by the tests.

FakeNoteStore implements the NoteStore protocol over an insertion-ordered
dict, so store iteration order is predictable. FakeUsersCollection covers
the two Motor collection calls the auth routes make.
"""

from datetime import datetime, timedelta
from types import SimpleNamespace
from typing import Any
from uuid import uuid4

from bson import ObjectId

from api.errors import StoreUnavailableError


class FakeNoteStore:
    """NoteStore kept in a dict; can be told to fail on chosen ids."""

    def __init__(self):
        self.docs: dict[str, dict[str, Any]] = {}
        self.failing_ids: set[str] = set()
        self.delete_calls = 0

    def _check(self, note_id: str):
        if note_id in self.failing_ids:
            raise StoreUnavailableError()

    async def insert(self, doc: dict[str, Any]) -> str:
        note_id = uuid4().hex
        self.docs[note_id] = dict(doc)
        return note_id

    async def get(self, note_id: str) -> dict[str, Any] | None:
        self._check(note_id)
        doc = self.docs.get(note_id)
        return {**doc, "id": note_id} if doc is not None else None

    async def find_by_owner(self, owner_id: str) -> list[dict[str, Any]]:
        return [
            {**doc, "id": note_id}
            for note_id, doc in self.docs.items()
            if doc.get("owner_id") == owner_id
        ]

    async def patch(self, note_id: str, fields: dict[str, Any]) -> bool:
        self._check(note_id)
        if note_id not in self.docs:
            return False
        self.docs[note_id].update(fields)
        return True

    async def replace(self, note_id: str, fields: dict[str, Any]) -> bool:
        return await self.patch(note_id, fields)

    async def delete(self, note_id: str) -> bool:
        self._check(note_id)
        self.delete_calls += 1
        return self.docs.pop(note_id, None) is not None


class FakeUsersCollection:
    """Just enough of a Motor collection for find_one/insert_one by equality."""

    def __init__(self):
        self.docs: list[dict[str, Any]] = []

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        for doc in self.docs:
            if all(doc.get(key) == value for key, value in query.items()):
                return dict(doc)
        return None

    async def insert_one(self, doc: dict[str, Any]):
        stored = {**doc, "_id": ObjectId()}
        self.docs.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])


class FakeClock:
    """Deterministic clock that advances by ``step`` on every call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + self.step
        return now
