"""
Document Store Contract
Create/read/update/delete/query over the campus collections
"""

import copy
from abc import ABC, abstractmethod
from enum import Enum
from typing import AsyncContextManager, List, Optional

from app.store.filters import SortSpec
from app.utils import new_id, utcnow
from pydantic_core import to_jsonable_python


class Collection(str, Enum):
    USERS = "users"
    EVENTS = "events"
    CLUBS = "clubs"
    FEEDBACK = "feedback"
    LOST_FOUND = "lost_found"
    ANNOUNCEMENTS = "announcements"


def collection_name(collection) -> str:
    return collection.value if isinstance(collection, Collection) else str(collection)


class DocumentStore(ABC):
    """
    Abstract document store

    Documents are JSON-compatible dicts with an `id`. The store owns
    `created_at`, `updated_at` and `version`; `version` increases by one on
    every successful write and is what conditional updates compare against.
    """

    async def connect(self) -> None:
        return None

    async def disconnect(self) -> None:
        return None

    @abstractmethod
    async def find(
        self,
        collection: Collection,
        filter: Optional[dict] = None,
        sort: Optional[SortSpec] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> List[dict]:
        """Documents matching the filter, sorted, one page at a time"""

    async def find_one(self, collection: Collection, filter: dict) -> Optional[dict]:
        docs = await self.find(collection, filter, limit=1)
        return docs[0] if docs else None

    @abstractmethod
    async def find_by_id(self, collection: Collection, doc_id: str) -> Optional[dict]:
        """Document by id, or None"""

    @abstractmethod
    async def insert(self, collection: Collection, doc: dict) -> dict:
        """Insert and return the stored document"""

    @abstractmethod
    async def update_by_id(
        self,
        collection: Collection,
        doc_id: str,
        patch: dict,
        condition: Optional[dict] = None,
    ) -> Optional[dict]:
        """
        Set the patch fields on a document

        When `condition` is given it must match the current document at write
        time. Returns the updated document, or None if the document is absent
        or the condition did not hold (nothing is written in that case).
        """

    @abstractmethod
    async def delete_by_id(self, collection: Collection, doc_id: str) -> bool:
        """True if a document was removed"""

    @abstractmethod
    async def count(self, collection: Collection, filter: Optional[dict] = None) -> int:
        """Number of matching documents"""

    @abstractmethod
    def transaction(self) -> AsyncContextManager[None]:
        """All writes inside the block apply together or not at all"""


def prepare_insert(doc: dict) -> dict:
    """Stamp id, timestamps and version onto a new document"""
    stored = to_jsonable_python(copy.deepcopy(doc))
    now = to_jsonable_python(utcnow())
    stored.setdefault("id", new_id())
    stored.setdefault("created_at", now)
    stored["updated_at"] = stored.get("updated_at") or now
    stored["version"] = 1
    return stored


def apply_patch(current: dict, patch: dict) -> dict:
    """New document with the patch applied and bookkeeping fields bumped"""
    updated = copy.deepcopy(current)
    for field, value in to_jsonable_python(patch).items():
        if field in ("id", "version", "created_at"):
            continue
        updated[field] = value
    updated["updated_at"] = to_jsonable_python(utcnow())
    updated["version"] = int(current.get("version", 0)) + 1
    return updated


