"""
In-Memory Document Store
Single-process adapter; every operation completes without yielding to the
event loop, so a conditional update is atomic with respect to other tasks
"""

import copy
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Dict, List, Optional

from app.store.base import DocumentStore, Collection, apply_patch, collection_name, prepare_insert
from app.store.filters import SortSpec, matches, paginate, sort_documents

# Undo entries for the transaction running in the current task:
# (collection, doc_id, previous document or None)
_undo_log: ContextVar[Optional[list]] = ContextVar("memory_store_undo_log", default=None)


class MemoryDocumentStore(DocumentStore):
    """Dict-of-dicts store used for STORE_BACKEND=memory and the test-suite"""

    def __init__(self):
        self._collections: Dict[str, Dict[str, dict]] = {}

    def _docs(self, collection) -> Dict[str, dict]:
        return self._collections.setdefault(collection_name(collection), {})

    def _remember(self, collection, doc_id: str) -> None:
        log = _undo_log.get()
        if log is None:
            return
        previous = self._docs(collection).get(doc_id)
        log.append((collection_name(collection), doc_id, copy.deepcopy(previous)))

    async def find(
        self,
        collection: Collection,
        filter: Optional[dict] = None,
        sort: Optional[SortSpec] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> List[dict]:
        docs = [d for d in self._docs(collection).values() if matches(d, filter)]
        docs = sort_documents(docs, sort)
        return [copy.deepcopy(d) for d in paginate(docs, page, limit)]

    async def find_by_id(self, collection: Collection, doc_id: str) -> Optional[dict]:
        doc = self._docs(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def insert(self, collection: Collection, doc: dict) -> dict:
        stored = prepare_insert(doc)
        self._remember(collection, stored["id"])
        self._docs(collection)[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def update_by_id(
        self,
        collection: Collection,
        doc_id: str,
        patch: dict,
        condition: Optional[dict] = None,
    ) -> Optional[dict]:
        docs = self._docs(collection)
        current = docs.get(doc_id)
        if current is None:
            return None
        if condition and not matches(current, condition):
            return None
        self._remember(collection, doc_id)
        docs[doc_id] = apply_patch(current, patch)
        return copy.deepcopy(docs[doc_id])

    async def delete_by_id(self, collection: Collection, doc_id: str) -> bool:
        docs = self._docs(collection)
        if doc_id not in docs:
            return False
        self._remember(collection, doc_id)
        del docs[doc_id]
        return True

    async def count(self, collection: Collection, filter: Optional[dict] = None) -> int:
        return sum(1 for d in self._docs(collection).values() if matches(d, filter))

    @asynccontextmanager
    async def transaction(self):
        if _undo_log.get() is not None:
            # Nested block joins the outer transaction
            yield
            return
        log: list = []
        token = _undo_log.set(log)
        try:
            yield
        except BaseException:
            for name, doc_id, previous in reversed(log):
                docs = self._collections.setdefault(name, {})
                if previous is None:
                    docs.pop(doc_id, None)
                else:
                    docs[doc_id] = previous
            raise
        finally:
            _undo_log.reset(token)
