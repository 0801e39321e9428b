"""
SQL Document Store
Documents kept as JSON text in one `documents` table, accessed through the
async `databases` connection. Conditional writes are compare-and-swap on the
row's `version` column (UPDATE ... WHERE version = :version RETURNING id).
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import List, Optional, Tuple

from databases import Database

from app.errors import CampusError, Conflict, UpstreamError
from app.store.base import DocumentStore, Collection, apply_patch, collection_name, prepare_insert
from app.store.filters import SortSpec, matches, paginate, sort_documents
from app.store.sql_filters import FilterCompiler, column_order
from app.utils import parse_datetime

logger = logging.getLogger(__name__)

# Re-reads allowed when a concurrent writer bumps the version between our
# read and our write
MAX_CAS_ATTEMPTS = 10


class SQLDocumentStore(DocumentStore):
    """Document store backed by PostgreSQL or SQLite"""

    def __init__(self, database: Database, timeout: float = 5.0):
        self.database = database
        self.timeout = timeout
        self.dialect = database.url.dialect

    async def connect(self) -> None:
        await self.database.connect()
        logger.info("Document store connected")

    async def disconnect(self) -> None:
        await self.database.disconnect()
        logger.info("Document store disconnected")

    async def _guard(self, operation: str, collection, coro, doc_id: Optional[str] = None):
        """Bound a store call by the timeout and turn driver failures into UpstreamError"""
        # Stays on the current task; `databases` binds connections and
        # transactions per task
        try:
            async with asyncio.timeout(self.timeout):
                return await coro
        except TimeoutError as exc:
            logger.error(
                "Store timeout: op=%s collection=%s id=%s after %.1fs",
                operation, collection_name(collection), doc_id, self.timeout,
            )
            raise UpstreamError("Store timeout", detail=operation) from exc
        except CampusError:
            raise
        except Exception as exc:
            logger.exception(
                "Store failure: op=%s collection=%s id=%s",
                operation, collection_name(collection), doc_id,
            )
            raise UpstreamError("Store failure", detail=str(exc)) from exc

    def _timestamp(self, value):
        """Column value for a document timestamp"""
        moment = parse_datetime(value)
        if moment is None or self.dialect != "sqlite":
            return moment
        # Fixed-width UTC text keeps SQLite's ORDER BY chronological
        return moment.strftime("%Y-%m-%d %H:%M:%S.%f")

    def _where(self, collection, filter: Optional[dict]) -> Tuple[str, dict, dict]:
        compiler = FilterCompiler(self.dialect)
        clauses, residual = compiler.compile(filter)
        where = " AND ".join(["collection = :collection"] + clauses)
        params = {"collection": collection_name(collection), **compiler.params}
        return where, params, residual

    async def _select(self, collection, filter, sort, page: int, limit: Optional[int]) -> List[dict]:
        where, params, residual = self._where(collection, filter)
        order = column_order(sort)

        if residual or order is None:
            # Regex, geo and JSON-only sort keys finish in Python over the rows SQL narrowed down
            rows = await self.database.fetch_all(f"SELECT data FROM documents WHERE {where}", params)
            docs = [d for d in (json.loads(row["data"]) for row in rows) if matches(d, residual)]
            return paginate(sort_documents(docs, sort), page, limit)

        query = f"SELECT data FROM documents WHERE {where}"
        if order:
            query += f" ORDER BY {order}"
        if limit:
            query += " LIMIT :limit OFFSET :skip"
            params.update(limit=limit, skip=(max(int(page or 1), 1) - 1) * limit)
        rows = await self.database.fetch_all(query, params)
        return [json.loads(row["data"]) for row in rows]

    async def _count(self, collection, filter) -> int:
        where, params, residual = self._where(collection, filter)
        if not residual:
            value = await self.database.fetch_val(f"SELECT COUNT(*) FROM documents WHERE {where}", params)
            return int(value or 0)
        rows = await self.database.fetch_all(f"SELECT data FROM documents WHERE {where}", params)
        return sum(1 for row in rows if matches(json.loads(row["data"]), residual))

    async def _load_one(self, collection, doc_id: str) -> Optional[dict]:
        row = await self.database.fetch_one(
            "SELECT data FROM documents WHERE collection = :collection AND id = :id",
            {"collection": collection_name(collection), "id": doc_id},
        )
        return json.loads(row["data"]) if row else None

    async def find(
        self,
        collection: Collection,
        filter: Optional[dict] = None,
        sort: Optional[SortSpec] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> List[dict]:
        return await self._guard("find", collection, self._select(collection, filter, sort, page, limit))

    async def find_by_id(self, collection: Collection, doc_id: str) -> Optional[dict]:
        return await self._guard("find_by_id", collection, self._load_one(collection, doc_id), doc_id)

    async def insert(self, collection: Collection, doc: dict) -> dict:
        stored = prepare_insert(doc)
        await self._guard(
            "insert",
            collection,
            self.database.execute(
                """
                INSERT INTO documents (collection, id, version, data, created_at, updated_at)
                VALUES (:collection, :id, :version, :data, :created_at, :updated_at)
                """,
                {
                    "collection": collection_name(collection),
                    "id": stored["id"],
                    "version": stored["version"],
                    "data": json.dumps(stored),
                    "created_at": self._timestamp(stored["created_at"]),
                    "updated_at": self._timestamp(stored["updated_at"]),
                },
            ),
            stored["id"],
        )
        return stored

    async def _compare_and_swap(self, collection, doc_id: str, patch: dict, condition: Optional[dict]) -> Optional[dict]:
        for _ in range(MAX_CAS_ATTEMPTS):
            current = await self._load_one(collection, doc_id)
            if current is None:
                return None
            if condition and not matches(current, condition):
                return None

            updated = apply_patch(current, patch)
            row = await self.database.fetch_one(
                """
                UPDATE documents
                SET data = :data, version = :new_version, updated_at = :updated_at
                WHERE collection = :collection AND id = :id AND version = :version
                RETURNING id
                """,
                {
                    "data": json.dumps(updated),
                    "new_version": updated["version"],
                    "updated_at": self._timestamp(updated["updated_at"]),
                    "collection": collection_name(collection),
                    "id": doc_id,
                    "version": current.get("version", 0),
                },
            )
            if row is not None:
                return updated

        logger.warning("CAS retries exhausted: collection=%s id=%s", collection_name(collection), doc_id)
        raise Conflict("Resource is being modified concurrently, please retry")

    async def update_by_id(
        self,
        collection: Collection,
        doc_id: str,
        patch: dict,
        condition: Optional[dict] = None,
    ) -> Optional[dict]:
        return await self._guard(
            "update_by_id", collection, self._compare_and_swap(collection, doc_id, patch, condition), doc_id
        )

    async def delete_by_id(self, collection: Collection, doc_id: str) -> bool:
        row = await self._guard(
            "delete_by_id",
            collection,
            self.database.fetch_one(
                "DELETE FROM documents WHERE collection = :collection AND id = :id RETURNING id",
                {"collection": collection_name(collection), "id": doc_id},
            ),
            doc_id,
        )
        return row is not None

    async def count(self, collection: Collection, filter: Optional[dict] = None) -> int:
        return await self._guard("count", collection, self._count(collection, filter))

    @asynccontextmanager
    async def transaction(self):
        async with self.database.transaction():
            yield
