"""
Resource Store
Document store contract and its adapters
"""

from app.store.base import Collection, DocumentStore
from app.store.memory import MemoryDocumentStore
from app.store.sql import SQLDocumentStore
from app.config import settings


def build_store() -> DocumentStore:
    """Store selected by STORE_BACKEND"""
    if settings.STORE_BACKEND == "memory":
        return MemoryDocumentStore()

    from app.database import create_database, create_tables

    if settings.DATABASE_URL.startswith("sqlite"):
        create_tables(settings.DATABASE_URL)
    return SQLDocumentStore(create_database(settings.DATABASE_URL), timeout=settings.STORE_TIMEOUT_SECONDS)


__all__ = [
    "Collection",
    "DocumentStore",
    "MemoryDocumentStore",
    "SQLDocumentStore",
    "build_store",
]
