"""
Database Connection
Async `databases` connection for the document store, SQLAlchemy metadata for migrations
"""

import logging

from databases import Database
from sqlalchemy import create_engine, MetaData
from sqlalchemy.orm import declarative_base
from app.config import settings

logger = logging.getLogger(__name__)

# Database URL
DATABASE_URL = settings.DATABASE_URL

# Behind a pgbouncer transaction pooler, disable prepared statements
if "pooler" in DATABASE_URL or "pgbouncer=true" in DATABASE_URL:
    db_options = {"min_size": 1, "max_size": 5, "statement_cache_size": 0}
elif DATABASE_URL.startswith("sqlite"):
    db_options = {}
else:
    db_options = {"min_size": 1, "max_size": 10}

# Metadata for models
metadata = MetaData()

# Base class for models
Base = declarative_base(metadata=metadata)


def create_database(url: str = DATABASE_URL) -> Database:
    """Create an async database handle for the given URL"""
    options = db_options if url == DATABASE_URL else {}
    return Database(url, **options)


def create_tables(url: str = DATABASE_URL) -> None:
    """
    Create tables directly from the models

    Used for SQLite in development and tests; PostgreSQL deployments run the
    Alembic migrations instead.
    """
    # Register models on the metadata
    import app.models.document  # noqa: F401

    engine = create_engine(url)
    try:
        metadata.create_all(engine)
    finally:
        engine.dispose()
    logger.info("Tables ensured for %s", url.split("://", 1)[0])
