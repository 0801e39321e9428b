"""
Document Table
Every campus resource is stored as one JSON row keyed by (collection, id)
"""

from sqlalchemy import Column, DateTime, Index, Integer, String, Text, func
from app.database import Base


class StoredDocument(Base):
    __tablename__ = "documents"

    collection = Column(String(50), primary_key=True)
    id = Column(String(36), primary_key=True)

    # Compare-and-swap counter, bumped on every write
    version = Column(Integer, nullable=False, default=1)

    # JSON-encoded document body
    data = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_documents_collection", "collection"),
    )
