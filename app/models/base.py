"""
Entity Base
Shape shared by every stored campus resource
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Entity(BaseModel):
    """Stored document: store-managed id, timestamps and CAS version"""
    model_config = ConfigDict(extra="ignore", use_enum_values=False)

    id: str
    created_at: datetime
    updated_at: datetime
    version: int = 0


class ApprovableEntity(Entity):
    """Fields carried by resources that go through approval"""
    is_active: bool = True
    is_approved: bool = False
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
