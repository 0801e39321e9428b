"""
Lost & Found Model
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from app.models.base import Entity


class LostFoundCategory(str, Enum):
    LOST = "lost"
    FOUND = "found"


class ItemType(str, Enum):
    ELECTRONICS = "electronics"
    DOCUMENTS = "documents"
    CLOTHING = "clothing"
    ACCESSORIES = "accessories"
    BOOKS = "books"
    KEYS = "keys"
    WALLET = "wallet"
    OTHER = "other"


class LostFoundStatus(str, Enum):
    OPEN = "open"
    CLAIMED = "claimed"
    RESOLVED = "resolved"
    EXPIRED = "expired"
    MATCHED = "matched"


class Coordinates(BaseModel):
    latitude: float
    longitude: float


class ContactInfo(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None


class LostFoundItem(Entity):
    title: str
    description: str
    category: LostFoundCategory
    item_type: ItemType
    location: str
    coordinates: Optional[Coordinates] = None
    date_lost_or_found: datetime
    reported_by: str
    contact_info: Optional[ContactInfo] = None
    images: List[str] = []
    status: LostFoundStatus = LostFoundStatus.OPEN
    claimed_by: Optional[str] = None
    claimed_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    matched_with: Optional[str] = None
    tags: List[str] = []
    is_urgent: bool = False
    reward: Optional[str] = None
