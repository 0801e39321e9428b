"""
Lost & Found Request Models
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.lost_found import ContactInfo, Coordinates, ItemType, LostFoundCategory
from app.schemas.validators import reject_null


class CreateItemRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    category: LostFoundCategory
    item_type: ItemType
    location: str = Field(..., min_length=1)
    coordinates: Optional[Coordinates] = None
    date_lost_or_found: datetime
    contact_info: Optional[ContactInfo] = None
    images: List[str] = []
    tags: List[str] = []
    is_urgent: bool = False
    reward: Optional[str] = None


class UpdateItemRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    item_type: Optional[ItemType] = None
    location: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    date_lost_or_found: Optional[datetime] = None
    contact_info: Optional[ContactInfo] = None
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    is_urgent: Optional[bool] = None
    reward: Optional[str] = None

    check_required = reject_null(
        "title", "description", "item_type", "location", "date_lost_or_found",
        "images", "tags", "is_urgent",
    )


class MatchRequest(BaseModel):
    matched_item_id: str
