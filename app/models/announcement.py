"""
Announcement Model
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from app.models.base import Entity, Priority


class AnnouncementCategory(str, Enum):
    GENERAL = "general"
    ACADEMIC = "academic"
    ADMINISTRATIVE = "administrative"
    EMERGENCY = "emergency"
    EVENT = "event"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class TargetAudience(str, Enum):
    ALL = "all"
    STUDENTS = "students"
    FACULTY = "faculty"
    STAFF = "staff"
    SPECIFIC_DEPARTMENT = "specific-department"
    SPECIFIC_YEAR = "specific-year"


class ReadReceipt(BaseModel):
    user: str
    read_at: datetime


class Announcement(Entity):
    title: str
    content: str
    priority: Priority = Priority.MEDIUM
    category: AnnouncementCategory
    target_audience: TargetAudience = TargetAudience.ALL
    target_department: Optional[str] = None
    target_year: Optional[str] = None
    posted_by: str
    expires_at: Optional[datetime] = None
    is_active: bool = True
    is_approved: bool = True
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    attachments: List[str] = []
    tags: List[str] = []
    read_by: List[ReadReceipt] = []
    views: int = 0


def has_read(announcement: Announcement, user_id: str) -> bool:
    return any(r.user == user_id for r in announcement.read_by)
