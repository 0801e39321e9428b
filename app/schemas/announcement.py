"""
Announcement Request Models
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from app.models.announcement import AnnouncementCategory, TargetAudience
from app.models.base import Priority
from app.schemas.validators import reject_null


class CreateAnnouncementRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=5000)
    priority: Priority = Priority.MEDIUM
    category: AnnouncementCategory
    target_audience: TargetAudience = TargetAudience.ALL
    target_department: Optional[str] = None
    target_year: Optional[str] = None
    expires_at: Optional[datetime] = None
    attachments: List[str] = []
    tags: List[str] = []

    @model_validator(mode="after")
    def check_target(self):
        if self.target_audience == TargetAudience.SPECIFIC_DEPARTMENT and not self.target_department:
            raise ValueError("target_department is required for specific-department announcements")
        if self.target_audience == TargetAudience.SPECIFIC_YEAR and not self.target_year:
            raise ValueError("target_year is required for specific-year announcements")
        return self


class UpdateAnnouncementRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    priority: Optional[Priority] = None
    category: Optional[AnnouncementCategory] = None
    target_audience: Optional[TargetAudience] = None
    target_department: Optional[str] = None
    target_year: Optional[str] = None
    expires_at: Optional[datetime] = None
    is_active: Optional[bool] = None
    attachments: Optional[List[str]] = None
    tags: Optional[List[str]] = None

    check_required = reject_null(
        "title", "content", "priority", "category", "target_audience",
        "is_active", "attachments", "tags",
    )
