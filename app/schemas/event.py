"""
Event Request Models
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from app.models.event import EventCategory
from app.schemas.validators import reject_null


class CreateEventRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    category: EventCategory
    start_date: datetime
    end_date: datetime
    start_time: str = Field(..., description="HH:MM")
    end_time: str = Field(..., description="HH:MM")
    location: str = Field(..., min_length=1)
    venue: str = Field(..., min_length=1)
    club: Optional[str] = None
    max_attendees: Optional[int] = Field(None, ge=1)
    registration_deadline: Optional[datetime] = None
    image: Optional[str] = None
    tags: List[str] = []

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Intro to Robotics",
                "description": "Hands-on session with the robotics lab",
                "category": "workshop",
                "start_date": "2026-11-02T00:00:00Z",
                "end_date": "2026-11-02T00:00:00Z",
                "start_time": "14:00",
                "end_time": "16:00",
                "location": "Engineering Block",
                "venue": "Lab 3",
                "max_attendees": 30
            }
        }


class UpdateEventRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    category: Optional[EventCategory] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    venue: Optional[str] = None
    club: Optional[str] = None
    max_attendees: Optional[int] = Field(None, ge=1)
    registration_deadline: Optional[datetime] = None
    image: Optional[str] = None
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None

    check_required = reject_null(
        "title", "description", "category", "start_date", "end_date",
        "start_time", "end_time", "location", "venue", "tags", "is_active",
    )
