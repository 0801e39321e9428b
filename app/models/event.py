"""
Event Model
Campus events with capacity-bounded attendee registration
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from app.models.base import ApprovableEntity


class EventCategory(str, Enum):
    ACADEMIC = "academic"
    CULTURAL = "cultural"
    SPORTS = "sports"
    WORKSHOP = "workshop"
    SEMINAR = "seminar"
    SOCIAL = "social"
    OTHER = "other"


class AttendeeStatus(str, Enum):
    REGISTERED = "registered"
    ATTENDED = "attended"
    CANCELLED = "cancelled"


class Attendee(BaseModel):
    user: str
    status: AttendeeStatus = AttendeeStatus.REGISTERED
    registered_at: datetime


class Event(ApprovableEntity):
    title: str
    description: str
    category: EventCategory
    start_date: datetime
    end_date: datetime
    start_time: str
    end_time: str
    location: str
    venue: str
    organizer: str
    club: Optional[str] = None
    attendees: List[Attendee] = []
    max_attendees: Optional[int] = None
    registration_deadline: Optional[datetime] = None
    image: Optional[str] = None
    tags: List[str] = []


def registered_count(event: Event) -> int:
    return sum(1 for a in event.attendees if a.status == AttendeeStatus.REGISTERED)


def is_full(event: Event) -> bool:
    return event.max_attendees is not None and registered_count(event) >= event.max_attendees


def available_spots(event: Event) -> Optional[int]:
    if event.max_attendees is None:
        return None
    return max(0, event.max_attendees - registered_count(event))


def event_view(event: Event) -> dict:
    """Event document plus read-time derived fields"""
    data = event.model_dump(mode="json")
    data["attendee_count"] = registered_count(event)
    data["is_full"] = is_full(event)
    data["available_spots"] = available_spots(event)
    return data
