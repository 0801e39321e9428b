"""
Club Model
Student clubs with a member roster and an advisor who owns the record
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from app.models.base import ApprovableEntity


class ClubCategory(str, Enum):
    ACADEMIC = "academic"
    CULTURAL = "cultural"
    SPORTS = "sports"
    TECHNICAL = "technical"
    SOCIAL = "social"
    VOLUNTEER = "volunteer"
    OTHER = "other"


class MemberRole(str, Enum):
    MEMBER = "member"
    VICE_PRESIDENT = "vice-president"
    SECRETARY = "secretary"
    TREASURER = "treasurer"
    COMMITTEE_MEMBER = "committee-member"


class ClubMember(BaseModel):
    user: str
    role: MemberRole = MemberRole.MEMBER
    joined_at: datetime


class MeetingSchedule(BaseModel):
    day: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None


class Club(ApprovableEntity):
    name: str
    description: str
    category: ClubCategory
    advisor: str
    president: Optional[str] = None
    members: List[ClubMember] = []
    max_members: Optional[int] = None
    meeting_schedule: Optional[MeetingSchedule] = None
    contact_email: Optional[str] = None
    logo: Optional[str] = None
    cover_image: Optional[str] = None
    established_year: Optional[int] = None
    tags: List[str] = []


def member_count(club: Club) -> int:
    return len(club.members)


def is_full(club: Club) -> bool:
    return club.max_members is not None and len(club.members) >= club.max_members


def club_view(club: Club) -> dict:
    data = club.model_dump(mode="json")
    data["member_count"] = member_count(club)
    data["is_full"] = is_full(club)
    return data
