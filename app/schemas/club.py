"""
Club Request Models
"""

from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from app.models.club import ClubCategory, MeetingSchedule, MemberRole
from app.schemas.validators import reject_null


class CreateClubRequest(BaseModel):
    """Request to create a new club"""
    name: str = Field(..., min_length=1, max_length=100, description="Club name")
    description: str = Field(..., min_length=1, max_length=1000)
    category: ClubCategory
    president: Optional[str] = Field(None, description="User id of the club president")
    max_members: Optional[int] = Field(None, ge=1)
    meeting_schedule: Optional[MeetingSchedule] = None
    contact_email: Optional[EmailStr] = Field(None, description="Club contact email")
    logo: Optional[str] = None
    cover_image: Optional[str] = None
    established_year: Optional[int] = None
    tags: List[str] = []

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Robotics",
                "description": "Build and race robots",
                "category": "technical",
                "max_members": 40,
                "contact_email": "robotics@uni.edu"
            }
        }


class UpdateClubRequest(BaseModel):
    """Request to update club details"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[ClubCategory] = None
    president: Optional[str] = None
    max_members: Optional[int] = Field(None, ge=1)
    meeting_schedule: Optional[MeetingSchedule] = None
    contact_email: Optional[EmailStr] = None
    logo: Optional[str] = None
    cover_image: Optional[str] = None
    established_year: Optional[int] = None
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None

    check_required = reject_null("name", "description", "category", "tags", "is_active")


class UpdateMemberRoleRequest(BaseModel):
    role: MemberRole
