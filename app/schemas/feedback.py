"""
Feedback Request Models
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.base import Priority
from app.models.feedback import FeedbackCategory, FeedbackDepartment, FeedbackStatus
from app.workflow.feedback import VoteType
from app.schemas.validators import reject_null


class CreateFeedbackRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    category: FeedbackCategory
    priority: Priority = Priority.MEDIUM
    department: FeedbackDepartment
    location: Optional[str] = None
    attachments: List[str] = []
    is_anonymous: bool = False
    is_public: bool = False
    tags: List[str] = []


class UpdateFeedbackRequest(BaseModel):
    """
    Content fields belong to the submitter; status, priority and
    assigned_to are reviewer fields
    """
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    category: Optional[FeedbackCategory] = None
    department: Optional[FeedbackDepartment] = None
    location: Optional[str] = None
    attachments: Optional[List[str]] = None
    is_anonymous: Optional[bool] = None
    is_public: Optional[bool] = None
    tags: Optional[List[str]] = None
    status: Optional[FeedbackStatus] = None
    priority: Optional[Priority] = None
    assigned_to: Optional[str] = None

    check_required = reject_null(
        "title", "description", "category", "department", "attachments",
        "is_anonymous", "is_public", "tags", "status", "priority",
    )


class FeedbackResponseRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)


class VoteRequest(BaseModel):
    vote_type: VoteType
