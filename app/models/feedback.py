"""
Feedback Model
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from app.models.base import Entity, Priority


class FeedbackStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class FeedbackCategory(str, Enum):
    SUGGESTION = "suggestion"
    COMPLAINT = "complaint"
    APPRECIATION = "appreciation"
    BUG_REPORT = "bug-report"
    FEATURE_REQUEST = "feature-request"
    OTHER = "other"


class FeedbackDepartment(str, Enum):
    ACADEMIC = "academic"
    ADMINISTRATION = "administration"
    FACILITIES = "facilities"
    IT = "it"
    LIBRARY = "library"
    CAFETERIA = "cafeteria"
    SECURITY = "security"
    OTHER = "other"


class FeedbackResponse(BaseModel):
    text: str
    responded_by: str
    responded_at: datetime


class Feedback(Entity):
    title: str
    description: str
    category: FeedbackCategory
    priority: Priority = Priority.MEDIUM
    submitted_by: str
    status: FeedbackStatus = FeedbackStatus.OPEN
    assigned_to: Optional[str] = None
    department: FeedbackDepartment
    location: Optional[str] = None
    attachments: List[str] = []
    is_anonymous: bool = False
    is_public: bool = False
    responses: List[FeedbackResponse] = []
    tags: List[str] = []
    upvotes: List[str] = []
    downvotes: List[str] = []


def vote_count(feedback: Feedback) -> int:
    return len(feedback.upvotes) - len(feedback.downvotes)


def feedback_view(feedback: Feedback, reveal_submitter: bool = True) -> dict:
    data = feedback.model_dump(mode="json")
    data["vote_count"] = vote_count(feedback)
    if feedback.is_anonymous and not reveal_submitter:
        data["submitted_by"] = None
    return data
