"""
Models
Stored entity shapes, plus the SQL table the document store writes to
"""

from app.models.document import StoredDocument
from app.models.user import User
from app.models.event import Event, Attendee
from app.models.club import Club, ClubMember
from app.models.feedback import Feedback, FeedbackResponse
from app.models.lost_found import LostFoundItem
from app.models.announcement import Announcement

__all__ = [
    "StoredDocument",
    "User",
    "Event",
    "Attendee",
    "Club",
    "ClubMember",
    "Feedback",
    "FeedbackResponse",
    "LostFoundItem",
    "Announcement",
]
