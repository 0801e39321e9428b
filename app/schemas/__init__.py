"""
Pydantic schemas for request/response validation
"""

from app.schemas.user import (
    RegisterRequest,
    LoginRequest,
    UpdateProfileRequest,
    ChangePasswordRequest,
    UpdateUserStatusRequest,
    TokenResponse,
)
from app.schemas.event import CreateEventRequest, UpdateEventRequest
from app.schemas.club import CreateClubRequest, UpdateClubRequest, UpdateMemberRoleRequest
from app.schemas.feedback import (
    CreateFeedbackRequest,
    UpdateFeedbackRequest,
    FeedbackResponseRequest,
    VoteRequest,
)
from app.schemas.lost_found import CreateItemRequest, UpdateItemRequest, MatchRequest
from app.schemas.announcement import CreateAnnouncementRequest, UpdateAnnouncementRequest

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "UpdateProfileRequest",
    "ChangePasswordRequest",
    "UpdateUserStatusRequest",
    "TokenResponse",
    "CreateEventRequest",
    "UpdateEventRequest",
    "CreateClubRequest",
    "UpdateClubRequest",
    "UpdateMemberRoleRequest",
    "CreateFeedbackRequest",
    "UpdateFeedbackRequest",
    "FeedbackResponseRequest",
    "VoteRequest",
    "CreateItemRequest",
    "UpdateItemRequest",
    "MatchRequest",
    "CreateAnnouncementRequest",
    "UpdateAnnouncementRequest",
]
