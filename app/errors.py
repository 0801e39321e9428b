"""
Error Taxonomy
Domain errors raised by the core and mapped to HTTP responses in main.py
"""

from typing import Optional
from fastapi import status


class CampusError(Exception):
    """Base class for every error the API reports to clients"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationFailed(CampusError):
    """Missing or malformed required field"""
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(CampusError):
    """No actor, or the credentials could not be verified"""
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class Forbidden(CampusError):
    """Actor lacks the capability for this action on this resource"""
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class NotFound(CampusError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(CampusError):
    """Duplicate unique field, or a write lost too many races"""
    status_code = status.HTTP_409_CONFLICT


class InvalidTransition(CampusError):
    """
    Workflow rule violated

    `reason` is a stable machine-readable code, e.g. 'already_approved',
    'full', 'already_joined', 'not_approved', 'not_a_member',
    'member_not_found', 'deadline_passed', 'own_item', 'not_open', 'closed'
    """
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason

    def to_dict(self) -> dict:
        return {"message": self.message, "reason": self.reason}


class UpstreamError(CampusError):
    """Store or mail collaborator failure"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail

    def to_dict(self) -> dict:
        # Detail stays in the logs
        return {"message": "Server error"}
