"""
User Model
Campus accounts; role decides which of student_id / employee_id is required
"""

from datetime import datetime
from typing import List, Optional

from app.auth.roles import Role
from app.models.base import Entity


class User(Entity):
    email: str
    password_hash: Optional[str] = None
    first_name: str
    last_name: str
    role: Role
    department: Optional[str] = None
    year: Optional[str] = None
    student_id: Optional[str] = None
    employee_id: Optional[str] = None
    phone: Optional[str] = None
    profile_picture: Optional[str] = None
    is_active: bool = True
    is_verified: bool = False
    last_login: Optional[datetime] = None
    clubs: List[str] = []

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


def public_user(user: User) -> dict:
    """User document without credentials"""
    data = user.model_dump(mode="json", exclude={"password_hash"})
    data["full_name"] = user.full_name
    return data
