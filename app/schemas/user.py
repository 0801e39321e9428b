"""
User / Auth Request Models
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from app.auth.roles import Role


class RegisterRequest(BaseModel):
    """Create a campus account"""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    role: Role = Role.STUDENT
    department: Optional[str] = Field(None, max_length=100)
    year: Optional[str] = Field(None, max_length=10)
    student_id: Optional[str] = Field(None, max_length=50)
    employee_id: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)

    class Config:
        json_schema_extra = {
            "example": {
                "email": "ada@uni.edu",
                "password": "s3cret-pass",
                "first_name": "Ada",
                "last_name": "Lovelace",
                "role": "student",
                "department": "CS",
                "year": "2",
                "student_id": "CS-2024-001"
            }
        }


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UpdateProfileRequest(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    department: Optional[str] = Field(None, max_length=100)
    year: Optional[str] = Field(None, max_length=10)
    profile_picture: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


class UpdateUserStatusRequest(BaseModel):
    is_active: bool


class TokenResponse(BaseModel):
    """Login/registration response"""
    message: str
    token: str
    token_type: str = "bearer"
    user: dict
