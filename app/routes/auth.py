"""
Authentication Routes
Registration, login, profile and admin user management
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.auth import Actor, Role, get_admin_actor, get_current_actor
from app.container import Container, get_container
from app.models.user import public_user
from app.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UpdateProfileRequest,
    UpdateUserStatusRequest,
)

router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, container: Container = Depends(get_container)):
    """
    Create a student or faculty account

    - **student_id** is required for students, **employee_id** for faculty
    """
    user, token = await container.users.register(data)
    return {"message": "User registered successfully", "token": token, "user": public_user(user)}


@router.post("/login", response_model=TokenResponse)
async def login(credentials: LoginRequest, container: Container = Depends(get_container)):
    """Verify credentials and issue a JWT"""
    user, token = await container.users.login(credentials.email, credentials.password)
    return {"message": "Login successful", "token": token, "user": public_user(user)}


@router.get("/me")
async def get_me(actor: Actor = Depends(get_current_actor), container: Container = Depends(get_container)):
    """Current user's profile"""
    user = await container.users.get(actor.id)
    return {"user": public_user(user)}


@router.put("/profile")
async def update_profile(
    data: UpdateProfileRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    user = await container.users.update_profile(actor, data)
    return {"message": "Profile updated successfully", "user": public_user(user)}


@router.put("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    await container.users.change_password(actor, data)
    return {"message": "Password changed successfully"}


@router.post("/logout")
async def logout(actor: Actor = Depends(get_current_actor)):
    """Tokens are stateless; the client discards its copy"""
    return {"message": "Logged out successfully"}


@router.get("/users")
async def list_users(
    role: Optional[Role] = None,
    department: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    actor: Actor = Depends(get_admin_actor),
    container: Container = Depends(get_container),
):
    """All users (admin only)"""
    return await container.users.list_users(role, department, search, page, limit)


@router.get("/users/{user_id}")
async def get_user(
    user_id: str,
    actor: Actor = Depends(get_admin_actor),
    container: Container = Depends(get_container),
):
    user = await container.users.get(user_id)
    return {"user": public_user(user)}


@router.put("/users/{user_id}/status")
async def update_user_status(
    user_id: str,
    data: UpdateUserStatusRequest,
    actor: Actor = Depends(get_admin_actor),
    container: Container = Depends(get_container),
):
    """Activate or deactivate an account (admin only)"""
    user = await container.users.set_status(actor, user_id, data.is_active)
    return {"message": "User status updated successfully", "user": public_user(user)}


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    actor: Actor = Depends(get_admin_actor),
    container: Container = Depends(get_container),
):
    await container.users.delete(actor, user_id)
    return {"message": "User deleted successfully"}
