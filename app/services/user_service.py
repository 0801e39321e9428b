"""
User Service
Registration, login, profile and admin account management
"""

import logging
from typing import Optional, Tuple

from app.auth.dependencies import create_access_token
from app.auth.password import hash_password, rehash_if_needed, verify_password
from app.auth.roles import Actor, Role
from app.errors import Conflict, Forbidden, NotFound, Unauthorized, ValidationFailed
from app.models.user import User, public_user
from app.schemas.user import ChangePasswordRequest, RegisterRequest, UpdateProfileRequest
from app.services.base import ResourceService
from app.store import Collection
from app.utils import search_pattern, utcnow
from app.workflow import load

logger = logging.getLogger(__name__)

SELF_REGISTER_ROLES = (Role.STUDENT, Role.FACULTY)


def issue_token(user: User) -> str:
    return create_access_token({"user_id": user.id, "email": user.email, "role": user.role.value})


class UserService(ResourceService):
    """Service for campus accounts"""

    async def _ensure_unique(self, field: str, value: str, message: str, exclude_id: Optional[str] = None) -> None:
        existing = await self.store.find_one(Collection.USERS, {field: value})
        if existing and existing["id"] != exclude_id:
            raise Conflict(message)

    async def register(self, data: RegisterRequest, allow_admin: bool = False) -> Tuple[User, str]:
        """Create an account and return it with a fresh token"""
        email = data.email.lower()

        if data.role == Role.ADMIN and not allow_admin:
            raise Forbidden("Admin accounts cannot be self-registered")
        domain = self.config.ALLOWED_EMAIL_DOMAIN
        if domain and not email.endswith("@" + domain.lower().lstrip("@")):
            raise ValidationFailed(f"Registration is limited to @{domain.lstrip('@')} addresses")

        await self._ensure_unique("email", email, "User already exists")

        # Exactly one campus id, chosen by role
        doc = data.model_dump(exclude={"password", "email"})
        if data.role == Role.STUDENT:
            if not data.student_id:
                raise ValidationFailed("Student ID is required for students")
            await self._ensure_unique("student_id", data.student_id, "Student ID already registered")
            doc["employee_id"] = None
        else:
            if not data.employee_id:
                raise ValidationFailed("Employee ID is required for faculty and admin")
            await self._ensure_unique("employee_id", data.employee_id, "Employee ID already registered")
            doc["student_id"] = None

        doc.update({
            "email": email,
            "password_hash": hash_password(data.password),
            "is_active": True,
            "is_verified": False,
            "clubs": [],
        })
        stored = await self.store.insert(Collection.USERS, doc)
        user = User.model_validate(stored)
        logger.info("User registered: id=%s role=%s", user.id, user.role.value)
        return user, issue_token(user)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        doc = await self.store.find_one(Collection.USERS, {"email": email.lower()})
        if doc is None or not verify_password(password, doc.get("password_hash")):
            raise Unauthorized("Invalid credentials")
        if not doc.get("is_active", True):
            raise Unauthorized("Account is deactivated")

        patch = {"last_login": utcnow()}
        upgraded = rehash_if_needed(password, doc["password_hash"])
        if upgraded:
            patch["password_hash"] = upgraded
        updated = await self.store.update_by_id(Collection.USERS, doc["id"], patch)
        user = User.model_validate(updated or doc)
        return user, issue_token(user)

    async def get(self, user_id: str) -> User:
        return await load(self.store, Collection.USERS, User, user_id, "User")

    async def update_profile(self, actor: Actor, data: UpdateProfileRequest) -> User:
        patch = data.model_dump(exclude_none=True)
        if not patch:
            return await self.get(actor.id)
        updated = await self.store.update_by_id(Collection.USERS, actor.id, patch)
        if updated is None:
            raise NotFound("User not found")
        return User.model_validate(updated)

    async def change_password(self, actor: Actor, data: ChangePasswordRequest) -> None:
        user = await self.get(actor.id)
        if not verify_password(data.current_password, user.password_hash):
            raise ValidationFailed("Current password is incorrect")
        await self.store.update_by_id(Collection.USERS, actor.id, {"password_hash": hash_password(data.new_password)})

    async def list_users(
        self,
        role: Optional[Role] = None,
        department: Optional[str] = None,
        search: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict:
        query: dict = {}
        if role:
            query["role"] = role.value
        if department:
            query["department"] = department
        if search:
            pattern = search_pattern(search)
            query["$or"] = [
                {"first_name": {"$regex": pattern}},
                {"last_name": {"$regex": pattern}},
                {"email": {"$regex": pattern}},
            ]
        return await self.paginate(
            Collection.USERS, "users", query, [("created_at", -1)], page, limit,
            lambda d: public_user(User.model_validate(d)),
        )

    async def set_status(self, actor: Actor, user_id: str, is_active: bool) -> User:
        if user_id == actor.id and not is_active:
            raise ValidationFailed("You cannot deactivate your own account")
        updated = await self.store.update_by_id(Collection.USERS, user_id, {"is_active": is_active})
        if updated is None:
            raise NotFound("User not found")
        logger.info("User status changed: id=%s is_active=%s by=%s", user_id, is_active, actor.id)
        return User.model_validate(updated)

    async def delete(self, actor: Actor, user_id: str) -> None:
        if user_id == actor.id:
            raise ValidationFailed("You cannot delete your own account")
        if not await self.store.delete_by_id(Collection.USERS, user_id):
            raise NotFound("User not found")
        logger.info("User deleted: id=%s by=%s", user_id, actor.id)
