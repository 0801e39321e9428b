"""
Authentication Module
Password hashing, JWT tokens, and the role/capability model
"""

from app.auth.password import hash_password, verify_password
from app.auth.roles import (
    Action,
    Actor,
    ResourceType,
    Role,
    has_capability,
    require_capability,
)
from app.auth.dependencies import (
    create_access_token,
    decode_access_token,
    get_current_actor,
    get_optional_actor,
    get_admin_actor,
)

__all__ = [
    "hash_password",
    "verify_password",
    "Action",
    "Actor",
    "ResourceType",
    "Role",
    "has_capability",
    "require_capability",
    "create_access_token",
    "decode_access_token",
    "get_current_actor",
    "get_optional_actor",
    "get_admin_actor",
]
