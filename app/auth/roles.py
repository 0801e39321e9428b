"""
Identity & Role Model
Roles, the acting user, and the capability table every service checks against
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from app.errors import Forbidden, Unauthorized
from app.utils import parse_datetime, utcnow


class Role(str, Enum):
    STUDENT = "student"
    FACULTY = "faculty"
    ADMIN = "admin"


ALL_ROLES = frozenset(Role)
STAFF_ROLES = frozenset({Role.FACULTY, Role.ADMIN})


@dataclass(frozen=True)
class Actor:
    """An already-authenticated caller"""
    id: str
    role: Role
    email: str = ""
    name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    APPROVE = "approve"
    REJECT = "reject"
    JOIN = "join"
    MANAGE_MEMBERS = "manage_members"
    RESPOND = "respond"
    SET_STATUS = "set_status"
    CLAIM = "claim"
    RESOLVE = "resolve"
    MATCH = "match"


class ResourceType(str, Enum):
    EVENT = "event"
    CLUB = "club"
    FEEDBACK = "feedback"
    LOST_FOUND = "lost_found"
    ANNOUNCEMENT = "announcement"


@dataclass(frozen=True)
class ResourcePolicy:
    """Per-type capability data; admin overrides every ownership rule"""
    edit_fields: tuple
    delete_fields: tuple
    creator_roles: frozenset = ALL_ROLES
    approver_roles: frozenset = frozenset()
    auto_approve_roles: frozenset = frozenset()
    staff_roles: frozenset = frozenset()
    member_manager_fields: tuple = ()
    resolve_fields: tuple = ()


POLICIES = {
    ResourceType.EVENT: ResourcePolicy(
        edit_fields=("organizer",),
        delete_fields=("organizer",),
        approver_roles=STAFF_ROLES,
        auto_approve_roles=STAFF_ROLES,
        member_manager_fields=("organizer",),
    ),
    ResourceType.CLUB: ResourcePolicy(
        edit_fields=("advisor", "president"),
        delete_fields=("advisor",),
        approver_roles=STAFF_ROLES,
        auto_approve_roles=frozenset({Role.ADMIN}),
        member_manager_fields=("advisor", "president"),
    ),
    ResourceType.FEEDBACK: ResourcePolicy(
        edit_fields=("submitted_by",),
        delete_fields=("submitted_by",),
        staff_roles=STAFF_ROLES,
    ),
    ResourceType.LOST_FOUND: ResourcePolicy(
        edit_fields=("reported_by",),
        delete_fields=("reported_by",),
        resolve_fields=("reported_by", "claimed_by"),
    ),
    ResourceType.ANNOUNCEMENT: ResourcePolicy(
        edit_fields=("posted_by",),
        delete_fields=("posted_by",),
        creator_roles=STAFF_ROLES,
    ),
}


def _field(resource: Any, name: str) -> Any:
    if resource is None:
        return None
    if isinstance(resource, dict):
        return resource.get(name)
    return getattr(resource, name, None)


def owns(actor: Optional[Actor], resource: Any, fields: tuple) -> bool:
    """True when any of the owner reference fields points at the actor"""
    if actor is None:
        return False
    return any(_field(resource, f) is not None and _field(resource, f) == actor.id for f in fields)


def is_publicly_visible(resource_type: ResourceType, resource: Any, now: Optional[datetime] = None) -> bool:
    """What anonymous callers may read"""
    if resource_type in (ResourceType.EVENT, ResourceType.CLUB):
        return bool(_field(resource, "is_approved")) and _field(resource, "is_active") is not False
    if resource_type == ResourceType.FEEDBACK:
        return bool(_field(resource, "is_public"))
    if resource_type == ResourceType.ANNOUNCEMENT:
        if _field(resource, "is_active") is False:
            return False
        expires_at = parse_datetime(_field(resource, "expires_at"))
        return expires_at is None or expires_at > (now or utcnow())
    return True


def auto_approves(actor: Actor, resource_type: ResourceType) -> bool:
    """Whether resources created by this actor skip the pending state"""
    return actor.role in POLICIES[resource_type].auto_approve_roles


def has_capability(
    actor: Optional[Actor],
    action: Action,
    resource_type: ResourceType,
    resource: Any = None,
) -> bool:
    """
    Evaluate a capability for an actor

    `resource` is the loaded document (dict or model); it may be omitted for
    collection-level checks such as CREATE or listing.
    """
    policy = POLICIES[resource_type]

    if action == Action.READ:
        if resource is None or is_publicly_visible(resource_type, resource):
            return True
        if actor is None:
            return False
        if actor.is_admin:
            return True
        if resource_type in (ResourceType.EVENT, ResourceType.CLUB) and actor.role in policy.approver_roles:
            return True
        if resource_type == ResourceType.FEEDBACK and actor.role in policy.staff_roles:
            return True
        return owns(actor, resource, policy.edit_fields + policy.delete_fields)

    # Anonymous callers never mutate
    if actor is None:
        return False

    if action == Action.CREATE:
        return actor.role in policy.creator_roles
    if action in (Action.JOIN, Action.CLAIM):
        return True
    if actor.is_admin:
        return True
    if action == Action.EDIT:
        return owns(actor, resource, policy.edit_fields)
    if action == Action.DELETE:
        return owns(actor, resource, policy.delete_fields)
    if action in (Action.APPROVE, Action.REJECT):
        return actor.role in policy.approver_roles
    if action in (Action.RESPOND, Action.SET_STATUS):
        return actor.role in policy.staff_roles
    if action == Action.MANAGE_MEMBERS:
        return owns(actor, resource, policy.member_manager_fields)
    if action == Action.RESOLVE:
        return owns(actor, resource, policy.resolve_fields)
    if action == Action.MATCH:
        return owns(actor, resource, policy.edit_fields)
    return False


def require_capability(
    actor: Optional[Actor],
    action: Action,
    resource_type: ResourceType,
    resource: Any = None,
    message: str = "Access denied",
) -> Actor:
    """Raise Unauthorized/Forbidden unless the capability holds"""
    if actor is None and action != Action.READ:
        raise Unauthorized()
    if not has_capability(actor, action, resource_type, resource):
        raise Forbidden(message)
    return actor
