"""
Club Service
Business logic for club management, approval and membership
"""

import logging
import re
from typing import Optional

from app.auth.roles import Action, Actor, ResourceType, has_capability, require_capability
from app.errors import Conflict, NotFound, ValidationFailed
from app.models.club import Club, club_view
from app.models.user import User
from app.notifications import RealtimeEvent
from app.schemas.club import CreateClubRequest, UpdateClubRequest
from app.services.base import ResourceService
from app.store import Collection, DocumentStore
from app.utils import search_pattern
from app.workflow import CLUB_WORKFLOW, apply_transition, load
from app.workflow import membership

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("name", "created_at", "category")


def _view(doc: dict) -> dict:
    return club_view(Club.model_validate(doc))


async def unlink_members(store: DocumentStore, club: Club) -> None:
    """Pull a removed club from every member's clubs list"""
    users = await store.find(Collection.USERS, {"clubs": club.id})
    for doc in users:
        def transition(user: User) -> Optional[dict]:
            if club.id not in user.clubs:
                return None
            return {"clubs": [c for c in user.clubs if c != club.id]}
        await apply_transition(store, Collection.USERS, User, doc["id"], transition, "User")


class ClubService(ResourceService):
    """Service for club management operations"""

    async def _load(self, club_id: str) -> Club:
        return await load(self.store, Collection.CLUBS, Club, club_id, "Club")

    async def _ensure_name_free(self, name: str, exclude_id: Optional[str] = None) -> None:
        pattern = "^" + re.escape(name.strip()) + "$"
        existing = await self.store.find_one(Collection.CLUBS, {"name": {"$regex": pattern}})
        if existing and existing["id"] != exclude_id:
            raise Conflict(f"Club with name '{name}' already exists")

    async def list_clubs(
        self,
        actor: Optional[Actor],
        category: Optional[str] = None,
        search: Optional[str] = None,
        status: str = "approved",
        sort: str = "name",
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict:
        """List clubs; only reviewers may look past the approved ones"""
        if actor is None or not actor.is_staff:
            status = "approved"

        query: dict = {"is_active": True}
        if category and category != "all":
            query["category"] = category
        if status and status != "all":
            query["is_approved"] = status == "approved"
        if search:
            pattern = search_pattern(search)
            query["$or"] = [
                {"name": {"$regex": pattern}},
                {"description": {"$regex": pattern}},
            ]

        sort_field = sort if sort in SORTABLE_FIELDS else "name"
        return await self.paginate(Collection.CLUBS, "clubs", query, [(sort_field, 1)], page, limit, _view)

    async def pending_clubs(self, actor: Actor, page: Optional[int] = None, limit: Optional[int] = None) -> dict:
        require_capability(actor, Action.APPROVE, ResourceType.CLUB, message="Access denied. Faculty or admin role required.")
        return await self.paginate(
            Collection.CLUBS, "clubs", {"is_approved": False}, [("created_at", -1)], page, limit, _view
        )

    async def user_clubs(self, actor: Actor, page: Optional[int] = None, limit: Optional[int] = None) -> dict:
        return await self.paginate(
            Collection.CLUBS, "clubs", {"members.user": actor.id}, [("name", 1)], page, limit, _view
        )

    async def get_club(self, actor: Optional[Actor], club_id: str) -> Club:
        club = await self._load(club_id)
        if not has_capability(actor, Action.READ, ResourceType.CLUB, club):
            raise NotFound("Club not found")
        return club

    async def create_club(self, actor: Actor, data: CreateClubRequest) -> Club:
        require_capability(actor, Action.CREATE, ResourceType.CLUB)
        await self._ensure_name_free(data.name)

        doc = data.model_dump()
        doc["name"] = data.name.strip()
        doc.update(CLUB_WORKFLOW.creation_defaults(actor))
        doc["members"] = []
        club = Club.model_validate(await self.store.insert(Collection.CLUBS, doc))
        logger.info("Club created: id=%s advisor=%s approved=%s", club.id, actor.id, club.is_approved)

        self.publisher.publish(RealtimeEvent.NEW_CLUB, club_view(club))
        if not club.is_approved and self.notifier:
            self.notify_in_background(
                "email:club-pending",
                self.notifier.notify_reviewers,
                f"New Club Pending Approval: {club.name}",
                f"{actor.name or actor.email} requested a new club that needs review.",
                {"Name": club.name, "Category": club.category.value, "Description": club.description},
            )
        return club

    async def update_club(self, actor: Actor, club_id: str, data: UpdateClubRequest) -> Club:
        club = await self._load(club_id)
        require_capability(actor, Action.EDIT, ResourceType.CLUB, club)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("name") and changes["name"].strip().lower() != club.name.lower():
            await self._ensure_name_free(changes["name"], exclude_id=club_id)

        def transition(current: Club) -> dict:
            limit = changes.get("max_members")
            if limit is not None and limit < len(current.members):
                raise ValidationFailed(
                    f"max_members cannot be lower than the current member count ({len(current.members)})"
                )
            return changes

        updated = await apply_transition(self.store, Collection.CLUBS, Club, club_id, transition, "Club")
        self.publisher.publish(RealtimeEvent.CLUB_UPDATED, club_view(updated))
        return updated

    async def delete_club(self, actor: Actor, club_id: str) -> None:
        club = await self._load(club_id)
        require_capability(actor, Action.DELETE, ResourceType.CLUB, club)
        async with self.store.transaction():
            if not await self.store.delete_by_id(Collection.CLUBS, club_id):
                raise NotFound("Club not found")
            await unlink_members(self.store, club)
        logger.info("Club deleted: id=%s by=%s", club_id, actor.id)
        self.publisher.publish(RealtimeEvent.CLUB_DELETED, {"resource_id": club_id})

    async def approve_club(self, actor: Actor, club_id: str) -> Club:
        club = await CLUB_WORKFLOW.approve(self.store, actor, club_id)
        self.publisher.publish(RealtimeEvent.CLUB_APPROVED, club_view(club))
        if self.notifier:
            self.notify_in_background(
                "email:club-approved",
                self.notifier.notify_owner,
                club.advisor, "Club", club.name, True, actor.name or actor.email,
                {
                    "Category": club.category.value,
                    "Max Members": str(club.max_members or "Unlimited"),
                },
            )
        return club

    async def reject_club(self, actor: Actor, club_id: str) -> Club:
        club = await CLUB_WORKFLOW.reject(self.store, actor, club_id, cleanup=unlink_members)
        self.publisher.publish(RealtimeEvent.CLUB_REJECTED, {"resource_id": club_id})
        if self.notifier:
            self.notify_in_background(
                "email:club-rejected",
                self.notifier.notify_owner,
                club.advisor, "Club", club.name, False, actor.name or actor.email,
            )
        return club

    async def join_club(self, actor: Actor, club_id: str) -> Club:
        require_capability(actor, Action.JOIN, ResourceType.CLUB)
        club = await membership.join_club(self.store, actor, club_id)
        self.publisher.publish(RealtimeEvent.CLUB_MEMBER_JOINED, {"club_id": club_id, "user_id": actor.id})
        return club

    async def leave_club(self, actor: Actor, club_id: str) -> Club:
        require_capability(actor, Action.JOIN, ResourceType.CLUB)
        club = await membership.leave_club(self.store, actor, club_id)
        self.publisher.publish(RealtimeEvent.CLUB_MEMBER_LEFT, {"club_id": club_id, "user_id": actor.id})
        return club

    async def update_member_role(self, actor: Actor, club_id: str, member_id: str, role) -> Club:
        club = await self._load(club_id)
        require_capability(actor, Action.MANAGE_MEMBERS, ResourceType.CLUB, club)
        updated = await apply_transition(
            self.store, Collection.CLUBS, Club, club_id, membership.member_role_transition(member_id, role), "Club"
        )
        self.publisher.publish(
            RealtimeEvent.CLUB_MEMBER_ROLE_UPDATED,
            {"club_id": club_id, "member_id": member_id, "role": role},
        )
        return updated
