"""
Announcement Service
Staff announcements with expiry and per-user read receipts
"""

import logging
from typing import Optional

from app.auth.roles import Action, Actor, ResourceType, has_capability, require_capability
from app.errors import NotFound, ValidationFailed
from app.models.announcement import Announcement, ReadReceipt, TargetAudience, has_read
from app.notifications import RealtimeEvent
from app.schemas.announcement import CreateAnnouncementRequest, UpdateAnnouncementRequest
from app.services.base import ResourceService
from app.store import Collection
from app.utils import search_pattern, utcnow
from app.workflow import apply_transition, load

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("created_at", "priority", "expires_at", "title")


def _dump(announcement: Announcement) -> dict:
    return announcement.model_dump(mode="json")


def mark_read_transition(actor: Actor):
    def transition(announcement: Announcement) -> Optional[dict]:
        if has_read(announcement, actor.id):
            return None
        receipt = ReadReceipt(user=actor.id, read_at=utcnow())
        return {"read_by": announcement.read_by + [receipt], "views": announcement.views + 1}
    return transition


class AnnouncementService(ResourceService):
    """Service for announcements"""

    async def _load(self, announcement_id: str) -> Announcement:
        return await load(self.store, Collection.ANNOUNCEMENTS, Announcement, announcement_id, "Announcement")

    async def list_announcements(
        self,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        search: Optional[str] = None,
        target_audience: Optional[str] = None,
        sort: str = "created_at",
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict:
        """Only effectively visible announcements: active and not expired"""
        query: dict = {"is_active": True}
        for field, value in (("category", category), ("priority", priority), ("target_audience", target_audience)):
            if value and value != "all":
                query[field] = value

        clauses = [{"$or": [{"expires_at": None}, {"expires_at": {"$gt": utcnow()}}]}]
        if search:
            pattern = search_pattern(search)
            clauses.append({"$or": [{"title": {"$regex": pattern}}, {"content": {"$regex": pattern}}]})
        query["$and"] = clauses

        sort_field = sort if sort in SORTABLE_FIELDS else "created_at"
        return await self.paginate(
            Collection.ANNOUNCEMENTS, "announcements", query, [(sort_field, -1)], page, limit,
            lambda d: _dump(Announcement.model_validate(d)),
        )

    async def get_announcement(self, actor: Optional[Actor], announcement_id: str) -> Announcement:
        """Reading as a signed-in user records a read receipt once"""
        announcement = await self._load(announcement_id)
        if not has_capability(actor, Action.READ, ResourceType.ANNOUNCEMENT, announcement):
            raise NotFound("Announcement not found")
        if actor is not None and not has_read(announcement, actor.id):
            announcement = await self._mark_read(actor, announcement_id)
        return announcement

    async def mark_as_read(self, actor: Actor, announcement_id: str) -> Announcement:
        announcement = await self._load(announcement_id)
        require_capability(actor, Action.READ, ResourceType.ANNOUNCEMENT, announcement)
        return await self._mark_read(actor, announcement_id)

    async def _mark_read(self, actor: Actor, announcement_id: str) -> Announcement:
        return await apply_transition(
            self.store, Collection.ANNOUNCEMENTS, Announcement, announcement_id,
            mark_read_transition(actor), "Announcement",
        )

    async def create_announcement(self, actor: Actor, data: CreateAnnouncementRequest) -> Announcement:
        require_capability(
            actor, Action.CREATE, ResourceType.ANNOUNCEMENT,
            message="Access denied. Only faculty and admin can post announcements.",
        )
        doc = data.model_dump()
        doc.update({
            "posted_by": actor.id,
            "is_active": True,
            "is_approved": True,
            "approved_by": actor.id,
            "approved_at": utcnow(),
            "read_by": [],
            "views": 0,
        })
        announcement = Announcement.model_validate(await self.store.insert(Collection.ANNOUNCEMENTS, doc))
        logger.info("Announcement posted: id=%s by=%s", announcement.id, actor.id)
        self.publisher.publish(RealtimeEvent.NEW_ANNOUNCEMENT, _dump(announcement))
        return announcement

    async def update_announcement(
        self, actor: Actor, announcement_id: str, data: UpdateAnnouncementRequest
    ) -> Announcement:
        announcement = await self._load(announcement_id)
        require_capability(actor, Action.EDIT, ResourceType.ANNOUNCEMENT, announcement)
        changes = data.model_dump(exclude_unset=True)

        def transition(current: Announcement) -> dict:
            audience = changes.get("target_audience") or current.target_audience
            department = changes.get("target_department", current.target_department)
            year = changes.get("target_year", current.target_year)
            if audience == TargetAudience.SPECIFIC_DEPARTMENT and not department:
                raise ValidationFailed("target_department is required for specific-department announcements")
            if audience == TargetAudience.SPECIFIC_YEAR and not year:
                raise ValidationFailed("target_year is required for specific-year announcements")
            return changes

        updated = await apply_transition(
            self.store, Collection.ANNOUNCEMENTS, Announcement, announcement_id, transition, "Announcement"
        )
        self.publisher.publish(RealtimeEvent.ANNOUNCEMENT_UPDATED, _dump(updated))
        return updated

    async def delete_announcement(self, actor: Actor, announcement_id: str) -> None:
        announcement = await self._load(announcement_id)
        require_capability(actor, Action.DELETE, ResourceType.ANNOUNCEMENT, announcement)
        if not await self.store.delete_by_id(Collection.ANNOUNCEMENTS, announcement_id):
            raise NotFound("Announcement not found")
        self.publisher.publish(RealtimeEvent.ANNOUNCEMENT_DELETED, {"resource_id": announcement_id})
