"""
Lost & Found Service
Reports, claims, matching suggestions and housekeeping
"""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import List, Optional

from app.auth.roles import Action, Actor, ResourceType, has_capability, require_capability
from app.errors import Forbidden, NotFound, ValidationFailed
from app.models.lost_found import LostFoundCategory, LostFoundItem, LostFoundStatus
from app.notifications import RealtimeEvent
from app.schemas.lost_found import CreateItemRequest, UpdateItemRequest
from app.services.base import ResourceService
from app.store import Collection
from app.utils import search_pattern, utcnow
from app.workflow import apply_transition, load
from app.workflow.lost_found import (
    claim_transition,
    expire_transition,
    match_score,
    match_transition,
    resolve_transition,
)

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("created_at", "date_lost_or_found", "title")
MAX_SUGGESTIONS = 10


def _dump(item: LostFoundItem) -> dict:
    return item.model_dump(mode="json")


class LostFoundService(ResourceService):
    """Service for lost & found items"""

    async def _load(self, item_id: str) -> LostFoundItem:
        return await load(self.store, Collection.LOST_FOUND, LostFoundItem, item_id, "Item")

    async def list_items(
        self,
        category: Optional[str] = None,
        item_type: Optional[str] = None,
        status: str = "open",
        search: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        radius: Optional[float] = None,
        sort: str = "created_at",
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict:
        query: dict = {}
        for field, value in (("category", category), ("item_type", item_type), ("status", status)):
            if value and value != "all":
                query[field] = value

        if latitude is not None and longitude is not None:
            radius_km = radius if radius is not None else self.config.LOST_FOUND_DEFAULT_RADIUS_KM
            query["coordinates"] = {
                "$near": {"latitude": latitude, "longitude": longitude, "max_distance": radius_km * 1000}
            }

        if search:
            pattern = search_pattern(search)
            query["$or"] = [
                {"title": {"$regex": pattern}},
                {"description": {"$regex": pattern}},
                {"location": {"$regex": pattern}},
                {"tags": {"$regex": pattern}},
            ]

        sort_field = sort if sort in SORTABLE_FIELDS else "created_at"
        return await self.paginate(
            Collection.LOST_FOUND, "items", query, [(sort_field, -1)], page, limit,
            lambda d: _dump(LostFoundItem.model_validate(d)),
        )

    async def get_item(self, item_id: str) -> LostFoundItem:
        return await self._load(item_id)

    async def user_items(self, actor: Actor) -> List[LostFoundItem]:
        docs = await self.store.find(Collection.LOST_FOUND, {"reported_by": actor.id}, sort=[("created_at", -1)])
        return [LostFoundItem.model_validate(d) for d in docs]

    async def create_item(self, actor: Actor, data: CreateItemRequest) -> LostFoundItem:
        require_capability(actor, Action.CREATE, ResourceType.LOST_FOUND)
        doc = data.model_dump()
        doc.update({
            "reported_by": actor.id,
            "status": LostFoundStatus.OPEN,
            "claimed_by": None,
            "resolved_by": None,
            "matched_with": None,
        })
        item = LostFoundItem.model_validate(await self.store.insert(Collection.LOST_FOUND, doc))
        logger.info("Item reported: id=%s category=%s by=%s", item.id, item.category.value, actor.id)
        self.publisher.publish(RealtimeEvent.LOST_FOUND_UPDATE, _dump(item))
        return item

    async def update_item(self, actor: Actor, item_id: str, data: UpdateItemRequest) -> LostFoundItem:
        item = await self._load(item_id)
        require_capability(actor, Action.EDIT, ResourceType.LOST_FOUND, item)
        changes = data.model_dump(exclude_unset=True)
        updated = await apply_transition(
            self.store, Collection.LOST_FOUND, LostFoundItem, item_id, lambda current: changes, "Item"
        )
        self.publisher.publish(RealtimeEvent.LOST_FOUND_UPDATE, _dump(updated))
        return updated

    async def delete_item(self, actor: Actor, item_id: str) -> None:
        item = await self._load(item_id)
        require_capability(actor, Action.DELETE, ResourceType.LOST_FOUND, item)
        if not await self.store.delete_by_id(Collection.LOST_FOUND, item_id):
            raise NotFound("Item not found")
        self.publisher.publish(RealtimeEvent.LOST_FOUND_DELETED, {"resource_id": item_id})

    async def claim_item(self, actor: Actor, item_id: str) -> LostFoundItem:
        require_capability(actor, Action.CLAIM, ResourceType.LOST_FOUND)
        item = await apply_transition(
            self.store, Collection.LOST_FOUND, LostFoundItem, item_id, claim_transition(actor), "Item"
        )
        logger.info("Item claimed: id=%s by=%s", item_id, actor.id)
        self.publisher.publish(RealtimeEvent.LOST_FOUND_CLAIMED, _dump(item))
        return item

    async def resolve_item(self, actor: Actor, item_id: str) -> LostFoundItem:
        item = await self._load(item_id)
        require_capability(actor, Action.RESOLVE, ResourceType.LOST_FOUND, item)
        item = await apply_transition(
            self.store, Collection.LOST_FOUND, LostFoundItem, item_id, resolve_transition(actor), "Item"
        )
        self.publisher.publish(RealtimeEvent.LOST_FOUND_RESOLVED, _dump(item))
        return item

    async def match_items(self, actor: Actor, item_id: str, other_id: str):
        """Mark two open reports as the same object; either reporter or an admin may do this"""
        if item_id == other_id:
            raise ValidationFailed("An item cannot be matched with itself")

        item = await self._load(item_id)
        other = await self._load(other_id)
        if not (
            has_capability(actor, Action.MATCH, ResourceType.LOST_FOUND, item)
            or has_capability(actor, Action.MATCH, ResourceType.LOST_FOUND, other)
        ):
            raise Forbidden()

        async with self.store.transaction():
            item = await apply_transition(
                self.store, Collection.LOST_FOUND, LostFoundItem, item_id, match_transition(other_id), "Item"
            )
            other = await apply_transition(
                self.store, Collection.LOST_FOUND, LostFoundItem, other_id, match_transition(item_id), "Item"
            )

        logger.info("Items matched: %s <-> %s by=%s", item_id, other_id, actor.id)
        self.publisher.publish(RealtimeEvent.ITEMS_MATCHED, {"item1": _dump(item), "item2": _dump(other)})
        return item, other

    async def suggestions(self, item_id: str) -> List[dict]:
        """Open reports of the opposite kind and same type, best match first"""
        item = await self._load(item_id)
        opposite = LostFoundCategory.FOUND if item.category == LostFoundCategory.LOST else LostFoundCategory.LOST
        docs = await self.store.find(
            Collection.LOST_FOUND,
            {
                "category": opposite.value,
                "status": LostFoundStatus.OPEN.value,
                "item_type": item.item_type.value,
                "id": {"$ne": item.id},
            },
            sort=[("created_at", -1)],
            limit=MAX_SUGGESTIONS,
        )

        scored = []
        for doc in docs:
            candidate = LostFoundItem.model_validate(doc)
            data = _dump(candidate)
            data["match_score"] = match_score(item, candidate)
            scored.append(data)
        scored.sort(key=lambda d: d["match_score"], reverse=True)
        return scored

    async def statistics(self) -> dict:
        docs = await self.store.find(Collection.LOST_FOUND)
        by_category = Counter(d.get("category") for d in docs)
        by_status = Counter(d.get("status") for d in docs)
        by_type = Counter(d.get("item_type") for d in docs)
        return {
            "total": len(docs),
            "lost": by_category[LostFoundCategory.LOST.value],
            "found": by_category[LostFoundCategory.FOUND.value],
            "open": by_status[LostFoundStatus.OPEN.value],
            "claimed": by_status[LostFoundStatus.CLAIMED.value],
            "resolved": by_status[LostFoundStatus.RESOLVED.value],
            "matched": by_status[LostFoundStatus.MATCHED.value],
            "expired": by_status[LostFoundStatus.EXPIRED.value],
            "urgent": sum(1 for d in docs if d.get("is_urgent")),
            "by_type": [{"item_type": t, "count": c} for t, c in by_type.most_common()],
        }

    async def expire_stale_items(self, now: Optional[datetime] = None) -> int:
        """
        Move open reports older than LOST_FOUND_EXPIRY_DAYS to expired

        Meant to be driven by an external scheduler; returns how many items
        changed state.
        """
        now = now or utcnow()
        cutoff = now - timedelta(days=self.config.LOST_FOUND_EXPIRY_DAYS)
        docs = await self.store.find(
            Collection.LOST_FOUND,
            {"status": LostFoundStatus.OPEN.value, "created_at": {"$lt": cutoff}},
        )

        expired = 0
        for doc in docs:
            item = await apply_transition(
                self.store, Collection.LOST_FOUND, LostFoundItem, doc["id"], expire_transition(), "Item"
            )
            if item.status == LostFoundStatus.EXPIRED and item.version != doc["version"]:
                expired += 1
                self.publisher.publish(RealtimeEvent.LOST_FOUND_UPDATE, _dump(item))

        if expired:
            logger.info("Expired %d stale lost & found item(s)", expired)
        return expired
