"""
Event Service
Event CRUD, approval and attendee registration
"""

import logging
from typing import Optional

from app.auth.roles import Action, Actor, ResourceType, has_capability, require_capability
from app.errors import NotFound, ValidationFailed
from app.models.event import Event, event_view, registered_count
from app.notifications import RealtimeEvent
from app.schemas.event import CreateEventRequest, UpdateEventRequest
from app.services.base import ResourceService
from app.store import Collection
from app.utils import as_utc, search_pattern, utcnow
from app.workflow import EVENT_WORKFLOW, apply_transition, load
from app.workflow import membership

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("start_date", "end_date", "created_at", "title")


def time_filter(status: Optional[str]) -> dict:
    """upcoming | past | ongoing as date-range clauses; anything else is unfiltered"""
    now = utcnow()
    if status == "upcoming":
        return {"start_date": {"$gte": now}}
    if status == "past":
        return {"end_date": {"$lt": now}}
    if status == "ongoing":
        return {"start_date": {"$lte": now}, "end_date": {"$gte": now}}
    return {}


def _view(doc: dict) -> dict:
    return event_view(Event.model_validate(doc))


class EventService(ResourceService):
    """Service for campus events"""

    async def _load(self, event_id: str) -> Event:
        return await load(self.store, Collection.EVENTS, Event, event_id, "Event")

    async def list_events(
        self,
        actor: Optional[Actor],
        category: Optional[str] = None,
        search: Optional[str] = None,
        status: str = "upcoming",
        sort: str = "start_date",
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict:
        query = time_filter(status)
        if category and category != "all":
            query["category"] = category
        if search:
            pattern = search_pattern(search)
            query["$or"] = [
                {"title": {"$regex": pattern}},
                {"description": {"$regex": pattern}},
                {"venue": {"$regex": pattern}},
            ]
        query["is_active"] = True
        # Reviewers also see pending events
        if actor is None or not actor.is_staff:
            query["is_approved"] = True

        sort_field = sort if sort in SORTABLE_FIELDS else "start_date"
        return await self.paginate(Collection.EVENTS, "events", query, [(sort_field, 1)], page, limit, _view)

    async def pending_events(self, actor: Actor, page: Optional[int] = None, limit: Optional[int] = None) -> dict:
        require_capability(actor, Action.APPROVE, ResourceType.EVENT, message="Access denied. Faculty or admin role required.")
        return await self.paginate(
            Collection.EVENTS, "events", {"is_approved": False}, [("created_at", -1)], page, limit, _view
        )

    async def user_events(
        self, actor: Actor, status: str = "all", page: Optional[int] = None, limit: Optional[int] = None
    ) -> dict:
        query = time_filter(status)
        query["attendees.user"] = actor.id
        return await self.paginate(Collection.EVENTS, "events", query, [("start_date", 1)], page, limit, _view)

    async def get_event(self, actor: Optional[Actor], event_id: str) -> Event:
        event = await self._load(event_id)
        if not has_capability(actor, Action.READ, ResourceType.EVENT, event):
            raise NotFound("Event not found")
        return event

    async def create_event(self, actor: Actor, data: CreateEventRequest) -> Event:
        require_capability(actor, Action.CREATE, ResourceType.EVENT)

        doc = data.model_dump()
        doc.update(EVENT_WORKFLOW.creation_defaults(actor))
        doc["attendees"] = []
        event = Event.model_validate(await self.store.insert(Collection.EVENTS, doc))
        logger.info("Event created: id=%s organizer=%s approved=%s", event.id, actor.id, event.is_approved)

        self.publisher.publish(RealtimeEvent.NEW_EVENT, event_view(event))
        if not event.is_approved and self.notifier:
            self.notify_in_background(
                "email:event-pending",
                self.notifier.notify_reviewers,
                f"New Event Pending Approval: {event.title}",
                f"{actor.name or actor.email} submitted an event that needs review.",
                {
                    "Title": event.title,
                    "Category": event.category.value,
                    "Venue": event.venue,
                    "Starts": event.start_date.date().isoformat(),
                },
            )
        return event

    async def update_event(self, actor: Actor, event_id: str, data: UpdateEventRequest) -> Event:
        event = await self._load(event_id)
        require_capability(actor, Action.EDIT, ResourceType.EVENT, event)
        changes = data.model_dump(exclude_unset=True)

        def transition(current: Event) -> dict:
            start = as_utc(changes.get("start_date") or current.start_date)
            end = as_utc(changes.get("end_date") or current.end_date)
            if end < start:
                raise ValidationFailed("end_date must not be before start_date")
            limit = changes.get("max_attendees")
            if limit is not None and limit < registered_count(current):
                raise ValidationFailed(
                    f"max_attendees cannot be lower than the current registrations ({registered_count(current)})"
                )
            return changes

        updated = await apply_transition(self.store, Collection.EVENTS, Event, event_id, transition, "Event")
        self.publisher.publish(RealtimeEvent.EVENT_UPDATED, event_view(updated))
        return updated

    async def delete_event(self, actor: Actor, event_id: str) -> None:
        event = await self._load(event_id)
        require_capability(actor, Action.DELETE, ResourceType.EVENT, event)
        if not await self.store.delete_by_id(Collection.EVENTS, event_id):
            raise NotFound("Event not found")
        logger.info("Event deleted: id=%s by=%s", event_id, actor.id)
        self.publisher.publish(RealtimeEvent.EVENT_DELETED, {"resource_id": event_id})

    async def approve_event(self, actor: Actor, event_id: str) -> Event:
        event = await EVENT_WORKFLOW.approve(self.store, actor, event_id)
        self.publisher.publish(RealtimeEvent.EVENT_APPROVED, event_view(event))
        if self.notifier:
            self.notify_in_background(
                "email:event-approved",
                self.notifier.notify_owner,
                event.organizer, "Event", event.title, True, actor.name or actor.email,
                {
                    "Date": event.start_date.date().isoformat(),
                    "Time": f"{event.start_time} - {event.end_time}",
                    "Venue": event.venue,
                },
            )
        return event

    async def reject_event(self, actor: Actor, event_id: str) -> Event:
        event = await EVENT_WORKFLOW.reject(self.store, actor, event_id)
        self.publisher.publish(RealtimeEvent.EVENT_REJECTED, {"resource_id": event_id})
        if self.notifier:
            self.notify_in_background(
                "email:event-rejected",
                self.notifier.notify_owner,
                event.organizer, "Event", event.title, False, actor.name or actor.email,
            )
        return event

    async def register(self, actor: Actor, event_id: str) -> Event:
        require_capability(actor, Action.JOIN, ResourceType.EVENT)
        event = await membership.register_for_event(self.store, actor, event_id)
        self.publisher.publish(RealtimeEvent.EVENT_REGISTRATION, {"event_id": event_id, "user_id": actor.id})
        return event

    async def unregister(self, actor: Actor, event_id: str) -> Event:
        require_capability(actor, Action.JOIN, ResourceType.EVENT)
        event = await membership.unregister_from_event(self.store, actor, event_id)
        self.publisher.publish(RealtimeEvent.EVENT_UNREGISTRATION, {"event_id": event_id, "user_id": actor.id})
        return event
