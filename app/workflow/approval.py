"""
Approval Workflow
pending --approve--> approved (terminal), pending --reject--> deleted

Events and clubs share this through an ApprovableResource descriptor; the
per-type differences (who auto-approves, who owns the record, what has to be
cleaned up on rejection) are data, not code.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Type

from app.auth.roles import Action, Actor, ResourceType, auto_approves, require_capability
from app.errors import InvalidTransition
from app.models.base import ApprovableEntity
from app.models.club import Club
from app.models.event import Event
from app.store import Collection, DocumentStore
from app.utils import utcnow
from app.workflow.engine import apply_transition, load

logger = logging.getLogger(__name__)

RejectCleanup = Callable[[DocumentStore, ApprovableEntity], Awaitable[None]]


def _already_approved(label: str) -> InvalidTransition:
    return InvalidTransition(f"{label} is already approved", "already_approved")


def approve_transition(actor: Actor, label: str):
    def transition(resource: ApprovableEntity) -> dict:
        if resource.is_approved:
            raise _already_approved(label)
        return {"is_approved": True, "approved_by": actor.id, "approved_at": utcnow()}
    return transition


@dataclass(frozen=True)
class ApprovableResource:
    resource_type: ResourceType
    collection: Collection
    model: Type[ApprovableEntity]
    owner_field: str
    label: str

    def creation_defaults(self, actor: Actor) -> dict:
        """Owner and approval fields stamped onto a new record"""
        approved = auto_approves(actor, self.resource_type)
        return {
            self.owner_field: actor.id,
            "is_active": True,
            "is_approved": approved,
            "approved_by": actor.id if approved else None,
            "approved_at": utcnow() if approved else None,
        }

    async def approve(self, store: DocumentStore, actor: Actor, doc_id: str) -> ApprovableEntity:
        resource = await load(store, self.collection, self.model, doc_id, self.label)
        require_capability(actor, Action.APPROVE, self.resource_type, resource)
        approved = await apply_transition(
            store, self.collection, self.model, doc_id, approve_transition(actor, self.label), self.label
        )
        logger.info("%s approved: id=%s by=%s", self.label, doc_id, actor.id)
        return approved

    async def reject(
        self,
        store: DocumentStore,
        actor: Actor,
        doc_id: str,
        cleanup: Optional[RejectCleanup] = None,
    ) -> ApprovableEntity:
        """Delete a pending record; returns what was removed"""
        resource = await load(store, self.collection, self.model, doc_id, self.label)
        require_capability(actor, Action.REJECT, self.resource_type, resource)

        async with store.transaction():
            resource = await load(store, self.collection, self.model, doc_id, self.label)
            if resource.is_approved:
                raise _already_approved(self.label)
            await store.delete_by_id(self.collection, doc_id)
            if cleanup is not None:
                await cleanup(store, resource)

        logger.info("%s rejected: id=%s by=%s", self.label, doc_id, actor.id)
        return resource


EVENT_WORKFLOW = ApprovableResource(
    resource_type=ResourceType.EVENT,
    collection=Collection.EVENTS,
    model=Event,
    owner_field="organizer",
    label="Event",
)

CLUB_WORKFLOW = ApprovableResource(
    resource_type=ResourceType.CLUB,
    collection=Collection.CLUBS,
    model=Club,
    owner_field="advisor",
    label="Club",
)
