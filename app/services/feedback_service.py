"""
Feedback Service
Submission, staff responses, status handling and voting
"""

import logging
from typing import Optional

from app.auth.roles import Action, Actor, ResourceType, Role, require_capability
from app.errors import NotFound
from app.models.feedback import Feedback, feedback_view
from app.notifications import RealtimeEvent
from app.schemas.feedback import CreateFeedbackRequest, UpdateFeedbackRequest
from app.services.base import ResourceService
from app.store import Collection
from app.utils import search_pattern
from app.workflow import apply_transition, load
from app.workflow.feedback import (
    VoteType,
    respond_transition,
    staff_update_transition,
    submitter_edit_transition,
    vote_transition,
)

logger = logging.getLogger(__name__)

REVIEWER_FIELDS = {"status", "priority", "assigned_to"}
SORTABLE_FIELDS = ("created_at", "updated_at", "priority", "status", "title")


def view_for(actor: Optional[Actor], feedback: Feedback) -> dict:
    """Feedback as the given actor may see it"""
    reveal = actor is not None and (actor.is_staff or actor.id == feedback.submitted_by)
    return feedback_view(feedback, reveal_submitter=reveal)


class FeedbackService(ResourceService):
    """Service for campus feedback"""

    async def _load(self, feedback_id: str) -> Feedback:
        return await load(self.store, Collection.FEEDBACK, Feedback, feedback_id, "Feedback")

    def _filters(self, category=None, department=None, priority=None, status=None, search=None) -> dict:
        query: dict = {}
        for field, value in (("category", category), ("department", department), ("priority", priority), ("status", status)):
            if value and value != "all":
                query[field] = value
        if search:
            pattern = search_pattern(search)
            query["$or"] = [
                {"title": {"$regex": pattern}},
                {"description": {"$regex": pattern}},
            ]
        return query

    async def list_feedback(
        self,
        actor: Actor,
        category: Optional[str] = None,
        department: Optional[str] = None,
        priority: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "created_at",
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict:
        """Students see their own submissions, reviewers see everything"""
        query = self._filters(category, department, priority, status, search)
        if actor.role == Role.STUDENT:
            query["submitted_by"] = actor.id

        sort_field = sort if sort in SORTABLE_FIELDS else "created_at"
        return await self.paginate(
            Collection.FEEDBACK, "feedback", query, [(sort_field, -1)], page, limit,
            lambda d: view_for(actor, Feedback.model_validate(d)),
        )

    async def public_feedback(
        self,
        actor: Optional[Actor] = None,
        category: Optional[str] = None,
        department: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict:
        query = self._filters(category, department)
        query["is_public"] = True
        return await self.paginate(
            Collection.FEEDBACK, "feedback", query, [("created_at", -1)], page, limit,
            lambda d: view_for(actor, Feedback.model_validate(d)),
        )

    async def get_feedback(self, actor: Actor, feedback_id: str) -> Feedback:
        feedback = await self._load(feedback_id)
        require_capability(actor, Action.READ, ResourceType.FEEDBACK, feedback)
        return feedback

    async def create_feedback(self, actor: Actor, data: CreateFeedbackRequest) -> Feedback:
        require_capability(actor, Action.CREATE, ResourceType.FEEDBACK)
        doc = data.model_dump()
        doc.update({
            "submitted_by": actor.id,
            "status": "open",
            "assigned_to": None,
            "responses": [],
            "upvotes": [],
            "downvotes": [],
        })
        feedback = Feedback.model_validate(await self.store.insert(Collection.FEEDBACK, doc))
        logger.info("Feedback submitted: id=%s by=%s", feedback.id, actor.id)
        self.publisher.publish(RealtimeEvent.NEW_FEEDBACK, feedback_view(feedback, reveal_submitter=False))
        return feedback

    async def update_feedback(self, actor: Actor, feedback_id: str, data: UpdateFeedbackRequest) -> Feedback:
        """
        Submitter edits content while the item is open; reviewers may set
        status, priority and assignee directly at any time
        """
        feedback = await self._load(feedback_id)
        changes = data.model_dump(exclude_unset=True)
        reviewer_changes = REVIEWER_FIELDS & changes.keys()
        content_changes = changes.keys() - REVIEWER_FIELDS

        if reviewer_changes:
            require_capability(
                actor, Action.SET_STATUS, ResourceType.FEEDBACK, feedback,
                message="Only faculty or admin can change status, priority or assignee",
            )
        if content_changes:
            require_capability(actor, Action.EDIT, ResourceType.FEEDBACK, feedback)

        if content_changes and not actor.is_admin:
            transition = submitter_edit_transition(changes)
        else:
            transition = staff_update_transition(changes)

        updated = await apply_transition(self.store, Collection.FEEDBACK, Feedback, feedback_id, transition, "Feedback")
        if "status" in changes:
            logger.info("Feedback status set: id=%s status=%s by=%s", feedback_id, updated.status.value, actor.id)
        self.publisher.publish(RealtimeEvent.FEEDBACK_UPDATED, feedback_view(updated, reveal_submitter=False))
        return updated

    async def delete_feedback(self, actor: Actor, feedback_id: str) -> None:
        feedback = await self._load(feedback_id)
        require_capability(actor, Action.DELETE, ResourceType.FEEDBACK, feedback)
        if not await self.store.delete_by_id(Collection.FEEDBACK, feedback_id):
            raise NotFound("Feedback not found")
        self.publisher.publish(RealtimeEvent.FEEDBACK_DELETED, {"resource_id": feedback_id})

    async def add_response(self, actor: Actor, feedback_id: str, text: str) -> Feedback:
        """Staff reply; the first one moves an open item to in-progress and assigns it"""
        feedback = await self._load(feedback_id)
        require_capability(
            actor, Action.RESPOND, ResourceType.FEEDBACK, feedback,
            message="Access denied. Only faculty and admin can respond to feedback.",
        )
        updated = await apply_transition(
            self.store, Collection.FEEDBACK, Feedback, feedback_id, respond_transition(actor, text), "Feedback"
        )
        self.publisher.publish(RealtimeEvent.FEEDBACK_RESPONSE, feedback_view(updated, reveal_submitter=False))
        return updated

    async def vote(self, actor: Actor, feedback_id: str, vote: VoteType) -> Feedback:
        feedback = await self._load(feedback_id)
        require_capability(actor, Action.READ, ResourceType.FEEDBACK, feedback)
        updated = await apply_transition(
            self.store, Collection.FEEDBACK, Feedback, feedback_id, vote_transition(actor, vote), "Feedback"
        )
        self.publisher.publish(
            RealtimeEvent.FEEDBACK_VOTE,
            {
                "feedback_id": feedback_id,
                "upvotes": len(updated.upvotes),
                "downvotes": len(updated.downvotes),
            },
        )
        return updated
