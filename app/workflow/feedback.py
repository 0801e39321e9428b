"""
Feedback Workflow
open --first response--> in-progress --status update--> resolved | closed
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from app.auth.roles import Actor
from app.errors import InvalidTransition
from app.models.feedback import Feedback, FeedbackResponse, FeedbackStatus
from app.utils import utcnow


class VoteType(str, Enum):
    UP = "up"
    DOWN = "down"
    NONE = "none"


def respond_transition(actor: Actor, text: str, now: Optional[datetime] = None):
    def transition(feedback: Feedback) -> dict:
        response = FeedbackResponse(text=text, responded_by=actor.id, responded_at=now or utcnow())
        patch = {"responses": feedback.responses + [response]}
        if feedback.status == FeedbackStatus.OPEN:
            patch["status"] = FeedbackStatus.IN_PROGRESS
            patch["assigned_to"] = actor.id
        return patch
    return transition


def vote_transition(actor: Actor, vote: VoteType):
    """A user sits in at most one of upvotes/downvotes; a new vote replaces the old"""
    def transition(feedback: Feedback) -> Optional[dict]:
        upvotes = [u for u in feedback.upvotes if u != actor.id]
        downvotes = [u for u in feedback.downvotes if u != actor.id]
        if vote == VoteType.UP:
            upvotes.append(actor.id)
        elif vote == VoteType.DOWN:
            downvotes.append(actor.id)
        if upvotes == feedback.upvotes and downvotes == feedback.downvotes:
            return None
        return {"upvotes": upvotes, "downvotes": downvotes}
    return transition


def submitter_edit_transition(changes: dict):
    """Content edits by the submitter are only accepted while the item is open"""
    def transition(feedback: Feedback) -> dict:
        if feedback.status != FeedbackStatus.OPEN:
            raise InvalidTransition("Feedback can only be edited while it is open", "closed")
        return dict(changes)
    return transition


def staff_update_transition(changes: dict):
    """Direct field writes by faculty/admin, status included"""
    def transition(feedback: Feedback) -> dict:
        return dict(changes)
    return transition
