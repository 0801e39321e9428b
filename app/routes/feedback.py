"""
Feedback Routes
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.auth import Actor, get_current_actor, get_optional_actor
from app.container import Container, get_container
from app.schemas.feedback import (
    CreateFeedbackRequest,
    FeedbackResponseRequest,
    UpdateFeedbackRequest,
    VoteRequest,
)
from app.services.feedback_service import view_for

router = APIRouter()


@router.get("")
async def list_feedback(
    category: Optional[str] = None,
    department: Optional[str] = None,
    priority: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "created_at",
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    """Students get their own submissions; faculty and admin get everything"""
    return await container.feedback.list_feedback(
        actor, category, department, priority, status, search, sort, page, limit
    )


@router.get("/public")
async def list_public_feedback(
    category: Optional[str] = None,
    department: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    actor: Optional[Actor] = Depends(get_optional_actor),
    container: Container = Depends(get_container),
):
    return await container.feedback.public_feedback(actor, category, department, page, limit)


@router.get("/{feedback_id}")
async def get_feedback(
    feedback_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    feedback = await container.feedback.get_feedback(actor, feedback_id)
    return {"feedback": view_for(actor, feedback)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_feedback(
    data: CreateFeedbackRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    feedback = await container.feedback.create_feedback(actor, data)
    return {"message": "Feedback submitted successfully", "feedback": view_for(actor, feedback)}


@router.put("/{feedback_id}")
async def update_feedback(
    feedback_id: str,
    data: UpdateFeedbackRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    feedback = await container.feedback.update_feedback(actor, feedback_id, data)
    return {"message": "Feedback updated successfully", "feedback": view_for(actor, feedback)}


@router.delete("/{feedback_id}")
async def delete_feedback(
    feedback_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    await container.feedback.delete_feedback(actor, feedback_id)
    return {"message": "Feedback deleted successfully"}


@router.post("/{feedback_id}/response")
async def add_response(
    feedback_id: str,
    data: FeedbackResponseRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    """Faculty/admin reply to a feedback item"""
    feedback = await container.feedback.add_response(actor, feedback_id, data.text)
    return {"message": "Response added successfully", "feedback": view_for(actor, feedback)}


@router.post("/{feedback_id}/vote")
async def vote_feedback(
    feedback_id: str,
    data: VoteRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    feedback = await container.feedback.vote(actor, feedback_id, data.vote_type)
    return {
        "message": "Vote recorded successfully",
        "upvotes": len(feedback.upvotes),
        "downvotes": len(feedback.downvotes),
        "vote_count": len(feedback.upvotes) - len(feedback.downvotes),
    }
