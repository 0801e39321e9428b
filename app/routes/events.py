"""
Event Routes
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.auth import Actor, get_current_actor, get_optional_actor
from app.container import Container, get_container
from app.models.event import event_view
from app.schemas.event import CreateEventRequest, UpdateEventRequest

router = APIRouter()


@router.get("")
async def list_events(
    category: Optional[str] = None,
    search: Optional[str] = None,
    status: str = Query("upcoming", pattern="^(upcoming|past|ongoing|all)$"),
    sort: str = "start_date",
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    actor: Optional[Actor] = Depends(get_optional_actor),
    container: Container = Depends(get_container),
):
    """
    List events

    Students and anonymous callers only see approved, active events.
    """
    return await container.events.list_events(actor, category, search, status, sort, page, limit)


@router.get("/pending")
async def list_pending_events(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    """Events waiting for approval (faculty/admin)"""
    return await container.events.pending_events(actor, page, limit)


@router.get("/user/events")
async def list_user_events(
    status: str = Query("all", pattern="^(upcoming|past|ongoing|all)$"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    """Events the caller is registered for"""
    return await container.events.user_events(actor, status, page, limit)


@router.get("/{event_id}")
async def get_event(
    event_id: str,
    actor: Optional[Actor] = Depends(get_optional_actor),
    container: Container = Depends(get_container),
):
    event = await container.events.get_event(actor, event_id)
    return {"event": event_view(event)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    data: CreateEventRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    event = await container.events.create_event(actor, data)
    message = "Event created successfully" if event.is_approved else "Event submitted for approval"
    return {"message": message, "event": event_view(event)}


@router.put("/{event_id}")
async def update_event(
    event_id: str,
    data: UpdateEventRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    event = await container.events.update_event(actor, event_id, data)
    return {"message": "Event updated successfully", "event": event_view(event)}


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    await container.events.delete_event(actor, event_id)
    return {"message": "Event deleted successfully"}


@router.post("/{event_id}/approve")
async def approve_event(
    event_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    event = await container.events.approve_event(actor, event_id)
    return {"message": "Event approved successfully", "event": event_view(event)}


@router.post("/{event_id}/reject")
async def reject_event(
    event_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    await container.events.reject_event(actor, event_id)
    return {"message": "Event rejected and removed"}


@router.post("/{event_id}/register")
async def register_for_event(
    event_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    event = await container.events.register(actor, event_id)
    return {"message": "Successfully registered for the event", "event": event_view(event)}


@router.delete("/{event_id}/register")
async def unregister_from_event(
    event_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    event = await container.events.unregister(actor, event_id)
    return {"message": "Successfully unregistered from the event", "event": event_view(event)}
