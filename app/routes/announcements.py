"""
Announcement Routes
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.auth import Actor, get_current_actor, get_optional_actor
from app.container import Container, get_container
from app.schemas.announcement import CreateAnnouncementRequest, UpdateAnnouncementRequest

router = APIRouter()


def _dump(announcement) -> dict:
    return announcement.model_dump(mode="json")


@router.get("")
async def list_announcements(
    category: Optional[str] = None,
    priority: Optional[str] = None,
    search: Optional[str] = None,
    target_audience: Optional[str] = None,
    sort: str = "created_at",
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    container: Container = Depends(get_container),
):
    """Active, unexpired announcements"""
    return await container.announcements.list_announcements(
        category, priority, search, target_audience, sort, page, limit
    )


@router.get("/{announcement_id}")
async def get_announcement(
    announcement_id: str,
    actor: Optional[Actor] = Depends(get_optional_actor),
    container: Container = Depends(get_container),
):
    announcement = await container.announcements.get_announcement(actor, announcement_id)
    return {"announcement": _dump(announcement)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_announcement(
    data: CreateAnnouncementRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    """Post an announcement (faculty/admin)"""
    announcement = await container.announcements.create_announcement(actor, data)
    return {"message": "Announcement created successfully", "announcement": _dump(announcement)}


@router.put("/{announcement_id}")
async def update_announcement(
    announcement_id: str,
    data: UpdateAnnouncementRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    announcement = await container.announcements.update_announcement(actor, announcement_id, data)
    return {"message": "Announcement updated successfully", "announcement": _dump(announcement)}


@router.delete("/{announcement_id}")
async def delete_announcement(
    announcement_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    await container.announcements.delete_announcement(actor, announcement_id)
    return {"message": "Announcement deleted successfully"}


@router.post("/{announcement_id}/read")
async def mark_as_read(
    announcement_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    await container.announcements.mark_as_read(actor, announcement_id)
    return {"message": "Announcement marked as read"}
