"""
Club Routes
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.auth import Actor, get_current_actor, get_optional_actor
from app.container import Container, get_container
from app.models.club import club_view
from app.schemas.club import CreateClubRequest, UpdateClubRequest, UpdateMemberRoleRequest

router = APIRouter()


@router.get("")
async def list_clubs(
    category: Optional[str] = None,
    search: Optional[str] = None,
    status: str = Query("approved", pattern="^(approved|pending|all)$"),
    sort: str = "name",
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    actor: Optional[Actor] = Depends(get_optional_actor),
    container: Container = Depends(get_container),
):
    """List active clubs; pending and all views are for faculty/admin"""
    return await container.clubs.list_clubs(actor, category, search, status, sort, page, limit)


@router.get("/pending")
async def list_pending_clubs(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    return await container.clubs.pending_clubs(actor, page, limit)


@router.get("/user/clubs")
async def list_user_clubs(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    """Clubs the caller belongs to"""
    return await container.clubs.user_clubs(actor, page, limit)


@router.get("/{club_id}")
async def get_club(
    club_id: str,
    actor: Optional[Actor] = Depends(get_optional_actor),
    container: Container = Depends(get_container),
):
    club = await container.clubs.get_club(actor, club_id)
    return {"club": club_view(club)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_club(
    data: CreateClubRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    club = await container.clubs.create_club(actor, data)
    message = "Club created successfully" if club.is_approved else "Club submitted for approval"
    return {"message": message, "club": club_view(club)}


@router.put("/{club_id}")
async def update_club(
    club_id: str,
    data: UpdateClubRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    club = await container.clubs.update_club(actor, club_id, data)
    return {"message": "Club updated successfully", "club": club_view(club)}


@router.delete("/{club_id}")
async def delete_club(
    club_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    await container.clubs.delete_club(actor, club_id)
    return {"message": "Club deleted successfully"}


@router.post("/{club_id}/approve")
async def approve_club(
    club_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    club = await container.clubs.approve_club(actor, club_id)
    return {"message": "Club approved successfully", "club": club_view(club)}


@router.post("/{club_id}/reject")
async def reject_club(
    club_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    await container.clubs.reject_club(actor, club_id)
    return {"message": "Club rejected and removed"}


@router.post("/{club_id}/join")
async def join_club(
    club_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    club = await container.clubs.join_club(actor, club_id)
    return {"message": "Successfully joined the club", "club": club_view(club)}


@router.delete("/{club_id}/join")
async def leave_club(
    club_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    club = await container.clubs.leave_club(actor, club_id)
    return {"message": "Successfully left the club", "club": club_view(club)}


@router.put("/{club_id}/members/{member_id}")
async def update_member_role(
    club_id: str,
    member_id: str,
    data: UpdateMemberRoleRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    """Change a member's role (advisor, president or admin)"""
    club = await container.clubs.update_member_role(actor, club_id, member_id, data.role)
    return {"message": "Member role updated successfully", "club": club_view(club)}
