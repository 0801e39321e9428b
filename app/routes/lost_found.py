"""
Lost & Found Routes
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.auth import Actor, get_admin_actor, get_current_actor
from app.container import Container, get_container
from app.schemas.lost_found import CreateItemRequest, MatchRequest, UpdateItemRequest

router = APIRouter()


def _dump(item) -> dict:
    return item.model_dump(mode="json")


@router.get("")
async def list_items(
    category: Optional[str] = None,
    item_type: Optional[str] = None,
    status: str = "open",
    search: Optional[str] = None,
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0, description="Search radius in km"),
    sort: str = "created_at",
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    container: Container = Depends(get_container),
):
    """
    Browse reports

    With **latitude** and **longitude** only items reported within **radius**
    km are returned.
    """
    return await container.lost_found.list_items(
        category, item_type, status, search, latitude, longitude, radius, sort, page, limit
    )


@router.get("/stats")
async def get_statistics(container: Container = Depends(get_container)):
    return {"stats": await container.lost_found.statistics()}


@router.get("/user/items")
async def list_user_items(
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    items = await container.lost_found.user_items(actor)
    return {"items": [_dump(i) for i in items]}


@router.post("/expire")
async def expire_items(
    actor: Actor = Depends(get_admin_actor),
    container: Container = Depends(get_container),
):
    """Expire stale open reports (admin only)"""
    expired = await container.lost_found.expire_stale_items()
    return {"message": f"{expired} item(s) expired", "expired": expired}


@router.get("/{item_id}")
async def get_item(item_id: str, container: Container = Depends(get_container)):
    item = await container.lost_found.get_item(item_id)
    return {"item": _dump(item)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_item(
    data: CreateItemRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    item = await container.lost_found.create_item(actor, data)
    return {"message": "Item reported successfully", "item": _dump(item)}


@router.put("/{item_id}")
async def update_item(
    item_id: str,
    data: UpdateItemRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    item = await container.lost_found.update_item(actor, item_id, data)
    return {"message": "Item updated successfully", "item": _dump(item)}


@router.delete("/{item_id}")
async def delete_item(
    item_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    await container.lost_found.delete_item(actor, item_id)
    return {"message": "Item deleted successfully"}


@router.post("/{item_id}/claim")
async def claim_item(
    item_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    item = await container.lost_found.claim_item(actor, item_id)
    return {"message": "Item claimed successfully", "item": _dump(item)}


@router.post("/{item_id}/resolve")
async def resolve_item(
    item_id: str,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    item = await container.lost_found.resolve_item(actor, item_id)
    return {"message": "Item marked as resolved", "item": _dump(item)}


@router.post("/{item_id}/match")
async def match_items(
    item_id: str,
    data: MatchRequest,
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
):
    item, other = await container.lost_found.match_items(actor, item_id, data.matched_item_id)
    return {"message": "Items matched successfully", "item": _dump(item), "matched_item": _dump(other)}


@router.get("/{item_id}/suggestions")
async def get_suggestions(item_id: str, container: Container = Depends(get_container)):
    """Likely matches of the opposite kind, best first"""
    return {"suggestions": await container.lost_found.suggestions(item_id)}
