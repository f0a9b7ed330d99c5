from fastapi import APIRouter, Depends, Query

from coinstore.deps import parse_object_id, require_admin
from coinstore.models.user import User
from coinstore.services import users as user_service

router = APIRouter()


@router.get("/users")
async def admin_users_list(
    status: str | None = Query(None, description="pending | active | blocked"),
    user: User = Depends(require_admin),
):
    """Admin: users with ledger totals, latest session and online flag."""
    return {"users": await user_service.list_users_with_stats(status)}


@router.patch("/users/{user_id}/approve")
async def admin_user_approve(user_id: str, user: User = Depends(require_admin)):
    u = await user_service.set_status(parse_object_id(user_id, "User"), "active", actor=user.username)
    return {"message": "User approved successfully", "user": user_service.user_to_dict(u)}


@router.patch("/users/{user_id}/block")
async def admin_user_block(user_id: str, user: User = Depends(require_admin)):
    u = await user_service.set_status(parse_object_id(user_id, "User"), "blocked", actor=user.username)
    return {"message": "User blocked successfully", "user": user_service.user_to_dict(u)}


@router.delete("/users/{user_id}")
async def admin_user_delete(user_id: str, user: User = Depends(require_admin)):
    await user_service.delete_user(parse_object_id(user_id, "User"), actor=user.username)
    return {"message": "User deleted successfully"}
