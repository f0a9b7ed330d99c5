from fastapi import APIRouter, Depends

from coinstore.deps import require_admin
from coinstore.models.login_session import LoginSession
from coinstore.models.user import User
from coinstore.services import users as user_service

router = APIRouter()


def session_to_dict(s: LoginSession) -> dict:
    return {
        "id": str(s.id),
        "user_id": str(s.user_id) if s.user_id else None,
        "username": s.username,
        "email": s.email,
        "sign_in_at": s.sign_in_at.isoformat(),
        "sign_out_at": s.sign_out_at.isoformat() if s.sign_out_at else None,
        "is_online": s.sign_out_at is None,
    }


@router.get("")
async def logins_recent(user: User = Depends(require_admin)):
    """Latest 50 login sessions."""
    sessions = await user_service.list_login_sessions(limit=50)
    return {"sessions": [session_to_dict(s) for s in sessions]}


@router.get("/all")
async def logins_all(user: User = Depends(require_admin)):
    """Every session with the owning user's name and email joined in."""
    return {"logins": await user_service.list_login_rows()}
