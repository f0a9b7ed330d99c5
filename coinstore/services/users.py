from datetime import datetime
from typing import Any

from beanie import PydanticObjectId

from coinstore.core.audit import log_event
from coinstore.core.config import get_settings
from coinstore.core.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError, UnauthorizedError
from coinstore.core.logging import get_logger
from coinstore.core.security import hash_password, verify_password
from coinstore.models.game_entry import GameEntry
from coinstore.models.login_session import LoginSession
from coinstore.models.user import USER_STATUSES, User
from coinstore.services import ledger

log = get_logger(__name__)


async def register_user(email: str, password: str, name: str | None = None, username: str | None = None) -> User:
    # email keeps the case it was typed with; lookups are exact
    email = (email or "").strip()
    if not email or not password:
        raise BadRequestError("Email and password required")
    if await User.find_one(User.email == email):
        raise ConflictError("User already exists")
    username = (username or "").strip() or email.split("@")[0]
    if await User.find_one(User.username == username):
        raise ConflictError("Username already taken")
    user = User(
        name=name or "User",
        email=email,
        username=username,
        password_hash=hash_password(password),
    )
    await user.insert()
    log.info("user_created", user_id=str(user.id), username=username)
    return user


async def ensure_admin_user() -> User:
    """Create the configured admin account if it does not exist yet."""
    settings = get_settings()
    email = settings.admin_email.strip().lower()
    existing = await User.find_one(User.email == email)
    if existing:
        return existing
    admin = User(
        name="Admin",
        email=email,
        username=email.split("@")[0],
        password_hash=hash_password(settings.admin_password),
        role="admin",
        is_admin=True,
        status="active",
        is_approved=True,
    )
    await admin.insert()
    log.info("admin_created", email=email)
    return admin


async def authenticate(email: str, password: str) -> tuple[User, LoginSession]:
    email = (email or "").strip()
    if not email or not password:
        raise BadRequestError("Email and password required")
    user = await User.find_one(User.email == email)
    if not user or not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid credentials")
    if user.status == "blocked":
        raise ForbiddenError("Account is blocked")
    if user.role != "admin" and user.status != "active":
        raise ForbiddenError("Account awaiting approval")

    now = datetime.utcnow()
    user.last_sign_in_at = now
    user.updated_at = now
    await user.save()
    session = LoginSession(user_id=user.id, username=user.username, email=user.email, sign_in_at=now)
    await session.insert()
    log.info("user_login", user_id=str(user.id), username=user.username)
    await log_event(user.username, "user_login", "user", str(user.id))
    return user, session


async def logout(user: User) -> None:
    """Close the open login session and invalidate every issued token."""
    now = datetime.utcnow()
    session = await LoginSession.find(
        LoginSession.username == user.username,
        LoginSession.sign_out_at == None,
    ).sort(-LoginSession.sign_in_at).first_or_none()
    if session:
        session.sign_out_at = now
        await session.save()
    user.session_version += 1
    user.last_sign_out_at = now
    user.updated_at = now
    await user.save()
    log.info("user_logout", user_id=str(user.id), username=user.username)


def session_payload_for_user(user: User) -> dict:
    return {"user_id": str(user.id), "session_version": user.session_version}


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "username": user.username,
        "role": user.role,
        "is_admin": user.is_admin,
        "status": user.status,
        "is_approved": user.is_approved,
        "created_at": user.created_at.isoformat(),
    }


async def list_users_with_stats(status: str | None = None) -> list[dict[str, Any]]:
    """Users with their ledger totals and latest login session."""
    query = {"status": status} if status else {}
    users = await User.find(query).sort(-User.created_at).to_list()
    if not users:
        return []
    usernames = [u.username for u in users]
    entries = await GameEntry.find(
        {"$or": [{"username": {"$in": usernames}}, {"created_by": {"$in": usernames}}]}
    ).to_list()
    totals = ledger.summarize_by_user(entries)

    latest: dict[str, LoginSession] = {}
    sessions = await LoginSession.find({"username": {"$in": usernames}}).sort(-LoginSession.sign_in_at).to_list()
    for s in sessions:
        latest.setdefault(s.username, s)

    out = []
    for u in users:
        row = user_to_dict(u)
        t = totals.get(u.username, ledger.LedgerTotals())
        row["total_deposit"] = t.total_deposit
        row["total_redeem"] = t.total_redeem
        row["total_freeplay"] = t.total_freeplay
        row["total_payments"] = t.total_redeem
        s = latest.get(u.username)
        last_in = s.sign_in_at if s else u.last_sign_in_at
        last_out = s.sign_out_at if s else u.last_sign_out_at
        row["last_sign_in_at"] = last_in.isoformat() if last_in else None
        row["last_sign_out_at"] = last_out.isoformat() if last_out else None
        # online: latest session opened and never closed
        row["is_online"] = bool(s and s.sign_out_at is None)
        out.append(row)
    return out


async def get_user(user_id: PydanticObjectId) -> User:
    user = await User.get(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def set_status(user_id: PydanticObjectId, status: str, actor: str) -> User:
    if status not in USER_STATUSES:
        raise BadRequestError(f"Invalid status: {status}")
    user = await get_user(user_id)
    user.status = status
    user.is_approved = status == "active"
    if status == "blocked":
        user.session_version += 1
    user.updated_at = datetime.utcnow()
    await user.save()
    event = "user_approved" if status == "active" else f"user_{status}"
    log.info(event, user_id=str(user.id), actor=actor)
    await log_event(actor, event, "user", str(user.id))
    return user


async def delete_user(user_id: PydanticObjectId, actor: str) -> None:
    user = await get_user(user_id)
    await LoginSession.find(LoginSession.username == user.username).delete()
    await user.delete()
    log.info("user_deleted", user_id=str(user_id), actor=actor)
    await log_event(actor, "user_deleted", "user", str(user_id), {"username": user.username})


async def list_login_sessions(limit: int | None = None) -> list[LoginSession]:
    q = LoginSession.find_all().sort(-LoginSession.sign_in_at)
    if limit:
        q = q.limit(limit)
    return await q.to_list()


async def list_login_rows() -> list[dict[str, Any]]:
    sessions = await list_login_sessions()
    usernames = list({s.username for s in sessions})
    users = {u.username: u for u in await User.find({"username": {"$in": usernames}}).to_list()}
    rows = []
    for s in sessions:
        u = users.get(s.username)
        rows.append(
            {
                "id": str(s.id),
                "username": s.username,
                "name": u.name if u else None,
                "email": u.email if u else s.email,
                "login_time": s.sign_in_at.isoformat(),
                "logout_time": s.sign_out_at.isoformat() if s.sign_out_at else None,
            }
        )
    return rows
