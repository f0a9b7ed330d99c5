"""Shared FastAPI dependencies."""

from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import Request

from coinstore.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from coinstore.core.logging import bind_username
from coinstore.core.security import load_session_token
from coinstore.models.user import User

SESSION_COOKIE_NAME = "coinstore_session"


def _token_from_request(request: Request) -> str | None:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(SESSION_COOKIE_NAME)


async def get_current_user(request: Request) -> User:
    """Dependency: load session from bearer token or cookie and return User."""
    token = _token_from_request(request)
    if not token:
        raise UnauthorizedError("Not authenticated")
    payload = load_session_token(token)
    if not payload:
        raise UnauthorizedError("Invalid or expired session")
    user_id = payload.get("user_id")
    if not user_id:
        raise UnauthorizedError("Invalid session")
    try:
        user = await User.get(PydanticObjectId(user_id))
    except InvalidId:
        raise UnauthorizedError("Invalid session")
    if not user:
        raise UnauthorizedError("User not found")
    if payload.get("session_version") != user.session_version:
        raise UnauthorizedError("Session invalidated")
    if user.status == "blocked":
        raise ForbiddenError("Account is blocked")
    bind_username(user.username)
    return user


async def require_admin(request: Request) -> User:
    """Dependency: require current user to have role admin."""
    user = await get_current_user(request)
    if user.role != "admin":
        raise ForbiddenError("Admin only")
    return user


def parse_object_id(value: str, what: str = "Resource") -> PydanticObjectId:
    """Path ids that are not ObjectIds cannot exist: 404."""
    try:
        return PydanticObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(f"{what} not found")
