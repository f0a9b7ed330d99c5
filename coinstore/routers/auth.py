from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from coinstore.core.config import get_settings
from coinstore.core.security import create_session_token
from coinstore.deps import SESSION_COOKIE_NAME, get_current_user
from coinstore.models.user import User
from coinstore.services import users as user_service

router = APIRouter()


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str | None = None
    username: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


@router.post("/register", status_code=201)
async def auth_register(body: RegisterRequest):
    """Create a staff account. New accounts wait for admin approval."""
    user = await user_service.register_user(body.email, body.password, name=body.name, username=body.username)
    return {"message": "User registered", "user": user_service.user_to_dict(user)}


@router.post("/login")
async def auth_login(body: LoginRequest, response: Response):
    """Check credentials, open a login session, return a signed token and set it as httpOnly cookie."""
    user, _ = await user_service.authenticate(body.email, body.password)
    token = create_session_token(user_service.session_payload_for_user(user))
    settings = get_settings()
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.env == "production",
        samesite="lax",
        path="/",
    )
    return {"message": "Login successful", "token": token, "user": user_service.user_to_dict(user)}


@router.post("/logout")
async def auth_logout(response: Response, user: User = Depends(get_current_user)):
    await user_service.logout(user)
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"message": "Logged out"}


@router.get("/me")
async def auth_me(user: User = Depends(get_current_user)):
    """Return current user. Requires a session token."""
    return {"user": user_service.user_to_dict(user)}
