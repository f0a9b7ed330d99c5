import os
import uuid
from types import SimpleNamespace
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

# In-memory Mongo; these only matter for code paths that build a real client
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGODB_DB_NAME", "coin_test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-min-32-characters-long")
os.environ.setdefault("DEFAULT_BONUS_RATE", "10")


@pytest_asyncio.fixture
async def db():
    from coinstore.db.init import init_db
    database = AsyncMongoMockClient()[f"coin_test_{uuid.uuid4().hex[:8]}"]
    await init_db(database)
    yield database


@pytest_asyncio.fixture
async def client(db) -> AsyncGenerator[AsyncClient, None]:
    from coinstore.main import app
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def make_user(db):
    """Insert a user directly and return (user, auth headers)."""
    from coinstore.core.security import create_session_token, hash_password
    from coinstore.models.user import User
    from coinstore.services.users import session_payload_for_user

    async def _make(username: str = "staff1", role: str = "user", status: str = "active", password: str = "pw-123456"):
        user = User(
            name=username.title(),
            email=f"{username}@example.com",
            username=username,
            password_hash=hash_password(password),
            role=role,
            is_admin=role == "admin",
            status=status,
            is_approved=status == "active",
        )
        await user.insert()
        token = create_session_token(session_payload_for_user(user))
        return user, {"Authorization": f"Bearer {token}"}

    return _make


def record(**kw) -> SimpleNamespace:
    """Plain stand-in for a GameEntry row, for the pure ledger folds."""
    base = {
        "id": uuid.uuid4().hex,
        "username": "staff1",
        "created_by": "staff1",
        "type": "deposit",
        "method": "cashapp",
        "mode": "our_tag",
        "player_name": "",
        "player_tag": "",
        "game_name": "Game X",
        "amount_base": 0.0,
        "amount": None,
        "amount_final": None,
        "total_paid": 0.0,
        "total_cashout": 0.0,
        "remaining_pay": 0.0,
        "reduction": 0.0,
        "extra_money": 0.0,
        "is_pending": False,
        "date": "2024-08-01",
    }
    base.update(kw)
    return SimpleNamespace(**base)
