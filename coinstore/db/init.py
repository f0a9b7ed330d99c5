import certifi
from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from coinstore.core.config import get_settings
from coinstore.models.audit_log import AuditLog
from coinstore.models.failed_job import FailedJob
from coinstore.models.game import Game
from coinstore.models.game_entry import GameEntry, GameEntryHistory
from coinstore.models.game_login import GameLogin
from coinstore.models.login_session import LoginSession
from coinstore.models.payment import Payment
from coinstore.models.schedule import Schedule
from coinstore.models.user import User

DOCUMENT_MODELS = [
    User,
    LoginSession,
    Game,
    GameEntry,
    GameEntryHistory,
    Payment,
    Schedule,
    GameLogin,
    AuditLog,
    FailedJob,
]

_client: AsyncIOMotorClient | None = None


def _use_tls(uri: str) -> bool:
    """True if URI uses TLS (Atlas or explicit tls=true). Avoids TLS for plain mongodb:// in CI."""
    return "mongodb+srv://" in uri or "tls=true" in uri.lower()


def get_client() -> AsyncIOMotorClient:
    global _client
    if _client is None:
        settings = get_settings()
        kwargs = {}
        if _use_tls(settings.mongodb_uri):
            kwargs["tlsCAFile"] = certifi.where()
            kwargs["tlsDisableOCSPEndpointCheck"] = True
        _client = AsyncIOMotorClient(settings.mongodb_uri, **kwargs)
    return _client


async def init_db(database=None) -> None:
    """Bind all documents to ``database`` (defaults to the configured MongoDB)."""
    if database is None:
        database = get_client()[get_settings().mongodb_db_name]
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)


async def ping_db() -> bool:
    try:
        await get_client().admin.command("ping")
    except PyMongoError:
        return False
    return True
