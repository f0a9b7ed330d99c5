"""ARQ job definitions."""

import uuid
from typing import Any

from arq.connections import RedisSettings

from coinstore.core.config import get_settings
from coinstore.core.logging import get_logger
from coinstore.services.balance_sync import reconcile_all

log = get_logger(__name__)


async def _run_with_dlq(
    job_name: str,
    job_id: str | None,
    args: list[Any],
    coro,
) -> Any:
    """Run coroutine; on exception persist to FailedJob then re-raise."""
    try:
        return await coro
    except Exception as e:
        from coinstore.models.failed_job import FailedJob
        fid = job_id or str(uuid.uuid4())
        await FailedJob(
            job_name=job_name,
            job_id=fid,
            args=args,
            reason=str(e)[:2000],
        ).insert()
        log.exception("job_failed", job=job_name, job_id=fid, reason=str(e))
        raise


async def reconcile_game_balances(ctx: dict[str, Any]) -> int:
    """Cron job: rebuild cached game balances from entry history. Returns number of drifted games."""
    job_id = ctx.get("job_id") if isinstance(ctx.get("job_id"), str) else None

    async def _run() -> int:
        log.info("job_start", job="reconcile_game_balances")
        drifted = await reconcile_all()
        log.info("job_done", job="reconcile_game_balances", drifted=len(drifted))
        return len(drifted)

    return await _run_with_dlq("reconcile_game_balances", job_id, [], _run())


async def startup(ctx: dict) -> None:
    from coinstore.db.init import init_db
    await init_db()


async def shutdown(ctx: dict) -> None:
    pass


def get_redis_settings() -> RedisSettings:
    from urllib.parse import urlparse
    s = get_settings()
    u = urlparse(s.redis_url)
    path = u.path.lstrip("/")
    return RedisSettings(
        host=u.hostname or "localhost",
        port=u.port or 6379,
        password=u.password,
        database=int(path) if path else 0,
    )
