import time
import uuid

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from coinstore.core.config import get_settings
from coinstore.core.exceptions import (
    AppError,
    app_exception_handler,
    generic_exception_handler,
    validation_exception_handler,
)
from coinstore.core.logging import bind_request_id, configure_logging, get_logger
from coinstore.db.init import init_db
from coinstore.routers import admin, auth, game_entries, game_logins, games, health, logins, payments, schedules
from coinstore.services.users import ensure_admin_user

settings = get_settings()
configure_logging(debug=settings.debug)
log = get_logger(__name__)

# load balancer probes
_UNLOGGED_PATHS = frozenset({"/health"})

app = FastAPI(
    title="Coin Store API",
    version="1.0.0",
    default_response_class=ORJSONResponse,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id
    bind_request_id(request_id)
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    if request.url.path not in _UNLOGGED_PATHS:
        log.info(
            "request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )
    response.headers["X-Request-ID"] = request_id
    return response


app.add_exception_handler(AppError, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(game_entries.router, prefix="/api/game-entries", tags=["game-entries"])
app.include_router(games.router, prefix="/api/games", tags=["games"])
app.include_router(payments.router, prefix="/api", tags=["payments"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
app.include_router(logins.router, prefix="/api/logins", tags=["logins"])
app.include_router(schedules.router, prefix="/api/schedules", tags=["schedules"])
app.include_router(game_logins.router, prefix="/api/game-logins", tags=["game-logins"])
app.include_router(health.router, prefix="/api", tags=["health"])


@app.on_event("startup")
async def startup():
    if settings.sentry_dsn:
        import sentry_sdk
        sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.env, traces_sample_rate=0.1)
        log.info("startup", msg="Sentry enabled")
    await init_db()
    await ensure_admin_user()
    log.info("startup", msg="DB connected")


@app.get("/health")
async def health_check():
    """Health check for load balancers and monitoring."""
    return {"status": "ok"}
