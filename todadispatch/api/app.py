"""
FastAPI application factory.

* Registers routes for vehicles, trips and admin.
* Loads the latest fleet snapshot on startup, runs the autosave worker,
  and saves once more on shutdown.
* Maps dispatch errors to HTTP status codes.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from todadispatch.api.middleware import limiter
from todadispatch.api.routes import admin, trips, vehicles
from todadispatch.api.schemas import ErrorResponse
from todadispatch.config import settings
from todadispatch.domain.coordinator import coordinator_options
from todadispatch.domain.errors import (
    ConflictError,
    DispatchError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from todadispatch.infrastructure.database import async_session_factory, init_db
from todadispatch.infrastructure.redis_client import close_redis
from todadispatch.infrastructure.snapshot_store import SnapshotStore
from todadispatch.workers import autosaver as _autosaver

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[DispatchError], int]] = [
    (ValidationError, 422),
    (NotFoundError, 404),
    (ConflictError, 409),
    (PersistenceError, 503),
]

_ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Unknown vehicle or trip."},
    409: {"model": ErrorResponse, "description": "Conflicts with the fleet state."},
}


async def _dispatch_error_handler(request: Request, exc: DispatchError) -> JSONResponse:
    status = next(
        (code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 400
    )
    return JSONResponse(status_code=status, content={"detail": str(exc)})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the fleet and start autosave on startup; save on shutdown."""
    await init_db()
    store = SnapshotStore(async_session_factory, coordinator_options(settings))
    app.state.store = store
    app.state.coordinator = await store.load()
    await _autosaver.start_autosave_loop(app.state.coordinator, store)
    yield
    await _autosaver.stop_autosave_loop()
    try:
        await store.save(app.state.coordinator)
    except PersistenceError:
        logger.exception("CRITICAL: Failed to save fleet on shutdown")
    await close_redis()


def create_app() -> FastAPI:
    app = FastAPI(
        title="TODA Dispatch API",
        description=(
            "Coordinates a terminal's vehicles and drivers: registration, "
            "the on-duty waiting queue, trips, and the end-of-day report "
            "with archival."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(DispatchError, _dispatch_error_handler)

    # Routers
    app.include_router(vehicles.router, prefix="/api/v1", responses=_ERROR_RESPONSES)
    app.include_router(trips.router, prefix="/api/v1", responses=_ERROR_RESPONSES)
    app.include_router(admin.router, prefix="/api/v1", responses=_ERROR_RESPONSES)

    return app
