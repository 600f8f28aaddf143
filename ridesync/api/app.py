"""
FastAPI application factory.

* Registers routes for rides and admin.
* Starts / stops the ride runtime (state actor, notification dispatcher,
  store synchronizer) via lifespan events.
* Maps lifecycle errors to HTTP statuses and applies rate limiting.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ridesync.api.middleware import limiter
from ridesync.api.routes import admin, rides
from ridesync.config import settings
from ridesync.domain.errors import (
    AuthenticationRequiredError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ProfileResolutionError,
    RideError,
)
from ridesync.runtime import RideComponents, build_components

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[RideError], int] = {
    AuthenticationRequiredError: 401,
    ProfileResolutionError: 422,
    NotFoundError: 404,
    InvalidTransitionError: 409,
    ConflictError: 409,
    PersistenceError: 503,
}


async def ride_error_handler(request: Request, exc: RideError) -> JSONResponse:
    status_code = next(
        (code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)), 500
    )
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app(
    components_factory: Callable[[], Awaitable[RideComponents]] = build_components,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start the ride runtime on startup; stop on shutdown."""
        components = await components_factory()
        await components.start()
        app.state.components = components
        yield
        await components.stop()

    app = FastAPI(
        title="Shared Ride Coordination API",
        description=(
            "Request, accept, start and complete shared rides.  Every client "
            "keeps a local ride cache reconciled with the shared ride store "
            "and requesters are alerted when their ride is accepted."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(RideError, ride_error_handler)

    # Routers
    app.include_router(rides.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
