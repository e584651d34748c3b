# slotwise/main.py
import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from slotwise.api.routes import (
    availability,
    bookings,
    calendar,
    date_overrides,
    event_types,
    health,
    users,
)
from slotwise.core.config import get_settings
from slotwise.core.exceptions import SchedulingError
from slotwise.core.logging_config import setup_logging
from slotwise.db.session import init_db

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map typed scheduling outcomes to HTTP responses.

    Services raise NotFoundError / ConflictError / SchedulingValidationError;
    anything else is an unexpected fault and gets a generic 500.
    """

    @app.exception_handler(SchedulingError)
    async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
        return JSONResponse(status_code=int(exc.status_code), content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error."},
        )


def create_app() -> FastAPI:
    """
    Application factory for the Slotwise scheduling service.
    """
    settings = get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Scheduling backend: hosts publish event types and weekly availability,\n"
            "visitors query open slots and book them. Slots account for date\n"
            "overrides, confirmed bookings and the host's connected calendar."
        ),
        version="0.1.0",
    )

    # Routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(event_types.router)
    app.include_router(availability.router)
    app.include_router(date_overrides.router)
    app.include_router(bookings.router)
    app.include_router(calendar.router)

    register_exception_handlers(app)

    @app.on_event("startup")
    async def on_startup() -> None:  # pragma: no cover
        await init_db()

    return app


app = create_app()
