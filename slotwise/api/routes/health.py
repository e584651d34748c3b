# slotwise/api/routes/health.py
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

from slotwise.core.config import get_settings


router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """
    Response schema for the health check endpoint.
    """

    status: str = Field(
        ...,
        description="Overall health status of the scheduling service.",
        examples=["ok"],
    )
    app_name: str = Field(
        ...,
        description="Human-friendly name of the running application.",
        examples=["Slotwise"],
    )
    environment: str = Field(
        ...,
        description="Current deployment environment (local/dev/stage/prod).",
        examples=["local"],
    )
    timestamp_utc: datetime = Field(
        ...,
        description="Server-side timestamp (UTC) at which this health check was generated.",
        examples=["2025-06-02T10:30:00Z"],
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check for the scheduling service",
    description=(
        "Lightweight endpoint to verify that the backend is up and responding.\n\n"
        "Typical use-cases:\n"
        "- Container / VM health probes\n"
        "- Uptime monitoring & alerting\n"
        "- Quick smoke-test after deployments\n"
    ),
    responses={
        200: {
            "description": "Service is healthy and responding as expected.",
            "content": {
                "application/json": {
                    "example": {
                        "status": "ok",
                        "app_name": "Slotwise",
                        "environment": "local",
                        "timestamp_utc": "2025-06-02T10:30:00Z",
                    }
                }
            },
        }
    },
)
async def health_check() -> HealthResponse:
    """
    Returns the current health status of the service.

    Does not touch the database or the calendar provider, so it stays
    reliable while downstream components are degraded.
    """
    settings = get_settings()
    return HealthResponse(
        status="ok",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        timestamp_utc=datetime.now(tz=timezone.utc),
    )
