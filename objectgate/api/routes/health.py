"""
Health check endpoint.

A liveness probe for load balancers and orchestrators. It never touches
the object store: if the process is up, it answers.
"""

from typing import Any

from fastapi import APIRouter, status
from pydantic import BaseModel

from ..dependencies import SettingsDep

router = APIRouter()


class HealthResponse(BaseModel):
    """
    Health check response.

    Standardized format makes it easy for monitoring tools to parse.
    """
    status: str
    message: str
    version: str
    details: dict[str, Any] = {}


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the service is running. Does not check dependencies.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        message="objectgate server is running",
        version=settings.api_version,
        details={
            "bucket": settings.storage_bucket,
            "mock_mode": settings.storage_mock_mode,
        }
    )
