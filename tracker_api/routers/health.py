"""Health check endpoint for container orchestration."""

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from tracker_api.database import check_database_connection

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=None)
async def health_check() -> Response:
    """Report service health and database reachability.

    200 ``{"status": "healthy", "database": "connected"}`` when the database
    answers, 503 ``{"status": "degraded", ...}`` otherwise.
    """
    if await check_database_connection():
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": "healthy", "database": "connected"},
        )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "degraded", "database": "disconnected"},
    )
