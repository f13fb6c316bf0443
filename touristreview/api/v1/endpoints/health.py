"""Health check endpoints for liveness and readiness checks."""

from fastapi import APIRouter, Request

from touristreview.core.config import get_settings
from touristreview.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse(version=get_settings().app_version)


@router.get("/ready", response_model=ReadinessResponse)
def readiness_check(request: Request) -> ReadinessResponse:
    """Report whether the document store was configured at startup."""
    configured = getattr(request.app.state, "firestore_client", None) is not None
    return ReadinessResponse(
        status="ok" if configured else "degraded",
        document_store=configured,
    )
