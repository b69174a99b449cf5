# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: System endpoints: health, readiness, metrics.
Pure HTTP layer, no business logic.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from membership.core.config import settings
from membership.core.dependencies import get_event_registry, get_member_directory

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    """Liveness probe."""
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "members_count": get_member_directory().count(),
        "events_count": get_event_registry().count(),
    }


@router.get("/health/ready")
def readiness_check():
    """Readiness probe: the service cannot log anyone in without a roster."""
    return {
        "status": "ready",
        "service": settings.SERVICE_NAME,
        "members_loaded": get_member_directory().count() > 0,
    }


@router.get("/metrics")
def prometheus_metrics():
    """Expose Prometheus metrics in OpenMetrics format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
