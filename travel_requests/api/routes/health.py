from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from travel_requests.api.core.container import Container, get_container
from travel_requests.db.connection import get_db
from travel_requests.observability.tracing import log_event
from travel_requests.runtime.utils import utcnow

router = APIRouter(tags=["Health"])


@router.get("/health", summary="Service and database health")
async def health(
    db: Session = Depends(get_db),
    container: Container = Depends(get_container),
):
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as exc:
        log_event("health.database.unhealthy", level="warning", error=str(exc))
        db_status = "unhealthy"

    healthy = db_status == "healthy"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "degraded",
            "service": container.settings.service_name,
            "version": container.settings.version,
            "timestamp": utcnow().isoformat() + "Z",
            "checks": {"database": db_status},
        },
    )
