from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from schemas.incident import HealthResponse, IncidentStatsResponse
from services.incident_service import IncidentService

router = APIRouter(tags=["system"])


@router.get("/stats", response_model=IncidentStatsResponse)
def incident_stats(db: Session = Depends(get_db)):
    """Totals per severity and per type."""
    return IncidentService.stats(db)


@router.get("/health", response_model=HealthResponse)
def api_health():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
