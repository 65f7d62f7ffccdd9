# vehicle_booking/routers/health.py
"""
Liveness and readiness check. No authentication.
Reports database reachability and the number of live sessions.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from vehicle_booking.database import get_db
from vehicle_booking.dependencies import get_session_store
from vehicle_booking.services.session_store import SessionStore
from vehicle_booking.utils.logger import get_logger
from datetime import datetime

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db), sessions: SessionStore = Depends(get_session_store)):
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "database": "ok",
        "active_sessions": len(sessions),
    }

    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check: database unreachable: {e}")
        result["database"] = "error"
        result["status"] = "degraded"

    return result
