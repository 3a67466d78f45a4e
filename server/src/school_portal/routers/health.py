import os
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import func
from sqlmodel import Session, select, text

from school_portal.models.database import get_db
from school_portal.models.event import Event

health = APIRouter()


def _sweeper_state(request: Request) -> str:
    sweeper = getattr(request.app.state, "expiry_sweeper", None)
    if sweeper is None:
        return "disabled"
    return "running" if sweeper.running else "stopped"


@health.get("/health")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "school-portal",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": os.getenv("ENVIRONMENT", "development"),
    }


@health.get("/health/detailed")
async def detailed_health_check(request: Request, db: Session = Depends(get_db)):
    """Database, events table, expiry sweeper and environment checks.

    A stopped sweeper marks the service unhealthy; a disabled one does not.
    """
    health_status = {
        "status": "healthy",
        "service": "school-portal",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": os.getenv("ENVIRONMENT", "development"),
        "checks": {},
    }
    checks = health_status["checks"]

    try:
        result = db.exec(text("SELECT 1")).first()
        checks["database"] = "healthy" if result else "unhealthy"
    except Exception as e:
        checks["database"] = f"unhealthy: {str(e)}"
        health_status["status"] = "unhealthy"

    # Missing migrations show up here rather than on the first public read
    try:
        count = db.exec(select(func.count()).select_from(Event)).one()
        checks["events"] = f"healthy: {count} event(s)"
    except Exception as e:
        checks["events"] = f"unhealthy: {str(e)}"
        health_status["status"] = "unhealthy"

    checks["expiry_sweeper"] = _sweeper_state(request)
    if checks["expiry_sweeper"] == "stopped":
        health_status["status"] = "unhealthy"

    required_env_vars = ["DATABASE_URL", "SESSION_SECRET_KEY"]
    missing_vars = [var for var in required_env_vars if not os.getenv(var)]
    if missing_vars:
        checks["environment"] = f"missing: {', '.join(missing_vars)}"
        health_status["status"] = "unhealthy"
    else:
        checks["environment"] = "healthy"

    if health_status["status"] == "unhealthy":
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
