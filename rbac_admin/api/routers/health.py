"""Health check endpoints for RBAC Admin.

Provides Kubernetes-compatible health probes:
- /health: Basic health check
- /health/live: Liveness probe (is the app running?)
- /health/ready: Readiness probe (can the app reach its database?)
- /health/detailed: Database, analytics tables, disk and memory

Only /health/detailed touches the analytics database; the dashboard is
optional for readiness.
"""

from datetime import datetime
from typing import Any, Dict

import psutil
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rbac_admin import __version__
from rbac_admin.api.deps import get_analytics_db, get_db
from rbac_admin.db.analytics import AnalyticsDatabase

router = APIRouter(tags=["health"])

# Thresholds
DISK_WARNING_PERCENT = 85
DISK_CRITICAL_PERCENT = 95
MEMORY_WARNING_PERCENT = 85
MEMORY_CRITICAL_PERCENT = 95


def _timestamp() -> str:
    return datetime.utcnow().isoformat()


def _grade(percent_used: float, warning: float, critical: float) -> str:
    if percent_used >= critical:
        return "critical"
    if percent_used >= warning:
        return "warning"
    return "healthy"


def check_database(db: Session) -> Dict[str, Any]:
    """Check database connectivity."""
    try:
        db.execute(text("SELECT 1")).fetchone()
    except SQLAlchemyError as e:
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy", "dialect": db.get_bind().dialect.name}


def check_analytics(analytics_db: AnalyticsDatabase) -> Dict[str, Any]:
    """Check the star schema tables are reachable."""
    try:
        missing = analytics_db.missing_tables()
    except SQLAlchemyError as e:
        return {"status": "unhealthy", "error": str(e)}
    if missing:
        return {"status": "warning", "missing_tables": missing}
    return {"status": "healthy", "schema": analytics_db.schema}


def check_disk() -> Dict[str, Any]:
    """Check disk space."""
    try:
        disk = psutil.disk_usage("/")
    except OSError as e:
        return {"status": "unknown", "error": str(e)}

    return {
        "status": _grade(disk.percent, DISK_WARNING_PERCENT, DISK_CRITICAL_PERCENT),
        "total_gb": round(disk.total / (1024**3), 2),
        "used_gb": round(disk.used / (1024**3), 2),
        "free_gb": round(disk.free / (1024**3), 2),
        "percent_used": disk.percent,
    }


def check_memory() -> Dict[str, Any]:
    """Check memory usage."""
    memory = psutil.virtual_memory()
    return {
        "status": _grade(memory.percent, MEMORY_WARNING_PERCENT, MEMORY_CRITICAL_PERCENT),
        "total_gb": round(memory.total / (1024**3), 2),
        "available_gb": round(memory.available / (1024**3), 2),
        "percent_used": memory.percent,
    }


@router.get("/health")
def health_check():
    """Returns 200 whenever the application is running."""
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": _timestamp(),
    }


@router.get("/health/live")
def liveness_probe():
    """
    Kubernetes liveness probe.

    Must stay fast and must not depend on external services.
    """
    return {"status": "alive", "timestamp": _timestamp()}


@router.get("/health/ready")
def readiness_probe(db: Session = Depends(get_db)):
    """
    Kubernetes readiness probe.

    Returns 503 while the RBAC database is unreachable.
    """
    checks = {"database": check_database(db)}
    unhealthy = [name for name, check in checks.items() if check["status"] == "unhealthy"]

    if unhealthy:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "checks": checks,
                "failed": unhealthy,
                "timestamp": _timestamp(),
            },
        )

    return {"status": "ready", "checks": checks, "timestamp": _timestamp()}


@router.get("/health/detailed")
def detailed_health_check(
    db: Session = Depends(get_db),
    analytics_db: AnalyticsDatabase = Depends(get_analytics_db),
):
    """All checks, with an overall status of healthy, degraded or unhealthy."""
    checks = {
        "database": check_database(db),
        "analytics": check_analytics(analytics_db),
        "disk": check_disk(),
        "memory": check_memory(),
    }

    statuses = [check.get("status", "unknown") for check in checks.values()]

    if "unhealthy" in statuses or "critical" in statuses:
        overall_status = "unhealthy"
        http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    elif "warning" in statuses:
        overall_status = "degraded"
        http_status = status.HTTP_200_OK
    else:
        overall_status = "healthy"
        http_status = status.HTTP_200_OK

    return JSONResponse(
        status_code=http_status,
        content={
            "status": overall_status,
            "version": __version__,
            "checks": checks,
            "timestamp": _timestamp(),
        },
    )
