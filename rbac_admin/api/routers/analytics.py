"""Sales dashboard endpoints backed by the analytics star schema."""

import logging
from typing import Callable, List

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from rbac_admin.api.deps import get_analytics_db, require_permission
from rbac_admin.api.schemas.analytics import (
    MonthlyTrend,
    MonthlyTrendsResponse,
    RegionSales,
    RegionSalesResponse,
    TopProduct,
    TopProductsResponse,
)
from rbac_admin.db.analytics import ANALYTICS_TABLES, AnalyticsDatabase
from rbac_admin.db.models import User
from rbac_admin.services import analytics

router = APIRouter(prefix="/analytics", tags=["analytics"])
logger = logging.getLogger(__name__)

MISSING_TABLE_MARKERS = ("no such table", "does not exist", "undefinedtable")


def analytics_error(message: str, exc: SQLAlchemyError, analytics_db: AnalyticsDatabase) -> JSONResponse:
    """500 response with the driver error and, for missing tables, a hint."""
    details = str(getattr(exc, "orig", None) or exc)
    body = {"error": message, "details": details}

    lowered = str(exc).lower()
    if any(marker in lowered for marker in MISSING_TABLE_MARKERS):
        body["hint"] = (
            f"Check that the tables {', '.join(ANALYTICS_TABLES)} exist "
            f"in schema '{analytics_db.schema or 'default'}'"
        )

    logger.error("%s: %s", message, details)
    return JSONResponse(status_code=500, content=body)


def run_query(analytics_db: AnalyticsDatabase, query: Callable, *args) -> List[dict]:
    with analytics_db.connect() as conn:
        return query(conn, *args)


@router.get("/monthly-trends", response_model=MonthlyTrendsResponse)
def get_monthly_trends(
    analytics_db: AnalyticsDatabase = Depends(get_analytics_db),
    current_user: User = Depends(require_permission("dashboard:read")),
):
    """Sales, profit and profit margin per month."""
    try:
        rows = run_query(analytics_db, analytics.monthly_trends)
    except SQLAlchemyError as e:
        return analytics_error("Failed to load monthly trends", e, analytics_db)
    return MonthlyTrendsResponse(data=[MonthlyTrend(**row) for row in rows])


@router.get("/region-sales", response_model=RegionSalesResponse)
def get_region_sales(
    analytics_db: AnalyticsDatabase = Depends(get_analytics_db),
    current_user: User = Depends(require_permission("dashboard:read")),
):
    """Revenue split by customer region."""
    try:
        rows = run_query(analytics_db, analytics.region_sales)
    except SQLAlchemyError as e:
        return analytics_error("Failed to load region sales", e, analytics_db)
    return RegionSalesResponse(data=[RegionSales(**row) for row in rows])


@router.get("/top-products", response_model=TopProductsResponse)
def get_top_products(
    limit: int = Query(analytics.DEFAULT_TOP_PRODUCTS, ge=1, le=100),
    analytics_db: AnalyticsDatabase = Depends(get_analytics_db),
    current_user: User = Depends(require_permission("dashboard:read")),
):
    """Best-selling products ranked by quantity."""
    try:
        rows = run_query(analytics_db, analytics.top_products, limit)
    except SQLAlchemyError as e:
        return analytics_error("Failed to load top products", e, analytics_db)
    return TopProductsResponse(data=[TopProduct(**row) for row in rows])
