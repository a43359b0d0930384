"""Sales analytics aggregations over the star schema.

Revenue for an order line is ``quantity * unit_price * (1 - discount)`` and
cost is ``quantity * unit_cost``. Only orders with status ``Completed``
count.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import case, func, select
from sqlalchemy.engine import Connection

from rbac_admin.db.analytics import dim_customers, dim_products, fact_sales

logger = logging.getLogger(__name__)

COMPLETED_STATUS = "Completed"
UNKNOWN_REGION = "Unknown region"
UNKNOWN_PRODUCT = "Unknown product"
UNCATEGORIZED = "Uncategorized"
DEFAULT_TOP_PRODUCTS = 5

_revenue = fact_sales.c.quantity * dim_products.c.unit_price * (1 - fact_sales.c.discount)
_cost = fact_sales.c.quantity * dim_products.c.unit_cost


def _month_of(dialect_name: str, column):
    """``YYYY-MM`` for a date column, per dialect."""
    if dialect_name == "sqlite":
        return func.strftime("%Y-%m", column)
    return func.to_char(column, "YYYY-MM")


def _to_float(value) -> float:
    return float(value) if value is not None else 0.0


def monthly_trends(conn: Connection) -> List[Dict[str, Any]]:
    """Sales, profit and profit margin (%) per month, oldest first."""
    month = _month_of(conn.dialect.name, fact_sales.c.order_date).label("month")
    total_sales = func.sum(_revenue)
    total_profit = total_sales - func.sum(_cost)
    profit_margin = case(
        (total_sales > 0, total_profit * 100.0 / total_sales),
        else_=0,
    )

    stmt = (
        select(
            month,
            total_sales.label("total_sales"),
            total_profit.label("total_profit"),
            profit_margin.label("profit_margin"),
        )
        .select_from(fact_sales.join(dim_products, fact_sales.c.product_id == dim_products.c.product_id))
        .where(fact_sales.c.status == COMPLETED_STATUS)
        .group_by(month)
        .order_by(month.asc())
    )

    rows = conn.execute(stmt).all()
    logger.debug("monthly_trends returned %d rows", len(rows))
    return [
        {
            "month": row.month,
            "sales": _to_float(row.total_sales),
            "profit": _to_float(row.total_profit),
            "profit_margin": _to_float(row.profit_margin),
        }
        for row in rows
    ]


def region_sales(conn: Connection) -> List[Dict[str, Any]]:
    """Revenue per customer region, largest first."""
    total_sales = func.sum(_revenue).label("total_sales")
    stmt = (
        select(dim_customers.c.region, total_sales)
        .select_from(
            fact_sales
            .join(dim_customers, fact_sales.c.customer_id == dim_customers.c.customer_id)
            .join(dim_products, fact_sales.c.product_id == dim_products.c.product_id)
        )
        .where(fact_sales.c.status == COMPLETED_STATUS)
        .group_by(dim_customers.c.region)
        .order_by(total_sales.desc())
    )

    rows = conn.execute(stmt).all()
    logger.debug("region_sales returned %d rows", len(rows))
    return [
        {"name": row.region or UNKNOWN_REGION, "value": _to_float(row.total_sales)}
        for row in rows
    ]


def top_products(conn: Connection, limit: int = DEFAULT_TOP_PRODUCTS) -> List[Dict[str, Any]]:
    """Best-selling products by quantity, with their revenue."""
    total_quantity = func.sum(fact_sales.c.quantity).label("total_quantity")
    stmt = (
        select(
            dim_products.c.product_id,
            dim_products.c.product_name,
            dim_products.c.category,
            total_quantity,
            func.sum(_revenue).label("total_sales"),
        )
        .select_from(fact_sales.join(dim_products, fact_sales.c.product_id == dim_products.c.product_id))
        .where(fact_sales.c.status == COMPLETED_STATUS)
        .group_by(dim_products.c.product_id, dim_products.c.product_name, dim_products.c.category)
        .order_by(total_quantity.desc())
        .limit(limit)
    )

    rows = conn.execute(stmt).all()
    logger.debug("top_products returned %d rows", len(rows))
    return [
        {
            "rank": index,
            "product_id": row.product_id,
            "product_name": row.product_name or UNKNOWN_PRODUCT,
            "category": row.category or UNCATEGORIZED,
            "quantity": int(row.total_quantity or 0),
            "sales": _to_float(row.total_sales),
        }
        for index, row in enumerate(rows, start=1)
    ]
