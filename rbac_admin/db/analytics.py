"""Connection handle and table definitions for the sales analytics database.

The analytics data lives in a separate database, in a star schema
(``star`` by default). Tables are declared against the placeholder schema
``star`` and every connection maps it to the configured schema, so the
same definitions work for any schema name, or none (SQLite in tests).
"""

import logging
from typing import Optional

from sqlalchemy import (
    Column,
    Date,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    create_engine,
    inspect,
)
from sqlalchemy.engine import Connection, Engine

from rbac_admin.core.config import Settings
from rbac_admin.db.session import DatabaseNotInitializedError

logger = logging.getLogger(__name__)

SCHEMA_PLACEHOLDER = "star"

analytics_metadata = MetaData(schema=SCHEMA_PLACEHOLDER)

dim_products = Table(
    "dim_products",
    analytics_metadata,
    Column("product_id", String(50), primary_key=True),
    Column("product_name", String(255)),
    Column("category", String(100)),
    Column("unit_price", Numeric(12, 2), nullable=False),
    Column("unit_cost", Numeric(12, 2), nullable=False),
)

dim_customers = Table(
    "dim_customers",
    analytics_metadata,
    Column("customer_id", String(50), primary_key=True),
    Column("customer_name", String(255)),
    Column("region", String(100)),
)

fact_sales = Table(
    "fact_sales",
    analytics_metadata,
    Column("order_id", String(50), primary_key=True),
    Column("order_date", Date, nullable=False),
    Column("customer_id", String(50), nullable=False),
    Column("product_id", String(50), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("discount", Numeric(5, 4), nullable=False, default=0),
    Column("status", String(20), nullable=False),
)

ANALYTICS_TABLES = ("fact_sales", "dim_products", "dim_customers")


class AnalyticsDatabase:
    """Pooled, read-mostly connection handle for the star schema."""

    def __init__(self, url: str, schema: Optional[str] = SCHEMA_PLACEHOLDER, **engine_kwargs):
        self.url = url
        self.schema = schema or None
        self.engine_kwargs = engine_kwargs
        self._engine: Optional[Engine] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnalyticsDatabase":
        return cls(
            settings.analytics_database_url,
            schema=settings.analytics_schema,
            pool_size=settings.analytics_pool_size,
            pool_timeout=settings.analytics_pool_timeout,
            pool_recycle=settings.analytics_pool_recycle,
            pool_pre_ping=True,
        )

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise DatabaseNotInitializedError("AnalyticsDatabase.init() has not been called")
        return self._engine

    def init(self) -> None:
        if self._engine is not None:
            return
        self._engine = create_engine(self.url, **self.engine_kwargs)
        logger.info(
            "Analytics engine created for %s (schema=%s)",
            self._engine.url.render_as_string(hide_password=True),
            self.schema,
        )

    def connect(self) -> Connection:
        """Open a connection with the star schema mapped to the configured one."""
        connection = self.engine.connect()
        return connection.execution_options(
            schema_translate_map={SCHEMA_PLACEHOLDER: self.schema}
        )

    def missing_tables(self) -> list[str]:
        """Star schema tables absent from the configured schema."""
        with self.engine.connect() as connection:
            existing = set(inspect(connection).get_table_names(schema=self.schema))
        return [name for name in ANALYTICS_TABLES if name not in existing]

    def shutdown(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        logger.info("Analytics engine disposed")
