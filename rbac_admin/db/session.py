"""Database handle for the RBAC schema.

The engine and session factory live on an explicitly constructed
``Database`` object. The application creates one from settings, calls
``init()`` on startup and ``shutdown()`` on exit; request handlers get
sessions through the ``get_db`` dependency.
"""

import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from rbac_admin.core.config import Settings

logger = logging.getLogger(__name__)


class DatabaseNotInitializedError(RuntimeError):
    """Raised when a database handle is used before ``init()``."""


class Database:
    """Owns the engine and session factory for one database."""

    def __init__(self, url: str, **engine_kwargs):
        self.url = url
        self.engine_kwargs = engine_kwargs
        self._engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            echo=settings.database_echo,
            pool_pre_ping=True,
        )

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise DatabaseNotInitializedError("Database.init() has not been called")
        return self._engine

    def init(self) -> None:
        """Create the engine and session factory. Safe to call twice."""
        if self._engine is not None:
            return
        self._engine = create_engine(self.url, **self.engine_kwargs)
        self._sessionmaker = sessionmaker(bind=self._engine, autoflush=False)
        logger.info("Database engine created for %s", self._engine.url.render_as_string(hide_password=True))

    def session(self) -> Session:
        """Open a new ORM session."""
        if self._sessionmaker is None:
            raise DatabaseNotInitializedError("Database.init() has not been called")
        return self._sessionmaker()

    def shutdown(self) -> None:
        """Dispose of pooled connections."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database engine disposed")
