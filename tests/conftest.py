"""Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite RBAC database and a fresh
in-memory analytics database. ``StaticPool`` keeps a single connection so
the test session and the API share the same data; fixtures commit what
they create.
"""

import os

# Must be set before rbac_admin reads its settings
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from datetime import date
from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import insert
from sqlalchemy.pool import StaticPool

from rbac_admin.api.main import create_app
from rbac_admin.core.config import get_settings
from rbac_admin.core.security import create_access_token
from rbac_admin.db.analytics import (
    AnalyticsDatabase,
    analytics_metadata,
    dim_customers,
    dim_products,
    fact_sales,
)
from rbac_admin.db.base import Base
from rbac_admin.db.models import User
from rbac_admin.db.seed import seed_defaults
from rbac_admin.db.session import Database
from tests.factories import create_role, create_user, get_or_create_permission


def _sqlite_kwargs() -> dict:
    return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}


@pytest.fixture
def database():
    """Initialized RBAC database with all tables created."""
    db = Database("sqlite://", **_sqlite_kwargs())
    db.init()
    Base.metadata.create_all(db.engine)
    yield db
    db.shutdown()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def analytics_db():
    """Initialized analytics database with empty star schema tables."""
    adb = AnalyticsDatabase("sqlite://", schema=None, **_sqlite_kwargs())
    adb.init()
    with adb.connect() as conn:
        analytics_metadata.create_all(conn)
        conn.commit()
    yield adb
    adb.shutdown()


@pytest.fixture
def sales_data(analytics_db):
    """
    A small star schema dataset.

    Completed revenue: 2024-01 = 200 + 90 = 290, 2024-02 = 150.
    The cancelled order is excluded everywhere.
    """
    products = [
        {"product_id": "P1", "product_name": "Laptop", "category": "Electronics", "unit_price": 100, "unit_cost": 60},
        {"product_id": "P2", "product_name": "Mouse", "category": "Accessories", "unit_price": 10, "unit_cost": 4},
        {"product_id": "P3", "product_name": None, "category": None, "unit_price": 50, "unit_cost": 50},
    ]
    customers = [
        {"customer_id": "C1", "customer_name": "Alice", "region": "North"},
        {"customer_id": "C2", "customer_name": "Bob", "region": "South"},
        {"customer_id": "C3", "customer_name": "Carol", "region": None},
    ]
    orders = [
        # 2 laptops, no discount: revenue 200, cost 120
        {"order_id": "O1", "order_date": date(2024, 1, 5), "customer_id": "C1", "product_id": "P1",
         "quantity": 2, "discount": 0, "status": "Completed"},
        # 10 mice at 10% off: revenue 90, cost 40
        {"order_id": "O2", "order_date": date(2024, 1, 20), "customer_id": "C2", "product_id": "P2",
         "quantity": 10, "discount": 0.1, "status": "Completed"},
        # 3 unnamed products: revenue 150, cost 150
        {"order_id": "O3", "order_date": date(2024, 2, 1), "customer_id": "C3", "product_id": "P3",
         "quantity": 3, "discount": 0, "status": "Completed"},
        {"order_id": "O4", "order_date": date(2024, 2, 2), "customer_id": "C1", "product_id": "P1",
         "quantity": 50, "discount": 0, "status": "Cancelled"},
    ]
    with analytics_db.connect() as conn:
        conn.execute(insert(dim_products), products)
        conn.execute(insert(dim_customers), customers)
        conn.execute(insert(fact_sales), orders)
        conn.commit()
    return analytics_db


@pytest.fixture
def app(database, analytics_db):
    return create_app(settings=get_settings(), database=database, analytics_db=analytics_db)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def seeded(db_session):
    """Default permissions, roles and menus."""
    permissions, roles, menus = seed_defaults(db_session)
    db_session.commit()
    return {"permissions": permissions, "roles": roles, "menus": menus}


@pytest.fixture
def user_factory(db_session) -> Callable[..., User]:
    """Create and commit a user; ``permissions`` go through a dedicated role."""

    def _create(*, permissions=(), roles=(), **kwargs) -> User:
        roles = list(roles)
        if permissions:
            perms = [get_or_create_permission(db_session, code) for code in permissions]
            roles.append(create_role(db_session, permissions=perms))
        user = create_user(db_session, roles=roles, **kwargs)
        db_session.commit()
        return user

    return _create


@pytest.fixture
def auth_headers(db_session) -> Callable[[User], Dict[str, str]]:
    """Bearer headers for a user, backed by a real session row."""

    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token(user.id, db_session)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin_user(seeded, user_factory) -> User:
    return user_factory(email="admin@example.com", roles=[seeded["roles"]["admin"]])


@pytest.fixture
def admin_headers(admin_user, auth_headers) -> Dict[str, str]:
    return auth_headers(admin_user)
