"""Web test fixtures: TestClient with shared in-memory SQLite."""

from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event, text
from sqlalchemy.pool import StaticPool

from billdesk.models.inventory import InventoryItem
from billdesk.repositories.sqlalchemy import SQLAlchemyInventoryRepository
from tests.conftest import SCHEMA_DDL


def _make_test_engine():
    """Create a fresh in-memory SQLite engine with a shared connection pool."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    with engine.connect() as conn:
        for statement in SCHEMA_DDL.strip().split(";"):
            stmt = statement.strip()
            if stmt:
                conn.execute(text(stmt))
        conn.commit()

    return engine


def create_inventory_item_in_db(engine, **overrides) -> InventoryItem:
    defaults = dict(
        affiliate_id=1,
        item_name="Shirt",
        unit_price=Decimal("500.00"),
        available_quantity=Decimal("10"),
        minimum_stock_level=Decimal("5"),
    )
    defaults.update(overrides)
    with engine.connect() as conn:
        return SQLAlchemyInventoryRepository(conn).create(InventoryItem(**defaults))


def bill_payload(**overrides) -> dict:
    payload = {
        "customer_phone_number": "9876543210",
        "customer_name": "Asha",
        "items": [
            {"name": "Shirt", "quantity": 2, "unit_price": "500", "discount": "50"},
            {"name": "Trousers", "quantity": "1", "unit_price": 1000},
        ],
        "additional_discount": 100,
        "remarks": "Thank you",
    }
    payload.update(overrides)
    return payload


@pytest.fixture(autouse=True)
def web_test_db(monkeypatch, tmp_path):
    """Set up an in-memory DB and patch the web app to use it."""
    engine = _make_test_engine()

    import web.deps as deps_module

    monkeypatch.setattr(deps_module, "get_engine", lambda: engine)

    from billdesk.settings import settings

    monkeypatch.setattr(settings, "storage_local_path", str(tmp_path))

    import web.app as app_module

    monkeypatch.setattr(app_module, "initialize_db", lambda: None)

    yield engine

    engine.dispose()


@pytest.fixture()
def test_engine(web_test_db):
    """Expose the test engine for helpers that need direct DB access."""
    return web_test_db


@pytest.fixture()
def client():
    from starlette.testclient import TestClient

    from web.app import app

    return TestClient(app)
