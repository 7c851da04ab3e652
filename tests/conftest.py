"""Root conftest: in-memory SQLite engine and fixtures for the full schema."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import Connection, create_engine, event, text
from sqlalchemy.engine import Engine

from billdesk.constants import LOCAL_TZ
from billdesk.models.customer_bill import BillStatus, CustomerBill, LineItem
from billdesk.models.inventory import InventoryItem

# Matches Alembic head: 8c4d2e6f1a3b (create manual bills)
SCHEMA_DDL = """
CREATE TABLE inventory_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    affiliate_id INTEGER NOT NULL,
    item_name VARCHAR(255) NOT NULL,
    item_description TEXT NOT NULL DEFAULT '',
    category VARCHAR(100) NOT NULL DEFAULT 'General',
    unit_price INTEGER NOT NULL DEFAULT 0,
    available_quantity NUMERIC(12, 3) NOT NULL DEFAULT 0,
    minimum_stock_level NUMERIC(12, 3) NOT NULL DEFAULT 5,
    unit VARCHAR(20) NOT NULL DEFAULT 'pcs',
    sku VARCHAR(100) NOT NULL DEFAULT '',
    total_sold NUMERIC(12, 3) NOT NULL DEFAULT 0,
    last_sold_at DATETIME,
    is_active BOOLEAN NOT NULL DEFAULT 1,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
);

CREATE TABLE customer_bills (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    bill_number VARCHAR(32) NOT NULL UNIQUE,
    affiliate_id INTEGER NOT NULL,
    customer_phone_number VARCHAR(15) NOT NULL,
    customer_name VARCHAR(255) NOT NULL DEFAULT '',
    subtotal INTEGER NOT NULL DEFAULT 0,
    item_discount_total INTEGER NOT NULL DEFAULT 0,
    additional_discount INTEGER NOT NULL DEFAULT 0,
    grand_total INTEGER NOT NULL DEFAULT 0,
    remarks TEXT NOT NULL DEFAULT '',
    status VARCHAR(20) NOT NULL DEFAULT 'draft',
    payment_method VARCHAR(20) NOT NULL DEFAULT 'pending',
    whatsapp_sent BOOLEAN NOT NULL DEFAULT 0,
    whatsapp_sent_at DATETIME,
    pdf_path TEXT NOT NULL DEFAULT '',
    paid_at DATETIME,
    bill_date DATETIME NOT NULL,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
);

CREATE TABLE customer_bill_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    bill_id INTEGER NOT NULL REFERENCES customer_bills(id) ON DELETE CASCADE,
    name VARCHAR(255) NOT NULL,
    quantity NUMERIC(12, 3) NOT NULL,
    unit_price NUMERIC(18, 6) NOT NULL,
    discount INTEGER NOT NULL DEFAULT 0,
    net_amount INTEGER NOT NULL DEFAULT 0,
    inventory_item_id INTEGER REFERENCES inventory_items(id),
    sort_order INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE bill_sequences (
    sequence_key VARCHAR(32) PRIMARY KEY,
    last_value INTEGER NOT NULL DEFAULT 0,
    updated_at DATETIME NOT NULL
);

CREATE TABLE manual_bills (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    affiliate_id INTEGER NOT NULL,
    device_name VARCHAR(200) NOT NULL,
    device_number VARCHAR(100) NOT NULL,
    device_cost INTEGER NOT NULL,
    remarks TEXT NOT NULL DEFAULT '',
    image_uri TEXT,
    category VARCHAR(30) NOT NULL DEFAULT 'Other',
    submitted_at DATETIME NOT NULL,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
);
"""


@pytest.fixture()
def db_engine() -> Engine:
    engine = create_engine("sqlite:///:memory:")

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    return engine


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    for statement in SCHEMA_DDL.strip().split(";"):
        stmt = statement.strip()
        if stmt:
            conn.execute(text(stmt))
    conn.commit()
    yield conn
    conn.close()


def _sample_bill(affiliate_id: int = 1, **overrides) -> CustomerBill:
    """A normalized bill: 2 x 500 with 50 off, 1 x 1000, 100 additional off."""
    defaults = dict(
        bill_number="BILL202506150001",
        affiliate_id=affiliate_id,
        customer_phone_number="9876543210",
        customer_name="Asha",
        items=[
            LineItem(
                name="Shirt",
                quantity=Decimal("2"),
                unit_price=Decimal("500.00"),
                discount=Decimal("50.00"),
                net_amount=Decimal("950.00"),
                sort_order=0,
            ),
            LineItem(
                name="Trousers",
                quantity=Decimal("1"),
                unit_price=Decimal("1000.00"),
                net_amount=Decimal("1000.00"),
                sort_order=1,
            ),
        ],
        subtotal=Decimal("2000.00"),
        item_discount_total=Decimal("50.00"),
        additional_discount=Decimal("100.00"),
        grand_total=Decimal("1850.00"),
        remarks="Thank you",
        status=BillStatus.SENT,
        bill_date=datetime(2025, 6, 15, 11, 30, tzinfo=LOCAL_TZ),
    )
    defaults.update(overrides)
    return CustomerBill(**defaults)


def _sample_inventory_item(affiliate_id: int = 1, **overrides) -> InventoryItem:
    defaults = dict(
        affiliate_id=affiliate_id,
        item_name="Shirt",
        item_description="Cotton shirt",
        category="Clothing",
        unit_price=Decimal("500.00"),
        available_quantity=Decimal("20"),
        minimum_stock_level=Decimal("5"),
        unit="pcs",
        sku="SH-001",
    )
    defaults.update(overrides)
    return InventoryItem(**defaults)


@pytest.fixture()
def sample_bill():
    return _sample_bill


@pytest.fixture()
def sample_inventory_item():
    return _sample_inventory_item
