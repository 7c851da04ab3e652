from __future__ import annotations

import logging

from fastapi import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from billdesk.db import get_engine
from billdesk.engine.sequence import BillNumberAllocator
from billdesk.repositories.sqlalchemy import (
    SQLAlchemyBillSequenceRepository,
    SQLAlchemyCustomerBillRepository,
    SQLAlchemyInventoryRepository,
    SQLAlchemyManualBillRepository,
)
from billdesk.services.customer_bill_service import CustomerBillService
from billdesk.services.inventory_service import InventoryService
from billdesk.services.manual_bill_service import ManualBillService
from billdesk.services.report_service import ReportService
from billdesk.settings import settings
from billdesk.storage.factory import get_storage

logger = logging.getLogger(__name__)


class DBConnectionMiddleware:
    """Pure ASGI middleware. Creates at most one DB connection per request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        request.state.db_conn = None
        try:
            await self.app(scope, receive, send)
        finally:
            conn = getattr(request.state, "db_conn", None)
            if conn is not None:
                conn.close()
                logger.debug("DB connection closed for %s %s", request.method, request.url.path)


def _get_conn(request: Request):
    """Lazy per-request connection, created on first use and closed by the middleware."""
    if request.state.db_conn is None:
        logger.debug("Creating DB connection for %s %s", request.method, request.url.path)
        request.state.db_conn = get_engine().connect()
    return request.state.db_conn


def get_inventory_service(request: Request) -> InventoryService:
    return InventoryService(SQLAlchemyInventoryRepository(_get_conn(request)))


def get_customer_bill_service(request: Request) -> CustomerBillService:
    conn = _get_conn(request)
    allocator = BillNumberAllocator(
        SQLAlchemyBillSequenceRepository(conn),
        prefix=settings.bill_number_prefix,
        fallback_enabled=settings.bill_number_fallback,
    )
    return CustomerBillService(
        SQLAlchemyCustomerBillRepository(conn),
        allocator,
        inventory=InventoryService(SQLAlchemyInventoryRepository(conn)),
        storage=get_storage(),
    )


def get_report_service(request: Request) -> ReportService:
    conn = _get_conn(request)
    return ReportService(
        SQLAlchemyCustomerBillRepository(conn),
        InventoryService(SQLAlchemyInventoryRepository(conn)),
    )


def get_manual_bill_service(request: Request) -> ManualBillService:
    return ManualBillService(SQLAlchemyManualBillRepository(_get_conn(request)))
