from __future__ import annotations

import logging
import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from billdesk.db import initialize_db
from billdesk.exceptions import BillError, InventoryError, InvalidTotalsError
from billdesk.logging import configure_logging, reconfigure
from web.deps import DBConnectionMiddleware
from web.routes.bills import router as bills_router
from web.routes.customers import router as customers_router
from web.routes.inventory import router as inventory_router
from web.routes.manual_bills import router as manual_bills_router
from web.routes.reports import router as reports_router

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    initialize_db()
    # Alembic's fileConfig may have overridden the logging config
    reconfigure()
    logger.info("Application started")
    yield


app = FastAPI(title="billdesk", lifespan=lifespan)

app.add_middleware(DBConnectionMiddleware)

app.include_router(bills_router)
app.include_router(inventory_router)
app.include_router(manual_bills_router)
app.include_router(reports_router)
app.include_router(customers_router)


def _error_body(exc: Exception) -> dict:
    return {"success": False, "code": getattr(exc, "code", "error"), "message": str(exc)}


@app.exception_handler(InvalidTotalsError)
async def invalid_totals_handler(request: Request, exc: InvalidTotalsError):
    logger.error("Invalid totals on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(_error_body(exc), status_code=500)


@app.exception_handler(BillError)
async def bill_error_handler(request: Request, exc: BillError):
    logger.warning("Bill rejected on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(_error_body(exc), status_code=400)


@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
    logger.warning("Inventory request rejected on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(_error_body(exc), status_code=400)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception on %s %s:\n%s",
        request.method,
        request.url.path,
        traceback.format_exc(),
    )
    return JSONResponse({"success": False, "code": "server_error", "message": "Internal Server Error"}, 500)


@app.get("/health")
async def health():
    return {"status": "ok"}
