from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Query, Request

from billdesk.services.report_service import GroupBy
from web.deps import get_report_service
from web.params import default_period

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/affiliates/{affiliate_id}")


@router.get("/dashboard")
async def dashboard(request: Request, affiliate_id: int, period: int = Query(default=30, ge=1, le=366)):
    result = get_report_service(request).dashboard(affiliate_id, period_days=period)
    return result.model_dump(mode="json")


@router.get("/reports/sales")
async def sales_report(
    request: Request,
    affiliate_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    group_by: GroupBy = GroupBy.DAY,
):
    start, end = default_period(start_date, end_date)
    service = get_report_service(request)
    periods = service.sales_report(affiliate_id, start, end, group_by)
    summary = service.sales_summary(affiliate_id, start, end)
    return {
        "summary": summary.model_dump(mode="json"),
        "periods": [period.model_dump(mode="json") for period in periods],
        "group_by": group_by.value,
    }


@router.get("/reports/discounts")
async def discount_report(
    request: Request,
    affiliate_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
):
    start, end = default_period(start_date, end_date)
    stats = get_report_service(request).discount_analysis(affiliate_id, start, end)
    return {"items": [row.model_dump(mode="json") for row in stats]}
