from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, HTTPException, Request

from billdesk.models.manual_bill import ManualBill
from web.deps import get_manual_bill_service
from web.params import day_bounds
from web.schemas import ManualBillCreate, ManualBillUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/affiliates/{affiliate_id}/manual-bills")


def _bill_json(bill: ManualBill) -> dict:
    return bill.model_dump(mode="json")


def _get_bill_or_404(request: Request, affiliate_id: int, bill_id: int) -> ManualBill:
    bill = get_manual_bill_service(request).get_bill(affiliate_id, bill_id)
    if bill is None:
        logger.warning("Manual bill not found: id=%s affiliate=%s", bill_id, affiliate_id)
        raise HTTPException(status_code=404, detail="Bill not found")
    return bill


@router.get("")
async def manual_bill_list(request: Request, affiliate_id: int):
    bills = get_manual_bill_service(request).list_bills(affiliate_id)
    return {"bills": [_bill_json(bill) for bill in bills], "count": len(bills)}


@router.post("", status_code=201)
async def manual_bill_create(request: Request, affiliate_id: int, body: ManualBillCreate):
    logger.info("POST /affiliates/%s/manual-bills: %s", affiliate_id, body.device_name)
    bill = get_manual_bill_service(request).create_bill(affiliate_id, **body.model_dump())
    return {"success": True, "message": "Bill created successfully", "bill": _bill_json(bill)}


@router.get("/search")
async def manual_bill_search(
    request: Request,
    affiliate_id: int,
    q: str = "",
    category: str = "",
    start_date: date | None = None,
    end_date: date | None = None,
):
    start, end = day_bounds(start_date, end_date)
    bills = get_manual_bill_service(request).search(affiliate_id, q, category=category, start=start, end=end)
    return {"bills": [_bill_json(bill) for bill in bills], "count": len(bills)}


@router.get("/stats")
async def manual_bill_stats(request: Request, affiliate_id: int):
    stats = get_manual_bill_service(request).stats(affiliate_id)
    return {"stats": stats.model_dump(mode="json")}


@router.get("/{bill_id}")
async def manual_bill_detail(request: Request, affiliate_id: int, bill_id: int):
    return {"bill": _bill_json(_get_bill_or_404(request, affiliate_id, bill_id))}


@router.put("/{bill_id}")
async def manual_bill_update(request: Request, affiliate_id: int, bill_id: int, body: ManualBillUpdate):
    bill = _get_bill_or_404(request, affiliate_id, bill_id)
    updated = get_manual_bill_service(request).update_bill(bill, **body.model_dump(exclude_unset=True))
    return {"success": True, "message": "Bill updated successfully", "bill": _bill_json(updated)}


@router.delete("/{bill_id}")
async def manual_bill_delete(request: Request, affiliate_id: int, bill_id: int):
    bill = _get_bill_or_404(request, affiliate_id, bill_id)
    get_manual_bill_service(request).delete_bill(bill)
    return {"success": True, "message": "Bill deleted successfully"}
