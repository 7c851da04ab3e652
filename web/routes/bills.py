from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, HTTPException, Request

from billdesk.models.customer_bill import BillStatus, CustomerBill
from web.deps import get_customer_bill_service
from web.params import day_bounds
from web.schemas import BillCreate, BillPayment, BillUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/affiliates/{affiliate_id}/bills")


def _bill_json(bill: CustomerBill) -> dict:
    return bill.model_dump(mode="json")


def _get_bill_or_404(request: Request, affiliate_id: int, bill_id: int) -> CustomerBill:
    bill = get_customer_bill_service(request).get_bill(affiliate_id, bill_id)
    if bill is None:
        logger.warning("Bill not found: id=%s affiliate=%s", bill_id, affiliate_id)
        raise HTTPException(status_code=404, detail="Bill not found")
    return bill


@router.post("", status_code=201)
async def bill_create(request: Request, affiliate_id: int, body: BillCreate):
    logger.info("POST /affiliates/%s/bills: %d items", affiliate_id, len(body.items))
    service = get_customer_bill_service(request)
    bill = service.create_bill(
        affiliate_id=affiliate_id,
        customer_phone_number=body.customer_phone_number,
        items=[item.model_dump() for item in body.items],
        additional_discount=body.additional_discount,
        customer_name=body.customer_name,
        remarks=body.remarks,
        payment_method=body.payment_method,
        merchant_name=body.merchant_name,
    )
    return {
        "success": True,
        "message": "Bill created successfully",
        "bill": _bill_json(bill),
        "breakdown": service.get_breakdown(bill).model_dump(mode="json"),
    }


@router.get("")
async def bill_list(
    request: Request,
    affiliate_id: int,
    page: int = 1,
    limit: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    status: BillStatus | None = None,
    customer_phone: str = "",
):
    start, end = day_bounds(start_date, end_date)
    result = get_customer_bill_service(request).list_bills(
        affiliate_id,
        page=page,
        limit=limit,
        start=start,
        end=end,
        status=status,
        customer_phone=customer_phone.strip(),
    )
    return result.model_dump(mode="json")


@router.get("/{bill_id}")
async def bill_detail(request: Request, affiliate_id: int, bill_id: int):
    bill = _get_bill_or_404(request, affiliate_id, bill_id)
    breakdown = get_customer_bill_service(request).get_breakdown(bill)
    return {"bill": _bill_json(bill), "breakdown": breakdown.model_dump(mode="json")}


@router.put("/{bill_id}")
async def bill_update(request: Request, affiliate_id: int, bill_id: int, body: BillUpdate):
    logger.info("PUT /affiliates/%s/bills/%s: %d items", affiliate_id, bill_id, len(body.items))
    bill = _get_bill_or_404(request, affiliate_id, bill_id)
    if bill.status == BillStatus.CANCELLED:
        raise HTTPException(status_code=400, detail="Cancelled bills cannot be edited")
    service = get_customer_bill_service(request)
    updated = service.update_bill(
        bill,
        items=[item.model_dump() for item in body.items],
        additional_discount=body.additional_discount,
        remarks=body.remarks,
        customer_name=body.customer_name,
        merchant_name=body.merchant_name,
    )
    return {
        "success": True,
        "message": "Bill updated successfully",
        "bill": _bill_json(updated),
        "breakdown": service.get_breakdown(updated).model_dump(mode="json"),
    }


@router.post("/{bill_id}/pay")
async def bill_pay(request: Request, affiliate_id: int, bill_id: int, body: BillPayment):
    bill = _get_bill_or_404(request, affiliate_id, bill_id)
    try:
        bill = get_customer_bill_service(request).mark_paid(bill, body.payment_method)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"success": True, "bill": _bill_json(bill)}


@router.post("/{bill_id}/cancel")
async def bill_cancel(request: Request, affiliate_id: int, bill_id: int):
    bill = _get_bill_or_404(request, affiliate_id, bill_id)
    bill = get_customer_bill_service(request).cancel_bill(bill)
    return {"success": True, "bill": _bill_json(bill)}
