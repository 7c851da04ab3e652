from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Path, Request

from billdesk.constants import PHONE_PATTERN
from web.deps import get_customer_bill_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers")


@router.get("/{phone}/bills")
async def customer_bills(request: Request, phone: str = Path(pattern=PHONE_PATTERN)):
    bills = get_customer_bill_service(request).list_customer_bills(phone)
    logger.debug("Customer %s has %d bills", phone, len(bills))
    return {"bills": [bill.model_dump(mode="json") for bill in bills], "count": len(bills)}


@router.get("/{phone}/bills/{bill_id}")
async def customer_bill_detail(request: Request, bill_id: int, phone: str = Path(pattern=PHONE_PATTERN)):
    service = get_customer_bill_service(request)
    bill = service.get_customer_bill(phone, bill_id)
    if bill is None:
        raise HTTPException(status_code=404, detail="Bill not found")
    return {"bill": bill.model_dump(mode="json"), "breakdown": service.get_breakdown(bill).model_dump(mode="json")}
