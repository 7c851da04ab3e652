from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

from billdesk.constants import LOCAL_TZ
from billdesk.engine.line_items import MAX_AMOUNT, ZERO, to_decimal
from billdesk.exceptions import InvalidManualBillError
from billdesk.models import money
from billdesk.models.manual_bill import (
    DEVICE_NAME_MAX_LENGTH,
    DEVICE_NUMBER_MAX_LENGTH,
    REMARKS_MAX_LENGTH,
    UPDATABLE_FIELDS,
    ManualBill,
    ManualBillCategory,
    ManualBillStats,
)
from billdesk.repositories.base import ManualBillRepository

logger = logging.getLogger(__name__)


def parse_category(value: str | ManualBillCategory | None) -> ManualBillCategory:
    """Match a category case-insensitively; blank means Other."""
    if isinstance(value, ManualBillCategory):
        return value
    name = (value or "").strip().lower()
    if not name:
        return ManualBillCategory.OTHER
    for category in ManualBillCategory:
        if category.value.lower() == name:
            return category
    raise InvalidManualBillError(f"Unknown category: {value}")


def _validate(bill: ManualBill) -> None:
    if not bill.device_name or not bill.device_number or bill.device_cost <= 0:
        raise InvalidManualBillError("Device name, number, and valid cost are required")
    if len(bill.device_name) > DEVICE_NAME_MAX_LENGTH:
        raise InvalidManualBillError(f"Device name cannot exceed {DEVICE_NAME_MAX_LENGTH} characters")
    if len(bill.device_number) > DEVICE_NUMBER_MAX_LENGTH:
        raise InvalidManualBillError(f"Device number cannot exceed {DEVICE_NUMBER_MAX_LENGTH} characters")
    if len(bill.remarks) > REMARKS_MAX_LENGTH:
        raise InvalidManualBillError(f"Remarks cannot exceed {REMARKS_MAX_LENGTH} characters")


def _clean(field: str, value: Any) -> Any:
    if field in ("device_name", "device_number", "remarks"):
        return (value or "").strip()
    if field == "device_cost":
        cost = to_decimal(value)
        if cost > MAX_AMOUNT:
            raise InvalidManualBillError("Device cost is too large")
        return money(cost)
    if field == "category":
        return parse_category(value)
    return value


class ManualBillService:
    def __init__(self, repo: ManualBillRepository) -> None:
        self.repo = repo

    def create_bill(
        self,
        affiliate_id: int,
        device_name: str,
        device_number: str,
        device_cost: Any,
        remarks: str = "",
        image_uri: str | None = None,
        category: str | ManualBillCategory | None = None,
        submitted_at: datetime | None = None,
    ) -> ManualBill:
        bill = ManualBill(
            affiliate_id=affiliate_id,
            device_name=_clean("device_name", device_name),
            device_number=_clean("device_number", device_number),
            device_cost=_clean("device_cost", device_cost),
            remarks=_clean("remarks", remarks),
            image_uri=image_uri or None,
            category=parse_category(category),
            submitted_at=submitted_at or datetime.now(LOCAL_TZ),
        )
        _validate(bill)
        created = self.repo.create(bill)
        logger.info(
            "Manual bill created: id=%s affiliate=%s device=%s cost=%s",
            created.id,
            affiliate_id,
            created.device_name,
            created.device_cost,
        )
        return created

    def update_bill(self, bill: ManualBill, **changes: Any) -> ManualBill:
        """Apply ``changes`` to ``bill``. Unknown fields are ignored."""
        updates = {field: _clean(field, value) for field, value in changes.items() if field in UPDATABLE_FIELDS}
        if updates.get("submitted_at") is None:
            updates.pop("submitted_at", None)
        updated = bill.model_copy(update=updates)
        _validate(updated)
        result = self.repo.update(updated)
        logger.info("Manual bill updated: id=%s fields=%s", result.id, sorted(updates))
        return result

    def delete_bill(self, bill: ManualBill) -> None:
        if bill.id is None:
            raise ValueError("Cannot delete manual bill without an id")
        self.repo.delete(bill.id)
        logger.info("Manual bill deleted: id=%s affiliate=%s", bill.id, bill.affiliate_id)

    def get_bill(self, affiliate_id: int, bill_id: int) -> ManualBill | None:
        bill = self.repo.get_by_id(bill_id)
        if bill is not None and bill.affiliate_id != affiliate_id:
            return None
        return bill

    def list_bills(self, affiliate_id: int) -> list[ManualBill]:
        return self.repo.list_by_affiliate(affiliate_id)

    def search(
        self,
        affiliate_id: int,
        query: str = "",
        category: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ManualBill]:
        # "all" is the catch-all filter value.
        wanted = None if not category or category.lower() == "all" else parse_category(category)
        bills = self.repo.list_by_affiliate(affiliate_id, query=query.strip(), category=wanted, start=start, end=end)
        logger.debug("Manual bill search affiliate=%s q=%r found=%d", affiliate_id, query, len(bills))
        return bills

    def stats(self, affiliate_id: int) -> ManualBillStats:
        bills = self.repo.list_by_affiliate(affiliate_id)
        by_category: dict[str, Decimal] = {}
        by_month: dict[str, Decimal] = {}
        for bill in bills:
            by_category[bill.category.value] = by_category.get(bill.category.value, ZERO) + bill.device_cost
            if bill.submitted_at is not None:
                submitted = bill.submitted_at
                if submitted.tzinfo is None:
                    submitted = submitted.replace(tzinfo=LOCAL_TZ)
                month = submitted.astimezone(LOCAL_TZ).strftime("%Y-%m")
                by_month[month] = by_month.get(month, ZERO) + bill.device_cost
        return ManualBillStats(
            total_bills=len(bills),
            total_amount=sum((bill.device_cost for bill in bills), ZERO),
            category_breakdown=by_category,
            monthly_spending=dict(sorted(by_month.items())),
        )
