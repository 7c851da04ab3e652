from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from billdesk.constants import LOCAL_TZ
from billdesk.engine.breakdown import build_breakdown
from billdesk.engine.normalize import normalize_and_validate
from billdesk.engine.sequence import BillNumberAllocator
from billdesk.engine.totals import aggregate
from billdesk.models.customer_bill import (
    BillBreakdown,
    BillPage,
    BillStatus,
    CustomerBill,
    LineItem,
    PaymentMethod,
)
from billdesk.pdf.invoice import InvoicePDF
from billdesk.repositories.base import CustomerBillRepository
from billdesk.services.inventory_service import InventoryService
from billdesk.settings import settings
from billdesk.storage.base import StorageBackend

logger = logging.getLogger(__name__)


def _storage_key(affiliate_id: int, bill_number: str) -> str:
    prefix = settings.storage_prefix
    if prefix:
        return f"{prefix}/{affiliate_id}/{bill_number}.pdf"
    return f"{affiliate_id}/{bill_number}.pdf"


class CustomerBillService:
    def __init__(
        self,
        bill_repo: CustomerBillRepository,
        allocator: BillNumberAllocator,
        inventory: InventoryService | None = None,
        storage: StorageBackend | None = None,
    ) -> None:
        self.bill_repo = bill_repo
        self.allocator = allocator
        self.inventory = inventory
        self.storage = storage
        self.pdf_generator = InvoicePDF()

    def create_bill(
        self,
        affiliate_id: int,
        customer_phone_number: str,
        items: Sequence[LineItem | Mapping[str, Any]],
        additional_discount: Any = 0,
        customer_name: str = "",
        remarks: str = "",
        payment_method: PaymentMethod = PaymentMethod.PENDING,
        merchant_name: str = "",
    ) -> CustomerBill:
        # Validates and coerces the raw items before a bill number is spent on them.
        totals = aggregate(items, additional_discount)

        if self.inventory is not None:
            self.inventory.check_availability(affiliate_id, totals.items)

        bill = CustomerBill(
            affiliate_id=affiliate_id,
            customer_phone_number=customer_phone_number.strip(),
            customer_name=customer_name.strip(),
            items=totals.items,
            additional_discount=totals.additional_discount,
            remarks=remarks.strip(),
            status=BillStatus.SENT,
            payment_method=payment_method,
            bill_date=datetime.now(LOCAL_TZ),
        )
        bill = normalize_and_validate(self.allocator.assign(bill))
        bill = self.bill_repo.create(bill)
        logger.info(
            "Bill created: id=%s number=%s affiliate=%s subtotal=%s item_discounts=%s additional=%s total=%s",
            bill.id,
            bill.bill_number,
            affiliate_id,
            bill.subtotal,
            bill.item_discount_total,
            bill.additional_discount,
            bill.grand_total,
        )

        self._record_stock_sales(bill)
        self._publish(bill, merchant_name)
        return bill

    def update_bill(
        self,
        bill: CustomerBill,
        items: Sequence[LineItem | Mapping[str, Any]],
        additional_discount: Any = 0,
        remarks: str | None = None,
        customer_name: str | None = None,
        merchant_name: str = "",
    ) -> CustomerBill:
        """Replace the items and discount of ``bill`` and recompute it in full.

        The bill number is kept as is.
        """
        totals = aggregate(items, additional_discount)
        changes: dict[str, Any] = {
            "items": totals.items,
            "additional_discount": totals.additional_discount,
        }
        if remarks is not None:
            changes["remarks"] = remarks.strip()
        if customer_name is not None:
            changes["customer_name"] = customer_name.strip()

        updated = normalize_and_validate(bill.model_copy(update=changes))
        updated = self.bill_repo.update(updated)
        logger.info("Bill updated: id=%s number=%s total=%s", updated.id, updated.bill_number, updated.grand_total)

        self._generate_pdf(updated, merchant_name)
        return updated

    def _record_stock_sales(self, bill: CustomerBill) -> None:
        if self.inventory is None:
            return
        for item in bill.items:
            if item.inventory_item_id is None:
                continue
            try:
                self.inventory.record_sale(item.inventory_item_id, item.quantity)
            except Exception:
                logger.exception("Failed to update inventory for item %s on bill %s", item.name, bill.bill_number)

    def _publish(self, bill: CustomerBill, merchant_name: str) -> None:
        self._generate_pdf(bill, merchant_name)
        try:
            self.send_whatsapp(bill)
        except Exception:
            logger.exception("WhatsApp delivery failed for bill %s", bill.bill_number)

    def _generate_pdf(self, bill: CustomerBill, merchant_name: str = "") -> None:
        if self.storage is None:
            return
        try:
            pdf_bytes = self.pdf_generator.generate(bill, merchant_name)
            key = _storage_key(bill.affiliate_id, bill.bill_number)
            path = self.storage.save(key, pdf_bytes)
        except Exception:
            logger.exception("PDF generation failed for bill %s", bill.bill_number)
            return
        if bill.id is None:
            raise ValueError("Cannot update pdf_path for bill without an id")
        self.bill_repo.update_pdf_path(bill.id, path)
        bill.pdf_path = path
        logger.info("PDF stored at %s for bill %s", key, bill.bill_number)

    def send_whatsapp(self, bill: CustomerBill) -> CustomerBill:
        """Record the bill as delivered. No message is sent yet."""
        if bill.id is None:
            raise ValueError("Cannot send bill without an id")
        sent_at = datetime.now(LOCAL_TZ)
        self.bill_repo.mark_whatsapp_sent(bill.id, sent_at)
        bill.whatsapp_sent = True
        bill.whatsapp_sent_at = sent_at
        logger.info("Bill %s marked as sent to %s", bill.bill_number, bill.customer_phone_number)
        return bill

    def get_bill(self, affiliate_id: int, bill_id: int) -> CustomerBill | None:
        bill = self.bill_repo.get_by_id(bill_id)
        if bill is not None and bill.affiliate_id != affiliate_id:
            bill = None
        logger.debug("get_bill id=%s affiliate=%s found=%s", bill_id, affiliate_id, bill is not None)
        return bill

    def get_bill_by_number(self, bill_number: str) -> CustomerBill | None:
        return self.bill_repo.get_by_number(bill_number)

    def get_breakdown(self, bill: CustomerBill) -> BillBreakdown:
        return build_breakdown(bill)

    def list_bills(
        self,
        affiliate_id: int,
        page: int = 1,
        limit: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        status: BillStatus | None = None,
        customer_phone: str = "",
    ) -> BillPage:
        page = max(page, 1)
        limit = limit or settings.page_size
        bills = self.bill_repo.list_by_affiliate(
            affiliate_id,
            limit=limit,
            offset=(page - 1) * limit,
            start=start,
            end=end,
            status=status,
            customer_phone=customer_phone,
        )
        total = self.bill_repo.count_by_affiliate(
            affiliate_id, start=start, end=end, status=status, customer_phone=customer_phone
        )
        logger.debug("Listed %d of %d bills for affiliate=%s", len(bills), total, affiliate_id)
        return BillPage(
            bills=bills,
            current_page=page,
            total_pages=math.ceil(total / limit),
            total_bills=total,
        )

    def list_customer_bills(self, phone_number: str) -> list[CustomerBill]:
        return self.bill_repo.list_by_customer(phone_number.strip())

    def get_customer_bill(self, phone_number: str, bill_id: int) -> CustomerBill | None:
        """A single bill, only when it was issued to ``phone_number``."""
        bill = self.bill_repo.get_by_id(bill_id)
        if bill is not None and bill.customer_phone_number != phone_number.strip():
            logger.warning("Bill %s requested by another customer", bill_id)
            return None
        return bill

    def mark_paid(self, bill: CustomerBill, payment_method: PaymentMethod) -> CustomerBill:
        if bill.id is None:
            raise ValueError("Cannot mark bill without an id as paid")
        if bill.status == BillStatus.CANCELLED:
            raise ValueError("Cannot mark a cancelled bill as paid")
        paid_at = datetime.now(LOCAL_TZ)
        self.bill_repo.update_status(bill.id, BillStatus.PAID, payment_method=payment_method, paid_at=paid_at)
        bill.status = BillStatus.PAID
        bill.payment_method = payment_method
        bill.paid_at = paid_at
        logger.info("Bill %s marked as paid via %s", bill.bill_number, payment_method.value)
        return bill

    def cancel_bill(self, bill: CustomerBill) -> CustomerBill:
        if bill.id is None:
            raise ValueError("Cannot cancel bill without an id")
        self.bill_repo.update_status(bill.id, BillStatus.CANCELLED)
        bill.status = BillStatus.CANCELLED
        bill.paid_at = None
        logger.info("Bill %s cancelled", bill.bill_number)
        return bill
