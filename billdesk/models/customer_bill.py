from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel


class BillStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    BANK_TRANSFER = "bank_transfer"
    PENDING = "pending"


class LineItem(BaseModel):
    id: int | None = None
    bill_id: int | None = None
    name: str
    quantity: Decimal
    unit_price: Decimal
    discount: Decimal = Decimal("0")
    net_amount: Decimal = Decimal("0")  # always recomputed
    inventory_item_id: int | None = None
    sort_order: int = 0

    @property
    def gross_amount(self) -> Decimal:
        return self.quantity * self.unit_price


class CustomerBill(BaseModel):
    id: int | None = None
    uuid: str = ""
    bill_number: str = ""
    affiliate_id: int
    customer_phone_number: str
    customer_name: str = ""
    items: list[LineItem] = []
    subtotal: Decimal = Decimal("0")
    item_discount_total: Decimal = Decimal("0")
    additional_discount: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")
    remarks: str = ""
    status: BillStatus = BillStatus.DRAFT
    payment_method: PaymentMethod = PaymentMethod.PENDING
    whatsapp_sent: bool = False
    whatsapp_sent_at: datetime | None = None
    pdf_path: str = ""
    paid_at: datetime | None = None
    bill_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def total_discounts(self) -> Decimal:
        return self.item_discount_total + self.additional_discount


class ItemBreakdown(BaseModel):
    name: str
    quantity: Decimal
    unit_price: Decimal
    gross_amount: Decimal
    discount: Decimal
    net_amount: Decimal


class BillBreakdown(BaseModel):
    items: list[ItemBreakdown]
    subtotal: Decimal
    item_discount_total: Decimal
    additional_discount: Decimal
    total_discounts: Decimal
    grand_total: Decimal


class BillPage(BaseModel):
    bills: list[CustomerBill]
    current_page: int
    total_pages: int
    total_bills: int
