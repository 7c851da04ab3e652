"""Request bodies for the JSON API.

Item fields are deliberately loose (``Any``): the bill engine does the numeric
coercion and reports bad values per item position.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator

from billdesk.constants import PHONE_PATTERN
from billdesk.models.customer_bill import PaymentMethod


class BillItemIn(BaseModel):
    name: Any = None
    quantity: Any = None
    unit_price: Any = None
    discount: Any = 0
    inventory_item_id: int | None = None


class BillCreate(BaseModel):
    customer_phone_number: str = Field(pattern=PHONE_PATTERN)
    customer_name: str = ""
    items: list[BillItemIn]
    additional_discount: Any = 0
    remarks: str = ""
    payment_method: PaymentMethod = PaymentMethod.PENDING
    merchant_name: str = ""

    @field_validator("customer_phone_number", mode="before")
    @classmethod
    def strip_phone(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class BillUpdate(BaseModel):
    items: list[BillItemIn]
    additional_discount: Any = 0
    remarks: str | None = None
    customer_name: str | None = None
    merchant_name: str = ""


class BillPayment(BaseModel):
    payment_method: PaymentMethod


class InventoryItemCreate(BaseModel):
    item_name: str
    unit_price: Decimal
    available_quantity: Decimal = Decimal("0")
    item_description: str = ""
    category: str = ""
    minimum_stock_level: Decimal | None = None
    unit: str = ""
    sku: str = ""


class InventoryItemUpdate(BaseModel):
    item_description: str | None = None
    category: str | None = None
    unit_price: Decimal | None = None
    available_quantity: Decimal | None = None
    minimum_stock_level: Decimal | None = None
    unit: str | None = None
    sku: str | None = None


class ManualBillCreate(BaseModel):
    device_name: str
    device_number: str
    device_cost: Decimal
    remarks: str = ""
    image_uri: str | None = None
    category: str = ""
    submitted_at: datetime | None = None


class ManualBillUpdate(BaseModel):
    device_name: str | None = None
    device_number: str | None = None
    device_cost: Decimal | None = None
    remarks: str | None = None
    image_uri: str | None = None
    category: str | None = None
    submitted_at: datetime | None = None
