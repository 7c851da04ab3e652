from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel


class ManualBillCategory(str, Enum):
    GENERAL = "General"
    ELECTRONICS = "Electronics"
    UTILITIES = "Utilities"
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    HEALTHCARE = "Healthcare"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    SERVICES = "Services"
    OTHER = "Other"


class ManualBill(BaseModel):
    """A bill the affiliate typed in by hand: a device, its number and what it cost."""

    id: int | None = None
    uuid: str = ""
    affiliate_id: int
    device_name: str
    device_number: str
    device_cost: Decimal
    remarks: str = ""
    image_uri: str | None = None
    category: ManualBillCategory = ManualBillCategory.OTHER
    submitted_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ManualBillStats(BaseModel):
    total_bills: int
    total_amount: Decimal
    category_breakdown: dict[str, Decimal]
    monthly_spending: dict[str, Decimal]


DEVICE_NAME_MAX_LENGTH = 200
DEVICE_NUMBER_MAX_LENGTH = 100
REMARKS_MAX_LENGTH = 1000

UPDATABLE_FIELDS = frozenset(
    {"device_name", "device_number", "device_cost", "remarks", "image_uri", "category", "submitted_at"}
)
