from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class InventoryItem(BaseModel):
    id: int | None = None
    affiliate_id: int
    item_name: str
    item_description: str = ""
    category: str = "General"
    unit_price: Decimal
    available_quantity: Decimal = Decimal("0")
    minimum_stock_level: Decimal = Decimal("5")
    unit: str = "pcs"
    sku: str = ""
    total_sold: Decimal = Decimal("0")
    last_sold_at: datetime | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_low_stock(self) -> bool:
        return self.available_quantity <= self.minimum_stock_level

    @property
    def stock_value(self) -> Decimal:
        return self.available_quantity * self.unit_price


UPDATABLE_FIELDS = frozenset(
    {
        "item_description",
        "category",
        "unit_price",
        "available_quantity",
        "minimum_stock_level",
        "unit",
        "sku",
    }
)
