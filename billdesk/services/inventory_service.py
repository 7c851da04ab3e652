from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from billdesk.constants import LOCAL_TZ, SEARCH_LIMIT, SEARCH_MIN_LENGTH
from billdesk.exceptions import (
    DuplicateInventoryItemError,
    InsufficientStockError,
    InventoryError,
    InventoryItemNotFoundError,
    StockRemainingError,
)
from billdesk.models.customer_bill import LineItem
from billdesk.models.inventory import UPDATABLE_FIELDS, InventoryItem
from billdesk.repositories.base import InventoryRepository
from billdesk.settings import settings

logger = logging.getLogger(__name__)


class InventoryService:
    def __init__(self, repo: InventoryRepository) -> None:
        self.repo = repo

    def add_item(
        self,
        affiliate_id: int,
        item_name: str,
        unit_price: Decimal,
        available_quantity: Decimal,
        item_description: str = "",
        category: str = "",
        minimum_stock_level: Decimal | None = None,
        unit: str = "",
        sku: str = "",
    ) -> InventoryItem:
        name = item_name.strip()
        if not name:
            raise InventoryError("Item name is required")
        if unit_price < 0 or available_quantity < 0:
            raise InventoryError("Price and quantity cannot be negative")
        if self.repo.get_active_by_name(affiliate_id, name) is not None:
            raise DuplicateInventoryItemError(name)

        if minimum_stock_level is None:
            minimum_stock_level = Decimal(settings.default_minimum_stock_level)
        item = InventoryItem(
            affiliate_id=affiliate_id,
            item_name=name,
            item_description=item_description.strip(),
            category=category.strip() or "General",
            unit_price=unit_price,
            available_quantity=available_quantity,
            minimum_stock_level=minimum_stock_level,
            unit=unit.strip() or "pcs",
            sku=sku.strip(),
        )
        item = self.repo.create(item)
        logger.info("Inventory item created: id=%s affiliate=%s name=%s", item.id, affiliate_id, name)
        return item

    def get_item(self, affiliate_id: int, item_id: int) -> InventoryItem | None:
        item = self.repo.get_by_id(item_id)
        if item is None or item.affiliate_id != affiliate_id:
            return None
        return item

    def update_item(self, item: InventoryItem, **changes) -> InventoryItem:
        """Apply ``changes`` to the updatable fields. The item name cannot change."""
        ignored = set(changes) - UPDATABLE_FIELDS
        if ignored:
            logger.debug("Ignoring non-updatable inventory fields: %s", sorted(ignored))
        updates = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS and v is not None}
        for field in ("unit_price", "available_quantity", "minimum_stock_level"):
            if field in updates and updates[field] < 0:
                raise InventoryError("Price and quantity cannot be negative")
        updated = self.repo.update(item.model_copy(update=updates))
        logger.info("Inventory item updated: id=%s fields=%s", item.id, sorted(updates))
        return updated

    def delete_item(self, item: InventoryItem) -> None:
        if item.available_quantity > 0:
            raise StockRemainingError(item.item_name, item.available_quantity, item.unit)
        if item.id is None:
            raise ValueError("Cannot delete inventory item without an id")
        self.repo.deactivate(item.id)
        logger.info("Inventory item %s soft-deleted", item.id)

    def list_items(
        self,
        affiliate_id: int,
        search: str = "",
        category: str = "",
        low_stock: bool = False,
    ) -> list[InventoryItem]:
        items = self.repo.list_active(affiliate_id, search=search, category=category)
        if low_stock:
            items = [item for item in items if item.is_low_stock]
        logger.debug("Listed %d inventory items for affiliate=%s", len(items), affiliate_id)
        return items

    def search(self, affiliate_id: int, query: str) -> list[InventoryItem]:
        query = query.strip()
        if len(query) < SEARCH_MIN_LENGTH:
            return []
        return self.repo.search(affiliate_id, query, SEARCH_LIMIT)

    def low_stock_items(self, affiliate_id: int) -> list[InventoryItem]:
        items = [item for item in self.repo.list_active(affiliate_id) if item.is_low_stock]
        return sorted(items, key=lambda item: item.available_quantity)

    def check_availability(self, affiliate_id: int, items: Iterable[LineItem]) -> None:
        """Raise unless every inventory-backed item has enough stock.

        Lines pointing at the same inventory item are checked against their
        combined quantity.
        """
        requested: dict[int, Decimal] = {}
        for line in items:
            if line.inventory_item_id is None:
                continue
            total = requested.get(line.inventory_item_id, Decimal("0")) + line.quantity
            requested[line.inventory_item_id] = total

            stock = self.get_item(affiliate_id, line.inventory_item_id)
            if stock is None or not stock.is_active:
                raise InventoryItemNotFoundError(line.name)
            if stock.available_quantity < total:
                raise InsufficientStockError(line.name, stock.available_quantity, total, stock.unit)
            logger.debug(
                "Stock check passed for %s: %s available, %s requested",
                line.name,
                stock.available_quantity,
                total,
            )

    def record_sale(self, item_id: int, quantity: Decimal) -> None:
        self.repo.record_sale(item_id, quantity, datetime.now(LOCAL_TZ))
        logger.info("Stock decremented: item=%s quantity=%s", item_id, quantity)
