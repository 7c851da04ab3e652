"""Domain errors raised by the bill engine and the inventory service.

Every error rejects the whole operation; nothing is retried internally.
The web layer maps them to HTTP responses.
"""

from __future__ import annotations

from decimal import Decimal


class BillError(Exception):
    """Base class for bill computation and validation errors."""

    code = "bill_error"


class InvalidLineItem(BillError):
    code = "invalid_line_item"

    def __init__(self, position: int, reason: str) -> None:
        self.position = position
        self.reason = reason
        super().__init__(f"Item {position}: {reason}")


class EmptyBillError(BillError):
    code = "empty_bill"

    def __init__(self, message: str = "At least one item is required for bill creation") -> None:
        super().__init__(message)


class BillNumberGenerationError(BillError):
    code = "bill_number_generation_failed"

    def __init__(self, message: str = "Bill number generation failed") -> None:
        super().__init__(message)


class InvalidTotalsError(BillError):
    """Derived totals broke the non-negativity invariant. Indicates an engine bug."""

    code = "invalid_totals"

    def __init__(self, field: str, value: Decimal) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field} calculated: {value}")


class InvalidDiscountError(BillError):
    code = "invalid_discount"

    def __init__(self, value: Decimal, message: str = "Additional discount cannot be negative") -> None:
        self.value = value
        super().__init__(message)


class InventoryError(Exception):
    """Base class for inventory errors."""

    code = "inventory_error"


class InventoryItemNotFoundError(InventoryError):
    code = "inventory_item_not_found"

    def __init__(self, item_name: str) -> None:
        self.item_name = item_name
        super().__init__(f'Item "{item_name}" not found in inventory')


class InsufficientStockError(InventoryError):
    code = "insufficient_stock"

    def __init__(self, item_name: str, available: Decimal, requested: Decimal, unit: str = "pcs") -> None:
        self.item_name = item_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {item_name}. Available: {available} {unit}, Requested: {requested}"
        )


class DuplicateInventoryItemError(InventoryError):
    code = "duplicate_inventory_item"

    def __init__(self, item_name: str) -> None:
        self.item_name = item_name
        super().__init__(f'Item "{item_name}" already exists')


class StockRemainingError(InventoryError):
    code = "stock_remaining"

    def __init__(self, item_name: str, available: Decimal, unit: str) -> None:
        self.item_name = item_name
        self.available = available
        super().__init__(
            f'Cannot delete item "{item_name}" because it has {available} {unit} in stock. '
            "Please reduce stock to 0 before deleting."
        )


class InvalidManualBillError(BillError):
    code = "invalid_manual_bill"
