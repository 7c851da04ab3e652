"""Line-item normalization: coercion, validation and net amount per item."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation, Overflow
from typing import Any, NamedTuple

from billdesk.exceptions import InvalidLineItem
from billdesk.models import money
from billdesk.models.customer_bill import LineItem

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
# Largest gross or discount accepted on one item, in rupees.
MAX_AMOUNT = Decimal("1e15")

# Accepted spellings for each field of a raw item mapping.
_FIELD_ALIASES = {
    "name": ("name", "item_name", "itemName"),
    "quantity": ("quantity",),
    "unit_price": ("unit_price", "unitPrice"),
    "discount": ("discount",),
    "inventory_item_id": ("inventory_item_id", "inventoryItemId"),
}


class NormalizedLine(NamedTuple):
    item: LineItem
    gross: Decimal
    discount: Decimal


def to_decimal(value: Any) -> Decimal:
    """Coerce user input to Decimal; anything non-numeric becomes 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO
    if not result.is_finite():
        return ZERO
    return result


def _field(raw: Mapping[str, Any], field: str) -> Any:
    for key in _FIELD_ALIASES[field]:
        if key in raw:
            return raw[key]
    return None


def normalize_line_item(raw: LineItem | Mapping[str, Any], position: int) -> NormalizedLine:
    """Validate one item and compute its net amount.

    ``position`` is 1-based and is reported in ``InvalidLineItem``. Any
    ``net_amount`` on the input is ignored.
    """
    if isinstance(raw, LineItem):
        data: Mapping[str, Any] = raw.model_dump()
    else:
        data = raw

    name = str(_field(data, "name") or "").strip()
    quantity = to_decimal(_field(data, "quantity"))
    unit_price = to_decimal(_field(data, "unit_price"))
    discount = to_decimal(_field(data, "discount"))

    if not name:
        raise InvalidLineItem(position, "Item name is required")
    if quantity <= 0:
        raise InvalidLineItem(position, "Quantity must be greater than 0")
    if unit_price < 0:
        raise InvalidLineItem(position, "Unit price cannot be negative")
    if discount < 0:
        raise InvalidLineItem(position, "Discount cannot be negative")

    # unit_price keeps its input precision; only derived amounts are rounded.
    try:
        gross = money(quantity * unit_price)
        discount = money(discount)
    except (InvalidOperation, Overflow):
        raise InvalidLineItem(position, "Amount is too large") from None
    if gross > MAX_AMOUNT or discount > MAX_AMOUNT:
        raise InvalidLineItem(position, "Amount is too large")
    net = max(ZERO, gross - discount)

    item = LineItem(
        id=data.get("id"),
        bill_id=data.get("bill_id"),
        name=name,
        quantity=quantity,
        unit_price=unit_price,
        discount=discount,
        net_amount=money(net),
        inventory_item_id=_field(data, "inventory_item_id") or None,
        sort_order=position - 1,
    )
    logger.debug("Item %d normalized: gross=%s discount=%s net=%s", position, gross, discount, item.net_amount)
    return NormalizedLine(item=item, gross=gross, discount=discount)
