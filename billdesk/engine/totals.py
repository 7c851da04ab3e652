"""Bill-level aggregation of normalized line items."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from billdesk.engine.line_items import MAX_AMOUNT, ZERO, normalize_line_item, to_decimal
from billdesk.exceptions import EmptyBillError, InvalidDiscountError
from billdesk.models import money
from billdesk.models.customer_bill import LineItem

logger = logging.getLogger(__name__)


class BillTotals(BaseModel):
    items: list[LineItem]
    subtotal: Decimal
    item_discount_total: Decimal
    additional_discount: Decimal
    grand_total: Decimal


def normalize_additional_discount(value: Any) -> Decimal:
    discount = to_decimal(value)
    if discount < 0:
        raise InvalidDiscountError(discount)
    if discount > MAX_AMOUNT:
        raise InvalidDiscountError(discount, "Additional discount is too large")
    return money(discount)


def aggregate(
    raw_items: Sequence[LineItem | Mapping[str, Any]],
    additional_discount: Any = 0,
) -> BillTotals:
    """Normalize every item and fold them into the bill totals.

    Negative results are clamped to zero independently at the item level and
    at the bill level, so a bill whose discounts exceed its gross amount has
    a grand total of zero.
    """
    if not raw_items:
        raise EmptyBillError()

    extra = normalize_additional_discount(additional_discount)

    items: list[LineItem] = []
    subtotal = ZERO
    item_discounts = ZERO
    for position, raw in enumerate(raw_items, start=1):
        line = normalize_line_item(raw, position)
        items.append(line.item)
        subtotal += line.gross
        item_discounts += line.discount

    grand_total = max(ZERO, subtotal - item_discounts - extra)

    totals = BillTotals(
        items=items,
        subtotal=money(subtotal),
        item_discount_total=money(item_discounts),
        additional_discount=extra,
        grand_total=money(grand_total),
    )
    logger.debug(
        "Bill totals: items=%d subtotal=%s item_discounts=%s additional=%s total=%s",
        len(items),
        totals.subtotal,
        totals.item_discount_total,
        totals.additional_discount,
        totals.grand_total,
    )
    return totals
