from __future__ import annotations

import logging

from billdesk.engine.totals import aggregate
from billdesk.engine.validation import validate_bill
from billdesk.models.customer_bill import CustomerBill

logger = logging.getLogger(__name__)


def normalize_and_validate(bill: CustomerBill) -> CustomerBill:
    """Return a copy of ``bill`` with every computed field rebuilt, ready to persist.

    Item net amounts, subtotal, item discount total and grand total are
    recomputed from scratch on each call. ``bill`` itself is left untouched,
    so a failed pass leaves nothing half-updated.
    """
    totals = aggregate(bill.items, bill.additional_discount)
    normalized = bill.model_copy(
        update={
            "items": totals.items,
            "subtotal": totals.subtotal,
            "item_discount_total": totals.item_discount_total,
            "additional_discount": totals.additional_discount,
            "grand_total": totals.grand_total,
        },
        deep=True,
    )
    validate_bill(normalized)
    logger.debug("Bill %s normalized: total=%s", normalized.bill_number, normalized.grand_total)
    return normalized
