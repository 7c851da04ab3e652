from __future__ import annotations

import logging

from billdesk.exceptions import BillNumberGenerationError, EmptyBillError, InvalidTotalsError
from billdesk.models.customer_bill import CustomerBill

logger = logging.getLogger(__name__)


def validate_bill(bill: CustomerBill) -> None:
    """Raise if the bill is not fit to persist. Checks run in order and stop at the first failure."""
    if not bill.items:
        raise EmptyBillError()
    if not bill.bill_number:
        raise BillNumberGenerationError()
    if bill.subtotal < 0:
        logger.error("Negative subtotal on bill %s: %s", bill.bill_number, bill.subtotal)
        raise InvalidTotalsError("subtotal", bill.subtotal)
    if bill.grand_total < 0:
        logger.error("Negative grand total on bill %s: %s", bill.bill_number, bill.grand_total)
        raise InvalidTotalsError("grand total", bill.grand_total)
