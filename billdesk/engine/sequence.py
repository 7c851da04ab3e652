"""Bill number allocation.

Numbers look like ``BILL202506150003``: prefix, local calendar day, and a
4-digit per-day sequence taken from a durable counter row. If the counter
cannot be reached, a random suffix is used instead so bill creation is not
blocked; those numbers are only probabilistically unique.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from datetime import date, datetime

from billdesk.constants import LOCAL_TZ
from billdesk.exceptions import BillNumberGenerationError
from billdesk.models.customer_bill import CustomerBill
from billdesk.repositories.base import BillSequenceRepository

logger = logging.getLogger(__name__)

SEQUENCE_WIDTH = 4


def format_bill_number(day: date, sequence: int, prefix: str = "BILL") -> str:
    return f"{prefix}{day:%Y%m%d}{sequence:0{SEQUENCE_WIDTH}d}"


def day_key(day: date) -> str:
    return f"{day:%Y%m%d}"


class BillNumberAllocator:
    def __init__(
        self,
        counter_repo: BillSequenceRepository,
        prefix: str = "BILL",
        fallback_enabled: bool = True,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.counter_repo = counter_repo
        self.prefix = prefix
        self.fallback_enabled = fallback_enabled
        self.clock = clock or _local_now

    def allocate(self, day: date | None = None) -> str:
        day = day or self.clock().date()
        try:
            sequence = self.counter_repo.next_value(day_key(day))
        except Exception as exc:
            if not self.fallback_enabled:
                logger.error("Bill sequence unavailable for %s and fallback disabled", day_key(day))
                raise BillNumberGenerationError() from exc
            number = format_bill_number(day, random.randint(0, 10**SEQUENCE_WIDTH - 1), self.prefix)
            logger.warning("Bill sequence unavailable for %s, using fallback number %s", day_key(day), number)
            return number
        number = format_bill_number(day, sequence, self.prefix)
        logger.info("Allocated bill number %s", number)
        return number

    def assign(self, bill: CustomerBill) -> CustomerBill:
        """Give ``bill`` a number if it has none. Existing numbers are never replaced."""
        if bill.bill_number:
            return bill
        day = bill.bill_date.date() if bill.bill_date else None
        bill.bill_number = self.allocate(day)
        return bill


def _local_now() -> datetime:
    return datetime.now(LOCAL_TZ)
