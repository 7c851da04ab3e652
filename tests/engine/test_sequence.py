from datetime import date, datetime
from unittest.mock import MagicMock

import pytest

from billdesk.constants import LOCAL_TZ
from billdesk.engine.sequence import BillNumberAllocator, day_key, format_bill_number
from billdesk.exceptions import BillNumberGenerationError
from billdesk.repositories.sqlalchemy import SQLAlchemyBillSequenceRepository


class TestFormatBillNumber:
    def test_format(self):
        assert format_bill_number(date(2025, 6, 15), 3) == "BILL202506150003"

    def test_custom_prefix(self):
        assert format_bill_number(date(2025, 1, 2), 42, prefix="INV") == "INV202501020042"

    def test_day_key(self):
        assert day_key(date(2025, 6, 15)) == "20250615"


class TestBillNumberAllocator:
    def setup_method(self):
        self.counter = MagicMock()
        self.allocator = BillNumberAllocator(
            self.counter,
            clock=lambda: datetime(2025, 6, 15, 9, 0, tzinfo=LOCAL_TZ),
        )

    def test_uses_counter(self):
        self.counter.next_value.return_value = 3
        assert self.allocator.allocate() == "BILL202506150003"
        self.counter.next_value.assert_called_once_with("20250615")

    def test_fallback_on_counter_failure(self):
        self.counter.next_value.side_effect = RuntimeError("db down")
        number = self.allocator.allocate(date(2025, 6, 15))
        assert number.startswith("BILL20250615")
        assert len(number) == 16
        assert number[-4:].isdigit()

    def test_fallback_disabled_raises(self):
        self.counter.next_value.side_effect = RuntimeError("db down")
        allocator = BillNumberAllocator(self.counter, fallback_enabled=False)
        with pytest.raises(BillNumberGenerationError):
            allocator.allocate(date(2025, 6, 15))

    def test_assign_uses_bill_date(self, sample_bill):
        self.counter.next_value.return_value = 1
        bill = sample_bill(bill_number="", bill_date=datetime(2025, 3, 1, 23, 0, tzinfo=LOCAL_TZ))
        self.allocator.assign(bill)
        assert bill.bill_number == "BILL202503010001"

    def test_assign_never_overwrites(self, sample_bill):
        bill = sample_bill(bill_number="BILL202506150001")
        self.allocator.assign(bill)
        assert bill.bill_number == "BILL202506150001"
        self.counter.next_value.assert_not_called()


class TestAllocatorWithCounterTable:
    def test_third_bill_of_the_day(self, db_connection):
        allocator = BillNumberAllocator(SQLAlchemyBillSequenceRepository(db_connection))
        day = date(2025, 6, 15)
        numbers = [allocator.allocate(day) for _ in range(3)]
        assert numbers == ["BILL202506150001", "BILL202506150002", "BILL202506150003"]

    def test_counter_is_per_day(self, db_connection):
        allocator = BillNumberAllocator(SQLAlchemyBillSequenceRepository(db_connection))
        allocator.allocate(date(2025, 6, 15))
        assert allocator.allocate(date(2025, 6, 16)) == "BILL202506160001"
