from datetime import datetime
from decimal import Decimal

from billdesk.constants import LOCAL_TZ
from billdesk.models.manual_bill import ManualBill, ManualBillCategory


def _manual_bill(affiliate_id: int = 1, **overrides) -> ManualBill:
    defaults = dict(
        affiliate_id=affiliate_id,
        device_name="Router",
        device_number="RT-100",
        device_cost=Decimal("2499.50"),
        remarks="Office wifi",
        category=ManualBillCategory.ELECTRONICS,
        submitted_at=datetime(2025, 6, 15, 10, 0, tzinfo=LOCAL_TZ),
    )
    defaults.update(overrides)
    return ManualBill(**defaults)


class TestManualBillRepository:
    def test_create_and_get(self, manual_bill_repo):
        bill = manual_bill_repo.create(_manual_bill(image_uri="file:///receipts/1.jpg"))
        assert bill.id is not None
        assert len(bill.uuid) == 26
        assert bill.device_cost == Decimal("2499.50")
        assert bill.category == ManualBillCategory.ELECTRONICS
        assert bill.image_uri == "file:///receipts/1.jpg"
        assert bill.submitted_at == datetime(2025, 6, 15, 10, 0, tzinfo=LOCAL_TZ)
        assert manual_bill_repo.get_by_id(bill.id).device_name == "Router"

    def test_get_missing(self, manual_bill_repo):
        assert manual_bill_repo.get_by_id(999) is None

    def test_list_newest_first_per_affiliate(self, manual_bill_repo):
        first = manual_bill_repo.create(_manual_bill())
        second = manual_bill_repo.create(_manual_bill(device_name="Laptop"))
        manual_bill_repo.create(_manual_bill(affiliate_id=2))
        assert [b.id for b in manual_bill_repo.list_by_affiliate(1)] == [second.id, first.id]

    def test_list_filters(self, manual_bill_repo):
        manual_bill_repo.create(_manual_bill())
        manual_bill_repo.create(
            _manual_bill(
                device_name="Electricity",
                device_number="EB-7",
                remarks="June meter",
                category=ManualBillCategory.UTILITIES,
                submitted_at=datetime(2025, 7, 2, 9, 0, tzinfo=LOCAL_TZ),
            )
        )

        assert [b.device_name for b in manual_bill_repo.list_by_affiliate(1, query="METER")] == ["Electricity"]
        assert [b.device_name for b in manual_bill_repo.list_by_affiliate(1, query="rt-1")] == ["Router"]
        utilities = manual_bill_repo.list_by_affiliate(1, category=ManualBillCategory.UTILITIES)
        assert [b.device_name for b in utilities] == ["Electricity"]
        june = manual_bill_repo.list_by_affiliate(
            1,
            start=datetime(2025, 6, 1, tzinfo=LOCAL_TZ),
            end=datetime(2025, 6, 30, 23, 59, tzinfo=LOCAL_TZ),
        )
        assert [b.device_name for b in june] == ["Router"]

    def test_update(self, manual_bill_repo):
        bill = manual_bill_repo.create(_manual_bill())
        updated = manual_bill_repo.update(
            bill.model_copy(update={"device_cost": Decimal("1999.00"), "category": ManualBillCategory.OTHER})
        )
        assert updated.device_cost == Decimal("1999.00")
        assert updated.category == ManualBillCategory.OTHER
        assert updated.device_name == "Router"

    def test_delete(self, manual_bill_repo):
        bill = manual_bill_repo.create(_manual_bill())
        manual_bill_repo.delete(bill.id)
        assert manual_bill_repo.get_by_id(bill.id) is None
