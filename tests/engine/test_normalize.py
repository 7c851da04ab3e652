from decimal import Decimal

import pytest

from billdesk.engine.normalize import normalize_and_validate
from billdesk.engine.validation import validate_bill
from billdesk.exceptions import BillNumberGenerationError, EmptyBillError, InvalidLineItem, InvalidTotalsError
from billdesk.models.customer_bill import CustomerBill, LineItem


def _raw_bill(**overrides) -> CustomerBill:
    defaults = dict(
        bill_number="BILL202506150001",
        affiliate_id=1,
        customer_phone_number="9876543210",
        items=[
            LineItem(name="Shirt", quantity=Decimal("2"), unit_price=Decimal("500"), discount=Decimal("50")),
            LineItem(name="Trousers", quantity=Decimal("1"), unit_price=Decimal("1000")),
        ],
        additional_discount=Decimal("100"),
    )
    defaults.update(overrides)
    return CustomerBill(**defaults)


class TestNormalizeAndValidate:
    def test_rebuilds_all_computed_fields(self):
        bill = _raw_bill(subtotal=Decimal("1"), grand_total=Decimal("99999"))
        result = normalize_and_validate(bill)
        assert result.subtotal == Decimal("2000.00")
        assert result.item_discount_total == Decimal("50.00")
        assert result.grand_total == Decimal("1850.00")
        assert [item.net_amount for item in result.items] == [Decimal("950.00"), Decimal("1000.00")]

    def test_input_not_mutated(self):
        bill = _raw_bill()
        normalize_and_validate(bill)
        assert bill.subtotal == Decimal("0")
        assert bill.items[0].net_amount == Decimal("0")

    def test_idempotent(self):
        once = normalize_and_validate(_raw_bill())
        twice = normalize_and_validate(once)
        assert twice.model_dump() == once.model_dump()

    def test_total_identity(self, sample_bill):
        result = normalize_and_validate(sample_bill())
        assert result.grand_total == max(
            Decimal("0"), result.subtotal - result.item_discount_total - result.additional_discount
        )

    def test_edited_item_recomputes_from_scratch(self):
        bill = normalize_and_validate(_raw_bill())
        items = [item.model_copy() for item in bill.items]
        items[0].quantity = Decimal("3")
        result = normalize_and_validate(bill.model_copy(update={"items": items}))
        assert result.subtotal == Decimal("2500.00")
        assert result.grand_total == Decimal("2350.00")
        assert result.bill_number == bill.bill_number

    def test_missing_bill_number_rejected(self):
        with pytest.raises(BillNumberGenerationError):
            normalize_and_validate(_raw_bill(bill_number=""))

    def test_empty_items_rejected(self):
        with pytest.raises(EmptyBillError):
            normalize_and_validate(_raw_bill(items=[]))

    def test_invalid_item_rejected(self):
        items = [LineItem(name="Shirt", quantity=Decimal("0"), unit_price=Decimal("5"))]
        with pytest.raises(InvalidLineItem):
            normalize_and_validate(_raw_bill(items=items))


class TestValidateBill:
    def test_valid_bill_passes(self, sample_bill):
        validate_bill(sample_bill())

    def test_checks_items_before_bill_number(self, sample_bill):
        with pytest.raises(EmptyBillError):
            validate_bill(sample_bill(items=[], bill_number=""))

    def test_negative_subtotal(self, sample_bill):
        with pytest.raises(InvalidTotalsError, match="Invalid subtotal calculated"):
            validate_bill(sample_bill(subtotal=Decimal("-1")))

    def test_negative_grand_total(self, sample_bill):
        with pytest.raises(InvalidTotalsError) as exc_info:
            validate_bill(sample_bill(grand_total=Decimal("-0.01")))
        assert exc_info.value.field == "grand total"
