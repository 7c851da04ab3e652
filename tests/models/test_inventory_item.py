from decimal import Decimal

from billdesk.models.customer_bill import CustomerBill


class TestInventoryItem:
    def test_low_stock_at_minimum(self, sample_inventory_item):
        item = sample_inventory_item(available_quantity=Decimal("5"), minimum_stock_level=Decimal("5"))
        assert item.is_low_stock

    def test_not_low_stock_above_minimum(self, sample_inventory_item):
        assert not sample_inventory_item().is_low_stock

    def test_stock_value(self, sample_inventory_item):
        assert sample_inventory_item().stock_value == Decimal("10000.00")


class TestCustomerBill:
    def test_total_discounts(self, sample_bill):
        assert sample_bill().total_discounts == Decimal("150.00")

    def test_defaults(self):
        bill = CustomerBill(affiliate_id=1, customer_phone_number="9876543210")
        assert bill.status.value == "draft"
        assert bill.payment_method.value == "pending"
        assert bill.items == []
