from __future__ import annotations

from billdesk.models import money
from billdesk.models.customer_bill import BillBreakdown, CustomerBill, ItemBreakdown


def build_breakdown(bill: CustomerBill) -> BillBreakdown:
    """Display decomposition of a stored bill. Net amounts are read as stored."""
    return BillBreakdown(
        items=[
            ItemBreakdown(
                name=item.name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                gross_amount=money(item.gross_amount),
                discount=item.discount,
                net_amount=item.net_amount,
            )
            for item in bill.items
        ],
        subtotal=bill.subtotal,
        item_discount_total=bill.item_discount_total,
        additional_discount=bill.additional_discount,
        total_discounts=bill.total_discounts,
        grand_total=bill.grand_total,
    )
