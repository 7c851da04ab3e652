"""Sales and discount reports over an affiliate's bills.

Cancelled bills never count. Aggregation happens in Python over the bills
of the requested period, so the reports behave the same on every database.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel

from billdesk.constants import LOCAL_TZ, RECENT_BILLS_LIMIT
from billdesk.models import money
from billdesk.models.customer_bill import CustomerBill
from billdesk.models.inventory import InventoryItem
from billdesk.repositories.base import CustomerBillRepository
from billdesk.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class GroupBy(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class SalesSummary(BaseModel):
    total_bills: int = 0
    total_revenue: Decimal = ZERO
    total_item_discounts: Decimal = ZERO
    total_additional_discounts: Decimal = ZERO
    total_discounts: Decimal = ZERO


class SalesPeriod(SalesSummary):
    period: str
    unique_customer_count: int = 0


class ItemDiscountStats(BaseModel):
    item_name: str
    total_quantity_sold: Decimal
    total_gross_revenue: Decimal
    total_item_discounts: Decimal
    average_discount: Decimal
    bill_count: int


class InventoryStats(BaseModel):
    total_items: int = 0
    total_value: Decimal = ZERO
    low_stock_items: int = 0


class Dashboard(BaseModel):
    sales_summary: SalesSummary
    inventory_stats: InventoryStats
    recent_bills: list[CustomerBill]
    low_stock_items: list[InventoryItem]
    period: int


def _local(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=LOCAL_TZ)
    return moment.astimezone(LOCAL_TZ)


def _period_label(moment: datetime, group_by: GroupBy) -> str:
    if group_by == GroupBy.MONTH:
        return f"{moment:%Y-%m}"
    if group_by == GroupBy.WEEK:
        # Sunday-based week number, 00-53
        return f"{moment:%Y-W%U}"
    return f"{moment:%Y-%m-%d}"


def summarize(bills: list[CustomerBill]) -> SalesSummary:
    summary = SalesSummary()
    for bill in bills:
        summary.total_bills += 1
        summary.total_revenue += bill.grand_total
        summary.total_item_discounts += bill.item_discount_total
        summary.total_additional_discounts += bill.additional_discount
    summary.total_discounts = summary.total_item_discounts + summary.total_additional_discounts
    return summary


class ReportService:
    def __init__(self, bill_repo: CustomerBillRepository, inventory: InventoryService | None = None) -> None:
        self.bill_repo = bill_repo
        self.inventory = inventory

    def sales_summary(
        self, affiliate_id: int, start: datetime | None = None, end: datetime | None = None
    ) -> SalesSummary:
        return summarize(self.bill_repo.list_for_period(affiliate_id, start, end))

    def sales_report(
        self,
        affiliate_id: int,
        start: datetime,
        end: datetime,
        group_by: GroupBy = GroupBy.DAY,
    ) -> list[SalesPeriod]:
        grouped: dict[str, list[CustomerBill]] = defaultdict(list)
        for bill in self.bill_repo.list_for_period(affiliate_id, start, end):
            moment = _local(bill.bill_date or bill.created_at or datetime.now(LOCAL_TZ))
            grouped[_period_label(moment, group_by)].append(bill)

        report = []
        for label in sorted(grouped):
            bills = grouped[label]
            report.append(
                SalesPeriod(
                    period=label,
                    unique_customer_count=len({bill.customer_phone_number for bill in bills}),
                    **summarize(bills).model_dump(),
                )
            )
        logger.debug("Sales report for affiliate=%s: %d periods by %s", affiliate_id, len(report), group_by.value)
        return report

    def discount_analysis(
        self, affiliate_id: int, start: datetime | None = None, end: datetime | None = None
    ) -> list[ItemDiscountStats]:
        quantity: dict[str, Decimal] = defaultdict(Decimal)
        gross: dict[str, Decimal] = defaultdict(Decimal)
        discounts: dict[str, Decimal] = defaultdict(Decimal)
        lines: dict[str, int] = defaultdict(int)

        for bill in self.bill_repo.list_for_period(affiliate_id, start, end):
            for item in bill.items:
                quantity[item.name] += item.quantity
                gross[item.name] += item.gross_amount
                discounts[item.name] += item.discount
                lines[item.name] += 1

        stats = [
            ItemDiscountStats(
                item_name=name,
                total_quantity_sold=quantity[name],
                total_gross_revenue=money(gross[name]),
                total_item_discounts=discounts[name],
                average_discount=money(discounts[name] / lines[name]),
                bill_count=lines[name],
            )
            for name in lines
        ]
        return sorted(stats, key=lambda s: s.total_gross_revenue, reverse=True)

    def inventory_stats(self, affiliate_id: int) -> InventoryStats:
        if self.inventory is None:
            return InventoryStats()
        items = self.inventory.list_items(affiliate_id)
        return InventoryStats(
            total_items=len(items),
            total_value=money(sum((item.stock_value for item in items), ZERO)),
            low_stock_items=sum(1 for item in items if item.is_low_stock),
        )

    def dashboard(self, affiliate_id: int, period_days: int = 30) -> Dashboard:
        now = datetime.now(LOCAL_TZ)
        start = now - timedelta(days=period_days)
        recent = self.bill_repo.list_by_affiliate(affiliate_id, limit=RECENT_BILLS_LIMIT)
        low_stock = self.inventory.low_stock_items(affiliate_id) if self.inventory is not None else []
        return Dashboard(
            sales_summary=self.sales_summary(affiliate_id, start, now),
            inventory_stats=self.inventory_stats(affiliate_id),
            recent_bills=recent,
            low_stock_items=low_stock,
            period=period_days,
        )
