from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Connection, text
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from ulid import ULID

from billdesk.constants import LOCAL_TZ
from billdesk.models import from_paise, to_paise
from billdesk.models.customer_bill import BillStatus, CustomerBill, LineItem, PaymentMethod
from billdesk.models.inventory import InventoryItem
from billdesk.models.manual_bill import ManualBill, ManualBillCategory
from billdesk.repositories.base import (
    BillSequenceRepository,
    CustomerBillRepository,
    InventoryRepository,
    ManualBillRepository,
)


def _now() -> datetime:
    return datetime.now(LOCAL_TZ)


def _local(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=LOCAL_TZ)
    return value.astimezone(LOCAL_TZ)


def _numeric(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


class SQLAlchemyCustomerBillRepository(CustomerBillRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, bill: CustomerBill) -> CustomerBill:
        bill_uuid = str(ULID())
        now = _now()
        result = self.conn.execute(
            text(
                "INSERT INTO customer_bills (uuid, bill_number, affiliate_id, customer_phone_number, "
                "customer_name, subtotal, item_discount_total, additional_discount, grand_total, "
                "remarks, status, payment_method, pdf_path, bill_date, created_at, updated_at) "
                "VALUES (:uuid, :bill_number, :affiliate_id, :customer_phone_number, "
                ":customer_name, :subtotal, :item_discount_total, :additional_discount, :grand_total, "
                ":remarks, :status, :payment_method, :pdf_path, :bill_date, :created_at, :updated_at)"
            ),
            {
                "uuid": bill_uuid,
                "bill_number": bill.bill_number,
                "affiliate_id": bill.affiliate_id,
                "customer_phone_number": bill.customer_phone_number,
                "customer_name": bill.customer_name,
                "subtotal": to_paise(bill.subtotal),
                "item_discount_total": to_paise(bill.item_discount_total),
                "additional_discount": to_paise(bill.additional_discount),
                "grand_total": to_paise(bill.grand_total),
                "remarks": bill.remarks,
                "status": bill.status.value,
                "payment_method": bill.payment_method.value,
                "pdf_path": bill.pdf_path,
                "bill_date": _local(bill.bill_date) or now,
                "created_at": now,
                "updated_at": now,
            },
        )
        bill_id = result.lastrowid
        self._insert_items(bill_id, bill.items)
        self.conn.commit()
        created = self.get_by_id(bill_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve bill after create (id={bill_id})")
        return created

    def _insert_items(self, bill_id: int, items: list[LineItem]) -> None:
        for i, item in enumerate(items):
            self.conn.execute(
                text(
                    "INSERT INTO customer_bill_items (bill_id, name, quantity, unit_price, discount, "
                    "net_amount, inventory_item_id, sort_order) "
                    "VALUES (:bill_id, :name, :quantity, :unit_price, :discount, "
                    ":net_amount, :inventory_item_id, :sort_order)"
                ),
                {
                    "bill_id": bill_id,
                    "name": item.name,
                    "quantity": str(item.quantity),
                    "unit_price": str(item.unit_price),
                    "discount": to_paise(item.discount),
                    "net_amount": to_paise(item.net_amount),
                    "inventory_item_id": item.inventory_item_id,
                    "sort_order": i,
                },
            )

    @staticmethod
    def _build_bill(row: RowMapping, item_rows: list[RowMapping]) -> CustomerBill:
        return CustomerBill(
            id=row["id"],
            uuid=row["uuid"],
            bill_number=row["bill_number"],
            affiliate_id=row["affiliate_id"],
            customer_phone_number=row["customer_phone_number"],
            customer_name=row["customer_name"],
            items=[
                LineItem(
                    id=item_row["id"],
                    bill_id=item_row["bill_id"],
                    name=item_row["name"],
                    quantity=_numeric(item_row["quantity"]),
                    unit_price=_numeric(item_row["unit_price"]),
                    discount=from_paise(item_row["discount"]),
                    net_amount=from_paise(item_row["net_amount"]),
                    inventory_item_id=item_row["inventory_item_id"],
                    sort_order=item_row["sort_order"],
                )
                for item_row in item_rows
            ],
            subtotal=from_paise(row["subtotal"]),
            item_discount_total=from_paise(row["item_discount_total"]),
            additional_discount=from_paise(row["additional_discount"]),
            grand_total=from_paise(row["grand_total"]),
            remarks=row["remarks"],
            status=BillStatus(row["status"]),
            payment_method=PaymentMethod(row["payment_method"]),
            whatsapp_sent=bool(row["whatsapp_sent"]),
            whatsapp_sent_at=row["whatsapp_sent_at"],
            pdf_path=row["pdf_path"],
            paid_at=row["paid_at"],
            bill_date=row["bill_date"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _build_bills_from_rows(self, rows: list[RowMapping]) -> list[CustomerBill]:
        if not rows:
            return []
        bill_ids = [row["id"] for row in rows]
        placeholders = ", ".join(f":id{i}" for i in range(len(bill_ids)))
        params = {f"id{i}": bid for i, bid in enumerate(bill_ids)}
        all_items = (
            self.conn.execute(
                text(f"SELECT * FROM customer_bill_items WHERE bill_id IN ({placeholders}) ORDER BY sort_order"),
                params,
            )
            .mappings()
            .fetchall()
        )
        items_by_bill: dict[int, list[RowMapping]] = {}
        for item_row in all_items:
            items_by_bill.setdefault(item_row["bill_id"], []).append(item_row)
        return [self._build_bill(row, items_by_bill.get(row["id"], [])) for row in rows]

    def _fetch_one(self, where: str, params: dict) -> CustomerBill | None:
        row = self.conn.execute(text(f"SELECT * FROM customer_bills WHERE {where}"), params).mappings().fetchone()
        if row is None:
            return None
        return self._build_bills_from_rows([row])[0]

    def get_by_id(self, bill_id: int) -> CustomerBill | None:
        return self._fetch_one("id = :id", {"id": bill_id})

    def get_by_number(self, bill_number: str) -> CustomerBill | None:
        return self._fetch_one("bill_number = :bill_number", {"bill_number": bill_number})

    @staticmethod
    def _filters(
        affiliate_id: int,
        start: datetime | None,
        end: datetime | None,
        status: BillStatus | None,
        customer_phone: str,
    ) -> tuple[str, dict]:
        clauses = ["affiliate_id = :affiliate_id"]
        params: dict = {"affiliate_id": affiliate_id}
        if start is not None:
            clauses.append("bill_date >= :start")
            params["start"] = _local(start)
        if end is not None:
            clauses.append("bill_date <= :end")
            params["end"] = _local(end)
        if status is not None:
            clauses.append("status = :status")
            params["status"] = status.value
        if customer_phone:
            clauses.append("customer_phone_number LIKE :phone")
            params["phone"] = f"%{customer_phone}%"
        return " AND ".join(clauses), params

    def list_by_affiliate(
        self,
        affiliate_id: int,
        limit: int,
        offset: int = 0,
        start: datetime | None = None,
        end: datetime | None = None,
        status: BillStatus | None = None,
        customer_phone: str = "",
    ) -> list[CustomerBill]:
        where, params = self._filters(affiliate_id, start, end, status, customer_phone)
        params.update({"limit": limit, "offset": offset})
        rows = (
            self.conn.execute(
                text(
                    f"SELECT * FROM customer_bills WHERE {where} "
                    "ORDER BY bill_date DESC, id DESC LIMIT :limit OFFSET :offset"
                ),
                params,
            )
            .mappings()
            .fetchall()
        )
        return self._build_bills_from_rows(list(rows))

    def count_by_affiliate(
        self,
        affiliate_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
        status: BillStatus | None = None,
        customer_phone: str = "",
    ) -> int:
        where, params = self._filters(affiliate_id, start, end, status, customer_phone)
        return self.conn.execute(text(f"SELECT COUNT(*) FROM customer_bills WHERE {where}"), params).scalar_one()

    def list_for_period(
        self, affiliate_id: int, start: datetime | None = None, end: datetime | None = None
    ) -> list[CustomerBill]:
        where, params = self._filters(affiliate_id, start, end, None, "")
        params["cancelled"] = BillStatus.CANCELLED.value
        rows = (
            self.conn.execute(
                text(f"SELECT * FROM customer_bills WHERE {where} AND status != :cancelled ORDER BY bill_date"),
                params,
            )
            .mappings()
            .fetchall()
        )
        return self._build_bills_from_rows(list(rows))

    def list_by_customer(self, phone_number: str) -> list[CustomerBill]:
        rows = (
            self.conn.execute(
                text(
                    "SELECT * FROM customer_bills WHERE customer_phone_number = :phone "
                    "AND status != :cancelled ORDER BY bill_date DESC, id DESC"
                ),
                {"phone": phone_number, "cancelled": BillStatus.CANCELLED.value},
            )
            .mappings()
            .fetchall()
        )
        return self._build_bills_from_rows(list(rows))

    def update(self, bill: CustomerBill) -> CustomerBill:
        if bill.id is None:
            raise ValueError("Cannot update bill without an id")
        # bill_number is deliberately absent: it is fixed at creation.
        self.conn.execute(
            text(
                "UPDATE customer_bills SET customer_name = :customer_name, subtotal = :subtotal, "
                "item_discount_total = :item_discount_total, additional_discount = :additional_discount, "
                "grand_total = :grand_total, remarks = :remarks, updated_at = :updated_at WHERE id = :id"
            ),
            {
                "customer_name": bill.customer_name,
                "subtotal": to_paise(bill.subtotal),
                "item_discount_total": to_paise(bill.item_discount_total),
                "additional_discount": to_paise(bill.additional_discount),
                "grand_total": to_paise(bill.grand_total),
                "remarks": bill.remarks,
                "updated_at": _now(),
                "id": bill.id,
            },
        )
        self.conn.execute(
            text("DELETE FROM customer_bill_items WHERE bill_id = :bill_id"),
            {"bill_id": bill.id},
        )
        self._insert_items(bill.id, bill.items)
        self.conn.commit()
        result = self.get_by_id(bill.id)
        if result is None:
            raise RuntimeError(f"Failed to retrieve bill after update (id={bill.id})")
        return result

    def update_pdf_path(self, bill_id: int, pdf_path: str) -> None:
        self.conn.execute(
            text("UPDATE customer_bills SET pdf_path = :pdf_path WHERE id = :id"),
            {"pdf_path": pdf_path, "id": bill_id},
        )
        self.conn.commit()

    def update_status(
        self,
        bill_id: int,
        status: BillStatus,
        payment_method: PaymentMethod | None = None,
        paid_at: datetime | None = None,
    ) -> None:
        sets = ["status = :status", "paid_at = :paid_at", "updated_at = :updated_at"]
        params = {"status": status.value, "paid_at": _local(paid_at), "updated_at": _now(), "id": bill_id}
        if payment_method is not None:
            sets.append("payment_method = :payment_method")
            params["payment_method"] = payment_method.value
        self.conn.execute(text(f"UPDATE customer_bills SET {', '.join(sets)} WHERE id = :id"), params)
        self.conn.commit()

    def mark_whatsapp_sent(self, bill_id: int, sent_at: datetime) -> None:
        self.conn.execute(
            text("UPDATE customer_bills SET whatsapp_sent = :sent, whatsapp_sent_at = :sent_at WHERE id = :id"),
            {"sent": True, "sent_at": _local(sent_at), "id": bill_id},
        )
        self.conn.commit()


class SQLAlchemyInventoryRepository(InventoryRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_item(row: RowMapping) -> InventoryItem:
        return InventoryItem(
            id=row["id"],
            affiliate_id=row["affiliate_id"],
            item_name=row["item_name"],
            item_description=row["item_description"],
            category=row["category"],
            unit_price=from_paise(row["unit_price"]),
            available_quantity=_numeric(row["available_quantity"]),
            minimum_stock_level=_numeric(row["minimum_stock_level"]),
            unit=row["unit"],
            sku=row["sku"],
            total_sold=_numeric(row["total_sold"]),
            last_sold_at=row["last_sold_at"],
            is_active=bool(row["is_active"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def create(self, item: InventoryItem) -> InventoryItem:
        now = _now()
        result = self.conn.execute(
            text(
                "INSERT INTO inventory_items (affiliate_id, item_name, item_description, category, "
                "unit_price, available_quantity, minimum_stock_level, unit, sku, total_sold, "
                "is_active, created_at, updated_at) "
                "VALUES (:affiliate_id, :item_name, :item_description, :category, "
                ":unit_price, :available_quantity, :minimum_stock_level, :unit, :sku, :total_sold, "
                ":is_active, :created_at, :updated_at)"
            ),
            {
                "affiliate_id": item.affiliate_id,
                "item_name": item.item_name,
                "item_description": item.item_description,
                "category": item.category,
                "unit_price": to_paise(item.unit_price),
                "available_quantity": str(item.available_quantity),
                "minimum_stock_level": str(item.minimum_stock_level),
                "unit": item.unit,
                "sku": item.sku,
                "total_sold": str(item.total_sold),
                "is_active": item.is_active,
                "created_at": now,
                "updated_at": now,
            },
        )
        item_id = result.lastrowid
        self.conn.commit()
        created = self.get_by_id(item_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve inventory item after create (id={item_id})")
        return created

    def get_by_id(self, item_id: int) -> InventoryItem | None:
        row = (
            self.conn.execute(text("SELECT * FROM inventory_items WHERE id = :id"), {"id": item_id})
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_item(row)

    def get_active_by_name(self, affiliate_id: int, item_name: str) -> InventoryItem | None:
        row = (
            self.conn.execute(
                text(
                    "SELECT * FROM inventory_items WHERE affiliate_id = :affiliate_id "
                    "AND item_name = :item_name AND is_active = :active"
                ),
                {"affiliate_id": affiliate_id, "item_name": item_name, "active": True},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_item(row)

    def list_active(self, affiliate_id: int, search: str = "", category: str = "") -> list[InventoryItem]:
        clauses = ["affiliate_id = :affiliate_id", "is_active = :active"]
        params: dict = {"affiliate_id": affiliate_id, "active": True}
        if search:
            clauses.append("(LOWER(item_name) LIKE :search OR LOWER(item_description) LIKE :search)")
            params["search"] = f"%{search.lower()}%"
        if category:
            clauses.append("category = :category")
            params["category"] = category
        rows = (
            self.conn.execute(
                text(f"SELECT * FROM inventory_items WHERE {' AND '.join(clauses)} ORDER BY item_name"),
                params,
            )
            .mappings()
            .fetchall()
        )
        return [self._row_to_item(row) for row in rows]

    def search(self, affiliate_id: int, query: str, limit: int) -> list[InventoryItem]:
        rows = (
            self.conn.execute(
                text(
                    "SELECT * FROM inventory_items WHERE affiliate_id = :affiliate_id AND is_active = :active "
                    "AND (LOWER(item_name) LIKE :q OR LOWER(item_description) LIKE :q) "
                    "ORDER BY item_name LIMIT :limit"
                ),
                {"affiliate_id": affiliate_id, "active": True, "q": f"%{query.lower()}%", "limit": limit},
            )
            .mappings()
            .fetchall()
        )
        return [self._row_to_item(row) for row in rows]

    def update(self, item: InventoryItem) -> InventoryItem:
        if item.id is None:
            raise ValueError("Cannot update inventory item without an id")
        self.conn.execute(
            text(
                "UPDATE inventory_items SET item_description = :item_description, category = :category, "
                "unit_price = :unit_price, available_quantity = :available_quantity, "
                "minimum_stock_level = :minimum_stock_level, unit = :unit, sku = :sku, "
                "updated_at = :updated_at WHERE id = :id"
            ),
            {
                "item_description": item.item_description,
                "category": item.category,
                "unit_price": to_paise(item.unit_price),
                "available_quantity": str(item.available_quantity),
                "minimum_stock_level": str(item.minimum_stock_level),
                "unit": item.unit,
                "sku": item.sku,
                "updated_at": _now(),
                "id": item.id,
            },
        )
        self.conn.commit()
        result = self.get_by_id(item.id)
        if result is None:
            raise RuntimeError(f"Failed to retrieve inventory item after update (id={item.id})")
        return result

    def record_sale(self, item_id: int, quantity: Decimal, sold_at: datetime) -> None:
        self.conn.execute(
            text(
                "UPDATE inventory_items SET "
                "available_quantity = CASE WHEN available_quantity > :qty "
                "THEN available_quantity - :qty ELSE 0 END, "
                "total_sold = total_sold + :qty, last_sold_at = :sold_at, updated_at = :sold_at "
                "WHERE id = :id"
            ),
            {"qty": str(quantity), "sold_at": _local(sold_at), "id": item_id},
        )
        self.conn.commit()

    def deactivate(self, item_id: int) -> None:
        self.conn.execute(
            text("UPDATE inventory_items SET is_active = :active, updated_at = :updated_at WHERE id = :id"),
            {"active": False, "updated_at": _now(), "id": item_id},
        )
        self.conn.commit()


class SQLAlchemyBillSequenceRepository(BillSequenceRepository):
    """Per-day counter rows; the UPDATE holds the row lock until commit."""

    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def _increment(self, key: str) -> int:
        result = self.conn.execute(
            text(
                "UPDATE bill_sequences SET last_value = last_value + 1, updated_at = :now "
                "WHERE sequence_key = :key"
            ),
            {"key": key, "now": _now()},
        )
        return result.rowcount

    def next_value(self, key: str) -> int:
        try:
            return self._next_value(key)
        except SQLAlchemyError:
            # Leave the shared connection usable for the caller.
            self.conn.rollback()
            raise

    def _next_value(self, key: str) -> int:
        if self._increment(key) == 0:
            try:
                self.conn.execute(
                    text(
                        "INSERT INTO bill_sequences (sequence_key, last_value, updated_at) "
                        "VALUES (:key, 1, :now)"
                    ),
                    {"key": key, "now": _now()},
                )
            except IntegrityError:
                # Another writer created the row first.
                self.conn.rollback()
                self._increment(key)
        value = self.conn.execute(
            text("SELECT last_value FROM bill_sequences WHERE sequence_key = :key"),
            {"key": key},
        ).scalar_one()
        self.conn.commit()
        return int(value)


class SQLAlchemyManualBillRepository(ManualBillRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_bill(row: RowMapping) -> ManualBill:
        return ManualBill(
            id=row["id"],
            uuid=row["uuid"],
            affiliate_id=row["affiliate_id"],
            device_name=row["device_name"],
            device_number=row["device_number"],
            device_cost=from_paise(row["device_cost"]),
            remarks=row["remarks"],
            image_uri=row["image_uri"],
            category=ManualBillCategory(row["category"]),
            submitted_at=row["submitted_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def create(self, bill: ManualBill) -> ManualBill:
        now = _now()
        result = self.conn.execute(
            text(
                "INSERT INTO manual_bills (uuid, affiliate_id, device_name, device_number, device_cost, "
                "remarks, image_uri, category, submitted_at, created_at, updated_at) "
                "VALUES (:uuid, :affiliate_id, :device_name, :device_number, :device_cost, "
                ":remarks, :image_uri, :category, :submitted_at, :created_at, :updated_at)"
            ),
            {
                "uuid": str(ULID()),
                "affiliate_id": bill.affiliate_id,
                "device_name": bill.device_name,
                "device_number": bill.device_number,
                "device_cost": to_paise(bill.device_cost),
                "remarks": bill.remarks,
                "image_uri": bill.image_uri,
                "category": bill.category.value,
                "submitted_at": _local(bill.submitted_at) or now,
                "created_at": now,
                "updated_at": now,
            },
        )
        bill_id = result.lastrowid
        self.conn.commit()
        created = self.get_by_id(bill_id)
        if created is None:
            raise RuntimeError(f"Failed to retrieve manual bill after create (id={bill_id})")
        return created

    def get_by_id(self, bill_id: int) -> ManualBill | None:
        row = (
            self.conn.execute(text("SELECT * FROM manual_bills WHERE id = :id"), {"id": bill_id})
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_bill(row)

    def list_by_affiliate(
        self,
        affiliate_id: int,
        query: str = "",
        category: ManualBillCategory | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ManualBill]:
        clauses = ["affiliate_id = :affiliate_id"]
        params: dict = {"affiliate_id": affiliate_id}
        if query:
            clauses.append(
                "(LOWER(device_name) LIKE :q OR LOWER(device_number) LIKE :q OR LOWER(remarks) LIKE :q)"
            )
            params["q"] = f"%{query.lower()}%"
        if category is not None:
            clauses.append("category = :category")
            params["category"] = category.value
        if start is not None:
            clauses.append("submitted_at >= :start")
            params["start"] = _local(start)
        if end is not None:
            clauses.append("submitted_at <= :end")
            params["end"] = _local(end)
        rows = (
            self.conn.execute(
                text(
                    f"SELECT * FROM manual_bills WHERE {' AND '.join(clauses)} "
                    "ORDER BY created_at DESC, id DESC"
                ),
                params,
            )
            .mappings()
            .fetchall()
        )
        return [self._row_to_bill(row) for row in rows]

    def update(self, bill: ManualBill) -> ManualBill:
        if bill.id is None:
            raise ValueError("Cannot update manual bill without an id")
        self.conn.execute(
            text(
                "UPDATE manual_bills SET device_name = :device_name, device_number = :device_number, "
                "device_cost = :device_cost, remarks = :remarks, image_uri = :image_uri, "
                "category = :category, submitted_at = :submitted_at, updated_at = :updated_at "
                "WHERE id = :id"
            ),
            {
                "device_name": bill.device_name,
                "device_number": bill.device_number,
                "device_cost": to_paise(bill.device_cost),
                "remarks": bill.remarks,
                "image_uri": bill.image_uri,
                "category": bill.category.value,
                "submitted_at": _local(bill.submitted_at),
                "updated_at": _now(),
                "id": bill.id,
            },
        )
        self.conn.commit()
        result = self.get_by_id(bill.id)
        if result is None:
            raise RuntimeError(f"Failed to retrieve manual bill after update (id={bill.id})")
        return result

    def delete(self, bill_id: int) -> None:
        self.conn.execute(text("DELETE FROM manual_bills WHERE id = :id"), {"id": bill_id})
        self.conn.commit()
