from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal

from billdesk.models.customer_bill import BillStatus, CustomerBill, PaymentMethod
from billdesk.models.inventory import InventoryItem
from billdesk.models.manual_bill import ManualBill, ManualBillCategory


class CustomerBillRepository(ABC):
    @abstractmethod
    def create(self, bill: CustomerBill) -> CustomerBill: ...

    @abstractmethod
    def get_by_id(self, bill_id: int) -> CustomerBill | None: ...

    @abstractmethod
    def get_by_number(self, bill_number: str) -> CustomerBill | None: ...

    @abstractmethod
    def list_by_affiliate(
        self,
        affiliate_id: int,
        limit: int,
        offset: int = 0,
        start: datetime | None = None,
        end: datetime | None = None,
        status: BillStatus | None = None,
        customer_phone: str = "",
    ) -> list[CustomerBill]: ...

    @abstractmethod
    def count_by_affiliate(
        self,
        affiliate_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
        status: BillStatus | None = None,
        customer_phone: str = "",
    ) -> int: ...

    @abstractmethod
    def list_for_period(
        self, affiliate_id: int, start: datetime | None = None, end: datetime | None = None
    ) -> list[CustomerBill]: ...

    @abstractmethod
    def list_by_customer(self, phone_number: str) -> list[CustomerBill]: ...

    @abstractmethod
    def update(self, bill: CustomerBill) -> CustomerBill: ...

    @abstractmethod
    def update_pdf_path(self, bill_id: int, pdf_path: str) -> None: ...

    @abstractmethod
    def update_status(
        self,
        bill_id: int,
        status: BillStatus,
        payment_method: PaymentMethod | None = None,
        paid_at: datetime | None = None,
    ) -> None: ...

    @abstractmethod
    def mark_whatsapp_sent(self, bill_id: int, sent_at: datetime) -> None: ...


class InventoryRepository(ABC):
    @abstractmethod
    def create(self, item: InventoryItem) -> InventoryItem: ...

    @abstractmethod
    def get_by_id(self, item_id: int) -> InventoryItem | None: ...

    @abstractmethod
    def get_active_by_name(self, affiliate_id: int, item_name: str) -> InventoryItem | None: ...

    @abstractmethod
    def list_active(self, affiliate_id: int, search: str = "", category: str = "") -> list[InventoryItem]: ...

    @abstractmethod
    def search(self, affiliate_id: int, query: str, limit: int) -> list[InventoryItem]: ...

    @abstractmethod
    def update(self, item: InventoryItem) -> InventoryItem: ...

    @abstractmethod
    def record_sale(self, item_id: int, quantity: Decimal, sold_at: datetime) -> None: ...

    @abstractmethod
    def deactivate(self, item_id: int) -> None: ...


class BillSequenceRepository(ABC):
    @abstractmethod
    def next_value(self, key: str) -> int:
        """Atomically increment and return the counter for ``key``, starting at 1."""
        ...


class ManualBillRepository(ABC):
    @abstractmethod
    def create(self, bill: ManualBill) -> ManualBill: ...

    @abstractmethod
    def get_by_id(self, bill_id: int) -> ManualBill | None: ...

    @abstractmethod
    def list_by_affiliate(
        self,
        affiliate_id: int,
        query: str = "",
        category: ManualBillCategory | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[ManualBill]: ...

    @abstractmethod
    def update(self, bill: ManualBill) -> ManualBill: ...

    @abstractmethod
    def delete(self, bill_id: int) -> None: ...
