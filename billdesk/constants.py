from zoneinfo import ZoneInfo

from billdesk.models.customer_bill import PaymentMethod
from billdesk.settings import settings

LOCAL_TZ = ZoneInfo(settings.timezone)

PHONE_PATTERN = r"^[6-9]\d{9}$"

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10
RECENT_BILLS_LIMIT = 5

PAYMENT_LABELS = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.CARD: "Card",
    PaymentMethod.UPI: "UPI",
    PaymentMethod.BANK_TRANSFER: "Bank transfer",
    PaymentMethod.PENDING: "Pending",
}
