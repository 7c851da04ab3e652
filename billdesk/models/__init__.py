from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def money(value: Decimal) -> Decimal:
    """Round to two decimal places, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_paise(amount: Decimal) -> int:
    """Convert rupees to integer paise for storage: Decimal('12.50') -> 1250"""
    return int(money(amount) * 100)


def from_paise(paise: int | None) -> Decimal:
    """Convert stored paise back to rupees: 1250 -> Decimal('12.50')"""
    return money(Decimal(paise or 0) / 100)


def format_inr(amount: Decimal, symbol: str = "₹") -> str:
    """Format rupees with Indian digit grouping: 123456.5 -> '₹1,23,456.50'"""
    value = money(amount)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.2f}".partition(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}{symbol}{whole}.{fraction}"
