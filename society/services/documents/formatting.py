"""Amount and date formatting shared by printed documents and the UI."""

from datetime import date, datetime
from decimal import Context, Decimal
from typing import Union


def format_amount(amount: Union[Decimal, int, float]) -> str:
    """
    Format an amount with Indian digit grouping.

    Paise are shown only when non-zero:
    2500 -> "2,500", 100000 -> "1,00,000", 1800.5 -> "1,800.50".
    """
    value = Decimal(str(amount))
    # Widen precision so quantizing very large totals cannot overflow
    context = Context(prec=max(28, value.adjusted() + 4))
    value = value.quantize(Decimal("0.01"), context=context)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):f}".partition(".")

    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])

    if fraction and fraction != "00":
        return f"{sign}{whole}.{fraction}"
    return f"{sign}{whole}"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing "Z"."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def format_short_date(value: Union[str, date]) -> str:
    """19/10/2026"""
    if isinstance(value, str):
        value = parse_timestamp(value)
    return value.strftime("%d/%m/%Y")


def format_long_date(value: date) -> str:
    """19 October 2026"""
    return f"{value.day} {value.strftime('%B %Y')}"
