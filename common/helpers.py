"""
SilverLine B2B - Shared Helpers
================================
Pure utility functions with NO database or module dependencies.
"""

import secrets
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional


def now_utc() -> datetime:
    """Returns current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from the DB (SQLite drops tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_decimal(value) -> Decimal:
    """Coerce int/float/str/Decimal to Decimal via str(). None -> 0."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def safe_decimal(value, default: Decimal = Decimal("0")) -> Decimal:
    """Like to_decimal, but garbage (non-numeric, NaN, inf) falls back to default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        d = to_decimal(str(value).strip() if isinstance(value, str) else value)
    except (InvalidOperation, ValueError, TypeError):
        return default
    if not d.is_finite():
        return default
    return d


def safe_int(value: Optional[str]) -> Optional[int]:
    """Safely convert a string to int. Returns None on failure."""
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return None


def format_inr(value) -> str:
    """Format an amount as ₹ with Indian digit grouping (₹1,23,456.78)."""
    try:
        d = to_decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        return str(value)
    sign = "-" if d < 0 else ""
    whole, frac = f"{abs(d):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}₹{whole}.{frac}"


def format_weight_gm(weight_kg) -> str:
    """Kilograms -> whole grams label, e.g. 0.0105 -> '11 gm'."""
    try:
        grams = (to_decimal(weight_kg) * 1000).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        return str(weight_kg)
    return f"{grams} gm"


def format_weight(value) -> str:
    """Format weight, removing unnecessary trailing zeros."""
    if value is None:
        return ""
    try:
        d = Decimal(str(value))
        normalized = d.normalize()
        if normalized.as_tuple().exponent > 0:
            return str(int(d))
        return "{:f}".format(normalized)
    except (InvalidOperation, ValueError):
        return str(value)


def generate_order_code(when: Optional[datetime] = None) -> str:
    """Order code in the ORD-YYYYMMDD-NNNN format."""
    when = when or now_utc()
    return f"ORD-{when:%Y%m%d}-{secrets.randbelow(9999) + 1:04d}"


def to_jsonable(value):
    """Decimals as exact strings, dates as ISO strings; walks dicts and lists."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value
