import re
from datetime import date, datetime, timezone
from decimal import Decimal

from common.helpers import (
    as_utc, format_inr, format_weight, format_weight_gm,
    generate_order_code, safe_decimal, safe_int, to_jsonable,
)


def test_format_inr_uses_indian_grouping():
    assert format_inr(Decimal("1234567.891")) == "₹12,34,567.89"
    assert format_inr(826.06) == "₹826.06"
    assert format_inr(Decimal("-203.94")) == "-₹203.94"


def test_weight_formatting():
    assert format_weight(Decimal("0.500")) == "0.5"
    assert format_weight(None) == ""
    assert format_weight_gm(Decimal("0.0105")) == "11 gm"


def test_safe_conversions():
    assert safe_decimal("12.5") == Decimal("12.5")
    assert safe_decimal("abc") == 0
    assert safe_decimal("Infinity") == 0
    assert safe_decimal(True) == 0
    assert safe_decimal(None, default=None) is None
    assert safe_int(" 42 ") == 42
    assert safe_int("x") is None


def test_as_utc_attaches_timezone_to_naive_values():
    assert as_utc(datetime(2026, 1, 1, 10)).tzinfo == timezone.utc
    assert as_utc(None) is None


def test_order_code_format():
    code = generate_order_code(datetime(2026, 3, 9, tzinfo=timezone.utc))
    assert re.fullmatch(r"ORD-20260309-\d{4}", code)


def test_to_jsonable_keeps_decimals_exact():
    data = to_jsonable({"a": Decimal("0.10"), "b": [date(2026, 1, 2)], "c": None})
    assert data == {"a": "0.10", "b": ["2026-01-02"], "c": None}
