from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from common.exceptions import ValidationError
from modules.pricing.rate_source import (
    get_current_rate, get_live_rate, get_trend, record_rate, reduce_daily,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_no_samples_means_zero_rate_and_no_change(db):
    assert get_current_rate(db) == 0
    live = get_live_rate(db, now=NOW)
    assert live.rate_per_gram == 0
    assert live.updated_at is None
    assert live.change_24h_pct is None


def test_current_rate_is_the_newest_sample(db):
    record_rate(db, "80", at=NOW - timedelta(hours=5))
    record_rate(db, "82.5", at=NOW - timedelta(hours=1))
    db.commit()
    assert get_current_rate(db) == Decimal("82.5")


def test_change_against_newest_sample_at_least_a_day_old(db):
    record_rate(db, "70", at=NOW - timedelta(hours=48))
    record_rate(db, "80", at=NOW - timedelta(hours=30))
    record_rate(db, "84", at=NOW - timedelta(hours=1))
    db.commit()

    live = get_live_rate(db, now=NOW)
    assert live.rate_per_gram == Decimal("84")
    assert live.change_24h_pct == Decimal("5")
    assert live.updated_at == NOW - timedelta(hours=1)


def test_change_is_none_without_a_baseline(db):
    record_rate(db, "84", at=NOW - timedelta(hours=2))
    db.commit()
    assert get_live_rate(db, now=NOW).change_24h_pct is None


def test_change_is_none_when_baseline_is_zero(db):
    record_rate(db, "0", at=NOW - timedelta(hours=30))
    record_rate(db, "84", at=NOW - timedelta(hours=1))
    db.commit()
    assert get_live_rate(db, now=NOW).change_24h_pct is None


def test_trend_keeps_last_sample_per_day_in_ascending_order(db):
    record_rate(db, "60", at=NOW - timedelta(days=9))          # outside the window
    record_rate(db, "80", at=datetime(2026, 3, 8, 9, tzinfo=timezone.utc))
    record_rate(db, "81", at=datetime(2026, 3, 8, 18, tzinfo=timezone.utc))
    record_rate(db, "79", at=datetime(2026, 3, 9, 10, tzinfo=timezone.utc))
    record_rate(db, "83", at=datetime(2026, 3, 10, 8, tzinfo=timezone.utc))
    db.commit()

    points = get_trend(db, days=7, now=NOW)
    assert [p.day for p in points] == [date(2026, 3, 8), date(2026, 3, 9), date(2026, 3, 10)]
    assert [p.rate for p in points] == [Decimal("81"), Decimal("79"), Decimal("83")]


def test_trend_is_empty_without_samples(db):
    assert get_trend(db, days=7, now=NOW) == []


def test_reduce_daily_breaks_timestamp_ties_by_id():
    at = datetime(2026, 3, 8, 9, tzinfo=timezone.utc)
    samples = [
        SimpleNamespace(id=2, rate_per_gram=Decimal("90"), created_at=at),
        SimpleNamespace(id=1, rate_per_gram=Decimal("88"), created_at=at),
    ]
    points = reduce_daily(samples)
    assert len(points) == 1
    assert points[0].rate == Decimal("90")


def test_reduce_daily_accepts_naive_timestamps():
    samples = [SimpleNamespace(id=1, rate_per_gram=Decimal("90"), created_at=datetime(2026, 3, 8, 9))]
    assert reduce_daily(samples)[0].observed_at.tzinfo is not None


@pytest.mark.parametrize("bad", ["-1", "abc", None, "NaN"])
def test_record_rate_rejects_invalid_values(db, bad):
    with pytest.raises(ValidationError):
        record_rate(db, bad)


def test_record_rate_accepts_zero(db):
    sample = record_rate(db, 0, created_by="admin:test")
    assert sample.id is not None
    assert sample.created_by == "admin:test"
