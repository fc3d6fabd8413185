"""
Pricing Module - Rate Source
=============================
Current silver rate, 24h change, and the daily trend series, all derived from
the append-only `silver_rates` table.

  * No sample at all -> current rate is 0 (prices degrade to 0, never fail).
  * No sample at or before now-24h -> change is None ("no data"), not 0.
  * Trend keeps one point per UTC calendar day; the last sample of the day
    (by timestamp, then id) wins.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from common.exceptions import ValidationError
from common.helpers import as_utc, now_utc, safe_decimal, to_decimal
from modules.pricing.models import SilverRate

logger = logging.getLogger("silverline.pricing")

ZERO = Decimal("0")


@dataclass(frozen=True)
class LiveRate:
    rate_per_gram: Decimal
    updated_at: Optional[datetime]
    change_24h_pct: Optional[Decimal]


@dataclass(frozen=True)
class RatePoint:
    day: date
    rate: Decimal
    observed_at: datetime


# ==========================================
# Queries
# ==========================================

def _latest(db: Session, at_or_before: Optional[datetime] = None) -> Optional[SilverRate]:
    q = db.query(SilverRate)
    if at_or_before is not None:
        q = q.filter(SilverRate.created_at <= at_or_before)
    return q.order_by(desc(SilverRate.created_at), desc(SilverRate.id)).first()


def get_current_rate(db: Session) -> Decimal:
    """Most recent rate per gram, or 0 when nothing has been recorded."""
    latest = _latest(db)
    return to_decimal(latest.rate_per_gram) if latest else ZERO


def get_live_rate(db: Session, now: Optional[datetime] = None) -> LiveRate:
    """Current rate plus % change against the newest sample at or before now-24h."""
    now = now or now_utc()
    latest = _latest(db)
    rate = to_decimal(latest.rate_per_gram) if latest else ZERO

    baseline = _latest(db, at_or_before=now - timedelta(hours=24))
    base = to_decimal(baseline.rate_per_gram) if baseline else None

    change = None
    if base:
        change = (rate - base) / base * Decimal("100")

    return LiveRate(
        rate_per_gram=rate,
        updated_at=as_utc(latest.created_at) if latest else None,
        change_24h_pct=change,
    )


def reduce_daily(samples: Iterable[SilverRate]) -> List[RatePoint]:
    """One point per calendar day (last by timestamp), ascending by day."""
    ordered = sorted(samples, key=lambda s: (as_utc(s.created_at), s.id or 0))
    by_day = {}
    for s in ordered:
        observed = as_utc(s.created_at)
        by_day[observed.date()] = RatePoint(
            day=observed.date(),
            rate=to_decimal(s.rate_per_gram),
            observed_at=observed,
        )
    return [by_day[d] for d in sorted(by_day)]


def get_trend(db: Session, days: int = 7, now: Optional[datetime] = None) -> List[RatePoint]:
    """Daily trend over the last `days` days. Recomputed on every call."""
    now = now or now_utc()
    start = now - timedelta(days=max(0, int(days)))
    samples = (
        db.query(SilverRate)
        .filter(SilverRate.created_at >= start, SilverRate.created_at <= now)
        .order_by(SilverRate.created_at, SilverRate.id)
        .all()
    )
    return reduce_daily(samples)


# ==========================================
# Writes
# ==========================================

def record_rate(db: Session, rate_per_gram, created_by: str = None, at: Optional[datetime] = None) -> SilverRate:
    """Append a new rate sample. Caller must commit."""
    rate = safe_decimal(rate_per_gram, default=None)
    if rate is None or rate < ZERO:
        raise ValidationError(f"Invalid silver rate: {rate_per_gram}")
    sample = SilverRate(rate_per_gram=rate, created_by=created_by, created_at=at or now_utc())
    db.add(sample)
    db.flush()
    logger.info(f"Silver rate recorded: ₹{rate}/g by {created_by or 'unknown'}")
    return sample
