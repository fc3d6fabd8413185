"""
Pricing Module - API Routes
=============================
Live rate, daily trend and price previews (JSON).

Endpoints:
  GET  /api/rates/live            - Current rate + 24h change
  GET  /api/rates/trend?days=7    - One point per day
  POST /api/pricing/preview       - Reseller price (X-Reseller-Id optional)
  POST /api/pricing/simple        - Generic price, single GST figure
"""

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from config import settings
from config.database import get_db
from common.helpers import to_jsonable
from modules.pricing.rate_source import get_live_rate, get_trend
from modules.pricing.service import pricing_service
from modules.reseller.deps import get_optional_reseller_id


rates_router = APIRouter(prefix="/api/rates", tags=["rates"])
router = APIRouter(prefix="/api/pricing", tags=["pricing"])


# ==========================================
# Schemas
# ==========================================

class WeightRange(BaseModel):
    min: Optional[Decimal] = None
    max: Optional[Decimal] = None


class WeightSegment(BaseModel):
    range: Optional[WeightRange] = None
    weight_kg: Decimal = Decimal("0")


class PriceRequest(BaseModel):
    product_id: int = Field(..., gt=0)
    weight_kg: Optional[Decimal] = None
    segments: Optional[List[WeightSegment]] = None
    rate_override: Optional[Decimal] = None


# ==========================================
# Rates
# ==========================================

@rates_router.get("/live")
async def live_rate(db: Session = Depends(get_db)):
    live = get_live_rate(db)
    return {
        "success": True,
        "rate_per_gram": str(live.rate_per_gram),
        "updated_at": live.updated_at.isoformat() if live.updated_at else None,
        "change_24h_pct": None if live.change_24h_pct is None else str(live.change_24h_pct),
    }


@rates_router.get("/trend")
async def rate_trend(
    days: int = Query(settings.RATE_TREND_DAYS, ge=1, le=365),
    db: Session = Depends(get_db),
):
    points = get_trend(db, days=days)
    return {
        "success": True,
        "days": days,
        "points": [
            {"date": p.day.isoformat(), "rate": str(p.rate), "observed_at": p.observed_at.isoformat()}
            for p in points
        ],
    }


# ==========================================
# Previews
# ==========================================

@router.post("/preview")
async def price_preview(
    body: PriceRequest,
    reseller_id: Optional[int] = Depends(get_optional_reseller_id),
    db: Session = Depends(get_db),
):
    """Full breakdown with reseller terms and CGST/SGST/IGST split."""
    breakdown = pricing_service.price_preview(
        db, body.product_id,
        weight_kg=body.weight_kg,
        segments=body.segments,
        rate_override=body.rate_override,
        reseller_id=reseller_id,
    )
    data = breakdown.to_dict()
    data["discount_amount"] = breakdown.discount_amount
    return {"success": True, "breakdown": to_jsonable(data)}


@router.post("/simple")
async def price_simple(body: PriceRequest, db: Session = Depends(get_db)):
    breakdown = pricing_service.compute_price(
        db, body.product_id,
        weight_kg=body.weight_kg,
        segments=body.segments,
        rate_override=body.rate_override,
    )
    return {"success": True, "breakdown": to_jsonable(breakdown.to_dict())}
