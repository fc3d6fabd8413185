"""
Admin Module - API Routes
===========================
Rate entry, feed refresh, pricing settings, order status and the GST report.
Admin authentication happens upstream; the acting admin's name arrives in
the X-Admin-User header and is only used for audit fields.

Endpoints:
  POST /api/admin/rates                        - Record a manual rate sample
  POST /api/admin/rates/refresh                - Pull one sample from the feed
  PUT  /api/admin/settings/pricing             - Update pricing/company settings
  POST /api/admin/orders/{order_id}/status     - Change fulfilment status
  GET  /api/admin/reports/tax                  - Delivered-order GST summary + details
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from config import settings
from config.database import get_db
from common.exceptions import ValidationError
from common.helpers import to_jsonable
from common.templating import set_setting
from modules.order.service import order_service, serialize_order
from modules.pricing.feed_service import RateFeed, build_rate_feed, refresh_rate_from_feed
from modules.pricing.gst import is_valid_state_code, normalize_state_code
from modules.pricing.rate_source import record_rate
from modules.pricing.terms import resolve_global_settings
from modules.report.service import invoice_details, tax_report

logger = logging.getLogger("silverline.admin")

router = APIRouter(prefix="/api/admin", tags=["admin"])


# ==========================================
# Dependencies
# ==========================================

def get_admin_name(x_admin_user: Optional[str] = Header(None, alias="X-Admin-User")) -> str:
    return (x_admin_user or "").strip() or "admin"


def get_rate_feed() -> Optional[RateFeed]:
    return build_rate_feed()


# ==========================================
# Schemas
# ==========================================

class RateIn(BaseModel):
    rate_per_gram: Decimal


class PricingSettingsIn(BaseModel):
    extra_charges: Optional[Decimal] = None
    gst_rate: Optional[Decimal] = Field(None, ge=0)
    company_state_code: Optional[str] = Field(None, max_length=2)
    company_name: Optional[str] = Field(None, max_length=200)
    company_address: Optional[str] = Field(None, max_length=1000)
    company_gstin: Optional[str] = Field(None, max_length=15)
    company_phone: Optional[str] = Field(None, max_length=20)
    company_email: Optional[str] = Field(None, max_length=200)


class StatusIn(BaseModel):
    status: str


# ==========================================
# 📈 Silver Rate
# ==========================================

@router.post("/rates", status_code=201)
async def add_rate(
    body: RateIn,
    admin: str = Depends(get_admin_name),
    db: Session = Depends(get_db),
):
    sample = record_rate(db, body.rate_per_gram, created_by=f"admin:{admin}")
    db.commit()
    return {"success": True, "id": sample.id, "rate_per_gram": str(body.rate_per_gram)}


@router.post("/rates/refresh")
async def refresh_rate(
    feed: Optional[RateFeed] = Depends(get_rate_feed),
    db: Session = Depends(get_db),
):
    """Manually trigger one fetch from the configured feed."""
    if feed is None:
        raise ValidationError("No silver rate feed configured")
    sample = refresh_rate_from_feed(db, feed)
    db.commit()
    return {"success": True, "id": sample.id, "rate_per_gram": str(sample.rate_per_gram)}


# ==========================================
# ⚙️ Pricing Settings
# ==========================================

@router.put("/settings/pricing")
async def update_pricing_settings(
    body: PricingSettingsIn,
    admin: str = Depends(get_admin_name),
    db: Session = Depends(get_db),
):
    """Only fields present in the body are written. Placed orders are unaffected."""
    changes = body.model_dump(exclude_none=True)
    if "company_state_code" in changes:
        code = normalize_state_code(changes["company_state_code"])
        if code and not is_valid_state_code(code):
            raise ValidationError(f"Unknown GST state code: {changes['company_state_code']}")
        changes["company_state_code"] = code or ""

    key_map = {
        "extra_charges": settings.SETTING_EXTRA_CHARGES,
        "gst_rate": settings.SETTING_GST_RATE,
        "company_state_code": settings.SETTING_COMPANY_STATE_CODE,
    }
    for field_name, value in changes.items():
        set_setting(db, key_map.get(field_name, field_name), value)
    db.commit()

    logger.info(f"Pricing settings updated by {admin}: {sorted(changes)}")
    return {"success": True, "settings": to_jsonable(resolve_global_settings(db).to_dict())}


# ==========================================
# 📦 Orders
# ==========================================

@router.post("/orders/{order_id}/status")
async def change_order_status(
    order_id: int,
    body: StatusIn,
    admin: str = Depends(get_admin_name),
    db: Session = Depends(get_db),
):
    order = order_service.update_status(db, order_id, body.status.strip().lower())
    db.commit()
    logger.info(f"Order #{order_id} status set to {order.status} by {admin}")
    return {"success": True, "order": serialize_order(order, with_items=False)}


# ==========================================
# 🧾 Reports
# ==========================================

@router.get("/reports/tax")
async def gst_report(
    date_from: date = Query(...),
    date_to: date = Query(...),
    reseller_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    """Totals plus the per-order line snapshots behind them."""
    report = tax_report(db, date_from, date_to, reseller_id=reseller_id)
    orders = invoice_details(db, date_from, date_to, reseller_id=reseller_id)
    return {"success": True, "report": to_jsonable(report), "orders": to_jsonable(orders)}
