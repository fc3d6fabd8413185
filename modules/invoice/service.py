"""
Invoice Module - Service Layer
================================
Builds invoice data for a placed order from its frozen snapshot only.

The calculator is never consulted here: line amounts, the GST rate and the
intra/inter-state decision all come from what was stored at checkout, so an
invoice printed today matches what the reseller was charged.
"""

import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from common.helpers import as_utc, safe_decimal
from common.templating import get_settings_map
from config.settings import (
    COMPANY_SETTING_KEYS, DEFAULT_COMPANY_NAME, DEFAULT_HSN_CODE,
    INVOICE_PREFIX, SETTING_COMPANY_STATE_CODE,
)
from modules.order.service import order_service
from modules.pricing.gst import format_gstin_for_display, get_state_name, invoice_title

logger = logging.getLogger("silverline.invoice")

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWO = Decimal("2")


@dataclass(frozen=True)
class InvoiceLine:
    product_name: str
    product_image: Optional[str]
    hsn_code: str
    weight_kg: Decimal
    rate_per_gm: Decimal
    deduction_pct: Decimal
    labor_per_kg: Decimal
    offer_applied: Decimal
    taxable_amount: Decimal
    segments: list = field(default_factory=list)


@dataclass(frozen=True)
class InvoiceData:
    invoice_number: str
    title: str
    order_id: int
    order_code: str
    order_date: Optional[datetime]
    status: str
    company: dict
    buyer: dict
    lines: List[InvoiceLine]
    subtotal: Decimal
    gst_rate: Decimal
    is_gst_enabled: bool
    is_same_state: bool
    cgst_rate: Decimal
    sgst_rate: Decimal
    igst_rate: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    gst_amount: Decimal
    grand_total: Decimal

    def to_dict(self) -> dict:
        return asdict(self)


def invoice_number_for(order) -> str:
    year = (as_utc(order.created_at) or datetime.now()).year
    return f"{INVOICE_PREFIX}-{year}-{order.id:05d}"


def _line_from_snapshot(item) -> InvoiceLine:
    """Meta first, snapshot columns as fallback (older rows may lack meta keys)."""
    meta = item.meta or {}
    return InvoiceLine(
        product_name=meta.get("product_name") or item.product_name,
        product_image=meta.get("product_image") or item.product_image,
        hsn_code=meta.get("hsn_code") or item.hsn_code or DEFAULT_HSN_CODE,
        weight_kg=safe_decimal(meta.get("weight_kg", item.weight_kg)),
        rate_per_gm=safe_decimal(meta.get("rate_per_gm", item.silver_rate)),
        deduction_pct=safe_decimal(meta.get("deduction_pct", item.deduction_pct)),
        labor_per_kg=safe_decimal(meta.get("labor_per_kg")),
        offer_applied=safe_decimal(meta.get("offer_applied", item.offer_discount)),
        taxable_amount=safe_decimal(item.taxable_amount),
        segments=meta.get("segments") or item.weight_ranges or [],
    )


class InvoiceService:

    def build_invoice(self, db: Session, order_id: int, reseller_id: int = None) -> InvoiceData:
        """Invoice for an order. reseller_id restricts to that reseller's orders."""
        order = order_service.get_order(db, order_id, reseller_id=reseller_id)
        items = list(order.items)

        lines = [_line_from_snapshot(item) for item in items]
        subtotal = sum((safe_decimal(item.taxable_amount) for item in items), ZERO)

        # One checkout reads settings once, so every line carries the same rate.
        gst_rate = safe_decimal(items[0].gst_rate) if items else ZERO
        is_same_state = bool(items[0].is_same_state) if items else True
        is_gst_enabled = gst_rate > ZERO

        gst_amount = subtotal * gst_rate / HUNDRED if is_gst_enabled else ZERO
        if not is_gst_enabled:
            cgst_rate = sgst_rate = igst_rate = ZERO
            cgst_amount = sgst_amount = igst_amount = ZERO
        elif is_same_state:
            cgst_rate = sgst_rate = gst_rate / TWO
            igst_rate = ZERO
            cgst_amount = sgst_amount = gst_amount / TWO
            igst_amount = ZERO
        else:
            cgst_rate = sgst_rate = ZERO
            igst_rate = gst_rate
            cgst_amount = sgst_amount = ZERO
            igst_amount = gst_amount

        invoice = InvoiceData(
            invoice_number=invoice_number_for(order),
            title=invoice_title(is_gst_enabled),
            order_id=order.id,
            order_code=order.order_code,
            order_date=as_utc(order.created_at),
            status=order.status,
            company=self._company_info(db),
            buyer=self._buyer_info(order),
            lines=lines,
            subtotal=subtotal,
            gst_rate=gst_rate,
            is_gst_enabled=is_gst_enabled,
            is_same_state=is_same_state,
            cgst_rate=cgst_rate,
            sgst_rate=sgst_rate,
            igst_rate=igst_rate,
            cgst_amount=cgst_amount,
            sgst_amount=sgst_amount,
            igst_amount=igst_amount,
            gst_amount=gst_amount,
            grand_total=subtotal + gst_amount,
        )
        logger.debug(f"Invoice {invoice.invoice_number} built for order {order.order_code}")
        return invoice

    # ==========================================
    # Private Helpers
    # ==========================================

    def _company_info(self, db: Session) -> dict:
        values = get_settings_map(db, COMPANY_SETTING_KEYS + [SETTING_COMPANY_STATE_CODE])
        state_code = (values.get(SETTING_COMPANY_STATE_CODE) or "").strip() or None
        return {
            "name": values.get("company_name") or DEFAULT_COMPANY_NAME,
            "address": values.get("company_address") or "",
            "gstin": format_gstin_for_display(values.get("company_gstin")),
            "phone": values.get("company_phone") or "",
            "email": values.get("company_email") or "",
            "state_code": state_code,
            "state_name": get_state_name(state_code),
        }

    def _buyer_info(self, order) -> dict:
        reseller = order.reseller
        state_code = reseller.effective_state_code if reseller else None
        return {
            "name": order.shipping_name or (reseller.shop_name if reseller else ""),
            "address": order.shipping_address or "",
            "city": order.shipping_city or "",
            "state": order.shipping_state or "",
            "pincode": order.shipping_pincode or "",
            "phone": order.shipping_phone or "",
            "gstin": format_gstin_for_display(reseller.gst_number if reseller else None),
            "state_code": state_code,
            "state_name": get_state_name(state_code),
        }


# Singleton
invoice_service = InvoiceService()
