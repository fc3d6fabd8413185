"""
Report Module - GST / Sales Summary
=====================================
Aggregates delivered orders from their frozen order-level amounts, and lists
them with their stored line snapshots for reconciliation and disputes.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from common.exceptions import ValidationError
from common.helpers import safe_decimal
from modules.order.models import Order, OrderStatus

logger = logging.getLogger("silverline.report")


def _day_bounds(date_from: date, date_to: date):
    start = datetime.combine(date_from, time.min, tzinfo=timezone.utc)
    end = datetime.combine(date_to + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return start, end


def tax_report(db: Session, date_from: date, date_to: date, reseller_id: Optional[int] = None) -> dict:
    """Totals of delivered orders placed between date_from and date_to (inclusive, UTC days)."""
    if date_to < date_from:
        raise ValidationError("date_to must not be before date_from")

    start, end = _day_bounds(date_from, date_to)
    q = db.query(
        func.count(Order.id),
        func.coalesce(func.sum(Order.total_price), 0),
        func.coalesce(func.sum(Order.gst_amount), 0),
        func.coalesce(func.sum(Order.taxable_amount), 0),
        func.coalesce(func.sum(Order.total_weight_kg), 0),
    ).filter(
        Order.status == OrderStatus.DELIVERED.value,
        Order.created_at >= start,
        Order.created_at < end,
    )
    if reseller_id is not None:
        q = q.filter(Order.reseller_id == reseller_id)

    count, sales, gst, taxable, weight = q.one()
    report = {
        "date_from": date_from,
        "date_to": date_to,
        "reseller_id": reseller_id,
        "total_orders": int(count or 0),
        "total_sales": safe_decimal(sales),
        "total_gst": safe_decimal(gst),
        "total_taxable": safe_decimal(taxable),
        "total_weight_kg": safe_decimal(weight),
    }
    logger.info(
        f"Tax report {date_from}..{date_to} reseller={reseller_id}: "
        f"{report['total_orders']} orders, GST ₹{report['total_gst']}"
    )
    return report


def invoice_details(db: Session, date_from: date, date_to: date, reseller_id: Optional[int] = None) -> List[dict]:
    """Delivered orders in the range (oldest first) with their stored line amounts."""
    if date_to < date_from:
        raise ValidationError("date_to must not be before date_from")

    start, end = _day_bounds(date_from, date_to)
    q = (
        db.query(Order)
        .options(joinedload(Order.reseller), selectinload(Order.items))
        .filter(
            Order.status == OrderStatus.DELIVERED.value,
            Order.created_at >= start,
            Order.created_at < end,
        )
    )
    if reseller_id is not None:
        q = q.filter(Order.reseller_id == reseller_id)

    rows = []
    for order in q.order_by(Order.created_at, Order.id).all():
        reseller = order.reseller
        rows.append({
            "id": order.id,
            "order_code": order.order_code,
            "created_at": order.created_at,
            "reseller_id": order.reseller_id,
            "reseller": {
                "shop_name": reseller.shop_name if reseller else None,
                "contact_name": reseller.contact_name if reseller else None,
                "phone": reseller.phone if reseller else None,
            },
            "subtotal": order.subtotal,
            "discount_amount": order.discount_amount,
            "taxable_amount": order.taxable_amount,
            "gst_amount": order.gst_amount,
            "total_price": order.total_price,
            "total_weight_kg": order.total_weight_kg,
            "items": [
                {
                    "product_name": item.product_name,
                    "weight_kg": item.weight_kg,
                    "base_price": item.base_price,
                    "labor_charges": item.labor_charges,
                    "item_total": item.item_total,
                    "gst_rate": item.gst_rate,
                    "gst_amount": item.gst_amount,
                }
                for item in order.items
            ],
        })
    return rows
