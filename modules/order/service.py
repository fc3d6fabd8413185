"""
Order Module - Service Layer
===============================
Checkout (price snapshot writer), status changes, cancellation and queries.

Checkout reads the silver rate and the global pricing settings exactly once,
prices every line fresh with the full calculator, and freezes the result onto
the order lines. Nothing in this module ever recomputes a placed order.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from common.exceptions import NotFoundError, OrderCodeUnavailableError, ValidationError
from common.helpers import generate_order_code, now_utc, to_jsonable
from config.settings import DEFAULT_HSN_CODE
from modules.catalog.models import Product
from modules.order.models import Order, OrderItem, OrderStatus
from modules.pricing.calculator import PriceBreakdown, resolve_total_weight_kg, segment_weight_kg
from modules.pricing.rate_source import get_current_rate
from modules.pricing.service import pricing_service
from modules.pricing.terms import resolve_global_settings
from modules.reseller.models import Reseller, ResellerStatus

logger = logging.getLogger("silverline.order")


def _segments_json(segments: Optional[Iterable]) -> Optional[list]:
    if segments is None:
        return None
    rows = []
    for seg in segments:
        if hasattr(seg, "model_dump"):
            seg = seg.model_dump()
        rng = (seg.get("range") if isinstance(seg, dict) else None) or {}
        rows.append({
            "range": {
                "min": None if rng.get("min") is None else str(rng.get("min")),
                "max": None if rng.get("max") is None else str(rng.get("max")),
            },
            "weight_kg": str(segment_weight_kg(seg)),
        })
    return rows


def build_order_item(product: Product, breakdown: PriceBreakdown, segments: Optional[Iterable] = None) -> OrderItem:
    """Create an OrderItem with the full price snapshot + meta block."""
    hsn_code = product.hsn_code or DEFAULT_HSN_CODE
    segments_json = _segments_json(segments)
    return OrderItem(
        product_id=product.id,
        product_name=product.name,
        product_image=product.default_image,
        hsn_code=hsn_code,
        weight_kg=breakdown.weight_kg,
        weight_ranges=segments_json,
        silver_rate=breakdown.silver_rate,
        base_price=breakdown.base_price,
        deduction_pct=breakdown.deduction_pct,
        deduction_amount=breakdown.deduction_amount,
        labor_charges=breakdown.labor_charges,
        subtotal=breakdown.subtotal,
        discount_amount=breakdown.discount_amount,
        offer_discount=breakdown.offer_discount,
        global_loop_amount=breakdown.global_loop_amount,
        taxable_amount=breakdown.taxable_amount,
        gst_rate=breakdown.gst_rate,
        is_same_state=breakdown.is_same_state,
        cgst_amount=breakdown.cgst_amount,
        sgst_amount=breakdown.sgst_amount,
        igst_amount=breakdown.igst_amount,
        gst_amount=breakdown.gst_amount,
        item_total=breakdown.total_price,
        meta={
            "product_name": product.name,
            "product_image": product.default_image,
            "hsn_code": hsn_code,
            "weight_kg": str(breakdown.weight_kg),
            "rate_per_gm": str(breakdown.silver_rate),
            "deduction_pct": str(breakdown.deduction_pct),
            "labor_per_kg": str(product.labor_per_kg or 0),
            "offer_applied": str(breakdown.offer_discount),
            "segments": segments_json or [],
        },
    )


class OrderService:

    # ==========================================
    # Checkout
    # ==========================================

    def place_order(
        self,
        db: Session,
        reseller_id: int,
        items: List[dict],
        shipping: dict = None,
        notes: str = None,
    ) -> Order:
        """
        Create a pending order:
        1. Read the current silver rate and pricing settings once
        2. Price each line with the full calculator
        3. Freeze each breakdown onto an OrderItem
        4. Sum the line snapshots into the order totals

        items: [{"product_id": int, "weight_kg": .. | "segments": [...]}]
        shipping keys: full_name, address, city, state, pincode, phone

        Raises NotFoundError for an unknown reseller/product, ValidationError
        for an empty cart, inactive product or zero weight.
        """
        reseller = db.query(Reseller).filter(Reseller.id == reseller_id).first()
        if not reseller:
            raise NotFoundError(f"Reseller #{reseller_id} not found")
        if reseller.status != ResellerStatus.APPROVED.value:
            raise ValidationError("Reseller account is not approved")
        if not items:
            raise ValidationError("Cart is empty")

        settings = resolve_global_settings(db)
        silver_rate = get_current_rate(db)
        terms = reseller.commercial_terms

        product_ids = {item.get("product_id") for item in items}
        products = {p.id: p for p in db.query(Product).filter(Product.id.in_(product_ids)).all()}

        order_items = []
        for idx, item in enumerate(items, start=1):
            product = products.get(item.get("product_id"))
            if not product:
                raise NotFoundError(f"Product #{item.get('product_id')} not found (item {idx})")
            if not product.is_active:
                raise ValidationError(f"Product is no longer available: {product.name}")

            segments = item.get("segments")
            weight = resolve_total_weight_kg(item.get("weight_kg"), segments)
            if weight <= 0:
                raise ValidationError(f"Invalid weight at item {idx}")

            breakdown = pricing_service.price_line(product, weight, terms, settings, silver_rate)
            order_items.append(build_order_item(product, breakdown, segments))

        shipping = shipping or {
            "full_name": reseller.shop_name,
            "address": reseller.address,
            "city": reseller.city,
            "state": reseller.state,
            "pincode": reseller.pincode,
            "phone": reseller.phone,
        }

        order = Order(
            reseller_id=reseller.id,
            order_code=self._unique_order_code(db),
            status=OrderStatus.PENDING.value,
            total_weight_kg=sum(oi.weight_kg for oi in order_items),
            subtotal=sum(oi.subtotal for oi in order_items),
            discount_amount=sum(oi.discount_amount for oi in order_items),
            global_loop_amount=sum(oi.global_loop_amount for oi in order_items),
            taxable_amount=sum(oi.taxable_amount for oi in order_items),
            gst_amount=sum(oi.gst_amount for oi in order_items),
            total_price=sum(oi.item_total for oi in order_items),
            shipping_name=shipping.get("full_name"),
            shipping_address=shipping.get("address"),
            shipping_city=shipping.get("city"),
            shipping_state=shipping.get("state"),
            shipping_pincode=shipping.get("pincode"),
            shipping_phone=shipping.get("phone"),
            notes=notes or None,
            items=order_items,
        )
        db.add(order)
        db.flush()

        logger.info(
            f"Order {order.order_code} placed by reseller #{reseller.id}: "
            f"{len(order_items)} items, total ₹{order.total_price} at ₹{silver_rate}/g"
        )
        return order

    # ==========================================
    # Status
    # ==========================================

    def update_status(self, db: Session, order_id: int, status: str) -> Order:
        """Change fulfilment status. Monetary fields are never touched."""
        valid = {s.value for s in OrderStatus}
        if status not in valid:
            raise ValidationError(f"Unknown order status: {status}")
        order = self.get_order(db, order_id)
        order.status = status
        if status == OrderStatus.CANCELLED.value and not order.cancelled_at:
            order.cancelled_at = now_utc()
        db.flush()
        logger.info(f"Order {order.order_code} -> {status}")
        return order

    def cancel_order(self, db: Session, order_id: int, reason: str = "", reseller_id: int = None) -> Order:
        """Cancel a pending order."""
        order = self.get_order(db, order_id, reseller_id=reseller_id)
        if order.status != OrderStatus.PENDING.value:
            raise ValidationError("Only pending orders can be cancelled")
        order.status = OrderStatus.CANCELLED.value
        order.cancelled_reason = reason or None
        order.cancelled_at = now_utc()
        db.flush()
        logger.info(f"Order {order.order_code} cancelled: {reason or '-'}")
        return order

    # ==========================================
    # Query
    # ==========================================

    def get_order(self, db: Session, order_id: int, reseller_id: int = None) -> Order:
        q = db.query(Order).filter(Order.id == order_id)
        if reseller_id is not None:
            q = q.filter(Order.reseller_id == reseller_id)
        order = q.first()
        if not order:
            raise NotFoundError(f"Order #{order_id} not found")
        return order

    def list_reseller_orders(self, db: Session, reseller_id: int, status: str = None) -> List[Order]:
        q = db.query(Order).filter(Order.reseller_id == reseller_id)
        if status:
            q = q.filter(Order.status == status)
        return q.order_by(desc(Order.created_at), desc(Order.id)).all()

    # ==========================================
    # Private Helpers
    # ==========================================

    def _unique_order_code(self, db: Session, max_retries: int = 10) -> str:
        for _ in range(max_retries):
            code = generate_order_code()
            if not db.query(Order.id).filter(Order.order_code == code).first():
                return code
        raise OrderCodeUnavailableError("Could not allocate an order code, please retry")


# Singleton
order_service = OrderService()


def serialize_order(order: Order, with_items: bool = True) -> dict:
    """JSON-ready view of an order built from its stored columns."""
    data = {
        "id": order.id,
        "order_code": order.order_code,
        "reseller_id": order.reseller_id,
        "status": order.status,
        "payment_status": order.payment_status,
        "total_weight_kg": order.total_weight_kg,
        "subtotal": order.subtotal,
        "discount_amount": order.discount_amount,
        "global_loop_amount": order.global_loop_amount,
        "taxable_amount": order.taxable_amount,
        "gst_amount": order.gst_amount,
        "total_price": order.total_price,
        "shipping": {
            "full_name": order.shipping_name,
            "address": order.shipping_address,
            "city": order.shipping_city,
            "state": order.shipping_state,
            "pincode": order.shipping_pincode,
            "phone": order.shipping_phone,
        },
        "item_count": order.item_count,
        "notes": order.notes,
        "cancelled_reason": order.cancelled_reason,
        "created_at": order.created_at,
    }
    if with_items:
        data["items"] = [
            {
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.product_name,
                "hsn_code": item.hsn_code,
                "weight_kg": item.weight_kg,
                "silver_rate": item.silver_rate,
                "base_price": item.base_price,
                "deduction_pct": item.deduction_pct,
                "deduction_amount": item.deduction_amount,
                "labor_charges": item.labor_charges,
                "subtotal": item.subtotal,
                "discount_amount": item.discount_amount,
                "offer_discount": item.offer_discount,
                "global_loop_amount": item.global_loop_amount,
                "taxable_amount": item.taxable_amount,
                "gst_rate": item.gst_rate,
                "is_same_state": item.is_same_state,
                "cgst_amount": item.cgst_amount,
                "sgst_amount": item.sgst_amount,
                "igst_amount": item.igst_amount,
                "gst_amount": item.gst_amount,
                "item_total": item.item_total,
                "meta": item.meta,
            }
            for item in order.items
        ]
    return to_jsonable(data)
