"""
Order Module - Reseller API Routes
====================================
  POST /api/orders                    - Checkout (price snapshot is frozen here)
  GET  /api/orders                    - My orders
  GET  /api/orders/{order_id}         - Order detail
  POST /api/orders/{order_id}/cancel  - Cancel a pending order

Auth: X-Reseller-Id header (approved resellers only).
"""

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from config.database import get_db
from modules.order.service import order_service, serialize_order
from modules.pricing.routes import WeightSegment
from modules.reseller.deps import get_current_reseller
from modules.reseller.models import Reseller

router = APIRouter(prefix="/api/orders", tags=["orders"])


# ==========================================
# Schemas
# ==========================================

class OrderLineIn(BaseModel):
    product_id: int = Field(..., gt=0)
    weight_kg: Optional[Decimal] = None
    segments: Optional[List[WeightSegment]] = None


class ShippingIn(BaseModel):
    full_name: str = Field("", max_length=200)
    address: str = Field("", max_length=1000)
    city: str = Field("", max_length=100)
    state: str = Field("", max_length=100)
    pincode: str = Field("", max_length=10)
    phone: str = Field("", max_length=20)


class PlaceOrderRequest(BaseModel):
    items: List[OrderLineIn] = Field(default_factory=list)
    shipping: Optional[ShippingIn] = None
    notes: str = Field("", max_length=2000)


class CancelRequest(BaseModel):
    reason: str = Field("", max_length=500)


# ==========================================
# Routes
# ==========================================

@router.post("", status_code=201)
async def place_order(
    body: PlaceOrderRequest,
    reseller: Reseller = Depends(get_current_reseller),
    db: Session = Depends(get_db),
):
    order = order_service.place_order(
        db, reseller.id,
        items=[line.model_dump() for line in body.items],
        shipping=body.shipping.model_dump() if body.shipping else None,
        notes=body.notes,
    )
    db.commit()
    db.refresh(order)
    return {"success": True, "order": serialize_order(order)}


@router.get("")
async def my_orders(
    status: Optional[str] = Query(None),
    reseller: Reseller = Depends(get_current_reseller),
    db: Session = Depends(get_db),
):
    orders = order_service.list_reseller_orders(db, reseller.id, status=status)
    return {"success": True, "orders": [serialize_order(o, with_items=False) for o in orders]}


@router.get("/{order_id}")
async def order_detail(
    order_id: int,
    reseller: Reseller = Depends(get_current_reseller),
    db: Session = Depends(get_db),
):
    order = order_service.get_order(db, order_id, reseller_id=reseller.id)
    return {"success": True, "order": serialize_order(order)}


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: int,
    body: CancelRequest,
    reseller: Reseller = Depends(get_current_reseller),
    db: Session = Depends(get_db),
):
    order = order_service.cancel_order(db, order_id, reason=body.reason, reseller_id=reseller.id)
    db.commit()
    return {"success": True, "order": serialize_order(order, with_items=False)}
