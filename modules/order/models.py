"""
Order Module - Models
======================
Order with a full price snapshot per line.

OrderItem monetary and identity columns are written once at placement and are
the only source for invoices, reports and disputes. The `before_update`
listener below rejects any flush that changes them.
"""

import enum
from decimal import Decimal

from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, Text, JSON,
    ForeignKey, DateTime, event, inspect,
)
from sqlalchemy.orm import relationship

from common.exceptions import SnapshotImmutableError
from common.helpers import now_utc
from config.database import Base

# Snapshot columns keep 6 decimal places; amounts are stored rounded to 1e-6.
MONEY = Numeric(18, 6)
MONEY_QUANTUM = Decimal("0.000001")
WEIGHT = Numeric(12, 6)
PERCENT = Numeric(9, 4)


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_MAKING = "in_making"
    DISPATCHED = "dispatched"
    DELIVERED = "delivered"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    reseller_id = Column(Integer, ForeignKey("resellers.id", ondelete="RESTRICT"), nullable=False, index=True)
    order_code = Column(String, unique=True, nullable=False)
    status = Column(String, default=OrderStatus.PENDING.value, nullable=False)
    payment_status = Column(String, default=PaymentStatus.UNPAID.value, nullable=False)

    # Totals (sums of the line snapshots, frozen at placement)
    total_weight_kg = Column(WEIGHT, default=0, nullable=False)
    subtotal = Column(MONEY, default=0, nullable=False)
    discount_amount = Column(MONEY, default=0, nullable=False)
    global_loop_amount = Column(MONEY, default=0, nullable=False)
    taxable_amount = Column(MONEY, default=0, nullable=False)
    gst_amount = Column(MONEY, default=0, nullable=False)
    total_price = Column(MONEY, default=0, nullable=False)

    # Shipping
    shipping_name = Column(String, nullable=True)
    shipping_address = Column(Text, nullable=True)
    shipping_city = Column(String, nullable=True)
    shipping_state = Column(String, nullable=True)
    shipping_pincode = Column(String, nullable=True)
    shipping_phone = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    # Cancellation
    cancelled_reason = Column(String, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    # Relationships
    reseller = relationship("Reseller")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan",
                         order_by="OrderItem.id")

    @property
    def item_count(self) -> int:
        return len(self.items)

    def __repr__(self):
        return f"<Order {self.order_code} ({self.status})>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)

    # Product identity at time of purchase
    product_name = Column(String, nullable=False)
    product_image = Column(String, nullable=True)
    hsn_code = Column(String(16), nullable=True)
    weight_kg = Column(WEIGHT, nullable=False)
    weight_ranges = Column(JSON, nullable=True)

    # Price snapshot at time of purchase
    silver_rate = Column(MONEY, nullable=False)
    base_price = Column(MONEY, nullable=False)
    deduction_pct = Column(PERCENT, nullable=False)
    deduction_amount = Column(MONEY, nullable=False)
    labor_charges = Column(MONEY, nullable=False)
    subtotal = Column(MONEY, nullable=False)
    discount_amount = Column(MONEY, default=0, nullable=False)        # reseller discount + offer
    offer_discount = Column(MONEY, default=0, nullable=False)
    global_loop_amount = Column(MONEY, default=0, nullable=False)
    taxable_amount = Column(MONEY, nullable=False)                     # pre-tax line amount

    # GST snapshot
    gst_rate = Column(PERCENT, default=0, nullable=False)
    is_same_state = Column(Boolean, default=False, nullable=False)
    cgst_amount = Column(MONEY, default=0, nullable=False)
    sgst_amount = Column(MONEY, default=0, nullable=False)
    igst_amount = Column(MONEY, default=0, nullable=False)
    gst_amount = Column(MONEY, default=0, nullable=False)
    item_total = Column(MONEY, nullable=False)

    # hsn_code, rate_per_gm, deduction_pct, labor_per_kg, product_name, ...
    meta = Column(JSON, nullable=False, default=dict)

    # Relationships
    order = relationship("Order", back_populates="items")
    product = relationship("Product")


FROZEN_SNAPSHOT_FIELDS = (
    "product_id", "product_name", "product_image", "hsn_code", "weight_kg", "weight_ranges",
    "silver_rate", "base_price", "deduction_pct", "deduction_amount", "labor_charges",
    "subtotal", "discount_amount", "offer_discount", "global_loop_amount", "taxable_amount",
    "gst_rate", "is_same_state", "cgst_amount", "sgst_amount", "igst_amount", "gst_amount",
    "item_total", "meta",
)


@event.listens_for(OrderItem, "before_update")
def _reject_snapshot_changes(mapper, connection, target):
    state = inspect(target)
    changed = [name for name in FROZEN_SNAPSHOT_FIELDS if state.attrs[name].history.has_changes()]
    if changed:
        raise SnapshotImmutableError(changed)


FROZEN_ORDER_TOTALS = (
    "total_weight_kg", "subtotal", "discount_amount", "global_loop_amount",
    "taxable_amount", "gst_amount", "total_price",
)


@event.listens_for(Order, "before_update")
def _reject_total_changes(mapper, connection, target):
    state = inspect(target)
    changed = [name for name in FROZEN_ORDER_TOTALS if state.attrs[name].history.has_changes()]
    if changed:
        raise SnapshotImmutableError(changed)
