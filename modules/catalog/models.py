"""
Catalog Module - Models
========================
Product with its trade terms (tunch %, labor per kg) and promotional offer.
The pricing engine only reads products through `pricing_attributes`.
"""

import enum

from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, Text, DateTime, JSON,
)
from sqlalchemy.sql import func

from config.database import Base


class ProductStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class OfferType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    hsn_code = Column(String(16), nullable=True)
    status = Column(String, default=ProductStatus.ACTIVE.value, nullable=False)

    # Trade terms
    tunch_percentage = Column(Numeric(6, 3), default=0, nullable=False)   # purity, 0-100
    labor_per_kg = Column(Numeric(12, 2), default=0, nullable=False)      # ₹ per kg
    weight_ranges = Column(JSON, nullable=True)                           # [{"min": .., "max": ..}]
    images = Column(JSON, nullable=True)                                  # [url, ...]

    # Offer
    offer_enabled = Column(Boolean, default=False, nullable=False)
    offer_type = Column(String, nullable=True)                            # percentage / flat
    offer_value = Column(Numeric(12, 2), nullable=True)
    offer_text = Column(String, nullable=True)
    offer_valid_from = Column(DateTime(timezone=True), nullable=True)
    offer_valid_till = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE.value

    @property
    def default_image(self):
        if isinstance(self.images, list) and self.images:
            return self.images[0]
        return None

    @property
    def pricing_attributes(self):
        """Read-only pricing view of this product (ProductPricingAttributes)."""
        from modules.pricing.calculator import Offer, ProductPricingAttributes
        return ProductPricingAttributes(
            tunch_percentage=self.tunch_percentage or 0,
            labor_per_kg=self.labor_per_kg or 0,
            offer=Offer(
                enabled=bool(self.offer_enabled),
                kind=self.offer_type,
                value=self.offer_value or 0,
                text=self.offer_text,
                valid_from=self.offer_valid_from,
                valid_till=self.offer_valid_till,
            ),
        )

    def __repr__(self):
        return f"<Product {self.name} (tunch {self.tunch_percentage}%)>"
