"""
Pricing Module - Shared Service
================================
Gathers the calculator's inputs (product, rate, reseller terms, global
settings) and picks the variant. Admin and reseller call sites both go through
here, so identical inputs give identical breakdowns.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from common.exceptions import NotFoundError
from common.helpers import safe_decimal
from modules.catalog.models import Product
from modules.pricing.calculator import (
    PriceBreakdown, SimplePriceBreakdown,
    calculate_full_price, calculate_simple_price, resolve_total_weight_kg,
)
from modules.pricing.rate_source import get_current_rate
from modules.pricing.terms import (
    CommercialTerms, GlobalPricingSettings, resolve_global_settings, resolve_terms,
)

logger = logging.getLogger("silverline.pricing")


class PricingService:

    # ==========================================
    # Input Resolution
    # ==========================================

    def get_product(self, db: Session, product_id: int) -> Product:
        product = db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError(f"Product #{product_id} not found")
        return product

    def resolve_silver_rate(self, db: Session, rate_override=None) -> Decimal:
        """Explicit override when given (even 0), else the latest recorded rate."""
        if rate_override is not None:
            return safe_decimal(rate_override)
        return get_current_rate(db)

    # ==========================================
    # Variants
    # ==========================================

    def price_line(
        self,
        product: Product,
        weight_kg,
        terms: CommercialTerms,
        settings: GlobalPricingSettings,
        silver_rate,
    ) -> PriceBreakdown:
        """Full breakdown from already-fetched inputs (used by checkout)."""
        return calculate_full_price(product.pricing_attributes, weight_kg, terms, settings, silver_rate)

    def price_preview(
        self,
        db: Session,
        product_id: int,
        weight_kg=None,
        segments: Optional[Iterable] = None,
        rate_override=None,
        reseller_id: Optional[int] = None,
    ) -> PriceBreakdown:
        """Reseller-facing price (commercial terms + GST jurisdiction split)."""
        product = self.get_product(db, product_id)
        silver_rate = self.resolve_silver_rate(db, rate_override)
        settings = resolve_global_settings(db)
        terms = resolve_terms(db, reseller_id)
        total_weight = resolve_total_weight_kg(weight_kg, segments)

        logger.debug(
            f"Preview product #{product_id} reseller={reseller_id} weight={total_weight}kg "
            f"rate={silver_rate} settings={settings} terms={terms}"
        )
        return self.price_line(product, total_weight, terms, settings, silver_rate)

    def compute_price(
        self,
        db: Session,
        product_id: int,
        weight_kg=None,
        segments: Optional[Iterable] = None,
        rate_override=None,
    ) -> SimplePriceBreakdown:
        """Generic preview: no reseller terms, single GST figure."""
        product = self.get_product(db, product_id)
        silver_rate = self.resolve_silver_rate(db, rate_override)
        settings = resolve_global_settings(db)
        total_weight = resolve_total_weight_kg(weight_kg, segments)
        return calculate_simple_price(product.pricing_attributes, total_weight, settings, silver_rate)


# Singleton
pricing_service = PricingService()
