"""
Pricing Module - Calculator
============================
Silver jewelry price calculation with a fully itemized breakdown.

Pure functions: every input (rate, settings, reseller terms) is fetched by the
caller and passed in, so the same inputs always produce the same breakdown,
whether the call comes from the admin panel or the reseller storefront.

Computation order (each step feeds the next):
    base          = weight_kg * 1000 * silver_rate
    deduction_pct = 100 - (tunch% + extra_charges%)      (not clamped)
    deduction     = base * deduction_pct / 100
    labor         = labor_per_kg * weight_kg
    subtotal      = base - deduction + labor
    [full] reseller discount and global loop, both % of subtotal
    offer         = % of the running price, or a flat amount (not clamped)
    taxable       = price - offer
    GST           = on taxable (jurisdiction split in the full variant)
    total         = taxable + GST
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from common.helpers import as_utc, safe_decimal, to_decimal
from modules.pricing.gst import calculate_gst_breakdown
from modules.pricing.terms import CommercialTerms, GlobalPricingSettings

ZERO = Decimal("0")
HUNDRED = Decimal("100")
GRAMS_PER_KG = Decimal("1000")

OFFER_PERCENTAGE = "percentage"
OFFER_FLAT = "flat"


# ==========================================
# Inputs
# ==========================================

@dataclass(frozen=True)
class Offer:
    enabled: bool = False
    kind: Optional[str] = None          # "percentage" | "flat"
    value: Decimal = ZERO
    text: Optional[str] = None
    valid_from: Optional[datetime] = None
    valid_till: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "value", safe_decimal(self.value))
        if self.kind is not None:
            object.__setattr__(self, "kind", str(self.kind).strip().lower())

    def discount_on(self, amount: Decimal) -> Decimal:
        """Offer discount on `amount`. A flat offer may exceed the amount."""
        if not self.enabled:
            return ZERO
        if self.kind == OFFER_PERCENTAGE:
            return amount * self.value / HUNDRED
        if self.kind == OFFER_FLAT:
            return self.value
        return ZERO

    def is_running(self, at: datetime) -> bool:
        """Display helper for offer badges; pricing does not consult the window."""
        if not self.enabled:
            return False
        at = as_utc(at)
        if self.valid_from and at < as_utc(self.valid_from):
            return False
        if self.valid_till and at > as_utc(self.valid_till):
            return False
        return True


@dataclass(frozen=True)
class ProductPricingAttributes:
    tunch_percentage: Decimal = ZERO
    labor_per_kg: Decimal = ZERO
    offer: Offer = field(default_factory=Offer)

    def __post_init__(self):
        object.__setattr__(self, "tunch_percentage", safe_decimal(self.tunch_percentage))
        object.__setattr__(self, "labor_per_kg", safe_decimal(self.labor_per_kg))


# ==========================================
# Outputs
# ==========================================

@dataclass(frozen=True)
class SimplePriceBreakdown:
    """Generic preview: product + weight + global settings, no reseller terms."""
    weight_kg: Decimal
    silver_rate: Decimal
    base_price: Decimal
    deduction_pct: Decimal
    deduction_amount: Decimal
    labor_charges: Decimal
    subtotal: Decimal
    offer_discount: Decimal
    taxable_amount: Decimal
    gst_rate: Decimal
    gst_amount: Decimal
    total_price: Decimal

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PriceBreakdown(SimplePriceBreakdown):
    """Reseller-facing price: adds commercial terms and the CGST/SGST/IGST split."""
    reseller_discount_pct: Decimal
    reseller_discount_amount: Decimal
    global_loop_pct: Decimal
    global_loop_amount: Decimal
    is_gst_enabled: bool
    is_same_state: bool
    cgst_rate: Decimal
    sgst_rate: Decimal
    igst_rate: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    company_state_code: Optional[str]
    reseller_state_code: Optional[str]

    @property
    def discount_amount(self) -> Decimal:
        """Reseller discount + offer, as stored on order lines."""
        return self.reseller_discount_amount + self.offer_discount


# ==========================================
# Weight Resolution
# ==========================================

def segment_weight_kg(segment) -> Decimal:
    raw = segment.get("weight_kg") if isinstance(segment, dict) else getattr(segment, "weight_kg", None)
    return max(ZERO, safe_decimal(raw))


def resolve_total_weight_kg(weight_kg=None, segments: Optional[Iterable] = None) -> Decimal:
    """
    Total weight for pricing.

    With `segments`, each segment's weight_kg is floored at 0 (garbage -> 0)
    before summing. Otherwise the plain weight is floored at 0.
    """
    if segments is not None:
        return sum((segment_weight_kg(seg) for seg in segments), ZERO)
    return max(ZERO, safe_decimal(weight_kg))


# ==========================================
# Calculation
# ==========================================

def _metal_steps(attrs: ProductPricingAttributes, weight_kg, settings: GlobalPricingSettings, silver_rate):
    weight = to_decimal(weight_kg)
    rate = to_decimal(silver_rate)

    base_price = weight * GRAMS_PER_KG * rate
    deduction_pct = HUNDRED - (attrs.tunch_percentage + settings.extra_charges_percent)
    deduction_amount = base_price * deduction_pct / HUNDRED
    labor_charges = attrs.labor_per_kg * weight
    subtotal = base_price - deduction_amount + labor_charges
    return weight, rate, base_price, deduction_pct, deduction_amount, labor_charges, subtotal


def calculate_simple_price(
    attrs: ProductPricingAttributes,
    weight_kg,
    settings: GlobalPricingSettings,
    silver_rate,
) -> SimplePriceBreakdown:
    """Price without reseller terms or jurisdiction split (admin / generic preview)."""
    weight, rate, base_price, deduction_pct, deduction_amount, labor_charges, subtotal = _metal_steps(
        attrs, weight_kg, settings, silver_rate,
    )

    offer_discount = attrs.offer.discount_on(subtotal)
    taxable_amount = subtotal - offer_discount

    gst_rate = settings.gst_rate_percent
    gst_amount = taxable_amount * gst_rate / HUNDRED if gst_rate > ZERO else ZERO

    return SimplePriceBreakdown(
        weight_kg=weight,
        silver_rate=rate,
        base_price=base_price,
        deduction_pct=deduction_pct,
        deduction_amount=deduction_amount,
        labor_charges=labor_charges,
        subtotal=subtotal,
        offer_discount=offer_discount,
        taxable_amount=taxable_amount,
        gst_rate=gst_rate,
        gst_amount=gst_amount,
        total_price=taxable_amount + gst_amount,
    )


def calculate_full_price(
    attrs: ProductPricingAttributes,
    weight_kg,
    terms: CommercialTerms,
    settings: GlobalPricingSettings,
    silver_rate,
) -> PriceBreakdown:
    """Reseller-facing price used for the storefront and for checkout."""
    weight, rate, base_price, deduction_pct, deduction_amount, labor_charges, subtotal = _metal_steps(
        attrs, weight_kg, settings, silver_rate,
    )

    reseller_discount_amount = subtotal * terms.reseller_discount_percent / HUNDRED
    global_loop_amount = subtotal * terms.global_loop_percent / HUNDRED
    price_after_terms = subtotal - reseller_discount_amount + global_loop_amount

    offer_discount = attrs.offer.discount_on(price_after_terms)
    taxable_amount = price_after_terms - offer_discount

    gst = calculate_gst_breakdown(
        taxable_amount,
        settings.gst_rate_percent,
        settings.company_state_code,
        terms.reseller_state_code,
    )

    return PriceBreakdown(
        weight_kg=weight,
        silver_rate=rate,
        base_price=base_price,
        deduction_pct=deduction_pct,
        deduction_amount=deduction_amount,
        labor_charges=labor_charges,
        subtotal=subtotal,
        offer_discount=offer_discount,
        taxable_amount=taxable_amount,
        gst_rate=settings.gst_rate_percent,
        gst_amount=gst.total_gst_amount,
        total_price=taxable_amount + gst.total_gst_amount,
        reseller_discount_pct=terms.reseller_discount_percent,
        reseller_discount_amount=reseller_discount_amount,
        global_loop_pct=terms.global_loop_percent,
        global_loop_amount=global_loop_amount,
        is_gst_enabled=gst.is_gst_enabled,
        is_same_state=gst.is_same_state,
        cgst_rate=gst.cgst_rate,
        sgst_rate=gst.sgst_rate,
        igst_rate=gst.igst_rate,
        cgst_amount=gst.cgst_amount,
        sgst_amount=gst.sgst_amount,
        igst_amount=gst.igst_amount,
        company_state_code=settings.company_state_code,
        reseller_state_code=terms.reseller_state_code,
    )
