"""
Pricing Module - Commercial Terms
==================================
Per-reseller negotiated terms and the process-wide pricing settings.

Both are plain frozen values fetched fresh on every call and handed to the
calculator explicitly. Nothing here is cached: admins can change settings at
any time and checkout must see the value current at call time.
"""

import logging
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from common.helpers import safe_decimal
from common.templating import get_settings_map
from config.settings import (
    SETTING_EXTRA_CHARGES, SETTING_GST_RATE, SETTING_COMPANY_STATE_CODE,
)
from modules.pricing.gst import normalize_state_code

logger = logging.getLogger("silverline.pricing")

ZERO = Decimal("0")


@dataclass(frozen=True)
class CommercialTerms:
    reseller_discount_percent: Decimal = ZERO
    global_loop_percent: Decimal = ZERO
    reseller_state_code: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "reseller_discount_percent", safe_decimal(self.reseller_discount_percent))
        object.__setattr__(self, "global_loop_percent", safe_decimal(self.global_loop_percent))
        object.__setattr__(self, "reseller_state_code", normalize_state_code(self.reseller_state_code))

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class GlobalPricingSettings:
    extra_charges_percent: Decimal = ZERO
    gst_rate_percent: Decimal = ZERO
    company_state_code: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "extra_charges_percent", safe_decimal(self.extra_charges_percent))
        object.__setattr__(self, "gst_rate_percent", safe_decimal(self.gst_rate_percent))
        object.__setattr__(self, "company_state_code", normalize_state_code(self.company_state_code))

    def to_dict(self) -> dict:
        return asdict(self)


# ==========================================
# Resolvers
# ==========================================

def resolve_terms(db: Session, reseller_id: Optional[int]) -> CommercialTerms:
    """Terms for a reseller id. Unknown / missing reseller -> zero terms, no state code."""
    from modules.reseller.models import Reseller

    if reseller_id is None:
        return CommercialTerms()
    reseller = db.query(Reseller).filter(Reseller.id == reseller_id).first()
    if not reseller:
        logger.debug(f"No reseller #{reseller_id}; using default commercial terms")
        return CommercialTerms()
    return reseller.commercial_terms


def resolve_terms_for_user(db: Session, user_id: Optional[str]) -> CommercialTerms:
    """Same as resolve_terms, keyed by the auth provider's user id."""
    from modules.reseller.models import Reseller

    if not user_id:
        return CommercialTerms()
    reseller = db.query(Reseller).filter(Reseller.user_id == user_id).first()
    if not reseller:
        logger.debug(f"No reseller for user {user_id}; using default commercial terms")
        return CommercialTerms()
    return reseller.commercial_terms


def resolve_global_settings(db: Session) -> GlobalPricingSettings:
    """Read extra charges %, GST rate % and company state code (each defaults on its own)."""
    values = get_settings_map(db, [SETTING_EXTRA_CHARGES, SETTING_GST_RATE, SETTING_COMPANY_STATE_CODE])
    missing = [k for k in (SETTING_EXTRA_CHARGES, SETTING_GST_RATE, SETTING_COMPANY_STATE_CODE) if k not in values]
    if missing:
        logger.warning(f"Pricing settings not configured, defaulting: {', '.join(missing)}")
    return GlobalPricingSettings(
        extra_charges_percent=values.get(SETTING_EXTRA_CHARGES),
        gst_rate_percent=values.get(SETTING_GST_RATE),
        company_state_code=values.get(SETTING_COMPANY_STATE_CODE),
    )
