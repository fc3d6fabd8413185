"""
Reseller Module - Models
=========================
Reseller account with its negotiated commercial terms and GST registration.
"""

import enum

from sqlalchemy import Column, Integer, String, Numeric, Text, DateTime
from sqlalchemy.sql import func

from config.database import Base


class ResellerStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    BLOCKED = "blocked"


class Reseller(Base):
    __tablename__ = "resellers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, unique=True, nullable=True, index=True)   # auth provider id
    shop_name = Column(String, nullable=True)
    contact_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    pincode = Column(String, nullable=True)
    status = Column(String, default=ResellerStatus.PENDING.value, nullable=False)

    # Tax registration
    gst_number = Column(String(15), nullable=True)
    state_code = Column(String(2), nullable=True)

    # Commercial terms
    discount_percent = Column(Numeric(5, 2), default=0, nullable=False)
    extra_charges_percent = Column(Numeric(5, 2), default=0, nullable=False)   # "global loop"

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def effective_state_code(self):
        """Explicit state code, else the first two characters of the GSTIN."""
        from modules.pricing.gst import extract_state_code_from_gstin
        code = (self.state_code or "").strip()
        return code or extract_state_code_from_gstin(self.gst_number)

    @property
    def commercial_terms(self):
        """Read-only commercial terms of this reseller (CommercialTerms)."""
        from modules.pricing.terms import CommercialTerms
        return CommercialTerms(
            reseller_discount_percent=self.discount_percent or 0,
            global_loop_percent=self.extra_charges_percent or 0,
            reseller_state_code=self.effective_state_code,
        )

    def __repr__(self):
        return f"<Reseller {self.shop_name} ({self.status})>"
