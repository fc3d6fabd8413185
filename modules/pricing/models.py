"""
Pricing Module - Models
========================
SilverRate: append-only silver rate samples (price per gram, INR).
Only ever read newest-first or as an ascending window for trends.
"""

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Index

from common.helpers import now_utc
from config.database import Base


class SilverRate(Base):
    __tablename__ = "silver_rates"

    id = Column(Integer, primary_key=True)
    rate_per_gram = Column(Numeric(12, 4), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    created_by = Column(String, nullable=True)   # admin mobile / "system:feed"

    __table_args__ = (
        Index("ix_silver_rates_created", "created_at"),
    )

    def __repr__(self):
        return f"<SilverRate {self.rate_per_gram}/g @ {self.created_at}>"
