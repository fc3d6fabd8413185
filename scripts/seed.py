"""
SilverLine B2B - Database Seeder
==================================
Seeds pricing settings, a rate sample, demo products and resellers.

Usage:
    python scripts/seed.py          # Seed (idempotent for settings)
    python scripts/seed.py --reset  # Drop all data and reseed

Seeded:
  1. System settings (extra charges, GST, company identity)
  2. One silver rate sample
  3. Products (anklets, chains, bracelets)
  4. Resellers (one intra-state, one inter-state)
"""

import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.database import SessionLocal, Base, engine
from config import settings
from common.templating import set_setting
from modules.catalog.models import Product, OfferType
from modules.reseller.models import Reseller, ResellerStatus
from modules.pricing.models import SilverRate  # noqa
from modules.pricing.rate_source import record_rate
from modules.order.models import Order, OrderItem  # noqa


SETTINGS = {
    settings.SETTING_EXTRA_CHARGES: ("0", "Extra charges % added to tunch"),
    settings.SETTING_GST_RATE: ("3", "GST rate % on jewelry"),
    settings.SETTING_COMPANY_STATE_CODE: ("27", "Company GST state code"),
    "company_name": ("SilverLine Jewels", "Invoice header"),
    "company_address": ("12 Zaveri Bazaar, Mumbai", "Invoice header"),
    "company_gstin": ("27AAAAA0000A1Z5", "Invoice header"),
}

PRODUCTS = [
    {"name": "Payal Classic", "hsn_code": "7113", "tunch_percentage": Decimal("92.5"),
     "labor_per_kg": Decimal("2500"), "weight_ranges": [{"min": 0.05, "max": 0.1}, {"min": 0.1, "max": 0.2}]},
    {"name": "Box Chain", "hsn_code": "7113", "tunch_percentage": Decimal("80"),
     "labor_per_kg": Decimal("4000"), "offer_enabled": True, "offer_type": OfferType.PERCENTAGE.value,
     "offer_value": Decimal("5"), "offer_text": "5% off this week"},
    {"name": "Kada Plain", "hsn_code": "7113", "tunch_percentage": Decimal("95"),
     "labor_per_kg": Decimal("1500")},
]

RESELLERS = [
    {"user_id": "demo-mumbai", "shop_name": "Mumbai Silver House", "state": "Maharashtra",
     "gst_number": "27BBBBB1111B1Z5", "discount_percent": Decimal("2"), "extra_charges_percent": Decimal("1")},
    {"user_id": "demo-ahmedabad", "shop_name": "Ahmedabad Chandi", "state": "Gujarat",
     "gst_number": "24CCCCC2222C1Z5", "discount_percent": Decimal("0"), "extra_charges_percent": Decimal("0")},
]


def seed(reset=False):
    if reset:
        print("Dropping all tables...")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        for key, (value, description) in SETTINGS.items():
            set_setting(db, key, value, description)
        print(f"  + {len(SETTINGS)} settings")

        record_rate(db, Decimal("92.50"), created_by="seed")
        print("  + silver rate ₹92.50/g")

        if not db.query(Product).first():
            for data in PRODUCTS:
                db.add(Product(**data))
            print(f"  + {len(PRODUCTS)} products")

        for data in RESELLERS:
            if not db.query(Reseller).filter(Reseller.user_id == data["user_id"]).first():
                db.add(Reseller(status=ResellerStatus.APPROVED.value, **data))
        print(f"  + {len(RESELLERS)} resellers")

        db.commit()
        print("\nSeed complete.")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed(reset="--reset" in sys.argv)
