"""
Shared fixtures: an in-memory SQLite database per test, the FastAPI app with
get_db overridden onto it, and small factories for products/resellers/settings.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings
from config.database import Base, get_db
from common.templating import set_setting
from main import app
from modules.catalog.models import Product
from modules.reseller.models import Reseller, ResellerStatus


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ==========================================
# Factories
# ==========================================

@pytest.fixture
def pricing_settings(db):
    """Write the three pricing settings (defaults match the worked examples)."""
    def _apply(extra_charges="2", gst_rate="3", company_state_code="27"):
        set_setting(db, settings.SETTING_EXTRA_CHARGES, extra_charges)
        set_setting(db, settings.SETTING_GST_RATE, gst_rate)
        set_setting(db, settings.SETTING_COMPANY_STATE_CODE, company_state_code)
        db.commit()
    return _apply


@pytest.fixture
def make_product(db):
    def _make(**kwargs):
        data = {
            "name": "Payal Classic",
            "hsn_code": "7113",
            "tunch_percentage": Decimal("92"),
            "labor_per_kg": Decimal("5000"),
            "images": ["/media/payal.jpg"],
        }
        data.update(kwargs)
        product = Product(**data)
        db.add(product)
        db.commit()
        return product
    return _make


@pytest.fixture
def make_reseller(db):
    def _make(**kwargs):
        data = {
            "shop_name": "Mumbai Silver House",
            "state": "Maharashtra",
            "gst_number": "27BBBBB1111B1Z5",
            "status": ResellerStatus.APPROVED.value,
            "discount_percent": Decimal("0"),
            "extra_charges_percent": Decimal("0"),
        }
        data.update(kwargs)
        reseller = Reseller(**data)
        db.add(reseller)
        db.commit()
        return reseller
    return _make
