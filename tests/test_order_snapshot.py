from decimal import Decimal
from unittest import mock

import pytest

from common.exceptions import (
    NotFoundError, OrderCodeUnavailableError, SnapshotImmutableError, ValidationError,
)
from modules.catalog.models import ProductStatus
from modules.invoice.service import invoice_service
from modules.order.models import MONEY_QUANTUM, OrderStatus
from modules.order import service as order_module
from modules.order.service import order_service
from modules.pricing.rate_source import record_rate
from modules.pricing.service import pricing_service
from modules.pricing.terms import resolve_global_settings
from modules.reseller.models import ResellerStatus


@pytest.fixture
def setup(db, make_product, make_reseller, pricing_settings):
    pricing_settings()
    record_rate(db, "80")
    db.commit()
    return make_product(), make_reseller()


def _place(db, product, reseller, **line):
    line = line or {"weight_kg": Decimal("0.010")}
    order = order_service.place_order(db, reseller.id, [{"product_id": product.id, **line}])
    db.commit()
    return order


def test_checkout_freezes_the_full_breakdown(db, setup):
    product, reseller = setup
    order = _place(db, product, reseller)

    item = order.items[0]
    assert item.silver_rate == Decimal("80")
    assert item.subtotal == Decimal("802")
    assert item.taxable_amount == Decimal("802")
    assert item.gst_rate == Decimal("3")
    assert item.is_same_state is True
    assert item.cgst_amount == item.sgst_amount == Decimal("12.03")
    assert item.item_total == Decimal("826.06")
    assert item.hsn_code == "7113"

    assert Decimal(item.meta["rate_per_gm"]) == Decimal("80")
    assert Decimal(item.meta["labor_per_kg"]) == Decimal("5000")
    assert Decimal(item.meta["deduction_pct"]) == Decimal("6")
    assert item.meta["product_name"] == "Payal Classic"
    assert item.meta["product_image"] == "/media/payal.jpg"
    assert item.meta["hsn_code"] == "7113"

    assert order.status == OrderStatus.PENDING.value
    assert order.order_code.startswith("ORD-")
    assert order.total_price == Decimal("826.06")
    assert order.gst_amount == Decimal("24.06")


def test_order_totals_are_sums_of_lines(db, setup, make_product):
    product, reseller = setup
    second = make_product(name="Box Chain", tunch_percentage=Decimal("80"), hsn_code=None)
    order = order_service.place_order(db, reseller.id, [
        {"product_id": product.id, "weight_kg": Decimal("0.010")},
        {"product_id": second.id, "segments": [{"weight_kg": "0.02"}, {"weight_kg": "0.01"}]},
    ])
    db.commit()

    assert len(order.items) == 2
    assert order.total_price == sum(i.item_total for i in order.items)
    assert order.taxable_amount == sum(i.taxable_amount for i in order.items)
    assert order.total_weight_kg == Decimal("0.04")
    chain = order.items[1]
    assert chain.hsn_code == "7113"
    assert chain.weight_ranges[0]["weight_kg"] == "0.02"
    assert len(chain.meta["segments"]) == 2


def test_missing_hsn_code_falls_back_to_default(db, setup, make_product):
    _, reseller = setup
    product = make_product(hsn_code=None)
    order = _place(db, product, reseller)
    assert order.items[0].meta["hsn_code"] == "7113"


def test_snapshot_columns_cannot_be_updated(db, setup):
    product, reseller = setup
    order = _place(db, product, reseller)

    order.items[0].taxable_amount = Decimal("1")
    with pytest.raises(SnapshotImmutableError):
        db.flush()
    db.rollback()

    order.total_price = Decimal("1")
    with pytest.raises(SnapshotImmutableError):
        db.flush()
    db.rollback()


def test_status_changes_leave_amounts_alone(db, setup):
    product, reseller = setup
    order = _place(db, product, reseller)

    order_service.update_status(db, order.id, OrderStatus.DELIVERED.value)
    db.commit()
    assert order.status == "delivered"
    assert order.total_price == Decimal("826.06")


def test_invoice_is_stable_after_settings_and_rate_change(db, setup, pricing_settings):
    product, reseller = setup
    order = _place(db, product, reseller)
    before = invoice_service.build_invoice(db, order.id)

    pricing_settings(extra_charges="10", gst_rate="12", company_state_code="24")
    record_rate(db, "150")
    reseller.discount_percent = Decimal("9")
    product.labor_per_kg = Decimal("99999")
    db.commit()
    db.expire_all()

    after = invoice_service.build_invoice(db, order.id)
    assert after.subtotal == before.subtotal == Decimal("802")
    assert after.gst_amount == before.gst_amount == Decimal("24.06")
    assert after.grand_total == before.grand_total == Decimal("826.06")
    assert after.is_same_state is before.is_same_state is True
    assert [l.labor_per_kg for l in after.lines] == [l.labor_per_kg for l in before.lines]


def test_rejects_empty_cart(db, setup):
    _, reseller = setup
    with pytest.raises(ValidationError):
        order_service.place_order(db, reseller.id, [])


def test_rejects_unknown_reseller_and_product(db, setup):
    product, reseller = setup
    with pytest.raises(NotFoundError):
        order_service.place_order(db, 999, [{"product_id": product.id, "weight_kg": "0.01"}])
    with pytest.raises(NotFoundError):
        order_service.place_order(db, reseller.id, [{"product_id": 999, "weight_kg": "0.01"}])


def test_rejects_inactive_product_and_zero_weight(db, setup, make_product):
    product, reseller = setup
    hidden = make_product(status=ProductStatus.INACTIVE.value)
    with pytest.raises(ValidationError):
        order_service.place_order(db, reseller.id, [{"product_id": hidden.id, "weight_kg": "0.01"}])
    with pytest.raises(ValidationError):
        order_service.place_order(db, reseller.id, [{"product_id": product.id, "weight_kg": "0"}])


def test_rejects_unapproved_reseller(db, setup, make_reseller):
    product, _ = setup
    pending = make_reseller(status=ResellerStatus.PENDING.value)
    with pytest.raises(ValidationError):
        order_service.place_order(db, pending.id, [{"product_id": product.id, "weight_kg": "0.01"}])


def test_shipping_defaults_to_reseller_profile(db, setup):
    product, reseller = setup
    order = _place(db, product, reseller)
    assert order.shipping_name == reseller.shop_name
    assert order.shipping_state == "Maharashtra"


def test_only_pending_orders_can_be_cancelled(db, setup):
    product, reseller = setup
    order = _place(db, product, reseller)
    order_service.cancel_order(db, order.id, reason="changed mind", reseller_id=reseller.id)
    db.commit()
    assert order.status == OrderStatus.CANCELLED.value
    assert order.cancelled_at is not None

    with pytest.raises(ValidationError):
        order_service.cancel_order(db, order.id)


def test_unknown_status_is_rejected(db, setup):
    product, reseller = setup
    order = _place(db, product, reseller)
    with pytest.raises(ValidationError):
        order_service.update_status(db, order.id, "teleported")


def test_orders_are_scoped_to_their_reseller(db, setup, make_reseller):
    product, reseller = setup
    other = make_reseller(shop_name="Other")
    order = _place(db, product, reseller)
    with pytest.raises(NotFoundError):
        order_service.get_order(db, order.id, reseller_id=other.id)
    assert order_service.list_reseller_orders(db, other.id) == []
    assert [o.id for o in order_service.list_reseller_orders(db, reseller.id)] == [order.id]


def test_stored_amounts_match_breakdown_to_six_decimals(db, make_product, make_reseller, pricing_settings):
    pricing_settings(extra_charges="1.75", gst_rate="3")
    record_rate(db, "91.37")
    db.commit()
    product = make_product(tunch_percentage=Decimal("92.5"), labor_per_kg=Decimal("3333.33"))
    reseller = make_reseller(discount_percent=Decimal("2.5"), extra_charges_percent=Decimal("1.2"))

    order = order_service.place_order(db, reseller.id, [{"product_id": product.id, "weight_kg": "0.0123"}])
    db.commit()
    db.expire_all()

    expected = pricing_service.price_line(
        product, Decimal("0.0123"), reseller.commercial_terms, resolve_global_settings(db), Decimal("91.37"),
    )
    item = order.items[0]
    for column, value in (
        ("taxable_amount", expected.taxable_amount),
        ("gst_amount", expected.gst_amount),
        ("item_total", expected.total_price),
    ):
        assert abs(getattr(item, column) - value) <= MONEY_QUANTUM, column


def test_exhausted_order_codes_raise_a_business_error(db, setup):
    product, reseller = setup
    with mock.patch.object(order_module, "generate_order_code", return_value="ORD-20260101-0001"):
        _place(db, product, reseller)
        with pytest.raises(OrderCodeUnavailableError):
            order_service.place_order(db, reseller.id, [{"product_id": product.id, "weight_kg": "0.01"}])
