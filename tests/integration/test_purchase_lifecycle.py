from decimal import Decimal

import pytest
from fastapi import HTTPException

from models.inventory_changes import InventoryChange
from models.purchases import Purchase
from models.vendors import Vendor
from schemas.purchases import PurchaseCreate, PurchaseUpdate
from services.product_service import ProductService
from services.purchase_service import PurchaseService


def create_purchase(session, admin_user, payload):
    return PurchaseService.create_purchase(session, PurchaseCreate(**payload), admin_user.id)


def update_purchase(session, purchase, **changes):
    return PurchaseService.update_purchase(session, purchase.id, PurchaseUpdate(**changes))


def test_create_computes_total_and_invoice(session, admin_user, make_product, purchase_payload):
    product = make_product()

    purchase = create_purchase(session, admin_user,
                               purchase_payload(product.id, quantity=4, cost_price=Decimal("2.35")))

    assert purchase.total_amount == Decimal("9.40")
    assert purchase.invoice_number.startswith("LTS-")
    assert purchase.user_id == admin_user.id
    assert product.in_stock == 0


def test_completed_create_adds_stock(session, admin_user, make_product, purchase_payload):
    product = make_product()

    create_purchase(session, admin_user, purchase_payload(product.id, status="completed", quantity=7))

    assert product.in_stock == 7
    assert product.version == 2


def test_status_flip_moves_stock_in_and_out(session, admin_user, make_product, purchase_payload):
    product = make_product()
    purchase = create_purchase(session, admin_user, purchase_payload(product.id, quantity=10))
    assert product.in_stock == 0

    update_purchase(session, purchase, status="completed")
    assert product.in_stock == 10

    update_purchase(session, purchase, status="cancelled")
    assert product.in_stock == 0


def test_quantity_edit_while_completed_applies_net_delta(session, admin_user, make_product, purchase_payload):
    product = make_product()
    purchase = create_purchase(session, admin_user,
                               purchase_payload(product.id, status="completed", quantity=10))

    update_purchase(session, purchase, quantity=15)

    assert product.in_stock == 15
    assert purchase.total_amount == Decimal("187.50")


def test_cost_only_edit_recomputes_total_without_stock_effect(session, admin_user, make_product, purchase_payload):
    product = make_product()
    purchase = create_purchase(session, admin_user,
                               purchase_payload(product.id, status="completed", quantity=3))

    update_purchase(session, purchase, cost_price=Decimal("1.10"))

    assert purchase.total_amount == Decimal("3.30")
    assert product.in_stock == 3


def test_product_change_moves_stock_between_products(session, admin_user, make_product, purchase_payload):
    first = make_product()
    second = make_product()
    purchase = create_purchase(session, admin_user,
                               purchase_payload(first.id, status="completed", quantity=10))

    update_purchase(session, purchase, product_id=second.id, quantity=6)

    assert first.in_stock == 0
    assert second.in_stock == 6


def test_delete_completed_purchase_removes_stock(session, admin_user, make_product, purchase_payload):
    product = make_product()
    purchase = create_purchase(session, admin_user,
                               purchase_payload(product.id, status="completed", quantity=5))
    purchase_id = purchase.id

    PurchaseService.delete_purchase(session, purchase_id)

    assert product.in_stock == 0
    assert session.get(Purchase, purchase_id) is None
    changes = session.query(InventoryChange).order_by(InventoryChange.id).all()
    assert [change.change_amount for change in changes] == [5, -5]
    assert [change.stock_after for change in changes] == [5, 0]


def test_reversal_that_would_go_negative_fails_and_rolls_back(session, admin_user, make_product, purchase_payload):
    product = make_product()
    purchase = create_purchase(session, admin_user,
                               purchase_payload(product.id, status="completed", quantity=5))
    # Stock was consumed elsewhere
    session.refresh(product)
    product.in_stock = 2
    session.commit()

    with pytest.raises(HTTPException) as exc_info:
        update_purchase(session, purchase, status="cancelled")

    assert exc_info.value.status_code == 500
    session.expire_all()
    assert session.get(Purchase, purchase.id).status == "completed"
    assert product.in_stock == 2


def test_mismatching_total_conflicts(session, admin_user, make_product, purchase_payload):
    product = make_product()

    with pytest.raises(HTTPException) as exc_info:
        create_purchase(session, admin_user,
                        purchase_payload(product.id, quantity=2, total_amount=Decimal("99.00")))

    assert exc_info.value.status_code == 409
    assert session.query(Purchase).count() == 0


def test_matching_total_is_accepted(session, admin_user, make_product, purchase_payload):
    product = make_product()

    purchase = create_purchase(session, admin_user,
                               purchase_payload(product.id, quantity=2, total_amount=Decimal("25.00")))

    assert purchase.total_amount == Decimal("25.00")


def test_unknown_or_deleted_product_is_not_found(session, admin_user, make_product, purchase_payload):
    product = make_product()
    ProductService.soft_delete_product(session, product.id)

    for product_id in (product.id, 9999):
        with pytest.raises(HTTPException) as exc_info:
            create_purchase(session, admin_user, purchase_payload(product_id))
        assert exc_info.value.status_code == 404


def test_stock_change_on_deleted_product_is_not_found(session, admin_user, make_product, purchase_payload):
    product = make_product()
    purchase = create_purchase(session, admin_user, purchase_payload(product.id, quantity=10))
    ProductService.soft_delete_product(session, product.id)

    with pytest.raises(HTTPException) as exc_info:
        update_purchase(session, purchase, status="completed")

    assert exc_info.value.status_code == 404
    session.expire_all()
    assert session.get(Purchase, purchase.id).status == "pending"
    assert product.in_stock == 0


def test_note_edit_on_deleted_product_is_allowed(session, admin_user, make_product, purchase_payload):
    product = make_product()
    purchase = create_purchase(session, admin_user, purchase_payload(product.id))
    ProductService.soft_delete_product(session, product.id)

    update_purchase(session, purchase, notes="Invoice scanned")

    assert purchase.notes == "Invoice scanned"


def test_update_to_unknown_product_is_not_found(session, admin_user, make_product, purchase_payload):
    product = make_product()
    purchase = create_purchase(session, admin_user, purchase_payload(product.id))

    with pytest.raises(HTTPException) as exc_info:
        update_purchase(session, purchase, product_id=9999)
    assert exc_info.value.status_code == 404


def test_required_fields_cannot_be_nulled(session, admin_user, make_product, purchase_payload):
    product = make_product()
    purchase = create_purchase(session, admin_user, purchase_payload(product.id))

    with pytest.raises(HTTPException) as exc_info:
        update_purchase(session, purchase, quantity=None)
    assert exc_info.value.status_code == 400


def test_analytics_summarizes_purchases(session, admin_user, make_product, purchase_payload, vendor):
    product = make_product()
    create_purchase(session, admin_user, purchase_payload(product.id, status="completed", quantity=2,
                                                         payment_type="card"))
    create_purchase(session, admin_user, purchase_payload(product.id, quantity=1, currency="AED"))

    data = PurchaseService.analytics(session)

    assert data["total_purchases"] == 2
    assert data["total_amount"] == 37.5
    assert data["completed_purchases"] == 1
    assert data["pending_purchases"] == 1
    assert data["completion_rate"] == 50.0
    assert data["currency_distribution"]["AED"] == {"count": 1, "total": 12.5}
    assert data["payment_types"] == {"card": 1}
    assert data["vendor_distribution"] == [
        {"vendor_id": vendor.id, "vendor_name": "Parts Co", "purchase_count": 2, "total_spent": 37.5}
    ]


def test_analytics_ranks_vendors_by_spend(session, admin_user, make_product, purchase_payload):
    product = make_product()
    vendors = []
    for n in range(6):
        vendor = Vendor(email=f"vendor{n}@example.com", first_name="Vendor", last_name=str(n),
                        phone="555-0100")
        session.add(vendor)
        vendors.append(vendor)
    session.commit()

    for n, vendor in enumerate(vendors):
        create_purchase(session, admin_user, purchase_payload(product.id, vendor_id=vendor.id, quantity=n + 1))

    ranking = PurchaseService.analytics(session)["vendor_distribution"]

    assert [row["vendor_id"] for row in ranking] == [vendor.id for vendor in reversed(vendors[1:])]
    assert ranking[0]["vendor_name"] == "Vendor 5"
    assert ranking[0]["total_spent"] == 75.0
    assert PurchaseService.analytics(session)["payment_types"] == {}
