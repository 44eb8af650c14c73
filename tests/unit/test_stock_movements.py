import pytest

from services.purchase_service import StockPosition, stock_movements


def pos(status, quantity=10, product_id=1):
    return StockPosition(product_id, status, quantity)


def test_create_completed_adds_quantity():
    assert stock_movements(None, pos("completed", 7)) == [(1, 7)]


@pytest.mark.parametrize("status", ["pending", "cancelled"])
def test_create_not_completed_has_no_effect(status):
    assert stock_movements(None, pos(status)) == []


def test_pending_to_completed_adds_current_quantity():
    assert stock_movements(pos("pending", 10), pos("completed", 12)) == [(1, 12)]


def test_completed_to_cancelled_removes_previous_quantity():
    assert stock_movements(pos("completed", 10), pos("cancelled", 12)) == [(1, -10)]


def test_quantity_edit_while_completed_applies_net_delta():
    assert stock_movements(pos("completed", 10), pos("completed", 15)) == [(1, 5)]
    assert stock_movements(pos("completed", 15), pos("completed", 10)) == [(1, -5)]


def test_unchanged_completed_purchase_has_no_effect():
    assert stock_movements(pos("completed", 10), pos("completed", 10)) == []


def test_pending_to_cancelled_has_no_effect():
    assert stock_movements(pos("pending"), pos("cancelled")) == []


def test_product_change_while_completed_moves_stock_between_products():
    previous = pos("completed", 10, product_id=1)
    current = pos("completed", 4, product_id=2)

    assert stock_movements(previous, current) == [(1, -10), (2, 4)]


def test_product_change_from_pending_only_applies_new_product():
    previous = pos("pending", 10, product_id=1)
    current = pos("completed", 4, product_id=2)

    assert stock_movements(previous, current) == [(2, 4)]


def test_delete_completed_removes_quantity():
    assert stock_movements(pos("completed", 9), None) == [(1, -9)]
    assert stock_movements(pos("pending", 9), None) == []
