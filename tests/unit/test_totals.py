from decimal import Decimal

import pytest

from services.purchase_service import compute_total, generate_invoice_number


@pytest.mark.parametrize("quantity, cost_price, expected", [
    (10, Decimal("12.50"), Decimal("125.00")),
    (3, Decimal("0.335"), Decimal("1.01")),
    (1, Decimal("0"), Decimal("0.00")),
    (999999, Decimal("1.99"), Decimal("1989998.01")),
    (7, 2.1, Decimal("14.70")),
])
def test_compute_total_rounds_to_cents(quantity, cost_price, expected):
    assert compute_total(quantity, cost_price) == expected


def test_invoice_number_format():
    number = generate_invoice_number()

    assert number.startswith("LTS-")
    assert 1000 <= int(number[4:]) <= 9999
