"""
Tests for the add-to-cart inventory guard.
"""
import pytest
from hypothesis import given, strategies as st

from phenofarm.services import inventory
from phenofarm.utils.errors import InventoryError


def test_can_add_within_stock():
    assert inventory.can_add(2, 3, 5)
    assert not inventory.can_add(3, 3, 5)
    assert not inventory.can_add(0, 0, 5)


def test_remaining_never_negative():
    assert inventory.remaining(7, 5) == 0
    assert inventory.remaining(2, 5) == 3


@pytest.mark.parametrize("quantity, expected", [(0, 1), (-4, 1), (3, 3), (12, 5)])
def test_clamp_quantity(quantity, expected):
    assert inventory.clamp_quantity(quantity, 5) == expected


def test_check_add_message():
    with pytest.raises(InventoryError) as exc:
        inventory.check_add(3, 3, 5)
    assert exc.value.message == "Cannot add 3 more. Only 2 available."


def test_check_new_item_message():
    with pytest.raises(InventoryError) as exc:
        inventory.check_new_item(6, 5)
    assert exc.value.message == "Please select quantity between 1 and 5"


@given(
    stock=st.integers(min_value=0, max_value=50),
    requests=st.lists(st.integers(min_value=-3, max_value=20), max_size=30),
)
def test_guarded_adds_never_exceed_stock(stock, requests):
    in_cart = 0
    for requested in requests:
        if inventory.can_add(in_cart, requested, stock):
            in_cart += requested
        assert 0 <= in_cart <= stock
