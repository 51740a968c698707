"""
Tests for the persisted dispensary cart.
"""
import json
from types import SimpleNamespace

import pytest
from hypothesis import given, strategies as st

from phenofarm.services.cart_store import CART_KEY, CART_UPDATED, CartStore
from phenofarm.utils.errors import InventoryError, NotFoundError
from phenofarm.utils.storage import MemoryStorage


def _product(product_id=1, price_cents=1000, inventory_qty=5, grower_id=7, name="Blue Dream 3.5g"):
    return SimpleNamespace(
        id=product_id,
        name=name,
        price_cents=price_cents,
        inventory_qty=inventory_qty,
        grower_id=grower_id,
        grower=SimpleNamespace(business_name="Green Mountain Farms"),
        unit="gram",
        strain=None,
        strain_legacy="Blue Dream",
        batch=None,
        thc_legacy=18.5,
        cbd_legacy=None,
    )


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return CartStore(storage, tax_rate=0.10)


class TestAddItem:
    def test_add_then_exceed_leaves_quantity(self, store):
        product = _product(inventory_qty=5)
        store.add_item(product, 3)

        with pytest.raises(InventoryError) as exc:
            store.add_item(product, 3)

        assert exc.value.message == "Cannot add 3 more. Only 2 available."
        assert store.cart.find(product.id).quantity == 3

    def test_merge_by_product_and_keep_order(self, store):
        store.add_item(_product(1), 1)
        store.add_item(_product(2, name="Pre-roll"), 2)
        store.add_item(_product(1), 2)

        assert [item.product_id for item in store.cart.items] == [1, 2]
        assert store.cart.find(1).quantity == 3
        assert store.item_count() == 5

    def test_new_item_quantity_out_of_range(self, store):
        with pytest.raises(InventoryError):
            store.add_item(_product(inventory_qty=2), 3)
        assert store.cart.items == []

    def test_snapshot_fields(self, store):
        store.add_item(_product(), 1)
        item = store.cart.find(1)

        assert item.grower_name == "Green Mountain Farms"
        assert item.strain == "Blue Dream"
        assert item.thc == 18.5
        assert item.max_qty == 5

    @given(requests=st.lists(st.integers(min_value=1, max_value=8), max_size=15))
    def test_quantity_never_exceeds_inventory(self, requests):
        store = CartStore(MemoryStorage(), tax_rate=0.10)
        product = _product(inventory_qty=10)
        for requested in requests:
            try:
                store.add_item(product, requested)
            except InventoryError:
                pass
            item = store.cart.find(product.id)
            assert item is None or item.quantity <= product.inventory_qty


class TestTotalsAndPersistence:
    def test_totals_recomputed_and_saved(self, store, storage):
        store.add_item(_product(1, price_cents=1000), 2)
        store.add_item(_product(2, price_cents=500), 1)

        assert (store.cart.subtotal, store.cart.tax, store.cart.total) == (2500, 250, 2750)

        saved = json.loads(storage.get(CART_KEY))
        assert saved["subtotal"] == 25.0
        assert saved["tax"] == 2.5
        assert saved["total"] == 27.5
        assert saved["items"][0]["unit_price"] == 10.0

    def test_reload_from_storage(self, store, storage):
        store.add_item(_product(), 2)

        reloaded = CartStore(storage, tax_rate=0.10)

        assert reloaded.cart.find(1).quantity == 2
        assert reloaded.cart.total == 2200

    def test_corrupt_storage_gives_empty_cart(self):
        storage = MemoryStorage({CART_KEY: "{not json"})

        cart = CartStore(storage, tax_rate=0.10).cart

        assert cart.items == []
        assert cart.total == 0

    def test_malformed_items_give_empty_cart(self):
        storage = MemoryStorage({CART_KEY: json.dumps({"items": [{"product_id": 1}]})})
        assert CartStore(storage, tax_rate=0.10).cart.items == []

    @pytest.mark.parametrize("quantity, max_qty", [(50, 5), (-3, 5), (0, 5)])
    def test_out_of_range_quantity_gives_empty_cart(self, quantity, max_qty):
        item = {"product_id": 1, "name": "Blue Dream 3.5g", "grower_id": 7, "grower_name": "Green Mountain Farms",
                "unit_price": 10.0, "quantity": quantity, "max_qty": max_qty}
        storage = MemoryStorage({CART_KEY: json.dumps({"items": [item]})})

        cart = CartStore(storage, tax_rate=0.10).cart

        assert cart.items == []
        assert cart.subtotal == 0


class TestQuantityControls:
    def test_set_quantity_clamps(self, store):
        store.add_item(_product(inventory_qty=5), 2)

        store.set_quantity(1, 50)
        assert store.cart.find(1).quantity == 5
        store.set_quantity(1, 0)
        assert store.cart.find(1).quantity == 1

    def test_step_outside_range_is_ignored(self, store):
        store.add_item(_product(inventory_qty=2), 1)

        store.step_quantity(1, -1)
        assert store.cart.find(1).quantity == 1
        store.step_quantity(1, 1)
        store.step_quantity(1, 1)
        assert store.cart.find(1).quantity == 2

    def test_remove_and_clear(self, store):
        store.add_item(_product(1), 1)
        store.add_item(_product(2), 1)

        store.remove_item(1)
        assert [item.product_id for item in store.cart.items] == [2]

        store.clear()
        assert store.cart.items == []
        assert store.item_count() == 0

    def test_unknown_item(self, store):
        with pytest.raises(NotFoundError):
            store.remove_item(99)


def test_listeners_notified_until_unsubscribed(store):
    events = []
    unsubscribe = store.subscribe(lambda event, cart: events.append((event, store.item_count())))

    store.add_item(_product(), 2)
    unsubscribe()
    store.clear()

    assert events == [(CART_UPDATED, 2)]
