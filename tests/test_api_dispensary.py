"""
API tests for the dispensary side: catalog, cart, favorites, price alerts.
"""
import pytest

from phenofarm.models import StorageSlot
from phenofarm.services.cart_store import CART_KEY


@pytest.fixture
def catalog(make_product, seed_grower_user, seed_other_grower_user, seed_strain_batch):
    strain, batch = seed_strain_batch
    mine = seed_grower_user.grower_id
    theirs = seed_other_grower_user.grower_id
    return {
        "nl": make_product(mine, name="Northern Lights 3.5g", price_cents=3600, inventory_qty=8,
                           strain_id=strain.id, batch_id=batch.id, thc_legacy=18.5),
        "preroll": make_product(mine, name="Pre-roll", product_type="Pre-roll", price_cents=900,
                                inventory_qty=50, thc_legacy=20.0),
        "gummies": make_product(theirs, name="Gummies", product_type="Edibles", price_cents=450,
                                inventory_qty=5),
        "hidden": make_product(theirs, name="Hidden", is_available=False),
        "sold_out": make_product(theirs, name="Sold out", inventory_qty=0),
    }


class TestCatalog:
    def test_groups_available_products_by_grower(self, client, dispensary_headers, catalog):
        body = client.get("/catalog/products", headers=dispensary_headers).json()

        assert [g["grower_name"] for g in body["groups"]] == ["Green Mountain Farms", "Hilltop Gardens"]
        assert [p["name"] for p in body["groups"][0]["products"]] == ["Northern Lights 3.5g", "Pre-roll"]
        assert body["pagination"]["total_count"] == 3
        assert body["active_filter_count"] == 0

    def test_batch_thc_wins_over_legacy(self, client, dispensary_headers, catalog):
        body = client.get("/catalog/products", headers=dispensary_headers).json()
        nl = next(p for p in body["products"] if p["id"] == catalog["nl"].id)
        assert nl["thc"] == 22.0
        assert nl["strain"] == "Northern Lights"

    def test_filters_and_sort(self, client, dispensary_headers, catalog):
        body = client.get("/catalog/products", params={
            "thc_ranges": ["high"], "sort_by": "price-desc",
        }, headers=dispensary_headers).json()

        # 22.0 and exactly 20.0 are both "high"
        assert [p["name"] for p in body["products"]] == ["Northern Lights 3.5g", "Pre-roll"]
        assert body["groups"][0]["grower_id"] == "all"
        assert body["active_filter_count"] == 1

    def test_pagination(self, client, dispensary_headers, catalog):
        body = client.get("/catalog/products", params={"limit": 2, "page": 2, "sort_by": "name-asc"},
                          headers=dispensary_headers).json()
        assert [p["name"] for p in body["products"]] == ["Pre-roll"]
        assert body["pagination"]["has_more"] is False
        assert body["pagination"]["total_pages"] == 2

    def test_bad_sort(self, client, dispensary_headers, catalog):
        response = client.get("/catalog/products", params={"sort_by": "random"}, headers=dispensary_headers)
        assert response.status_code == 400

    def test_growers_cannot_browse(self, client, grower_headers):
        assert client.get("/catalog/products", headers=grower_headers).status_code == 403


class TestCartApi:
    def test_add_then_exceed(self, client, dispensary_headers, catalog):
        gummies = catalog["gummies"]
        first = client.post("/cart/add", json={"product_id": gummies.id, "quantity": 3}, headers=dispensary_headers)
        assert first.status_code == 200
        assert first.json()["subtotal"] == 13.5
        assert first.json()["tax"] == 1.35

        second = client.post("/cart/add", json={"product_id": gummies.id, "quantity": 3},
                             headers=dispensary_headers)
        assert second.status_code == 400
        assert second.json()["detail"] == "Cannot add 3 more. Only 2 available."

        cart = client.get("/cart", headers=dispensary_headers).json()
        assert cart["items"][0]["quantity"] == 3
        assert cart["item_count"] == 3

    def test_quantity_controls(self, client, dispensary_headers, catalog):
        pid = catalog["gummies"].id
        client.post("/cart/add", json={"product_id": pid, "quantity": 1}, headers=dispensary_headers)

        clamped = client.put(f"/cart/items/{pid}", json={"quantity": 99}, headers=dispensary_headers).json()
        assert clamped["items"][0]["quantity"] == 5

        stepped = client.post(f"/cart/items/{pid}/step", json={"delta": 1}, headers=dispensary_headers).json()
        assert stepped["items"][0]["quantity"] == 5

        removed = client.delete(f"/cart/items/{pid}", headers=dispensary_headers).json()
        assert removed["items"] == []
        assert client.delete(f"/cart/items/{pid}", headers=dispensary_headers).status_code == 404

    def test_unavailable_product(self, client, dispensary_headers, catalog):
        response = client.post("/cart/add", json={"product_id": catalog["hidden"].id, "quantity": 1},
                               headers=dispensary_headers)
        assert response.status_code == 404

    def test_corrupt_slot_reads_empty(self, client, db_session, dispensary_headers, seed_dispensary_user):
        db_session.add(StorageSlot(owner_id=seed_dispensary_user.id, key=CART_KEY, value="{broken"))
        db_session.commit()

        response = client.get("/cart", headers=dispensary_headers)

        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["total"] == 0


class TestFavoritesAndAlerts:
    def test_toggle_and_hydrate(self, client, dispensary_headers, catalog):
        nl, gummies, hidden = catalog["nl"], catalog["gummies"], catalog["hidden"]
        for product in (gummies, nl, hidden):
            assert client.post(f"/favorites/{product.id}/toggle", headers=dispensary_headers).json()["is_favorite"]

        ids = client.get("/favorites", headers=dispensary_headers).json()["product_ids"]
        assert ids == [str(gummies.id), str(nl.id), str(hidden.id)]

        hydrated = client.post("/favorites/products", json={"product_ids": ids}, headers=dispensary_headers).json()
        assert [p["id"] for p in hydrated["products"]] == [gummies.id, nl.id]

        off = client.post(f"/favorites/{nl.id}/toggle", headers=dispensary_headers).json()
        assert off["is_favorite"] is False
        assert off["product_ids"] == [str(gummies.id), str(hidden.id)]

    def test_price_alert_flow(self, client, db_session, dispensary_headers, catalog):
        nl = catalog["nl"]
        created = client.post("/price-alerts", json={"product_id": nl.id, "target_price": 30.00},
                              headers=dispensary_headers)
        assert created.status_code == 201, created.json()
        assert created.json()["current_price"] == 36.0

        duplicate = client.post("/price-alerts", json={"product_id": nl.id, "target_price": 20.00},
                                headers=dispensary_headers)
        assert duplicate.status_code == 400

        too_high = client.post("/price-alerts", json={"product_id": catalog["gummies"].id, "target_price": 5.00},
                               headers=dispensary_headers)
        assert too_high.json()["detail"] == "Target price must be lower than current price"

        nl.price_cents = 2700
        db_session.commit()
        alerts = client.post("/price-alerts/refresh", headers=dispensary_headers).json()["alerts"]

        assert alerts[0]["is_triggered"] is True
        assert alerts[0]["original_price"] == 36.0
        assert alerts[0]["discount_percent"] == 25

        assert client.delete(f"/price-alerts/{alerts[0]['id']}", headers=dispensary_headers).status_code == 200
        assert client.get("/price-alerts", headers=dispensary_headers).json()["alerts"] == []

    def test_view_mode_preferences(self, client, dispensary_headers):
        assert client.get("/preferences/productViewMode", headers=dispensary_headers).json()["mode"] == "card"
        saved = client.put("/preferences/productViewMode", json={"mode": "list"}, headers=dispensary_headers)
        assert saved.json() == {"key": "productViewMode", "mode": "list"}
        assert client.get("/preferences/productViewMode", headers=dispensary_headers).json()["mode"] == "list"
        assert client.put("/preferences/productViewMode", json={"mode": "grid"},
                          headers=dispensary_headers).status_code == 400
