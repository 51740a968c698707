"""
API tests for accounts and the grower back office: products, strains,
batches, settings, Stripe onboarding and the audit log.
"""
import httpx
import pytest

from phenofarm.main import app
from phenofarm.models import Log
from phenofarm.utils.stripe_client import StripeClient, get_stripe_client


class TestAuth:
    def test_register_login_me(self, client, db_session):
        response = client.post("/register", json={
            "email": "New.Grower@Example.com",
            "password": "longenough1",
            "role": "GROWER",
            "business_name": "Valley Farm",
        })
        assert response.status_code == 201, response.json()
        assert response.json()["email"] == "new.grower@example.com"
        assert response.json()["grower_id"] is not None

        login = client.post("/login", json={"email": "new.grower@example.com", "password": "longenough1"})
        assert login.status_code == 200
        token = login.json()["access_token"]

        me = client.get("/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["role"] == "GROWER"

    def test_duplicate_email(self, client, db_session, seed_grower_user):
        response = client.post("/register", json={
            "email": "GROWER@test.com",
            "password": "longenough1",
            "role": "DISPENSARY",
            "business_name": "Dup",
        })
        assert response.status_code == 409
        failed = db_session.query(Log).filter(Log.action == "REGISTER", Log.status == "FAIL").count()
        assert failed == 1

    def test_admin_role_cannot_self_register(self, client, db_session):
        response = client.post("/register", json={
            "email": "boss@example.com", "password": "longenough1", "role": "ADMIN", "business_name": "X",
        })
        assert response.status_code == 422

    def test_bad_password(self, client, seed_grower_user):
        response = client.post("/login", json={"email": "grower@test.com", "password": "wrong-password"})
        assert response.status_code == 401

    def test_role_guard(self, client, dispensary_headers):
        assert client.get("/products", headers=dispensary_headers).status_code == 403


class TestProducts:
    def test_create_with_batch_resolves_potency(self, client, grower_headers, seed_strain_batch):
        strain, batch = seed_strain_batch
        response = client.post("/products", json={
            "name": "NL Smalls", "product_type": "Flower", "price": 25.5, "inventory_qty": 40,
            "strain_id": strain.id, "batch_id": batch.id, "thc_legacy": 10.0,
        }, headers=grower_headers)

        assert response.status_code == 201, response.json()
        body = response.json()
        assert body["price"] == 25.5
        assert body["thc"] == 22.0
        assert body["strain"] == "Northern Lights"

    def test_foreign_strain_rejected(self, client, db_session, other_grower_headers, seed_strain_batch):
        strain, _ = seed_strain_batch
        response = client.post("/products", json={
            "name": "Stolen", "product_type": "Flower", "price": 10, "inventory_qty": 1, "strain_id": strain.id,
        }, headers=other_grower_headers)
        assert response.status_code == 404

    def test_update_toggle_and_soft_delete(self, client, db_session, make_product, grower_headers,
                                           seed_grower_user):
        product = make_product(seed_grower_user.grower_id)

        updated = client.patch(f"/products/{product.id}", json={"price": 12.0, "inventory_qty": 3},
                               headers=grower_headers)
        assert updated.json()["price"] == 12.0
        assert updated.json()["inventory_qty"] == 3

        blank = client.patch(f"/products/{product.id}", json={"name": None}, headers=grower_headers)
        assert blank.status_code == 400

        toggled = client.patch(f"/products/{product.id}/availability", headers=grower_headers)
        assert toggled.json()["is_available"] is False

        client.patch(f"/products/{product.id}/availability", headers=grower_headers)
        assert client.delete(f"/products/{product.id}", headers=grower_headers).json()["success"] is True

        db_session.refresh(product)
        assert product.is_available is False
        listing = client.get("/products", params={"include_unavailable": False}, headers=grower_headers).json()
        assert listing["total"] == 0

    def test_other_growers_products_hidden(self, client, make_product, other_grower_headers, seed_grower_user):
        product = make_product(seed_grower_user.grower_id)
        assert client.get(f"/products/{product.id}", headers=other_grower_headers).status_code == 404
        assert client.get("/products", headers=other_grower_headers).json()["total"] == 0


class TestStrainsAndBatches:
    def test_strain_crud(self, client, grower_headers):
        created = client.post("/strains", json={"name": "Sour Diesel", "genetics": "Sativa dominant"},
                              headers=grower_headers)
        assert created.status_code == 201
        assert created.json()["strain_type"] == "Sativa"

        duplicate = client.post("/strains", json={"name": "sour diesel"}, headers=grower_headers)
        assert duplicate.status_code == 409

        strain_id = created.json()["id"]
        renamed = client.put(f"/strains/{strain_id}", json={"name": "Sour D"}, headers=grower_headers)
        assert renamed.json()["name"] == "Sour D"

        assert client.delete(f"/strains/{strain_id}", headers=grower_headers).status_code == 200
        assert client.get("/strains", headers=grower_headers).json() == []

    def test_referenced_strain_is_kept(self, client, make_product, grower_headers, seed_strain_batch):
        strain, batch = seed_strain_batch
        make_product(batch.grower_id, strain_id=strain.id, batch_id=batch.id)

        response = client.delete(f"/strains/{strain.id}", headers=grower_headers)

        assert response.status_code == 409
        assert response.json()["detail"] == "Cannot delete strain used by 1 batch(es) and 1 product(s)"

    def test_batch_rules(self, client, make_product, grower_headers, seed_strain_batch):
        strain, batch = seed_strain_batch
        payload = {"batch_number": "NL-001", "harvest_date": "2024-10-01", "strain_id": strain.id, "thc": 19.0}

        assert client.post("/batches", json=payload, headers=grower_headers).status_code == 409

        payload["batch_number"] = "NL-002"
        created = client.post("/batches", json=payload, headers=grower_headers)
        assert created.status_code == 201
        assert created.json()["strain_name"] == "Northern Lights"

        listed = client.get("/batches", headers=grower_headers).json()
        assert [b["batch_number"] for b in listed] == ["NL-002", "NL-001"]

        make_product(batch.grower_id, strain_id=strain.id, batch_id=batch.id)
        detail = client.get(f"/batches/{batch.id}", headers=grower_headers).json()
        assert detail["product_count"] == 1
        assert detail["products"][0]["price"] == 10.0

        blocked = client.delete(f"/batches/{batch.id}", headers=grower_headers)
        assert blocked.status_code == 409
        assert client.delete(f"/batches/{created.json()['id']}", headers=grower_headers).json() == {
            "message": "Batch deleted successfully"
        }

    def test_batch_for_foreign_strain(self, client, other_grower_headers, seed_strain_batch):
        strain, _ = seed_strain_batch
        response = client.post("/batches", json={
            "batch_number": "X-1", "harvest_date": "2024-10-01", "strain_id": strain.id,
        }, headers=other_grower_headers)
        assert response.status_code == 404


class TestSettings:
    def test_defaults(self, client, grower_headers):
        body = client.get("/grower/settings", headers=grower_headers).json()
        assert body["business_name"] == "Green Mountain Farms"
        assert body["state"] == "VT"
        assert body["phone"] == ""
        assert body["email"] == "grower@test.com"

    def test_save_splits_address(self, client, grower_headers):
        response = client.put("/grower/settings", json={
            "business_name": "  Green Mountain Farms LLC ",
            "phone": "802-555-0100",
            "address": "12 Main St, Burlington, VT 05401",
        }, headers=grower_headers)

        assert response.status_code == 200, response.json()
        saved = response.json()["settings"]
        assert saved["business_name"] == "Green Mountain Farms LLC"
        assert (saved["address"], saved["city"], saved["state"], saved["zip"]) == (
            "12 Main St", "Burlington", "VT", "05401")

    def test_business_name_required(self, client, dispensary_headers):
        response = client.put("/dispensary/settings", json={"business_name": "  "}, headers=dispensary_headers)
        assert response.status_code == 400

    def test_email_taken(self, client, grower_headers, seed_dispensary_user):
        response = client.put("/grower/settings", json={
            "business_name": "Green Mountain Farms", "email": "dispensary@test.com",
        }, headers=grower_headers)
        assert response.status_code == 409


class TestStripeConnect:
    @pytest.fixture
    def stripe_calls(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.url.path))
            if request.url.path == "/v1/accounts":
                return httpx.Response(200, json={"id": "acct_123"})
            if request.url.path == "/v1/account_links":
                return httpx.Response(200, json={"url": "https://connect.stripe.com/setup/abc"})
            return httpx.Response(200, json={
                "id": "acct_123", "details_submitted": True, "charges_enabled": True, "payouts_enabled": True,
            })

        stripe = StripeClient(transport=httpx.MockTransport(handler))
        stripe.secret_key = "sk_test_123"
        app.dependency_overrides[get_stripe_client] = lambda: stripe
        yield calls
        app.dependency_overrides.pop(get_stripe_client, None)

    def test_connect_then_activate(self, client, grower_headers, stripe_calls):
        assert client.get("/stripe/account", headers=grower_headers).json()["connected"] is False

        connected = client.post("/stripe/connect", headers=grower_headers)
        assert connected.status_code == 200, connected.json()
        assert connected.json()["url"] == "https://connect.stripe.com/setup/abc"

        again = client.post("/stripe/connect", headers=grower_headers)
        assert again.status_code == 400

        account = client.get("/stripe/account", headers=grower_headers).json()
        assert account == {"connected": True, "stripe_account_id": "acct_123", "status": "active"}
        assert stripe_calls[:2] == [("POST", "/v1/accounts"), ("POST", "/v1/account_links")]

    def test_not_configured(self, client, grower_headers):
        unconfigured = StripeClient()
        unconfigured.secret_key = ""
        app.dependency_overrides[get_stripe_client] = lambda: unconfigured
        try:
            response = client.post("/stripe/connect", headers=grower_headers)
        finally:
            app.dependency_overrides.pop(get_stripe_client, None)
        assert response.status_code == 503


class TestAuditLog:
    def test_admin_only(self, client, grower_headers):
        assert client.get("/logs", headers=grower_headers).status_code == 403

    def test_filters(self, client, admin_headers, grower_headers):
        client.post("/strains", json={"name": "Gelato"}, headers=grower_headers)

        body = client.get("/logs", params={"action": "strain_create"}, headers=admin_headers).json()
        assert body["total"] == 1
        assert body["items"][0]["resource"] == "strains"

        logins = client.get("/logs", params={"action": "LOGIN", "status": "success"}, headers=admin_headers).json()
        assert logins["total"] == 2

        bad = client.get("/logs", params={"date_from": "2024-02-01", "date_to": "2024-01-01"},
                         headers=admin_headers)
        assert bad.status_code == 400
