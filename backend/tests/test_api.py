"""
HTTP surface tests.

Verifies:
- Protected endpoints return 401 without a token and 403 for the wrong role
- Error responses use the {"success": false, "message": ...} envelope
- Cart, checkout, history and order tracking round trip through the API
- Admin statistics, user search and branch management
"""

from datetime import date, timedelta

import pytest

from treasures.extensions import db
from treasures.models import PurchaseRecord, Watch
from treasures.services import checkout_service

ADDRESS = {"country": "Israel", "city": "Haifa", "homeAddress": "12 Harbour Road",
           "zipcode": "3100001", "phoneNumber": "050-0000000"}


# =============================================================================
# AUTHORIZATION - 401 / 403
# =============================================================================


class TestUnauthenticatedAccess:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("POST", "/api/auth/logout"),
            ("GET", "/api/users/cart"),
            ("POST", "/api/users/cart"),
            ("POST", "/api/users/purchase"),
            ("GET", "/api/users/purchase-history"),
            ("GET", "/api/users/track-order/ORD-1"),
            ("PUT", "/api/users/profile"),
            ("PUT", "/api/users/addresses"),
            ("POST", "/api/watches"),
            ("PUT", "/api/watches/1"),
            ("DELETE", "/api/watches/1"),
            ("POST", "/api/branches"),
            ("GET", "/api/admin/sales-stats"),
            ("GET", "/api/admin/users"),
            ("GET", "/api/admin/users/search?name=a"),
            ("GET", "/api/admin/purchase-history/1"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.json["success"] is False

    def test_garbage_token_rejected(self, client, db_session):
        resp = client.get("/api/users/cart", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401


class TestShopperDeniedAdmin:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/admin/sales-stats"),
            ("GET", "/api/admin/users"),
            ("GET", "/api/admin/purchase-history/1"),
            ("POST", "/api/watches"),
            ("DELETE", "/api/watches/1"),
            ("POST", "/api/branches"),
        ],
    )
    def test_forbidden(self, client, shopper_headers, method, path):
        resp = getattr(client, method.lower())(path, headers=shopper_headers)
        assert resp.status_code == 403


# =============================================================================
# AUTH
# =============================================================================


class TestAuth:

    def test_register_then_me(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "name": "Noa", "email": "  NOA@Example.com ", "password": "secret1",
        })
        assert resp.status_code == 201
        token = resp.json["token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json["user"]["email"] == "noa@example.com"
        assert me.json["user"]["role"] == "user"

    def test_duplicate_email_conflict(self, client, shopper):
        resp = client.post("/api/auth/register", json={
            "name": "Dana", "email": "dana@example.com", "password": "secret1",
        })
        assert resp.status_code == 409
        assert resp.json == {"success": False, "message": "User already exists with this email"}

    def test_short_password_rejected(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "name": "Noa", "email": "noa@example.com", "password": "12345",
        })
        assert resp.status_code == 400

    def test_wrong_password(self, client, shopper):
        resp = client.post("/api/auth/login", json={"email": "dana@example.com", "password": "wrong!!"})
        assert resp.status_code == 401
        assert resp.json["message"] == "Invalid credentials"

    def test_logout_revokes_token(self, client, shopper_headers):
        assert client.post("/api/auth/logout", headers=shopper_headers).status_code == 200
        assert client.get("/api/auth/me", headers=shopper_headers).status_code == 401


# =============================================================================
# CART + CHECKOUT
# =============================================================================


class TestCheckoutFlow:

    def test_cart_then_purchase(self, client, shopper_headers, make_watch):
        a = make_watch(name="A", price_cents=100, inventory=5)
        b = make_watch(name="B", price_cents=50, inventory=1)

        cart = client.post("/api/users/cart", headers=shopper_headers, json=[
            {"watch": a.id, "quantity": 3},
            {"watch": {"_id": str(b.id)}, "quantity": 2},
            {"watch": 9999, "quantity": 1},
        ])
        assert cart.status_code == 200
        assert cart.json["dropped"] == 1
        assert len(cart.json["data"]) == 2

        resp = client.post("/api/users/purchase", headers=shopper_headers,
                           json={"shippingAddress": ADDRESS})
        assert resp.status_code == 200
        body = resp.json
        assert body["success"] is True
        assert body["warnings"] == ["B"]
        assert "B" in body["message"]
        assert body["totalPriceCents"] == 300
        assert len(body["data"]) == 1
        assert body["data"][0]["total_price_cents"] == 300
        assert body["data"][0]["watch"]["name"] == "A"
        assert body["data"][0]["shipping_address"] == ADDRESS

        assert client.get("/api/users/cart", headers=shopper_headers).json["data"] == []

    def test_success_message(self, client, shopper_headers, make_watch):
        a = make_watch(name="A", inventory=5)
        client.post("/api/users/cart", headers=shopper_headers, json=[{"watch": a.id, "quantity": 1}])

        resp = client.post("/api/users/purchase", headers=shopper_headers,
                           json={"shippingAddress": ADDRESS})

        assert resp.json["message"] == "Purchase completed successfully."
        assert resp.json["warnings"] == []

    def test_empty_cart_purchase(self, client, shopper_headers):
        resp = client.post("/api/users/purchase", headers=shopper_headers,
                           json={"shippingAddress": ADDRESS})
        assert resp.status_code == 400
        assert resp.json == {"success": False, "message": "Cart is empty"}

    def test_cart_payload_must_be_array(self, client, shopper_headers):
        resp = client.post("/api/users/cart", headers=shopper_headers, json={"watch": 1})
        assert resp.status_code == 400

    @pytest.mark.parametrize("address", ["12 Harbour Road, Haifa", {}])
    def test_shipping_address_stored_as_given(self, client, shopper_headers, make_watch, address):
        a = make_watch(name="A", inventory=5)
        client.post("/api/users/cart", headers=shopper_headers, json=[{"watch": a.id}])

        resp = client.post("/api/users/purchase", headers=shopper_headers,
                           json={"shippingAddress": address})

        assert resp.status_code == 200
        assert resp.json["data"][0]["shipping_address"] == address

    def test_purchase_body_must_be_object(self, client, shopper_headers, make_watch):
        a = make_watch(name="A", inventory=5)
        client.post("/api/users/cart", headers=shopper_headers, json=[{"watch": a.id}])

        resp = client.post("/api/users/purchase", headers=shopper_headers, json=[ADDRESS])

        assert resp.status_code == 400
        assert resp.json == {"success": False, "message": "Invalid JSON payload"}
        assert db.session.query(PurchaseRecord).count() == 0

    def test_unexpected_checkout_failure_is_server_error(self, client, shopper_headers, make_watch, monkeypatch):
        a = make_watch(name="A", inventory=5)
        client.post("/api/users/cart", headers=shopper_headers, json=[{"watch": a.id}])

        def broken_order_number():
            raise RuntimeError("order numbering offline")

        monkeypatch.setattr(checkout_service, "new_order_number", broken_order_number)
        resp = client.post("/api/users/purchase", headers=shopper_headers,
                           json={"shippingAddress": ADDRESS})

        assert resp.status_code == 500
        assert resp.json == {"success": False, "message": "Server Error"}
        assert len(client.get("/api/users/cart", headers=shopper_headers).json["data"]) == 1

    def test_track_order(self, app, client, shopper, shopper_headers, make_watch):
        a = make_watch(name="A", inventory=5)
        client.post("/api/users/cart", headers=shopper_headers, json=[{"watch": a.id}])
        client.post("/api/users/purchase", headers=shopper_headers, json={"shippingAddress": ADDRESS})

        record = db.session.query(PurchaseRecord).filter_by(user_id=shopper.id).one()
        resp = client.get(f"/api/users/track-order/{record.order_number}", headers=shopper_headers)

        assert resp.status_code == 200
        expected = (record.purchase_date + timedelta(days=app.config["ORDER_DELIVERY_DAYS"])).date()
        assert resp.json["estimated_delivery"] == expected.isoformat()
        assert resp.json["order"]["order_number"] == record.order_number

    def test_track_unknown_order(self, client, shopper_headers):
        resp = client.get("/api/users/track-order/ORD-NOPE", headers=shopper_headers)
        assert resp.status_code == 404
        assert resp.json["success"] is False


# =============================================================================
# PROFILE
# =============================================================================


class TestProfile:

    def test_update_profile(self, client, shopper_headers):
        resp = client.put("/api/users/profile", headers=shopper_headers, json={
            "name": "Dana", "familyName": "Levi", "birthDate": "1990-05-17", "sex": "female",
        })
        assert resp.status_code == 200
        user = resp.json["user"]
        assert user["family_name"] == "Levi"
        assert user["birth_date"] == date(1990, 5, 17).isoformat()
        assert user["sex"] == "female"

    def test_invalid_sex(self, client, shopper_headers):
        resp = client.put("/api/users/profile", headers=shopper_headers, json={"sex": "other"})
        assert resp.status_code == 400

    def test_role_not_writable(self, client, shopper_headers):
        resp = client.put("/api/users/profile", headers=shopper_headers, json={"role": "admin"})
        assert resp.status_code == 400

    def test_replace_addresses(self, client, shopper_headers):
        resp = client.put("/api/users/addresses", headers=shopper_headers, json={
            "addresses": [ADDRESS, {"country": "Israel", "city": "Eilat"}],
        })
        assert resp.status_code == 200
        assert [a["city"] for a in resp.json["addresses"]] == ["Haifa", "Eilat"]

        resp = client.put("/api/users/addresses", headers=shopper_headers, json={"addresses": []})
        assert resp.json["addresses"] == []

    def test_addresses_body_must_be_object(self, client, shopper_headers):
        resp = client.put("/api/users/addresses", headers=shopper_headers, json=[ADDRESS])
        assert resp.status_code == 400
        assert resp.json == {"success": False, "message": "Invalid JSON payload"}


# =============================================================================
# CATALOG + BRANCHES
# =============================================================================


class TestCatalogApi:

    def test_public_listing(self, client, make_watch):
        make_watch(name="A")
        resp = client.get("/api/watches?limit=5")
        assert resp.status_code == 200
        assert resp.json["total"] == 1

    def test_missing_watch_404(self, client, db_session):
        resp = client.get("/api/watches/424242")
        assert resp.status_code == 404
        assert resp.json == {"success": False, "message": "Watch not found"}

    def test_admin_create_update_delete(self, client, admin_headers):
        created = client.post("/api/watches", headers=admin_headers, json={
            "name": "Admiral", "priceCents": 45000, "image": "https://img.example.com/a.jpg",
            "category": "luxury-watches", "description": "Automatic.", "inventory": 3,
        })
        assert created.status_code == 201
        watch_id = created.json["data"]["id"]

        updated = client.put(f"/api/watches/{watch_id}", headers=admin_headers, json={"inventory": 7})
        assert updated.json["data"]["inventory"] == 7

        deleted = client.delete(f"/api/watches/{watch_id}", headers=admin_headers)
        assert deleted.status_code == 200
        assert db.session.get(Watch, watch_id) is None

    def test_unknown_route_envelope(self, client, db_session):
        resp = client.get("/api/nothing-here")
        assert resp.status_code == 404
        assert resp.json["success"] is False


class TestBranches:

    def test_admin_creates_branch_and_public_lists_it(self, client, admin_headers):
        resp = client.post("/api/branches", headers=admin_headers, json={
            "name": "Downtown", "position": {"lat": 32.08, "lng": 34.78},
            "phoneNumber": "03-5550100", "openingHour": "09:00", "closingHour": "20:00",
        })
        assert resp.status_code == 201
        assert resp.json["data"]["position"] == {"lat": 32.08, "lng": 34.78}

        listing = client.get("/api/branches")
        assert [b["name"] for b in listing.json["data"]] == ["Downtown"]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"position": None},
            {"openingHour": "9am"},
            {"phoneNumber": ""},
            {"position": {"lat": 123, "lng": 0}},
        ],
    )
    def test_invalid_branch(self, client, admin_headers, overrides):
        payload = {
            "name": "Downtown", "position": {"lat": 32.08, "lng": 34.78},
            "phoneNumber": "03-5550100", "openingHour": "09:00", "closingHour": "20:00",
        }
        payload.update(overrides)
        resp = client.post("/api/branches", headers=admin_headers, json=payload)
        assert resp.status_code == 400


# =============================================================================
# ADMIN
# =============================================================================


class TestAdmin:

    def test_sales_stats(self, client, shopper_headers, admin_headers, make_watch):
        a = make_watch(name="A", inventory=10)
        b = make_watch(name="B", inventory=10, category="smartwatches")
        client.post("/api/users/cart", headers=shopper_headers,
                    json=[{"watch": a.id, "quantity": 5}, {"watch": b.id, "quantity": 1}])
        client.post("/api/users/purchase", headers=shopper_headers, json={"shippingAddress": ADDRESS})

        resp = client.get("/api/admin/sales-stats", headers=admin_headers)

        assert resp.status_code == 200
        data = resp.json["data"]
        assert [(r["name"], r["quantity_sold"]) for r in data["top_selling_watches"]] == [("A", 5), ("B", 1)]
        assert data["sales_by_category"] == [
            {"category": "men-watches", "quantity_sold": 5},
            {"category": "smartwatches", "quantity_sold": 1},
        ]
        assert data["sales_by_sex"] == [{"sex": "unknown", "quantity_sold": 6}]

    def test_user_search_and_history(self, client, shopper, admin_headers):
        found = client.get("/api/admin/users/search?name=DAN", headers=admin_headers)
        assert [u["email"] for u in found.json["data"]] == ["dana@example.com"]

        history = client.get(f"/api/admin/purchase-history/{shopper.id}", headers=admin_headers)
        assert history.status_code == 200
        assert history.json["data"] == []

    def test_search_requires_name(self, client, admin_headers):
        resp = client.get("/api/admin/users/search", headers=admin_headers)
        assert resp.status_code == 400

    def test_history_for_unknown_user(self, client, admin_headers):
        resp = client.get("/api/admin/purchase-history/9999", headers=admin_headers)
        assert resp.status_code == 404


class TestHealth:

    def test_health(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json["checks"]["database"]["status"] == "healthy"

    def test_cors_allows_configured_frontend(self, client, db_session):
        resp = client.get("/api/health", headers={"Origin": "https://shop.timestreasures.test"})
        assert resp.headers["Access-Control-Allow-Origin"] == "https://shop.timestreasures.test"
