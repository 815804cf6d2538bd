"""HTTP tests for the access gate, envelopes and the main routes (TestClient + SQLite)."""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from storefront.core.config import get_settings
from storefront.core.security import create_access_token
from storefront.main import app
from storefront.models import Order, Product, Role, User
from tests.support import add_order, add_products, add_user, make_database, make_settings

PREFIX = "/api/v1"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class ApiTestCase(unittest.TestCase):
    """Wires the app to an in-memory database and a temporary assets directory."""

    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.settings = make_settings(assets_dir=self.tmp.name)
        self.database = make_database()
        app.state.database = self.database
        app.dependency_overrides[get_settings] = lambda: self.settings
        self.client = TestClient(app)
        self.session = self.database.session()
        add_user(self.session, "admin-1", Role.ADMIN, name="Root")
        add_user(self.session, "cust-1", Role.NONE, name="Dana")

    def tearDown(self) -> None:
        self.session.close()
        app.dependency_overrides.clear()
        app.state.database = None
        self.database.close()
        self.tmp.cleanup()

    def auth(self, uid: str, header_uid: str | None = None) -> dict[str, str]:
        token = create_access_token(uid, self.settings)
        return {
            "Authorization": f"Bearer {token}",
            "uid": header_uid if header_uid is not None else uid,
        }

    def product_form(self, **overrides: str) -> dict[str, str]:
        form = {
            "name": "Desk Lamp",
            "category": "lighting",
            "subtext": "Warm light",
            "stock": "4",
            "description": "A lamp for your desk",
            "price": "25.5",
        }
        form.update(overrides)
        return form


class TestEnvelopeAndPublicRoutes(ApiTestCase):
    def test_root(self) -> None:
        resp = self.client.get("/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"success": True, "message": "Storefront API"})

    def test_health(self) -> None:
        resp = self.client.get(f"{PREFIX}/health/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["database"], "connected")

    def test_products_by_category_is_public(self) -> None:
        add_products(
            self.session,
            [{"name": "A", "category": "toys"}, {"name": "B", "category": "books"}],
        )
        resp = self.client.get(f"{PREFIX}/products", headers={"category": "toys"})
        body = resp.json()
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(body["success"])
        self.assertEqual([p["name"] for p in body["data"]], ["A"])


class TestTokenExchange(ApiTestCase):
    def test_token_creates_identity(self) -> None:
        resp = self.client.put(
            f"{PREFIX}/token",
            json={"uid": "new-1", "name": "Nia", "photoURL": "https://img.test/n.png"},
        )
        body = resp.json()
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Got token")

        me = self.client.get(
            f"{PREFIX}/users/me",
            headers={"Authorization": f"Bearer {body['data']}", "uid": "new-1"},
        )
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["data"]["name"], "Nia")
        self.assertEqual(me.json()["data"]["photo_url"], "https://img.test/n.png")
        self.assertEqual(me.json()["data"]["role"], "none")

    def test_token_does_not_grant_role(self) -> None:
        self.client.put(f"{PREFIX}/token", json={"uid": "cust-1", "role": "admin"})
        user = self.session.query(User).filter(User.uid == "cust-1").one()
        self.session.refresh(user)
        self.assertIs(user.role, Role.NONE)

    def test_token_requires_uid(self) -> None:
        resp = self.client.put(f"{PREFIX}/token", json={"name": "No uid"})
        self.assertEqual(resp.status_code, 422)
        self.assertFalse(resp.json()["success"])


class TestAccessGate(ApiTestCase):
    """401 for a missing credential; 403 for a bad, mismatched or under-privileged one."""

    def test_missing_credential_is_401(self) -> None:
        resp = self.client.get(f"{PREFIX}/users/me", headers={"uid": "cust-1"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"success": False, "message": "unauthorized"})

    def test_non_bearer_credential_is_401(self) -> None:
        resp = self.client.get(
            f"{PREFIX}/users/me", headers={"Authorization": "Basic abc", "uid": "cust-1"}
        )
        self.assertEqual(resp.status_code, 401)

    def test_invalid_token_is_403(self) -> None:
        resp = self.client.get(
            f"{PREFIX}/users/me",
            headers={"Authorization": "Bearer not-a-token", "uid": "cust-1"},
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["message"], "forbidden access")

    def test_uid_mismatch_is_403(self) -> None:
        resp = self.client.get(f"{PREFIX}/users/me", headers=self.auth("cust-1", "admin-1"))
        self.assertEqual(resp.status_code, 403)

    def test_missing_uid_header_is_403(self) -> None:
        headers = self.auth("cust-1")
        del headers["uid"]
        resp = self.client.get(f"{PREFIX}/users/me", headers=headers)
        self.assertEqual(resp.status_code, 403)

    def test_non_admin_on_admin_route_is_403(self) -> None:
        resp = self.client.get(f"{PREFIX}/products/all", headers=self.auth("cust-1"))
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(resp.json()["success"])

    def test_unknown_identity_on_admin_route_is_403(self) -> None:
        resp = self.client.get(f"{PREFIX}/users", headers=self.auth("ghost"))
        self.assertEqual(resp.status_code, 403)

    def test_admin_status_lookup(self) -> None:
        admin = self.client.get(f"{PREFIX}/users/me/admin", headers=self.auth("admin-1"))
        customer = self.client.get(f"{PREFIX}/users/me/admin", headers=self.auth("cust-1"))
        self.assertEqual(admin.json()["data"], {"admin": True})
        self.assertEqual(customer.json()["data"], {"admin": False})

    def test_non_admin_cannot_delete_product(self) -> None:
        (product,) = add_products(self.session, [{"name": "Keep me"}])
        resp = self.client.delete(
            f"{PREFIX}/products", headers={**self.auth("cust-1"), "_id": str(product.id)}
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(self.session.query(Product).count(), 1)


class TestAdminProductRoutes(ApiTestCase):
    def test_paginated_listing_with_filter(self) -> None:
        specs = [{"name": f"P{i}", "stock": 0 if i in (3, 9, 17) else 4} for i in range(20)]
        add_products(self.session, specs)
        resp = self.client.get(
            f"{PREFIX}/products/all",
            params={"page": 1, "search": "", "filter": "Stock out"},
            headers=self.auth("admin-1"),
        )
        body = resp.json()
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(body["productCount"], 3)
        self.assertEqual(len(body["data"]), 3)
        self.assertEqual({p["stock"] for p in body["data"]}, {0})

    def test_page_zero_is_invalid_input(self) -> None:
        resp = self.client.get(
            f"{PREFIX}/products/all", params={"page": 0}, headers=self.auth("admin-1")
        )
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["success"])

    def test_huge_page_is_invalid_input(self) -> None:
        resp = self.client.get(
            f"{PREFIX}/products/all",
            params={"page": str(10**19)},
            headers=self.auth("admin-1"),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["success"])

    def test_non_numeric_page_is_validation_error(self) -> None:
        resp = self.client.get(
            f"{PREFIX}/products/all", params={"page": "two"}, headers=self.auth("admin-1")
        )
        self.assertEqual(resp.status_code, 422)
        self.assertFalse(resp.json()["success"])

    def test_create_product_with_png(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/products",
            data=self.product_form(),
            files={"image": ("lamp.png", PNG_BYTES, "image/png")},
            headers=self.auth("admin-1"),
        )
        body = resp.json()
        self.assertEqual(resp.status_code, 200, body)
        self.assertEqual(body["message"], "Product added.")
        self.assertEqual(body["data"]["discount"], 0.0)
        filename = body["data"]["image"].rsplit("/", 1)[1]
        self.assertTrue(body["data"]["image"].startswith("http://testserver/assets/"))
        self.assertTrue((Path(self.tmp.name) / filename).exists())

    def test_gif_upload_rejected_before_write(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/products",
            data=self.product_form(),
            files={"image": ("anim.gif", b"GIF89a", "image/gif")},
            headers=self.auth("admin-1"),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(
            resp.json()["message"], "Please upload only jpg, png or jpeg image."
        )
        self.assertEqual(self.session.query(Product).count(), 0)
        self.assertEqual(list(Path(self.tmp.name).iterdir()), [])

    def test_negative_stock_rejected(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/products",
            data=self.product_form(stock="-1"),
            files={"image": ("lamp.png", PNG_BYTES, "image/png")},
            headers=self.auth("admin-1"),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.session.query(Product).count(), 0)

    def test_edit_keeps_image_when_none_uploaded(self) -> None:
        (product,) = add_products(
            self.session, [{"name": "Old", "image": "http://testserver/assets/old.png"}]
        )
        resp = self.client.put(
            f"{PREFIX}/products",
            data=self.product_form(name="New", discount="2"),
            headers={**self.auth("admin-1"), "_id": str(product.id)},
        )
        body = resp.json()
        self.assertEqual(resp.status_code, 200, body)
        self.assertEqual(body["data"]["name"], "New")
        self.assertEqual(body["data"]["discount"], 2.0)
        self.assertEqual(body["data"]["image"], "http://testserver/assets/old.png")

    def test_single_and_delete(self) -> None:
        (product,) = add_products(self.session, [{"name": "Solo"}])
        headers = {**self.auth("admin-1"), "_id": str(product.id)}
        single = self.client.get(f"{PREFIX}/products/single", headers=headers)
        self.assertEqual(single.json()["data"]["name"], "Solo")
        deleted = self.client.delete(f"{PREFIX}/products", headers=headers)
        self.assertEqual(deleted.json(), {"success": True, "message": "Product deleted."})
        missing = self.client.get(f"{PREFIX}/products/single", headers=headers)
        self.assertEqual(missing.status_code, 404)

    def test_missing_id_header(self) -> None:
        resp = self.client.get(f"{PREFIX}/products/single", headers=self.auth("admin-1"))
        self.assertEqual(resp.status_code, 400)

    def test_store_failure_is_generic_500(self) -> None:
        with patch(
            "storefront.services.catalog.list_products",
            side_effect=OperationalError("SELECT", {}, Exception("db password leaked")),
        ):
            resp = self.client.get(f"{PREFIX}/products/all", headers=self.auth("admin-1"))
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(
            resp.json(), {"success": False, "message": "Internal server error."}
        )


class TestUserAdminRoutes(ApiTestCase):
    def test_list_users_with_admin_filter(self) -> None:
        resp = self.client.get(
            f"{PREFIX}/users", params={"filter": "Admin"}, headers=self.auth("admin-1")
        )
        body = resp.json()
        self.assertEqual(body["userCount"], 1)
        self.assertEqual(body["data"][0]["uid"], "admin-1")

    def test_grant_and_revoke_admin(self) -> None:
        granted = self.client.put(f"{PREFIX}/users/cust-1/admin", headers=self.auth("admin-1"))
        self.assertEqual(granted.json()["data"]["role"], "admin")
        now_admin = self.client.get(f"{PREFIX}/products/all", headers=self.auth("cust-1"))
        self.assertEqual(now_admin.status_code, 200)
        revoked = self.client.delete(
            f"{PREFIX}/users/cust-1/admin", headers=self.auth("admin-1")
        )
        self.assertEqual(revoked.json()["data"]["role"], "none")

    def test_grant_unknown_user_is_404(self) -> None:
        resp = self.client.put(f"{PREFIX}/users/ghost/admin", headers=self.auth("admin-1"))
        self.assertEqual(resp.status_code, 404)

    def test_update_own_profile(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/users/me",
            json={"name": "Dana B", "address": "2 Side St"},
            headers=self.auth("cust-1"),
        )
        self.assertEqual(resp.json(), {"success": True, "message": "Profile updated."})
        me = self.client.get(f"{PREFIX}/users/me", headers=self.auth("cust-1")).json()
        self.assertEqual(me["data"]["name"], "Dana B")
        self.assertEqual(me["data"]["profile"], {"address": "2 Side St"})


class TestOrderRoutes(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        add_products(self.session, [{"name": "Lamp", "price": 12.5}])

    def place(self, uid: str) -> dict:
        resp = self.client.post(
            f"{PREFIX}/orders",
            json={"items": [{"product_id": 1, "quantity": 2}]},
            headers=self.auth(uid),
        )
        self.assertEqual(resp.status_code, 200, resp.json())
        return resp.json()["data"]

    def test_total_uses_catalog_price(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/orders",
            json={"items": [{"product_id": 1, "name": "Gift", "price": 0.01, "quantity": 2}]},
            headers=self.auth("cust-1"),
        )
        data = resp.json()["data"]
        self.assertEqual(data["total"], 25.0)
        self.assertEqual(data["items"][0]["name"], "Lamp")
        self.assertEqual(data["items"][0]["price"], 12.5)

    def test_unknown_product_is_invalid_input(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/orders",
            json={"items": [{"product_id": 42, "quantity": 1}]},
            headers=self.auth("cust-1"),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["success"])
        self.assertEqual(self.session.query(Order).count(), 0)

    def test_empty_payment_leaves_order_pending(self) -> None:
        order = self.place("cust-1")
        resp = self.client.post(
            f"{PREFIX}/orders/payment",
            json={},
            headers={**self.auth("cust-1"), "id": str(order["id"])},
        )
        self.assertEqual(resp.status_code, 422)
        self.assertFalse(resp.json()["success"])
        self.assertEqual(self.session.get(Order, order["id"]).status, "pending")

    def test_place_pay_and_ship(self) -> None:
        order = self.place("cust-1")
        self.assertEqual(order["id"], 1)
        self.assertEqual(order["total"], 25.0)
        self.assertEqual(order["status"], "pending")

        paid = self.client.post(
            f"{PREFIX}/orders/payment",
            json={"transaction_id": "tx-9", "method": "card"},
            headers={**self.auth("cust-1"), "id": str(order["id"])},
        )
        self.assertEqual(paid.json()["data"]["status"], "paid")
        self.assertEqual(paid.json()["data"]["payment"]["transaction_id"], "tx-9")

        shipped = self.client.post(
            f"{PREFIX}/orders/status",
            json={"status": "Shipped"},
            headers={**self.auth("admin-1"), "id": str(order["id"])},
        )
        self.assertEqual(shipped.json()["data"]["status"], "shipped")

    def test_sequential_ids(self) -> None:
        ids = [self.place("cust-1")["id"], self.place("admin-1")["id"]]
        self.assertEqual(ids, [1, 2])

    def test_customer_cannot_change_status(self) -> None:
        order = self.place("cust-1")
        resp = self.client.post(
            f"{PREFIX}/orders/status",
            json={"status": "delivered"},
            headers={**self.auth("cust-1"), "id": str(order["id"])},
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(self.session.get(Order, order["id"]).status, "pending")

    def test_my_orders_and_admin_listing(self) -> None:
        add_order(self.session, 50, "cust-1", "paid")
        add_order(self.session, 51, "someone-else", "pending")
        mine = self.client.get(f"{PREFIX}/orders/mine", headers=self.auth("cust-1")).json()
        self.assertEqual(mine["orderCount"], 1)
        self.assertEqual(mine["data"][0]["id"], 50)
        everything = self.client.get(
            f"{PREFIX}/orders", params={"filter": "Pending"}, headers=self.auth("admin-1")
        ).json()
        self.assertEqual(everything["orderCount"], 1)
        self.assertEqual(everything["data"][0]["id"], 51)

    def test_admin_delete_order(self) -> None:
        add_order(self.session, 7, "cust-1")
        resp = self.client.delete(
            f"{PREFIX}/orders", headers={**self.auth("admin-1"), "id": "7"}
        )
        self.assertTrue(resp.json()["success"])
        self.session.expire_all()
        self.assertIsNone(self.session.get(Order, 7))


if __name__ == "__main__":
    unittest.main()
