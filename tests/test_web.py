import unittest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import patch

from fastapi.testclient import TestClient

from storefront_case import StoreTestCase

from core.config import Settings
from core.errors import StoreUnavailable
from core.session_manager import issue_token
from web.app import create_app

SECRET = "test-secret"


def money(value):
    return Decimal(str(value))


class StorefrontAppTestCase(StoreTestCase):
    def setUp(self):
        super().setUp()
        self.widget = self.make_product("Widget", "9.99")
        self.gadget = self.make_product("Gadget", "5.00")
        self.settings = Settings(jwt_secret=SECRET)
        self.app = create_app(self.Session, self.settings)
        self.client = TestClient(self.app, follow_redirects=False)

    def tearDown(self):
        self.client.close()
        super().tearDown()

    def signup_and_login(self, email="alice@example.com", password="pw-alice"):
        self.client.post("/signup", data={
            "first_name": "Alice", "last_name": "Smith",
            "email": email, "password": password,
        })
        return self.client.post("/login", data={"email": email, "password": password})

    # ---------- Auth ----------

    def test_anonymous_home_shows_catalog(self):
        resp = self.client.get("/")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertFalse(body["is_logged_in"])
        self.assertEqual([p["name"] for p in body["products"]], ["Widget", "Gadget"])

    def test_protected_pages_redirect_to_login(self):
        for path in ("/dashboard", "/cart", "/checkout", "/orders", "/view-product/1"):
            resp = self.client.get(path)
            self.assertEqual(resp.status_code, 303, path)
            self.assertEqual(resp.headers["location"], "/login")

        resp = self.client.post(f"/add-to-cart/{self.widget.id}", data={"quantity": "1"})
        self.assertEqual(resp.headers["location"], "/login")

    def test_signup_login_and_dashboard(self):
        resp = self.client.post("/signup", data={
            "first_name": "Alice", "last_name": "Smith",
            "email": "alice@example.com", "password": "pw-alice",
        })
        self.assertEqual(resp.status_code, 303)
        self.assertEqual(resp.headers["location"], "/login")

        resp = self.client.post("/login", data={"email": "alice@example.com", "password": "pw-alice"})
        self.assertEqual(resp.status_code, 303)
        self.assertEqual(resp.headers["location"], "/dashboard")
        cookie_header = resp.headers["set-cookie"]
        self.assertIn("token=", cookie_header)
        self.assertIn("HttpOnly", cookie_header)
        self.assertNotIn("Secure", cookie_header)

        resp = self.client.get("/dashboard")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["user"]["email"], "alice@example.com")
        self.assertEqual(body["user"]["role"], "user")
        self.assertEqual(body["cart_count"], 0)

        # Logged-in visitors skip the public catalog
        resp = self.client.get("/")
        self.assertEqual(resp.headers["location"], "/dashboard")

    def test_duplicate_signup(self):
        self.signup_and_login()
        resp = self.client.post("/signup", data={
            "first_name": "Other", "email": "alice@example.com", "password": "x",
        })
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["detail"], "User already exists")

    def test_bad_login(self):
        self.signup_and_login()
        self.client.cookies.clear()

        resp = self.client.post("/login", data={"email": "alice@example.com", "password": "nope"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Invalid credentials")
        self.assertNotIn("set-cookie", resp.headers)

        resp = self.client.post("/login", data={"email": "ghost@example.com", "password": "nope"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "No user found with this email!")

    def test_logout(self):
        self.signup_and_login()
        resp = self.client.get("/logout")
        self.assertEqual(resp.headers["location"], "/login")
        self.assertEqual(self.client.get("/dashboard").status_code, 303)

    def test_bearer_token_and_expired_token(self):
        self.signup_and_login()
        token = self.client.cookies.get("token")

        with TestClient(self.app, follow_redirects=False) as api:
            resp = api.get("/cart", headers={"Authorization": f"Bearer {token}"})
            self.assertEqual(resp.status_code, 200)

            stale = issue_token(
                {"id": 1, "first_name": "Alice", "email": "alice@example.com"},
                SECRET,
                now=datetime.now(timezone.utc) - timedelta(hours=2),
            )
            resp = api.get("/cart", headers={"Authorization": f"Bearer {stale}"})
            self.assertEqual(resp.status_code, 303)
            self.assertEqual(resp.headers["location"], "/login")

            resp = api.get("/cart", headers={"Authorization": "Bearer garbage"})
            self.assertEqual(resp.headers["location"], "/login")

    def test_token_for_deleted_user(self):
        token = issue_token({"id": 999, "first_name": "Nobody", "email": "x@example.com"}, SECRET)
        resp = self.client.get("/dashboard", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(resp.status_code, 404)

    # ---------- Catalog, cart and checkout ----------

    def test_view_product(self):
        self.signup_and_login()
        resp = self.client.get(f"/view-product/{self.widget.id}")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(money(resp.json()["product"]["price"]), Decimal("9.99"))
        self.assertEqual(self.client.get("/view-product/999").status_code, 404)

    def test_cart_and_checkout_flow(self):
        self.signup_and_login()

        resp = self.client.post(f"/add-to-cart/{self.widget.id}", data={"quantity": "1"})
        self.assertEqual(resp.status_code, 303)
        self.assertEqual(resp.headers["location"], "/cart")
        self.client.post(f"/add-to-cart/{self.widget.id}", data={"quantity": "junk"})
        self.client.post(f"/add-to-cart/{self.gadget.id}", data={})
        self.assertEqual(
            self.client.post("/add-to-cart/999", data={"quantity": "1"}).status_code, 404
        )

        items = self.client.get("/cart").json()["items"]
        self.assertEqual([(i["name"], i["quantity"]) for i in items], [("Widget", 2), ("Gadget", 1)])
        self.assertEqual(self.client.get("/dashboard").json()["cart_count"], 3)

        checkout = self.client.get("/checkout").json()
        self.assertEqual(money(checkout["total"]), Decimal("24.98"))

        resp = self.client.post("/place-order", data={
            "full_name": "Alice Smith", "phone_number": "555-0100", "address": "1 Main St",
            "city": "Springfield", "province": "ON", "payment_method": "cod",
        })
        self.assertEqual(resp.status_code, 303)
        self.assertEqual(resp.headers["location"], "/orders")

        self.assertEqual(self.client.get("/cart").json()["items"], [])
        orders = self.client.get("/orders").json()["orders"]
        self.assertEqual(len(orders), 1)
        self.assertEqual(money(orders[0]["total_amount"]), Decimal("24.98"))
        self.assertEqual(orders[0]["payment_method"], "cod")
        self.assertEqual(
            sorted((i["name"], i["quantity"]) for i in orders[0]["items"]),
            [("Gadget", 1), ("Widget", 2)],
        )

        resp = self.client.post("/place-order", data={"payment_method": "cod"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Your cart is empty")

    def test_remove_item(self):
        self.signup_and_login()
        self.client.post(f"/add-to-cart/{self.widget.id}", data={"quantity": "2"})
        cart_id = self.client.get("/cart").json()["items"][0]["cart_id"]

        for _ in range(2):
            resp = self.client.get(f"/remove-item/{cart_id}")
            self.assertEqual(resp.status_code, 303)
            self.assertEqual(resp.headers["location"], "/cart")
        self.assertEqual(self.client.get("/cart").json()["items"], [])

    # ---------- Google login ----------

    def google_callback(self, profile, state="abc", cookie_state="abc"):
        self.client.cookies.set("oauth_state", cookie_state)
        with patch("web.auth_views.fetch_google_user_info", return_value=profile) as fetch:
            resp = self.client.get(f"/auth/google/callback?code=xyz&state={state}")
        return resp, fetch

    def test_google_callback_creates_session(self):
        resp, fetch = self.google_callback({"email": "gina@example.com", "name": "Gina Park"})
        self.assertEqual(resp.status_code, 303)
        self.assertEqual(resp.headers["location"], "/dashboard")
        fetch.assert_called_once_with(self.settings, "xyz", "abc")

        body = self.client.get("/dashboard").json()
        self.assertEqual(body["user"]["email"], "gina@example.com")
        self.assertEqual(body["user"]["first_name"], "Gina Park")
        self.assertEqual(body["user"]["last_name"], "")

    def test_google_callback_failures_go_to_login(self):
        resp, fetch = self.google_callback({"email": None, "name": "No Mail"})
        self.assertEqual(resp.headers["location"], "/login")

        resp, fetch = self.google_callback({"email": "gina@example.com"}, state="forged")
        self.assertEqual(resp.headers["location"], "/login")
        fetch.assert_not_called()

        self.client.cookies.clear()
        with patch("web.auth_views.fetch_google_user_info", side_effect=RuntimeError("denied")):
            self.client.cookies.set("oauth_state", "abc")
            resp = self.client.get("/auth/google/callback?code=xyz&state=abc")
        self.assertEqual(resp.headers["location"], "/login")
        self.assertEqual(self.client.get("/dashboard").status_code, 303)

    def test_google_callback_database_outage_is_logged(self):
        self.client.cookies.set("oauth_state", "abc")
        profile = {"email": "gina@example.com", "name": "Gina Park"}
        with patch("web.auth_views.fetch_google_user_info", return_value=profile), \
                patch("web.auth_views.resolve_federated_user", side_effect=StoreUnavailable()), \
                patch("web.auth_views._logger") as logger:
            resp = self.client.get("/auth/google/callback?code=xyz&state=abc")
        self.assertEqual(resp.headers["location"], "/login")
        logger.error.assert_called_once()
        logger.warning.assert_not_called()

    def test_google_login_redirects_to_provider(self):
        with patch("web.auth_views.authorization_url",
                   return_value=("https://accounts.google.com/o/oauth2/auth?x=1", "st8")):
            resp = self.client.get("/auth/google")
        self.assertEqual(resp.status_code, 303)
        self.assertTrue(resp.headers["location"].startswith("https://accounts.google.com/"))
        self.assertIn("oauth_state=st8", resp.headers["set-cookie"])



class ProductionCookieTestCase(StoreTestCase):
    def setUp(self):
        super().setUp()
        self.settings = Settings(jwt_secret=SECRET, app_env="production")
        self.client = TestClient(create_app(self.Session, self.settings), follow_redirects=False)

    def tearDown(self):
        self.client.close()
        super().tearDown()

    def session_cookie(self, resp):
        cookies = [c for c in resp.headers.get_list("set-cookie") if c.startswith("token=")]
        self.assertEqual(len(cookies), 1)
        return cookies[0]

    def test_login_cookie_is_secure(self):
        self.make_user()
        resp = self.client.post("/login", data={"email": "alice@example.com", "password": "pw-alice"})
        self.assertEqual(resp.status_code, 303)
        cookie = self.session_cookie(resp)
        self.assertIn("HttpOnly", cookie)
        self.assertIn("Secure", cookie)

    def test_google_callback_cookie_is_secure(self):
        self.client.cookies.set("oauth_state", "abc")
        profile = {"email": "gina@example.com", "name": "Gina Park"}
        with patch("web.auth_views.fetch_google_user_info", return_value=profile):
            resp = self.client.get("/auth/google/callback?code=xyz&state=abc")
        self.assertEqual(resp.headers["location"], "/dashboard")
        cookie = self.session_cookie(resp)
        self.assertIn("HttpOnly", cookie)
        self.assertIn("Secure", cookie)


if __name__ == "__main__":
    unittest.main()
