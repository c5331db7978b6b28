"""
Tests for the Flask JSON API
"""
import unittest

from app import create_app
from tests.support import FakeClock, build_platform


class TestApi(unittest.TestCase):
    """Test cases for the /api blueprint"""

    def setUp(self):
        self.clock = FakeClock()
        self.platform = build_platform(clock=self.clock)
        self.app = create_app(platform=self.platform)
        self.app.testing = True
        self.client = self.app.test_client()

    def _login(self, name, pin, restaurant_id="r1"):
        # Each staff member gets a client of their own, carrying the session cookie
        client = self.app.test_client()
        response = client.post("/api/staff/login",
                               json={"restaurantId": restaurant_id, "name": name, "pin": pin})
        self.assertEqual(response.status_code, 200)
        return client

    def _place(self, **overrides):
        payload = {
            "restaurantId": "r1",
            "orderType": "dine-in",
            "tableNumber": 5,
            "orderName": "Gilbert",
            "items": [{"menuItemId": "m1-s1", "quantity": 1}, {"menuItemId": "m1-m1", "quantity": 1}],
        }
        payload.update(overrides)
        return self.client.post("/api/orders", json=payload)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["status"], "ok")
        self.assertFalse(response.get_json()["platform"]["sweeper"]["running"])

    def test_full_dine_in_flow(self):
        kitchen = self._login("Marco", "2222")
        server = self._login("Sofia", "3333")

        response = self._place()
        self.assertEqual(response.status_code, 201)
        order_id = response.get_json()["order"]["id"]

        response = kitchen.post(f"/api/orders/{order_id}/accept", json={"preparationTime": 15})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["order"]["status"], "Preparing")

        tracker = self.client.get(f"/api/orders/{order_id}/tracker").get_json()
        self.assertEqual(tracker["countdownLabel"], "~15 min")

        self.assertEqual(kitchen.post(f"/api/orders/{order_id}/ready").status_code, 200)
        self.assertEqual(server.post(f"/api/orders/{order_id}/served").status_code, 200)

        response = self.client.post(f"/api/orders/{order_id}/pay", json={"method": "cash"})
        self.assertEqual(response.status_code, 200)
        body = response.get_json()
        self.assertEqual(body["order"]["status"], "Paid")
        self.assertEqual(body["order"]["paymentStatus"], "paid")
        self.assertEqual(body["receipt"]["amount"], 26.50)

        view = self.client.get(f"/api/orders/{order_id}/payment").get_json()
        self.assertEqual(view["view"], "receipt")

    def test_error_status_codes(self):
        kitchen = self._login("Marco", "2222")
        admin = self._login("Gilbert Kareri", "1234")
        order_id = self._place().get_json()["order"]["id"]

        response = self.client.post(f"/api/orders/{order_id}/accept", json={"preparationTime": 10})
        self.assertEqual(response.status_code, 403)

        response = kitchen.post(f"/api/orders/{order_id}/accept", json={"preparationTime": 0})
        self.assertEqual(response.status_code, 400)

        response = admin.post(f"/api/orders/{order_id}/advance", json={"status": "On Route"})
        self.assertEqual(response.status_code, 409)

        response = kitchen.post("/api/orders/ORD-NOPE/ready")
        self.assertEqual(response.status_code, 404)

        self.assertEqual(self._place(tableNumber=None).status_code, 400)

    def test_malformed_order_items(self):
        for items in (["abc"], 5, [["m1-k1", 1, 2]], "m1-k1"):
            response = self._place(orderType="takeaway", items=items)
            self.assertEqual(response.status_code, 400, items)
            self.assertEqual(response.get_json()["error_type"], "precondition_failed")
        self.assertEqual(self.client.post("/api/orders", json=["not", "an", "object"]).status_code, 400)

    def test_headers_grant_no_staff_role(self):
        order_id = self._place().get_json()["order"]["id"]
        forged = {"X-Staff-Role": "Admin", "X-Restaurant-Id": "r1", "X-Staff-Name": "Gilbert Kareri"}

        response = self.client.post(f"/api/orders/{order_id}/accept",
                                    json={"preparationTime": 10}, headers=forged)
        self.assertEqual(response.status_code, 403)
        response = self.client.post("/api/restaurants/r1/menu",
                                    json={"name": "Affogato", "price": 6.5}, headers=forged)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.post("/api/restaurants/r1/archive", headers=forged).status_code, 403)

    def test_other_tenant_staff_rejected(self):
        other_admin = self._login("Diana", "4321", restaurant_id="r2")
        order_id = self._place().get_json()["order"]["id"]
        response = other_admin.post(f"/api/orders/{order_id}/accept", json={"preparationTime": 10})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(other_admin.post("/api/restaurants/r1/archive").status_code, 403)

    def test_staff_login_and_logout(self):
        response = self.client.post("/api/staff/login",
                                    json={"restaurantId": "r1", "name": "Sofia", "pin": "0000"})
        self.assertEqual(response.status_code, 401)

        response = self.client.post("/api/staff/login",
                                    json={"restaurantId": "r1", "name": "Sofia", "pin": "3333"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["actor"]["role"], "Server")
        with self.client.session_transaction() as sess:
            self.assertEqual(sess["staff_id"], "s3")

        self.assertEqual(self.client.post("/api/staff/logout").status_code, 200)
        with self.client.session_transaction() as sess:
            self.assertNotIn("staff_id", sess)

    def test_suspended_staff_session_is_revoked(self):
        kitchen = self._login("Marco", "2222")
        order_id = self._place().get_json()["order"]["id"]
        self.platform.staff_service.set_staff_status("s2", "suspended")

        response = kitchen.post(f"/api/orders/{order_id}/accept", json={"preparationTime": 10})
        self.assertEqual(response.status_code, 401)
        response = kitchen.post(f"/api/orders/{order_id}/accept", json={"preparationTime": 10})
        self.assertEqual(response.status_code, 403)

    def test_disabled_restaurant_revokes_sessions(self):
        admin = self._login("Gilbert Kareri", "1234")
        self.platform.staff_service.set_restaurant_status("r1", "disabled")
        self.assertEqual(admin.post("/api/restaurants/r1/archive").status_code, 401)

    def test_boards(self):
        kitchen = self.client.get("/api/restaurants/r1/kitchen").get_json()
        self.assertEqual([t["id"] for t in kitchen["columns"]["preparing"]], ["ORD-103"])

        floor = self.client.get("/api/restaurants/r1/floor").get_json()
        self.assertEqual(len(floor["tables"]), 12)
        self.assertEqual(self.client.get("/api/restaurants/r9/floor").status_code, 404)

        delivery = self.client.get("/api/restaurants/r1/delivery").get_json()
        self.assertEqual(delivery["columns"]["ready_for_driver"], [])

    def test_alerts(self):
        server = self._login("Sofia", "3333")
        response = self.client.post("/api/restaurants/r1/alerts",
                                    json={"tableNumber": 4, "request": "Request Bill"})
        self.assertEqual(response.status_code, 201)
        alert_id = response.get_json()["alert"]["id"]

        alerts = self.client.get("/api/restaurants/r1/alerts").get_json()["alerts"]
        self.assertEqual([a["id"] for a in alerts], [alert_id])

        resolve = f"/api/restaurants/r1/alerts/{alert_id}/resolve"
        self.assertEqual(self.client.post(resolve).status_code, 403)
        self.assertEqual(server.post(resolve).status_code, 200)
        self.assertEqual(server.post(resolve).status_code, 404)

    def test_cart_checkout(self):
        self.client.post("/api/cart/items", json={"restaurantId": "r1", "itemId": "m1-k1", "quantity": 2})
        cart = self.client.get("/api/cart").get_json()
        self.assertEqual(cart["summary"]["total_amount"], 6.00)

        response = self.client.post("/api/cart/checkout", json={"orderType": "takeaway", "orderName": "Diana"})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()["order"]["orderName"], "Diana")
        self.assertEqual(self.client.get("/api/cart").get_json()["items"], [])

    def test_cart_rejects_non_numeric_quantity(self):
        response = self.client.post("/api/cart/items",
                                    json={"restaurantId": "r1", "itemId": "m1-k1", "quantity": "two"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["error_type"], "precondition_failed")

        response = self.client.patch("/api/cart/items/m1-k1", json={"quantity": None})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.client.get("/api/cart").get_json()["items"], [])

    def test_diner_history(self):
        body = self.client.get("/api/users/u1/orders").get_json()
        self.assertEqual([o["id"] for o in body["orders"]], ["ORD-104", "ORD-101", "ORD-102"])
        self.assertEqual(body["totalOrders"], 3)
        self.assertEqual(body["totalSpent"], 68.50)
        self.assertEqual(body["favoriteRestaurant"], "The Golden Spoon")

        empty = self.client.get("/api/users/nobody/orders").get_json()
        self.assertEqual(empty["orders"], [])
        self.assertEqual(empty["favoriteRestaurant"], "N/A")

    def test_menu_admin_only(self):
        kitchen = self._login("Marco", "2222")
        admin = self._login("Gilbert Kareri", "1234")
        item = {"name": "Affogato", "price": 6.5, "category": "Desserts"}
        self.assertEqual(self.client.post("/api/restaurants/r1/menu", json=item).status_code, 403)
        self.assertEqual(kitchen.post("/api/restaurants/r1/menu", json=item).status_code, 403)
        response = admin.post("/api/restaurants/r1/menu", json=item)
        self.assertEqual(response.status_code, 201)

        names = [i["name"] for i in self.client.get("/api/restaurants/r1/menu?category=Desserts").get_json()["items"]]
        self.assertIn("Affogato", names)

    def test_archive(self):
        admin = self._login("Gilbert Kareri", "1234")
        self.assertEqual(self.client.post("/api/restaurants/r1/archive").status_code, 403)
        response = admin.post("/api/restaurants/r1/archive")
        self.assertEqual(response.get_json()["archived"], ["ORD-101"])
        ids = [o["id"] for o in self.client.get("/api/orders?restaurantId=r1").get_json()["orders"]]
        self.assertNotIn("ORD-101", ids)


if __name__ == '__main__':
    unittest.main()
