"""
Tests for the menu catalog and the diner cart
"""
import unittest

from tests.support import MemoryRepository, build_platform


class TestMenuService(unittest.TestCase):
    """Test cases for MenuService"""

    def setUp(self):
        self.repository = MemoryRepository()
        self.platform = build_platform(repository=self.repository)
        self.menu = self.platform.menu_service

    def test_similarity_calculation(self):
        """Test similarity calculation"""
        self.assertEqual(self.menu.similarity("pizza", "Pizza"), 1.0)
        self.assertGreater(self.menu.similarity("margherita", "Margherita Pizza"), 0.5)
        self.assertLess(self.menu.similarity("sushi", "Tiramisu"), 0.5)

    def test_get_menu_by_category(self):
        drinks = self.menu.get_menu("r1", "Drinks")
        self.assertEqual([item.name for item in drinks], ["Espresso", "Red Wine"])
        self.assertEqual(self.menu.get_menu("r9"), [])

    def test_find_item(self):
        result = self.menu.find_item("r1", "carbonara")
        self.assertTrue(result["success"])
        self.assertEqual(result["matches"][0]["id"], "m1-m1")
        self.assertIn("matchScore", result["matches"][0])

    def test_find_item_stays_in_restaurant(self):
        result = self.menu.find_item("r1", "Pad Thai")
        self.assertNotIn("m2-m1", [match["id"] for match in result["matches"]])

    def test_add_update_delete(self):
        result = self.menu.add_item("r1", "Panna Cotta", "7.25", "Desserts", tags=["new"])
        self.assertTrue(result["success"])
        item_id = result["item"]["id"]
        self.assertEqual(str(self.menu.get_item("r1", item_id).price), "7.25")

        result = self.menu.update_item("r1", item_id, price=8, description="Vanilla cream")
        self.assertEqual(result["item"]["price"], 8.0)
        self.assertEqual(result["item"]["description"], "Vanilla cream")

        self.assertFalse(self.menu.update_item("r1", item_id, colour="red")["success"])
        self.assertFalse(self.menu.update_item("r1", item_id, price=0)["success"])

        self.assertTrue(self.menu.delete_item("r1", item_id)["success"])
        self.assertIsNone(self.menu.get_item("r1", item_id))
        self.assertFalse(self.menu.delete_item("r1", item_id)["success"])
        self.assertNotIn(item_id, [item["id"] for item in self.repository.data["menus"]["r1"]])

    def test_add_item_validation(self):
        self.assertFalse(self.menu.add_item("r1", "", 5)["success"])
        self.assertFalse(self.menu.add_item("r1", "Water", "free")["success"])
        self.assertFalse(self.menu.add_item("r1", "Water", -1)["success"])

    def test_menu_edits_do_not_reprice_orders(self):
        order = self.platform.order_service.place_order("r1", "takeaway", [("m1-k1", 2)])["order"]
        self.menu.update_item("r1", "m1-k1", price=10)
        stored = self.platform.order_service.get_order(order["id"])
        self.assertEqual(str(stored.total), "6.00")


class TestCartService(unittest.TestCase):
    """Test cases for CartService"""

    def setUp(self):
        self.platform = build_platform()
        self.cart = self.platform.cart_service
        self.session_id = "test_session"

    def test_empty_cart_details(self):
        """Test getting details of empty cart"""
        result = self.cart.get_cart(self.session_id)
        self.assertEqual(result["items"], [])
        self.assertEqual(result["summary"]["total_amount"], 0)
        self.assertIn("empty", result["message"])

    def test_clear_empty_cart(self):
        """Test clearing empty cart"""
        result = self.cart.clear_cart(self.session_id)
        self.assertTrue(result["success"])
        self.assertEqual(result["removed_items"], 0)

    def test_add_merges_quantities(self):
        self.cart.add_to_cart(self.session_id, "r1", "m1-s1")
        self.cart.add_to_cart(self.session_id, "r1", "m1-s1", 2)
        result = self.cart.add_to_cart(self.session_id, "r1", "m1-m1")

        cart = result["cart"]
        self.assertEqual(cart["summary"]["total_quantity"], 4)
        self.assertEqual(cart["summary"]["total_amount"], 43.50)

    def test_line_reaching_zero_is_dropped(self):
        self.cart.add_to_cart(self.session_id, "r1", "m1-s1", 2)
        result = self.cart.add_to_cart(self.session_id, "r1", "m1-s1", -2)
        self.assertEqual(result["cart"]["items"], [])

    def test_update_quantity(self):
        self.cart.add_to_cart(self.session_id, "r1", "m1-s1")
        self.assertEqual(self.cart.update_quantity(self.session_id, "m1-s1", 3)["cart"]["items"][0]["quantity"], 3)
        self.assertEqual(self.cart.update_quantity(self.session_id, "m1-s1", 0)["cart"]["items"], [])
        self.assertFalse(self.cart.update_quantity(self.session_id, "m1-s1", 1)["success"])

    def test_unknown_item(self):
        result = self.cart.add_to_cart(self.session_id, "r1", "m2-m1")
        self.assertFalse(result["success"])

    def test_one_restaurant_per_cart(self):
        self.cart.add_to_cart(self.session_id, "r1", "m1-s1")
        result = self.cart.add_to_cart(self.session_id, "r2", "m2-m1")
        self.assertFalse(result["success"])

    def test_checkout_places_order_and_empties_cart(self):
        self.cart.add_to_cart(self.session_id, "r1", "m1-s1")
        self.cart.add_to_cart(self.session_id, "r1", "m1-m1")

        result = self.cart.checkout(self.session_id, "dine-in", order_name="Gilbert", table_number=5)

        self.assertTrue(result["success"])
        self.assertEqual(result["order"]["total"], 26.50)
        self.assertEqual(result["order"]["status"], "Pending")
        self.assertEqual(self.cart.get_cart(self.session_id)["items"], [])

    def test_failed_checkout_keeps_cart(self):
        self.cart.add_to_cart(self.session_id, "r1", "m1-s1")
        result = self.cart.checkout(self.session_id, "dine-in")
        self.assertFalse(result["success"])
        self.assertEqual(len(self.cart.get_cart(self.session_id)["items"]), 1)

    def test_checkout_empty_cart(self):
        self.assertFalse(self.cart.checkout(self.session_id, "takeaway")["success"])


if __name__ == '__main__':
    unittest.main()
