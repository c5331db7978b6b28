"""
Tests for the derived kitchen, floor, delivery and diner views
"""
import unittest

from models.order import OrderStatus, OrderType
from services.board_service import (
    STATUS_COLORS,
    countdown_ms,
    format_countdown,
    kitchen_board,
    order_tracker,
    payment_view,
)
from tests.support import DINER, KITCHEN, SERVER, FakeClock, build_platform

MINUTE = 60 * 1000


class TestBoards(unittest.TestCase):
    """Test cases for the staff-facing boards"""

    def setUp(self):
        self.clock = FakeClock()
        self.platform = build_platform(clock=self.clock)
        self.orders = self.platform.order_service
        self.boards = self.platform.board_service

    def test_every_order_in_exactly_one_kitchen_column(self):
        self.orders.place_order("r1", "takeaway", [("m1-k1", 1)])
        self.orders.place_order("r1", "delivery", [("m1-m2", 1)], delivery_address="5 Elm St")

        columns = self.boards.kitchen_board("r1")["columns"]
        ids = [ticket["id"] for column in columns.values() for ticket in column]
        r1_ids = [order.id for order in self.orders.list_orders("r1")]
        self.assertEqual(sorted(ids), sorted(r1_ids))
        self.assertEqual(len(ids), len(set(ids)))
        self.assertEqual([t["id"] for t in columns["preparing"]], ["ORD-103"])
        self.assertEqual([t["id"] for t in columns["ready"]], ["ORD-104"])

    def test_kitchen_board_filters_by_restaurant(self):
        board = kitchen_board(self.orders.list_orders(), "r2")
        ids = [ticket["id"] for column in board.values() for ticket in column]
        self.assertEqual(ids, ["ORD-102"])

    def test_status_colors_cover_every_status(self):
        self.assertEqual(set(STATUS_COLORS), set(OrderStatus))

    def test_floor_view_cells(self):
        view = self.boards.floor_view("r1")
        self.assertTrue(view["success"])
        cells = {cell["tableNumber"]: cell for cell in view["tables"]}

        self.assertEqual(len(cells), 12)
        self.assertEqual(cells[5]["state"], "Available")
        self.assertEqual(cells[5]["color"], "gray")
        self.assertEqual(cells[8]["state"], "Occupied")
        self.assertEqual(cells[8]["color"], STATUS_COLORS[OrderStatus.PREPARING])
        self.assertTrue(cells[3]["canMarkServed"])
        self.assertFalse(cells[8]["canMarkServed"])
        self.assertEqual(cells[1]["state"], "Available")
        self.assertIsNone(cells[1]["currentOrder"])
        self.assertEqual(cells[8]["section"], "Main Dining")
        self.assertEqual(cells[9]["section"], "Patio")

    def test_every_dine_in_order_in_exactly_one_cell(self):
        self.orders.place_order("r1", "dine-in", [("m1-k1", 1)], table_number=5)
        self.orders.place_order("r1", "dine-in", [("m1-k1", 1)], table_number=20)
        self.orders.place_order("r1", "takeaway", [("m1-k1", 1)])

        cells = self.boards.floor_view("r1")["tables"]
        placed = [order_id for cell in cells for order_id in cell["orders"]]
        dine_in = [o.id for o in self.orders.list_orders("r1") if o.order_type is OrderType.DINE_IN]
        self.assertEqual(sorted(placed), sorted(dine_in))

        by_table = {cell["tableNumber"]: cell for cell in cells}
        self.assertEqual(by_table[5]["orderCount"], 2)
        self.assertEqual(by_table[5]["state"], "Occupied")
        self.assertEqual(by_table[5]["color"], STATUS_COLORS[OrderStatus.PENDING])
        self.assertIsNone(by_table[20]["capacity"])

    def test_unpaid_order_stays_current_behind_newer_paid_one(self):
        base = {"restaurantId": "r1", "orderType": "dine-in", "tableNumber": 6, "items": [], "total": 9.0}
        self.orders.replace_orders([
            dict(base, id="ORD-NEW", status="Paid", paymentStatus="paid", createdAt=self.clock.now),
            dict(base, id="ORD-OLD", status="Preparing", createdAt=self.clock.now - MINUTE),
        ])

        cells = {cell["tableNumber"]: cell for cell in self.boards.floor_view("r1")["tables"]}
        self.assertEqual(cells[6]["state"], "Occupied")
        self.assertEqual(cells[6]["currentOrder"]["id"], "ORD-OLD")
        self.assertEqual(cells[6]["color"], STATUS_COLORS[OrderStatus.PREPARING])
        self.assertEqual(cells[6]["orders"], ["ORD-NEW", "ORD-OLD"])

    def test_open_alert_marks_table(self):
        self.platform.alert_service.call_server("r1", 7, "Request Bill")
        cells = {cell["tableNumber"]: cell for cell in self.boards.floor_view("r1")["tables"]}
        self.assertEqual(cells[7]["state"], "Needs Attention")
        self.assertEqual(cells[7]["alert"]["request"], "Request Bill")

    def test_floor_view_unknown_restaurant(self):
        result = self.boards.floor_view("r9")
        self.assertFalse(result["success"])
        self.assertEqual(result["error_type"], "not_found")

    def test_delivery_board(self):
        order_id = self.orders.place_order(
            "r1", "delivery", [("m1-m2", 1)], delivery_address="5 Elm St"
        )["order"]["id"]
        self.orders.accept_order(order_id, KITCHEN, 20)
        self.orders.mark_ready(order_id, KITCHEN)

        columns = self.boards.delivery_board("r1")["columns"]
        self.assertEqual([t["id"] for t in columns["ready_for_driver"]], [order_id])
        self.assertEqual(columns["out_for_delivery"], [])
        self.assertEqual(columns["ready_for_driver"][0]["deliveryAddress"], "5 Elm St")


class TestDinerViews(unittest.TestCase):
    """Test cases for the countdown, tracker and payment views"""

    def setUp(self):
        self.clock = FakeClock()
        self.platform = build_platform(clock=self.clock)
        self.orders = self.platform.order_service
        self.order_id = self.orders.place_order(
            "r1", "takeaway", [("m1-m2", 1)], order_name="Diana"
        )["order"]["id"]

    def _order(self):
        return self.orders.get_order(self.order_id)

    def test_no_countdown_before_acceptance(self):
        self.assertIsNone(countdown_ms(self._order(), self.clock.now))
        tracker = order_tracker(self._order(), self.clock.now)
        self.assertIsNone(tracker["countdownMs"])
        self.assertEqual(tracker["currentStep"], 0)

    def test_countdown_runs_down_to_arriving_now(self):
        self.orders.accept_order(self.order_id, KITCHEN, 15)
        start = self.clock.now

        self.assertEqual(countdown_ms(self._order(), start + MINUTE), 14 * MINUTE)
        self.assertEqual(format_countdown(countdown_ms(self._order(), start + MINUTE)), "~14 min")
        self.assertEqual(format_countdown(countdown_ms(self._order(), start + 90 * 1000)), "~14 min")
        self.assertEqual(countdown_ms(self._order(), start + 15 * MINUTE), 0)
        self.assertEqual(countdown_ms(self._order(), start + 40 * MINUTE), 0)
        self.assertEqual(format_countdown(0), "Arriving now")
        self.assertIsNone(format_countdown(None))

    def test_tracker_labels_follow_order_type(self):
        labels = [step["label"] for step in order_tracker(self._order(), self.clock.now)["steps"]]
        self.assertEqual(labels, ["Received", "Preparing", "Ready for Pickup", "Picked Up"])

        delivery = self.orders.place_order(
            "r1", "delivery", [("m1-m2", 1)], delivery_address="5 Elm St"
        )["order"]["id"]
        labels = [s["label"] for s in order_tracker(self.orders.get_order(delivery), 0)["steps"]]
        self.assertEqual(labels[2:], ["Out for Delivery", "Delivered"])

    def test_tracker_redirects_to_payment_once_served(self):
        self.orders.accept_order(self.order_id, KITCHEN, 5)
        self.orders.mark_ready(self.order_id, KITCHEN)
        tracker = self.platform.board_service.order_tracker(self.order_id)
        self.assertEqual(tracker["currentStep"], 2)
        self.assertIsNone(tracker["redirectToPaymentMs"])
        self.assertIsNone(tracker["countdownMs"])

        self.orders.mark_served(self.order_id, DINER)
        tracker = self.platform.board_service.order_tracker(self.order_id)
        self.assertEqual(tracker["redirectToPaymentMs"], 2000)
        self.assertEqual(tracker["progress"], 1.0)
        self.assertTrue(all(step["completed"] for step in tracker["steps"]))
        self.assertEqual(self._order().status, OrderStatus.SERVED)

    def test_payment_view_switches_to_receipt(self):
        view = payment_view(self._order())
        self.assertEqual(view["view"], "checkout")
        self.assertFalse(view["canPay"])

        self.orders.accept_order(self.order_id, KITCHEN, 5)
        self.orders.mark_ready(self.order_id, KITCHEN)
        self.orders.mark_served(self.order_id, SERVER)
        self.assertTrue(payment_view(self._order())["canPay"])

        self.platform.payment_service.pay(self.order_id, "cash")
        view = self.platform.board_service.payment_view(self.order_id)
        self.assertEqual(view["view"], "receipt")
        self.assertEqual(view["paymentStatus"], "paid")
        self.assertFalse(view["canPay"])


if __name__ == '__main__':
    unittest.main()
