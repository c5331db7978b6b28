"""
Board service - read-only views derived from the order collection

Nothing here is stored: each view is recomputed from whatever list of orders
it is handed, so the kitchen, floor and delivery boards can never disagree
about an order's state.
"""
import math
from typing import Any, Dict, Iterable, List, Optional

from models.order import Order, OrderStatus, OrderType
from models.restaurant import Restaurant
from models.alert import ServerAlert

KITCHEN_COLUMNS = {
    OrderStatus.PENDING: "pending",
    OrderStatus.RECEIVED: "preparing",
    OrderStatus.PREPARING: "preparing",
    OrderStatus.ON_ROUTE: "ready",
    OrderStatus.OUT_FOR_DELIVERY: "ready",
    OrderStatus.SERVED: "completed",
    OrderStatus.DELIVERED: "completed",
    OrderStatus.VERIFIED: "completed",
    OrderStatus.PAID: "completed",
}

STATUS_COLORS = {
    OrderStatus.PENDING: "orange",
    OrderStatus.RECEIVED: "blue",
    OrderStatus.PREPARING: "yellow",
    OrderStatus.ON_ROUTE: "green",
    OrderStatus.OUT_FOR_DELIVERY: "green",
    OrderStatus.SERVED: "emerald",
    OrderStatus.DELIVERED: "emerald",
    OrderStatus.VERIFIED: "gray",
    OrderStatus.PAID: "gray",
}

TRACKER_STEPS = ("Received", "Preparing", "On Route", "Served")

TRACKER_STEP_INDEX = {
    OrderStatus.PENDING: 0,
    OrderStatus.RECEIVED: 0,
    OrderStatus.PREPARING: 1,
    OrderStatus.ON_ROUTE: 2,
    OrderStatus.OUT_FOR_DELIVERY: 2,
    OrderStatus.SERVED: 3,
    OrderStatus.DELIVERED: 3,
    OrderStatus.VERIFIED: 3,
    OrderStatus.PAID: 3,
}

FINAL_STATUSES = frozenset({
    OrderStatus.SERVED, OrderStatus.DELIVERED, OrderStatus.VERIFIED, OrderStatus.PAID
})
PAYABLE_STATUSES = frozenset({OrderStatus.SERVED, OrderStatus.DELIVERED, OrderStatus.VERIFIED})
COUNTDOWN_STATUSES = frozenset({OrderStatus.RECEIVED, OrderStatus.PREPARING})

PAYMENT_REDIRECT_MS = 2000
MAIN_DINING_MAX_TABLE = 8


def _for_restaurant(orders: Iterable[Order], restaurant_id: str) -> List[Order]:
    return [order for order in orders if order.restaurant_id == restaurant_id]


def _ticket(order: Order) -> Dict[str, Any]:
    # Compact card used on every board
    if order.order_type is OrderType.DINE_IN and order.table_number:
        header = f"Table {order.table_number}"
    else:
        header = order.order_type.value.capitalize()
    return {
        "id": order.id,
        "header": header,
        "orderName": order.order_name,
        "orderType": order.order_type.value,
        "status": order.status.value,
        "items": [{"name": item.name, "quantity": item.quantity} for item in order.items],
        "deliveryAddress": order.delivery_address,
        "acceptedAt": order.accepted_at,
        "preparationTime": order.preparation_time,
    }


def kitchen_board(orders: Iterable[Order], restaurant_id: str) -> Dict[str, List[Dict[str, Any]]]:
    board: Dict[str, List[Dict[str, Any]]] = {"pending": [], "preparing": [], "ready": [], "completed": []}
    for order in _for_restaurant(orders, restaurant_id):
        board[KITCHEN_COLUMNS[order.status]].append(_ticket(order))
    return board


def delivery_board(orders: Iterable[Order], restaurant_id: str) -> Dict[str, List[Dict[str, Any]]]:
    board: Dict[str, List[Dict[str, Any]]] = {"ready_for_driver": [], "out_for_delivery": [], "delivered": []}
    columns = {
        OrderStatus.ON_ROUTE: "ready_for_driver",
        OrderStatus.OUT_FOR_DELIVERY: "out_for_delivery",
        OrderStatus.DELIVERED: "delivered",
    }
    for order in _for_restaurant(orders, restaurant_id):
        if order.order_type is not OrderType.DELIVERY:
            continue
        column = columns.get(order.status)
        if column:
            board[column].append(_ticket(order))
    return board


def floor_view(orders: Iterable[Order], restaurant: Restaurant,
               alerts: Iterable[ServerAlert] = ()) -> Dict[str, Any]:
    """Server-facing table grid for one restaurant.

    Each dine-in order lands in exactly one cell, the cell of its table.
    Tables from the restaurant layout always get a cell; an order for a
    table missing from the layout gets one too.
    """
    dine_in = [
        order for order in _for_restaurant(orders, restaurant.id)
        if order.order_type is OrderType.DINE_IN and order.table_number
    ]
    open_alerts: Dict[int, ServerAlert] = {}
    for alert in alerts:
        if alert.restaurant_id == restaurant.id:
            open_alerts.setdefault(alert.table_number, alert)

    capacities = {table.number: table.capacity for table in restaurant.tables}
    numbers = set(capacities)
    numbers.update(order.table_number for order in dine_in)

    cells = []
    for number in sorted(numbers):
        table_orders = [order for order in dine_in if order.table_number == number]
        # Collections keep newest first; an unpaid order outranks any newer paid one
        current = next((order for order in table_orders if order.status is not OrderStatus.PAID),
                       table_orders[0] if table_orders else None)
        alert = open_alerts.get(number)
        if alert:
            state = "Needs Attention"
        elif current and current.status is not OrderStatus.PAID:
            state = "Occupied"
        else:
            state = "Available"
        cells.append({
            "tableNumber": number,
            "capacity": capacities.get(number),
            "section": "Main Dining" if number <= MAIN_DINING_MAX_TABLE else "Patio",
            "state": state,
            "color": STATUS_COLORS[current.status] if current else None,
            "currentOrder": _ticket(current) if current else None,
            "orders": [order.id for order in table_orders],
            "orderCount": len(table_orders),
            "canMarkServed": bool(current and current.status is OrderStatus.ON_ROUTE),
            "alert": alert.to_dict() if alert else None,
        })
    return {"restaurantId": restaurant.id, "tables": cells}


def countdown_ms(order: Order, now: int) -> Optional[int]:
    if order.accepted_at is None or order.preparation_time is None:
        return None
    return max(0, order.accepted_at + order.preparation_time * 60000 - now)


def format_countdown(remaining_ms: Optional[int]) -> Optional[str]:
    if remaining_ms is None:
        return None
    if remaining_ms <= 0:
        return "Arriving now"
    return f"~{math.ceil(remaining_ms / 60000)} min"


def step_label(step: str, order_type: OrderType) -> str:
    if step == "On Route":
        if order_type is OrderType.TAKEAWAY:
            return "Ready for Pickup"
        if order_type is OrderType.DELIVERY:
            return "Out for Delivery"
        return "Coming to Table"
    if step == "Served":
        if order_type is OrderType.DELIVERY:
            return "Delivered"
        if order_type is OrderType.TAKEAWAY:
            return "Picked Up"
    return step


def order_tracker(order: Order, now: int) -> Dict[str, Any]:
    # Diner-facing progress for a single order
    current = TRACKER_STEP_INDEX[order.status]
    done = order.status in FINAL_STATUSES
    steps = []
    for index, step in enumerate(TRACKER_STEPS):
        steps.append({
            "label": step_label(step, order.order_type),
            "completed": index < current or done,
            "current": index == current and not done,
        })

    remaining = countdown_ms(order, now) if order.status in COUNTDOWN_STATUSES else None
    if order.order_type is OrderType.DINE_IN:
        message = f"We'll bring it to Table {order.table_number}."
    elif order.order_type is OrderType.TAKEAWAY:
        message = "We'll notify you when it's ready for pickup."
    else:
        message = f"It's on its way to {order.delivery_address}."

    return {
        "orderId": order.id,
        "status": order.status.value,
        "steps": steps,
        "currentStep": current,
        "progress": 1.0 if done else current / (len(TRACKER_STEPS) - 1),
        "countdownMs": remaining,
        "countdownLabel": format_countdown(remaining),
        "message": message,
        "redirectToPaymentMs": PAYMENT_REDIRECT_MS if done else None,
    }


def payment_view(order: Order) -> Dict[str, Any]:
    return {
        "orderId": order.id,
        "view": "receipt" if order.is_paid else "checkout",
        "canPay": order.status in PAYABLE_STATUSES and not order.is_paid,
        "total": float(order.total),
        "paymentStatus": order.payment_status.value,
    }


class BoardService:
    # Binds the pure views to the live order store and the tenant/alert collaborators

    def __init__(self, order_service, staff_service=None, alert_service=None):
        self.order_service = order_service
        self.staff_service = staff_service
        self.alert_service = alert_service

    def kitchen_board(self, restaurant_id: str) -> Dict[str, Any]:
        board = kitchen_board(self.order_service.list_orders(restaurant_id), restaurant_id)
        return {"success": True, "restaurantId": restaurant_id, "columns": board}

    def delivery_board(self, restaurant_id: str) -> Dict[str, Any]:
        board = delivery_board(self.order_service.list_orders(restaurant_id), restaurant_id)
        return {"success": True, "restaurantId": restaurant_id, "columns": board}

    def floor_view(self, restaurant_id: str) -> Dict[str, Any]:
        restaurant = self.staff_service.get_restaurant(restaurant_id) if self.staff_service else None
        if restaurant is None:
            return {"success": False, "error": f"Restaurant {restaurant_id} not found.", "error_type": "not_found"}
        alerts = self.alert_service.list_alerts(restaurant_id) if self.alert_service else []
        view = floor_view(self.order_service.list_orders(restaurant_id), restaurant, alerts)
        view["success"] = True
        return view

    def order_tracker(self, order_id: str) -> Dict[str, Any]:
        order = self.order_service.get_order(order_id)
        if order is None:
            return {"success": False, "error": f"Order {order_id} not found.", "error_type": "not_found"}
        view = order_tracker(order, self.order_service.clock())
        view["success"] = True
        return view

    def payment_view(self, order_id: str) -> Dict[str, Any]:
        order = self.order_service.get_order(order_id)
        if order is None:
            return {"success": False, "error": f"Order {order_id} not found.", "error_type": "not_found"}
        view = payment_view(order)
        view["success"] = True
        return view
