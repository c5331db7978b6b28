"""JSON API over the order lifecycle, boards and diner-side collaborators."""

import uuid
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, current_app, jsonify, request, session

from models.staff import Actor, Role


api_bp = Blueprint("shopfast_api", __name__, url_prefix="/api")

ERROR_STATUS = {
    "not_found": 404,
    "permission_denied": 403,
    "invalid_transition": 409,
    "precondition_failed": 400,
    "payment_declined": 402,
}


class StaffSessionError(Exception):
    pass


def _platform():
    return current_app.extensions["shopfast_platform"]


def _payload() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _respond(result: Dict[str, Any], success_status: int = 200):
    if result.get("success"):
        return jsonify(result), success_status
    return jsonify(result), ERROR_STATUS.get(result.get("error_type"), 400)


def _current_actor() -> Actor:
    # Staff identity lives in the login session; request headers carry no authority
    staff_id = session.get("staff_id")
    if not staff_id:
        return Actor.diner()
    actor = _platform().staff_service.actor_for(staff_id)
    if actor is None:
        session.pop("staff_id", None)
        raise StaffSessionError("Your staff session is no longer valid. Please log in again.")
    return actor


def _require_admin(restaurant_id: str) -> Optional[Tuple[Any, int]]:
    actor = _current_actor()
    if actor.role is not Role.ADMIN or actor.restaurant_id != restaurant_id:
        return jsonify({
            "success": False,
            "error": "Only this restaurant's admin may do that.",
            "error_type": "permission_denied"
        }), 403
    return None


def _cart_session_id() -> str:
    if "cart_session_id" not in session:
        session["cart_session_id"] = str(uuid.uuid4())
    return session["cart_session_id"]


@api_bp.errorhandler(StaffSessionError)
def _staff_session_error(exc: StaffSessionError):
    return jsonify({"success": False, "error": str(exc), "error_type": "permission_denied"}), 401


# === Restaurants and menus ===
@api_bp.get("/restaurants")
def list_restaurants():
    restaurants = _platform().staff_service.list_restaurants(active_only=True)
    return jsonify({"restaurants": [r.to_dict() for r in restaurants]})


@api_bp.get("/restaurants/<restaurant_id>/menu")
def get_menu(restaurant_id: str):
    items = _platform().menu_service.get_menu(restaurant_id, request.args.get("category"))
    return jsonify({"restaurantId": restaurant_id, "items": [item.to_dict() for item in items]})


@api_bp.get("/restaurants/<restaurant_id>/menu/search")
def search_menu(restaurant_id: str):
    query = request.args.get("q", "").strip()
    if not query:
        return jsonify({"success": False, "error": "Search query is required."}), 400
    return jsonify(_platform().menu_service.find_item(restaurant_id, query, request.args.get("category")))


@api_bp.post("/restaurants/<restaurant_id>/menu")
def add_menu_item(restaurant_id: str):
    denied = _require_admin(restaurant_id)
    if denied:
        return denied
    data = _payload()
    result = _platform().menu_service.add_item(
        restaurant_id,
        data.get("name", ""),
        data.get("price"),
        category=data.get("category", "Mains"),
        description=data.get("description", ""),
        tags=data.get("tags")
    )
    return _respond(result, 201)


@api_bp.patch("/restaurants/<restaurant_id>/menu/<item_id>")
def update_menu_item(restaurant_id: str, item_id: str):
    denied = _require_admin(restaurant_id)
    if denied:
        return denied
    return _respond(_platform().menu_service.update_item(restaurant_id, item_id, **_payload()))


@api_bp.delete("/restaurants/<restaurant_id>/menu/<item_id>")
def delete_menu_item(restaurant_id: str, item_id: str):
    denied = _require_admin(restaurant_id)
    if denied:
        return denied
    return _respond(_platform().menu_service.delete_item(restaurant_id, item_id))


# === Staff ===
@api_bp.post("/staff/login")
def staff_login():
    data = _payload()
    result = _platform().staff_service.authenticate(
        data.get("restaurantId", ""), data.get("name", ""), data.get("pin", "")
    )
    if not result["success"]:
        return jsonify(result), 401
    session["staff_id"] = result["staff"]["id"]
    return jsonify(result)


@api_bp.post("/staff/logout")
def staff_logout():
    session.pop("staff_id", None)
    return jsonify({"success": True})


@api_bp.get("/restaurants/<restaurant_id>/staff")
def list_staff(restaurant_id: str):
    denied = _require_admin(restaurant_id)
    if denied:
        return denied
    staff = _platform().staff_service.list_staff(restaurant_id)
    return jsonify({"staff": [member.to_dict() for member in staff]})


@api_bp.post("/restaurants/<restaurant_id>/staff")
def add_staff(restaurant_id: str):
    denied = _require_admin(restaurant_id)
    if denied:
        return denied
    data = _payload()
    result = _platform().staff_service.add_staff(
        restaurant_id, data.get("name", ""), data.get("role", ""), data.get("pin", "")
    )
    return _respond(result, 201)


# === Orders ===
@api_bp.post("/orders")
def place_order():
    data = _payload()
    result = _platform().order_service.place_order(
        data.get("restaurantId", ""),
        data.get("orderType", ""),
        data.get("items", []),
        order_name=data.get("orderName", ""),
        table_number=data.get("tableNumber"),
        delivery_address=data.get("deliveryAddress"),
        user_id=data.get("userId")
    )
    return _respond(result, 201)


@api_bp.get("/orders")
def list_orders():
    restaurant_id = request.args.get("restaurantId")
    orders = _platform().order_service.list_orders(restaurant_id)
    return jsonify({"orders": [order.to_dict() for order in orders]})


@api_bp.get("/orders/<order_id>")
def get_order(order_id: str):
    return _respond(_platform().order_service.get_order_details(order_id))


@api_bp.get("/users/<user_id>/orders")
def diner_history(user_id: str):
    return jsonify(_platform().order_service.diner_history(user_id))


@api_bp.post("/orders/<order_id>/accept")
def accept_order(order_id: str):
    actor = _current_actor()
    result = _platform().order_service.accept_order(order_id, actor, _payload().get("preparationTime"))
    return _respond(result)


@api_bp.post("/orders/<order_id>/ready")
def mark_ready(order_id: str):
    return _respond(_platform().order_service.mark_ready(order_id, _current_actor()))


@api_bp.post("/orders/<order_id>/served")
def mark_served(order_id: str):
    return _respond(_platform().order_service.mark_served(order_id, _current_actor()))


@api_bp.post("/orders/<order_id>/start-delivery")
def start_delivery(order_id: str):
    return _respond(_platform().order_service.start_delivery(order_id, _current_actor()))


@api_bp.post("/orders/<order_id>/delivered")
def mark_delivered(order_id: str):
    return _respond(_platform().order_service.mark_delivered(order_id, _current_actor()))


@api_bp.post("/orders/<order_id>/advance")
def advance_order(order_id: str):
    data = _payload()
    result = _platform().order_service.advance_order(
        order_id, _current_actor(), data.get("status", ""), data.get("preparationTime")
    )
    return _respond(result)


@api_bp.post("/orders/<order_id>/pay")
def pay_order(order_id: str):
    method = _payload().get("method", "stripe")
    return _respond(_platform().payment_service.pay(order_id, method))


@api_bp.get("/orders/<order_id>/tracker")
def order_tracker(order_id: str):
    return _respond(_platform().board_service.order_tracker(order_id))


@api_bp.get("/orders/<order_id>/payment")
def payment_view(order_id: str):
    return _respond(_platform().board_service.payment_view(order_id))


@api_bp.post("/restaurants/<restaurant_id>/archive")
def archive_orders(restaurant_id: str):
    denied = _require_admin(restaurant_id)
    if denied:
        return denied
    return _respond(_platform().order_service.archive_paid_orders(restaurant_id))


# === Boards ===
@api_bp.get("/restaurants/<restaurant_id>/kitchen")
def kitchen_board(restaurant_id: str):
    return _respond(_platform().board_service.kitchen_board(restaurant_id))


@api_bp.get("/restaurants/<restaurant_id>/floor")
def floor_view(restaurant_id: str):
    return _respond(_platform().board_service.floor_view(restaurant_id))


@api_bp.get("/restaurants/<restaurant_id>/delivery")
def delivery_board(restaurant_id: str):
    return _respond(_platform().board_service.delivery_board(restaurant_id))


# === Server alerts ===
@api_bp.post("/restaurants/<restaurant_id>/alerts")
def call_server(restaurant_id: str):
    data = _payload()
    result = _platform().alert_service.call_server(
        restaurant_id,
        data.get("tableNumber"),
        data.get("request", ""),
        order_type=data.get("orderType", "dine-in")
    )
    return _respond(result, 201)


@api_bp.get("/restaurants/<restaurant_id>/alerts")
def list_alerts(restaurant_id: str):
    alerts = _platform().alert_service.list_alerts(restaurant_id)
    return jsonify({"alerts": [alert.to_dict() for alert in alerts]})


@api_bp.post("/restaurants/<restaurant_id>/alerts/<alert_id>/resolve")
def resolve_alert(restaurant_id: str, alert_id: str):
    actor = _current_actor()
    if not actor.is_staff or actor.restaurant_id != restaurant_id:
        return jsonify({
            "success": False,
            "error": "Only this restaurant's staff may resolve alerts.",
            "error_type": "permission_denied"
        }), 403
    result = _platform().alert_service.resolve_alert(alert_id, restaurant_id)
    if not result["success"]:
        result["error_type"] = "not_found"
    return _respond(result)


# === Cart ===
@api_bp.get("/cart")
def get_cart():
    return jsonify(_platform().cart_service.get_cart(_cart_session_id()))


def _quantity(data: Dict[str, Any], default: int) -> Optional[int]:
    try:
        return int(data.get("quantity", default))
    except (TypeError, ValueError):
        return None


def _bad_quantity():
    return jsonify({
        "success": False,
        "error": "Quantity must be a whole number.",
        "error_type": "precondition_failed"
    }), 400


@api_bp.post("/cart/items")
def add_to_cart():
    data = _payload()
    quantity = _quantity(data, 1)
    if quantity is None:
        return _bad_quantity()
    result = _platform().cart_service.add_to_cart(
        _cart_session_id(), data.get("restaurantId", ""), data.get("itemId", ""), quantity
    )
    return _respond(result)


@api_bp.patch("/cart/items/<item_id>")
def update_cart_item(item_id: str):
    quantity = _quantity(_payload(), 0)
    if quantity is None:
        return _bad_quantity()
    result = _platform().cart_service.update_quantity(_cart_session_id(), item_id, quantity)
    return _respond(result)


@api_bp.delete("/cart")
def clear_cart():
    return jsonify(_platform().cart_service.clear_cart(_cart_session_id()))


@api_bp.post("/cart/checkout")
def checkout():
    data = _payload()
    result = _platform().cart_service.checkout(
        _cart_session_id(),
        data.get("orderType", ""),
        order_name=data.get("orderName", ""),
        table_number=data.get("tableNumber"),
        delivery_address=data.get("deliveryAddress"),
        user_id=data.get("userId")
    )
    return _respond(result, 201)
