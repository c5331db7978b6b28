"""
Cart service - diner cart per session and checkout into an order
"""
import threading
from decimal import Decimal
from typing import Dict, List, Any, Optional

from models.order import to_money
from .menu_service import MenuService
from .order_service import OrderService


class CartService:
    # Carts live only in memory for the diner's session

    def __init__(self, menu_service: MenuService, order_service: OrderService):
        self.menu_service = menu_service
        self.order_service = order_service
        self._lock = threading.RLock()
        # session_id -> {"restaurant_id": str, "lines": {menu_item_id: quantity}}
        self._carts: Dict[str, Dict[str, Any]] = {}

    def add_to_cart(self, session_id: str, restaurant_id: str, item_id: str,
                    quantity: int = 1) -> Dict[str, Any]:
        # Adds to an existing line; a line that drops to zero disappears
        item = self.menu_service.get_item(restaurant_id, item_id)
        if not item:
            return {"success": False, "error": "Menu item not found"}

        with self._lock:
            cart = self._carts.get(session_id)
            if cart and cart["restaurant_id"] != restaurant_id and cart["lines"]:
                return {
                    "success": False,
                    "error": "Cart already holds items from another restaurant."
                }
            if cart is None or cart["restaurant_id"] != restaurant_id:
                cart = {"restaurant_id": restaurant_id, "lines": {}}
                self._carts[session_id] = cart

            new_quantity = cart["lines"].get(item_id, 0) + quantity
            if new_quantity > 0:
                cart["lines"][item_id] = new_quantity
            else:
                cart["lines"].pop(item_id, None)

        return {
            "success": True,
            "message": f"{item.name} added to cart.",
            "cart": self.get_cart(session_id)
        }

    def update_quantity(self, session_id: str, item_id: str, new_quantity: int) -> Dict[str, Any]:
        # Setting zero or less removes the line
        with self._lock:
            cart = self._carts.get(session_id)
            if not cart or item_id not in cart["lines"]:
                return {"success": False, "error": "Item is not in the cart."}
            if new_quantity <= 0:
                del cart["lines"][item_id]
            else:
                cart["lines"][item_id] = new_quantity
        return {"success": True, "cart": self.get_cart(session_id)}

    def get_cart(self, session_id: str) -> Dict[str, Any]:
        with self._lock:
            cart = self._carts.get(session_id)
            restaurant_id: Optional[str] = cart["restaurant_id"] if cart else None
            lines = dict(cart["lines"]) if cart else {}

        items: List[Dict[str, Any]] = []
        total = Decimal("0")
        total_quantity = 0
        for item_id, quantity in lines.items():
            item = self.menu_service.get_item(restaurant_id, item_id)
            if item is None:
                continue
            line_total = to_money(item.price * quantity)
            total += line_total
            total_quantity += quantity
            items.append({
                "id": item.id,
                "name": item.name,
                "price": float(item.price),
                "quantity": quantity,
                "lineTotal": float(line_total)
            })

        return {
            "restaurantId": restaurant_id,
            "items": items,
            "summary": {
                "total_items": len(items),
                "total_quantity": total_quantity,
                "total_amount": float(to_money(total))
            },
            "message": f"{len(items)} item(s) in cart." if items else "Your cart is empty."
        }

    def clear_cart(self, session_id: str) -> Dict[str, Any]:
        with self._lock:
            cart = self._carts.pop(session_id, None)
        removed = len(cart["lines"]) if cart else 0
        return {"success": True, "removed_items": removed}

    def checkout(self, session_id: str, order_type: str, order_name: str = "",
                 table_number: Optional[int] = None, delivery_address: Optional[str] = None,
                 user_id: Optional[str] = None) -> Dict[str, Any]:
        # Places the order; the cart is emptied only if placement succeeds
        with self._lock:
            cart = self._carts.get(session_id)
            if not cart or not cart["lines"]:
                return {"success": False, "error": "Your cart is empty."}
            restaurant_id = cart["restaurant_id"]
            lines = list(cart["lines"].items())

        result = self.order_service.place_order(
            restaurant_id, order_type, lines, order_name=order_name,
            table_number=table_number, delivery_address=delivery_address, user_id=user_id
        )
        if result["success"]:
            self.clear_cart(session_id)
        return result
