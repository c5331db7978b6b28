"""
Order service - owns the live order collection and applies lifecycle transitions

Every public method returns the service's usual result dictionary:
{"success": True, "order": {...}} or {"success": False, "error": ..., "error_type": ...}.
A rejected request never changes the order or triggers a save.
"""
import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from models.order import Order, OrderItem, OrderStatus, OrderType, PaymentStatus, to_money
from models.staff import Actor
from .persistence import load_decoded, save_state
from .transitions import (
    OrderError,
    OrderNotFoundError,
    InvalidTransitionError,
    PreconditionError,
    check_transition,
)

logger = logging.getLogger(__name__)

ORDERS_KEY = "orders"
ARCHIVE_KEY = "archived_orders"
AUTO_VERIFY_AFTER_MS = 2 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


def new_order_id() -> str:
    return f"ORD-{uuid.uuid4().hex[:10].upper()}"


def _decode_orders(documents: Any) -> List[Order]:
    return [Order.from_dict(data) for data in documents]


class OrderService:
    # Single authoritative store of live orders; all mutation goes through here

    def __init__(self, repository=None, menu_service=None,
                 restaurant_lookup: Optional[Callable[[str], Any]] = None,
                 clock: Optional[Callable[[], int]] = None,
                 auto_verify_after_ms: int = AUTO_VERIFY_AFTER_MS,
                 initial_status: OrderStatus = OrderStatus.PENDING):
        if initial_status not in (OrderStatus.PENDING, OrderStatus.RECEIVED):
            raise ValueError("initial_status must be Pending or Received")
        self.repository = repository
        self.menu_service = menu_service
        self.restaurant_lookup = restaurant_lookup
        self.clock = clock or now_ms
        self.auto_verify_after_ms = auto_verify_after_ms
        self.initial_status = initial_status

        self._lock = threading.RLock()
        self._orders: List[Order] = []
        self._archive: List[Order] = []
        self._paying: Set[str] = set()

    # === Collection ===
    def load(self) -> int:
        # "Get current collection" from the backend, replacing whatever is in memory
        live = load_decoded(self.repository, ORDERS_KEY, _decode_orders)
        archived = load_decoded(self.repository, ARCHIVE_KEY, _decode_orders)
        with self._lock:
            if live is not None:
                self._orders = live
            if archived is not None:
                self._archive = archived
            logger.info("Loaded %d live and %d archived orders", len(self._orders), len(self._archive))
            return len(self._orders)

    def replace_orders(self, orders: Iterable[Dict[str, Any]]) -> int:
        # "Replace collection" semantics, used by seeding and bulk imports
        with self._lock:
            self._orders = [Order.from_dict(data) for data in orders]
            self._persist()
            return len(self._orders)

    def snapshot(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [order.to_dict() for order in self._orders]

    def _persist(self) -> None:
        save_state(self.repository, ORDERS_KEY, [order.to_dict() for order in self._orders])

    def _persist_archive(self) -> None:
        save_state(self.repository, ARCHIVE_KEY, [order.to_dict() for order in self._archive])

    def list_orders(self, restaurant_id: Optional[str] = None,
                    user_id: Optional[str] = None) -> List[Order]:
        # Copies; callers filter and render them freely
        with self._lock:
            return [
                order.copy() for order in self._orders
                if (restaurant_id is None or order.restaurant_id == restaurant_id)
                and (user_id is None or order.user_id == user_id)
            ]

    def list_archived(self, restaurant_id: Optional[str] = None,
                      user_id: Optional[str] = None) -> List[Order]:
        with self._lock:
            return [
                order.copy() for order in self._archive
                if (restaurant_id is None or order.restaurant_id == restaurant_id)
                and (user_id is None or order.user_id == user_id)
            ]

    def diner_history(self, user_id: str) -> Dict[str, Any]:
        """Order history and spending summary for one diner.

        Live and archived orders are merged, newest first. The favorite
        restaurant is the one with the most orders; on a tie the first one
        reached in that ordering wins.
        """
        orders = sorted(
            self.list_orders(user_id=user_id) + self.list_archived(user_id=user_id),
            key=lambda order: order.created_at,
            reverse=True
        )
        total_spent = to_money(sum((order.total for order in orders), to_money(0)))

        counts: Dict[str, int] = {}
        for order in orders:
            counts[order.restaurant_id] = counts.get(order.restaurant_id, 0) + 1
        favorite = "N/A"
        if counts:
            favorite_id = max(counts, key=counts.get)
            restaurant = self.restaurant_lookup(favorite_id) if self.restaurant_lookup else None
            favorite = restaurant.name if restaurant is not None else favorite_id

        return {
            "success": True,
            "userId": user_id,
            "orders": [order.to_dict() for order in orders],
            "totalOrders": len(orders),
            "totalSpent": float(total_spent),
            "favoriteRestaurant": favorite
        }

    def get_order(self, order_id: str) -> Optional[Order]:
        with self._lock:
            order = self._find(order_id)
            return order.copy() if order else None

    def get_order_details(self, order_id: str) -> Dict[str, Any]:
        order = self.get_order(order_id)
        if order is None:
            return {
                "success": False,
                "error": f"Order {order_id} not found.",
                "error_type": OrderNotFoundError.kind
            }
        return {"success": True, "order": order.to_dict()}

    def _find(self, order_id: str) -> Optional[Order]:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def _require(self, order_id: str) -> Order:
        order = self._find(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found.")
        return order

    # === Placement ===
    def place_order(self, restaurant_id: str, order_type: Any, items: Iterable[Any],
                    order_name: str = "", table_number: Optional[int] = None,
                    delivery_address: Optional[str] = None,
                    user_id: Optional[str] = None) -> Dict[str, Any]:
        # Diner-side placement; items are (menu_item_id, quantity) pairs or dicts
        return self._run(
            self._place_order, restaurant_id, order_type, items, order_name,
            table_number, delivery_address, user_id
        )

    def _place_order(self, restaurant_id, order_type, items, order_name,
                     table_number, delivery_address, user_id) -> Order:
        try:
            order_type = OrderType(order_type)
        except ValueError:
            raise PreconditionError(f"Unknown order type: {order_type!r}")

        if self.restaurant_lookup is not None:
            restaurant = self.restaurant_lookup(restaurant_id)
            if restaurant is None:
                raise PreconditionError(f"Restaurant {restaurant_id} not found.")
            if not restaurant.is_active:
                raise PreconditionError(f"Restaurant {restaurant_id} is not accepting orders.")

        if order_type is OrderType.DINE_IN:
            if isinstance(table_number, bool) or not isinstance(table_number, int) or table_number <= 0:
                raise PreconditionError("Dine-in orders need a positive table number.")
        else:
            table_number = None

        if order_type is OrderType.DELIVERY:
            if not delivery_address or not str(delivery_address).strip():
                raise PreconditionError("Delivery orders need a delivery address.")
            delivery_address = str(delivery_address).strip()
        else:
            delivery_address = None

        lines = self._resolve_items(restaurant_id, items)
        total = to_money(sum((line.line_total for line in lines), to_money(0)))
        now = self.clock()

        order = Order(
            id=new_order_id(),
            restaurant_id=restaurant_id,
            order_type=order_type,
            status=self.initial_status,
            items=tuple(lines),
            total=total,
            order_name=order_name or "",
            table_number=table_number,
            delivery_address=delivery_address,
            user_id=user_id,
            created_at=now,
            updated_at=now,
            history=[{"to": self.initial_status.value, "at": now, "by": "Diner"}]
        )
        with self._lock:
            self._orders.insert(0, order)
            self._persist()
        logger.info("Placed %s order %s for restaurant %s (total %s)",
                    order_type.value, order.id, restaurant_id, total)
        return order

    def _resolve_items(self, restaurant_id: str, items: Iterable[Any]) -> List[OrderItem]:
        if self.menu_service is None:
            raise PreconditionError("No menu available to price the order.")

        if items is None:
            items = []
        if not isinstance(items, (list, tuple)):
            raise PreconditionError("Order items must be a list.")

        lines: List[OrderItem] = []
        for raw in items:
            if isinstance(raw, dict):
                item_id = raw.get("menuItemId") or raw.get("id")
                quantity = raw.get("quantity", 1)
            elif isinstance(raw, (list, tuple)) and len(raw) == 2:
                item_id, quantity = raw
            else:
                raise PreconditionError(f"Malformed order item: {raw!r}")
            if not isinstance(item_id, str):
                raise PreconditionError(f"Malformed order item: {raw!r}")
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise PreconditionError(f"Quantity for {item_id} must be a positive integer.")
            menu_item = self.menu_service.get_item(restaurant_id, item_id)
            if menu_item is None:
                raise PreconditionError(f"Menu item {item_id} is not on this restaurant's menu.")
            lines.append(OrderItem(
                menu_item_id=menu_item.id,
                name=menu_item.name,
                quantity=quantity,
                unit_price=menu_item.price
            ))

        if not lines:
            raise PreconditionError("An order needs at least one item.")
        return lines

    # === Transitions ===
    def accept_order(self, order_id: str, actor: Actor, preparation_time: Any) -> Dict[str, Any]:
        # Kitchen accepts: Pending/Received -> Preparing, starts the countdown
        return self._run(self._accept_order, order_id, actor, preparation_time)

    def _accept_order(self, order_id: str, actor: Actor, preparation_time: Any) -> Order:
        with self._lock:
            order = self._require(order_id)
            check_transition(order, OrderStatus.PREPARING, actor)
            if isinstance(preparation_time, bool) or not isinstance(preparation_time, int) \
                    or preparation_time <= 0:
                raise PreconditionError("Preparation time must be a positive number of minutes.")
            if order.accepted_at is not None:
                raise InvalidTransitionError(f"Order {order_id} was already accepted.")

            now = self.clock()
            order.preparation_time = preparation_time
            order.accepted_at = now
            self._set_status(order, OrderStatus.PREPARING, actor, now)
            return order

    def mark_ready(self, order_id: str, actor: Actor) -> Dict[str, Any]:
        return self._run(self._transition, order_id, OrderStatus.ON_ROUTE, actor)

    def mark_served(self, order_id: str, actor: Actor) -> Dict[str, Any]:
        return self._run(self._transition, order_id, OrderStatus.SERVED, actor)

    def start_delivery(self, order_id: str, actor: Actor) -> Dict[str, Any]:
        return self._run(self._transition, order_id, OrderStatus.OUT_FOR_DELIVERY, actor)

    def mark_delivered(self, order_id: str, actor: Actor) -> Dict[str, Any]:
        return self._run(self._transition, order_id, OrderStatus.DELIVERED, actor)

    def record_payment(self, order_id: str, actor: Actor) -> Dict[str, Any]:
        # Payment success: terminal Paid status plus the separate payment flag
        return self._run(self._record_payment, order_id, actor)

    def _record_payment(self, order_id: str, actor: Actor) -> Order:
        with self._lock:
            order = self._require(order_id)
            check_transition(order, OrderStatus.PAID, actor)
            now = self.clock()
            order.payment_status = PaymentStatus.PAID
            self._set_status(order, OrderStatus.PAID, actor, now)
            return order

    def reserve_payment(self, order_id: str) -> Dict[str, Any]:
        # Claims the order for one in-flight charge; pair with release_payment
        return self._run(self._reserve_payment, order_id)

    def _reserve_payment(self, order_id: str) -> Order:
        with self._lock:
            order = self._require(order_id)
            if order_id in self._paying:
                raise InvalidTransitionError(f"A payment for order {order_id} is already in progress.")
            check_transition(order, OrderStatus.PAID, Actor.system())
            self._paying.add(order_id)
            return order

    def release_payment(self, order_id: str) -> None:
        with self._lock:
            self._paying.discard(order_id)

    def advance_order(self, order_id: str, actor: Actor, target_status: Any,
                      preparation_time: Any = None) -> Dict[str, Any]:
        # Generic entry point keyed by the requested target status
        try:
            target = OrderStatus(target_status)
        except ValueError:
            return {
                "success": False,
                "error": f"Unknown order status: {target_status!r}",
                "error_type": InvalidTransitionError.kind
            }

        if target is OrderStatus.PREPARING:
            return self.accept_order(order_id, actor, preparation_time)
        if target is OrderStatus.PAID:
            return self.record_payment(order_id, actor)
        return self._run(self._transition, order_id, target, actor)

    def _transition(self, order_id: str, target: OrderStatus, actor: Actor) -> Order:
        with self._lock:
            order = self._require(order_id)
            check_transition(order, target, actor)
            self._set_status(order, target, actor, self.clock())
            return order

    def _set_status(self, order: Order, target: OrderStatus, actor: Actor, now: int) -> None:
        # Caller holds the lock and has already validated the edge
        previous = order.status
        order.status = target
        order.updated_at = now
        order.history.append({"from": previous.value, "to": target.value, "at": now, "by": actor.role.value})
        self._persist()
        logger.info("Order %s: %s -> %s (%s)", order.id, previous.value, target.value, actor.role.value)

    def sweep_timeouts(self, now: Optional[int] = None) -> List[str]:
        """Auto-verify orders left On Route too long.

        An On Route order whose acceptance is more than auto_verify_after_ms in
        the past moves to Verified. Orders already past On Route are left
        alone, so running the sweep again is a no-op.
        """
        system = Actor.system()
        moved: List[str] = []
        with self._lock:
            now = self.clock() if now is None else now
            for order in self._orders:
                if order.status is not OrderStatus.ON_ROUTE or order.accepted_at is None:
                    continue
                if now - order.accepted_at <= self.auto_verify_after_ms:
                    continue
                check_transition(order, OrderStatus.VERIFIED, system)
                self._set_status(order, OrderStatus.VERIFIED, system, now)
                moved.append(order.id)
        if moved:
            logger.info("Auto-verified %d stale order(s): %s", len(moved), ", ".join(moved))
        return moved

    def archive_paid_orders(self, restaurant_id: Optional[str] = None) -> Dict[str, Any]:
        # Paid orders leave the live collection for the archive
        with self._lock:
            moving = [
                order for order in self._orders
                if order.status is OrderStatus.PAID
                and (restaurant_id is None or order.restaurant_id == restaurant_id)
            ]
            if moving:
                moving_ids = {order.id for order in moving}
                self._orders = [order for order in self._orders if order.id not in moving_ids]
                self._archive.extend(moving)
                self._persist()
                self._persist_archive()
        return {"success": True, "archived": [order.id for order in moving]}

    def _run(self, operation: Callable[..., Order], *args) -> Dict[str, Any]:
        try:
            order = operation(*args)
        except OrderError as e:
            logger.warning("Rejected %s: %s", operation.__name__.lstrip("_"), e)
            return {"success": False, "error": str(e), "error_type": e.kind}
        return {"success": True, "order": order.to_dict()}
