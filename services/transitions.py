"""
Order lifecycle state machine - legal edges, role guards and errors
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

from models.order import Order, OrderStatus, OrderType
from models.staff import Actor, Role


class OrderError(Exception):
    """Base class for rejected order requests"""
    kind = "order_error"


class OrderNotFoundError(OrderError):
    kind = "not_found"


class InvalidTransitionError(OrderError):
    kind = "invalid_transition"


class PermissionDeniedError(OrderError):
    kind = "permission_denied"


class PreconditionError(OrderError):
    kind = "precondition_failed"


# Position along the lifecycle; every legal edge strictly increases it
STATUS_RANK: Dict[OrderStatus, int] = {
    OrderStatus.PENDING: 0,
    OrderStatus.RECEIVED: 1,
    OrderStatus.PREPARING: 2,
    OrderStatus.ON_ROUTE: 3,
    OrderStatus.OUT_FOR_DELIVERY: 4,
    OrderStatus.SERVED: 5,
    OrderStatus.DELIVERED: 5,
    OrderStatus.VERIFIED: 6,
    OrderStatus.PAID: 7,
}

KITCHEN_ROLES = frozenset({Role.KITCHEN, Role.ADMIN})
SERVE_ROLES = frozenset({Role.SERVER, Role.ADMIN, Role.DINER})
DELIVERY_ROLES = frozenset({Role.ADMIN})
PAYMENT_ROLES = frozenset({Role.DINER, Role.CASHIER, Role.ADMIN, Role.SYSTEM})
SWEEP_ROLES = frozenset({Role.SYSTEM})

ALL_TYPES = frozenset(OrderType)


@dataclass(frozen=True)
class Edge:
    source: OrderStatus
    target: OrderStatus
    action: str
    roles: FrozenSet[Role]
    order_types: FrozenSet[OrderType] = ALL_TYPES


EDGES: Tuple[Edge, ...] = (
    Edge(OrderStatus.PENDING, OrderStatus.PREPARING, "accept", KITCHEN_ROLES),
    Edge(OrderStatus.RECEIVED, OrderStatus.PREPARING, "accept", KITCHEN_ROLES),
    Edge(OrderStatus.PREPARING, OrderStatus.ON_ROUTE, "ready", KITCHEN_ROLES),
    Edge(OrderStatus.ON_ROUTE, OrderStatus.SERVED, "serve", SERVE_ROLES,
         frozenset({OrderType.DINE_IN, OrderType.TAKEAWAY})),
    Edge(OrderStatus.ON_ROUTE, OrderStatus.OUT_FOR_DELIVERY, "start_delivery", DELIVERY_ROLES,
         frozenset({OrderType.DELIVERY})),
    Edge(OrderStatus.ON_ROUTE, OrderStatus.VERIFIED, "auto_verify", SWEEP_ROLES),
    Edge(OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED, "deliver", DELIVERY_ROLES),
    Edge(OrderStatus.SERVED, OrderStatus.PAID, "pay", PAYMENT_ROLES),
    Edge(OrderStatus.DELIVERED, OrderStatus.PAID, "pay", PAYMENT_ROLES),
    Edge(OrderStatus.VERIFIED, OrderStatus.PAID, "pay", PAYMENT_ROLES),
)

_EDGE_INDEX: Dict[Tuple[OrderStatus, OrderStatus], Edge] = {
    (edge.source, edge.target): edge for edge in EDGES
}


def find_edge(source: OrderStatus, target: OrderStatus) -> Optional[Edge]:
    return _EDGE_INDEX.get((source, target))


def allowed_targets(status: OrderStatus) -> Tuple[OrderStatus, ...]:
    return tuple(edge.target for edge in EDGES if edge.source is status)


def is_terminal(status: OrderStatus) -> bool:
    return not allowed_targets(status)


def check_transition(order: Order, target: OrderStatus, actor: Actor) -> Edge:
    """Validate a requested status change without touching the order.

    Raises InvalidTransitionError for edges outside the table (backward or
    skip-level moves, wrong order type) and PermissionDeniedError when the
    actor's role or restaurant does not allow it.
    """
    edge = find_edge(order.status, target)
    if edge is None:
        raise InvalidTransitionError(
            f"Cannot move order {order.id} from '{order.status.value}' to '{target.value}'."
        )
    if order.order_type not in edge.order_types:
        raise InvalidTransitionError(
            f"'{target.value}' does not apply to {order.order_type.value} order {order.id}."
        )
    if actor.role not in edge.roles:
        raise PermissionDeniedError(
            f"Role '{actor.role.value}' may not move order {order.id} to '{target.value}'."
        )
    if actor.is_staff and actor.restaurant_id != order.restaurant_id:
        raise PermissionDeniedError(
            f"Order {order.id} does not belong to restaurant '{actor.restaurant_id}'."
        )
    return edge
