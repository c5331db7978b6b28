"""
Order related data models
"""
from dataclasses import dataclass, field, replace
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional, Dict, Any, Tuple


class OrderStatus(Enum):
    PENDING = "Pending"
    RECEIVED = "Received"
    PREPARING = "Preparing"
    ON_ROUTE = "On Route"
    OUT_FOR_DELIVERY = "Out for Delivery"
    SERVED = "Served"
    DELIVERED = "Delivered"
    VERIFIED = "Verified"
    PAID = "Paid"


class OrderType(Enum):
    DINE_IN = "dine-in"
    TAKEAWAY = "takeaway"
    DELIVERY = "delivery"


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"


CENTS = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    # Floats go through str() so 26.5 stays 26.50 instead of 26.4999...
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class OrderItem:
    """Order line: menu item reference, quantity and unit price"""
    menu_item_id: str
    name: str
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.menu_item_id,
            "name": self.name,
            "quantity": self.quantity,
            "price": float(self.unit_price),
            "lineTotal": float(self.line_total)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderItem":
        return cls(
            menu_item_id=data["id"],
            name=data.get("name", ""),
            quantity=int(data["quantity"]),
            unit_price=to_money(data["price"])
        )


@dataclass
class Order:
    """Order data model

    items and total are fixed at placement. accepted_at and preparation_time
    are written once, when the kitchen accepts the order.
    """
    id: str
    restaurant_id: str
    order_type: OrderType
    status: OrderStatus
    items: Tuple[OrderItem, ...]
    total: Decimal
    order_name: str = ""
    table_number: Optional[int] = None
    delivery_address: Optional[str] = None
    preparation_time: Optional[int] = None
    accepted_at: Optional[int] = None
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    user_id: Optional[str] = None
    created_at: int = 0
    updated_at: int = 0
    history: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_paid(self) -> bool:
        return self.payment_status is PaymentStatus.PAID

    def copy(self) -> "Order":
        # Snapshot handed to readers; history is the only mutable container
        return replace(self, history=list(self.history))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (JSON document form)"""
        return {
            "id": self.id,
            "restaurantId": self.restaurant_id,
            "orderType": self.order_type.value,
            "status": self.status.value,
            "items": [item.to_dict() for item in self.items],
            "total": float(self.total),
            "orderName": self.order_name,
            "tableNumber": self.table_number,
            "deliveryAddress": self.delivery_address,
            "preparationTime": self.preparation_time,
            "acceptedAt": self.accepted_at,
            "paymentStatus": self.payment_status.value,
            "userId": self.user_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "history": list(self.history)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        """Rebuild an order from its document form"""
        items = tuple(OrderItem.from_dict(item) for item in data.get("items", []))
        total = data.get("total")
        return cls(
            id=data["id"],
            restaurant_id=data["restaurantId"],
            order_type=OrderType(data["orderType"]),
            status=OrderStatus(data["status"]),
            items=items,
            total=to_money(total) if total is not None else to_money(sum(i.line_total for i in items)),
            order_name=data.get("orderName", ""),
            table_number=data.get("tableNumber"),
            delivery_address=data.get("deliveryAddress"),
            preparation_time=data.get("preparationTime"),
            accepted_at=data.get("acceptedAt"),
            payment_status=PaymentStatus(data.get("paymentStatus", PaymentStatus.UNPAID.value)),
            user_id=data.get("userId"),
            created_at=data.get("createdAt", 0),
            updated_at=data.get("updatedAt", 0),
            history=list(data.get("history", []))
        )
