"""
Staff and actor data models
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any


class Role(Enum):
    ADMIN = "Admin"
    SERVER = "Server"
    KITCHEN = "Kitchen Staff"
    CASHIER = "Cashier"
    DINER = "Diner"
    SYSTEM = "System"


STAFF_ROLES = frozenset({Role.ADMIN, Role.SERVER, Role.KITCHEN, Role.CASHIER})


@dataclass
class StaffMember:
    """Restaurant staff account"""
    id: str
    name: str
    role: Role
    pin: str
    restaurant_id: str
    status: str = "active"  # active | suspended

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def to_dict(self, include_pin: bool = False) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "restaurantId": self.restaurant_id,
            "status": self.status
        }
        if include_pin:
            data["pin"] = self.pin
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StaffMember":
        return cls(
            id=data["id"],
            name=data["name"],
            role=Role(data["role"]),
            pin=str(data["pin"]),
            restaurant_id=data["restaurantId"],
            status=data.get("status", "active")
        )


@dataclass(frozen=True)
class Actor:
    """Whoever requests an order mutation.

    Staff actors are bound to one restaurant; diners and the system are not.
    """
    role: Role
    restaurant_id: Optional[str] = None
    name: str = ""

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @classmethod
    def system(cls) -> "Actor":
        return cls(role=Role.SYSTEM, name="system")

    @classmethod
    def diner(cls, name: str = "") -> "Actor":
        return cls(role=Role.DINER, name=name)

    @classmethod
    def for_staff(cls, member: StaffMember) -> "Actor":
        return cls(role=member.role, restaurant_id=member.restaurant_id, name=member.name)

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role.value, "restaurantId": self.restaurant_id, "name": self.name}
