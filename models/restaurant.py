"""
Restaurant (tenant) related data models
"""
from dataclasses import dataclass, field
from typing import List, Dict, Any


@dataclass
class Table:
    """Dining table in a restaurant floor layout"""
    number: int
    capacity: int = 4

    @property
    def id(self) -> str:
        return f"t{self.number}"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "number": self.number, "capacity": self.capacity}


def default_tables(count: int = 12) -> List[Table]:
    # Same seating pattern the demo floors use: every third table seats 6
    return [
        Table(number=i + 1, capacity=6 if i % 3 == 0 else (4 if i % 2 == 0 else 2))
        for i in range(count)
    ]


@dataclass
class Restaurant:
    """Tenant account"""
    id: str
    name: str
    cuisine: str = ""
    status: str = "active"  # active | disabled
    subscription: str = "basic"
    currency: str = "USD"
    tables: List[Table] = field(default_factory=default_tables)
    service_requests: List[str] = field(
        default_factory=lambda: ["Request Waiter", "Request Bill", "General Assistance"]
    )

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "name": self.name,
            "cuisine": self.cuisine,
            "status": self.status,
            "subscription": self.subscription,
            "currency": self.currency,
            "tables": [table.to_dict() for table in self.tables],
            "serviceRequests": list(self.service_requests)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Restaurant":
        tables = data.get("tables")
        restaurant = cls(
            id=data["id"],
            name=data["name"],
            cuisine=data.get("cuisine", ""),
            status=data.get("status", "active"),
            subscription=data.get("subscription", "basic"),
            currency=data.get("currency", "USD"),
        )
        if tables is not None:
            restaurant.tables = [Table(number=t["number"], capacity=t.get("capacity", 4)) for t in tables]
        if "serviceRequests" in data:
            restaurant.service_requests = list(data["serviceRequests"])
        return restaurant
