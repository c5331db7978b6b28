"""
Server alert data model
"""
from dataclasses import dataclass
from typing import Dict, Any


@dataclass
class ServerAlert:
    """Diner request for a server at a dine-in table"""
    id: str
    restaurant_id: str
    table_number: int
    request: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "restaurantId": self.restaurant_id,
            "tableNumber": self.table_number,
            "request": self.request,
            "timestamp": self.timestamp
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerAlert":
        return cls(
            id=data["id"],
            restaurant_id=data["restaurantId"],
            table_number=int(data["tableNumber"]),
            request=data["request"],
            timestamp=int(data.get("timestamp", 0))
        )
