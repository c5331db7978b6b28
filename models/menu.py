"""
Menu related data models
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict, Any

from .order import to_money


class MenuItemCategory(Enum):
    STARTERS = "Starters"
    MAINS = "Mains"
    DESSERTS = "Desserts"
    DRINKS = "Drinks"


class MenuItemTag(Enum):
    VEGETARIAN = "vegetarian"
    SPICY = "spicy"
    GLUTEN_FREE = "gluten-free"
    NEW = "new"


@dataclass
class MenuItem:
    """Menu item data model"""
    id: str
    name: str
    price: Decimal
    category: str
    description: str = ""
    tags: List[str] = field(default_factory=list)
    match_score: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
            "category": self.category,
            "tags": list(self.tags)
        }
        if self.match_score is not None:
            data["matchScore"] = self.match_score
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MenuItem":
        return cls(
            id=data["id"],
            name=data["name"],
            price=to_money(data["price"]),
            category=data.get("category", MenuItemCategory.MAINS.value),
            description=data.get("description", ""),
            tags=list(data.get("tags", []))
        )
