"""
Menu service - per-restaurant catalog lookup, search and editing
"""
import logging
import threading
import uuid
from difflib import SequenceMatcher
from typing import Dict, List, Any, Optional

from models.menu import MenuItem, MenuItemCategory
from models.order import to_money
from .persistence import load_decoded, save_state

logger = logging.getLogger(__name__)

MENUS_KEY = "menus"


def _decode_menus(documents: Dict[str, Any]) -> Dict[str, List[MenuItem]]:
    return {
        restaurant_id: [MenuItem.from_dict(item) for item in items]
        for restaurant_id, items in documents.items()
    }


class MenuService:
    # Catalog collaborator; the order lifecycle only ever reads from it

    def __init__(self, repository=None, menus: Optional[Dict[str, List[MenuItem]]] = None):
        self.repository = repository
        self._lock = threading.RLock()
        self._menus: Dict[str, List[MenuItem]] = {
            restaurant_id: list(items) for restaurant_id, items in (menus or {}).items()
        }

    def load(self) -> int:
        # Replace the in-memory catalog with the persisted one, if any
        menus = load_decoded(self.repository, MENUS_KEY, _decode_menus)
        if menus is None:
            return 0
        with self._lock:
            self._menus = menus
            return sum(len(items) for items in self._menus.values())

    def _persist(self) -> None:
        save_state(self.repository, MENUS_KEY, self.snapshot())

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        with self._lock:
            return {
                restaurant_id: [item.to_dict() for item in items]
                for restaurant_id, items in self._menus.items()
            }

    def similarity(self, a: str, b: str) -> float:
        return SequenceMatcher(None, a.lower(), b.lower()).ratio()

    def get_menu(self, restaurant_id: str, category: Optional[str] = None) -> List[MenuItem]:
        with self._lock:
            items = list(self._menus.get(restaurant_id, []))
        if category:
            items = [item for item in items if item.category == category]
        return items

    def get_item(self, restaurant_id: str, item_id: str) -> Optional[MenuItem]:
        for item in self.get_menu(restaurant_id):
            if item.id == item_id:
                return item
        return None

    def find_item(self, restaurant_id: str, query: str, category: Optional[str] = None,
                  limit: int = 5) -> Dict[str, Any]:
        # Fuzzy match on name and description, best score first
        matches = []
        for item in self.get_menu(restaurant_id, category):
            name_score = self.similarity(query, item.name)
            desc_score = self.similarity(query, item.description or "")
            match_score = max(name_score, desc_score)

            if match_score > 0.3:
                matches.append(MenuItem(
                    id=item.id, name=item.name, price=item.price, category=item.category,
                    description=item.description, tags=list(item.tags),
                    match_score=round(match_score, 2)
                ))

        matches.sort(key=lambda x: x.match_score, reverse=True)
        matches = matches[:limit]

        return {
            "success": True,
            "matches": [match.to_dict() for match in matches],
            "total_found": len(matches)
        }

    def add_item(self, restaurant_id: str, name: str, price: Any,
                 category: str = MenuItemCategory.MAINS.value, description: str = "",
                 tags: Optional[List[str]] = None) -> Dict[str, Any]:
        if not name or not name.strip():
            return {"success": False, "error": "Menu item name is required."}
        try:
            amount = to_money(price)
        except Exception:
            return {"success": False, "error": f"Invalid price: {price!r}"}
        if amount <= 0:
            return {"success": False, "error": "Menu item price must be positive."}

        item = MenuItem(
            id=f"m-{restaurant_id}-{uuid.uuid4().hex[:8]}",
            name=name.strip(),
            price=amount,
            category=category,
            description=description,
            tags=list(tags or [])
        )
        with self._lock:
            self._menus.setdefault(restaurant_id, []).append(item)
        self._persist()
        logger.info("Added menu item %s to restaurant %s", item.id, restaurant_id)
        return {"success": True, "item": item.to_dict()}

    def update_item(self, restaurant_id: str, item_id: str, **changes) -> Dict[str, Any]:
        allowed = {"name", "price", "category", "description", "tags"}
        unknown = set(changes) - allowed
        if unknown:
            return {"success": False, "error": f"Unknown menu fields: {', '.join(sorted(unknown))}"}

        with self._lock:
            item = next((i for i in self._menus.get(restaurant_id, []) if i.id == item_id), None)
            if item is None:
                return {"success": False, "error": f"Menu item {item_id} not found."}
            if "price" in changes:
                try:
                    changes["price"] = to_money(changes["price"])
                except Exception:
                    return {"success": False, "error": f"Invalid price: {changes['price']!r}"}
                if changes["price"] <= 0:
                    return {"success": False, "error": "Menu item price must be positive."}
            for name, value in changes.items():
                setattr(item, name, list(value) if name == "tags" else value)
            result = item.to_dict()
        self._persist()
        return {"success": True, "item": result}

    def delete_item(self, restaurant_id: str, item_id: str) -> Dict[str, Any]:
        with self._lock:
            items = self._menus.get(restaurant_id, [])
            remaining = [item for item in items if item.id != item_id]
            if len(remaining) == len(items):
                return {"success": False, "error": f"Menu item {item_id} not found."}
            self._menus[restaurant_id] = remaining
        self._persist()
        return {"success": True, "removed": item_id}

    def ensure_menu(self, restaurant_id: str) -> None:
        # New tenants start with an empty menu
        with self._lock:
            created = restaurant_id not in self._menus
            self._menus.setdefault(restaurant_id, [])
        if created:
            self._persist()

    def replace_menu(self, restaurant_id: str, items: List[MenuItem]) -> int:
        # Bulk load used by the seeding script
        with self._lock:
            self._menus[restaurant_id] = [MenuItem.from_dict(item.to_dict()) for item in items]
        self._persist()
        return len(items)

    def drop_menu(self, restaurant_id: str) -> None:
        with self._lock:
            removed = self._menus.pop(restaurant_id, None)
        if removed is not None:
            self._persist()
