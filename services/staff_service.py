"""
Staff service - restaurant tenants, staff accounts and PIN login
"""
import logging
import threading
import uuid
from typing import Any, Dict, List, Optional

from models.restaurant import Restaurant
from models.staff import Actor, Role, StaffMember, STAFF_ROLES
from .persistence import load_decoded, save_state

logger = logging.getLogger(__name__)

RESTAURANTS_KEY = "restaurants"
STAFF_KEY = "staff"


class StaffService:
    def __init__(self, repository=None, menu_service=None):
        self.repository = repository
        self.menu_service = menu_service
        self._lock = threading.RLock()
        self._restaurants: List[Restaurant] = []
        self._staff: List[StaffMember] = []

    def load(self) -> int:
        restaurants = load_decoded(self.repository, RESTAURANTS_KEY,
                                   lambda docs: [Restaurant.from_dict(data) for data in docs])
        staff = load_decoded(self.repository, STAFF_KEY,
                             lambda docs: [StaffMember.from_dict(data) for data in docs])
        with self._lock:
            if restaurants is not None:
                self._restaurants = restaurants
            if staff is not None:
                self._staff = staff
            return len(self._restaurants)

    def _persist(self) -> None:
        save_state(self.repository, RESTAURANTS_KEY, [r.to_dict() for r in self._restaurants])
        save_state(self.repository, STAFF_KEY, [s.to_dict(include_pin=True) for s in self._staff])

    # === Restaurants ===
    def get_restaurant(self, restaurant_id: str) -> Optional[Restaurant]:
        with self._lock:
            return next((r for r in self._restaurants if r.id == restaurant_id), None)

    def list_restaurants(self, active_only: bool = False) -> List[Restaurant]:
        with self._lock:
            return [r for r in self._restaurants if r.is_active or not active_only]

    def add_restaurant(self, name: str, admin_name: str, admin_pin: str,
                       cuisine: str = "", restaurant_id: Optional[str] = None,
                       **fields) -> Dict[str, Any]:
        # A tenant always starts with one admin and an empty menu
        if not name or not admin_name or not admin_pin:
            return {"success": False, "error": "Restaurant name and admin credentials are required."}

        restaurant = Restaurant(id=restaurant_id or f"r{uuid.uuid4().hex[:8]}", name=name,
                                cuisine=cuisine, **fields)
        admin = StaffMember(
            id=f"s{uuid.uuid4().hex[:8]}",
            name=admin_name,
            role=Role.ADMIN,
            pin=str(admin_pin),
            restaurant_id=restaurant.id
        )
        with self._lock:
            if self.get_restaurant(restaurant.id) is not None:
                return {"success": False, "error": f"Restaurant {restaurant.id} already exists."}
            self._restaurants.insert(0, restaurant)
            self._staff.append(admin)
            self._persist()
        if self.menu_service is not None:
            self.menu_service.ensure_menu(restaurant.id)
        logger.info("Registered restaurant %s (%s)", restaurant.id, name)
        return {"success": True, "restaurant": restaurant.to_dict(), "admin": admin.to_dict()}

    def set_restaurant_status(self, restaurant_id: str, status: str) -> Dict[str, Any]:
        if status not in ("active", "disabled"):
            return {"success": False, "error": f"Unknown restaurant status: {status}"}
        with self._lock:
            restaurant = self.get_restaurant(restaurant_id)
            if restaurant is None:
                return {"success": False, "error": f"Restaurant {restaurant_id} not found."}
            restaurant.status = status
            self._persist()
        return {"success": True, "restaurant": restaurant.to_dict()}

    def delete_restaurant(self, restaurant_id: str) -> Dict[str, Any]:
        # Removes the tenant together with its staff and menu
        with self._lock:
            if self.get_restaurant(restaurant_id) is None:
                return {"success": False, "error": f"Restaurant {restaurant_id} not found."}
            self._restaurants = [r for r in self._restaurants if r.id != restaurant_id]
            self._staff = [s for s in self._staff if s.restaurant_id != restaurant_id]
            self._persist()
        if self.menu_service is not None:
            self.menu_service.drop_menu(restaurant_id)
        return {"success": True, "removed": restaurant_id}

    # === Staff ===
    def list_staff(self, restaurant_id: str) -> List[StaffMember]:
        with self._lock:
            return [s for s in self._staff if s.restaurant_id == restaurant_id]

    def add_staff(self, restaurant_id: str, name: str, role: Any, pin: str) -> Dict[str, Any]:
        try:
            role = Role(role)
        except ValueError:
            return {"success": False, "error": f"Unknown role: {role!r}"}
        if role not in STAFF_ROLES:
            return {"success": False, "error": f"'{role.value}' is not a staff role."}
        if not name or not pin:
            return {"success": False, "error": "Staff name and PIN are required."}

        member = StaffMember(id=f"s{uuid.uuid4().hex[:8]}", name=name, role=role,
                             pin=str(pin), restaurant_id=restaurant_id)
        with self._lock:
            if self.get_restaurant(restaurant_id) is None:
                return {"success": False, "error": f"Restaurant {restaurant_id} not found."}
            self._staff.append(member)
            self._persist()
        return {"success": True, "staff": member.to_dict()}

    def set_staff_status(self, staff_id: str, status: str) -> Dict[str, Any]:
        if status not in ("active", "suspended"):
            return {"success": False, "error": f"Unknown staff status: {status}"}
        with self._lock:
            member = next((s for s in self._staff if s.id == staff_id), None)
            if member is None:
                return {"success": False, "error": f"Staff member {staff_id} not found."}
            member.status = status
            self._persist()
        return {"success": True, "staff": member.to_dict()}

    def authenticate(self, restaurant_id: str, name: str, pin: str) -> Dict[str, Any]:
        # Staff login by restaurant, case-insensitive name and PIN
        restaurant = self.get_restaurant(restaurant_id)
        if restaurant is None:
            return {"success": False, "error": "Restaurant not found."}
        if not restaurant.is_active:
            return {
                "success": False,
                "error": "This restaurant account is currently suspended. Please contact HQ."
            }

        with self._lock:
            member = next(
                (s for s in self._staff
                 if s.restaurant_id == restaurant_id
                 and s.name.lower() == (name or "").strip().lower()
                 and s.pin == str(pin)),
                None
            )
        if member is None:
            logger.warning("Failed login for '%s' at %s", name, restaurant_id)
            return {"success": False, "error": "Invalid staff name or PIN. Please try again."}
        if not member.is_active:
            return {
                "success": False,
                "error": "Your account has been suspended. Please contact your administrator."
            }

        return {"success": True, "actor": Actor.for_staff(member).to_dict(), "staff": member.to_dict()}

    def get_staff(self, staff_id: str) -> Optional[StaffMember]:
        with self._lock:
            return next((s for s in self._staff if s.id == staff_id), None)

    def actor_for(self, staff_id: str) -> Optional[Actor]:
        # Re-checked on every request so suspensions take effect on live sessions
        member = self.get_staff(staff_id)
        if member is None or not member.is_active:
            return None
        restaurant = self.get_restaurant(member.restaurant_id)
        if restaurant is None or not restaurant.is_active:
            return None
        return Actor.for_staff(member)

    def replace_all(self, restaurants: List[Dict[str, Any]], staff: List[Dict[str, Any]]) -> None:
        # Bulk load used by the seeding script
        with self._lock:
            self._restaurants = [Restaurant.from_dict(data) for data in restaurants]
            self._staff = [StaffMember.from_dict(data) for data in staff]
            self._persist()
