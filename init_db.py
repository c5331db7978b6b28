#!/usr/bin/env python3
"""
State store initialization script
Writes the demo restaurants, menus, staff and live orders to the configured backend.
"""
import logging
import time
from typing import Any, Dict, List, Optional

from config import load_settings
from core.log import configure_logging
from core.platform import ShopFastPlatform
from models.menu import MenuItem
from models.order import to_money
from models.restaurant import Restaurant
from models.staff import Role, StaffMember

logger = logging.getLogger(__name__)

DEMO_RESTAURANTS = [
    Restaurant(id="r1", name="The Golden Spoon", cuisine="Italian", subscription="premium", currency="KES"),
    Restaurant(id="r2", name="Emerald Garden", cuisine="Thai", subscription="basic", currency="USD"),
]

DEMO_MENUS = {
    "r1": [
        MenuItem("m1-s1", "Bruschetta", to_money("8.50"), "Starters",
                 "Grilled bread with tomatoes, garlic, and basil.", ["vegetarian"]),
        MenuItem("m1-s2", "Calamari Fritti", to_money("12.00"), "Starters",
                 "Lightly fried squid with marinara sauce."),
        MenuItem("m1-m1", "Spaghetti Carbonara", to_money("18.00"), "Mains",
                 "Pasta with eggs, cheese, pancetta, and pepper."),
        MenuItem("m1-m2", "Margherita Pizza", to_money("15.00"), "Mains",
                 "Classic pizza with tomatoes, mozzarella, and basil.", ["vegetarian", "new"]),
        MenuItem("m1-d1", "Tiramisu", to_money("9.00"), "Desserts", "Coffee-flavoured Italian dessert."),
        MenuItem("m1-k1", "Espresso", to_money("3.00"), "Drinks", "Strong Italian coffee."),
        MenuItem("m1-k2", "Red Wine", to_money("7.00"), "Drinks", "Glass of house Chianti."),
    ],
    "r2": [
        MenuItem("m2-s1", "Spring Rolls", to_money("7.00"), "Starters",
                 "Crispy rolls with vegetables.", ["vegetarian"]),
        MenuItem("m2-m1", "Pad Thai", to_money("16.50"), "Mains",
                 "Stir-fried rice noodles with shrimp.", ["spicy"]),
        MenuItem("m2-d1", "Mango Sticky Rice", to_money("8.00"), "Desserts",
                 "Sweet sticky rice with fresh mango.", ["gluten-free"]),
        MenuItem("m2-k1", "Thai Iced Tea", to_money("4.50"), "Drinks", "Sweet and creamy black tea."),
    ],
}

DEMO_STAFF = [
    StaffMember("s1", "Gilbert Kareri", Role.ADMIN, "1234", "r1"),
    StaffMember("s2", "Marco", Role.KITCHEN, "2222", "r1"),
    StaffMember("s3", "Sofia", Role.SERVER, "3333", "r1"),
    StaffMember("s4", "Luca", Role.CASHIER, "4444", "r1"),
    StaffMember("s5", "Diana", Role.ADMIN, "4321", "r2"),
]


def _line(restaurant_id: str, item_id: str, quantity: int) -> Dict[str, Any]:
    item = next(i for i in DEMO_MENUS[restaurant_id] if i.id == item_id)
    return {"id": item.id, "name": item.name, "quantity": quantity, "price": float(item.price)}


def demo_orders(now: Optional[int] = None) -> List[Dict[str, Any]]:
    # Two settled orders, one in the kitchen and one already on its way to the table
    now = int(time.time() * 1000) if now is None else now
    minute = 60 * 1000
    return [
        {
            "id": "ORD-101", "restaurantId": "r1", "orderType": "dine-in", "tableNumber": 5,
            "items": [_line("r1", "m1-s1", 1), _line("r1", "m1-m1", 1)], "total": 26.50,
            "status": "Paid", "paymentStatus": "paid", "orderName": "Gilbert", "userId": "u1",
            "createdAt": now - 90 * minute, "updatedAt": now - 30 * minute,
        },
        {
            "id": "ORD-102", "restaurantId": "r2", "orderType": "dine-in", "tableNumber": 12,
            "items": [_line("r2", "m2-m1", 2)], "total": 33.00,
            "status": "Paid", "paymentStatus": "paid", "orderName": "Gilbert", "userId": "u1",
            "createdAt": now - 120 * minute, "updatedAt": now - 60 * minute,
        },
        {
            "id": "ORD-103", "restaurantId": "r1", "orderType": "dine-in", "tableNumber": 8,
            "items": [_line("r1", "m1-m2", 1), _line("r1", "m1-k2", 2)], "total": 29.00,
            "status": "Preparing", "orderName": "Diana",
            "acceptedAt": now - 3 * minute, "preparationTime": 15,
            "createdAt": now - 5 * minute, "updatedAt": now - 3 * minute,
        },
        {
            "id": "ORD-104", "restaurantId": "r1", "orderType": "dine-in", "tableNumber": 3,
            "items": [_line("r1", "m1-d1", 1)], "total": 9.00,
            "status": "On Route", "orderName": "Charles", "userId": "u1",
            "acceptedAt": now - 10 * minute, "preparationTime": 10,
            "createdAt": now - 12 * minute, "updatedAt": now - minute,
        },
    ]


def seed_demo_data(platform: ShopFastPlatform, now: Optional[int] = None) -> Dict[str, int]:
    """Replace every collection in the store with the demo data set"""
    platform.staff_service.replace_all(
        [restaurant.to_dict() for restaurant in DEMO_RESTAURANTS],
        [member.to_dict(include_pin=True) for member in DEMO_STAFF]
    )
    for restaurant_id, items in DEMO_MENUS.items():
        platform.menu_service.replace_menu(restaurant_id, items)
    orders = platform.order_service.replace_orders(demo_orders(now))

    counts = {
        "restaurants": len(DEMO_RESTAURANTS),
        "menu_items": sum(len(items) for items in DEMO_MENUS.values()),
        "staff": len(DEMO_STAFF),
        "orders": orders,
    }
    logger.info("Seeded demo data: %s", counts)
    return counts


def init_database() -> bool:
    """Initialize the configured state store with demo data"""
    try:
        settings = load_settings()
        configure_logging(settings.log_level)
        platform = ShopFastPlatform(settings)
        counts = seed_demo_data(platform)
    except Exception:
        logger.exception("State store initialization failed")
        return False

    target = settings.database_path if settings.state_backend == "sqlite" else settings.state_dir
    print(f"✅ Demo data written to {target}")
    for name, count in counts.items():
        print(f"📊 {name}: {count}")
    return True


if __name__ == "__main__":
    print("=== ShopFast state store initialization ===")
    if init_database():
        print("\nYou can now start the server with: python app.py")
    else:
        print("\nInitialization failed. Check the settings in your .env file.")
