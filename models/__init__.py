"""
Models package for the ShopFast order platform
Contains data models and type definitions
"""

from .order import Order, OrderItem, OrderStatus, OrderType, PaymentStatus
from .menu import MenuItem, MenuItemCategory, MenuItemTag
from .staff import Role, StaffMember, Actor
from .restaurant import Restaurant, Table
from .alert import ServerAlert

__all__ = [
    'Order', 'OrderItem', 'OrderStatus', 'OrderType', 'PaymentStatus',
    'MenuItem', 'MenuItemCategory', 'MenuItemTag',
    'Role', 'StaffMember', 'Actor',
    'Restaurant', 'Table',
    'ServerAlert'
]
