"""
Services package for the ShopFast order platform
Contains the order lifecycle and its collaborators
"""

from .menu_service import MenuService
from .order_service import OrderService
from .board_service import BoardService
from .cart_service import CartService
from .alert_service import AlertService
from .payment_service import PaymentService, SimulatedGateway
from .staff_service import StaffService
from .sweeper import TimeoutSweeper

__all__ = [
    'MenuService', 'OrderService', 'BoardService', 'CartService',
    'AlertService', 'PaymentService', 'SimulatedGateway',
    'StaffService', 'TimeoutSweeper'
]
