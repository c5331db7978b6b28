"""
Main ShopFastPlatform class - wires the state store and all services together
"""
import logging
from typing import Any, Callable, Dict, Optional

from config import Settings
from database.connection import DatabaseConnection
from database.repository import StateRepository, JsonFileStateRepository
from services.menu_service import MenuService
from services.order_service import OrderService
from services.board_service import BoardService
from services.cart_service import CartService
from services.alert_service import AlertService
from services.payment_service import PaymentService
from services.staff_service import StaffService
from services.sweeper import TimeoutSweeper

logger = logging.getLogger(__name__)


def build_repository(settings: Settings):
    if settings.state_backend == "file":
        return JsonFileStateRepository(settings.state_dir)
    return StateRepository(DatabaseConnection(settings.database_path))


class ShopFastPlatform:
    # Central owner of the services; the HTTP layer and the seeding script both go through it

    def __init__(self, settings: Optional[Settings] = None, repository=None,
                 clock: Optional[Callable[[], int]] = None):
        self.settings = settings or Settings()

        # Persistence collaborator
        self.repository = repository if repository is not None else build_repository(self.settings)

        # Services
        self.menu_service = MenuService(self.repository)
        self.staff_service = StaffService(self.repository, self.menu_service)
        self.order_service = OrderService(
            self.repository,
            menu_service=self.menu_service,
            restaurant_lookup=self.staff_service.get_restaurant,
            clock=clock,
            auto_verify_after_ms=self.settings.auto_verify_after_ms,
            initial_status=self.settings.initial_order_status
        )
        self.alert_service = AlertService(self.repository, clock=self.order_service.clock)
        self.board_service = BoardService(self.order_service, self.staff_service, self.alert_service)
        self.cart_service = CartService(self.menu_service, self.order_service)
        self.payment_service = PaymentService(self.order_service)
        self.sweeper: Optional[TimeoutSweeper] = None

    def load(self) -> Dict[str, int]:
        # Pull every collection from the store; missing keys keep the in-memory defaults
        counts = {
            "restaurants": self.staff_service.load(),
            "menu_items": self.menu_service.load(),
            "orders": self.order_service.load(),
            "alerts": self.alert_service.load(),
        }
        logger.info("State loaded: %s", counts)
        return counts

    def start_sweeper(self) -> TimeoutSweeper:
        if self.sweeper is None or not self.sweeper.is_alive():
            self.sweeper = TimeoutSweeper(self.order_service, self.settings.sweep_interval_seconds)
            self.sweeper.start()
        return self.sweeper

    def stop_sweeper(self) -> None:
        if self.sweeper is not None:
            self.sweeper.stop()
            self.sweeper = None

    def status(self) -> Dict[str, Any]:
        return {
            "backend": self.settings.state_backend,
            "restaurants": len(self.staff_service.list_restaurants()),
            "liveOrders": len(self.order_service.list_orders()),
            "sweeper": self.sweeper.status() if self.sweeper else {"running": False},
        }
