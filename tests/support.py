"""
Shared test doubles and builders
"""
import copy

from config import Settings
from core.platform import ShopFastPlatform
from init_db import seed_demo_data
from models.staff import Actor, Role

START_MS = 1_700_000_000_000

ADMIN = Actor(role=Role.ADMIN, restaurant_id="r1", name="Gilbert Kareri")
KITCHEN = Actor(role=Role.KITCHEN, restaurant_id="r1", name="Marco")
SERVER = Actor(role=Role.SERVER, restaurant_id="r1", name="Sofia")
CASHIER = Actor(role=Role.CASHIER, restaurant_id="r1", name="Luca")
OTHER_KITCHEN = Actor(role=Role.KITCHEN, restaurant_id="r2", name="Somchai")
DINER = Actor.diner("Gilbert")
SYSTEM = Actor.system()


class FakeClock:
    """Simulated epoch-millisecond clock"""

    def __init__(self, start: int = START_MS):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class MemoryRepository:
    """In-memory stand-in for the state store that counts writes"""

    def __init__(self):
        self.data = {}
        self.saves = []
        self.fail_saves = False

    def load(self, key):
        return copy.deepcopy(self.data.get(key))

    def save(self, key, data):
        if self.fail_saves:
            raise IOError("backend unavailable")
        self.saves.append(key)
        self.data[key] = copy.deepcopy(data)


def build_platform(clock=None, repository=None, seed=True, **overrides) -> ShopFastPlatform:
    settings = Settings(start_sweeper=False, **overrides)
    platform = ShopFastPlatform(
        settings,
        repository=repository if repository is not None else MemoryRepository(),
        clock=clock or FakeClock()
    )
    if seed:
        seed_demo_data(platform, now=platform.order_service.clock())
    return platform
