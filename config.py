"""
Application settings read from the environment (and a local .env file)
"""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from models.order import OrderStatus

STATE_BACKENDS = ("sqlite", "file")


@dataclass
class Settings:
    secret_key: str = "dev-secret-key"
    port: int = 5000
    debug: bool = False
    log_level: str = "INFO"
    state_backend: str = "sqlite"
    database_path: str = "data/shopfast.db"
    state_dir: str = "data/state"
    initial_order_status: OrderStatus = OrderStatus.PENDING
    auto_verify_after_ms: int = 120000
    sweep_interval_seconds: float = 5.0
    seed_demo_data: bool = False
    start_sweeper: bool = True


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _positive_int(name: str, value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {number}")
    return number


def load_settings() -> Settings:
    # .env values never override variables already set in the environment
    load_dotenv()

    backend = os.getenv("STATE_BACKEND", "sqlite").strip().lower()
    if backend not in STATE_BACKENDS:
        raise ValueError(f"STATE_BACKEND must be one of {', '.join(STATE_BACKENDS)}, got {backend!r}")

    initial = os.getenv("INITIAL_ORDER_STATUS", OrderStatus.PENDING.value).strip()
    if initial not in (OrderStatus.PENDING.value, OrderStatus.RECEIVED.value):
        raise ValueError(f"INITIAL_ORDER_STATUS must be Pending or Received, got {initial!r}")

    interval_raw = os.getenv("SWEEP_INTERVAL_SECONDS", "5")
    try:
        interval = float(interval_raw)
    except ValueError:
        raise ValueError(f"SWEEP_INTERVAL_SECONDS must be a number, got {interval_raw!r}")
    if interval <= 0:
        raise ValueError("SWEEP_INTERVAL_SECONDS must be positive")

    return Settings(
        secret_key=os.getenv("SECRET_KEY", "dev-secret-key"),
        port=_positive_int("PORT", os.getenv("PORT", "5000")),
        debug=_flag(os.getenv("DEBUG", "False")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        state_backend=backend,
        database_path=os.getenv("DATABASE_PATH", "data/shopfast.db"),
        state_dir=os.getenv("STATE_DIR", "data/state"),
        initial_order_status=OrderStatus(initial),
        auto_verify_after_ms=_positive_int("AUTO_VERIFY_AFTER_MS", os.getenv("AUTO_VERIFY_AFTER_MS", "120000")),
        sweep_interval_seconds=interval,
        seed_demo_data=_flag(os.getenv("SEED_DEMO_DATA", "False")),
    )
