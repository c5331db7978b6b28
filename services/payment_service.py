"""
Payment service - simulated gateway that settles orders through the order service
"""
import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, Iterable

from models.order import to_money
from models.staff import Actor
from .order_service import OrderService

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("stripe", "mpesa", "pesapal", "cash")


class PaymentDeclined(Exception):
    pass


class SimulatedGateway:
    # Approves every charge for an enabled method; anything else is declined

    def __init__(self, enabled_methods: Iterable[str] = SUPPORTED_METHODS):
        self.enabled_methods = frozenset(enabled_methods)

    def charge(self, amount: Decimal, method: str, reference: str) -> str:
        if method not in self.enabled_methods:
            raise PaymentDeclined(f"Payment method '{method}' is not enabled.")
        if amount <= 0:
            raise PaymentDeclined("Nothing to charge.")
        return f"txn_{uuid.uuid4().hex[:12]}"


class PaymentService:
    def __init__(self, order_service: OrderService, gateway: SimulatedGateway = None):
        self.order_service = order_service
        self.gateway = gateway or SimulatedGateway()

    def pay(self, order_id: str, method: str = "stripe") -> Dict[str, Any]:
        # The reservation keeps a second request from charging while this one is in flight
        reserved = self.order_service.reserve_payment(order_id)
        if not reserved["success"]:
            return reserved
        try:
            total = to_money(reserved["order"]["total"])
            try:
                transaction_id = self.gateway.charge(total, method, order_id)
            except PaymentDeclined as e:
                logger.warning("Payment for %s declined: %s", order_id, e)
                return {"success": False, "error": str(e), "error_type": "payment_declined"}

            result = self.order_service.record_payment(order_id, Actor.system())
            if not result["success"]:
                logger.error("Charged %s for %s but could not record it: %s",
                             transaction_id, order_id, result["error"])
                return result
        finally:
            self.order_service.release_payment(order_id)

        result["receipt"] = {
            "transactionId": transaction_id,
            "amount": float(total),
            "method": method
        }
        return result
