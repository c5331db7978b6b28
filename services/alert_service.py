"""
Alert service - "call server" requests keyed by restaurant and table
"""
import logging
import threading
import time
import uuid
from typing import Any, Dict, List, Optional

from models.alert import ServerAlert
from models.order import OrderType
from .persistence import load_decoded, save_state

logger = logging.getLogger(__name__)

ALERTS_KEY = "alerts"


class AlertService:
    # Side channel next to the order lifecycle; never touches orders

    def __init__(self, repository=None, clock=None):
        self.repository = repository
        self.clock = clock or (lambda: int(time.time() * 1000))
        self._lock = threading.RLock()
        self._alerts: List[ServerAlert] = []

    def load(self) -> int:
        alerts = load_decoded(self.repository, ALERTS_KEY,
                              lambda docs: [ServerAlert.from_dict(item) for item in docs])
        with self._lock:
            if alerts is not None:
                self._alerts = alerts
            return len(self._alerts)

    def _persist(self) -> None:
        save_state(self.repository, ALERTS_KEY, [alert.to_dict() for alert in self._alerts])

    def call_server(self, restaurant_id: str, table_number: Optional[int], request: str,
                    order_type: str = OrderType.DINE_IN.value) -> Dict[str, Any]:
        if order_type != OrderType.DINE_IN.value or not table_number:
            logger.info("Ignoring service request '%s' outside a dine-in table", request)
            return {
                "success": False,
                "error": "Server calls are only available for dine-in orders with a table."
            }
        if not request or not request.strip():
            return {"success": False, "error": "Request text is required."}

        alert = ServerAlert(
            id=f"alert-{uuid.uuid4().hex[:8]}",
            restaurant_id=restaurant_id,
            table_number=int(table_number),
            request=request.strip(),
            timestamp=self.clock()
        )
        with self._lock:
            self._alerts.append(alert)
            self._persist()
        logger.info("Table %s at %s requested '%s'", alert.table_number, restaurant_id, alert.request)
        return {"success": True, "alert": alert.to_dict()}

    def resolve_alert(self, alert_id: str, restaurant_id: Optional[str] = None) -> Dict[str, Any]:
        with self._lock:
            alert = next((a for a in self._alerts if a.id == alert_id), None)
            if alert is None or (restaurant_id is not None and alert.restaurant_id != restaurant_id):
                return {"success": False, "error": f"Alert {alert_id} not found."}
            self._alerts = [a for a in self._alerts if a.id != alert_id]
            self._persist()
        return {"success": True, "resolved": alert_id}

    def list_alerts(self, restaurant_id: str) -> List[ServerAlert]:
        with self._lock:
            return [alert for alert in self._alerts if alert.restaurant_id == restaurant_id]
