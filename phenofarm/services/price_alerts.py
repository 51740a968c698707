# phenofarm/services/price_alerts.py
"""Dispensary price alerts.

Alerts live in the user's storage slot (at most MAX_PRICE_ALERTS, one per
product). Refreshing compares them with current catalog prices: an alert
fires when the price is at or below the target and has dropped since the
alert last saw it. A fired alert stays fired.
"""
import logging
import uuid
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from phenofarm.utils.errors import NotFoundError, ValidationError
from phenofarm.utils.money import to_cents, to_float
from phenofarm.utils.storage import KeyValueStorage, load_json, save_json

logger = logging.getLogger(__name__)

PRICE_ALERTS_KEY = "phenofarm_price_alerts"
MAX_PRICE_ALERTS = 20

_MONEY_FIELDS = ("target_price", "current_price", "original_price")


@dataclass
class PriceAlert:
    id: str
    product_id: int
    product_name: str
    grower_id: Optional[int]
    grower_name: Optional[str]
    target_price: int  # cents
    current_price: int  # cents
    created_at: str
    is_triggered: bool = False
    triggered_at: Optional[str] = None
    original_price: Optional[int] = None  # cents, price before the drop
    discount_percent: Optional[int] = None

    def to_json(self) -> dict:
        data = asdict(self)
        for name in _MONEY_FIELDS:
            if data[name] is not None:
                data[name] = to_float(data[name])
        return data

    @classmethod
    def from_json(cls, data: dict) -> "PriceAlert":
        values = dict(data)
        for name in _MONEY_FIELDS:
            if values.get(name) is not None:
                values[name] = to_cents(values[name])
        known = {k: values.get(k) for k in cls.__dataclass_fields__ if k in values}
        if "product_id" in known:
            known["product_id"] = int(known["product_id"])
        return cls(**known)


def refresh_alert(alert: PriceAlert, current_price: int, now: Optional[datetime] = None) -> PriceAlert:
    now = now or datetime.now(timezone.utc)
    fired = current_price <= alert.target_price and current_price < alert.current_price

    if fired:
        alert.original_price = alert.current_price
        alert.triggered_at = now.isoformat()
        alert.is_triggered = True
    if alert.original_price:
        alert.discount_percent = round((alert.original_price - current_price) * 100 / alert.original_price)
    alert.current_price = current_price
    return alert


def refresh_alerts(alerts: List[PriceAlert], current_prices: Dict[int, int],
                   now: Optional[datetime] = None) -> List[PriceAlert]:
    """Alerts whose product is gone from ``current_prices`` are returned untouched."""
    for alert in alerts:
        if alert.product_id in current_prices:
            refresh_alert(alert, current_prices[alert.product_id], now)
    return alerts


class PriceAlertStore:
    def __init__(self, storage: KeyValueStorage, key: str = PRICE_ALERTS_KEY):
        self.storage = storage
        self.key = key

    def list(self) -> List[PriceAlert]:
        raw = load_json(self.storage, self.key, [])
        if not isinstance(raw, list):
            return []
        alerts = []
        for entry in raw:
            try:
                alerts.append(PriceAlert.from_json(entry))
            except (TypeError, ValueError, ArithmeticError):
                logger.warning("Skipping malformed price alert in %r", self.key)
        return alerts

    def save(self, alerts: List[PriceAlert]) -> None:
        save_json(self.storage, self.key, [alert.to_json() for alert in alerts])

    def add(self, product, target_price: int) -> PriceAlert:
        if target_price <= 0:
            raise ValidationError("Please enter a valid price", field="target_price")
        if target_price >= product.price_cents:
            raise ValidationError("Target price must be lower than current price", field="target_price")

        alerts = self.list()
        if any(alert.product_id == product.id for alert in alerts):
            raise ValidationError("A price alert already exists for this product", field="product_id")
        if len(alerts) >= MAX_PRICE_ALERTS:
            raise ValidationError(f"Maximum {MAX_PRICE_ALERTS} alerts allowed. Remove some first.")

        grower = getattr(product, "grower", None)
        alert = PriceAlert(
            id=uuid.uuid4().hex,
            product_id=product.id,
            product_name=product.name,
            grower_id=product.grower_id,
            grower_name=grower.business_name if grower is not None else None,
            target_price=target_price,
            current_price=product.price_cents,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        alerts.append(alert)
        self.save(alerts)
        return alert

    def remove(self, alert_id: str) -> None:
        alerts = self.list()
        kept = [alert for alert in alerts if alert.id != alert_id]
        if len(kept) == len(alerts):
            raise NotFoundError("Price alert not found")
        self.save(kept)

    def refresh(self, current_prices: Dict[int, int], now: Optional[datetime] = None) -> List[PriceAlert]:
        alerts = refresh_alerts(self.list(), current_prices, now)
        self.save(alerts)
        return alerts
