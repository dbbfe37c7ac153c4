"""
Alert Generator.

Each product is first evaluated into a list of structured conditions
(OutOfStock, LowStock, DeadStock); the conditions are then rendered into
Alert records. The alert category travels with the record so consumers never
have to infer the kind of an alert from its title.

Generation is pure. The only mutable state is acknowledgment, held by an
AcknowledgmentStore keyed by alert id. Alert ids are deterministic
(<product id>:<category>) so an acknowledgment keeps suppressing the same
condition across recomputations.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Union

from . import settings, utils
from .classifier import classify_product
from .dead_stock import days_since_last_sale, is_dead_stock
from .schemas import Alert, AlertCategory, AlertType, Product, StockStatus
from .store import AcknowledgmentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutOfStock:
    pass


@dataclass(frozen=True)
class LowStock:
    severity: StockStatus  # CRITICAL or LOW


@dataclass(frozen=True)
class DeadStock:
    days_since_last_sale: Union[int, str]


AlertCondition = Union[OutOfStock, LowStock, DeadStock]


def evaluate_product(
    product: Product,
    now: datetime,
    window_days: int = settings.DEAD_STOCK_WINDOW_DAYS,
) -> list[AlertCondition]:
    """Returns the conditions a product is in. An empty list means OK."""
    conditions: list[AlertCondition] = []

    status = classify_product(product)
    if status == StockStatus.OUT_OF_STOCK:
        conditions.append(OutOfStock())
    elif status in (StockStatus.CRITICAL, StockStatus.LOW):
        conditions.append(LowStock(severity=status))

    # Independent of the stock-level check: a product can carry both.
    if is_dead_stock(product.last_sold_at, now, window_days):
        conditions.append(DeadStock(days_since_last_sale(product.last_sold_at, now)))

    return conditions


def _render(product: Product, condition: AlertCondition, now: datetime) -> Alert:
    label = f"{product.name} ({product.sku})"

    if isinstance(condition, OutOfStock):
        alert_type = AlertType.CRITICAL
        category = AlertCategory.OUT_OF_STOCK
        title = "Out of Stock"
        message = f"{label} is out of stock. Reorder immediately to avoid lost sales."
    elif isinstance(condition, LowStock):
        alert_type = AlertType.WARNING
        category = AlertCategory.LOW_STOCK
        title = "Low Stock"
        message = (
            f"{label} has {product.quantity} units left "
            f"(reorder level: {product.reorder_level})."
        )
        if condition.severity == StockStatus.CRITICAL:
            message += " Stock is at a critical level."
    else:
        alert_type = AlertType.WARNING
        category = AlertCategory.DEAD_STOCK
        title = "Dead Stock"
        if condition.days_since_last_sale == "never":
            message = f"{label} has never sold."
        else:
            message = f"{label} has not sold in {condition.days_since_last_sale} days."
        message += f" {product.quantity} units worth {product.stock_value} are tied up."

    return Alert(
        id=f"{product.id}:{category.value}",
        type=alert_type,
        category=category,
        title=title,
        message=message,
        timestamp=now,
        product_id=product.id,
    )


def generate_alerts(
    products: list[Product],
    now: datetime | None = None,
    window_days: int = settings.DEAD_STOCK_WINDOW_DAYS,
) -> list[Alert]:
    """Alerts in the order the products were supplied; no priority sort."""
    now = now or utils.utc_now()
    return [
        _render(product, condition, now)
        for product in products
        for condition in evaluate_product(product, now, window_days)
    ]


def active_alerts(
    products: list[Product],
    ack_store: AcknowledgmentStore,
    now: datetime | None = None,
    window_days: int = settings.DEAD_STOCK_WINDOW_DAYS,
) -> list[Alert]:
    """Generated alerts minus the ones already acknowledged."""
    return [
        alert
        for alert in generate_alerts(products, now, window_days)
        if not ack_store.is_acknowledged(alert.id)
    ]


def acknowledge_alert(alert_id: str, ack_store: AcknowledgmentStore) -> None:
    ack_store.acknowledge(alert_id)
    logger.info(f"🔕 Alert acknowledged: {alert_id}")


def filter_alerts(alerts: list[Alert], alert_type: str = "all") -> list[Alert]:
    """Client-side filter: 'all', 'critical' or 'warning'."""
    if alert_type == "all":
        return list(alerts)
    wanted = AlertType(alert_type)
    return [alert for alert in alerts if alert.type == wanted]


def count_by_type(alerts: list[Alert]) -> dict[str, int]:
    counts = {"total": len(alerts)}
    for alert_type in AlertType:
        counts[alert_type.value] = sum(1 for a in alerts if a.type == alert_type)
    return counts
