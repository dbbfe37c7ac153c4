import logging
import math
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Literal

from . import settings, utils
from .schemas import DeadStockItem, DeadStockReport, Product

logger = logging.getLogger(__name__)

NEVER = "never"


def days_since_last_sale(
    last_sold_at: datetime | None, now: datetime
) -> int | Literal["never"]:
    """
    Whole days since the last sale, rounded up, the way the dashboard shows
    "N days ago". A sale earlier today counts as 1 day; the exact same
    instant is 0.
    """
    if last_sold_at is None:
        return NEVER
    elapsed = abs(utils.ensure_aware(now) - utils.ensure_aware(last_sold_at))
    return math.ceil(elapsed / timedelta(days=1))


def is_dead_stock(
    last_sold_at: datetime | None,
    now: datetime,
    window_days: int = settings.DEAD_STOCK_WINDOW_DAYS,
) -> bool:
    days = days_since_last_sale(last_sold_at, now)
    if days == NEVER:
        return True
    return days > window_days


def dead_stock_report(
    products: list[Product],
    now: datetime | None = None,
    window_days: int = settings.DEAD_STOCK_WINDOW_DAYS,
) -> DeadStockReport:
    """Lists products without a sale in the trailing window and the capital tied up in them."""
    now = now or utils.utc_now()

    items = []
    for product in products:
        if not is_dead_stock(product.last_sold_at, now, window_days):
            continue
        items.append(
            DeadStockItem(
                product_id=product.id,
                name=product.name,
                sku=product.sku,
                quantity=product.quantity,
                price=product.price,
                last_sold_at=product.last_sold_at,
                days_since_last_sale=days_since_last_sale(product.last_sold_at, now),
                stock_value=product.stock_value,
            )
        )

    total = sum((item.stock_value for item in items), Decimal("0"))
    logger.debug(f"Dead stock: {len(items)} products, value {total}")
    return DeadStockReport(
        window_days=window_days,
        count=len(items),
        total_dead_stock_value=total,
        items=items,
    )
