from datetime import datetime
from decimal import Decimal

from . import settings, utils
from .classifier import classify_product
from .dead_stock import is_dead_stock
from .schemas import InventorySnapshotRow, InventoryStats, Product, StockStatus

NEEDS_REORDER = (StockStatus.OUT_OF_STOCK, StockStatus.CRITICAL, StockStatus.LOW)


def inventory_stats(
    products: list[Product],
    now: datetime | None = None,
    window_days: int = settings.DEAD_STOCK_WINDOW_DAYS,
) -> InventoryStats:
    """Headline numbers for the dashboard and the insights request."""
    now = now or utils.utc_now()
    statuses = [classify_product(p) for p in products]
    return InventoryStats(
        total_products=len(products),
        low_stock_count=sum(
            1 for s in statuses if s in (StockStatus.LOW, StockStatus.CRITICAL)
        ),
        out_of_stock_count=statuses.count(StockStatus.OUT_OF_STOCK),
        dead_stock_count=sum(
            1 for p in products if is_dead_stock(p.last_sold_at, now, window_days)
        ),
        total_value=sum((p.stock_value for p in products), Decimal("0")),
    )


def low_stock_products(
    products: list[Product], include_out_of_stock: bool = True
) -> list[Product]:
    """Products at or below their reorder level, most urgent (lowest quantity) first."""
    wanted = NEEDS_REORDER if include_out_of_stock else NEEDS_REORDER[1:]
    selected = [p for p in products if classify_product(p) in wanted]
    return sorted(selected, key=lambda p: p.quantity)


def inventory_snapshot(products: list[Product]) -> list[InventorySnapshotRow]:
    return [
        InventorySnapshotRow(
            id=p.id,
            name=p.name,
            sku=p.sku,
            quantity=p.quantity,
            price=p.price,
            reorder_level=p.reorder_level,
            status=classify_product(p),
            stock_value=p.stock_value,
            last_sold_at=p.last_sold_at,
        )
        for p in products
    ]
