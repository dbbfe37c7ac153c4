import logging
from datetime import datetime, timedelta
from decimal import Decimal

import pandas as pd

from . import settings, utils
from .schemas import Product, Sale, SalesSummary, TopProduct

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Rounds a Decimal amount to cents."""
    return Decimal(str(value)).quantize(CENTS)


def summarize(
    sales: list[Sale],
    products: list[Product],
    period_days: int = settings.DEFAULT_SALES_PERIOD_DAYS,
    now: datetime | None = None,
    top_n: int = settings.TOP_PRODUCTS_LIMIT,
) -> SalesSummary:
    """
    Period-bounded sales summary, recomputed from the raw sale log on every call.
    - totalSales counts transactions, totalUnits counts units.
    - averageOrderValue is 0 when there are no sales in the period.
    - topProducts: ranked by units, then revenue, then first appearance.
    """
    now = utils.ensure_aware(now or utils.utc_now())
    cutoff = now - timedelta(days=period_days)
    period = f"{period_days} days"

    recent = [s for s in sales if utils.ensure_aware(s.timestamp) >= cutoff]
    if not recent:
        return SalesSummary(period=period, period_days=period_days)

    # revenue stays an object column of Decimals so sums and ties are exact
    df = pd.DataFrame(
        [
            {
                "product_id": s.product_id,
                "quantity": s.quantity,
                "revenue": s.revenue,
            }
            for s in recent
        ]
    )

    # --- Totals ---
    total_sales = len(df)
    total_units = int(df["quantity"].sum())
    total_revenue = sum(df["revenue"], Decimal("0"))
    average_order_value = to_money(total_revenue / total_sales)

    # --- Top Products ---
    # sort=False keeps groups in first-appearance order, which is the last tie-breaker.
    grouped = (
        df.groupby("product_id", sort=False)
        .agg(
            quantity=("quantity", "sum"),
            revenue=("revenue", lambda r: sum(r, Decimal("0"))),
        )
        .reset_index()
    )
    ranked = sorted(
        grouped.to_dict("records"),
        key=lambda row: (-int(row["quantity"]), -row["revenue"]),
    )[: max(top_n, 0)]

    by_id = {p.id: p for p in products}
    top_products = []
    for row in ranked:
        product = by_id.get(row["product_id"])
        if product is None:
            logger.warning(f"⚠️ Sale references unknown product {row['product_id']}")
        top_products.append(
            TopProduct(
                product_id=row["product_id"],
                name=product.name if product else "Unknown product",
                sku=product.sku if product else "",
                quantity=int(row["quantity"]),
                revenue=row["revenue"],
            )
        )

    return SalesSummary(
        total_sales=total_sales,
        total_units=total_units,
        total_revenue=total_revenue,
        average_order_value=average_order_value,
        top_products=top_products,
        period=period,
        period_days=period_days,
    )
