"""
InventoryService: the single entry point callers (UI handlers, CLI, report
pipelines) use. It validates input, owns the sale-recording transaction and
reads from the stores before handing data to the pure derivations.
"""

import logging
import threading
import uuid
from datetime import datetime, timedelta
from decimal import Decimal

from pydantic import ValidationError as SchemaValidationError

from . import alerts, dead_stock, insights, reports, sales, search, settings, utils
from .classifier import classify_product
from .errors import ValidationError
from .insights import InsightClient, InsightTask
from .schemas import (
    Alert,
    DeadStockReport,
    InsightRequest,
    InventoryStats,
    NewProduct,
    Product,
    ProductQuery,
    Sale,
    StockAdjustment,
    SalesSummary,
    StockStatus,
)
from .store import (
    AcknowledgmentStore,
    InMemoryAcknowledgmentStore,
    InMemoryProductStore,
    InMemorySaleStore,
    ProductStore,
    SaleStore,
)

logger = logging.getLogger(__name__)


class InventoryService:
    def __init__(
        self,
        products: ProductStore | None = None,
        sales_log: SaleStore | None = None,
        acknowledgments: AcknowledgmentStore | None = None,
        insight_client: InsightClient | None = None,
    ):
        self.products = products or InMemoryProductStore()
        self.sales_log = sales_log or InMemorySaleStore()
        self.acknowledgments = acknowledgments or InMemoryAcknowledgmentStore()
        self.insight_client = insight_client or InsightClient()
        self._sale_lock = threading.Lock()

    def close(self) -> None:
        """Shuts down the background insight workers."""
        self.insight_client.close()

    # --- Products ---
    def add_product(self, **fields) -> Product:
        """
        Creates a product from name, sku, quantity, price and optional
        reorder_level (defaults to settings.DEFAULT_REORDER_LEVEL).
        """
        try:
            new_product = NewProduct(**fields)
        except SchemaValidationError as e:
            raise ValidationError.from_schema_error(e) from e
        product = self.products.add(new_product)
        logger.info(f"✅ Product added: {product.name} ({product.sku})")
        return product

    def list_products(self) -> list[Product]:
        return self.products.list()

    def get_product(self, product_id: str) -> Product:
        return self.products.get(product_id)

    def restock(self, product_id: str, amount: int) -> Product:
        try:
            adjustment = StockAdjustment(product_id=product_id, amount=amount)
        except SchemaValidationError as e:
            raise ValidationError.from_schema_error(e) from e
        product = self.products.increment_quantity(product_id, adjustment.amount)
        logger.info(f"📦 Restocked {product.sku}: +{adjustment.amount} (now {product.quantity})")
        return product

    # --- Sales ---
    def record_sale(
        self,
        product_id: str,
        quantity: int,
        unit_price: Decimal | None = None,
        timestamp: datetime | None = None,
    ) -> Sale:
        """
        Records a sale as one unit of work: decrement stock, stamp lastSoldAt,
        append the sale. A sale larger than current stock raises
        InsufficientStock and leaves everything unchanged.
        """
        timestamp = timestamp or utils.utc_now()

        with self._sale_lock:
            product = self.products.get(product_id)
            try:
                sale = Sale(
                    id=uuid.uuid4().hex,
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=product.price if unit_price is None else unit_price,
                    timestamp=timestamp,
                )
            except SchemaValidationError as e:
                raise ValidationError.from_schema_error(e) from e

            # decrement_quantity is the compare-and-set; it raises before any write.
            self.products.decrement_quantity(product_id, sale.quantity)
            try:
                self.products.set_last_sold(product_id, sale.timestamp)
                self.sales_log.append(sale)
            except Exception:
                logger.error(f"❌ Sale for {product.sku} failed, rolling back stock.")
                self.products.increment_quantity(product_id, sale.quantity)
                self.products.set_last_sold(product_id, product.last_sold_at)
                self.sales_log.remove(sale.id)
                raise

        logger.info(f"💰 Sale recorded: {sale.quantity} x {product.sku} @ {sale.unit_price}")
        return sale

    def sales_summary(
        self,
        period_days: int = settings.DEFAULT_SALES_PERIOD_DAYS,
        now: datetime | None = None,
        top_n: int = settings.TOP_PRODUCTS_LIMIT,
    ) -> SalesSummary:
        if period_days < 1:
            raise ValidationError("period_days", "must be >= 1")
        now = now or utils.utc_now()
        recent = self.sales_log.list_since(now - timedelta(days=period_days))
        return sales.summarize(recent, self.list_products(), period_days, now, top_n)

    # --- Classification & reports ---
    def classify(self, product_id: str) -> StockStatus:
        return classify_product(self.products.get(product_id))

    def dead_stock_report(
        self,
        now: datetime | None = None,
        window_days: int = settings.DEAD_STOCK_WINDOW_DAYS,
    ) -> DeadStockReport:
        return dead_stock.dead_stock_report(self.list_products(), now, window_days)

    def low_stock_products(self) -> list[Product]:
        return reports.low_stock_products(self.list_products())

    def stats(self, now: datetime | None = None) -> InventoryStats:
        return reports.inventory_stats(self.list_products(), now)

    def search(self, request: ProductQuery | None = None, **criteria) -> list[Product]:
        """Accepts a ProductQuery or its fields (text, status, sort_by)."""
        if request is None:
            try:
                request = ProductQuery(**criteria)
            except SchemaValidationError as e:
                raise ValidationError.from_schema_error(e) from e
        return search.query(self.list_products(), request)

    # --- Alerts ---
    def alerts(self, now: datetime | None = None, alert_type: str = "all") -> list[Alert]:
        active = alerts.active_alerts(self.list_products(), self.acknowledgments, now)
        return alerts.filter_alerts(active, alert_type)

    def acknowledge_alert(self, alert_id: str) -> None:
        alerts.acknowledge_alert(alert_id, self.acknowledgments)

    # --- Insights ---
    def build_insight_request(self, now: datetime | None = None) -> InsightRequest:
        products = self.list_products()
        return insights.build_insight_request(
            products, reports.inventory_stats(products, now), now
        )

    def request_insights(self, now: datetime | None = None) -> InsightTask:
        """
        Starts the narrative request in the background. Raises NothingToAnalyze
        immediately when there are no products; transport/empty-answer errors
        surface from InsightTask.result().
        """
        request = self.build_insight_request(now)
        return self.insight_client.submit(request)
