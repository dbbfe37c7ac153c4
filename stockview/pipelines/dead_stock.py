import logging
from datetime import datetime

from stockview import dead_stock, settings
from stockview.pipeline import DataPipeline
from stockview.schemas import DeadStockItem, Product
from stockview.service import InventoryService

logger = logging.getLogger(__name__)


class DeadStockPipeline(DataPipeline):
    def __init__(
        self,
        service: InventoryService,
        window_days: int = settings.DEAD_STOCK_WINDOW_DAYS,
        test_mode: bool = False,
        run_at: datetime | None = None,
    ):
        super().__init__("dead_stock", service, test_mode=test_mode, run_at=run_at)
        self.window_days = window_days

    @property
    def report_name(self) -> str:
        return settings.DEAD_STOCK_REPORT_NAME

    def extract(self) -> list[Product]:
        logger.info(f"--- Scanning for products unsold in {self.window_days} days ---")
        return self.service.list_products()

    def transform(self, products: list[Product]) -> list[DeadStockItem]:
        report = dead_stock.dead_stock_report(products, self.run_at, self.window_days)
        self.metadata = {
            "windowDays": report.window_days,
            "count": report.count,
            "totalDeadStockValue": str(report.total_dead_stock_value),
        }
        logger.info(f"  > {report.count} dead-stock products found")
        return report.items
