import logging
from datetime import datetime

from pydantic import ValidationError

from stockview import reports, settings
from stockview.pipeline import DataPipeline
from stockview.schemas import InventorySnapshotRow, Product, StockStatus
from stockview.service import InventoryService

logger = logging.getLogger(__name__)


class InventoryPipeline(DataPipeline):
    def __init__(
        self,
        service: InventoryService,
        test_mode: bool = False,
        run_at: datetime | None = None,
    ):
        super().__init__("inventory", service, test_mode=test_mode, run_at=run_at)

    @property
    def report_name(self) -> str:
        return settings.INVENTORY_REPORT_NAME

    def extract(self) -> list[Product]:
        logger.info("--- Reading Products ---")
        products = self.service.list_products()
        logger.info(f"  > Found {len(products)} products")
        return products

    def transform(self, products: list[Product]) -> list[InventorySnapshotRow] | None:
        logger.info("--- Classifying Stock Levels ---")
        try:
            rows = reports.inventory_snapshot(products)
        except ValidationError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None

        stats = reports.inventory_stats(products, self.run_at)
        self.metadata = stats.model_dump(mode="json", by_alias=True)

        low = [r for r in rows if r.status in (StockStatus.LOW, StockStatus.CRITICAL)]
        if low:
            logger.warning(f"  > ⚠️  Low stock ({len(low)}): {', '.join(r.sku for r in low)}")
        return rows
