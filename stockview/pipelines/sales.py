import logging
from datetime import datetime

from stockview import sales, settings
from stockview.pipeline import DataPipeline
from stockview.schemas import Sale, TopProduct
from stockview.service import InventoryService

logger = logging.getLogger(__name__)


class SalesPipeline(DataPipeline):
    """
    Exports the top products for the main period and posts the headline
    totals for every configured period (7/30/90 days by default).
    """

    def __init__(
        self,
        service: InventoryService,
        period_days: int = settings.DEFAULT_SALES_PERIOD_DAYS,
        test_mode: bool = False,
        run_at: datetime | None = None,
    ):
        super().__init__("sales", service, test_mode=test_mode, run_at=run_at)
        self.period_days = period_days

    @property
    def report_name(self) -> str:
        return settings.SALES_REPORT_NAME

    def extract(self) -> list[Sale]:
        logger.info("--- Reading Sale Log ---")
        sale_log = self.service.sales_log.list()
        logger.info(f"  > Found {len(sale_log)} sales")
        return sale_log

    def transform(self, sale_log: list[Sale]) -> list[TopProduct]:
        products = self.service.list_products()

        periods = sorted(set(settings.SALES_PERIOD_OPTIONS) | {self.period_days})
        for days in periods:
            summary = sales.summarize(sale_log, products, days, self.run_at)
            self.metadata[summary.period] = summary.model_dump(
                mode="json", by_alias=True, exclude={"top_products"}
            )
            logger.info(
                f"  > {summary.period}: {summary.total_sales} sales, "
                f"{summary.total_units} units, revenue {summary.total_revenue}"
            )

        main = sales.summarize(sale_log, products, self.period_days, self.run_at)
        return main.top_products
