import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from . import data_handler, utils
from .service import InventoryService

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for report pipelines (Inventory, Dead Stock, Sales).
    Follows an Extract -> Transform -> Load (ETL) pattern over the service's stores.
    """

    def __init__(
        self,
        report_type: str,
        service: InventoryService,
        test_mode: bool = False,
        run_at: datetime | None = None,
    ):
        self.report_type = report_type
        self.service = service
        self.test_mode = test_mode
        # Reference time for every window in the report (dead stock, sales periods)
        self.run_at = run_at or utils.utc_now()
        # Summary values posted alongside the rows (counts, totals, period...)
        self.metadata: dict[str, Any] = {}

    def run(self) -> list[BaseModel]:
        """
        Orchestrates the pipeline execution. Returns the rows that were loaded.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()
        if not raw_data:
            logger.warning(f"⚠️ No data extracted for {self.report_type}.")
            self.load([])
            return []

        # --- 2. TRANSFORM ---
        validated_data = self.transform(raw_data)
        if validated_data is None:
            logger.error(f"❌ Transformation failed for {self.report_type}.")
            return []

        # --- 3. LOAD ---
        self.load(validated_data)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return validated_data

    @abstractmethod
    def extract(self) -> list[Any]:
        """
        Reads the raw records (products, sales) from the service's stores.
        """

    @abstractmethod
    def transform(self, raw_data: list[Any]) -> list[BaseModel] | None:
        """
        Derives the report rows and fills self.metadata.
        Returns None if the rows could not be built.
        """

    def load(self, validated_data: list[BaseModel]):
        """
        Saves data to disk and posts to webhook.
        """
        # 1. Print Summary
        if self.metadata:
            logger.info("\n--- Final Summary ---")
            for key, value in self.metadata.items():
                logger.info(f"{key}: {value}")

        # 2. Save Outputs (CSV/JSON)
        if validated_data:
            data_handler.save_outputs(validated_data, self.report_name)
        else:
            logger.warning("No data to save to disk.")

        # 3. Post to Webhook
        if not self.test_mode:
            data_handler.post_to_webhook(
                validated_data=validated_data,
                metadata={"generatedAt": self.run_at.isoformat(), **self.metadata},
                report_type=self.report_type,
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")

    @property
    def report_name(self) -> str:
        return f"{self.report_type}_report"
