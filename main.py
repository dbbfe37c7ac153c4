import argparse
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path

import pandas as pd

from stockview import data_handler, settings, utils
from stockview.errors import InventoryError
from stockview.insights import describe_insight_error
from stockview.logger import setup_logger
from stockview.pipelines.dead_stock import DeadStockPipeline
from stockview.pipelines.inventory import InventoryPipeline
from stockview.pipelines.sales import SalesPipeline
from stockview.service import InventoryService

logger = setup_logger()


def seed_products(service: InventoryService, file_path: Path):
    for new_product in data_handler.import_products_from_csv(file_path):
        try:
            service.add_product(**new_product.model_dump())
        except InventoryError as e:
            logger.warning(f"  > ⚠️  Skipping {new_product.sku}: {e}")


def seed_sales(service: InventoryService, file_path: Path):
    """Replays a sale log CSV (sku, quantity, optional unitPrice/timestamp) through record_sale."""
    df = utils.load_csv(file_path)
    if df is None:
        return

    for row in df.to_dict("records"):
        product = service.products.find_by_sku(str(row["sku"]))
        if product is None:
            logger.warning(f"  > ⚠️  Unknown SKU in sale log: {row['sku']}")
            continue

        unit_price = row.get("unitPrice")
        timestamp = row.get("timestamp")
        try:
            service.record_sale(
                product.id,
                int(row["quantity"]),
                unit_price=None if pd.isna(unit_price) else unit_price,
                timestamp=None if pd.isna(timestamp) else pd.Timestamp(timestamp).to_pydatetime(),
            )
        except InventoryError as e:
            logger.warning(f"  > ⚠️  Sale for {product.sku} rejected: {e}")


def run_process(
    products_file: Path | None,
    sales_file: Path | None,
    test_mode: bool,
    with_insights: bool,
):
    """Main orchestration function: seed the stores, then run every report pipeline."""
    logger.info("--- Starting Inventory Report Process ---")
    service = InventoryService()

    if products_file:
        seed_products(service, products_file)
    if sales_file:
        seed_sales(service, sales_file)

    InventoryPipeline(service, test_mode=test_mode).run()
    DeadStockPipeline(service, test_mode=test_mode).run()
    SalesPipeline(service, test_mode=test_mode).run()

    alerts = service.alerts()
    logger.info(f"\n🔔 {len(alerts)} active alerts")
    for alert in alerts:
        logger.info(f"  [{alert.type.value.upper()}] {alert.title}: {alert.message}")

    if with_insights:
        try:
            task = service.request_insights()
            logger.info("\n--- AI Insights ---")
            logger.info(task.result(timeout=settings.INSIGHTS_TIMEOUT + 5))
        except FutureTimeoutError:
            task.cancel()
            logger.error("Insight request timed out.")
        except InventoryError as e:
            logger.error(describe_insight_error(e))
        finally:
            service.close()

    logger.info("\n--- Process Finished Successfully ---")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the inventory reports.")
    parser.add_argument(
        "--products",
        type=Path,
        default=settings.INPUT_DIR / "products.csv",
        help="Product seed CSV (name, sku, quantity, price, reorderLevel).",
    )
    parser.add_argument("--sales", type=Path, help="Sale log CSV to replay.")
    parser.add_argument("--test", action="store_true", help="Skip webhook posts.")
    parser.add_argument("--insights", action="store_true", help="Request AI insights.")
    args = parser.parse_args()

    run_process(args.products, args.sales, args.test, args.insights)
