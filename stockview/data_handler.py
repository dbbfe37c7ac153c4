import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd
import requests
from pydantic import BaseModel, ValidationError

from . import settings, utils
from .schemas import NewProduct

logger = logging.getLogger(__name__)


def save_outputs(validated_data: list[BaseModel], base_name: str) -> Path | None:
    """Saves report rows to CSV and conditionally to JSON, with dated filenames."""
    if not validated_data:
        logger.warning(f"No rows to save for {base_name}.")
        return None

    settings.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    csv_path = settings.OUTPUT_DIR / f"{base_name}_{date_suffix}.csv"
    json_path = settings.OUTPUT_DIR / f"{base_name}_{date_suffix}.json"

    # Headers use the camelCase aliases (e.g. reorderLevel, stockValue).
    df = pd.DataFrame(
        [item.model_dump(mode="json", by_alias=True) for item in validated_data]
    )
    df.to_csv(csv_path, index=False)
    logger.info(f"✅ Report saved to: {csv_path}")

    if settings.SAVE_JSON_OUTPUT:
        with open(json_path, "w", encoding="utf-8") as f:
            json_data = [item.model_dump(mode="json", by_alias=True) for item in validated_data]
            json.dump(json_data, f, indent=2)
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.info("INFO: Skipping JSON file save as per configuration.")

    return csv_path


def post_to_webhook(
    validated_data: list[BaseModel], metadata: dict[str, Any], report_type: str
) -> bool:
    """
    Posts report rows plus a metadata block to the configured webhook.
    Returns True on success. Delivery failures are logged, not raised:
    the report is already saved to disk at this point.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return False

    logger.info(f"🚀 Posting {report_type} data to webhook: {settings.WEBHOOK_URL}")

    payload = {
        "reportType": report_type,
        "reportData": [
            item.model_dump(mode="json", by_alias=True) for item in validated_data
        ],
        "metadata": metadata,
    }

    try:
        response = requests.post(
            settings.WEBHOOK_URL, json=payload, timeout=settings.WEBHOOK_TIMEOUT
        )
        response.raise_for_status()
        logger.info("✅ Data successfully posted to webhook.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False


# Accepted CSV headers for a product import, mapped to NewProduct fields.
PRODUCT_IMPORT_COLUMNS = {
    "name": "name",
    "product name": "name",
    "sku": "sku",
    "quantity": "quantity",
    "qty": "quantity",
    "price": "price",
    "reorder level": "reorder_level",
    "reorderlevel": "reorder_level",
    "reorder_level": "reorder_level",
}


def import_products_from_csv(file_path: Path) -> list[NewProduct]:
    """
    Reads a product seed file into validated NewProduct records.
    Rows that fail validation are reported and skipped.
    """
    df = utils.load_csv(file_path)
    if df is None or df.empty:
        logger.warning(f"⚠️ No products found in {file_path}.")
        return []

    df = df.rename(columns=lambda c: PRODUCT_IMPORT_COLUMNS.get(str(c).strip().lower(), c))
    known = [c for c in ("name", "sku", "quantity", "price", "reorder_level") if c in df.columns]
    df = df[known]

    records = []
    for index, row in enumerate(df.to_dict("records"), start=1):
        fields = {k: v for k, v in row.items() if not pd.isna(v)}
        # numeric-looking SKUs (e.g. 1001) come back from pandas as numbers
        for text_field in ("name", "sku"):
            if text_field in fields:
                fields[text_field] = str(fields[text_field])
        try:
            records.append(NewProduct(**fields))
        except ValidationError as e:
            logger.error(f"❌ Row {index} of {file_path.name} is invalid, skipping.")
            logger.error(e)

    logger.info(f"✅ Parsed {len(records)} products from {file_path.name}.")
    return records
