import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value not in (None, "") else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value in (None, ""):
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")

# --- Output Configuration ---
SAVE_JSON_OUTPUT = _env_bool("SAVE_JSON_OUTPUT", True)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Webhook (alert / report notifications) ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
WEBHOOK_TIMEOUT = _env_int("WEBHOOK_TIMEOUT", 15)

# --- Narrative insights service ---
INSIGHTS_URL = os.getenv("INSIGHTS_URL", "http://localhost:5000/api/ai/insights")
INSIGHTS_API_KEY = os.getenv("INSIGHTS_API_KEY")
INSIGHTS_TIMEOUT = _env_int("INSIGHTS_TIMEOUT", 30)
INSIGHTS_MAX_PRODUCTS = _env_int("INSIGHTS_MAX_PRODUCTS", 200)
INSIGHT_WORKERS = _env_int("INSIGHT_WORKERS", 2)

# --- Shared Business Logic ---
# Products created without an explicit reorder level get this threshold.
DEFAULT_REORDER_LEVEL = _env_int("DEFAULT_REORDER_LEVEL", 10)

# Fraction of the reorder level at or below which stock is "critical".
CRITICAL_RATIO = _env_float("CRITICAL_RATIO", 0.5)

# A product with no sale inside this trailing window is dead stock.
DEAD_STOCK_WINDOW_DAYS = _env_int("DEAD_STOCK_WINDOW_DAYS", 30)

# Sales summary periods offered to the dashboard, in days.
SALES_PERIOD_OPTIONS = [7, 30, 90]
DEFAULT_SALES_PERIOD_DAYS = _env_int("DEFAULT_SALES_PERIOD_DAYS", 30)

# How many rows the "top products" table keeps.
TOP_PRODUCTS_LIMIT = _env_int("TOP_PRODUCTS_LIMIT", 5)

# --- Report Filenames ---
INVENTORY_REPORT_NAME = os.getenv("INVENTORY_REPORT_NAME", "inventory_report")
DEAD_STOCK_REPORT_NAME = os.getenv("DEAD_STOCK_REPORT_NAME", "dead_stock_report")
SALES_REPORT_NAME = os.getenv("SALES_REPORT_NAME", "sales_report")
