import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from stockview import settings
from stockview.schemas import Product
from stockview.service import InventoryService


NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_product():
    """Builds a Product directly, bypassing the store."""

    def _make(
        name="Portland Cement 50kg",
        sku=None,
        quantity=20,
        price="450",
        reorder_level=10,
        days_since_sale=1,
    ):
        return Product(
            id=uuid.uuid4().hex,
            name=name,
            sku=sku or f"SKU-{uuid.uuid4().hex[:6]}",
            quantity=quantity,
            price=Decimal(price),
            reorder_level=reorder_level,
            last_sold_at=None if days_since_sale is None else NOW - timedelta(days=days_since_sale),
        )

    return _make


@pytest.fixture
def service():
    svc = InventoryService()
    yield svc
    svc.close()


@pytest.fixture(autouse=True)
def isolated_output(tmp_path, monkeypatch):
    """Keeps report files and webhook posts out of the real environment."""
    monkeypatch.setattr(settings, "OUTPUT_DIR", tmp_path / "output")
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    return tmp_path / "output"
