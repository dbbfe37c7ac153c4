from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from . import settings


class StockStatus(str, Enum):
    OUT_OF_STOCK = "out_of_stock"
    CRITICAL = "critical"
    LOW = "low"
    IN_STOCK = "in_stock"


class AlertType(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"


class AlertCategory(str, Enum):
    OUT_OF_STOCK = "out_of_stock"
    LOW_STOCK = "low_stock"
    DEAD_STOCK = "dead_stock"


class StatusFilter(str, Enum):
    ALL = "all"
    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"


class SortBy(str, Enum):
    NAME = "name"
    QUANTITY_ASC = "quantity-asc"
    QUANTITY_DESC = "quantity-desc"
    VALUE_DESC = "value-desc"


class CamelModel(BaseModel):
    """
    Shared config: python attributes are snake_case, exported JSON/CSV headers
    use the camelCase names the dashboard expects (e.g. reorderLevel, lastSoldAt).
    """

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        loc_by_alias=False,
        str_strip_whitespace=True,
    )


class NewProduct(CamelModel):
    """Fields accepted when a product is created."""

    name: str = Field(..., min_length=1)
    sku: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0)
    price: Decimal = Field(..., ge=0)
    reorder_level: int = Field(
        default_factory=lambda: settings.DEFAULT_REORDER_LEVEL, ge=0
    )

    @field_validator("sku")
    @classmethod
    def normalize_sku(cls, value: str) -> str:
        return value.upper()


class Product(NewProduct):
    id: str
    last_sold_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def stock_value(self) -> Decimal:
        return self.quantity * self.price


class Sale(CamelModel):
    id: str
    product_id: str
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0)
    timestamp: datetime

    @property
    def revenue(self) -> Decimal:
        return self.quantity * self.unit_price


class StockAdjustment(CamelModel):
    product_id: str
    amount: int = Field(..., ge=1)


class Alert(CamelModel):
    id: str
    type: AlertType
    category: AlertCategory
    title: str
    message: str
    timestamp: datetime
    product_id: str
    acknowledged: bool = False


class TopProduct(CamelModel):
    product_id: str
    name: str
    sku: str
    quantity: int
    revenue: Decimal


class SalesSummary(CamelModel):
    total_sales: int = 0
    total_units: int = 0
    total_revenue: Decimal = Decimal("0")
    average_order_value: Decimal = Decimal("0")
    top_products: list[TopProduct] = Field(default_factory=list)
    period: str
    period_days: int


class DeadStockItem(CamelModel):
    product_id: str
    name: str
    sku: str
    quantity: int
    price: Decimal
    last_sold_at: datetime | None = None
    days_since_last_sale: int | Literal["never"]
    stock_value: Decimal


class DeadStockReport(CamelModel):
    window_days: int
    count: int
    total_dead_stock_value: Decimal
    items: list[DeadStockItem] = Field(default_factory=list)


class InventoryStats(CamelModel):
    total_products: int
    low_stock_count: int
    out_of_stock_count: int = 0
    dead_stock_count: int
    total_value: Decimal


class ProductQuery(CamelModel):
    """Immutable search request: built per call, never shared between calls."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    status: StatusFilter = StatusFilter.ALL
    sort_by: SortBy = SortBy.NAME


class InsightProduct(CamelModel):
    name: str
    sku: str
    quantity: int
    price: Decimal
    reorder_level: int
    status: StockStatus
    days_since_last_sale: int | Literal["never"]


class InsightRequest(CamelModel):
    products: list[InsightProduct]
    stats: InventoryStats
    truncated: bool = False


class InventorySnapshotRow(CamelModel):
    """One row of the exported inventory report."""

    id: str
    name: str
    sku: str
    quantity: int
    price: Decimal
    reorder_level: int
    status: StockStatus
    stock_value: Decimal
    last_sold_at: datetime | None = None
