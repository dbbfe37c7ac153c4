from . import settings
from .errors import ValidationError
from .schemas import Product, StockStatus


def classify(quantity: int, reorder_level: int) -> StockStatus:
    """
    Maps on-hand quantity and reorder threshold to a stock-health state.
    Rules are evaluated in order, first match wins:
    1. quantity == 0                       -> OUT_OF_STOCK
    2. quantity <= reorder_level * ratio   -> CRITICAL  (ratio = settings.CRITICAL_RATIO)
    3. quantity <= reorder_level           -> LOW
    4. otherwise                           -> IN_STOCK
    A reorder level of 0 leaves only OUT_OF_STOCK and IN_STOCK reachable.
    """
    if quantity < 0:
        raise ValidationError("quantity", "must be >= 0")
    if reorder_level < 0:
        raise ValidationError("reorder_level", "must be >= 0")

    if quantity == 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= reorder_level * settings.CRITICAL_RATIO:
        return StockStatus.CRITICAL
    if quantity <= reorder_level:
        return StockStatus.LOW
    return StockStatus.IN_STOCK


def classify_product(product: Product) -> StockStatus:
    return classify(product.quantity, product.reorder_level)


def is_low_stock(product: Product) -> bool:
    """LOW and CRITICAL both count as low stock; OUT_OF_STOCK does not."""
    return classify_product(product) in (StockStatus.LOW, StockStatus.CRITICAL)
