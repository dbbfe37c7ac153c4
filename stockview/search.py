from .classifier import classify_product
from .schemas import Product, ProductQuery, SortBy, StatusFilter, StockStatus

STATUS_MATCHES = {
    StatusFilter.IN_STOCK: {StockStatus.IN_STOCK},
    StatusFilter.LOW_STOCK: {StockStatus.LOW, StockStatus.CRITICAL},
    StatusFilter.OUT_OF_STOCK: {StockStatus.OUT_OF_STOCK},
}


def matches_text(product: Product, text: str) -> bool:
    """Case-insensitive substring match against name or SKU. Empty text matches all."""
    needle = text.strip().lower()
    if not needle:
        return True
    return needle in product.name.lower() or needle in product.sku.lower()


def matches_status(product: Product, status: StatusFilter) -> bool:
    if status == StatusFilter.ALL:
        return True
    return classify_product(product) in STATUS_MATCHES[status]


def sort_products(products: list[Product], sort_by: SortBy) -> list[Product]:
    # sorted() is stable, so equal keys keep their input order.
    if sort_by == SortBy.NAME:
        return sorted(products, key=lambda p: p.name.lower())
    if sort_by == SortBy.QUANTITY_ASC:
        return sorted(products, key=lambda p: p.quantity)
    if sort_by == SortBy.QUANTITY_DESC:
        return sorted(products, key=lambda p: p.quantity, reverse=True)
    if sort_by == SortBy.VALUE_DESC:
        return sorted(products, key=lambda p: p.stock_value, reverse=True)
    raise ValueError(f"Unsupported sort order: {sort_by}")


def query(products: list[Product], request: ProductQuery | None = None) -> list[Product]:
    """Filter by text and status, then sort. Never mutates the input list."""
    request = request or ProductQuery()
    selected = [
        p
        for p in products
        if matches_text(p, request.text) and matches_status(p, request.status)
    ]
    return sort_products(selected, request.sort_by)
