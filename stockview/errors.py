"""
Typed error kinds raised by the inventory engine.

Every error carries enough context (field, id, quantities, upstream message)
for a caller to build a user-facing message without parsing strings.
"""

from pydantic import ValidationError as SchemaValidationError


class InventoryError(Exception):
    """Base class for all engine errors."""


class ValidationError(InventoryError):
    """A required field is missing or a value is out of range (incl. duplicate SKU)."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")

    @classmethod
    def from_schema_error(cls, error: SchemaValidationError) -> "ValidationError":
        """Converts a pydantic error, naming the first invalid field."""
        first = error.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "input"
        return cls(field, first.get("msg", "invalid value"))


class NotFound(InventoryError):
    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class InsufficientStock(InventoryError):
    def __init__(self, product_id: str, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}"
        )


class UpstreamUnavailable(InventoryError):
    """The narrative service was unreachable or answered with a non-success status."""

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.status_code = status_code
        self.message = message or "upstream_failure"
        super().__init__(self.message)


class NoInsightReturned(InventoryError):
    def __init__(self, message: str = "No insights returned from API"):
        super().__init__(message)


class NothingToAnalyze(InventoryError):
    def __init__(self, message: str = "No products available to analyze"):
        super().__init__(message)


class InsightCancelled(InventoryError):
    def __init__(self, message: str = "Insight request cancelled"):
        super().__init__(message)
