"""
Storage collaborators for products, sales and alert acknowledgments.

The engine only depends on the abstract interfaces; the in-memory versions
are thread-safe and are what the service, the report pipelines and the test
suite run against.
"""

from __future__ import annotations

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime

from . import utils
from .errors import InsufficientStock, NotFound, ValidationError
from .schemas import NewProduct, Product, Sale

logger = logging.getLogger(__name__)


class ProductStore(ABC):
    @abstractmethod
    def add(self, fields: NewProduct) -> Product:
        """Creates a product. Raises ValidationError on a duplicate SKU."""

    @abstractmethod
    def get(self, product_id: str) -> Product:
        """Raises NotFound for an unknown id."""

    @abstractmethod
    def find_by_sku(self, sku: str) -> Product | None:
        pass

    @abstractmethod
    def decrement_quantity(self, product_id: str, amount: int) -> Product:
        """Atomic. Raises InsufficientStock (and changes nothing) if the result would be < 0."""

    @abstractmethod
    def increment_quantity(self, product_id: str, amount: int) -> Product:
        pass

    @abstractmethod
    def set_last_sold(self, product_id: str, timestamp: datetime) -> Product:
        pass

    @abstractmethod
    def list(self) -> list[Product]:
        """All products in creation order."""


class SaleStore(ABC):
    @abstractmethod
    def append(self, sale: Sale) -> Sale:
        pass

    @abstractmethod
    def remove(self, sale_id: str) -> None:
        """Drops a sale. Only used to roll back a failed recording."""

    @abstractmethod
    def list_since(self, timestamp: datetime) -> list[Sale]:
        pass

    @abstractmethod
    def list(self) -> list[Sale]:
        pass


class AcknowledgmentStore(ABC):
    @abstractmethod
    def acknowledge(self, alert_id: str) -> None:
        pass

    @abstractmethod
    def is_acknowledged(self, alert_id: str) -> bool:
        pass

    @abstractmethod
    def reset(self) -> None:
        pass


class InMemoryProductStore(ProductStore):
    def __init__(self):
        self._products: dict[str, Product] = {}
        self._lock = threading.Lock()

    def add(self, fields: NewProduct) -> Product:
        with self._lock:
            if self._find_by_sku(fields.sku) is not None:
                raise ValidationError("sku", f"SKU '{fields.sku}' already exists")
            product = Product(
                id=uuid.uuid4().hex,
                created_at=utils.utc_now(),
                **fields.model_dump(),
            )
            self._products[product.id] = product
            logger.debug(f"Added product {product.sku} ({product.id})")
            return product.model_copy()

    def get(self, product_id: str) -> Product:
        with self._lock:
            return self._get(product_id).model_copy()

    def find_by_sku(self, sku: str) -> Product | None:
        with self._lock:
            product = self._find_by_sku(sku.strip().upper())
            return product.model_copy() if product else None

    def decrement_quantity(self, product_id: str, amount: int) -> Product:
        with self._lock:
            product = self._get(product_id)
            if amount > product.quantity:
                raise InsufficientStock(product_id, amount, product.quantity)
            return self._replace(product, quantity=product.quantity - amount)

    def increment_quantity(self, product_id: str, amount: int) -> Product:
        with self._lock:
            product = self._get(product_id)
            return self._replace(product, quantity=product.quantity + amount)

    def set_last_sold(self, product_id: str, timestamp: datetime) -> Product:
        with self._lock:
            product = self._get(product_id)
            return self._replace(product, last_sold_at=timestamp)

    def list(self) -> list[Product]:
        with self._lock:
            return [p.model_copy() for p in self._products.values()]

    # --- helpers (caller holds the lock) ---
    def _get(self, product_id: str) -> Product:
        try:
            return self._products[product_id]
        except KeyError:
            raise NotFound("product", product_id) from None

    def _find_by_sku(self, sku: str) -> Product | None:
        for product in self._products.values():
            if product.sku == sku:
                return product
        return None

    def _replace(self, product: Product, **changes) -> Product:
        updated = product.model_copy(update=changes)
        self._products[product.id] = updated
        return updated.model_copy()


class InMemorySaleStore(SaleStore):
    def __init__(self):
        self._sales: list[Sale] = []
        self._lock = threading.Lock()

    def append(self, sale: Sale) -> Sale:
        with self._lock:
            self._sales.append(sale)
            return sale

    def remove(self, sale_id: str) -> None:
        with self._lock:
            self._sales = [s for s in self._sales if s.id != sale_id]

    def list_since(self, timestamp: datetime) -> list[Sale]:
        cutoff = utils.ensure_aware(timestamp)
        with self._lock:
            return [s for s in self._sales if utils.ensure_aware(s.timestamp) >= cutoff]

    def list(self) -> list[Sale]:
        with self._lock:
            return list(self._sales)


class InMemoryAcknowledgmentStore(AcknowledgmentStore):
    def __init__(self):
        self._acknowledged: set[str] = set()
        self._lock = threading.Lock()

    def acknowledge(self, alert_id: str) -> None:
        with self._lock:
            self._acknowledged.add(alert_id)

    def is_acknowledged(self, alert_id: str) -> bool:
        with self._lock:
            return alert_id in self._acknowledged

    def reset(self) -> None:
        with self._lock:
            self._acknowledged.clear()
