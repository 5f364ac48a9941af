"""
In-memory product store.
"""

import threading
from collections.abc import Iterable
from typing import Any

from ..errors import ProductNotFoundError, ProductWriteError
from ..models import Product
from .base import PATCHABLE_FIELDS, ProductStore


class InMemoryProductStore(ProductStore):
    """
    Dictionary-backed product store.

    Products are immutable, so reads hand out the stored objects directly and a
    patch replaces the entry with an updated copy.
    """

    def __init__(self, products: Iterable[Product] = ()):
        """
        Initialize the store.

        Args:
            products: Initial products
        """
        self._data: dict[str, Product] = {}
        self._lock = threading.Lock()
        self.add_products(products)

    def add_products(self, products: Iterable[Product]) -> int:
        """Insert or replace products. Returns how many were stored."""
        count = 0
        with self._lock:
            for product in products:
                if not isinstance(product, Product):
                    product = Product(**product)
                self._data[product.id] = product
                count += 1
        return count

    def get_all(self) -> list[Product]:
        with self._lock:
            return list(self._data.values())

    def get_by_id(self, product_id: str) -> Product:
        with self._lock:
            product = self._data.get(str(product_id))
        if product is None:
            raise ProductNotFoundError(str(product_id))
        return product

    def patch_by_id(self, product_id: str, fields: dict[str, Any]) -> Product:
        product_id = str(product_id)
        unknown = set(fields) - PATCHABLE_FIELDS
        if unknown:
            raise ProductWriteError(product_id, f"Unknown fields: {', '.join(sorted(unknown))}")

        with self._lock:
            current = self._data.get(product_id)
            if current is None:
                raise ProductNotFoundError(product_id)
            try:
                updated = Product(**{**current.model_dump(), **fields})
            except ValueError as e:
                raise ProductWriteError(product_id, str(e)) from e
            self._data[product_id] = updated
        return updated

    def delete(self, product_id: str) -> bool:
        """Remove a product. Returns True if it existed."""
        with self._lock:
            return self._data.pop(str(product_id), None) is not None

    def get_info(self) -> dict[str, Any]:
        with self._lock:
            return {"type": "memory", "productCount": len(self._data)}

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
