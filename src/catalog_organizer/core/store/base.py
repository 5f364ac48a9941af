"""
Product store contract.

The organizer reads snapshots through get_all/get_by_id and writes through
patch_by_id only. Implementations raise ProductNotFoundError for unknown IDs
and ProductWriteError when a patch is rejected.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..models import Product

PATCHABLE_FIELDS = frozenset(
    {"title", "product_type", "tags", "inventory_quantity", "available_for_sale", "status"}
)


class ProductStore(ABC):
    """Persistent product storage keyed by product ID."""

    @abstractmethod
    def get_all(self) -> list[Product]:
        """Return every product."""

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product:
        """Return one product or raise ProductNotFoundError."""

    @abstractmethod
    def patch_by_id(self, product_id: str, fields: dict[str, Any]) -> Product:
        """Update the given fields of one product and return the updated product."""

    def get_many(self, product_ids) -> list[Product]:
        """Products for the given IDs, in the given order; unknown IDs are skipped."""
        wanted = list(dict.fromkeys(str(product_id) for product_id in product_ids))
        by_id = {product.id: product for product in self.get_all()}
        return [by_id[product_id] for product_id in wanted if product_id in by_id]
