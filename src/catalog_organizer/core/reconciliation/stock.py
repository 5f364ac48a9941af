"""
Stock reconciliation helpers.

Quantity edits clamp at the point of computation so that a preview always
shows the true post-clamp delta. The working set is a session-scoped map of
proposed quantities; each edit returns a new working set, and cancelling
simply drops it without touching the product store.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from ..models import Product


def clamp_quantity(value: int) -> int:
    """Clamp a quantity to the non-negative range."""
    return max(0, int(value))


def adjust_quantity(current: int, delta: int) -> int:
    """Increment (positive delta) or decrement (negative delta) with a floor of zero."""
    return clamp_quantity(int(current) + int(delta))


@dataclass(frozen=True)
class StockWorkingSet:
    """Proposed quantities for one stock-editing session.

    ``baseline`` holds the quantities read from the store when the session
    started; ``working`` holds only the entities the operator has edited.
    """

    baseline: Mapping[str, int] = field(default_factory=dict)
    working: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "baseline", MappingProxyType(dict(self.baseline)))
        object.__setattr__(self, "working", MappingProxyType(dict(self.working)))

    @classmethod
    def from_products(cls, products: Iterable[Product]) -> "StockWorkingSet":
        return cls(baseline={product.id: product.inventory_quantity for product in products})

    def quantity(self, entity_id: str) -> int:
        """Current working quantity: the edited value, else the baseline."""
        if entity_id in self.working:
            return self.working[entity_id]
        return self.baseline.get(entity_id, 0)

    def _with(self, entity_id: str, value: int) -> "StockWorkingSet":
        working = dict(self.working)
        working[entity_id] = value
        return replace(self, working=working)

    def increment(self, entity_id: str, amount: int = 1) -> "StockWorkingSet":
        return self._with(entity_id, adjust_quantity(self.quantity(entity_id), amount))

    def decrement(self, entity_id: str, amount: int = 1) -> "StockWorkingSet":
        return self._with(entity_id, adjust_quantity(self.quantity(entity_id), -amount))

    def set_quantity(self, entity_id: str, value: int) -> "StockWorkingSet":
        return self._with(entity_id, clamp_quantity(value))

    def revert(self, entity_id: str) -> "StockWorkingSet":
        """Drop the edit for one entity."""
        working = {key: value for key, value in self.working.items() if key != entity_id}
        return replace(self, working=working)

    def cancel(self) -> "StockWorkingSet":
        """Discard every edit. Nothing is written anywhere."""
        return replace(self, working={})

    def proposed_quantities(self) -> dict[str, int]:
        """Edited entities mapped to their proposed quantity."""
        return dict(self.working)

    @property
    def edited_count(self) -> int:
        return sum(
            1 for entity_id, value in self.working.items() if value != self.baseline.get(entity_id, 0)
        )
