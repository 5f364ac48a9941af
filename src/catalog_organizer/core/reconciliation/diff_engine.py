"""
Diff Engine

Compares current and proposed state for each entity and produces PreviewItems.
Operates on snapshots only: inputs are never mutated and no storage is touched.
"""

from collections.abc import Iterable, Mapping
from typing import Union

from ..classification.classifier import ProductClassifier
from ..models import (
    DEFAULT_PRODUCT_TYPE,
    ClassificationState,
    PreviewItem,
    Product,
    QuantityState,
)
from .stock import clamp_quantity


def classification_changed(current: ClassificationState, proposed: ClassificationState) -> bool:
    """A type change, or any proposed tag the product doesn't already have."""
    if proposed.product_type != current.product_type:
        return True
    return not proposed.tags <= current.tags


def diff_classification(
    entity_id: str,
    current: ClassificationState,
    proposed: ClassificationState,
    label: str = "",
) -> PreviewItem[ClassificationState]:
    return PreviewItem[ClassificationState](
        entity_id=entity_id,
        label=label,
        current_value=current,
        proposed_value=proposed,
        has_changes=classification_changed(current, proposed),
    )


def diff_quantity(
    entity_id: str,
    current: Union[QuantityState, int],
    proposed: Union[QuantityState, int],
    label: str = "",
) -> PreviewItem[QuantityState]:
    if not isinstance(current, QuantityState):
        current = QuantityState(quantity=clamp_quantity(current))
    if not isinstance(proposed, QuantityState):
        proposed = QuantityState(quantity=clamp_quantity(proposed))
    return PreviewItem[QuantityState](
        entity_id=entity_id,
        label=label,
        current_value=current,
        proposed_value=proposed,
        has_changes=proposed.quantity != current.quantity,
    )


def diff(entity_id: str, current, proposed, label: str = "") -> PreviewItem:
    """Diff two states of the same kind."""
    if isinstance(current, ClassificationState) and isinstance(proposed, ClassificationState):
        return diff_classification(entity_id, current, proposed, label)
    if isinstance(current, (QuantityState, int)) and isinstance(proposed, (QuantityState, int)):
        return diff_quantity(entity_id, current, proposed, label)
    raise TypeError(
        f"Cannot diff {type(current).__name__} against {type(proposed).__name__}"
    )


def propose_classification(
    product: Product,
    classifier: ProductClassifier,
    keep_unmatched_product_type: bool = False,
) -> ClassificationState:
    """Run the classifier for one product and return its proposed state.

    An unmatched title is proposed OTHER even when the product has no type yet,
    so untyped products show up as changes. With keep_unmatched_product_type a
    product that already has a type keeps it instead.
    """
    result = classifier.classify(product.title, product.tags)
    product_type = result.product_type
    if (
        keep_unmatched_product_type
        and product_type == DEFAULT_PRODUCT_TYPE
        and product.product_type
    ):
        product_type = product.product_type
    return ClassificationState(product_type=product_type, tags=result.tags)


def build_classification_preview(
    products: Iterable[Product],
    classifier: ProductClassifier,
    keep_unmatched_product_type: bool = False,
) -> list[PreviewItem[ClassificationState]]:
    """One PreviewItem per product, no-change items included."""
    return [
        diff_classification(
            product.id,
            ClassificationState.from_product(product),
            propose_classification(product, classifier, keep_unmatched_product_type),
            label=product.title,
        )
        for product in products
    ]


def build_stock_preview(
    products: Iterable[Product],
    proposed_quantities: Mapping[str, int],
) -> list[PreviewItem[QuantityState]]:
    """One PreviewItem per product; products without a proposal keep their quantity."""
    return [
        diff_quantity(
            product.id,
            product.inventory_quantity,
            proposed_quantities.get(product.id, product.inventory_quantity),
            label=product.title,
        )
        for product in products
    ]


def changed_items(items: Iterable[PreviewItem]) -> list[PreviewItem]:
    return [item for item in items if item.has_changes]
