"""
Catalog Organizer

Ties the classifier, diff engine, preview store and batch apply engine together
into the preview -> review -> apply workflow used by the organize script.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Optional

from .classification.classifier import ProductClassifier
from .classification.rules import load_rule_table
from .models import ApplyReport, ClassificationResult, PreviewItem, Product
from .reconciliation.batch_apply import BatchApplyEngine
from .reconciliation.diff_engine import build_classification_preview, build_stock_preview
from .reconciliation.preview_store import PreviewBatch, PreviewKind, PreviewStore
from .reconciliation.stock import StockWorkingSet
from .store.base import ProductStore

logger = logging.getLogger(__name__)


class CatalogOrganizer:
    """Preview and apply classification and stock changes against a product store."""

    def __init__(
        self,
        store: ProductStore,
        classifier: Optional[ProductClassifier] = None,
        apply_engine: Optional[BatchApplyEngine] = None,
        preview_store: Optional[PreviewStore] = None,
        keep_unmatched_product_type: bool = False,
    ):
        """
        Initialize the organizer.

        Args:
            store: Product store to read snapshots from and patch
            classifier: Classifier to use (bundled rules by default)
            apply_engine: Batch apply engine (default settings when omitted)
            preview_store: Holding area for staged previews
            keep_unmatched_product_type: Keep the current type when no rule matches
        """
        self.store = store
        self.classifier = classifier or ProductClassifier()
        self.apply_engine = apply_engine or BatchApplyEngine(store)
        self.preview_store = preview_store if preview_store is not None else PreviewStore()
        self.keep_unmatched_product_type = keep_unmatched_product_type

    @classmethod
    def from_settings(cls, store: ProductStore, settings) -> "CatalogOrganizer":
        """Build an organizer configured from a SettingsManager."""
        classifier = ProductClassifier(load_rule_table(settings.rules_path))
        return cls(
            store,
            classifier=classifier,
            apply_engine=BatchApplyEngine(store, **settings.apply_settings),
            keep_unmatched_product_type=bool(settings.get("keep_unmatched_product_type")),
        )

    def _snapshot(self, entity_ids: Optional[Iterable[str]] = None) -> list[Product]:
        if entity_ids is None:
            return self.store.get_all()
        return self.store.get_many(entity_ids)

    def classify(self, title: str, existing_tags: Iterable[str] = ()) -> ClassificationResult:
        return self.classifier.classify(title, existing_tags)

    def generate_preview(self, entity_ids: Optional[Iterable[str]] = None) -> list[PreviewItem]:
        """
        Classification preview for the catalog (or the given products).

        Nothing is written. Every product gets an item, changed or not.
        """
        products = self._snapshot(entity_ids)
        items = build_classification_preview(
            products, self.classifier, self.keep_unmatched_product_type
        )
        logger.info(
            f"Classification preview: {sum(1 for item in items if item.has_changes)} "
            f"of {len(items)} products would change"
        )
        return items

    def start_stock_session(self, entity_ids: Optional[Iterable[str]] = None) -> StockWorkingSet:
        """A fresh working set seeded with the current quantities."""
        return StockWorkingSet.from_products(self._snapshot(entity_ids))

    def generate_stock_preview(
        self,
        proposed_quantities: Mapping[str, int] | StockWorkingSet,
        entity_ids: Optional[Iterable[str]] = None,
    ) -> list[PreviewItem]:
        """Stock preview for proposed quantities, diffed against the store's current values."""
        if isinstance(proposed_quantities, StockWorkingSet):
            proposed_quantities = proposed_quantities.proposed_quantities()
        if entity_ids is None:
            entity_ids = list(proposed_quantities)
        products = self._snapshot(entity_ids)
        return build_stock_preview(products, proposed_quantities)

    def apply_changes(self, items: Iterable[PreviewItem]) -> ApplyReport:
        """Apply the approved preview items. Never raises for per-item failures."""
        return self.apply_engine.apply(items)

    def stage_preview(self, entity_ids: Optional[Iterable[str]] = None) -> PreviewBatch:
        batch = PreviewBatch(kind=PreviewKind.CLASSIFICATION, items=tuple(self.generate_preview(entity_ids)))
        self.preview_store.put(batch)
        return batch

    def stage_stock_preview(
        self,
        proposed_quantities: Mapping[str, int] | StockWorkingSet,
        entity_ids: Optional[Iterable[str]] = None,
    ) -> PreviewBatch:
        items = self.generate_stock_preview(proposed_quantities, entity_ids)
        batch = PreviewBatch(kind=PreviewKind.STOCK, items=tuple(items))
        self.preview_store.put(batch)
        return batch

    def apply_batch(
        self, batch_id: str, entity_ids: Optional[Iterable[str]] = None
    ) -> ApplyReport:
        """
        Apply a staged batch, or the approved subset of it.

        The batch is removed from the preview store whether or not every write
        succeeds.

        Raises:
            PreviewBatchNotFoundError: If the batch is unknown or already applied/cancelled
        """
        batch = self.preview_store.take(batch_id)
        if entity_ids is not None:
            batch = batch.select(entity_ids)
        logger.info(f"Applying {batch.kind.value} preview {batch_id} ({batch.change_count} changes)")
        return self.apply_changes(batch.items)

    def cancel_batch(self, batch_id: str) -> bool:
        """Discard a staged batch without writing anything."""
        return self.preview_store.discard(batch_id)

    def retry_failed(self, items: Iterable[PreviewItem], report: ApplyReport) -> ApplyReport:
        """Re-apply only the retryable failures of a previous report.

        Products that were not found are skipped; they stay failed until the
        operator regenerates the preview.
        """
        failed = set(report.retryable_ids)
        retry_items = [item for item in items if item.entity_id in failed]
        if not retry_items:
            return ApplyReport()
        logger.info(f"Retrying {len(retry_items)} failed updates")
        return self.apply_changes(retry_items)
