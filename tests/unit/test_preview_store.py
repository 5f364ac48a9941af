"""
Unit tests for staged preview batches.
"""

import pytest

from catalog_organizer.core.errors import PreviewBatchNotFoundError
from catalog_organizer.core.reconciliation.diff_engine import diff_quantity
from catalog_organizer.core.reconciliation.preview_store import (
    PreviewBatch,
    PreviewKind,
    PreviewStore,
)


@pytest.fixture
def batch():
    items = (diff_quantity("1", 1, 2), diff_quantity("2", 3, 3), diff_quantity("3", 0, 5))
    return PreviewBatch(kind=PreviewKind.STOCK, items=items)


class TestPreviewBatch:
    def test_change_count(self, batch):
        assert len(batch) == 3
        assert batch.change_count == 2
        assert [item.entity_id for item in batch.changed_items] == ["1", "3"]

    def test_select_subset(self, batch):
        subset = batch.select(["3"])

        assert [item.entity_id for item in subset.items] == ["3"]
        assert subset.batch_id == batch.batch_id
        assert len(batch) == 3

    def test_batch_ids_unique(self):
        assert PreviewBatch(kind=PreviewKind.STOCK).batch_id != PreviewBatch(kind=PreviewKind.STOCK).batch_id


class TestPreviewStore:
    def test_put_and_get(self, batch):
        store = PreviewStore()

        batch_id = store.put(batch)

        assert batch_id in store
        assert store.get(batch_id) is batch
        assert len(store) == 1

    def test_take_removes_batch(self, batch):
        store = PreviewStore()
        store.put(batch)

        assert store.take(batch.batch_id) is batch
        with pytest.raises(PreviewBatchNotFoundError):
            store.take(batch.batch_id)

    def test_discard(self, batch):
        store = PreviewStore()
        store.put(batch)

        assert store.discard(batch.batch_id) is True
        assert store.discard(batch.batch_id) is False
        with pytest.raises(PreviewBatchNotFoundError):
            store.get(batch.batch_id)

    def test_clear(self, batch):
        store = PreviewStore()
        store.put(batch)
        store.clear()

        assert len(store) == 0
