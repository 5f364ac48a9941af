"""
In-memory holding area for preview batches awaiting operator review.

Batches are never persisted. Taking a batch for apply or discarding it on
cancel removes it, so each batch is acted on at most once.
"""

import logging
import threading
import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..errors import PreviewBatchNotFoundError
from ..models import PreviewItem

logger = logging.getLogger(__name__)


class PreviewKind(Enum):
    """Which reconciliation produced a batch."""

    CLASSIFICATION = "classification"
    STOCK = "stock"


class PreviewBatch(BaseModel):
    """An immutable batch of PreviewItems."""

    model_config = ConfigDict(frozen=True)

    batch_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    kind: PreviewKind
    items: tuple[PreviewItem, ...] = ()
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def changed_items(self) -> list[PreviewItem]:
        return [item for item in self.items if item.has_changes]

    @property
    def change_count(self) -> int:
        return len(self.changed_items)

    def select(self, entity_ids) -> "PreviewBatch":
        """A new batch holding only the given entities (operator-approved subset)."""
        wanted = set(entity_ids)
        return self.model_copy(
            update={"items": tuple(item for item in self.items if item.entity_id in wanted)}
        )

    def __len__(self) -> int:
        return len(self.items)


class PreviewStore:
    """Thread-safe in-memory map of batch_id -> PreviewBatch."""

    def __init__(self):
        self._batches: dict[str, PreviewBatch] = {}
        self._lock = threading.Lock()

    def put(self, batch: PreviewBatch) -> str:
        with self._lock:
            self._batches[batch.batch_id] = batch
        logger.debug(
            f"Staged {batch.kind.value} preview {batch.batch_id}: "
            f"{len(batch)} items, {batch.change_count} changed"
        )
        return batch.batch_id

    def get(self, batch_id: str) -> PreviewBatch:
        with self._lock:
            batch = self._batches.get(batch_id)
        if batch is None:
            raise PreviewBatchNotFoundError(batch_id)
        return batch

    def take(self, batch_id: str) -> PreviewBatch:
        """Remove and return a batch, for apply."""
        with self._lock:
            batch = self._batches.pop(batch_id, None)
        if batch is None:
            raise PreviewBatchNotFoundError(batch_id)
        return batch

    def discard(self, batch_id: str) -> bool:
        """Drop a batch on cancel. Returns False if it was already gone."""
        with self._lock:
            removed = self._batches.pop(batch_id, None) is not None
        if removed:
            logger.debug(f"Discarded preview {batch_id}")
        return removed

    def clear(self) -> None:
        with self._lock:
            self._batches.clear()

    def __contains__(self, batch_id: str) -> bool:
        with self._lock:
            return batch_id in self._batches

    def __len__(self) -> int:
        with self._lock:
            return len(self._batches)
