"""
Batch Apply Engine

Writes the approved subset of a preview to the product store, one independent
patch per entity. A failed, missing or timed-out write is recorded against that
entity only; the remaining writes always run and a complete report is returned.
"""

import logging
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import ProductWriteError, classify_apply_error
from ..models import ApplyOutcome, ApplyReport, PreviewItem
from ..store.base import ProductStore

logger = logging.getLogger(__name__)

MAX_RETRY_WAIT_SECONDS = 10.0


class BatchApplyEngine:
    """Fans patches out over a bounded worker pool and aggregates the outcomes."""

    def __init__(
        self,
        store: ProductStore,
        max_workers: int = 4,
        write_timeout: float | None = 10.0,
        write_retries: int = 0,
        retry_backoff: float = 0.5,
    ):
        """
        Initialize the engine.

        Args:
            store: Product store to patch
            max_workers: Upper bound on concurrent writes
            write_timeout: Per-write deadline in seconds, None for no deadline
            write_retries: Extra attempts for writes the store rejected
            retry_backoff: Exponential backoff multiplier between attempts
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.store = store
        self.max_workers = max_workers
        self.write_timeout = write_timeout
        self.write_retries = max(0, write_retries)
        self.retry_backoff = retry_backoff

    def _write(self, item: PreviewItem) -> None:
        fields = item.proposed_value.to_patch()
        retrying = Retrying(
            stop=stop_after_attempt(self.write_retries + 1),
            wait=wait_exponential(multiplier=self.retry_backoff, min=0, max=MAX_RETRY_WAIT_SECONDS),
            retry=retry_if_exception_type(ProductWriteError),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                self.store.patch_by_id(item.entity_id, fields)

    def _apply_one(self, item: PreviewItem) -> ApplyOutcome:
        try:
            if self.write_timeout is None:
                self._write(item)
            else:
                self._write_with_deadline(item)
        except Exception as e:
            failure = classify_apply_error(e, self.write_timeout)
            logger.warning(f"Failed to update {item.entity_id} ({failure.error_type.value}): {failure.message}")
            return ApplyOutcome(
                entity_id=item.entity_id,
                success=False,
                error=failure.message,
                error_type=failure.error_type,
                retryable=failure.retryable,
            )
        return ApplyOutcome(entity_id=item.entity_id, success=True)

    def _write_with_deadline(self, item: PreviewItem) -> None:
        # Each write gets its own thread; the deadline starts when the write does
        writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="catalog-write")
        try:
            writer.submit(self._write, item).result(timeout=self.write_timeout)
        finally:
            # A timed-out write is left to finish on its own thread
            writer.shutdown(wait=False)

    def select(self, items: Iterable[PreviewItem]) -> list[PreviewItem]:
        """Changed items only, one per entity (the last one wins)."""
        selected: dict[str, PreviewItem] = {}
        for item in items:
            if not item.has_changes:
                continue
            if item.entity_id in selected:
                logger.warning(f"Duplicate preview item for {item.entity_id}; keeping the last one")
                del selected[item.entity_id]
            selected[item.entity_id] = item
        return list(selected.values())

    def apply(self, items: Iterable[PreviewItem]) -> ApplyReport:
        """
        Apply every changed item.

        Args:
            items: Preview items; items without changes are skipped

        Returns:
            ApplyReport with one outcome per attempted entity, in input order
        """
        to_apply = self.select(items)
        if not to_apply:
            logger.info("No changes to apply")
            return ApplyReport()

        outcomes: list[ApplyOutcome | None] = [None] * len(to_apply)
        with ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(to_apply)),
            thread_name_prefix="catalog-apply",
        ) as executor:
            futures: dict[Future, int] = {
                executor.submit(self._apply_one, item): index
                for index, item in enumerate(to_apply)
            }
            for future in as_completed(futures):
                outcomes[futures[future]] = future.result()

        report = ApplyReport.from_outcomes(outcomes)
        logger.info(
            f"Applied {report.attempted} changes: "
            f"{report.success_count} succeeded, {report.error_count} failed"
        )
        return report
