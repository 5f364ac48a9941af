"""
Error types for the catalog organizer.

Defines the exceptions raised by product stores and rule loading, and the
classification of per-entity apply failures into reportable kinds.
"""

import logging
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class CatalogOrganizerError(Exception):
    """Base class for catalog organizer errors."""


class ProductNotFoundError(CatalogOrganizerError):
    """Raised when a product ID does not exist in the store."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class ProductWriteError(CatalogOrganizerError):
    """Raised when the store rejects a patch."""

    def __init__(self, product_id: str, reason: str):
        self.product_id = product_id
        self.reason = reason
        super().__init__(f"Failed to update product {product_id}: {reason}")


class RuleTableError(CatalogOrganizerError):
    """Raised when a rule file is missing or malformed."""


class PreviewBatchNotFoundError(CatalogOrganizerError):
    """Raised when a staged preview batch is unknown or already consumed."""

    def __init__(self, batch_id: str):
        self.batch_id = batch_id
        super().__init__(f"Preview batch not found: {batch_id}")


class ApplyErrorType(Enum):
    """Kinds of per-entity failure recorded during batch apply."""

    NOT_FOUND = "not_found"
    WRITE_FAILED = "write_failed"
    TIMEOUT = "timeout"


@dataclass
class ApplyFailure:
    """A classified apply failure with a human-readable message."""

    error_type: ApplyErrorType
    message: str
    retryable: bool


def classify_apply_error(exc: BaseException, timeout: float | None = None) -> ApplyFailure:
    """
    Map an exception raised while writing one product to an ApplyFailure.

    Args:
        exc: The exception raised by the store or the executor
        timeout: The per-write deadline in seconds, used in the timeout message

    Returns:
        ApplyFailure describing the kind of failure
    """
    if isinstance(exc, ProductNotFoundError):
        return ApplyFailure(ApplyErrorType.NOT_FOUND, str(exc), retryable=False)

    if isinstance(exc, (FutureTimeoutError, TimeoutError)):
        if timeout is not None:
            message = f"Write timed out after {timeout:g}s"
        else:
            message = "Write timed out"
        return ApplyFailure(ApplyErrorType.TIMEOUT, message, retryable=True)

    if isinstance(exc, ProductWriteError):
        return ApplyFailure(ApplyErrorType.WRITE_FAILED, str(exc), retryable=True)

    # Anything else the store raises is still a failed write for that entity
    logger.debug(f"Unexpected {type(exc).__name__} during apply: {exc}")
    message = str(exc) or type(exc).__name__
    return ApplyFailure(ApplyErrorType.WRITE_FAILED, message, retryable=True)
