"""
Unit tests for apply failure classification.
"""

from concurrent.futures import TimeoutError as FutureTimeoutError

from catalog_organizer.core.errors import (
    ApplyErrorType,
    ProductNotFoundError,
    ProductWriteError,
    classify_apply_error,
)


class TestClassifyApplyError:
    def test_not_found(self):
        failure = classify_apply_error(ProductNotFoundError("42"))

        assert failure.error_type == ApplyErrorType.NOT_FOUND
        assert failure.retryable is False
        assert "42" in failure.message

    def test_write_failed(self):
        failure = classify_apply_error(ProductWriteError("42", "locked"))

        assert failure.error_type == ApplyErrorType.WRITE_FAILED
        assert failure.message == "Failed to update product 42: locked"

    def test_timeout_message(self):
        failure = classify_apply_error(FutureTimeoutError(), timeout=2.5)

        assert failure.error_type == ApplyErrorType.TIMEOUT
        assert failure.message == "Write timed out after 2.5s"

    def test_unknown_exception_without_message(self):
        failure = classify_apply_error(KeyError())

        assert failure.error_type == ApplyErrorType.WRITE_FAILED
        assert failure.message == "KeyError"
