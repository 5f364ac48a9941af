"""
Catalog Organizer Core Module
Provides classification, preview diffing, batch apply and product storage.
"""

from .classification import ProductClassifier, classify
from .errors import (
    ApplyErrorType,
    CatalogOrganizerError,
    PreviewBatchNotFoundError,
    ProductNotFoundError,
    ProductWriteError,
    RuleTableError,
)
from .models import (
    ApplyOutcome,
    ApplyReport,
    ClassificationResult,
    ClassificationState,
    PreviewItem,
    Product,
    QuantityState,
)
from .organizer import CatalogOrganizer

__all__ = [
    "ApplyErrorType",
    "ApplyOutcome",
    "ApplyReport",
    "CatalogOrganizer",
    "CatalogOrganizerError",
    "ClassificationResult",
    "ClassificationState",
    "PreviewBatchNotFoundError",
    "PreviewItem",
    "Product",
    "ProductClassifier",
    "ProductNotFoundError",
    "ProductWriteError",
    "QuantityState",
    "RuleTableError",
    "classify",
]
