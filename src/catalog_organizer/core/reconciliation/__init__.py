"""
Preview -> apply reconciliation: diffing, staging, stock edits and batch apply.
"""

from .batch_apply import BatchApplyEngine
from .diff_engine import (
    build_classification_preview,
    build_stock_preview,
    changed_items,
    diff,
    diff_classification,
    diff_quantity,
)
from .preview_store import PreviewBatch, PreviewKind, PreviewStore
from .stock import StockWorkingSet, adjust_quantity, clamp_quantity

__all__ = [
    "BatchApplyEngine",
    "PreviewBatch",
    "PreviewKind",
    "PreviewStore",
    "StockWorkingSet",
    "adjust_quantity",
    "build_classification_preview",
    "build_stock_preview",
    "changed_items",
    "clamp_quantity",
    "diff",
    "diff_classification",
    "diff_quantity",
]
