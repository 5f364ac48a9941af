"""
Product store contract and implementations.
"""

from .base import ProductStore
from .memory_store import InMemoryProductStore
from .sqlite_store import SQLiteProductStore

__all__ = [
    "InMemoryProductStore",
    "ProductStore",
    "SQLiteProductStore",
]
