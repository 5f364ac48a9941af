#!/usr/bin/env python3
"""
SQLite product store.
"""

import json
import logging
import os
import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from ..errors import ProductNotFoundError, ProductWriteError
from ..models import Product
from .base import PATCHABLE_FIELDS, ProductStore

logger = logging.getLogger(__name__)

COLUMNS = [
    "id",
    "title",
    "product_type",
    "tags",
    "inventory_quantity",
    "available_for_sale",
    "status",
]


class SQLiteProductStore(ProductStore):
    """SQLite-backed product store. Opens a connection per call so it is safe across threads."""

    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout
        self.ensure_database()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Connection that commits on success, rolls back on error, and always closes."""
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def ensure_database(self):
        """Create the products table if it doesn't exist."""
        directory = os.path.dirname(os.path.abspath(self.db_path))
        os.makedirs(directory, exist_ok=True)
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS products (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL DEFAULT '',
                    product_type TEXT,
                    tags TEXT NOT NULL DEFAULT '[]',
                    inventory_quantity INTEGER NOT NULL DEFAULT 0,
                    available_for_sale INTEGER NOT NULL DEFAULT 0,
                    status TEXT NOT NULL DEFAULT 'active',
                    last_updated TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """
            )

    @staticmethod
    def _row_to_product(row: tuple) -> Product:
        record = dict(zip(COLUMNS, row, strict=False))
        try:
            record["tags"] = json.loads(record["tags"] or "[]")
        except json.JSONDecodeError:
            pass  # legacy comma-separated tags, split by Product
        record["available_for_sale"] = bool(record["available_for_sale"])
        return Product(**record)

    @staticmethod
    def _to_column(field: str, value: Any) -> Any:
        if field == "tags":
            return json.dumps(sorted({str(tag).strip().lower() for tag in value or []}))
        if field == "available_for_sale":
            return int(bool(value))
        return value

    def add_products(self, products: Iterable[Product]) -> int:
        """Insert or replace products. Returns how many were written."""
        rows = []
        for product in products:
            if not isinstance(product, Product):
                product = Product(**product)
            data = product.model_dump()
            rows.append(tuple(self._to_column(column, data[column]) for column in COLUMNS))

        placeholders = ", ".join("?" for _ in COLUMNS)
        with self._connect() as conn:
            conn.executemany(
                f"INSERT OR REPLACE INTO products ({', '.join(COLUMNS)}) VALUES ({placeholders})",
                rows,
            )
        logger.info(f"Stored {len(rows)} products in {self.db_path}")
        return len(rows)

    def get_all(self) -> list[Product]:
        with self._connect() as conn:
            cursor = conn.execute(f"SELECT {', '.join(COLUMNS)} FROM products ORDER BY title")
            return [self._row_to_product(row) for row in cursor.fetchall()]

    def get_by_id(self, product_id: str) -> Product:
        with self._connect() as conn:
            cursor = conn.execute(
                f"SELECT {', '.join(COLUMNS)} FROM products WHERE id = ?", (str(product_id),)
            )
            row = cursor.fetchone()
        if row is None:
            raise ProductNotFoundError(str(product_id))
        return self._row_to_product(row)

    def patch_by_id(self, product_id: str, fields: dict[str, Any]) -> Product:
        product_id = str(product_id)
        unknown = set(fields) - PATCHABLE_FIELDS
        if unknown:
            raise ProductWriteError(product_id, f"Unknown fields: {', '.join(sorted(unknown))}")
        if "inventory_quantity" in fields and int(fields["inventory_quantity"]) < 0:
            raise ProductWriteError(product_id, "Invalid inventory quantity")

        if not fields:
            return self.get_by_id(product_id)

        assignments = ", ".join(f"{field} = ?" for field in fields)
        values = [self._to_column(field, value) for field, value in fields.items()]

        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    f"UPDATE products SET {assignments}, last_updated = CURRENT_TIMESTAMP "
                    "WHERE id = ?",
                    (*values, product_id),
                )
                if cursor.rowcount == 0:
                    raise ProductNotFoundError(product_id)
        except sqlite3.Error as e:
            raise ProductWriteError(product_id, f"SQL Error: {e}") from e

        return self.get_by_id(product_id)

    def get_product_count(self) -> int:
        """Get total number of products"""
        with self._connect() as conn:
            cursor = conn.execute("SELECT COUNT(*) FROM products")
            result = cursor.fetchone()
            return int(result[0]) if result else 0
