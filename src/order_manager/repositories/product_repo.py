"""Repository for the product catalog."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import List, Optional

from order_manager.db.connection import transaction
from order_manager.domain.models import Product
from order_manager.logging_config import get_logger
from order_manager.repositories.mappers import product_from_row


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


class ProductRepo:
    """CRUD operations for products of one workspace."""

    def __init__(self, connection: sqlite3.Connection, workspace_id: str) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._workspace_id = workspace_id
        self._logger = get_logger(self.__class__.__name__)

    def create(self, product: Product) -> Product:
        created_at = _now_iso()
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    """
                    INSERT INTO products (
                        workspace_id,
                        name,
                        code,
                        image,
                        description,
                        unit,
                        price,
                        cost,
                        category,
                        active,
                        created_at,
                        updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        self._workspace_id,
                        product.name,
                        product.code,
                        product.image,
                        product.description,
                        product.unit,
                        product.price,
                        product.cost,
                        product.category,
                        int(product.active),
                        created_at,
                        created_at,
                    ),
                )
        except Exception:
            self._logger.exception("Failed to create product")
            raise
        product.id = int(cursor.lastrowid)
        return product

    def update(self, product: Product) -> Optional[Product]:
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    """
                    UPDATE products
                    SET
                        name = ?,
                        code = ?,
                        image = ?,
                        description = ?,
                        unit = ?,
                        price = ?,
                        cost = ?,
                        category = ?,
                        active = ?,
                        updated_at = ?
                    WHERE id = ? AND workspace_id = ?
                    """,
                    (
                        product.name,
                        product.code,
                        product.image,
                        product.description,
                        product.unit,
                        product.price,
                        product.cost,
                        product.category,
                        int(product.active),
                        _now_iso(),
                        product.id,
                        self._workspace_id,
                    ),
                )
        except Exception:
            self._logger.exception("Failed to update product id=%s", product.id)
            raise
        if cursor.rowcount == 0:
            return None
        return self.get_by_id(int(product.id))

    def delete(self, product_id: int) -> bool:
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    "DELETE FROM products WHERE id = ? AND workspace_id = ?",
                    (product_id, self._workspace_id),
                )
        except Exception:
            self._logger.exception("Failed to delete product id=%s", product_id)
            raise
        return cursor.rowcount > 0

    def list_all(self, *, active_only: bool = False) -> List[Product]:
        query = "SELECT * FROM products WHERE workspace_id = ?"
        if active_only:
            query += " AND active = 1"
        query += " ORDER BY name"
        try:
            rows = self._connection.execute(query, (self._workspace_id,)).fetchall()
        except Exception:
            self._logger.exception("Failed to list products")
            raise
        return [product_from_row(row) for row in rows]

    def get_by_id(self, product_id: int) -> Optional[Product]:
        try:
            row = self._connection.execute(
                "SELECT * FROM products WHERE id = ? AND workspace_id = ?",
                (product_id, self._workspace_id),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to get product id=%s", product_id)
            raise
        return product_from_row(row) if row else None
