"""Repository for orders and their line items."""

from __future__ import annotations

import sqlite3
from collections import defaultdict
from datetime import datetime
from typing import Iterable, Optional

from order_manager.db.connection import transaction
from order_manager.domain.models import Order, OrderItem
from order_manager.logging_config import get_logger
from order_manager.repositories.mappers import (
    order_from_row,
    order_item_from_row,
    order_item_to_record,
    order_to_record,
)

_ITEM_COLUMNS = (
    "product_id",
    "name",
    "description",
    "item_unit",
    "quantity",
    "unit_price",
    "unit_cost",
    "pricing_type",
    "width",
    "height",
    "unit_measure",
    "area_price",
    "finishing_price",
)


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


class OrderRepo:
    """Persistence for orders of one workspace; items are replaced on save."""

    def __init__(self, connection: sqlite3.Connection, workspace_id: str) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._workspace_id = workspace_id
        self._logger = get_logger(self.__class__.__name__)

    def save(self, order: Order) -> Order:
        """Insert or update an order together with its items."""
        if not order.id:
            raise ValueError("Order id is required to save an order.")
        timestamp = _now_iso()
        if not order.created_at:
            order.created_at = timestamp
        record = order_to_record(order)
        try:
            with transaction(self._connection):
                self._connection.execute(
                    """
                    INSERT INTO orders (
                        workspace_id,
                        id,
                        client_id,
                        date,
                        status,
                        freight_price,
                        freight_charged_to_customer,
                        discount,
                        discount_type,
                        payment_method,
                        notes,
                        external_production_link,
                        tracking_code,
                        tracking_url,
                        created_at,
                        updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT (workspace_id, id) DO UPDATE SET
                        client_id = excluded.client_id,
                        date = excluded.date,
                        status = excluded.status,
                        freight_price = excluded.freight_price,
                        freight_charged_to_customer = excluded.freight_charged_to_customer,
                        discount = excluded.discount,
                        discount_type = excluded.discount_type,
                        payment_method = excluded.payment_method,
                        notes = excluded.notes,
                        external_production_link = excluded.external_production_link,
                        tracking_code = excluded.tracking_code,
                        tracking_url = excluded.tracking_url,
                        updated_at = excluded.updated_at
                    """,
                    (
                        self._workspace_id,
                        record["id"],
                        record["client_id"],
                        record["date"],
                        record["status"],
                        record["freight_price"],
                        record["freight_charged_to_customer"],
                        record["discount"],
                        record["discount_type"],
                        record["payment_method"],
                        record["notes"],
                        record["external_production_link"],
                        record["tracking_code"],
                        record["tracking_url"],
                        record["created_at"],
                        timestamp,
                    ),
                )
                self._replace_items(order.id, order.items)
        except Exception:
            self._logger.exception("Failed to save order id=%s", order.id)
            raise
        return order

    def _replace_items(self, order_id: str, items: Iterable[OrderItem]) -> None:
        self._connection.execute(
            "DELETE FROM order_items WHERE workspace_id = ? AND order_id = ?",
            (self._workspace_id, order_id),
        )
        columns = ", ".join(_ITEM_COLUMNS)
        placeholders = ", ".join(["?"] * (len(_ITEM_COLUMNS) + 3))
        for position, item in enumerate(items):
            record = order_item_to_record(item)
            cursor = self._connection.execute(
                f"""
                INSERT INTO order_items (workspace_id, order_id, position, {columns})
                VALUES ({placeholders})
                """,
                (
                    self._workspace_id,
                    order_id,
                    position,
                    *(record[column] for column in _ITEM_COLUMNS),
                ),
            )
            item.id = int(cursor.lastrowid)

    def set_status(self, order_id: str, status: str) -> bool:
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    """
                    UPDATE orders
                    SET status = ?, updated_at = ?
                    WHERE workspace_id = ? AND id = ?
                    """,
                    (status, _now_iso(), self._workspace_id, order_id),
                )
        except Exception:
            self._logger.exception("Failed to set status for order id=%s", order_id)
            raise
        return cursor.rowcount > 0

    def delete(self, order_id: str) -> bool:
        try:
            with transaction(self._connection):
                self._connection.execute(
                    "DELETE FROM order_items WHERE workspace_id = ? AND order_id = ?",
                    (self._workspace_id, order_id),
                )
                cursor = self._connection.execute(
                    "DELETE FROM orders WHERE workspace_id = ? AND id = ?",
                    (self._workspace_id, order_id),
                )
        except Exception:
            self._logger.exception("Failed to delete order id=%s", order_id)
            raise
        return cursor.rowcount > 0

    def get_by_id(self, order_id: str) -> Optional[Order]:
        try:
            row = self._connection.execute(
                "SELECT * FROM orders WHERE workspace_id = ? AND id = ?",
                (self._workspace_id, order_id),
            ).fetchone()
            if row is None:
                return None
            item_rows = self._connection.execute(
                """
                SELECT * FROM order_items
                WHERE workspace_id = ? AND order_id = ?
                ORDER BY position, id
                """,
                (self._workspace_id, order_id),
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to get order id=%s", order_id)
            raise
        return order_from_row(row, [order_item_from_row(item) for item in item_rows])

    def list_all(self) -> list[Order]:
        return self._list("", ())

    def list_by_period(self, start_date: str, end_date: str) -> list[Order]:
        return self._list(
            "AND date(date) >= ? AND date(date) <= ?",
            (start_date, end_date),
        )

    def list_ids(self) -> list[str]:
        try:
            rows = self._connection.execute(
                "SELECT id FROM orders WHERE workspace_id = ?",
                (self._workspace_id,),
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list order ids")
            raise
        return [row["id"] for row in rows]

    def _list(self, condition: str, params: tuple[object, ...]) -> list[Order]:
        try:
            rows = self._connection.execute(
                f"""
                SELECT * FROM orders
                WHERE workspace_id = ? {condition}
                ORDER BY date DESC, id DESC
                """,
                (self._workspace_id, *params),
            ).fetchall()
            item_rows = self._connection.execute(
                """
                SELECT * FROM order_items
                WHERE workspace_id = ?
                ORDER BY order_id, position, id
                """,
                (self._workspace_id,),
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list orders")
            raise
        items_by_order: dict[str, list[OrderItem]] = defaultdict(list)
        for item_row in item_rows:
            items_by_order[item_row["order_id"]].append(order_item_from_row(item_row))
        return [order_from_row(row, items_by_order.get(row["id"], [])) for row in rows]
