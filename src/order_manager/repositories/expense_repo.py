"""Repository for expense persistence."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Optional

from order_manager.db.connection import transaction
from order_manager.domain.models import Expense
from order_manager.logging_config import get_logger
from order_manager.repositories.mappers import expense_from_row


class ExpenseRepo:
    """Data access for expenses of one workspace."""

    def __init__(self, connection: sqlite3.Connection, workspace_id: str) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._workspace_id = workspace_id
        self._logger = get_logger(self.__class__.__name__)

    def create(self, expense: Expense) -> Expense:
        created_at = expense.created_at or datetime.now().isoformat(timespec="seconds")
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    """
                    INSERT INTO expenses (
                        workspace_id,
                        date,
                        category,
                        description,
                        amount,
                        recurrent,
                        created_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        self._workspace_id,
                        expense.date,
                        expense.category,
                        expense.description,
                        expense.amount,
                        int(expense.recurrent),
                        created_at,
                    ),
                )
        except Exception:
            self._logger.exception("Failed to create expense")
            raise
        expense.id = int(cursor.lastrowid)
        expense.created_at = created_at
        return expense

    def update(self, expense: Expense) -> bool:
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    """
                    UPDATE expenses
                    SET date = ?,
                        category = ?,
                        description = ?,
                        amount = ?,
                        recurrent = ?
                    WHERE id = ? AND workspace_id = ?
                    """,
                    (
                        expense.date,
                        expense.category,
                        expense.description,
                        expense.amount,
                        int(expense.recurrent),
                        expense.id,
                        self._workspace_id,
                    ),
                )
        except Exception:
            self._logger.exception("Failed to update expense id=%s", expense.id)
            raise
        return cursor.rowcount > 0

    def delete(self, expense_id: int) -> bool:
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    "DELETE FROM expenses WHERE id = ? AND workspace_id = ?",
                    (expense_id, self._workspace_id),
                )
        except Exception:
            self._logger.exception("Failed to delete expense id=%s", expense_id)
            raise
        return cursor.rowcount > 0

    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        try:
            row = self._connection.execute(
                "SELECT * FROM expenses WHERE id = ? AND workspace_id = ?",
                (expense_id, self._workspace_id),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to fetch expense id=%s", expense_id)
            raise
        return expense_from_row(row) if row else None

    def list_all(self) -> list[Expense]:
        try:
            rows = self._connection.execute(
                """
                SELECT *
                FROM expenses
                WHERE workspace_id = ?
                ORDER BY date DESC, id DESC
                """,
                (self._workspace_id,),
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list expenses")
            raise
        return [expense_from_row(row) for row in rows]

    def list_by_period(self, start_date: str, end_date: str) -> list[Expense]:
        try:
            rows = self._connection.execute(
                """
                SELECT *
                FROM expenses
                WHERE workspace_id = ?
                  AND date(date) >= ?
                  AND date(date) <= ?
                ORDER BY date(date) DESC, id DESC
                """,
                (self._workspace_id, start_date, end_date),
            ).fetchall()
        except Exception:
            self._logger.exception(
                "Failed to list expenses period=%s..%s", start_date, end_date
            )
            raise
        return [expense_from_row(row) for row in rows]

    def list_categories(self) -> list[str]:
        try:
            rows = self._connection.execute(
                """
                SELECT DISTINCT category
                FROM expenses
                WHERE workspace_id = ?
                  AND category IS NOT NULL
                  AND trim(category) != ''
                ORDER BY category
                """,
                (self._workspace_id,),
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list expense categories")
            raise
        return [row["category"] for row in rows if row["category"]]
