"""Repository for client persistence."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import List, Optional

from order_manager.db.connection import transaction
from order_manager.domain.models import Client
from order_manager.logging_config import get_logger
from order_manager.repositories.mappers import client_from_row


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


class ClientRepo:
    """CRUD operations for clients of one workspace."""

    def __init__(self, connection: sqlite3.Connection, workspace_id: str) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._workspace_id = workspace_id
        self._logger = get_logger(self.__class__.__name__)

    def create(self, client: Client) -> Client:
        created_at = _now_iso()
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    """
                    INSERT INTO clients (
                        workspace_id,
                        name,
                        whatsapp,
                        email,
                        doc,
                        address,
                        notes,
                        created_at,
                        updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        self._workspace_id,
                        client.name,
                        client.whatsapp,
                        client.email,
                        client.doc,
                        client.address,
                        client.notes,
                        created_at,
                        created_at,
                    ),
                )
        except Exception:
            self._logger.exception("Failed to create client")
            raise
        client.id = int(cursor.lastrowid)
        return client

    def update(self, client: Client) -> Optional[Client]:
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    """
                    UPDATE clients
                    SET
                        name = ?,
                        whatsapp = ?,
                        email = ?,
                        doc = ?,
                        address = ?,
                        notes = ?,
                        updated_at = ?
                    WHERE id = ? AND workspace_id = ?
                    """,
                    (
                        client.name,
                        client.whatsapp,
                        client.email,
                        client.doc,
                        client.address,
                        client.notes,
                        _now_iso(),
                        client.id,
                        self._workspace_id,
                    ),
                )
        except Exception:
            self._logger.exception("Failed to update client id=%s", client.id)
            raise
        if cursor.rowcount == 0:
            return None
        return self.get_by_id(int(client.id))

    def delete(self, client_id: int) -> bool:
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    "DELETE FROM clients WHERE id = ? AND workspace_id = ?",
                    (client_id, self._workspace_id),
                )
        except Exception:
            self._logger.exception("Failed to delete client id=%s", client_id)
            raise
        return cursor.rowcount > 0

    def list_all(self) -> List[Client]:
        try:
            rows = self._connection.execute(
                "SELECT * FROM clients WHERE workspace_id = ? ORDER BY name",
                (self._workspace_id,),
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list clients")
            raise
        return [client_from_row(row) for row in rows]

    def search_by_name(self, term: str) -> List[Client]:
        term = term.strip()
        if not term:
            return self.list_all()
        try:
            rows = self._connection.execute(
                """
                SELECT * FROM clients
                WHERE workspace_id = ? AND name LIKE ?
                ORDER BY name
                """,
                (self._workspace_id, f"%{term}%"),
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to search clients term=%s", term)
            raise
        return [client_from_row(row) for row in rows]

    def get_by_id(self, client_id: int) -> Optional[Client]:
        try:
            row = self._connection.execute(
                "SELECT * FROM clients WHERE id = ? AND workspace_id = ?",
                (client_id, self._workspace_id),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to get client id=%s", client_id)
            raise
        return client_from_row(row) if row else None
