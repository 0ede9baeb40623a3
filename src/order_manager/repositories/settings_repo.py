"""Repository for per-workspace settings."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime

from order_manager.db.connection import transaction
from order_manager.domain.models import Settings
from order_manager.logging_config import get_logger


class SettingsRepo:
    """Stores workspace settings as a JSON document."""

    def __init__(self, connection: sqlite3.Connection, workspace_id: str) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._workspace_id = workspace_id
        self._logger = get_logger(self.__class__.__name__)

    def exists(self) -> bool:
        try:
            row = self._connection.execute(
                "SELECT 1 FROM workspace_settings WHERE workspace_id = ?",
                (self._workspace_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to check settings")
            raise
        return row is not None

    def get(self) -> Settings:
        """Return the stored settings; unconfigured workspaces count no sales."""
        try:
            row = self._connection.execute(
                "SELECT data FROM workspace_settings WHERE workspace_id = ?",
                (self._workspace_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to load settings")
            raise
        if row is None:
            return Settings()
        try:
            data = json.loads(row["data"])
        except json.JSONDecodeError:
            self._logger.warning(
                "Stored settings for workspace %s are not valid JSON; using defaults",
                self._workspace_id,
            )
            return Settings()
        return Settings.from_mapping(data if isinstance(data, dict) else None)

    def save(self, settings: Settings) -> Settings:
        payload = json.dumps(settings.to_mapping(), ensure_ascii=False)
        try:
            with transaction(self._connection):
                self._connection.execute(
                    """
                    INSERT INTO workspace_settings (workspace_id, data, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT (workspace_id) DO UPDATE SET
                        data = excluded.data,
                        updated_at = excluded.updated_at
                    """,
                    (
                        self._workspace_id,
                        payload,
                        datetime.now().isoformat(timespec="seconds"),
                    ),
                )
        except Exception:
            self._logger.exception("Failed to save settings")
            raise
        return settings
