"""Logging configuration for Gestor Pro.

Every record carries the workspace it was produced for, so one log file can
be shared by several workspaces opened from the same machine.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from order_manager.config import (
    LOG_BACKUP_COUNT,
    LOG_FILENAME,
    LOG_FORMAT,
    LOG_MAX_BYTES,
)
from order_manager.paths import get_logs_dir


class WorkspaceFilter(logging.Filter):
    """Stamp the active workspace id on each record."""

    def __init__(self, workspace_id: str = "-") -> None:
        super().__init__()
        self.workspace_id = workspace_id

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "workspace"):
            record.workspace = self.workspace_id
        return True


def configure_logging(
    level: int = logging.INFO,
    *,
    workspace_id: Optional[str] = None,
    log_dir: Optional[Path] = None,
) -> Path:
    """Send records to the rotating app log and warnings to the console.

    Returns the log file path.
    """
    log_file = (log_dir or get_logs_dir()) / LOG_FILENAME
    formatter = logging.Formatter(LOG_FORMAT)
    workspace_filter = WorkspaceFilter(workspace_id or "-")

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    file_handler.setLevel(level)
    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)
        handler.addFilter(workspace_filter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    def log_unhandled(exc_type, exc, traceback) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, traceback)
            return
        root_logger.critical("Unhandled exception", exc_info=(exc_type, exc, traceback))

    sys.excepthook = log_unhandled
    return log_file


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
