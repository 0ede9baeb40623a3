"""Application configuration."""

from __future__ import annotations

from dataclasses import dataclass

from order_manager.version import __app_name__, __company__

APP_NAME = __app_name__
APP_DATA_DIRNAME = "GestorPro"
APP_HOME_ENV = "ORDER_MANAGER_HOME"
DB_FILENAME = "order_manager.db"
LOGS_DIRNAME = "logs"
LOG_FILENAME = "app.log"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(workspace)s] %(name)s: %(message)s"
PDF_DIRNAME = "pdfs"
CONFIG_FILENAME = "config.json"
DEFAULT_WORKSPACE = "LOCAL"
ORDER_NUMBER_WIDTH = 4


@dataclass(frozen=True)
class AppConfig:
    """Static configuration values for Gestor Pro."""

    app_name: str = APP_NAME
    organization_name: str = __company__
    default_workspace: str = DEFAULT_WORKSPACE
