"""Shared JSON configuration storage."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from order_manager.config import DEFAULT_WORKSPACE


def load_config_data(config_path: Path) -> dict[str, Any]:
    """Load configuration JSON data from disk."""
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    if isinstance(data, dict):
        return data
    return {}


def save_config_data(config_path: Path, data: dict[str, Any]) -> None:
    """Persist configuration JSON data to disk."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8"
    )


def load_default_workspace(config_path: Path) -> str:
    """Workspace used when none is given on the command line."""
    value = load_config_data(config_path).get("default_workspace")
    if isinstance(value, str) and value.strip():
        return value.strip().upper()
    return DEFAULT_WORKSPACE


def save_default_workspace(config_path: Path, workspace_id: Optional[str]) -> None:
    payload = load_config_data(config_path)
    if workspace_id:
        payload["default_workspace"] = workspace_id.strip().upper()
    else:
        payload.pop("default_workspace", None)
    save_config_data(config_path, payload)
