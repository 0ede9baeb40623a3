"""Shared event bus for data change notifications."""

from __future__ import annotations

from typing import Callable

from order_manager.logging_config import get_logger

logger = get_logger(__name__)


class DataEventBus:
    """Notifies subscribers after orders, expenses or settings change."""

    def __init__(self) -> None:
        self._subscribers: list[Callable[[], None]] = []

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._subscribers.append(callback)

    def data_changed(self) -> None:
        for callback in list(self._subscribers):
            callback()
        logger.debug("data_changed delivered to %s subscribers", len(self._subscribers))
