"""Service container shared by the command line entry points."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from order_manager.repositories.store import WorkspaceStore
from order_manager.services.events import DataEventBus
from order_manager.services.expense_service import ExpenseService
from order_manager.services.finance_service import FinanceService
from order_manager.services.order_service import OrderService
from order_manager.services.settings_service import SettingsService


@dataclass(frozen=True)
class AppServices:
    """Repositories and services of one workspace, wired to a single event bus."""

    connection: sqlite3.Connection
    data_bus: DataEventBus
    store: WorkspaceStore
    order_service: OrderService
    expense_service: ExpenseService
    finance_service: FinanceService
    settings_service: SettingsService

    @classmethod
    def build(cls, connection: sqlite3.Connection, workspace_id: str) -> AppServices:
        data_bus = DataEventBus()
        store = WorkspaceStore(connection, workspace_id)
        return cls(
            connection=connection,
            data_bus=data_bus,
            store=store,
            order_service=OrderService(store, data_bus),
            expense_service=ExpenseService(store, data_bus),
            finance_service=FinanceService(store, data_bus),
            settings_service=SettingsService(store, data_bus),
        )
