"""Workspace-scoped access to every repository."""

from __future__ import annotations

import sqlite3

from order_manager.domain.models import Expense, Order, Settings
from order_manager.repositories.client_repo import ClientRepo
from order_manager.repositories.expense_repo import ExpenseRepo
from order_manager.repositories.order_repo import OrderRepo
from order_manager.repositories.product_repo import ProductRepo
from order_manager.repositories.settings_repo import SettingsRepo


class WorkspaceStore:
    """Bundles the repositories of one workspace.

    The workspace id is always passed in explicitly; nothing here reads a
    session or a global access key.
    """

    def __init__(self, connection: sqlite3.Connection, workspace_id: str) -> None:
        workspace_id = (workspace_id or "").strip().upper()
        if not workspace_id:
            raise ValueError("Workspace id is required.")
        self.connection = connection
        self.workspace_id = workspace_id
        self.clients = ClientRepo(connection, workspace_id)
        self.products = ProductRepo(connection, workspace_id)
        self.orders = OrderRepo(connection, workspace_id)
        self.expenses = ExpenseRepo(connection, workspace_id)
        self.settings = SettingsRepo(connection, workspace_id)

    def list_orders(self) -> list[Order]:
        return self.orders.list_all()

    def list_expenses(self) -> list[Expense]:
        return self.expenses.list_all()

    def get_settings(self) -> Settings:
        return self.settings.get()
