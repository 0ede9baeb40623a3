"""Repositories for data access."""

from order_manager.repositories.client_repo import ClientRepo
from order_manager.repositories.expense_repo import ExpenseRepo
from order_manager.repositories.order_repo import OrderRepo
from order_manager.repositories.product_repo import ProductRepo
from order_manager.repositories.settings_repo import SettingsRepo
from order_manager.repositories.store import WorkspaceStore

__all__ = [
    "ClientRepo",
    "ExpenseRepo",
    "OrderRepo",
    "ProductRepo",
    "SettingsRepo",
    "WorkspaceStore",
]
