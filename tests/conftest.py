from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from order_manager.app_services import AppServices
from order_manager.db.migrations import open_database
from order_manager.domain.models import Order, OrderItem, OrderStatus
from order_manager.repositories.store import WorkspaceStore


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "order_manager.db"


@pytest.fixture
def connection(db_path: Path):
    connection = open_database(db_path)
    yield connection
    connection.close()


@pytest.fixture
def store(connection: sqlite3.Connection) -> WorkspaceStore:
    return WorkspaceStore(connection, "loja1")


@pytest.fixture
def services(connection: sqlite3.Connection) -> AppServices:
    services = AppServices.build(connection, "loja1")
    services.settings_service.initialize_workspace()
    return services


@pytest.fixture
def app_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    monkeypatch.setenv("ORDER_MANAGER_HOME", str(home))
    return home


def _make_order(
    order_id: str | None = "0001",
    date: str = "2024-05-10",
    status: OrderStatus = OrderStatus.DELIVERED,
    items: list[OrderItem] | None = None,
    **kwargs,
) -> Order:
    return Order(
        id=order_id,
        client_id=None,
        date=date,
        status=status,
        items=items
        if items is not None
        else [OrderItem(quantity=1, unit_price=100.0, unit_cost=40.0)],
        **kwargs,
    )


@pytest.fixture(name="make_order")
def make_order_fixture():
    return _make_order
