"""Import of the browser application's JSON export into a workspace."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

from order_manager.db.connection import transaction
from order_manager.domain.models import Settings
from order_manager.logging_config import get_logger
from order_manager.repositories.mappers import (
    client_from_payload,
    expense_from_payload,
    order_from_payload,
    product_from_payload,
)
from order_manager.repositories.store import WorkspaceStore

logger = get_logger(__name__)

COLLECTIONS = ("clients", "products", "orders", "expenses", "settings")


@dataclass
class ImportResult:
    clients: int = 0
    products: int = 0
    orders: int = 0
    expenses: int = 0
    settings: bool = False
    skipped: list[str] = field(default_factory=list)


def _collection(data: Mapping[str, Any], name: str) -> Any:
    """Find a collection by plain name or by its browser storage key (gpro_<key>_<name>)."""
    if name in data:
        return data[name]
    suffix = f"_{name}"
    for key, value in data.items():
        if key.startswith("gpro_") and key.endswith(suffix):
            if isinstance(value, str):
                return json.loads(value)
            return value
    return None


def load_export(path: Path) -> dict[str, Any]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("O arquivo de exportação deve conter um objeto JSON.")
    return {name: _collection(data, name) for name in COLLECTIONS}


def import_export(data: Mapping[str, Any], store: WorkspaceStore) -> ImportResult:
    """Copy every collection of an export into the store in one transaction.

    Legacy string ids of clients and products are remapped to the new ids.
    Orders keep their number; an order whose number already exists is skipped.
    Records that cannot be read are listed in ``skipped``. A storage failure
    rolls back the whole import.
    """
    result = ImportResult()
    with transaction(store.connection):
        client_ids = _import_clients(data, store, result)
        product_ids = _import_products(data, store, result)
        highest_number = _import_orders(data, store, result, client_ids, product_ids)
        _import_expenses(data, store, result)
        _import_settings(data, store, result, highest_number)

    logger.info(
        "Imported %s clients, %s products, %s orders, %s expenses into %s",
        result.clients,
        result.products,
        result.orders,
        result.expenses,
        store.workspace_id,
    )
    if result.skipped:
        logger.warning("Skipped %s records during import", len(result.skipped))
    return result


def _import_clients(
    data: Mapping[str, Any], store: WorkspaceStore, result: ImportResult
) -> dict[str, int]:
    client_ids: dict[str, int] = {}
    for index, payload in enumerate(data.get("clients") or []):
        try:
            client = client_from_payload(payload)
        except (AttributeError, TypeError, ValueError):
            logger.warning("Client record %s is not readable", index)
            result.skipped.append(f"client:{index}")
            continue
        client = store.clients.create(client)
        client_ids[str(payload.get("id"))] = int(client.id)
        result.clients += 1
    return client_ids


def _import_products(
    data: Mapping[str, Any], store: WorkspaceStore, result: ImportResult
) -> dict[str, int]:
    product_ids: dict[str, int] = {}
    for index, payload in enumerate(data.get("products") or []):
        try:
            product = product_from_payload(payload)
        except (AttributeError, TypeError, ValueError):
            logger.warning("Product record %s is not readable", index)
            result.skipped.append(f"product:{index}")
            continue
        product = store.products.create(product)
        product_ids[str(payload.get("id"))] = int(product.id)
        result.products += 1
    return product_ids


def _import_orders(
    data: Mapping[str, Any],
    store: WorkspaceStore,
    result: ImportResult,
    client_ids: Mapping[str, int],
    product_ids: Mapping[str, int],
) -> int:
    existing_orders = set(store.orders.list_ids())
    highest_number = 0
    for payload in data.get("orders") or []:
        if not isinstance(payload, Mapping):
            result.skipped.append("order:?")
            continue
        order_id = str(payload.get("id") or "").strip()
        if not order_id or order_id in existing_orders:
            result.skipped.append(f"order:{order_id or '?'}")
            continue
        legacy_client = payload.get("clientId") or payload.get("client_id")
        try:
            order = order_from_payload(payload, client_ids.get(str(legacy_client)))
        except (AttributeError, TypeError, ValueError):
            logger.warning("Order %s has unreadable values", order_id)
            result.skipped.append(f"order:{order_id}")
            continue
        for item, item_payload in zip(order.items, payload.get("items") or []):
            legacy_product = item_payload.get("productId") or item_payload.get("product_id")
            item.product_id = product_ids.get(str(legacy_product))
        store.orders.save(order)
        existing_orders.add(order_id)
        if order_id.isdigit():
            highest_number = max(highest_number, int(order_id))
        result.orders += 1
    return highest_number


def _import_expenses(
    data: Mapping[str, Any], store: WorkspaceStore, result: ImportResult
) -> None:
    for index, payload in enumerate(data.get("expenses") or []):
        try:
            expense = expense_from_payload(payload)
        except (AttributeError, TypeError, ValueError):
            logger.warning("Expense record %s is not readable", index)
            result.skipped.append(f"expense:{index}")
            continue
        store.expenses.create(expense)
        result.expenses += 1


def _import_settings(
    data: Mapping[str, Any],
    store: WorkspaceStore,
    result: ImportResult,
    highest_number: int,
) -> None:
    """Save imported settings; a workspace without any starts from the seed."""
    settings_payload = data.get("settings")
    settings = None
    if isinstance(settings_payload, Mapping):
        try:
            settings = Settings.from_mapping(settings_payload)
        except (TypeError, ValueError):
            logger.warning("Imported settings are not readable; keeping current ones")
            result.skipped.append("settings")
        else:
            result.settings = True
    if settings is None:
        settings = (
            store.get_settings() if store.settings.exists() else Settings.seeded()
        )
    if highest_number >= settings.next_order_number:
        settings = replace(settings, next_order_number=highest_number + 1)
    store.settings.save(settings)
