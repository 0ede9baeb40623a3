"""Workspace settings: company data, sale statuses and numbering."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, Optional

from order_manager.domain.models import OrderStatus, Settings
from order_manager.logging_config import get_logger
from order_manager.repositories.store import WorkspaceStore
from order_manager.services.errors import ValidationError
from order_manager.services.events import DataEventBus

_EDITABLE_FIELDS = {
    "company_name",
    "company_doc",
    "company_address",
    "company_contact",
    "logo_url",
    "quote_validity_days",
    "quote_terms",
    "next_order_number",
    "payment_methods",
    "clamp_discount_to_subtotal",
}


class SettingsService:
    """Reads and changes the settings of one workspace."""

    def __init__(
        self, store: WorkspaceStore, data_bus: Optional[DataEventBus] = None
    ) -> None:
        self._repo = store.settings
        self._workspace_id = store.workspace_id
        self._data_bus = data_bus
        self._logger = get_logger(self.__class__.__name__)

    def _save(self, settings: Settings) -> Settings:
        self._validate(settings)
        saved = self._repo.save(settings)
        if self._data_bus is not None:
            self._data_bus.data_changed()
        return saved

    def get(self) -> Settings:
        return self._repo.get()

    def initialize_workspace(self) -> bool:
        """Write the starting settings of a new workspace; False if it exists."""
        if self._repo.exists():
            return False
        self._save(Settings.seeded())
        self._logger.info("Workspace %s created with default settings", self._workspace_id)
        return True

    def update(self, **changes: Any) -> Settings:
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Configuração desconhecida: {', '.join(sorted(unknown))}.",
                sorted(unknown)[0],
            )
        if "payment_methods" in changes:
            changes["payment_methods"] = tuple(
                method.strip() for method in changes["payment_methods"] if method.strip()
            )
        return self._save(replace(self.get(), **changes))

    def set_sale_statuses(self, statuses: Iterable[str | OrderStatus]) -> Settings:
        """Replace the set of statuses counted as sales; an empty set is allowed."""
        try:
            resolved = frozenset(OrderStatus.coerce(status) for status in statuses)
        except ValueError as exc:
            raise ValidationError(str(exc), "statuses_considered_sale") from exc
        return self._save(replace(self.get(), statuses_considered_sale=resolved))

    def toggle_sale_status(self, status: str | OrderStatus) -> Settings:
        try:
            resolved = OrderStatus.coerce(status)
        except ValueError as exc:
            raise ValidationError(str(exc), "statuses_considered_sale") from exc
        settings = self.get()
        return self._save(
            replace(
                settings,
                statuses_considered_sale=settings.statuses_considered_sale ^ {resolved},
            )
        )

    def _validate(self, settings: Settings) -> None:
        if not settings.company_name.strip():
            raise ValidationError("Informe o nome da empresa.", "company_name")
        if settings.quote_validity_days < 0:
            raise ValidationError(
                "A validade do orçamento não pode ser negativa.", "quote_validity_days"
            )
        if settings.next_order_number < 1:
            raise ValidationError(
                "O próximo número de pedido deve ser maior que zero.", "next_order_number"
            )
