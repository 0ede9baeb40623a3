"""Order service for entry rules, numbering and totals."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from order_manager.config import ORDER_NUMBER_WIDTH
from order_manager.db.connection import transaction
from order_manager.domain.models import (
    DiscountType,
    Order,
    OrderItem,
    OrderStatus,
    PricingType,
)
from order_manager.logging_config import get_logger
from order_manager.repositories.store import WorkspaceStore
from order_manager.services.errors import NotFoundError, ValidationError
from order_manager.services.events import DataEventBus
from order_manager.services.periods import Period, parse_record_date
from order_manager.services.pricing import (
    OrderTotals,
    compute_order_totals,
    resolve_item_price,
)
from order_manager.services.tracking import OrderTracking, build_tracking


class OrderService:
    """Central service for order rules; amounts always come from the pricing engine."""

    def __init__(
        self, store: WorkspaceStore, data_bus: Optional[DataEventBus] = None
    ) -> None:
        self._store = store
        self._data_bus = data_bus
        self._logger = get_logger(self.__class__.__name__)

    def _notify(self) -> None:
        if self._data_bus is not None:
            self._data_bus.data_changed()

    def create_order(self, order: Order) -> Order:
        """Validate and save a new order, numbering it when it has no id.

        The number is reserved and the order saved in one transaction, so a
        failed save leaves no gap in the sequence.
        """
        self._prepare(order)
        if order.id and self._store.orders.get_by_id(order.id):
            raise ValidationError(f"Já existe um pedido com o número {order.id}.", "id")
        numbered = not order.id
        try:
            with transaction(self._store.connection):
                if numbered:
                    order.id = self.next_order_id()
                saved = self._store.orders.save(order)
        except Exception:
            if numbered:
                order.id = None
            raise
        self._logger.info("Order %s created with status %s", saved.id, saved.status.value)
        self._notify()
        return saved

    def update_order(self, order: Order) -> Order:
        if not order.id or not self._store.orders.get_by_id(order.id):
            raise NotFoundError("Pedido não encontrado.")
        self._prepare(order)
        saved = self._store.orders.save(order)
        self._notify()
        return saved

    def delete_order(self, order_id: str) -> bool:
        if not self._store.orders.get_by_id(order_id):
            raise NotFoundError("Pedido não encontrado.")
        deleted = self._store.orders.delete(order_id)
        self._notify()
        return deleted

    def get_order(self, order_id: str) -> Order:
        order = self._store.orders.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Pedido {order_id} não encontrado.")
        return order

    def list_orders(
        self,
        period: Optional[Period] = None,
        status: str | OrderStatus | None = None,
    ) -> list[Order]:
        if period is None:
            orders = self._store.orders.list_all()
        else:
            orders = self._store.orders.list_by_period(
                period.start.isoformat(), period.end.isoformat()
            )
        if status is None:
            return orders
        try:
            wanted = OrderStatus.coerce(status)
        except ValueError as exc:
            raise ValidationError(str(exc), "status") from exc
        return [order for order in orders if order.status == wanted]

    def get_tracking(self, order_id: str) -> OrderTracking:
        """Progress view shown to the customer of an order."""
        return build_tracking(self.get_order(order_id))

    def set_status(self, order_id: str, status: str | OrderStatus) -> Order:
        """Move an order to any status; transitions are not restricted."""
        try:
            new_status = OrderStatus.coerce(status)
        except ValueError as exc:
            raise ValidationError(str(exc), "status") from exc
        if not self._store.orders.set_status(order_id, new_status.value):
            raise NotFoundError(f"Pedido {order_id} não encontrado.")
        self._notify()
        return self.get_order(order_id)

    def get_totals(self, order_id: str) -> OrderTotals:
        settings = self._store.get_settings()
        return compute_order_totals(
            self.get_order(order_id),
            clamp_discount=settings.clamp_discount_to_subtotal,
        )

    def next_order_id(self) -> str:
        """Reserve the next sequential order number of the workspace."""
        settings = self._store.get_settings()
        existing = set(self._store.orders.list_ids())
        number = settings.next_order_number
        order_id = str(number).zfill(ORDER_NUMBER_WIDTH)
        while order_id in existing:
            number += 1
            order_id = str(number).zfill(ORDER_NUMBER_WIDTH)
        self._store.settings.save(replace(settings, next_order_number=number + 1))
        return order_id

    def _prepare(self, order: Order) -> None:
        self._validate(order)
        order.status = OrderStatus.coerce(order.status)
        order.discount_type = DiscountType(order.discount_type)
        for item in order.items:
            if item.pricing_type == PricingType.AREA:
                item.unit_price = resolve_item_price(item)

    def _validate(self, order: Order) -> None:
        if parse_record_date(order.date) is None:
            raise ValidationError("Informe uma data válida para o pedido.", "date")
        try:
            OrderStatus.coerce(order.status)
        except ValueError as exc:
            raise ValidationError(str(exc), "status") from exc
        if order.freight_price < 0:
            raise ValidationError("O valor do frete não pode ser negativo.", "freight_price")
        if order.discount < 0:
            raise ValidationError("O desconto não pode ser negativo.", "discount")
        if order.discount_type == DiscountType.PERCENTAGE and order.discount > 100:
            raise ValidationError(
                "O desconto percentual deve estar entre 0 e 100.", "discount"
            )
        if order.client_id is not None and not self._store.clients.get_by_id(
            order.client_id
        ):
            raise ValidationError("Cliente não encontrado.", "client_id")
        for index, item in enumerate(order.items, start=1):
            self._validate_item(index, item)

    def _validate_item(self, index: int, item: OrderItem) -> None:
        if item.quantity <= 0:
            raise ValidationError(
                f"A quantidade do item {index} deve ser maior que zero.", "quantity"
            )
        if item.unit_price < 0 or item.unit_cost < 0:
            raise ValidationError(
                f"Preço e custo do item {index} não podem ser negativos.", "unit_price"
            )
        if item.pricing_type == PricingType.AREA:
            for value in (item.width, item.height, item.area_price, item.finishing_price):
                if value is not None and value < 0:
                    raise ValidationError(
                        f"Medidas e preços do item {index} não podem ser negativos.",
                        "area",
                    )
