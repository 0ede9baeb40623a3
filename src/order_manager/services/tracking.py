"""Customer-facing progress of an order."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from order_manager.domain.models import Order, OrderStatus

TRACKING_STEPS = (
    (OrderStatus.APPROVED, "Pedido Recebido"),
    (OrderStatus.IN_PRODUCTION, "Em Produção"),
    (OrderStatus.READY, "Pronto para Entrega"),
    (OrderStatus.DELIVERED, "Entregue"),
)


@dataclass(frozen=True)
class TrackingStep:
    status: OrderStatus
    label: str
    done: bool
    current: bool


@dataclass(frozen=True)
class OrderTracking:
    order_id: str
    status: OrderStatus
    headline: str
    steps: tuple[TrackingStep, ...]
    tracking_code: Optional[str] = None
    tracking_url: Optional[str] = None
    external_production_link: Optional[str] = None

    @property
    def canceled(self) -> bool:
        return self.status == OrderStatus.CANCELED


def build_tracking(order: Order) -> OrderTracking:
    """Timeline of an order; drafts and quotes have no step reached yet."""
    status = OrderStatus.coerce(order.status)
    reached = {step_status: index for index, (step_status, _label) in enumerate(TRACKING_STEPS)}
    current_index = reached.get(status, -1)
    if status == OrderStatus.CANCELED:
        steps: tuple[TrackingStep, ...] = ()
    else:
        steps = tuple(
            TrackingStep(
                status=step_status,
                label=label,
                done=index <= current_index,
                current=index == current_index,
            )
            for index, (step_status, label) in enumerate(TRACKING_STEPS)
        )
    return OrderTracking(
        order_id=str(order.id),
        status=status,
        headline="Cancelado" if status == OrderStatus.CANCELED else "Em Aberto",
        steps=steps,
        tracking_code=order.tracking_code or None,
        tracking_url=order.tracking_url or None,
        external_production_link=order.external_production_link or None,
    )
