"""Order financial model.

Every screen, report and document that shows an order amount goes through
``compute_order_totals``. Freight is either revenue (charged to the customer)
or cost (absorbed by the business), never both.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from order_manager.domain.models import (
    DiscountType,
    MeasureUnit,
    Order,
    OrderItem,
    PricingType,
)

_METRES_PER_UNIT = {
    MeasureUnit.MM: 0.001,
    MeasureUnit.CM: 0.01,
    MeasureUnit.M: 1.0,
}


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    item_cost: float
    discount_value: float
    freight_revenue: float
    freight_cost: float
    total_revenue: float
    total_cost: float
    profit: float


def compute_discount(
    subtotal: float,
    discount: float,
    discount_type: DiscountType,
    *,
    clamp: bool = False,
) -> float:
    """Return the discount amount; percentages apply to the item subtotal only."""
    if discount_type == DiscountType.PERCENTAGE:
        value = subtotal * (discount / 100)
    else:
        value = discount
    if clamp:
        value = min(max(value, 0.0), max(subtotal, 0.0))
    return value


def compute_order_totals(order: Order, *, clamp_discount: bool = False) -> OrderTotals:
    """Compute subtotal, discount, revenue, cost and profit for one order.

    Inputs are assumed non-negative. A discount larger than the subtotal yields
    negative revenue unless ``clamp_discount`` is set.
    """
    subtotal = sum(item.quantity * item.unit_price for item in order.items)
    item_cost = sum(item.quantity * item.unit_cost for item in order.items)
    discount_value = compute_discount(
        subtotal,
        order.discount,
        DiscountType(order.discount_type),
        clamp=clamp_discount,
    )
    base_revenue = subtotal - discount_value

    if order.freight_charged_to_customer:
        freight_revenue = order.freight_price
        freight_cost = 0.0
    else:
        freight_revenue = 0.0
        freight_cost = order.freight_price

    total_revenue = base_revenue + freight_revenue
    total_cost = item_cost + freight_cost
    return OrderTotals(
        subtotal=subtotal,
        item_cost=item_cost,
        discount_value=discount_value,
        freight_revenue=freight_revenue,
        freight_cost=freight_cost,
        total_revenue=total_revenue,
        total_cost=total_cost,
        profit=total_revenue - total_cost,
    )


def area_unit_price(
    width: float,
    height: float,
    unit_measure: MeasureUnit | str,
    area_price: float,
    finishing_price: Optional[float] = None,
) -> float:
    """Price of one piece sold by area: m² times the base price plus finishing."""
    factor = _METRES_PER_UNIT[MeasureUnit(unit_measure)]
    area_m2 = (width * factor) * (height * factor)
    return area_m2 * area_price + (finishing_price or 0.0)


def resolve_item_price(item: OrderItem) -> float:
    """Unit price to store for an item at entry time."""
    if item.pricing_type != PricingType.AREA:
        return item.unit_price
    if item.width is None or item.height is None or item.area_price is None:
        return item.unit_price
    return area_unit_price(
        item.width,
        item.height,
        item.unit_measure or MeasureUnit.CM,
        item.area_price,
        item.finishing_price,
    )
