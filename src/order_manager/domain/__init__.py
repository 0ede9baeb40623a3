"""Domain models for Gestor Pro."""

from order_manager.domain.models import (
    Client,
    DiscountType,
    Expense,
    MeasureUnit,
    Order,
    OrderItem,
    OrderStatus,
    PricingType,
    Product,
    Settings,
)

__all__ = [
    "Client",
    "DiscountType",
    "Expense",
    "MeasureUnit",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PricingType",
    "Product",
    "Settings",
]
