"""Row and payload mappers for domain models."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, Mapping, Optional

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
)


def _row_value(row: sqlite3.Row, key: str) -> Any:
    return row[key] if key in row.keys() else None


def _payload_value(data: Mapping[str, Any], snake: str, camel: Optional[str] = None) -> Any:
    if snake in data and data[snake] is not None:
        return data[snake]
    if camel and camel in data:
        return data[camel]
    return None


def _float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    return float(value)


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _measure_unit(value: Any) -> Optional[MeasureUnit]:
    if not value:
        return None
    try:
        return MeasureUnit(value)
    except ValueError:
        return None


def _pricing_type(value: Any) -> PricingType:
    try:
        return PricingType(value or PricingType.UNIT.value)
    except ValueError:
        return PricingType.UNIT


def client_from_row(row: sqlite3.Row) -> Client:
    return Client(
        id=_row_value(row, "id"),
        name=row["name"],
        whatsapp=_row_value(row, "whatsapp"),
        email=_row_value(row, "email"),
        doc=_row_value(row, "doc"),
        address=_row_value(row, "address"),
        notes=_row_value(row, "notes"),
    )


def product_from_row(row: sqlite3.Row) -> Product:
    return Product(
        id=_row_value(row, "id"),
        name=row["name"],
        price=float(row["price"]),
        cost=float(row["cost"]),
        unit=_row_value(row, "unit") or "UN",
        code=_row_value(row, "code"),
        image=_row_value(row, "image"),
        description=_row_value(row, "description"),
        category=_row_value(row, "category"),
        active=bool(row["active"]),
    )


def order_item_from_row(row: sqlite3.Row) -> OrderItem:
    return OrderItem(
        id=_row_value(row, "id"),
        product_id=_row_value(row, "product_id"),
        name=_row_value(row, "name") or "",
        description=_row_value(row, "description") or "",
        item_unit=_row_value(row, "item_unit"),
        quantity=float(row["quantity"]),
        unit_price=float(row["unit_price"]),
        unit_cost=float(row["unit_cost"]),
        pricing_type=_pricing_type(_row_value(row, "pricing_type")),
        width=_row_value(row, "width"),
        height=_row_value(row, "height"),
        unit_measure=_measure_unit(_row_value(row, "unit_measure")),
        area_price=_row_value(row, "area_price"),
        finishing_price=_row_value(row, "finishing_price"),
    )


def order_item_to_record(item: OrderItem) -> Dict[str, Any]:
    return {
        "product_id": item.product_id,
        "name": item.name,
        "description": item.description,
        "item_unit": item.item_unit,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "unit_cost": item.unit_cost,
        "pricing_type": PricingType(item.pricing_type).value,
        "width": item.width,
        "height": item.height,
        "unit_measure": item.unit_measure.value if item.unit_measure else None,
        "area_price": item.area_price,
        "finishing_price": item.finishing_price,
    }


def order_from_row(row: sqlite3.Row, items: list[OrderItem]) -> Order:
    return Order(
        id=row["id"],
        client_id=_row_value(row, "client_id"),
        date=row["date"],
        status=OrderStatus(row["status"]),
        items=items,
        freight_price=float(row["freight_price"]),
        freight_charged_to_customer=bool(row["freight_charged_to_customer"]),
        discount=float(row["discount"]),
        discount_type=DiscountType(row["discount_type"]),
        payment_method=_row_value(row, "payment_method"),
        notes=_row_value(row, "notes"),
        created_at=_row_value(row, "created_at"),
        external_production_link=_row_value(row, "external_production_link"),
        tracking_code=_row_value(row, "tracking_code"),
        tracking_url=_row_value(row, "tracking_url"),
    )


def order_to_record(order: Order) -> Dict[str, Any]:
    return {
        "id": order.id,
        "client_id": order.client_id,
        "date": order.date,
        "status": OrderStatus.coerce(order.status).value,
        "freight_price": order.freight_price,
        "freight_charged_to_customer": int(order.freight_charged_to_customer),
        "discount": order.discount,
        "discount_type": DiscountType(order.discount_type).value,
        "payment_method": order.payment_method,
        "notes": order.notes,
        "external_production_link": order.external_production_link,
        "tracking_code": order.tracking_code,
        "tracking_url": order.tracking_url,
        "created_at": order.created_at,
    }


def expense_from_row(row: sqlite3.Row) -> Expense:
    return Expense(
        id=_row_value(row, "id"),
        date=row["date"],
        category=row["category"],
        description=_row_value(row, "description"),
        amount=float(row["amount"]),
        recurrent=bool(_row_value(row, "recurrent") or 0),
        created_at=_row_value(row, "created_at"),
    )


def client_from_payload(data: Mapping[str, Any]) -> Client:
    return Client(
        id=None,
        name=str(data.get("name") or "Cliente"),
        whatsapp=data.get("whatsapp"),
        email=data.get("email"),
        doc=data.get("doc"),
        address=data.get("address"),
        notes=data.get("notes"),
    )


def product_from_payload(data: Mapping[str, Any]) -> Product:
    return Product(
        id=None,
        name=str(data.get("name") or "Produto"),
        price=_float(data.get("price")),
        cost=_float(data.get("cost")),
        unit=str(data.get("unit") or "UN"),
        code=data.get("code"),
        image=data.get("image"),
        description=data.get("description"),
        category=data.get("category"),
        active=bool(data.get("active", True)),
    )


def order_item_from_payload(data: Mapping[str, Any]) -> OrderItem:
    return OrderItem(
        product_id=_optional_int(_payload_value(data, "product_id", "productId")),
        name=str(data.get("name") or ""),
        description=str(data.get("description") or ""),
        item_unit=_payload_value(data, "item_unit", "itemUnit"),
        quantity=_float(data.get("quantity"), 1.0),
        unit_price=_float(_payload_value(data, "unit_price", "unitPrice")),
        unit_cost=_float(_payload_value(data, "unit_cost", "unitCost")),
        pricing_type=_pricing_type(_payload_value(data, "pricing_type", "pricingType")),
        width=_optional_float(data.get("width")),
        height=_optional_float(data.get("height")),
        unit_measure=_measure_unit(_payload_value(data, "unit_measure", "unitMeasure")),
        area_price=_optional_float(_payload_value(data, "area_price", "areaPrice")),
        finishing_price=_optional_float(
            _payload_value(data, "finishing_price", "finishingPrice")
        ),
    )


def order_from_payload(
    data: Mapping[str, Any], client_id: Optional[int] = None
) -> Order:
    """Build an order from an exported JSON record (camelCase or snake_case)."""
    charged = _payload_value(data, "freight_charged_to_customer", "freightChargedToCustomer")
    return Order(
        id=str(data["id"]),
        client_id=client_id,
        date=str(data.get("date") or ""),
        status=OrderStatus.coerce(data.get("status") or OrderStatus.DRAFT),
        items=[order_item_from_payload(item) for item in data.get("items") or []],
        freight_price=_float(_payload_value(data, "freight_price", "freightPrice")),
        freight_charged_to_customer=True if charged is None else bool(charged),
        discount=_float(data.get("discount")),
        discount_type=DiscountType(
            _payload_value(data, "discount_type", "discountType") or DiscountType.MONEY
        ),
        payment_method=_payload_value(data, "payment_method", "paymentMethod"),
        notes=data.get("notes"),
        created_at=_payload_value(data, "created_at", "createdAt"),
        external_production_link=_payload_value(
            data, "external_production_link", "externalProductionLink"
        ),
        tracking_code=_payload_value(data, "tracking_code", "trackingCode"),
        tracking_url=_payload_value(data, "tracking_url", "trackingUrl"),
    )


def expense_from_payload(data: Mapping[str, Any]) -> Expense:
    return Expense(
        id=None,
        date=str(data.get("date") or ""),
        category=str(data.get("category") or "Outros"),
        description=data.get("description"),
        amount=_float(data.get("amount")),
        recurrent=bool(data.get("recurrent", False)),
    )
