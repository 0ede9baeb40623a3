"""Domain dataclasses and enums."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional


class OrderStatus(str, Enum):
    DRAFT = "draft"
    QUOTE = "quote"
    APPROVED = "approved"
    IN_PRODUCTION = "in_production"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELED = "canceled"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @classmethod
    def coerce(cls, value: str | OrderStatus) -> OrderStatus:
        """Accept a member, its value, its name or the legacy display label."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for status in cls:
            if text in (status.value, status.name, status.label):
                return status
        raise ValueError(f"Status de pedido desconhecido: {value!r}")


_STATUS_LABELS = {
    OrderStatus.DRAFT: "Rascunho",
    OrderStatus.QUOTE: "Orçamento",
    OrderStatus.APPROVED: "Aprovado",
    OrderStatus.IN_PRODUCTION: "Em Produção",
    OrderStatus.READY: "Pronto",
    OrderStatus.DELIVERED: "Entregue",
    OrderStatus.CANCELED: "Cancelado",
}


class DiscountType(str, Enum):
    MONEY = "money"
    PERCENTAGE = "percentage"


class PricingType(str, Enum):
    UNIT = "unit"
    AREA = "area"


class MeasureUnit(str, Enum):
    MM = "mm"
    CM = "cm"
    M = "m"


EXPENSE_CATEGORIES = (
    "Tráfego Pago",
    "Internet/Tel",
    "Embalagem",
    "Fornecedor",
    "Aluguel",
    "Impostos",
    "Outros",
)

DEFAULT_SALE_STATUSES = frozenset(
    {
        OrderStatus.DELIVERED,
        OrderStatus.APPROVED,
        OrderStatus.READY,
        OrderStatus.IN_PRODUCTION,
    }
)
DEFAULT_PAYMENT_METHODS = ("Pix", "Cartão de Crédito (Link)")
DEFAULT_QUOTE_TERMS = (
    "Pagamento: 50% na aprovação e 50% na entrega.\n"
    "Prazo de entrega a combinar."
)


@dataclass(slots=True)
class Client:
    id: Optional[int]
    name: str
    whatsapp: Optional[str] = None
    email: Optional[str] = None
    doc: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


@dataclass(slots=True)
class Product:
    id: Optional[int]
    name: str
    price: float
    cost: float
    unit: str = "UN"
    code: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    active: bool = True


@dataclass(slots=True)
class OrderItem:
    quantity: float
    unit_price: float
    unit_cost: float
    id: Optional[int] = None
    product_id: Optional[int] = None
    name: str = ""
    description: str = ""
    item_unit: Optional[str] = None
    pricing_type: PricingType = PricingType.UNIT
    width: Optional[float] = None
    height: Optional[float] = None
    unit_measure: Optional[MeasureUnit] = None
    area_price: Optional[float] = None
    finishing_price: Optional[float] = None

    @property
    def line_revenue(self) -> float:
        return self.quantity * self.unit_price

    @property
    def line_cost(self) -> float:
        return self.quantity * self.unit_cost


@dataclass(slots=True)
class Order:
    id: Optional[str]
    client_id: Optional[int]
    date: str
    status: OrderStatus = OrderStatus.DRAFT
    items: list[OrderItem] = field(default_factory=list)
    freight_price: float = 0.0
    freight_charged_to_customer: bool = True
    discount: float = 0.0
    discount_type: DiscountType = DiscountType.MONEY
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    external_production_link: Optional[str] = None
    tracking_code: Optional[str] = None
    tracking_url: Optional[str] = None


@dataclass(slots=True)
class Expense:
    id: Optional[int]
    date: str
    category: str
    description: Optional[str]
    amount: float
    recurrent: bool = False
    created_at: Optional[str] = None


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


@dataclass(frozen=True)
class Settings:
    """Workspace configuration, resolved once when loaded."""

    company_name: str = "Minha Empresa"
    company_doc: str = ""
    company_address: str = ""
    company_contact: str = ""
    logo_url: str = ""
    quote_validity_days: int = 15
    quote_terms: str = DEFAULT_QUOTE_TERMS
    statuses_considered_sale: frozenset[OrderStatus] = frozenset()
    next_order_number: int = 1
    payment_methods: tuple[str, ...] = DEFAULT_PAYMENT_METHODS
    clamp_discount_to_subtotal: bool = False

    def counts_as_sale(self, status: str | OrderStatus) -> bool:
        """The single sale rule: canceled never counts, whatever is configured."""
        try:
            status = OrderStatus.coerce(status)
        except ValueError:
            return False
        return status != OrderStatus.CANCELED and status in self.statuses_considered_sale

    @classmethod
    def seeded(cls) -> Settings:
        """Settings written when a workspace is created.

        Stored settings without a sale-status list count no order as a sale;
        only a new workspace starts from the usual production statuses.
        """
        return cls(statuses_considered_sale=DEFAULT_SALE_STATUSES)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> Settings:
        """Build settings from stored data, accepting legacy camelCase keys."""
        if not data:
            return cls()
        defaults = cls()

        raw_statuses = _pick(data, "statuses_considered_sale", "statusesConsideredSale")
        statuses = frozenset(_coerce_statuses(raw_statuses or ()))

        raw_methods = _pick(data, "payment_methods", "paymentMethods")
        methods = (
            tuple(str(method) for method in raw_methods)
            if raw_methods
            else defaults.payment_methods
        )

        validity = _pick(data, "quote_validity_days", "quoteValidityDays")
        next_number = _pick(data, "next_order_number", "nextOrderNumber")
        clamp = _pick(data, "clamp_discount_to_subtotal", "clampDiscountToSubtotal")

        return cls(
            company_name=str(
                _pick(data, "company_name", "companyName") or defaults.company_name
            ),
            company_doc=str(_pick(data, "company_doc", "companyDoc") or ""),
            company_address=str(_pick(data, "company_address", "companyAddress") or ""),
            company_contact=str(_pick(data, "company_contact", "companyContact") or ""),
            logo_url=str(_pick(data, "logo_url", "logoUrl") or ""),
            quote_validity_days=int(validity)
            if validity is not None
            else defaults.quote_validity_days,
            quote_terms=str(_pick(data, "quote_terms", "quoteTerms") or defaults.quote_terms),
            statuses_considered_sale=statuses,
            next_order_number=max(int(next_number or 1), 1),
            payment_methods=methods,
            clamp_discount_to_subtotal=bool(clamp) if clamp is not None else False,
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "company_name": self.company_name,
            "company_doc": self.company_doc,
            "company_address": self.company_address,
            "company_contact": self.company_contact,
            "logo_url": self.logo_url,
            "quote_validity_days": self.quote_validity_days,
            "quote_terms": self.quote_terms,
            "statuses_considered_sale": sorted(
                status.value for status in self.statuses_considered_sale
            ),
            "next_order_number": self.next_order_number,
            "payment_methods": list(self.payment_methods),
            "clamp_discount_to_subtotal": self.clamp_discount_to_subtotal,
        }


def _coerce_statuses(values: Iterable[Any]) -> Iterable[OrderStatus]:
    for value in values:
        try:
            yield OrderStatus.coerce(value)
        except ValueError:
            continue
