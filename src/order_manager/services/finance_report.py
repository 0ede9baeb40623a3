"""Monthly financial aggregation for the dashboard and the printed report."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Sequence

from order_manager.domain.models import Expense, Order, OrderStatus, Settings
from order_manager.logging_config import get_logger
from order_manager.services.periods import Period, parse_record_date
from order_manager.services.pricing import OrderTotals, compute_order_totals

logger = get_logger(__name__)


@dataclass(frozen=True)
class DailyEntry:
    day: int
    revenue: float
    profit: float


@dataclass(frozen=True)
class DataIssue:
    """A record left out of a report because its data could not be used."""

    kind: str
    record_id: Optional[str]
    value: object
    message: str


@dataclass(frozen=True)
class MonthlyReport:
    period: Period
    total_revenue: float
    total_cost_goods: float
    total_freight_cost: float
    total_expenses: float
    net_profit: float
    margin: float
    order_count: int
    daily_series: tuple[DailyEntry, ...]
    expenses_by_category: dict[str, float] = field(default_factory=dict)
    issues: tuple[DataIssue, ...] = ()

    @property
    def operational_profit(self) -> float:
        return self.total_revenue - (self.total_cost_goods + self.total_freight_cost)


@dataclass(frozen=True)
class OrdersSummary:
    count: int
    total_revenue: float
    total_profit: float


def _order_day(order: Order, issues: list[DataIssue]) -> Optional[date]:
    day = parse_record_date(order.date)
    if day is None:
        issues.append(
            DataIssue(
                kind="order",
                record_id=order.id,
                value=order.date,
                message="Pedido com data inválida ignorado no relatório.",
            )
        )
    return day


def _expense_day(expense: Expense, issues: list[DataIssue]) -> Optional[date]:
    day = parse_record_date(expense.date)
    if day is None:
        issues.append(
            DataIssue(
                kind="expense",
                record_id=None if expense.id is None else str(expense.id),
                value=expense.date,
                message="Despesa com data inválida ignorada no relatório.",
            )
        )
    return day


def eligible_orders(
    orders: Iterable[Order],
    settings: Settings,
    period: Period,
    issues: Optional[list[DataIssue]] = None,
) -> list[tuple[date, Order]]:
    """Orders of the period whose status counts as a sale, with their day."""
    issues = issues if issues is not None else []
    selected: list[tuple[date, Order]] = []
    for order in orders:
        day = _order_day(order, issues)
        if day is None or not period.contains(day):
            continue
        if settings.counts_as_sale(order.status):
            selected.append((day, order))
    return selected


def eligible_expenses(
    expenses: Iterable[Expense],
    period: Period,
    issues: Optional[list[DataIssue]] = None,
) -> list[Expense]:
    issues = issues if issues is not None else []
    selected: list[Expense] = []
    for expense in expenses:
        day = _expense_day(expense, issues)
        if day is not None and period.contains(day):
            selected.append(expense)
    return selected


def compute_monthly_report(
    orders: Sequence[Order],
    expenses: Sequence[Expense],
    settings: Settings,
    period: Period,
) -> MonthlyReport:
    """Roll orders and expenses of one month into summary metrics.

    Cost of goods is the item cost of each order; freight only counts as a
    cost for orders where it was not charged to the customer. The daily
    series always has one entry per calendar day of the month.
    """
    issues: list[DataIssue] = []
    month_orders = eligible_orders(orders, settings, period, issues)
    month_expenses = eligible_expenses(expenses, period, issues)

    total_revenue = 0.0
    total_cost_goods = 0.0
    total_freight_cost = 0.0
    daily_revenue = [0.0] * period.days_in_month
    daily_profit = [0.0] * period.days_in_month

    for day, order in month_orders:
        totals = compute_order_totals(
            order, clamp_discount=settings.clamp_discount_to_subtotal
        )
        total_revenue += totals.total_revenue
        total_cost_goods += totals.item_cost
        total_freight_cost += totals.freight_cost
        daily_revenue[day.day - 1] += totals.total_revenue
        daily_profit[day.day - 1] += totals.profit

    total_expenses = 0.0
    expenses_by_category: dict[str, float] = {}
    for expense in month_expenses:
        total_expenses += expense.amount
        expenses_by_category[expense.category] = (
            expenses_by_category.get(expense.category, 0.0) + expense.amount
        )

    net_profit = total_revenue - (total_cost_goods + total_freight_cost + total_expenses)
    margin = (net_profit / total_revenue) * 100 if total_revenue > 0 else 0.0

    for issue in issues:
        logger.warning(
            "Skipping %s %s with unusable date %r", issue.kind, issue.record_id, issue.value
        )

    return MonthlyReport(
        period=period,
        total_revenue=total_revenue,
        total_cost_goods=total_cost_goods,
        total_freight_cost=total_freight_cost,
        total_expenses=total_expenses,
        net_profit=net_profit,
        margin=margin,
        order_count=len(month_orders),
        daily_series=tuple(
            DailyEntry(day=index + 1, revenue=revenue, profit=profit)
            for index, (revenue, profit) in enumerate(zip(daily_revenue, daily_profit))
        ),
        expenses_by_category=expenses_by_category,
        issues=tuple(issues),
    )


def summarize_orders(orders: Iterable[Order], settings: Settings) -> OrdersSummary:
    """Totals for an order listing, skipping canceled orders."""
    count = 0
    revenue = 0.0
    profit = 0.0
    for order in orders:
        if order.status == OrderStatus.CANCELED:
            continue
        totals: OrderTotals = compute_order_totals(
            order, clamp_discount=settings.clamp_discount_to_subtotal
        )
        count += 1
        revenue += totals.total_revenue
        profit += totals.profit
    return OrdersSummary(count=count, total_revenue=revenue, total_profit=profit)
