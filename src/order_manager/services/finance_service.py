"""Finance service feeding the dashboard and the printed monthly report."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from order_manager.domain.models import Expense, Order
from order_manager.logging_config import get_logger
from order_manager.repositories.store import WorkspaceStore
from order_manager.services.events import DataEventBus
from order_manager.services.finance_report import (
    MonthlyReport,
    compute_monthly_report,
    eligible_expenses,
    eligible_orders,
)
from order_manager.services.periods import Period


@dataclass(frozen=True)
class ReportDetail:
    """A report together with the rows it was computed from."""

    report: MonthlyReport
    orders: list[Order]
    expenses: list[Expense]


class FinanceService:
    """Loads workspace data and computes monthly reports, cached per period."""

    def __init__(
        self, store: WorkspaceStore, data_bus: Optional[DataEventBus] = None
    ) -> None:
        self._store = store
        self._logger = get_logger(self.__class__.__name__)
        self._cache: dict[Period, MonthlyReport] = {}
        if data_bus is not None:
            data_bus.subscribe(self.invalidate)

    def monthly_report(self, period: Period) -> MonthlyReport:
        cached = self._cache.get(period)
        if cached is not None:
            return cached
        orders = self._store.list_orders()
        expenses = self._store.list_expenses()
        settings = self._store.get_settings()
        report = compute_monthly_report(orders, expenses, settings, period)
        self._logger.info(
            "Report %s: %s orders, revenue %.2f, net profit %.2f",
            period.key,
            report.order_count,
            report.total_revenue,
            report.net_profit,
        )
        if report.issues:
            self._logger.warning(
                "Report %s skipped %s records with invalid dates",
                period.key,
                len(report.issues),
            )
        self._cache[period] = report
        return report

    def report_detail(self, period: Period) -> ReportDetail:
        settings = self._store.get_settings()
        orders = [
            order
            for _day, order in eligible_orders(self._store.list_orders(), settings, period)
        ]
        expenses = eligible_expenses(self._store.list_expenses(), period)
        return ReportDetail(
            report=self.monthly_report(period),
            orders=orders,
            expenses=expenses,
        )

    def invalidate(self) -> None:
        """Drop cached reports after orders, expenses or settings change."""
        self._cache.clear()
