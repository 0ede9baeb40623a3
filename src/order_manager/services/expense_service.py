"""Expense service for business rules."""

from __future__ import annotations

from typing import Optional

from order_manager.domain.models import EXPENSE_CATEGORIES, Expense
from order_manager.repositories.store import WorkspaceStore
from order_manager.services.errors import NotFoundError, ValidationError
from order_manager.services.events import DataEventBus
from order_manager.services.periods import Period, parse_record_date


class ExpenseService:
    """Service for expense operations."""

    def __init__(
        self, store: WorkspaceStore, data_bus: Optional[DataEventBus] = None
    ) -> None:
        self._repo = store.expenses
        self._data_bus = data_bus

    def _notify(self) -> None:
        if self._data_bus is not None:
            self._data_bus.data_changed()

    def list_expenses(self, period: Optional[Period] = None) -> list[Expense]:
        if period is None:
            return self._repo.list_all()
        return self._repo.list_by_period(period.start.isoformat(), period.end.isoformat())

    def list_categories(self) -> list[str]:
        """Suggested categories first, then any other category already used."""
        used = [
            category
            for category in self._repo.list_categories()
            if category not in EXPENSE_CATEGORIES
        ]
        return [*EXPENSE_CATEGORIES, *used]

    def create_expense(
        self,
        date: str,
        category: Optional[str],
        description: Optional[str],
        amount: float,
        recurrent: bool = False,
    ) -> Expense:
        self._validate(date, amount)
        expense = self._repo.create(
            Expense(
                id=None,
                date=date,
                category=(category or "").strip() or "Outros",
                description=description,
                amount=amount,
                recurrent=recurrent,
            )
        )
        self._notify()
        return expense

    def update_expense(self, expense: Expense) -> bool:
        self._validate(expense.date, expense.amount)
        if expense.id is None or not self._repo.get_by_id(expense.id):
            raise NotFoundError("Despesa não encontrada.")
        expense.category = (expense.category or "").strip() or "Outros"
        updated = self._repo.update(expense)
        self._notify()
        return updated

    def delete_expense(self, expense_id: int) -> bool:
        existing = self._repo.get_by_id(expense_id)
        if not existing:
            raise NotFoundError("Despesa não encontrada.")
        deleted = self._repo.delete(expense_id)
        self._notify()
        return deleted

    def _validate(self, date: str, amount: float) -> None:
        if not date:
            raise ValidationError("A data da despesa é obrigatória.", "date")
        if parse_record_date(date) is None:
            raise ValidationError("A data da despesa é inválida.", "date")
        if amount < 0:
            raise ValidationError("O valor da despesa não pode ser negativo.", "amount")
