import sqlite3

import pytest

from order_manager.domain.models import (
    Client,
    DiscountType,
    MeasureUnit,
    Order,
    OrderItem,
    OrderStatus,
    PricingType,
    Settings,
)
from order_manager.services.errors import NotFoundError, ValidationError
from order_manager.services.events import DataEventBus
from order_manager.services.periods import Period

MAY = Period(2024, 5)


def test_new_orders_get_sequential_padded_numbers(services, make_order):
    first = services.order_service.create_order(make_order(None))
    second = services.order_service.create_order(make_order(None))
    assert (first.id, second.id) == ("0001", "0002")
    assert services.store.get_settings().next_order_number == 3


def test_numbering_skips_ids_already_taken(services, make_order):
    services.order_service.create_order(make_order("0001"))
    created = services.order_service.create_order(make_order(None))
    assert created.id == "0002"


def test_numbering_starts_from_configured_number(services, make_order):
    services.store.settings.save(Settings(next_order_number=120))
    created = services.order_service.create_order(make_order(None))
    assert created.id == "0120"


def test_duplicate_order_number_is_rejected(services, make_order):
    services.order_service.create_order(make_order("0005"))
    with pytest.raises(ValidationError) as excinfo:
        services.order_service.create_order(make_order("0005"))
    assert excinfo.value.field == "id"


@pytest.mark.parametrize(
    ("changes", "field"),
    [
        ({"date": "ontem"}, "date"),
        ({"freight_price": -1.0}, "freight_price"),
        ({"discount": -5.0}, "discount"),
        ({"discount": 120.0, "discount_type": DiscountType.PERCENTAGE}, "discount"),
        ({"client_id": 999}, "client_id"),
        ({"items": [OrderItem(quantity=0, unit_price=1.0, unit_cost=0.0)]}, "quantity"),
        ({"items": [OrderItem(quantity=1, unit_price=-1.0, unit_cost=0.0)]}, "unit_price"),
    ],
)
def test_invalid_orders_are_rejected(services, make_order, changes, field):
    order = make_order(None)
    for name, value in changes.items():
        setattr(order, name, value)
    with pytest.raises(ValidationError) as excinfo:
        services.order_service.create_order(order)
    assert excinfo.value.field == field
    assert services.order_service.list_orders() == []


def test_area_items_are_priced_on_entry(services, make_order):
    item = OrderItem(
        quantity=2,
        unit_price=0.0,
        unit_cost=4.0,
        pricing_type=PricingType.AREA,
        width=100,
        height=100,
        unit_measure=MeasureUnit.CM,
        area_price=50.0,
    )
    created = services.order_service.create_order(make_order(None, items=[item]))
    totals = services.order_service.get_totals(created.id)
    assert created.items[0].unit_price == pytest.approx(50.0)
    assert totals.subtotal == pytest.approx(100.0)


def test_order_with_existing_client(services, make_order):
    client = services.store.clients.create(Client(id=None, name="Ana"))
    order = make_order(None)
    order.client_id = client.id
    created = services.order_service.create_order(order)
    assert services.order_service.get_order(created.id).client_id == client.id


def test_set_status_accepts_any_transition(services, make_order):
    services.order_service.create_order(make_order("0001", status=OrderStatus.DELIVERED))
    assert services.order_service.set_status("0001", "draft").status is OrderStatus.DRAFT
    assert (
        services.order_service.set_status("0001", "Cancelado").status
        is OrderStatus.CANCELED
    )


def test_set_status_errors(services, make_order):
    with pytest.raises(NotFoundError):
        services.order_service.set_status("9999", "ready")
    services.order_service.create_order(make_order("0001"))
    with pytest.raises(ValidationError):
        services.order_service.set_status("0001", "shipped")


def test_update_and_delete_order(services, make_order):
    order = services.order_service.create_order(make_order(None))
    order.discount = 10.0
    services.order_service.update_order(order)
    assert services.order_service.get_totals(order.id).total_revenue == pytest.approx(90.0)
    assert services.order_service.delete_order(order.id) is True
    with pytest.raises(NotFoundError):
        services.order_service.get_order(order.id)
    with pytest.raises(NotFoundError):
        services.order_service.update_order(Order(id="4242", client_id=None, date="2024-05-01"))


def test_list_orders_by_period(services, make_order):
    services.order_service.create_order(make_order("0001", date="2024-05-05"))
    services.order_service.create_order(make_order("0002", date="2024-06-05"))
    assert [order.id for order in services.order_service.list_orders(MAY)] == ["0001"]
    assert len(services.order_service.list_orders()) == 2


def test_expense_service_validation_and_defaults(services):
    expense = services.expense_service.create_expense("2024-05-02", "", "Fita", 12.0)
    assert expense.id is not None
    assert expense.category == "Outros"
    with pytest.raises(ValidationError) as excinfo:
        services.expense_service.create_expense("2024-05-02", "Aluguel", None, -1.0)
    assert excinfo.value.field == "amount"
    with pytest.raises(ValidationError):
        services.expense_service.create_expense("", "Aluguel", None, 1.0)
    with pytest.raises(ValidationError):
        services.expense_service.create_expense("02/05/2024", "Aluguel", None, 1.0)


def test_expense_categories_list_suggestions_first(services):
    services.expense_service.create_expense("2024-05-02", "Correios", None, 5.0)
    services.expense_service.create_expense("2024-05-03", "Aluguel", None, 5.0)
    categories = services.expense_service.list_categories()
    assert categories[0] == "Tráfego Pago"
    assert categories[-1] == "Correios"
    assert categories.count("Aluguel") == 1


def test_expense_update_and_delete(services):
    expense = services.expense_service.create_expense("2024-05-02", "Aluguel", None, 5.0)
    expense.amount = 7.0
    assert services.expense_service.update_expense(expense) is True
    assert services.expense_service.list_expenses(MAY)[0].amount == pytest.approx(7.0)
    assert services.expense_service.delete_expense(expense.id) is True
    with pytest.raises(NotFoundError):
        services.expense_service.delete_expense(expense.id)


def test_finance_report_is_cached_until_data_changes(services, make_order):
    services.order_service.create_order(make_order("0001"))
    first = services.finance_service.monthly_report(MAY)
    assert services.finance_service.monthly_report(MAY) is first

    services.expense_service.create_expense("2024-05-02", "Aluguel", None, 30.0)
    second = services.finance_service.monthly_report(MAY)
    assert second is not first
    assert second.net_profit == pytest.approx(30.0)
    assert second.margin == pytest.approx(30.0)

    services.order_service.set_status("0001", OrderStatus.CANCELED)
    assert services.finance_service.monthly_report(MAY).order_count == 0


def test_report_detail_lists_source_rows(services, make_order):
    services.order_service.create_order(make_order("0001"))
    services.order_service.create_order(make_order("0002", status=OrderStatus.QUOTE))
    services.expense_service.create_expense("2024-05-02", "Aluguel", None, 30.0)
    services.expense_service.create_expense("2024-04-02", "Aluguel", None, 99.0)
    detail = services.finance_service.report_detail(MAY)
    assert [order.id for order in detail.orders] == ["0001"]
    assert [expense.amount for expense in detail.expenses] == [30.0]
    assert detail.report.order_count == 1


def test_event_bus_delivers_to_every_subscriber():
    bus = DataEventBus()
    calls = []
    bus.subscribe(lambda: calls.append("a"))
    bus.subscribe(lambda: calls.append("b"))
    bus.data_changed()
    assert calls == ["a", "b"]


def test_failed_save_does_not_consume_an_order_number(services, make_order, monkeypatch):
    def fail_save(order):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(services.store.orders, "save", fail_save)
    order = make_order(None)
    with pytest.raises(sqlite3.OperationalError):
        services.order_service.create_order(order)
    assert order.id is None
    assert services.store.get_settings().next_order_number == 1

    monkeypatch.undo()
    created = services.order_service.create_order(make_order(None))
    assert created.id == "0001"
    assert services.store.get_settings().next_order_number == 2


def test_list_orders_by_status(services, make_order):
    services.order_service.create_order(make_order("0001", status=OrderStatus.APPROVED))
    services.order_service.create_order(make_order("0002", status=OrderStatus.QUOTE))
    services.order_service.create_order(
        make_order("0003", date="2024-06-02", status=OrderStatus.APPROVED)
    )
    approved = services.order_service.list_orders(status="Aprovado")
    assert [order.id for order in approved] == ["0001", "0003"]
    in_may = services.order_service.list_orders(MAY, OrderStatus.APPROVED)
    assert [order.id for order in in_may] == ["0001"]
    with pytest.raises(ValidationError) as excinfo:
        services.order_service.list_orders(status="shipped")
    assert excinfo.value.field == "status"


def test_tracking_marks_steps_up_to_current_status(services, make_order):
    services.order_service.create_order(
        make_order(
            "0001",
            status=OrderStatus.IN_PRODUCTION,
            tracking_code="BR123",
            tracking_url="https://rastreio.example/BR123",
        )
    )
    tracking = services.order_service.get_tracking("0001")
    assert tracking.headline == "Em Aberto"
    assert [step.done for step in tracking.steps] == [True, True, False, False]
    assert [step.current for step in tracking.steps] == [False, True, False, False]
    assert tracking.tracking_code == "BR123"
    assert tracking.tracking_url == "https://rastreio.example/BR123"
    assert tracking.external_production_link is None


def test_tracking_of_quotes_and_canceled_orders(services, make_order):
    services.order_service.create_order(make_order("0001", status=OrderStatus.QUOTE))
    services.order_service.create_order(make_order("0002", status=OrderStatus.CANCELED))
    quote = services.order_service.get_tracking("0001")
    assert not any(step.done for step in quote.steps)
    assert len(quote.steps) == 4
    canceled = services.order_service.get_tracking("0002")
    assert canceled.canceled
    assert canceled.headline == "Cancelado"
    assert canceled.steps == ()
    with pytest.raises(NotFoundError):
        services.order_service.get_tracking("9999")


def test_new_workspace_is_seeded_once(services):
    settings_service = services.settings_service
    assert settings_service.get() == Settings.seeded()
    settings_service.set_sale_statuses([])
    assert settings_service.initialize_workspace() is False
    assert settings_service.get().statuses_considered_sale == frozenset()


def test_settings_update_and_validation(services):
    settings_service = services.settings_service
    updated = settings_service.update(
        company_name="Gráfica Azul", payment_methods=[" Pix ", "", "Boleto"]
    )
    assert updated.company_name == "Gráfica Azul"
    assert updated.payment_methods == ("Pix", "Boleto")
    assert services.store.get_settings().company_name == "Gráfica Azul"

    with pytest.raises(ValidationError) as excinfo:
        settings_service.update(company_name="  ")
    assert excinfo.value.field == "company_name"
    with pytest.raises(ValidationError):
        settings_service.update(next_order_number=0)
    with pytest.raises(ValidationError):
        settings_service.update(theme="dark")
    assert services.store.get_settings().company_name == "Gráfica Azul"


def test_toggling_sale_statuses(services):
    settings_service = services.settings_service
    removed = settings_service.toggle_sale_status("ready")
    assert OrderStatus.READY not in removed.statuses_considered_sale
    added = settings_service.toggle_sale_status(OrderStatus.READY)
    assert OrderStatus.READY in added.statuses_considered_sale
    with pytest.raises(ValidationError) as excinfo:
        settings_service.toggle_sale_status("shipped")
    assert excinfo.value.field == "statuses_considered_sale"
    with pytest.raises(ValidationError):
        settings_service.set_sale_statuses(["approved", "shipped"])


def test_settings_changes_refresh_the_cached_report(services, make_order):
    services.order_service.create_order(make_order("0001", status=OrderStatus.APPROVED))
    first = services.finance_service.monthly_report(MAY)
    assert first.order_count == 1

    services.settings_service.set_sale_statuses([OrderStatus.DELIVERED])
    assert services.finance_service.monthly_report(MAY).order_count == 0

    services.settings_service.toggle_sale_status("approved")
    assert services.finance_service.monthly_report(MAY).order_count == 1
