import logging
from dataclasses import replace

import pytest

from order_manager.domain.models import (
    DiscountType,
    Expense,
    OrderItem,
    OrderStatus,
    Settings,
)
from order_manager.services.finance_report import (
    compute_monthly_report,
    eligible_orders,
    summarize_orders,
)
from order_manager.services.periods import Period

MAY = Period(2024, 5)


def _expense(date: str, amount: float, category: str = "Outros", expense_id: int = 1) -> Expense:
    return Expense(id=expense_id, date=date, category=category, description=None, amount=amount)


@pytest.mark.parametrize(
    ("period", "days"),
    [(Period(2024, 2), 29), (Period(2023, 2), 28), (Period(2024, 4), 30), (MAY, 31)],
)
def test_empty_report_has_one_entry_per_day(period, days):
    report = compute_monthly_report([], [], Settings.seeded(), period)
    assert len(report.daily_series) == days
    assert [entry.day for entry in report.daily_series] == list(range(1, days + 1))
    assert all(entry.revenue == 0 and entry.profit == 0 for entry in report.daily_series)
    assert report.total_revenue == 0
    assert report.net_profit == 0
    assert report.margin == 0
    assert report.order_count == 0
    assert report.expenses_by_category == {}


def test_single_order_and_expense(make_order):
    report = compute_monthly_report(
        [make_order()], [_expense("2024-05-03", 30.0)], Settings.seeded(), MAY
    )
    assert report.total_revenue == pytest.approx(100.0)
    assert report.total_cost_goods == pytest.approx(40.0)
    assert report.total_freight_cost == 0
    assert report.total_expenses == pytest.approx(30.0)
    assert report.net_profit == pytest.approx(30.0)
    assert report.margin == pytest.approx(30.0)
    assert report.order_count == 1
    assert report.operational_profit == pytest.approx(60.0)


def test_canceled_orders_never_count_even_when_configured(make_order):
    settings = Settings(
        statuses_considered_sale=frozenset({OrderStatus.CANCELED, OrderStatus.DELIVERED})
    )
    orders = [
        make_order("0001"),
        make_order("0002", status=OrderStatus.CANCELED),
    ]
    report = compute_monthly_report(orders, [], settings, MAY)
    assert report.order_count == 1
    assert report.total_revenue == pytest.approx(100.0)


def test_statuses_outside_sale_set_are_ignored(make_order):
    orders = [
        make_order("0001", status=OrderStatus.QUOTE),
        make_order("0002", status=OrderStatus.DRAFT),
        make_order("0003", status=OrderStatus.READY),
    ]
    report = compute_monthly_report(orders, [], Settings.seeded(), MAY)
    assert report.order_count == 1


def test_empty_sale_set_reports_no_revenue_but_keeps_expenses(make_order):
    settings = Settings(statuses_considered_sale=frozenset())
    report = compute_monthly_report(
        [make_order()], [_expense("2024-05-20", 50.0)], settings, MAY
    )
    assert report.order_count == 0
    assert report.total_revenue == 0
    assert report.total_expenses == pytest.approx(50.0)
    assert report.net_profit == pytest.approx(-50.0)
    assert report.margin == 0


def test_orders_outside_period_are_excluded(make_order):
    orders = [
        make_order("0001", date="2024-04-30"),
        make_order("0002", date="2024-05-01"),
        make_order("0003", date="2024-05-31T22:00:00"),
        make_order("0004", date="2024-06-01"),
    ]
    report = compute_monthly_report(orders, [], Settings.seeded(), MAY)
    assert report.order_count == 2
    assert report.daily_series[0].revenue == pytest.approx(100.0)
    assert report.daily_series[30].revenue == pytest.approx(100.0)


def test_daily_series_sums_to_total_revenue(make_order):
    orders = [
        make_order("0001", date="2024-05-02"),
        make_order("0002", date="2024-05-02", discount=10, discount_type=DiscountType.PERCENTAGE),
        make_order(
            "0003",
            date="2024-05-15",
            freight_price=25.0,
            freight_charged_to_customer=True,
        ),
        make_order(
            "0004",
            date="2024-05-28",
            freight_price=12.0,
            freight_charged_to_customer=False,
        ),
    ]
    report = compute_monthly_report(orders, [], Settings.seeded(), MAY)
    assert sum(entry.revenue for entry in report.daily_series) == pytest.approx(
        report.total_revenue
    )
    assert report.daily_series[1].revenue == pytest.approx(190.0)
    assert report.total_freight_cost == pytest.approx(12.0)
    assert sum(entry.profit for entry in report.daily_series) == pytest.approx(
        report.operational_profit
    )


def test_net_profit_identity(make_order):
    orders = [
        make_order(
            "0001",
            items=[OrderItem(quantity=2, unit_price=35.0, unit_cost=10.0)],
            freight_price=8.0,
            freight_charged_to_customer=False,
        ),
        make_order("0002", date="2024-05-20"),
    ]
    expenses = [_expense("2024-05-05", 12.5), _expense("2024-05-06", 7.5, "Aluguel", 2)]
    report = compute_monthly_report(orders, expenses, Settings.seeded(), MAY)
    assert report.net_profit == pytest.approx(
        report.total_revenue
        - (report.total_cost_goods + report.total_freight_cost + report.total_expenses)
    )
    assert report.margin == pytest.approx(report.net_profit / report.total_revenue * 100)


def test_expenses_grouped_by_category():
    expenses = [
        _expense("2024-05-01", 10.0, "Embalagem", 1),
        _expense("2024-05-15", 5.0, "Embalagem", 2),
        _expense("2024-05-20", 100.0, "Aluguel", 3),
        _expense("2024-06-01", 99.0, "Impostos", 4),
    ]
    report = compute_monthly_report([], expenses, Settings.seeded(), MAY)
    assert report.expenses_by_category == {
        "Embalagem": pytest.approx(15.0),
        "Aluguel": pytest.approx(100.0),
    }
    assert report.total_expenses == pytest.approx(115.0)


def test_unusable_dates_are_reported_as_issues(make_order, caplog):
    orders = [make_order("0001"), make_order("0002", date="10/05/2024")]
    expenses = [_expense("", 20.0, expense_id=9)]
    with caplog.at_level(logging.WARNING):
        report = compute_monthly_report(orders, expenses, Settings.seeded(), MAY)
    assert report.order_count == 1
    assert report.total_expenses == 0
    assert [(issue.kind, issue.record_id) for issue in report.issues] == [
        ("order", "0002"),
        ("expense", "9"),
    ]
    assert "unusable date" in caplog.text


def test_clamp_setting_flows_into_report(make_order):
    order = make_order(discount=150.0)
    unclamped = compute_monthly_report([order], [], Settings.seeded(), MAY)
    clamped = compute_monthly_report(
        [order], [], replace(Settings.seeded(), clamp_discount_to_subtotal=True), MAY
    )
    assert unclamped.total_revenue == pytest.approx(-50.0)
    assert clamped.total_revenue == 0


def test_eligible_orders_returns_parsed_day(make_order):
    selected = eligible_orders([make_order(date="2024-05-09T10:00:00")], Settings.seeded(), MAY)
    assert len(selected) == 1
    day, order = selected[0]
    assert day.day == 9
    assert order.id == "0001"


def test_summarize_orders_skips_canceled(make_order):
    summary = summarize_orders(
        [
            make_order("0001"),
            make_order("0002", status=OrderStatus.QUOTE),
            make_order("0003", status=OrderStatus.CANCELED),
        ],
        Settings.seeded(),
    )
    assert summary.count == 2
    assert summary.total_revenue == pytest.approx(200.0)
    assert summary.total_profit == pytest.approx(120.0)


@pytest.mark.parametrize(
    "settings",
    [
        Settings.from_mapping(None),
        Settings.from_mapping({}),
        Settings.from_mapping({"companyName": "X"}),
    ],
)
def test_unconfigured_sale_statuses_count_no_orders(make_order, settings):
    orders = [
        make_order("0001", status=OrderStatus.APPROVED),
        make_order("0002", status=OrderStatus.DELIVERED),
    ]
    report = compute_monthly_report(orders, [_expense("2024-05-03", 10.0)], settings, MAY)
    assert report.order_count == 0
    assert report.total_revenue == 0
    assert report.net_profit == pytest.approx(-10.0)


def test_eligible_orders_accepts_status_stored_as_text(make_order):
    settings = Settings(statuses_considered_sale=frozenset({OrderStatus.APPROVED}))
    orders = [
        make_order("0001", status="approved"),
        make_order("0002", status="Entregue"),
        make_order("0003", status="desconhecido"),
    ]
    assert [order.id for _day, order in eligible_orders(orders, settings, MAY)] == ["0001"]


def test_leap_day_order_lands_on_last_bucket_of_february(make_order):
    february = Period(2024, 2)
    report = compute_monthly_report(
        [make_order(date="2024-02-29")], [], Settings.seeded(), february
    )
    assert len(report.daily_series) == 29
    assert report.daily_series[28].day == 29
    assert report.daily_series[28].revenue == pytest.approx(100.0)
    assert report.order_count == 1
