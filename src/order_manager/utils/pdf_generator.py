"""PDF generation for order documents and the monthly report."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterable, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from order_manager.config import APP_NAME
from order_manager.domain.models import (
    Client,
    DiscountType,
    Expense,
    Order,
    OrderStatus,
    Settings,
)
from order_manager.services.finance_report import MonthlyReport
from order_manager.services.periods import parse_record_date
from order_manager.services.pricing import OrderTotals
from order_manager.utils.formatting import (
    format_currency,
    format_date,
    format_percent,
    format_quantity,
    month_label,
)


def _styles():
    styles = getSampleStyleSheet()
    styles.add(
        ParagraphStyle(
            name="SectionTitle",
            parent=styles["Heading3"],
            spaceBefore=12,
            spaceAfter=6,
        )
    )
    styles.add(
        ParagraphStyle(
            name="SmallText",
            parent=styles["Normal"],
            fontSize=9,
            leading=12,
        )
    )
    return styles


def _document(output_path: Path, title: str, settings: Settings) -> SimpleDocTemplate:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return SimpleDocTemplate(
        str(output_path),
        pagesize=A4,
        rightMargin=20 * mm,
        leftMargin=20 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        title=title,
        author=settings.company_name,
    )


def _company_header(settings: Settings, styles) -> list[object]:
    lines = [f"<b>{escape(settings.company_name)}</b>"]
    if settings.company_address:
        lines.append(escape(settings.company_address).replace("\n", "<br/>"))
    if settings.company_doc:
        lines.append(f"CNPJ/CPF: {escape(settings.company_doc)}")
    if settings.company_contact:
        lines.append(escape(settings.company_contact))
    return [Paragraph("<br/>".join(lines), styles["Normal"]), Spacer(1, 10)]


def _footer(styles) -> list[object]:
    footer = f"{APP_NAME}: gerado em {datetime.now().strftime('%d/%m/%Y %H:%M')}"
    return [Spacer(1, 12), Paragraph(footer, styles["SmallText"])]


def _grid_style(header_color=colors.lightgrey) -> TableStyle:
    return TableStyle(
        [
            ("BACKGROUND", (0, 0), (-1, 0), header_color),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ]
    )


def generate_order_pdf(
    order: Order,
    totals: OrderTotals,
    output_path: Path,
    *,
    settings: Settings,
    client: Optional[Client] = None,
) -> Path:
    """Write the customer-facing document of an order or quote.

    All amounts come from ``totals``; nothing is recomputed here.
    """
    is_quote = order.status in (OrderStatus.DRAFT, OrderStatus.QUOTE)
    title = f"ORÇAMENTO Nº {order.id}" if is_quote else f"PEDIDO Nº {order.id}"
    doc = _document(output_path, title, settings)
    styles = _styles()

    elements: list[object] = []
    elements.extend(_company_header(settings, styles))
    elements.append(Paragraph(escape(title), styles["Title"]))
    elements.append(Spacer(1, 8))

    order_rows = [
        ["Data", format_date(order.date)],
        ["Situação", order.status.label],
    ]
    if is_quote:
        issued = parse_record_date(order.date)
        if issued is not None:
            valid_until = issued + timedelta(days=settings.quote_validity_days)
            order_rows.append(["Válido até", format_date(valid_until.isoformat())])
    if order.payment_method:
        order_rows.append(["Pagamento", order.payment_method])
    if order.tracking_code:
        order_rows.append(["Rastreio", order.tracking_code])
    details_table = Table(order_rows, colWidths=[40 * mm, 120 * mm])
    details_table.setStyle(
        TableStyle(
            [
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    elements.append(Paragraph("Dados do pedido", styles["SectionTitle"]))
    elements.append(details_table)

    if client is not None:
        client_lines = ["<b>Cliente</b>", f"Nome: {escape(client.name)}"]
        if client.doc:
            client_lines.append(f"Documento: {escape(client.doc)}")
        if client.whatsapp:
            client_lines.append(f"WhatsApp: {escape(client.whatsapp)}")
        if client.address:
            client_lines.append(f"Endereço: {escape(client.address)}")
        elements.append(Spacer(1, 10))
        elements.append(Paragraph("<br/>".join(client_lines), styles["Normal"]))

    items_data = [["Item", "Qtd", "Valor unit.", "Total"]]
    for item in order.items:
        label = item.name or item.description or "Item"
        if item.name and item.description:
            label = f"{item.name} - {item.description}"
        quantity = format_quantity(item.quantity)
        if item.item_unit:
            quantity = f"{quantity} {item.item_unit}"
        items_data.append(
            [
                Paragraph(escape(label), styles["SmallText"]),
                quantity,
                format_currency(item.unit_price),
                format_currency(item.line_revenue),
            ]
        )
    items_table = Table(items_data, colWidths=[80 * mm, 22 * mm, 32 * mm, 32 * mm])
    items_table.setStyle(_grid_style())
    elements.append(Paragraph("Itens", styles["SectionTitle"]))
    elements.append(items_table)

    value_rows = [["Subtotal", format_currency(totals.subtotal)]]
    if totals.discount_value:
        discount_label = "Desconto"
        if order.discount_type == DiscountType.PERCENTAGE:
            discount_label = f"Desconto ({format_percent(order.discount)})"
        value_rows.append([discount_label, f"- {format_currency(totals.discount_value)}"])
    if totals.freight_revenue:
        value_rows.append(["Frete", f"+ {format_currency(totals.freight_revenue)}"])
    value_rows.append(["Total", format_currency(totals.total_revenue)])
    values_table = Table(value_rows, colWidths=[50 * mm, 50 * mm])
    values_table.setStyle(
        TableStyle(
            [
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ]
        )
    )
    elements.append(Paragraph("Valores", styles["SectionTitle"]))
    elements.append(values_table)

    notes = order.notes or ""
    if is_quote and settings.quote_terms:
        notes = f"{notes}\n{settings.quote_terms}".strip()
    if notes:
        elements.append(Paragraph("Observações", styles["SectionTitle"]))
        elements.append(
            Paragraph(escape(notes).replace("\n", "<br/>"), styles["SmallText"])
        )

    elements.extend(_footer(styles))
    doc.build(elements)
    return output_path


def generate_monthly_report_pdf(
    report: MonthlyReport,
    output_path: Path,
    *,
    settings: Settings,
    expenses: Iterable[Expense] = (),
) -> Path:
    """Write the printable monthly report from a computed ``MonthlyReport``."""
    period = report.period
    title = f"Relatório financeiro: {month_label(period.year, period.month)}"
    doc = _document(output_path, title, settings)
    styles = _styles()

    elements: list[object] = []
    elements.extend(_company_header(settings, styles))
    elements.append(Paragraph(escape(title), styles["Title"]))
    elements.append(Spacer(1, 8))

    summary_rows = [
        ["Indicador", "Valor"],
        ["Faturamento", format_currency(report.total_revenue)],
        ["Custo dos produtos", format_currency(report.total_cost_goods)],
        ["Frete pago pela empresa", format_currency(report.total_freight_cost)],
        ["Despesas", format_currency(report.total_expenses)],
        ["Lucro líquido", format_currency(report.net_profit)],
        ["Margem", format_percent(report.margin)],
        ["Pedidos", str(report.order_count)],
    ]
    summary_table = Table(summary_rows, colWidths=[80 * mm, 50 * mm])
    summary_table.setStyle(_grid_style(colors.whitesmoke))
    elements.append(Paragraph("Resumo", styles["SectionTitle"]))
    elements.append(summary_table)

    if report.expenses_by_category:
        category_rows = [["Categoria", "Total"]]
        for category, amount in sorted(
            report.expenses_by_category.items(), key=lambda entry: -entry[1]
        ):
            category_rows.append([category, format_currency(amount)])
        category_table = Table(category_rows, colWidths=[80 * mm, 50 * mm])
        category_table.setStyle(_grid_style())
        elements.append(Paragraph("Despesas por categoria", styles["SectionTitle"]))
        elements.append(category_table)

    expense_rows = [["Data", "Categoria", "Descrição", "Valor"]]
    for expense in sorted(expenses, key=lambda entry: entry.date):
        expense_rows.append(
            [
                format_date(expense.date),
                expense.category,
                Paragraph(escape(expense.description or ""), styles["SmallText"]),
                format_currency(expense.amount),
            ]
        )
    if len(expense_rows) > 1:
        expense_table = Table(expense_rows, colWidths=[25 * mm, 35 * mm, 70 * mm, 35 * mm])
        expense_table.setStyle(_grid_style())
        elements.append(Paragraph("Despesas do mês", styles["SectionTitle"]))
        elements.append(expense_table)

    daily_rows = [["Dia", "Vendas", "Lucro operacional"]]
    for entry in report.daily_series:
        if not entry.revenue and not entry.profit:
            continue
        day = date(period.year, period.month, entry.day)
        daily_rows.append(
            [
                day.strftime("%d/%m"),
                format_currency(entry.revenue),
                format_currency(entry.profit),
            ]
        )
    if len(daily_rows) > 1:
        daily_table = Table(daily_rows, colWidths=[25 * mm, 50 * mm, 50 * mm])
        daily_table.setStyle(_grid_style())
        elements.append(Paragraph("Vendas por dia", styles["SectionTitle"]))
        elements.append(daily_table)

    if report.issues:
        issue_lines = [
            f"{escape(issue.message)} ({issue.kind} {escape(str(issue.record_id or '-'))}: "
            f"{escape(str(issue.value))})"
            for issue in report.issues
        ]
        elements.append(Paragraph("Registros ignorados", styles["SectionTitle"]))
        elements.append(Paragraph("<br/>".join(issue_lines), styles["SmallText"]))

    elements.extend(_footer(styles))
    doc.build(elements)
    return output_path
