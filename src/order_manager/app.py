"""Application entry point."""

from __future__ import annotations

import argparse
import logging
import sqlite3
import sys
from pathlib import Path
from typing import Optional, Sequence

from order_manager.app_services import AppServices
from order_manager.config import AppConfig
from order_manager.db.connection import get_connection, transaction
from order_manager.db.migrations import LATEST_VERSION, open_database, schema_version
from order_manager.domain.models import Order, OrderStatus, Settings
from order_manager.logging_config import configure_logging, get_logger
from order_manager.paths import get_config_path, get_db_path, get_pdfs_dir
from order_manager.services.errors import ServiceError
from order_manager.services.finance_report import MonthlyReport, summarize_orders
from order_manager.services.periods import Period
from order_manager.services.pricing import compute_order_totals
from order_manager.services.tracking import OrderTracking
from order_manager.utils.config_store import load_default_workspace, save_default_workspace
from order_manager.utils.documents import (
    build_order_filename,
    build_report_filename,
    resolve_output_path,
)
from order_manager.utils.formatting import (
    format_currency,
    format_date,
    format_percent,
    month_label,
)
from order_manager.utils.legacy_import import import_export, load_export
from order_manager.utils.pdf_generator import (
    generate_monthly_report_pdf,
    generate_order_pdf,
)


READ_ONLY_COMMANDS = {"report", "orders", "order", "track"}


def _open_connection(db_path: Path, read_only: bool) -> sqlite3.Connection:
    """Open read-only when possible so reporting never touches the data file."""
    if read_only and Path(db_path).exists():
        connection = get_connection(db_path, read_only=True)
        if schema_version(connection) == LATEST_VERSION:
            return connection
        connection.close()
    return open_database(db_path)


def _period_arg(value: str) -> Period:
    try:
        return Period.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _build_parser() -> argparse.ArgumentParser:
    config = AppConfig()
    parser = argparse.ArgumentParser(
        prog="order-manager",
        description=f"{config.app_name}: pedidos, despesas e relatórios financeiros.",
    )
    parser.add_argument("--workspace", help="Chave do espaço de trabalho.")
    parser.add_argument("--db", type=Path, help="Arquivo do banco de dados SQLite.")
    parser.add_argument("--verbose", action="store_true", help="Log detalhado.")
    commands = parser.add_subparsers(dest="command", required=True)

    report = commands.add_parser("report", help="Relatório financeiro do mês.")
    report.add_argument("month", nargs="?", type=_period_arg, help="Mês no formato AAAA-MM.")
    report.add_argument("--pdf", nargs="?", const="", default=None, help="Gerar PDF.")

    orders = commands.add_parser("orders", help="Lista pedidos com totais.")
    orders.add_argument("--month", type=_period_arg, help="Filtrar pelo mês AAAA-MM.")
    orders.add_argument("--status", help="Filtrar pela situação (ex.: approved, Entregue).")

    order = commands.add_parser("order", help="Mostra os valores de um pedido.")
    order.add_argument("order_id")
    order.add_argument("--pdf", nargs="?", const="", default=None, help="Gerar PDF.")

    status = commands.add_parser("status", help="Altera a situação de um pedido.")
    status.add_argument("order_id")
    status.add_argument("status", help="Nova situação (ex.: approved, Entregue).")

    track = commands.add_parser("track", help="Acompanhamento do pedido para o cliente.")
    track.add_argument("order_id")

    settings = commands.add_parser("settings", help="Mostra ou altera as configurações.")
    settings.add_argument("--company-name")
    settings.add_argument("--company-doc")
    settings.add_argument("--company-address")
    settings.add_argument("--company-contact")
    settings.add_argument("--quote-validity-days", type=int)
    settings.add_argument("--next-order-number", type=int)
    settings.add_argument(
        "--payment-methods", help="Formas de pagamento separadas por vírgula."
    )
    settings.add_argument(
        "--clamp-discount",
        choices=("on", "off"),
        help="Limitar o desconto ao subtotal dos itens.",
    )
    settings.add_argument(
        "--sale-statuses",
        help="Situações que contam como venda, separadas por vírgula (vazio: nenhuma).",
    )
    settings.add_argument(
        "--toggle-sale-status",
        action="append",
        default=[],
        help="Inclui ou remove uma situação das vendas; pode repetir.",
    )

    import_cmd = commands.add_parser("import", help="Importa uma exportação JSON.")
    import_cmd.add_argument("file", type=Path)

    use = commands.add_parser("use", help="Cria ou seleciona o espaço de trabalho padrão.")
    use.add_argument("workspace_key")
    return parser


def _pdf_target(value: Optional[str]) -> Optional[Path]:
    return Path(value) if value else None


def _print_report(report: MonthlyReport) -> None:
    period = report.period
    print(f"Relatório de {month_label(period.year, period.month)}")
    print(f"  Faturamento:            {format_currency(report.total_revenue)}")
    print(f"  Custo dos produtos:     {format_currency(report.total_cost_goods)}")
    print(f"  Frete pago pela empresa: {format_currency(report.total_freight_cost)}")
    print(f"  Despesas:               {format_currency(report.total_expenses)}")
    print(f"  Lucro líquido:          {format_currency(report.net_profit)}")
    print(f"  Margem:                 {format_percent(report.margin)}")
    print(f"  Pedidos:                {report.order_count}")
    if report.expenses_by_category:
        print("Despesas por categoria:")
        for category, amount in sorted(report.expenses_by_category.items()):
            print(f"  {category}: {format_currency(amount)}")
    for issue in report.issues:
        print(f"Aviso: {issue.message} ({issue.kind} {issue.record_id}: {issue.value!r})")


def _print_order(order: Order, services: AppServices) -> None:
    totals = services.order_service.get_totals(str(order.id))
    print(f"Pedido {order.id}: {format_date(order.date)}, {order.status.label}")
    for item in order.items:
        print(
            f"  {item.quantity:g} x {item.name or item.description or 'Item'}"
            f" @ {format_currency(item.unit_price)} = {format_currency(item.line_revenue)}"
        )
    print(f"  Subtotal:     {format_currency(totals.subtotal)}")
    print(f"  Desconto:     {format_currency(totals.discount_value)}")
    print(f"  Faturamento:  {format_currency(totals.total_revenue)}")
    print(f"  Custo:        {format_currency(totals.total_cost)}")
    print(f"  Lucro:        {format_currency(totals.profit)}")


def _print_tracking(tracking: OrderTracking) -> None:
    print(f"Pedido {tracking.order_id}: {tracking.headline}")
    if tracking.canceled:
        print("  Este pedido foi cancelado.")
    for step in tracking.steps:
        mark = ">" if step.current else ("x" if step.done else " ")
        print(f"  [{mark}] {step.label}")
    if tracking.tracking_code:
        print(f"Código de rastreio: {tracking.tracking_code}")
    if tracking.tracking_url:
        print(f"Rastrear objeto: {tracking.tracking_url}")
    if tracking.external_production_link:
        print(f"Acompanhar produção: {tracking.external_production_link}")


def _print_settings(settings: Settings) -> None:
    sale_labels = [
        status.label for status in OrderStatus if status in settings.statuses_considered_sale
    ]
    print(f"Empresa:                {settings.company_name}")
    if settings.company_doc:
        print(f"Documento:              {settings.company_doc}")
    if settings.company_address:
        print(f"Endereço:               {settings.company_address}")
    if settings.company_contact:
        print(f"Contato:                {settings.company_contact}")
    print(f"Situações de venda:     {', '.join(sale_labels) or 'nenhuma'}")
    print(f"Próximo pedido:         {settings.next_order_number}")
    print(f"Validade do orçamento:  {settings.quote_validity_days} dias")
    print(f"Formas de pagamento:    {', '.join(settings.payment_methods)}")
    print(
        "Limitar desconto:       "
        f"{'sim' if settings.clamp_discount_to_subtotal else 'não'}"
    )


def _settings_changes(args: argparse.Namespace) -> dict:
    """Editable fields given on the command line, keyed by settings field."""
    changes = {}
    for field_name in (
        "company_name",
        "company_doc",
        "company_address",
        "company_contact",
        "quote_validity_days",
        "next_order_number",
    ):
        value = getattr(args, field_name)
        if value is not None:
            changes[field_name] = value
    if args.payment_methods is not None:
        changes["payment_methods"] = args.payment_methods.split(",")
    if args.clamp_discount is not None:
        changes["clamp_discount_to_subtotal"] = args.clamp_discount == "on"
    return changes


def _split_statuses(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _is_read_only(args: argparse.Namespace) -> bool:
    if args.command == "settings":
        return not (
            _settings_changes(args)
            or args.sale_statuses is not None
            or args.toggle_sale_status
        )
    return args.command in READ_ONLY_COMMANDS


def _run_command(args: argparse.Namespace, services: AppServices) -> int:
    logger = get_logger(__name__)
    store = services.store

    if args.command == "report":
        period = args.month or Period.current()
        detail = services.finance_service.report_detail(period)
        _print_report(detail.report)
        if args.pdf is not None:
            output = resolve_output_path(
                _pdf_target(args.pdf), get_pdfs_dir(), build_report_filename(period)
            )
            generate_monthly_report_pdf(
                detail.report,
                output,
                settings=store.get_settings(),
                expenses=detail.expenses,
            )
            print(f"PDF gerado em {output}")
        return 0

    if args.command == "orders":
        settings = store.get_settings()
        orders = services.order_service.list_orders(args.month, args.status)
        for order in orders:
            totals = compute_order_totals(
                order, clamp_discount=settings.clamp_discount_to_subtotal
            )
            print(
                f"{order.id:>6}  {format_date(order.date)}  {order.status.label:<12}"
                f"  {format_currency(totals.total_revenue):>14}"
                f"  lucro {format_currency(totals.profit)}"
            )
        summary = summarize_orders(orders, settings)
        print(
            f"{summary.count} pedidos ativos, faturamento "
            f"{format_currency(summary.total_revenue)}, lucro "
            f"{format_currency(summary.total_profit)}"
        )
        return 0

    if args.command == "order":
        order = services.order_service.get_order(args.order_id)
        _print_order(order, services)
        if args.pdf is not None:
            client = store.clients.get_by_id(order.client_id) if order.client_id else None
            output = resolve_output_path(
                _pdf_target(args.pdf),
                get_pdfs_dir(),
                build_order_filename(order, client.name if client else None),
            )
            generate_order_pdf(
                order,
                services.order_service.get_totals(str(order.id)),
                output,
                settings=store.get_settings(),
                client=client,
            )
            print(f"PDF gerado em {output}")
        return 0

    if args.command == "status":
        order = services.order_service.set_status(args.order_id, args.status)
        print(f"Pedido {order.id}: {order.status.label}")
        return 0

    if args.command == "track":
        _print_tracking(services.order_service.get_tracking(args.order_id))
        return 0

    if args.command == "settings":
        settings_service = services.settings_service
        changes = _settings_changes(args)
        with transaction(services.connection):
            if changes:
                settings_service.update(**changes)
            if args.sale_statuses is not None:
                settings_service.set_sale_statuses(_split_statuses(args.sale_statuses))
            for status in args.toggle_sale_status:
                settings_service.toggle_sale_status(status)
        _print_settings(settings_service.get())
        return 0

    if args.command == "import":
        try:
            data = load_export(args.file)
        except (OSError, ValueError) as exc:
            logger.error("Failed to read export %s: %s", args.file, exc)
            print(f"Não foi possível ler {args.file}: {exc}", file=sys.stderr)
            return 1
        try:
            result = import_export(data, store)
        except (ValueError, sqlite3.Error) as exc:
            logger.error("Import of %s failed and was rolled back: %s", args.file, exc)
            print(
                f"A importação de {args.file} falhou e nada foi gravado: {exc}",
                file=sys.stderr,
            )
            return 1
        print(
            f"Importados: {result.clients} clientes, {result.products} produtos, "
            f"{result.orders} pedidos, {result.expenses} despesas."
        )
        if result.skipped:
            print(f"Ignorados: {', '.join(result.skipped)}")
        return 0

    raise ValueError(f"Unknown command {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the Gestor Pro command line."""
    args = _build_parser().parse_args(argv)
    config_path = get_config_path()
    if args.command == "use":
        workspace_id = args.workspace_key.strip().upper()
    else:
        workspace_id = (args.workspace or load_default_workspace(config_path)).strip().upper()
    configure_logging(
        logging.DEBUG if args.verbose else logging.INFO, workspace_id=workspace_id
    )
    logger = get_logger(__name__)

    db_path = args.db or get_db_path()
    logger.info("Opening workspace %s at %s", workspace_id, db_path)
    connection = _open_connection(db_path, _is_read_only(args))
    try:
        services = AppServices.build(connection, workspace_id)
        if args.command == "use":
            created = services.settings_service.initialize_workspace()
            save_default_workspace(config_path, workspace_id)
            logger.info("Default workspace set to %s", workspace_id)
            if created:
                print(f"Espaço de trabalho {workspace_id} criado.")
            print(f"Espaço de trabalho padrão: {workspace_id}")
            return 0
        return _run_command(args, services)
    except ServiceError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    finally:
        connection.close()


if __name__ == "__main__":
    raise SystemExit(main())
