import json
import logging
import sqlite3
import sys

import pytest

from order_manager import app as app_module
from order_manager.app import _build_parser, main
from order_manager.db.migrations import open_database
from order_manager.domain.models import Expense, OrderStatus, Settings
from order_manager.repositories.store import WorkspaceStore
from order_manager.services.periods import Period


@pytest.fixture
def cli(app_home, monkeypatch):
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield main
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def seeded_db(tmp_path, make_order):
    db_file = tmp_path / "cli.db"
    connection = open_database(db_file)
    store = WorkspaceStore(connection, "LOCAL")
    store.settings.save(Settings.seeded())
    store.orders.save(make_order("0001"))
    store.orders.save(make_order("0002", status=OrderStatus.QUOTE))
    store.expenses.create(
        Expense(id=None, date="2024-05-04", category="Aluguel", description=None, amount=30.0)
    )
    connection.close()
    return db_file


def test_parser_validates_month():
    args = _build_parser().parse_args(["report", "2024-05"])
    assert args.month == Period(2024, 5)
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["report", "2024-13"])


def test_report_command_prints_summary(cli, seeded_db, capsys):
    assert cli(["--db", str(seeded_db), "report", "2024-05"]) == 0
    out = capsys.readouterr().out
    assert "maio de 2024" in out
    assert "R$ 100,00" in out
    assert "30,0%" in out


def test_report_command_writes_pdf(cli, seeded_db, tmp_path):
    target = tmp_path / "relatorio.pdf"
    assert cli(["--db", str(seeded_db), "report", "2024-05", "--pdf", str(target)]) == 0
    assert target.read_bytes().startswith(b"%PDF")


def test_orders_and_order_commands(cli, seeded_db, capsys):
    assert cli(["--db", str(seeded_db), "orders", "--month", "2024-05"]) == 0
    out = capsys.readouterr().out
    assert "0001" in out and "0002" in out
    assert "2 pedidos ativos" in out

    assert cli(["--db", str(seeded_db), "order", "0001"]) == 0
    assert "Lucro:        R$ 60,00" in capsys.readouterr().out


def test_missing_order_returns_error(cli, seeded_db, capsys):
    assert cli(["--db", str(seeded_db), "order", "9999"]) == 1
    assert "não encontrado" in capsys.readouterr().err


def test_status_command_changes_report(cli, seeded_db, capsys):
    assert cli(["--db", str(seeded_db), "status", "0001", "canceled"]) == 0
    assert "Cancelado" in capsys.readouterr().out
    assert cli(["--db", str(seeded_db), "status", "0001", "enviado"]) == 1
    cli(["--db", str(seeded_db), "report", "2024-05"])
    counts = [
        line.split(":", 1)[1].strip()
        for line in capsys.readouterr().out.splitlines()
        if line.strip().startswith("Pedidos:")
    ]
    assert counts == ["0"]


def test_import_command(cli, tmp_path, capsys):
    export = tmp_path / "export.json"
    export.write_text(
        json.dumps({"orders": [{"id": "0003", "date": "2024-05-01", "status": "approved"}]}),
        encoding="utf-8",
    )
    db_file = tmp_path / "import.db"
    assert cli(["--db", str(db_file), "--workspace", "nova", "import", str(export)]) == 0
    assert "1 pedidos" in capsys.readouterr().out

    connection = open_database(db_file)
    try:
        assert WorkspaceStore(connection, "NOVA").orders.get_by_id("0003") is not None
        assert WorkspaceStore(connection, "LOCAL").orders.get_by_id("0003") is None
    finally:
        connection.close()


def test_import_command_reports_unreadable_file(cli, tmp_path):
    missing = tmp_path / "missing.json"
    assert cli(["--db", str(tmp_path / "x.db"), "import", str(missing)]) == 1


def test_use_command_sets_default_workspace(cli, app_home, capsys):
    assert cli(["use", "filial"]) == 0
    assert "FILIAL" in capsys.readouterr().out
    config = json.loads((app_home / "config.json").read_text(encoding="utf-8"))
    assert config["default_workspace"] == "FILIAL"


def test_use_command_seeds_new_workspace(cli, app_home, capsys):
    assert cli(["use", "filial"]) == 0
    assert "FILIAL criado" in capsys.readouterr().out
    assert cli(["use", "filial"]) == 0
    assert "criado" not in capsys.readouterr().out

    connection = open_database(app_home / "order_manager.db")
    try:
        settings = WorkspaceStore(connection, "FILIAL").get_settings()
    finally:
        connection.close()
    assert settings.statuses_considered_sale == Settings.seeded().statuses_considered_sale


def test_settings_command_shows_and_changes_settings(cli, seeded_db, capsys):
    assert cli(["--db", str(seeded_db), "settings"]) == 0
    out = capsys.readouterr().out
    assert "Minha Empresa" in out
    assert "Entregue" in out

    assert (
        cli(
            [
                "--db",
                str(seeded_db),
                "settings",
                "--company-name",
                "Gráfica Azul",
                "--sale-statuses",
                "approved,delivered",
                "--toggle-sale-status",
                "approved",
                "--clamp-discount",
                "on",
            ]
        )
        == 0
    )
    out = capsys.readouterr().out
    assert "Gráfica Azul" in out
    assert "Limitar desconto:       sim" in out

    connection = open_database(seeded_db)
    try:
        settings = WorkspaceStore(connection, "LOCAL").get_settings()
    finally:
        connection.close()
    assert settings.statuses_considered_sale == frozenset({OrderStatus.DELIVERED})
    assert settings.clamp_discount_to_subtotal is True


def test_settings_command_with_empty_sale_list_zeroes_report(cli, seeded_db, capsys):
    assert cli(["--db", str(seeded_db), "settings", "--sale-statuses", ""]) == 0
    assert "Situações de venda:     nenhuma" in capsys.readouterr().out
    cli(["--db", str(seeded_db), "report", "2024-05"])
    assert "Pedidos:                0" in capsys.readouterr().out


def test_settings_command_rejects_invalid_values(cli, seeded_db, capsys):
    assert cli(["--db", str(seeded_db), "settings", "--toggle-sale-status", "enviado"]) == 1
    assert capsys.readouterr().err
    assert cli(["--db", str(seeded_db), "settings", "--company-name", " "]) == 1
    assert "nome da empresa" in capsys.readouterr().err


def test_orders_command_filters_by_status(cli, seeded_db, capsys):
    assert cli(["--db", str(seeded_db), "orders", "--status", "quote"]) == 0
    out = capsys.readouterr().out
    assert "0002" in out
    assert "0001" not in out
    assert "1 pedidos ativos" in out


def test_track_command(cli, seeded_db, capsys):
    assert cli(["--db", str(seeded_db), "track", "0001"]) == 0
    out = capsys.readouterr().out
    assert "Pedido 0001: Em Aberto" in out
    assert "[>] Entregue" in out
    assert "[x] Pedido Recebido" in out
    assert cli(["--db", str(seeded_db), "track", "9999"]) == 1


def test_cli_output_has_no_em_dashes(cli, seeded_db, capsys):
    cli(["--db", str(seeded_db), "orders"])
    cli(["--db", str(seeded_db), "order", "0002"])
    out = capsys.readouterr().out
    assert "Pedido 0002: 10/05/2024, Orçamento" in out
    assert "—" not in out


def test_import_command_reports_rolled_back_import(cli, tmp_path, capsys, monkeypatch):
    def fail_import(data, store):
        raise sqlite3.OperationalError("database is locked")

    export = tmp_path / "export.json"
    export.write_text(json.dumps({"orders": []}), encoding="utf-8")
    monkeypatch.setattr(app_module, "import_export", fail_import)
    assert cli(["--db", str(tmp_path / "x.db"), "import", str(export)]) == 1
    assert "nada foi gravado" in capsys.readouterr().err
