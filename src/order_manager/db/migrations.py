"""Database migrations for SQLite schema versioning."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path

from order_manager.db.connection import get_connection, transaction
from order_manager.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Migration:
    version: int
    script: str


MIGRATIONS: list[Migration] = [
    Migration(
        version=1,
        script="""
        CREATE TABLE IF NOT EXISTS clients (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            workspace_id TEXT NOT NULL,
            name TEXT NOT NULL,
            whatsapp TEXT,
            email TEXT,
            doc TEXT,
            address TEXT,
            notes TEXT,
            created_at TEXT,
            updated_at TEXT
        );

        CREATE TABLE IF NOT EXISTS products (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            workspace_id TEXT NOT NULL,
            name TEXT NOT NULL,
            code TEXT,
            image TEXT,
            description TEXT,
            unit TEXT NOT NULL DEFAULT 'UN',
            price REAL NOT NULL DEFAULT 0 CHECK (price >= 0),
            cost REAL NOT NULL DEFAULT 0 CHECK (cost >= 0),
            category TEXT,
            active INTEGER NOT NULL DEFAULT 1,
            created_at TEXT,
            updated_at TEXT
        );

        CREATE TABLE IF NOT EXISTS orders (
            workspace_id TEXT NOT NULL,
            id TEXT NOT NULL,
            client_id INTEGER,
            date TEXT NOT NULL,
            status TEXT NOT NULL CHECK (
                status IN (
                    'draft', 'quote', 'approved', 'in_production',
                    'ready', 'delivered', 'canceled'
                )
            ),
            freight_price REAL NOT NULL DEFAULT 0,
            freight_charged_to_customer INTEGER NOT NULL DEFAULT 1,
            discount REAL NOT NULL DEFAULT 0,
            discount_type TEXT NOT NULL DEFAULT 'money'
                CHECK (discount_type IN ('money', 'percentage')),
            payment_method TEXT,
            notes TEXT,
            external_production_link TEXT,
            tracking_code TEXT,
            tracking_url TEXT,
            created_at TEXT,
            updated_at TEXT,
            PRIMARY KEY (workspace_id, id),
            FOREIGN KEY (client_id) REFERENCES clients(id) ON DELETE SET NULL
        );

        CREATE TABLE IF NOT EXISTS order_items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            workspace_id TEXT NOT NULL,
            order_id TEXT NOT NULL,
            position INTEGER NOT NULL DEFAULT 0,
            product_id INTEGER,
            name TEXT,
            description TEXT,
            item_unit TEXT,
            quantity REAL NOT NULL DEFAULT 1,
            unit_price REAL NOT NULL DEFAULT 0,
            unit_cost REAL NOT NULL DEFAULT 0,
            FOREIGN KEY (workspace_id, order_id)
                REFERENCES orders(workspace_id, id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS expenses (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            workspace_id TEXT NOT NULL,
            date TEXT NOT NULL,
            category TEXT NOT NULL DEFAULT 'Outros',
            description TEXT,
            amount REAL NOT NULL DEFAULT 0,
            recurrent INTEGER NOT NULL DEFAULT 0,
            created_at TEXT
        );

        CREATE TABLE IF NOT EXISTS workspace_settings (
            workspace_id TEXT PRIMARY KEY,
            data TEXT NOT NULL,
            updated_at TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_clients_workspace
            ON clients(workspace_id, name);
        CREATE INDEX IF NOT EXISTS idx_products_workspace
            ON products(workspace_id, name);
        CREATE INDEX IF NOT EXISTS idx_orders_workspace_date
            ON orders(workspace_id, date);
        CREATE INDEX IF NOT EXISTS idx_order_items_order
            ON order_items(workspace_id, order_id);
        CREATE INDEX IF NOT EXISTS idx_expenses_workspace_date
            ON expenses(workspace_id, date);
        """,
    ),
    Migration(
        version=2,
        script="""
        ALTER TABLE order_items ADD COLUMN pricing_type TEXT NOT NULL DEFAULT 'unit';
        ALTER TABLE order_items ADD COLUMN width REAL;
        ALTER TABLE order_items ADD COLUMN height REAL;
        ALTER TABLE order_items ADD COLUMN unit_measure TEXT;
        ALTER TABLE order_items ADD COLUMN area_price REAL;
        ALTER TABLE order_items ADD COLUMN finishing_price REAL;
        """,
    ),
]

LATEST_VERSION = MIGRATIONS[-1].version


def _fetch_schema_version(connection: sqlite3.Connection) -> int:
    connection.execute(
        """
        CREATE TABLE IF NOT EXISTS app_meta (
            schema_version INTEGER NOT NULL
        );
        """
    )
    row = connection.execute(
        "SELECT schema_version FROM app_meta LIMIT 1"
    ).fetchone()
    if row is None:
        connection.execute("INSERT INTO app_meta (schema_version) VALUES (0)")
        return 0
    return int(row[0])


def schema_version(connection: sqlite3.Connection) -> int:
    """Read the stored schema version without writing; 0 for a fresh file."""
    try:
        row = connection.execute(
            "SELECT schema_version FROM app_meta LIMIT 1"
        ).fetchone()
    except sqlite3.OperationalError:
        return 0
    return int(row[0]) if row else 0


def apply_migrations(connection: sqlite3.Connection) -> int:
    """Apply pending migrations and return the resulting schema version."""
    with transaction(connection):
        current_version = _fetch_schema_version(connection)

    for migration in MIGRATIONS:
        if migration.version <= current_version:
            continue
        logger.info("Applying schema migration %s", migration.version)
        with transaction(connection):
            connection.executescript(migration.script)
            connection.execute(
                "UPDATE app_meta SET schema_version = ?",
                (migration.version,),
            )
        current_version = migration.version
    return current_version


def open_database(database_path: Path | str) -> sqlite3.Connection:
    """Open the database file, creating and migrating it when needed."""
    path = Path(database_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    connection = get_connection(path)
    apply_migrations(connection)
    return connection
