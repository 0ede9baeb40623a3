"""File naming for generated documents."""

from __future__ import annotations

import re
import unicodedata
from pathlib import Path

from order_manager.domain.models import Order, OrderStatus
from order_manager.services.periods import Period


def sanitize_filename(value: str, fallback: str = "Documento") -> str:
    """Normalize text to be safe for filenames."""
    normalized = unicodedata.normalize("NFKD", value)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    cleaned = "_".join(ascii_text.strip().split())
    cleaned = re.sub(r"[^A-Za-z0-9_-]", "", cleaned)
    return cleaned or fallback


def order_document_label(order: Order) -> str:
    if order.status in (OrderStatus.DRAFT, OrderStatus.QUOTE):
        return "Orcamento"
    return "Pedido"


def build_order_filename(order: Order, client_name: str | None) -> str:
    label = order_document_label(order)
    parts = [label, sanitize_filename(str(order.id), "sem_numero")]
    if client_name:
        parts.append(sanitize_filename(client_name, "Cliente"))
    return "_".join(parts) + ".pdf"


def build_report_filename(period: Period) -> str:
    return f"Relatorio_{period.key}.pdf"


def resolve_output_path(target: str | Path | None, default_dir: Path, filename: str) -> Path:
    """Use the given path, a file inside the given directory, or the default folder."""
    if target is None:
        return default_dir / filename
    path = Path(target)
    if path.is_dir():
        return path / filename
    return path
