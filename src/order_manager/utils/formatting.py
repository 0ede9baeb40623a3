"""Display formatting shared by the CLI and the PDF documents."""

from __future__ import annotations

from datetime import datetime

_MONTH_NAMES = (
    "janeiro",
    "fevereiro",
    "março",
    "abril",
    "maio",
    "junho",
    "julho",
    "agosto",
    "setembro",
    "outubro",
    "novembro",
    "dezembro",
)


def format_currency(value: float) -> str:
    formatted = f"{abs(value):,.2f}"
    text = f"R$ {formatted.replace(',', 'X').replace('.', ',').replace('X', '.')}"
    return f"-{text}" if value < 0 else text


def format_percent(value: float) -> str:
    return f"{value:.1f}%".replace(".", ",")


def format_quantity(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.3f}".rstrip("0").replace(".", ",")


def format_date(value: str | None) -> str:
    if not value:
        return "-"
    try:
        return datetime.strptime(value[:10], "%Y-%m-%d").strftime("%d/%m/%Y")
    except ValueError:
        return value


def month_label(year: int, month: int) -> str:
    return f"{_MONTH_NAMES[month - 1]} de {year}"
