"""Reporting periods and record date parsing."""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from dateutil import parser
from dateutil.relativedelta import relativedelta

_PERIOD_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})\s*$")
_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")


@dataclass(frozen=True, order=True)
class Period:
    """A calendar month identified by year and month."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Mês inválido: {self.month}")
        if not 1 <= self.year <= 9999:
            raise ValueError(f"Ano inválido: {self.year}")

    @classmethod
    def parse(cls, value: str) -> Period:
        match = _PERIOD_RE.match(value or "")
        if not match:
            raise ValueError(f"Período inválido: {value!r}. Use o formato AAAA-MM.")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def from_date(cls, value: date) -> Period:
        return cls(value.year, value.month)

    @classmethod
    def current(cls) -> Period:
        return cls.from_date(date.today())

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def end(self) -> date:
        return date(self.year, self.month, self.days_in_month)

    def contains(self, value: date) -> bool:
        return value.year == self.year and value.month == self.month

    def previous(self) -> Period:
        if (self.year, self.month) == (1, 1):
            raise ValueError(f"Período inválido: não há mês antes de {self.key}.")
        return Period.from_date(self.start - relativedelta(months=1))

    def next(self) -> Period:
        if (self.year, self.month) == (9999, 12):
            raise ValueError(f"Período inválido: não há mês depois de {self.key}.")
        return Period.from_date(self.start + relativedelta(months=1))

    def __str__(self) -> str:
        return self.key


def parse_record_date(value: object) -> Optional[date]:
    """Return the calendar day of a stored date, or None when unusable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not _DAY_RE.match(text):
        return None
    try:
        return parser.isoparse(text).date()
    except (ValueError, OverflowError):
        return None
