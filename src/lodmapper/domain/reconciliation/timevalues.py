"""Point-in-time parsing with precision detection."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Final

from lodmapper.domain.model import TimePrecision

_MONTH_NAMES: Final[dict[str, int]] = {
    name: index
    for index, names in enumerate(
        (
            ("january", "jan"),
            ("february", "feb"),
            ("march", "mar"),
            ("april", "apr"),
            ("may",),
            ("june", "jun"),
            ("july", "jul"),
            ("august", "aug"),
            ("september", "sep", "sept"),
            ("october", "oct"),
            ("november", "nov"),
            ("december", "dec"),
        ),
        start=1,
    )
    for name in names
}

_CIRCA_RE = re.compile(r"^(?:c\.|ca\.|circa)\s*(.+)$", re.IGNORECASE)
_DECADE_RE = re.compile(r"^(?:(early|mid|late)\s+)?(\d{3})0s$", re.IGNORECASE)
_YEAR_RE = re.compile(r"^(\d{4})$")
_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")
_ISO_DAY_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:T[\d:.]+Z?)?$")
_SLASH_DAY_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_DOT_DAY_RE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")
_MONTH_YEAR_RE = re.compile(r"^([A-Za-z]+)\.?\s+(\d{4})$")
_MONTH_DAY_YEAR_RE = re.compile(r"^([A-Za-z]+)\.?\s+(\d{1,2}),?\s+(\d{4})$")
_DAY_MONTH_YEAR_RE = re.compile(r"^(\d{1,2})\s+([A-Za-z]+)\.?,?\s+(\d{4})$")


@dataclass(slots=True, frozen=True)
class ParsedTime:
    """A date normalized to ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD`` (or ``YYY0s``)."""

    value: str
    precision: TimePrecision
    circa: bool = False
    qualifier: str | None = None


def _month(name: str) -> int | None:
    return _MONTH_NAMES.get(name.lower())


def _day(year: int, month: int, day: int) -> ParsedTime | None:
    try:
        parsed = date(year, month, day)
    except ValueError:
        return None
    return ParsedTime(value=parsed.isoformat(), precision=TimePrecision.DAY)


def _month_value(year: int, month: int) -> ParsedTime | None:
    if not 1 <= month <= 12:
        return None
    return ParsedTime(value=f"{year:04d}-{month:02d}", precision=TimePrecision.MONTH)


def _parse_exact(text: str) -> ParsedTime | None:  # noqa: PLR0911
    if match := _DECADE_RE.match(text):
        return ParsedTime(
            value=f"{match.group(2)}0s",
            precision=TimePrecision.DECADE,
            qualifier=match.group(1).lower() if match.group(1) else None,
        )
    if match := _YEAR_RE.match(text):
        return ParsedTime(value=match.group(1), precision=TimePrecision.YEAR)
    if match := _YEAR_MONTH_RE.match(text):
        return _month_value(int(match.group(1)), int(match.group(2)))
    if match := _ISO_DAY_RE.match(text):
        return _day(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    if match := _SLASH_DAY_RE.match(text):
        # US order, month first
        return _day(int(match.group(3)), int(match.group(1)), int(match.group(2)))
    if match := _DOT_DAY_RE.match(text):
        return _day(int(match.group(3)), int(match.group(2)), int(match.group(1)))
    if match := _MONTH_DAY_YEAR_RE.match(text):
        month = _month(match.group(1))
        return None if month is None else _day(int(match.group(3)), month, int(match.group(2)))
    if match := _DAY_MONTH_YEAR_RE.match(text):
        month = _month(match.group(2))
        return None if month is None else _day(int(match.group(3)), month, int(match.group(1)))
    if match := _MONTH_YEAR_RE.match(text):
        month = _month(match.group(1))
        return None if month is None else _month_value(int(match.group(2)), month)
    return None


def parse_time(value: str) -> ParsedTime | None:
    """Parse ``value`` into a normalized date, or ``None`` when the shape is unknown."""

    text = value.strip()
    if not text:
        return None
    circa = _CIRCA_RE.match(text)
    if circa:
        inner = _parse_exact(circa.group(1).strip())
        if inner is None:
            return None
        return ParsedTime(
            value=inner.value,
            precision=inner.precision,
            circa=True,
            qualifier=inner.qualifier,
        )
    return _parse_exact(text)


def detect_precision(value: str) -> TimePrecision | None:
    parsed = parse_time(value)
    return parsed.precision if parsed else None


def format_with_precision(parsed: ParsedTime, precision: TimePrecision) -> str:
    """Re-render ``parsed`` at a coarser or equal ``precision``."""

    year = parsed.value[:4]
    match precision:
        case TimePrecision.DECADE:
            return f"{year[:3]}0s"
        case TimePrecision.YEAR:
            return year
        case TimePrecision.MONTH:
            if parsed.precision in {TimePrecision.MONTH, TimePrecision.DAY}:
                return parsed.value[:7]
            return year
        case TimePrecision.DAY:
            return parsed.value
