from __future__ import annotations

import datetime
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Type, TypeVar

from .errors import InvalidValueError
from .models import ZERO_DATE


E = TypeVar("E", bound=Enum)

# Invariant format: "." decimal point, no grouping, optional sign
AMOUNT_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)", re.ASCII)
INT_RE = re.compile(r"[+-]?\d+", re.ASCII)
DATE_PREFIX_RE = re.compile(r"(\d{4})(\d{2})(\d{2})", re.ASCII)


def parse_date(raw: Optional[str], field: str = "date") -> datetime.date:
    """
    OFX dates are YYYYMMDD[HHMMSS[.XXX][TZ]]. Only the calendar date is kept.
    - an ISO date is accepted as is
    - shorter than 8 characters (including absent) => ZERO_DATE
    - otherwise the first 8 characters must be a valid YYYYMMDD
    """
    raw = (raw or "").strip()
    try:
        return datetime.date.fromisoformat(raw)
    except ValueError:
        pass

    if len(raw) < 8:
        return ZERO_DATE

    m = DATE_PREFIX_RE.match(raw)
    if not m:
        raise InvalidValueError(f"Unable to parse date for {field}: {raw!r}", path=field, value=raw)
    try:
        return datetime.date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError as exc:
        raise InvalidValueError(f"Unable to parse date for {field}: {raw!r}", path=field, value=raw) from exc


def parse_amount(raw: str, field: str = "amount") -> Decimal:
    s = raw.strip()
    if not AMOUNT_RE.fullmatch(s):
        raise InvalidValueError(f"Invalid decimal for {field}: {raw!r}", path=field, value=raw)
    try:
        return Decimal(s)
    except InvalidOperation as exc:
        raise InvalidValueError(f"Invalid decimal for {field}: {raw!r}", path=field, value=raw) from exc


def parse_int(raw: str, field: str = "integer") -> int:
    s = raw.strip()
    if not INT_RE.fullmatch(s):
        raise InvalidValueError(f"Invalid integer for {field}: {raw!r}", path=field, value=raw)
    return int(s)


def lookup_enum(enum_cls: Type[E], raw: str, field: str) -> E:
    # Exact, case-sensitive match on the OFX token
    try:
        return enum_cls(raw)
    except ValueError as exc:
        raise InvalidValueError(
            f"Unrecognized {field} value {raw!r} (expected one of: {', '.join(m.value for m in enum_cls)})",
            path=field,
            value=raw,
        ) from exc
