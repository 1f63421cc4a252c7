"""Permissive conversion of raw log tokens into typed record fields.

Converters never raise. They return a :class:`Conversion` carrying either the
parsed value or a diagnostic, and :func:`assign` decides whether the target
field is written. A failing field therefore never aborts the record it
belongs to.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from ..model import MAX_DAY, MIN_DAY

logger = logging.getLogger(__name__)

T = TypeVar("T")

DATE_SEPARATOR = "/"
INVALID_DAY = 0

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True, slots=True)
class Conversion(Generic[T]):
    """Outcome of converting one raw token."""

    value: T | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def convert_date(raw: str) -> Conversion[int]:
    """Convert ``DD/MM/YYYY`` into a ``YYYYMMDD`` integer.

    Only the token count and the numeric range are checked, so ``05/13/2024``
    yields ``20241305``. Every rejection carries the value ``0``.
    """

    tokens = raw.split(DATE_SEPARATOR)
    if len(tokens) != 3:
        return Conversion(INVALID_DAY, f"Bad format for day: {raw!r}")

    day, month, year = tokens
    try:
        value = _parse_int(year + month + day)
    except ValueError:
        return Conversion(INVALID_DAY, f"Cannot parse day as int: {raw!r}")

    if value < MIN_DAY or value > MAX_DAY:
        return Conversion(INVALID_DAY, f"Bad value for day: {raw!r}")
    return Conversion(value)


def _parse_int(raw: str) -> int:
    if not _INT_PATTERN.fullmatch(raw):
        raise ValueError(f"invalid integer literal: {raw!r}")
    value = int(raw)
    if value < INT32_MIN or value > INT32_MAX:
        raise ValueError(f"integer out of range: {raw!r}")
    return value


def _parse_float(raw: str) -> float:
    if raw != raw.strip() or "_" in raw:
        raise ValueError(f"invalid float literal: {raw!r}")
    return float(raw)


def _convert(raw: str, field: str, parse: Callable[[str], T]) -> Conversion[T]:
    try:
        return Conversion(parse(raw))
    except ValueError:
        return Conversion(None, f"Cannot convert {field}: {raw!r}")


def convert_int(raw: str, field: str) -> Conversion[int]:
    return _convert(raw, field, _parse_int)


def convert_float(raw: str, field: str) -> Conversion[float]:
    return _convert(raw, field, _parse_float)


def report(conversion: Conversion[T]) -> Conversion[T]:
    """Log the diagnostic of a failed conversion and pass it through."""

    if not conversion.ok:
        logger.warning(conversion.error)
    return conversion


def assign(
    target: object, attribute: str, conversion: Conversion[T], *, log: bool = True
) -> bool:
    """Write a successful conversion to ``target.attribute``.

    On failure the diagnostic is logged (unless ``log`` is ``False``) and the
    attribute keeps its current value. Returns whether the attribute was
    written.
    """

    if log:
        report(conversion)
    if not conversion.ok:
        return False
    setattr(target, attribute, conversion.value)
    return True


def assign_non_zero(
    target: object, attribute: str, conversion: Conversion[float], *, log: bool = True
) -> bool:
    """Like :func:`assign`, but an incoming zero keeps the previous value.

    Upstream reports a zero balance or equity while a strategy is not
    auto-trading.
    """

    if conversion.ok and conversion.value == 0:
        return False
    return assign(target, attribute, conversion, log=log)
