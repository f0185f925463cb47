from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from .config import CompareKind, Expectation, PercentHeuristic
from .grid import is_blank, normalize_text
from .models import VerdictStatus

EMPTY_DISPLAY = "Empty"
_HUNDRED = Decimal("100")
_STRIP_CHARS = ("$", ",", "%", " ", "\u00a0")


@dataclass(frozen=True)
class Comparison:
    status: VerdictStatus
    number: Optional[Decimal]
    display: str


def parse_number(raw: object) -> Optional[Decimal]:
    """Parse a cell into a Decimal, accepting "$", "," and "%" decorations."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return Decimal(raw)
    if isinstance(raw, float):
        if math.isnan(raw) or math.isinf(raw):
            return None
        return Decimal(str(raw))
    text = str(raw).strip()
    for ch in _STRIP_CHARS:
        text = text.replace(ch, "")
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def to_percent(raw: object, heuristic: PercentHeuristic = PercentHeuristic.LE_ONE_IS_FRACTION) -> Optional[Decimal]:
    """Normalize a cell to percent-scale ("5%", 5 and 0.05 -> 5 under the default heuristic)."""
    number = parse_number(raw)
    if number is None:
        return None
    has_percent = isinstance(raw, str) and "%" in raw

    if heuristic == PercentHeuristic.LE_ONE_IS_FRACTION:
        if has_percent or number > 1:
            return number
        return number * _HUNDRED
    if heuristic == PercentHeuristic.LT_ONE_IS_FRACTION:
        return number * _HUNDRED if number < 1 else number
    if heuristic == PercentHeuristic.ALWAYS_FRACTION:
        return number if has_percent else number * _HUNDRED
    if heuristic == PercentHeuristic.GT_ONE_IS_PERCENT:
        fraction = number / _HUNDRED if has_percent else number
        if fraction > 1:
            fraction = fraction / _HUNDRED
        return fraction * _HUNDRED
    if heuristic == PercentHeuristic.NUMERIC_IS_FRACTION:
        if isinstance(raw, (int, float)):
            return number * _HUNDRED
        return number if number > 1 else number * _HUNDRED
    raise ValueError(f"Unknown percent heuristic: {heuristic}")


def quantize_value(value: Decimal, quantize: Optional[Decimal]) -> Decimal:
    if quantize is None:
        return value
    return value.quantize(quantize, rounding=ROUND_HALF_UP)


def format_number(raw: object) -> str:
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw).strip()


def format_percent(value: Decimal) -> str:
    text = format(value.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP).normalize(), "f")
    return f"{text}%"


def text_matches(raw: object, expected: str) -> bool:
    return normalize_text(raw) == normalize_text(expected)


def within_tolerance(actual: Decimal, expected: Decimal, tolerance: Decimal) -> bool:
    return abs(actual - expected) < tolerance


def in_range(actual: Decimal, minimum: Decimal, maximum: Decimal, *, max_exclusive: bool = False) -> bool:
    if actual < minimum:
        return False
    return actual < maximum if max_exclusive else actual <= maximum


def compare(raw: object, expect: Expectation) -> Comparison:
    """Classify one raw cell value against an expectation."""
    if is_blank(raw):
        return Comparison(VerdictStatus.EMPTY, None, EMPTY_DISPLAY)

    if expect.kind == CompareKind.TEXT:
        ok = text_matches(raw, expect.text or "")
        return Comparison(_status(ok), None, str(raw).strip())

    if expect.kind == CompareKind.CONTAINS:
        ok = normalize_text(expect.text) in normalize_text(raw)
        return Comparison(_status(ok), None, str(raw).strip())

    if expect.kind == CompareKind.ONE_OF:
        ok = any(text_matches(raw, choice) for choice in expect.choices)
        return Comparison(_status(ok), None, str(raw).strip())

    if expect.is_percent:
        number = to_percent(raw, expect.heuristic)
        display = format_percent(number) if number is not None else str(raw).strip()
    else:
        number = parse_number(raw)
        display = format_number(raw)
    if number is None:
        return Comparison(VerdictStatus.INVALID, None, display)

    if expect.kind == CompareKind.RANGE:
        return Comparison(_range_status(number, expect), number, display)

    actual = quantize_value(number, expect.quantize)
    expected = quantize_value(expect.value, expect.quantize)  # type: ignore[arg-type]
    if within_tolerance(actual, expected, expect.tolerance):
        return Comparison(VerdictStatus.VALID, number, display)
    if expect.warn_within is not None and abs(actual - expected) <= expect.warn_within:
        return Comparison(VerdictStatus.WARNING, number, display)
    return Comparison(VerdictStatus.INVALID, number, display)


def _range_status(number: Decimal, expect: Expectation) -> VerdictStatus:
    minimum = expect.minimum - expect.range_slack  # type: ignore[operator]
    maximum = expect.maximum + expect.range_slack  # type: ignore[operator]
    if in_range(number, minimum, maximum, max_exclusive=expect.max_exclusive):
        return VerdictStatus.VALID
    if expect.warn_within is not None:
        distance = minimum - number if number < minimum else number - maximum
        if distance <= expect.warn_within:
            return VerdictStatus.WARNING
    return VerdictStatus.INVALID


def _status(ok: bool) -> VerdictStatus:
    return VerdictStatus.VALID if ok else VerdictStatus.INVALID
