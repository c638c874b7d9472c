"""Operator dispatch and a bounded calculation history on top of the rational core."""
from __future__ import annotations

import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Callable, Deque, Dict, Iterator, Optional, Union

import numpy as np
import structlog

from .errors import DivisionByZero, UnsupportedOperator
from .rational import (
    Rational,
    add,
    as_rational_array,
    divide,
    format_rational,
    multiply,
    parse,
    subtract,
    to_decimal,
    to_decimal_array,
)

logger = structlog.get_logger(__name__)

Operand = Union[Rational, int, Fraction, str]

DEFAULT_HISTORY_LIMIT = 10

OPERATIONS: Dict[str, Callable[[Rational, Rational], Rational]] = {
    "+": add,
    "-": subtract,
    "*": multiply,
    "/": divide,
}

_ALIASES = {
    "x": "*",
    "X": "*",
    "×": "*",
    ":": "/",
    "÷": "/",
    "−": "-",
}


@dataclass(frozen=True)
class CalculationResult:
    expression: str
    result: Rational
    decimal: float

    def __str__(self) -> str:
        return f"{self.expression} = {format_rational(self.result)}"


@dataclass(frozen=True)
class HistoryItem:
    expression: str
    result: Rational
    decimal: float
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:9])
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def from_result(cls, result: CalculationResult) -> "HistoryItem":
        return cls(result.expression, result.result, result.decimal)


def resolve_operator(symbol: str) -> str:
    """Return the canonical operator symbol for *symbol* (``"×"`` -> ``"*"``)."""
    key = symbol.strip()
    key = _ALIASES.get(key, key)
    if key not in OPERATIONS:
        raise UnsupportedOperator(symbol)
    return key


def _as_operand(value: Operand, *, strict: bool) -> Rational:
    if isinstance(value, str):
        return parse(value, strict=strict).normalized()
    return Rational.rationalize(value).normalized()


def calculate(
    left: Operand,
    operator: str,
    right: Operand,
    *,
    strict: bool = False,
) -> CalculationResult:
    """Evaluate ``left operator right`` exactly.

    Text operands are read with :func:`~fraccalc.rational.parse`; integers,
    fractions and floats go through :meth:`Rational.rationalize`. Unlike the
    bare arithmetic functions this refuses to produce a zero denominator:
    :class:`DivisionByZero` is raised for a degenerate operand and for a
    division by a zero-valued operand.
    """
    symbol = resolve_operator(operator)
    a = _as_operand(left, strict=strict)
    b = _as_operand(right, strict=strict)

    for operand in (a, b):
        if operand.is_degenerate:
            logger.warning("degenerate_operand", operand=repr(operand))
            raise DivisionByZero(f"operand {operand.numerator}/0 has a zero denominator")
    if symbol == "/" and b.numerator == 0:
        logger.warning("division_by_zero", dividend=format_rational(a))
        raise DivisionByZero("division by zero")

    result = OPERATIONS[symbol](a, b)
    expression = f"{format_rational(a)} {symbol} {format_rational(b)}"
    logger.debug("calculated", expression=expression, result=format_rational(result))
    return CalculationResult(expression, result, to_decimal(result))


class History:
    """Newest-first record of calculations, capped at ``limit`` items.

    Recording past the cap drops the oldest item.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self._items: Deque[HistoryItem] = deque(maxlen=limit)

    @property
    def limit(self) -> int:
        return self._items.maxlen  # type: ignore[return-value]

    def record(self, result: CalculationResult) -> HistoryItem:
        item = HistoryItem.from_result(result)
        self._items.appendleft(item)
        return item

    def latest(self) -> Optional[HistoryItem]:
        return self._items[0] if self._items else None

    def clear(self) -> None:
        self._items.clear()

    def __iter__(self) -> Iterator[HistoryItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> HistoryItem:
        return self._items[index]

    def results(self) -> np.ndarray:
        """Object array of the recorded results, newest first."""
        return as_rational_array([item.result for item in self._items])

    def decimals(self) -> np.ndarray:
        return to_decimal_array([item.result for item in self._items])


__all__ = [
    "CalculationResult",
    "DEFAULT_HISTORY_LIMIT",
    "History",
    "HistoryItem",
    "OPERATIONS",
    "calculate",
    "resolve_operator",
]
