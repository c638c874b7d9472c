"""Exact rational arithmetic with NumPy interoperability.

Every arithmetic operation returns its result in canonical form: lowest terms
with a non-negative denominator. A zero denominator is never corrected or
reported at this level. It passes through :func:`normalize` unchanged and
becomes ``inf`` or ``nan`` in :func:`to_decimal`; callers that need a hard
error go through :func:`fraccalc.calculator.calculate`.
"""
from __future__ import annotations

import math
import numbers
import operator
import re
from fractions import Fraction
from typing import Any, Callable, Optional, Tuple, Union

import numpy as np

from .errors import ParseError

NumberLike = Union["Rational", Fraction, numbers.Real, str]

DEFAULT_MAX_DENOMINATOR = 10**6


def _ensure_int(value: Any, *, name: str) -> int:
    """Convert *value* to ``int`` when it represents an integer."""
    if isinstance(value, numbers.Integral):
        return int(value)
    raise TypeError(f"{name} must be an integer, got {type(value)!r}")


def _canonical(num: int, den: int) -> Tuple[int, int]:
    if den == 0:
        return num, den
    # gcd(0, den) == |den|, so a zero numerator lands on 0/1.
    common = math.gcd(num, den)
    sign = -1 if den < 0 else 1
    return (num // common) * sign, abs(den) // common


class Rational:
    """Signed fraction kept in lowest terms with a non-negative denominator.

    ``Rational(6, -8)`` is stored as ``-3/4``. Use :meth:`raw` to hold a pair
    exactly as given, for instance the output of :func:`parse`.
    """

    __slots__ = ("_numerator", "_denominator")
    __array_priority__ = 1000.0  # Prefer Rational semantics in NumPy expressions.

    def __init__(
        self,
        numerator: Union[int, numbers.Integral] = 0,
        denominator: Union[int, numbers.Integral] = 1,
    ) -> None:
        num = _ensure_int(numerator, name="numerator")
        den = _ensure_int(denominator, name="denominator")
        self._numerator, self._denominator = _canonical(num, den)

    # ------------------------------------------------------------------
    # Constructors
    @classmethod
    def raw(
        cls,
        numerator: Union[int, numbers.Integral],
        denominator: Union[int, numbers.Integral] = 1,
    ) -> "Rational":
        """Build a value without reducing it or moving the sign."""
        self = cls.__new__(cls)
        self._numerator = _ensure_int(numerator, name="numerator")
        self._denominator = _ensure_int(denominator, name="denominator")
        return self

    @classmethod
    def from_float(
        cls, value: float, *, max_denominator: Optional[int] = None
    ) -> "Rational":
        """Return the best rational approximation of *value*."""
        if isinstance(value, bool):  # bool is a subclass of int; treat explicitly.
            return cls(int(value), 1)
        if math.isnan(value) or math.isinf(value):
            raise ValueError("cannot convert NaN or infinity to Rational")
        if max_denominator is None:
            max_denominator = DEFAULT_MAX_DENOMINATOR
        if max_denominator < 1:
            raise ValueError("max_denominator must be >= 1")
        frac = Fraction.from_float(value).limit_denominator(max_denominator)
        return cls(frac.numerator, frac.denominator)

    @classmethod
    def from_fraction(cls, value: Fraction) -> "Rational":
        """Create a :class:`Rational` from :class:`fractions.Fraction`."""
        return cls(value.numerator, value.denominator)

    @classmethod
    def rationalize(
        cls, value: NumberLike, *, max_denominator: Optional[int] = None
    ) -> "Rational":
        """Coerce a numeric-like value or operand text into :class:`Rational`.

        Floats are approximated with ``max_denominator``; text goes through
        :func:`parse` and is returned unnormalized.
        """
        if isinstance(value, str):
            return parse(value)
        return _coerce_operand(value, max_denominator=max_denominator)

    # ------------------------------------------------------------------
    # Properties and helpers
    @property
    def numerator(self) -> int:
        return self._numerator

    @property
    def denominator(self) -> int:
        return self._denominator

    @property
    def is_degenerate(self) -> bool:
        """``True`` when the denominator is zero."""
        return self._denominator == 0

    @property
    def is_normalized(self) -> bool:
        return (self._numerator, self._denominator) == _canonical(
            self._numerator, self._denominator
        )

    def normalized(self) -> "Rational":
        """Return the canonical form of this value (``self`` if already canonical)."""
        if self.is_normalized:
            return self
        return normalize(self._numerator, self._denominator)

    def as_fraction(self) -> Fraction:
        """Return a :class:`Fraction` with the same value.

        Raises ``ZeroDivisionError`` for a degenerate value, as ``Fraction`` does.
        """
        return Fraction(self._numerator, self._denominator)

    # ------------------------------------------------------------------
    # Numeric protocol
    def __float__(self) -> float:
        return to_decimal(self)

    def __int__(self) -> int:
        return int(self.as_fraction())

    def __bool__(self) -> bool:
        return self._numerator != 0

    # ------------------------------------------------------------------
    # Representation
    def __repr__(self) -> str:
        if self._denominator != 0 and self.is_normalized:
            return f"Rational({self._numerator}, {self._denominator})"
        return f"Rational.raw({self._numerator}, {self._denominator})"

    def __str__(self) -> str:
        return format_rational(self)

    def __format__(self, format_spec: str) -> str:
        if format_spec in ("", "r", "R"):
            return str(self)
        try:
            return format(float(self), format_spec)
        except (ValueError, TypeError):
            return format(str(self), format_spec)

    # ------------------------------------------------------------------
    # Internal helpers
    def _binary_operation(
        self,
        other: Any,
        op: Callable[["Rational", "Rational"], "Rational"],
        *,
        reflected: bool = False,
    ) -> Any:
        if reflected:
            def apply(x: Any) -> "Rational":
                return op(_coerce_operand(x), self)
        else:
            def apply(x: Any) -> "Rational":
                return op(self, _coerce_operand(x))

        if isinstance(other, np.ndarray):
            return np.vectorize(apply, otypes=[object])(other)
        if isinstance(other, (list, tuple)):
            return np.array([apply(item) for item in other], dtype=object)
        return apply(other)

    # ------------------------------------------------------------------
    # Arithmetic operators
    def __add__(self, other: Any) -> Any:
        return self._binary_operation(other, add)

    def __radd__(self, other: Any) -> Any:
        return self._binary_operation(other, add, reflected=True)

    def __sub__(self, other: Any) -> Any:
        return self._binary_operation(other, subtract)

    def __rsub__(self, other: Any) -> Any:
        return self._binary_operation(other, subtract, reflected=True)

    def __mul__(self, other: Any) -> Any:
        return self._binary_operation(other, multiply)

    def __rmul__(self, other: Any) -> Any:
        return self._binary_operation(other, multiply, reflected=True)

    def __truediv__(self, other: Any) -> Any:
        return self._binary_operation(other, divide)

    def __rtruediv__(self, other: Any) -> Any:
        return self._binary_operation(other, divide, reflected=True)

    def __neg__(self) -> "Rational":
        return normalize(-self._numerator, self._denominator)

    def __pos__(self) -> "Rational":
        return self

    def __abs__(self) -> "Rational":
        value = self.normalized()
        return Rational.raw(abs(value._numerator), value._denominator)

    # ------------------------------------------------------------------
    # Comparisons
    def _compare(self, other: Any, op) -> bool:
        right = _exact_operand(other)
        if right is None:
            return op(float(self), float(other))
        left = self.normalized()
        right = right.normalized()
        return op(
            left._numerator * right._denominator,
            right._numerator * left._denominator,
        )

    def __eq__(self, other: Any) -> bool:
        try:
            other_rat = _exact_operand(other)
        except TypeError:
            return False
        if other_rat is None:
            return False
        if self._denominator == 0 or other_rat._denominator == 0:
            # Degenerate pairs carry no value to compare, only their components.
            return (self._numerator, self._denominator) == (
                other_rat._numerator,
                other_rat._denominator,
            )
        return (
            self._numerator * other_rat._denominator
            == other_rat._numerator * self._denominator
        )

    def __lt__(self, other: Any) -> bool:
        return self._compare(other, operator.lt)

    def __le__(self, other: Any) -> bool:
        return self._compare(other, operator.le)

    def __gt__(self, other: Any) -> bool:
        return self._compare(other, operator.gt)

    def __ge__(self, other: Any) -> bool:
        return self._compare(other, operator.ge)

    def __hash__(self) -> int:
        if self._denominator == 0:
            return hash((self._numerator, 0))
        return hash(Fraction(self._numerator, self._denominator))

    # ------------------------------------------------------------------
    # NumPy interoperability
    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        if method != "__call__":
            return NotImplemented
        if kwargs.get("out") is not None:
            raise NotImplementedError("`out` argument is not supported for Rational ufuncs")
        op = _UFUNC_DISPATCH.get(ufunc)
        if op is None:
            return NotImplemented

        coerced = []
        has_array = False
        for value in inputs:
            if isinstance(value, np.ndarray):
                coerced.append(as_rational_array(value))
                has_array = True
            else:
                coerced.append(_coerce_operand(value))
        if has_array:
            return np.vectorize(op, otypes=[object])(*coerced)
        return op(*coerced)


def _coerce_operand(value: Any, *, max_denominator: Optional[int] = None) -> Rational:
    if isinstance(value, Rational):
        return value
    if isinstance(value, Fraction):
        return Rational.from_fraction(value)
    if isinstance(value, numbers.Integral):
        return Rational(int(value), 1)
    if isinstance(value, np.generic):  # NumPy scalars
        return _coerce_operand(value.item(), max_denominator=max_denominator)
    if isinstance(value, numbers.Real):
        return Rational.from_float(float(value), max_denominator=max_denominator)
    raise TypeError(f"Cannot interpret {type(value)!r} as Rational")


def _exact_operand(value: Any) -> Optional[Rational]:
    """Coerce for comparison: floats convert exactly, without a denominator limit.

    Returns ``None`` for NaN and infinities, which have no rational value.
    """
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return Rational.from_fraction(Fraction.from_float(value))
    return _coerce_operand(value)


# ----------------------------------------------------------------------
# Core operations


def normalize(numerator: int, denominator: int) -> Rational:
    """Reduce ``numerator/denominator`` to lowest terms with a non-negative denominator.

    The pair is returned unchanged when ``denominator`` is zero, so
    ``normalize(5, 0)`` is ``5/0`` and ``normalize(0, 0)`` is ``0/0``.

    >>> normalize(6, -8)
    Rational(-3, 4)
    >>> normalize(0, 7)
    Rational(0, 1)
    """
    return Rational(numerator, denominator)


def add(a: Rational, b: Rational) -> Rational:
    return normalize(
        a.numerator * b.denominator + b.numerator * a.denominator,
        a.denominator * b.denominator,
    )


def subtract(a: Rational, b: Rational) -> Rational:
    return normalize(
        a.numerator * b.denominator - b.numerator * a.denominator,
        a.denominator * b.denominator,
    )


def multiply(a: Rational, b: Rational) -> Rational:
    return normalize(a.numerator * b.numerator, a.denominator * b.denominator)


def divide(a: Rational, b: Rational) -> Rational:
    """Return ``a / b``.

    A zero-valued divisor is not rejected: the result has a zero denominator.
    """
    return normalize(a.numerator * b.denominator, a.denominator * b.numerator)


def format_rational(value: Rational) -> str:
    """Render *value* as ``"n"`` or ``"n/d"``.

    A zero numerator always renders as ``"0"``, even over an unreduced
    denominator.
    """
    if value.denominator == 1:
        return str(value.numerator)
    if value.numerator == 0:
        return "0"
    return f"{value.numerator}/{value.denominator}"


def to_decimal(value: Rational) -> float:
    """Return ``numerator / denominator`` as a float.

    A zero denominator gives ``inf``, ``-inf`` or ``nan`` rather than raising,
    and so does a quotient too large for a float.
    """
    num, den = value.numerator, value.denominator
    if den == 0:
        sign = (num > 0) - (num < 0)
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.divide(np.float64(sign), np.float64(0.0)))
    try:
        return num / den
    except OverflowError:
        return math.copysign(math.inf, num * den)


_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse(text: Optional[str], *, strict: bool = False) -> Rational:
    """Read ``"n"`` or ``"n/d"`` into an unnormalized :class:`Rational`.

    Without a slash the denominator is 1. With one, the first two fragments
    are the numerator and denominator and a zero denominator is kept as is.
    Empty fragments are 0. Non-numeric fragments are 0 as well unless
    ``strict`` is set, in which case :class:`~fraccalc.errors.ParseError` is
    raised (also for more than one slash).

    Only an optional sign followed by ASCII digits counts as numeric, so
    ``"1_000"`` and non-ASCII digits read as 0 even though ``int()`` would
    accept them.
    """
    if text is None:
        text = ""
    if not isinstance(text, str):
        raise TypeError(f"text must be a string, got {type(text)!r}")
    if "/" not in text:
        return Rational.raw(_parse_int(text, text, strict), 1)
    fragments = text.split("/")
    if strict and len(fragments) > 2:
        raise ParseError(text, "/".join(fragments[1:]))
    return Rational.raw(
        _parse_int(fragments[0], text, strict),
        _parse_int(fragments[1], text, strict),
    )


def _parse_int(fragment: str, text: str, strict: bool) -> int:
    stripped = fragment.strip()
    if not stripped:
        return 0
    if _INTEGER.fullmatch(stripped):
        return int(stripped)
    if strict:
        raise ParseError(text, fragment)
    return 0


def rationalize(value: NumberLike, *, max_denominator: Optional[int] = None) -> Rational:
    """Public helper to convert *value* into :class:`Rational`."""

    return Rational.rationalize(value, max_denominator=max_denominator)


_UFUNC_DISPATCH = {
    np.add: add,
    np.subtract: subtract,
    np.multiply: multiply,
    np.divide: divide,
    np.negative: operator.neg,
    np.positive: operator.pos,
    np.absolute: abs,
}


# ----------------------------------------------------------------------
# Array helpers


def as_rational_array(values: Any) -> np.ndarray:
    """Return an object array of :class:`Rational` operands.

    Entries may be operand text (read with :func:`parse`, left unnormalized),
    integers, fractions or floats. An object array that already holds only
    :class:`Rational` values is copied as is.
    """

    if isinstance(values, np.ndarray):
        if values.dtype == object and all(isinstance(item, Rational) for item in values.flat):
            return values.copy()
        return np.vectorize(Rational.rationalize, otypes=[object])(values)

    coerced = [Rational.rationalize(item) for item in values]
    array = np.empty(len(coerced), dtype=object)
    array[:] = coerced
    return array


def to_decimal_array(values: Any) -> np.ndarray:
    """Convert rational entries to a ``float64`` array using :func:`to_decimal`."""

    array = as_rational_array(values)
    return np.vectorize(to_decimal, otypes=[np.float64])(array)


__all__ = [
    "DEFAULT_MAX_DENOMINATOR",
    "Rational",
    "add",
    "as_rational_array",
    "divide",
    "format_rational",
    "multiply",
    "normalize",
    "parse",
    "rationalize",
    "subtract",
    "to_decimal",
    "to_decimal_array",
]
