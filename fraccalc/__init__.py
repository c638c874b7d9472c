"""Exact fraction arithmetic for calculators."""

from .calculator import CalculationResult, History, HistoryItem, OPERATIONS, calculate
from .errors import DivisionByZero, FraccalcError, ParseError, UnsupportedOperator
from .rational import (
    DEFAULT_MAX_DENOMINATOR,
    Rational,
    add,
    as_rational_array,
    divide,
    format_rational,
    multiply,
    normalize,
    parse,
    rationalize,
    subtract,
    to_decimal,
    to_decimal_array,
)

__all__ = [
    "Rational",
    "normalize",
    "add",
    "subtract",
    "multiply",
    "divide",
    "format_rational",
    "to_decimal",
    "parse",
    "rationalize",
    "DEFAULT_MAX_DENOMINATOR",
    "as_rational_array",
    "to_decimal_array",
    "calculate",
    "CalculationResult",
    "History",
    "HistoryItem",
    "OPERATIONS",
    "FraccalcError",
    "DivisionByZero",
    "ParseError",
    "UnsupportedOperator",
]
