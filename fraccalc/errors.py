"""Exceptions raised by the calculator layer and strict parsing."""
from __future__ import annotations


class FraccalcError(Exception):
    """Base class for every error raised by :mod:`fraccalc`."""


class DivisionByZero(FraccalcError, ZeroDivisionError):
    """A calculation would produce a zero denominator."""


class ParseError(FraccalcError, ValueError):
    """Operand text is neither empty nor an integer or ``a/b`` fraction."""

    def __init__(self, text: str, fragment: str) -> None:
        super().__init__(f"cannot parse {fragment!r} in {text!r} as an integer")
        self.text = text
        self.fragment = fragment


class UnsupportedOperator(FraccalcError, ValueError):
    """The operator symbol has no matching arithmetic operation."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"unsupported operator {symbol!r}")
        self.symbol = symbol


__all__ = ["FraccalcError", "DivisionByZero", "ParseError", "UnsupportedOperator"]
