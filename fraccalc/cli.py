#!/usr/bin/env python3
"""Evaluate fraction expressions such as ``1/2 + 1/3`` from the command line."""

import argparse
import sys
from typing import List, Optional, TextIO

import structlog

from .calculator import CalculationResult, History, calculate
from .config import Settings, load_settings
from .errors import FraccalcError
from .logging import configure_logging
from .rational import format_rational

logger = structlog.get_logger(__name__)

_FLAGS = frozenset({"-h", "--help", "--strict", "--verbose", "--log-json"})
_VALUE_OPTIONS = frozenset({"--config"})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fraccalc",
        description="Exact fraction arithmetic. Pass LEFT OP RIGHT, or one expression per line on stdin.",
        epilog="Options go before the expression; negative operands such as -1/2 need no escaping.",
    )
    parser.add_argument("expression", nargs="*", help="LEFT OP RIGHT, e.g. 1/2 + 1/3")
    parser.add_argument("--config", dest="config", help="TOML settings file")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Reject non-numeric operand text instead of reading it as 0",
    )
    parser.add_argument("--verbose", action="store_true", default=None, help="Debug logging")
    parser.add_argument("--log-json", action="store_true", default=None, help="JSON log lines")
    return parser


def separate_expression(argv: List[str]) -> List[str]:
    """Insert ``--`` where the expression starts so ``-1/2`` is not read as an option."""
    index = 0
    while index < len(argv):
        token = argv[index]
        if token == "--":
            return argv
        if token in _VALUE_OPTIONS:
            index += 2
        elif token in _FLAGS or token.split("=", 1)[0] in _VALUE_OPTIONS:
            index += 1
        else:
            return [*argv[:index], "--", *argv[index:]]
    return argv


def format_result(result: CalculationResult, decimal_places: int) -> str:
    return f"{result.expression} = {format_rational(result.result)} ({result.decimal:.{decimal_places}f})"


def evaluate_line(line: str, settings: Settings) -> CalculationResult:
    tokens = line.split()
    if len(tokens) != 3:
        raise FraccalcError(f"expected 'LEFT OP RIGHT', got {line.strip()!r}")
    left, op, right = tokens
    return calculate(left, op, right, strict=settings.strict_parsing)


def run_stream(stream: TextIO, settings: Settings, out: Optional[TextIO] = None) -> int:
    """Evaluate every non-blank line of *stream*, then print the history.

    A line that fails with a calculator or arithmetic error is reported on
    stderr and the remaining lines are still evaluated.
    """
    out = out or sys.stdout
    history = History(settings.history_limit)
    failures = 0
    for line in stream:
        if not line.strip():
            continue
        try:
            result = evaluate_line(line, settings)
        except (FraccalcError, ArithmeticError) as exc:
            failures += 1
            logger.info("expression_failed", line=line.strip(), error=str(exc))
            print(f"Error: {exc}", file=sys.stderr)
            continue
        history.record(result)
        print(format_result(result, settings.decimal_places), file=out)

    if len(history):
        print("History:", file=out)
        for item, decimal in zip(history, history.decimals()):
            print(
                f"  {item.expression} = {format_rational(item.result)} ({decimal:.{settings.decimal_places}f})",
                file=out,
            )
    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = build_parser().parse_args(separate_expression(list(argv)))

    settings = load_settings(args.config) if args.config else Settings()
    settings = settings.with_overrides(
        strict_parsing=args.strict,
        verbose=args.verbose,
        log_json=args.log_json,
    )
    configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    if args.expression:
        result = evaluate_line(" ".join(args.expression), settings)
        print(format_result(result, settings.decimal_places))
        return 0
    return run_stream(sys.stdin, settings)


def run() -> None:
    try:
        sys.exit(main())
    except Exception as exc:  # noqa: BLE001
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
