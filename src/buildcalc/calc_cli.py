"""
buildcalc CLI Entrypoint.

This module provides the command-line interface for the calculator. It evaluates
expressions given as arguments or launches the interactive REPL, optionally
against a calculator registry persisted as JSON.

Features:
    - Evaluate one or more statements passed as positional arguments.
    - Load and save every calculator (global and per player) from a JSON state file.
    - Select a per-player calculator with `--player`.
    - Launch an interactive REPL, with debug logging under `--verbose`.

Example usage:
    buildcalc "1 + 2 * 3"
    buildcalc --state calc.json "double(x) = x * 2" "double(21)"
    buildcalc --state calc.json --player alice --repl

Functions:
    load_manager(state: str | None) -> CalculatorsManager:
        Builds the registry, reading it from `state` when the file exists.

    save_manager(manager: CalculatorsManager, state: str | None) -> None:
        Writes the registry back to `state` if anything changed.

    run_expressions(calculator: Calculator, expressions: list[str]) -> int:
        Evaluates each expression in order and returns the process exit code.

    main(argv: list[str] | None = None) -> int:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import json
import logging
import os
import sys

from buildcalc.calc_calculator import Calculator
from buildcalc.calc_manager import CalculatorsManager
from buildcalc.calc_repl import evaluate_line, start_repl

logger = logging.getLogger(__name__)


def load_manager(state: str | None) -> CalculatorsManager:
    """
    Create the calculator registry, loading it from a JSON file if one exists.

    Args:
        state (str | None): Path of the state file, or None for an in-memory registry.

    Returns:
        CalculatorsManager: The loaded or freshly created registry.

    Raises:
        json.JSONDecodeError, KeyError, ValueError: If the file exists but is malformed.
    """
    if state is None or not os.path.exists(state):
        return CalculatorsManager()
    with open(state, encoding="utf-8") as f:
        tag = json.load(f)
    logger.debug("Loading calculators from %s", state)
    return CalculatorsManager.from_tag(tag)


def save_manager(manager: CalculatorsManager, state: str | None) -> None:
    if state is None or not manager.dirty:
        return
    with open(state, "w", encoding="utf-8") as f:
        json.dump(manager.save(), f, indent=2)
    logger.debug("Saved calculators to %s", state)


def select_calculator(manager: CalculatorsManager, player: str | None) -> Calculator:
    if player is None:
        return manager.get_global_data()
    return manager.get_or_create_player_data(player)


def run_expressions(calculator: Calculator, expressions: list[str]) -> int:
    """Evaluates every expression; returns 1 if any of them failed, else 0."""
    exit_code = 0
    for expression in expressions:
        if not evaluate_line(calculator, expression):
            exit_code = 1
    return exit_code


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="buildcalc")
    parser.add_argument(
        "expressions", nargs="*", help="Statements to evaluate, in order"
    )
    parser.add_argument(
        "--state", metavar="FILE", help="JSON file to load and save calculators"
    )
    parser.add_argument(
        "--player", metavar="ID", help="Use this player's calculator (default: global)"
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL after evaluating expressions",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the buildcalc CLI.

    Launches the REPL when no expressions are given or `--repl` is specified;
    otherwise evaluates the expressions and exits with status 1 if any failed.
    The state file, if given, is written back whenever a calculator changed.
    """
    args = build_arg_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    manager = load_manager(args.state)
    calculator = select_calculator(manager, args.player)

    exit_code = 0
    try:
        exit_code = run_expressions(calculator, args.expressions)
        if args.repl or not args.expressions:
            start_repl(calculator, label=args.player or "global")
    finally:
        save_manager(manager, args.state)
    return exit_code


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    sys.exit(main())
