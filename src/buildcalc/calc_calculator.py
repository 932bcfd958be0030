"""
The calculator facade.

A `Calculator` owns a global scope, the builtin constant and function tables, and
the user variable and function tables (each capped at `MAX_DEFINITIONS`). It turns
one line of text into a parsed `Statement`, runs it against the global scope and
returns the `StatementResult`.

Every change to the user tables notifies the attached manager through
`mark_dirty()` so the host knows the calculator has to be saved.

Example:
    >>> calc = Calculator()
    >>> calc.evaluate("double(x) = x * 2").status
    'double(x) -> x * 2.0'
    >>> calc.evaluate("double(21)").value
    42.0
"""

from __future__ import annotations

import logging
import math
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from buildcalc.calc_constants import (
    FUNCTIONS_KEY,
    MAX_CALL_DEPTH,
    MAX_DEFINITIONS,
    NAME_KEY,
    RECURSION_FRAMES_PER_CALL,
    VALUE_KEY,
    VARIABLES_KEY,
)
from buildcalc.calc_errors import (
    BuiltinConstantDeletionError,
    BuiltinFunctionDeletionError,
    ExpressionSyntaxError,
    MathError,
    MaxCallDepthError,
    MaxDefinitionsError,
    UndefinedFunctionError,
    UndefinedVariableError,
)
from buildcalc.calc_functions import (
    BUILTIN_CONSTANTS,
    BUILTIN_FUNCTIONS,
    Function,
    UserFunction,
)
from buildcalc.calc_lexer import is_valid_identifier
from buildcalc.calc_parser import parse
from buildcalc.calc_scope import Scope
from buildcalc.calc_statement import StatementResult

if TYPE_CHECKING:
    from buildcalc.calc_manager import DataManager

logger = logging.getLogger(__name__)


@contextmanager
def recursion_headroom(frames: int) -> Iterator[None]:
    """Raises the interpreter recursion limit by `frames` for the duration of the block."""
    previous = sys.getrecursionlimit()
    sys.setrecursionlimit(previous + frames)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


class Calculator:
    """
    Evaluates statements and stores user-defined variables and functions.

    Args:
        max_definitions (int): Cap on user variables, and separately on user functions.
        max_call_depth (int): Maximum number of nested function calls.

    Attributes:
        global_scope (Scope): Root scope; its variables are the user variables.
        builtin_constants (dict[str, float]): Read-only builtin constants.
        manager (DataManager | None): Registry notified on every change.
    """

    def __init__(
        self,
        max_definitions: int = MAX_DEFINITIONS,
        max_call_depth: int = MAX_CALL_DEPTH,
    ) -> None:
        self.max_definitions = max_definitions
        self.max_call_depth = max_call_depth
        self.builtin_constants: dict[str, float] = dict(BUILTIN_CONSTANTS)
        self.builtin_functions: dict[str, Function] = {
            f.name: f for f in BUILTIN_FUNCTIONS
        }
        self.global_scope = Scope("global", self)
        self.functions: dict[str, Function] = {}
        self.manager: DataManager[Any] | None = None

    @property
    def variables(self) -> dict[str, float]:
        return self.global_scope.variables

    def set_manager(self, manager: DataManager[Any]) -> None:
        self.manager = manager

    def mark_dirty(self) -> None:
        if self.manager is not None:
            self.manager.mark_dirty()

    def evaluate(self, text: str) -> StatementResult:
        """
        Parses and executes one line of input.

        Returns:
            StatementResult: The status line, plus the value for bare expressions.

        Raises:
            CalculatorError: The specific failure; no table is modified in that case.
        """
        try:
            statement = parse(text)
        except RecursionError as e:
            raise ExpressionSyntaxError("Expression is nested too deeply") from e

        logger.debug("Executing %s statement: %s", statement.kind, statement)
        try:
            with recursion_headroom(self.max_call_depth * RECURSION_FRAMES_PER_CALL):
                return statement.execute(self.global_scope)
        except RecursionError as e:
            raise MaxCallDepthError(self.max_call_depth) from e
        finally:
            # Calls pop themselves; this only matters after a RecursionError
            self.global_scope.call_stack.clear()

    def _check_capacity(self, table: dict[str, Any], name: str) -> None:
        if name not in table and len(table) >= self.max_definitions:
            raise MaxDefinitionsError(len(table))

    def set_variable(self, name: str, value: float) -> None:
        """Defines or overwrites a user variable.

        Raises:
            ExpressionSyntaxError: If `name` is not a valid identifier.
            MathError: If `value` is NaN or infinite.
            MaxDefinitionsError: If the table is full and `name` is new.
        """
        if not is_valid_identifier(name):
            raise ExpressionSyntaxError(f"Invalid variable name {name!r}")
        value = float(value)
        if not math.isfinite(value):
            raise MathError(f"Cannot store non-finite value in {name!r}")
        self._check_capacity(self.variables, name)
        self.variables[name] = value
        logger.debug("Variable %s set to %s", name, value)
        self.mark_dirty()

    def get_variables(self) -> dict[str, float]:
        """Returns a copy of the user variables, sorted by name."""
        return dict(sorted(self.variables.items()))

    def get_builtin_constants(self) -> dict[str, float]:
        return dict(sorted(self.builtin_constants.items()))

    def delete_variable(self, name: str) -> None:
        """Deletes a user variable.

        A user variable that shadows a builtin constant can be deleted; the builtin
        itself cannot.

        Raises:
            BuiltinConstantDeletionError: If only a builtin constant has this name.
            UndefinedVariableError: If no variable has this name.
        """
        if name in self.variables:
            del self.variables[name]
            logger.debug("Variable %s deleted", name)
            self.mark_dirty()
        elif name in self.builtin_constants:
            raise BuiltinConstantDeletionError(name)
        else:
            raise UndefinedVariableError(name)

    def set_function(self, function: Function) -> None:
        """Defines or replaces a user function.

        Raises:
            MaxDefinitionsError: If the table is full and the name is new.
        """
        if not is_valid_identifier(function.name):
            raise ExpressionSyntaxError(f"Invalid function name {function.name!r}")
        self._check_capacity(self.functions, function.name)
        self.functions[function.name] = function
        logger.debug("Function %s defined", function)
        self.mark_dirty()

    def lookup_function(self, name: str) -> Function:
        """Returns the user function `name`, falling back to the builtin one.

        Raises:
            UndefinedFunctionError: If neither table has the name.
        """
        if name in self.functions:
            return self.functions[name]
        if name in self.builtin_functions:
            return self.builtin_functions[name]
        raise UndefinedFunctionError(name)

    def get_functions(self) -> list[Function]:
        return sorted(self.functions.values(), key=lambda f: f.name)

    def get_builtin_functions(self) -> list[Function]:
        return sorted(self.builtin_functions.values(), key=lambda f: f.name)

    def delete_function(self, name: str) -> None:
        """Deletes a user function; mirrors `delete_variable`.

        Raises:
            BuiltinFunctionDeletionError: If only a builtin function has this name.
            UndefinedFunctionError: If no function has this name.
        """
        if name in self.functions:
            del self.functions[name]
            logger.debug("Function %s deleted", name)
            self.mark_dirty()
        elif name in self.builtin_functions:
            raise BuiltinFunctionDeletionError(name)
        else:
            raise UndefinedFunctionError(name)

    def reset(self) -> None:
        """Removes every user variable and function. Builtins are kept."""
        self.variables.clear()
        self.functions.clear()
        logger.debug("Calculator reset")
        self.mark_dirty()

    def to_tag(self) -> dict[str, Any]:
        """Serializes the user variables and functions into a tagged dict."""
        return {
            VARIABLES_KEY: [
                {NAME_KEY: name, VALUE_KEY: value}
                for name, value in self.get_variables().items()
            ],
            FUNCTIONS_KEY: [f.to_tag() for f in self.get_functions()],
        }

    def read_from_tag(self, tag: dict[str, Any]) -> None:
        """Replaces the user tables with the content of `tag` (see `to_tag`)."""
        variables = {
            entry[NAME_KEY]: float(entry[VALUE_KEY])
            for entry in tag.get(VARIABLES_KEY, [])
        }
        functions: dict[str, Function] = {}
        for entry in tag.get(FUNCTIONS_KEY, []):
            function = UserFunction.from_tag(entry)
            functions[function.name] = function

        self.variables.clear()
        self.variables.update(variables)
        self.functions = functions
