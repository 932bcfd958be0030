"""
Evaluation scopes.

A `Scope` is one frame of the calculator's evaluation stack. The global scope is
created once per `Calculator` and holds the user variables; every function call
pushes a child scope holding the call's parameters and pops it when the call
returns. All scopes of a calculator share one call stack (the names of the active
functions), owned by the global scope.

Variable lookup walks the chain of parent scopes up to the global scope, then
falls back to the calculator's builtin constants.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from buildcalc.calc_errors import UndefinedVariableError

if TYPE_CHECKING:
    from buildcalc.calc_calculator import Calculator
    from buildcalc.calc_functions import Function


class Scope:
    """
    A frame of local variables with a link to its parent frame.

    Args:
        name (str): Name shown in stack traces (the function name, or "global").
        calculator (Calculator): The calculator whose constants and functions are visible.
        parent (Scope, optional): The calling scope; None for the global scope.

    Attributes:
        variables (dict[str, float]): Variables defined in this frame only.
        global_scope (Scope): The root of the chain.
        call_stack (list[str]): Active function names, shared with the global scope.
    """

    def __init__(
        self, name: str, calculator: Calculator, parent: Scope | None = None
    ) -> None:
        self.name = name
        self.calculator = calculator
        self.parent = parent
        self.global_scope: Scope = parent.global_scope if parent else self
        self.call_stack: list[str] = parent.call_stack if parent else []
        self.variables: dict[str, float] = {}

    @property
    def is_global(self) -> bool:
        return self.parent is None

    @property
    def stack_trace(self) -> list[str]:
        return list(self.call_stack)

    def get_variable(self, name: str) -> float:
        """Resolves `name` through this scope, its parents, then the builtin constants.

        Raises:
            UndefinedVariableError: If the name is not defined anywhere.
        """
        scope: Scope | None = self
        while scope is not None:
            if name in scope.variables:
                return scope.variables[name]
            scope = scope.parent
        constants = self.calculator.builtin_constants
        if name in constants:
            return constants[name]
        raise UndefinedVariableError(name)

    def set_variable(self, name: str, value: float) -> None:
        self.variables[name] = value

    def get_function(self, name: str) -> Function:
        return self.calculator.lookup_function(name)

    @contextmanager
    def enter_call(self, function_name: str) -> Iterator[Scope]:
        """Pushes a child scope for a call to `function_name`, popping it on exit."""
        self.call_stack.append(function_name)
        try:
            yield Scope(function_name, self.calculator, parent=self)
        finally:
            self.call_stack.pop()

    def __repr__(self) -> str:
        return f"Scope({self.name}, variables={self.variables!r})"
