"""
Callable functions and the builtin tables.

Classes:
    Function: Base class; validates arity, guards call depth, pushes a call scope.
    UserFunction: A function defined by the user, whose body is an expression tree.
    BuiltinFunction: A function computed natively from its bound parameters.

Module data:
    BUILTIN_CONSTANTS: Constants seeded into every calculator.
    BUILTIN_FUNCTIONS: Functions seeded into every calculator.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from buildcalc.calc_constants import NAME_KEY, NODE_KEY, PARAMETERS_KEY
from buildcalc.calc_errors import (
    InvalidFunctionArgumentsError,
    MathError,
    MaxCallDepthError,
)
from buildcalc.calc_nodes import Node, ensure_finite

if TYPE_CHECKING:
    from buildcalc.calc_scope import Scope


class Function:
    """
    Base class for calculator functions.

    Args:
        name (str): The function's name.
        parameter_names (Sequence[str]): Parameter names, bound positionally on call.

    Raises:
        ValueError: If a parameter name appears more than once.
    """

    def __init__(self, name: str, parameter_names: Sequence[str]) -> None:
        if len(set(parameter_names)) != len(parameter_names):
            raise ValueError(f"Duplicate parameter names in function {name!r}")
        self.name = name
        self.parameter_names: tuple[str, ...] = tuple(parameter_names)

    @property
    def signature(self) -> str:
        return f"{self.name}({', '.join(self.parameter_names)})"

    def evaluate(self, scope: Scope, arguments: Sequence[float]) -> float:
        """
        Calls this function from `scope` with the given argument values.

        A new scope holding one variable per parameter is stacked on top of `scope`
        for the duration of the call and removed afterwards, even on failure.

        Raises:
            InvalidFunctionArgumentsError: If the argument count does not match.
            MaxCallDepthError: If the shared call stack is already past the limit.
        """
        if len(arguments) != len(self.parameter_names):
            raise InvalidFunctionArgumentsError(
                self.name, len(self.parameter_names), len(arguments)
            )
        limit = scope.calculator.max_call_depth
        if len(scope.call_stack) > limit:
            raise MaxCallDepthError(limit)
        with scope.enter_call(self.name) as call_scope:
            for name, value in zip(self.parameter_names, arguments):
                call_scope.set_variable(name, value)
            return self._evaluate_impl(call_scope)

    def _evaluate_impl(self, scope: Scope) -> float:
        raise NotImplementedError

    def to_tag(self) -> dict[str, Any]:
        return {NAME_KEY: self.name, PARAMETERS_KEY: list(self.parameter_names)}

    def __str__(self) -> str:
        return self.signature

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.signature})"


class UserFunction(Function):
    """A user-defined function: `name(params) = body`."""

    def __init__(self, name: str, parameter_names: Sequence[str], body: Node) -> None:
        super().__init__(name, parameter_names)
        self.body = body

    def _evaluate_impl(self, scope: Scope) -> float:
        return self.body.evaluate(scope)

    def to_tag(self) -> dict[str, Any]:
        tag = super().to_tag()
        tag[NODE_KEY] = self.body.to_tag()
        return tag

    @classmethod
    def from_tag(cls, tag: dict[str, Any]) -> UserFunction:
        return cls(tag[NAME_KEY], list(tag[PARAMETERS_KEY]), Node.from_tag(tag[NODE_KEY]))

    def __str__(self) -> str:
        return f"{self.signature} -> {self.body}"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, UserFunction):
            return NotImplemented
        return (
            self.name == other.name
            and self.parameter_names == other.parameter_names
            and self.body == other.body
        )

    def __hash__(self) -> int:
        return hash((self.name, self.parameter_names, self.body))


class BuiltinFunction(Function):
    """A function implemented natively; `implementation` receives the parameter values in order."""

    def __init__(
        self,
        name: str,
        parameter_names: Sequence[str],
        implementation: Callable[..., float],
    ) -> None:
        super().__init__(name, parameter_names)
        self.implementation = implementation

    def _evaluate_impl(self, scope: Scope) -> float:
        arguments = [scope.get_variable(p) for p in self.parameter_names]
        try:
            result = float(self.implementation(*arguments))
        except (ValueError, OverflowError, ZeroDivisionError) as e:
            raise MathError(f"{self.name}: {e}") from e
        return ensure_finite(result)


def _cbrt(x: float) -> float:
    return math.copysign(abs(x) ** (1 / 3), x)


def _sign(x: float) -> float:
    return math.copysign(1.0, x) if x != 0 else 0.0


def _round_half_up(x: float) -> float:
    return math.floor(x + 0.5)


BUILTIN_CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
    "tau": math.tau,
    "phi": (1 + math.sqrt(5)) / 2,
}

BUILTIN_FUNCTIONS: list[BuiltinFunction] = [
    BuiltinFunction("abs", ["x"], abs),
    BuiltinFunction("sqrt", ["x"], math.sqrt),
    BuiltinFunction("cbrt", ["x"], _cbrt),
    BuiltinFunction("exp", ["x"], math.exp),
    BuiltinFunction("ln", ["x"], math.log),
    BuiltinFunction("log10", ["x"], math.log10),
    BuiltinFunction("log2", ["x"], math.log2),
    BuiltinFunction("sin", ["x"], math.sin),
    BuiltinFunction("cos", ["x"], math.cos),
    BuiltinFunction("tan", ["x"], math.tan),
    BuiltinFunction("asin", ["x"], math.asin),
    BuiltinFunction("acos", ["x"], math.acos),
    BuiltinFunction("atan", ["x"], math.atan),
    BuiltinFunction("atan2", ["y", "x"], math.atan2),
    BuiltinFunction("sinh", ["x"], math.sinh),
    BuiltinFunction("cosh", ["x"], math.cosh),
    BuiltinFunction("tanh", ["x"], math.tanh),
    BuiltinFunction("floor", ["x"], math.floor),
    BuiltinFunction("ceil", ["x"], math.ceil),
    BuiltinFunction("round", ["x"], _round_half_up),
    BuiltinFunction("trunc", ["x"], math.trunc),
    BuiltinFunction("sign", ["x"], _sign),
    BuiltinFunction("min", ["a", "b"], min),
    BuiltinFunction("max", ["a", "b"], max),
    BuiltinFunction("hypot", ["x", "y"], math.hypot),
    BuiltinFunction("deg", ["x"], math.degrees),
    BuiltinFunction("rad", ["x"], math.radians),
]
