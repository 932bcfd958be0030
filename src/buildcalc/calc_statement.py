"""
Top-level statements and their results.

A `Statement` is one parsed line of input. Its kind is one of:

    expression        a bare expression, e.g. `3 + x`
    assignment        `name = expr`
    function_def      `name(a, b) = expr`
    delete_variable   `del name`
    delete_function   `del name()`

Executing a statement against the calculator's global scope returns a
`StatementResult` with a status line for display and, for bare expressions only,
the computed value.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from buildcalc.calc_functions import UserFunction
from buildcalc.calc_nodes import Node

if TYPE_CHECKING:
    from buildcalc.calc_scope import Scope

STATEMENT_KINDS = frozenset(
    {
        "expression",
        "assignment",
        "function_def",
        "delete_variable",
        "delete_function",
    }
)


class StatementResult:
    """Outcome of an executed statement.

    Attributes:
        status (str): Human-readable description, e.g. "= 3.0".
        value (float | None): The computed value, only for bare expressions.
    """

    def __init__(self, status: str, value: float | None = None) -> None:
        self.status = status
        self.value = value

    def __repr__(self) -> str:
        return f"StatementResult({self.status!r}, value={self.value!r})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, StatementResult):
            return NotImplemented
        return self.status == other.status and self.value == other.value


class Statement:
    """
    A parsed top-level unit of calculator input.

    Args:
        kind (str): One of `STATEMENT_KINDS`.
        name (str, optional): Target variable or function name.
        parameters (Sequence[str], optional): Parameter names for `function_def`.
        node (Node, optional): Expression for `expression`, `assignment` and `function_def`.
    """

    def __init__(
        self,
        kind: str,
        name: str | None = None,
        parameters: Sequence[str] = (),
        node: Node | None = None,
    ) -> None:
        if kind not in STATEMENT_KINDS:
            raise ValueError(f"Unknown statement kind: {kind!r}")
        self.kind = kind
        self.name = name
        self.parameters: tuple[str, ...] = tuple(parameters)
        self.node = node

    def execute(self, scope: Scope) -> StatementResult:
        """Runs this statement in `scope`, which must be a calculator's global scope."""
        return getattr(self, f"_execute_{self.kind}")(scope)

    def _execute_expression(self, scope: Scope) -> StatementResult:
        value = self.node.evaluate(scope)  # type: ignore[union-attr]
        return StatementResult(f"= {value}", value)

    def _execute_assignment(self, scope: Scope) -> StatementResult:
        # Evaluate first so a failing right-hand side leaves the table untouched
        value = self.node.evaluate(scope)  # type: ignore[union-attr]
        scope.calculator.set_variable(self.name, value)  # type: ignore[arg-type]
        return StatementResult(f"{self.name} = {value}")

    def _execute_function_def(self, scope: Scope) -> StatementResult:
        function = UserFunction(self.name, self.parameters, self.node)  # type: ignore[arg-type]
        scope.calculator.set_function(function)
        return StatementResult(str(function))

    def _execute_delete_variable(self, scope: Scope) -> StatementResult:
        scope.calculator.delete_variable(self.name)  # type: ignore[arg-type]
        return StatementResult(f"Variable {self.name} deleted")

    def _execute_delete_function(self, scope: Scope) -> StatementResult:
        scope.calculator.delete_function(self.name)  # type: ignore[arg-type]
        return StatementResult(f"Function {self.name} deleted")

    def __str__(self) -> str:
        if self.kind == "expression":
            return str(self.node)
        if self.kind == "assignment":
            return f"{self.name} = {self.node}"
        if self.kind == "function_def":
            return f"{self.name}({', '.join(self.parameters)}) = {self.node}"
        if self.kind == "delete_variable":
            return f"del {self.name}"
        return f"del {self.name}()"

    def __repr__(self) -> str:
        return f"Statement({self.kind}, {str(self)!r})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Statement):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.name == other.name
            and self.parameters == other.parameters
            and self.node == other.node
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.name, self.parameters, self.node))
