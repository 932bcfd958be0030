"""
Defines the expression tree evaluated by the calculator.

Classes:
    Node:
        An immutable expression node. The set of node kinds is closed and listed in
        `calc_constants.NODE_TAGS`; each kind has a stable integer tag used when the
        tree is written to a tagged key-value structure.

Node kinds:
    number (value: float): A non-negative numeric literal; `Node.number(-x)` builds `neg`.
    variable (value: str): A variable reference.
    call (value: str, children: arguments): A function call.
    neg, not (children: [operand]): Unary operators.
    add, sub, mul, div, mod, pow, and, or, eq, ne, gt, ge, lt, le
        (children: [left, right]): Binary operators.

Each Node supports:
    evaluate(scope): Compute the node's value in a scope.
    to_tag() / Node.from_tag(tag): Serialize to and from a plain dict.
    __eq__: Structural equality.
    __str__: Canonical infix rendering, re-parsable by the calculator parser.

Example:
    >>> tree = Node.binary("mul", Node.variable("x"), Node.number(2))
    >>> str(tree)
    'x * 2.0'
"""

from __future__ import annotations

import math
import operator
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from buildcalc.calc_constants import (
    BINARY_KINDS,
    LEFT_KEY,
    NAME_KEY,
    NODE_ID_KEY,
    NODE_TAGS,
    OPERAND_KEY,
    OPERANDS_KEY,
    OPERATOR_SYMBOLS,
    PRECEDENCE,
    RIGHT_ASSOCIATIVE,
    RIGHT_KEY,
    TAG_KINDS,
    UNARY_KINDS,
    VALUE_KEY,
)
from buildcalc.calc_errors import MathError

if TYPE_CHECKING:
    from buildcalc.calc_scope import Scope


def ensure_finite(value: float) -> float:
    """Returns `value` unchanged, or raises MathError if it is NaN or infinite."""
    if math.isnan(value):
        raise MathError("Result is not a number")
    if math.isinf(value):
        raise MathError("Result is infinite")
    return value


def _divide(left: float, right: float) -> float:
    if right == 0:
        raise MathError("Division by zero")
    return left / right


def _modulo(left: float, right: float) -> float:
    if right == 0:
        raise MathError("Division by zero")
    return math.fmod(left, right)


UNARY_OPERATIONS: dict[str, Callable[[float], float]] = {
    "neg": operator.neg,
    "not": lambda value: 1.0 if value == 0 else 0.0,
}

BINARY_OPERATIONS: dict[str, Callable[[float, float], float]] = {
    "add": operator.add,
    "sub": operator.sub,
    "mul": operator.mul,
    "div": _divide,
    "mod": _modulo,
    "pow": math.pow,
    "and": lambda left, right: left if left == 0 else right,
    "or": lambda left, right: left if left != 0 else right,
    "eq": lambda left, right: 1.0 if left == right else 0.0,
    "ne": lambda left, right: 1.0 if left != right else 0.0,
    "gt": lambda left, right: 1.0 if left > right else 0.0,
    "ge": lambda left, right: 1.0 if left >= right else 0.0,
    "lt": lambda left, right: 1.0 if left < right else 0.0,
    "le": lambda left, right: 1.0 if left <= right else 0.0,
}


class Node:
    """
    An immutable node of a calculator expression tree.

    Args:
        kind (str): One of the kinds in `NODE_TAGS`.
        value (float | str | None): The literal value for `number`, the name for
            `variable` and `call`, None for operators.
        children (Sequence[Node], optional): Operands, owned exclusively by this node.

    Raises:
        ValueError: If the kind is unknown or the value/children do not fit the kind.
    """

    __slots__ = ("kind", "value", "children")

    kind: str
    value: float | str | None
    children: tuple[Node, ...]

    def __init__(
        self,
        kind: str,
        value: float | str | None = None,
        children: Sequence[Node] | None = None,
    ):
        if kind not in NODE_TAGS:
            raise ValueError(f"Unknown node kind: {kind!r}")
        children = tuple(children or ())
        if not all(isinstance(c, Node) for c in children):
            raise ValueError("Node children must be Node instances")

        if kind == "number":
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"number node needs a numeric value, got {value!r}")
            value = float(value)
            if not math.isfinite(value):
                raise ValueError(f"number node needs a finite value, got {value!r}")
            if math.copysign(1.0, value) < 0:
                raise ValueError(
                    f"number node needs a non-negative value, got {value!r}; "
                    "use Node.number() to build a negated literal"
                )
        elif kind in ("variable", "call"):
            if not isinstance(value, str) or not value:
                raise ValueError(f"{kind} node needs a name, got {value!r}")
        elif value is not None:
            raise ValueError(f"{kind} node takes no value")

        expected = {"number": 0, "variable": 0}.get(kind)
        if kind in UNARY_KINDS:
            expected = 1
        elif kind in BINARY_KINDS:
            expected = 2
        if expected is not None and len(children) != expected:
            raise ValueError(
                f"{kind} node needs {expected} operand(s), got {len(children)}"
            )

        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "children", children)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Node is immutable, cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Node is immutable, cannot delete {name!r}")

    @classmethod
    def number(cls, value: float) -> Node:
        """Builds a literal; a negative value becomes `neg` of its magnitude, as parsed."""
        if (
            isinstance(value, (int, float))
            and not isinstance(value, bool)
            and math.copysign(1.0, value) < 0
        ):
            return cls.unary("neg", cls("number", -value))
        return cls("number", value)

    @classmethod
    def variable(cls, name: str) -> Node:
        return cls("variable", name)

    @classmethod
    def call(cls, name: str, arguments: Sequence[Node] = ()) -> Node:
        return cls("call", name, arguments)

    @classmethod
    def unary(cls, kind: str, operand: Node) -> Node:
        return cls(kind, children=[operand])

    @classmethod
    def binary(cls, kind: str, left: Node, right: Node) -> Node:
        return cls(kind, children=[left, right])

    @property
    def tag(self) -> int:
        return NODE_TAGS[self.kind]

    def evaluate(self, scope: Scope) -> float:
        """Computes the value of this node.

        Raises:
            UndefinedVariableError: If a referenced variable is not visible from `scope`.
            UndefinedFunctionError: If a called function does not exist.
            InvalidFunctionArgumentsError: If a call has the wrong number of arguments.
            MaxCallDepthError: If nested calls exceed the calculator's depth limit.
            MathError: On division by zero, domain errors or non-finite results.
        """
        kind = self.kind
        if kind == "number":
            return self.value  # type: ignore[return-value]
        if kind == "variable":
            return scope.get_variable(self.value)  # type: ignore[arg-type]
        if kind == "call":
            arguments = [operand.evaluate(scope) for operand in self.children]
            function = scope.get_function(self.value)  # type: ignore[arg-type]
            return function.evaluate(scope, arguments)
        if kind in UNARY_OPERATIONS:
            return UNARY_OPERATIONS[kind](self.children[0].evaluate(scope))

        left = self.children[0].evaluate(scope)
        right = self.children[1].evaluate(scope)
        try:
            result = BINARY_OPERATIONS[kind](left, right)
        except (ValueError, OverflowError) as e:
            raise MathError(f"{OPERATOR_SYMBOLS[kind]}: {e}") from e
        return ensure_finite(result)

    def to_tag(self) -> dict[str, Any]:
        """Serializes this node (and all descendants) into a tagged dict."""
        tag: dict[str, Any] = {NODE_ID_KEY: self.tag}
        if self.kind == "number":
            tag[VALUE_KEY] = self.value
        elif self.kind == "variable":
            tag[NAME_KEY] = self.value
        elif self.kind == "call":
            tag[NAME_KEY] = self.value
            tag[OPERANDS_KEY] = [c.to_tag() for c in self.children]
        elif self.kind in UNARY_KINDS:
            tag[OPERAND_KEY] = self.children[0].to_tag()
        else:
            tag[LEFT_KEY] = self.children[0].to_tag()
            tag[RIGHT_KEY] = self.children[1].to_tag()
        return tag

    @classmethod
    def from_tag(cls, tag: dict[str, Any]) -> Node:
        """Rebuilds a node from the structure produced by `to_tag`.

        Raises:
            KeyError: If a required key is missing.
            ValueError: If the node tag is unknown or the payload is invalid.
        """
        if NODE_ID_KEY not in tag:
            raise KeyError(f"Missing required {NODE_ID_KEY!r} field in node data")
        node_id = tag[NODE_ID_KEY]
        kind = TAG_KINDS.get(node_id)
        if kind is None:
            raise ValueError(f"Unknown node tag: {node_id!r}")

        if kind == "number":
            return cls.number(tag[VALUE_KEY])
        if kind == "variable":
            return cls(kind, tag[NAME_KEY])
        if kind == "call":
            return cls(kind, tag[NAME_KEY], [cls.from_tag(t) for t in tag[OPERANDS_KEY]])
        if kind in UNARY_KINDS:
            return cls(kind, children=[cls.from_tag(tag[OPERAND_KEY])])
        return cls(
            kind, children=[cls.from_tag(tag[LEFT_KEY]), cls.from_tag(tag[RIGHT_KEY])]
        )

    def _render_operand(self, child: Node, right_side: bool = False) -> str:
        own = PRECEDENCE[self.kind]
        other = PRECEDENCE[child.kind]
        if other == own and self.kind in BINARY_KINDS:
            wrap = right_side != (self.kind in RIGHT_ASSOCIATIVE)
        else:
            wrap = other < own
        return f"({child})" if wrap else str(child)

    def __str__(self) -> str:
        if self.kind == "number":
            return repr(self.value)
        if self.kind == "variable":
            return str(self.value)
        if self.kind == "call":
            return f"{self.value}({', '.join(str(c) for c in self.children)})"
        symbol = OPERATOR_SYMBOLS[self.kind]
        if self.kind in UNARY_KINDS:
            return f"{symbol}{self._render_operand(self.children[0])}"
        left = self._render_operand(self.children[0])
        right = self._render_operand(self.children[1], right_side=True)
        return f"{left} {symbol} {right}"

    def __repr__(self) -> str:
        parts = [self.kind]
        if self.value is not None:
            parts.append(f"value={self.value!r}")
        if self.children:
            parts.append(f"children=[{', '.join(repr(c) for c in self.children)}]")
        return f"Node({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.value == other.value
            and self.children == other.children
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.value, self.children))
