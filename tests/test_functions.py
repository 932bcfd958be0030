import math

import pytest

from buildcalc.calc_calculator import Calculator
from buildcalc.calc_errors import (
    InvalidFunctionArgumentsError,
    MathError,
    MaxCallDepthError,
    UndefinedFunctionError,
    UndefinedVariableError,
)
from buildcalc.calc_functions import (
    BUILTIN_CONSTANTS,
    BUILTIN_FUNCTIONS,
    BuiltinFunction,
    UserFunction,
)
from buildcalc.calc_nodes import Node
from buildcalc.calc_parser import parse_expression
from buildcalc.calc_scope import Scope


def call(calculator: Calculator, name: str, *args: float) -> float:
    function = calculator.lookup_function(name)
    return function.evaluate(calculator.global_scope, list(args))


# Scope


def test_global_scope_shape(calculator: Calculator) -> None:
    scope = calculator.global_scope
    assert scope.is_global
    assert scope.global_scope is scope
    assert scope.call_stack == []
    assert scope.variables is calculator.variables


def test_enter_call_pushes_and_pops(calculator: Calculator) -> None:
    scope = calculator.global_scope
    with scope.enter_call("f") as child:
        assert not child.is_global
        assert child.parent is scope
        assert child.global_scope is scope
        assert child.call_stack is scope.call_stack
        assert scope.stack_trace == ["f"]
        with child.enter_call("g") as grandchild:
            assert grandchild.stack_trace == ["f", "g"]
    assert scope.call_stack == []


def test_enter_call_pops_on_error(calculator: Calculator) -> None:
    scope = calculator.global_scope
    with pytest.raises(MathError):
        with scope.enter_call("f"):
            raise MathError("boom")
    assert scope.call_stack == []


def test_variable_lookup_walks_parents(calculator: Calculator) -> None:
    calculator.set_variable("x", 1)
    root = calculator.global_scope
    with root.enter_call("f") as child:
        child.set_variable("y", 2)
        assert child.get_variable("x") == 1
        assert child.get_variable("y") == 2
        assert child.get_variable("pi") == math.pi
        with pytest.raises(UndefinedVariableError):
            root.get_variable("y")


def test_local_shadows_builtin_constant(calculator: Calculator) -> None:
    scope = Scope("f", calculator, parent=calculator.global_scope)
    scope.set_variable("pi", 3)
    assert scope.get_variable("pi") == 3
    assert calculator.global_scope.get_variable("pi") == math.pi


def test_get_function_unknown(calculator: Calculator) -> None:
    with pytest.raises(UndefinedFunctionError) as exc:
        calculator.global_scope.get_function("nope")
    assert exc.value.name == "nope"


# Functions


def test_user_function_evaluates_body(calculator: Calculator) -> None:
    double = UserFunction("double", ["x"], parse_expression("x * 2"))
    calculator.set_function(double)
    assert call(calculator, "double", 21) == 42
    assert calculator.global_scope.call_stack == []


def test_wrong_arity(calculator: Calculator) -> None:
    calculator.set_function(UserFunction("add2", ["a", "b"], parse_expression("a + b")))
    with pytest.raises(InvalidFunctionArgumentsError) as exc:
        call(calculator, "add2", 1)
    assert (exc.value.function_name, exc.value.expected, exc.value.actual) == (
        "add2",
        2,
        1,
    )


def test_duplicate_parameters_rejected() -> None:
    with pytest.raises(ValueError):
        UserFunction("f", ["a", "a"], Node.number(1))


def test_dynamic_scoping_sees_caller_locals(calculator: Calculator) -> None:
    calculator.set_function(UserFunction("inner", [], parse_expression("a + 1")))
    calculator.set_function(UserFunction("outer", ["a"], parse_expression("inner()")))
    assert call(calculator, "outer", 41) == 42


def test_call_depth_guard(small_calculator: Calculator) -> None:
    small_calculator.set_function(UserFunction("f", ["x"], parse_expression("f(x)")))
    with pytest.raises(MaxCallDepthError) as exc:
        call(small_calculator, "f", 1)
    assert exc.value.depth == 10
    assert small_calculator.global_scope.call_stack == []


def test_depth_limit_allows_nested_calls(small_calculator: Calculator) -> None:
    small_calculator.set_function(
        UserFunction("three", [], parse_expression("1 + two()"))
    )
    small_calculator.set_function(UserFunction("two", [], parse_expression("1 + one()")))
    small_calculator.set_function(UserFunction("one", [], parse_expression("1")))
    assert call(small_calculator, "three") == 3


def test_user_function_rendering_and_tag() -> None:
    function = UserFunction("hyp", ["a", "b"], parse_expression("sqrt(a^2 + b^2)"))
    assert function.signature == "hyp(a, b)"
    assert str(function) == "hyp(a, b) -> sqrt(a ^ 2.0 + b ^ 2.0)"
    assert repr(function) == "UserFunction(hyp(a, b))"
    tag = function.to_tag()
    assert tag["Name"] == "hyp"
    assert tag["Parameters"] == ["a", "b"]
    assert UserFunction.from_tag(tag) == function
    assert hash(UserFunction.from_tag(tag)) == hash(function)


def test_builtin_tables() -> None:
    assert set(BUILTIN_CONSTANTS) == {"pi", "e", "tau", "phi"}
    names = [f.name for f in BUILTIN_FUNCTIONS]
    assert len(names) == len(set(names))
    assert all(isinstance(f, BuiltinFunction) for f in BUILTIN_FUNCTIONS)


@pytest.mark.parametrize(  # type: ignore[misc]
    "name, args, expected",
    [
        ("abs", (-3,), 3),
        ("sqrt", (16,), 4),
        ("cbrt", (-27,), -3),
        ("exp", (0,), 1),
        ("ln", (math.e,), 1),
        ("log10", (1000,), 3),
        ("log2", (8,), 3),
        ("sin", (0,), 0),
        ("cos", (0,), 1),
        ("atan2", (1, 1), math.pi / 4),
        ("floor", (-1.5,), -2),
        ("ceil", (1.2,), 2),
        ("round", (2.5,), 3),
        ("round", (-2.5,), -2),
        ("trunc", (-1.7,), -1),
        ("sign", (-4,), -1),
        ("sign", (0,), 0),
        ("min", (2, 5), 2),
        ("max", (2, 5), 5),
        ("hypot", (3, 4), 5),
        ("deg", (math.pi,), 180),
        ("rad", (180,), math.pi),
    ],
)
def test_builtin_functions(
    calculator: Calculator, name: str, args: tuple[float, ...], expected: float
) -> None:
    assert call(calculator, name, *args) == pytest.approx(expected)


@pytest.mark.parametrize(  # type: ignore[misc]
    "name, args",
    [
        ("sqrt", (-1,)),
        ("ln", (0,)),
        ("asin", (2,)),
        ("exp", (1000,)),
    ],
)
def test_builtin_domain_errors(
    calculator: Calculator, name: str, args: tuple[float, ...]
) -> None:
    with pytest.raises(MathError) as exc:
        call(calculator, name, *args)
    assert exc.value.message.startswith(name)
