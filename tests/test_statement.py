import pytest

from buildcalc.calc_calculator import Calculator
from buildcalc.calc_nodes import Node
from buildcalc.calc_statement import Statement, StatementResult


def test_unknown_kind_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown statement kind"):
        Statement("print")


def test_execute_expression(calculator: Calculator) -> None:
    statement = Statement("expression", node=Node.number(2))
    assert statement.execute(calculator.global_scope) == StatementResult("= 2.0", 2.0)


def test_execute_assignment_and_deletion(calculator: Calculator) -> None:
    scope = calculator.global_scope
    assert Statement("assignment", name="x", node=Node.number(5)).execute(
        scope
    ) == StatementResult("x = 5.0")
    assert calculator.variables == {"x": 5.0}
    assert Statement("delete_variable", name="x").execute(scope).status == (
        "Variable x deleted"
    )
    assert calculator.variables == {}


def test_execute_function_def(calculator: Calculator) -> None:
    statement = Statement(
        "function_def",
        name="inc",
        parameters=["n"],
        node=Node.binary("add", Node.variable("n"), Node.number(1)),
    )
    result = statement.execute(calculator.global_scope)
    assert result.status == "inc(n) -> n + 1.0"
    assert str(statement) == "inc(n) = n + 1.0"
    assert [f.name for f in calculator.get_functions()] == ["inc"]


def test_statement_text_and_equality() -> None:
    a = Statement("delete_function", name="f")
    assert str(a) == "del f()"
    assert repr(a) == "Statement(delete_function, 'del f()')"
    assert a == Statement("delete_function", name="f")
    assert hash(a) == hash(Statement("delete_function", name="f"))
    assert a != Statement("delete_variable", name="f")
    assert repr(StatementResult("= 1.0", 1.0)) == "StatementResult('= 1.0', value=1.0)"
