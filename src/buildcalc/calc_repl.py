"""
Interactive calculator REPL.

Reads lines from stdin and evaluates them against one `Calculator`.

Commands:
    - `reset`: Remove every user variable and function.
    - `delete variable NAME` / `delete function NAME`: Remove one user definition.
    - `list [all|builtin|custom] [variables|functions]`: Show definitions.
    - `exit` / `quit`: Leave the REPL (Ctrl-C and Ctrl-D work too).

Any other line is echoed as `$ <line>` and evaluated. Bare expression results are
stored in `_`. Calculator errors print an `[error] >>>` line and the session keeps
going.
"""

import io
import traceback
from collections.abc import Callable
from typing import Any

from buildcalc.calc_calculator import Calculator
from buildcalc.calc_constants import LAST_RESULT_VARIABLE
from buildcalc.calc_errors import (
    BuiltinConstantDeletionError,
    BuiltinFunctionDeletionError,
    CalculatorError,
    ExpressionSyntaxError,
    InvalidFunctionArgumentsError,
    MathError,
    MaxCallDepthError,
    MaxDefinitionsError,
    UndefinedFunctionError,
    UndefinedVariableError,
)
from buildcalc.calc_functions import Function

LIST_SCOPES = ("all", "builtin", "custom")
LIST_TYPES = ("variables", "functions")

ERROR_MESSAGES: dict[type[CalculatorError], Callable[[Any], str]] = {
    ExpressionSyntaxError: lambda e: f"Syntax error: {e}",
    UndefinedVariableError: lambda e: f"Undefined variable: {e.name}",
    UndefinedFunctionError: lambda e: f"Undefined function: {e.name}",
    InvalidFunctionArgumentsError: lambda e: (
        f"Function {e.function_name} expects {e.expected} argument(s), got {e.actual}"
    ),
    MaxCallDepthError: lambda e: f"Maximum call depth reached ({e.depth})",
    MaxDefinitionsError: lambda e: (
        f"Maximum number of definitions reached ({e.count})"
    ),
    BuiltinConstantDeletionError: lambda e: f"Cannot delete builtin constant {e.name}",
    BuiltinFunctionDeletionError: lambda e: f"Cannot delete builtin function {e.name}",
    MathError: lambda e: f"Math error: {e.message}",
}


def describe_error(error: CalculatorError) -> str:
    formatter = ERROR_MESSAGES.get(type(error))
    return formatter(error) if formatter else str(error)


def print_error(error: CalculatorError) -> None:
    print(f"[error] >>> {describe_error(error)}")


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def format_variables(variables: dict[str, float], builtin: bool) -> list[str]:
    suffix = " (builtin)" if builtin else ""
    return [f"{name} = {value}{suffix}" for name, value in sorted(variables.items())]


def format_functions(functions: list[Function], builtin: bool) -> list[str]:
    suffix = " (builtin)" if builtin else ""
    return [f"{function}{suffix}" for function in sorted(functions, key=lambda f: f.name)]


def list_definitions(calculator: Calculator, scope: str, type_: str) -> list[str]:
    """Returns display lines for the requested scope ("all", "builtin", "custom") and type."""
    lines: list[str] = []
    if type_ == "variables":
        if scope in ("all", "builtin"):
            lines += format_variables(calculator.get_builtin_constants(), True)
        if scope in ("all", "custom"):
            lines += format_variables(calculator.get_variables(), False)
    else:
        if scope in ("all", "builtin"):
            lines += format_functions(calculator.get_builtin_functions(), True)
        if scope in ("all", "custom"):
            lines += format_functions(calculator.get_functions(), False)
    return lines


def handle_command(calculator: Calculator, src: str) -> bool:
    """Runs `reset`, `delete ...` and `list ...` commands. Returns False for anything else."""
    words = src.split()
    if not words:
        return False
    command = words[0].lower()

    if command == "reset" and len(words) == 1:
        calculator.reset()
        print("[ok] >>> Calculator reset.")
        return True

    if command == "delete":
        if len(words) != 3 or words[1] not in ("variable", "function"):
            print("[error] >>> Usage: delete variable|function NAME")
            return True
        try:
            if words[1] == "variable":
                calculator.delete_variable(words[2])
            else:
                calculator.delete_function(words[2])
        except CalculatorError as e:
            print_error(e)
        else:
            print(f"[ok] >>> {words[1].capitalize()} {words[2]} deleted.")
        return True

    if command == "list":
        args = [w.lower() for w in words[1:]]
        scope = next((a for a in args if a in LIST_SCOPES), "all")
        type_ = next((a for a in args if a in LIST_TYPES), "variables")
        if len(args) > 2 or any(a not in LIST_SCOPES + LIST_TYPES for a in args):
            print("[error] >>> Usage: list [all|builtin|custom] [variables|functions]")
            return True
        lines = list_definitions(calculator, scope, type_)
        print(f"[list] >>> {scope} {type_} ({len(lines)}):")
        for line in lines:
            print(line)
        return True

    return False


def evaluate_line(calculator: Calculator, src: str) -> bool:
    """Evaluates one statement, prints its status and stores bare results in `_`.

    Returns:
        bool: True on success, False if a calculator error was reported.
    """
    print(f"$ {src}")
    try:
        result = calculator.evaluate(src)
        print(result.status)
        if result.value is not None:
            calculator.set_variable(LAST_RESULT_VARIABLE, result.value)
    except CalculatorError as e:
        print_error(e)
        return False
    return True


def start_repl(calculator: Calculator | None = None, label: str = "global") -> None:
    calculator = calculator if calculator is not None else Calculator()
    print(f"Calculator REPL [{label}]. Type 'exit' or 'quit' to leave.")

    while True:
        try:
            src = input(">>> ").strip()
            if not src:
                continue
            if src in ("exit", "quit"):
                print("Exiting calculator REPL.")
                return
            try:
                if not handle_command(calculator, src):
                    evaluate_line(calculator, src)
            except Exception:
                print_traceback()
        except (KeyboardInterrupt, EOFError):
            print("\nExiting calculator REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
