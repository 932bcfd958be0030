"""
Classified failures raised while parsing or evaluating calculator input.

Every error derives from `CalculatorError` and carries the data a caller needs
to render a precise message (names, counts, limits). None of them is fatal:
the calculator's tables are left untouched when one is raised.

Classes:
    CalculatorError: Base class for all calculator failures.
    ExpressionSyntaxError: Input text does not match the grammar.
    UndefinedVariableError: A variable lookup failed.
    UndefinedFunctionError: A function lookup failed.
    InvalidFunctionArgumentsError: A function was called with the wrong arity.
    MaxCallDepthError: The call-depth guard tripped.
    MaxDefinitionsError: A user table is full.
    BuiltinConstantDeletionError: Attempt to delete a builtin constant.
    BuiltinFunctionDeletionError: Attempt to delete a builtin function.
    MathError: Division by zero, domain error or non-finite result.
"""


class CalculatorError(Exception):
    """Base class for all calculator failures."""


class ExpressionSyntaxError(CalculatorError):
    """Raised when text does not conform to the calculator grammar.

    Attributes:
        message (str): Description of the problem.
        line (int): 1-based line of the offending token (0 if unknown).
        col (int): 1-based column of the offending token (0 if unknown).
    """

    def __init__(self, message: str, line: int = 0, col: int = 0):
        location = f" at line {line}, col {col}" if line else ""
        super().__init__(f"{message}{location}")
        self.message = message
        self.line = line
        self.col = col


class UndefinedVariableError(CalculatorError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class UndefinedFunctionError(CalculatorError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class InvalidFunctionArgumentsError(CalculatorError):
    """Raised when a function receives a different number of arguments than it declares.

    Attributes:
        function_name (str): The called function.
        expected (int): Number of declared parameters.
        actual (int): Number of supplied arguments.
    """

    def __init__(self, function_name: str, expected: int, actual: int):
        super().__init__(
            f"{function_name}: expected {expected} argument(s), got {actual}"
        )
        self.function_name = function_name
        self.expected = expected
        self.actual = actual


class MaxCallDepthError(CalculatorError):
    def __init__(self, depth: int):
        super().__init__(f"maximum call depth reached ({depth})")
        self.depth = depth


class MaxDefinitionsError(CalculatorError):
    def __init__(self, count: int):
        super().__init__(f"maximum number of definitions reached ({count})")
        self.count = count


class BuiltinConstantDeletionError(CalculatorError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class BuiltinFunctionDeletionError(CalculatorError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class MathError(CalculatorError):
    """Raised for arithmetic failures (division by zero, domain errors, overflow).

    Attributes:
        message (str): Description of the failure.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
