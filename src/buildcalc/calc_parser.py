"""
Calculator Parser

Parses a lexed line of calculator input into a `Statement` holding an expression
tree of `Node` objects.

Supported Constructs
--------------------
- Expressions (infix, lowest to highest precedence):
    * `|`                            logical or (returns an operand, not 0/1)
    * `&`                            logical and (returns an operand, not 0/1)
    * `==  !=  <  <=  >  >=`         comparisons (1 or 0)
    * `+  -`                         additive
    * `*  /  %`                      multiplicative
    * `^`                            power, right-associative
    * `-x  +x  !x`                   unary
    * numbers, variables, calls `f(a, b)`, parenthesized expressions
- Statements:
    * Assignment: `x = 1 + 2`
    * Function definition: `hyp(a, b) = sqrt(a^2 + b^2)`
    * Deletion: `del x` (variable), `del hyp()` (function)
    * Anything else is a bare expression.

Entry Points
------------
- `Parser(tokens).parse()`: Parse a full line into a `Statement`.
- `Parser(tokens).parse_expression()`: Parse a single expression into a `Node`.
- `parse(source)`: Lex and parse a string in one step.

Raises
------
ExpressionSyntaxError
    Raised when unexpected tokens appear, the input is empty, or a definition is
    malformed. Carries the line and column of the offending token.
"""

from __future__ import annotations

from collections.abc import Callable

from buildcalc.calc_constants import BINARY_TOKEN_KINDS, UNARY_TOKEN_KINDS
from buildcalc.calc_errors import ExpressionSyntaxError
from buildcalc.calc_lexer import Token, tokenize
from buildcalc.calc_nodes import Node
from buildcalc.calc_statement import Statement


class Parser:
    """
    Calculator Parser Class

    Transforms a list of tokens (ending with EOF) into a `Statement`.

    Attributes
    ----------
    tokens : list[Token]
        The input token stream to be parsed.
    position : int
        Current index into the token stream.
    """

    logical_or_ops: tuple[str, ...] = ("OR",)
    logical_and_ops: tuple[str, ...] = ("AND",)
    comparison_ops: tuple[str, ...] = ("EQ", "NE", "LT", "LE", "GT", "GE")
    additive_ops: tuple[str, ...] = ("PLUS", "SUB")
    multiplicative_ops: tuple[str, ...] = ("MULT", "DIV", "MOD")

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens: list[Token] = tokens
        self.position: int = 0

    def current(self) -> Token:
        return (
            self.tokens[self.position]
            if self.position < len(self.tokens)
            else Token("EOF", "EOF")
        )

    def peek(self, offset: int = 1) -> Token:
        index = self.position + offset
        return self.tokens[index] if index < len(self.tokens) else Token("EOF", "EOF")

    def advance(self) -> Token:
        tok = self.current()
        self.position += 1
        return tok

    def error(self, message: str, tok: Token | None = None) -> ExpressionSyntaxError:
        tok = tok or self.current()
        if tok.type == "ERROR":
            message = f"Unexpected character {tok.value!r}"
        elif tok.type == "EOF":
            message = f"{message}, got end of input"
        else:
            message = f"{message}, got {tok.value!r}"
        return ExpressionSyntaxError(message, tok.line, tok.col)

    def match(self, *types: str) -> Token:
        tok = self.current()
        if tok.type in types:
            return self.advance()
        raise self.error(f"Expected {' or '.join(types)}")

    def parse(self) -> Statement:
        """Parse one full line and require that nothing follows it."""
        if self.current().type == "EOF":
            raise ExpressionSyntaxError("Empty input")
        statement = self.parse_statement()
        if self.current().type != "EOF":
            raise self.error("Unexpected trailing input")
        return statement

    def parse_statement(self) -> Statement:
        if self.current().type == "DELETE":
            return self.parse_deletion()
        if any(t.type == "ASSIGN" for t in self.tokens[self.position :]):
            return self.parse_definition()
        return Statement("expression", node=self.parse_expression())

    def parse_deletion(self) -> Statement:
        """Parse `del name` or `del name()`."""
        self.match("DELETE")
        name_tok = self.match("IDENT")
        if self.current().type == "LPAREN":
            self.match("LPAREN")
            self.match("RPAREN")
            return Statement("delete_function", name=name_tok.value)
        return Statement("delete_variable", name=name_tok.value)

    def parse_definition(self) -> Statement:
        """Parse `name = expr` or `name(params) = expr`."""
        if self.current().type != "IDENT":
            raise self.error("Invalid assignment target")
        name_tok = self.match("IDENT")

        if self.current().type != "LPAREN":
            self.match("ASSIGN")
            return Statement(
                "assignment", name=name_tok.value, node=self.parse_expression()
            )

        self.match("LPAREN")
        params: list[str] = []
        if self.current().type != "RPAREN":
            while True:
                param_tok = self.match("IDENT")
                if param_tok.value in params:
                    raise ExpressionSyntaxError(
                        f"Duplicate parameter name {param_tok.value!r}",
                        param_tok.line,
                        param_tok.col,
                    )
                params.append(param_tok.value)

                if self.current().type == "COMMA":
                    self.match("COMMA")
                else:
                    break
        self.match("RPAREN")
        self.match("ASSIGN")

        return Statement(
            "function_def",
            name=name_tok.value,
            parameters=params,
            node=self.parse_expression(),
        )

    def parse_expression(self) -> Node:
        return self.parse_logical_or()

    def _parse_left_associative(
        self, operand: Callable[[], Node], operators: tuple[str, ...]
    ) -> Node:
        node = operand()
        while self.current().type in operators:
            op_tok = self.advance()
            node = Node.binary(BINARY_TOKEN_KINDS[op_tok.type], node, operand())
        return node

    def parse_logical_or(self) -> Node:
        return self._parse_left_associative(self.parse_logical_and, self.logical_or_ops)

    def parse_logical_and(self) -> Node:
        return self._parse_left_associative(self.parse_comparison, self.logical_and_ops)

    def parse_comparison(self) -> Node:
        return self._parse_left_associative(self.parse_additive, self.comparison_ops)

    def parse_additive(self) -> Node:
        return self._parse_left_associative(
            self.parse_multiplicative, self.additive_ops
        )

    def parse_multiplicative(self) -> Node:
        return self._parse_left_associative(self.parse_power, self.multiplicative_ops)

    def parse_power(self) -> Node:
        """Parse `a ^ b`; the exponent recurses so `2 ^ 3 ^ 2` is `2 ^ (3 ^ 2)`."""
        base = self.parse_unary()
        if self.current().type == "POW":
            self.advance()
            return Node.binary("pow", base, self.parse_power())
        return base

    def parse_unary(self) -> Node:
        tok = self.current()
        if tok.type in UNARY_TOKEN_KINDS:
            self.advance()
            return Node.unary(UNARY_TOKEN_KINDS[tok.type], self.parse_unary())
        if tok.type == "PLUS":
            self.advance()
            return self.parse_unary()
        return self.parse_primary()

    def parse_primary(self) -> Node:
        tok = self.current()

        if tok.type == "NUMBER":
            self.advance()
            return Node.number(float(tok.value))

        if tok.type == "IDENT":
            self.advance()
            if self.current().type != "LPAREN":
                return Node.variable(tok.value)
            self.match("LPAREN")
            args: list[Node] = []
            if self.current().type != "RPAREN":
                while True:
                    args.append(self.parse_expression())
                    if self.current().type == "COMMA":
                        self.match("COMMA")
                    else:
                        break
            self.match("RPAREN")
            return Node.call(tok.value, args)

        if tok.type == "LPAREN":
            self.advance()
            node = self.parse_expression()
            self.match("RPAREN")
            return node

        raise self.error("Expected expression")


def parse(source: str) -> Statement:
    """Lex and parse one line of calculator input."""
    return Parser(tokenize(source)).parse()


def parse_expression(source: str) -> Node:
    """Lex and parse a bare expression, rejecting statements."""
    parser = Parser(tokenize(source))
    node = parser.parse_expression()
    if parser.current().type != "EOF":
        raise parser.error("Unexpected trailing input")
    return node
