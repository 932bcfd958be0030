"""
Lexical analyzer for calculator input.

This module provides core components for converting raw input text into token streams:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with type, value, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Functions:
    tokenize(source): Lex a whole string into a token list ending with EOF.
    is_valid_identifier(name): Check a name against the lexer's identifier rules.

Features:
    - Skips whitespace
    - Supports longest-match recognition of operators (`<=` before `<`)
    - Recognizes:
        * Identifiers and the reserved `del` keyword
        * Decimal numbers with optional fraction and exponent (`12`, `0.5`, `.5`, `1e+20`)
        * Operators and punctuation

Raises:
    ExpressionSyntaxError: If malformed or out-of-range numbers are encountered.

Example:
    >>> lexer = Lexer(CharacterStream("x + 42"))
    >>> lexer.next_token()
    Token(IDENT, x)
"""

import math
from typing import Any

from buildcalc.calc_constants import KEYWORDS, token_hashmap
from buildcalc.calc_errors import ExpressionSyntaxError

DIGITS: frozenset[str] = frozenset("0123456789")


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            Exception: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise Exception(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` from the current position, or "" if out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token.

    Attributes:
        type (str): The canonical token type (e.g. 'IDENT', 'NUMBER', 'EOF').
        value (str): The raw string value associated with the token.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(self, type_: str, value: str, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))


class Lexer:
    """Lexical analyzer for calculator expressions and statements.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        while not self.stream.end_of_file() and self.peek() in " \t\r\n":
            self.advance()

    def match_operator(self) -> Token | None:
        """Attempts to match the longest valid operator from the current position.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        line, col = self.stream.line, self.stream.column
        max_token = None
        match_len = 0
        candidate = ""

        for i in range(2):  # longest symbol is two characters
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in token_hashmap:
                max_token = candidate
                match_len = i + 1

        if max_token:
            for _ in range(match_len):
                self.advance()
            return Token(token_hashmap[max_token], max_token, line, col)

        return None

    def read_number(self, line: int, col: int) -> Token:
        """Reads a decimal number with an optional fraction and exponent."""
        num = ""
        has_dot = False
        while not self.stream.end_of_file() and (
            self.peek() in DIGITS or self.peek() == "."
        ):
            if self.peek() == ".":
                if has_dot:
                    raise ExpressionSyntaxError("Invalid number format", line, col)
                has_dot = True
            num += self.advance()

        # Exponent only when digits follow, so `2e` stays a number and an identifier
        if self.peek() in ("e", "E"):
            if self.peek(1) in DIGITS or (
                self.peek(1) in ("+", "-") and self.peek(2) in DIGITS
            ):
                num += self.advance()
                if self.peek() in ("+", "-"):
                    num += self.advance()
                while not self.stream.end_of_file() and self.peek() in DIGITS:
                    num += self.advance()

        if math.isinf(float(num)):
            raise ExpressionSyntaxError(f"Number out of range: {num}", line, col)
        return Token("NUMBER", num, line, col)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Raises:
            ExpressionSyntaxError: If a malformed number is encountered.
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return Token("EOF", "EOF", self.stream.line, self.stream.column)

        ch = self.peek()
        line, col = self.stream.line, self.stream.column

        # 1. Identifier or keyword
        if ch.isalpha() or ch == "_":
            ident = ""
            while not self.stream.end_of_file() and (
                self.peek().isalnum() or self.peek() == "_"
            ):
                ident += self.advance()
            if ident in KEYWORDS:
                return Token(token_hashmap[ident], ident, line, col)
            return Token("IDENT", ident, line, col)

        # 2. Number
        if ch in DIGITS or (ch == "." and self.peek(1) in DIGITS):
            return self.read_number(line, col)

        # 3. Operator or punctuation
        token = self.match_operator()
        if token:
            return token

        # 4. Unknown character -> error token, reported by the parser
        return Token("ERROR", self.advance(), line, col)


def tokenize(source: str) -> list[Token]:
    """Lex `source` completely. The returned list always ends with an EOF token."""
    lexer = Lexer(CharacterStream(source, 0, 1, 1))
    tokens: list[Token] = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.type == "EOF":
            return tokens


def is_valid_identifier(name: str) -> bool:
    """Returns True if `name` would lex as a single IDENT token."""
    if not name or not (name[0].isalpha() or name[0] == "_"):
        return False
    return all(c.isalnum() or c == "_" for c in name) and name not in KEYWORDS


__all__ = [
    "CharacterStream",
    "Lexer",
    "Token",
    "is_valid_identifier",
    "token_hashmap",
    "tokenize",
]
