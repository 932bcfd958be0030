import pytest
from hypothesis import given
from hypothesis import strategies as st

from buildcalc.calc_errors import ExpressionSyntaxError
from buildcalc.calc_lexer import (
    CharacterStream,
    Lexer,
    Token,
    is_valid_identifier,
    tokenize,
)


def types_of(source: str) -> list[str]:
    return [tok.type for tok in tokenize(source)]


def test_single_char_tokens() -> None:
    code = "+ - * / % ^ ! & | < > = ( ) ,"
    expected = [
        "PLUS",
        "SUB",
        "MULT",
        "DIV",
        "MOD",
        "POW",
        "NOT",
        "AND",
        "OR",
        "LT",
        "GT",
        "ASSIGN",
        "LPAREN",
        "RPAREN",
        "COMMA",
        "EOF",
    ]
    assert types_of(code) == expected


def test_two_char_operators_use_longest_match() -> None:
    assert types_of("== != <= >=") == ["EQ", "NE", "LE", "GE", "EOF"]
    assert types_of("a<=b") == ["IDENT", "LE", "IDENT", "EOF"]
    assert types_of("!x") == ["NOT", "IDENT", "EOF"]


def test_integer_token() -> None:
    tok = Lexer(CharacterStream("123")).next_token()
    assert tok.type == "NUMBER"
    assert tok.value == "123"


@pytest.mark.parametrize(  # type: ignore[misc]
    "source, value",
    [
        ("123.456", "123.456"),
        (".5", ".5"),
        ("5.", "5."),
        ("1e3", "1e3"),
        ("2.5E-3", "2.5E-3"),
        ("1e+20", "1e+20"),
    ],
)
def test_number_formats(source: str, value: str) -> None:
    tokens = tokenize(source)
    assert tokens[0] == Token("NUMBER", value, 1, 1)
    assert tokens[1].type == "EOF"


def test_exponent_without_digits_is_identifier() -> None:
    tokens = tokenize("2e")
    assert [(t.type, t.value) for t in tokens[:-1]] == [("NUMBER", "2"), ("IDENT", "e")]

    tokens = tokenize("3e+")
    assert [t.type for t in tokens] == ["NUMBER", "IDENT", "PLUS", "EOF"]


def test_number_with_two_dots_fails() -> None:
    with pytest.raises(ExpressionSyntaxError) as exc:
        tokenize("1.2.3")
    assert exc.value.message == "Invalid number format"
    assert (exc.value.line, exc.value.col) == (1, 1)


def test_number_out_of_range_fails() -> None:
    with pytest.raises(ExpressionSyntaxError, match="out of range"):
        tokenize("1e999")


def test_identifier_token() -> None:
    tok = Lexer(CharacterStream("my_var2")).next_token()
    assert tok.type == "IDENT"
    assert tok.value == "my_var2"


def test_underscore_identifier() -> None:
    assert tokenize("_")[0] == Token("IDENT", "_", 1, 1)


def test_del_keyword() -> None:
    tokens = tokenize("del x")
    assert tokens[0].type == "DELETE"
    assert tokens[1] == Token("IDENT", "x", 1, 5)


def test_keyword_prefix_is_identifier() -> None:
    assert tokenize("delta")[0].type == "IDENT"


def test_unknown_character_gives_error_token() -> None:
    tokens = tokenize("1 $ 2")
    assert tokens[1].type == "ERROR"
    assert tokens[1].value == "$"
    assert tokens[1].col == 3


def test_columns_and_lines_are_tracked() -> None:
    tokens = tokenize("a +\n  bc")
    assert [(t.line, t.col) for t in tokens[:-1]] == [(1, 1), (1, 3), (2, 3)]


def test_tokenize_empty_gives_only_eof() -> None:
    assert types_of("   ") == ["EOF"]


def test_character_stream_past_end_raises() -> None:
    stream = CharacterStream("a")
    assert stream.next() == "a"
    assert stream.end_of_file()
    assert stream.peek() == ""
    with pytest.raises(Exception, match="past end"):
        stream.next()


def test_token_repr_and_hash() -> None:
    tok = Token("IDENT", "x", 1, 1)
    assert repr(tok) == "Token(IDENT, x)"
    assert tok == Token("IDENT", "x", 1, 1)
    assert tok != Token("IDENT", "x", 1, 2)
    assert len({tok, Token("IDENT", "x", 1, 1)}) == 1


@pytest.mark.parametrize(  # type: ignore[misc]
    "name, valid",
    [
        ("x", True),
        ("_tmp", True),
        ("f2", True),
        ("2f", False),
        ("", False),
        ("a-b", False),
        ("del", False),
    ],
)
def test_is_valid_identifier(name: str, valid: bool) -> None:
    assert is_valid_identifier(name) is valid


@given(st.integers(min_value=0, max_value=10**12))  # type: ignore[misc]
def test_integers_lex_as_single_number(n: int) -> None:
    tokens = tokenize(str(n))
    assert len(tokens) == 2
    assert tokens[0].type == "NUMBER"
    assert float(tokens[0].value) == n


@given(st.text(alphabet=st.characters(blacklist_categories=["Cs"]), max_size=50))  # type: ignore[misc]
def test_lexer_terminates_with_eof(source: str) -> None:
    try:
        tokens = tokenize(source)
    except ExpressionSyntaxError:
        return
    assert tokens[-1].type == "EOF"
    assert all(t.type != "EOF" for t in tokens[:-1])
