import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from sparkling.sparkling_constants import keyword_tokens, operator_lexemes
from sparkling.sparkling_lexer import (
    CharacterStream,
    Lexer,
    LexicalError,
    SparklingSyntaxError,
    Token,
    tokenize,
)


def types(source: str) -> list[str]:
    return [tok.type for tok in tokenize(source)]


def test_punctuation_tokens() -> None:
    code = "( ) [ ] { } , ; : ? . -> .."
    assert types(code) == [
        "LPAREN",
        "RPAREN",
        "LBRACKET",
        "RBRACKET",
        "LBRACE",
        "RBRACE",
        "COMMA",
        "SEMICOLON",
        "COLON",
        "QMARK",
        "DOT",
        "ARROW",
        "DOTDOT",
    ]


@pytest.mark.parametrize(
    "source,expected",
    [
        ("<<=", ["SHLEQ"]),
        ("<<", ["SHL"]),
        ("<=", ["LEQ"]),
        ("..=", ["DOTDOTEQ"]),
        ("++x", ["INCR", "IDENT"]),
        ("a+++b", ["IDENT", "INCR", "PLUS", "IDENT"]),
        ("a&&b||!c", ["IDENT", "LOGAND", "IDENT", "LOGOR", "LOGNOT", "IDENT"]),
        ("x->y", ["IDENT", "ARROW", "IDENT"]),
        ("a-->b", ["IDENT", "DECR", "GREATER", "IDENT"]),
        ("#", ["HASH"]),
    ],
)
def test_longest_match_operators(source: str, expected: list[str]) -> None:
    assert types(source) == expected


def test_every_operator_lexeme_round_trips() -> None:
    for lexeme, tok_type in operator_lexemes.items():
        (tok,) = tokenize(lexeme)
        assert tok.type == tok_type
        assert tok.value == lexeme


def test_keywords() -> None:
    assert types("if else while do for foreach as in") == [
        "IF",
        "ELSE",
        "WHILE",
        "DO",
        "FOR",
        "FOREACH",
        "AS",
        "IN",
    ]
    assert types("break continue return function var") == [
        "BREAK",
        "CONTINUE",
        "RETURN",
        "FUNCTION",
        "VAR",
    ]
    assert types("true false nil nan sizeof typeof") == [
        "TRUE",
        "FALSE",
        "NIL",
        "NAN",
        "SIZEOF",
        "TYPEOF",
    ]


def test_keywords_are_case_sensitive() -> None:
    tok = tokenize("If")[0]
    assert tok.type == "IDENT"
    assert tok.value == "If"


def test_identifier_token() -> None:
    (tok,) = tokenize("_my_Var2")
    assert tok.type == "IDENT"
    assert tok.value == "_my_Var2"


@pytest.mark.parametrize(
    "source,expected",
    [
        ("0", 0),
        ("123", 123),
        ("0x1F", 31),
        ("0XfF", 255),
        ("017", 15),
        ("00", 0),
    ],
)
def test_integer_literals(source: str, expected: int) -> None:
    (tok,) = tokenize(source)
    assert tok.type == "INT"
    assert tok.value == expected
    assert type(tok.value) is int


@pytest.mark.parametrize(
    "source,expected",
    [
        ("1.5", 1.5),
        ("2e3", 2000.0),
        ("6.25E-2", 0.0625),
        ("1e+2", 100.0),
    ],
)
def test_float_literals(source: str, expected: float) -> None:
    (tok,) = tokenize(source)
    assert tok.type == "FLOAT"
    assert tok.value == expected


def test_integer_followed_by_concat_is_not_a_float() -> None:
    assert types("1..2") == ["INT", "DOTDOT", "INT"]


def test_member_access_on_number_is_not_a_float() -> None:
    assert types("1.x") == ["INT", "DOT", "IDENT"]


@pytest.mark.parametrize(
    "source,message",
    [
        ("08", "invalid digit in octal literal '08'"),
        ("0x", "hexadecimal literal needs at least one digit"),
        ("1e", "exponent in float literal has no digits"),
        ("12abc", "invalid character 'a' in number"),
    ],
)
def test_malformed_numbers(source: str, message: str) -> None:
    with pytest.raises(LexicalError) as exc:
        tokenize(source)
    assert exc.value.detail == message


@pytest.mark.parametrize(
    "source,expected",
    [
        ('"hello world"', "hello world"),
        ('""', ""),
        ('"a\\nb"', "a\nb"),
        ('"tab\\there"', "tab\there"),
        ('"q\\"q"', 'q"q'),
        ('"\\\\"', "\\"),
        ('"\\x41\\x62"', "Ab"),
        ('"\\/\\0"', "/\0"),
        ('"\\a\\b\\f\\r\\v"', "\a\b\f\r\v"),
    ],
)
def test_string_literals(source: str, expected: str) -> None:
    (tok,) = tokenize(source)
    assert tok.type == "STRING"
    assert tok.value == expected


@pytest.mark.parametrize(
    "source,message",
    [
        ('"abc', "unterminated string literal"),
        ('"\\q"', "invalid escape sequence '\\q'"),
        ('"\\x4"', "'\\x' must be followed by two hex digits"),
        ('"\\', "unterminated escape sequence"),
    ],
)
def test_malformed_strings(source: str, message: str) -> None:
    with pytest.raises(LexicalError) as exc:
        tokenize(source)
    assert exc.value.detail == message


def test_char_literal_packs_bytes() -> None:
    assert tokenize("'a'")[0] == Token("INT", 97, 1, 1)
    assert tokenize("'ab'")[0].value == 0x6162
    assert tokenize("'\\n'")[0].value == 10


def test_char_literal_hex_escape_is_one_byte() -> None:
    assert tokenize(r"'\xff'")[0].value == 0xFF
    assert tokenize(r"'\x80\x01'")[0].value == 0x8001
    assert tokenize(r"'\xff\xfe\xfd\xfc\xfb'")[0].value == 0xFFFEFDFCFB
    assert tokenize("'é'")[0].value == 0xC3A9


@pytest.mark.parametrize(
    "source,message",
    [
        ("''", "empty character literal"),
        ("'abcdefghi'", "character literal too long"),
        ("'a", "unterminated character literal"),
    ],
)
def test_malformed_char_literals(source: str, message: str) -> None:
    with pytest.raises(LexicalError) as exc:
        tokenize(source)
    assert exc.value.detail == message


def test_comments_are_skipped() -> None:
    tokens = tokenize("/* block\ncomment */ x // line comment\ny")
    assert [t.value for t in tokens] == ["x", "y"]
    assert tokens[0].line == 2
    assert tokens[1].line == 3


def test_unterminated_comment() -> None:
    with pytest.raises(LexicalError, match="unterminated comment"):
        tokenize("x /* never closed")


def test_shebang_line_is_skipped() -> None:
    tokens = tokenize("#!/usr/bin/env spn\nx")
    assert len(tokens) == 1
    assert tokens[0].line == 2


def test_unexpected_character() -> None:
    with pytest.raises(LexicalError) as exc:
        tokenize("x = @;")
    assert exc.value.line == 1
    assert str(exc.value) == (
        "Sparkling: syntax error near line 1: unexpected character '@'"
    )
    assert isinstance(exc.value, SparklingSyntaxError)
    assert isinstance(exc.value, SyntaxError)


def test_non_ascii_identifier_is_rejected() -> None:
    with pytest.raises(LexicalError):
        tokenize("é")


def test_line_and_column_tracking() -> None:
    tokens = tokenize("x = 1;\n  y = 2;")
    y = tokens[4]
    assert y.value == "y"
    assert (y.line, y.col) == (2, 3)


def test_eof_is_sticky() -> None:
    lexer = Lexer(CharacterStream("x"))
    assert lexer.next_token().type == "IDENT"
    assert lexer.next_token().type == "EOF"
    assert lexer.next_token().type == "EOF"


def test_character_stream_past_end() -> None:
    cs = CharacterStream("a")
    assert cs.next() == "a"
    assert cs.peek() == ""
    assert cs.end_of_file()
    with pytest.raises(EOFError):
        cs.next()


def test_token_equality_is_type_exact() -> None:
    assert Token("INT", 1, 1, 1) == Token("INT", 1, 1, 1)
    assert Token("INT", 1, 1, 1) != Token("INT", True, 1, 1)
    assert Token("INT", 1, 1, 1) != "INT"
    assert len({Token("INT", 1, 1, 1), Token("INT", 1, 1, 1)}) == 1
    assert repr(Token("IDENT", "x", 2, 5)) == "Token(IDENT, 'x', 2:5)"


@given(st.from_regex(r"[A-Za-z_][A-Za-z0-9_]{0,12}", fullmatch=True))  # type: ignore[misc]
def test_identifiers_lex_as_single_token(name: str) -> None:
    assume(name not in keyword_tokens)
    (tok,) = tokenize(name)
    assert tok.type == "IDENT"
    assert tok.value == name


@given(st.integers(min_value=0, max_value=10**18))  # type: ignore[misc]
def test_decimal_integers(value: int) -> None:
    (tok,) = tokenize(str(value))
    assert tok.type == "INT"
    assert tok.value == value


@given(st.integers(min_value=0, max_value=10**18))  # type: ignore[misc]
def test_hex_integers(value: int) -> None:
    (tok,) = tokenize(hex(value))
    assert tok.value == value
