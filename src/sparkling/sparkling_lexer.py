"""
Lexical analyzer for the Sparkling scripting language.

Turns Sparkling source text into a stream of tokens, pulled one at a time:

Classes:
    CharacterStream: Position-tracking cursor over the source text.
    Token: A token kind, its literal payload and where it starts.
    Lexer: Converts a CharacterStream into a sequence of tokens, one token per call.
    SparklingSyntaxError: Base class of every front-end diagnostic.
    LexicalError: Raised by the lexer for malformed input.

Features:
    - Skips whitespace, `/* block */` and `// line` comments, and a leading `#!` line
    - Longest-match recognition of operators and punctuation
    - Recognizes:
        * Identifiers and reserved words
        * Integers (decimal, hexadecimal `0x1f`, octal `017`)
        * Floats (`1.5`, `2e10`, `6.02e-23`)
        * Strings (double quoted, with escape sequences)
        * Character literals (single quoted, packed into an integer)
        * Operators and punctuation

Raises:
    LexicalError: On unterminated strings/comments, bad escapes, malformed
        numbers and characters that start no token.

Example:
    >>> lexer = Lexer(CharacterStream("var x = 42;"))
    >>> lexer.next_token()
    Token(VAR, 'var', 1:1)

Exports:
    - CharacterStream
    - Token
    - Lexer
    - LexicalError
    - SparklingSyntaxError
    - token_hashmap
"""

from typing import Any

from sparkling.sparkling_constants import (
    ERRMSG_PREFIX,
    MAX_OPERATOR_LENGTH,
    keyword_tokens,
    operator_lexemes,
    token_hashmap,
)

SIMPLE_ESCAPES: dict[str, str] = {
    "\\": "\\",
    "/": "/",
    "'": "'",
    '"': '"',
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "0": "\0",
}

DIGITS = "0123456789"
HEX_DIGITS = "0123456789abcdefABCDEF"

# character literals are packed into a 64-bit integer
MAX_CHAR_LITERAL_BYTES = 8


class SparklingSyntaxError(SyntaxError):
    """A syntax or lexical error found while reading Sparkling source.

    Attributes:
        line (int): The 1-based line the error was detected on.
        detail (str): The production- or lexer-specific message.
    """

    def __init__(self, line: int, detail: str) -> None:
        super().__init__(detail)
        self.line = line
        self.detail = detail

    def __str__(self) -> str:
        return ERRMSG_PREFIX.format(line=self.line) + self.detail


class LexicalError(SparklingSyntaxError):
    """Raised when the character stream does not form a valid token."""


class CharacterStream:
    """Cursor over Sparkling source text.

    `line` and `column` always describe the next unread character, so the
    lexer can stamp a token with its start position before consuming it.
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column
        self._length = len(source)

    def next(self) -> str:
        """Consume one character; raises EOFError once the text is exhausted."""
        if self.end_of_file():
            raise EOFError(
                f"read past end of source (line {self.line}, offset {self.position})"
            )
        char = self.source[self.position]
        self.position += 1
        if char == "\n":
            self.line, self.column = self.line + 1, 1
        else:
            self.column += 1
        return char

    def peek(self, offset: int = 0) -> str:
        # "" doubles as the end-of-input sentinel
        index = self.position + offset
        return self.source[index] if 0 <= index < self._length else ""

    def end_of_file(self) -> bool:
        return self.position >= self._length


class Token:
    """Represents a single lexical token of Sparkling source.

    Attributes:
        type (str): The canonical token type (e.g. 'IDENT', 'INT', 'PLUSEQ', 'EOF').
        value (Any): The literal payload: `int` for INT, `float` for FLOAT, the
            decoded `str` for STRING, the name for IDENT, the lexeme otherwise.
        line (int): Line of the first character, counted from 1.
        col (int): Column of the first character, counted from 1.
    """

    def __init__(self, type_: str, value: Any, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    def _key(self) -> tuple[str, type, Any, int, int]:
        return (self.type, type(self.value), self.value, self.line, self.col)

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r}, {self.line}:{self.col})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())


class Lexer:
    """Lexical analyzer for Sparkling.

    The Lexer pulls characters from a CharacterStream and produces one Token
    per call to `next_token()`. Once the input is exhausted every further call
    returns an EOF token.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream
        if self.stream.position == 0 and self.peek() == "#" and self.peek(1) == "!":
            self.skip_line()

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def error(self, message: str, line: int | None = None) -> LexicalError:
        return LexicalError(self.stream.line if line is None else line, message)

    def skip_whitespace(self) -> None:
        """Skips whitespace and both comment styles."""
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch in " \t\r\n\f\v":
                self.advance()
            elif ch == "/" and self.peek(1) == "/":
                self.skip_line()
            elif ch == "/" and self.peek(1) == "*":
                self.skip_block_comment()
            else:
                break

    def skip_line(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def skip_block_comment(self) -> None:
        line = self.stream.line
        self.advance()
        self.advance()
        while not self.stream.end_of_file():
            if self.peek() == "*" and self.peek(1) == "/":
                self.advance()
                self.advance()
                return
            self.advance()
        raise self.error("unterminated comment", line)

    def match_operator(self) -> Token | None:
        """Attempts to match the longest valid operator from the current position."""
        line, col = self.stream.line, self.stream.column
        max_token = None
        candidate = ""

        for i in range(MAX_OPERATOR_LENGTH):
            ch = self.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in operator_lexemes:
                max_token = candidate

        if max_token:
            for _ in range(len(max_token)):
                self.advance()
            return Token(token_hashmap[max_token], max_token, line, col)

        return None

    def read_escape(self) -> str:
        """Decodes one escape sequence; the backslash is the current character."""
        line = self.stream.line
        self.advance()
        if self.stream.end_of_file():
            raise self.error("unterminated escape sequence", line)
        ch = self.advance()
        if ch in SIMPLE_ESCAPES:
            return SIMPLE_ESCAPES[ch]
        if ch == "x":
            digits = self.peek() + self.peek(1)
            if len(digits) != 2 or any(d not in HEX_DIGITS for d in digits):
                raise self.error("'\\x' must be followed by two hex digits", line)
            self.advance()
            self.advance()
            return chr(int(digits, 16))
        raise self.error(f"invalid escape sequence '\\{ch}'", line)

    def read_string(self) -> Token:
        line, col = self.stream.line, self.stream.column
        self.advance()
        chars: list[str] = []
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch == '"':
                self.advance()
                return Token("STRING", "".join(chars), line, col)
            if ch == "\\":
                chars.append(self.read_escape())
            else:
                chars.append(self.advance())
        raise self.error("unterminated string literal", line)

    def read_char_literal(self) -> Token:
        line, col = self.stream.line, self.stream.column
        self.advance()
        value = 0
        count = 0
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch == "'":
                self.advance()
                if count == 0:
                    raise self.error("empty character literal", line)
                return Token("INT", value, line, col)
            # an escape is exactly one byte; raw source characters are UTF-8
            if ch == "\\":
                chunk = bytes([ord(self.read_escape())])
            else:
                chunk = self.advance().encode("utf-8")
            for byte in chunk:
                count += 1
                if count > MAX_CHAR_LITERAL_BYTES:
                    raise self.error("character literal too long", line)
                value = (value << 8) | byte
        raise self.error("unterminated character literal", line)

    def read_digits(self, allowed: str) -> str:
        digits = ""
        while not self.stream.end_of_file() and self.peek() in allowed:
            digits += self.advance()
        return digits

    def read_number(self) -> Token:
        line, col = self.stream.line, self.stream.column

        if self.peek() == "0" and self.peek(1) in ("x", "X"):
            self.advance()
            self.advance()
            digits = self.read_digits(HEX_DIGITS)
            if not digits:
                raise self.error("hexadecimal literal needs at least one digit", line)
            token = Token("INT", int(digits, 16), line, col)
        else:
            text = self.read_digits(DIGITS)
            is_float = False
            if self.peek() == "." and self.peek(1) != "" and self.peek(1) in DIGITS:
                is_float = True
                text += self.advance()
                text += self.read_digits(DIGITS)
            if self.peek() in ("e", "E"):
                is_float = True
                text += self.advance()
                if self.peek() in ("+", "-"):
                    text += self.advance()
                exponent = self.read_digits(DIGITS)
                if not exponent:
                    raise self.error("exponent in float literal has no digits", line)
                text += exponent
            if is_float:
                token = Token("FLOAT", float(text), line, col)
            elif len(text) > 1 and text[0] == "0":
                if any(d not in "01234567" for d in text):
                    raise self.error(f"invalid digit in octal literal '{text}'", line)
                token = Token("INT", int(text, 8), line, col)
            else:
                token = Token("INT", int(text), line, col)

        if self.peek().isalnum() or self.peek() == "_":
            raise self.error(f"invalid character '{self.peek()}' in number", line)
        return token

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Returns:
            Token: The next token, or an EOF token once the input is exhausted.

        Raises:
            LexicalError: If a malformed token is encountered.
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return Token("EOF", "EOF", self.stream.line, self.stream.column)

        ch = self.peek()
        line, col = self.stream.line, self.stream.column

        # 1. Identifier or keyword
        if ch.isascii() and (ch.isalpha() or ch == "_"):
            ident = ""
            while not self.stream.end_of_file() and (
                self.peek().isascii() and (self.peek().isalnum() or self.peek() == "_")
            ):
                ident += self.advance()
            if ident in keyword_tokens:
                return Token(keyword_tokens[ident], ident, line, col)
            return Token("IDENT", ident, line, col)

        # 2. Integer or float
        if ch in DIGITS:
            return self.read_number()

        # 3. String and character literals
        if ch == '"':
            return self.read_string()
        if ch == "'":
            return self.read_char_literal()

        # 4. Operator or punctuation
        token = self.match_operator()
        if token:
            return token

        # 5. Unknown character
        raise self.error(f"unexpected character {ch!r}", line)


def tokenize(source: str) -> list[Token]:
    """Lexes a whole source string, excluding the trailing EOF token."""
    lexer = Lexer(CharacterStream(source))
    tokens = []
    while True:
        tok = lexer.next_token()
        if tok.type == "EOF":
            break
        tokens.append(tok)
    return tokens


__all__ = [
    "CharacterStream",
    "Lexer",
    "LexicalError",
    "SparklingSyntaxError",
    "Token",
    "token_hashmap",
    "tokenize",
]
