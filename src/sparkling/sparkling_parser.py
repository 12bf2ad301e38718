"""
Sparkling Language Parser

Parses Sparkling source text into an abstract syntax tree (AST).

This module implements a hand-written, single-pass recursive-descent parser
driven by a pull-style lexer. The parser holds exactly one current token,
requests the next one from the lexer whenever a token is accepted, and builds
`ASTNode` trees bottom-up. It is the backbone of every downstream stage
(compiler, formatter, REPL).

Supported Constructs
--------------------
- Statements:
    * `if`/`else if`/`else`, `while`, `do ... while`, C-style `for`,
      `foreach k as v in expr`
    * `break`, `continue`, `return [expr]`, empty statement `;`, blocks `{}`
    * `var` declarations with optional initializers
    * named `function` statements (file scope only)
    * expression statements
- Expressions, lowest to highest precedence:
    * assignment (`=`, compound assignment, `..=`), right-associative
    * concatenation `..`
    * conditional `c ? t : f`, right-associative
    * `||`, `&&`, comparison, `|`, `^`, `&`, shifts, additive, multiplicative
    * prefix `++ -- + - ! ~ sizeof typeof #`
    * postfix `[]`, calls, `.`/`->` member access, `++ --`
    * terms: parenthesized expressions, function expressions, identifiers,
      literals (`true`, `false`, `nil`, `nan`, numbers, strings)

Parser Behavior
---------------
- Fail-fast: the first lexical or syntax error aborts the parse. There is no
  error recovery.
- `Parser.parse()` returns `None` on error and keeps the formatted message in
  `Parser.last_error`; the message is also logged at ERROR level.
- `Parser.parse(strict=True)` and the module-level `parse()` raise
  `ParseError` instead.
- Right-associative operator chains and prefix operator stacks are folded
  iteratively, so long chains do not consume interpreter stack.

Entry Points
------------
- `Parser().parse(source)`: Parse a full program into a PROGRAM node.
- `parse(source)`: Convenience wrapper that raises on error.

Raises
------
ParseError
    Raised by productions when the grammar cannot be satisfied.
LexicalError
    Raised (through the parser) when the source does not tokenize.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from types import TracebackType
from typing import Any

from sparkling.sparkling_ast import ASTNode
from sparkling.sparkling_constants import (
    ADDITIVE_OPS,
    ASSIGNMENT_OPS,
    BITWISE_AND_OPS,
    BITWISE_OR_OPS,
    BITWISE_XOR_OPS,
    COMPARISON_OPS,
    CONCAT_OPS,
    LOGICAL_AND_OPS,
    LOGICAL_OR_OPS,
    MULTIPLICATIVE_OPS,
    POSTFIX_OPS,
    PREFIX_OPS,
    SHIFT_OPS,
)
from sparkling.sparkling_lexer import (
    CharacterStream,
    Lexer,
    SparklingSyntaxError,
    Token,
)

logger = logging.getLogger(__name__)

# keyword literals and the payload their LITERAL node carries
KEYWORD_LITERALS: dict[str, Any] = {
    "TRUE": True,
    "FALSE": False,
    "NIL": None,
    "NAN": math.nan,
}

VALUE_LITERALS = ("INT", "FLOAT", "STRING")

PREFIX_TOKENS = tuple(PREFIX_OPS)
POSTFIX_TOKENS = tuple(POSTFIX_OPS)


class ParseError(SparklingSyntaxError):
    """Raised when a production cannot satisfy its grammar."""


class Parser:
    """
    Sparkling Parser Class

    A reusable parser object. Each call to `parse()` resets the character
    cursor, the flags and the line counter, so one instance can process any
    number of independent sources, one at a time.

    Attributes
    ----------
    lexer : Lexer | None
        Token source of the parse in progress.
    current : Token
        The current (lookahead) token.
    eof : bool
        Set once the lexer reports the end of input.
    error : bool
        Set when the last parse failed.
    lineno : int
        Line of the current token.
    last_error : str
        Formatted message of the last failure, empty after a successful parse.

    Methods
    -------
    parse(source, strict=False) -> ASTNode | None
        Parse a complete program.
    advance() -> bool
        Pull the next token from the lexer.
    accept(type_) -> Token | None
        Consume the current token if it has the given type.
    accept_any(types) -> int
        Consume the current token if its type is in `types`; return the index.
    close()
        Drop the error message and the lexer.
    """

    def __init__(self) -> None:
        self.lexer: Lexer | None = None
        self.current: Token = Token("EOF", "EOF", 1, 1)
        self.eof: bool = False
        self.error: bool = False
        self.lineno: int = 1
        self.last_error: str = ""

    def __enter__(self) -> Parser:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self.lexer = None
        self.last_error = ""

    # -- token plumbing ---------------------------------------------------

    def advance(self) -> bool:
        """Pulls the next token; returns False once the input is exhausted."""
        assert self.lexer is not None  # for mypy
        self.current = self.lexer.next_token()
        self.lineno = self.current.line
        self.eof = self.current.type == "EOF"
        return not self.eof

    def accept(self, type_: str) -> Token | None:
        tok = self.current
        if tok.type == type_ and not self.eof:
            self.advance()
            return tok
        return None

    def accept_any(self, types: Sequence[str]) -> int:
        if self.eof:
            return -1
        try:
            index = types.index(self.current.type)
        except ValueError:
            return -1
        self.advance()
        return index

    def expect(self, type_: str, message: str) -> Token:
        tok = self.accept(type_)
        if tok is None:
            raise self.syntax_error(message)
        return tok

    def syntax_error(self, message: str) -> ParseError:
        return ParseError(self.lineno, message)

    # -- entry point ------------------------------------------------------

    def parse(self, source: str, strict: bool = False) -> ASTNode | None:
        """Parse a full Sparkling program.

        Returns the PROGRAM node, or None if the source is malformed (in which
        case `last_error` holds the message). With `strict=True` the error is
        raised instead.
        """
        self.lexer = Lexer(CharacterStream(source))
        self.current = Token("EOF", "EOF", 1, 1)
        self.eof = False
        self.error = False
        self.lineno = 1
        self.last_error = ""

        try:
            try:
                program = self.parse_program()
            except RecursionError:
                raise self.syntax_error("nesting too deep") from None
        except SparklingSyntaxError as e:
            self.error = True
            self.last_error = str(e)
            if strict:
                raise
            logger.error("%s", self.last_error)
            return None

        logger.debug("parsed %d top-level statement(s)", len(program.children))
        return program

    # -- program structure ------------------------------------------------

    def parse_program(self) -> ASTNode:
        program = ASTNode("PROGRAM", 1)
        self.advance()
        while not self.eof:
            if self.current.type == "RBRACE":
                raise self.syntax_error("garbage after input")
            program.children.append(self.parse_statement(is_global=True))
        return program

    def parse_block(self) -> ASTNode:
        """Parse a `{}`-enclosed statement list into a BLOCK node."""
        lbrace = self.expect("LBRACE", "expected '{' in block statement")
        block = ASTNode("BLOCK", lbrace.line)
        while self.accept("RBRACE") is None:
            if self.eof:
                raise self.syntax_error("expected '}' at end of block statement")
            block.children.append(self.parse_statement(is_global=False))
        return block

    def parse_statement(self, is_global: bool = False) -> ASTNode:
        """Parse a single top-level or block-level statement."""
        tok = self.current

        if tok.type == "IF":
            return self.parse_if()
        if tok.type == "WHILE":
            return self.parse_while()
        if tok.type == "DO":
            return self.parse_do()
        if tok.type == "FOR":
            return self.parse_for()
        if tok.type == "FOREACH":
            return self.parse_foreach()
        if tok.type == "BREAK":
            return self.parse_jump("BREAK", "expected ';' after 'break'")
        if tok.type == "CONTINUE":
            return self.parse_jump("CONTINUE", "expected ';' after 'continue'")
        if tok.type == "RETURN":
            return self.parse_return()
        if tok.type == "SEMICOLON":
            self.advance()
            return ASTNode("EMPTY", tok.line)
        if tok.type == "LBRACE":
            return self.parse_block()
        if tok.type == "VAR":
            return self.parse_vardecl()
        if tok.type == "FUNCTION" and is_global:
            return self.parse_function(is_stmt=True)

        # a function at block scope is a function expression
        return self.parse_expr_stmt()

    def parse_function(self, is_stmt: bool) -> ASTNode:
        """Parse a named function statement or an anonymous function expression."""
        func_tok = self.expect("FUNCTION", "expected 'function'")

        name = None
        if is_stmt:
            name_tok = self.accept("IDENT")
            if name_tok is None:
                raise self.syntax_error("expected function name in function statement")
            name = name_tok.value

        self.expect("LPAREN", "expected '(' in function header")

        node = ASTNode("FUNCSTMT" if is_stmt else "FUNCEXPR", func_tok.line, name=name)
        if self.accept("RPAREN") is None:
            node.left = self.parse_decl_args()
            self.expect("RPAREN", "expected ')' after function argument list")

        node.right = self.parse_block()
        return node

    def parse_decl_args(self) -> ASTNode:
        """Parse `IDENT ("," IDENT)*` into a DECLARGS chain linked through `left`."""
        message = "expected identifier in function argument list"
        tok = self.accept("IDENT")
        if tok is None:
            raise self.syntax_error(message)

        head = tail = ASTNode("DECLARGS", tok.line, name=tok.value)
        while self.accept("COMMA") is not None:
            tok = self.accept("IDENT")
            if tok is None:
                raise self.syntax_error(message)
            tail.left = ASTNode("DECLARGS", tok.line, name=tok.value)
            tail = tail.left
        return head

    # -- statements -------------------------------------------------------

    def parse_if(self) -> ASTNode:
        """Parse `if EXPR BLOCK (else (BLOCK | if ...))?`."""
        if_tok = self.expect("IF", "expected 'if'")
        cond = self.parse_expr()
        then_branch = self.parse_block()

        # `else if` is allowed without wrapping the inner `if` in a block
        else_branch = None
        if self.accept("ELSE") is not None:
            if self.current.type == "LBRACE":
                else_branch = self.parse_block()
            elif self.current.type == "IF":
                else_branch = self.parse_if()
            else:
                raise self.syntax_error("expected block or 'if' after 'else'")

        branches = ASTNode("BRANCHES", if_tok.line, left=then_branch, right=else_branch)
        return ASTNode("IF", if_tok.line, left=cond, right=branches)

    def parse_while(self) -> ASTNode:
        while_tok = self.expect("WHILE", "expected 'while'")
        cond = self.parse_expr()
        body = self.parse_block()
        return ASTNode("WHILE", while_tok.line, left=cond, right=body)

    def parse_do(self) -> ASTNode:
        do_tok = self.expect("DO", "expected 'do'")
        body = self.parse_block()
        self.expect("WHILE", "expected 'while' after body of do-while statement")
        cond = self.parse_expr()
        self.expect("SEMICOLON", "expected ';' after condition of do-while statement")
        return ASTNode("DO", do_tok.line, left=cond, right=body)

    def parse_for(self) -> ASTNode:
        """Parse `for INIT ; COND ; STEP BLOCK`; all three expressions are required."""
        for_tok = self.expect("FOR", "expected 'for'")
        init = self.parse_expr()
        self.expect("SEMICOLON", "expected ';' after initialization of for loop")
        cond = self.parse_expr()
        self.expect("SEMICOLON", "expected ';' after condition of for loop")
        step = self.parse_expr()
        body = self.parse_block()
        header = self.make_header(for_tok.line, init, cond, step)
        return ASTNode("FOR", for_tok.line, left=header, right=body)

    def parse_foreach(self) -> ASTNode:
        """Parse `foreach KEY as VALUE in EXPR BLOCK`."""
        foreach_tok = self.expect("FOREACH", "expected 'foreach'")

        key_tok = self.accept("IDENT")
        if key_tok is None:
            raise self.syntax_error("key in foreach loop must be a variable")
        self.expect("AS", "expected 'as' after key in foreach loop")

        value_tok = self.accept("IDENT")
        if value_tok is None:
            raise self.syntax_error("value in foreach loop must be a variable")
        self.expect("IN", "expected 'in' after value in foreach loop")

        key = ASTNode("IDENT", key_tok.line, name=key_tok.value)
        value = ASTNode("IDENT", value_tok.line, name=value_tok.value)
        iterable = self.parse_expr()
        body = self.parse_block()
        header = self.make_header(foreach_tok.line, key, value, iterable)
        return ASTNode("FOREACH", foreach_tok.line, left=header, right=body)

    @staticmethod
    def make_header(line: int, first: ASTNode, second: ASTNode, third: ASTNode) -> ASTNode:
        """Links three loop-header parts into a FORHEADER chain."""
        h3 = ASTNode("FORHEADER", line, left=third)
        h2 = ASTNode("FORHEADER", line, left=second, right=h3)
        return ASTNode("FORHEADER", line, left=first, right=h2)

    def parse_jump(self, kind: str, message: str) -> ASTNode:
        """Parse `break ;` or `continue ;`."""
        tok = self.current
        self.advance()
        self.expect("SEMICOLON", message)
        return ASTNode(kind, tok.line)

    def parse_return(self) -> ASTNode:
        """Parse a RETURN statement with optional value."""
        tok = self.expect("RETURN", "expected 'return'")
        if self.accept("SEMICOLON") is not None:
            return ASTNode("RETURN", tok.line)

        expr = self.parse_expr()
        self.expect("SEMICOLON", "expected ';' after expression in return statement")
        return ASTNode("RETURN", tok.line, left=expr)

    def parse_vardecl(self) -> ASTNode:
        """Parse `var a = 1, b, c = 2;` into a VARDECL chain linked through `right`."""
        self.expect("VAR", "expected 'var'")

        head: ASTNode | None = None
        tail: ASTNode | None = None
        while True:
            name_tok = self.accept("IDENT")
            if name_tok is None:
                raise self.syntax_error("expected identifier in declaration")

            init = self.parse_expr() if self.accept("ASSIGN") is not None else None
            decl = ASTNode("VARDECL", name_tok.line, name=name_tok.value, left=init)
            if tail is None:
                head = decl
            else:
                tail.right = decl
            tail = decl

            if self.accept("COMMA") is None:
                break

        self.expect("SEMICOLON", "expected ';' after variable initialization")
        assert head is not None  # for mypy
        return head

    def parse_expr_stmt(self) -> ASTNode:
        expr = self.parse_expr()
        self.expect("SEMICOLON", "expected ';' after expression")
        return expr

    # -- expressions ------------------------------------------------------

    def parse_expr(self) -> ASTNode:
        return self.parse_assignment()

    def parse_binexpr_rightassoc(
        self, ops: dict[str, str], subexpr: Callable[[], ASTNode]
    ) -> ASTNode:
        """Parse `a (op b)*` and fold from the right: `op(a, op(b, c))`."""
        tokens = tuple(ops)
        operands = [subexpr()]
        operators: list[tuple[str, int]] = []
        while True:
            line = self.current.line
            idx = self.accept_any(tokens)
            if idx < 0:
                break
            operators.append((ops[tokens[idx]], line))
            operands.append(subexpr())

        node = operands.pop()
        while operators:
            kind, line = operators.pop()
            node = ASTNode(kind, line, left=operands.pop(), right=node)
        return node

    def parse_binexpr_leftassoc(
        self, ops: dict[str, str], subexpr: Callable[[], ASTNode]
    ) -> ASTNode:
        """Parse `a (op b)*` and fold from the left: `op(op(a, b), c)`."""
        tokens = tuple(ops)
        node = subexpr()
        while True:
            line = self.current.line
            idx = self.accept_any(tokens)
            if idx < 0:
                return node
            right = subexpr()
            node = ASTNode(ops[tokens[idx]], line, left=node, right=right)

    def parse_assignment(self) -> ASTNode:
        return self.parse_binexpr_rightassoc(ASSIGNMENT_OPS, self.parse_concat)

    def parse_concat(self) -> ASTNode:
        return self.parse_binexpr_leftassoc(CONCAT_OPS, self.parse_condexpr)

    def parse_condexpr(self) -> ASTNode:
        """
        Parse `c ? t : f`. The true branch is a full expression, the false
        branch is another conditional expression, so `a ? b : c ? d : e`
        groups as `a ? b : (c ? d : e)`.
        """
        cond = self.parse_logical_or()
        arms: list[tuple[ASTNode, ASTNode, int]] = []
        while True:
            qmark = self.accept("QMARK")
            if qmark is None:
                break
            if_true = self.parse_expr()
            self.expect("COLON", "expected ':' in conditional expression")
            arms.append((cond, if_true, qmark.line))
            cond = self.parse_logical_or()

        node = cond
        while arms:
            test, if_true, line = arms.pop()
            branches = ASTNode("BRANCHES", line, left=if_true, right=node)
            node = ASTNode("CONDEXPR", line, left=test, right=branches)
        return node

    def parse_logical_or(self) -> ASTNode:
        return self.parse_binexpr_leftassoc(LOGICAL_OR_OPS, self.parse_logical_and)

    def parse_logical_and(self) -> ASTNode:
        return self.parse_binexpr_leftassoc(LOGICAL_AND_OPS, self.parse_comparison)

    def parse_comparison(self) -> ASTNode:
        return self.parse_binexpr_leftassoc(COMPARISON_OPS, self.parse_bitwise_or)

    def parse_bitwise_or(self) -> ASTNode:
        return self.parse_binexpr_leftassoc(BITWISE_OR_OPS, self.parse_bitwise_xor)

    def parse_bitwise_xor(self) -> ASTNode:
        return self.parse_binexpr_leftassoc(BITWISE_XOR_OPS, self.parse_bitwise_and)

    def parse_bitwise_and(self) -> ASTNode:
        return self.parse_binexpr_leftassoc(BITWISE_AND_OPS, self.parse_shift)

    def parse_shift(self) -> ASTNode:
        return self.parse_binexpr_leftassoc(SHIFT_OPS, self.parse_additive)

    def parse_additive(self) -> ASTNode:
        return self.parse_binexpr_leftassoc(ADDITIVE_OPS, self.parse_multiplicative)

    def parse_multiplicative(self) -> ASTNode:
        return self.parse_binexpr_leftassoc(MULTIPLICATIVE_OPS, self.parse_prefix)

    def parse_prefix(self) -> ASTNode:
        """Parse a stack of prefix operators applied to a postfix expression."""
        pending: list[tuple[str, int]] = []
        while True:
            line = self.current.line
            idx = self.accept_any(PREFIX_TOKENS)
            if idx < 0:
                break
            pending.append((PREFIX_OPS[PREFIX_TOKENS[idx]], line))

        node = self.parse_postfix()
        while pending:
            kind, line = pending.pop()
            node = ASTNode(kind, line, left=node)
        return node

    def parse_postfix(self) -> ASTNode:
        """Parse a term followed by any number of postfix operators."""
        node = self.parse_term()

        while True:
            line = self.current.line
            idx = self.accept_any(POSTFIX_TOKENS)
            if idx < 0:
                return node
            kind = POSTFIX_OPS[POSTFIX_TOKENS[idx]]

            if kind == "ARRSUB":
                index = self.parse_expr()
                self.expect(
                    "RBRACKET", "expected ']' after expression in array subscript"
                )
                node = ASTNode(kind, line, left=node, right=index)
            elif kind == "FUNCCALL":
                args = None
                if self.current.type != "RPAREN":
                    args = self.parse_call_args()
                self.expect("RPAREN", "expected ')' after expression in function call")
                node = ASTNode(kind, line, left=node, right=args)
            elif kind == "MEMBEROF":
                if self.current.type != "IDENT":
                    raise self.syntax_error("expected identifier after . or -> operator")
                member = self.parse_term()
                node = ASTNode(kind, line, left=node, right=member)
            else:
                node = ASTNode(kind, line, left=node)

    def parse_call_args(self) -> ASTNode:
        """
        Parse `expr ("," expr)*` into a CALLARGS chain. The first cell has no
        `left`; every later cell links the previous one through `left`, so the
        returned cell holds the last argument.
        """
        line = self.current.line
        node = ASTNode("CALLARGS", line, right=self.parse_expr())
        while True:
            comma = self.accept("COMMA")
            if comma is None:
                return node
            arg = self.parse_expr()
            node = ASTNode("CALLARGS", comma.line, left=node, right=arg)

    def parse_term(self) -> ASTNode:
        """Parse a parenthesized expression, function expression, name or literal."""
        tok = self.current

        if tok.type == "LPAREN":
            self.advance()
            expr = self.parse_expr()
            self.expect("RPAREN", "expected ')' after parenthesized expression")
            return expr

        if tok.type == "FUNCTION":
            return self.parse_function(is_stmt=False)

        if tok.type == "IDENT":
            self.advance()
            return ASTNode("IDENT", tok.line, name=tok.value)

        if tok.type in KEYWORD_LITERALS:
            self.advance()
            return ASTNode("LITERAL", tok.line, value=KEYWORD_LITERALS[tok.type])

        if tok.type in VALUE_LITERALS:
            self.advance()
            return ASTNode("LITERAL", tok.line, value=tok.value)

        if self.eof:
            raise self.syntax_error("unexpected end of input")
        raise self.syntax_error(f"unexpected token '{tok.value}'")


def parse(source: str) -> ASTNode:
    """Parse `source` and return the PROGRAM node.

    Raises:
        LexicalError: If the source does not tokenize.
        ParseError: If the token stream violates the grammar.
    """
    with Parser() as parser:
        program = parser.parse(source, strict=True)
    assert program is not None  # for mypy
    return program


__all__ = ["ParseError", "Parser", "parse"]
