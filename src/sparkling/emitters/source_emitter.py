"""
Translates Sparkling AST nodes back into Sparkling source code.

This module defines the `SourceEmitter` class, a formatter that turns a parsed
tree into canonical, fully parenthesized Sparkling source. Every compound
expression is wrapped in parentheses, so the output re-parses to a tree that is
structurally equal to the input regardless of operator precedence.

Supported Features:
    - Expressions: all binary, prefix, postfix and conditional operators,
      calls, subscripts, member access, literals and function expressions
    - Statements: if/else-if/else, while, do-while, for, foreach, return,
      break, continue, var declarations, function statements, blocks, empty
      statements and expression statements

Behavior:
    - Emits one statement per line, four spaces per block level.
    - Maintains a code buffer (`lines`) which can be retrieved using `get_output()`.

Raises:
    - `TypeError`: If a node of a non-expression kind appears in expression position.
"""

import math

from sparkling.sparkling_ast import ASTNode
from sparkling.sparkling_constants import (
    BINARY_LEVELS,
    PREFIX_OPS,
    token_lexemes,
)

BINARY_LEXEMES: dict[str, str] = {
    kind: token_lexemes[tok] for level in BINARY_LEVELS for tok, kind in level.items()
}
PREFIX_LEXEMES: dict[str, str] = {
    kind: token_lexemes[tok] for tok, kind in PREFIX_OPS.items()
}
POSTFIX_LEXEMES: dict[str, str] = {"POSTINCRMT": "++", "POSTDECRMT": "--"}

STRING_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\0": "\\0",
}

STATEMENT_KINDS = frozenset(
    {
        "BLOCK",
        "EMPTY",
        "IF",
        "WHILE",
        "DO",
        "FOR",
        "FOREACH",
        "BREAK",
        "CONTINUE",
        "RETURN",
        "VARDECL",
        "FUNCSTMT",
    }
)


def quote_string(text: str) -> str:
    out = []
    for ch in text:
        if ch in STRING_ESCAPES:
            out.append(STRING_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\x{ord(ch):02x}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def call_arguments(arglist: ASTNode | None) -> list[ASTNode]:
    """Flattens a CALLARGS chain into the arguments in source order."""
    args: list[ASTNode] = []
    while arglist is not None:
        assert arglist.right is not None  # for mypy
        args.append(arglist.right)
        arglist = arglist.left
    args.reverse()
    return args


def declared_names(arglist: ASTNode | None) -> list[str]:
    """Flattens a DECLARGS chain into parameter names."""
    names: list[str] = []
    while arglist is not None:
        names.append(str(arglist.name))
        arglist = arglist.left
    return names


def header_parts(header: ASTNode | None) -> list[ASTNode]:
    """Flattens a FORHEADER chain into its three parts."""
    parts: list[ASTNode] = []
    while header is not None:
        assert header.left is not None  # for mypy
        parts.append(header.left)
        header = header.right
    return parts


class SourceEmitter:
    """Emits Sparkling source from Sparkling AST nodes.

    Attributes:
        lines (list[str]): Accumulated lines of emitted code.
        indent (int): Current indentation level for emitted code blocks.

    Methods:
        get_output(): Returns the full emitted code as a string.
        emit_program(node): Emits every top-level statement of a PROGRAM node.
        emit_stmt(node): Emits one statement.
        emit_expr(node): Returns the source text of an expression.
    """

    def __init__(self, indent: int = 0) -> None:
        self.lines: list[str] = []
        self.indent = indent

    def indent_str(self) -> str:
        return "    " * self.indent

    def get_output(self) -> str:
        return "\n".join(self.lines)

    def line(self, text: str) -> None:
        self.lines.append(self.indent_str() + text)

    # -- statements -------------------------------------------------------

    def emit_program(self, node: ASTNode) -> None:
        for stmt in node.children:
            self.emit_stmt(stmt)

    def emit_stmt(self, node: ASTNode) -> None:
        if node.kind in STATEMENT_KINDS:
            getattr(self, f"emit_{node.kind.lower()}")(node)
        else:
            self.line(f"{self.emit_expr(node)};")

    def emit_body(self, block: ASTNode) -> None:
        """Emits the statements of a BLOCK one level deeper."""
        self.indent += 1
        for stmt in block.children:
            self.emit_stmt(stmt)
        self.indent -= 1

    def emit_block(self, node: ASTNode) -> None:
        self.line("{")
        self.emit_body(node)
        self.line("}")

    def emit_empty(self, node: ASTNode) -> None:
        self.line(";")

    def emit_break(self, node: ASTNode) -> None:
        self.line("break;")

    def emit_continue(self, node: ASTNode) -> None:
        self.line("continue;")

    def emit_return(self, node: ASTNode) -> None:
        if node.left is None:
            self.line("return;")
        else:
            self.line(f"return {self.emit_expr(node.left)};")

    def emit_if(self, node: ASTNode, keyword: str = "if") -> None:
        """
        Emits an if statement. `else if` chains are emitted flat: the nested IF
        in the else branch continues on the closing-brace line.
        """
        assert node.left is not None and node.right is not None  # for mypy
        branches = node.right
        self.line(f"{keyword} {self.emit_expr(node.left)} {{")
        assert branches.left is not None  # for mypy
        self.emit_body(branches.left)

        else_branch = branches.right
        if else_branch is None:
            self.line("}")
        elif else_branch.kind == "IF":
            self.emit_if(else_branch, keyword="} else if")
        else:
            self.line("} else {")
            self.emit_body(else_branch)
            self.line("}")

    def emit_while(self, node: ASTNode) -> None:
        assert node.left is not None and node.right is not None  # for mypy
        self.line(f"while {self.emit_expr(node.left)} {{")
        self.emit_body(node.right)
        self.line("}")

    def emit_do(self, node: ASTNode) -> None:
        assert node.left is not None and node.right is not None  # for mypy
        self.line("do {")
        self.emit_body(node.right)
        self.line(f"}} while {self.emit_expr(node.left)};")

    def emit_for(self, node: ASTNode) -> None:
        assert node.right is not None  # for mypy
        init, cond, step = (self.emit_expr(p) for p in header_parts(node.left))
        self.line(f"for {init}; {cond}; {step} {{")
        self.emit_body(node.right)
        self.line("}")

    def emit_foreach(self, node: ASTNode) -> None:
        assert node.right is not None  # for mypy
        key, value, iterable = header_parts(node.left)
        self.line(
            f"foreach {key.name} as {value.name} in {self.emit_expr(iterable)} {{"
        )
        self.emit_body(node.right)
        self.line("}")

    def emit_vardecl(self, node: ASTNode) -> None:
        decls = []
        decl: ASTNode | None = node
        while decl is not None:
            if decl.left is None:
                decls.append(str(decl.name))
            else:
                decls.append(f"{decl.name} = {self.emit_expr(decl.left)}")
            decl = decl.right
        self.line(f"var {', '.join(decls)};")

    def emit_funcstmt(self, node: ASTNode) -> None:
        assert node.right is not None  # for mypy
        params = ", ".join(declared_names(node.left))
        self.line(f"function {node.name}({params}) {{")
        self.emit_body(node.right)
        self.line("}")

    # -- expressions ------------------------------------------------------

    def emit_expr(self, node: ASTNode) -> str:
        """
        Returns the source of an expression. Terms and postfix chains are
        returned bare; every other expression is wrapped in parentheses.
        """
        kind = node.kind
        if kind in BINARY_LEXEMES:
            assert node.left is not None and node.right is not None  # for mypy
            op = BINARY_LEXEMES[kind]
            left = self.emit_expr(node.left)
            right = self.emit_expr(node.right)
            return f"({left} {op} {right})"
        if kind in PREFIX_LEXEMES:
            assert node.left is not None  # for mypy
            op = PREFIX_LEXEMES[kind]
            sep = " " if op.isalpha() else ""
            return f"({op}{sep}{self.emit_expr(node.left)})"
        if kind in POSTFIX_LEXEMES:
            assert node.left is not None  # for mypy
            return f"{self.emit_expr(node.left)}{POSTFIX_LEXEMES[kind]}"

        method = getattr(self, f"emit_expr_{kind.lower()}", None)
        if method is None:
            raise TypeError(f"Node kind {kind} is not an expression (line {node.line})")
        result: str = method(node)
        return result

    def emit_expr_condexpr(self, node: ASTNode) -> str:
        assert node.left is not None and node.right is not None  # for mypy
        branches = node.right
        assert branches.left is not None and branches.right is not None  # for mypy
        cond = self.emit_expr(node.left)
        if_true = self.emit_expr(branches.left)
        if_false = self.emit_expr(branches.right)
        return f"({cond} ? {if_true} : {if_false})"

    def emit_expr_arrsub(self, node: ASTNode) -> str:
        assert node.left is not None and node.right is not None  # for mypy
        return f"{self.emit_expr(node.left)}[{self.emit_expr(node.right)}]"

    def emit_expr_funccall(self, node: ASTNode) -> str:
        assert node.left is not None  # for mypy
        args = ", ".join(self.emit_expr(a) for a in call_arguments(node.right))
        return f"{self.emit_expr(node.left)}({args})"

    def emit_expr_memberof(self, node: ASTNode) -> str:
        assert node.left is not None and node.right is not None  # for mypy
        return f"{self.emit_expr(node.left)}.{node.right.name}"

    def emit_expr_ident(self, node: ASTNode) -> str:
        return str(node.name)

    def emit_expr_literal(self, node: ASTNode) -> str:
        value = node.value
        if value is None:
            return "nil"
        if value is True:
            return "true"
        if value is False:
            return "false"
        if isinstance(value, float):
            if math.isnan(value):
                return "nan"
            if math.isinf(value):
                return "1e999"
            return repr(value)
        if isinstance(value, int):
            return str(value)
        return quote_string(str(value))

    def emit_expr_funcexpr(self, node: ASTNode) -> str:
        assert node.right is not None  # for mypy
        params = ", ".join(declared_names(node.left))
        inner = SourceEmitter(self.indent + 1)
        for stmt in node.right.children:
            inner.emit_stmt(stmt)
        body = "\n".join(inner.lines)
        if body:
            return f"(function ({params}) {{\n{body}\n{self.indent_str()}}})"
        return f"(function ({params}) {{}})"


def to_source(tree: ASTNode) -> str:
    """Formats a PROGRAM node (or a single statement) as Sparkling source."""
    emitter = SourceEmitter()
    if tree.kind == "PROGRAM":
        emitter.emit_program(tree)
    else:
        emitter.emit_stmt(tree)
    return emitter.get_output()


__all__ = ["SourceEmitter", "quote_string", "to_source"]
