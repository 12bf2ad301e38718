"""
Renders Sparkling AST nodes as S-expressions.

The S-expression form is the debugging view of a parse: every node becomes
`(KIND fields... children...)`, so precedence and associativity decisions of
the parser are visible at a glance.

Format:
    - `(IDENT x)` for names, `(LITERAL 1)` / `(LITERAL "s")` / `(LITERAL nil)`
      for literals; `name` fields of other nodes follow the kind directly.
    - PROGRAM and BLOCK list their statements in order.
    - `left` and `right` follow; an absent `left` is written `_` when a
      `right` child is present, trailing absent links are omitted.
    - Top-level statements of a PROGRAM are put on their own lines, indented
      by two spaces; everything else is on one line.

Example:
    >>> to_sexpr(parse("a + 1;"))
    '(PROGRAM\\n  (ADD (IDENT a) (LITERAL 1)))'
"""

from sparkling.emitters.source_emitter import SourceEmitter
from sparkling.sparkling_ast import ASTNode


def format_value(value: object) -> str:
    """Formats a LITERAL payload the way it is spelled in source."""
    return SourceEmitter().emit_expr_literal(ASTNode("LITERAL", value=value))


def sexpr(node: ASTNode | None) -> str:
    """Returns the one-line S-expression of a subtree."""
    if node is None:
        return "_"
    parts = [node.kind]
    if node.kind == "LITERAL":
        parts.append(format_value(node.value))
    elif node.name is not None:
        parts.append(node.name)
    parts.extend(sexpr(child) for child in node.children)
    if node.right is not None:
        parts.append(sexpr(node.left))
        parts.append(sexpr(node.right))
    elif node.left is not None:
        parts.append(sexpr(node.left))
    return "(" + " ".join(parts) + ")"


class SExprEmitter:
    """Collects S-expressions of emitted nodes.

    Attributes:
        lines (list[str]): Accumulated output lines.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []

    def get_output(self) -> str:
        return "\n".join(self.lines)

    def emit_program(self, node: ASTNode) -> None:
        if not node.children:
            self.lines.append("(PROGRAM)")
            return
        self.lines.append("(PROGRAM")
        for stmt in node.children:
            self.lines.append("  " + sexpr(stmt))
        self.lines[-1] += ")"

    def emit_node(self, node: ASTNode) -> None:
        self.lines.append(sexpr(node))


def to_sexpr(tree: ASTNode) -> str:
    emitter = SExprEmitter()
    if tree.kind == "PROGRAM":
        emitter.emit_program(tree)
    else:
        emitter.emit_node(tree)
    return emitter.get_output()


__all__ = ["SExprEmitter", "sexpr", "to_sexpr"]
