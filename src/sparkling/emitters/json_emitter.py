"""
Serializes Sparkling AST nodes to JSON through `ASTNode.to_dict()`.

`nan` literals are written as the non-standard `NaN` token that Python's
`json` module reads back.
"""

import json

from sparkling.sparkling_ast import ASTNode


class JsonEmitter:
    def __init__(self, indent: int | None = 2) -> None:
        self.indent = indent
        self.documents: list[str] = []

    def get_output(self) -> str:
        return "\n".join(self.documents)

    def emit_program(self, node: ASTNode) -> None:
        self.emit_node(node)

    def emit_node(self, node: ASTNode) -> None:
        self.documents.append(json.dumps(node.to_dict(), indent=self.indent))


__all__ = ["JsonEmitter"]
