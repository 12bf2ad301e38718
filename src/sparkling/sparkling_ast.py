"""
Defines the abstract syntax tree (AST) node structure for the Sparkling language.

Classes:
    ASTNode:
        A uniform tagged node used by the parser, the emitters and test suites.
    ASTDict:
        TypedDict representation for serializing ASTNode instances to plain
        Python dictionaries, suitable for JSON output or debugging.
    NodeVisitor:
        Dispatching walker; the single fold interface for downstream passes.

Functions:
    walk(node): Iterative pre-order traversal of a subtree.
    release(node): Iteratively detach every link of a subtree.

Each ASTNode tracks:
    kind (str): The node tag (e.g. "ADD", "IF", "FUNCCALL"), see `NODE_KINDS`.
    line (int): Source line of the token that introduced the construct.
    left, right (ASTNode, optional): The two generic child links.
    name (str, optional): Identifier, function or declarator name.
    value (Any): Literal payload of LITERAL nodes (bool, None for nil, int, float, str).
    children (list[ASTNode]): Ordered statements of PROGRAM and BLOCK nodes.

Child link conventions:
    PROGRAM, BLOCK        children = statements in source order
    IF                    left = condition, right = BRANCHES(then, else or None)
    CONDEXPR              left = condition, right = BRANCHES(true, false)
    WHILE, DO             left = condition, right = body
    FOR, FOREACH          left = FORHEADER chain, right = body
    FUNCSTMT, FUNCEXPR    left = DECLARGS chain or None, right = body
    VARDECL               name, left = initializer or None, right = next VARDECL
    DECLARGS              name, left = next DECLARGS
    CALLARGS              left = previous CALLARGS or None, right = argument
    RETURN, prefix/postfix unary operators   left = operand
    binary operators, ARRSUB, FUNCCALL, MEMBEROF   left, right in source order

Example:
    node = ASTNode("ADD", 1, left=ASTNode("IDENT", 1, name="x"), right=lit)
"""

import math
from collections.abc import Iterator
from typing import Any, TypedDict

from sparkling.sparkling_constants import NODE_KINDS


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of an ASTNode used for serialization.

    Fields:
        kind (str): The node tag.
        line (int): Line number in the source code where the node originates.
        name (str | None): Symbol name, if any.
        value (Any): Literal payload (LITERAL nodes only).
        left (ASTDict | None): First child link.
        right (ASTDict | None): Second child link.
        children (list[ASTDict]): Statement list of PROGRAM/BLOCK nodes.
    """

    kind: str
    line: int
    name: str | None
    value: Any
    left: "ASTDict | None"
    right: "ASTDict | None"
    children: list["ASTDict"]


def _same_value(a: Any, b: Any) -> bool:
    if type(a) is not type(b):
        return False
    if isinstance(a, float) and math.isnan(a):
        return math.isnan(b)
    return bool(a == b)


class ASTNode:
    """
    Represents a node in the abstract syntax tree of a Sparkling program.

    Args:
        kind (str): The node tag, one of `NODE_KINDS`.
        line (int): Source line number (default is 0).
        left (ASTNode, optional): First child.
        right (ASTNode, optional): Second child.
        name (str, optional): Symbol name.
        value (Any, optional): Literal payload.
        children (list[ASTNode], optional): Statement list.

    Raises:
        ValueError: If `kind` is not a known node tag.

    Methods:
        __repr__(): Returns a structured string representation for debugging.
        __eq__(other): Structural equality, ignoring line numbers.
        to_dict(): Converts the node (and all descendants) into a nested dictionary.
        iter_child_nodes(): Yields the direct children in source order.
        release(): Detaches every link of the subtree.
    """

    __slots__ = ("kind", "line", "left", "right", "name", "value", "children")

    def __init__(
        self,
        kind: str,
        line: int = 0,
        left: "ASTNode | None" = None,
        right: "ASTNode | None" = None,
        name: str | None = None,
        value: Any = None,
        children: list["ASTNode"] | None = None,
    ):
        if kind not in NODE_KINDS:
            raise ValueError(f"Unknown AST node kind: {kind!r}")
        self.kind = kind
        self.line = line
        self.left = left
        self.right = right
        self.name = name
        self.value = value
        self.children: list["ASTNode"] = children or []

    def __repr__(self) -> str:
        parts = [self.kind]
        if self.name is not None:
            parts.append(f"name={self.name!r}")
        if self.kind == "LITERAL":
            parts.append(f"value={self.value!r}")
        if self.children:
            preview = ", ".join(repr(c) for c in self.children[:3])
            if len(self.children) > 3:
                preview += ", ..."
            parts.append(f"children=[{preview}]")
        if self.left is not None:
            parts.append(f"left={self.left!r}")
        if self.right is not None:
            parts.append(f"right={self.right!r}")
        return f"ASTNode({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ASTNode):
            return False
        # explicit stack keeps comparison of long chains off the call stack
        pending: list[tuple[ASTNode | None, ASTNode | None]] = [(self, other)]
        while pending:
            a, b = pending.pop()
            if a is None or b is None:
                if a is not b:
                    return False
                continue
            if (
                a.kind != b.kind
                or a.name != b.name
                or not _same_value(a.value, b.value)
                or len(a.children) != len(b.children)
            ):
                return False
            pending.append((a.left, b.left))
            pending.append((a.right, b.right))
            pending.extend(zip(a.children, b.children))
        return True

    def iter_child_nodes(self) -> Iterator["ASTNode"]:
        yield from self.children
        if self.left is not None:
            yield self.left
        if self.right is not None:
            yield self.right

    def to_dict(self) -> ASTDict:
        result: ASTDict = {"kind": self.kind, "line": self.line}
        if self.name is not None:
            result["name"] = self.name
        if self.kind == "LITERAL":
            result["value"] = self.value
        if self.children:
            result["children"] = [c.to_dict() for c in self.children]
        if self.left is not None:
            result["left"] = self.left.to_dict()
        if self.right is not None:
            result["right"] = self.right.to_dict()
        return result

    def release(self) -> None:
        release(self)


def walk(node: ASTNode | None) -> Iterator[ASTNode]:
    """Yields every node of the subtree rooted at `node` in pre-order."""
    if node is None:
        return
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(current.iter_child_nodes())))


def release(node: ASTNode | None) -> None:
    """Detaches `left`, `right`, `children`, `name` and `value` of every node
    in the subtree. `release(None)` is a no-op."""
    stack = [node] if node is not None else []
    while stack:
        current = stack.pop()
        stack.extend(current.iter_child_nodes())
        current.left = None
        current.right = None
        current.children = []
        current.name = None
        current.value = None


class NodeVisitor:
    """
    Walks an AST, calling `visit_<kind>` (lower-cased) for every node that has
    a handler and `generic_visit` otherwise.

    Subclasses override the handlers they care about and call
    `generic_visit(node)` to continue into the children.
    """

    def visit(self, node: ASTNode) -> Any:
        method = getattr(self, f"visit_{node.kind.lower()}", self.generic_visit)
        return method(node)

    def generic_visit(self, node: ASTNode) -> Any:
        for child in node.iter_child_nodes():
            self.visit(child)
        return None


__all__ = ["ASTDict", "ASTNode", "NodeVisitor", "release", "walk"]
