import json
import math

import hypothesis.strategies as st
import pytest
from hypothesis import given

from sparkling.sparkling_ast import ASTNode, NodeVisitor, release, walk
from sparkling.sparkling_constants import NODE_KINDS
from sparkling.sparkling_parser import parse


def ident(name: str, line: int = 1) -> ASTNode:
    return ASTNode("IDENT", line, name=name)


def lit(value: object, line: int = 1) -> ASTNode:
    return ASTNode("LITERAL", line, value=value)


def test_astnode_repr() -> None:
    node = ASTNode("ADD", 1, left=ident("x"), right=lit(1))
    assert repr(node) == (
        "ASTNode(ADD, left=ASTNode(IDENT, name='x'), right=ASTNode(LITERAL, value=1))"
    )


def test_astnode_repr_truncates_children() -> None:
    block = ASTNode("BLOCK", 1, children=[ASTNode("EMPTY", 1) for _ in range(5)])
    assert repr(block).endswith(", ...])")


def test_unknown_kind_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown AST node kind"):
        ASTNode("assign")


def test_eq_ignores_line() -> None:
    assert ASTNode("ADD", 1, ident("a", 1), lit(2, 1)) == ASTNode(
        "ADD", 7, ident("a", 3), lit(2, 9)
    )


def test_eq_detects_differences() -> None:
    base = ASTNode("ADD", 1, ident("a"), lit(2))
    assert base != ASTNode("SUB", 1, ident("a"), lit(2))
    assert base != ASTNode("ADD", 1, ident("b"), lit(2))
    assert base != ASTNode("ADD", 1, ident("a"), lit(3))
    assert base != ASTNode("ADD", 1, ident("a"))
    assert base != "ADD"


def test_eq_literal_values_are_type_exact() -> None:
    assert lit(1) != lit(True)
    assert lit(1) != lit(1.0)
    assert lit(0) != lit(False)
    assert lit(None) == lit(None)


def test_eq_nan_literals_are_equal() -> None:
    assert lit(math.nan) == lit(float("nan"))
    assert lit(math.nan) != lit(1.0)


def test_eq_compares_children() -> None:
    a = ASTNode("BLOCK", 1, children=[ASTNode("BREAK", 1)])
    b = ASTNode("BLOCK", 1, children=[ASTNode("CONTINUE", 1)])
    c = ASTNode("BLOCK", 1, children=[ASTNode("BREAK", 2), ASTNode("BREAK", 3)])
    assert a != b
    assert a != c
    assert a == ASTNode("BLOCK", 4, children=[ASTNode("BREAK", 9)])


def test_eq_handles_long_chains() -> None:
    def chain() -> ASTNode:
        node = ident("x")
        for _ in range(10_000):
            node = ASTNode("UNMINUS", 1, left=node)
        return node

    assert chain() == chain()


def test_to_dict_basic() -> None:
    node = ASTNode("ASSIGN", 2, left=ident("x", 2), right=lit(5, 2))
    assert node.to_dict() == {
        "kind": "ASSIGN",
        "line": 2,
        "left": {"kind": "IDENT", "line": 2, "name": "x"},
        "right": {"kind": "LITERAL", "line": 2, "value": 5},
    }


def test_to_dict_keeps_nil_literal_value() -> None:
    d = lit(None).to_dict()
    assert "value" in d
    assert d["value"] is None


def test_to_dict_children_are_serializable() -> None:
    tree = parse("var x = 1; if x { print(\"hi\"); }")
    text = json.dumps(tree.to_dict())
    assert json.loads(text)["children"][1]["kind"] == "IF"


def test_walk_is_preorder() -> None:
    tree = parse("a = b + c;")
    kinds = [n.kind for n in walk(tree)]
    assert kinds == ["PROGRAM", "ASSIGN", "IDENT", "ADD", "IDENT", "IDENT"]
    assert list(walk(None)) == []


def test_release_detaches_every_node() -> None:
    tree = parse("function f(a, b) { return a .. b; }")
    nodes = list(walk(tree))
    release(tree)
    for node in nodes:
        assert node.left is None
        assert node.right is None
        assert node.children == []
        assert node.name is None
    release(None)


def test_release_method() -> None:
    node = ASTNode("RETURN", 1, left=lit("s"))
    node.release()
    assert node.left is None


def test_node_visitor_dispatch() -> None:
    class NameCollector(NodeVisitor):
        def __init__(self) -> None:
            self.names: list[str] = []

        def visit_ident(self, node: ASTNode) -> None:
            self.names.append(str(node.name))

    collector = NameCollector()
    collector.visit(parse("x = y(z, w[v]);"))
    assert collector.names == ["x", "y", "z", "w", "v"]


def test_iter_child_nodes_order() -> None:
    node = ASTNode("FUNCSTMT", 1, left=ASTNode("DECLARGS", 1, name="a"))
    node.right = ASTNode("BLOCK", 1)
    assert [c.kind for c in node.iter_child_nodes()] == ["DECLARGS", "BLOCK"]


@given(st.sampled_from(sorted(NODE_KINDS)), st.integers(min_value=1))  # type: ignore[misc]
def test_any_known_kind_constructs(kind: str, line: int) -> None:
    node = ASTNode(kind, line)
    assert node.to_dict() == {"kind": kind, "line": line} or kind == "LITERAL"
    assert node == ASTNode(kind, line + 1)


@given(st.text(), st.text())  # type: ignore[misc]
def test_ident_eq_matches_name_eq(a: str, b: str) -> None:
    assert (ident(a) == ident(b)) == (a == b)
