import json
import math
from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from sparkling.emitters.json_emitter import JsonEmitter
from sparkling.emitters.sexpr_emitter import SExprEmitter
from sparkling.emitters.source_emitter import SourceEmitter
from sparkling.sparkling_ast import ASTNode
from sparkling.sparkling_format import EMITTERS, FORMATS, Formatter
from sparkling.sparkling_parser import parse

SOURCE = "var x = 1 + 2;\nif x { print(x); }"


def test_formatter_selects_emitter() -> None:
    assert isinstance(Formatter("source").emitter, SourceEmitter)
    assert isinstance(Formatter("spn").emitter, SourceEmitter)
    assert isinstance(Formatter("SEXPR").emitter, SExprEmitter)
    assert isinstance(Formatter("json").emitter, JsonEmitter)


def test_formatter_invalid_target() -> None:
    with pytest.raises(ValueError, match="Unknown output format"):
        Formatter("py")


def test_formatter_rejects_non_nodes() -> None:
    with pytest.raises(TypeError):
        Formatter("sexpr").format([ASTNode("EMPTY")])  # type: ignore[arg-type]


def test_format_source() -> None:
    text = Formatter("source").format(parse(SOURCE))
    assert text == "var x = (1 + 2);\nif x {\n    print(x);\n}"
    assert Formatter("spn").format(parse(SOURCE)) == text


def test_format_sexpr() -> None:
    assert Formatter("sexpr").format(parse("x;")) == "(PROGRAM\n  (IDENT x))"


def test_format_json() -> None:
    data: dict[str, Any] = json.loads(Formatter("json").format(parse("x = nan;")))
    assert data["kind"] == "PROGRAM"
    assign = data["children"][0]
    assert assign["kind"] == "ASSIGN"
    assert math.isnan(assign["right"]["value"])


def test_format_resets_between_calls() -> None:
    formatter = Formatter("source")
    first = formatter.format(parse("a;"))
    second = formatter.format(parse("a;"))
    assert first == second == "a;"


def test_format_single_statement_nodes() -> None:
    node = parse("f(1);").children[0]
    assert Formatter("source").format(node) == "f(1);"
    assert Formatter("sexpr").format(node) == (
        "(FUNCCALL (IDENT f) (CALLARGS _ (LITERAL 1)))"
    )
    assert json.loads(Formatter("json").format(node))["kind"] == "FUNCCALL"


def test_missing_emit_method(monkeypatch: pytest.MonkeyPatch) -> None:
    class OutputOnly:
        def get_output(self) -> str:
            return ""

    monkeypatch.setitem(EMITTERS, "null", OutputOnly)
    with pytest.raises(NotImplementedError, match="PROGRAM"):
        Formatter("null").format(parse(""))


@given(st.sampled_from(FORMATS))  # type: ignore[misc]
def test_every_cli_format_is_a_target(fmt: str) -> None:
    assert Formatter(fmt).format(parse("a = 1;"))
