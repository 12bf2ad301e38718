"""
Provides the `Formatter` class and emitter interface for rendering Sparkling ASTs.

Classes and Features:
    - Emitter (Protocol): Interface for all output emitters. Requires `__init__` and `get_output`.
    - SourceEmitter: Canonical, fully parenthesized Sparkling source.
    - SExprEmitter: S-expression dump of the tree.
    - JsonEmitter: JSON dump of `ASTNode.to_dict()`.
    - Formatter: Picks the emitter for the selected target ("source", "spn",
      "sexpr", "json") and dispatches the root node to the matching `emit_*` method.

Example:
    >>> formatter = Formatter("sexpr")
    >>> text = formatter.format(parse("x = 1;"))

Raises:
    ValueError: If the target is not supported.
    TypeError: If the tree is not an ASTNode.
    NotImplementedError: If the emitter lacks an `emit_*` method for the root kind.
"""

from typing import Protocol

from sparkling.emitters.json_emitter import JsonEmitter
from sparkling.emitters.sexpr_emitter import SExprEmitter
from sparkling.emitters.source_emitter import SourceEmitter
from sparkling.sparkling_ast import ASTNode


class Emitter(Protocol):  # pragma: no cover
    """Protocol for all Sparkling emitters.

    Methods:
        __init__(): Initializes the emitter.
        get_output(): Returns the complete emitted text as a string.
    """

    def __init__(self) -> None: ...  # pragma: no cover

    def get_output(self) -> str: ...  # pragma: no cover


EmitterType = type[Emitter]
"""Alias for a concrete Emitter class type."""

EMITTERS: dict[str, EmitterType] = {
    "source": SourceEmitter,
    "spn": SourceEmitter,
    "sexpr": SExprEmitter,
    "json": JsonEmitter,
}

FORMATS: tuple[str, ...] = ("sexpr", "source", "json")


class Formatter:
    """Dispatches a Sparkling AST to the emitter of the selected target.

    Attributes:
        target (str): The normalized target name.
        emitter (Emitter): The emitter instance for the output target.
    """

    def __init__(self, target: str) -> None:
        """Initializes the formatter with the desired output target.

        Args:
            target: One of "source", "spn", "sexpr" or "json" (case-insensitive).

        Raises:
            ValueError: If the target is not supported.
        """
        target = target.lower()
        if target not in EMITTERS:
            raise ValueError(f"Unknown output format: {target!r}")
        self.target = target
        self.emitter: Emitter = EMITTERS[target]()

    def format(self, tree: ASTNode) -> str:
        """Renders a tree with a fresh emitter and returns the text.

        Raises:
            TypeError: If `tree` is not an ASTNode.
        """
        if not isinstance(tree, ASTNode):
            raise TypeError("Formatter expects an ASTNode.")
        self.emitter = EMITTERS[self.target]()
        self._visit(tree)
        return self.emitter.get_output()

    def _visit(self, node: ASTNode) -> None:
        """Invokes `emit_<kind>` on the emitter, falling back to `emit_node`
        and, for source output, `emit_stmt`.

        Raises:
            NotImplementedError: If the emitter does not support the node kind.
        """
        for method_name in (f"emit_{node.kind.lower()}", "emit_node", "emit_stmt"):
            if hasattr(self.emitter, method_name):
                getattr(self.emitter, method_name)(node)
                return
        raise NotImplementedError(
            f"No emitter method for node kind '{node.kind}' (line {node.line})"
        )


__all__ = ["EMITTERS", "FORMATS", "Emitter", "Formatter"]
