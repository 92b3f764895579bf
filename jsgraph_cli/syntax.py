"""Tagged wrapper around raw Tree-sitter nodes.

Tree-sitter exposes untyped nodes whose ``type`` is a grammar-specific
string, and the JavaScript / TypeScript grammars have renamed some of them
between releases (``function`` became ``function_expression``).  Every
resolver in this package matches on :class:`NodeKind` instead, so grammar
spelling lives in exactly one table.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple


class NodeKind(str, Enum):
    FUNCTION_DECLARATION = "function_declaration"
    FUNCTION_EXPRESSION = "function_expression"
    ARROW_FUNCTION = "arrow_function"
    METHOD = "method"
    VARIABLE_DECLARATOR = "variable_declarator"
    PAIR = "pair"
    CLASS_BODY = "class_body"
    OBJECT = "object"
    CALL = "call"
    MEMBER = "member"
    IDENTIFIER = "identifier"
    PROPERTY_IDENTIFIER = "property_identifier"
    IMPORT = "import"
    EXPORT = "export"
    STRING = "string"
    IF = "if"
    FOR = "for"
    FOR_IN = "for_in"
    WHILE = "while"
    DO_WHILE = "do_while"
    SWITCH_CASE = "switch_case"
    TERNARY = "ternary"
    BINARY = "binary"
    ERROR = "error"
    OTHER = "other"


_KIND_BY_TYPE: Dict[str, NodeKind] = {
    "function_declaration": NodeKind.FUNCTION_DECLARATION,
    "generator_function_declaration": NodeKind.FUNCTION_DECLARATION,
    "function_expression": NodeKind.FUNCTION_EXPRESSION,
    "function": NodeKind.FUNCTION_EXPRESSION,
    "generator_function": NodeKind.FUNCTION_EXPRESSION,
    "arrow_function": NodeKind.ARROW_FUNCTION,
    "method_definition": NodeKind.METHOD,
    "variable_declarator": NodeKind.VARIABLE_DECLARATOR,
    "pair": NodeKind.PAIR,
    "class_body": NodeKind.CLASS_BODY,
    "object": NodeKind.OBJECT,
    "call_expression": NodeKind.CALL,
    "member_expression": NodeKind.MEMBER,
    "identifier": NodeKind.IDENTIFIER,
    "property_identifier": NodeKind.PROPERTY_IDENTIFIER,
    "import_statement": NodeKind.IMPORT,
    "export_statement": NodeKind.EXPORT,
    "string": NodeKind.STRING,
    "if_statement": NodeKind.IF,
    "for_statement": NodeKind.FOR,
    "for_in_statement": NodeKind.FOR_IN,
    "while_statement": NodeKind.WHILE,
    "do_statement": NodeKind.DO_WHILE,
    "switch_case": NodeKind.SWITCH_CASE,
    "switch_default": NodeKind.SWITCH_CASE,
    "ternary_expression": NodeKind.TERNARY,
    "binary_expression": NodeKind.BINARY,
    "ERROR": NodeKind.ERROR,
}

FUNCTION_KINDS = frozenset({
    NodeKind.FUNCTION_DECLARATION,
    NodeKind.FUNCTION_EXPRESSION,
    NodeKind.ARROW_FUNCTION,
    NodeKind.METHOD,
})


class SyntaxNode:
    """A Tree-sitter node tagged with its :class:`NodeKind`."""

    __slots__ = ("_node", "kind")

    def __init__(self, ts_node: Any) -> None:
        self._node = ts_node
        # Anonymous tokens (the `function` keyword, operators) share type names
        # with named nodes in some grammar releases.
        self.kind: NodeKind = (
            _KIND_BY_TYPE.get(ts_node.type, NodeKind.OTHER) if ts_node.is_named else NodeKind.OTHER
        )

    def __repr__(self) -> str:
        return f"SyntaxNode({self.kind.value}, {self.start}..{self.end})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SyntaxNode):
            return NotImplemented
        return (self.start, self.end, self.type) == (other.start, other.end, other.type)

    def __hash__(self) -> int:
        return hash((self.start, self.end, self.type))

    @property
    def type(self) -> str:
        return self._node.type

    @property
    def start(self) -> int:
        return self._node.start_byte

    @property
    def end(self) -> int:
        return self._node.end_byte

    @property
    def start_row(self) -> int:
        return self._node.start_point[0]

    @property
    def end_row(self) -> int:
        return self._node.end_point[0]

    @property
    def span(self) -> Tuple[int, int]:
        return self._node.start_byte, self._node.end_byte

    @property
    def text(self) -> str:
        raw = self._node.text
        return raw.decode("utf-8", errors="replace") if raw is not None else ""

    @property
    def children(self) -> List["SyntaxNode"]:
        return [SyntaxNode(ch) for ch in self._node.children]

    @property
    def parent(self) -> Optional["SyntaxNode"]:
        raw = self._node.parent
        return SyntaxNode(raw) if raw is not None else None

    @property
    def has_error(self) -> bool:
        return bool(self._node.has_error)

    @property
    def is_missing(self) -> bool:
        return bool(self._node.is_missing)

    @property
    def is_function(self) -> bool:
        return self.kind in FUNCTION_KINDS

    def field(self, name: str) -> Optional["SyntaxNode"]:
        raw = self._node.child_by_field_name(name)
        return SyntaxNode(raw) if raw is not None else None

    def walk(self) -> Iterator["SyntaxNode"]:
        """Yield this node and every descendant in document (pre-)order."""
        for node, _parent in self.walk_with_parent():
            yield node

    def walk_with_parent(self) -> Iterator[Tuple["SyntaxNode", Optional["SyntaxNode"]]]:
        """Pre-order walk yielding ``(node, immediate_parent)`` pairs.

        Uses an explicit stack so deeply nested sources cannot hit the
        interpreter recursion limit.
        """
        stack: List[Tuple[SyntaxNode, Optional[SyntaxNode]]] = [(self, self.parent)]
        while stack:
            node, parent = stack.pop()
            yield node, parent
            for child in reversed(node.children):
                stack.append((child, node))

    def ancestors(self) -> Iterator["SyntaxNode"]:
        current = self.parent
        while current is not None:
            yield current
            current = current.parent


@dataclass
class SyntaxTree:
    """One parsed source file; lives for a single analysis call."""

    source_id: str
    source: bytes
    language: str
    root: SyntaxNode

    def slice(self, node: SyntaxNode) -> str:
        return self.source[node.start:node.end].decode("utf-8", errors="replace")

    def functions(self) -> Iterator[Tuple[SyntaxNode, Optional[SyntaxNode]]]:
        """Yield every function-like node with its immediate parent."""
        for node, parent in self.root.walk_with_parent():
            if node.is_function:
                yield node, parent
