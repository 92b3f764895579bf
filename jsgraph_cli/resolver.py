"""Function naming and call-site collection over :mod:`jsgraph_cli.syntax` trees."""

from __future__ import annotations

from typing import Iterator, List, Optional, Set, Tuple

from .models import FunctionSpan
from .syntax import NodeKind, SyntaxNode, SyntaxTree

_EXPRESSION_KINDS = frozenset({NodeKind.FUNCTION_EXPRESSION, NodeKind.ARROW_FUNCTION})


def resolve_function_name(node: SyntaxNode, parent: Optional[SyntaxNode]) -> Optional[str]:
    """Return the canonical name of a function-like *node*, or ``None``.

    Only the immediate *parent* is consulted. Rules, first match wins:

    1. ``function f() {}``              -> ``f``
    2. ``const f = () => {}``           -> ``f``
    3. ``class C { f() {} }``           -> ``f``
    4. ``{ f: function () {} }``        -> ``f`` (also arrows and shorthand ``{ f() {} }``)
    """
    if node.kind == NodeKind.FUNCTION_DECLARATION:
        name = node.field("name")
        if name is not None and name.kind == NodeKind.IDENTIFIER:
            return name.text

    if parent is None:
        return None

    if node.kind in _EXPRESSION_KINDS and parent.kind == NodeKind.VARIABLE_DECLARATOR:
        target = parent.field("name")
        value = parent.field("value")
        if value == node and target is not None and target.kind == NodeKind.IDENTIFIER:
            return target.text

    if node.kind == NodeKind.METHOD and parent.kind == NodeKind.CLASS_BODY:
        return _plain_property_name(node.field("name"))

    if node.kind in _EXPRESSION_KINDS and parent.kind == NodeKind.PAIR:
        if parent.field("value") == node:
            return _plain_property_name(parent.field("key"))

    if node.kind == NodeKind.METHOD and parent.kind == NodeKind.OBJECT:
        return _plain_property_name(node.field("name"))

    return None


def _plain_property_name(key: Optional[SyntaxNode]) -> Optional[str]:
    # Computed keys, string keys and #private names are not plain identifiers.
    if key is not None and key.kind in (NodeKind.PROPERTY_IDENTIFIER, NodeKind.IDENTIFIER):
        return key.text
    return None


def callee_name(call: SyntaxNode) -> Optional[str]:
    """Name a call expression targets: ``f()`` -> ``f``, ``x.y()`` -> ``y``.

    The receiver of a member call is ignored, so same-named methods on
    unrelated objects are indistinguishable.
    """
    callee = call.field("function")
    if callee is None:
        return None
    if callee.kind == NodeKind.IDENTIFIER:
        return callee.text
    if callee.kind == NodeKind.MEMBER:
        prop = callee.field("property")
        if prop is not None and prop.kind == NodeKind.PROPERTY_IDENTIFIER:
            return prop.text
    return None


def collect_called_names(subtree: SyntaxNode) -> Set[str]:
    """Every name called anywhere under *subtree*, closures included."""
    called: Set[str] = set()
    for node in subtree.walk():
        if node.kind == NodeKind.CALL:
            name = callee_name(node)
            if name:
                called.add(name)
    return called


def iter_named_functions(tree: SyntaxTree) -> Iterator[Tuple[str, SyntaxNode]]:
    """Yield ``(name, node)`` for each named function-like node in document order."""
    for node, parent in tree.functions():
        name = resolve_function_name(node, parent)
        if name:
            yield name, node


def enclosing_function(node: SyntaxNode) -> Optional[Tuple[SyntaxNode, Optional[SyntaxNode]]]:
    """Nearest function-like ancestor of *node* together with its parent."""
    for ancestor in node.ancestors():
        if ancestor.is_function:
            return ancestor, ancestor.parent
    return None


def function_spans(tree: SyntaxTree) -> List[FunctionSpan]:
    """Per-file index of named functions."""
    return [
        FunctionSpan(
            name=name,
            start_offset=node.start,
            end_offset=node.end,
            source_file_id=tree.source_id,
        )
        for name, node in iter_named_functions(tree)
    ]
