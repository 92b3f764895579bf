"""Dependency, call-hierarchy and keyword analysis over parsed sources.

Every function here works on already-parsed :class:`SyntaxTree` values and
returns fresh result objects; parsing, request validation and per-file
failure handling belong to :mod:`jsgraph_cli.orchestrator`.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .models import (
    CallerInfo,
    CallHierarchyResult,
    DependencyInfo,
    DependencyResult,
    FunctionSpan,
    KeywordFinding,
)
from .resolver import (
    callee_name,
    collect_called_names,
    enclosing_function,
    function_spans,
    iter_named_functions,
    resolve_function_name,
)
from .syntax import NodeKind, SyntaxTree

logger = logging.getLogger(__name__)


class AnalysisRequestError(ValueError):
    """A request that cannot be analysed at all (empty manifest, blank target...)."""


def parse_keywords(keyword_string: str) -> List[str]:
    """Split a comma-separated keyword string, dropping blanks."""
    return [k.strip() for k in keyword_string.split(",") if k.strip()]


# ---------------------------------------------------------------------------
# Dependencies (two-pass)
# ---------------------------------------------------------------------------

def _find_target(
    trees: Sequence[SyntaxTree],
    target_name: str,
) -> Optional[Tuple[SyntaxTree, str, Set[str]]]:
    """Pass 1: first function named *target_name*, its text and called names."""
    for tree in trees:
        for name, node in iter_named_functions(tree):
            if name == target_name:
                return tree, tree.slice(node), collect_called_names(node)
    return None


def resolve_dependencies(trees: Sequence[SyntaxTree], target_name: str) -> DependencyResult:
    """Resolve what *target_name* calls across all *trees*.

    The first match in file order is the target. Dependencies keep file order,
    then discovery order, and never include the target itself.
    """
    result = DependencyResult(target_name=target_name)
    found = _find_target(trees, target_name)
    if found is None:
        logger.debug("Target function '%s' not found in %d file(s)", target_name, len(trees))
        return result

    target_tree, result.target, called = found
    result.target_file = target_tree.source_id
    called.discard(target_name)

    # Pass 2: each file yields its own span index; merge in file order.
    per_file: List[Tuple[SyntaxTree, List[FunctionSpan]]] = [
        (tree, function_spans(tree)) for tree in trees
    ]
    seen: Set[str] = set()
    for tree, spans in per_file:
        for span in spans:
            if span.name in called and span.name not in seen:
                seen.add(span.name)
                result.dependencies.append(DependencyInfo(
                    name=span.name,
                    content=tree.source[span.start_offset:span.end_offset].decode(
                        "utf-8", errors="replace"
                    ),
                    file=span.source_file_id,
                ))
    return result


# ---------------------------------------------------------------------------
# Call hierarchy (reverse lookup)
# ---------------------------------------------------------------------------

def resolve_callers(tree: SyntaxTree, target_name: str) -> CallHierarchyResult:
    """Every named function in *tree* that calls *target_name*, once each."""
    result = CallHierarchyResult(target=target_name)
    for caller in _callers_in(tree, target_name):
        if all(c.name != caller.name for c in result.callers):
            result.callers.append(caller)
    return result


def resolve_callers_across(trees: Sequence[SyntaxTree], target_name: str) -> CallHierarchyResult:
    """Multi-file variant of :func:`resolve_callers`; dedup spans all files."""
    result = CallHierarchyResult(target=target_name)
    recorded: Set[str] = set()
    for tree in trees:
        for caller in _callers_in(tree, target_name):
            if caller.name not in recorded:
                recorded.add(caller.name)
                result.callers.append(caller)
    return result


def _callers_in(tree: SyntaxTree, target_name: str) -> List[CallerInfo]:
    callers: List[CallerInfo] = []
    for node in tree.root.walk():
        if node.kind != NodeKind.CALL or callee_name(node) != target_name:
            continue
        enclosing = enclosing_function(node)
        if enclosing is None:
            continue  # top-level call
        func, parent = enclosing
        name = resolve_function_name(func, parent)
        if name:
            callers.append(CallerInfo(name=name, content=tree.slice(func), file=tree.source_id))
    return callers


# ---------------------------------------------------------------------------
# Keywords
# ---------------------------------------------------------------------------

def find_keywords(tree: SyntaxTree, keywords: Sequence[str]) -> List[KeywordFinding]:
    """Case-insensitive substring search inside each named function.

    Reported keywords keep the caller's spelling and order. A function name
    produces at most one finding.
    """
    lowered: Dict[str, str] = {}
    for keyword in keywords:
        lowered.setdefault(keyword, keyword.lower())

    findings: List[KeywordFinding] = []
    reported: Set[str] = set()
    for name, node in iter_named_functions(tree):
        if name in reported:
            continue
        content = tree.slice(node)
        haystack = content.lower()
        found = [kw for kw, low in lowered.items() if low in haystack]
        if found:
            reported.add(name)
            findings.append(KeywordFinding(
                function_name=name,
                found_keywords=found,
                content=content,
                file=tree.source_id,
            ))
    return findings
