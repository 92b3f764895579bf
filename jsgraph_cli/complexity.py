"""Approximate cyclomatic complexity for ranking files and functions."""

from __future__ import annotations

import logging
import math
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Sequence, Tuple

from .models import FileMetrics, HeatmapNode, SourceFile
from .parser import ParseError, SourceParser
from .resolver import iter_named_functions
from .syntax import NodeKind, SyntaxNode

logger = logging.getLogger(__name__)

_BRANCH_KINDS = frozenset({
    NodeKind.IF,
    NodeKind.FOR,
    NodeKind.FOR_IN,
    NodeKind.WHILE,
    NodeKind.DO_WHILE,
    NodeKind.SWITCH_CASE,
    NodeKind.TERNARY,
})
_SHORT_CIRCUIT = ("&&", "||")


def count_complexity(root: SyntaxNode) -> int:
    """1 + one per branch, loop, case arm, ternary and ``&&`` / ``||``."""
    complexity = 1
    for node in root.walk():
        if node.kind in _BRANCH_KINDS:
            complexity += 1
        elif node.kind == NodeKind.BINARY:
            operator = node.field("operator")
            if operator is not None and operator.type in _SHORT_CIRCUIT:
                complexity += 1
    return complexity


def line_count_estimate(code: str) -> int:
    """Fallback for unparseable input: ``max(1, round(lines / 10))``, halves rounded up."""
    lines = len(code.split("\n"))
    return max(1, int(math.floor(lines / 10 + 0.5)))


def estimate_complexity(
    code: str,
    parser: Optional[SourceParser] = None,
    source_id: str = "<input>",
) -> int:
    """Estimate complexity of *code*; never raises for bad input."""
    parser = parser or SourceParser()
    try:
        tree = parser.parse(SourceFile(id=source_id, content=code))
    except ParseError as exc:
        logger.debug("Complexity fallback for %s: %s", source_id, exc.reason)
        return line_count_estimate(code)
    return count_complexity(tree.root)


def rank_functions(
    code: str,
    parser: Optional[SourceParser] = None,
    source_id: str = "<input>",
) -> List[Tuple[str, int]]:
    """Named functions with their complexity, most complex first.

    Ties keep document order. An unparseable source yields an empty list.
    """
    parser = parser or SourceParser()
    try:
        tree = parser.parse(SourceFile(id=source_id, content=code))
    except ParseError as exc:
        logger.warning("Failed to parse %s: %s", source_id, exc.reason)
        return []
    ranked = [(name, count_complexity(node)) for name, node in iter_named_functions(tree)]
    ranked.sort(key=lambda item: item[1], reverse=True)
    return ranked


def file_metrics(files: Sequence[SourceFile], parser: Optional[SourceParser] = None) -> List[FileMetrics]:
    parser = parser or SourceParser()
    return [
        FileMetrics(
            id=f.id,
            lines=len(f.content.split("\n")),
            complexity=estimate_complexity(f.content, parser=parser, source_id=f.id),
        )
        for f in files
    ]


def build_heatmap(
    files: Sequence[SourceFile],
    root_name: str = "root",
    parser: Optional[SourceParser] = None,
) -> HeatmapNode:
    """Directory tree of per-file line counts and complexity.

    Each ``/``-separated segment of a display name becomes a directory node; the
    last segment is a leaf carrying the metrics.
    """
    root = HeatmapNode(name=root_name)
    dirs: Dict[Tuple[str, ...], HeatmapNode] = {(): root}

    for source_file, metrics in zip(files, file_metrics(files, parser=parser)):
        parts = PurePosixPath(source_file.display_name.replace("\\", "/")).parts
        parts = tuple(p for p in parts if p not in ("/", "."))
        if not parts:
            continue
        current = root
        for depth in range(1, len(parts)):
            key = parts[:depth]
            node = dirs.get(key)
            if node is None:
                node = HeatmapNode(name=parts[depth - 1])
                current.children.append(node)
                dirs[key] = node
            current = node
        current.children.append(HeatmapNode(
            name=parts[-1],
            lines=metrics.lines,
            complexity=metrics.complexity,
        ))
    return root
