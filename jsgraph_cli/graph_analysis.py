"""Cycle, hub and orphan detection over a module adjacency map."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Dict, Iterator, List, Mapping, Sequence, Set, Tuple

from .config import DEFAULT_HUB_THRESHOLD, ENTRY_POINT_PATTERN
from .models import Hub

Adjacency = Mapping[str, Sequence[str]]


def find_cycles(adjacency: Adjacency) -> List[List[str]]:
    """Report every back-edge cycle found by a depth-first search.

    A cycle is the current path from the re-entered node through the node
    holding the back-edge, closed by repeating the re-entered node. Nodes
    already fully explored are never entered again.
    """
    cycles: List[List[str]] = []
    visited: Set[str] = set()

    for start in adjacency:
        if start in visited:
            continue
        visited.add(start)
        path: List[str] = [start]
        on_path: Set[str] = {start}
        stack: List[Tuple[str, Iterator[str]]] = [(start, iter(adjacency.get(start, ())))]

        while stack:
            _node, neighbours = stack[-1]
            descended = False
            for nxt in neighbours:
                if nxt in on_path:
                    cycles.append(path[path.index(nxt):] + [nxt])
                elif nxt not in visited:
                    visited.add(nxt)
                    path.append(nxt)
                    on_path.add(nxt)
                    stack.append((nxt, iter(adjacency.get(nxt, ()))))
                    descended = True
                    break
            if not descended:
                stack.pop()
                on_path.discard(path.pop())
    return cycles


def in_degrees(adjacency: Adjacency) -> Dict[str, int]:
    """Importer count per module, in discovery order; self-imports ignored."""
    counts: Dict[str, int] = {}
    for src, targets in adjacency.items():
        for dst in dict.fromkeys(targets):
            if dst != src:
                counts[dst] = counts.get(dst, 0) + 1
    return counts


def find_hubs(adjacency: Adjacency, threshold: int = DEFAULT_HUB_THRESHOLD) -> List[Hub]:
    """Modules imported by at least *threshold* others, busiest first."""
    counts = in_degrees(adjacency)
    hubs = [Hub(module=m, importers=c) for m, c in counts.items() if c >= threshold]
    # sort() is stable, so ties keep discovery order.
    hubs.sort(key=lambda h: h.importers, reverse=True)
    return hubs


def module_stem(module_id: str) -> str:
    name = PurePosixPath(module_id.replace("\\", "/")).name
    return name.split(".", 1)[0]


def is_entry_point(module_id: str, pattern: str = ENTRY_POINT_PATTERN) -> bool:
    return re.search(pattern, module_stem(module_id), re.IGNORECASE) is not None


def find_orphans(adjacency: Adjacency, entry_point_pattern: str = ENTRY_POINT_PATTERN) -> List[str]:
    """Modules that import others but are imported by nothing.

    Leaves without imports are not orphans, nor are conventional entry
    points such as ``index.ts`` or ``main.js``.
    """
    counts = in_degrees(adjacency)
    orphans: List[str] = []
    for module, targets in adjacency.items():
        outgoing = [t for t in targets if t != module]
        if not outgoing or counts.get(module, 0):
            continue
        if is_entry_point(module, entry_point_pattern):
            continue
        orphans.append(module)
    return orphans
