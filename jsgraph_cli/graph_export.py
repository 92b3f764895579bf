"""Module-graph export helpers for DOT and JSON outputs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Set

from .models import ModuleGraph


def to_dot(graph: ModuleGraph, focus: str = "") -> str:
    selected = _focused_subgraph(graph, focus)
    cycle_edges: Set[tuple] = {
        (cycle[i], cycle[i + 1]) for cycle in graph.cycles for i in range(len(cycle) - 1)
    }
    hubs = {h.module for h in graph.hubs}
    orphans = set(graph.orphans)

    lines = ["digraph ModuleGraph {"]
    lines.append("  rankdir=LR;")

    for node_id in selected["nodes"]:
        attrs = [f'label="{_esc(node_id)}"']
        if node_id in hubs:
            attrs.append("style=filled")
            attrs.append('fillcolor="#FFDDC1"')
        elif node_id in orphans:
            attrs.append("style=dashed")
        lines.append(f'  "{_esc(node_id)}" [{", ".join(attrs)}];')

    for src, dst in selected["edges"]:
        style = ' [color="red"]' if (src, dst) in cycle_edges else ""
        lines.append(f'  "{_esc(src)}" -> "{_esc(dst)}"{style};')

    lines.append("}")
    return "\n".join(lines)


def export_dot(graph: ModuleGraph, output_file: Path, focus: str = "") -> None:
    output_file.write_text(to_dot(graph, focus), encoding="utf-8")


def export_json(graph: ModuleGraph, output_file: Path) -> None:
    output_file.write_text(json.dumps(graph.to_dict(), indent=2), encoding="utf-8")


def _focused_subgraph(graph: ModuleGraph, focus: str) -> Dict[str, List]:
    edges = graph.edge_pairs()
    if not focus:
        return {"nodes": list(graph.nodes), "edges": edges}

    focus_ids = {n for n in graph.nodes if focus in n}
    if not focus_ids:
        return {"nodes": list(graph.nodes), "edges": edges}

    edge_subset = [e for e in edges if e[0] in focus_ids or e[1] in focus_ids]
    node_subset = set(focus_ids)
    for src, dst in edge_subset:
        node_subset.add(src)
        node_subset.add(dst)
    return {"nodes": sorted(node_subset), "edges": edge_subset}


def _esc(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')
