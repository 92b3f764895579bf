"""Tests for DOT/JSON graph export."""

import json
from pathlib import Path

from jsgraph_cli.graph_export import export_json, to_dot
from jsgraph_cli.models import Hub, ModuleGraph


def _graph() -> ModuleGraph:
    return ModuleGraph(
        nodes=["a.ts", "b.ts", "c.ts", "lone.ts"],
        edges={"a.ts": ["b.ts"], "b.ts": ["a.ts", "c.ts"], "lone.ts": ["c.ts"]},
        cycles=[["a.ts", "b.ts", "a.ts"]],
        hubs=[Hub(module="c.ts", importers=2)],
        orphans=["lone.ts"],
    )


def test_dot_styles():
    dot = to_dot(_graph())
    assert dot.startswith("digraph ModuleGraph {")
    assert '"a.ts" -> "b.ts" [color="red"];' in dot
    assert '"b.ts" -> "c.ts";' in dot
    assert 'fillcolor="#FFDDC1"' in dot.split('"c.ts" [')[1].splitlines()[0]
    assert "style=dashed" in dot.split('"lone.ts" [')[1].splitlines()[0]


def test_dot_focus():
    dot = to_dot(_graph(), focus="lone")
    assert '"lone.ts" -> "c.ts";' in dot
    assert '"a.ts"' not in dot


def test_dot_escapes_quotes():
    graph = ModuleGraph(nodes=['we"ird.ts'], edges={}, cycles=[], hubs=[], orphans=[])
    assert '"we\\"ird.ts"' in to_dot(graph)


def test_export_json(tmp_path: Path):
    out = tmp_path / "graph.json"
    export_json(_graph(), out)
    payload = json.loads(out.read_text())
    assert payload["hubs"] == [{"module": "c.ts", "importers": 2}]
    assert payload["cycles"] == [["a.ts", "b.ts", "a.ts"]]
