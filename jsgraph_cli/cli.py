"""Typer-based CLI for jsgraph static analysis."""

from __future__ import annotations

import json
import logging
import zipfile
from dataclasses import asdict
from pathlib import Path
from typing import Any, List, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__, config
from .analysis import AnalysisRequestError, parse_keywords
from .graph_export import export_dot
from .models import HeatmapNode, SourceFile
from .modules import GraphMode
from .orchestrator import AnalysisEngine
from .parser import LANGUAGE_MAP
from .sources import load_sources

console = Console()

app = typer.Typer(
    help="🧭 jsgraph: call dependencies, callers and module graphs for JS/TS projects.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    help="⚙️  Configuration: show or initialise analysis settings.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
app.add_typer(config_app, name="config")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"jsgraph CLI v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log parser and resolver diagnostics."),
):
    """jsgraph: static call and import analysis, no code is ever executed."""
    _configure_logging(verbose)


def _configure_logging(verbose: bool) -> None:
    pkg_logger = logging.getLogger("jsgraph_cli")
    pkg_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in pkg_logger.handlers):
        pkg_logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _engine() -> AnalysisEngine:
    return AnalysisEngine(config.load_settings())


def _load(path: Path) -> Tuple[List[SourceFile], GraphMode]:
    try:
        files, mode = load_sources(path)
    except FileNotFoundError:
        raise typer.BadParameter(f"Path '{path}' does not exist.")
    except zipfile.BadZipFile:
        raise typer.BadParameter(f"'{path}' is not a readable zip archive.")
    if not files:
        raise typer.BadParameter(f"No JavaScript/TypeScript sources found under '{path}'.")
    return files, mode


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _short(text: str, limit: int = 60) -> str:
    first = text.strip().splitlines()[0] if text.strip() else ""
    return first if len(first) <= limit else first[: limit - 1] + "…"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command("deps")
def deps(
    target: str = typer.Argument(..., help="Function whose callees should be resolved."),
    path: Path = typer.Argument(..., help="Directory, source file or .zip archive."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
    show_code: bool = typer.Option(False, "--code", "-c", help="Print full function bodies."),
):
    """Resolve what TARGET calls and show each callee's source."""
    files, _mode = _load(path)
    try:
        result = _engine().analyze_dependencies(files, target)
    except AnalysisRequestError as exc:
        raise typer.BadParameter(str(exc))

    if as_json:
        _echo_json(asdict(result))
        return
    if not result.found:
        typer.echo(f"Function '{target}' was not found in {len(files)} file(s).")
        return

    typer.echo(f"🎯 {target}  ({result.target_file})")
    if show_code:
        typer.echo(result.target or "")
    if not result.dependencies:
        typer.echo("No resolvable dependencies.")
        return

    table = Table(title=f"Functions called by {target}")
    table.add_column("Function", style="cyan")
    table.add_column("File")
    table.add_column("Signature", style="dim")
    for dep in result.dependencies:
        table.add_row(dep.name, dep.file, _short(dep.content))
    console.print(table)
    if show_code:
        for dep in result.dependencies:
            typer.echo(f"\n// {dep.name} ({dep.file})\n{dep.content}")


@app.command("callers")
def callers(
    target: str = typer.Argument(..., help="Function whose callers should be listed."),
    path: Path = typer.Argument(..., help="Directory, source file or .zip archive."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    """List the named functions that call TARGET."""
    files, _mode = _load(path)
    try:
        result = _engine().analyze_call_hierarchy_files(files, target)
    except AnalysisRequestError as exc:
        raise typer.BadParameter(str(exc))

    if as_json:
        _echo_json(asdict(result))
        return
    if not result.callers:
        typer.echo(f"No callers of '{target}' found.")
        return

    table = Table(title=f"Callers of {target}")
    table.add_column("Caller", style="cyan")
    table.add_column("File")
    for caller in result.callers:
        table.add_row(caller.name, caller.file)
    console.print(table)


@app.command("keywords")
def keywords(
    keyword_list: str = typer.Argument(..., help="Comma-separated keywords, e.g. 'fetch, token'."),
    path: Path = typer.Argument(..., help="Directory, source file or .zip archive."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    """Find the functions that mention any of the given keywords."""
    files, _mode = _load(path)
    engine = _engine()
    words = parse_keywords(keyword_list)
    findings = []
    for source_file in files:
        try:
            findings.extend(engine.analyze_keywords(source_file.content, words, source_id=source_file.id))
        except AnalysisRequestError as exc:
            raise typer.BadParameter(str(exc))

    if as_json:
        _echo_json([asdict(f) for f in findings])
        return
    if not findings:
        typer.echo("No functions matched.")
        return

    table = Table(title="Keyword matches")
    table.add_column("Function", style="cyan")
    table.add_column("Keywords", style="yellow")
    table.add_column("File")
    for finding in findings:
        table.add_row(finding.function_name, ", ".join(finding.found_keywords), finding.file)
    console.print(table)


@app.command("modules")
def modules(
    path: Path = typer.Argument(..., help="Directory, source file or .zip archive."),
    hub_threshold: Optional[int] = typer.Option(None, "--hub-threshold", min=1, help="Importers needed to count as a hub."),
    dot: Optional[Path] = typer.Option(None, "--dot", help="Write the graph as Graphviz DOT."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    """Build the import graph and report cycles, hubs and orphans."""
    files, mode = _load(path)
    engine = _engine()
    if hub_threshold is not None:
        engine.settings.hub_threshold = hub_threshold
    try:
        graph = engine.build_module_graph(files, mode)
    except AnalysisRequestError as exc:
        raise typer.BadParameter(str(exc))

    if dot is not None:
        export_dot(graph, dot)
    if as_json:
        _echo_json(graph.to_dict())
        return

    typer.echo(f"Modules: {len(graph.nodes)} | Imports: {len(graph.edge_pairs())}")
    if dot is not None:
        typer.echo(f"DOT graph written to {dot}")

    if graph.cycles:
        typer.echo(f"\n🔁 Cycles ({len(graph.cycles)}):")
        for cycle in graph.cycles:
            typer.echo("  " + " -> ".join(cycle))
    else:
        typer.echo("\n✅ No import cycles.")

    if graph.hubs:
        table = Table(title=f"Hubs (>= {engine.settings.hub_threshold} importers)")
        table.add_column("Module", style="cyan")
        table.add_column("Importers", justify="right")
        for hub in graph.hubs:
            table.add_row(hub.module, str(hub.importers))
        console.print(table)

    if graph.orphans:
        typer.echo(f"\n🏝  Orphans ({len(graph.orphans)}):")
        for orphan in graph.orphans:
            typer.echo(f"  {orphan}")


@app.command("complexity")
def complexity(
    path: Path = typer.Argument(..., help="Directory, source file or .zip archive."),
    top: int = typer.Option(10, "--top", "-n", min=1, help="Rows to show."),
    functions: bool = typer.Option(False, "--functions", "-f", help="Rank functions instead of files."),
    as_json: bool = typer.Option(False, "--json", help="Print the heatmap tree as JSON."),
):
    """Rank files (or functions) by estimated cyclomatic complexity."""
    files, _mode = _load(path)
    engine = _engine()

    if as_json:
        _echo_json(engine.build_heatmap(files, root_name=path.name).to_dict())
        return

    rows: List[Tuple[str, str, int]] = []
    if functions:
        for source_file in files:
            for name, score in engine.rank_functions(source_file.content, source_id=source_file.id):
                rows.append((name, source_file.display_name, score))
        title = "Most complex functions"
    else:
        for leaf_path, leaf in _heatmap_leaves(engine.build_heatmap(files)):
            rows.append((leaf_path, f"{leaf.lines} lines", leaf.complexity or 0))
        title = "Most complex files"
    rows.sort(key=lambda r: r[2], reverse=True)

    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Where")
    table.add_column("Complexity", justify="right")
    for name, where, score in rows[:top]:
        table.add_row(name, where, str(score))
    console.print(table)


def _heatmap_leaves(node: HeatmapNode, prefix: str = ""):
    for child in node.children:
        child_path = f"{prefix}/{child.name}" if prefix else child.name
        if child.is_file:
            yield child_path, child
        else:
            yield from _heatmap_leaves(child, child_path)


# ---------------------------------------------------------------------------
# Config commands
# ---------------------------------------------------------------------------

@config_app.command("show")
def config_show():
    """Show the effective analysis settings."""
    settings = config.load_settings()
    table = Table(title=f"Settings ({config.CONFIG_FILE})")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in settings.to_dict().items():
        table.add_row(key, ", ".join(value) if isinstance(value, list) else str(value))
    parser = AnalysisEngine(settings).parser
    for language in dict.fromkeys(LANGUAGE_MAP.values()):
        status = "installed" if parser.supports_language(language) else "missing"
        table.add_row(f"grammar.{language}", status)
    console.print(table)


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing [analysis] section."),
):
    """Write the default settings to the config file."""
    if "analysis" in config.load_full_config() and not force:
        typer.echo(f"Settings already present in {config.CONFIG_FILE} (use --force to overwrite).")
        return
    written = config.save_settings(config.AnalysisSettings())
    typer.echo(f"Wrote default settings to {written}")


if __name__ == "__main__":
    app()
