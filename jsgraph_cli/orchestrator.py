"""Engine facade coordinating parsing, resolvers and graph analyzers."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .analysis import (
    AnalysisRequestError,
    find_keywords,
    resolve_callers,
    resolve_callers_across,
    resolve_dependencies,
)
from .complexity import build_heatmap, estimate_complexity, rank_functions
from .config import AnalysisSettings
from .graph_analysis import find_cycles, find_hubs, find_orphans
from .models import (
    CallHierarchyResult,
    DependencyResult,
    HeatmapNode,
    KeywordFinding,
    ModuleGraph,
    SourceFile,
)
from .modules import GraphMode, build_adjacency, graph_nodes
from .parser import ParseError, SourceParser

logger = logging.getLogger(__name__)

PASTED_SOURCE_ID = "<input>"


class AnalysisEngine:
    """Stateless between calls; every result is built fresh from its inputs."""

    def __init__(self, settings: Optional[AnalysisSettings] = None) -> None:
        self.settings = settings or AnalysisSettings()
        self.parser = SourceParser(
            default_language=self.settings.default_language,
            max_error_ratio=self.settings.max_error_ratio,
        )

    # ------------------------------------------------------------------
    # Request validation
    # ------------------------------------------------------------------

    @staticmethod
    def _require_files(files: Sequence[SourceFile]) -> None:
        if not files:
            raise AnalysisRequestError("No source files to analyze.")

    @staticmethod
    def _require_target(target_name: str) -> str:
        name = (target_name or "").strip()
        if not name:
            raise AnalysisRequestError("A target function name is required.")
        return name

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def analyze_dependencies(self, files: Sequence[SourceFile], target_name: str) -> DependencyResult:
        """What *target_name* calls, resolved across every file in *files*."""
        self._require_files(files)
        target_name = self._require_target(target_name)
        trees = self.parser.parse_many(files)
        if not trees:
            logger.warning("None of the %d file(s) could be parsed", len(files))
        return resolve_dependencies(trees, target_name)

    def analyze_call_hierarchy(self, code: str, target_name: str) -> CallHierarchyResult:
        """Who calls *target_name* inside a single source text."""
        target_name = self._require_target(target_name)
        try:
            tree = self.parser.parse(SourceFile(id=PASTED_SOURCE_ID, content=code))
        except ParseError as exc:
            logger.warning("Failed to parse %s: %s", exc.source_id, exc.reason)
            return CallHierarchyResult(target=target_name)
        return resolve_callers(tree, target_name)

    def analyze_call_hierarchy_files(
        self,
        files: Sequence[SourceFile],
        target_name: str,
    ) -> CallHierarchyResult:
        self._require_files(files)
        target_name = self._require_target(target_name)
        return resolve_callers_across(self.parser.parse_many(files), target_name)

    def analyze_keywords(
        self,
        code: str,
        keywords: Sequence[str],
        source_id: str = PASTED_SOURCE_ID,
    ) -> List[KeywordFinding]:
        """Named functions in *code* mentioning any of *keywords*."""
        cleaned = [k for k in keywords if k and k.strip()]
        if not cleaned:
            raise AnalysisRequestError("At least one keyword is required.")
        try:
            tree = self.parser.parse(SourceFile(id=source_id, content=code))
        except ParseError as exc:
            logger.warning("Failed to parse %s: %s", exc.source_id, exc.reason)
            return []
        return find_keywords(tree, cleaned)

    def build_module_graph(
        self,
        files: Sequence[SourceFile],
        mode: "GraphMode | str" = GraphMode.VIRTUAL,
    ) -> ModuleGraph:
        """Import graph of *files* plus its cycles, hubs and orphans."""
        self._require_files(files)
        try:
            graph_mode = GraphMode(mode)
        except ValueError as exc:
            raise AnalysisRequestError(f"Unknown graph mode: {mode!r}") from exc

        adjacency = build_adjacency(files, graph_mode, self.parser, self.settings.extensions)
        return ModuleGraph(
            nodes=graph_nodes(adjacency),
            edges=adjacency,
            cycles=find_cycles(adjacency),
            hubs=find_hubs(adjacency, self.settings.hub_threshold),
            orphans=find_orphans(adjacency, self.settings.entry_point_pattern),
        )

    def estimate_complexity(self, code: str) -> int:
        return estimate_complexity(code, parser=self.parser)

    def rank_functions(self, code: str, source_id: str = PASTED_SOURCE_ID) -> List[Tuple[str, int]]:
        return rank_functions(code, parser=self.parser, source_id=source_id)

    def build_heatmap(self, files: Sequence[SourceFile], root_name: str = "root") -> HeatmapNode:
        self._require_files(files)
        return build_heatmap(files, root_name=root_name, parser=self.parser)


# ---------------------------------------------------------------------------
# Module-level convenience API (one fresh engine per call)
# ---------------------------------------------------------------------------

def analyze_dependencies(files: Sequence[SourceFile], target_name: str) -> DependencyResult:
    return AnalysisEngine().analyze_dependencies(files, target_name)


def analyze_call_hierarchy(code: str, target_name: str) -> CallHierarchyResult:
    return AnalysisEngine().analyze_call_hierarchy(code, target_name)


def analyze_call_hierarchy_files(files: Sequence[SourceFile], target_name: str) -> CallHierarchyResult:
    return AnalysisEngine().analyze_call_hierarchy_files(files, target_name)


def analyze_keywords(code: str, keywords: Sequence[str]) -> List[KeywordFinding]:
    return AnalysisEngine().analyze_keywords(code, keywords)


def build_module_graph(files: Sequence[SourceFile], mode: "GraphMode | str" = GraphMode.VIRTUAL) -> ModuleGraph:
    return AnalysisEngine().build_module_graph(files, mode)
