"""Core data models shared by the parser, the resolvers and the CLI."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class SourceFile:
    id: str
    content: str
    display_name: str = ""

    def __post_init__(self) -> None:
        if not self.display_name:
            object.__setattr__(self, "display_name", self.id)


@dataclass
class FunctionSpan:
    name: str
    start_offset: int
    end_offset: int
    source_file_id: str


@dataclass
class DependencyInfo:
    name: str
    content: str
    file: str


@dataclass
class DependencyResult:
    target_name: str
    target: Optional[str] = None
    target_file: Optional[str] = None
    dependencies: List[DependencyInfo] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.target is not None


@dataclass
class CallerInfo:
    name: str
    content: str
    file: str = ""


@dataclass
class CallHierarchyResult:
    target: str
    callers: List[CallerInfo] = field(default_factory=list)


@dataclass
class KeywordFinding:
    function_name: str
    found_keywords: List[str]
    content: str
    file: str = ""


@dataclass
class Hub:
    module: str
    importers: int


@dataclass
class ModuleGraph:
    nodes: List[str]
    edges: Dict[str, List[str]]
    cycles: List[List[str]] = field(default_factory=list)
    hubs: List[Hub] = field(default_factory=list)
    orphans: List[str] = field(default_factory=list)

    def edge_pairs(self) -> List[Tuple[str, str]]:
        return [(src, dst) for src, targets in self.edges.items() for dst in targets]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FileMetrics:
    id: str
    lines: int
    complexity: int


@dataclass
class HeatmapNode:
    name: str
    children: List["HeatmapNode"] = field(default_factory=list)
    lines: Optional[int] = None
    complexity: Optional[int] = None

    @property
    def is_file(self) -> bool:
        return self.lines is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.is_file:
            return {"name": self.name, "lines": self.lines, "complexity": self.complexity}
        return {"name": self.name, "children": [c.to_dict() for c in self.children]}
