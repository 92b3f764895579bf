"""Import extraction, import-path resolution and module-graph building.

Two addressing modes share one candidate order:

* **filesystem** -- specifiers resolve against real paths on disk;
* **virtual** -- specifiers resolve against the key set of an in-memory
  manifest (for example the members of a ``.zip`` archive).

Only relative specifiers (``./x``, ``../x``) are ever resolved, which keeps
the graph scoped to project-local modules.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .config import SOURCE_EXTENSIONS
from .models import SourceFile
from .parser import ParseError, SourceParser
from .syntax import NodeKind, SyntaxNode, SyntaxTree

logger = logging.getLogger(__name__)


class GraphMode(str, Enum):
    FILESYSTEM = "filesystem"
    VIRTUAL = "virtual"


def is_relative_specifier(specifier: str) -> bool:
    return specifier in (".", "..") or specifier.startswith(("./", "../"))


def candidate_paths(base: str, extensions: Sequence[str], sep: str = "/") -> List[str]:
    """``base``, then ``base + ext``, then ``base/index + ext`` for each extension."""
    candidates = [base]
    candidates.extend(base + ext for ext in extensions)
    index_base = f"{base}index" if not base or base.endswith(sep) else f"{base}{sep}index"
    candidates.extend(index_base + ext for ext in extensions)
    return candidates


class FilesystemResolver:
    """Resolve specifiers against real files on disk."""

    def __init__(self, extensions: Sequence[str] = SOURCE_EXTENSIONS) -> None:
        self.extensions = tuple(extensions)

    @staticmethod
    def normalize(file_id: str) -> str:
        return os.path.normpath(file_id)

    def resolve(self, specifier: str, importer_id: str) -> Optional[str]:
        if not is_relative_specifier(specifier):
            return None
        base = os.path.normpath(os.path.join(os.path.dirname(importer_id), specifier))
        for candidate in candidate_paths(base, self.extensions, sep=os.sep):
            if Path(candidate).is_file():
                return candidate
        return None


class VirtualResolver:
    """Resolve specifiers against the keys of an in-memory manifest."""

    def __init__(self, known_ids: Iterable[str], extensions: Sequence[str] = SOURCE_EXTENSIONS) -> None:
        self.extensions = tuple(extensions)
        self.known = {self.normalize(i) for i in known_ids}

    @staticmethod
    def normalize(file_id: str) -> str:
        key = file_id.replace("\\", "/")
        while key.startswith("./"):
            key = key[2:]
        return key

    @staticmethod
    def join(directory: str, specifier: str) -> Optional[str]:
        """Join and collapse ``.`` / ``..``; ``None`` if it climbs above the root.

        A leading ``/`` on *directory* is kept, so absolute manifest keys
        resolve to absolute keys.
        """
        root = "/" if directory.startswith("/") else ""
        segments: List[str] = [s for s in directory.split("/") if s]
        for part in specifier.split("/"):
            if part in ("", "."):
                continue
            if part == "..":
                if not segments:
                    return None
                segments.pop()
            else:
                segments.append(part)
        return root + "/".join(segments)

    def resolve(self, specifier: str, importer_id: str) -> Optional[str]:
        if not is_relative_specifier(specifier):
            return None
        importer = self.normalize(importer_id)
        directory = importer[: importer.rfind("/") + 1]
        base = self.join(directory, specifier)
        if base is None:
            return None
        for candidate in candidate_paths(base, self.extensions):
            if candidate in self.known:
                return candidate
        return None


# ---------------------------------------------------------------------------
# Import extraction
# ---------------------------------------------------------------------------

def _string_value(node: SyntaxNode) -> str:
    raw = node.text
    if len(raw) >= 2 and raw[0] in "'\"`" and raw[-1] == raw[0]:
        return raw[1:-1]
    return raw


def extract_import_specifiers(tree: SyntaxTree) -> List[str]:
    """Static specifiers of ``import ... from``, bare ``import '...'`` and ``export ... from``."""
    specifiers: List[str] = []
    for node in tree.root.walk():
        if node.kind not in (NodeKind.IMPORT, NodeKind.EXPORT):
            continue
        source = node.field("source")
        if source is None or source.kind != NodeKind.STRING:
            continue
        specifiers.append(_string_value(source))
    return specifiers


# ---------------------------------------------------------------------------
# Graph building
# ---------------------------------------------------------------------------

def build_adjacency(
    files: Sequence[SourceFile],
    mode: GraphMode,
    parser: SourceParser,
    extensions: Sequence[str] = SOURCE_EXTENSIONS,
) -> Dict[str, List[str]]:
    """Map each parsed file id to the ordered, de-duplicated ids it imports.

    Files that fail to parse get no entry; they can still be edge targets.
    """
    resolver: "FilesystemResolver | VirtualResolver"
    if mode == GraphMode.FILESYSTEM:
        resolver = FilesystemResolver(extensions)
    else:
        resolver = VirtualResolver((f.id for f in files), extensions)

    adjacency: Dict[str, List[str]] = {}
    for source_file in files:
        module_id = resolver.normalize(source_file.id)
        try:
            tree = parser.parse(source_file)
        except ParseError as exc:
            logger.warning("Failed to parse %s: %s", source_file.id, exc.reason)
            continue

        targets: List[str] = []
        for specifier in extract_import_specifiers(tree):
            resolved = resolver.resolve(specifier, module_id)
            if resolved is None:
                logger.debug("Unresolved import '%s' in %s", specifier, module_id)
                continue
            if resolved not in targets:
                targets.append(resolved)
        existing = adjacency.setdefault(module_id, [])
        existing.extend(t for t in targets if t not in existing)
    return adjacency


def graph_nodes(adjacency: Dict[str, List[str]]) -> List[str]:
    """Every module id that appears as a source or a target, in discovery order."""
    nodes: Dict[str, None] = {}
    for src, targets in adjacency.items():
        nodes.setdefault(src, None)
        for dst in targets:
            nodes.setdefault(dst, None)
    return list(nodes)
