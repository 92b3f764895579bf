"""Error-tolerant JavaScript / TypeScript parsing built on Tree-sitter.

Tree-sitter produces a *concrete syntax tree* even for broken input, marking
the damaged regions with ``ERROR`` nodes.  Small local damage (a missing
semicolon, a half-typed expression) is tolerated; a source whose damage
dominates the file, by bytes or by non-blank lines, is rejected with
:class:`ParseError` so callers can skip it.
"""

from __future__ import annotations

import importlib
import logging
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from .config import DEFAULT_LANGUAGE, MAX_ERROR_RATIO
from .models import SourceFile
from .syntax import NodeKind, SyntaxNode, SyntaxTree

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Language <-> file-extension mapping
# ---------------------------------------------------------------------------
LANGUAGE_MAP: Dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

SKIP_DIRS: Set[str] = {
    "node_modules", ".git", "dist", "build", "coverage", ".next",
    ".nuxt", ".cache", ".turbo", "out", ".venv", "venv", "__pycache__",
}

# language -> (grammar module, function returning the Language capsule)
_GRAMMAR_MODULES: Dict[str, Tuple[str, str]] = {
    "javascript": ("tree_sitter_javascript", "language"),
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
}


class ParseError(Exception):
    """Raised when a source cannot be turned into a usable syntax tree."""

    def __init__(self, source_id: str, reason: str) -> None:
        super().__init__(f"{source_id}: {reason}")
        self.source_id = source_id
        self.reason = reason


def language_for(source_id: str, default: str = DEFAULT_LANGUAGE) -> str:
    """Pick a grammar from the file extension; unknown or missing -> *default*."""
    suffix = PurePosixPath(source_id.replace("\\", "/")).suffix.lower()
    return LANGUAGE_MAP.get(suffix, default)


class SourceParser:
    """Parses :class:`SourceFile` values into :class:`SyntaxTree` values.

    Grammars are loaded lazily, once per parser instance.
    """

    def __init__(
        self,
        default_language: str = DEFAULT_LANGUAGE,
        max_error_ratio: float = MAX_ERROR_RATIO,
    ) -> None:
        self.default_language = default_language
        self.max_error_ratio = max_error_ratio
        self._parsers: Dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Grammar loading
    # ------------------------------------------------------------------

    def _get_parser(self, language: str) -> Any:
        if language in self._parsers:
            return self._parsers[language]

        spec = _GRAMMAR_MODULES.get(language)
        if spec is None:
            raise ParseError("<grammar>", f"no grammar mapped for language '{language}'")

        from tree_sitter import Language, Parser as TSParser

        mod_name, func_name = spec
        try:
            mod = importlib.import_module(mod_name)
        except ImportError as exc:
            raise ParseError(
                "<grammar>",
                f"grammar package '{mod_name}' is not installed "
                f"(pip install {mod_name.replace('_', '-')})",
            ) from exc
        # tree-sitter >=0.22 per-language packages expose a function that
        # returns the Language capsule.
        parser = TSParser(Language(getattr(mod, func_name)()))
        self._parsers[language] = parser
        logger.debug("Loaded tree-sitter parser for %s", language)
        return parser

    def supports_language(self, language: str) -> bool:
        try:
            self._get_parser(language)
        except ParseError:
            return False
        return True

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, source_file: SourceFile, language: Optional[str] = None) -> SyntaxTree:
        """Parse one file.

        Raises:
            ParseError: the grammar is unavailable, or the damage Tree-sitter
                had to recover from covers too much of the source.
        """
        lang = language or language_for(source_file.id, self.default_language)
        try:
            parser = self._get_parser(lang)
        except ParseError as exc:
            raise ParseError(source_file.id, exc.reason) from exc

        try:
            source_bytes = source_file.content.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ParseError(source_file.id, f"source is not valid text: {exc.reason}") from exc
        ts_tree = parser.parse(source_bytes)
        root = SyntaxNode(ts_tree.root_node)

        if root.kind == NodeKind.ERROR:
            raise ParseError(source_file.id, "source is not recognisable as a program")
        if root.has_error and source_bytes:
            byte_ratio = _error_bytes(root) / len(source_bytes)
            line_ratio = _damaged_line_ratio(root, source_file.content)
            ratio = max(byte_ratio, line_ratio)
            if ratio > self.max_error_ratio:
                raise ParseError(
                    source_file.id,
                    f"syntax errors cover {ratio:.0%} of the source",
                )
            logger.debug("Recovered from syntax errors in %s (%.0f%%)", source_file.id, ratio * 100)

        return SyntaxTree(
            source_id=source_file.id,
            source=source_bytes,
            language=lang,
            root=root,
        )

    def parse_many(self, files: Sequence[SourceFile]) -> List[SyntaxTree]:
        """Parse every file in order, logging and skipping failures."""
        trees: List[SyntaxTree] = []
        for source_file in files:
            try:
                trees.append(self.parse(source_file))
            except ParseError as exc:
                logger.warning("Failed to parse %s: %s", source_file.id, exc.reason)
        return trees


def _error_bytes(root: SyntaxNode) -> int:
    """Total size of the outermost ERROR regions below *root*."""
    total = 0
    stack = [root]
    while stack:
        node = stack.pop()
        if node.kind == NodeKind.ERROR:
            total += node.end - node.start
            continue
        if node.has_error:
            stack.extend(node.children)
    return total


def _damaged_line_ratio(root: SyntaxNode, code: str) -> float:
    """Share of non-blank lines touched by an ERROR region or a MISSING token."""
    lines = code.split("\n")
    non_blank = {row for row, line in enumerate(lines) if line.strip()}
    if not non_blank:
        return 0.0
    damaged: Set[int] = set()
    stack = [root]
    while stack:
        node = stack.pop()
        if node.kind == NodeKind.ERROR:
            damaged.update(range(node.start_row, node.end_row + 1))
            continue
        if node.is_missing:
            damaged.add(node.start_row)
        if node.has_error:
            stack.extend(node.children)
    return len(damaged & non_blank) / len(non_blank)
