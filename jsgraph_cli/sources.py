"""Build source manifests from directories, single files and zip archives.

A manifest is fully materialized before any analysis starts; cross-file
resolution needs the complete file set.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path, PurePosixPath
from typing import List, Sequence, Tuple

from .models import SourceFile
from .modules import GraphMode
from .parser import LANGUAGE_MAP, SKIP_DIRS

logger = logging.getLogger(__name__)


def _is_source(name: str, extensions: Sequence[str]) -> bool:
    return PurePosixPath(name).suffix.lower() in extensions


def load_directory(root: Path, extensions: Sequence[str] = tuple(LANGUAGE_MAP)) -> List[SourceFile]:
    """Every source file under *root*, sorted, skipping vendored/build dirs."""
    files: List[SourceFile] = []
    for file_path in sorted(root.rglob("*")):
        if not file_path.is_file() or not _is_source(file_path.name, extensions):
            continue
        if any(part in SKIP_DIRS for part in file_path.relative_to(root).parts):
            continue
        try:
            content = file_path.read_text(encoding="utf-8", errors="ignore")
        except OSError as exc:
            logger.warning("Could not read %s: %s", file_path, exc)
            continue
        files.append(SourceFile(
            id=str(file_path),
            content=content,
            display_name=file_path.relative_to(root).as_posix(),
        ))
    return files


def load_archive(archive: Path, extensions: Sequence[str] = tuple(LANGUAGE_MAP)) -> List[SourceFile]:
    """Every source member of a zip archive, keyed by its archive path."""
    files: List[SourceFile] = []
    with zipfile.ZipFile(archive) as zf:
        for info in zf.infolist():
            if info.is_dir() or not _is_source(info.filename, extensions):
                continue
            key = info.filename.replace("\\", "/")
            if any(part in SKIP_DIRS for part in PurePosixPath(key).parts):
                continue
            content = zf.read(info).decode("utf-8", errors="ignore")
            files.append(SourceFile(id=key, content=content))
    return files


def load_sources(path: Path, extensions: Sequence[str] = tuple(LANGUAGE_MAP)) -> Tuple[List[SourceFile], GraphMode]:
    """Load *path* and report the addressing mode its ids use.

    Raises:
        FileNotFoundError: *path* does not exist.
        zipfile.BadZipFile: a ``.zip`` path is not a readable archive.
    """
    if not path.exists():
        raise FileNotFoundError(path)
    if path.is_dir():
        return load_directory(path, extensions), GraphMode.FILESYSTEM
    if path.suffix.lower() == ".zip":
        return load_archive(path, extensions), GraphMode.VIRTUAL
    content = path.read_text(encoding="utf-8", errors="ignore")
    return [SourceFile(id=str(path), content=content, display_name=path.name)], GraphMode.FILESYSTEM
