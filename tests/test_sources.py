"""Tests for building source manifests."""

import zipfile
from pathlib import Path

import pytest

from jsgraph_cli.modules import GraphMode
from jsgraph_cli.sources import load_archive, load_directory, load_sources


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    root = tmp_path / "proj"
    (root / "src").mkdir(parents=True)
    (root / "node_modules" / "dep").mkdir(parents=True)
    (root / "src" / "a.ts").write_text("export const a = 1;")
    (root / "src" / "b.jsx").write_text("export const b = <div />;")
    (root / "src" / "notes.md").write_text("# not code")
    (root / "node_modules" / "dep" / "index.js").write_text("module.exports = {};")
    return root


def test_load_directory(tree: Path):
    files = load_directory(tree)
    assert [f.display_name for f in files] == ["src/a.ts", "src/b.jsx"]
    assert files[0].id == str(tree / "src" / "a.ts")
    assert files[0].content == "export const a = 1;"


def test_load_directory_extension_filter(tree: Path):
    files = load_directory(tree, extensions=(".jsx",))
    assert [f.display_name for f in files] == ["src/b.jsx"]


def test_load_archive(tmp_path: Path):
    archive = tmp_path / "bundle.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("src/main.ts", "import './util';")
        zf.writestr("src/util.ts", "export {};")
        zf.writestr("README.md", "docs")
        zf.writestr("node_modules/x/index.js", "")

    files = load_archive(archive)
    assert [f.id for f in files] == ["src/main.ts", "src/util.ts"]
    assert files[0].display_name == "src/main.ts"


def test_load_sources_modes(tree: Path, tmp_path: Path):
    _files, mode = load_sources(tree)
    assert mode is GraphMode.FILESYSTEM

    single, mode = load_sources(tree / "src" / "a.ts")
    assert mode is GraphMode.FILESYSTEM
    assert [f.display_name for f in single] == ["a.ts"]

    archive = tmp_path / "one.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("a.js", "")
    _files, mode = load_sources(archive)
    assert mode is GraphMode.VIRTUAL


def test_load_sources_missing(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_sources(tmp_path / "nope")


def test_load_sources_bad_archive(tmp_path: Path):
    bogus = tmp_path / "bad.zip"
    bogus.write_text("nope")
    with pytest.raises(zipfile.BadZipFile):
        load_sources(bogus)
