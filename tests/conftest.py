"""Pytest configuration and fixtures for jsgraph tests."""

from pathlib import Path
from typing import Callable, Dict, List

import pytest

from jsgraph_cli.config import AnalysisSettings
from jsgraph_cli.models import SourceFile
from jsgraph_cli.orchestrator import AnalysisEngine
from jsgraph_cli.parser import SourceParser


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path: Path, monkeypatch):
    """Point the config file at a temp dir so tests never read ~/.jsgraph."""
    config_file = tmp_path / "jsgraph_home" / "config.toml"
    monkeypatch.setattr("jsgraph_cli.config.BASE_DIR", config_file.parent)
    monkeypatch.setattr("jsgraph_cli.config.CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def parser() -> SourceParser:
    return SourceParser()


@pytest.fixture
def engine() -> AnalysisEngine:
    return AnalysisEngine(AnalysisSettings())


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to the sample TypeScript project."""
    return Path(__file__).parent / "fixtures" / "sample_project"


@pytest.fixture
def make_files() -> Callable[[Dict[str, str]], List[SourceFile]]:
    """Build an ordered manifest from ``{id: content}``."""

    def _make(sources: Dict[str, str]) -> List[SourceFile]:
        return [SourceFile(id=key, content=content) for key, content in sources.items()]

    return _make


@pytest.fixture
def garbage_source() -> str:
    """Text no JavaScript grammar can recover from (30 lines)."""
    return "\n".join([")))"] * 30)
