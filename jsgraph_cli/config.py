"""Configuration paths and analysis settings for jsgraph."""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import toml

logger = logging.getLogger(__name__)

BASE_DIR = Path(os.environ.get("JSGRAPH_HOME", str(Path.home() / ".jsgraph"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

# Candidate order for extension probing during import resolution.
SOURCE_EXTENSIONS: Tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx")
DEFAULT_HUB_THRESHOLD = 5
ENTRY_POINT_PATTERN = r"^(index|main|app)$"
MAX_ERROR_RATIO = 0.5
DEFAULT_LANGUAGE = "tsx"


@dataclass
class AnalysisSettings:
    """Tunables shared by the engine and the CLI."""

    hub_threshold: int = DEFAULT_HUB_THRESHOLD
    extensions: Tuple[str, ...] = field(default=SOURCE_EXTENSIONS)
    entry_point_pattern: str = ENTRY_POINT_PATTERN
    max_error_ratio: float = MAX_ERROR_RATIO
    default_language: str = DEFAULT_LANGUAGE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisSettings":
        settings = cls()
        if "hub_threshold" in data:
            settings.hub_threshold = int(data["hub_threshold"])
        if "extensions" in data:
            settings.extensions = tuple(
                ext if ext.startswith(".") else f".{ext}" for ext in data["extensions"]
            )
        if "entry_point_pattern" in data:
            settings.entry_point_pattern = str(data["entry_point_pattern"])
        if "max_error_ratio" in data:
            settings.max_error_ratio = float(data["max_error_ratio"])
        if "default_language" in data:
            settings.default_language = str(data["default_language"])
        return settings

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["extensions"] = list(self.extensions)
        return data


def load_full_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    path = config_file or CONFIG_FILE
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Could not read config %s: %s", path, exc)
        return {}


def load_settings(config_file: Optional[Path] = None) -> AnalysisSettings:
    """Load the ``[analysis]`` section, falling back to defaults.

    Args:
        config_file: Explicit config path; defaults to ``$JSGRAPH_HOME/config.toml``.

    Returns:
        Settings with every missing or malformed key left at its default.
    """
    section = load_full_config(config_file).get("analysis", {})
    if not isinstance(section, dict):
        logger.warning("Ignoring malformed [analysis] section")
        return AnalysisSettings()
    try:
        return AnalysisSettings.from_dict(section)
    except (TypeError, ValueError) as exc:
        logger.warning("Invalid [analysis] settings, using defaults: %s", exc)
        return AnalysisSettings()


def save_settings(settings: AnalysisSettings, config_file: Optional[Path] = None) -> Path:
    """Write *settings* to the ``[analysis]`` section, preserving other sections."""
    path = config_file or CONFIG_FILE
    config = load_full_config(path)
    config["analysis"] = settings.to_dict()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        toml.dump(config, f)
    return path

