"""Configuration loading for mdsh (.mdsh.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".mdsh.yml"
DEFAULT_INDEX_PAGES = ("_index.md", "index.en.md", "index.md")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class FrontmatterConfig:
    """How missing frontmatter is treated."""

    strict: bool = True


@dataclass
class DirectiveConfig:
    """Command reconstruction settings for ``:::code`` blocks."""

    heredoc_verbatim: bool = False


@dataclass
class GatherConfig:
    """Represents the settings defined in .mdsh.yml at the docs root."""

    root: Path
    frontmatter: FrontmatterConfig = field(default_factory=FrontmatterConfig)
    directives: DirectiveConfig = field(default_factory=DirectiveConfig)
    index_pages: List[str] = field(default_factory=lambda: list(DEFAULT_INDEX_PAGES))
    exclude_paths: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> GatherConfig:
    """Load configuration from a docs directory or an explicit .mdsh.yml path."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return GatherConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = GatherConfig(root=root)

    frontmatter_data = _as_dict(data.get("frontmatter"))
    strict = _as_bool(frontmatter_data.get("strict"))
    if strict is not None:
        config.frontmatter.strict = strict

    directive_data = _as_dict(data.get("directives"))
    heredoc_verbatim = _as_bool(directive_data.get("heredoc_verbatim"))
    if heredoc_verbatim is not None:
        config.directives.heredoc_verbatim = heredoc_verbatim

    if data.get("index_pages") is not None:
        index_pages = _as_str_list(data.get("index_pages"))
        if not index_pages:
            raise ConfigError("index_pages must list at least one file name")
        config.index_pages = index_pages

    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_INDEX_PAGES",
    "DirectiveConfig",
    "FrontmatterConfig",
    "GatherConfig",
    "load_config",
]
