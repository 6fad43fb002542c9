"""Title and weight resolution from a document's YAML frontmatter."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

from .document import Document, Frontmatter
from .errors import InvalidFrontmatterError, MissingFrontmatterError
from .models import DEFAULT_TITLE, DEFAULT_WEIGHT

TITLE_KEY = "title"
WEIGHT_KEY = "weight"
SIDEBAR_POSITION_KEY = "sidebar_position"


@dataclass(frozen=True)
class PageMeta:
    """Frontmatter values the gatherer cares about."""

    title: str = DEFAULT_TITLE
    weight: int = DEFAULT_WEIGHT


def resolve_frontmatter(document: Document, file: Path) -> PageMeta:
    """Return the title and weight declared at the top of ``document``.

    The first top-level node must be frontmatter. ``weight`` takes precedence
    over ``sidebar_position``; both must be integer-like when present.
    """
    node = document.first()
    if not isinstance(node, Frontmatter):
        raise MissingFrontmatterError(file)

    data = _load_mapping(node.value, file)

    title = data.get(TITLE_KEY)
    weight = DEFAULT_WEIGHT
    for key in (WEIGHT_KEY, SIDEBAR_POSITION_KEY):
        if data.get(key) is not None:
            weight = _as_weight(data[key], key, file)
            break

    return PageMeta(
        title=DEFAULT_TITLE if title is None else str(title),
        weight=weight,
    )


def _load_mapping(text: str, file: Path) -> Dict[str, Any]:
    try:
        loaded = yaml.safe_load(text) if text.strip() else None
    except yaml.YAMLError as exc:
        raise InvalidFrontmatterError(file, f"YAML error: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise InvalidFrontmatterError(file, "expected a mapping at the top level")
    return loaded


def _as_weight(value: Any, key: str, file: Path) -> int:
    if isinstance(value, bool):
        raise InvalidFrontmatterError(file, f"'{key}' must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise InvalidFrontmatterError(file, f"'{key}' must be an integer, got {value!r}")


__all__ = [
    "PageMeta",
    "SIDEBAR_POSITION_KEY",
    "TITLE_KEY",
    "WEIGHT_KEY",
    "resolve_frontmatter",
]
