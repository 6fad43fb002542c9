"""Exceptions raised while gathering a test plan."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class GatherError(RuntimeError):
    """Base class for failures that abort a gather run."""


class DirectoryNotFoundError(GatherError, FileNotFoundError):
    """Raised when the docs root handed to ``gather`` does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Directory '{path}' not found")
        self.path = path


class MissingFrontmatterError(GatherError):
    """Raised when a Markdown file does not start with a frontmatter block."""

    def __init__(self, file: Path) -> None:
        super().__init__(f"No frontmatter found at {file}")
        self.file = file


class InvalidFrontmatterError(GatherError):
    """Raised when frontmatter cannot be read as a mapping with a numeric weight."""

    def __init__(self, file: Path, detail: str) -> None:
        super().__init__(f"Invalid frontmatter in {file}: {detail}")
        self.file = file
        self.detail = detail


class InvalidAttributeError(GatherError):
    """Raised when an integer directive attribute holds a non-integer value."""

    def __init__(
        self, file: Optional[Path], line: Optional[int], key: str, value: str
    ) -> None:
        location = str(file) if file is not None else "<document>"
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(
            f"Invalid value {value!r} for '{key}' in code directive at {location}; expected an integer"
        )
        self.file = file
        self.line = line
        self.key = key
        self.value = value


__all__ = [
    "DirectoryNotFoundError",
    "GatherError",
    "InvalidAttributeError",
    "InvalidFrontmatterError",
    "MissingFrontmatterError",
]
