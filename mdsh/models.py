"""Test-plan data models handed from the gatherer to a runner."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Protocol, Tuple, TypeVar

DEFAULT_TITLE = "Unknown"
DEFAULT_WEIGHT = 0
DEFAULT_WAIT = 0
DEFAULT_TIMEOUT = 120
DEFAULT_HOOK_TIMEOUT = 0
INDEX_PAGE_WEIGHT = 1


@dataclass(frozen=True)
class Script:
    """One shell command mined from a ``:::code`` directive."""

    command: str
    wait: int = DEFAULT_WAIT
    timeout: int = DEFAULT_TIMEOUT
    hook: Optional[str] = None
    hook_timeout: int = DEFAULT_HOOK_TIMEOUT
    expect_error: bool = False
    line_number: Optional[int] = None


@dataclass(frozen=True)
class Page:
    """A Markdown document that contributes scripts or describes its directory."""

    title: str
    file: Path
    weight: int = DEFAULT_WEIGHT
    is_index: bool = False
    scripts: Tuple[Script, ...] = ()


@dataclass(frozen=True)
class Category:
    """A directory holding pages and nested categories, already ordered by weight."""

    title: str = DEFAULT_TITLE
    weight: int = DEFAULT_WEIGHT
    children: Tuple["Category", ...] = ()
    pages: Tuple[Page, ...] = ()
    run: bool = True
    path: Path = field(default_factory=Path)

    def iter_pages(self) -> Iterable[Page]:
        """Yield pages depth-first in plan order (own pages before children)."""
        yield from self.pages
        for child in self.children:
            yield from child.iter_pages()


class _Weighted(Protocol):
    weight: int


_W = TypeVar("_W", bound=_Weighted)


def sort_by_weight(items: Iterable[_W]) -> Tuple[_W, ...]:
    """Return items ordered ascending by weight; equal weights keep input order."""
    # sorted() is stable: ties keep discovery order.
    return tuple(sorted(items, key=lambda item: item.weight))


__all__ = [
    "Category",
    "DEFAULT_HOOK_TIMEOUT",
    "DEFAULT_TIMEOUT",
    "DEFAULT_TITLE",
    "DEFAULT_WAIT",
    "DEFAULT_WEIGHT",
    "INDEX_PAGE_WEIGHT",
    "Page",
    "Script",
    "sort_by_weight",
]
