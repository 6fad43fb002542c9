"""Document tree produced by the Markdown parser.

The tree is a closed set of node kinds. Anything the gatherer does not care
about (headings, lists, tables, quotes...) is represented as ``OtherBlock`` so
consumers only ever dispatch over the six cases below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class Frontmatter:
    """Raw YAML block at the very top of a document."""

    value: str
    line: Optional[int] = None


@dataclass(frozen=True)
class Text:
    """A run of literal text; soft and hard breaks are kept as ``\\n``."""

    value: str


@dataclass(frozen=True)
class Paragraph:
    children: Tuple[Text, ...] = ()
    line: Optional[int] = None


@dataclass(frozen=True)
class Code:
    """Fenced or indented code block."""

    value: str
    lang: Optional[str] = None
    line: Optional[int] = None


@dataclass(frozen=True)
class OtherBlock:
    """Any block the gatherer does not interpret, with its nested blocks."""

    kind: str
    children: Tuple["Node", ...] = ()
    line: Optional[int] = None


@dataclass(frozen=True)
class ContainerDirective:
    """``:::name[label]{attributes}`` block with parsed children."""

    name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: Tuple["Node", ...] = ()
    label: Optional[str] = None
    line: Optional[int] = None


Node = Union[Frontmatter, ContainerDirective, Paragraph, Text, Code, OtherBlock]


@dataclass(frozen=True)
class Document:
    """Top-level nodes of one Markdown file, in source order."""

    children: Tuple[Node, ...] = ()
    source: Optional[Path] = None

    def first(self) -> Optional[Node]:
        return self.children[0] if self.children else None


__all__ = [
    "Code",
    "ContainerDirective",
    "Document",
    "Frontmatter",
    "Node",
    "OtherBlock",
    "Paragraph",
    "Text",
]
