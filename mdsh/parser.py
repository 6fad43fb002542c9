"""Markdown → document tree adapter built on markdown-it-py."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.container import container_plugin
from mdit_py_plugins.front_matter import front_matter_plugin

from .document import (
    Code,
    ContainerDirective,
    Document,
    Frontmatter,
    Node,
    OtherBlock,
    Paragraph,
    Text,
)

_DIRECTIVE_TOKEN = "container_directive"
_DIRECTIVE_HEADER = re.compile(
    r"^(?P<name>[A-Za-z][A-Za-z0-9_-]*)"
    r"(?:\[(?P<label>[^\]]*)\])?"
    r"(?:\{(?P<attributes>.*)\})?$"
)
_ATTRIBUTE = re.compile(
    r"""
    \s*
    (?:
        \#(?P<id>[^\s#.}]+)
      | \.(?P<cls>[^\s#.}]+)
      | (?P<key>[^\s=#.}"']+)
        (?:
            \s*=\s*
            (?:
                "(?P<double>[^"]*)"
              | '(?P<single>[^']*)'
              | (?P<bare>[^\s"'=<>`}]+)
            )
        )?
    )
    """,
    re.VERBOSE,
)
# Inline tokens that wrap nested content; text inside them is not a direct text run.
_INLINE_WRAPPERS = {"em", "strong", "s", "link"}


class DocumentParser(Protocol):
    """Anything able to turn Markdown source into a ``Document``."""

    def parse(self, text: str, *, source: Optional[Path] = None) -> Document:
        ...


def parse_attributes(raw: str) -> Dict[str, str]:
    """Parse a ``{key=value ...}`` attribute body into a string mapping.

    Supports ``key=value``, ``key="value"``, ``key='value'``, bare ``key``
    (empty value), ``#id`` and ``.class`` shorthands. Parsing stops at the
    first fragment that does not look like an attribute.
    """
    attributes: Dict[str, str] = {}
    classes: List[str] = []
    position = 0
    body = raw.strip()
    while position < len(body):
        match = _ATTRIBUTE.match(body, position)
        if match is None or match.end() == position:
            break
        position = match.end()
        if match.group("id") is not None:
            attributes["id"] = match.group("id")
        elif match.group("cls") is not None:
            classes.append(match.group("cls"))
        else:
            value = next(
                (
                    match.group(name)
                    for name in ("double", "single", "bare")
                    if match.group(name) is not None
                ),
                "",
            )
            attributes[match.group("key")] = value
    if classes:
        attributes["class"] = " ".join(classes)
    return attributes


def _is_directive_header(params: str, *_: object) -> bool:
    return _DIRECTIVE_HEADER.match(params.strip()) is not None


def _line(token: Token) -> Optional[int]:
    # markdown-it line maps are zero-based.
    return token.map[0] + 1 if token.map else None


def _text_runs(inline: Token) -> Tuple[Text, ...]:
    """Return the direct text runs of an inline token.

    Soft and hard breaks join lines with ``\\n``; any other inline construct (code spans,
    emphasis, links, html, images) ends the current run and its own text
    is dropped.
    """
    runs: List[Text] = []
    current: List[str] = []
    depth = 0

    def _flush() -> None:
        if current:
            runs.append(Text("".join(current)))
            current.clear()

    for child in inline.children or []:
        base = child.type.rsplit("_", 1)[0]
        if child.nesting == 1 and base in _INLINE_WRAPPERS:
            _flush()
            depth += 1
        elif child.nesting == -1 and base in _INLINE_WRAPPERS:
            depth = max(depth - 1, 0)
        elif depth:
            continue
        elif child.type == "text":
            current.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            current.append("\n")
        else:
            _flush()
    _flush()
    return tuple(runs)


@dataclass
class _Frame:
    opening: Token
    children: List[Node] = field(default_factory=list)

    def close(self) -> Node:
        token = self.opening
        line = _line(token)
        if token.type == "paragraph_open":
            texts = tuple(node for node in self.children if isinstance(node, Text))
            return Paragraph(children=texts, line=line)
        match = _DIRECTIVE_HEADER.match(token.info.strip())
        if token.type == f"{_DIRECTIVE_TOKEN}_open" and match is not None:
            raw_attributes = match.group("attributes")
            return ContainerDirective(
                name=match.group("name"),
                attributes=parse_attributes(raw_attributes) if raw_attributes else {},
                children=tuple(self.children),
                label=match.group("label"),
                line=line,
            )
        kind = token.type[: -len("_open")] if token.type.endswith("_open") else token.type
        return OtherBlock(kind=kind, children=tuple(self.children), line=line)


def build_document(tokens: Sequence[Token], source: Optional[Path] = None) -> Document:
    """Fold a flat markdown-it block token stream into a ``Document``."""
    root: List[Node] = []
    stack: List[_Frame] = []

    for token in tokens:
        target = stack[-1].children if stack else root
        if token.type == "front_matter":
            target.append(Frontmatter(value=token.content, line=_line(token)))
        elif token.type in ("fence", "code_block"):
            lang = token.info.strip().split(" ", 1)[0] if token.info else ""
            # Code values exclude the newline that ends the last line.
            value = token.content[:-1] if token.content.endswith("\n") else token.content
            target.append(Code(value=value, lang=lang or None, line=_line(token)))
        elif token.type == "inline":
            target.extend(_text_runs(token))
        elif token.nesting == 1:
            stack.append(_Frame(token))
        elif token.nesting == -1:
            frame = stack.pop()
            (stack[-1].children if stack else root).append(frame.close())
        else:
            target.append(OtherBlock(kind=token.type, line=_line(token)))

    return Document(children=tuple(root), source=source)


class MarkdownParser:
    """CommonMark + GFM tables/strikethrough + frontmatter + ``:::`` directives."""

    def __init__(self) -> None:
        self._md = (
            MarkdownIt("commonmark")
            .enable(["table", "strikethrough"])
            .use(front_matter_plugin)
            .use(
                container_plugin,
                name="directive",
                marker=":",
                validate=_is_directive_header,
            )
        )

    def parse(self, text: str, *, source: Optional[Path] = None) -> Document:
        return build_document(self._md.parse(text), source=source)

    def parse_file(self, path: Path) -> Document:
        return self.parse(path.read_text(encoding="utf-8"), source=path)


__all__ = ["DocumentParser", "MarkdownParser", "build_document", "parse_attributes"]
