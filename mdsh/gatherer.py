"""Directory walking that turns a docs tree into an ordered test plan."""

from __future__ import annotations

from dataclasses import replace
from fnmatch import fnmatchcase
from pathlib import Path
from typing import List, Optional, Sequence

from .config import DEFAULT_INDEX_PAGES, GatherConfig
from .diagnostics import Diagnostic, DiagnosticSink, LoggingDiagnostics
from .directives import DirectiveMiner
from .errors import DirectoryNotFoundError, MissingFrontmatterError
from .frontmatter import resolve_frontmatter
from .logging import get_logger
from .models import (
    DEFAULT_TITLE,
    DEFAULT_WEIGHT,
    INDEX_PAGE_WEIGHT,
    Category,
    Page,
    sort_by_weight,
)
from .parser import DocumentParser, MarkdownParser

NOTEST_SENTINEL = ".notest"
MARKDOWN_SUFFIX = ".md"


class Gatherer:
    """Walks a docs directory and builds the Category/Page/Script tree.

    Each directory becomes a Category holding its Markdown pages and its
    non-empty subdirectories, both ordered by weight. Directories that yield
    nothing are pruned, so ``gather`` returns ``None`` when no tests exist.
    """

    def __init__(
        self,
        parser: DocumentParser | None = None,
        diagnostics: DiagnosticSink | None = None,
        *,
        strict_frontmatter: bool = True,
        heredoc_verbatim: bool = False,
        index_pages: Sequence[str] = DEFAULT_INDEX_PAGES,
        exclude_paths: Sequence[str] = (),
    ) -> None:
        self.parser = parser or MarkdownParser()
        self.diagnostics = diagnostics or LoggingDiagnostics()
        self.strict_frontmatter = strict_frontmatter
        self.index_pages = tuple(index_pages)
        self.exclude_paths = tuple(exclude_paths)
        self.miner = DirectiveMiner(self.diagnostics, heredoc_verbatim=heredoc_verbatim)
        self.logger = get_logger("gatherer")

    @classmethod
    def from_config(
        cls,
        config: GatherConfig,
        *,
        parser: DocumentParser | None = None,
        diagnostics: DiagnosticSink | None = None,
    ) -> "Gatherer":
        return cls(
            parser,
            diagnostics,
            strict_frontmatter=config.frontmatter.strict,
            heredoc_verbatim=config.directives.heredoc_verbatim,
            index_pages=config.index_pages,
            exclude_paths=config.exclude_paths,
        )

    def gather(self, root: str | Path) -> Optional[Category]:
        """Return the plan rooted at ``root``, or ``None`` if it holds no tests."""
        root_path = Path(root).expanduser()
        if not root_path.exists():
            raise DirectoryNotFoundError(root_path)
        if not root_path.is_dir():
            raise NotADirectoryError(f"Docs path is not a directory: {root_path}")

        self.logger.info("Gathering tests from %s", root_path)
        category = self._walk(root_path)
        if category is None:
            self.logger.info("No tests found under %s", root_path)
        return category

    def _walk(self, directory: Path) -> Optional[Category]:
        entries = sorted(
            (entry for entry in directory.iterdir() if not self._is_excluded(entry.name)),
            key=lambda entry: entry.name,
        )
        index_name = self._index_name(entries)

        title = DEFAULT_TITLE
        weight = DEFAULT_WEIGHT
        run = True
        children: List[Category] = []
        pages: List[Page] = []

        for entry in entries:
            if entry.name == NOTEST_SENTINEL:
                run = False
            elif entry.is_dir():
                child = self._walk(entry)
                if child is not None:
                    children.append(child)
            elif entry.name.endswith(MARKDOWN_SUFFIX):
                if entry.name in self.index_pages and entry.name != index_name:
                    self.diagnostics.report(
                        Diagnostic(
                            f"Treating duplicate index page as a regular page; {index_name} describes this directory",
                            file=entry,
                        )
                    )
                page = self.build_page(entry, directory, entry.name == index_name)
                if page is None:
                    continue
                if page.is_index:
                    title = page.title
                    weight = page.weight
                    page = replace(page, weight=INDEX_PAGE_WEIGHT)
                pages.append(page)

        if not children and not pages:
            self.logger.debug("Pruning %s: no pages or child categories", directory)
            return None

        if not run:
            self.logger.debug("%s contains %s; marking category as not runnable", directory, NOTEST_SENTINEL)

        return Category(
            title=title,
            weight=weight,
            children=sort_by_weight(children),
            pages=sort_by_weight(pages),
            run=run,
            path=directory,
        )

    def build_page(self, file: Path, directory: Path, is_index: bool) -> Optional[Page]:
        """Parse one Markdown file; ``None`` when it is neither an index nor has scripts."""
        text = self._read_markdown(file)
        document = self.parser.parse(text, source=file)

        try:
            meta = resolve_frontmatter(document, file)
        except MissingFrontmatterError as exc:
            if self.strict_frontmatter:
                raise
            self.diagnostics.report(Diagnostic(f"{exc}; skipping file", file=file))
            return None

        scripts = self.miner.mine(document, file)
        self.logger.debug(
            "Read %s (index=%s): %d script(s) from %s", file.name, is_index, len(scripts), directory
        )
        if not is_index and not scripts:
            return None

        return Page(
            title=meta.title,
            file=file,
            weight=meta.weight,
            is_index=is_index,
            scripts=scripts,
        )

    def _read_markdown(self, file: Path) -> str:
        data = file.read_bytes()
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            self.diagnostics.report(
                Diagnostic(
                    f"Invalid UTF-8 at byte {exc.start}; undecodable bytes replaced with U+FFFD",
                    file=file,
                )
            )
            return data.decode("utf-8", errors="replace")

    def _index_name(self, entries: Sequence[Path]) -> Optional[str]:
        names = {entry.name for entry in entries if not entry.is_dir()}
        for candidate in self.index_pages:
            if candidate in names:
                return candidate
        return None

    def _is_excluded(self, name: str) -> bool:
        return any(fnmatchcase(name, pattern) for pattern in self.exclude_paths)


def gather(root: str | Path, **kwargs: object) -> Optional[Category]:
    """Shortcut for ``Gatherer(**kwargs).gather(root)``."""
    return Gatherer(**kwargs).gather(root)  # type: ignore[arg-type]


__all__ = ["Gatherer", "MARKDOWN_SUFFIX", "NOTEST_SENTINEL", "gather"]
