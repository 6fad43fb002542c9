"""Script mining from ``:::code`` container directives."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple, TypeGuard

from .diagnostics import Diagnostic, DiagnosticSink, LoggingDiagnostics
from .document import Code, ContainerDirective, Document, Node, Paragraph, Text
from .errors import InvalidAttributeError
from .logging import get_logger
from .models import DEFAULT_HOOK_TIMEOUT, DEFAULT_TIMEOUT, DEFAULT_WAIT, Script

DIRECTIVE_NAME = "code"
SELECTOR_KEY = "showCopyAction"
WAIT_KEY = "wait"
TIMEOUT_KEY = "timeout"
TEST_KEY = "test"
EXPECT_ERROR_KEY = "expectError"
RAW_KEY = "raw"
HOOK_KEY = "hook"
HOOK_TIMEOUT_KEY = "hookTimeout"

PROMPT = "$ "
HEREDOC_START = "<<EOF"
HEREDOC_END = "EOF"

# ASCII digits only: no "1_000" and no non-ASCII numerals.
_INTEGER = re.compile(r"^[+-]?[0-9]+$")


@dataclass(frozen=True)
class DirectiveOptions:
    """Attribute values of one directive after defaults are applied."""

    include: bool = True
    wait: int = DEFAULT_WAIT
    timeout: int = DEFAULT_TIMEOUT
    hook: Optional[str] = None
    hook_timeout: int = DEFAULT_HOOK_TIMEOUT
    expect_error: bool = False
    raw: bool = False


def is_test_directive(node: Node) -> TypeGuard[ContainerDirective]:
    """True for ``:::code{showCopyAction="true"}`` blocks."""
    return (
        isinstance(node, ContainerDirective)
        and node.name == DIRECTIVE_NAME
        and node.attributes.get(SELECTOR_KEY) == "true"
    )


def extract_content(directive: ContainerDirective) -> str:
    """Concatenate code blocks, paragraph text runs and bare text in order."""
    parts: List[str] = []
    for child in directive.children:
        if isinstance(child, Code):
            parts.append(child.value)
        elif isinstance(child, Paragraph):
            parts.extend(text.value for text in child.children)
        elif isinstance(child, Text):
            parts.append(child.value)
    return "".join(parts)


def extract_command(content: str, raw: bool, *, heredoc_verbatim: bool = False) -> str:
    """Turn directive content into the command handed to the shell.

    Raw content is returned untouched. Otherwise each line loses a leading
    ``"$ "`` prompt. Heredoc bodies (after a ``<<EOF`` line, up to the next line
    mentioning ``EOF``) are tracked; they are only exempt from prompt
    stripping when ``heredoc_verbatim`` is set.
    """
    if raw:
        return content

    lines: List[str] = []
    in_heredoc = False
    for line in content.split("\n"):
        if line.startswith(PROMPT) and not (heredoc_verbatim and in_heredoc):
            line = line[len(PROMPT):]

        if HEREDOC_START in line:
            in_heredoc = True
        elif in_heredoc and HEREDOC_END in line:
            in_heredoc = False

        lines.append(line)

    return "\n".join(lines)


class DirectiveMiner:
    """Collects Scripts from the top-level test directives of a document."""

    def __init__(
        self,
        diagnostics: DiagnosticSink | None = None,
        *,
        heredoc_verbatim: bool = False,
    ) -> None:
        self.diagnostics = diagnostics or LoggingDiagnostics()
        self.heredoc_verbatim = heredoc_verbatim
        self.logger = get_logger("directives")

    def mine(self, document: Document, file: Path | None = None) -> Tuple[Script, ...]:
        file = file if file is not None else document.source
        scripts: List[Script] = []
        for node in document.children:
            if is_test_directive(node):
                script = self._script_for(node, file)
                if script is not None:
                    scripts.append(script)
        return tuple(scripts)

    def resolve_options(
        self,
        attributes: Mapping[str, str],
        *,
        file: Path | None = None,
        line: int | None = None,
    ) -> DirectiveOptions:
        """Apply defaults to ``attributes``.

        Unknown keys are reported on every directive. Integer attributes are
        only validated when the directive is included, since a ``test="false"``
        block never reaches the runner.
        """
        values: Dict[str, object] = {}
        integers: Dict[str, str] = {}
        for key, value in attributes.items():
            if key in (WAIT_KEY, TIMEOUT_KEY, HOOK_TIMEOUT_KEY):
                integers[key] = value
            elif key == TEST_KEY:
                values[key] = value != "false"
            elif key in (EXPECT_ERROR_KEY, RAW_KEY):
                values[key] = value == "true"
            elif key == HOOK_KEY:
                values[key] = value
            elif key != SELECTOR_KEY:
                self.diagnostics.report(
                    Diagnostic(
                        f"Unrecognized param {key} in code directive",
                        file=file,
                        line=line,
                    )
                )

        include = bool(values.get(TEST_KEY, True))
        if not include:
            return DirectiveOptions(include=False)

        for key, value in integers.items():
            values[key] = _as_int(value, key, file, line)

        return DirectiveOptions(
            include=True,
            wait=values.get(WAIT_KEY, DEFAULT_WAIT),  # type: ignore[arg-type]
            timeout=values.get(TIMEOUT_KEY, DEFAULT_TIMEOUT),  # type: ignore[arg-type]
            hook=values.get(HOOK_KEY),  # type: ignore[arg-type]
            hook_timeout=values.get(HOOK_TIMEOUT_KEY, DEFAULT_HOOK_TIMEOUT),  # type: ignore[arg-type]
            expect_error=bool(values.get(EXPECT_ERROR_KEY, False)),
            raw=bool(values.get(RAW_KEY, False)),
        )

    def _script_for(self, node: ContainerDirective, file: Path | None) -> Script | None:
        options = self.resolve_options(node.attributes, file=file, line=node.line)
        if not options.include:
            self.logger.debug("Skipping directive at %s:%s (test=false)", file, node.line)
            return None

        content = extract_content(node)
        if not content:
            return None

        command = extract_command(
            content, options.raw, heredoc_verbatim=self.heredoc_verbatim
        )
        if not command:
            return None

        return Script(
            command=command,
            wait=options.wait,
            timeout=options.timeout,
            hook=options.hook,
            hook_timeout=options.hook_timeout,
            expect_error=options.expect_error,
            line_number=node.line,
        )


def _as_int(value: str, key: str, file: Path | None, line: int | None) -> int:
    text = value.strip()
    if not _INTEGER.match(text):
        raise InvalidAttributeError(file, line, key, value)
    return int(text)


__all__ = [
    "DirectiveMiner",
    "DirectiveOptions",
    "extract_command",
    "extract_content",
    "is_test_directive",
]
