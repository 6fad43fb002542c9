"""Sinks for non-fatal findings raised while gathering."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol

from .logging import get_logger


@dataclass(frozen=True)
class Diagnostic:
    """A warning tied to a source location."""

    message: str
    file: Optional[Path] = None
    line: Optional[int] = None

    def location(self) -> str:
        if self.file is None:
            return ""
        if self.line is None:
            return str(self.file)
        return f"{self.file}:{self.line}"

    def __str__(self) -> str:
        location = self.location()
        return f"{location}: {self.message}" if location else self.message


class DiagnosticSink(Protocol):
    """Receives diagnostics; implementations decide where they end up."""

    def report(self, diagnostic: Diagnostic) -> None:
        ...


class LoggingDiagnostics:
    """Default sink: forwards each diagnostic as a warning on ``mdsh.diagnostics``."""

    def __init__(self) -> None:
        self.logger = get_logger("diagnostics")

    def report(self, diagnostic: Diagnostic) -> None:
        self.logger.warning("%s", diagnostic)


class CollectingDiagnostics:
    """Keeps diagnostics in memory, optionally forwarding to another sink."""

    def __init__(self, forward: Optional[DiagnosticSink] = None) -> None:
        self.items: List[Diagnostic] = []
        self._forward = forward

    def report(self, diagnostic: Diagnostic) -> None:
        self.items.append(diagnostic)
        if self._forward is not None:
            self._forward.report(diagnostic)

    def messages(self) -> List[str]:
        return [str(item) for item in self.items]


__all__ = [
    "CollectingDiagnostics",
    "Diagnostic",
    "DiagnosticSink",
    "LoggingDiagnostics",
]
