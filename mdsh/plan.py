"""Serialisation of a gathered plan for display and for runners."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .models import Category, Page, Script

_INDENT = "  "


def script_to_dict(script: Script) -> Dict[str, Any]:
    return {
        "command": script.command,
        "wait": script.wait,
        "timeout": script.timeout,
        "hook": script.hook,
        "hookTimeout": script.hook_timeout,
        "expectError": script.expect_error,
        "lineNumber": script.line_number,
    }


def page_to_dict(page: Page) -> Dict[str, Any]:
    return {
        "title": page.title,
        "file": str(page.file),
        "weight": page.weight,
        "isIndex": page.is_index,
        "scripts": [script_to_dict(script) for script in page.scripts],
    }


def plan_to_dict(category: Category) -> Dict[str, Any]:
    """Return a JSON-ready view of ``category`` keeping the stored order."""
    return {
        "title": category.title,
        "weight": category.weight,
        "run": category.run,
        "path": str(category.path),
        "pages": [page_to_dict(page) for page in category.pages],
        "children": [plan_to_dict(child) for child in category.children],
    }


def count_scripts(category: Optional[Category]) -> int:
    if category is None:
        return 0
    return sum(len(page.scripts) for page in category.iter_pages())


def plan_payload(category: Optional[Category], warnings: Sequence[str] = ()) -> Dict[str, Any]:
    """Envelope shared by ``mdsh plan --json`` and the service ``/plan`` route."""
    return {
        "plan": plan_to_dict(category) if category is not None else None,
        "scripts": count_scripts(category),
        "warnings": list(warnings),
    }


def render_plan(category: Category, *, root: Path | None = None) -> str:
    """Render the plan as an indented outline, one script per line.

    ``root`` shortens page paths; categories carrying a ``.notest`` sentinel
    are flagged as skipped.
    """
    lines: List[str] = []
    _render_category(category, lines, depth=0, root=root)
    return "\n".join(lines)


def _render_category(
    category: Category, lines: List[str], *, depth: int, root: Path | None
) -> None:
    prefix = _INDENT * depth
    header = f"{prefix}{category.title} (weight {category.weight})"
    if not category.run:
        header += " (skipped: .notest)"
    lines.append(header)

    for page in category.pages:
        marker = " [index]" if page.is_index else ""
        lines.append(f"{prefix}{_INDENT}{page.title}{marker} - {_display_path(page.file, root)}")
        for script in page.scripts:
            lines.append(f"{prefix}{_INDENT * 2}{_describe_script(script)}")

    for child in category.children:
        _render_category(child, lines, depth=depth + 1, root=root)


def _describe_script(script: Script) -> str:
    first_line, _, rest = script.command.partition("\n")
    summary = f"$ {first_line}"
    if rest:
        extra = len(rest.split("\n"))
        summary += f" (+{extra} more lines)"
    details = [f"timeout={script.timeout}s"]
    if script.wait:
        details.append(f"wait={script.wait}s")
    if script.hook:
        details.append(f"hook={script.hook} ({script.hook_timeout}s)")
    if script.expect_error:
        details.append("expect error")
    if script.line_number is not None:
        details.append(f"line {script.line_number}")
    return f"{summary}  [{', '.join(details)}]"


def _display_path(path: Path, root: Path | None) -> str:
    if root is None:
        return str(path)
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


__all__ = [
    "count_scripts",
    "page_to_dict",
    "plan_payload",
    "plan_to_dict",
    "render_plan",
    "script_to_dict",
]
