"""Tests for mdsh.directives."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Tuple

import pytest

from mdsh.diagnostics import CollectingDiagnostics
from mdsh.directives import (
    DirectiveMiner,
    extract_command,
    extract_content,
    is_test_directive,
)
from mdsh.document import (
    Code,
    ContainerDirective,
    Document,
    Frontmatter,
    Node,
    OtherBlock,
    Paragraph,
    Text,
)
from mdsh.errors import InvalidAttributeError
from mdsh.models import Script
from mdsh.parser import MarkdownParser

FILE = Path("docs/page.md")


def _directive(
    *children: Node,
    name: str = "code",
    line: int = 4,
    **attributes: str,
) -> ContainerDirective:
    attrs: Dict[str, str] = {"showCopyAction": "true", **attributes}
    return ContainerDirective(name=name, attributes=attrs, children=children, line=line)


def _mine(*nodes: Node, **kwargs: object) -> Tuple[Tuple[Script, ...], CollectingDiagnostics]:
    diagnostics = CollectingDiagnostics()
    miner = DirectiveMiner(diagnostics, **kwargs)  # type: ignore[arg-type]
    document = Document(children=(Frontmatter("title: x"),) + nodes)
    return miner.mine(document, FILE), diagnostics


def test_extract_command_strips_prompts_by_default() -> None:
    assert extract_command("$ ls\n$ pwd", raw=False) == "ls\npwd"


def test_extract_command_raw_mode_is_verbatim() -> None:
    assert extract_command("$ ls\n$ pwd", raw=True) == "$ ls\n$ pwd"


def test_extract_command_leaves_unprompted_lines_alone() -> None:
    assert extract_command("echo hi\n  $ indented\n$notprompt", raw=False) == "echo hi\n  $ indented\n$notprompt"


def test_heredoc_bodies_are_still_stripped_by_default() -> None:
    content = "$ cat <<EOF > out.txt\n$ not a prompt\nEOF\n$ cat out.txt"
    assert extract_command(content, raw=False) == "cat <<EOF > out.txt\nnot a prompt\nEOF\ncat out.txt"


def test_heredoc_verbatim_keeps_prompts_inside_heredoc_body() -> None:
    content = "$ cat <<EOF > out.txt\n$ not a prompt\nEOF\n$ cat out.txt"
    command = extract_command(content, raw=False, heredoc_verbatim=True)
    assert command == "cat <<EOF > out.txt\n$ not a prompt\nEOF\ncat out.txt"


def test_extract_content_concatenates_supported_children_in_order() -> None:
    directive = _directive(
        Code("$ one"),
        OtherBlock("bullet_list", children=(Text("ignored"),)),
        Paragraph(children=(Text("two"), Text("three"))),
        Text("four"),
    )
    assert extract_content(directive) == "$ onetwothreefour"


def test_is_test_directive_requires_name_and_selector() -> None:
    assert is_test_directive(_directive(Code("ls")))
    assert not is_test_directive(_directive(Code("ls"), name="note"))
    assert not is_test_directive(
        ContainerDirective(name="code", attributes={"showCopyAction": "false"})
    )
    assert not is_test_directive(ContainerDirective(name="code"))
    assert not is_test_directive(Paragraph(children=(Text("ls"),)))


def test_mine_applies_defaults() -> None:
    scripts, diagnostics = _mine(_directive(Code("$ ls"), line=7))

    assert scripts == (
        Script(
            command="ls",
            wait=0,
            timeout=120,
            hook=None,
            hook_timeout=0,
            expect_error=False,
            line_number=7,
        ),
    )
    assert diagnostics.items == []


def test_mine_resolves_every_recognised_attribute() -> None:
    directive = _directive(
        Code("$ make deploy"),
        wait="5",
        timeout="30",
        hook="database",
        hookTimeout="60",
        expectError="true",
        raw="true",
    )

    (script,) = _mine(directive)[0]

    assert script.command == "$ make deploy"
    assert script.wait == 5
    assert script.timeout == 30
    assert script.hook == "database"
    assert script.hook_timeout == 60
    assert script.expect_error is True


def test_mine_skips_directives_marked_test_false() -> None:
    scripts, _ = _mine(
        _directive(Code("$ skipped"), test="false", line=3),
        _directive(Code("$ kept"), line=9),
    )

    assert [script.command for script in scripts] == ["kept"]
    assert scripts[0].line_number == 9


def test_mine_reports_unknown_attributes_and_continues() -> None:
    scripts, diagnostics = _mine(_directive(Code("$ ls"), language="bash"))

    assert len(scripts) == 1
    assert len(diagnostics.items) == 1
    assert "Unrecognized param language" in diagnostics.items[0].message
    assert diagnostics.items[0].file == FILE


def test_mine_ignores_nested_and_unqualified_directives() -> None:
    nested = _directive(Code("$ inner"))
    scripts, _ = _mine(
        _directive(nested, name="tabs"),
        ContainerDirective(name="code", attributes={}, children=(Code("$ no selector"),)),
    )
    assert scripts == ()


def test_mine_skips_empty_content_and_empty_commands() -> None:
    scripts, _ = _mine(
        _directive(),
        _directive(Code("$ ")),
    )
    assert scripts == ()


def test_mine_rejects_non_integer_timeouts() -> None:
    with pytest.raises(InvalidAttributeError) as excinfo:
        _mine(_directive(Code("$ ls"), timeout="soon", line=12))

    error = excinfo.value
    assert error.key == "timeout"
    assert error.line == 12
    assert error.file == FILE
    assert "page.md:12" in str(error)


def test_miner_heredoc_option_is_forwarded() -> None:
    directive = _directive(Code("$ cat <<EOF\n$ keep\nEOF"))

    default_scripts, _ = _mine(directive)
    verbatim_scripts, _ = _mine(directive, heredoc_verbatim=True)

    assert default_scripts[0].command == "cat <<EOF\nkeep\nEOF"
    assert verbatim_scripts[0].command == "cat <<EOF\n$ keep\nEOF"


@pytest.mark.parametrize("key", ["wait", "timeout", "hookTimeout"])
@pytest.mark.parametrize("value", ["soon", "1_000", "١٢", "1.5", ""])
def test_mine_rejects_non_integer_attributes(key: str, value: str) -> None:
    with pytest.raises(InvalidAttributeError) as excinfo:
        _mine(_directive(Code("$ ls"), line=6, **{key: value}))

    assert excinfo.value.key == key
    assert excinfo.value.value == value
    assert excinfo.value.line == 6


def test_mine_accepts_signed_and_padded_integers() -> None:
    (script,) = _mine(_directive(Code("$ ls"), wait=" 3 ", timeout="+45", hookTimeout="-1"))[0]

    assert (script.wait, script.timeout, script.hook_timeout) == (3, 45, -1)


def test_excluded_directive_skips_integer_validation_but_reports_unknown_keys() -> None:
    scripts, diagnostics = _mine(
        _directive(Code("$ sleep"), test="false", wait="soon", colour="red"),
        _directive(Code("$ kept")),
    )

    assert [script.command for script in scripts] == ["kept"]
    (diagnostic,) = diagnostics.items
    assert "Unrecognized param colour" in diagnostic.message


def test_invalid_attribute_reports_markdown_line() -> None:
    source = (
        "---\n"
        "title: Deploy\n"
        "---\n"
        "\n"
        "Intro paragraph.\n"
        "\n"
        ':::code{showCopyAction="true" hookTimeout="later"}\n'
        "```bash\n"
        "$ make deploy\n"
        "```\n"
        ":::\n"
    )
    document = MarkdownParser().parse(source, source=FILE)

    with pytest.raises(InvalidAttributeError) as excinfo:
        DirectiveMiner(CollectingDiagnostics()).mine(document)

    assert excinfo.value.key == "hookTimeout"
    assert excinfo.value.line == 7
    assert excinfo.value.file == FILE
    assert "page.md:7" in str(excinfo.value)
