"""CLI entrypoints for mdsh commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .diagnostics import CollectingDiagnostics, LoggingDiagnostics
from .errors import GatherError
from .gatherer import Gatherer
from .logging import configure_logging
from .plan import count_scripts, plan_payload, render_plan


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "dest": "verbose",
        "help": "Enable debug output while gathering.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        "--debug",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdsh",
        description="Build test plans from Markdown files with :::code{} blocks.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan_parser = subparsers.add_parser(
        "plan",
        help="Show test plan without executing.",
    )
    _add_verbose_option(plan_parser, suppress_default=True)
    plan_parser.add_argument(
        "directory",
        help="Directory containing markdown files.",
    )
    plan_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the plan as JSON instead of an outline.",
    )
    plan_parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip files without frontmatter (with a warning) instead of failing.",
    )
    plan_parser.add_argument(
        "--heredoc-verbatim",
        action="store_true",
        help="Keep '$ ' prefixes inside <<EOF heredoc bodies.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve plans over HTTP (requires the 'service' extra).",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for mdsh commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(getattr(args, "json", False)))

    if args.command == "plan":
        _run_plan(parser, args)
    elif args.command == "serve":
        from .service import run_service

        try:
            run_service(host=args.host, port=args.port)
        except RuntimeError as exc:
            parser.exit(1, f"{exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_plan(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    directory = Path(args.directory)
    try:
        config = load_config(directory)
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")
    if args.lenient:
        config.frontmatter.strict = False
    if args.heredoc_verbatim:
        config.directives.heredoc_verbatim = True

    diagnostics = CollectingDiagnostics(forward=LoggingDiagnostics())
    gatherer = Gatherer.from_config(config, diagnostics=diagnostics)
    try:
        plan = gatherer.gather(directory)
    except FileNotFoundError as exc:
        parser.exit(1, f"{exc}\n")
    except (GatherError, NotADirectoryError) as exc:
        parser.exit(1, f"mdsh plan failed: {exc}\nRun with --verbose for more details.\n")

    if args.json:
        print(json.dumps(plan_payload(plan, diagnostics.messages()), indent=2))
        return

    if plan is None:
        print(f"No tests found in {_relativize(directory)}")
        return

    print(render_plan(plan, root=directory))
    print()
    print(f"{count_scripts(plan)} script(s) gathered")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
