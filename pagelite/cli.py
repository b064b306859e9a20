"""CLI entrypoints for pagelite commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .errors import BuildError
from .logging import configure_logging
from .orchestrator import Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagelite",
        description="Build static HTML pages with selectively hydrated islands.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write detailed logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Render every page and bundle the islands they reference.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_path_argument(build_parser)

    bundle_parser = subparsers.add_parser(
        "bundle",
        help="Bundle every component for client hydration without rendering pages.",
    )
    _add_verbose_option(bundle_parser, suppress_default=True)
    _add_path_argument(bundle_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for pagelite commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    orchestrator = Orchestrator()

    if args.command == "build":
        try:
            report = orchestrator.run_build(args.path)
        except BuildError as exc:
            parser.exit(1, f"pagelite build failed: {exc}\nRun with --verbose for more details.\n")
        output_dir = _relativize(report.output_dir) if report.output_dir else "output directory"
        print(f"Built {len(report.pages)} pages into {output_dir}")
        for warning in report.warnings:
            print(f"warning: {warning}")
    elif args.command == "bundle":
        try:
            result = orchestrator.run_components_only(args.path)
        except BuildError as exc:
            parser.exit(1, f"pagelite bundle failed: {exc}\nRun with --verbose for more details.\n")
        if result.empty:
            print(f"Wrote empty island renderer to {_relativize(result.output_path)}")
        else:
            print(f"Bundled {len(result.bundled)} components into {_relativize(result.output_path)}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
