"""CLI entrypoints for compmeta commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import CompmetaError
from .logging import configure_logging
from .output import write_output
from .pipeline import ExtractionPipeline, resolve_project_config


def _add_verbosity_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Only log warnings and errors.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="compmeta",
        description="Extract React component metadata for interactive previews.",
    )
    _add_verbosity_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser(
        "extract",
        help="Extract component metadata and generate the registry.",
    )
    _add_verbosity_options(extract_parser, suppress_default=True)
    extract_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    extract_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file to use instead of <path>/.compmeta.yml.",
    )
    extract_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write detailed logs to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for compmeta commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file)

    if args.command == "extract":
        project_root = Path(args.path).expanduser().resolve()
        if not project_root.is_dir():
            parser.exit(1, f"Project root not found: {project_root}\n")
        try:
            config = resolve_project_config(project_root, args.config)
            result = ExtractionPipeline().run(project_root, config)
            written = write_output(project_root, config, result.meta)
        except CompmetaError as exc:
            parser.exit(1, f"compmeta extract failed: {exc}\n")

        print(f"Output -> {_relativize(written['meta'].parent)}/")
        print(f"  {written['meta'].name} ({len(result.meta.components)} components)")
        print(f"  {written['registry'].name}")
        for component in result.meta.components:
            names = ", ".join(component.props)
            suffix = f": {names}" if names else ""
            print(f"  {component.display_name} ({len(component.props)} props{suffix})")
        if result.warnings:
            print(f"{len(result.warnings)} warnings (run with --verbose for details)")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
