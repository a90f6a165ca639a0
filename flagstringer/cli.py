"""Command line entry point generating ``<Type>_string`` functions."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .codegen import Generator, GeneratorOptions
from .discover import collect_entries
from .exceptions import StringerError
from .io_utils import write_text
from .logging_config import configure_logging
from .manifest import load_manifest
from .runs import FlagEntry

LOGGER = logging.getLogger(__name__)

USAGE_EXAMPLES = """\
examples:
  flagstringer --type Pill pills.py
  flagstringer --type Days --bitflag days.py
  flagstringer --type Perm,Mode --bitflag --table --nocache pkg/
  flagstringer --type Gap --bitflag --manifest flags.yaml --output gap_string.py
"""


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flagstringer",
        description="Generate string functions for enumerated and bitflag constants.",
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("paths", nargs="*", help="Python files or directories to scan (default: .)")
    parser.add_argument("--type", dest="types", help="comma-separated list of type names; must be set")
    parser.add_argument("-o", "--output", help="output file name; default <dir>/<type>_string.py")
    parser.add_argument("--trimprefix", default="", help="trim the prefix from the generated constant names")
    parser.add_argument(
        "--linecomment",
        action="store_true",
        help="use line comment text as printed text when present",
    )
    parser.add_argument("--bitflag", action="store_true", help="handle constants as bitflags")
    parser.add_argument("--nocache", action="store_true", help="bitflag only: do not memoise rendered strings")
    parser.add_argument(
        "--table",
        action="store_true",
        help="bitflag only: emit one shared FlagStringer descriptor per type instead of specialized tables",
    )
    parser.add_argument("--manifest", help="read constants from a JSON or YAML manifest instead of sources")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--log-file", help="also write logs to this file")
    return parser


def _command_line(argv: Sequence[str]) -> str:
    return " ".join(["flagstringer", *argv])


def _default_output(paths: Sequence[Path], type_name: str) -> Path:
    directory = Path(".")
    if len(paths) == 1:
        directory = paths[0] if paths[0].is_dir() else paths[0].parent
    return directory / f"{type_name.lower()}_string.py"


def _gather(args: argparse.Namespace, type_names: Sequence[str], paths: Sequence[Path]) -> Dict[str, List[FlagEntry]]:
    if args.manifest:
        manifest = load_manifest(Path(args.manifest))
        return {name: manifest.get(name, []) for name in type_names}
    return collect_entries(
        paths,
        type_names,
        trim_prefix=args.trimprefix,
        line_comment=args.linecomment,
    )


def main(argv: Sequence[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(list(argv))

    configure_logging(args.verbose, Path(args.log_file) if args.log_file else None)

    type_names = _split_list(args.types)
    if not type_names:
        parser.print_usage(sys.stderr)
        LOGGER.error("-type must be set")
        return 2

    paths = [Path(p) for p in (args.paths or ["."])]
    try:
        found = _gather(args, type_names, paths)
    except (StringerError, OSError, SyntaxError) as exc:
        LOGGER.error("%s", exc)
        return 2

    options = GeneratorOptions(
        bitflag=args.bitflag,
        cached=not args.nocache,
        shared=args.table,
        command=_command_line(argv),
    )
    generator = Generator(options)
    failures = 0
    for type_name in type_names:
        try:
            generator.generate(type_name, found.get(type_name, []))
        except (StringerError, ValueError) as exc:
            LOGGER.error("%s: %s", type_name, exc)
            failures += 1

    if not generator.types:
        LOGGER.error("no types generated")
        return 2

    destination = Path(args.output) if args.output else _default_output(paths, type_names[0])
    write_text(destination, generator.format())
    LOGGER.info("wrote %s", destination)
    return 1 if failures else 0


__all__ = ["build_parser", "main"]


if __name__ == "__main__":  # pragma: no cover - CLI wrapper
    raise SystemExit(main())
