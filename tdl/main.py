#!/usr/bin/env python3
"""tdl/main.py: CLI entry-point for the value-semantics checker.

Usage examples
--------------
    # Check every record in one or more declaration files
    python -m tdl check orders.tdl billing.tdl

    # Machine-readable output, written to a file
    python -m tdl check orders.tdl --format json --output findings.jsonl

    # Project configuration plus ad-hoc overrides
    python -m tdl check orders.tdl --config valuesem.json --ignore LegacyDto

    # Show how each member of one type is classified
    python -m tdl classify orders.tdl --type Order

    # List declared types with their resolved kind
    python -m tdl symbols orders.tdl

Exit codes
----------
    0   Success (no diagnostics).
    1   One or more diagnostics were emitted.
    2   Infrastructure failure (missing file, syntax error, bad config...).

The module doubles as ``python -m tdl`` via the companion
``tdl/__main__.py`` which simply calls :func:`main`.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from tdl import parse_file
from tdl.errors import TdlError
from valuesem import __version__
from valuesem.checker import CheckResults, RecordChecker
from valuesem.config import AnalysisConfig, ConfigError, GUARD_POLICIES, load_config
from valuesem.kinds import (
    SymbolResolver,
    declares_record_equals,
    has_own_identity_equals_override,
    has_own_value_equals,
    resolve_kind,
)
from valuesem.symbols import AmbiguousName, TypeSymbol

_log = logging.getLogger("tdl")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_FINDINGS: int = 1
EXIT_INFRA: int = 2

_LOGGERS = ("tdl", "valuesem")


# ===========================================================================
# Utility helpers
# ===========================================================================

class _CliHandler(logging.StreamHandler):
    """Marks the handler installed by the CLI so reruns replace it."""


def _configure_logging(verbosity: int) -> None:
    """Set up the ``tdl`` and ``valuesem`` loggers.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = _CliHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    for name in _LOGGERS:
        logger = logging.getLogger(name)
        for old in [h for h in logger.handlers if isinstance(h, _CliHandler)]:
            logger.removeHandler(old)
        logger.setLevel(level)
        logger.addHandler(handler)


def _open_output(dest: Optional[str]) -> TextIO:
    """Return a writable text stream.

    *dest* ``None`` or ``"-"`` → ``sys.stdout``; otherwise open the path
    for writing (creating parent directories as needed).
    """
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


def _load_config(args: argparse.Namespace) -> AnalysisConfig:
    config = load_config(args.config) if args.config else AnalysisConfig()
    config = config.merged(
        guard_policy=getattr(args, "guard", None),
        suppress=frozenset(getattr(args, "suppress", None) or ()),
        ignore_types=frozenset(getattr(args, "ignore", None) or ()),
        suppress_types=frozenset(getattr(args, "suppress_type", None) or ()),
    )
    problems = config.validate()
    if problems:
        raise ConfigError("; ".join(problems))
    return config


def _emit_results(results: CheckResults, fmt: str, stream: TextIO) -> None:
    if fmt == "json":
        text = results.to_json_lines()
    elif fmt == "gcc":
        text = results.to_gcc_format()
    else:
        text = results.to_gcc_format()
        text = (text + "\n\n" if text else "") + results.summary()
    if text:
        stream.write(text + "\n")


def _find_type(table, name: str, source: str) -> TypeSymbol:
    try:
        symbol = table.lookup(name)
    except AmbiguousName as exc:
        raise TdlError(str(exc), source) from None
    if symbol is None:
        raise TdlError(f"no type named '{name}'", source)
    return symbol


# ===========================================================================
# Sub-command implementations
# ===========================================================================

def cmd_check(args: argparse.Namespace) -> int:
    """Run the record checker over every input file."""
    config = _load_config(args)
    checker = RecordChecker(config)

    combined = CheckResults()
    for source in args.files:
        table = parse_file(source)
        results = checker.run(table)
        combined.diagnostics.extend(results.diagnostics)
        combined.checked_records.extend(results.checked_records)
        combined.skipped_records.extend(results.skipped_records)
        combined.members_checked += results.members_checked
        combined.elapsed_ms += results.elapsed_ms
        for record, diags in results.diagnostics_by_record.items():
            combined.diagnostics_by_record[record].extend(diags)

    stream = _open_output(args.output)
    try:
        _emit_results(combined, args.format, stream)
    finally:
        if stream is not sys.stdout:
            stream.close()

    _log.info("%d diagnostic(s) from %d file(s)",
              combined.total_count, len(args.files))
    return EXIT_FINDINGS if combined.diagnostics else EXIT_OK


def cmd_classify(args: argparse.Namespace) -> int:
    """Print the verdict for every member of one type."""
    config = _load_config(args)
    table = parse_file(args.file)
    symbol = _find_type(table, args.type, args.file)
    checker = RecordChecker(config)

    stream = _open_output(args.output)
    try:
        stream.write(f"{symbol.full_name} "
                     f"[{resolve_kind(symbol, config).name}]\n")
        for result in checker.check_record(symbol):
            stream.write(f"  {result.type.display_name} {result.name}: "
                         f"{result.verdict}\n")
    finally:
        if stream is not sys.stdout:
            stream.close()
    return EXIT_OK


def cmd_symbols(args: argparse.Namespace) -> int:
    """List declared types with kind and equality capabilities."""
    config = _load_config(args)
    table = parse_file(args.file)
    resolver = SymbolResolver(config)

    stream = _open_output(args.output)
    try:
        for symbol in table.user_types():
            desc = resolver.describe(symbol)
            flags: List[str] = []
            if has_own_value_equals(symbol):
                flags.append("equals(T)")
            if has_own_identity_equals_override(symbol):
                flags.append("override equals(object)")
            if symbol.is_record and declares_record_equals(symbol):
                flags.append("record equals replaced")
            line = f"{symbol.location}: {desc.display_name} {desc.kind.name}"
            if flags:
                line += " (" + ", ".join(flags) + ")"
            stream.write(line + "\n")
    finally:
        if stream is not sys.stdout:
            stream.close()
    return EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tdl",
        description="Check that record members have value semantics.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v INFO, -vv DEBUG).",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    subparsers = parser.add_subparsers(title="commands")

    def _add_common_args(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "-c", "--config",
            default=None,
            metavar="PATH",
            help="JSON configuration file.",
        )
        p.add_argument(
            "-o", "--output",
            default=None,
            metavar="FILE",
            help='Output file ("-" or omit for stdout).',
        )

    # --- check -------------------------------------------------------------
    p_check = subparsers.add_parser(
        "check",
        help="Check every record in the given files.",
        description=(
            "Report record members whose type does not compare by "
            "content (diagnostic JSV01)."
        ),
    )
    p_check.add_argument("files", nargs="+", metavar="FILE",
                         help="TDL declaration file(s).")
    p_check.add_argument(
        "-f", "--format",
        choices=["gcc", "json", "summary"],
        default="gcc",
        help="Output format (default: gcc).",
    )
    p_check.add_argument(
        "--suppress",
        action="append",
        default=[],
        metavar="ID",
        help="Suppress a diagnostic id (repeatable).",
    )
    p_check.add_argument(
        "--suppress-type",
        action="append",
        default=[],
        metavar="ID:RECORD",
        help="Suppress a diagnostic id for matching records (repeatable).",
    )
    p_check.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="TYPE",
        help="Do not check this record (repeatable).",
    )
    p_check.add_argument(
        "--guard",
        choices=list(GUARD_POLICIES),
        default=None,
        help="Cycle guard policy (default: from config, else 'call').",
    )
    _add_common_args(p_check)
    p_check.set_defaults(func=cmd_check)

    # --- classify ----------------------------------------------------------
    p_classify = subparsers.add_parser(
        "classify",
        help="Show the verdict for each member of one type.",
    )
    p_classify.add_argument("file", metavar="FILE")
    p_classify.add_argument("-t", "--type", required=True, metavar="NAME",
                            help="Type to inspect (short or full name).")
    p_classify.add_argument(
        "--guard",
        choices=list(GUARD_POLICIES),
        default=None,
        help="Cycle guard policy.",
    )
    _add_common_args(p_classify)
    p_classify.set_defaults(func=cmd_classify)

    # --- symbols -----------------------------------------------------------
    p_symbols = subparsers.add_parser(
        "symbols",
        help="List declared types with their resolved kind.",
    )
    p_symbols.add_argument("file", metavar="FILE")
    _add_common_args(p_symbols)
    p_symbols.set_defaults(func=cmd_symbols)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return its exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except (TdlError, ConfigError) as exc:
        print(f"tdl: {exc}", file=sys.stderr)
        return EXIT_INFRA
    except OSError as exc:
        print(f"tdl: {exc}", file=sys.stderr)
        return EXIT_INFRA
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
