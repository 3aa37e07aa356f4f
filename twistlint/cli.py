"""twistlint/cli.py — command line front end.

Usage examples
--------------
    # Check a source tree with the nearest .twistrc (or the recommended rules)
    twistlint src/

    # One-off rule settings and extra globals
    twistlint app.jsx --rule no-unused-vars=off --global analytics --env browser

    # Machine-readable output, one JSON object per line
    twistlint src/ --format json

    # List the available rules
    twistlint --list-rules

Exit codes
----------
    0   No error-severity diagnostics.
    1   One or more diagnostics with severity ERROR were emitted.
    2   Infrastructure failure (bad configuration, malformed decorator
        table, unreadable file).

``python -m twistlint`` is equivalent, via ``twistlint/__main__.py``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, TextIO

from twistlint import __version__
from twistlint.checkers import CheckerRunner, CheckerRunResults, default_checker_registry
from twistlint.config import LintConfig, parse_rule_setting
from twistlint.diagnostics import DiagnosticSeverity, SuppressionManager
from twistlint.errors import ConfigError, TwistLintError

_log = logging.getLogger("twistlint")

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2

SOURCE_SUFFIXES = (".js", ".jsx")
_SKIPPED_DIRS = frozenset({"node_modules", ".git"})


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``twistlint`` logger.

    0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    root = logging.getLogger("twistlint")
    root.setLevel(level)
    if any(getattr(h, "_twistlint_cli", False) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    handler._twistlint_cli = True
    root.addHandler(handler)


def iter_source_files(paths: Sequence[str]) -> Iterator[Path]:
    """Files named on the command line, and ``*.js``/``*.jsx`` below directories.

    Raises :class:`FileNotFoundError` for a path that does not exist.
    """
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            for candidate in sorted(path.rglob("*")):
                if not candidate.is_file() or candidate.suffix not in SOURCE_SUFFIXES:
                    continue
                if _SKIPPED_DIRS.intersection(candidate.relative_to(path).parts):
                    continue
                yield candidate
        elif path.is_file():
            yield path
        else:
            raise FileNotFoundError(f"no such file or directory: {raw}")


def _parse_rule_option(text: str) -> tuple:
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise ConfigError(f"--rule expects NAME=SEVERITY, got {text!r}")
    value = value.strip()
    if value.startswith("["):
        try:
            value = json.loads(value)
        except ValueError as exc:
            raise ConfigError(f"--rule {name}: {exc}") from None
    return name.strip(), parse_rule_setting(name.strip(), value)


def _parse_global_option(text: str) -> tuple:
    name, _, flag = text.partition(":")
    return name.strip(), flag.strip().lower() in ("writable", "writeable", "true")


def _load_config(args: argparse.Namespace) -> LintConfig:
    if args.config:
        config = LintConfig.from_file(Path(args.config))
    elif args.no_config:
        config = LintConfig.recommended()
    else:
        start = Path(args.paths[0]) if args.paths else Path.cwd()
        found = LintConfig.discover(start)
        if found is not None:
            _log.info("using configuration %s", found)
            config = LintConfig.from_file(found)
        else:
            config = LintConfig.recommended()

    overrides = LintConfig(default_decorators=True)
    for text in args.rule:
        name, setting = _parse_rule_option(text)
        overrides.rules[name] = setting
    for text in args.globals:
        name, writable = _parse_global_option(text)
        overrides.globals[name] = writable
    overrides.env.extend(args.env)
    return config.merge(overrides)


def _emit(results: CheckerRunResults, fmt: str, quiet: bool, stream: TextIO) -> None:
    diagnostics = results.diagnostics
    if quiet:
        diagnostics = results.by_severity(DiagnosticSeverity.ERROR)
    for diag in diagnostics:
        if fmt == "json":
            stream.write(diag.to_json_str() + "\n")
        else:
            stream.write(diag.to_gcc_format() + "\n")
    if fmt == "summary":
        stream.write(results.summary() + "\n")


def _list_rules(stream: TextIO) -> int:
    registry = default_checker_registry()
    for name in registry.names:
        cls = registry.get_by_name(name)
        ids = ", ".join(sorted(cls.error_ids)) or "-"
        stream.write(f"{name:20s} {cls.default_severity.value:8s} {cls.description}\n")
        stream.write(f"{'':20s} ids: {ids}\n")
    return EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="twistlint",
        description="Lint JavaScript and JSX written for the Twist framework.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              twistlint src/
              twistlint app.jsx --rule no-undef='["error", {"typeof": true}]'
              twistlint src/ --format json --suppress unusedVariable
        """),
    )
    parser.add_argument("paths", nargs="*", help="Files or directories to check (default: .).")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    cfg = parser.add_argument_group("configuration")
    source = cfg.add_mutually_exclusive_group()
    source.add_argument("--config", metavar="FILE", help="Read configuration from FILE.")
    source.add_argument(
        "--no-config",
        action="store_true",
        help="Do not look for .twistrc; start from the recommended rules.",
    )
    cfg.add_argument(
        "--rule",
        action="append",
        default=[],
        metavar="NAME=SEVERITY",
        help="Set a rule's severity (off, warn, error) or [severity, options] JSON.",
    )
    cfg.add_argument(
        "--global",
        dest="globals",
        action="append",
        default=[],
        metavar="NAME[:writable]",
        help="Declare a global variable.",
    )
    cfg.add_argument(
        "--env",
        action="append",
        default=[],
        metavar="NAME",
        help="Enable an environment's globals (browser, node, ...).",
    )
    cfg.add_argument(
        "--suppress",
        action="append",
        default=[],
        metavar="ID[:PATTERN]",
        help="Suppress an error id or rule everywhere, or in files matching PATTERN.",
    )

    out = parser.add_argument_group("output")
    out.add_argument(
        "--format",
        choices=("gcc", "json", "summary"),
        default="gcc",
        help="Diagnostic format (default: gcc).",
    )
    out.add_argument("--quiet", action="store_true", help="Report errors only.")
    out.add_argument("--list-rules", action="store_true", help="List the rules and exit.")
    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the twistlint CLI and return the exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.list_rules:
        return _list_rules(sys.stdout)

    if not args.paths:
        args.paths = ["."]

    try:
        config = _load_config(args)
        suppressions = SuppressionManager()
        for text in args.suppress:
            error_id, _, pattern = text.partition(":")
            if pattern:
                suppressions.add_file_suppression(error_id, pattern)
            else:
                suppressions.add_global_suppression(error_id)
        runner = CheckerRunner(config, suppressions=suppressions)
        files: List[Path] = list(iter_source_files(args.paths))
        results = runner.run_files(files)
    except TwistLintError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA
    except (OSError, UnicodeDecodeError) as exc:
        _log.error("%s", exc)
        return EXIT_INFRA
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130

    _emit(results, args.format, args.quiet, sys.stdout)
    return EXIT_ERROR if results.error_count > 0 else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
