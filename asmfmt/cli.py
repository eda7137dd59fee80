"""
asmfmt – command-line interface
===============================

Usage
-----
::

    python -m asmfmt.cli [OPTIONS] [PATH ...]

Without a PATH the source is read from standard input and the formatted
result is written to standard output.  Directories are searched recursively
for ``*.s`` files.

Options
-------
--write, -w     Rewrite files in place when their formatting differs.
--list, -l      List files whose formatting differs from asmfmt's.
--diff, -d      Print a unified diff instead of the formatted source.
--verbose, -v   Enable DEBUG logging.

Exit status is 0 on success, 1 when a file could not be formatted or, with
``--list`` / ``--diff`` (and no ``--write``), when a file is not formatted,
and 2 on a usage error.

Examples
--------
::

    python -m asmfmt.cli -l ./crypto
    python -m asmfmt.cli -w sha256block_amd64.s
    python -m asmfmt.cli -d < add_amd64.s
"""
from __future__ import annotations

import argparse
import difflib
import logging
import sys
from pathlib import Path
from typing import Iterator, List

from .errors import AsmFormatError
from .pipeline.format_task import FormatTask

logger = logging.getLogger(__name__)

_SOURCE_SUFFIX = ".s"
_STDIN_NAME = "<standard input>"


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="asmfmt",
        description="asmfmt – format Go / Plan 9 assembly source",
    )
    p.add_argument(
        "paths",
        nargs="*",
        metavar="PATH",
        help="Files or directories to format (default: standard input)",
    )
    p.add_argument(
        "--write", "-w",
        action="store_true",
        help="Write the result back to the source file instead of stdout",
    )
    p.add_argument(
        "--list", "-l",
        action="store_true",
        help="List files whose formatting differs from asmfmt's",
    )
    p.add_argument(
        "--diff", "-d",
        action="store_true",
        help="Display diffs instead of rewriting files",
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return p


def _iter_sources(paths: List[str]) -> Iterator[Path]:
    """Expand directories into the ``*.s`` files they contain."""
    for name in paths:
        path = Path(name)
        if path.is_dir():
            yield from sorted(
                p for p in path.rglob(f"*{_SOURCE_SUFFIX}") if p.is_file()
            )
        else:
            yield path


def _unified_diff(src: str, dst: str, name: str) -> str:
    return "".join(
        difflib.unified_diff(
            src.splitlines(keepends=True),
            dst.splitlines(keepends=True),
            fromfile=f"{name}.orig",
            tofile=name,
        )
    )


def _process(
    task: FormatTask,
    args: argparse.Namespace,
    name: str,
    src: bytes,
    path: Path | None = None,
) -> bool:
    """Format one source and act on it.  Returns True if it changed."""
    dst = task.format_bytes(src)
    changed = dst != src

    if changed and args.list:
        print(name)
    if changed and args.write and path is not None:
        path.write_bytes(dst)
        logger.info("Rewrote %s", path)
    if args.diff:
        if changed:
            sys.stdout.write(
                _unified_diff(
                    src.decode("utf-8", errors="replace"),
                    dst.decode("utf-8", errors="replace"),
                    name,
                )
            )
    elif not args.list and not args.write:
        sys.stdout.buffer.write(dst)
        sys.stdout.flush()
    return changed


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    task = FormatTask()
    checking = (args.list or args.diff) and not args.write

    # ------------------------------------------------------------------
    # Standard input
    # ------------------------------------------------------------------
    if not args.paths:
        if args.write:
            print("error: cannot use --write with standard input", file=sys.stderr)
            return 2
        try:
            changed = _process(task, args, _STDIN_NAME, sys.stdin.buffer.read())
        except AsmFormatError as exc:
            print(f"{_STDIN_NAME}: {exc}", file=sys.stderr)
            return 1
        return 1 if changed and checking else 0

    # ------------------------------------------------------------------
    # Files and directories
    # ------------------------------------------------------------------
    status = 0
    for path in _iter_sources(args.paths):
        try:
            changed = _process(task, args, str(path), path.read_bytes(), path)
        except (AsmFormatError, OSError) as exc:
            print(f"{path}: {exc}", file=sys.stderr)
            status = 1
            continue
        if changed and checking:
            status = 1
    return status


if __name__ == "__main__":
    sys.exit(main())
