#!/usr/bin/env python3
"""
Command-line shell for the tape VM.

    bfvm program.bf
    bfvm --cell-width 16 --max-cells 30000 program.bf < input.txt
    bfvm -e '+++.' | xxd

Exit codes: 0 success, 1 runtime error, 2 usage error, 3 load error,
4 step limit reached.
"""

import argparse
import logging
import sys
from typing import List, Optional

from bfvm import __version__
from bfvm.config import VMConfig, config_from_env, load_config
from bfvm.errors import ConfigError, LoadError
from bfvm.interpreter import Interpreter, RunResult
from bfvm.io import StreamSink, StreamSource
from bfvm.program import Program, load
from bfvm.runner import read_source

EXIT_OK = 0
EXIT_RUNTIME = 1
EXIT_USAGE = 2
EXIT_LOAD = 3
EXIT_CANCELLED = 4

VERBOSITY = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

logger = logging.getLogger("bfvm")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="bfvm",
        description="Run programs for the eight-instruction tape language",
    )
    ap.add_argument("program", nargs="?", help="Path to the program source file")
    ap.add_argument("-e", "--eval", dest="code", help="Run this source text instead of a file")
    ap.add_argument("-w", "--cell-width", choices=["8", "16", "32", "64"], default=None,
                    help="Bits per tape cell (default 8)")
    ap.add_argument("--max-cells", type=int, default=None,
                    help="Cap the tape at this many cells; walking past it is a runtime error")
    ap.add_argument("--initial-cells", type=int, default=None,
                    help="Number of cells to preallocate")
    ap.add_argument("--step-limit", type=int, default=None,
                    help="Stop after this many instructions (exit code 4)")
    ap.add_argument("--eof", choices=["unchanged", "zero"], default=None,
                    help="What ',' does at end of input (default: leave cell unchanged)")
    ap.add_argument("--config", help="YAML file with VM settings")
    ap.add_argument("-v", "--verbosity", choices=list(VERBOSITY), default="warn",
                    help="Log level written to stderr")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def resolve_config(args: argparse.Namespace) -> VMConfig:
    """Config file, then BFVM_* environment, then command-line flags."""
    base = load_config(args.config) if args.config else VMConfig()
    config = config_from_env(base)
    return config.with_overrides(
        cell_width=args.cell_width,
        max_cells=args.max_cells,
        initial_cells=args.initial_cells,
        max_steps=args.step_limit,
        eof=args.eof,
    )


def report(result: RunResult, program: Program) -> int:
    """Print the outcome to stderr and pick the exit code."""
    if result.ok:
        return EXIT_OK
    if result.cancelled:
        print(f"error: {result.describe()}", file=sys.stderr)
        return EXIT_CANCELLED
    fault = result.error
    where = ""
    if fault.position is not None and fault.position < len(program):
        line, col = program.location(fault.position)
        where = f" (line {line}, col {col})"
    print(f"error: {fault.kind}: {fault}{where}", file=sys.stderr)
    return EXIT_RUNTIME


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=VERBOSITY[args.verbosity],
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if (args.program is None) == (args.code is None):
        ap.print_usage(sys.stderr)
        print("error: give exactly one of a program file or -e CODE", file=sys.stderr)
        return EXIT_USAGE

    try:
        config = resolve_config(args)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE
    logger.debug("Resolved config: %s", config.to_dict())

    if args.code is not None:
        code = args.code
    else:
        try:
            code = read_source(args.program)
        except OSError as e:
            print(f"error: cannot read {args.program}: {e.strerror or e}", file=sys.stderr)
            return EXIT_USAGE

    try:
        program = load(code)
    except LoadError as e:
        print(f"error: {e.kind}: {e}", file=sys.stderr)
        return EXIT_LOAD

    source = StreamSource(sys.stdin.buffer)
    sink = StreamSink(sys.stdout.buffer)
    result = Interpreter(config).run(program, source, sink)
    return report(result, program)


if __name__ == "__main__":
    sys.exit(main())
