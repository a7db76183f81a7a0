#!/usr/bin/env python3
"""monad_optimizer/main.py — CLI entry-point for the MONAD optimizer.

Usage examples
--------------
    # Compare original and optimized program length
    python -m monad_optimizer analyze program.txt

    # Show the abstract registers after every instruction
    python -m monad_optimizer registers program.txt --hide-vids

    # Write the optimized program
    python -m monad_optimizer optimize program.txt -o optimized.txt

    # Run both programs on concrete inputs and compare z
    python -m monad_optimizer run program.txt --inputs 13579246899999

Exit codes
----------
    0   Success.
    1   The program is malformed (syntax error or language violation).
    2   Infrastructure failure (missing file, bad arguments, etc.).
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from monad_optimizer import __version__
from monad_optimizer.config import OptimizerConfig, ReportConfig
from monad_optimizer.errors import MonadError
from monad_optimizer.interpreter import execute, parse_inputs
from monad_optimizer.optimizer import OptimizationResult, analyze
from monad_optimizer.parser import parse_file
from monad_optimizer.program import Instruction, format_program
from monad_optimizer.reporter import (
    render_execution,
    render_register_trace,
    render_summary,
)

_log = logging.getLogger("monad_optimizer")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_MALFORMED: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``monad_optimizer`` logger.

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

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("monad_optimizer")
    root.setLevel(level)
    # Repeated main() calls in one process replace the previous handler.
    for existing in list(root.handlers):
        if isinstance(existing, logging.StreamHandler):
            root.removeHandler(existing)
    root.addHandler(handler)


def _resolve_path(raw: str, label: str = "file") -> Path:
    """Resolve *raw* to an absolute ``Path``, raising on missing files."""
    p = Path(raw).expanduser().resolve()
    if not p.exists():
        _log.error("%s not found: %s", label, p)
        raise SystemExit(EXIT_INFRA)
    return p


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


def _optimizer_config(args: argparse.Namespace) -> OptimizerConfig:
    return OptimizerConfig(
        eliminate_dead_code=not args.no_dead_code,
        max_passes=args.max_passes,
    )


def _report_config(args: argparse.Namespace) -> ReportConfig:
    return ReportConfig(
        color=not args.no_color and sys.stdout.isatty(),
        show_vids=not getattr(args, "hide_vids", False),
    )


def _load_and_analyze(args: argparse.Namespace) -> OptimizationResult:
    path = _resolve_path(args.program, "program")
    program: List[Instruction] = parse_file(path)
    _log.info("loaded %d instructions from %s", len(program), path)
    return analyze(program, _optimizer_config(args))


# ===========================================================================
# Sub-commands
# ===========================================================================

def _cmd_analyze(args: argparse.Namespace) -> int:
    result = _load_and_analyze(args)
    sys.stdout.write(render_summary(result, _report_config(args)))
    return EXIT_OK


def _cmd_registers(args: argparse.Namespace) -> int:
    result = _load_and_analyze(args)
    sys.stdout.write(render_register_trace(result, _report_config(args)))
    return EXIT_OK


def _cmd_optimize(args: argparse.Namespace) -> int:
    result = _load_and_analyze(args)
    stream = _open_output(args.output)
    try:
        stream.write(format_program(result.optimized))
    finally:
        if stream is not sys.stdout:
            stream.close()
    _log.info("wrote %d instructions", len(result.optimized))
    return EXIT_OK


def _cmd_run(args: argparse.Namespace) -> int:
    try:
        inputs = parse_inputs(args.inputs)
    except ValueError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA
    result = _load_and_analyze(args)
    original = execute(result.original, inputs)
    optimized = execute(result.optimized, inputs)
    sys.stdout.write(render_execution(original, optimized, _report_config(args)))
    return EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the full CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="monad-opt",
        description="Abstract-interpretation optimizer for MONAD programs.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              monad-opt analyze   program.txt
              monad-opt registers program.txt --hide-vids
              monad-opt optimize  program.txt -o optimized.txt
              monad-opt run       program.txt --inputs 13579246899999
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    def _add_common_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("program", metavar="FILE", help="MONAD program text.")
        g = p.add_argument_group("optimizer tuning")
        g.add_argument(
            "--no-dead-code",
            action="store_true",
            help="Only drop no-op instructions; skip liveness-based removal.",
        )
        g.add_argument(
            "--max-passes",
            type=int,
            default=OptimizerConfig.max_passes,
            metavar="N",
            help="Upper bound on optimization passes (default: %(default)s).",
        )
        p.add_argument(
            "--no-color",
            action="store_true",
            help="Disable coloured output.",
        )

    p_analyze = subparsers.add_parser("analyze", help="Report how much shorter the program gets.")
    _add_common_args(p_analyze)
    p_analyze.set_defaults(func=_cmd_analyze)

    p_registers = subparsers.add_parser("registers", help="Trace abstract register values.")
    _add_common_args(p_registers)
    p_registers.add_argument(
        "--hide-vids",
        action="store_true",
        help="Omit value identities from the register table.",
    )
    p_registers.set_defaults(func=_cmd_registers)

    p_optimize = subparsers.add_parser("optimize", help="Print the optimized program.")
    _add_common_args(p_optimize)
    p_optimize.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Output file ("-" or omit for stdout).',
    )
    p_optimize.set_defaults(func=_cmd_optimize)

    p_run = subparsers.add_parser("run", help="Execute original and optimized programs.")
    _add_common_args(p_run)
    p_run.add_argument(
        "--inputs",
        required=True,
        metavar="DIGITS",
        help="Input digits consumed by inp, e.g. 13579246899999.",
    )
    p_run.set_defaults(func=_cmd_run)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the MONAD optimizer CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except MonadError as exc:
        _log.error("%s", exc.format())
        return EXIT_MALFORMED
    except OSError as exc:
        _log.error("I/O error: %s", exc)
        return EXIT_INFRA
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())
