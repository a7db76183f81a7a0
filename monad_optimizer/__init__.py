"""
monad_optimizer — Abstract-interpretation optimizer for MONAD programs
======================================================================

MONAD is a four-register arithmetic language (``inp``, ``add``, ``mul``,
``div``, ``mod``, ``eql``).  This package shrinks MONAD programs without
changing the value they leave in ``z``.

Core modules
------------
value_ids
    Value identities and the per-run allocator that mints them.
values
    Abstract value domain: Exact, Input and Unknown values with ranges.
evaluator
    Abstract transfer function and the no-op table.
program_state
    Forward pass recording register snapshots after every instruction.
liveness
    Backward pass computing which identities reach the output.
optimizer
    The two-pass pipeline and the final instruction filter.

Tooling
-------
parser, interpreter, reporter, main
    Program text, concrete execution, register traces and the CLI.

Quick start
-----------
>>> from monad_optimizer import parse_program, optimize, format_program
>>> program = parse_program("inp w\\nadd x 0\\nadd z w\\n")
>>> print(format_program(optimize(program)), end="")
inp w
add z w
"""

from __future__ import annotations

import logging
from typing import List

__version__ = "0.1.0"
__license__ = "MIT"

_log = logging.getLogger(__name__)
_log.addHandler(logging.NullHandler())

from monad_optimizer.config import OptimizerConfig, ReportConfig  # noqa: E402
from monad_optimizer.errors import (  # noqa: E402
    IdentitySpaceExhausted,
    InternalInvariantError,
    MalformedProgramError,
    MonadError,
    ProgramParseError,
)
from monad_optimizer.evaluator import evaluate, exact_result, is_no_op  # noqa: E402
from monad_optimizer.interpreter import execute  # noqa: E402
from monad_optimizer.liveness import LivenessAnalysis, live_identities  # noqa: E402
from monad_optimizer.optimizer import (  # noqa: E402
    OptimizationResult,
    analyze,
    optimize,
)
from monad_optimizer.parser import parse_file, parse_program  # noqa: E402
from monad_optimizer.program import (  # noqa: E402
    Instruction,
    InstructionKind,
    Register,
    format_program,
)
from monad_optimizer.program_state import ProgramStateBuilder, ProgramStates  # noqa: E402
from monad_optimizer.value_ids import Vid, VidMaker  # noqa: E402
from monad_optimizer.values import Exact, Input, IntRange, Unknown  # noqa: E402

__all__: List[str] = [
    "__version__",
    "OptimizerConfig",
    "ReportConfig",
    "MonadError",
    "ProgramParseError",
    "MalformedProgramError",
    "InternalInvariantError",
    "IdentitySpaceExhausted",
    "evaluate",
    "exact_result",
    "is_no_op",
    "execute",
    "LivenessAnalysis",
    "live_identities",
    "OptimizationResult",
    "analyze",
    "optimize",
    "parse_file",
    "parse_program",
    "Instruction",
    "InstructionKind",
    "Register",
    "format_program",
    "ProgramStateBuilder",
    "ProgramStates",
    "Vid",
    "VidMaker",
    "Exact",
    "Input",
    "IntRange",
    "Unknown",
]
