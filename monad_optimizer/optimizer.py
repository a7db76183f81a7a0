# monad_optimizer/optimizer.py
"""
The two-pass optimization pipeline.

    instructions
        │
        ▼
    ┌──────────────────────┐
    │ ProgramStateBuilder  │   forward: abstract values + snapshots
    └─────────┬────────────┘
              ▼
    ┌──────────────────────┐
    │ LivenessAnalysis     │   backward: live identities
    └─────────┬────────────┘
              ▼
    ┌──────────────────────┐
    │ final filter         │   keep inputs and live, non-no-op instructions
    └─────────┬────────────┘
              ▼
    optimized instructions

Liveness never keeps the producer of an operand that was already exact,
and never keeps either side of an exempt ``eql``.  The filter therefore
writes such operands out explicitly: an exact register operand becomes a
literal, and an exempt ``eql r s`` becomes ``eql r r``, which is 1 for
any ``r``.  Every other kept instruction is emitted unchanged.

Those rewrites can expose more dead code, so passes are repeated until
the output stops changing (bounded by ``OptimizerConfig.max_passes``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Sequence, Tuple

from monad_optimizer.config import OptimizerConfig
from monad_optimizer.liveness import LivenessAnalysis, operand_value, usage_exempt
from monad_optimizer.program import Instruction, InstructionKind
from monad_optimizer.program_state import ProgramStateBuilder, ProgramStates, Registers
from monad_optimizer.value_ids import Vid
from monad_optimizer.values import Exact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PassResult:
    """Everything one forward + backward pass learned about a program."""

    instructions: Tuple[Instruction, ...]
    states: ProgramStates
    live: FrozenSet[Vid]
    no_ops: Tuple[bool, ...]
    retained: Tuple[bool, ...]
    optimized: Tuple[Instruction, ...]


@dataclass
class OptimizationResult:
    """
    Outcome of ``analyze``.

    ``states``, ``live``, ``no_ops`` and ``retained`` describe the first
    pass, i.e. the original program, and are what the register trace
    shows.  ``optimized`` is the output of the last pass.
    """

    original: List[Instruction]
    optimized: List[Instruction]
    passes: List[PassResult] = field(default_factory=list)

    @property
    def first_pass(self) -> PassResult:
        return self.passes[0]

    @property
    def states(self) -> ProgramStates:
        return self.first_pass.states

    @property
    def live(self) -> FrozenSet[Vid]:
        return self.first_pass.live

    @property
    def no_ops(self) -> Tuple[bool, ...]:
        return self.first_pass.no_ops

    @property
    def retained(self) -> Tuple[bool, ...]:
        return self.first_pass.retained

    @property
    def removed(self) -> int:
        return len(self.original) - len(self.optimized)

    @property
    def improvement_percent(self) -> float:
        """How much shorter, as ``(original / optimized - 1) * 100``."""
        if not self.optimized:
            return 0.0 if not self.original else float("inf")
        return (len(self.original) / len(self.optimized) - 1.0) * 100.0


def emit_instruction(instr: Instruction, before: Registers) -> Instruction:
    """The form in which a kept instruction is written to the output."""
    if instr.is_input:
        return instr
    source = before[instr.destination.index]
    operand = operand_value(instr, before)
    if instr.kind is InstructionKind.EQUAL and usage_exempt(instr.kind, source, operand):
        if instr.operand != instr.destination:
            return instr.with_operand(instr.destination)
        return instr
    if instr.operand_register is not None and isinstance(operand, Exact):
        return instr.with_operand(operand.value)
    return instr


def run_pass(
    instructions: Sequence[Instruction],
    config: Optional[OptimizerConfig] = None,
) -> PassResult:
    """One forward pass, one backward pass and the final filter."""
    config = config or OptimizerConfig()
    instructions = tuple(instructions)

    states = ProgramStateBuilder(config).run(instructions)
    liveness = LivenessAnalysis(instructions, states)
    live = liveness.run()

    no_ops = tuple(liveness.is_no_op(i) for i in range(len(instructions)))
    if config.eliminate_dead_code:
        retained = tuple(liveness.retained(i) for i in range(len(instructions)))
    elif config.eliminate_no_ops:
        retained = tuple(not flag for flag in no_ops)
    else:
        retained = tuple(True for _ in instructions)

    optimized: List[Instruction] = []
    for index, instr in enumerate(instructions):
        if not retained[index]:
            continue
        if config.eliminate_dead_code:
            instr = emit_instruction(instr, states.before(index))
        optimized.append(instr)

    return PassResult(
        instructions=instructions,
        states=states,
        live=live,
        no_ops=no_ops,
        retained=retained,
        optimized=tuple(optimized),
    )


def analyze(
    instructions: Sequence[Instruction],
    config: Optional[OptimizerConfig] = None,
) -> OptimizationResult:
    """Optimize ``instructions`` and keep the diagnostics of every pass."""
    config = config or OptimizerConfig()
    for warning in config.validate():
        logger.warning("OptimizerConfig: %s", warning)

    result = OptimizationResult(original=list(instructions), optimized=list(instructions))
    current: Tuple[Instruction, ...] = tuple(instructions)
    for number in range(1, max(config.max_passes, 1) + 1):
        pass_result = run_pass(current, config)
        result.passes.append(pass_result)
        logger.debug(
            "pass %d: %d -> %d instructions",
            number, len(current), len(pass_result.optimized),
        )
        if pass_result.optimized == current:
            break
        current = pass_result.optimized
    else:
        logger.info("stopped after %d passes without reaching a fixed point", config.max_passes)

    result.optimized = list(current)
    logger.info(
        "optimized %d -> %d instructions in %d pass(es)",
        len(result.original), len(result.optimized), len(result.passes),
    )
    return result


def optimize(
    instructions: Sequence[Instruction],
    config: Optional[OptimizerConfig] = None,
) -> List[Instruction]:
    """The optimized equivalent of ``instructions``."""
    return analyze(instructions, config).optimized


__all__ = [
    "PassResult",
    "OptimizationResult",
    "emit_instruction",
    "run_pass",
    "analyze",
    "optimize",
]
