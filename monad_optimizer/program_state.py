# monad_optimizer/program_state.py
"""
Forward pass: replay a program over the abstract value domain.

The builder keeps a live register file seeded with four independent
``Exact(0)`` values and records a snapshot after every instruction, no-op
or not.  Nothing is removed here; deciding what to drop is the job of the
liveness pass that reads these snapshots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from monad_optimizer.config import OptimizerConfig
from monad_optimizer.evaluator import evaluate
from monad_optimizer.program import Instruction, Register
from monad_optimizer.value_ids import VidMaker
from monad_optimizer.values import Value, exact, input_value

logger = logging.getLogger(__name__)

Registers = Tuple[Value, Value, Value, Value]


@dataclass(frozen=True)
class ProgramStates:
    """
    Register snapshots of one forward pass.

    ``snapshots[i]`` is the register file immediately after instruction
    ``i``; ``start`` is the file before the first instruction.
    """

    start: Registers
    snapshots: Tuple[Registers, ...]

    def __len__(self) -> int:
        return len(self.snapshots)

    def before(self, index: int) -> Registers:
        if index == 0:
            return self.start
        return self.snapshots[index - 1]

    def after(self, index: int) -> Registers:
        return self.snapshots[index]

    @property
    def final(self) -> Registers:
        if not self.snapshots:
            return self.start
        return self.snapshots[-1]


class ProgramStateBuilder:
    """
    Owns the ``VidMaker`` for one run and drives the evaluator over a
    program.

    A builder is single-use: ``run`` may be called once, since identities
    minted by a second run would not be comparable with the first.
    """

    def __init__(self, config: Optional[OptimizerConfig] = None) -> None:
        self.config = config or OptimizerConfig()
        self.vid_maker = VidMaker(self.config.max_value_ids)
        self._states: Optional[ProgramStates] = None

    @property
    def states(self) -> Optional[ProgramStates]:
        return self._states

    def run(self, instructions: Sequence[Instruction]) -> ProgramStates:
        if self._states is not None:
            raise RuntimeError("ProgramStateBuilder.run() may only be called once")

        start = self.vid_maker.initial_registers()
        registers: List[Value] = list(start)
        snapshots: List[Registers] = []
        inputs_seen = 0

        for instr in instructions:
            dest = instr.destination.index
            if instr.is_input:
                registers[dest] = input_value(self.vid_maker, inputs_seen)
                inputs_seen += 1
            else:
                left = registers[dest]
                right = self._resolve_operand(instr, registers)
                registers[dest] = evaluate(self.vid_maker, instr.kind, left, right)
            snapshots.append(tuple(registers))  # type: ignore[arg-type]

        self._states = ProgramStates(start=start, snapshots=tuple(snapshots))
        logger.debug(
            "forward pass: %d instructions, %d inputs, %d value ids",
            len(snapshots), inputs_seen, self.vid_maker.issued,
        )
        return self._states

    def _resolve_operand(self, instr: Instruction, registers: List[Value]) -> Value:
        operand = instr.operand
        if isinstance(operand, Register):
            return registers[operand.index]
        return exact(self.vid_maker, operand)


def run(
    instructions: Sequence[Instruction],
    config: Optional[OptimizerConfig] = None,
) -> ProgramStates:
    """Forward pass with a fresh builder."""
    return ProgramStateBuilder(config).run(instructions)


__all__ = ["Registers", "ProgramStates", "ProgramStateBuilder", "run"]
