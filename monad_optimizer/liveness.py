# monad_optimizer/liveness.py
"""
Backward pass: which value identities reach the program's output.

Direction:   BACKWARD over the snapshots of one forward pass
Lattice:     ℘(Vid), joined by union
Seed:        the identity held by ``z`` after the last instruction, the
             only value a MONAD program makes observable

For each non-``inp`` instruction whose result is live and which actually
changed its destination, the destination's previous value becomes live,
and so does the operand register's value unless it is already exact (an
exact operand can be written as a literal instead).  Two algebraic
exemptions suppress both uses:

    mul  where either side is exactly 0        -> result is 0 regardless
    eql  where both sides are equal values     -> result is 1 regardless

``inp`` overwrites its destination without reading it and never makes
anything live.

An instruction is kept iff it is an ``inp`` (dropping one would shift the
ordinals of every later input), or it is not a no-op and its result is
live.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, List, Optional, Sequence, Set

from monad_optimizer.evaluator import is_no_op
from monad_optimizer.program import OUTPUT_REGISTER, Instruction, InstructionKind, Register
from monad_optimizer.program_state import ProgramStates, Registers
from monad_optimizer.value_ids import Vid
from monad_optimizer.values import Exact, Value, is_exact

logger = logging.getLogger(__name__)


def operand_value(instr: Instruction, before: Registers) -> Value:
    """The operand as seen right before ``instr``; literals get ``Vid.UNDEFINED``."""
    operand = instr.operand
    if isinstance(operand, Register):
        return before[operand.index]
    return Exact(Vid.UNDEFINED, operand)


def usage_exempt(kind: InstructionKind, source: Value, operand: Value) -> bool:
    """Is the result independent of which values the two sides hold?"""
    if kind is InstructionKind.MUL:
        return is_exact(source, 0) or is_exact(operand, 0)
    if kind is InstructionKind.EQUAL:
        return source == operand
    return False


def live_identities(
    start: Registers,
    snapshots: Sequence[Registers],
    instructions: Sequence[Instruction],
) -> FrozenSet[Vid]:
    """Identities whose value may influence the final ``z``."""
    if len(snapshots) != len(instructions):
        raise ValueError(
            f"{len(instructions)} instructions but {len(snapshots)} snapshots"
        )

    final = snapshots[-1] if snapshots else start
    live: Set[Vid] = {final[OUTPUT_REGISTER].vid}

    for index in range(len(instructions) - 1, -1, -1):
        instr = instructions[index]
        if instr.is_input:
            continue

        before = snapshots[index - 1] if index > 0 else start
        after = snapshots[index]
        dest = instr.destination.index

        source_value = before[dest]
        operand = operand_value(instr, before)
        destination_after = after[dest]

        if usage_exempt(instr.kind, source_value, operand):
            continue

        if destination_after.vid in live and destination_after != source_value:
            live.add(source_value.vid)
            if instr.operand_register is not None and not isinstance(operand, Exact):
                live.add(operand.vid)

    return frozenset(live)


def is_retained(
    instr: Instruction,
    before: Registers,
    after: Registers,
    live: FrozenSet[Vid],
) -> bool:
    """Does ``instr`` have to stay in the optimized program?"""
    if instr.is_input:
        return True
    dest = instr.destination.index
    if is_no_op(instr.kind, before[dest], operand_value(instr, before)):
        return False
    return after[dest].vid in live


class LivenessAnalysis:
    """
    Liveness over one forward pass.

    After ``run()``, use:
      - ``live``                     -> set of live identities
      - ``is_live(vid)``             -> bool
      - ``retained(index)``          -> whether instruction ``index`` stays
      - ``dead_instructions()``      -> indices dropped because unobserved
      - ``no_op_instructions()``     -> indices that never change anything
    """

    def __init__(self, instructions: Sequence[Instruction], states: ProgramStates) -> None:
        self.instructions = list(instructions)
        self.states = states
        self._live: Optional[FrozenSet[Vid]] = None

    def run(self) -> FrozenSet[Vid]:
        self._live = live_identities(
            self.states.start, self.states.snapshots, self.instructions
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "backward pass: %d live identities, %d/%d instructions retained",
                len(self._live),
                sum(1 for i in range(len(self.instructions)) if self.retained(i)),
                len(self.instructions),
            )
        return self._live

    @property
    def live(self) -> FrozenSet[Vid]:
        if self._live is None:
            raise RuntimeError("LivenessAnalysis.run() has not been called")
        return self._live

    def is_live(self, vid: Vid) -> bool:
        return vid in self.live

    def is_no_op(self, index: int) -> bool:
        instr = self.instructions[index]
        if instr.is_input:
            return False
        before = self.states.before(index)
        dest = instr.destination.index
        return is_no_op(instr.kind, before[dest], operand_value(instr, before))

    def retained(self, index: int) -> bool:
        return is_retained(
            self.instructions[index],
            self.states.before(index),
            self.states.after(index),
            self.live,
        )

    def no_op_instructions(self) -> List[int]:
        return [i for i in range(len(self.instructions)) if self.is_no_op(i)]

    def dead_instructions(self) -> List[int]:
        """Instructions that change their register but are never observed."""
        return [
            i for i in range(len(self.instructions))
            if not self.retained(i) and not self.is_no_op(i)
        ]


__all__ = [
    "operand_value",
    "usage_exempt",
    "live_identities",
    "is_retained",
    "LivenessAnalysis",
]
