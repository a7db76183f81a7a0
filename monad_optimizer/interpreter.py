# monad_optimizer/interpreter.py
"""
Concrete MONAD interpreter.

Runs a program on plain integers.  This is the reference the optimizer is
checked against: for every valid input vector, the original and the
optimized program must leave the same value in ``z``.

Language rules enforced here (a violating program is malformed):
  - ``div`` with a zero divisor;
  - ``mod`` with a negative dividend or a non-positive divisor;
  - any result that does not fit in a signed 64-bit integer;
  - ``inp`` with no input left, or an input outside [0, 9].
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from monad_optimizer.errors import ErrorCode, MalformedProgramError
from monad_optimizer.evaluator import exact_result
from monad_optimizer.program import Instruction, InstructionKind, Register
from monad_optimizer.values import INPUT_RANGE

logger = logging.getLogger(__name__)

ConcreteRegisters = Tuple[int, int, int, int]


def parse_inputs(text: str) -> List[int]:
    """``"13579"`` or ``"1 3 5 7 9"`` -> ``[1, 3, 5, 7, 9]``."""
    digits = [ch for ch in text if not ch.isspace() and ch != ","]
    if not all(ch in "0123456789" for ch in digits):
        raise ValueError(f"inputs must be decimal digits: {text!r}")
    return [int(ch) for ch in digits]


def execute(
    instructions: Sequence[Instruction],
    inputs: Iterable[int],
) -> ConcreteRegisters:
    """Run ``instructions`` and return the final ``(w, x, y, z)``."""
    registers = [0, 0, 0, 0]
    pending = iter(inputs)
    consumed = 0

    for index, instr in enumerate(instructions):
        dest = instr.destination.index
        if instr.is_input:
            try:
                digit = next(pending)
            except StopIteration:
                raise MalformedProgramError(
                    f"instruction {index} ({instr}) needs input #{consumed} "
                    "but none is left",
                    code=ErrorCode.MISSING_INPUT,
                ) from None
            if not INPUT_RANGE.contains(digit):
                raise MalformedProgramError(
                    f"input #{consumed} is {digit}, outside {INPUT_RANGE}",
                    code=ErrorCode.INPUT_OUT_OF_RANGE,
                )
            registers[dest] = digit
            consumed += 1
            continue

        a = registers[dest]
        operand = instr.operand
        b = registers[operand.index] if isinstance(operand, Register) else operand
        if instr.kind is InstructionKind.MOD and (a < 0 or b <= 0):
            raise MalformedProgramError(
                f"instruction {index} ({instr}) computes {a} mod {b}",
                code=ErrorCode.INVALID_MODULO,
            )
        registers[dest] = exact_result(instr.kind, a, b)

    logger.debug("executed %d instructions on %d inputs", len(instructions), consumed)
    return (registers[0], registers[1], registers[2], registers[3])


__all__ = ["ConcreteRegisters", "parse_inputs", "execute"]
