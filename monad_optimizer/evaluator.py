# monad_optimizer/evaluator.py
"""
Abstract transfer function for MONAD instructions.

``evaluate`` maps the current value of the destination register (``left``)
and the resolved operand (``right``) to the abstract result.  The rules
are tried in priority order:

    1. no-op                    -> ``left`` itself, no new identity
    2. add with an exact 0      -> the other side, identity reused
    3. both sides exact         -> new Exact with the concrete result
    4. same identity            -> div 1, mod 0, eql 1
    5. mul with an exact 0      -> new Exact(0)
    6. eql                      -> Exact(0) if ranges are disjoint,
                                   else Unknown[0, 1]
    7. fallback                 -> Unknown over the full range, or
                                   [0, d-1] for ``mod`` by exact d > 0

Rule 4 relies on the language forbidding ``div`` and ``mod`` by zero:
a value divided by itself cannot be 0 in a valid program.
"""

from __future__ import annotations

from monad_optimizer.errors import (
    ErrorCode,
    InternalInvariantError,
    MalformedProgramError,
)
from monad_optimizer.program import I64_MAX, I64_MIN, InstructionKind
from monad_optimizer.value_ids import VidMaker
from monad_optimizer.values import (
    BOOL_RANGE,
    Exact,
    IntRange,
    Value,
    exact,
    is_exact,
    ranges_overlap,
    unknown,
)


def exact_result(kind: InstructionKind, a: int, b: int) -> int:
    """
    Concrete semantics of a binary instruction.

    Division truncates toward zero and the remainder takes the sign of the
    dividend, so ``a == b * (a / b) + a % b`` always holds.  A result that
    does not fit in a signed 64-bit integer is a language violation.
    """
    if kind is InstructionKind.ADD:
        result = a + b
    elif kind is InstructionKind.MUL:
        result = a * b
    elif kind is InstructionKind.DIV or kind is InstructionKind.MOD:
        if b == 0:
            code = (ErrorCode.DIVISION_BY_ZERO if kind is InstructionKind.DIV
                    else ErrorCode.MODULO_BY_ZERO)
            raise MalformedProgramError(f"{kind.value} {a} by zero", code=code)
        quotient = abs(a) // abs(b)
        if (a < 0) != (b < 0):
            quotient = -quotient
        result = quotient if kind is InstructionKind.DIV else a - b * quotient
    elif kind is InstructionKind.EQUAL:
        return 1 if a == b else 0
    else:
        raise InternalInvariantError(
            f"no binary semantics for {kind.value}",
            code=ErrorCode.UNSUPPORTED_INSTRUCTION,
        )
    if not I64_MIN <= result <= I64_MAX:
        raise MalformedProgramError(
            f"{kind.value} {a} {b} overflows 64 bits",
            code=ErrorCode.INTEGER_OVERFLOW,
        )
    return result


def is_no_op(kind: InstructionKind, left: Value, right: Value) -> bool:
    """Would executing ``kind`` leave ``left`` unchanged?"""
    if kind is InstructionKind.ADD:
        return is_exact(right, 0)
    if kind is InstructionKind.MUL or kind is InstructionKind.DIV:
        return is_exact(left, 0) or is_exact(right, 1)
    if isinstance(left, Exact) and isinstance(right, Exact):
        a, b = left.value, right.value
        if kind is InstructionKind.MOD:
            return a < b
        if kind is InstructionKind.EQUAL:
            # "eql a b" stores into a: 1 when equal, 0 otherwise.
            sides_equal = a == b
            return (sides_equal and a == 1) or (not sides_equal and a == 0)
    return False


def evaluate(
    vid_maker: VidMaker,
    kind: InstructionKind,
    left: Value,
    right: Value,
) -> Value:
    """Abstract result of ``left <kind> right``."""
    if kind is InstructionKind.INPUT:
        raise InternalInvariantError(
            "inp has no operand to evaluate",
            code=ErrorCode.UNSUPPORTED_INSTRUCTION,
        )

    if is_no_op(kind, left, right):
        return left

    if kind is InstructionKind.ADD:
        if is_exact(left, 0):
            return right
        if is_exact(right, 0):
            return left

    if isinstance(left, Exact) and isinstance(right, Exact):
        return exact(vid_maker, exact_result(kind, left.value, right.value))

    if left.vid == right.vid:
        if kind is InstructionKind.DIV or kind is InstructionKind.EQUAL:
            return exact(vid_maker, 1)
        if kind is InstructionKind.MOD:
            return exact(vid_maker, 0)

    if kind is InstructionKind.MUL and (is_exact(left, 0) or is_exact(right, 0)):
        return exact(vid_maker, 0)

    if kind is InstructionKind.EQUAL:
        if not ranges_overlap(left, right):
            return exact(vid_maker, 0)
        return unknown(vid_maker, BOOL_RANGE)

    if kind is InstructionKind.MOD and isinstance(right, Exact) and right.value > 0:
        return unknown(vid_maker, IntRange(0, right.value - 1))

    return unknown(vid_maker)


__all__ = ["exact_result", "is_no_op", "evaluate"]
