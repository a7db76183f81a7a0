# tests/conftest.py
"""
Shared fixtures and program builders for the monad_optimizer test suite.
"""

from __future__ import annotations

import itertools
import random
from typing import Iterable, List, Optional, Sequence, Tuple

import pytest

from monad_optimizer.errors import MalformedProgramError
from monad_optimizer.interpreter import execute
from monad_optimizer.optimizer import optimize
from monad_optimizer.parser import parse_program
from monad_optimizer.program import (
    REGISTER_NAMES,
    Instruction,
    add,
    div,
    eql,
    inp,
    mod,
    mul,
)
from monad_optimizer.value_ids import VidMaker


# ── MONAD digit-checker programs ─────────────────────────────────

# (div z, add x, add y) for each 18-instruction block.
BLOCK_PARAMS: List[Tuple[int, int, int]] = [
    (1, 12, 4),
    (1, 11, 11),
    (26, -3, 5),
    (1, 13, 1),
    (26, -10, 9),
]


def monad_block_source(div_z: int, add_x: int, add_y: int) -> str:
    return (
        "inp w\n"
        "mul x 0\n"
        "add x z\n"
        "mod x 26\n"
        f"div z {div_z}\n"
        f"add x {add_x}\n"
        "eql x w\n"
        "eql x 0\n"
        "mul y 0\n"
        "add y 25\n"
        "mul y x\n"
        "add y 1\n"
        "mul z y\n"
        "mul y 0\n"
        "add y w\n"
        f"add y {add_y}\n"
        "mul y x\n"
        "add z y\n"
    )


MONAD_SOURCE = "".join(monad_block_source(*params) for params in BLOCK_PARAMS)


def random_program(rng: random.Random, length: int) -> List[Instruction]:
    """
    A random program over small literals and all four registers.

    ``div`` and ``mod`` take a register divisor part of the time, so a
    program may be malformed for some inputs or for all of them; see
    ``optimize_or_rejected``.
    """
    program: List[Instruction] = []
    for _ in range(length):
        dest = rng.choice(REGISTER_NAMES)
        roll = rng.random()
        if roll < 0.15:
            program.append(inp(dest))
            continue
        if roll < 0.25:
            divisor = rng.choice([-3, -2, 1, 2, 3, 26, *REGISTER_NAMES])
            program.append(div(dest, divisor))
            continue
        if roll < 0.32:
            divisor = rng.choice([1, 2, 5, 26, *REGISTER_NAMES])
            program.append(mod(dest, divisor))
            continue
        if rng.random() < 0.5:
            operand = rng.choice(REGISTER_NAMES)
        else:
            operand = rng.choice([-2, -1, 0, 1, 2, 3, 9, 10, 25, 26])
        op = rng.choice([add, add, mul, mul, eql])
        program.append(op(dest, operand))
    return program


def input_vectors(rng: random.Random, program: Sequence[Instruction], count: int) -> List[List[int]]:
    needed = sum(1 for instr in program if instr.is_input)
    return [[rng.randint(0, 9) for _ in range(needed)] for _ in range(count)]


def checked_runs(
    original: Sequence[Instruction],
    optimized: Sequence[Instruction],
    vectors: Iterable[Sequence[int]],
) -> int:
    """
    Execute both programs on every vector the original accepts and assert
    that ``z`` agrees.  Returns how many vectors were compared.
    """
    compared = 0
    for inputs in vectors:
        try:
            expected = execute(original, inputs)
        except MalformedProgramError:
            continue
        actual = execute(optimized, inputs)
        assert actual[3] == expected[3], (
            f"z differs for inputs {list(inputs)}: "
            f"original {expected[3]}, optimized {actual[3]}"
        )
        compared += 1
    return compared


def optimize_or_rejected(
    original: Sequence[Instruction],
    vectors: Sequence[Sequence[int]],
) -> Optional[List[Instruction]]:
    """
    The optimized program, or ``None`` when the analysis itself finds the
    program malformed.  In that case no input vector may be accepted by
    the interpreter either.
    """
    try:
        return optimize(original)
    except MalformedProgramError:
        for inputs in vectors:
            with pytest.raises(MalformedProgramError):
                execute(original, inputs)
        return None


def all_digit_vectors(length: int) -> List[List[int]]:
    return [list(v) for v in itertools.product(range(10), repeat=length)]


# ── Fixtures ─────────────────────────────────────────────────────

@pytest.fixture
def vid_maker() -> VidMaker:
    return VidMaker()


@pytest.fixture
def monad_source() -> str:
    return MONAD_SOURCE


@pytest.fixture
def monad_program() -> List[Instruction]:
    return parse_program(MONAD_SOURCE)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(20211224)
