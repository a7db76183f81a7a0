# monad_optimizer/program.py
"""
Instruction model for the MONAD language.

A program is a flat list of instructions over four integer registers
``w``, ``x``, ``y`` and ``z``.  Every instruction except ``inp`` takes a
destination register and an operand, which is either a literal integer or
another register::

    inp w        read the next input digit into w
    add x 2      x = x + 2
    mul x y      x = x * y
    div x 26     x = x / 26   (truncating toward zero)
    mod x 26     x = x % 26
    eql x w      x = 1 if x == w else 0

Registers and literals are signed 64-bit integers; a result outside that
range makes the program malformed, as does division by zero.

Instructions are immutable; the optimizer only decides which of them to
keep and, for kept ones, may substitute an equivalent operand.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Union

REGISTER_NAMES = "wxyz"
OUTPUT_REGISTER = 3

I64_MIN = -(2 ** 63)
I64_MAX = 2 ** 63 - 1


@dataclass(frozen=True, order=True)
class Register:
    """Registers w, x, y, z are Register(0) through Register(3)."""

    index: int

    def __post_init__(self) -> None:
        if not 0 <= self.index < len(REGISTER_NAMES):
            raise ValueError(f"register index out of range: {self.index}")

    @classmethod
    def from_name(cls, name: str) -> Register:
        return cls(REGISTER_NAMES.index(name))

    @property
    def name(self) -> str:
        return REGISTER_NAMES[self.index]

    def __str__(self) -> str:
        return self.name


Operand = Union[int, Register]


class InstructionKind(enum.Enum):
    """The six MONAD opcodes, valued by their mnemonic."""

    INPUT = "inp"
    ADD = "add"
    MUL = "mul"
    DIV = "div"
    MOD = "mod"
    EQUAL = "eql"

    @classmethod
    def from_mnemonic(cls, mnemonic: str) -> InstructionKind:
        return cls(mnemonic)


@dataclass(frozen=True)
class Instruction:
    """
    One MONAD instruction.

    ``operand`` is ``None`` for ``inp`` and required for every other kind.
    """

    kind: InstructionKind
    destination: Register
    operand: Optional[Operand] = None

    def __post_init__(self) -> None:
        if self.kind is InstructionKind.INPUT:
            if self.operand is not None:
                raise ValueError("inp takes no operand")
        elif self.operand is None:
            raise ValueError(f"{self.kind.value} requires an operand")
        elif (not isinstance(self.operand, Register)
              and not I64_MIN <= self.operand <= I64_MAX):
            raise ValueError(f"literal {self.operand} does not fit in 64 bits")

    @property
    def is_input(self) -> bool:
        return self.kind is InstructionKind.INPUT

    @property
    def operand_register(self) -> Optional[Register]:
        """The operand if it names a register, else ``None``."""
        if isinstance(self.operand, Register):
            return self.operand
        return None

    def with_operand(self, operand: Operand) -> Instruction:
        """Copy of this instruction reading ``operand`` instead."""
        return replace(self, operand=operand)

    def __str__(self) -> str:
        if self.operand is None:
            return f"{self.kind.value} {self.destination}"
        return f"{self.kind.value} {self.destination} {self.operand}"


# Constructors mirroring the mnemonics, handy for building programs in code.

def _coerce(operand: Union[Operand, str]) -> Operand:
    if isinstance(operand, str):
        return Register.from_name(operand)
    return operand


def inp(dest: str) -> Instruction:
    return Instruction(InstructionKind.INPUT, Register.from_name(dest))


def add(dest: str, operand: Union[Operand, str]) -> Instruction:
    return Instruction(InstructionKind.ADD, Register.from_name(dest), _coerce(operand))


def mul(dest: str, operand: Union[Operand, str]) -> Instruction:
    return Instruction(InstructionKind.MUL, Register.from_name(dest), _coerce(operand))


def div(dest: str, operand: Union[Operand, str]) -> Instruction:
    return Instruction(InstructionKind.DIV, Register.from_name(dest), _coerce(operand))


def mod(dest: str, operand: Union[Operand, str]) -> Instruction:
    return Instruction(InstructionKind.MOD, Register.from_name(dest), _coerce(operand))


def eql(dest: str, operand: Union[Operand, str]) -> Instruction:
    return Instruction(InstructionKind.EQUAL, Register.from_name(dest), _coerce(operand))


def format_program(instructions: Iterable[Instruction]) -> str:
    """One instruction per line, with a trailing newline."""
    return "".join(f"{instr}\n" for instr in instructions)


__all__ = [
    "REGISTER_NAMES",
    "OUTPUT_REGISTER",
    "I64_MIN",
    "I64_MAX",
    "Register",
    "Operand",
    "InstructionKind",
    "Instruction",
    "inp",
    "add",
    "mul",
    "div",
    "mod",
    "eql",
    "format_program",
]
