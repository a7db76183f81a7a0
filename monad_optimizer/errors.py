# monad_optimizer/errors.py
"""
Error types for the MONAD optimizer tool-suite.

Error Hierarchy:
────────────────
┌─────────────────────────────────────────────────────────────────────┐
│  MonadError (base)                                                  │
│  ├── ProgramParseError       - program text does not match grammar  │
│  ├── MalformedProgramError   - program violates the language rules  │
│  └── InternalInvariantError  - optimizer bugs (should never happen) │
│      └── IdentitySpaceExhausted                                     │
└─────────────────────────────────────────────────────────────────────┘

Error Codes:
────────────
Each error carries a code of the form MONAD-XXXX where XXXX is in:
  - 1000-1999: Syntax errors
  - 5000-5999: Language violations found while evaluating a program
  - 9000-9999: Internal errors

None of these errors is recoverable.  The optimizer either produces a
complete optimized program or raises; it never returns partial results.
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Optional


@unique
class ErrorPhase(Enum):
    """Phase of the pipeline where the error occurred."""

    SYNTAX = "syntax"
    EVALUATION = "evaluation"
    INTERNAL = "internal"


@unique
class ErrorCode(Enum):
    """
    Structured error codes.

    Each member carries its number and the phase it belongs to.
    """

    UNEXPECTED_TEXT = (1000, ErrorPhase.SYNTAX)
    UNKNOWN_OPCODE = (1001, ErrorPhase.SYNTAX)
    INVALID_OPERAND = (1002, ErrorPhase.SYNTAX)
    LITERAL_OUT_OF_RANGE = (1003, ErrorPhase.SYNTAX)

    DIVISION_BY_ZERO = (5000, ErrorPhase.EVALUATION)
    MODULO_BY_ZERO = (5001, ErrorPhase.EVALUATION)
    INVALID_MODULO = (5002, ErrorPhase.EVALUATION)
    MISSING_INPUT = (5003, ErrorPhase.EVALUATION)
    INPUT_OUT_OF_RANGE = (5004, ErrorPhase.EVALUATION)
    INTEGER_OVERFLOW = (5005, ErrorPhase.EVALUATION)

    INTERNAL_ERROR = (9000, ErrorPhase.INTERNAL)
    UNSUPPORTED_INSTRUCTION = (9001, ErrorPhase.INTERNAL)
    IDENTITY_SPACE_EXHAUSTED = (9002, ErrorPhase.INTERNAL)

    def __init__(self, number: int, phase: ErrorPhase) -> None:
        self.number = number
        self.phase = phase

    @property
    def code(self) -> str:
        """Get the full error code string."""
        return f"MONAD-{self.number:04d}"

    def __str__(self) -> str:
        return self.code


class MonadError(Exception):
    """
    Base exception for all MONAD optimizer errors.

    Carries a structured ``ErrorCode`` and, for errors that can be tied to
    the program text, the 1-based line and column.
    """

    default_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.line = line
        self.column = column

    def format(self) -> str:
        """Render as ``[MONAD-XXXX] line:col: message``."""
        location = ""
        if self.line is not None:
            location = f"{self.line}:{self.column or 1}: "
        return f"[{self.code}] {location}{self.message}"

    def __str__(self) -> str:
        return self.format()


class ProgramParseError(MonadError):
    """The program text is not a valid MONAD instruction stream."""

    default_code = ErrorCode.UNEXPECTED_TEXT


class MalformedProgramError(MonadError):
    """
    The program breaks a rule of the MONAD language, e.g. it divides by
    zero or reads more inputs than were supplied.
    """

    default_code = ErrorCode.DIVISION_BY_ZERO


class InternalInvariantError(MonadError):
    """A programming-logic error inside the optimizer."""

    default_code = ErrorCode.INTERNAL_ERROR


class IdentitySpaceExhausted(InternalInvariantError):
    """The value identity counter ran past its configured limit."""

    default_code = ErrorCode.IDENTITY_SPACE_EXHAUSTED


__all__ = [
    "ErrorPhase",
    "ErrorCode",
    "MonadError",
    "ProgramParseError",
    "MalformedProgramError",
    "InternalInvariantError",
    "IdentitySpaceExhausted",
]
