# monad_optimizer/value_ids.py
"""
Value identities and the allocator that mints them.

A value ID (``Vid``) is a unique way to refer to a particular value in a
program.  Multiple values in a program can be equivalent to each other
but have different Vids: two registers can both contain the number 5
while the values describing those two registers' states carry different
Vids.  The converse never happens; equal Vids always denote the same
value.

A Vid names a value that was either created as the output of a particular
instruction, materialised from a literal operand, read from the input, or
present in the initial state of the program (the starting registers).

Every optimization run owns one ``VidMaker``.  There is no process-wide
counter, so independent runs can proceed concurrently.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Iterator, Tuple

from monad_optimizer.errors import IdentitySpaceExhausted

if TYPE_CHECKING:
    from monad_optimizer.values import Value


@dataclass(frozen=True, order=True)
class Vid:
    """Opaque, totally ordered, hashable value identity."""

    number: int

    # Reserved for program values whose provenance is undefined, such as
    # literals materialised during the backward liveness walk.
    UNDEFINED: ClassVar[Vid]

    def __str__(self) -> str:
        return str(self.number)


Vid.UNDEFINED = Vid(0)


class VidMaker:
    """
    A way to generate unique Vids within a single run.

    Each Vid is strictly greater than every Vid minted before it by the
    same maker.  Numbering starts at 1 since 0 is ``Vid.UNDEFINED``.
    """

    def __init__(self, limit: int = sys.maxsize) -> None:
        self._next_id = 1
        self._limit = limit

    @property
    def issued(self) -> int:
        """How many Vids this maker has handed out."""
        return self._next_id - 1

    def make_new_vid(self) -> Vid:
        if self._next_id >= self._limit:
            raise IdentitySpaceExhausted(
                f"value identity space exhausted after {self.issued} ids"
            )
        vid = Vid(self._next_id)
        self._next_id += 1
        return vid

    def __iter__(self) -> Iterator[Vid]:
        return self

    def __next__(self) -> Vid:
        return self.make_new_vid()

    def initial_registers(self) -> Tuple[Value, Value, Value, Value]:
        """Mint the four independent ``Exact(0)`` registers a program starts with."""
        from monad_optimizer.values import Exact

        return (
            Exact(self.make_new_vid(), 0),
            Exact(self.make_new_vid(), 0),
            Exact(self.make_new_vid(), 0),
            Exact(self.make_new_vid(), 0),
        )


__all__ = ["Vid", "VidMaker"]
