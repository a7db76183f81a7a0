# monad_optimizer/values.py
"""
Abstract value domain for MONAD registers.

Every register at every program point holds one of:

    Exact(vid, n)          the value is known to be the integer n
    Input(vid, k)          the value is the k-th input digit, in [0, 9]
    Unknown(vid, range)    nothing is known beyond an inclusive range

Equality is deliberately asymmetric.  Two ``Exact`` values are equal iff
their integers are equal, whatever their identities; any other pair is
equal iff the identities are equal.  Exactness is decidable from the
payload, while two non-exact values can only be proven equal by shared
provenance.

Ranges use ``IntRange``, a closed integer interval in the spirit of an
interval abstract domain, with the signed 64-bit range as top.  Every
concrete value of a valid program lies in that range, since a result
outside it makes the program malformed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from monad_optimizer.program import I64_MAX, I64_MIN
from monad_optimizer.value_ids import Vid, VidMaker


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 - INTEGER RANGES
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class IntRange:
    """
    Closed interval [lo, hi] of integers.

    >>> IntRange(0, 9).overlaps(IntRange(10, 20))
    False
    >>> IntRange.singleton(3)
    IntRange(lo=3, hi=3)
    """

    lo: int
    hi: int

    def __post_init__(self) -> None:
        if self.lo > self.hi:
            raise ValueError(f"empty range [{self.lo}, {self.hi}]")

    @classmethod
    def singleton(cls, n: int) -> IntRange:
        return cls(n, n)

    def is_full(self) -> bool:
        return self.lo == I64_MIN and self.hi == I64_MAX

    def contains(self, n: int) -> bool:
        return self.lo <= n <= self.hi

    def overlaps(self, other: IntRange) -> bool:
        return self.lo <= other.hi and other.lo <= self.hi

    def __str__(self) -> str:
        return f"[{self.lo}, {self.hi}]"


FULL_RANGE = IntRange(I64_MIN, I64_MAX)
INPUT_RANGE = IntRange(0, 9)
BOOL_RANGE = IntRange(0, 1)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 - ABSTRACT VALUES
# ═══════════════════════════════════════════════════════════════════════════

class _AbstractValue:
    """Shared behaviour of the three value variants."""

    __slots__ = ()

    vid: Vid

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _AbstractValue):
            return NotImplemented
        if isinstance(self, Exact) and isinstance(other, Exact):
            return self.value == other.value
        return self.vid == other.vid

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        # Consistent with __eq__ because a Vid names exactly one value
        # within a run.
        if isinstance(self, Exact):
            return hash(("exact", self.value))
        return hash(self.vid)


@dataclass(frozen=True, eq=False)
class Exact(_AbstractValue):
    """A value known precisely at optimization time."""

    vid: Vid
    value: int

    def __str__(self) -> str:
        return f"{self.vid}: Exact({self.value})"


@dataclass(frozen=True, eq=False)
class Input(_AbstractValue):
    """The ``ordinal``-th input digit consumed by the program."""

    vid: Vid
    ordinal: int

    def __str__(self) -> str:
        return f"{self.vid}: Input_{self.ordinal}"


@dataclass(frozen=True, eq=False)
class Unknown(_AbstractValue):
    """A value constrained only to ``range``."""

    vid: Vid
    range: IntRange = FULL_RANGE

    def __str__(self) -> str:
        if self.range.is_full():
            return f"{self.vid}: Unknown"
        return f"{self.vid}: Unknown{self.range}"


Value = Union[Exact, Input, Unknown]


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 - CONSTRUCTION AND QUERIES
# ═══════════════════════════════════════════════════════════════════════════

def exact(vid_maker: VidMaker, n: int) -> Exact:
    return Exact(vid_maker.make_new_vid(), n)


def input_value(vid_maker: VidMaker, ordinal: int) -> Input:
    return Input(vid_maker.make_new_vid(), ordinal)


def unknown(vid_maker: VidMaker, range: IntRange = FULL_RANGE) -> Unknown:
    return Unknown(vid_maker.make_new_vid(), range)


def identity_of(value: Value) -> Vid:
    return value.vid


def is_exact(value: Value, n: int) -> bool:
    """Is ``value`` provably the integer ``n``?"""
    return isinstance(value, Exact) and value.value == n


def value_range(value: Value) -> IntRange:
    """The set of integers ``value`` may take, as an interval."""
    if isinstance(value, Exact):
        return IntRange.singleton(value.value)
    if isinstance(value, Input):
        return INPUT_RANGE
    return value.range


def ranges_overlap(left: Value, right: Value) -> bool:
    """Could ``left`` and ``right`` hold the same integer?"""
    return value_range(left).overlaps(value_range(right))


__all__ = [
    "I64_MIN",
    "I64_MAX",
    "IntRange",
    "FULL_RANGE",
    "INPUT_RANGE",
    "BOOL_RANGE",
    "Exact",
    "Input",
    "Unknown",
    "Value",
    "exact",
    "input_value",
    "unknown",
    "identity_of",
    "is_exact",
    "value_range",
    "ranges_overlap",
]
