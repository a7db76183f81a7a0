# monad_optimizer/reporter.py
"""
Human-readable output for optimization results.

    instruction                  post-instruction registers
                           w        |        x        |        y        |        z
    ------------------------------------------------------------------------------
    <program start>    [ 1: Exact(0) | 2: Exact(0) | 3: Exact(0) | 4: Exact(0) ]
    inp w              [ 5: Input_0  | 2: Exact(0) | 3: Exact(0) | 4: Exact(0) ]
    add x 0            [ 5: Input_0  | 2: Exact(0) | 3: Exact(0) | 4: Exact(0) ] *NoOp

Rows of dropped instructions are tagged ``*NoOp`` (never changes its
register) or ``*Dead`` (changes it, but the change never reaches ``z``).
Colour comes from termcolor and can be turned off with
``ReportConfig(color=False)``.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from termcolor import colored

from monad_optimizer.config import ReportConfig
from monad_optimizer.interpreter import ConcreteRegisters
from monad_optimizer.liveness import operand_value
from monad_optimizer.optimizer import OptimizationResult
from monad_optimizer.program import OUTPUT_REGISTER, REGISTER_NAMES
from monad_optimizer.program_state import Registers
from monad_optimizer.values import Exact, Input, Value

NO_OP_TAG = "*NoOp"
DEAD_TAG = "*Dead"


def describe(value: Value, show_vids: bool = True) -> str:
    """Render one abstract value for a table cell."""
    if show_vids:
        return str(value)
    if isinstance(value, Exact):
        return f"Exact({value.value})"
    if isinstance(value, Input):
        return f"Input_{value.ordinal}"
    if value.range.is_full():
        return "Unknown"
    return f"Unknown{value.range}"


class _Painter:
    def __init__(self, enabled: bool) -> None:
        self.enabled = enabled

    def __call__(self, text: str, color: Optional[str] = None,
                 attrs: Optional[List[str]] = None) -> str:
        if not self.enabled:
            return text
        return colored(text, color, attrs=attrs)


def _row(label: str, registers: Registers, config: ReportConfig) -> str:
    width = config.column_width
    cells = " | ".join(
        f"{describe(value, config.show_vids):^{width}}" for value in registers
    )
    return f"{label:18} [ {cells} ]"


def render_register_trace(
    result: OptimizationResult,
    config: Optional[ReportConfig] = None,
) -> str:
    """Table of the registers after every instruction of the original program."""
    config = config or ReportConfig()
    paint = _Painter(config.color)
    width = config.column_width
    states = result.states

    header = " | ".join(f"{name:^{width}}" for name in REGISTER_NAMES)
    lines = [
        paint("instruction".ljust(30) + "post-instruction registers", attrs=["bold"]),
        " " * 21 + header,
        "-" * (23 + len(header)),
        _row("<program start>", states.start, config),
    ]

    non_input = 0
    with_non_exact = 0
    without_exact = 0
    for index, instr in enumerate(result.original):
        row = _row(str(instr), states.after(index), config)
        if instr.is_input:
            lines.append(paint(row, "cyan"))
            continue

        non_input += 1
        before = states.before(index)
        left = before[instr.destination.index]
        right = operand_value(instr, before)
        exact_sides = isinstance(left, Exact) + isinstance(right, Exact)
        if exact_sides < 2:
            with_non_exact += 1
        if exact_sides == 0:
            without_exact += 1

        if result.no_ops[index]:
            lines.append(paint(f"{row} {NO_OP_TAG}", "yellow"))
        elif not result.retained[index]:
            lines.append(paint(f"{row} {DEAD_TAG}", "red"))
        else:
            lines.append(row)

    def share(count: int) -> float:
        return count * 100.0 / non_input if non_input else 0.0

    lines.extend([
        "",
        f"Total non-input instructions: {non_input:3}",
        f"- with 1+ non-exact value:    {with_non_exact:3} ({share(with_non_exact):.1f}%)",
        f"- without any exact values:   {without_exact:3} ({share(without_exact):.1f}%)",
    ])
    return "\n".join(lines) + "\n"


def render_summary(result: OptimizationResult, config: Optional[ReportConfig] = None) -> str:
    """Length comparison between the original and the optimized program."""
    config = config or ReportConfig()
    paint = _Painter(config.color)
    improvement = paint(f"{result.improvement_percent:.2f}%", "green", attrs=["bold"])
    return (
        f"Original vs optimized length:    {len(result.original)} vs "
        f"{len(result.optimized)} (-{result.removed})\n"
        f"Optimized is more efficient by:  {improvement}\n"
    )


def render_execution(
    original: ConcreteRegisters,
    optimized: ConcreteRegisters,
    config: Optional[ReportConfig] = None,
) -> str:
    """Final registers of both programs on the same inputs."""
    config = config or ReportConfig()
    paint = _Painter(config.color)

    def fmt(registers: Sequence[int]) -> str:
        return "  ".join(f"{name}={value}" for name, value in zip(REGISTER_NAMES, registers))

    if original[OUTPUT_REGISTER] == optimized[OUTPUT_REGISTER]:
        verdict = paint("z matches", "green")
    else:
        verdict = paint("z MISMATCH", "red", attrs=["bold"])
    return (
        f"original:   {fmt(original)}\n"
        f"optimized:  {fmt(optimized)}\n"
        f"{verdict}\n"
    )


__all__ = [
    "NO_OP_TAG",
    "DEAD_TAG",
    "describe",
    "render_register_trace",
    "render_summary",
    "render_execution",
]
