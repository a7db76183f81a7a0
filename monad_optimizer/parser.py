# monad_optimizer/parser.py
"""
Parser for MONAD program text.

Usage::

    from monad_optimizer.parser import parse_program

    program = parse_program('''
        inp w
        mul x 0      # comments run to the end of the line
        add x w
        eql x 7
    ''')

One instruction per line.  Blank lines and ``#`` comments are ignored.

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from monad_optimizer.errors import ErrorCode, ProgramParseError
from monad_optimizer.program import (
    I64_MAX,
    I64_MIN,
    Instruction,
    InstructionKind,
    Register,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1 - MONAD GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

MONAD_GRAMMAR = Grammar(r'''
    program         = (line newline)* line

    line            = hspace (instruction hspace)? comment?
    instruction     = input_instr / binary_instr

    input_instr     = "inp" hspace1 register
    binary_instr    = opcode hspace1 register hspace1 operand
    opcode          = "add" / "mul" / "div" / "mod" / "eql"

    operand         = register / integer
    register        = ~"[wxyz](?![A-Za-z0-9_])"
    integer         = ~"-?[0-9]+(?![A-Za-z0-9_])"

    comment         = ~"#[^\r\n]*"
    hspace          = ~"[ \t]*"
    hspace1         = ~"[ \t]+"
    newline         = ~"\r?\n"
''')


# ═══════════════════════════════════════════════════════════════════
#  PART 2 - PARSE TREE VISITOR (Parse Tree -> Instructions)
# ═══════════════════════════════════════════════════════════════════

class MonadProgramBuilder(NodeVisitor):
    """Collects instructions in source order while walking the parse tree."""

    grammar = MONAD_GRAMMAR
    unwrapped_exceptions = (ProgramParseError,)

    def __init__(self) -> None:
        self.instructions: List[Instruction] = []

    def generic_visit(self, node, visited_children):
        """Default: pass children through."""
        return visited_children or node

    def visit_input_instr(self, node, visited_children):
        _, _, register = visited_children
        self.instructions.append(Instruction(InstructionKind.INPUT, register))

    def visit_binary_instr(self, node, visited_children):
        kind, _, register, _, operand = visited_children
        self.instructions.append(Instruction(kind, register, operand))

    def visit_opcode(self, node, visited_children):
        return InstructionKind.from_mnemonic(node.text)

    def visit_operand(self, node, visited_children):
        return visited_children[0]

    def visit_register(self, node, visited_children):
        return Register.from_name(node.text)

    def visit_integer(self, node, visited_children):
        value = int(node.text)
        if not I64_MIN <= value <= I64_MAX:
            text = node.full_text
            raise ProgramParseError(
                f"literal {node.text} does not fit in 64 bits",
                code=ErrorCode.LITERAL_OUT_OF_RANGE,
                line=text.count("\n", 0, node.start) + 1,
                column=node.start - text.rfind("\n", 0, node.start),
            )
        return value


# ═══════════════════════════════════════════════════════════════════
#  PART 3 - PUBLIC API
# ═══════════════════════════════════════════════════════════════════

_MNEMONICS = frozenset(kind.value for kind in InstructionKind)


def _syntax_error(text: str, exc: ParseError) -> ProgramParseError:
    # PEG backtracking leaves exc.pos at the start of the offending line.
    line_start = text.rfind("\n", 0, exc.pos) + 1
    line_end = text.find("\n", exc.pos)
    if line_end < 0:
        line_end = len(text)
    source_line = text[line_start:line_end].rstrip("\r")
    words = source_line.split("#", 1)[0].split()
    if not words:
        code = ErrorCode.UNEXPECTED_TEXT
    elif words[0] in _MNEMONICS:
        code = ErrorCode.INVALID_OPERAND
    else:
        code = ErrorCode.UNKNOWN_OPCODE
    return ProgramParseError(
        f"cannot parse instruction {source_line.strip()!r}",
        code=code,
        line=exc.line(),
        column=exc.column(),
    )


def parse_program(text: str) -> List[Instruction]:
    """Parse MONAD source text into a list of instructions."""
    try:
        tree: Node = MONAD_GRAMMAR.parse(text)
    except ParseError as exc:
        raise _syntax_error(text, exc) from exc

    builder = MonadProgramBuilder()
    builder.visit(tree)
    logger.debug("parsed %d instructions", len(builder.instructions))
    return builder.instructions


def parse_file(path: Union[str, Path]) -> List[Instruction]:
    """Read and parse a MONAD program file."""
    return parse_program(Path(path).read_text(encoding="utf-8"))


__all__ = ["MONAD_GRAMMAR", "MonadProgramBuilder", "parse_program", "parse_file"]
