# tests/test_optimizer.py
"""
Tests for the optimization pipeline: exact outputs on small programs,
regressions, configuration modes, and randomized equivalence against the
concrete interpreter.
"""

import random

import pytest

from monad_optimizer.config import OptimizerConfig
from monad_optimizer.errors import ErrorCode, MalformedProgramError
from monad_optimizer.interpreter import execute
from monad_optimizer.optimizer import analyze, emit_instruction, optimize, run_pass
from monad_optimizer.parser import parse_program
from monad_optimizer.program import add, eql, format_program, inp, mul
from monad_optimizer.program_state import run
from tests.conftest import (
    BLOCK_PARAMS,
    all_digit_vectors,
    checked_runs,
    input_vectors,
    monad_block_source,
    optimize_or_rejected,
    random_program,
)


def _optimized_source(source: str, config=None) -> str:
    return format_program(optimize(parse_program(source), config))


# ═══════════════════════════════════════════════════════════════════════════
#  Exact outputs
# ═══════════════════════════════════════════════════════════════════════════

class TestSmallPrograms:

    @pytest.mark.parametrize("source, expected", [
        ("inp w\nadd x w\n", "inp w\n"),
        ("inp x\nadd x 0\nadd z x\n", "inp x\nadd z x\n"),
        ("inp x\ndiv x 1\nadd z x\n", "inp x\nadd z x\n"),
        ("inp z\nmul z 0\n", "inp z\nmul z 0\n"),
        ("inp y\nmul y 0\n", "inp y\n"),
        ("add w 3\nmod w 5\nadd z w\n", "add z 3\n"),
        ("inp w\nadd z w\nmul z 3\neql z z\n", "inp w\neql z z\n"),
        ("inp w\nadd z w\nmul z 0\n", "inp w\n"),
        ("add y 3\ninp w\nmul w y\nadd z w\n", "inp w\nmul w 3\nadd z w\n"),
    ])
    def test_optimized_form(self, source, expected):
        assert _optimized_source(source) == expected

    def test_empty_program(self):
        result = analyze([])
        assert result.optimized == []
        assert result.improvement_percent == 0.0

    def test_only_inputs(self):
        source = "inp w\ninp x\ninp w\n"
        assert _optimized_source(source) == source

    def test_everything_dead(self):
        result = analyze(parse_program("add x 4\nmul y 7\n"))
        assert result.optimized == []
        assert result.improvement_percent == float("inf")


class TestRegressions:
    """Programs where skipping an exact operand or an exempt eql used to
    leave a kept instruction reading a value nothing produced."""

    def test_exact_operand_written_as_literal(self):
        source = "add y 3\nadd x 1\nmul x y\nadd z x\n"
        assert _optimized_source(source) == "add z 3\n"
        assert execute(parse_program(source), [])[3] == 3

    def test_exempt_eql_compares_with_itself(self):
        source = "add z 3\nadd y 3\neql z y\n"
        optimized = optimize(parse_program(source))
        assert format_program(optimized) == "eql z z\n"
        assert execute(optimized, [])[3] == 1

    def test_identity_equal_eql(self):
        source = (
            "inp w\nadd y w\nadd x y\nmul y w\n"
            "add z y\neql z y\nadd z x\n"
        )
        original = parse_program(source)
        optimized = optimize(original)
        assert format_program(optimized) == (
            "inp w\nadd y w\nadd x y\neql z z\nadd z x\n"
        )
        for (digit,) in all_digit_vectors(1):
            assert execute(optimized, [digit])[3] == 1 + digit
        assert checked_runs(original, optimized, all_digit_vectors(1)) == 10

    def test_constant_overflow_is_malformed(self):
        source = (
            "add y 4611686018427387904\nmul y 4\ninp w\nadd x w\nadd x 1\n"
            "mul x 4611686018427387904\nmul x 4\neql x y\nadd z x\n"
        )
        original = parse_program(source)
        with pytest.raises(MalformedProgramError) as info:
            optimize(original)
        assert info.value.code is ErrorCode.INTEGER_OVERFLOW
        with pytest.raises(MalformedProgramError):
            execute(original, [0])

    def test_eql_near_the_64_bit_limit(self):
        # valid only for w = 0; larger inputs overflow x
        source = (
            "inp w\nadd x w\nadd x 1\nmul x 4611686018427387904\n"
            "add y 4611686018427387904\neql x y\nadd z x\n"
        )
        original = parse_program(source)
        optimized = optimize(original)
        assert execute(optimized, [0])[3] == 1
        assert checked_runs(original, optimized, all_digit_vectors(1)) == 1


class TestRegisterDivisors:

    @pytest.mark.parametrize("source, expected", [
        ("inp w\ninp x\ndiv w w\nadd z w\n", "inp w\ninp x\nadd z 1\n"),
        ("inp x\nmod x x\nadd z x\nadd z 3\n", "inp x\nadd z 3\n"),
        ("inp w\nadd y 5\nadd x w\nmod x y\neql x 7\nadd z x\n", "inp w\n"),
        ("inp x\nadd y 2\ndiv x y\nadd z x\n", "inp x\ndiv x 2\nadd z x\n"),
        ("inp x\nadd y 3\nmod x y\nadd z x\n", "inp x\nmod x 3\nadd z x\n"),
    ])
    def test_optimized_form_and_equivalence(self, source, expected):
        original = parse_program(source)
        optimized = optimize(original)
        assert format_program(optimized) == expected
        inputs = sum(1 for instr in original if instr.is_input)
        assert checked_runs(original, optimized, all_digit_vectors(inputs)) > 0

    def test_exact_zero_divisor_rejected_by_analysis(self):
        original = parse_program("inp w\nadd x 5\ndiv x y\nadd z x\n")
        assert optimize_or_rejected(original, all_digit_vectors(1)) is None


class TestEmitInstruction:

    def test_register_operand_holding_exact(self):
        states = run(parse_program("add y 3\n"))
        assert emit_instruction(mul("x", "y"), states.final) == mul("x", 3)

    def test_non_exact_operand_unchanged(self):
        states = run(parse_program("inp y\n"))
        assert emit_instruction(mul("x", "y"), states.final) == mul("x", "y")

    def test_exempt_eql_rewritten(self):
        states = run(parse_program("add z 3\nadd y 3\n"))
        assert emit_instruction(eql("z", "y"), states.final) == eql("z", "z")

    def test_self_compare_unchanged(self):
        states = run(parse_program("inp z\n"))
        assert emit_instruction(eql("z", "z"), states.final) == eql("z", "z")

    def test_input_unchanged(self):
        states = run([])
        assert emit_instruction(inp("w"), states.start) == inp("w")


# ═══════════════════════════════════════════════════════════════════════════
#  Passes and configuration
# ═══════════════════════════════════════════════════════════════════════════

class TestPasses:

    def test_monad_block(self):
        original = parse_program(monad_block_source(*BLOCK_PARAMS[0]))
        result = analyze(original)

        assert format_program(result.optimized) == (
            "inp w\nadd y w\nadd y 4\nadd z y\n"
        )
        assert len(result.passes) == 3
        assert result.removed == 14
        assert result.improvement_percent == pytest.approx(350.0)

    def test_first_pass_diagnostics(self):
        original = parse_program(monad_block_source(*BLOCK_PARAMS[0]))
        result = analyze(original)

        no_ops = [i for i, flag in enumerate(result.no_ops) if flag]
        assert no_ops == [1, 2, 3, 4, 8, 10, 12, 16]
        kept = [i for i, flag in enumerate(result.retained) if flag]
        assert kept == [0, 13, 14, 15, 17]
        assert len(result.states) == len(original)
        assert result.first_pass.instructions == tuple(original)

    def test_single_pass_output(self):
        original = parse_program(monad_block_source(*BLOCK_PARAMS[0]))
        first = run_pass(original)
        assert format_program(first.optimized) == (
            "inp w\nmul y 0\nadd y w\nadd y 4\nadd z y\n"
        )

    def test_max_passes_bounds_the_loop(self):
        original = parse_program(monad_block_source(*BLOCK_PARAMS[0]))
        result = analyze(original, OptimizerConfig(max_passes=1))
        assert len(result.passes) == 1
        assert len(result.optimized) == 5

    def test_no_op_only_mode(self):
        original = parse_program(monad_block_source(*BLOCK_PARAMS[0]))
        config = OptimizerConfig(eliminate_dead_code=False)
        optimized = optimize(original, config)
        assert len(optimized) == 10
        assert checked_runs(original, optimized, all_digit_vectors(1)) == 10

    def test_no_op_only_mode_keeps_operands(self):
        config = OptimizerConfig(eliminate_dead_code=False)
        source = "add y 3\nadd x 1\nmul x y\nadd z x\n"
        assert _optimized_source(source, config) == source

    def test_all_eliminations_disabled(self):
        config = OptimizerConfig(eliminate_no_ops=False, eliminate_dead_code=False)
        original = parse_program(monad_block_source(*BLOCK_PARAMS[0]))
        result = analyze(original, config)
        assert result.optimized == original
        assert len(result.passes) == 1

    def test_invalid_config_logs_warning(self, caplog):
        config = OptimizerConfig(max_passes=0)
        with caplog.at_level("WARNING", logger="monad_optimizer"):
            result = analyze(parse_program("inp w\n"), config)
        assert "max_passes must be positive" in caplog.text
        assert len(result.passes) == 1


# ═══════════════════════════════════════════════════════════════════════════
#  Equivalence
# ═══════════════════════════════════════════════════════════════════════════

class TestEquivalence:

    def test_monad_program(self, monad_program):
        result = analyze(monad_program)
        optimized = result.optimized
        assert len(optimized) < len(monad_program)
        assert sum(i.is_input for i in optimized) == len(BLOCK_PARAMS)

        vectors = [[random.Random(n).randint(0, 9) for _ in BLOCK_PARAMS]
                   for n in range(500)]
        assert checked_runs(monad_program, optimized, vectors) == 500

    @pytest.mark.parametrize("params", BLOCK_PARAMS)
    def test_each_block_exhaustively(self, params):
        original = parse_program(monad_block_source(*params))
        optimized = optimize(original)
        assert checked_runs(original, optimized, all_digit_vectors(1)) == 10

    def test_random_programs(self, rng):
        compared = 0
        for _ in range(300):
            original = random_program(rng, rng.randint(1, 30))
            vectors = input_vectors(rng, original, 12)
            optimized = optimize_or_rejected(original, vectors)
            if optimized is None:
                continue

            assert len(optimized) <= len(original)
            assert [i for i in optimized if i.is_input] == \
                [i for i in original if i.is_input]
            compared += checked_runs(original, optimized, vectors)
        assert compared > 0

    def test_idempotent(self, rng, monad_program):
        programs = [monad_program] + [random_program(rng, 25) for _ in range(50)]
        for original in programs:
            once = optimize_or_rejected(original, input_vectors(rng, original, 4))
            if once is None:
                continue
            assert optimize(once) == once
