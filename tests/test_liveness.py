# tests/test_liveness.py
"""
Tests for the backward pass over value identities.
"""

import logging

import pytest

from monad_optimizer.liveness import (
    LivenessAnalysis,
    live_identities,
    operand_value,
    usage_exempt,
)
from monad_optimizer.parser import parse_program
from monad_optimizer.program import InstructionKind as K
from monad_optimizer.program import add, eql, inp, mul
from monad_optimizer.program_state import run
from monad_optimizer.value_ids import Vid
from monad_optimizer.values import Exact, Input, Unknown


def _analysis(source: str) -> LivenessAnalysis:
    instructions = parse_program(source)
    analysis = LivenessAnalysis(instructions, run(instructions))
    analysis.run()
    return analysis


def _vids(*numbers):
    return frozenset(Vid(n) for n in numbers)


class TestOperandValue:

    def test_literal_has_undefined_identity(self):
        states = run([inp("w")])
        value = operand_value(add("x", 7), states.final)
        assert isinstance(value, Exact)
        assert value.vid == Vid.UNDEFINED
        assert value.value == 7

    def test_register_reads_snapshot(self):
        states = run([inp("w")])
        assert operand_value(add("x", "w"), states.final) is states.final[0]


class TestUsageExempt:

    def test_mul_by_exact_zero(self):
        u = Unknown(Vid(9))
        assert usage_exempt(K.MUL, u, Exact(Vid(3), 0))
        assert usage_exempt(K.MUL, Exact(Vid(3), 0), u)
        assert not usage_exempt(K.MUL, u, Exact(Vid(3), 2))

    def test_eql_of_equal_values(self):
        u = Unknown(Vid(9))
        assert usage_exempt(K.EQUAL, u, u)
        assert usage_exempt(K.EQUAL, Exact(Vid(1), 4), Exact(Vid(2), 4))
        assert not usage_exempt(K.EQUAL, u, Unknown(Vid(10)))
        assert not usage_exempt(K.EQUAL, Input(Vid(5), 0), Input(Vid(6), 1))

    def test_other_kinds_never_exempt(self):
        u = Unknown(Vid(9))
        assert not usage_exempt(K.ADD, u, u)
        assert not usage_exempt(K.DIV, u, Exact(Vid(1), 0))


class TestLiveIdentities:

    def test_unobserved_register(self):
        analysis = _analysis("inp w\nadd x w\n")
        assert analysis.live == _vids(4)
        assert analysis.retained(0)
        assert not analysis.retained(1)

    def test_seed_is_final_z(self):
        analysis = _analysis("inp z\n")
        assert analysis.live == _vids(5)

    def test_exact_operand_not_marked(self):
        analysis = _analysis("add y 3\ninp w\nmul w y\nadd z w\n")
        assert analysis.live == _vids(4, 6, 7)
        assert not analysis.is_live(Vid(5))
        assert [analysis.retained(i) for i in range(4)] == [False, True, True, True]

    def test_sources_are_marked(self):
        analysis = _analysis("add x 2\ninp w\nmul x w\nadd z x\n")
        assert analysis.live == _vids(2, 4, 5, 6, 7)
        assert [analysis.retained(i) for i in range(4)] == [True, True, True, True]

    def test_eql_self_compare_exemption(self):
        analysis = _analysis("inp w\nadd z w\nmul z 3\neql z z\n")
        assert analysis.live == _vids(8)
        assert not analysis.is_live(Vid(7))
        assert [analysis.retained(i) for i in range(4)] == [True, False, False, True]

    def test_mul_by_zero_exemption(self):
        analysis = _analysis("inp w\nadd z w\nmul z 0\n")
        assert analysis.live == _vids(7)
        assert [analysis.retained(i) for i in range(3)] == [True, False, True]

    def test_unchanged_destination_marks_nothing(self):
        analysis = _analysis("add w 3\nmod w 5\nadd z w\n")
        assert analysis.live == _vids(1, 4, 5)

    def test_length_mismatch(self):
        states = run([inp("w")])
        with pytest.raises(ValueError):
            live_identities(states.start, states.snapshots, [inp("w"), add("x", 1)])

    def test_empty_program(self):
        states = run([])
        assert live_identities(states.start, states.snapshots, []) == _vids(4)


class TestLivenessAnalysis:

    def test_live_before_run(self):
        instructions = [inp("w")]
        analysis = LivenessAnalysis(instructions, run(instructions))
        with pytest.raises(RuntimeError):
            analysis.live

    def test_inputs_always_retained(self):
        analysis = _analysis("inp w\ninp x\ninp y\n")
        assert all(analysis.retained(i) for i in range(3))
        assert analysis.no_op_instructions() == []

    def test_no_op_instructions(self):
        analysis = _analysis("add w 3\nmod w 5\nadd z w\n")
        assert analysis.no_op_instructions() == [1]
        assert analysis.dead_instructions() == []
        assert not analysis.retained(1)

    def test_dead_instructions(self):
        analysis = _analysis("inp w\nadd z w\nmul z 3\neql z z\n")
        assert analysis.dead_instructions() == [1, 2]
        assert analysis.no_op_instructions() == []

    def test_no_op_is_not_dead(self):
        analysis = _analysis("inp x\ndiv x 1\nadd z x\n")
        assert analysis.no_op_instructions() == [1]
        assert analysis.dead_instructions() == []
        assert [analysis.retained(i) for i in range(3)] == [True, False, True]

    def test_mul_by_zero_kept_when_observed(self):
        instructions = [inp("z"), mul("z", 0)]
        analysis = LivenessAnalysis(instructions, run(instructions))
        analysis.run()
        assert analysis.retained(1)

    def test_eql_result_observed(self):
        instructions = [inp("w"), eql("z", "w")]
        analysis = LivenessAnalysis(instructions, run(instructions))
        analysis.run()
        assert analysis.is_live(Vid(5))
        assert analysis.retained(1)

    def test_retention_count_skipped_unless_debugging(self, caplog, monkeypatch):
        def _fail(self, index):
            raise AssertionError("retained() called without debug logging")

        caplog.set_level(logging.INFO, logger="monad_optimizer.liveness")
        monkeypatch.setattr(LivenessAnalysis, "retained", _fail)
        _analysis("inp w\nadd x w\nadd z 3\n")
        assert "instructions retained" not in caplog.text

    def test_retention_count_logged_when_debugging(self, caplog):
        caplog.set_level(logging.DEBUG, logger="monad_optimizer.liveness")
        _analysis("inp w\nadd x w\nadd z 3\n")
        assert "2/3 instructions retained" in caplog.text
