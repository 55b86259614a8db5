"""Tests for the execution engine."""

import logging
from typing import get_args

import pytest

from conftest import binop, inp, lit, make_program, run_program, var

from simpil.model import (
    Assert,
    Assignment,
    Expression,
    Goto,
    IfGoto,
    LoadExpr,
    Statement,
    Store,
    UnaryExpr,
    UnaryOp,
)
from simpil.simulate import (
    ExecutionEngine,
    FaultKind,
    SimulationError,
    Status,
    initial_state,
)
from simpil.simulate._values import Fault


def _evaluate(expr, **state_kwargs):
    state = initial_state(**state_kwargs)
    return ExecutionEngine(make_program()).evaluate(expr, state), state


def _kinds(annotated):
    union = get_args(annotated)[0]
    return {cls.model_fields["kind"].default for cls in get_args(union)}


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

class TestEvaluate:
    def test_literal(self):
        value, _ = _evaluate(lit(42))
        assert value == 42

    def test_variable(self):
        value, _ = _evaluate(var("a"), env={"a": 9})
        assert value == 9

    def test_undefined_variable(self):
        with pytest.raises(Fault, match="'nope' is not bound") as exc_info:
            _evaluate(var("nope"))
        assert exc_info.value.kind == FaultKind.UNDEFINED_VARIABLE

    def test_load(self):
        value, _ = _evaluate(LoadExpr(address=lit(10)), memory={10: 42})
        assert value == 42

    def test_load_unwritten_address_faults(self):
        with pytest.raises(Fault) as exc_info:
            _evaluate(LoadExpr(address=lit(10)), memory={11: 1})
        assert exc_info.value.kind == FaultKind.MEMORY_FAULT

    def test_load_computed_address(self):
        expr = LoadExpr(address=binop("ADD", var("base"), lit(4)))
        value, _ = _evaluate(expr, env={"base": 100}, memory={104: 7})
        assert value == 7

    def test_add_wraps(self):
        value, _ = _evaluate(binop("ADD", lit(4294967295), lit(1)))
        assert value == 0

    def test_sub_wraps(self):
        value, _ = _evaluate(binop("SUB", lit(0), lit(1)))
        assert value == 4294967295

    def test_eq_yields_one_or_zero(self):
        assert _evaluate(binop("EQ", lit(3), lit(3)))[0] == 1
        assert _evaluate(binop("EQ", lit(3), lit(4)))[0] == 0

    def test_divide_by_zero(self):
        with pytest.raises(Fault) as exc_info:
            _evaluate(binop("DIV", lit(5), lit(0)))
        assert exc_info.value.kind == FaultKind.DIVIDE_BY_ZERO

    def test_unary(self):
        value, _ = _evaluate(UnaryExpr(op=UnaryOp.NEG, operand=lit(1)))
        assert value == 4294967295

    def test_get_input_advances_cursor(self):
        value, state = _evaluate(inp("x"), inputs={"x": [5, 7]})
        assert value == 5
        assert state.inputs.position("x") == 1

    def test_get_input_sequence(self):
        state = initial_state(inputs={"x": [5, 7]})
        engine = ExecutionEngine(make_program())
        assert engine.evaluate(inp("x"), state) == 5
        assert engine.evaluate(inp("x"), state) == 7
        with pytest.raises(Fault) as exc_info:
            engine.evaluate(inp("x"), state)
        assert exc_info.value.kind == FaultKind.INPUT_EXHAUSTED

    def test_get_input_unknown_source(self):
        with pytest.raises(Fault) as exc_info:
            _evaluate(inp("y"), inputs={"x": [1]})
        assert exc_info.value.kind == FaultKind.UNKNOWN_INPUT_SOURCE

    def test_binary_evaluates_left_then_right(self):
        value, _ = _evaluate(binop("SUB", inp("a"), inp("a")), inputs={"a": [10, 3]})
        assert value == 7

    def test_left_fault_skips_right(self):
        expr = binop("ADD", var("missing"), inp("a"))
        with pytest.raises(Fault) as exc_info:
            _evaluate(expr, inputs={"a": [1]})
        assert exc_info.value.kind == FaultKind.UNDEFINED_VARIABLE

    def test_evaluate_never_writes_state(self):
        expr = binop("ADD", LoadExpr(address=lit(1)), var("v"))
        value, state = _evaluate(expr, env={"v": 2}, memory={1: 3})
        assert value == 5
        assert state.env == {"v": 2}
        assert state.memory == {1: 3}

    def test_long_left_chain(self):
        expr = lit(1)
        for _ in range(4999):
            expr = binop("ADD", expr, lit(1))
        value, _ = _evaluate(expr)
        assert value == 5000

    def test_long_chain_keeps_left_to_right_order(self):
        expr = inp("a")
        for _ in range(2999):
            expr = binop("SUB", expr, inp("a"))
        value, state = _evaluate(expr, inputs={"a": [3000] + [1] * 2999})
        assert value == 1
        assert state.inputs.remaining("a") == 0

    def test_deeply_nested_unary(self):
        expr = lit(5)
        for _ in range(4000):
            expr = UnaryExpr(op=UnaryOp.NEG, operand=expr)
        value, _ = _evaluate(expr)
        assert value == 5


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------

class TestAssignment:
    def test_binds_and_advances(self):
        state = run_program(Assignment(target="x", value=lit(42)))
        assert state.env == {"x": 42}
        assert state.pc == 1

    def test_overwrites(self):
        state = run_program(
            Assignment(target="x", value=lit(1)),
            Assignment(target="x", value=binop("ADD", var("x"), lit(1))),
        )
        assert state.env["x"] == 2

    def test_fault_leaves_environment_untouched(self):
        state = run_program(
            Assignment(target="x", value=lit(1)),
            Assignment(target="x", value=binop("DIV", lit(5), lit(0))),
        )
        assert state.status == Status.HALTED_ERROR
        assert state.fault == FaultKind.DIVIDE_BY_ZERO
        assert state.env == {"x": 1}
        assert state.pc == 1


class TestStore:
    def test_store_then_load(self):
        state = run_program(
            Store(address=lit(10), value=lit(42)),
            Assignment(target="v", value=LoadExpr(address=lit(10))),
        )
        assert state.status == Status.HALTED_SUCCESS
        assert state.memory == {10: 42}
        assert state.env["v"] == 42

    def test_address_evaluated_before_value(self):
        state = run_program(
            Store(address=inp("a"), value=inp("a")),
            inputs={"a": [100, 5]},
        )
        assert state.memory == {100: 5}

    def test_fault_in_value_leaves_memory_untouched(self):
        state = run_program(
            Store(address=inp("a"), value=binop("DIV", lit(1), lit(0))),
            inputs={"a": [100]},
        )
        assert state.fault == FaultKind.DIVIDE_BY_ZERO
        assert state.memory == {}
        # The address sub-expression completed before the fault
        assert state.inputs.position("a") == 1

    def test_overwrites_cell(self):
        state = run_program(
            Store(address=lit(3), value=lit(1)),
            Store(address=lit(3), value=lit(2)),
        )
        assert state.memory == {3: 2}

    def test_wrapped_address(self):
        state = run_program(Store(address=binop("SUB", lit(0), lit(1)), value=lit(9)))
        assert state.memory == {4294967295: 9}


class TestGoto:
    def test_jumps_forward(self):
        state = run_program(
            Goto(target=lit(2)),
            Assignment(target="skipped", value=lit(1)),
            Assignment(target="x", value=lit(2)),
        )
        assert state.status == Status.HALTED_SUCCESS
        assert "skipped" not in state.env
        assert state.steps == 2

    def test_computed_target(self):
        state = run_program(
            Assignment(target="t", value=lit(1)),
            Goto(target=binop("ADD", var("t"), lit(2))),
            Assignment(target="skipped", value=lit(1)),
            Assignment(target="x", value=lit(2)),
        )
        assert state.env == {"t": 1, "x": 2}

    def test_target_equal_to_length_faults(self):
        state = run_program(
            Goto(target=lit(2)),
            Assignment(target="x", value=lit(1)),
        )
        assert state.status == Status.HALTED_ERROR
        assert state.fault == FaultKind.INVALID_JUMP_TARGET
        assert state.pc == 0

    def test_negative_target_faults(self):
        state = run_program(Goto(target=binop("SUB", lit(0), lit(1))))
        assert state.fault == FaultKind.INVALID_JUMP_TARGET
        assert "4294967295" in state.fault_message

    def test_loop_counts_down(self):
        state = run_program(
            Assignment(target="i", value=lit(3)),
            Assignment(target="i", value=binop("SUB", var("i"), lit(1))),
            IfGoto(condition=var("i"), then_target=lit(1), else_target=lit(3)),
            Assert(condition=binop("EQ", var("i"), lit(0))),
        )
        assert state.status == Status.HALTED_SUCCESS
        assert state.env["i"] == 0
        assert state.steps == 1 + 3 * 2 + 1


class TestAssert:
    def test_zero_fails_without_advancing(self):
        state = run_program(
            Assignment(target="x", value=lit(1)),
            Assert(condition=lit(0)),
            Assignment(target="y", value=lit(1)),
        )
        assert state.status == Status.HALTED_ERROR
        assert state.fault == FaultKind.ASSERTION_FAILURE
        assert state.pc == 1
        assert "y" not in state.env

    def test_nonzero_passes(self):
        state = run_program(Assert(condition=lit(1)), Assert(condition=lit(2)))
        assert state.status == Status.HALTED_SUCCESS
        assert state.pc == 2

    def test_fault_in_condition(self):
        state = run_program(Assert(condition=var("missing")))
        assert state.fault == FaultKind.UNDEFINED_VARIABLE


class TestIfGoto:
    def test_true_branch_skips_else_target(self):
        state = run_program(
            IfGoto(condition=lit(1), then_target=lit(1), else_target=inp("x")),
            Assignment(target="done", value=lit(1)),
            inputs={"x": [1]},
        )
        assert state.status == Status.HALTED_SUCCESS
        assert state.inputs.position("x") == 0

    def test_false_branch_skips_then_target(self):
        state = run_program(
            IfGoto(condition=lit(0), then_target=inp("x"), else_target=lit(1)),
            Assignment(target="done", value=lit(1)),
            inputs={"x": [1]},
        )
        assert state.status == Status.HALTED_SUCCESS
        assert state.inputs.position("x") == 0

    def test_untaken_faulting_target_is_harmless(self):
        state = run_program(
            IfGoto(condition=lit(0), then_target=binop("DIV", lit(1), lit(0)), else_target=lit(1)),
            Assignment(target="done", value=lit(1)),
        )
        assert state.status == Status.HALTED_SUCCESS

    def test_any_nonzero_condition_takes_then(self):
        state = run_program(
            IfGoto(condition=lit(7), then_target=lit(2), else_target=lit(1)),
            Assignment(target="skipped", value=lit(1)),
            Assignment(target="taken", value=lit(1)),
        )
        assert state.env == {"taken": 1}

    def test_taken_target_is_validated(self):
        state = run_program(
            IfGoto(condition=lit(0), then_target=lit(0), else_target=lit(5)),
        )
        assert state.fault == FaultKind.INVALID_JUMP_TARGET
        assert state.pc == 0


# ---------------------------------------------------------------------------
# Step / run
# ---------------------------------------------------------------------------

class TestStep:
    def test_straight_line_halts_after_n_steps(self):
        program = make_program(*[Assignment(target=f"v{i}", value=lit(i)) for i in range(4)])
        engine = ExecutionEngine(program)
        state = initial_state()
        for _ in range(4):
            assert state.status == Status.RUNNING
            engine.step(state)
        assert state.status == Status.HALTED_SUCCESS
        assert state.pc == 4
        assert state.steps == 4

    def test_step_returns_same_state(self):
        engine = ExecutionEngine(make_program(Assignment(target="x", value=lit(1))))
        state = initial_state()
        assert engine.step(state) is state

    def test_step_on_halted_state_is_noop(self):
        engine = ExecutionEngine(make_program(Assert(condition=lit(0))))
        state = engine.run(initial_state())
        assert state.status == Status.HALTED_ERROR
        engine.step(state)
        assert state.steps == 1
        assert state.pc == 0

    def test_empty_program_halts_without_steps(self):
        engine = ExecutionEngine(make_program())
        state = engine.step(initial_state())
        assert state.status == Status.HALTED_SUCCESS
        assert state.steps == 0

    def test_pc_outside_program_is_an_error(self):
        engine = ExecutionEngine(make_program(Assert(condition=lit(1))))
        state = initial_state()
        state.pc = 5
        with pytest.raises(SimulationError, match="outside program"):
            engine.step(state)

    def test_fault_records_message(self):
        state = run_program(Assignment(target="x", value=LoadExpr(address=lit(8))))
        assert state.fault == FaultKind.MEMORY_FAULT
        assert state.fault_message == "Load from unwritten address 8"


class TestRun:
    def test_straight_line(self):
        state = run_program(*[Assignment(target="x", value=lit(i)) for i in range(6)])
        assert state.status == Status.HALTED_SUCCESS
        assert state.pc == 6
        assert state.steps == 6

    def test_max_steps_stops_infinite_loop(self):
        engine = ExecutionEngine(make_program(Goto(target=lit(0))))
        state = engine.run(initial_state(), max_steps=5)
        assert state.status == Status.RUNNING
        assert state.steps == 5

    def test_run_resumes(self):
        engine = ExecutionEngine(make_program(Goto(target=lit(0))))
        state = engine.run(initial_state(), max_steps=5)
        engine.run(state, max_steps=3)
        assert state.steps == 8

    def test_max_steps_larger_than_needed(self):
        state = run_program(Assignment(target="x", value=lit(1)), max_steps=10)
        assert state.status == Status.HALTED_SUCCESS

    def test_negative_max_steps_rejected(self):
        engine = ExecutionEngine(make_program())
        with pytest.raises(ValueError, match="max_steps"):
            engine.run(initial_state(), max_steps=-1)

    def test_input_exhaustion_halts_run(self):
        state = run_program(
            Assignment(target="a", value=inp("x")),
            Assignment(target="b", value=inp("x")),
            Assignment(target="c", value=inp("x")),
            inputs={"x": [5, 7]},
        )
        assert state.fault == FaultKind.INPUT_EXHAUSTED
        assert state.env == {"a": 5, "b": 7}
        assert state.pc == 2

    def test_one_engine_many_states(self):
        engine = ExecutionEngine(make_program(Assignment(target="x", value=inp("a"))))
        first = engine.run(initial_state(inputs={"a": [1]}))
        second = engine.run(initial_state(inputs={"a": [2]}))
        assert first.env == {"x": 1}
        assert second.env == {"x": 2}

    def test_logs_fault(self, caplog):
        with caplog.at_level(logging.WARNING, logger="simpil.simulate._executor"):
            run_program(Assert(condition=lit(0)))
        assert "AssertionFailure" in caplog.text


# ---------------------------------------------------------------------------
# Dispatch coverage
# ---------------------------------------------------------------------------

class TestDispatch:
    def test_every_statement_kind_has_a_handler(self):
        assert set(ExecutionEngine._STMT_DISPATCH) == _kinds(Statement)

    def test_every_expression_kind_has_a_handler(self):
        assert set(ExecutionEngine._EXPR_DISPATCH) == _kinds(Expression)

    def test_every_expression_kind_has_operands(self):
        assert set(ExecutionEngine._EXPR_OPERANDS) == _kinds(Expression)
