"""Execution engine: single-step interpreter for simpIL programs.

The ``ExecutionEngine`` holds only the immutable program.  All mutable
data lives in the ``ExecutionState`` passed to each call, so one engine
can drive any number of independent states.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from simpil.model.expressions import (
    BinaryExpr,
    Expression,
    GetInputExpr,
    LiteralExpr,
    LoadExpr,
    UnaryExpr,
    VariableRef,
)
from simpil.model.program import Program
from simpil.model.statements import (
    Assert,
    Assignment,
    Goto,
    IfGoto,
    Statement,
    Store,
)

from ._state import ExecutionState, Status
from ._values import (
    Fault,
    FaultKind,
    SimulationError,
    apply_binop,
    apply_unop,
    truth,
)

logger = logging.getLogger(__name__)


class ExecutionEngine:
    """Interpreter for one program.

    Parameters
    ----------
    program : Program
        The statements to execute.  Never mutated.
    """

    def __init__(self, program: Program) -> None:
        self.program = program

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def step(self, state: ExecutionState) -> ExecutionState:
        """Execute the statement at ``state.pc``.

        The state is updated in place and returned.  Calling ``step`` on a
        halted state does nothing.
        """
        if state.halted:
            return state

        size = len(self.program)
        if state.pc < 0 or state.pc > size:
            raise SimulationError(
                f"Program counter {state.pc} outside program (0..{size})"
            )
        if state.pc == size:
            self._halt_success(state)
            return state

        stmt = self.program[state.pc]
        logger.debug("pc=%d %s", state.pc, stmt.kind)
        state.steps += 1
        try:
            self._exec_stmt(stmt, state)
        except Fault as fault:
            state.status = Status.HALTED_ERROR
            state.fault = fault.kind
            state.fault_message = fault.message
            logger.warning(
                "Halted with %s at pc=%d: %s",
                fault.kind.value, state.pc, fault.message,
            )
            return state

        if state.pc == size:
            self._halt_success(state)
        return state

    def run(self, state: ExecutionState, max_steps: int | None = None) -> ExecutionState:
        """Step until the state halts.

        With *max_steps*, return early (still RUNNING) once that many
        statements have executed in this call.
        """
        if max_steps is not None and max_steps < 0:
            raise ValueError(f"max_steps must be >= 0, got {max_steps}")

        start = state.steps
        while state.running:
            if max_steps is not None and state.steps - start >= max_steps:
                logger.info(
                    "Step budget of %d exhausted at pc=%d", max_steps, state.pc,
                )
                break
            self.step(state)
        return state

    def evaluate(self, expr: Expression, state: ExecutionState) -> int:
        """Evaluate *expr* against *state*.

        Never writes the environment or memory; ``get_input`` advances the
        input cursor.  Raises ``Fault``.
        """
        return self._eval(expr, state)

    @staticmethod
    def _halt_success(state: ExecutionState) -> None:
        state.status = Status.HALTED_SUCCESS
        logger.info("Halted successfully at pc=%d after %d steps", state.pc, state.steps)

    # -----------------------------------------------------------------------
    # Statement dispatch
    # -----------------------------------------------------------------------

    def _exec_stmt(self, stmt: Statement, state: ExecutionState) -> None:
        handler = self._STMT_DISPATCH.get(stmt.kind)
        if handler is None:
            raise SimulationError(f"Unsupported statement kind: {stmt.kind}")
        handler(self, stmt, state)

    def _exec_assignment(self, stmt: Assignment, state: ExecutionState) -> None:
        value = self._eval(stmt.value, state)
        state.env[stmt.target] = value
        state.pc += 1

    def _exec_store(self, stmt: Store, state: ExecutionState) -> None:
        # Address first, then value
        address = self._eval(stmt.address, state)
        value = self._eval(stmt.value, state)
        state.memory[address] = value
        state.pc += 1

    def _exec_goto(self, stmt: Goto, state: ExecutionState) -> None:
        state.pc = self._jump_target(stmt.target, state)

    def _exec_assert(self, stmt: Assert, state: ExecutionState) -> None:
        if not truth(self._eval(stmt.condition, state)):
            raise Fault(
                FaultKind.ASSERTION_FAILURE,
                f"Assertion failed at pc={state.pc}",
            )
        state.pc += 1

    def _exec_if_goto(self, stmt: IfGoto, state: ExecutionState) -> None:
        # The untaken target expression is never evaluated
        if truth(self._eval(stmt.condition, state)):
            state.pc = self._jump_target(stmt.then_target, state)
        else:
            state.pc = self._jump_target(stmt.else_target, state)

    def _jump_target(self, expr: Expression, state: ExecutionState) -> int:
        target = self._eval(expr, state)
        if target >= len(self.program):
            raise Fault(
                FaultKind.INVALID_JUMP_TARGET,
                f"Jump target {target} out of range (0..{len(self.program) - 1})",
            )
        return target

    # Statement dispatch table
    _STMT_DISPATCH: dict[str, Callable[[ExecutionEngine, Statement, ExecutionState], None]] = {
        "assignment": _exec_assignment,
        "store": _exec_store,
        "goto": _exec_goto,
        "assert": _exec_assert,
        "if_goto": _exec_if_goto,
    }

    # -----------------------------------------------------------------------
    # Expression dispatch
    # -----------------------------------------------------------------------

    def _eval(self, expr: Expression, state: ExecutionState) -> int:
        """Post-order walk with an explicit stack.

        Operands are fully evaluated left to right before their parent, so
        expression depth is bounded by memory rather than the call stack.
        """
        values: list[int] = []
        pending: list[tuple[Expression, bool]] = [(expr, False)]
        while pending:
            node, expanded = pending.pop()
            handler = self._EXPR_DISPATCH.get(node.kind)
            if handler is None:
                raise SimulationError(f"Unsupported expression kind: {node.kind}")
            children = self._EXPR_OPERANDS[node.kind](node)
            if children and not expanded:
                pending.append((node, True))
                pending.extend((child, False) for child in reversed(children))
                continue
            operands = tuple(values[len(values) - len(children):])
            del values[len(values) - len(children):]
            values.append(handler(self, node, operands, state))
        return values.pop()

    def _eval_literal(self, expr: LiteralExpr, operands: tuple[int, ...], state: ExecutionState) -> int:
        return expr.value

    def _eval_variable_ref(self, expr: VariableRef, operands: tuple[int, ...], state: ExecutionState) -> int:
        name = expr.name
        if name in state.env:
            return state.env[name]
        raise Fault(FaultKind.UNDEFINED_VARIABLE, f"Variable '{name}' is not bound")

    def _eval_load(self, expr: LoadExpr, operands: tuple[int, ...], state: ExecutionState) -> int:
        (address,) = operands
        if address in state.memory:
            return state.memory[address]
        raise Fault(FaultKind.MEMORY_FAULT, f"Load from unwritten address {address}")

    def _eval_binary(self, expr: BinaryExpr, operands: tuple[int, ...], state: ExecutionState) -> int:
        left, right = operands
        return apply_binop(expr.op, left, right)

    def _eval_unary(self, expr: UnaryExpr, operands: tuple[int, ...], state: ExecutionState) -> int:
        (operand,) = operands
        return apply_unop(expr.op, operand)

    def _eval_get_input(self, expr: GetInputExpr, operands: tuple[int, ...], state: ExecutionState) -> int:
        return state.inputs.read(expr.source)

    # Sub-expressions of each kind, in evaluation order
    _EXPR_OPERANDS: dict[str, Callable[[Expression], tuple[Expression, ...]]] = {
        "literal": lambda e: (),
        "variable_ref": lambda e: (),
        "load": lambda e: (e.address,),
        "binary": lambda e: (e.left, e.right),
        "unary": lambda e: (e.operand,),
        "get_input": lambda e: (),
    }

    # Expression dispatch table
    _EXPR_DISPATCH: dict[str, Callable[[ExecutionEngine, Expression, tuple[int, ...], ExecutionState], int]] = {
        "literal": _eval_literal,
        "variable_ref": _eval_variable_ref,
        "load": _eval_load,
        "binary": _eval_binary,
        "unary": _eval_unary,
        "get_input": _eval_get_input,
    }
