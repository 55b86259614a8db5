"""Shared test helpers for the simpil test suite."""

from simpil.model import (
    BinaryExpr,
    BinaryOp,
    GetInputExpr,
    LiteralExpr,
    Program,
    VariableRef,
)
from simpil.simulate import ExecutionEngine, initial_state


def lit(value):
    """Shorthand for LiteralExpr(value=...)."""
    return LiteralExpr(value=value)


def var(name):
    """Shorthand for VariableRef(name=...)."""
    return VariableRef(name=name)


def inp(source="x"):
    """Shorthand for GetInputExpr(source=...)."""
    return GetInputExpr(source=source)


def binop(op, left, right):
    return BinaryExpr(op=BinaryOp(op), left=left, right=right)


def make_program(*stmts):
    """Build a Program from statements."""
    return Program(statements=stmts)


def run_program(*stmts, max_steps=None, **state_kwargs):
    """Run statements from a fresh state and return the final state."""
    state = initial_state(**state_kwargs)
    ExecutionEngine(make_program(*stmts)).run(state, max_steps=max_steps)
    return state
