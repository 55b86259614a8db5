"""Value system for the interpreter.

Every runtime value is an unsigned 32-bit integer held in a Python
``int``.  Arithmetic wraps modulo 2**32; only division can fault.
"""

from __future__ import annotations

from enum import Enum

from simpil.model.expressions import BinaryOp, UnaryOp, WORD_MAX

WORD_MASK = WORD_MAX


class SimulationError(Exception):
    """Runtime error during interpretation."""


class FaultKind(str, Enum):
    """Fatal runtime conditions that halt a run."""

    UNDEFINED_VARIABLE = "UndefinedVariable"
    MEMORY_FAULT = "MemoryFault"
    DIVIDE_BY_ZERO = "DivideByZero"
    INPUT_EXHAUSTED = "InputExhausted"
    UNKNOWN_INPUT_SOURCE = "UnknownInputSource"
    INVALID_JUMP_TARGET = "InvalidJumpTarget"
    ASSERTION_FAILURE = "AssertionFailure"


class Fault(SimulationError):
    """A runtime fault raised while evaluating or executing a statement.

    The stepper turns it into a ``HALTED_ERROR`` state; it never escapes
    ``ExecutionEngine.step``.
    """

    def __init__(self, kind: FaultKind, message: str) -> None:
        self.kind = kind
        self.message = message
        super().__init__(f"{kind.value}: {message}")


# ---------------------------------------------------------------------------
# Domain helpers
# ---------------------------------------------------------------------------

def wrap(value: int) -> int:
    """Reduce an arbitrary integer into the 32-bit unsigned domain."""
    return value & WORD_MASK


def check_value(value: object, what: str = "value") -> int:
    """Validate a caller-supplied value without wrapping it.

    Raises ``ValueError`` for anything outside ``[0, 2**32)``.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{what} must be an int, got {type(value).__name__}")
    if value < 0 or value > WORD_MASK:
        raise ValueError(f"{what} {value} is outside the 32-bit unsigned range")
    return value


def truth(value: int) -> bool:
    """Conditions are true when nonzero."""
    return value != 0


def _bool(flag: bool) -> int:
    return 1 if flag else 0


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------

def apply_binop(op: BinaryOp, left: int, right: int) -> int:
    """Apply a binary operator to two in-domain values."""
    if op == BinaryOp.ADD:
        return wrap(left + right)
    if op == BinaryOp.SUB:
        return wrap(left - right)
    if op == BinaryOp.MUL:
        return wrap(left * right)
    if op == BinaryOp.DIV:
        if right == 0:
            raise Fault(FaultKind.DIVIDE_BY_ZERO, f"{left} / 0")
        return left // right
    if op == BinaryOp.MOD:
        if right == 0:
            raise Fault(FaultKind.DIVIDE_BY_ZERO, f"{left} % 0")
        return left % right

    # Comparison
    if op == BinaryOp.EQ:
        return _bool(left == right)
    if op == BinaryOp.NE:
        return _bool(left != right)
    if op == BinaryOp.LT:
        return _bool(left < right)
    if op == BinaryOp.LE:
        return _bool(left <= right)

    # Bitwise
    if op == BinaryOp.AND:
        return left & right
    if op == BinaryOp.OR:
        return left | right
    if op == BinaryOp.XOR:
        return left ^ right

    raise SimulationError(f"Unsupported binary op: {op}")


def apply_unop(op: UnaryOp, operand: int) -> int:
    """Apply a unary operator to an in-domain value."""
    if op == UnaryOp.NEG:
        return wrap(-operand)
    if op == UnaryOp.NOT:
        return operand ^ WORD_MASK
    if op == UnaryOp.LNOT:
        return _bool(operand == 0)
    raise SimulationError(f"Unsupported unary op: {op}")
