"""simpIL pretty-printer.

Walks the Pydantic IR and emits source text that parses back to an
equal model.
"""

from __future__ import annotations

import re
from io import StringIO
from typing import Union

from pydantic import BaseModel

from simpil.model.expressions import (
    BinaryExpr,
    BinaryOp,
    IDENTIFIER_PATTERN,
    RESERVED_WORDS,
    Expression,
    GetInputExpr,
    LiteralExpr,
    LoadExpr,
    UnaryExpr,
    UnaryOp,
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


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def to_text(target: Union[Program, Statement, Expression]) -> str:
    """Emit simpIL source for a Program, a statement or an expression.

    Programs render one statement per line with a trailing newline.
    """
    w = TextWriter()
    if isinstance(target, Program):
        w.write_program(target)
        return w.getvalue()
    if not isinstance(target, BaseModel):
        raise TypeError(
            f"to_text() expects Program, statement or expression, got {type(target).__name__}"
        )
    if target.kind in _STMT_KINDS:
        return w.stmt(target)
    return w.expr(target)


# ---------------------------------------------------------------------------
# Operator maps
# ---------------------------------------------------------------------------

_BINOP_SYMBOL: dict[BinaryOp, str] = {
    BinaryOp.ADD: "+",
    BinaryOp.SUB: "-",
    BinaryOp.MUL: "*",
    BinaryOp.DIV: "/",
    BinaryOp.MOD: "%",
    BinaryOp.EQ: "=",
    BinaryOp.NE: "<>",
    BinaryOp.LT: "<",
    BinaryOp.LE: "<=",
    BinaryOp.AND: "&",
    BinaryOp.OR: "|",
    BinaryOp.XOR: "^",
}

# Higher binds tighter; must agree with the parser's levels
_BINOP_PRECEDENCE: dict[BinaryOp, int] = {
    BinaryOp.OR: 1,
    BinaryOp.XOR: 2,
    BinaryOp.AND: 3,
    BinaryOp.EQ: 4,
    BinaryOp.NE: 4,
    BinaryOp.LT: 5,
    BinaryOp.LE: 5,
    BinaryOp.ADD: 6,
    BinaryOp.SUB: 6,
    BinaryOp.MUL: 7,
    BinaryOp.DIV: 7,
    BinaryOp.MOD: 7,
}

_UNARY_PRECEDENCE = 8
_PRIMARY_PRECEDENCE = 9

_UNOP_SYMBOL: dict[UnaryOp, str] = {
    UnaryOp.NEG: "-",
    UnaryOp.NOT: "~",
    UnaryOp.LNOT: "!",
}

_STMT_KINDS = frozenset({"assignment", "store", "goto", "assert", "if_goto"})


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------

class TextWriter:
    def __init__(self) -> None:
        self._buf = StringIO()

    def getvalue(self) -> str:
        return self._buf.getvalue()

    def write_program(self, program: Program) -> None:
        for stmt in program.statements:
            self._buf.write(self.stmt(stmt))
            self._buf.write("\n")

    # -- Statements ---------------------------------------------------------

    def stmt(self, stmt: Statement) -> str:
        if isinstance(stmt, Assignment):
            return f"{_name(stmt.target)} := {self.expr(stmt.value)}"
        if isinstance(stmt, Store):
            return f"store({self.expr(stmt.address)}, {self.expr(stmt.value)})"
        if isinstance(stmt, Goto):
            return f"goto {self.expr(stmt.target)}"
        if isinstance(stmt, Assert):
            return f"assert {self.expr(stmt.condition)}"
        if isinstance(stmt, IfGoto):
            return (
                f"if {self.expr(stmt.condition)}"
                f" then goto {self.expr(stmt.then_target)}"
                f" else goto {self.expr(stmt.else_target)}"
            )
        raise TypeError(f"Unsupported statement kind: {stmt.kind}")

    # -- Expressions --------------------------------------------------------

    def expr(self, expr: Expression) -> str:
        # Explicit stack: long operator chains must not hit the recursion limit
        rendered: list[str] = []
        pending: list[tuple[Expression, bool]] = [(expr, False)]
        while pending:
            node, expanded = pending.pop()
            children = _operands(node)
            if children and not expanded:
                pending.append((node, True))
                pending.extend((child, False) for child in reversed(children))
                continue
            parts = rendered[len(rendered) - len(children):]
            del rendered[len(rendered) - len(children):]
            rendered.append(self._render(node, parts))
        return rendered.pop()

    @staticmethod
    def _render(expr: Expression, parts: list[str]) -> str:
        if isinstance(expr, LiteralExpr):
            return str(expr.value)
        if isinstance(expr, VariableRef):
            return _name(expr.name)
        if isinstance(expr, LoadExpr):
            return f"load({parts[0]})"
        if isinstance(expr, GetInputExpr):
            return f"get_input({_name(expr.source)})"
        if isinstance(expr, UnaryExpr):
            operand = parts[0]
            if _precedence(expr.operand) < _UNARY_PRECEDENCE:
                operand = f"({operand})"
            return f"{_UNOP_SYMBOL[expr.op]}{operand}"
        if isinstance(expr, BinaryExpr):
            prec = _BINOP_PRECEDENCE[expr.op]
            left, right = parts
            if _precedence(expr.left) < prec:
                left = f"({left})"
            # Left-associative: an equal-precedence right operand needs parens
            if _precedence(expr.right) <= prec:
                right = f"({right})"
            return f"{left} {_BINOP_SYMBOL[expr.op]} {right}"
        raise TypeError(f"Unsupported expression kind: {expr.kind}")


def _operands(expr: Expression) -> tuple[Expression, ...]:
    if isinstance(expr, BinaryExpr):
        return (expr.left, expr.right)
    if isinstance(expr, UnaryExpr):
        return (expr.operand,)
    if isinstance(expr, LoadExpr):
        return (expr.address,)
    return ()


def _precedence(expr: Expression) -> int:
    if isinstance(expr, BinaryExpr):
        return _BINOP_PRECEDENCE[expr.op]
    if isinstance(expr, UnaryExpr):
        return _UNARY_PRECEDENCE
    return _PRIMARY_PRECEDENCE


_IDENTIFIER_RE = re.compile(IDENTIFIER_PATTERN)


def _name(name: str) -> str:
    # Nodes built with model_construct() skip validation
    if not _IDENTIFIER_RE.fullmatch(name) or name in RESERVED_WORDS:
        raise ValueError(f"Cannot render {name!r} as a simpIL identifier")
    return name
