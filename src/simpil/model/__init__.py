"""simpIL intermediate representation.

Pydantic models for expressions, statements and programs. Every node
carries a ``kind`` discriminator, so programs serialize to and from JSON
with ``model_dump_json()`` / ``model_validate_json()``.
"""

from .expressions import (
    DEFAULT_INPUT_SOURCE,
    IDENTIFIER_PATTERN,
    RESERVED_WORDS,
    WORD_MAX,
    BinaryExpr,
    BinaryOp,
    Expression,
    GetInputExpr,
    Identifier,
    LiteralExpr,
    LoadExpr,
    UnaryExpr,
    UnaryOp,
    VariableRef,
)
from .program import Program
from .statements import Assert, Assignment, Goto, IfGoto, Statement, Store

__all__ = [
    "DEFAULT_INPUT_SOURCE",
    "IDENTIFIER_PATTERN",
    "RESERVED_WORDS",
    "WORD_MAX",
    "Assert",
    "Assignment",
    "BinaryExpr",
    "BinaryOp",
    "Expression",
    "GetInputExpr",
    "Goto",
    "Identifier",
    "IfGoto",
    "LiteralExpr",
    "LoadExpr",
    "Program",
    "Statement",
    "Store",
    "UnaryExpr",
    "UnaryOp",
    "VariableRef",
]
