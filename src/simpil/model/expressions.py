"""Expression AST nodes for simpIL."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

WORD_MAX = 0xFFFFFFFF

DEFAULT_INPUT_SOURCE = "stdin"

IDENTIFIER_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"

# Must agree with the scanner's keyword table
RESERVED_WORDS = frozenset(
    {"store", "goto", "assert", "if", "then", "else", "load", "get_input"}
)


def _reject_reserved(name: str) -> str:
    if name in RESERVED_WORDS:
        raise ValueError(f"'{name}' is a reserved word")
    return name


# Variable and input-source names: anything the scanner reads back as IDENTIFIER
Identifier = Annotated[
    str, Field(pattern=IDENTIFIER_PATTERN), AfterValidator(_reject_reserved)
]


class BinaryOp(str, Enum):
    ADD = "ADD"
    SUB = "SUB"
    MUL = "MUL"
    DIV = "DIV"
    MOD = "MOD"
    EQ = "EQ"
    NE = "NE"
    LT = "LT"
    LE = "LE"
    AND = "AND"
    OR = "OR"
    XOR = "XOR"


class UnaryOp(str, Enum):
    NEG = "NEG"
    NOT = "NOT"
    LNOT = "LNOT"


class LiteralExpr(BaseModel):
    """A 32-bit unsigned constant."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["literal"] = "literal"
    value: int = Field(ge=0, le=WORD_MAX)


class VariableRef(BaseModel):
    """Reference to a variable by name."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["variable_ref"] = "variable_ref"
    name: Identifier


class LoadExpr(BaseModel):
    """Memory read: load(address)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["load"] = "load"
    address: Expression


class BinaryExpr(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["binary"] = "binary"
    op: BinaryOp
    left: Expression
    right: Expression


class UnaryExpr(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["unary"] = "unary"
    op: UnaryOp
    operand: Expression


class GetInputExpr(BaseModel):
    """Pop the next value from a named input source."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["get_input"] = "get_input"
    source: Identifier = DEFAULT_INPUT_SOURCE


Expression = Annotated[
    Union[
        LiteralExpr,
        VariableRef,
        LoadExpr,
        BinaryExpr,
        UnaryExpr,
        GetInputExpr,
    ],
    Field(discriminator="kind"),
]

# Rebuild models with recursive Expression references.
LoadExpr.model_rebuild()
BinaryExpr.model_rebuild()
UnaryExpr.model_rebuild()
