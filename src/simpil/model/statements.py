"""Statement AST nodes for simpIL.

Control flow is flat: every jump names a statement index, computed at
runtime from an arbitrary expression.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .expressions import Expression, Identifier


class Assignment(BaseModel):
    """``target := value``"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["assignment"] = "assignment"
    target: Identifier
    value: Expression


class Store(BaseModel):
    """``store(address, value)``"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["store"] = "store"
    address: Expression
    value: Expression


class Goto(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["goto"] = "goto"
    target: Expression


class Assert(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["assert"] = "assert"
    condition: Expression


class IfGoto(BaseModel):
    """``if condition then goto then_target else goto else_target``

    Only the target expression of the taken branch is ever evaluated.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["if_goto"] = "if_goto"
    condition: Expression
    then_target: Expression
    else_target: Expression


Statement = Annotated[
    Union[
        Assignment,
        Store,
        Goto,
        Assert,
        IfGoto,
    ],
    Field(discriminator="kind"),
]
