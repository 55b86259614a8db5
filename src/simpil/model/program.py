"""Top-level program container."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .statements import Statement


class Program(BaseModel):
    """An immutable, zero-indexed sequence of statements.

    The index of a statement is its program counter value.
    """

    model_config = ConfigDict(frozen=True)

    statements: tuple[Statement, ...] = ()

    def __len__(self) -> int:
        return len(self.statements)

    def __getitem__(self, pc: int) -> Statement:
        return self.statements[pc]
