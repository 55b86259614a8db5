"""Execution state threaded through the engine."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel

from ._inputs import InputSource
from ._values import FaultKind, check_value


class Status(str, Enum):
    RUNNING = "running"
    HALTED_SUCCESS = "halted_success"
    HALTED_ERROR = "halted_error"


@dataclass
class ExecutionState:
    """Mutable state of a single run.

    Owned by exactly one run; use ``fork()`` to hand an isolated copy to
    another run.
    """

    pc: int = 0
    env: dict[str, int] = field(default_factory=dict)
    """variable name -> value"""

    memory: dict[int, int] = field(default_factory=dict)
    """address -> value"""

    inputs: InputSource = field(default_factory=InputSource)
    status: Status = Status.RUNNING
    fault: FaultKind | None = None
    fault_message: str | None = None
    steps: int = 0
    """statements executed so far"""

    @property
    def running(self) -> bool:
        return self.status == Status.RUNNING

    @property
    def halted(self) -> bool:
        return self.status != Status.RUNNING

    def fork(self) -> ExecutionState:
        """Deep copy for an independent run (e.g. another explored path)."""
        return ExecutionState(
            pc=self.pc,
            env=dict(self.env),
            memory=dict(self.memory),
            inputs=self.inputs.copy(),
            status=self.status,
            fault=self.fault,
            fault_message=self.fault_message,
            steps=self.steps,
        )

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            pc=self.pc,
            status=self.status,
            fault=self.fault,
            fault_message=self.fault_message,
            steps=self.steps,
            env=dict(self.env),
            memory=dict(sorted(self.memory.items())),
            input_cursors=self.inputs.cursors,
        )


class StateSnapshot(BaseModel):
    """Serializable view of an ``ExecutionState``."""

    pc: int
    status: Status
    fault: FaultKind | None = None
    fault_message: str | None = None
    steps: int = 0
    env: dict[str, int] = {}
    memory: dict[int, int] = {}
    input_cursors: dict[str, int] = {}


def initial_state(
    inputs: InputSource | Mapping[str, Iterable[int]] | None = None,
    memory: Mapping[int, int] | None = None,
    env: Mapping[str, int] | None = None,
) -> ExecutionState:
    """Build a fresh RUNNING state at pc 0.

    Parameters
    ----------
    inputs
        An ``InputSource`` (used as-is) or a mapping of source name to
        values.
    memory
        Pre-seeded memory cells.
    env
        Pre-seeded variable bindings.
    """
    if isinstance(inputs, InputSource):
        source = inputs
    else:
        source = InputSource(inputs)

    seeded_memory: dict[int, int] = {}
    for address, value in (memory or {}).items():
        check_value(address, "memory address")
        seeded_memory[address] = check_value(value, f"memory[{address}]")

    seeded_env: dict[str, int] = {}
    for name, value in (env or {}).items():
        if not name:
            raise ValueError("Variable name must be non-empty")
        seeded_env[name] = check_value(value, f"variable '{name}'")

    return ExecutionState(env=seeded_env, memory=seeded_memory, inputs=source)
