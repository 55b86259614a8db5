"""simpil interpreter: step-wise execution of simpIL programs.

Entry point::

    from simpil.simulate import simulate

    state = simulate("x := get_input(a) + 1", inputs={"a": [41]})
    assert state.status == Status.HALTED_SUCCESS
    assert state.env["x"] == 42

Fine-grained control::

    engine = ExecutionEngine(program)
    state = initial_state(inputs={"a": [1, 2]})
    while state.running:
        engine.step(state)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from simpil.model.program import Program

from ._executor import ExecutionEngine
from ._inputs import InputSource
from ._state import ExecutionState, StateSnapshot, Status, initial_state
from ._values import Fault, FaultKind, SimulationError


def simulate(
    target: Any,
    *,
    inputs: InputSource | Mapping[str, Iterable[int]] | None = None,
    memory: Mapping[int, int] | None = None,
    env: Mapping[str, int] | None = None,
    max_steps: int | None = None,
) -> ExecutionState:
    """Run a program from a fresh state and return the final state.

    Parameters
    ----------
    target
        A ``Program``, a list of statements, or simpIL source text.
    inputs
        Input sources for ``get_input``: an ``InputSource`` or a mapping
        of source name to values.
    memory
        Pre-seeded memory cells.
    env
        Pre-seeded variable bindings.
    max_steps
        Stop after this many statements.  The returned state is still
        RUNNING if the budget ran out first.

    Returns
    -------
    ExecutionState
        The state after the run; check ``status`` and ``fault``.
    """
    program = _resolve_program(target)
    state = initial_state(inputs=inputs, memory=memory, env=env)
    return ExecutionEngine(program).run(state, max_steps=max_steps)


def _resolve_program(target: Any) -> Program:
    """Resolve a target to a Program."""
    if isinstance(target, Program):
        return target
    if isinstance(target, str):
        from simpil.parse import parse_program
        return parse_program(target)
    if isinstance(target, (list, tuple)):
        return Program(statements=tuple(target))
    raise TypeError(
        f"simulate() expects a Program, a list of statements or source text, "
        f"got {type(target).__name__}"
    )


__all__ = [
    "ExecutionEngine",
    "ExecutionState",
    "Fault",
    "FaultKind",
    "InputSource",
    "SimulationError",
    "StateSnapshot",
    "Status",
    "initial_state",
    "simulate",
]
