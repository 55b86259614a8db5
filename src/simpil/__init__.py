"""simpil: an interpreter for the simpIL intermediate language.

Quick start::

    from simpil import parse_program, simulate

    state = simulate(parse_program("x := get_input(a) * 2"), inputs={"a": [21]})
    state.env["x"]  # 42
"""

from simpil.model import Program
from simpil.parse import ParseError, parse_expression, parse_program
from simpil.simulate import (
    ExecutionEngine,
    ExecutionState,
    Fault,
    FaultKind,
    InputSource,
    SimulationError,
    Status,
    initial_state,
    simulate,
)

__all__ = [
    "ExecutionEngine",
    "ExecutionState",
    "Fault",
    "FaultKind",
    "InputSource",
    "ParseError",
    "Program",
    "SimulationError",
    "Status",
    "initial_state",
    "parse_expression",
    "parse_program",
    "simulate",
]
