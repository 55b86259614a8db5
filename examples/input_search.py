"""Brute-force input search: find inputs that reach a failing assert.

A toy stand-in for a fuzzer driving the interpreter: the program is
parsed once, one engine is shared, and every candidate input gets a
fresh state.
"""

from simpil import ExecutionEngine, FaultKind, Status, initial_state, parse_program

# x = 42 reaches the failing assert; x = 5 divides by zero.
SOURCE = """
x := get_input(fuzz)
y := x * 3 + 7
if y = 133 then goto 3 else goto 4
assert 0
q := 100 / (x - 5)
"""


def search(limit: int) -> dict[FaultKind, list[int]]:
    engine = ExecutionEngine(parse_program(SOURCE))
    found: dict[FaultKind, list[int]] = {}
    for candidate in range(limit):
        state = engine.run(initial_state(inputs={"fuzz": [candidate]}))
        if state.status == Status.HALTED_ERROR:
            found.setdefault(state.fault, []).append(candidate)
    return found


if __name__ == "__main__":
    for kind, inputs in search(100).items():
        print(f"{kind.value:<20s} {inputs}")
