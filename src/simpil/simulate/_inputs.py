"""Named input streams consumed by ``get_input``."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from ._values import Fault, FaultKind, check_value


class InputSource:
    """Registry of named, ordered value streams with read cursors.

    Cursors only move forward.  A source is registered once with its
    full contents before the run starts.

    Parameters
    ----------
    streams : Mapping[str, Iterable[int]], optional
        Source name -> values, in read order.
    """

    def __init__(self, streams: Mapping[str, Iterable[int]] | None = None) -> None:
        self._values: dict[str, tuple[int, ...]] = {}
        self._cursors: dict[str, int] = {}
        for name, values in (streams or {}).items():
            self.register(name, values)

    def register(self, name: str, values: Iterable[int]) -> None:
        if not name:
            raise ValueError("Input source name must be non-empty")
        if name in self._values:
            raise ValueError(f"Input source '{name}' is already registered")
        self._values[name] = tuple(
            check_value(v, f"input '{name}'[{i}]") for i, v in enumerate(values)
        )
        self._cursors[name] = 0

    def read(self, name: str) -> int:
        """Return the next value of *name* and advance its cursor."""
        if name not in self._values:
            raise Fault(
                FaultKind.UNKNOWN_INPUT_SOURCE,
                f"Input source '{name}' is not registered. "
                f"Available: {sorted(self._values)}",
            )
        cursor = self._cursors[name]
        values = self._values[name]
        if cursor >= len(values):
            raise Fault(
                FaultKind.INPUT_EXHAUSTED,
                f"Input source '{name}' exhausted after {len(values)} values",
            )
        self._cursors[name] = cursor + 1
        return values[cursor]

    def position(self, name: str) -> int:
        """Number of values already consumed from *name*."""
        return self._cursors[name]

    def remaining(self, name: str) -> int:
        return len(self._values[name]) - self._cursors[name]

    @property
    def names(self) -> list[str]:
        return list(self._values)

    @property
    def cursors(self) -> dict[str, int]:
        return dict(self._cursors)

    def copy(self) -> InputSource:
        """Independent copy sharing no cursor state."""
        clone = InputSource()
        clone._values = dict(self._values)
        clone._cursors = dict(self._cursors)
        return clone

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __repr__(self) -> str:
        parts = ", ".join(
            f"{n}={self._cursors[n]}/{len(v)}" for n, v in self._values.items()
        )
        return f"InputSource({parts})"
