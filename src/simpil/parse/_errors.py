"""Frontend error type."""

from __future__ import annotations


class ParseError(Exception):
    """Error while scanning or parsing simpIL source, with location."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        self.line = line
        self.column = column
        loc = ""
        if line is not None:
            loc = f" (line {line}, column {column})"
        super().__init__(f"{message}{loc}")
