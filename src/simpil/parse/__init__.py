"""simpil text frontend.

Public API::

    from simpil.parse import parse_program
    program = parse_program('''
        i := 3
        i := i - 1
        if i then goto 1 else goto 3
        assert i = 0
    ''')
"""

from __future__ import annotations

from simpil.model.expressions import Expression
from simpil.model.program import Program

from ._errors import ParseError
from ._parser import Parser
from ._scanner import Scanner, Token, TokenType


def parse_program(source: str) -> Program:
    """Parse simpIL source text into a ``Program``."""
    return Parser(Scanner(source).scan_tokens()).parse_program()


def parse_expression(source: str) -> Expression:
    """Parse a single simpIL expression."""
    parser = Parser(Scanner(source).scan_tokens())
    expr = parser.parse_expression()
    parser.expect_end()
    return expr


__all__ = [
    "ParseError",
    "Parser",
    "Scanner",
    "Token",
    "TokenType",
    "parse_expression",
    "parse_program",
]
