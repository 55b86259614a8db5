"""Turn simpIL source text into tokens."""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum

from simpil.model.expressions import WORD_MAX

from ._errors import ParseError


class TokenType(str, Enum):
    # Single-character tokens
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    COMMA = ","
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    EQUAL = "="
    AMPERSAND = "&"
    PIPE = "|"
    CARET = "^"
    TILDE = "~"
    BANG = "!"
    LESS = "<"

    # Two-character tokens
    ASSIGN = ":="
    LESS_EQUAL = "<="
    NOT_EQUAL = "<>"

    # Literals
    INTEGER = "INTEGER"
    IDENTIFIER = "IDENTIFIER"

    # Keywords
    STORE = "store"
    GOTO = "goto"
    ASSERT = "assert"
    IF = "if"
    THEN = "then"
    ELSE = "else"
    LOAD = "load"
    GET_INPUT = "get_input"

    EOF = "EOF"


KEYWORDS: dict[str, TokenType] = {
    t.value: t
    for t in (
        TokenType.STORE,
        TokenType.GOTO,
        TokenType.ASSERT,
        TokenType.IF,
        TokenType.THEN,
        TokenType.ELSE,
        TokenType.LOAD,
        TokenType.GET_INPUT,
    )
}

_DIGITS = frozenset(string.digits)
_IDENT_START = frozenset(string.ascii_letters + "_")
_IDENT_CHARS = _IDENT_START | _DIGITS

_SINGLE: dict[str, TokenType] = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    ",": TokenType.COMMA,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "%": TokenType.PERCENT,
    "=": TokenType.EQUAL,
    "&": TokenType.AMPERSAND,
    "|": TokenType.PIPE,
    "^": TokenType.CARET,
    "~": TokenType.TILDE,
    "!": TokenType.BANG,
}


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    line: int
    column: int
    value: int | None = None
    """parsed value for INTEGER tokens"""


class Scanner:
    """Single-pass tokenizer with 1-indexed line/column tracking."""

    def __init__(self, source: str) -> None:
        self.source = source
        self._pos = 0
        self._line = 1
        self._column = 1

    def scan_tokens(self) -> list[Token]:
        """Tokenize the whole source; the last token is always EOF."""
        tokens: list[Token] = []
        while True:
            token = self._next_token()
            tokens.append(token)
            if token.type == TokenType.EOF:
                return tokens

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        return self.source[idx] if idx < len(self.source) else ""

    def _advance(self) -> str:
        ch = self.source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    def _skip_trivia(self) -> None:
        while self._pos < len(self.source):
            ch = self._peek()
            if ch in " \t\r\n":
                self._advance()
            elif ch == "#":
                while self._pos < len(self.source) and self._peek() != "\n":
                    self._advance()
            else:
                return

    def _next_token(self) -> Token:
        self._skip_trivia()
        line, column = self._line, self._column
        if self._pos >= len(self.source):
            return Token(TokenType.EOF, "", line, column)

        start = self._pos
        ch = self._advance()

        if ch in _DIGITS:
            while self._peek() in _DIGITS:
                self._advance()
            lexeme = self.source[start:self._pos]
            value = int(lexeme)
            if value > WORD_MAX:
                raise ParseError(
                    f"Integer literal {lexeme} does not fit in 32 bits", line, column,
                )
            return Token(TokenType.INTEGER, lexeme, line, column, value)

        if ch in _IDENT_START:
            while self._peek() in _IDENT_CHARS:
                self._advance()
            lexeme = self.source[start:self._pos]
            return Token(KEYWORDS.get(lexeme, TokenType.IDENTIFIER), lexeme, line, column)

        if ch == ":":
            if self._peek() == "=":
                self._advance()
                return Token(TokenType.ASSIGN, ":=", line, column)
            raise ParseError("Expected '=' after ':'", line, column)

        if ch == "<":
            nxt = self._peek()
            if nxt == "=":
                self._advance()
                return Token(TokenType.LESS_EQUAL, "<=", line, column)
            if nxt == ">":
                self._advance()
                return Token(TokenType.NOT_EQUAL, "<>", line, column)
            return Token(TokenType.LESS, "<", line, column)

        if ch in _SINGLE:
            return Token(_SINGLE[ch], ch, line, column)

        raise ParseError(f"Invalid character {ch!r}", line, column)
