"""Recursive-descent parser from tokens to the simpIL IR."""

from __future__ import annotations

import logging

from simpil.model.expressions import (
    DEFAULT_INPUT_SOURCE,
    BinaryExpr,
    BinaryOp,
    Expression,
    GetInputExpr,
    LiteralExpr,
    LoadExpr,
    UnaryExpr,
    UnaryOp,
    VariableRef,
)
from simpil.model.program import Program
from simpil.model.statements import (
    Assert,
    Assignment,
    Goto,
    IfGoto,
    Statement,
    Store,
)

from ._errors import ParseError
from ._scanner import Token, TokenType

logger = logging.getLogger(__name__)


# Binary precedence levels, loosest first.  All levels are left-associative.
_BINARY_LEVELS: list[dict[TokenType, BinaryOp]] = [
    {TokenType.PIPE: BinaryOp.OR},
    {TokenType.CARET: BinaryOp.XOR},
    {TokenType.AMPERSAND: BinaryOp.AND},
    {TokenType.EQUAL: BinaryOp.EQ, TokenType.NOT_EQUAL: BinaryOp.NE},
    {TokenType.LESS: BinaryOp.LT, TokenType.LESS_EQUAL: BinaryOp.LE},
    {TokenType.PLUS: BinaryOp.ADD, TokenType.MINUS: BinaryOp.SUB},
    {TokenType.STAR: BinaryOp.MUL, TokenType.SLASH: BinaryOp.DIV, TokenType.PERCENT: BinaryOp.MOD},
]

_UNARY_OPS: dict[TokenType, UnaryOp] = {
    TokenType.MINUS: UnaryOp.NEG,
    TokenType.TILDE: UnaryOp.NOT,
    TokenType.BANG: UnaryOp.LNOT,
}


class Parser:
    """Builds statements from a token list ending in EOF."""

    def __init__(self, tokens: list[Token]) -> None:
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("Token list must end with an EOF token")
        self.tokens = tokens
        self._current = 0

    def parse_program(self) -> Program:
        statements: list[Statement] = []
        while not self._check(TokenType.EOF):
            statements.append(self.parse_statement())
        logger.debug("Parsed %d statements", len(statements))
        return Program(statements=tuple(statements))

    def parse_statement(self) -> Statement:
        token = self._advance()
        if token.type == TokenType.IDENTIFIER:
            self._expect(TokenType.ASSIGN, "':=' after variable name")
            return Assignment(target=token.lexeme, value=self.parse_expression())
        if token.type == TokenType.STORE:
            self._expect(TokenType.LEFT_PAREN, "'(' after 'store'")
            address = self.parse_expression()
            self._expect(TokenType.COMMA, "',' between store address and value")
            value = self.parse_expression()
            self._expect(TokenType.RIGHT_PAREN, "')' to close 'store'")
            return Store(address=address, value=value)
        if token.type == TokenType.GOTO:
            return Goto(target=self.parse_expression())
        if token.type == TokenType.ASSERT:
            return Assert(condition=self.parse_expression())
        if token.type == TokenType.IF:
            condition = self.parse_expression()
            self._expect(TokenType.THEN, "'then' after if condition")
            self._match(TokenType.GOTO)
            then_target = self.parse_expression()
            self._expect(TokenType.ELSE, "'else' after then target")
            self._match(TokenType.GOTO)
            else_target = self.parse_expression()
            return IfGoto(
                condition=condition,
                then_target=then_target,
                else_target=else_target,
            )
        raise self._error(token, f"Expected statement, found {_describe(token)}")

    def parse_expression(self) -> Expression:
        return self._binary(0)

    def expect_end(self) -> None:
        if not self._check(TokenType.EOF):
            token = self._peek()
            raise self._error(token, f"Unexpected {_describe(token)} after expression")

    # -----------------------------------------------------------------------
    # Expressions
    # -----------------------------------------------------------------------

    def _binary(self, level: int) -> Expression:
        if level == len(_BINARY_LEVELS):
            return self._unary()
        ops = _BINARY_LEVELS[level]
        left = self._binary(level + 1)
        while self._peek().type in ops:
            op = ops[self._advance().type]
            right = self._binary(level + 1)
            left = BinaryExpr(op=op, left=left, right=right)
        return left

    def _unary(self) -> Expression:
        token = self._peek()
        if token.type in _UNARY_OPS:
            self._advance()
            return UnaryExpr(op=_UNARY_OPS[token.type], operand=self._unary())
        return self._primary()

    def _primary(self) -> Expression:
        token = self._advance()
        if token.type == TokenType.INTEGER:
            return LiteralExpr(value=token.value)
        if token.type == TokenType.IDENTIFIER:
            return VariableRef(name=token.lexeme)
        if token.type == TokenType.LOAD:
            self._expect(TokenType.LEFT_PAREN, "'(' after 'load'")
            address = self.parse_expression()
            self._expect(TokenType.RIGHT_PAREN, "')' to close 'load'")
            return LoadExpr(address=address)
        if token.type == TokenType.GET_INPUT:
            if not self._match(TokenType.LEFT_PAREN):
                return GetInputExpr(source=DEFAULT_INPUT_SOURCE)
            source = self._expect(TokenType.IDENTIFIER, "input source name")
            self._expect(TokenType.RIGHT_PAREN, "')' to close 'get_input'")
            return GetInputExpr(source=source.lexeme)
        if token.type == TokenType.LEFT_PAREN:
            inner = self.parse_expression()
            self._expect(TokenType.RIGHT_PAREN, "')'")
            return inner
        raise self._error(token, f"Expected expression, found {_describe(token)}")

    # -----------------------------------------------------------------------
    # Token helpers
    # -----------------------------------------------------------------------

    def _peek(self) -> Token:
        return self.tokens[self._current]

    def _advance(self) -> Token:
        token = self.tokens[self._current]
        if token.type != TokenType.EOF:
            self._current += 1
        return token

    def _check(self, token_type: TokenType) -> bool:
        return self._peek().type == token_type

    def _match(self, token_type: TokenType) -> bool:
        if self._check(token_type):
            self._advance()
            return True
        return False

    def _expect(self, token_type: TokenType, what: str) -> Token:
        if not self._check(token_type):
            token = self._peek()
            raise self._error(token, f"Expected {what}, found {_describe(token)}")
        return self._advance()

    @staticmethod
    def _error(token: Token, message: str) -> ParseError:
        return ParseError(message, token.line, token.column)


def _describe(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of input"
    return repr(token.lexeme)
