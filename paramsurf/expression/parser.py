"""Precedence-climbing parser for surface expressions.

Grammar (lowest to highest binding)::

    expression := term (('+' | '-') term)*
    term       := unary (('*' | '/') unary)*
    unary      := ('+' | '-') unary | power
    power      := primary ('^' unary)?
    primary    := NUMBER | 'pi' | VARIABLE | FUNCTION '(' args ')' | '(' expression ')'

``^`` is right-associative and binds tighter than unary minus, so ``-2^2``
is ``-(2^2)`` and ``2^-1`` is ``2^(-1)``. Identifiers are resolved here:
anything that is not ``pi``, an allowed variable, or a whitelisted function
is rejected before any evaluation happens.
"""

import math
from dataclasses import dataclass
from typing import Sequence, Union

from paramsurf.expression.lexer import ExpressionSyntaxError, Token, TokenType, tokenize


# name -> (min_args, max_args); max_args None means variadic
FUNCTION_ARITY: dict[str, tuple[int, int | None]] = {
    "sin": (1, 1), "cos": (1, 1), "tan": (1, 1),
    "asin": (1, 1), "acos": (1, 1), "atan": (1, 1),
    "sinh": (1, 1), "cosh": (1, 1), "tanh": (1, 1),
    "exp": (1, 1), "log": (1, 1), "sqrt": (1, 1),
    "abs": (1, 1), "floor": (1, 1), "ceil": (1, 1), "round": (1, 1),
    "pow": (2, 2),
    "min": (2, None), "max": (2, None),
}


# --- AST nodes ---

@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class UnaryOp:
    op: str          # '+' or '-'
    operand: "Node"


@dataclass(frozen=True)
class BinaryOp:
    op: str          # '+', '-', '*', '/', '^'
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Call:
    name: str
    args: tuple["Node", ...]


Node = Union[Number, Variable, UnaryOp, BinaryOp, Call]


_ADDITIVE = {TokenType.PLUS: "+", TokenType.MINUS: "-"}
_MULTIPLICATIVE = {TokenType.STAR: "*", TokenType.SLASH: "/"}


class Parser:
    """Builds an AST from a token list, resolving identifiers as it goes."""

    def __init__(self, tokens: list[Token], variables: Sequence[str] = ("u", "v")):
        self.tokens = tokens
        self.variables = tuple(variables)
        self.pos = 0

    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def _check(self, token_type: TokenType) -> bool:
        return self._current().type == token_type

    def _consume(self, token_type: TokenType, expected: str) -> Token:
        if self._check(token_type):
            return self._advance()
        self._error(expected)

    def _error(self, expected: str):
        token = self._current()
        raise ExpressionSyntaxError(
            f"Expected {expected}, found {token.describe()}", token.position
        )

    def parse(self) -> Node:
        node = self._parse_expression()
        if not self._check(TokenType.EOF):
            self._error("an operator or end of expression")
        return node

    def _parse_expression(self) -> Node:
        node = self._parse_term()
        while self._current().type in _ADDITIVE:
            op = _ADDITIVE[self._advance().type]
            node = BinaryOp(op, node, self._parse_term())
        return node

    def _parse_term(self) -> Node:
        node = self._parse_unary()
        while self._current().type in _MULTIPLICATIVE:
            op = _MULTIPLICATIVE[self._advance().type]
            node = BinaryOp(op, node, self._parse_unary())
        return node

    def _parse_unary(self) -> Node:
        if self._current().type in _ADDITIVE:
            op = _ADDITIVE[self._advance().type]
            return UnaryOp(op, self._parse_unary())
        return self._parse_power()

    def _parse_power(self) -> Node:
        base = self._parse_primary()
        if self._check(TokenType.CARET):
            self._advance()
            return BinaryOp("^", base, self._parse_unary())
        return base

    def _parse_primary(self) -> Node:
        token = self._current()

        if token.type == TokenType.NUMBER:
            self._advance()
            return Number(token.value)

        if token.type == TokenType.LPAREN:
            self._advance()
            node = self._parse_expression()
            self._consume(TokenType.RPAREN, "')'")
            return node

        if token.type == TokenType.IDENTIFIER:
            return self._parse_identifier()

        self._error("a number, variable, function or '('")

    def _parse_identifier(self) -> Node:
        token = self._advance()
        name = token.text

        if name.lower() == "pi":
            return Number(math.pi)

        if name in FUNCTION_ARITY:
            if not self._check(TokenType.LPAREN):
                raise ExpressionSyntaxError(
                    f"Function '{name}' must be called with arguments", token.position
                )
            return self._parse_call(token)

        if name in self.variables:
            if self._check(TokenType.LPAREN):
                raise ExpressionSyntaxError(f"'{name}' is not a function", token.position)
            return Variable(name)

        raise ExpressionSyntaxError(f"Unknown identifier '{name}'", token.position)

    def _parse_call(self, name_token: Token) -> Call:
        name = name_token.text
        self._consume(TokenType.LPAREN, "'('")
        args = [self._parse_expression()]
        while self._check(TokenType.COMMA):
            self._advance()
            args.append(self._parse_expression())
        self._consume(TokenType.RPAREN, "',' or ')'")

        min_args, max_args = FUNCTION_ARITY[name]
        if len(args) < min_args or (max_args is not None and len(args) > max_args):
            if max_args is None:
                expected = f"at least {min_args}"
            else:
                expected = str(min_args)
            raise ExpressionSyntaxError(
                f"Function '{name}' expects {expected} argument(s), got {len(args)}",
                name_token.position,
            )
        return Call(name, tuple(args))


def parse(source: str, variables: Sequence[str] = ("u", "v")) -> Node:
    """Parse expression text into an AST over the given free variables."""
    return Parser(tokenize(source), variables).parse()


def free_variables(node: Node) -> set[str]:
    """Names of the variables referenced anywhere in the tree."""
    if isinstance(node, Variable):
        return {node.name}
    if isinstance(node, UnaryOp):
        return free_variables(node.operand)
    if isinstance(node, BinaryOp):
        return free_variables(node.left) | free_variables(node.right)
    if isinstance(node, Call):
        names: set[str] = set()
        for arg in node.args:
            names |= free_variables(arg)
        return names
    return set()
