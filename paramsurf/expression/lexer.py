"""Tokenizer for the restricted math notation used in surface expressions.

Recognizes numeric literals (``3``, ``0.25``, ``.5``, ``1e-3``), identifiers,
the operators ``+ - * / ^`` (``**`` is read as ``^``), parentheses and commas.
"""

from dataclasses import dataclass
from enum import Enum, auto


class ExpressionSyntaxError(ValueError):
    """Malformed expression text, with the 0-based offset of the problem."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at position {position + 1}")
        self.position = position


class TokenType(Enum):
    NUMBER = auto()
    IDENTIFIER = auto()
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    CARET = auto()
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    EOF = auto()


_DIGITS = "0123456789"

_SINGLE_CHAR_TOKENS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "/": TokenType.SLASH,
    "^": TokenType.CARET,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
}


@dataclass(frozen=True)
class Token:
    type: TokenType
    text: str
    position: int
    value: float | None = None

    def describe(self) -> str:
        if self.type == TokenType.EOF:
            return "end of expression"
        return f"'{self.text}'"


class Lexer:
    """Converts expression text into a list of tokens ending with EOF."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx >= len(self.source):
            return "\0"
        return self.source[idx]

    def _scan_number(self) -> Token:
        start = self.pos
        while self._peek() in _DIGITS:
            self.pos += 1
        if self._peek() == ".":
            self.pos += 1
            while self._peek() in _DIGITS:
                self.pos += 1
        text = self.source[start:self.pos]
        if text == ".":
            raise ExpressionSyntaxError("Unexpected character '.'", start)

        # Exponent only if digits follow, so "2e" stays a syntax error below
        if self._peek() in "eE":
            offset = 1
            if self._peek(offset) in "+-":
                offset += 1
            if self._peek(offset) in _DIGITS:
                self.pos += offset
                while self._peek() in _DIGITS:
                    self.pos += 1
                text = self.source[start:self.pos]

        return Token(TokenType.NUMBER, text, start, float(text))

    def _scan_identifier(self) -> Token:
        start = self.pos
        while self._peek().isalnum() or self._peek() == "_":
            self.pos += 1
        return Token(TokenType.IDENTIFIER, self.source[start:self.pos], start)

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        while self.pos < len(self.source):
            ch = self._peek()

            if ch.isspace():
                self.pos += 1
            elif ch in _DIGITS or (ch == "." and self._peek(1) in _DIGITS):
                tokens.append(self._scan_number())
            elif ch.isalpha() or ch == "_":
                tokens.append(self._scan_identifier())
            elif ch == "*":
                if self._peek(1) == "*":
                    tokens.append(Token(TokenType.CARET, "**", self.pos))
                    self.pos += 2
                else:
                    tokens.append(Token(TokenType.STAR, "*", self.pos))
                    self.pos += 1
            elif ch in _SINGLE_CHAR_TOKENS:
                tokens.append(Token(_SINGLE_CHAR_TOKENS[ch], ch, self.pos))
                self.pos += 1
            else:
                raise ExpressionSyntaxError(f"Unexpected character '{ch}'", self.pos)

        tokens.append(Token(TokenType.EOF, "", self.pos))
        return tokens


def tokenize(source: str) -> list[Token]:
    return Lexer(source).tokenize()
