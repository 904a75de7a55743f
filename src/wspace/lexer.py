"""
Whitespace Language - Lexer/Tokenizer
Single pass over the source, keeping only space, tab and newline
"""

from enum import IntEnum, auto
from dataclasses import dataclass
from typing import List, Union

class TokenType(IntEnum):
    SPACE = auto()
    TAB = auto()
    NEWLINE = auto()

    # Special
    END = auto()

SIGNIFICANT = {
    ' ': TokenType.SPACE,
    '\t': TokenType.TAB,
    '\n': TokenType.NEWLINE,
}

@dataclass(slots=True, frozen=True)
class Token:
    type: TokenType
    line: int
    col: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.line}:{self.col})"


def token_to_string(token: Union[Token, TokenType]) -> str:
    """Render a token the way debug listings show it, e.g. [TAB]"""
    type = token.type if isinstance(token, Token) else token
    return f"[{type.name}]"


class Lexer:
    """Single-pass lexer; every character that is not significant is a comment"""

    __slots__ = ('source', 'pos', 'line', 'col', 'length')

    def __init__(self, source: Union[str, bytes]):
        if isinstance(source, (bytes, bytearray)):
            # latin-1 maps every byte to exactly one character
            source = bytes(source).decode('latin-1')
        self.source = source
        self.pos = 0
        self.line = 1
        self.col = 1
        self.length = len(source)

    def advance(self) -> str:
        """Consume and return current character"""
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def tokenize(self) -> List[Token]:
        """Tokenize entire source into list"""
        tokens = []
        while self.pos < self.length:
            line, col = self.line, self.col
            type = SIGNIFICANT.get(self.advance())
            if type is not None:
                tokens.append(Token(type, line, col))
        tokens.append(Token(TokenType.END, self.line, self.col))
        return tokens


def tokenize(source: Union[str, bytes]) -> List[Token]:
    """Convenience function to tokenize source code"""
    return Lexer(source).tokenize()
