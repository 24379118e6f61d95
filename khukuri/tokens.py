"""Token definitions for the Khukuri language.

A token pairs a category with the literal text it was read from and the
1-based line and column where it starts. Tokens are produced once by the
lexer and never modified afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    KEYWORD = 'Keyword'
    IDENTIFIER = 'Identifier'
    NUMBER = 'Number'
    STRING = 'String'
    OPERATOR = 'Operator'
    LBRACE = 'LBrace'
    RBRACE = 'RBrace'
    LPAREN = 'LParen'
    RPAREN = 'RParen'
    LBRACKET = 'LBracket'
    RBRACKET = 'RBracket'
    COMMA = 'Comma'
    COLON = 'Colon'
    NEWLINE = 'Newline'
    EOF = 'EOF'

    def __str__(self) -> str:
        return self.value


# Reserved words. `sodha` (input) is reserved but no statement uses it yet.
KEYWORDS = (
    'maanau',   # variable declaration
    'yedi',     # if
    'bhane',    # then
    'natra',    # else
    'jaba',     # while (part 1)
    'samma',    # while (part 2)
    'pratyek',  # for each
    'ma',       # in
    'kaam',     # function
    'pathau',   # return
    'bhan',     # print
    'sodha',    # input
    'rok',      # break
    'jane',     # continue
    'ra',       # and
    'wa',       # or
    'hoina',    # not
    'sahi',     # true
    'galat',    # false
    'aayaat',   # import
)


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int
    column: int

    def is_keyword(self, word: str) -> bool:
        return self.type is TokenType.KEYWORD and self.value == word

    def is_operator(self, *ops: str) -> bool:
        return self.type is TokenType.OPERATOR and self.value in ops

    def describe(self) -> str:
        """Short human-readable form used in parser error messages."""
        if self.type is TokenType.EOF:
            return 'EOF'
        if self.type is TokenType.NEWLINE:
            return 'newline'
        return f"{self.type} '{self.value}'"
