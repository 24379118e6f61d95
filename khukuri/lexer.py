"""Lexer for the Khukuri language.

The token set is declared as a Lark terminal grammar and scanned with
Lark's basic lexer. Lark handles the longest-match bookkeeping, keyword
reclassification of identifiers, and line/column tracking; this module
converts the resulting Lark tokens into Khukuri `Token` records, decodes
string escapes, and appends the terminating EOF token.

Newlines are significant (they separate statements), every other kind of
whitespace is skipped, and `//` starts a comment that runs to the end of
the line.
"""

from __future__ import annotations

import re
from typing import Dict, List

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import LexerError
from .tokens import KEYWORDS, Token, TokenType


KEYWORD_TERMINALS = '\n'.join(f'KW_{word.upper()}: "{word}"' for word in KEYWORDS)

KHUKURI_LEXICON = r"""
    start: _token*
    _token: IDENT | NUMBER | STRING | OPERATOR | NEWLINE | keyword
          | LBRACE | RBRACE | LPAREN | RPAREN | LBRACKET | RBRACKET
          | COMMA | COLON
    keyword: """ + ' | '.join(f'KW_{word.upper()}' for word in KEYWORDS) + r"""

    IDENT: /[\p{L}_][\p{L}\p{M}\p{N}_]*/
    NUMBER: /[0-9]+(?:\.[0-9]*)?/
    STRING: /"(?:\\[\s\S]|[^"\\\n])*"/
    OPERATOR: /==|!=|>=|<=|[=!><+\-*\/%]/
    NEWLINE: /\n/

    LBRACE: "{"
    RBRACE: "}"
    LPAREN: "("
    RPAREN: ")"
    LBRACKET: "["
    RBRACKET: "]"
    COMMA: ","
    COLON: ":"

""" + KEYWORD_TERMINALS + r"""

    COMMENT: /\/\/[^\n]*/
    WHITESPACE: /[^\S\n]+/
    %ignore COMMENT
    %ignore WHITESPACE
"""


KHUKURI_LEXER = Lark(
    KHUKURI_LEXICON,
    parser='lalr',
    lexer='basic',
    regex=True,
)


TERMINAL_TYPES: Dict[str, TokenType] = {
    'IDENT': TokenType.IDENTIFIER,
    'NUMBER': TokenType.NUMBER,
    'STRING': TokenType.STRING,
    'OPERATOR': TokenType.OPERATOR,
    'NEWLINE': TokenType.NEWLINE,
    'LBRACE': TokenType.LBRACE,
    'RBRACE': TokenType.RBRACE,
    'LPAREN': TokenType.LPAREN,
    'RPAREN': TokenType.RPAREN,
    'LBRACKET': TokenType.LBRACKET,
    'RBRACKET': TokenType.RBRACKET,
    'COMMA': TokenType.COMMA,
    'COLON': TokenType.COLON,
}
TERMINAL_TYPES.update({f'KW_{word.upper()}': TokenType.KEYWORD for word in KEYWORDS})


ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '\\': '\\', '"': '"'}
ESCAPE_RE = re.compile(r'\\([\s\S])')


def decode_string(raw: str) -> str:
    """Strip the quotes from a string literal and decode its escapes.

    Unknown escapes pass the escaped character through unchanged, so
    `"\\q"` reads as `q`.
    """
    body = raw[1:-1]
    return ESCAPE_RE.sub(lambda m: ESCAPES.get(m.group(1), m.group(1)), body)


def end_position(source: str) -> tuple:
    """Return the (line, column) just past the last character of source."""
    line = source.count('\n') + 1
    column = len(source) - (source.rfind('\n') + 1) + 1
    return line, column


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens terminated by EOF.

    Raises LexerError for an unterminated string literal (including one
    broken by a raw newline) and for any character that cannot start a
    token.
    """
    tokens: List[Token] = []
    try:
        for tok in KHUKURI_LEXER.lex(source):
            token_type = TERMINAL_TYPES[tok.type]
            value = str(tok)
            if token_type is TokenType.STRING:
                value = decode_string(value)
            tokens.append(Token(token_type, value, tok.line, tok.column))
    except UnexpectedCharacters as ex:
        # A quote can only fail to lex when its literal never closes.
        if ex.char == '"':
            raise LexerError('Unterminated string literal', ex.line, ex.column) from None
        raise LexerError(f"Unexpected character '{ex.char}'", ex.line, ex.column) from None
    line, column = end_position(source)
    tokens.append(Token(TokenType.EOF, '', line, column))
    return tokens
