# Khukuri language package
# This package provides the lexer, parser and interpreter for the Khukuri language.
from .errors import KhukuriError, LexerError, ParserError, KhukuriRuntimeError
from .lexer import tokenize
from .parser import parse
from .interpreter import Interpreter, run_source, run_file

__all__ = [
    'tokenize',
    'parse',
    'Interpreter',
    'run_source',
    'run_file',
    'KhukuriError',
    'LexerError',
    'ParserError',
    'KhukuriRuntimeError',
]
