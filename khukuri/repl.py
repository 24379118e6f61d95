"""Interactive read-eval-print loop for Khukuri.

Every line is tokenized, parsed and run on the same `Interpreter`, so
variables and functions defined on one line stay visible on the next.
A line that evaluates to a non-null value (via a top-level `pathau`) has
that value printed.
"""

import sys
from typing import Any, Callable, Optional

from .errors import KhukuriError
from .interpreter import Interpreter, run_source
from .values import NULL, to_string


BANNER = (
    "Khukuri Interpreter REPL\n"
    "Nepali Gen-Z Programming Language\n"
    "'exit' type gara bandha garna\n"
)
PROMPT = '>> '


def run_line(interpreter: Interpreter, line: str) -> Any:
    """Run one line of source on an existing interpreter and return its value."""
    return run_source(line, interpreter)


def run_repl(interpreter: Optional[Interpreter] = None,
             input_fn: Callable[[str], str] = input) -> Interpreter:
    if interpreter is None:
        interpreter = Interpreter()
    print(BANNER)
    while True:
        try:
            line = input_fn(PROMPT)
        except (EOFError, KeyboardInterrupt):
            print()
            break
        line = line.strip()
        if line == 'exit':
            break
        if not line:
            continue
        try:
            value = run_line(interpreter, line)
        except KhukuriError as ex:
            print(f"Error bhayo: {ex}", file=sys.stderr)
            continue
        if value is not NULL:
            print(to_string(value))
    return interpreter
