"""CLI entry point for the Khukuri interpreter.

Usage:
    python -m khukuri [-v|-vv|-vvv] <program.nep>
    python -m khukuri --repl
    python -m khukuri --tokens <program.nep>
    python -m khukuri --ast <program.nep>

Options:
  -v            Increase debug verbosity (can be repeated)
  --repl        Start the interactive interpreter
  --tokens      Print the token list of the given file and exit
  --ast         Print the parsed AST of the given file and exit

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import pprint
import sys
from pathlib import Path

from .errors import KhukuriError
from .interpreter import Interpreter
from .lexer import tokenize
from .loader import read_source
from .parser import parse
from .repl import run_repl


def load_or_exit(path_arg: str) -> str:
    program_file = Path(path_arg)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    try:
        return read_source(str(program_file))
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read file {program_file}: {e}", file=sys.stderr)
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='khukuri', description="Khukuri language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--repl', action='store_true', help='start the interactive interpreter')
    group.add_argument('--tokens', metavar='NEP_FILE', help='print the tokens of the given file')
    group.add_argument('--ast', metavar='NEP_FILE', help='print the AST of the given file')
    parser.add_argument('program', nargs='?', help='Khukuri program file (.nep) to execute')
    args = parser.parse_args(argv)

    if args.repl:
        interpreter = Interpreter(debug_level=args.v)
        try:
            run_repl(interpreter)
        finally:
            interpreter.close()
        return

    if args.tokens or args.ast:
        source = load_or_exit(args.tokens or args.ast)
        try:
            tokens = tokenize(source)
            if args.tokens:
                for token in tokens:
                    print(f"{token.line}:{token.column}\t{token.type}\t{token.value!r}")
                return
            pprint.pprint(parse(tokens))
        except KhukuriError as e:
            print(e.render(source), file=sys.stderr)
            sys.exit(1)
        return

    if not args.program:
        parser.error('missing program file; or use --repl')
    source = load_or_exit(args.program)
    interpreter = Interpreter(debug_level=args.v)
    try:
        interpreter.interpret(parse(tokenize(source)))
    except KhukuriError as e:
        print(e.render(source), file=sys.stderr)
        sys.exit(1)
    finally:
        interpreter.close()


if __name__ == '__main__':
    main()
