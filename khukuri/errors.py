from typing import List


class KhukuriError(Exception):
    """Base class for every error the Khukuri pipeline reports.

    Errors carry a plain message plus the 1-based source position where it
    is known. A line or column of 0 means the position is unknown.
    """
    kind = 'Khukuri'

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def location(self) -> str:
        if self.line and self.column:
            return f" line {self.line} ma, column {self.column}"
        if self.line:
            return f" line {self.line} ma"
        return ''

    def __str__(self) -> str:
        return f"{self.kind} Error{self.location()}: {self.message}"

    def render(self, source: str) -> str:
        """Format the error with the offending source line and a caret."""
        out: List[str] = [str(self)]
        # Only \n ends a line; other separators are whitespace to the lexer.
        lines = source.split('\n')
        if 0 < self.line <= len(lines):
            out.append('  ' + lines[self.line - 1].rstrip('\r'))
            if self.column > 0:
                out.append('  ' + ' ' * (self.column - 1) + '^')
        return '\n'.join(out)


class LexerError(KhukuriError):
    kind = 'Lexer'


class ParserError(KhukuriError):
    kind = 'Syntax'


class KhukuriRuntimeError(KhukuriError):
    """Raised while evaluating a program. Only the line is tracked."""
    kind = 'Runtime'

    def __init__(self, message: str, line: int = 0):
        super().__init__(message, line, 0)
