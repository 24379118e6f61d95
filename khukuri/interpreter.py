"""Tree-walking interpreter for the Khukuri language.

The interpreter walks the AST produced by `khukuri.parser`. Statements
return a control signal: `None` for normal completion, a `ReturnSignal`
carrying the returned value, or one of the `BREAK` / `CONTINUE` markers.
Every block checks the signal of each statement it runs and stops at the
first one that is not `None`, handing it to its caller. Expressions
evaluate to runtime values (see `khukuri.values`).

All interpreter state lives on one `Interpreter` instance: the scope
stack, the function table and the import bookkeeping. A fresh instance
runs a file; the REPL keeps one instance alive across lines.

Functions have no closures. A call pushes a new scope on top of the
caller's live scope stack, binds the parameters there and runs the body,
so the body sees the caller's variables as well as the globals.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Set

from .ast import (
    Node, Program, VarDeclaration, Assignment, IndexAssignment, IfStatement,
    WhileLoop, ForEachLoop, FunctionDeclaration, Return, Print, Break,
    Continue, Import, BinaryOp, UnaryOp, FunctionCall, ListLiteral,
    DictLiteral, IndexAccess, Identifier, NumberLiteral, StringLiteral,
    BooleanLiteral,
)
from .environment import Environment
from .errors import KhukuriRuntimeError, LexerError, ParserError
from .lexer import tokenize
from .loader import read_source
from .parser import parse
from .values import (
    NULL, ListVal, DictVal, format_number, is_truthy,
    to_string, type_name,
)


# Every Khukuri call nests several Python frames.
RECURSION_LIMIT = 10000


###############################################################################
# Control signals
###############################################################################


class ReturnSignal:
    """Signal produced by `pathau`, carrying the returned value."""
    __slots__ = ('value',)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"


class LoopSignal:
    """Signal produced by `rok` (break) and `jane` (continue)."""
    __slots__ = ('name',)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"<{self.name}>"


BREAK = LoopSignal('Break')
CONTINUE = LoopSignal('Continue')


@dataclass
class FunctionValue:
    """Entry in the function table."""
    name: str
    params: List[str]
    body: List[Node]

    def __repr__(self) -> str:
        return f"<function {self.name}>"


###############################################################################
# Interpreter implementation
###############################################################################


class Interpreter:
    """Core interpreter that executes Khukuri ASTs."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 source_loader: Callable[[str], str] = read_source):
        self.environment = Environment()
        self.functions: Dict[str, FunctionValue] = {}
        self.imported: Set[str] = set()
        self.importing: List[str] = []
        self.source_loader = source_loader
        self.line = 0
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None

    def debug(self, msg: str, level: int = 1):
        if self.debug_level >= level:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None
            self.debug_level = 0

    def __enter__(self) -> 'Interpreter':
        return self

    def __exit__(self, *exc_info):
        self.close()

    # Public API
    def interpret(self, program: Program) -> Any:
        """Run a program and return its top-level `pathau` value, or null."""
        limit = sys.getrecursionlimit()
        if limit < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)
        try:
            signal = self.execute(program)
        except RecursionError:
            raise KhukuriRuntimeError('Maximum recursion depth exceeded', self.line) from None
        finally:
            sys.setrecursionlimit(limit)
        return self.finish(signal)

    def finish(self, signal: Any) -> Any:
        if isinstance(signal, ReturnSignal):
            return signal.value
        if isinstance(signal, LoopSignal):
            raise KhukuriRuntimeError(f'{signal.name} statement outside loop', self.line)
        return NULL

    # Statements
    def execute(self, node: Node) -> Any:
        if node.line:
            self.line = node.line
        try:
            return self.execute_node(node)
        except KhukuriRuntimeError as ex:
            if not ex.line:
                ex.line = node.line
            raise

    def execute_block(self, statements: List[Node]) -> Any:
        for stmt in statements:
            signal = self.execute(stmt)
            if signal is not None:
                return signal
        return None

    def execute_scoped(self, statements: List[Node], variable: Optional[str] = None,
                       item: Any = None) -> Any:
        # Run a block in a fresh scope, optionally binding a loop variable first.
        self.environment.push_scope()
        try:
            if variable is not None:
                self.environment.define(variable, item)
            return self.execute_block(statements)
        finally:
            self.environment.pop_scope()

    def execute_node(self, node: Node) -> Any:
        if isinstance(node, Program):
            return self.execute_block(node.body)
        if isinstance(node, VarDeclaration):
            value = self.evaluate(node.value)
            self.environment.define(node.name, value)
            self.debug(f"declare {node.name}: {type_name(value)} = {to_string(value)}", 2)
            return None
        if isinstance(node, Assignment):
            value = self.evaluate(node.value)
            self.environment.set(node.name, value)
            return None
        if isinstance(node, IndexAssignment):
            self.assign_index(node)
            return None
        if isinstance(node, IfStatement):
            cond = self.evaluate(node.condition)
            truthy = is_truthy(cond)
            self.debug(f"if condition {to_string(cond)} -> {truthy}", 3)
            if truthy:
                return self.execute_scoped(node.then_block)
            if node.else_block is not None:
                return self.execute_scoped(node.else_block)
            return None
        if isinstance(node, WhileLoop):
            while is_truthy(self.evaluate(node.condition)):
                signal = self.execute_scoped(node.body)
                if signal is BREAK:
                    break
                if isinstance(signal, ReturnSignal):
                    return signal
            return None
        if isinstance(node, ForEachLoop):
            for item in self.iteration_items(self.evaluate(node.iterable)):
                signal = self.execute_scoped(node.body, node.variable, item)
                if signal is BREAK:
                    break
                if isinstance(signal, ReturnSignal):
                    return signal
            return None
        if isinstance(node, FunctionDeclaration):
            self.functions[node.name] = FunctionValue(node.name, node.params, node.body)
            self.debug(f"define function {node.name}({', '.join(node.params)})", 2)
            return None
        if isinstance(node, Return):
            return ReturnSignal(self.evaluate(node.value))
        if isinstance(node, Print):
            print(to_string(self.evaluate(node.value)))
            return None
        if isinstance(node, Break):
            return BREAK
        if isinstance(node, Continue):
            return CONTINUE
        if isinstance(node, Import):
            self.execute_import(node.filename)
            return None
        # expression statement
        self.evaluate(node)
        return None

    def iteration_items(self, iterable: Any) -> List[Any]:
        if isinstance(iterable, ListVal):
            return iterable.items
        if isinstance(iterable, DictVal):
            return list(iterable.entries.keys())
        if isinstance(iterable, str):
            return list(iterable)
        raise KhukuriRuntimeError(f'Cannot iterate over {type_name(iterable)}')

    def assign_index(self, node: IndexAssignment):
        if not isinstance(node.target, Identifier):
            raise KhukuriRuntimeError('Invalid left-hand side in index assignment')
        name = node.target.name
        index = self.evaluate(node.index)
        value = self.evaluate(node.value)
        container = self.environment.get(name)
        if container is None:
            raise KhukuriRuntimeError(f'Undefined variable: {name}')
        if isinstance(container, ListVal) and isinstance(index, float):
            position = self.list_position(index, len(container.items), 'List')
            container.items[position] = value
        elif isinstance(container, DictVal) and isinstance(index, str):
            container.entries[index] = value
        else:
            raise KhukuriRuntimeError(
                f'Invalid index assignment: cannot index {type_name(container)} with {type_name(index)}')
        self.environment.set(name, container)

    def execute_import(self, filename: str):
        if filename in self.imported:
            self.debug(f"import {filename}: already imported")
            return
        if filename in self.importing:
            raise KhukuriRuntimeError(f'Circular import detected: {filename}')
        self.importing.append(filename)
        try:
            self.debug(f"import {filename}")
            try:
                source = self.source_loader(filename)
            except (OSError, UnicodeDecodeError) as ex:
                reason = getattr(ex, 'strerror', None) or str(ex)
                raise KhukuriRuntimeError(f"Import error: cannot read file '{filename}': {reason}") from ex
            try:
                program = parse(tokenize(source))
            except (LexerError, ParserError) as ex:
                raise KhukuriRuntimeError(f"Import error in '{filename}': {ex}") from ex
            try:
                self.finish(self.execute(program))
            except KhukuriRuntimeError as ex:
                raise KhukuriRuntimeError(
                    f"Runtime error in imported file '{filename}': {ex.message}") from ex
            self.imported.add(filename)
        finally:
            self.importing.pop()

    # Expressions
    def evaluate(self, node: Node) -> Any:
        if isinstance(node, NumberLiteral):
            try:
                return float(node.text)
            except ValueError:
                raise KhukuriRuntimeError(f'Invalid number: {node.text}') from None
        if isinstance(node, StringLiteral):
            return node.value
        if isinstance(node, BooleanLiteral):
            return node.value
        if isinstance(node, Identifier):
            value = self.environment.get(node.name)
            if value is None:
                raise KhukuriRuntimeError(f'Undefined variable: {node.name}')
            return value
        if isinstance(node, ListLiteral):
            return ListVal([self.evaluate(el) for el in node.elements])
        if isinstance(node, DictLiteral):
            entries: Dict[str, Any] = {}
            for key, value_node in node.entries:
                entries[key] = self.evaluate(value_node)
            return DictVal(entries)
        if isinstance(node, IndexAccess):
            target = self.evaluate(node.target)
            index = self.evaluate(node.index)
            return self.index_value(target, index)
        if isinstance(node, UnaryOp):
            operand = self.evaluate(node.operand)
            if node.op == 'hoina':
                return not is_truthy(operand)
            if node.op == '-':
                if isinstance(operand, float):
                    return -operand
                raise KhukuriRuntimeError('Cannot negate non-number')
            raise KhukuriRuntimeError(f'Unknown unary operator: {node.op}')
        if isinstance(node, BinaryOp):
            # No short-circuit: both operands are always evaluated.
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, FunctionCall):
            return self.call_function(node)
        raise KhukuriRuntimeError(f'Invalid expression: {type(node).__name__}')

    def list_position(self, index: float, length: int, kind: str) -> int:
        # Indices truncate toward zero; negative or non-finite ones are out of bounds.
        if math.isfinite(index):
            position = int(index)
            if 0 <= position < length:
                return position
        raise KhukuriRuntimeError(f'{kind} index {format_number(index)} out of bounds')

    def index_value(self, target: Any, index: Any) -> Any:
        if isinstance(target, ListVal) and isinstance(index, float):
            return target.items[self.list_position(index, len(target.items), 'List')]
        if isinstance(target, DictVal) and isinstance(index, str):
            if index not in target.entries:
                raise KhukuriRuntimeError(f"Key '{index}' not found in dictionary")
            return target.entries[index]
        if isinstance(target, str) and isinstance(index, float):
            return target[self.list_position(index, len(target), 'String')]
        raise KhukuriRuntimeError(f'Cannot index {type_name(target)} with {type_name(index)}')

    def call_function(self, node: FunctionCall) -> Any:
        func = self.functions.get(node.name)
        if func is None:
            raise KhukuriRuntimeError(f'Undefined function: {node.name}')
        if len(node.args) != len(func.params):
            raise KhukuriRuntimeError(
                f'Function {node.name} expects {len(func.params)} arguments, got {len(node.args)}')
        args = [self.evaluate(arg) for arg in node.args]
        self.debug(f"call {node.name}({', '.join(to_string(a) for a in args)})", 3)
        self.environment.push_scope()
        try:
            for param, arg in zip(func.params, args):
                self.environment.define(param, arg)
            signal = self.execute_block(func.body)
        finally:
            self.environment.pop_scope()
        if isinstance(signal, ReturnSignal):
            return signal.value
        if isinstance(signal, LoopSignal):
            raise KhukuriRuntimeError(f'{signal.name} statement outside loop')
        return NULL

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        # Logical operators accept any operands through truthiness.
        if op == 'ra':
            return is_truthy(a) and is_truthy(b)
        if op == 'wa':
            return is_truthy(a) or is_truthy(b)
        if isinstance(a, float) and isinstance(b, float):
            if op == '+':
                return a + b
            if op == '-':
                return a - b
            if op == '*':
                return a * b
            if op == '/':
                if b == 0.0:
                    raise KhukuriRuntimeError('Division by zero')
                return a / b
            if op == '%':
                if b == 0.0:
                    raise KhukuriRuntimeError('Modulo by zero')
                # remainder takes the sign of the dividend
                try:
                    return math.fmod(a, b)
                except ValueError:
                    return math.nan
            if op == '>':
                return a > b
            if op == '<':
                return a < b
            if op == '>=':
                return a >= b
            if op == '<=':
                return a <= b
            if op == '==':
                return a == b
            if op == '!=':
                return a != b
        if isinstance(a, str) and isinstance(b, str):
            if op == '+':
                return a + b
            if op == '==':
                return a == b
            if op == '!=':
                return a != b
        if op == '+' and ((isinstance(a, str) and isinstance(b, float))
                          or (isinstance(a, float) and isinstance(b, str))):
            return to_string(a) + to_string(b)
        if isinstance(a, bool) and isinstance(b, bool):
            if op == '==':
                return a == b
            if op == '!=':
                return a != b
        raise KhukuriRuntimeError(f'Invalid operation: {to_string(a)} {op} {to_string(b)}')


###############################################################################
# Convenience entry points
###############################################################################


def run_source(source: str, interpreter: Optional[Interpreter] = None) -> Any:
    """Tokenize, parse and run source on interpreter (a fresh one by default)."""
    program = parse(tokenize(source))
    if interpreter is None:
        with Interpreter() as fresh:
            return fresh.interpret(program)
    return interpreter.interpret(program)


def run_file(path: str, debug_level: int = 0) -> Interpreter:
    """Run a Khukuri file and return the interpreter instance after execution."""
    source = read_source(path)
    program = parse(tokenize(source))
    interpreter = Interpreter(debug_level=debug_level)
    try:
        interpreter.interpret(program)
    finally:
        interpreter.close()
    return interpreter
