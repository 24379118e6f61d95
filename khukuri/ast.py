"""Abstract Syntax Tree (AST) definitions for the Khukuri language.

The AST classes defined in this module represent the syntactic structure
of parsed Khukuri programs. The parser builds them and the interpreter
evaluates them. Every composite node owns its children; trees never share
nodes, so they are acyclic by construction.

Statement nodes record the line they start on (`line`, 0 when unknown) so
runtime errors can point back at the source. The field is keyword-only
and ignored by equality, so two trees parsed from differently laid out
source still compare equal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass
class Node:
    """Base class for all AST nodes."""
    line: int = field(default=0, kw_only=True, compare=False, repr=False)


# Statements

@dataclass
class Program(Node):
    body: List[Node]


@dataclass
class VarDeclaration(Node):
    name: str
    type_hint: Optional[str]  # parsed but never enforced
    value: Node


@dataclass
class Assignment(Node):
    name: str
    value: Node


@dataclass
class IndexAssignment(Node):
    target: Node
    index: Node
    value: Node


@dataclass
class IfStatement(Node):
    condition: Node
    then_block: List[Node]
    else_block: Optional[List[Node]]


@dataclass
class WhileLoop(Node):
    condition: Node
    body: List[Node]


@dataclass
class ForEachLoop(Node):
    variable: str
    iterable: Node
    body: List[Node]


@dataclass
class FunctionDeclaration(Node):
    name: str
    params: List[str]
    body: List[Node]


@dataclass
class Return(Node):
    value: Node


@dataclass
class Print(Node):
    value: Node


@dataclass
class Break(Node):
    pass


@dataclass
class Continue(Node):
    pass


@dataclass
class Import(Node):
    filename: str


# Expressions

@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass
class UnaryOp(Node):
    op: str
    operand: Node


@dataclass
class FunctionCall(Node):
    name: str
    args: List[Node]


@dataclass
class ListLiteral(Node):
    elements: List[Node]


@dataclass
class DictLiteral(Node):
    entries: List[Tuple[str, Node]]  # keys are string literal values


@dataclass
class IndexAccess(Node):
    target: Node
    index: Node


@dataclass
class Identifier(Node):
    name: str


@dataclass
class NumberLiteral(Node):
    text: str  # source spelling, converted when evaluated


@dataclass
class StringLiteral(Node):
    value: str


@dataclass
class BooleanLiteral(Node):
    value: bool
