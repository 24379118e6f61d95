"""Recursive-descent parser for the Khukuri language.

The parser consumes the token list produced by `khukuri.lexer.tokenize`
and builds a single `Program` node. Statements are dispatched on their
leading token; expressions are parsed by one method per precedence level,
each calling the next tighter level and looping while its own operators
follow (so every binary operator is left associative):

    wa  <  ra  <  comparison  <  + -  <  * / %  <  unary - hoina  <  primary

Statements are separated by newlines. Blank lines are skipped anywhere a
statement may start. The parser does not recover: the first structural
problem raises `ParserError`.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .ast import (
    Node, Program, VarDeclaration, Assignment, IndexAssignment, IfStatement,
    WhileLoop, ForEachLoop, FunctionDeclaration, Return, Print, Break,
    Continue, Import, BinaryOp, UnaryOp, FunctionCall, ListLiteral,
    DictLiteral, IndexAccess, Identifier, NumberLiteral, StringLiteral,
    BooleanLiteral,
)
from .errors import ParserError
from .tokens import Token, TokenType


COMPARISON_OPS = ('==', '!=', '>', '<', '>=', '<=')
ADDITIVE_OPS = ('+', '-')
MULTIPLICATIVE_OPS = ('*', '/', '%')


class Parser:
    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].type is not TokenType.EOF:
            last = tokens[-1] if tokens else None
            eof_line = last.line if last else 1
            tokens = list(tokens) + [Token(TokenType.EOF, '', eof_line, 1)]
        self.tokens = tokens
        self.pos = 0

    # Token helpers

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def peek_next(self) -> Token:
        return self.tokens[min(self.pos + 1, len(self.tokens) - 1)]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type is not TokenType.EOF:
            self.pos += 1
        return token

    def check(self, token_type: TokenType) -> bool:
        return self.peek().type is token_type

    def error(self, message: str, token: Optional[Token] = None) -> ParserError:
        token = token or self.peek()
        return ParserError(message, token.line, token.column)

    def expect(self, token_type: TokenType) -> Token:
        token = self.peek()
        if token.type is not token_type:
            raise self.error(f"Expected {token_type}, found {token.describe()}")
        return self.advance()

    def expect_keyword(self, word: str) -> Token:
        token = self.peek()
        if not token.is_keyword(word):
            raise self.error(f"Expected keyword '{word}', found {token.describe()}")
        return self.advance()

    def expect_operator(self, op: str) -> Token:
        token = self.peek()
        if not token.is_operator(op):
            raise self.error(f"Expected '{op}', found {token.describe()}")
        return self.advance()

    def skip_newlines(self):
        while self.check(TokenType.NEWLINE):
            self.advance()

    def end_statement(self, closer: TokenType):
        # A statement must be followed by a newline or whatever closes its block.
        token = self.peek()
        if token.type not in (TokenType.NEWLINE, closer):
            raise self.error(f"Expected newline after statement, found {token.describe()}")

    # Program and blocks

    def parse(self) -> Program:
        try:
            statements = self.parse_statements(TokenType.EOF)
        except RecursionError:
            raise self.error('Expression nested too deeply') from None
        return Program(statements, line=1)

    def parse_statements(self, closer: TokenType) -> List[Node]:
        statements: List[Node] = []
        self.skip_newlines()
        while not self.check(closer):
            if self.check(TokenType.EOF):
                raise self.error(f"Expected {closer}, found EOF")
            statements.append(self.parse_statement())
            self.end_statement(closer)
            self.skip_newlines()
        return statements

    def parse_block(self) -> List[Node]:
        self.expect(TokenType.LBRACE)
        body = self.parse_statements(TokenType.RBRACE)
        self.expect(TokenType.RBRACE)
        return body

    # Statements

    def parse_statement(self) -> Node:
        token = self.peek()
        if token.type is TokenType.KEYWORD:
            if token.value == 'maanau':
                return self.parse_var_declaration()
            if token.value == 'yedi':
                return self.parse_if_statement()
            if token.value == 'jaba':
                return self.parse_while_loop()
            if token.value == 'pratyek':
                return self.parse_for_each_loop()
            if token.value == 'kaam':
                return self.parse_function_declaration()
            if token.value == 'pathau':
                self.advance()
                return Return(self.parse_expression(), line=token.line)
            if token.value == 'bhan':
                self.advance()
                return Print(self.parse_expression(), line=token.line)
            if token.value == 'rok':
                self.advance()
                return Break(line=token.line)
            if token.value == 'jane':
                self.advance()
                return Continue(line=token.line)
            if token.value == 'aayaat':
                self.advance()
                filename = self.expect(TokenType.STRING)
                return Import(filename.value, line=token.line)
            # sahi, galat and hoina begin expressions; the rest cannot start anything
            if token.value not in ('sahi', 'galat', 'hoina'):
                raise self.error(f"Unexpected keyword '{token.value}'")
        if token.type is TokenType.IDENTIFIER:
            following = self.peek_next()
            if following.is_operator('='):
                return self.parse_assignment()
            if following.type is TokenType.LBRACKET:
                return self.parse_index_assignment_or_expression()
        expr = self.parse_expression()
        expr.line = token.line
        return expr

    def parse_var_declaration(self) -> VarDeclaration:
        keyword = self.expect_keyword('maanau')
        name = self.expect(TokenType.IDENTIFIER).value
        type_hint: Optional[str] = None
        if self.check(TokenType.COLON):
            self.advance()
            type_hint = self.expect(TokenType.IDENTIFIER).value
        self.expect_operator('=')
        value = self.parse_expression()
        return VarDeclaration(name, type_hint, value, line=keyword.line)

    def parse_assignment(self) -> Assignment:
        name_token = self.expect(TokenType.IDENTIFIER)
        self.expect_operator('=')
        value = self.parse_expression()
        return Assignment(name_token.value, value, line=name_token.line)

    def parse_index_assignment_or_expression(self) -> Node:
        start = self.peek()
        expr = self.parse_expression()
        if not self.peek().is_operator('='):
            expr.line = start.line
            return expr
        if not isinstance(expr, IndexAccess):
            raise self.error('Invalid left-hand side in assignment')
        self.advance()
        value = self.parse_expression()
        return IndexAssignment(expr.target, expr.index, value, line=start.line)

    def parse_if_statement(self) -> IfStatement:
        keyword = self.expect_keyword('yedi')
        condition = self.parse_expression()
        self.expect_keyword('bhane')
        then_block = self.parse_block()
        else_block: Optional[List[Node]] = None
        if self.peek().is_keyword('natra'):
            self.advance()
            else_block = self.parse_block()
        return IfStatement(condition, then_block, else_block, line=keyword.line)

    def parse_while_loop(self) -> WhileLoop:
        keyword = self.expect_keyword('jaba')
        self.expect_keyword('samma')
        condition = self.parse_expression()
        body = self.parse_block()
        return WhileLoop(condition, body, line=keyword.line)

    def parse_for_each_loop(self) -> ForEachLoop:
        keyword = self.expect_keyword('pratyek')
        variable = self.expect(TokenType.IDENTIFIER).value
        self.expect_keyword('ma')
        iterable = self.parse_expression()
        body = self.parse_block()
        return ForEachLoop(variable, iterable, body, line=keyword.line)

    def parse_function_declaration(self) -> FunctionDeclaration:
        keyword = self.expect_keyword('kaam')
        name = self.expect(TokenType.IDENTIFIER).value
        self.expect(TokenType.LPAREN)
        params: List[str] = []
        if not self.check(TokenType.RPAREN):
            params.append(self.expect(TokenType.IDENTIFIER).value)
            while self.check(TokenType.COMMA):
                self.advance()
                params.append(self.expect(TokenType.IDENTIFIER).value)
        self.expect(TokenType.RPAREN)
        body = self.parse_block()
        return FunctionDeclaration(name, params, body, line=keyword.line)

    # Expressions

    def parse_expression(self) -> Node:
        return self.parse_logical_or()

    def parse_logical_or(self) -> Node:
        node = self.parse_logical_and()
        while self.peek().is_keyword('wa'):
            op = self.advance().value
            node = BinaryOp(op, node, self.parse_logical_and())
        return node

    def parse_logical_and(self) -> Node:
        node = self.parse_comparison()
        while self.peek().is_keyword('ra'):
            op = self.advance().value
            node = BinaryOp(op, node, self.parse_comparison())
        return node

    def parse_comparison(self) -> Node:
        node = self.parse_additive()
        while self.peek().is_operator(*COMPARISON_OPS):
            op = self.advance().value
            node = BinaryOp(op, node, self.parse_additive())
        return node

    def parse_additive(self) -> Node:
        node = self.parse_multiplicative()
        while self.peek().is_operator(*ADDITIVE_OPS):
            op = self.advance().value
            node = BinaryOp(op, node, self.parse_multiplicative())
        return node

    def parse_multiplicative(self) -> Node:
        node = self.parse_unary()
        while self.peek().is_operator(*MULTIPLICATIVE_OPS):
            op = self.advance().value
            node = BinaryOp(op, node, self.parse_unary())
        return node

    def parse_unary(self) -> Node:
        token = self.peek()
        if token.is_keyword('hoina') or token.is_operator('-'):
            self.advance()
            return UnaryOp(token.value, self.parse_unary())
        return self.parse_primary()

    def parse_primary(self) -> Node:
        token = self.peek()
        if token.type is TokenType.NUMBER:
            self.advance()
            return NumberLiteral(token.value)
        if token.type is TokenType.STRING:
            self.advance()
            return StringLiteral(token.value)
        if token.type is TokenType.KEYWORD:
            if token.value == 'sahi':
                self.advance()
                return BooleanLiteral(True)
            if token.value == 'galat':
                self.advance()
                return BooleanLiteral(False)
            raise self.error(f"Unexpected keyword '{token.value}' in expression")
        if token.type is TokenType.IDENTIFIER:
            self.advance()
            return self.parse_suffixes(Identifier(token.value))
        if token.type is TokenType.LBRACKET:
            return self.parse_list_literal()
        if token.type is TokenType.LBRACE:
            return self.parse_dict_literal()
        if token.type is TokenType.LPAREN:
            self.advance()
            expr = self.parse_expression()
            self.expect(TokenType.RPAREN)
            return expr
        raise self.error(f"Unexpected {token.describe()} in expression")

    def parse_suffixes(self, node: Node) -> Node:
        """Apply any chain of call and index suffixes after an identifier."""
        while True:
            if self.check(TokenType.LPAREN):
                if not isinstance(node, Identifier):
                    raise self.error('Cannot call function on non-identifier')
                self.advance()
                node = FunctionCall(node.name, self.parse_arguments())
                continue
            if self.check(TokenType.LBRACKET):
                self.advance()
                index = self.parse_expression()
                self.expect(TokenType.RBRACKET)
                node = IndexAccess(node, index)
                continue
            return node

    def parse_arguments(self) -> List[Node]:
        args: List[Node] = []
        if not self.check(TokenType.RPAREN):
            args.append(self.parse_expression())
            while self.check(TokenType.COMMA):
                self.advance()
                args.append(self.parse_expression())
        self.expect(TokenType.RPAREN)
        return args

    def parse_list_literal(self) -> ListLiteral:
        self.expect(TokenType.LBRACKET)
        self.skip_newlines()
        elements: List[Node] = []
        if not self.check(TokenType.RBRACKET):
            elements.append(self.parse_expression())
            self.skip_newlines()
            while self.check(TokenType.COMMA):
                self.advance()
                self.skip_newlines()
                elements.append(self.parse_expression())
                self.skip_newlines()
        self.expect(TokenType.RBRACKET)
        return ListLiteral(elements)

    def parse_dict_literal(self) -> DictLiteral:
        self.expect(TokenType.LBRACE)
        self.skip_newlines()
        entries: List[Tuple[str, Node]] = []
        if not self.check(TokenType.RBRACE):
            entries.append(self.parse_dict_entry())
            while self.check(TokenType.COMMA):
                self.advance()
                self.skip_newlines()
                entries.append(self.parse_dict_entry())
        self.expect(TokenType.RBRACE)
        return DictLiteral(entries)

    def parse_dict_entry(self) -> Tuple[str, Node]:
        key = self.expect(TokenType.STRING).value
        self.expect(TokenType.COLON)
        self.skip_newlines()
        value = self.parse_expression()
        self.skip_newlines()
        return key, value


def parse(tokens: List[Token]) -> Program:
    """Parse a token list into a Program AST."""
    return Parser(tokens).parse()
