import pytest

from khukuri.errors import LexerError
from khukuri.lexer import tokenize
from khukuri.tokens import KEYWORDS, TokenType


def values(source):
    return [t.value for t in tokenize(source)]


def types(source):
    return [t.type for t in tokenize(source)]


def test_empty_input_is_just_eof():
    tokens = tokenize('')
    assert len(tokens) == 1
    assert tokens[0].type is TokenType.EOF
    assert (tokens[0].line, tokens[0].column) == (1, 1)


def test_whitespace_only():
    assert types('   \t   ') == [TokenType.EOF]


def test_every_reserved_word_is_a_keyword():
    for word in KEYWORDS:
        tokens = tokenize(word)
        assert tokens[0].type is TokenType.KEYWORD
        assert tokens[0].value == word


def test_keyword_prefix_is_still_an_identifier():
    tokens = tokenize('maanauna rakam')
    assert tokens[0].type is TokenType.IDENTIFIER
    assert tokens[0].value == 'maanauna'
    assert tokens[1].type is TokenType.IDENTIFIER


def test_numbers():
    tokens = tokenize('10 20.5 30 5.')
    assert [t.value for t in tokens[:4]] == ['10', '20.5', '30', '5.']
    assert all(t.type is TokenType.NUMBER for t in tokens[:4])


def test_second_dot_ends_the_number():
    with pytest.raises(LexerError) as exc:
        tokenize('1.2.3')
    assert "Unexpected character '.'" in exc.value.message
    assert exc.value.column == 4


def test_string_escapes():
    tokens = tokenize(r'"line1\nline2\ttab\r\n\"quote\" \\ \q"')
    assert tokens[0].type is TokenType.STRING
    assert tokens[0].value == 'line1\nline2\ttab\r\n"quote" \\ q'


def test_empty_and_unicode_strings():
    assert tokenize('""')[0].value == ''
    assert tokenize('"नमस्ते"')[0].value == 'नमस्ते'


def test_unterminated_string():
    with pytest.raises(LexerError) as exc:
        tokenize('"unterminated')
    assert 'Unterminated string' in exc.value.message
    assert (exc.value.line, exc.value.column) == (1, 1)


def test_raw_newline_inside_string_is_an_error():
    with pytest.raises(LexerError) as exc:
        tokenize('"hello\nworld"')
    assert 'Unterminated string' in exc.value.message


def test_identifiers():
    tokens = tokenize('my_var_123 _x नमस्ते')
    assert [t.type for t in tokens[:3]] == [TokenType.IDENTIFIER] * 3
    assert [t.value for t in tokens[:3]] == ['my_var_123', '_x', 'नमस्ते']


def test_operators_prefer_two_characters():
    assert values('== != >= <= = ! > < + - * / %')[:-1] == [
        '==', '!=', '>=', '<=', '=', '!', '>', '<', '+', '-', '*', '/', '%']
    assert values('a==b')[:-1] == ['a', '==', 'b']


def test_delimiters():
    assert types('{ } ( ) [ ] , :')[:-1] == [
        TokenType.LBRACE, TokenType.RBRACE, TokenType.LPAREN, TokenType.RPAREN,
        TokenType.LBRACKET, TokenType.RBRACKET, TokenType.COMMA, TokenType.COLON]


def test_newlines_are_tokens():
    tokens = tokenize('maanau\n\n\nx')
    assert sum(1 for t in tokens if t.type is TokenType.NEWLINE) == 3
    assert tokens[-2].value == 'x'


def test_comments_are_skipped_but_newline_kept():
    tokens = tokenize('// comment\nmaanau')
    assert tokens[0].type is TokenType.NEWLINE
    assert tokens[1].value == 'maanau'
    assert types('maanau // comment') == [TokenType.KEYWORD, TokenType.EOF]


def test_division_is_not_a_comment():
    assert values('10 / 2')[:-1] == ['10', '/', '2']


def test_line_and_column_tracking():
    tokens = tokenize('abc def\n  x = 5')
    assert (tokens[0].line, tokens[0].column) == (1, 1)
    assert (tokens[1].line, tokens[1].column) == (1, 5)
    assert (tokens[2].line, tokens[2].column) == (1, 8)  # newline
    assert (tokens[3].line, tokens[3].column) == (2, 3)
    assert (tokens[-1].line, tokens[-1].column) == (2, 8)


def test_invalid_character():
    with pytest.raises(LexerError) as exc:
        tokenize('maanau x @ 5')
    assert exc.value.message == "Unexpected character '@'"
    assert (exc.value.line, exc.value.column) == (1, 10)


def test_function_declaration_tokens():
    tokens = tokenize('kaam add(a, b) { pathau a + b }')
    assert [t.value for t in tokens[:7]] == ['kaam', 'add', '(', 'a', ',', 'b', ')']
    assert tokens[7].type is TokenType.LBRACE
    assert tokens[-2].type is TokenType.RBRACE
