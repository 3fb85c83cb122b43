"""Tests for the macro body lexer."""

import pytest

from fmtexpand.errors import MacroSyntaxError
from fmtexpand.lexer import Lexer, TokenType


def kinds(source):
    return [(t.type, t.value) for t in Lexer(source).tokenize() if t.type != TokenType.EOF]


def test_basic_call():
    """Test lexing a format argument list."""
    tokens = Lexer('"{x}", y = 2').tokenize()

    assert [t.type for t in tokens] == [
        TokenType.STRING, TokenType.COMMA, TokenType.IDENT, TokenType.EQ, TokenType.NUMBER, TokenType.EOF,
    ]
    assert tokens[0].value == '"{x}"'
    assert tokens[2].value == "y"


def test_offsets_and_positions():
    """Test token offsets, ends and line/column tracking."""
    tokens = Lexer('ab, "c"\n  d').tokenize()

    assert tokens[0].offset == 0
    assert tokens[1].offset == 2
    assert tokens[2].offset == 4
    assert tokens[2].end == 7
    assert (tokens[3].line, tokens[3].column) == (2, 3)


def test_multi_char_operators():
    """A lone '=' is EQ; comparison and arrow operators stay whole."""
    found = kinds("a == b, c => d, e <= f, g += h, i = j")

    assert (TokenType.PUNCT, '==') in found
    assert (TokenType.PUNCT, '=>') in found
    assert (TokenType.PUNCT, '<=') in found
    assert (TokenType.PUNCT, '+=') in found
    assert [v for t, v in found if t == TokenType.EQ] == ['=']


def test_raw_strings():
    """Test raw string literals with and without hashes."""
    assert kinds('r"a\\b" r#"say "hi""#') == [
        (TokenType.RAW_STRING, 'r"a\\b"'),
        (TokenType.RAW_STRING, 'r#"say "hi""#'),
    ]


def test_raw_identifier():
    assert kinds("r#match") == [(TokenType.IDENT, "r#match")]


def test_byte_and_c_strings():
    assert [t for t, _ in kinds('b"ab" br"cd" c"ef" cr#"gh"#')] == [TokenType.BYTE_STRING] * 4


def test_string_escapes_do_not_end_literal():
    assert kinds('"a\\"b", c') == [
        (TokenType.STRING, '"a\\"b"'),
        (TokenType.COMMA, ','),
        (TokenType.IDENT, 'c'),
    ]


def test_chars_and_lifetimes():
    """Test char literals versus lifetimes and labels."""
    assert kinds("'a' 'b '\\n' 'label b'x'") == [
        (TokenType.CHAR, "'a'"),
        (TokenType.LIFETIME, "'b"),
        (TokenType.CHAR, "'\\n'"),
        (TokenType.LIFETIME, "'label"),
        (TokenType.CHAR, "b'x'"),
    ]


def test_comments():
    """Test line, nested block and doc comments."""
    assert kinds("a // hi\n/* x /* nested */ y */ /// doc\nb") == [
        (TokenType.IDENT, 'a'),
        (TokenType.COMMENT, '// hi'),
        (TokenType.COMMENT, '/* x /* nested */ y */'),
        (TokenType.COMMENT, '/// doc'),
        (TokenType.IDENT, 'b'),
    ]


def test_numbers():
    """Test number literals."""
    assert kinds("0x1F 1_000u32 1.5e-3 1..2") == [
        (TokenType.NUMBER, '0x1F'),
        (TokenType.NUMBER, '1_000u32'),
        (TokenType.NUMBER, '1.5e-3'),
        (TokenType.NUMBER, '1'),
        (TokenType.PUNCT, '..'),
        (TokenType.NUMBER, '2'),
    ]


def test_method_call_on_integer():
    assert kinds("1.max(2)")[:3] == [
        (TokenType.NUMBER, '1'),
        (TokenType.PUNCT, '.'),
        (TokenType.IDENT, 'max'),
    ]


def test_brackets():
    assert [t for t, _ in kinds("([{}])")] == [
        TokenType.LPAREN, TokenType.LBRACKET, TokenType.LBRACE,
        TokenType.RBRACE, TokenType.RBRACKET, TokenType.RPAREN,
    ]


@pytest.mark.parametrize("source", [
    '"unterminated',
    "r#\"unterminated\"",
    "/* never closed",
    "b'x",
])
def test_unterminated_literals(source):
    with pytest.raises(MacroSyntaxError) as info:
        Lexer(source).tokenize()
    assert info.value.offset == 0


def test_unexpected_character():
    with pytest.raises(MacroSyntaxError) as info:
        Lexer("a `b`").tokenize()
    assert info.value.offset == 2
