"""
Macro body lexer - Tokenizes the text between a macro call's delimiters.

Handles:
- Brackets (), [], {} (argument list structure)
- Identifiers, including raw identifiers (r#match)
- String literals: plain, raw (r#"..."#), byte and C strings
- Char literals and lifetimes/labels
- Numbers with prefixes, suffixes and exponents
- Line, block (nested) and doc comments, kept as COMMENT trivia
- Punctuation, with multi-character operators kept whole
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional, List

from ..errors import MacroSyntaxError


class TokenType(Enum):
    """Macro body token types."""
    # Delimiters
    LPAREN = auto()      # (
    RPAREN = auto()      # )
    LBRACKET = auto()    # [
    RBRACKET = auto()    # ]
    LBRACE = auto()      # {
    RBRACE = auto()      # }

    # Literals
    IDENT = auto()       # foo, r#match
    STRING = auto()      # "text"
    RAW_STRING = auto()  # r"text", r#"text"#
    BYTE_STRING = auto() # b"..", br"..", c"..", cr".."
    CHAR = auto()        # 'a', b'a'
    LIFETIME = auto()    # 'a, 'outer
    NUMBER = auto()      # 123, 0x1F, 1.5e3f32

    # Special
    COMMA = auto()       # ,
    EQ = auto()          # = (a lone equals sign)
    PUNCT = auto()       # any other operator or punctuation
    COMMENT = auto()     # // ..., /* ... */

    # End of input
    EOF = auto()


# Longest first, so that '>>=' wins over '>>' and '>'
MULTI_CHAR_PUNCT = [
    '>>=', '<<=', '...', '..=',
    '::', '->', '=>', '==', '!=', '<=', '>=', '&&', '||',
    '+=', '-=', '*=', '/=', '%=', '^=', '&=', '|=', '<<', '>>', '..',
]

SINGLE_CHAR_PUNCT = '+-*/%^!&|<>@.;:#$?~'

BRACKETS = {
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
}


def is_ident_start(ch: Optional[str]) -> bool:
    """True if ch may begin an identifier (letters and underscore)."""
    return bool(ch) and ch.isidentifier()


def is_ident_continue(ch: Optional[str]) -> bool:
    """True if ch may appear after the first character of an identifier."""
    return bool(ch) and ('a' + ch).isidentifier()


@dataclass
class Token:
    """Represents a single token."""
    type: TokenType
    value: str
    line: int
    column: int
    offset: int

    @property
    def end(self) -> int:
        return self.offset + len(self.value)

    @property
    def is_trivia(self) -> bool:
        return self.type == TokenType.COMMENT

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class Lexer:
    """Tokenizes macro body text."""

    def __init__(self, source: str, filename: str = "<macro body>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def error(self, message: str, offset: Optional[int] = None):
        """Raise a lexer error with location information."""
        if offset is None:
            offset = self.pos
        raise MacroSyntaxError(f"{self.filename}:{self.line}:{self.column}: {message}", offset)

    def peek(self, offset: int = 0) -> Optional[str]:
        """Peek at character at current position + offset."""
        pos = self.pos + offset
        if pos < len(self.source):
            return self.source[pos]
        return None

    def advance(self) -> Optional[str]:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return None

        ch = self.source[self.pos]
        self.pos += 1

        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        return ch

    def starts_with(self, text: str) -> bool:
        return self.source.startswith(text, self.pos)

    def skip_whitespace(self):
        """Skip whitespace characters."""
        while self.peek() and self.peek().isspace():
            self.advance()

    def read_line_comment(self) -> str:
        """Read a // comment up to (not including) the line break."""
        start = self.pos
        while self.peek() and self.peek() != '\n':
            self.advance()
        return self.source[start:self.pos]

    def read_block_comment(self) -> str:
        """Read a /* ... */ comment. Block comments nest."""
        start = self.pos
        self.advance()  # /
        self.advance()  # *
        depth = 1

        while depth > 0 and self.peek():
            if self.starts_with('/*'):
                self.advance()
                self.advance()
                depth += 1
            elif self.starts_with('*/'):
                self.advance()
                self.advance()
                depth -= 1
            else:
                self.advance()

        if depth != 0:
            self.error("Unterminated block comment", start)
        return self.source[start:self.pos]

    def read_quoted(self, start: int, quote: str) -> str:
        """Read the rest of a quoted literal whose opening quote was consumed.

        Escapes are skipped but not interpreted; the format template parser
        decodes them later with exact offsets.
        """
        while self.peek() and self.peek() != quote:
            if self.peek() == '\\' and self.peek(1) is not None:
                self.advance()  # backslash
            self.advance()

        if self.peek() != quote:
            self.error("Unterminated literal", start)

        self.advance()  # closing quote
        return self.source[start:self.pos]

    def read_raw_string(self, start: int) -> str:
        """Read a raw string body: the cursor sits on the first '#' or '"'."""
        hashes = 0
        while self.peek() == '#':
            self.advance()
            hashes += 1

        if self.peek() != '"':
            self.error("Expected '\"' in raw string literal", start)
        self.advance()  # opening "

        terminator = '"' + '#' * hashes
        while self.peek() is not None and not self.starts_with(terminator):
            self.advance()

        if self.peek() is None:
            self.error("Unterminated raw string literal", start)

        for _ in terminator:
            self.advance()
        return self.source[start:self.pos]

    def read_identifier(self) -> str:
        """Read an identifier."""
        start = self.pos
        self.advance()
        while is_ident_continue(self.peek()):
            self.advance()
        return self.source[start:self.pos]

    def read_number(self) -> str:
        """Read a numeric literal, keeping prefixes and type suffixes."""
        start = self.pos
        while self.peek() and (self.peek().isalnum() or self.peek() == '_'):
            ch = self.advance()
            # Exponent sign: 1e-5, 2.5E+3 (but not in hex literals)
            if ch in 'eE' and self.peek() in ('+', '-') and self.peek(1) and self.peek(1).isdigit() \
                    and not self.source[start:start + 2].lower() == '0x':
                self.advance()

        # Fractional part, but not a range (1..2) or a method call (1.max(2))
        if self.peek() == '.' and self.peek(1) and self.peek(1).isdigit():
            self.advance()  # .
            while self.peek() and (self.peek().isalnum() or self.peek() == '_'):
                ch = self.advance()
                if ch in 'eE' and self.peek() in ('+', '-') and self.peek(1) and self.peek(1).isdigit():
                    self.advance()

        return self.source[start:self.pos]

    def is_raw_string_start(self, offset: int) -> bool:
        """True if r"... or r#..." begins at position + offset ('r' already matched)."""
        pos = offset
        while self.peek(pos) == '#':
            pos += 1
        return self.peek(pos) == '"'

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source."""
        while self.pos < len(self.source):
            self.skip_whitespace()

            if self.pos >= len(self.source):
                break

            ch = self.peek()
            line = self.line
            col = self.column
            start = self.pos

            # Comments (doc comments are comments too)
            if self.starts_with('//'):
                value = self.read_line_comment()
                self.tokens.append(Token(TokenType.COMMENT, value, line, col, start))
            elif self.starts_with('/*'):
                value = self.read_block_comment()
                self.tokens.append(Token(TokenType.COMMENT, value, line, col, start))

            # Brackets
            elif ch in BRACKETS:
                self.advance()
                self.tokens.append(Token(BRACKETS[ch], ch, line, col, start))

            elif ch == ',':
                self.advance()
                self.tokens.append(Token(TokenType.COMMA, ch, line, col, start))

            # Plain string literal
            elif ch == '"':
                self.advance()
                value = self.read_quoted(start, '"')
                self.tokens.append(Token(TokenType.STRING, value, line, col, start))

            # Raw string r"..." / r#"..."#, or raw identifier r#ident
            elif ch == 'r' and self.is_raw_string_start(1):
                self.advance()  # r
                value = self.read_raw_string(start)
                self.tokens.append(Token(TokenType.RAW_STRING, value, line, col, start))
            elif ch == 'r' and self.peek(1) == '#' and is_ident_start(self.peek(2)):
                self.advance()  # r
                self.advance()  # #
                self.read_identifier()
                value = self.source[start:self.pos]
                self.tokens.append(Token(TokenType.IDENT, value, line, col, start))

            # Byte and C strings: b"..", br"..", c"..", cr".."
            elif ch in 'bc' and self.peek(1) == '"':
                self.advance()  # prefix
                self.advance()  # opening "
                value = self.read_quoted(start, '"')
                self.tokens.append(Token(TokenType.BYTE_STRING, value, line, col, start))
            elif ch in 'bc' and self.peek(1) == 'r' and self.is_raw_string_start(2):
                self.advance()  # prefix
                self.advance()  # r
                value = self.read_raw_string(start)
                self.tokens.append(Token(TokenType.BYTE_STRING, value, line, col, start))
            elif ch == 'b' and self.peek(1) == "'":
                self.advance()  # b
                self.advance()  # opening '
                value = self.read_quoted(start, "'")
                self.tokens.append(Token(TokenType.CHAR, value, line, col, start))

            # Char literal versus lifetime
            elif ch == "'":
                if self.peek(1) == '\\' or (self.peek(1) is not None and self.peek(2) == "'"):
                    self.advance()  # opening '
                    value = self.read_quoted(start, "'")
                    self.tokens.append(Token(TokenType.CHAR, value, line, col, start))
                elif is_ident_start(self.peek(1)):
                    self.advance()  # '
                    self.read_identifier()
                    value = self.source[start:self.pos]
                    self.tokens.append(Token(TokenType.LIFETIME, value, line, col, start))
                else:
                    self.error(f"Unexpected character: {ch!r}")

            # Identifier
            elif is_ident_start(ch):
                value = self.read_identifier()
                self.tokens.append(Token(TokenType.IDENT, value, line, col, start))

            # Number
            elif ch.isdigit():
                value = self.read_number()
                self.tokens.append(Token(TokenType.NUMBER, value, line, col, start))

            # Punctuation
            else:
                for punct in MULTI_CHAR_PUNCT:
                    if self.starts_with(punct):
                        for _ in punct:
                            self.advance()
                        self.tokens.append(Token(TokenType.PUNCT, punct, line, col, start))
                        break
                else:
                    if ch == '=':
                        self.advance()
                        self.tokens.append(Token(TokenType.EQ, ch, line, col, start))
                    elif ch in SINGLE_CHAR_PUNCT:
                        self.advance()
                        self.tokens.append(Token(TokenType.PUNCT, ch, line, col, start))
                    else:
                        self.error(f"Unexpected character: {ch!r}")

        # Add EOF token
        self.tokens.append(Token(TokenType.EOF, '', self.line, self.column, self.pos))
        return self.tokens


def tokenize(source: str, filename: str = "<macro body>") -> List[Token]:
    """Convenience function to tokenize macro body text."""
    lexer = Lexer(source, filename)
    return lexer.tokenize()
