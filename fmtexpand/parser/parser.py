"""
Format macro argument parser - Splits a macro body into its arguments.

The body is parsed as if it were wrapped in parentheses: ``(`` + body + ``\\n)``.
The leading parenthesis shifts every token offset by WRAPPING_PREFIX_LEN, which
is subtracted again before any offset reaches a syntax tree node. The newline in
the suffix keeps a trailing line comment from swallowing the closing parenthesis;
it sits after the body, so it shifts nothing.
"""

from typing import List, Optional

from ..errors import MacroSyntaxError
from ..lexer import Lexer, Token, TokenType
from .ast_nodes import FormatArgument, FormatMacroArgument, FormatTemplateLiteral

WRAPPING_PREFIX = '('
WRAPPING_SUFFIX = '\n)'
WRAPPING_PREFIX_LEN = len(WRAPPING_PREFIX)

OPENERS = {
    TokenType.LPAREN: TokenType.RPAREN,
    TokenType.LBRACKET: TokenType.RBRACKET,
    TokenType.LBRACE: TokenType.RBRACE,
}
CLOSERS = set(OPENERS.values())

# Stack marker for turbofish generic arguments: ::<...>
ANGLE = 'angle'


class Parser:
    """Parses macro body tokens into a FormatMacroArgument."""

    def __init__(self, tokens: List[Token], body_text: str, filename: str = "<macro body>"):
        self.all_tokens = tokens
        self.tokens = [t for t in tokens if not t.is_trivia]
        self.body_text = body_text
        self.filename = filename
        self.pos = 0
        self.current_token = self.tokens[0] if self.tokens else None

    def error(self, message: str, token: Optional[Token] = None):
        """Raise a parser error with location information."""
        token = token or self.current_token
        if token:
            raise MacroSyntaxError(
                f"{self.filename}:{token.line}:{token.column}: {message}",
                max(token.offset - WRAPPING_PREFIX_LEN, 0),
            )
        raise MacroSyntaxError(f"{self.filename}: {message}")

    def peek(self, offset: int = 0) -> Optional[Token]:
        """Peek at token at current position + offset."""
        pos = self.pos + offset
        if pos < len(self.tokens):
            return self.tokens[pos]
        return None

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
            self.current_token = self.tokens[self.pos]
        return token

    def expect(self, token_type: TokenType) -> Token:
        """Consume token of expected type or raise error."""
        if self.current_token.type != token_type:
            self.error(f"Expected {token_type.name}, got {self.current_token.type.name} ({self.current_token.value!r})")
        return self.advance()

    def parse(self) -> FormatMacroArgument:
        """Parse the whole ``( arg, ... )`` list."""
        self.expect(TokenType.LPAREN)

        result = FormatMacroArgument(body_text=self.body_text)
        current: List[Token] = []
        stack: list = [TokenType.RPAREN]
        closure_depth: Optional[int] = None  # stack depth of open |closure params|
        expr_start = True
        last_significant: Optional[Token] = None

        while True:
            token = self.current_token
            if token.type == TokenType.EOF:
                self.error("Unbalanced brackets: expected ')'")

            depth = len(stack)

            if token.type in OPENERS:
                stack.append(OPENERS[token.type])
                expr_start = True
            elif token.type in CLOSERS:
                if stack[-1] != token.type:
                    self.error(f"Mismatched closing bracket {token.value!r}")
                stack.pop()
                if not stack:
                    self.advance()
                    break
                if closure_depth is not None and len(stack) < closure_depth:
                    closure_depth = None
                expr_start = False
            elif token.type == TokenType.PUNCT and token.value == '<' and stack[-1] == ANGLE:
                stack.append(ANGLE)
            elif token.type == TokenType.PUNCT and token.value == '<' \
                    and last_significant is not None and last_significant.value == '::':
                stack.append(ANGLE)
            elif token.type == TokenType.PUNCT and token.value in ('>', '>>') and stack[-1] == ANGLE:
                for _ in token.value:
                    if stack[-1] != ANGLE:
                        self.error("Unbalanced generic arguments")
                    stack.pop()
            elif token.type == TokenType.PUNCT and token.value == '|':
                # |params| at the start of an expression opens a closure
                if closure_depth == depth:
                    closure_depth = None
                elif expr_start and closure_depth is None:
                    closure_depth = depth
                expr_start = False
            elif token.type == TokenType.COMMA and depth == 1 and closure_depth is None:
                if not current:
                    self.error("Expected expression before ','")
                result.arguments.append(self._build_argument(current))
                current = []
                last_significant = self.advance()
                expr_start = True
                continue
            elif token.type == TokenType.EQ or (token.type == TokenType.IDENT and token.value == 'move'):
                expr_start = True
            else:
                # postfix '?' ends an operand
                expr_start = token.type == TokenType.PUNCT and token.value != '?'

            current.append(token)
            last_significant = self.advance()

        if self.current_token.type != TokenType.EOF:
            self.error(f"Unexpected {self.current_token.value!r} after argument list")

        if current:
            result.arguments.append(self._build_argument(current))
        elif last_significant is not None and last_significant.type == TokenType.COMMA:
            result.ends_with_comma = True

        if not result.arguments:
            self.error("Expected format string", last_significant)

        result.ends_with_line_comment = self._ends_with_line_comment()
        return result

    def _build_argument(self, tokens: List[Token]) -> FormatArgument:
        """Make a FormatArgument from its tokens, detecting ``name = expr`` and ``name``."""
        start = tokens[0].offset - WRAPPING_PREFIX_LEN
        end = tokens[-1].end - WRAPPING_PREFIX_LEN
        argument = FormatArgument(
            start=start,
            end=end,
            text=self.body_text[start:end],
            tokens=tokens,
            expr_start=start,
        )

        first = tokens[0]
        if first.type == TokenType.IDENT and len(tokens) > 1 and tokens[1].type == TokenType.EQ:
            if len(tokens) == 2:
                self.error(f"Expected expression after '{first.value} ='", tokens[1])
            argument.name = _identifier_name(first.value)
            argument.name_offset = start
            argument.expr_start = tokens[2].offset - WRAPPING_PREFIX_LEN
        elif first.type == TokenType.IDENT and len(tokens) == 1:
            argument.name = _identifier_name(first.value)
            argument.name_offset = start

        return argument

    def _ends_with_line_comment(self) -> bool:
        """True if the body's last trivia is a line comment running to the end of the body."""
        body_end = WRAPPING_PREFIX_LEN + len(self.body_text)
        for token in reversed(self.all_tokens):
            if token.type in (TokenType.EOF, TokenType.RPAREN) and token.offset >= body_end:
                continue
            return token.type == TokenType.COMMENT and token.value.startswith('//') and token.end == body_end
        return False


def _identifier_name(text: str) -> str:
    """Strip the raw identifier prefix: r#type binds the name 'type'."""
    return text[2:] if text.startswith('r#') else text


def parse_macro_body(body_text: str, filename: str = "<macro body>") -> FormatMacroArgument:
    """Parse the text between a format macro's delimiters as an argument list."""
    wrapped = WRAPPING_PREFIX + body_text + WRAPPING_SUFFIX
    tokens = Lexer(wrapped, filename).tokenize()
    return Parser(tokens, body_text, filename).parse()


def template_literal(format_argument: FormatMacroArgument) -> FormatTemplateLiteral:
    """Return the format string argument, or raise if the first argument is not a string literal."""
    template = format_argument.template
    if template is None or not template.is_string_literal:
        raise MacroSyntaxError(
            "Format argument must be a string literal",
            template.start if template is not None else 0,
        )
    return FormatTemplateLiteral(raw_text=template.text, offset_in_body=template.start)
