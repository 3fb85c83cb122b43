"""
Syntax tree node definitions for a format macro call body.

All offsets are relative to the unwrapped body text.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..lexer import Token, TokenType


@dataclass
class FormatTemplateLiteral:
    """The format string: first positional argument, a string literal."""
    raw_text: str
    offset_in_body: int

    @property
    def is_raw(self) -> bool:
        """True for r"..." / r#"..."# literals, which have no escapes."""
        return self.raw_text.startswith('r')

    @property
    def end(self) -> int:
        return self.offset_in_body + len(self.raw_text)


@dataclass
class FormatArgument:
    """One comma-separated argument of a format macro call.

    ``name`` is set for ``name = expr`` and for a bare ``name`` (shorthand).
    """
    start: int
    end: int
    text: str
    tokens: List[Token] = field(default_factory=list)
    name: Optional[str] = None
    name_offset: Optional[int] = None
    expr_start: int = 0

    @property
    def expr_text(self) -> str:
        return self.text[self.expr_start - self.start:]

    @property
    def is_named(self) -> bool:
        return self.name is not None

    @property
    def is_shorthand(self) -> bool:
        """True for a bare identifier argument, which binds its own name."""
        return self.name is not None and self.expr_start == self.start

    @property
    def is_string_literal(self) -> bool:
        """True if this argument is a single plain or raw string literal."""
        return (
            len(self.tokens) == 1
            and self.tokens[0].type in (TokenType.STRING, TokenType.RAW_STRING)
        )

    def __repr__(self):
        if self.is_named and not self.is_shorthand:
            return f"FormatArgument({self.name} = {self.expr_text!r})"
        return f"FormatArgument({self.text!r})"


@dataclass
class FormatMacroArgument:
    """A parsed ``( template, arg, name = arg, ... )`` argument list."""
    body_text: str
    arguments: List[FormatArgument] = field(default_factory=list)
    ends_with_comma: bool = False
    ends_with_line_comment: bool = False

    @property
    def template(self) -> Optional[FormatArgument]:
        return self.arguments[0] if self.arguments else None

    @property
    def explicit_arguments(self) -> List[FormatArgument]:
        """All arguments after the template."""
        return self.arguments[1:]
