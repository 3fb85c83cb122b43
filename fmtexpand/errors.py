"""
Error types for format macro expansion.

Lexing and parsing stages raise MacroSyntaxError.
The expander catches those at its boundary and reports one of the
ExpansionFailure kinds instead.
"""

from enum import Enum
from typing import List, Optional


class MacroSyntaxError(SyntaxError):
    """Raised when a macro body cannot be lexed or parsed as an argument list."""

    def __init__(self, message: str, offset: Optional[int] = None):
        if offset is not None:
            super().__init__(f"{offset}: {message}")
        else:
            super().__init__(message)
        self.message = message
        self.offset = offset


class ExpansionError(Exception):
    """Base class for all expansion failures."""


class NotApplicableError(ExpansionError):
    """The macro is not a recognized format macro."""


class StructuralParseError(ExpansionError):
    """The body is not an argument list, or the template is not a string literal."""


class TemplateSyntaxError(ExpansionError):
    """The format template has malformed placeholders."""

    def __init__(self, message: str, diagnostics: Optional[List] = None):
        super().__init__(message)
        self.diagnostics = list(diagnostics or [])


class NoImplicitArgumentsError(ExpansionError):
    """The template is valid but there is nothing to rewrite."""


class ExpansionFailure(Enum):
    """Typed failure kinds returned by the expander."""
    NOT_APPLICABLE = "not applicable"
    STRUCTURAL_PARSE_FAILURE = "structural parse failure"
    TEMPLATE_SYNTAX_FAILURE = "template syntax failure"
    NO_IMPLICIT_ARGUMENTS = "no implicit arguments"

    @property
    def error_class(self) -> type:
        return _ERROR_CLASSES[self]


_ERROR_CLASSES = {
    ExpansionFailure.NOT_APPLICABLE: NotApplicableError,
    ExpansionFailure.STRUCTURAL_PARSE_FAILURE: StructuralParseError,
    ExpansionFailure.TEMPLATE_SYNTAX_FAILURE: TemplateSyntaxError,
    ExpansionFailure.NO_IMPLICIT_ARGUMENTS: NoImplicitArgumentsError,
}
