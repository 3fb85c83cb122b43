"""
fmtexpand - Expansion of format_args!-style macro calls.

Rewrites a format macro call so that every identifier captured implicitly by
its format string is passed as an explicit named argument, and keeps an exact
offset mapping between the original call body and the rewritten text.
"""

from .errors import (
    ExpansionError, ExpansionFailure, MacroSyntaxError, NoImplicitArgumentsError,
    NotApplicableError, StructuralParseError, TemplateSyntaxError,
)
from .expander import (
    BUILTIN_FORMAT_MACROS, EXPANDER_VERSION, BuiltinMacroExpander, ExpansionOutcome,
    MappedTextRange, RangeMap, expand,
)

__version__ = "0.1.0"

__all__ = [
    'expand', 'BuiltinMacroExpander', 'ExpansionOutcome', 'RangeMap', 'MappedTextRange',
    'BUILTIN_FORMAT_MACROS', 'EXPANDER_VERSION',
    'ExpansionError', 'ExpansionFailure', 'MacroSyntaxError', 'NoImplicitArgumentsError',
    'NotApplicableError', 'StructuralParseError', 'TemplateSyntaxError',
]
