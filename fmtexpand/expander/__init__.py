"""Built-in format macro expansion with offset mapping."""

from .builtin import (
    BuiltinMacroExpander, ExpansionOutcome, BUILTIN_FORMAT_MACROS, EXPANDER_VERSION,
    expand, rewrite_implicit_arguments,
)
from .mapped_text import (
    MappedSpan, MappedText, MappedTextBuilder, MappedTextRange, RangeMap, synthesized, verbatim,
)

__all__ = [
    'BuiltinMacroExpander', 'ExpansionOutcome', 'BUILTIN_FORMAT_MACROS', 'EXPANDER_VERSION',
    'expand', 'rewrite_implicit_arguments',
    'MappedSpan', 'MappedText', 'MappedTextBuilder', 'MappedTextRange', 'RangeMap',
    'synthesized', 'verbatim',
]
