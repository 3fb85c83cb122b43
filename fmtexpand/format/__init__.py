"""Format template parsing and parameter classification."""

from .template import (
    Diagnostic, ArgumentKind, ArgumentSelector, Count, FormatSpec, Placeholder,
    TemplateText, TemplateParseResult, parse_template, check_syntax_errors, unescape,
)
from .parameters import (
    ParameterRole, Positional, Named, ImplicitCapture, build_parameters,
    collect_named_arguments, resolve_parameters, implicit_captures,
)

__all__ = [
    'Diagnostic', 'ArgumentKind', 'ArgumentSelector', 'Count', 'FormatSpec', 'Placeholder',
    'TemplateText', 'TemplateParseResult', 'parse_template', 'check_syntax_errors', 'unescape',
    'ParameterRole', 'Positional', 'Named', 'ImplicitCapture', 'build_parameters',
    'collect_named_arguments', 'resolve_parameters', 'implicit_captures',
]
