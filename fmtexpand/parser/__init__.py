"""Format macro argument parser - Splits a macro body into its arguments."""

from .parser import Parser, parse_macro_body, template_literal, WRAPPING_PREFIX_LEN
from .ast_nodes import FormatArgument, FormatMacroArgument, FormatTemplateLiteral

__all__ = [
    'Parser', 'parse_macro_body', 'template_literal', 'WRAPPING_PREFIX_LEN',
    'FormatArgument', 'FormatMacroArgument', 'FormatTemplateLiteral',
]
