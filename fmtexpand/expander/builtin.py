"""
Expander for built-in format macros (format_args!, format_args_nl!).

Every identifier captured implicitly by the format string becomes an explicit
named argument:

    format_args!("{x} and {y}", y = 2)  =>  format_args!("{x} and {y}", y = 2, x = x)

The output keeps the whole original body verbatim, so all offsets inside it map
back exactly; the appended identifiers map back to where they are written in
the format string.
"""

import logging
import sys
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, List, Optional, Tuple

from ..errors import ExpansionFailure, MacroSyntaxError, TemplateSyntaxError
from ..format.parameters import (
    ImplicitCapture, build_parameters, collect_named_arguments, implicit_captures,
)
from ..format.template import Diagnostic, check_syntax_errors, parse_template
from ..parser import parse_macro_body, template_literal
from ..parser.ast_nodes import FormatMacroArgument, FormatTemplateLiteral
from .mapped_text import MappedText, MappedTextBuilder, RangeMap

logger = logging.getLogger(__name__)

BUILTIN_FORMAT_MACROS: FrozenSet[str] = frozenset({"format_args", "format_args_nl"})

# Bump whenever the expansion text or its mapping changes for some input;
# external caches key their entries on (body text, EXPANDER_VERSION).
EXPANDER_VERSION = 1


@dataclass(frozen=True)
class ExpansionOutcome:
    """Result of one expansion: text and ranges on success, a failure kind otherwise.

    Diagnostic offsets are relative to the macro body.
    """
    text: Optional[str] = None
    ranges: Optional[RangeMap] = None
    failure: Optional[ExpansionFailure] = None
    message: str = ''
    diagnostics: Tuple[Diagnostic, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, mapped: MappedText) -> 'ExpansionOutcome':
        return cls(text=mapped.text, ranges=mapped.ranges)

    @classmethod
    def failed(cls, failure: ExpansionFailure, message: str = '',
               diagnostics: Iterable[Diagnostic] = ()) -> 'ExpansionOutcome':
        return cls(failure=failure, message=message or failure.value, diagnostics=tuple(diagnostics))

    def unwrap(self) -> MappedText:
        """Return the mapped text, or raise the exception matching the failure kind."""
        if self.failure is None:
            return MappedText(self.text, self.ranges)
        if self.failure == ExpansionFailure.TEMPLATE_SYNTAX_FAILURE:
            raise TemplateSyntaxError(self.message, list(self.diagnostics))
        raise self.failure.error_class(self.message)


def rewrite_implicit_arguments(macro_name: str, body_text: str, format_argument: FormatMacroArgument,
                               template: FormatTemplateLiteral,
                               captures: List[ImplicitCapture]) -> Optional[MappedText]:
    """Build ``name!(body, a = a, b = b)`` for the given captures.

    Returns None if there is nothing to append.
    """
    if not captures:
        return None

    builder = MappedTextBuilder()
    builder.append_unmapped(f"{macro_name}!(")
    builder.append_mapped(body_text, 0)

    # A trailing // comment would swallow everything appended on its line
    if format_argument.ends_with_line_comment:
        builder.append_unmapped("\n")

    ends_with_comma = format_argument.ends_with_comma
    for capture in captures:
        # Make sure that we have ', ' at the end before we add the new argument
        if not ends_with_comma:
            builder.append_unmapped(", ")
        elif builder.last_char() != ' ':
            builder.append_unmapped(" ")
        ends_with_comma = False

        builder.append_unmapped(f"{capture.identifier} = ")
        source_offset = template.offset_in_body + capture.offset
        if body_text[source_offset:source_offset + len(capture.identifier)] == capture.identifier:
            builder.append_mapped(capture.identifier, source_offset)
        else:
            # Spelled with escapes in the template: no source text matches it
            builder.append_unmapped(capture.identifier)

    builder.append_unmapped(")")
    return builder.to_mapped_text()


class BuiltinMacroExpander:
    """Expands built-in format macros; a pure function of (macro name, body text)."""

    EXPANDER_VERSION = EXPANDER_VERSION

    def __init__(self, format_macros: Iterable[str] = BUILTIN_FORMAT_MACROS, verbose: bool = False):
        self.format_macros: FrozenSet[str] = frozenset(format_macros)
        self.verbose = verbose

    def log(self, message: str):
        """Log at DEBUG; also print to stderr if verbose mode is enabled."""
        logger.debug(message)
        if self.verbose:
            print(f"[fmtexpand] {message}", file=sys.stderr)

    def cache_key(self, body_text: str) -> Tuple[str, int]:
        """Key under which an external cache may store the expansion of body_text."""
        return body_text, self.EXPANDER_VERSION

    def expand(self, macro_name: str, body_text: str) -> ExpansionOutcome:
        """
        Expand one macro call.

        Args:
            macro_name: Macro identifier without the '!'
            body_text: Exact text between the call's parentheses

        Returns:
            ExpansionOutcome; never raises for bad input.
        """
        if macro_name not in self.format_macros:
            self.log(f"{macro_name}!: not a format macro")
            return ExpansionOutcome.failed(ExpansionFailure.NOT_APPLICABLE, f"{macro_name}! is not a format macro")

        try:
            format_argument = parse_macro_body(body_text, filename=f"<{macro_name}!>")
            template = template_literal(format_argument)
        except MacroSyntaxError as e:
            self.log(f"{macro_name}!: structural parse failure: {e}")
            return ExpansionOutcome.failed(ExpansionFailure.STRUCTURAL_PARSE_FAILURE, str(e))

        parsed = parse_template(template.raw_text)
        errors = check_syntax_errors(parsed)
        if errors:
            self.log(f"{macro_name}!: {len(errors)} format string error(s)")
            shifted = [
                replace(d, start=d.start + template.offset_in_body, end=d.end + template.offset_in_body)
                for d in errors
            ]
            return ExpansionOutcome.failed(
                ExpansionFailure.TEMPLATE_SYNTAX_FAILURE,
                f"invalid format string: {errors[0].message}",
                shifted,
            )

        named_arguments = collect_named_arguments(format_argument)
        captures = implicit_captures(build_parameters(parsed), named_arguments)
        mapped = rewrite_implicit_arguments(macro_name, body_text, format_argument, template, captures)
        if mapped is None:
            self.log(f"{macro_name}!: no implicit arguments")
            return ExpansionOutcome.failed(ExpansionFailure.NO_IMPLICIT_ARGUMENTS)

        self.log(f"{macro_name}!: added {len(captures)} implicit argument(s): "
                 f"{', '.join(c.identifier for c in captures)}")
        return ExpansionOutcome.success(mapped)

    def expand_macro_as_text_with_err(self, macro_name: str, body_text: str) -> MappedText:
        """Like expand(), but raises an ExpansionError subclass on failure."""
        return self.expand(macro_name, body_text).unwrap()


_default_expander = BuiltinMacroExpander()


def expand(macro_name: str, body_text: str) -> ExpansionOutcome:
    """Expand a format macro call with the default set of format macros."""
    return _default_expander.expand(macro_name, body_text)
