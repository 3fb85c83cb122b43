"""
Parameter classification for format templates.

Turns parsed placeholders into parameter references, collects the names bound
by the macro call's explicit arguments, and picks out the implicit captures
that still need an argument of their own.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Set, Union

from ..parser.ast_nodes import FormatMacroArgument
from .template import ArgumentKind, ArgumentSelector, TemplateParseResult


class ParameterRole(Enum):
    """Which part of a placeholder a reference came from."""
    VALUE = "value"
    WIDTH = "width"
    PRECISION = "precision"


@dataclass(frozen=True)
class Positional:
    """Consumes an explicit positional argument."""
    index: int
    start: int
    end: int
    role: ParameterRole = ParameterRole.VALUE
    implicit_index: bool = False


@dataclass(frozen=True)
class Named:
    """Refers to an explicit argument bound by name."""
    name: str
    start: int
    end: int
    role: ParameterRole = ParameterRole.VALUE


@dataclass(frozen=True)
class ImplicitCapture:
    """An identifier read from the enclosing scope.

    ``offset`` and ``end`` are offsets into the template literal text.
    """
    identifier: str
    offset: int
    end: int
    role: ParameterRole = ParameterRole.VALUE


ParameterReference = Union[Positional, Named, ImplicitCapture]


def build_parameters(result: TemplateParseResult) -> List[ParameterReference]:
    """Classify every argument reference of a parsed template, in textual order.

    Empty selectors and ``.*`` take the next positional index from a counter
    shared by the whole template; ``.*`` takes its index before the value it
    belongs to. Explicit indices leave the counter alone. Identifiers become
    ImplicitCapture until checked against the call's named arguments.
    """
    parameters: List[ParameterReference] = []
    next_index = 0

    for placeholder in result.placeholders:
        spec = placeholder.spec
        width = spec.width.argument if spec is not None and spec.width is not None else None
        precision = spec.precision.argument if spec is not None and spec.precision is not None else None

        precision_index = None
        if precision is not None and precision.kind == ArgumentKind.NEXT:
            precision_index = next_index
            next_index += 1

        value_index = None
        if placeholder.argument.kind == ArgumentKind.NEXT:
            value_index = next_index
            next_index += 1

        parameters.append(_classify(placeholder.argument, ParameterRole.VALUE, value_index))
        if width is not None:
            parameters.append(_classify(width, ParameterRole.WIDTH, None))
        if precision is not None:
            parameters.append(_classify(precision, ParameterRole.PRECISION, precision_index))

    return parameters


def _classify(selector: ArgumentSelector, role: ParameterRole, next_index) -> ParameterReference:
    if selector.kind == ArgumentKind.NEXT:
        return Positional(next_index, selector.start, selector.end, role, implicit_index=True)
    if selector.kind == ArgumentKind.INDEX:
        return Positional(selector.value, selector.start, selector.end, role)
    return ImplicitCapture(selector.value, selector.start, selector.end, role)


def collect_named_arguments(format_argument: FormatMacroArgument) -> Set[str]:
    """Names bound by the call's arguments after the template (``name = expr`` or ``name``)."""
    return {
        argument.name
        for argument in format_argument.explicit_arguments
        if argument.name is not None
    }


def resolve_parameters(parameters: Iterable[ParameterReference],
                       named_arguments: Set[str]) -> List[ParameterReference]:
    """Turn captures that match an explicit named argument into Named references."""
    resolved: List[ParameterReference] = []
    for parameter in parameters:
        if isinstance(parameter, ImplicitCapture) and parameter.identifier in named_arguments:
            resolved.append(Named(parameter.identifier, parameter.offset, parameter.end, parameter.role))
        else:
            resolved.append(parameter)
    return resolved


def implicit_captures(parameters: Iterable[ParameterReference],
                      named_arguments: Set[str]) -> List[ImplicitCapture]:
    """Unbound captures in template order, one per identifier (its first occurrence)."""
    seen: Dict[str, ImplicitCapture] = {}
    for parameter in resolve_parameters(parameters, named_arguments):
        if isinstance(parameter, ImplicitCapture) and parameter.identifier not in seen:
            seen[parameter.identifier] = parameter
    return list(seen.values())
