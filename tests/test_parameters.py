"""Tests for parameter classification and explicit argument collection."""

from fmtexpand.format.parameters import (
    ImplicitCapture, Named, ParameterRole, Positional, build_parameters,
    collect_named_arguments, implicit_captures, resolve_parameters,
)
from fmtexpand.format.template import parse_template
from fmtexpand.parser import parse_macro_body


def parameters(raw):
    return build_parameters(parse_template(raw))


class TestBuildParameters:
    """Tests for turning placeholders into parameter references."""

    def test_positional_counter_and_explicit_index(self):
        refs = parameters('"{} {} {0} {x}"')

        assert [type(r) for r in refs] == [Positional, Positional, Positional, ImplicitCapture]
        assert [r.index for r in refs[:3]] == [0, 1, 0]
        assert refs[0].implicit_index
        assert not refs[2].implicit_index
        assert refs[3] == ImplicitCapture("x", 12, 13)

    def test_explicit_index_does_not_advance_counter(self):
        refs = parameters('"{1} {} {}"')
        assert [r.index for r in refs] == [1, 0, 1]

    def test_star_precision_comes_before_value(self):
        """.* takes the next positional argument before the value does."""
        value, precision = parameters('"{:.*}"')

        assert value == Positional(1, 2, 2, ParameterRole.VALUE, implicit_index=True)
        assert precision.index == 0
        assert precision.role == ParameterRole.PRECISION

    def test_named_value_with_star_precision(self):
        """{x:.*} consumes one positional slot; x stays a capture."""
        value, precision = parameters('"{x:.*}"')

        assert value == ImplicitCapture("x", 2, 3)
        assert isinstance(precision, Positional)
        assert precision.index == 0

    def test_width_and_precision_captures(self):
        refs = parameters('"{:w$.p$}"')

        assert isinstance(refs[0], Positional)
        assert refs[1] == ImplicitCapture("w", 3, 4, ParameterRole.WIDTH)
        assert refs[2] == ImplicitCapture("p", 6, 7, ParameterRole.PRECISION)

    def test_literal_width_is_not_a_parameter(self):
        refs = parameters('"{:5.2}"')
        assert len(refs) == 1

    def test_indexed_width(self):
        refs = parameters('"{x:1$}"')
        assert refs[1] == Positional(1, 4, 5, ParameterRole.WIDTH)

    def test_escaped_braces_have_no_parameters(self):
        assert parameters('"{{x}}"') == []


class TestCollectNamedArguments:
    """Tests for names bound by explicit arguments."""

    def test_named_and_shorthand(self):
        parsed = parse_macro_body('"{}", a = 1, b, c + 1, d = e, f(g)')
        assert collect_named_arguments(parsed) == {"a", "b", "d"}

    def test_template_only(self):
        assert collect_named_arguments(parse_macro_body('"{x}"')) == set()

    def test_duplicates_are_kept_as_one_name(self):
        parsed = parse_macro_body('"{}", a = 1, a = 2')
        assert collect_named_arguments(parsed) == {"a"}


class TestImplicitCaptures:
    """Tests for picking out unbound captures."""

    def test_resolve_marks_bound_names(self):
        refs = resolve_parameters(parameters('"{x} {y}"'), {"y"})
        assert refs[0] == ImplicitCapture("x", 2, 3)
        assert refs[1] == Named("y", 6, 7)

    def test_first_occurrence_wins(self):
        captures = implicit_captures(parameters('"{x} {y} {x} {:x$}"'), set())
        assert captures == [ImplicitCapture("x", 2, 3), ImplicitCapture("y", 6, 7)]

    def test_bound_names_are_dropped(self):
        captures = implicit_captures(parameters('"{x} {y}"'), {"x", "y"})
        assert captures == []

    def test_positional_only(self):
        assert implicit_captures(parameters('"{} {0} {:.*}"'), set()) == []
