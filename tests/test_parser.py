"""Tests for splitting a format macro body into arguments."""

import pytest

from fmtexpand.errors import MacroSyntaxError
from fmtexpand.parser import parse_macro_body, template_literal


class TestArguments:
    """Tests for argument splitting and named argument detection."""

    def test_named_positional_and_shorthand(self):
        """Test name = expr, bare identifiers and plain expressions."""
        parsed = parse_macro_body('"{x}", y = 2, z, a + 1')
        template, named, shorthand, positional = parsed.arguments

        assert template.is_string_literal
        assert (template.start, template.end) == (0, 5)

        assert named.name == "y"
        assert named.name_offset == 7
        assert named.expr_text == "2"
        assert named.text == "y = 2"
        assert not named.is_shorthand

        assert shorthand.name == "z"
        assert shorthand.is_shorthand

        assert positional.name is None
        assert positional.text == "a + 1"

    def test_explicit_arguments_exclude_template(self):
        parsed = parse_macro_body('"{}", a')
        assert [a.text for a in parsed.explicit_arguments] == ["a"]

    def test_comparison_is_not_named_argument(self):
        parsed = parse_macro_body('"{}", a == b, c = d == e')
        assert parsed.arguments[1].name is None
        assert parsed.arguments[2].name == "c"
        assert parsed.arguments[2].expr_text == "d == e"

    def test_raw_identifier_name(self):
        parsed = parse_macro_body('"{type}", r#type = 1')
        assert parsed.arguments[1].name == "type"

    @pytest.mark.parametrize("body,count", [
        ('"{}", foo(a, b), [1, 2], {a; b}', 4),
        ('"{}", Vec::<(u8, u8)>::new()', 2),
        ('"{}", HashMap::<K, V>::new()', 2),
        ('"{}", Vec::<Vec<u8>>::new(), 1', 3),
        ('"{}", |a, b| a + b', 2),
        ('"{}", move |a, b| a, c', 3),
        ('"{}", x < y, y > z', 3),
        ('"{}", a | b, c', 3),
        ('"{x}{y}", a? | b, y', 3),
        ('"{x}{y}", match v { | A => 1, _ => 2 }, y', 3),
        ('"{}", (|a| a, b), c', 3),
    ])
    def test_commas_inside_expressions(self, body, count):
        """Only commas at the top level separate arguments."""
        assert len(parse_macro_body(body).arguments) == count

    def test_comments_between_arguments(self):
        parsed = parse_macro_body('"{}", /* first */ a, // second\n b')
        assert [a.text for a in parsed.arguments] == ['"{}"', 'a', 'b']


class TestTrailingTrivia:
    """Tests for trailing comma and comment detection."""

    @pytest.mark.parametrize("body,expected", [
        ('"{x}"', False),
        ('"{x}",', True),
        ('"{x}", ', True),
        ('"{x}", /* c */', True),
        ('"{x}", a', False),
        ('"{x}", a,\n', True),
    ])
    def test_ends_with_comma(self, body, expected):
        assert parse_macro_body(body).ends_with_comma == expected

    @pytest.mark.parametrize("body,expected", [
        ('"{x}" // note', True),
        ('"{x}", // note', True),
        ('"{x}" // note\n', False),
        ('"{x}" /* note */', False),
        ('"{x}"', False),
    ])
    def test_ends_with_line_comment(self, body, expected):
        assert parse_macro_body(body).ends_with_line_comment == expected


class TestStructuralErrors:
    """Tests for bodies that are not argument lists."""

    @pytest.mark.parametrize("body", [
        '',
        '   ',
        ',',
        '"a",,b',
        '"a", x =',
        '"a", (b',
        '"a", b)',
        '"a", [b)',
        '"a", "unterminated',
        '"a", Vec::<u8',
    ])
    def test_invalid_bodies(self, body):
        with pytest.raises(MacroSyntaxError):
            parse_macro_body(body)

    def test_error_offset_is_relative_to_body(self):
        with pytest.raises(MacroSyntaxError) as info:
            parse_macro_body('"a",,b')
        assert info.value.offset == 4


class TestTemplateLiteral:
    """Tests for picking out the format string."""

    def test_plain_string(self):
        literal = template_literal(parse_macro_body('"{x}", 1'))
        assert literal.raw_text == '"{x}"'
        assert literal.offset_in_body == 0
        assert not literal.is_raw

    def test_offset_after_leading_whitespace(self):
        literal = template_literal(parse_macro_body('  "{x}"'))
        assert literal.offset_in_body == 2
        assert literal.end == 7

    def test_raw_string(self):
        literal = template_literal(parse_macro_body('r#"{x}"#'))
        assert literal.raw_text == 'r#"{x}"#'
        assert literal.is_raw

    @pytest.mark.parametrize("body", [
        'x, 1',
        'b"{x}"',
        'concat!("a", "b")',
        '"a" "b"',
        '"a".to_string()',
        'fmt = "{x}"',
    ])
    def test_not_a_string_literal(self, body):
        with pytest.raises(MacroSyntaxError):
            template_literal(parse_macro_body(body))
