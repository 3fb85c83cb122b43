"""
Format template parser.

Parses the string literal of a format macro into placeholders and plain text.
The literal is unescaped first; every decoded character remembers the offset of
the raw text it came from, so every node and diagnostic carries offsets into the
literal exactly as written, quotes included.

Placeholder grammar:

    placeholder := '{' [argument] [':' format_spec] '}'
    argument    := integer | identifier
    format_spec := [[fill] align] [sign] ['#'] ['0'] [width] ['.' precision] [type]
    width       := count
    precision   := count | '*'
    count       := integer | argument '$'
    type        := '' | '?' | 'x?' | 'X?' | identifier

Malformed placeholders add a Diagnostic and scanning resumes after the next '}',
so one pass reports every problem in the template.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple, Union

from ..lexer import is_ident_start, is_ident_continue

ALIGN_CHARS = '<^>'
MAX_INTEGER = 2 ** 64 - 1

# Diagnostic codes
UNMATCHED_CLOSE_BRACE = "FMT0001"
UNTERMINATED_PLACEHOLDER = "FMT0002"
INVALID_ARGUMENT = "FMT0003"
INVALID_FORMAT_SPEC = "FMT0004"
INVALID_ESCAPE = "FMT0005"
INTEGER_TOO_LARGE = "FMT0006"

SIMPLE_ESCAPES = {
    'n': '\n',
    'r': '\r',
    't': '\t',
    '\\': '\\',
    '0': '\0',
    "'": "'",
    '"': '"',
}


@dataclass(frozen=True)
class Diagnostic:
    """A template syntax problem; start/end are offsets into the raw literal."""
    code: str
    message: str
    start: int
    end: int

    def __str__(self):
        return f"{self.code}: {self.message} at {self.start}..{self.end}"


class ArgumentKind(Enum):
    """How a placeholder (or a width/precision count) selects its argument."""
    NEXT = auto()     # {} or .* - the next positional argument
    INDEX = auto()    # {0}, {:1$}
    NAME = auto()     # {name}, {:width$}


@dataclass
class ArgumentSelector:
    """An argument reference inside a placeholder."""
    kind: ArgumentKind
    value: Union[int, str, None]
    start: int
    end: int


@dataclass
class Count:
    """A width or precision: either a literal integer or an argument reference."""
    start: int
    end: int
    literal: Optional[int] = None
    argument: Optional[ArgumentSelector] = None


@dataclass
class FormatSpec:
    """Everything after the ':' of a placeholder."""
    fill: Optional[str] = None
    align: Optional[str] = None
    sign: Optional[str] = None
    alternate: bool = False
    zero_pad: bool = False
    width: Optional[Count] = None
    precision: Optional[Count] = None
    type: str = ''


@dataclass
class Placeholder:
    """A ``{...}`` placeholder."""
    start: int
    end: int
    argument: ArgumentSelector
    spec: Optional[FormatSpec] = None


@dataclass
class TemplateText:
    """Plain text between placeholders, with ``{{``/``}}`` already collapsed."""
    text: str
    start: int
    end: int


TemplateElement = Union[Placeholder, TemplateText]


@dataclass
class TemplateParseResult:
    """Parse tree of a template plus the diagnostics found while building it."""
    raw_text: str
    value: str
    elements: List[TemplateElement] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def placeholders(self) -> List[Placeholder]:
        return [e for e in self.elements if isinstance(e, Placeholder)]

    @property
    def has_errors(self) -> bool:
        return bool(self.diagnostics)


def literal_content_bounds(raw_text: str) -> Tuple[int, int, bool]:
    """Return (content_start, content_end, is_raw) for a string literal's text."""
    if raw_text.startswith('r'):
        hashes = 0
        while raw_text[1 + hashes] == '#':
            hashes += 1
        return 2 + hashes, len(raw_text) - 1 - hashes, True
    return 1, len(raw_text) - 1, False


def unescape(raw_text: str) -> Tuple[str, List[int], List[Diagnostic]]:
    """Decode a string literal.

    Returns the decoded value, a list mapping each decoded character to its
    raw offset (with one extra entry for the closing quote), and diagnostics
    for invalid escapes.
    """
    start, end, is_raw = literal_content_bounds(raw_text)
    if is_raw:
        return raw_text[start:end], list(range(start, end + 1)), []

    chars: List[str] = []
    offsets: List[int] = []
    diagnostics: List[Diagnostic] = []
    i = start

    while i < end:
        ch = raw_text[i]
        if ch != '\\':
            chars.append(ch)
            offsets.append(i)
            i += 1
            continue

        next_ch = raw_text[i + 1] if i + 1 < end else ''
        if next_ch and next_ch in SIMPLE_ESCAPES:
            chars.append(SIMPLE_ESCAPES[next_ch])
            offsets.append(i)
            i += 2
        elif next_ch == 'x':
            digits = raw_text[i + 2:i + 4]
            if len(digits) == 2 and all(c in '0123456789abcdefABCDEF' for c in digits) \
                    and int(digits, 16) <= 0x7F:
                chars.append(chr(int(digits, 16)))
                offsets.append(i)
            else:
                diagnostics.append(Diagnostic(INVALID_ESCAPE, "invalid \\x escape", i, min(i + 4, end)))
            i = min(i + 4, end)
        elif next_ch == 'u':
            close = raw_text.find('}', i + 3, end) if raw_text[i + 2:i + 3] == '{' else -1
            digits = raw_text[i + 3:close].replace('_', '') if close != -1 else ''
            if 1 <= len(digits) <= 6 \
                    and all(c in '0123456789abcdefABCDEF' for c in digits) \
                    and int(digits, 16) <= 0x10FFFF and not 0xD800 <= int(digits, 16) <= 0xDFFF:
                chars.append(chr(int(digits, 16)))
                offsets.append(i)
                i = close + 1
            else:
                stop = close + 1 if close != -1 else min(i + 2, end)
                diagnostics.append(Diagnostic(INVALID_ESCAPE, "invalid unicode escape", i, stop))
                i = stop
        elif next_ch in ('\n', '\r'):
            # Line continuation: skip the line break and leading whitespace
            i += 2
            while i < end and raw_text[i] in ' \t\n\r':
                i += 1
        else:
            diagnostics.append(Diagnostic(INVALID_ESCAPE, f"unknown character escape: {next_ch!r}", i, i + 2))
            i += 2

    offsets.append(end)
    return ''.join(chars), offsets, diagnostics


class PlaceholderError(Exception):
    """Raised inside a placeholder; the parser records it and skips ahead."""

    def __init__(self, code: str, message: str, start: int, end: int):
        super().__init__(message)
        self.code = code
        self.message = message
        self.start = start
        self.end = end


class TemplateParser:
    """Parses a decoded format template.

    Positions while scanning are indices into the decoded value; they are
    converted to raw literal offsets whenever a node or diagnostic is built.
    """

    def __init__(self, raw_text: str):
        self.raw_text = raw_text
        self.value, self.offsets, escape_errors = unescape(raw_text)
        self.pos = 0
        self.elements: List[TemplateElement] = []
        self.diagnostics: List[Diagnostic] = list(escape_errors)

    def raw(self, pos: int) -> int:
        """Raw literal offset of decoded position pos."""
        return self.offsets[min(pos, len(self.value))]

    def error(self, code: str, message: str, start: int, end: Optional[int] = None):
        """Raise a placeholder error for decoded positions [start, end)."""
        if end is None:
            end = min(start + 1, len(self.value))
        raise PlaceholderError(code, message, self.raw(start), max(self.raw(end), self.raw(start)))

    def peek(self, offset: int = 0) -> Optional[str]:
        """Peek at character at current position + offset."""
        pos = self.pos + offset
        if pos < len(self.value):
            return self.value[pos]
        return None

    def advance(self) -> Optional[str]:
        """Consume and return current character."""
        if self.pos >= len(self.value):
            return None
        ch = self.value[self.pos]
        self.pos += 1
        return ch

    def parse(self) -> TemplateParseResult:
        """Parse the whole template."""
        text_start = 0
        chars: List[str] = []

        while self.peek() is not None:
            ch = self.peek()
            if ch == '{' and self.peek(1) == '{':
                chars.append('{')
                self.pos += 2
            elif ch == '}' and self.peek(1) == '}':
                chars.append('}')
                self.pos += 2
            elif ch == '{':
                self._flush_text(chars, text_start)
                chars = []
                self._parse_placeholder_or_recover()
                text_start = self.pos
            elif ch == '}':
                self.diagnostics.append(Diagnostic(
                    UNMATCHED_CLOSE_BRACE,
                    "unmatched '}' in format string; use '}}' to print a brace",
                    self.raw(self.pos), self.raw(self.pos + 1),
                ))
                self.advance()
            else:
                chars.append(ch)
                self.advance()

        self._flush_text(chars, text_start)
        self.diagnostics.sort(key=lambda d: (d.start, d.end))
        return TemplateParseResult(
            raw_text=self.raw_text,
            value=self.value,
            elements=self.elements,
            diagnostics=self.diagnostics,
        )

    def _flush_text(self, chars: List[str], text_start: int):
        if chars:
            self.elements.append(TemplateText(''.join(chars), self.raw(text_start), self.raw(self.pos)))

    def _parse_placeholder_or_recover(self):
        open_pos = self.pos
        try:
            self.elements.append(self.parse_placeholder())
        except PlaceholderError as e:
            self.diagnostics.append(Diagnostic(e.code, e.message, e.start, e.end))
            # Resume after the next '}' (or give up at the end of the template)
            self.pos = max(self.pos, open_pos + 1)
            while self.peek() is not None and self.peek() != '}':
                self.advance()
            self.advance()

    def parse_placeholder(self) -> Placeholder:
        """Parse ``{ [argument] [':' spec] }``; the cursor is on the '{'."""
        open_pos = self.pos
        self.advance()  # {

        argument = self.parse_argument()
        if argument is None:
            argument = ArgumentSelector(ArgumentKind.NEXT, None, self.raw(self.pos), self.raw(self.pos))

        spec = None
        if self.peek() == ':':
            self.advance()
            spec = self.parse_format_spec()

        ch = self.peek()
        if ch is None:
            self.error(UNTERMINATED_PLACEHOLDER, "expected '}' but the format string ended",
                       open_pos, len(self.value))
        if ch != '}':
            if spec is None:
                self.error(INVALID_ARGUMENT, f"invalid format string argument: unexpected {ch!r}", self.pos)
            self.error(INVALID_FORMAT_SPEC, f"invalid format spec: unexpected {ch!r}", self.pos)
        self.advance()  # }

        return Placeholder(self.raw(open_pos), self.raw(self.pos), argument, spec)

    def parse_integer(self) -> int:
        start = self.pos
        while self.peek() is not None and self.peek() in '0123456789':
            self.advance()
        value = int(self.value[start:self.pos])
        if value > MAX_INTEGER:
            self.error(INTEGER_TOO_LARGE, "integer does not fit in an argument index", start, self.pos)
        return value

    def parse_identifier(self) -> str:
        start = self.pos
        self.advance()
        while is_ident_continue(self.peek()):
            self.advance()
        name = self.value[start:self.pos]
        if name == '_':
            self.error(INVALID_ARGUMENT, "invalid argument name '_'", start, self.pos)
        return name

    def parse_argument(self) -> Optional[ArgumentSelector]:
        """Parse an integer or identifier argument; None if neither is present."""
        start = self.pos
        ch = self.peek()
        if ch is not None and ch.isascii() and ch.isdigit():
            value = self.parse_integer()
            return ArgumentSelector(ArgumentKind.INDEX, value, self.raw(start), self.raw(self.pos))
        if is_ident_start(ch):
            value = self.parse_identifier()
            return ArgumentSelector(ArgumentKind.NAME, value, self.raw(start), self.raw(self.pos))
        return None

    def parse_count(self) -> Optional[Count]:
        """Parse ``integer`` or ``argument '$'``; rewinds and returns None otherwise."""
        start = self.pos
        ch = self.peek()
        if ch is not None and ch.isascii() and ch.isdigit():
            value = self.parse_integer()
            if self.peek() == '$':
                self.advance()
                selector = ArgumentSelector(ArgumentKind.INDEX, value, self.raw(start), self.raw(self.pos - 1))
                return Count(self.raw(start), self.raw(self.pos), argument=selector)
            return Count(self.raw(start), self.raw(self.pos), literal=value)
        if is_ident_start(ch):
            saved = self.pos
            name = self.parse_identifier() if self._identifier_followed_by_dollar() else None
            if name is None:
                self.pos = saved
                return None
            self.advance()  # $
            selector = ArgumentSelector(ArgumentKind.NAME, name, self.raw(start), self.raw(self.pos - 1))
            return Count(self.raw(start), self.raw(self.pos), argument=selector)
        return None

    def _identifier_followed_by_dollar(self) -> bool:
        pos = self.pos + 1
        while pos < len(self.value) and is_ident_continue(self.value[pos]):
            pos += 1
        return pos < len(self.value) and self.value[pos] == '$'

    def parse_format_spec(self) -> FormatSpec:
        """Parse the part after ':'."""
        spec = FormatSpec()

        # [[fill] align]
        if self.peek(1) is not None and self.peek(1) in ALIGN_CHARS:
            spec.fill = self.advance()
            spec.align = self.advance()
        elif self.peek() is not None and self.peek() in ALIGN_CHARS:
            spec.align = self.advance()

        # [sign] ['#'] ['0']
        if self.peek() in ('+', '-'):
            spec.sign = self.advance()
        if self.peek() == '#':
            self.advance()
            spec.alternate = True
        if self.peek() == '0' and self.peek(1) != '$':
            self.advance()
            spec.zero_pad = True

        # [width]
        spec.width = self.parse_count()

        # ['.' precision]
        if self.peek() == '.':
            dot = self.pos
            self.advance()
            if self.peek() == '*':
                star = self.pos
                self.advance()
                selector = ArgumentSelector(ArgumentKind.NEXT, None, self.raw(star), self.raw(self.pos))
                spec.precision = Count(self.raw(star), self.raw(self.pos), argument=selector)
            else:
                spec.precision = self.parse_count()
                if spec.precision is None:
                    self.error(INVALID_FORMAT_SPEC, "expected a precision after '.'", dot, self.pos + 1)

        # [type]
        if self.peek() == '?':
            self.advance()
            spec.type = '?'
        elif is_ident_start(self.peek()):
            spec.type = self.parse_identifier()
            if spec.type in ('x', 'X') and self.peek() == '?':
                self.advance()
                spec.type += '?'

        return spec


def parse_template(raw_text: str) -> TemplateParseResult:
    """Parse a format string literal (quotes included) into placeholders and diagnostics."""
    return TemplateParser(raw_text).parse()


def check_syntax_errors(result: TemplateParseResult) -> List[Diagnostic]:
    """Return the template's syntax diagnostics (empty if the template is valid)."""
    return list(result.diagnostics)
