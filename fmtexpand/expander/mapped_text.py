"""
Mapped text: expansion output that remembers where its pieces came from.

Text is built as an ordered list of spans. A verbatim span is copied unchanged
from the macro call body and records its source offset; a synthesized span has
no source counterpart. The RangeMap is derived from the verbatim spans only.
"""

import bisect
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, Tuple


class MappedTextRange(NamedTuple):
    """``length`` characters at ``src_offset`` in the body appear at ``dst_offset`` in the expansion."""
    src_offset: int
    dst_offset: int
    length: int

    @property
    def src_end(self) -> int:
        return self.src_offset + self.length

    @property
    def dst_end(self) -> int:
        return self.dst_offset + self.length


@dataclass(frozen=True)
class MappedSpan:
    """A run of output text; source_offset is None for synthesized text."""
    text: str
    source_offset: Optional[int] = None

    @property
    def is_verbatim(self) -> bool:
        return self.source_offset is not None


def verbatim(text: str, source_offset: int) -> MappedSpan:
    return MappedSpan(text, source_offset)


def synthesized(text: str) -> MappedSpan:
    return MappedSpan(text)


class RangeMap:
    """Ordered (source range, expansion range) pairs with point and range lookups."""

    def __init__(self, ranges: Optional[List[MappedTextRange]] = None):
        self.ranges: List[MappedTextRange] = sorted(
            (r for r in (ranges or []) if r.length > 0),
            key=lambda r: r.dst_offset,
        )
        self._dst_starts = [r.dst_offset for r in self.ranges]

    def __iter__(self) -> Iterator[MappedTextRange]:
        return iter(self.ranges)

    def __len__(self):
        return len(self.ranges)

    def __eq__(self, other):
        if not isinstance(other, RangeMap):
            return NotImplemented
        return self.ranges == other.ranges

    def __hash__(self):
        return hash(tuple(self.ranges))

    def __repr__(self):
        return f"RangeMap({self.as_tuples()!r})"

    def as_tuples(self) -> List[Tuple[int, int, int]]:
        """The mapping as ``(source_start, length, expansion_start)`` triples."""
        return [(r.src_offset, r.length, r.dst_offset) for r in self.ranges]

    def map_offset_from_expansion_to_call_body(self, offset: int) -> Optional[int]:
        """Source offset of an expansion offset, or None inside synthesized text."""
        index = bisect.bisect_right(self._dst_starts, offset) - 1
        if index < 0:
            return None
        r = self.ranges[index]
        if offset < r.dst_end:
            return r.src_offset + (offset - r.dst_offset)
        return None

    def map_offset_from_call_body_to_expansion(self, offset: int) -> List[int]:
        """Every expansion offset showing the source character at ``offset``.

        One source character may be copied more than once, e.g. an identifier
        left in the template and also appended as a named argument.
        """
        return sorted(
            r.dst_offset + (offset - r.src_offset)
            for r in self.ranges
            if r.src_offset <= offset < r.src_end
        )

    def map_text_range_from_expansion_to_call_body(self, start: int, end: int) -> List[Tuple[int, int]]:
        """Source ranges covered by the expansion range [start, end), in expansion order."""
        result = []
        for r in self.ranges:
            lo = max(start, r.dst_offset)
            hi = min(end, r.dst_end)
            if lo < hi:
                result.append((r.src_offset + (lo - r.dst_offset), r.src_offset + (hi - r.dst_offset)))
        return result

    def merge_adjacent(self) -> 'RangeMap':
        """Return an equivalent map with contiguous neighbours joined."""
        merged: List[MappedTextRange] = []
        for r in self.ranges:
            if merged and merged[-1].src_end == r.src_offset and merged[-1].dst_end == r.dst_offset:
                last = merged.pop()
                r = MappedTextRange(last.src_offset, last.dst_offset, last.length + r.length)
            merged.append(r)
        return RangeMap(merged)

    def validate(self, source: str, expanded: str) -> bool:
        """True if every mapped range shows identical text on both sides."""
        return all(
            r.src_end <= len(source)
            and r.dst_end <= len(expanded)
            and source[r.src_offset:r.src_end] == expanded[r.dst_offset:r.dst_end]
            for r in self.ranges
        )


class MappedText(NamedTuple):
    text: str
    ranges: RangeMap


class MappedTextBuilder:
    """Collects spans in emission order and joins them once at the end."""

    def __init__(self):
        self.spans: List[MappedSpan] = []

    def append_unmapped(self, text: str):
        if text:
            self.spans.append(synthesized(text))

    def append_mapped(self, text: str, source_offset: int):
        if text:
            self.spans.append(verbatim(text, source_offset))

    def last_char(self) -> Optional[str]:
        return self.spans[-1].text[-1] if self.spans else None

    def to_mapped_text(self) -> MappedText:
        pieces = []
        ranges = []
        dst_offset = 0
        for span in self.spans:
            if span.is_verbatim:
                ranges.append(MappedTextRange(span.source_offset, dst_offset, len(span.text)))
            pieces.append(span.text)
            dst_offset += len(span.text)
        return MappedText(''.join(pieces), RangeMap(ranges))
