"""
Test fixtures and helpers for format macro expansion tests.

The key abstraction is a fluent assertion over one expansion:

    AssertExpansion("format_args", '"{x}", y = 1') \
        .expands_to('format_args!("{x}", y = 1, x = x)') \
        .maps_identifier("x", 2)
"""

import sys
from pathlib import Path
from typing import List, Optional

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fmtexpand import BuiltinMacroExpander, ExpansionFailure, ExpansionOutcome


class ExpansionAssertion:
    """Fluent assertions over the outcome of expanding one macro call."""

    def __init__(self, macro_name: str, body: str, expander: Optional[BuiltinMacroExpander] = None):
        self.macro_name = macro_name
        self.body = body
        self.expander = expander or BuiltinMacroExpander()
        self._outcome: Optional[ExpansionOutcome] = None

    @property
    def outcome(self) -> ExpansionOutcome:
        if self._outcome is None:
            self._outcome = self.expander.expand(self.macro_name, self.body)
        return self._outcome

    def succeeds(self) -> 'ExpansionAssertion':
        """Assert that the expansion succeeds and its mapping round-trips."""
        outcome = self.outcome
        assert outcome.ok, f"Expected expansion to succeed, got {outcome.failure}: {outcome.message}"
        assert outcome.ranges.validate(self.body, outcome.text), \
            f"Mapping does not round-trip: {outcome.ranges!r} over {outcome.text!r}"
        return self

    def expands_to(self, expected: str) -> 'ExpansionAssertion':
        """Assert the exact expanded text."""
        self.succeeds()
        assert self.outcome.text == expected, f"Expected {expected!r}, got {self.outcome.text!r}"
        return self

    def maps_identifier(self, name: str, source_offset: int) -> 'ExpansionAssertion':
        """Assert that the appended binding ``name = name`` maps its value back to source_offset."""
        self.succeeds()
        binding = f"{name} = {name}"
        dst = self.outcome.text.rindex(binding) + len(name) + 3
        assert self.outcome.ranges.map_offset_from_expansion_to_call_body(dst) == source_offset
        return self

    def fails_with(self, failure: ExpansionFailure) -> 'ExpansionAssertion':
        """Assert that the expansion fails with the given kind and returns no text."""
        outcome = self.outcome
        assert outcome.failure == failure, f"Expected {failure}, got {outcome.failure} ({outcome.text!r})"
        assert outcome.text is None
        assert outcome.ranges is None
        return self

    def has_diagnostics(self, *codes: str) -> 'ExpansionAssertion':
        """Assert the template diagnostic codes, in order."""
        found = [d.code for d in self.outcome.diagnostics]
        assert found == list(codes), f"Expected diagnostics {list(codes)}, got {found}"
        return self


def AssertExpansion(macro_name: str, body: str) -> ExpansionAssertion:
    """Create an expansion assertion."""
    return ExpansionAssertion(macro_name, body)


def mapped_pieces(outcome: ExpansionOutcome) -> List[str]:
    """The expansion text of each mapped range, in order."""
    return [outcome.text[r.dst_offset:r.dst_end] for r in outcome.ranges]


# Pytest fixtures
@pytest.fixture
def expander():
    """Fixture for the default expander."""
    return BuiltinMacroExpander()
