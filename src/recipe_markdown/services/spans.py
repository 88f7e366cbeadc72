"""Half-open ranges into the recipe source."""

from typing import NamedTuple, Sequence


class Span(NamedTuple):
    """Half-open ``[start, end)`` range of offsets into the source string."""
    start: int
    end: int

    def slice(self, source: str) -> str:
        return source[self.start:self.end]


def span_of(nodes: Sequence) -> Span:
    """
    Return the total span of adjacent nodes.

    Raises:
        ValueError: if ``nodes`` is empty, which the parser never asks for.
    """
    if not nodes:
        raise ValueError("node list is empty")
    return Span(nodes[0].span.start, nodes[-1].span.end)
