"""Exceptions for recipe markdown package."""

from typing import Dict, Literal, Optional

from .services.spans import Span

ErrorKind = Literal[
    "expected_title",
    "expected_horizontal_line",
    "multiple_tags_sections",
    "multiple_yields_sections",
    "multiple_description_sections",
    "empty_ingredient",
    "empty_ingredient_group",
    "invalid_amount",
]

ERROR_MESSAGES: Dict[str, str] = {
    "expected_title": "expected a first level heading as title",
    "expected_horizontal_line": "expected a horizontal line",
    "multiple_tags_sections": "found multiple tags sections",
    "multiple_yields_sections": "found multiple yields sections",
    "multiple_description_sections": "found description sections that are split by tags or yields section(s)",
    "empty_ingredient": "ingredient is missing a name",
    "empty_ingredient_group": "ingredient group is empty",
    "invalid_amount": "amount is out of range",
}


class RecipeParseError(Exception):
    """Raised when a markdown document is not a valid recipe.

    ``span`` locates the offending node in the source, or is ``None`` when the
    document ended before the problem could be pinned on a node.
    """

    def __init__(self, kind: ErrorKind, span: Optional[Span] = None):
        self.kind = kind
        self.span = span
        self.source: Optional[str] = None
        super().__init__(ERROR_MESSAGES[kind])

    @property
    def message(self) -> str:
        return ERROR_MESSAGES[self.kind]

    def with_source(self, source: str) -> "RecipeParseError":
        """Attach the document that failed to parse, for diagnostics."""
        self.source = source
        return self

    def __repr__(self) -> str:
        return f"RecipeParseError(kind={self.kind!r}, span={self.span!r})"


class MalformedEventStreamError(RuntimeError):
    """Raised when the markdown event stream does not close what it opens."""
    pass
