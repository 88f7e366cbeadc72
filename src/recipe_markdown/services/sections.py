"""
Section state machine - title, description, tags and yields.

Everything before the first horizontal line belongs to this part of the
recipe:

    # Title                      <- first level heading, mandatory
    Free description ...         <- any number of blocks
    *tag, another tag*           <- paragraph made of a single emphasis
    **2 servings, 500 g**        <- paragraph made of a single strong
    ---

Tags and yields may appear in any order but only once each, and the
description has to be one contiguous run of blocks.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional

from ..exceptions import RecipeParseError
from ..models.recipe import Amount
from ..utils.text import LIST_SEPARATOR, split_list, trim_newlines
from .amount import OverflowPolicy, parse_amount
from .nodes import Node, NodeBuilder
from .spans import Span, span_of

logger = logging.getLogger(__name__)


@dataclass
class DescriptionTagsYields:
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    yields: List[Amount] = field(default_factory=list)


@dataclass
class _DescriptionCursor:
    """Tracks the description through none -> started -> final."""
    state: Literal["none", "started", "final"] = "none"
    end: Optional[int] = None

    def extend(self, node: Node) -> None:
        if self.state == "final":
            raise RecipeParseError("multiple_description_sections", node.span)
        self.state = "started"
        self.end = node.span.end

    def freeze(self, end: Optional[int] = None) -> None:
        if self.state == "started":
            self.state = "final"
            if end is not None:
                self.end = end


def _single_child_of_kind(paragraph: Node, kind: str) -> Optional[Node]:
    """The paragraph's only child if it is a ``kind`` node with exactly one child."""
    children = paragraph.children
    if len(children) == 1 and children[0].kind == kind and len(children[0].children) == 1:
        return children[0]
    return None


def _split_spans(source: str, span: Span) -> List[Span]:
    """Split the text at ``span`` on list separators, keeping source offsets."""
    spans = []
    start = span.start
    for match in LIST_SEPARATOR.finditer(source, span.start, span.end):
        spans.append(Span(start, match.start()))
        start = match.end()
    spans.append(Span(start, span.end))
    return [part for part in spans if part.slice(source).strip()]


def parse_title(builder: NodeBuilder) -> str:
    """
    Parse the first node as the recipe title.

    Raises:
        RecipeParseError: ``expected_title`` unless the document opens with a
            non-empty first level heading.
    """
    node = builder.next_node()
    if node is None:
        raise RecipeParseError("expected_title", None)
    if node.kind != "heading" or node.level != 1 or not node.children:
        raise RecipeParseError("expected_title", node.span)

    title = span_of(node.children).slice(builder.source)
    logger.debug(f"Found title {title!r}")
    return title


def parse_description_tags_yields(
    builder: NodeBuilder,
    overflow: Optional[OverflowPolicy] = None,
) -> DescriptionTagsYields:
    """
    Consume nodes up to and including the first horizontal line.

    Raises:
        RecipeParseError: ``expected_horizontal_line`` when the document ends
            first, ``multiple_tags_sections``/``multiple_yields_sections`` on a
            second tags/yields paragraph, ``multiple_description_sections`` when
            the description resumes after tags or yields.
    """
    source = builder.source
    description_start = builder.pos
    cursor = _DescriptionCursor()
    tags: Optional[List[str]] = None
    yields: Optional[List[Amount]] = None

    while True:
        node = builder.next_node()
        if node is None:
            raise RecipeParseError("expected_horizontal_line", None)

        if node.kind == "horizontal_line":
            cursor.freeze(node.span.start)
            break

        if node.kind != "paragraph":
            cursor.extend(node)
            continue

        emphasis = _single_child_of_kind(node, "emphasis")
        strong = _single_child_of_kind(node, "strong")

        if emphasis is not None:
            if tags is not None:
                raise RecipeParseError("multiple_tags_sections", emphasis.span)
            cursor.freeze()
            tags = split_list(span_of(emphasis.children).slice(source))
            logger.debug(f"Found tags {tags}")
        elif strong is not None:
            if yields is not None:
                raise RecipeParseError("multiple_yields_sections", strong.span)
            cursor.freeze()
            yields = [
                parse_amount(source, part, overflow)
                for part in _split_spans(source, span_of(strong.children))
            ]
            logger.debug(f"Found {len(yields)} yields")
        else:
            cursor.extend(node)

    description = None
    if cursor.state != "none":
        description = trim_newlines(source[description_start:cursor.end]) or None

    return DescriptionTagsYields(
        description=description,
        tags=tags or [],
        yields=yields or [],
    )
