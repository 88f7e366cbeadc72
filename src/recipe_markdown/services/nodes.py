"""Build a simplified, span-annotated node tree from markdown events."""

import logging
from dataclasses import dataclass, field, replace
from typing import Iterator, List, Literal, Optional

from ..exceptions import MalformedEventStreamError
from .events import EventStream, Tag
from .spans import Span

logger = logging.getLogger(__name__)

NodeKind = Literal[
    "heading",
    "paragraph",
    "emphasis",
    "strong",
    "list",
    "list_item",
    "horizontal_line",
    "text",
    "link",
    "other",
]

# Tags that become container nodes; every other tag collapses to "other"
CONTAINER_KINDS = {
    "heading": "heading",
    "paragraph": "paragraph",
    "emphasis": "emphasis",
    "strong": "strong",
    "list": "list",
    "item": "list_item",
    "link": "link",
}


@dataclass
class Node:
    """One element of the node tree. Only lives for the duration of a parse."""
    kind: NodeKind
    span: Span
    children: List["Node"] = field(default_factory=list)
    level: Optional[int] = None
    text: Optional[str] = None
    destination: Optional[str] = None

    @property
    def is_container(self) -> bool:
        return self.kind in CONTAINER_KINDS.values()


def flatten_paragraphs(node: Node) -> Node:
    """
    Splice the children of paragraph children into their parent.

    Loose list items wrap their content in a paragraph, tight ones don't;
    after flattening both look the same. Returns a new node.
    """
    if not node.is_container:
        return node

    children: List[Node] = []
    for child in node.children:
        if child.kind == "paragraph":
            children.extend(flatten_paragraphs(grandchild) for grandchild in child.children)
        else:
            children.append(flatten_paragraphs(child))
    return replace(node, children=children)


class NodeBuilder:
    """
    Pulls events on demand and assembles them into nodes.

    ``pos`` is the end offset of the most recently produced node, which lets
    callers cut description and instructions straight out of the source.
    """

    def __init__(self, source: str, events: Optional[EventStream] = None):
        self.source = source
        self.events = events if events is not None else EventStream(source)
        self.pos = 0

    def next_node(self) -> Optional[Node]:
        """
        Consume events until a complete node can be returned.

        Returns None at the end of the stream or when the current list of
        children is exhausted; the caller consumes the closing event itself.
        """
        peeked = self.events.peek()
        if peeked is None or peeked[0].type == "end":
            return None

        event, span = next(self.events)
        if event.type == "start":
            children, end = self._child_nodes(event.tag)
            node = self._container(event.tag, children, Span(span.start, end))
        elif event.type == "rule":
            node = Node("horizontal_line", span)
        elif event.type == "text":
            node = Node("text", span, text=event.text)
        else:
            node = Node("other", span)

        self.pos = node.span.end
        return node

    def nodes(self) -> Iterator[Node]:
        """Iterate over the remaining nodes on the current level."""
        return iter(self.next_node, None)

    def _child_nodes(self, tag: Tag):
        children = list(self.nodes())
        closing = next(self.events, None)
        if closing is None:
            raise MalformedEventStreamError(f"expected the end of {tag.name}, got the end of the document")
        event, span = closing
        if event.type != "end" or event.tag != tag:
            raise MalformedEventStreamError(f"expected the end of {tag.name}, got {event}")
        return children, span.end

    @staticmethod
    def _container(tag: Tag, children: List[Node], span: Span) -> Node:
        kind = CONTAINER_KINDS.get(tag.name)
        if kind is None:
            return Node("other", span)
        if kind == "heading":
            return Node("heading", span, children, level=tag.level)
        if kind == "link":
            return Node("link", span, children, destination=tag.destination)
        return Node(kind, span, children)
