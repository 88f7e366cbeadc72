"""
Event adapter - markdown-it-py tokens as a flat stream of (event, span) pairs.

markdown-it-py produces a token list where block tokens carry line maps and
inline tokens carry nothing but their content. The recipe parser needs exact
offsets for every element (titles, tags and ingredient names are sliced
straight out of the source), so this module:

  1. maps block tokens onto the source through their line maps
  2. re-scans each inline token's content with a cursor, locating every child
     token's markup, then maps content offsets back into the source line by line

The resulting stream mirrors a CommonMark pull parser: ``start``/``end`` pairs
for containers, leaves for text, breaks, code, html and thematic breaks.
"""

import logging
import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterator, List, Literal, Optional, Tuple

from markdown_it import MarkdownIt
from markdown_it.token import Token

from .spans import Span

logger = logging.getLogger(__name__)

EventType = Literal[
    "start", "end", "text", "code", "html", "soft_break", "hard_break", "rule", "other",
]
TagName = Literal[
    "heading", "paragraph", "emphasis", "strong", "list", "item", "link",
    "image", "block_quote", "code_block",
]


@dataclass(frozen=True)
class Tag:
    """The element a ``start``/``end`` event opens or closes."""
    name: TagName
    level: Optional[int] = None
    destination: Optional[str] = None


@dataclass(frozen=True)
class Event:
    type: EventType
    tag: Optional[Tag] = None
    text: Optional[str] = None


SpannedEvent = Tuple[Event, Span]

BLOCK_TAGS = {
    "heading_open": "heading",
    "paragraph_open": "paragraph",
    "bullet_list_open": "list",
    "ordered_list_open": "list",
    "list_item_open": "item",
    "blockquote_open": "block_quote",
}

INLINE_TAGS = {
    "em_open": "emphasis",
    "strong_open": "strong",
    "link_open": "link",
}

LINE_BREAK = re.compile(r"\r\n|\r|\n")


def create_markdown_parser() -> MarkdownIt:
    """
    Build a CommonMark parser.

    ``text_join`` is disabled so backslash escapes and entities stay separate
    ``text_special`` tokens that remember their raw markup.

    Link destinations are accepted whatever their scheme and kept as written
    after unescaping. They are escaped once, by ``escape_href``, when an
    ingredient is built.
    """
    md = MarkdownIt("commonmark").disable("text_join")
    md.validateLink = _accept_link
    md.normalizeLink = _keep_link
    return md


def _accept_link(url: str) -> bool:
    return True


def _keep_link(url: str) -> str:
    return url


# ═══════════════════════════════════════════════════════════════════
# SOURCE LINES
# ═══════════════════════════════════════════════════════════════════

class _Lines:
    """Line boundaries of the input, matching markdown-it's line numbers."""

    def __init__(self, source: str):
        self.source = source
        self.starts: List[int] = []
        self.ends: List[int] = []
        pos = 0
        for match in LINE_BREAK.finditer(source):
            self.starts.append(pos)
            self.ends.append(match.start())
            pos = match.end()
        self.starts.append(pos)
        self.ends.append(len(source))

    def start(self, line: int) -> int:
        return self.starts[line] if line < len(self.starts) else len(self.source)

    def text(self, line: int) -> str:
        if line >= len(self.starts):
            return ""
        return self.source[self.starts[line]:self.ends[line]]

    def is_blank(self, line: int) -> bool:
        return not self.text(line).strip()

    def first_non_blank(self, line: int, floor: int) -> int:
        """First non-whitespace offset on ``line`` at or after ``floor``."""
        if line >= len(self.starts):
            return len(self.source)
        pos = max(self.starts[line], floor)
        while pos < self.ends[line] and self.source[pos] in " \t":
            pos += 1
        return pos

    def block_end(self, first: int, last: int) -> int:
        """End offset of lines ``first..last``, ignoring trailing blank lines."""
        while last - 1 > first and self.is_blank(last - 1):
            last -= 1
        return self.start(last)

    def locate(self, line: int, text: str) -> int:
        """Offset where ``text``, a line of inline content, starts on ``line``."""
        source_line = self.text(line)
        if source_line.endswith(text):
            column = len(source_line) - len(text)
        elif source_line.rstrip().endswith(text):
            column = len(source_line.rstrip()) - len(text)
        else:
            # ATX headings keep their closing sequence after the content
            column = max(source_line.find(text), 0)
        return self.start(line) + column


class _ContentMap:
    """Maps offsets in an inline token's content back into the source."""

    def __init__(self, lines: _Lines, token: Token):
        self.offsets: List[int] = []
        self.origins: List[int] = []
        first_line = token.map[0] if token.map else 0
        offset = 0
        for index, text in enumerate(token.content.split("\n")):
            self.offsets.append(offset)
            self.origins.append(lines.locate(first_line + index, text))
            offset += len(text) + 1

    def to_source(self, index: int) -> int:
        line = bisect_right(self.offsets, index) - 1
        return self.origins[line] + index - self.offsets[line]


# ═══════════════════════════════════════════════════════════════════
# INLINE SCANNING
# ═══════════════════════════════════════════════════════════════════

def _find(content: str, needle: str, cursor: int) -> int:
    index = content.find(needle, cursor)
    return cursor if index < 0 else index


def _code_span_end(content: str, fence: str, pos: int) -> int:
    """End of the backtick run closing a code span opened with ``fence``."""
    while True:
        index = content.find(fence, pos)
        if index < 0:
            return len(content)
        end = index + len(fence)
        before = content[index - 1] if index > 0 else ""
        after = content[end] if end < len(content) else ""
        if before != "`" and after != "`":
            return end
        pos = end
        while pos < len(content) and content[pos] == "`":
            pos += 1


def _label_end(content: str, pos: int) -> int:
    """Offset after the ``]`` matching the ``[`` at ``pos``."""
    depth = 0
    index = pos
    while index < len(content):
        char = content[index]
        if char == "\\":
            index += 2
            continue
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return index + 1
        index += 1
    return len(content)


def _destination_end(content: str, pos: int) -> int:
    """Offset after the ``)`` closing an inline destination opened at ``pos``."""
    depth = 0
    quote = None
    index = pos
    while index < len(content):
        char = content[index]
        if char == "\\":
            index += 2
            continue
        if quote:
            if char == quote:
                quote = None
        elif char in "\"'" and content[index - 1] in " \t\n":
            quote = char
        elif char == "<" and content[index - 1] == "(":
            closing = content.find(">", index)
            index = closing if closing >= 0 else index
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index + 1
        index += 1
    return len(content)


def _link_tail_end(content: str, pos: int) -> int:
    """End of whatever follows a link label: ``(dest)``, ``[ref]``, ``[]`` or nothing."""
    if content.startswith("(", pos):
        return _destination_end(content, pos)
    if content.startswith("[", pos):
        closing = content.find("]", pos + 1)
        return closing + 1 if closing >= 0 else pos
    return pos


class _InlineScanner:
    """Resolves the children of one inline token into spanned events."""

    def __init__(self, lines: _Lines, token: Token):
        self.content = token.content
        self.children = token.children or []
        self.map = _ContentMap(lines, token)
        self.cursor = 0
        self.events: List[SpannedEvent] = []
        self.open: List[Tuple[Tag, int, int, bool]] = []

    def span(self, start: int, end: int) -> Span:
        return Span(self.map.to_source(start), self.map.to_source(end))

    def emit(self, event: Event, start: int, end: int) -> None:
        self.events.append((event, self.span(start, end)))
        self.cursor = max(self.cursor, end)

    def scan(self) -> List[SpannedEvent]:
        for child in self.children:
            handler = getattr(self, f"_scan_{child.type}", None)
            if handler is not None:
                handler(child)
            elif child.type in INLINE_TAGS:
                self._scan_open(child)
            elif child.type.endswith("_close"):
                self._scan_close(child)
            else:
                self._scan_leaf(child)
        return self.events

    def _scan_text(self, child: Token) -> None:
        if not child.content:
            return
        start = _find(self.content, child.content, self.cursor)
        self.emit(Event("text", text=child.content), start, start + len(child.content))

    def _scan_text_special(self, child: Token) -> None:
        raw = child.markup or child.content
        start = _find(self.content, raw, self.cursor)
        self.emit(Event("text", text=child.content), start, start + len(raw))

    def _scan_softbreak(self, child: Token) -> None:
        newline = _find(self.content, "\n", self.cursor)
        self.emit(Event("soft_break"), newline, newline + 1)

    def _scan_hardbreak(self, child: Token) -> None:
        newline = _find(self.content, "\n", self.cursor)
        start = newline
        if start > 0 and self.content[start - 1] == "\\":
            start -= 1
        else:
            while start > self.cursor and self.content[start - 1] == " ":
                start -= 1
        self.emit(Event("hard_break"), start, newline + 1)

    def _scan_code_inline(self, child: Token) -> None:
        start = _find(self.content, child.markup, self.cursor)
        end = _code_span_end(self.content, child.markup, start + len(child.markup))
        self.emit(Event("code", text=child.content), start, end)

    def _scan_html_inline(self, child: Token) -> None:
        start = _find(self.content, child.content, self.cursor)
        self.emit(Event("html", text=child.content), start, start + len(child.content))

    def _scan_image(self, child: Token) -> None:
        start = _find(self.content, "![", self.cursor)
        label_end = _label_end(self.content, start + 1)
        end = _link_tail_end(self.content, label_end)
        tag = Tag("image", destination=child.attrGet("src"))
        span = self.span(start, end)
        self.events.append((Event("start", tag), span))
        self.events.append((Event("end", tag), span))
        self.cursor = max(self.cursor, end)

    def _scan_open(self, child: Token) -> None:
        name = INLINE_TAGS[child.type]
        autolink = child.markup == "autolink"
        if name == "link":
            marker = "<" if autolink else "["
            tag = Tag("link", destination=child.attrGet("href"))
        else:
            marker = child.markup
            tag = Tag(name)
        start = _find(self.content, marker, self.cursor)
        self.open.append((tag, start, len(self.events), autolink))
        # span is patched once the closing token is found
        self.emit(Event("start", tag), start, start + len(marker))

    def _scan_close(self, child: Token) -> None:
        if not self.open:
            return
        tag, start, index, autolink = self.open.pop()
        if tag.name == "link" and autolink:
            end = _find(self.content, ">", self.cursor) + 1
        elif tag.name == "link":
            bracket = _find(self.content, "]", self.cursor)
            end = _link_tail_end(self.content, bracket + 1)
        else:
            end = _find(self.content, child.markup, self.cursor) + len(child.markup)
        span = self.span(start, end)
        self.events[index] = (self.events[index][0], span)
        self.events.append((Event("end", tag), span))
        self.cursor = max(self.cursor, end)

    def _scan_leaf(self, child: Token) -> None:
        raw = child.content or child.markup
        start = _find(self.content, raw, self.cursor) if raw else self.cursor
        self.emit(Event("other", text=child.content or None), start, start + len(raw))


# ═══════════════════════════════════════════════════════════════════
# EVENT STREAM
# ═══════════════════════════════════════════════════════════════════

class EventStream:
    """
    Pull-based stream of ``(Event, Span)`` pairs over a markdown source.

    Supports one step of lookahead through ``peek()``. Spans are offsets into
    the exact string that was passed in, whatever its line endings.
    """

    def __init__(self, source: str, md: Optional[MarkdownIt] = None):
        self.source = source
        md = md or create_markdown_parser()
        self._tokens = md.parse(source)
        self._lines = _Lines(source)
        self._events = self._generate()
        self._peeked: Optional[SpannedEvent] = None
        logger.debug(f"Tokenized {len(source)} chars into {len(self._tokens)} block tokens")

    def __iter__(self) -> "EventStream":
        return self

    def __next__(self) -> SpannedEvent:
        if self._peeked is not None:
            event, self._peeked = self._peeked, None
            return event
        return next(self._events)

    def peek(self) -> Optional[SpannedEvent]:
        """Return the next pair without consuming it, or None at the end."""
        if self._peeked is None:
            self._peeked = next(self._events, None)
        return self._peeked

    def _generate(self) -> Iterator[SpannedEvent]:
        lines = self._lines
        # open block containers: (tag, span)
        stack: List[Tuple[Tag, Span]] = []

        for token in self._tokens:
            if token.hidden:
                continue

            if token.nesting == 1:
                tag = self._block_tag(token)
                span = self._block_span(token, stack)
                stack.append((tag, span))
                yield Event("start", tag), span
            elif token.nesting == -1:
                tag, span = stack.pop()
                yield Event("end", tag), span
            elif token.type == "inline":
                yield from _InlineScanner(lines, token).scan()
            elif token.type == "hr":
                yield Event("rule"), self._block_span(token, stack)
            elif token.type in ("fence", "code_block"):
                tag = Tag("code_block")
                span = self._block_span(token, stack)
                yield Event("start", tag), span
                yield Event("text", text=token.content), span
                yield Event("end", tag), span
            elif token.type == "html_block":
                yield Event("html", text=token.content), self._block_span(token, stack)
            else:
                yield Event("other"), self._block_span(token, stack)

    @staticmethod
    def _block_tag(token: Token) -> Tag:
        name = BLOCK_TAGS.get(token.type, "block_quote")
        if name == "heading":
            return Tag("heading", level=int(token.tag[1:]))
        return Tag(name)

    def _floor(self, line: int, stack: List[Tuple[Tag, Span]]) -> int:
        """Earliest offset a new block on ``line`` may start at, given its parents."""
        line_start = self._lines.start(line)
        for tag, span in reversed(stack):
            if tag.name == "list":
                # a list and its first item share the marker position
                continue
            if span.start >= line_start:
                return span.start + 1
            break
        return line_start

    def _block_span(self, token: Token, stack: List[Tuple[Tag, Span]]) -> Span:
        if not token.map:
            pos = stack[-1][1].start if stack else 0
            return Span(pos, pos)
        first, last = token.map
        start = self._lines.first_non_blank(first, self._floor(first, stack))
        return Span(start, max(start, self._lines.block_end(first, last)))
