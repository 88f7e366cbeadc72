"""Small text helpers shared by the section parsers."""

import re
from typing import List

# Commas separate entries unless they sit between two digits ("1,5 l" stays whole)
LIST_SEPARATOR = re.compile(r"(?<!\d),|,(?!\d)")

# ASCII characters that may appear unescaped in an href
HREF_SAFE = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
    "-_.+!*(),%#@?=;:/$~"
)

HREF_ENTITIES = {
    "&": "&amp;",
    "'": "&#x27;",
}


def trim_newlines(text: str) -> str:
    """Strip leading and trailing line breaks, keeping any indentation."""
    return text.strip("\r\n")


def split_list(text: str) -> List[str]:
    """
    Split a comma separated tags or yields line into trimmed entries.

    Empty entries are dropped.
    """
    entries = (part.strip() for part in LIST_SEPARATOR.split(text))
    return [entry for entry in entries if entry]


def escape_href(url: str) -> str:
    """Escape a link destination for safe use as an href attribute."""
    escaped = []
    for char in url:
        if char in HREF_SAFE:
            escaped.append(char)
        elif char in HREF_ENTITIES:
            escaped.append(HREF_ENTITIES[char])
        else:
            escaped.extend(f"%{byte:02X}" for byte in char.encode("utf-8"))
    return "".join(escaped)
