"""Document tree for notification bodies.

HTML bodies are limited to a small, fixed set of tags. Anything else is kept
in the tree as an inert element so its children still print.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Union

from bs4 import BeautifulSoup, Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag


class Kind(Enum):
    """Element kinds the renderer knows about."""

    ROOT = "root"
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKE = "strike"
    FONT = "font"
    MARK = "mark"
    PRE = "pre"
    LINK = "link"
    RULE = "rule"
    BREAK = "break"
    ITEM = "item"
    CENTER = "center"
    HEADING1 = "h1"
    HEADING2 = "h2"
    HEADING3 = "h3"
    SMALL = "small"
    QUOTE = "quote"
    BLOCKQUOTE = "blockquote"
    IMAGE = "image"
    MEDIA = "media"
    OBJECT = "object"
    UNSUPPORTED = "unsupported"


TAG_KINDS = {
    "strong": Kind.BOLD,
    "b": Kind.BOLD,
    "em": Kind.ITALIC,
    "i": Kind.ITALIC,
    "u": Kind.UNDERLINE,
    "strike": Kind.STRIKE,
    "s": Kind.STRIKE,
    "del": Kind.STRIKE,
    "font": Kind.FONT,
    "mark": Kind.MARK,
    "pre": Kind.PRE,
    "a": Kind.LINK,
    "hr": Kind.RULE,
    "br": Kind.BREAK,
    "li": Kind.ITEM,
    "center": Kind.CENTER,
    "h1": Kind.HEADING1,
    "h2": Kind.HEADING2,
    "h3": Kind.HEADING3,
    "big": Kind.HEADING3,
    "small": Kind.SMALL,
    "q": Kind.QUOTE,
    "blockquote": Kind.BLOCKQUOTE,
    "img": Kind.IMAGE,
    "video": Kind.MEDIA,
    "audio": Kind.MEDIA,
    "embed": Kind.MEDIA,
    "object": Kind.OBJECT,
    "[document]": Kind.ROOT,
}

# bs4 node types that carry no printable text
_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


@dataclass
class Text:
    content: str


@dataclass
class Element:
    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)

    @property
    def kind(self):
        return kind_of(self.tag)

    def get(self, name, default=None):
        return self.attrs.get(name, default)


Node = Union[Text, Element]


def kind_of(tag):
    """Map a tag name to its ``Kind``; unknown tags are ``UNSUPPORTED``."""
    return TAG_KINDS.get(tag.lower(), Kind.UNSUPPORTED)


def parse_html(body):
    """Parse an HTML body into a document tree.

    Args:
        body (str): Markup as received with the notification

    Returns:
        Element: Root element whose children are the top-level nodes
    """
    soup = BeautifulSoup(body or "", "html.parser")
    return _convert(soup)


def _convert(tag):
    attrs = {}
    for name, value in tag.attrs.items():
        # multi-valued attributes (class, rel) come back as lists
        attrs[name] = " ".join(value) if isinstance(value, list) else value

    children = []
    for child in tag.children:
        if isinstance(child, Tag):
            children.append(_convert(child))
        elif isinstance(child, NavigableString) and not isinstance(child, _SKIPPED_STRINGS):
            children.append(Text(str(child)))
    return Element(tag.name, attrs, children)
