"""Lay out notifications onto an output sink.

The renderer walks a document tree depth first. Every call takes the cursor
and style it should start from and returns the cursor where it stopped, so
no layout state is shared between branches of the tree.
"""

import logging
from urllib.parse import urlparse

from .markup import Element, Kind, Text, parse_html
from .media import MediaError, fetch_image, fit_to_width, make_qrcode
from .sinks import CanvasSink, CommandSink
from .style import CENTER, Cursor, Style
from .wrapping import wrap_lines

RULE_HEIGHT = 2
BULLET = "• "

BLACK_COLORS = ("#000", "#000000", "black")

# Style changes applied to an element's subtree
KIND_STYLES = {
    Kind.BOLD: {"bold": True},
    Kind.ITALIC: {"italic": True},
    Kind.UNDERLINE: {"underline": True},
    Kind.STRIKE: {"strike": True},
    Kind.MARK: {"invert": True},
    Kind.PRE: {"monospace": True},
    Kind.CENTER: {"align": CENTER},
    Kind.HEADING1: {"scale": 2.0},
    Kind.HEADING2: {"scale": 1.5},
    Kind.HEADING3: {"scale": 1.25},
    Kind.SMALL: {"scale": 0.75},
}

# Headings always sit on lines of their own
HEADINGS = (Kind.HEADING1, Kind.HEADING2, Kind.HEADING3)


def restyle(style, element):
    """Style for the children of ``element``; ``style`` itself is left untouched."""
    kind = element.kind
    if kind is Kind.FONT:
        # no colors on paper: any non-black font color prints inverted
        color = (element.get("color") or "").strip().lower()
        if color and color not in BLACK_COLORS:
            return style.replace(invert=True)
        return style
    changes = KIND_STYLES.get(kind)
    return style.replace(**changes) if changes else style


def media_source(element):
    """Primary source URL of an img/video/audio/embed/object element."""
    if element.kind is Kind.OBJECT:
        return element.get("data")
    src = element.get("src")
    if src:
        return src
    for child in element.children:
        if isinstance(child, Element) and child.tag.lower() == "source" and child.get("src"):
            return child.get("src")
    return None


class Renderer:
    """Writes text, rules and media blocks for one message into a sink.

    Args:
        sink (Sink): Canvas or command backend
        fetch (callable): ``fetch(url) -> PIL.Image``, raising on failure
        qrcode (callable): ``qrcode(data) -> PIL.Image``
    """

    def __init__(self, sink, fetch=fetch_image, qrcode=make_qrcode):
        self.sink = sink
        self.fetch = fetch
        self.make_qrcode = qrcode

    def text(self, cursor, text, style):
        """Draw a run of text starting at the cursor, wrapping as needed."""
        sink = self.sink
        x, y = cursor

        lines = wrap_lines(lambda t: sink.measure(t, style), sink.width, x, text)
        if not lines:
            return cursor

        line_height = sink.line_height(style)
        width = 0
        for i, line in enumerate(lines):
            if i > 0:
                sink.line_break(style)
                x = 0
                y += line_height
            width = sink.measure(line, style)
            sink.draw_text(line, x, y, width, style)

        if style.newline:
            sink.line_break(style)
            return Cursor(0, y + line_height)
        return Cursor(x + width, y)

    def newline(self, cursor, style=None, safe=False):
        """End the current line unless the cursor is already at its start.

        The line advances by the line height of ``style`` (default: body text).
        With ``safe`` the next block is also pushed down by the font descent
        so it does not clip descenders of the line above.
        """
        if cursor.x > 0:
            cursor = self.text(cursor, "", (style or Style()).replace(newline=True))
        if safe:
            cursor = Cursor(cursor.x, cursor.y + self.sink.descent(Style()))
        return cursor

    def qrcode(self, cursor, data):
        """Draw ``data`` as a QR code block on its own line."""
        try:
            bitmap = self.make_qrcode(data)
        except Exception as e:
            logging.warning("QR generation failed for %r: %s", data, e)
            return self.text(self.newline(cursor), data, Style(newline=True))

        width, height = fit_to_width(self.sink.width, bitmap.width, bitmap.height)
        cursor = self.newline(cursor, safe=True)
        self.sink.draw_qrcode(data, bitmap, cursor.x, cursor.y, width, height)
        return Cursor(0, cursor.y + height)

    def image(self, cursor, src):
        """Fetch and draw an image block; raises if it cannot be fetched.

        Only https sources are handed to the fetcher.
        """
        if urlparse(src).scheme != "https":
            raise MediaError(f"refusing to fetch non-https image: {src!r}")
        bitmap = self.fetch(src)
        width, height = fit_to_width(self.sink.width, bitmap.width, bitmap.height)
        cursor = self.newline(cursor, safe=True)
        self.sink.draw_image(bitmap, cursor.x, cursor.y, width, height)
        return Cursor(0, cursor.y + height)

    def render(self, cursor, style, node):
        """Render a node and its subtree, returning the cursor after it."""
        if isinstance(node, Text):
            lines = node.content.split("\n")
            last = len(lines) - 1
            for i, line in enumerate(lines):
                cursor = self.text(cursor, line, style.replace(newline=i != last))
            return cursor

        kind = node.kind
        style = restyle(style, node)
        block = kind in HEADINGS

        if block:
            cursor = self.newline(cursor)

        if kind is Kind.LINK and node.get("href"):
            # the QR code stands in for the link text
            return self.qrcode(cursor, node.get("href"))
        elif kind is Kind.RULE:
            if self.sink.rule_on_own_line:
                cursor = self.newline(cursor)
            self.sink.draw_rule(cursor.y, RULE_HEIGHT)
        elif kind is Kind.BREAK:
            cursor = self.newline(cursor)
        elif kind is Kind.ITEM:
            cursor = self.text(self.newline(cursor), BULLET, style)
        elif kind is Kind.IMAGE:
            src = node.get("src")
            if src:
                try:
                    cursor = self.image(cursor, src)
                except Exception as e:
                    logging.warning("Image %s unavailable (%s); printing QR code instead", src, e)
                    cursor = self.qrcode(cursor, src)
        elif kind in (Kind.MEDIA, Kind.OBJECT):
            src = media_source(node)
            if src:
                cursor = self.qrcode(cursor, src)

        for child in node.children:
            cursor = self.render(cursor, style, child)

        if block:
            cursor = self.newline(cursor, style)
        return cursor

    def message(self, message):
        """Lay out a full message: title, rule, body and trailing link."""
        cursor = self.text(Cursor(0, 0), message.heading, Style(bold=True, newline=True))

        y = cursor.y + self.sink.descent(Style(bold=True))
        self.sink.draw_rule(y, RULE_HEIGHT)
        cursor = Cursor(cursor.x, y + RULE_HEIGHT)

        if message.html:
            cursor = self.render(cursor, Style(), parse_html(message.body))
        else:
            cursor = self.text(cursor, message.body, Style(monospace=message.monospace))

        if message.url:
            cursor = self.qrcode(cursor, message.url)
            cursor = self.text(cursor, message.url_title or message.url, Style())

        return self.newline(cursor, safe=True)


def make_sink(profile):
    if profile.backend == "commands":
        return CommandSink(profile.width, profile.columns)
    return CanvasSink(profile.width)


def render_message(message, profile, fetch=fetch_image, qrcode=make_qrcode):
    """Render a message for a printer profile.

    Args:
        message (Message): Notification to print
        profile (PrinterProfile): Paper width, columns and backend choice
        fetch (callable): Image loader used for ``<img>`` sources
        qrcode (callable): QR code rasterizer

    Returns:
        RasterOutput | CommandOutput: Finished output for the printer
    """
    sink = make_sink(profile)
    cursor = Renderer(sink, fetch=fetch, qrcode=qrcode).message(message)
    return sink.finish(cursor.y)
