"""Shared fixtures: a fixed-width recording sink and stub media loaders."""

import pytest
from PIL import Image

from notify_printer.rendering import Renderer
from notify_printer.sinks import Sink

CHAR_WIDTH = 12
LINE_HEIGHT = 20
DESCENT = 4


class RecordingSink(Sink):
    """Monospace sink that records every drawing call instead of painting."""

    def __init__(self, width=384):
        self.width = width
        self.calls = []

    def measure(self, text, style):
        return len(text) * CHAR_WIDTH * style.scale

    def line_height(self, style):
        return int(LINE_HEIGHT * style.scale)

    def descent(self, style):
        return DESCENT

    def draw_text(self, text, x, y, width, style):
        self.calls.append(("text", text, x, y, style))

    def line_break(self, style):
        self.calls.append(("break",))

    def draw_rule(self, y, height):
        self.calls.append(("rule", y, height))

    def draw_image(self, bitmap, x, y, width, height):
        self.calls.append(("image", x, y, width, height))

    def draw_qrcode(self, data, bitmap, x, y, width, height):
        self.calls.append(("qr", data, x, y, width, height))

    def finish(self, height):
        return self.calls

    def texts(self):
        """Non-empty text runs as (text, x, y, style)."""
        return [call[1:] for call in self.calls if call[0] == "text" and call[1]]

    def of(self, kind):
        return [call for call in self.calls if call[0] == kind]


def fake_qrcode(data):
    return Image.new("1", (100, 100), color=1)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def renderer(sink):
    def no_fetch(url):
        raise AssertionError(f"unexpected fetch of {url}")
    return Renderer(sink, fetch=no_fetch, qrcode=fake_qrcode)
