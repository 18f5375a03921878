"""Output backends for the renderer.

CanvasSink paints the whole receipt onto one image that is sent to the
printer as a raster. CommandSink records printer-native ESC/POS operations
instead and only rasterizes embedded images and QR codes.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from os import path
from typing import Any, List

from PIL import Image, ImageDraw, ImageFont

from . import config
from .helpers import strip_emojis
from .media import round_up_8
from .style import CENTER, Style

WHITE = 255
BLACK = 0


class Sink:
    """Drawing surface the renderer writes a message into.

    Coordinates are pixels; ``y`` is always the top of a line or block.
    """

    width = 0
    # the rule ends the current line instead of overlaying it
    rule_on_own_line = False

    def measure(self, text, style):
        raise NotImplementedError

    def line_height(self, style):
        raise NotImplementedError

    def descent(self, style):
        raise NotImplementedError

    def draw_text(self, text, x, y, width, style):
        raise NotImplementedError

    def line_break(self, style):
        """Called each time the current line ends."""

    def draw_rule(self, y, height):
        raise NotImplementedError

    def draw_image(self, bitmap, x, y, width, height):
        raise NotImplementedError

    def draw_qrcode(self, data, bitmap, x, y, width, height):
        self.draw_image(bitmap, x, y, width, height)

    def finish(self, height):
        raise NotImplementedError


@dataclass
class RasterOutput:
    """A finished receipt image, ``height`` a multiple of 8."""

    width: int
    height: int
    image: Image.Image


@dataclass
class Command:
    op: str
    args: dict = field(default_factory=dict)


@dataclass
class CommandOutput:
    """A finished list of printer operations."""

    commands: List[Command]

    def replay(self, printer, impl=None):
        """Send the recorded operations to a python-escpos printer.

        Args:
            printer: ``escpos.escpos.Escpos`` instance (Usb, Dummy, ...)
            impl (str): Image implementation passed to ``printer.image``
        """
        for command in self.commands:
            args = command.args
            if command.op == "set":
                printer.set(**args)
            elif command.op == "text":
                printer.text(args["text"])
            elif command.op == "ln":
                printer.ln()
            elif command.op == "rule":
                printer.text("-" * args["columns"] + "\n")
            elif command.op in ("image", "qr"):
                if impl:
                    printer.image(args["image"], impl=impl)
                else:
                    printer.image(args["image"])
            else:
                raise ValueError(f"unknown printer command {command.op!r}")


@lru_cache(maxsize=32)
def load_font(size, monospace=False, bold=False, italic=False):
    """Load a DejaVu face for a style, falling back to Pillow's built-in font."""
    name = config.FONT_FILES[(monospace, bold, italic)]
    try:
        return ImageFont.truetype(path.join(config.FONT_DIR, name), size)
    except OSError:
        logging.debug("Could not load %s; falling back to default font", name)
        return ImageFont.load_default(size=size)


class CanvasSink(Sink):
    """Paints onto a grayscale canvas that grows downward as needed."""

    def __init__(self, width, font_size=None, initial_height=256):
        self.width = width
        self.font_size = font_size or config.FONT_SIZE
        self.image = Image.new("L", (width, initial_height), color=WHITE)
        self.draw = ImageDraw.Draw(self.image)
        self.bottom = 0
        self._centered = []

    def font(self, style):
        size = max(1, int(round(self.font_size * style.scale)))
        return load_font(size, style.monospace, style.bold, style.italic)

    def measure(self, text, style):
        return self.font(style).getlength(text)

    def line_height(self, style):
        ascent, descent = self.font(style).getmetrics()
        return ascent + descent

    def descent(self, style):
        return self.font(style).getmetrics()[1]

    def _reserve(self, bottom):
        bottom = int(bottom) + 1
        if bottom > self.image.height:
            grown = Image.new("L", (self.width, max(bottom, self.image.height * 2)), color=WHITE)
            grown.paste(self.image, (0, 0))
            self.image = grown
            self.draw = ImageDraw.Draw(self.image)
        self.bottom = max(self.bottom, bottom - 1)

    def draw_text(self, text, x, y, width, style):
        if self._centered and y != self._centered[0][2]:
            self._flush()
        if self._centered or (style.align == CENTER and x == 0):
            # a centred line is placed once all of its runs are known
            self._centered.append((text, x, y, width, style))
            return
        self._paint(text, x, y, width, style)

    def _flush(self):
        runs, self._centered = self._centered, []
        if not runs:
            return
        right = max(x + width for _, x, _, width, _ in runs)
        offset = max(0, (self.width - right) // 2)
        for text, x, y, width, style in runs:
            self._paint(text, x + offset, y, width, style)

    def line_break(self, style):
        self._flush()

    def _paint(self, text, x, y, width, style):
        font = self.font(style)
        ascent, descent = font.getmetrics()
        line_height = ascent + descent
        self._reserve(y + line_height)

        color = BLACK
        if style.invert:
            self.draw.rectangle([x, y, x + width, y + line_height], fill=BLACK)
            color = WHITE

        self.draw.text((x, y), text, font=font, fill=color)

        baseline = y + ascent
        if style.strike:
            bar = baseline - ascent // 3
            self.draw.rectangle([x, bar, x + width, bar + 1], fill=color)
        if style.underline:
            self.draw.rectangle([x, baseline, x + width, baseline + 1], fill=color)

    def draw_rule(self, y, height):
        self._flush()
        self._reserve(y + height)
        self.draw.rectangle([0, y, self.width - 1, y + height - 1], fill=BLACK)

    def draw_image(self, bitmap, x, y, width, height):
        self._flush()
        self._reserve(y + height)
        self.image.paste(_flatten(bitmap).resize((width, height)), (int(x), int(y)))

    def draw_qrcode(self, data, bitmap, x, y, width, height):
        self._flush()
        self._reserve(y + height)
        scaled = _flatten(bitmap).resize((width, height), Image.NEAREST)
        self.image.paste(scaled, (int(x), int(y)))

    def finish(self, height):
        self._flush()
        height = round_up_8(max(height, self.bottom, 1))
        self._reserve(height)
        return RasterOutput(self.width, height, self.image.crop((0, 0, self.width, height)))


def _flatten(bitmap):
    """Grayscale copy of an image with any transparency composited onto white."""
    if bitmap.mode in ("RGBA", "LA") or (bitmap.mode == "P" and "transparency" in bitmap.info):
        rgba = bitmap.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        bitmap = Image.alpha_composite(background, rgba)
    return bitmap.convert("L")


class CommandSink(Sink):
    """Records ESC/POS operations, wrapping on the printer's character grid.

    Every character is ``width / columns`` pixels wide. Scaled text uses the
    printer's double width/height modes and small text uses font B.
    """

    rule_on_own_line = True

    def __init__(self, width, columns=None):
        self.width = width
        self.columns = columns or config.PRINTER_COLUMNS
        self.char_width = width / self.columns
        self.commands = []
        self._state = None
        self._line_start = True

    def _size(self, style):
        # (width multiplier, height multiplier)
        if style.scale >= 1.5:
            return 2, 2
        if style.scale > 1:
            return 1, 2
        if style.scale < 1:
            return 0.75, 0.75
        return 1, 1

    def measure(self, text, style):
        return len(text) * self.char_width * self._size(style)[0]

    def line_height(self, style):
        return int(round(self.char_width * 2 * self._size(style)[1]))

    def descent(self, style):
        return self.line_height(style) // 6

    def _emit(self, op, **args):
        self.commands.append(Command(op, args))

    def _apply(self, style):
        dw, dh = self._size(style)
        state = {
            "bold": style.bold,
            "underline": 1 if style.underline else 0,
            "invert": style.invert,
            "align": style.align,
            "font": "b" if style.scale < 1 else "a",
        }
        if dw == 2 or dh == 2:
            state.update(double_width=dw == 2, double_height=dh == 2)
        else:
            state["normal_textsize"] = True
        if state != self._state:
            self._state = state
            self._emit("set", **state)

    def _end_line(self):
        if not self._line_start:
            self._emit("ln")
            self._line_start = True

    def draw_text(self, text, x, y, width, style):
        text = strip_emojis(text)
        if not text:
            return
        self._apply(style)
        self._emit("text", text=text)
        self._line_start = False

    def line_break(self, style):
        self._emit("ln")
        self._line_start = True

    def draw_rule(self, y, height):
        self._end_line()
        self._apply(Style())
        self._emit("rule", columns=self.columns)

    def draw_image(self, bitmap, x, y, width, height):
        self._end_line()
        scaled = _flatten(bitmap).resize((round_up_8(width), round_up_8(height)))
        self._emit("image", image=scaled.convert("1"))

    def draw_qrcode(self, data, bitmap, x, y, width, height):
        self._end_line()
        scaled = _flatten(bitmap).resize((round_up_8(width), round_up_8(height)), Image.NEAREST)
        self._emit("qr", content=data, image=scaled.convert("1"))

    def finish(self, height):
        self._end_line()
        self._apply(Style())
        return CommandOutput(list(self.commands))
