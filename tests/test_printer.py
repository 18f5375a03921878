"""Tests for the printer transport (no USB hardware needed)."""

from PIL import Image

from notify_printer import config
from notify_printer.message import Message, PrinterProfile
from notify_printer.printer import ReceiptPrinter, to_mono
from notify_printer.sinks import Command, CommandOutput, RasterOutput


class FakeDevice:
    def __init__(self, attached=True):
        self.attached = attached

    def get_active_configuration(self):
        if not self.attached:
            raise OSError("No such device")
        return 1


class FakeEscpos:
    def __init__(self, attached=True):
        self.calls = []
        self.device = FakeDevice(attached)

    def hw(self, hw):
        self.calls.append(("hw", hw))

    def set(self, **kwargs):
        self.calls.append(("set", kwargs))

    def text(self, txt):
        self.calls.append(("text", txt))

    def ln(self, count=1):
        self.calls.append(("ln",))

    def image(self, img, **kwargs):
        self.calls.append(("image", img.mode, kwargs.get("impl")))

    def cut(self):
        self.calls.append(("cut",))


def attached_printer(profile=None):
    wp = ReceiptPrinter(preview_mode=True, profile=profile)
    wp.preview_mode = False
    wp.p = FakeEscpos()
    return wp


def test_to_mono():
    assert to_mono(Image.new("L", (8, 8), 128)).mode == "1"


def test_preview_saves_raster(tmp_path):
    wp = ReceiptPrinter(preview_mode=True, output_dir=str(tmp_path), profile=PrinterProfile(width=384))

    wp.print_message(Message(title="Preview", body="hello world"))

    saved = list(tmp_path.iterdir())
    assert [p.name for p in saved] == ["receipt-001.png"]
    with Image.open(saved[0]) as image:
        assert image.width == 384
        assert image.height % 8 == 0


def test_print_raster(monkeypatch):
    monkeypatch.setattr(config, "IMAGE_IMPLS", "")
    monkeypatch.setattr(config, "IMAGE_IMPL", "bitImageRaster")
    wp = attached_printer()

    wp.print_output(RasterOutput(384, 8, Image.new("L", (384, 8), 255)), label="x")

    assert wp.p.calls == [
        ("hw", "INIT"),
        ("image", "1", "bitImageRaster"),
        ("text", "\n\n\n\n"),
        ("cut",),
    ]


def test_print_commands(monkeypatch):
    monkeypatch.setattr(config, "IMAGE_IMPLS", "graphics, bitImageColumn")
    wp = attached_printer()
    output = CommandOutput([
        Command("text", {"text": "hi"}),
        Command("ln"),
        Command("qr", {"content": "https://example.com", "image": Image.new("1", (8, 8))}),
    ])

    wp.print_output(output, label="x")

    assert wp.p.calls == [
        ("hw", "INIT"),
        ("text", "hi"),
        ("ln",),
        ("image", "1", "graphics"),
        ("text", "\n\n\n\n"),
        ("cut",),
    ]


def test_print_message_with_command_backend():
    wp = attached_printer(PrinterProfile(width=384, columns=32, backend="commands"))

    wp.print_message(Message(title="T", body="<u>under</u>", html=True))

    texts = [call[1] for call in wp.p.calls if call[0] == "text"]
    assert texts[0] == "T"
    assert "under" in texts
    assert any(call[0] == "set" and call[1].get("underline") == 1 for call in wp.p.calls)


def test_unplugged_printer_is_reconnected_before_printing():
    wp = attached_printer()
    wp.p = FakeEscpos(attached=False)
    replacement = FakeEscpos()
    wp.connect = lambda: setattr(wp, "p", replacement)

    wp.print_output(CommandOutput([Command("text", {"text": "hi"})]), label="x")

    assert ("text", "hi") in replacement.calls


def test_is_ready():
    wp = attached_printer()
    assert wp.is_ready()

    wp.p = FakeEscpos(attached=False)
    assert not wp.is_ready()
    assert not ReceiptPrinter(preview_mode=True).is_ready()
