"""Tests for image fitting, QR codes and image fetching."""

import io

import pytest
import requests
from PIL import Image

from notify_printer import media
from notify_printer.media import MediaError, fetch_image, fit_to_width, make_qrcode, round_up_8


class FakeResponse:
    def __init__(self, content=b"", status_error=None):
        self.content = content
        self.status_error = status_error

    def raise_for_status(self):
        if self.status_error:
            raise self.status_error


def png_bytes(size=(40, 20)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(255, 0, 0)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_round_up_8():
    assert [round_up_8(n) for n in (0, 1, 8, 9, 184.5, 191.5)] == [0, 8, 8, 16, 192, 192]


def test_wide_image_is_scaled_to_paper():
    assert fit_to_width(384, 1000, 500) == (384, 192)


def test_small_image_keeps_size_rounded_up():
    assert fit_to_width(384, 100, 50) == (104, 56)


def test_width_never_exceeds_paper():
    width, height = fit_to_width(390, 1000, 500)

    assert width == 384
    assert height == 200


def test_empty_image_is_rejected():
    with pytest.raises(MediaError):
        fit_to_width(384, 0, 10)


def test_qrcode_is_square():
    image = make_qrcode("https://example.com")

    assert image.width == image.height
    assert image.width > 0


def test_fetch_refuses_plain_http(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("should not be called")

    monkeypatch.setattr(media.requests, "get", fail)

    with pytest.raises(MediaError):
        fetch_image("http://example.com/cat.png")


def test_fetch_decodes_image(monkeypatch):
    monkeypatch.setattr(media.requests, "get", lambda url, timeout: FakeResponse(png_bytes()))

    image = fetch_image("https://example.com/cat.png")

    assert image.size == (40, 20)


def test_fetch_http_error(monkeypatch):
    error = requests.HTTPError("404 Not Found")
    monkeypatch.setattr(media.requests, "get", lambda url, timeout: FakeResponse(status_error=error))

    with pytest.raises(MediaError):
        fetch_image("https://example.com/missing.png")


def test_fetch_connection_error(monkeypatch):
    def refuse(url, timeout):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(media.requests, "get", refuse)

    with pytest.raises(MediaError):
        fetch_image("https://example.com/cat.png")


def test_fetch_undecodable_data(monkeypatch):
    monkeypatch.setattr(media.requests, "get", lambda url, timeout: FakeResponse(b"<html>nope</html>"))

    with pytest.raises(MediaError):
        fetch_image("https://example.com/cat.png")
