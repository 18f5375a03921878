"""Image and QR code helpers for embedded media blocks."""

import io
import logging
import math
from urllib.parse import urlparse

import qrcode
import requests
from PIL import Image

from . import config


class MediaError(Exception):
    """An embedded image could not be fetched or decoded."""


def round_up_8(n):
    """Round a pixel size up to the next multiple of 8 (raster rows are bytes)."""
    return (math.ceil(n) + 7) // 8 * 8


def fit_to_width(max_width, width, height):
    """Scale an image size down to the paper width, keeping its aspect ratio.

    Both sides end up a multiple of 8. The width is rounded down instead of
    up when rounding up would overflow the paper.

    Args:
        max_width (int): Paper width in pixels
        width, height (int): Source image size

    Returns:
        tuple: (width, height) to draw the image at
    """
    if width <= 0 or height <= 0:
        raise MediaError(f"empty image ({width}x{height})")

    fitted = min(width, max_width)
    height = height * fitted / width

    fitted_width = round_up_8(fitted)
    if fitted_width > max_width:
        fitted_width = int(max_width) // 8 * 8
    return fitted_width, round_up_8(height)


def make_qrcode(data):
    """Rasterize ``data`` as a black-on-white QR code.

    Returns:
        PIL.Image: 1-bit QR code image
    """
    qr = qrcode.QRCode(box_size=4, border=2)
    qr.add_data(data)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white").get_image()


def fetch_image(url, timeout=None):
    """Download and decode an image.

    Only ``https`` sources are fetched.

    Raises:
        MediaError: On a non-https source, HTTP failure or undecodable data
    """
    if urlparse(url or "").scheme != "https":
        raise MediaError(f"refusing to fetch non-https image: {url!r}")

    try:
        response = requests.get(url, timeout=timeout or config.FETCH_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        raise MediaError(f"could not fetch {url}: {e}") from e

    try:
        image = Image.open(io.BytesIO(response.content))
        image.load()
    except (OSError, Image.DecompressionBombError) as e:
        raise MediaError(f"could not decode {url}: {e}") from e

    logging.debug("Fetched image %s (%dx%d)", url, image.width, image.height)
    return image
