"""Configuration module for the notification printer.

Loads environment variables and sets up printer geometry, rendering backend and
stream settings.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- NTFY Configuration ---
DEFAULT_NTFY_HOST = os.environ.get("NTFY_HOST")
DEFAULT_NTFY_TOPIC = os.environ.get("NTFY_TOPIC")

# Messages below this level never reach the printer ("min", "low", "default", "high", "max")
MIN_PRIORITY = os.environ.get("MIN_PRIORITY", "min").lower()

# Reconnect backoff for the message stream (seconds)
RECONNECT_DELAY = float(os.environ.get("RECONNECT_DELAY", "0.5"))
RECONNECT_MAX_DELAY = float(os.environ.get("RECONNECT_MAX_DELAY", "60"))

# --- Logging Configuration ---
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# --- USB Printer Configuration ---
VENDOR_ID = int(os.environ.get("PRINTER_VENDOR", "0x0fe6"), 16)
PRODUCT_ID = int(os.environ.get("PRINTER_PRODUCT", "0x811e"), 16)
PRINTER_PROFILE = os.environ.get("PRINTER_PROFILE")

# --- Printer Geometry & DPI ---
PAPER_WIDTH_MM = float(os.environ.get("PAPER_WIDTH_MM", "48"))  # printable width of 58mm paper
PRINTER_DPI = int(os.environ.get("PRINTER_DPI", "203"))

# Raster rows are sent as whole bytes, so the usable width is a multiple of 8
# 48mm @ 203 DPI = 384px
PAPER_WIDTH_PX = int(os.environ.get("PAPER_WIDTH_PX", "0")) or int(round(PAPER_WIDTH_MM / 25.4 * PRINTER_DPI)) // 8 * 8

# Character columns of the printer's built-in font (used by the command backend)
PRINTER_COLUMNS = int(os.environ.get("PRINTER_COLUMNS", "32"))

# "canvas" renders the whole receipt as one image, "commands" sends printer-native text
RENDER_BACKEND = os.environ.get("RENDER_BACKEND", "canvas").lower()

# --- Fonts ---
FONT_SIZE = int(os.environ.get("FONT_SIZE", "30"))
FONT_DIR = os.environ.get("FONT_DIR", "/usr/share/fonts/truetype/dejavu")
FONT_FILES = {
    # (monospace, bold, italic) -> file name
    (False, False, False): "DejaVuSans.ttf",
    (False, True, False): "DejaVuSans-Bold.ttf",
    (False, False, True): "DejaVuSans-Oblique.ttf",
    (False, True, True): "DejaVuSans-BoldOblique.ttf",
    (True, False, False): "DejaVuSansMono.ttf",
    (True, True, False): "DejaVuSansMono-Bold.ttf",
    (True, False, True): "DejaVuSansMono-Oblique.ttf",
    (True, True, True): "DejaVuSansMono-BoldOblique.ttf",
}

# --- Media ---
FETCH_TIMEOUT = float(os.environ.get("FETCH_TIMEOUT", "10"))

# --- Image Processing ---
IMAGE_IMPL = os.environ.get("IMAGE_IMPL", "bitImageRaster")
IMAGE_IMPLS = os.environ.get("IMAGE_IMPLS", "")
IMAGE_CONTRAST = float(os.environ.get("IMAGE_CONTRAST", "2.0"))

# Common emoji to text mappings for thermal printer compatibility
# (used by the command backend, which prints with the printer's own font)
EMOJI_MAP = {
    "🍕": "[pizza]",
    "🍔": "[burger]",
    "☕": "[coffee]",
    "🎉": "[party]",
    "✅": "[check]",
    "❌": "[x]",
    "⚠️": "[warn]",
    "🔔": "[bell]",
    "📅": "[cal]",
    "⏰": "[clock]",
    "👍": "[+1]",
    "👎": "[-1]",
    "❤️": "[heart]",
    "🔥": "[fire]",
    "💡": "[idea]",
    "📧": "[mail]",
    "📱": "[phone]",
    "🚨": "[alert]",
}

STOP_EVENT = None  # Set at runtime

def setup():
    """Initialize configuration. Call after imports."""
    global STOP_EVENT
    import threading
    STOP_EVENT = threading.Event()
