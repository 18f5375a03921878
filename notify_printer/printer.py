"""Receipt printer transport and USB device management.

ReceiptPrinter: renders messages with the configured backend and prints the
result via ESC/POS, or previews it when no hardware is attached.
"""

import logging
import os
import time
from PIL import ImageOps, ImageEnhance
from escpos.printer import Usb

from . import config
from .message import PrinterProfile
from .rendering import render_message
from .sinks import RasterOutput


def to_mono(image):
    """Convert a rendered receipt to the 1-bit image the printer expects."""
    img_mono = image.convert("L")
    img_mono = ImageOps.autocontrast(img_mono)
    img_mono = ImageEnhance.Contrast(img_mono).enhance(config.IMAGE_CONTRAST)
    return img_mono.convert("1")


def image_impls():
    """Image implementations to try, in order."""
    if config.IMAGE_IMPLS:
        return [i.strip() for i in config.IMAGE_IMPLS.split(',') if i.strip()]
    return [config.IMAGE_IMPL]


class ReceiptPrinter:
    """Thermal receipt printer driver for ESC/POS compatible devices.

    Renders messages with the profile's backend and prints via USB connection.
    Supports preview mode for testing without hardware.
    """

    def __init__(self, preview_mode=False, output_dir=None, profile=None):
        """Initialize printer connection.

        Args:
            preview_mode (bool): If True, display images instead of printing
            output_dir (str): In preview mode, save images here instead of showing them
            profile (PrinterProfile): Paper geometry and backend (default: from config)
        """
        self.p = None
        self.preview_mode = preview_mode
        self.output_dir = output_dir
        self.preview_count = 0
        self.profile = profile or PrinterProfile.from_config()
        if not preview_mode:
            self.connect()

    def connect(self, retries=3, retry_delay=0.5):
        """Establish USB connection to printer device.

        Args:
            retries (int): Number of connection attempts (default: 3)
            retry_delay (float): Delay between retries in seconds (default: 0.5)
        """
        if self.preview_mode:
            logging.info("Preview mode - no printer connection needed")
            return

        last_error = None
        for attempt in range(retries):
            try:
                if config.PRINTER_PROFILE:
                    self.p = Usb(config.VENDOR_ID, config.PRODUCT_ID, 0, profile=config.PRINTER_PROFILE)
                else:
                    self.p = Usb(config.VENDOR_ID, config.PRODUCT_ID, 0)

                # detach kernel driver if active
                try:
                    if self.p.device.is_kernel_driver_active(0):
                        self.p.device.detach_kernel_driver(0)
                except Exception:
                    # device/kernel driver info may not be available on some platforms
                    logging.debug("Could not check/detach kernel driver")

                # Give USB device time to settle after connection
                time.sleep(0.5)
                logging.info("Printer connected")
                return
            except Exception as e:
                last_error = e
                if attempt < retries - 1:
                    logging.debug("Connection attempt %d/%d failed, retrying in %ss...", attempt + 1, retries, retry_delay)
                    time.sleep(retry_delay)
                    continue

        logging.error("Failed to connect to USB printer after %d attempts: %s", retries, last_error)
        self.p = None

    def is_ready(self):
        """Check if printer is connected and ready.

        Returns:
            bool: True if printer is connected and operational
        """
        if self.preview_mode or self.p is None:
            return False
        try:
            self.p.device.get_active_configuration()
            return True
        except Exception:
            logging.warning("Printer not ready - device may have been disconnected")
            return False

    def render(self, message):
        """Render a message with this printer's profile."""
        return render_message(message, self.profile)

    def print_message(self, message):
        """Render and print a notification.

        Args:
            message (Message): Notification to print
        """
        output = self.render(message)
        self.print_output(output, label=message.heading)

    def preview(self, output, label=""):
        """Show or save rendered output instead of printing it."""
        self.preview_count += 1
        logging.info("Preview #%d: %s", self.preview_count, label[:60])

        if not isinstance(output, RasterOutput):
            for command in output.commands:
                logging.info("   %s %s", command.op, {k: v for k, v in command.args.items() if k != "image"})
            return

        logging.info("   Resolution: %dx%dpx", output.width, output.height)
        img_final = to_mono(output.image)
        if self.output_dir:
            os.makedirs(self.output_dir, exist_ok=True)
            filename = os.path.join(self.output_dir, f"receipt-{self.preview_count:03d}.png")
            img_final.save(filename)
            logging.info("   Saved %s", filename)
        else:
            img_final.show()

    def _send(self, output):
        impls = image_impls()
        if not isinstance(output, RasterOutput):
            output.replay(self.p, impl=impls[0])
            return

        img_mono = to_mono(output.image)
        for impl in impls:
            try:
                self.p.image(img_mono, impl=impl)
                return
            except TypeError:
                self.p.image(img_mono)
                return
            except Exception:
                logging.exception("Image print failed with impl=%s", impl)
        logging.error("All image implementations failed. Try IMAGE_IMPLS=bitImageColumn,bitImageRaster,graphics")

    def print_output(self, output, label=""):
        """Send rendered output to the printer.

        Args:
            output (RasterOutput | CommandOutput): Result of ``render``
            label (str): Short description for logs
        """
        if self.preview_mode:
            self.preview(output, label)
            return
        if not self.is_ready():
            self.connect()

        # Retry logic for USB operations
        max_retries = 3
        retry_delay = 1.0

        for attempt in range(max_retries):
            try:
                if not self.p:
                    logging.warning("No printer connected - skipping print: %s", label)
                    return
                self.p.hw("INIT")
                self._send(output)
                self.p.text("\n\n\n\n")
                self.p.cut()
                logging.info("Printed: %s", label[:50])
                break
            except Exception as e:
                is_usb_error = "USBError" in type(e).__name__ or "Entity not found" in str(e) or "No such device" in str(e)

                if is_usb_error and attempt < max_retries - 1:
                    logging.warning("USB error on attempt %d/%d: %s - retrying after %.1fs", attempt + 1, max_retries, e, retry_delay)
                    time.sleep(retry_delay)
                    retry_delay *= 2
                    self.connect()
                    continue
                else:
                    logging.exception("Printing error (attempt %d/%d)", attempt + 1, max_retries)
                    self.connect()
                    break
