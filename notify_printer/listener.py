"""ntfy stream listener for the notification printer."""

import json
import logging
import time
import requests

from . import config
from .helpers import priority_at_least
from .message import Message


def handle_payload(printer, payload, min_priority=None):
    """Print one decoded stream event if it is a message worth printing.

    Returns:
        bool: True if the message was handed to the printer
    """
    if payload.get("event", "message") != "message":
        logging.debug("Skipping %s event", payload.get("event"))
        return False

    message = Message.from_payload(payload)
    if not message.body and not message.heading:
        return False

    minimum = min_priority or config.MIN_PRIORITY
    if not priority_at_least(message.priority, minimum):
        logging.info("Dropping %s priority message (minimum %s): %s", message.priority, minimum, message.heading)
        return False

    printer.print_message(message)
    return True


def listen(ntfy_url, printer, stop_event=None):
    """Connect to an ntfy JSON stream and print incoming messages.

    Reconnects after failures, doubling the wait each time up to
    ``RECONNECT_MAX_DELAY``; the wait resets once a connection succeeds.

    Args:
        ntfy_url (str): Full ntfy stream URL (e.g., https://ntfy.sh/mytopic/json)
        printer (ReceiptPrinter): Printer that renders and prints messages
        stop_event (threading.Event): Ends the loop when set (default: config.STOP_EVENT)
    """
    stop_event = stop_event or config.STOP_EVENT
    delay = config.RECONNECT_DELAY

    logging.info("Listening to %s", ntfy_url)

    while not stop_event.is_set():
        try:
            with requests.get(ntfy_url, stream=True, timeout=None) as r:
                r.raise_for_status()
                delay = config.RECONNECT_DELAY
                for line in r.iter_lines(decode_unicode=True):
                    if stop_event.is_set():
                        break
                    if not line:
                        continue
                    try:
                        payload = json.loads(line)
                    except ValueError:
                        logging.warning("Received non-json line: %s", line)
                        continue
                    try:
                        handle_payload(printer, payload)
                    except Exception:
                        logging.error("Error printing message %s", payload.get("id"), exc_info=True)
        except Exception:
            if stop_event.is_set():
                break
            logging.exception("Connection to ntfy failed - retrying in %.1fs", delay)
            time.sleep(delay)
            delay = min(delay * 2, config.RECONNECT_MAX_DELAY)
