"""Notification printer: prints ntfy messages (plain text or simple HTML) on a thermal printer."""

import argparse
import logging
import signal
import sys

from notify_printer import config
from notify_printer.listener import listen
from notify_printer.message import BACKENDS, Message, PrinterProfile
from notify_printer.printer import ReceiptPrinter

EXAMPLES = {
    "text": Message(
        title="Lunch Time!",
        body="Pizza is in the kitchen.\n\nFirst come, first served 🍕",
    ),
    "html": Message(
        title="title",
        html=True,
        body="""<h1>h1</h1>
<h2>h2</h2>
<h3>h3</h3>
<pre>monospace</pre>
<b>bold</b>
<i>italic</i>
<u>underline</u>
<mark>invert</mark>
<strike>strike</strike>
<small>small</small>
message with <b>bold</b>, <u>underlined</u>, and <font color="#ffffff">inverted</font> text
<hr>
<ul>
    <li>one</li>
    <li>two</li>
    <li>three</li>
</ul>
<a href="https://example.com/">example url</a>""",
        url="https://example.com",
        url_title="example url",
    ),
}


def shutdown(signum, frame):
    logging.info("Shutting down (signal %s)", signum)
    config.STOP_EVENT.set()


def main():
    parser = argparse.ArgumentParser(description="Receipt printer listening to an ntfy topic")
    parser.add_argument("--host", default=config.DEFAULT_NTFY_HOST, help="ntfy host (including scheme)")
    parser.add_argument("--topic", default=config.DEFAULT_NTFY_TOPIC, help="ntfy topic name")
    parser.add_argument("--preview", "-p", action="store_true", help="preview mode - show images instead of printing")
    parser.add_argument("--out", "-o", help="in preview mode, save images to this directory")
    parser.add_argument("--example", "-e", choices=sorted(EXAMPLES), help="print an example message and exit")
    parser.add_argument("--file", "-f", help="print the contents of a file and exit")
    parser.add_argument("--html", action="store_true", help="treat --file contents as HTML")
    parser.add_argument("--title", help="title for --file output")
    parser.add_argument("--backend", "-b", choices=BACKENDS, help="render as one image (canvas) or printer commands")
    args = parser.parse_args()

    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(message)s")
    config.setup()

    profile = PrinterProfile.from_config(backend=args.backend)
    preview = args.preview or bool(args.out)

    if args.example or args.file:
        if args.file:
            with open(args.file, encoding="utf-8") as f:
                message = Message(body=f.read(), title=args.title or args.file, html=args.html)
        else:
            message = EXAMPLES[args.example]
        wp = ReceiptPrinter(preview_mode=preview, output_dir=args.out, profile=profile)
        wp.print_message(message)
        sys.exit(0)

    if not args.host or not args.topic:
        logging.error("NTFY host/topic not provided. Set NTFY_HOST and NTFY_TOPIC in environment or pass --host/--topic.")
        sys.exit(2)

    ntfy_url = f"{args.host.rstrip('/')}/{args.topic}/json"

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    wp = ReceiptPrinter(preview_mode=preview, output_dir=args.out, profile=profile)
    listen(ntfy_url, wp)


if __name__ == "__main__":
    main()
