"""Notification messages and printer profiles."""

from dataclasses import dataclass
from typing import Optional

from . import config
from .helpers import detect_priority

BACKENDS = ("canvas", "commands")


def _flag(value):
    return value in (1, True) or str(value).strip().lower() in ("1", "true", "yes")


@dataclass
class Message:
    """A notification ready to be rendered."""

    body: str = ""
    title: Optional[str] = None
    app: Optional[str] = None
    html: bool = False
    monospace: bool = False
    url: Optional[str] = None
    url_title: Optional[str] = None
    priority: str = "default"

    @property
    def heading(self):
        """Title line, falling back to the sending app's name."""
        return self.title or self.app or ""

    @classmethod
    def from_payload(cls, payload):
        """Build a message from a decoded ntfy or pushover JSON payload.

        ntfy messages mark markup with an ``html`` tag and carry their link in
        ``click``; pushover messages use ``html``/``monospace`` flags and
        ``url``/``url_title``.
        """
        is_ntfy = "event" in payload or "topic" in payload

        tags = payload.get("tags") or []
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(",") if t.strip()]

        return cls(
            body=payload.get("message") or "",
            title=payload.get("title") or None,
            app=payload.get("app") or payload.get("topic") or None,
            html=_flag(payload.get("html")) or "html" in tags,
            monospace=_flag(payload.get("monospace")) or "monospace" in tags,
            url=payload.get("url") or payload.get("click") or None,
            url_title=payload.get("url_title") or None,
            priority=detect_priority(payload, scale="ntfy" if is_ntfy else "pushover"),
        )


@dataclass
class PrinterProfile:
    """Physical limits of the target printer.

    Args:
        width (int): Printable width in pixels
        columns (int): Characters per line of the printer's own font
        backend (str): "canvas" or "commands"
    """

    width: int = 384
    columns: int = 32
    backend: str = "canvas"

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(f"unknown render backend {self.backend!r}, expected one of {BACKENDS}")

    @classmethod
    def from_config(cls, **overrides):
        values = {
            "width": config.PAPER_WIDTH_PX,
            "columns": config.PRINTER_COLUMNS,
            "backend": config.RENDER_BACKEND,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
