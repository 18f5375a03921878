"""Helper functions for priority detection and emoji handling."""

import re
from . import config

# Lowest to highest
PRIORITY_LEVELS = ("min", "low", "default", "high", "max")

_EMOJI_PATTERN = re.compile(
    "["
    "\U0001F600-\U0001F64F"  # emoticons
    "\U0001F300-\U0001F5FF"  # symbols & pictographs
    "\U0001F680-\U0001F6FF"  # transport & map symbols
    "\U0001F1E0-\U0001F1FF"  # flags (iOS)
    "\U00002702-\U000027B0"  # dingbats
    "\U000024C2-\U0001F251"
    "\U0001F900-\U0001F9FF"  # supplemental symbols
    "\U0001FA00-\U0001FA6F"  # extended symbols
    "]+", flags=re.UNICODE
)


def strip_emojis(text):
    """Remove or replace emojis with ASCII alternatives for thermal printer.

    Replaces specific emoji with text alternatives first, then removes
    any remaining emoji characters.

    Args:
        text (str): Text potentially containing emoji

    Returns:
        str: Text with emoji removed or replaced
    """
    for emoji, replacement in config.EMOJI_MAP.items():
        text = text.replace(emoji, replacement)
    return _EMOJI_PATTERN.sub('', text)


def detect_priority(payload=None, scale="ntfy"):
    """Detect priority level from a notification payload.

    Supports:
    - ntfy numeric priority (1-5 scale, where 5=max, 1=min)
    - pushover numeric priority (-2..2 scale, where 0=default)
    - Priority names (min, low, default, high, max, urgent, ...)

    Args:
        payload (dict): Message payload with priority data
        scale (str): "ntfy" or "pushover", how to read numeric values

    Returns:
        str: One of ("max", "high", "default", "low", "min")
    """
    if not payload or not isinstance(payload, dict):
        return "default"

    priority_value = payload.get("priority")
    if priority_value is None:
        return "default"

    try:
        p = int(priority_value)
    except (ValueError, TypeError):
        p = None

    if p is not None:
        if scale == "pushover":
            p += 3
        if p >= 5:
            return "max"
        elif p >= 4:
            return "high"
        elif p >= 3:
            return "default"
        elif p >= 2:
            return "low"
        else:
            return "min"

    priority_str = str(priority_value).strip().lower()
    if priority_str in ["urgent", "critical", "max", "emergency"]:
        return "max"
    elif priority_str in ["high"]:
        return "high"
    elif priority_str in ["low"]:
        return "low"
    elif priority_str in ["min", "minimal", "lowest"]:
        return "min"
    return "default"


def priority_at_least(level, minimum):
    """Check whether ``level`` is at or above ``minimum``; unknown names count as default."""
    def rank(name):
        try:
            return PRIORITY_LEVELS.index(name)
        except ValueError:
            return PRIORITY_LEVELS.index("default")
    return rank(level) >= rank(minimum)
