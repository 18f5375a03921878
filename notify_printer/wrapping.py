"""Greedy word wrapping against a pixel-measuring font metric."""

import re

_WHITESPACE = re.compile(r"\s")


def wrap_lines(measure, max_width, x, text):
    """Split ``text`` into lines that each fit ``max_width`` pixels.

    The first returned line continues the caller's current line, which
    already has ``x`` pixels used. Words wider than a whole line are broken
    into single characters.

    Args:
        measure (callable): ``measure(text) -> width`` for the active font
        max_width (float): Width available for a line, in pixels
        x (float): Pixels already used on the current line
        text (str): Text to wrap; ``"\\n"`` forces a line break

    Returns:
        list[str]: Lines in order (may be empty when ``text`` is empty)
    """
    if x > 0 and not text:
        return [""]

    widths = {" ": measure(" ")}

    def width_of(token):
        if token not in widths:
            widths[token] = measure(token)
        return widths[token]

    # A run continuing a partial line is separated from it by a space
    if x > 0:
        x += widths[" "]

    lines = []
    if x > max_width:
        lines.append("")
        x = 0

    segments = text.split("\n")
    for index, segment in enumerate(segments):
        if index > 0:
            x = 0

        words = [word if i == 0 else " " + word for i, word in enumerate(_WHITESPACE.split(segment))]
        words.reverse()

        line = ""
        while words:
            word = words.pop()
            width = width_of(word)

            if width > max_width:
                if len(word) > 1:
                    words.extend(reversed(word))
                    continue
                # a single glyph wider than the paper still gets its own line
                if line:
                    lines.append(line)
                lines.append(word.lstrip() or word)
                line = ""
                x = 0
            elif x + width > max_width:
                lines.append(line)
                line = word.lstrip()
                x = width_of(line)
            else:
                line += word
                x += width

        if line or index < len(segments) - 1:
            lines.append(line)

    return lines
