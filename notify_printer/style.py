"""Text style and cursor values threaded through a render pass."""

from dataclasses import dataclass, replace
from typing import NamedTuple

LEFT = "left"
CENTER = "center"


@dataclass(frozen=True)
class Style:
    """Inherited text style.

    Instances are never mutated; an element that changes style hands a
    modified copy to its children so siblings never see each other's changes.
    """

    bold: bool = False
    italic: bool = False
    underline: bool = False
    strike: bool = False
    invert: bool = False
    monospace: bool = False
    scale: float = 1.0
    align: str = LEFT
    # the run ends its line
    newline: bool = False

    def replace(self, **changes):
        return replace(self, **changes)


class Cursor(NamedTuple):
    """Pen position in pixels.

    ``x`` is the width already used on the current line, ``y`` the top of the
    current line from the top of the output.
    """

    x: float = 0
    y: float = 0
