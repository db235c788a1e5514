"""
Rectangle math for intersection observation.

Coordinates follow the browser convention: y grows downward, so `top` is
numerically less than `bottom` for any rectangle with height.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import RootMarginError

_LENGTH_RE = re.compile(r"^(?P<value>[+-]?(?:\d+(?:\.\d*)?|\.\d+))(?P<unit>[a-z%]*)$", re.IGNORECASE)


@dataclass(frozen=True)
class Rect:
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    @property
    def width(self) -> float:
        return max(0.0, self.right - self.left)

    @property
    def height(self) -> float:
        return max(0.0, self.bottom - self.top)

    @property
    def area(self) -> float:
        return self.width * self.height

    def translate(self, dx: float, dy: float) -> Rect:
        return Rect(self.top + dy, self.right + dx, self.bottom + dy, self.left + dx)

    def expand(self, margin: RootMargin) -> Rect:
        """Grow outward by `margin` on each side (negative values shrink)."""
        return Rect(
            top=self.top - margin.top,
            right=self.right + margin.right,
            bottom=self.bottom + margin.bottom,
            left=self.left - margin.left,
        )

    def intersection(self, other: Rect) -> Rect | None:
        """Overlapping region, or None when the rectangles share no area."""
        top = max(self.top, other.top)
        bottom = min(self.bottom, other.bottom)
        left = max(self.left, other.left)
        right = min(self.right, other.right)
        if bottom <= top or right <= left:
            return None
        return Rect(top, right, bottom, left)


@dataclass(frozen=True)
class RootMargin:
    """Per-side offsets in pixels, in CSS margin order."""
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    def __str__(self) -> str:
        return " ".join(f"{_fmt(v)}px" for v in (self.top, self.right, self.bottom, self.left))


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _parse_length(token: str, text: str) -> float:
    m = _LENGTH_RE.match(token)
    if not m:
        raise RootMarginError(f"Invalid root margin value {token!r} in {text!r}")
    unit = m.group("unit").lower()
    value = float(m.group("value"))
    if unit not in ("", "px"):
        raise RootMarginError(f"Unsupported root margin unit {unit!r} in {text!r}; only px is supported")
    return value


def parse_root_margin(text: str | None) -> RootMargin:
    """
    Expand a CSS margin shorthand into four offsets.

    1 value  -> all sides
    2 values -> top/bottom, left/right
    3 values -> top, left/right, bottom
    4 values -> top, right, bottom, left
    """
    if text is None or not text.strip():
        return RootMargin()

    values = [_parse_length(token, text) for token in text.split()]
    if len(values) == 1:
        top = right = bottom = left = values[0]
    elif len(values) == 2:
        top = bottom = values[0]
        right = left = values[1]
    elif len(values) == 3:
        top, bottom = values[0], values[2]
        right = left = values[1]
    elif len(values) == 4:
        top, right, bottom, left = values
    else:
        raise RootMarginError(f"Root margin takes 1 to 4 values, got {len(values)} in {text!r}")
    return RootMargin(top, right, bottom, left)


def intersection_ratio(target: Rect, root: Rect) -> float:
    """Fraction of `target`'s area inside `root`, clamped to [0, 1]."""
    area = target.area
    if area <= 0:
        return 0.0
    overlap = target.intersection(root)
    if overlap is None:
        return 0.0
    return min(1.0, max(0.0, overlap.area / area))
