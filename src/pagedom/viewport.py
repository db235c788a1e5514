"""
Viewport: scroll state, element geometry and scroll notification.

There is no layout engine. Tests and harnesses place elements with
set_layout_rect() in page coordinates, and bounding_rect() reports them
relative to the viewport the way getBoundingClientRect() does.
"""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Protocol

from .config import get_config
from .geometry import Rect

if TYPE_CHECKING:
    from .dom import Node

logger = logging.getLogger(__name__)


class ScrollListener(Protocol):
    def on_scroll(self, viewport: Viewport) -> None: ...


class Viewport:
    def __init__(self, width: int | None = None, height: int | None = None):
        cfg = get_config().viewport
        self.width = cfg.width if width is None else width
        self.height = cfg.height if height is None else height
        self.scroll_x = 0.0
        self.scroll_y = 0.0
        self._layout: weakref.WeakKeyDictionary[Node, Rect] = weakref.WeakKeyDictionary()
        self._listeners: list[ScrollListener] = []

    def __repr__(self) -> str:
        return f"Viewport({self.width}x{self.height} at {self.scroll_x:g},{self.scroll_y:g})"

    # -- geometry -----------------------------------------------------------

    def set_layout_rect(
        self,
        element: Node,
        top: float,
        bottom: float,
        left: float | None = None,
        right: float | None = None,
    ) -> None:
        """Place `element` in page coordinates. Horizontal extent defaults to full width."""
        self._layout[element] = Rect(
            top=top,
            right=self.width if right is None else right,
            bottom=bottom,
            left=0 if left is None else left,
        )

    def layout_rect(self, element: Node) -> Rect | None:
        return self._layout.get(element)

    def bounding_rect(self, element: Node) -> Rect:
        """Element rectangle relative to the viewport; all zero if never laid out."""
        rect = self._layout.get(element)
        if rect is None:
            return Rect()
        return rect.translate(-self.scroll_x, -self.scroll_y)

    def viewport_rect(self) -> Rect:
        return Rect(top=0, right=self.width, bottom=self.height, left=0)

    def resize(self, width: int, height: int) -> None:
        """Change size. Does not notify scroll listeners."""
        self.width = width
        self.height = height

    # -- scrolling ----------------------------------------------------------

    def scroll_to(self, x: float, y: float) -> None:
        self.scroll_x = max(0.0, float(x))
        self.scroll_y = max(0.0, float(y))
        logger.debug("Scrolled to %g,%g", self.scroll_x, self.scroll_y)
        self._dispatch_scroll()

    def scroll_by(self, dx: float, dy: float) -> None:
        self.scroll_to(self.scroll_x + dx, self.scroll_y + dy)

    def scroll_to_top_of_element(self, element: Node, offset: float = 0) -> None:
        """Scroll vertically so the element's top sits `offset` pixels below the viewport top."""
        rect = self._layout.get(element)
        top = rect.top if rect is not None else 0.0
        self.scroll_to(self.scroll_x, top - offset)

    # -- notification -------------------------------------------------------

    def subscribe(self, listener: ScrollListener) -> None:
        """Register for scroll notifications. Kept until unsubscribed, like a window scroll listener."""
        if any(other is listener for other in self._listeners):
            return
        self._listeners.append(listener)

    def unsubscribe(self, listener: ScrollListener) -> None:
        self._listeners = [other for other in self._listeners if other is not listener]

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _dispatch_scroll(self) -> None:
        # snapshot so listeners subscribing during dispatch wait for the next scroll
        for listener in list(self._listeners):
            listener.on_scroll(self)
