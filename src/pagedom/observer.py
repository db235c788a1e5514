"""
Intersection observation against a Viewport.

Each IntersectionObserver subscribes to its viewport's scroll notifications
once, when constructed. On every scroll it measures all observed targets,
compares each ratio with the last one it measured, and calls back with only
the entries that changed. Everything happens inside the scroll call.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .config import get_config
from .geometry import Rect, intersection_ratio, parse_root_margin

if TYPE_CHECKING:
    from .dom import Node
    from .viewport import Viewport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntersectionObserverEntry:
    """One measurement of a target against the effective root rectangle."""
    target: Node
    bounding_client_rect: Rect
    root_bounds: Rect
    intersection_rect: Rect | None
    intersection_ratio: float

    @property
    def is_intersecting(self) -> bool:
        return self.intersection_ratio > 0


ObserverCallback = Callable[[list[IntersectionObserverEntry]], None]


class ObservationLog:
    """
    Diagnostic record of every observe() call.

    Injected into observers that should report to it; observers never share
    one implicitly. disconnect() and unobserve() leave it untouched.
    """

    def __init__(self):
        self._records: list[tuple[IntersectionObserver, Node]] = []

    def record(self, observer: IntersectionObserver, element: Node) -> None:
        self._records.append((observer, element))

    @property
    def observed(self) -> list[Node]:
        """Every element passed to observe(), in call order across observers."""
        return [element for _, element in self._records]

    def observed_by(self, observer: IntersectionObserver) -> list[Node]:
        return [element for owner, element in self._records if owner is observer]

    def __len__(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()


class IntersectionObserver:
    def __init__(
        self,
        callback: ObserverCallback,
        viewport: Viewport,
        root_margin: str | None = None,
        log: ObservationLog | None = None,
    ):
        if root_margin is None:
            root_margin = get_config().observer.root_margin
        self._callback = callback
        self._viewport = viewport
        self._margin = parse_root_margin(root_margin)
        self._log = log
        # insertion order is observe() order; values are the last measurement
        self._entries: dict[Node, IntersectionObserverEntry] = {}
        viewport.subscribe(self)

    def __repr__(self) -> str:
        return f"IntersectionObserver(root_margin={self.root_margin!r}, observing={len(self._entries)})"

    @property
    def root_margin(self) -> str:
        return str(self._margin)

    @property
    def observed(self) -> tuple[Node, ...]:
        return tuple(self._entries)

    def observe(self, element: Node) -> None:
        """Start watching `element` and report its current state straight away."""
        if element in self._entries:
            return
        entry = self._measure(element)
        self._entries[element] = entry
        if self._log is not None:
            self._log.record(self, element)
        logger.debug("Observing %r (ratio %.3f)", element, entry.intersection_ratio)
        self._callback([entry])

    def unobserve(self, element: Node) -> None:
        self._entries.pop(element, None)

    def disconnect(self) -> None:
        self._entries.clear()

    def take_records(self) -> list[IntersectionObserverEntry]:
        """Always empty: entries are delivered as soon as they are measured."""
        return []

    def on_scroll(self, viewport: Viewport) -> None:
        if not self._entries:
            return
        fresh = {target: self._measure(target) for target in self._entries}
        changed = [
            entry for target, entry in fresh.items()
            if entry.intersection_ratio != self._entries[target].intersection_ratio
        ]
        # baseline moves forward even when nothing changed
        self._entries.update(fresh)
        if changed:
            logger.debug("%d of %d observed target(s) changed", len(changed), len(fresh))
            self._callback(changed)

    def _measure(self, element: Node) -> IntersectionObserverEntry:
        target = self._viewport.bounding_rect(element)
        root = self._viewport.viewport_rect().expand(self._margin)
        return IntersectionObserverEntry(
            target=element,
            bounding_client_rect=target,
            root_bounds=root,
            intersection_rect=target.intersection(root),
            intersection_ratio=intersection_ratio(target, root),
        )
