"""
Page: one document, one viewport and the observers created against them.

This is the object a script harness exposes as its globals. Observers made
through intersection_observer() report to the page's ObservationLog.
"""

from __future__ import annotations

from .collection import HTMLCollection
from .dom import Document
from .markup import parse_html
from .observer import IntersectionObserver, ObservationLog, ObserverCallback
from .viewport import Viewport


class Page:
    def __init__(
        self,
        document: Document | None = None,
        viewport: Viewport | None = None,
        log: ObservationLog | None = None,
    ):
        self.document = document if document is not None else Document.blank()
        self.viewport = viewport if viewport is not None else Viewport()
        self.log = log if log is not None else ObservationLog()

    @classmethod
    def from_html(cls, text: str, viewport: Viewport | None = None) -> Page:
        return cls(document=parse_html(text), viewport=viewport)

    def intersection_observer(
        self,
        callback: ObserverCallback,
        root_margin: str | None = None,
    ) -> IntersectionObserver:
        return IntersectionObserver(callback, self.viewport, root_margin=root_margin, log=self.log)

    def get_elements_by_class_name(self, class_names: str) -> HTMLCollection:
        return self.document.get_elements_by_class_name(class_names)

    def get_elements_by_tag_name(self, tag: str) -> HTMLCollection:
        return self.document.get_elements_by_tag_name(tag)

    def scroll_to_top_of_element(self, element, offset: float = 0) -> None:
        self.viewport.scroll_to_top_of_element(element, offset)
