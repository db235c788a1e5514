"""pagedom - in-process document tree and viewport emulation for page scripts."""

from .bus import MutationBus, MutationEvent, MutationKind
from .collection import HTMLCollection
from .config import Config, configure_logging, get_config
from .dom import ClassList, Document, DocumentFragment, Element, Node
from .errors import (
    HierarchyRequestError,
    NotFoundError,
    PageDomError,
    RootMarginError,
    UnsupportedSelectorError,
)
from .geometry import Rect, RootMargin, intersection_ratio, parse_root_margin
from .markup import parse_html
from .observer import IntersectionObserver, IntersectionObserverEntry, ObservationLog
from .page import Page
from .selectors import Selector, matches, parse_selector
from .viewport import Viewport

__all__ = [
    "ClassList",
    "Config",
    "Document",
    "DocumentFragment",
    "Element",
    "HTMLCollection",
    "HierarchyRequestError",
    "IntersectionObserver",
    "IntersectionObserverEntry",
    "MutationBus",
    "MutationEvent",
    "MutationKind",
    "Node",
    "NotFoundError",
    "ObservationLog",
    "Page",
    "PageDomError",
    "Rect",
    "RootMargin",
    "RootMarginError",
    "Selector",
    "UnsupportedSelectorError",
    "Viewport",
    "configure_logging",
    "get_config",
    "intersection_ratio",
    "matches",
    "parse_html",
    "parse_root_margin",
    "parse_selector",
]
