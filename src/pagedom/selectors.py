"""
Selector matching.

Only simple selectors are understood: a tag name, the universal `*`, a
compound of classes (`.a.b`), or a tag followed by classes (`div.a.b`).
Anything else (combinators, ids, attributes, pseudo-classes, groups) is
rejected with UnsupportedSelectorError.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .errors import UnsupportedSelectorError

if TYPE_CHECKING:
    from .dom import Node

_IDENT = r"-?[A-Za-z_][\w-]*"
_SIMPLE_RE = re.compile(rf"^(?P<tag>\*|{_IDENT})?(?P<classes>(?:\.{_IDENT})*)$")
_UNSUPPORTED_RE = re.compile(r"[>+~,#\[\]:()]")


@dataclass(frozen=True)
class Selector:
    """Parsed selector: optional tag plus required classes."""
    text: str
    tag: str | None = None  # upper-cased; None means any tag
    classes: frozenset[str] = frozenset()

    @property
    def uses_attributes(self) -> bool:
        """True if attribute writes can change what this selector matches."""
        return bool(self.classes)

    def matches(self, node: Node) -> bool:
        tag_name = getattr(node, "tag_name", None)
        if tag_name is None:
            return False
        if self.tag is not None and tag_name != self.tag:
            return False
        if self.classes:
            return self.classes.issubset(node.class_list)
        return True


# No element has an empty tag name, so this never matches.
NOTHING = Selector(text="", tag="")


def parse_selector(text: str) -> Selector:
    """Parse `text` into a Selector, or raise UnsupportedSelectorError."""
    stripped = text.strip()
    if not stripped:
        raise UnsupportedSelectorError(text, "empty selector")

    bad = _UNSUPPORTED_RE.search(stripped)
    if bad:
        raise UnsupportedSelectorError(text, bad.group(0))
    if any(ch.isspace() for ch in stripped):
        raise UnsupportedSelectorError(text, "descendant combinator")

    m = _SIMPLE_RE.match(stripped)
    if not m or not (m.group("tag") or m.group("classes")):
        raise UnsupportedSelectorError(text, stripped)

    tag = m.group("tag")
    classes = frozenset(c for c in m.group("classes").split(".") if c)
    return Selector(
        text=stripped,
        tag=None if tag in (None, "*") else tag.upper(),
        classes=classes,
    )


def class_selector(class_names: str) -> Selector:
    """Selector for getElementsByClassName-style space separated class lists."""
    names = class_names.split()
    if not names:
        return NOTHING
    return Selector(text="".join(f".{name}" for name in names), classes=frozenset(names))


def matches(node: Node, selector: Selector | str) -> bool:
    """Matcher primitive: does `node` satisfy `selector`?"""
    if isinstance(selector, str):
        selector = parse_selector(selector)
    return selector.matches(node)
