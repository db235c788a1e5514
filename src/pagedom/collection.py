"""
Live collections.

An HTMLCollection is the answer to "which descendants of root match this
selector", kept correct as the tree changes. It subscribes to the owning
document's MutationBus at its root and patches its member list in place on
every event, so there is no refresh step and no stale read.

Members are held in document order. Patching finds positions by binary
search over tree paths, so an update costs the size of the affected
subtree plus a logarithmic search, never a walk of the whole tree.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from .bus import MutationEvent, MutationKind
from .config import get_config
from .selectors import Selector, parse_selector

if TYPE_CHECKING:
    from .dom import Node

logger = logging.getLogger(__name__)


class HTMLCollection:
    """
    Index-addressable live view of matching descendants of `root`.

    Deliberately not a sequence: there is no map/filter/slice. Read it with
    `item()`, indexing, `named_item()` or iteration.
    """

    FIXED_KEYS = ("length", "item", "namedItem")

    def __init__(self, root: Node, selector: Selector | str, attributes: bool | None = None):
        if isinstance(selector, str):
            selector = parse_selector(selector)
        if attributes is None:
            attributes = get_config().collection.track_attributes

        self._root = root
        self._selector = selector
        self._track_attributes = attributes
        self._items: list[Node] = [n for n in root.descendants() if selector.matches(n)]
        self._members: set[Node] = set(self._items)

        document = root.owner_document
        if document is not None:
            document.bus.register(root, self)
        else:
            logger.debug("Collection %r on detached %r will not track mutations", selector.text, root)

    @property
    def root(self) -> Node:
        return self._root

    @property
    def selector(self) -> Selector:
        return self._selector

    @property
    def length(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def item(self, index: int) -> Node | None:
        """The index-th member in document order, or None when out of range."""
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    get = item

    def named_item(self, key: str) -> Node | None:
        """First member whose id, or failing that name, equals `key`."""
        if not key:
            return None
        for node in self._items:
            attributes = node.attributes
            if attributes.get("id") == key or attributes.get("name") == key:
                return node
        return None

    def __getitem__(self, key: int | str) -> Node | None:
        if isinstance(key, str):
            return self.item(int(key)) if key.isdigit() else self.named_item(key)
        return self.item(key)

    def __iter__(self) -> Iterator[Node]:
        # index-based so iteration sees the collection as it is at each step
        i = 0
        while i < len(self._items):
            yield self._items[i]
            i += 1

    def keys(self) -> list[str]:
        """Enumerable keys: member indexes as strings, then the fixed names."""
        return [str(i) for i in range(len(self._items))] + list(self.FIXED_KEYS)

    def __repr__(self) -> str:
        return f"HTMLCollection({self._selector.text!r}, length={len(self._items)})"

    # -- bus subscription ---------------------------------------------------

    def handle_mutation(self, event: MutationEvent) -> None:
        if event.kind is MutationKind.ATTRIBUTE_CHANGED:
            if self._track_attributes:
                self._reevaluate(event.target)
        elif event.kind is MutationKind.NODE_REMOVED:
            self._remove_subtree(event.target)
        elif event.kind is MutationKind.NODE_INSERTED:
            self._insert_subtree(event.target)

    def _reevaluate(self, node: Node) -> None:
        now = self._selector.matches(node)
        was = node in self._members
        if now == was:
            return
        pos = bisect.bisect_left(self._items, node.tree_path(), key=lambda n: n.tree_path())
        if now:
            self._items.insert(pos, node)
            self._members.add(node)
            logger.debug("%r: %r started matching at %d", self, node, pos)
        else:
            del self._items[pos]
            self._members.discard(node)
            logger.debug("%r: %r stopped matching", self, node)

    def _remove_subtree(self, subtree_root: Node) -> None:
        if not self._items:
            return
        # A subtree is contiguous in document order and starts at its root.
        start = bisect.bisect_left(self._items, subtree_root.tree_path(), key=lambda n: n.tree_path())
        end = start
        while end < len(self._items) and subtree_root.contains(self._items[end]):
            end += 1
        if end == start:
            return
        removed = self._items[start:end]
        del self._items[start:end]
        self._members.difference_update(removed)
        logger.debug("%r: dropped %d member(s) with removed %r", self, len(removed), subtree_root)

    def _insert_subtree(self, subtree_root: Node) -> None:
        added = [
            n for n in subtree_root.depth_first()
            if n not in self._members and self._selector.matches(n)
        ]
        if not added:
            return
        pos = bisect.bisect_left(self._items, subtree_root.tree_path(), key=lambda n: n.tree_path())
        self._items[pos:pos] = added
        self._members.update(added)
        logger.debug("%r: added %d member(s) at %d", self, len(added), pos)
