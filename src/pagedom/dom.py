"""
DOM - Document tree for pagedom

A small element tree that page scripts run against. Every structural change
and attribute write is reported to the owning document's MutationBus before
the mutating call returns, which is what keeps live collections current.

Key invariant: a node has at most one parent, and the parent's children list
is the only owner of it. `parent` is a back-reference.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import ClassVar

from .bus import MutationBus, MutationEvent, MutationKind
from .collection import HTMLCollection
from .errors import HierarchyRequestError, NotFoundError
from .selectors import class_selector, parse_selector

ELEMENT_NODE = 1
DOCUMENT_NODE = 9
DOCUMENT_FRAGMENT_NODE = 11


@dataclass(eq=False, kw_only=True)
class Node:
    """A node in the document tree. Identity is object identity."""
    children: list[Node] = field(default_factory=list, repr=False)
    parent: Node | None = field(default=None, repr=False)
    owner_document: Document | None = field(default=None, repr=False)
    # child -> position in children, rebuilt lazily after the list changes
    _positions: dict[Node, int] | None = field(default=None, init=False, repr=False)

    node_type: ClassVar[int] = 0

    def __post_init__(self):
        for child in self.children:
            child.parent = self

    # -- navigation ---------------------------------------------------------

    @property
    def parent_element(self) -> Element | None:
        return self.parent if isinstance(self.parent, Element) else None

    @property
    def first_element_child(self) -> Element | None:
        return next((c for c in self.children if isinstance(c, Element)), None)

    @property
    def last_element_child(self) -> Element | None:
        return next((c for c in reversed(self.children) if isinstance(c, Element)), None)

    def depth_first(self) -> Iterator[Node]:
        """Traverse tree depth-first (document order), yielding self then children."""
        yield self
        for child in self.children:
            yield from child.depth_first()

    def descendants(self) -> Iterator[Node]:
        """Document-order traversal excluding self."""
        for child in self.children:
            yield from child.depth_first()

    def contains(self, other: Node | None) -> bool:
        """Inclusive: a node contains itself."""
        node = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    def tree_path(self) -> tuple[int, ...]:
        """
        Child indices from the top-most ancestor down to this node.

        Comparing paths of two nodes in the same tree gives their document
        order, since pre-order visits a parent before its children and
        siblings left to right.
        """
        path = []
        node = self
        while node.parent is not None:
            path.append(node.parent.child_position(node))
            node = node.parent
        return tuple(reversed(path))

    def child_position(self, child: Node) -> int:
        """Index of `child` in children, in O(1) after the first lookup since the last change."""
        positions = self._positions
        if positions is None or len(positions) != len(self.children):
            positions = self._positions = {c: i for i, c in enumerate(self.children)}
        return positions[child]

    def children_changed(self) -> None:
        """Drop cached child positions. Call after editing `children` directly."""
        self._positions = None

    # -- mutation -----------------------------------------------------------

    def append_child(self, node: Node) -> Node:
        """Append a child node and return it for chaining."""
        return self.insert_before(node, None)

    def insert_before(self, node: Node, ref: Node | None) -> Node:
        """Insert `node` before `ref` (or at the end when ref is None)."""
        if isinstance(node, Document):
            raise HierarchyRequestError("A document cannot be inserted into a tree")
        if node.contains(self):
            raise HierarchyRequestError("A node cannot be inserted into itself or its descendant")
        if ref is not None and ref.parent is not self:
            raise NotFoundError("Reference node is not a child of this node")

        if isinstance(node, DocumentFragment):
            for child in list(node.children):
                self.insert_before(child, ref)
            return node

        if ref is node:
            ref = self._next_sibling(node)
        if node.parent is not None:
            node.parent.remove_child(node)

        index = len(self.children) if ref is None else self.child_position(ref)
        self.children.insert(index, node)
        self.children_changed()
        node.parent = self
        self._adopt(node)
        self._notify(MutationEvent(MutationKind.NODE_INSERTED, node), self)
        return node

    def remove_child(self, child: Node) -> Node:
        """Detach `child` and return it."""
        if child.parent is not self:
            raise NotFoundError("Node to remove is not a child of this node")
        # Listeners locate the removed subtree by document position, so the
        # event goes out while the child is still linked.
        self._notify(MutationEvent(MutationKind.NODE_REMOVED, child), self)
        del self.children[self.child_position(child)]
        self.children_changed()
        child.parent = None
        return child

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.remove_child(self)

    def _next_sibling(self, child: Node) -> Node | None:
        index = self.child_position(child)
        return self.children[index + 1] if index + 1 < len(self.children) else None

    def _adopt(self, node: Node) -> None:
        document = self.owner_document
        if document is None or node.owner_document is document:
            return
        for n in node.depth_first():
            previous = n.owner_document
            if previous is not None and previous is not document:
                # collections rooted in the moved subtree follow it to the new bus
                previous.bus.transfer(n, document.bus)
            n.owner_document = document

    def _notify(self, event: MutationEvent, scope: Node | None) -> None:
        document = self.owner_document
        if document is not None:
            document.bus.emit(event, scope)

    # -- queries ------------------------------------------------------------

    def get_elements_by_tag_name(self, tag: str) -> HTMLCollection:
        """Live collection of descendants with this tag (`*` for all)."""
        selector = parse_selector(tag)
        return HTMLCollection(self, selector, attributes=selector.uses_attributes)

    def get_elements_by_class_name(self, class_names: str) -> HTMLCollection:
        """Live collection of descendants carrying every listed class."""
        return HTMLCollection(self, class_selector(class_names))

    def query_selector(self, selector: str) -> Element | None:
        parsed = parse_selector(selector)
        return next((n for n in self.descendants() if parsed.matches(n)), None)

    def query_selector_all(self, selector: str) -> list[Element]:
        """Static snapshot, not live."""
        parsed = parse_selector(selector)
        return [n for n in self.descendants() if parsed.matches(n)]


@dataclass(eq=False)
class Element(Node):
    """An element with a tag name and string attributes."""
    tag_name: str = "DIV"
    attributes: dict[str, str] = field(default_factory=dict)

    node_type: ClassVar[int] = ELEMENT_NODE

    def __post_init__(self):
        super().__post_init__()
        self.tag_name = self.tag_name.upper()

    def __repr__(self) -> str:
        attrs = "".join(f" {k}={v!r}" for k, v in self.attributes.items())
        return f"<{self.tag_name.lower()}{attrs}>"

    # -- attributes ---------------------------------------------------------

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def set_attribute(self, name: str, value: object) -> None:
        self.attributes[name] = str(value)
        self._notify(MutationEvent(MutationKind.ATTRIBUTE_CHANGED, self, name), self.parent)

    def remove_attribute(self, name: str) -> None:
        if name not in self.attributes:
            return
        del self.attributes[name]
        self._notify(MutationEvent(MutationKind.ATTRIBUTE_CHANGED, self, name), self.parent)

    @property
    def id(self) -> str:
        return self.attributes.get("id", "")

    @id.setter
    def id(self, value: str) -> None:
        self.set_attribute("id", value)

    @property
    def class_name(self) -> str:
        return self.attributes.get("class", "")

    @class_name.setter
    def class_name(self, value: str) -> None:
        self.set_attribute("class", value)

    @property
    def class_list(self) -> ClassList:
        return ClassList(self)


class ClassList:
    """Token view over an element's class attribute. Writes go through set_attribute."""

    def __init__(self, element: Element):
        self._element = element

    def _tokens(self) -> list[str]:
        return self._element.class_name.split()

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens())

    def __len__(self) -> int:
        return len(self._tokens())

    def __contains__(self, token: object) -> bool:
        return token in self._tokens()

    def contains(self, token: str) -> bool:
        return token in self

    def add(self, *tokens: str) -> None:
        current = self._tokens()
        missing = [t for t in tokens if t not in current]
        if missing:
            self._element.class_name = " ".join(current + missing)

    def remove(self, *tokens: str) -> None:
        current = self._tokens()
        kept = [t for t in current if t not in tokens]
        if len(kept) != len(current):
            self._element.class_name = " ".join(kept)

    def toggle(self, token: str, force: bool | None = None) -> bool:
        """Add or remove `token`; returns whether it is present afterwards."""
        present = token in self
        wanted = not present if force is None else force
        if wanted and not present:
            self.add(token)
        elif present and not wanted:
            self.remove(token)
        return wanted


@dataclass(eq=False)
class DocumentFragment(Node):
    """Parentless container; inserting it moves its children."""
    node_type: ClassVar[int] = DOCUMENT_FRAGMENT_NODE


@dataclass(eq=False)
class Document(Node):
    """Root of a tree. Owns the MutationBus all its nodes report to."""
    bus: MutationBus = field(default_factory=MutationBus, repr=False)

    node_type: ClassVar[int] = DOCUMENT_NODE

    def __post_init__(self):
        super().__post_init__()
        self.owner_document = self
        for node in self.descendants():
            node.owner_document = self

    @classmethod
    def blank(cls) -> Document:
        """An empty <html><head></head><body></body></html> document."""
        document = cls()
        html = document.append_child(document.create_element("html"))
        html.append_child(document.create_element("head"))
        html.append_child(document.create_element("body"))
        return document

    @property
    def document_element(self) -> Element | None:
        return self.first_element_child

    @property
    def head(self) -> Element | None:
        return self._root_child("HEAD")

    @property
    def body(self) -> Element | None:
        return self._root_child("BODY")

    def _root_child(self, tag: str) -> Element | None:
        root = self.document_element
        if root is None:
            return None
        return next((c for c in root.children if isinstance(c, Element) and c.tag_name == tag), None)

    def create_element(self, tag: str) -> Element:
        return Element(tag, owner_document=self)

    def create_document_fragment(self) -> DocumentFragment:
        return DocumentFragment(owner_document=self)

    def get_element_by_id(self, element_id: str) -> Element | None:
        """First element in document order with this id, or None."""
        for node in self.descendants():
            if isinstance(node, Element) and node.attributes.get("id") == element_id:
                return node
        return None
