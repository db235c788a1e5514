"""
Markup loader.

Builds a Document from an HTML string. Only elements and their attributes
are kept; text, comments and the contents of <script> and <style> are
dropped. Nodes are linked directly, so no mutation events fire while
loading.
"""

from __future__ import annotations

from html.parser import HTMLParser

from .dom import Document, Element, Node

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})
_RAW_TEXT = ("script", "style")


class _TreeBuilder(HTMLParser):
    def __init__(self, document: Document):
        super().__init__(convert_charrefs=True)
        self.document = document
        self.stack: list[Node] = [document]
        self._suppress_depth = 0  # inside script/style

    def _open(self, tag: str, attrs: list[tuple[str, str | None]]) -> Element:
        element = Element(
            tag,
            attributes={k: "" if v is None else v for k, v in attrs},
            owner_document=self.document,
        )
        _link(self.stack[-1], element)
        return element

    def handle_starttag(self, tag, attrs):
        if tag in _RAW_TEXT:
            self._suppress_depth += 1
            return
        if self._suppress_depth:
            return
        element = self._open(tag, attrs)
        if tag not in VOID_ELEMENTS:
            self.stack.append(element)

    def handle_startendtag(self, tag, attrs):
        if tag in _RAW_TEXT or self._suppress_depth:
            return
        self._open(tag, attrs)

    def handle_endtag(self, tag):
        if tag in _RAW_TEXT:
            if self._suppress_depth:
                self._suppress_depth -= 1
            return
        if self._suppress_depth or tag in VOID_ELEMENTS:
            return
        wanted = tag.upper()
        # pop to the nearest open element with this tag; stray end tags are ignored
        for i in range(len(self.stack) - 1, 0, -1):
            node = self.stack[i]
            if isinstance(node, Element) and node.tag_name == wanted:
                del self.stack[i:]
                break


def _link(parent: Node, child: Node) -> None:
    parent.children.append(child)
    parent.children_changed()
    child.parent = parent


def _ensure_child(document: Document, parent: Node, tag: str, adopt, index: int | None = None) -> Element:
    """Find `tag` among parent's children, or create it around the children `adopt` selects."""
    for child in parent.children:
        if isinstance(child, Element) and child.tag_name == tag.upper():
            return child
    wrapper = Element(tag, owner_document=document)
    moved = [c for c in parent.children if adopt(c)]
    parent.children[:] = [c for c in parent.children if not adopt(c)]
    for child in moved:
        _link(wrapper, child)
    wrapper.parent = parent
    if index is None:
        parent.children.append(wrapper)
    else:
        parent.children.insert(index, wrapper)
    parent.children_changed()
    return wrapper


def parse_html(text: str) -> Document:
    """Parse `text` into a Document with html, head and body present."""
    document = Document()
    builder = _TreeBuilder(document)
    builder.feed(text)
    builder.close()

    html = _ensure_child(document, document, "html", adopt=lambda c: True)
    _ensure_child(document, html, "head", adopt=lambda c: False, index=0)
    _ensure_child(
        document, html, "body",
        adopt=lambda c: not (isinstance(c, Element) and c.tag_name == "HEAD"),
    )
    return document
