"""
Exceptions raised by pagedom.

Queries never raise on a miss: out-of-range indexes and unknown names
return None. Only malformed input and invalid tree operations fail.
"""

from __future__ import annotations


class PageDomError(Exception):
    """Base class for all pagedom errors."""


class UnsupportedSelectorError(PageDomError, ValueError):
    """Selector uses syntax beyond tag and compound-class matching."""

    def __init__(self, selector: str, syntax: str):
        self.selector = selector
        self.syntax = syntax
        super().__init__(f"Unsupported selector syntax {syntax!r} in {selector!r}")


class RootMarginError(PageDomError, ValueError):
    """Root margin string could not be parsed into pixel offsets."""


class NotFoundError(PageDomError, ValueError):
    """Reference node is not a child of the node being mutated."""


class HierarchyRequestError(PageDomError, ValueError):
    """Insertion would produce an invalid tree (cycle or nested document)."""
