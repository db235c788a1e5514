"""
Mutation notification bus.

The tree calls emit() while a mutation is in progress. The bus walks from
the given scope node up through its ancestors and hands the event to every
live collection registered at each of them, so a collection sees every
change inside its root's subtree exactly once, before the mutating call
returns.
"""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .dom import Node

logger = logging.getLogger(__name__)


class MutationKind(Enum):
    ATTRIBUTE_CHANGED = "attribute-changed"
    NODE_INSERTED = "node-inserted"
    NODE_REMOVED = "node-removed"


@dataclass(frozen=True)
class MutationEvent:
    """A single tree change. Not retained after dispatch."""
    kind: MutationKind
    target: Node
    attribute: str | None = None  # set for ATTRIBUTE_CHANGED only


class MutationListener(Protocol):
    def handle_mutation(self, event: MutationEvent) -> None: ...


class MutationBus:
    """Per-document registry of listeners keyed by the node they watch."""

    def __init__(self):
        self._scopes: weakref.WeakKeyDictionary[Node, list[weakref.ref]] = weakref.WeakKeyDictionary()

    def register(self, scope: Node, listener: MutationListener) -> None:
        """Watch every mutation below `scope`."""
        self._scopes.setdefault(scope, []).append(weakref.ref(listener))

    def unregister(self, scope: Node, listener: MutationListener) -> None:
        refs = self._scopes.get(scope)
        if not refs:
            return
        refs[:] = [ref for ref in refs if ref() is not None and ref() is not listener]
        if not refs:
            del self._scopes[scope]

    def transfer(self, scope: Node, other: MutationBus) -> None:
        """Move registrations at `scope` to `other`, keeping their order."""
        refs = self._scopes.pop(scope, None)
        if refs:
            other._scopes.setdefault(scope, []).extend(refs)

    def listeners_at(self, scope: Node) -> list[MutationListener]:
        """Live listeners registered at exactly `scope`, in registration order."""
        refs = self._scopes.get(scope)
        if not refs:
            return []
        alive = [listener for listener in (ref() for ref in refs) if listener is not None]
        if len(alive) != len(refs):
            # drop collections that were garbage collected
            refs[:] = [ref for ref in refs if ref() is not None]
        return alive

    def emit(self, event: MutationEvent, scope: Node | None) -> None:
        """Deliver `event` to listeners at `scope` and every ancestor of it."""
        delivered = 0
        node = scope
        while node is not None:
            for listener in self.listeners_at(node):
                listener.handle_mutation(event)
                delivered += 1
            node = node.parent
        if delivered:
            logger.debug("%s on %r delivered to %d collection(s)", event.kind.value, event.target, delivered)
