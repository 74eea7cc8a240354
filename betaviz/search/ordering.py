"""Which READY nodes may be evaluated right now."""

from __future__ import annotations

import abc
from typing import Optional

from betaviz.search.nodes import NodeStore, SearchNode


class OrderingPolicy(abc.ABC):
    strict = False

    @abc.abstractmethod
    def permitted_child(self, store: NodeStore, parent: SearchNode) -> Optional[SearchNode]:
        """The one child of ``parent`` that may currently be worked on, if any."""

    @abc.abstractmethod
    def blocking_node(self, store: NodeStore, node: SearchNode) -> Optional[SearchNode]:
        """The permitted node standing in the way of ``node``, or None if ``node`` may go."""

    def demotes(self, store: NodeStore, node: SearchNode) -> bool:
        """True if ``node`` must be held in WAIT even when it could be READY."""
        return False

    @property
    def name(self) -> str:
        return self.__class__.__name__


class RelaxedOrdering(OrderingPolicy):
    """Any READY node, in any order."""

    def permitted_child(self, store: NodeStore, parent: SearchNode) -> Optional[SearchNode]:
        return None

    def blocking_node(self, store: NodeStore, node: SearchNode) -> Optional[SearchNode]:
        return None


class StrictOrdering(OrderingPolicy):
    """Left-to-right: per parent only the first unresolved child is permitted.

    A node may be evaluated only if it and every one of its ancestors is the
    permitted child of its parent, which replays sequential alpha-beta.
    """

    strict = True

    def permitted_child(self, store: NodeStore, parent: SearchNode) -> Optional[SearchNode]:
        for child in store.children_of(parent):
            if not child.is_resolved:
                return child
        return None

    def demotes(self, store: NodeStore, node: SearchNode) -> bool:
        parent = store.parent_of(node)
        if parent is None:
            return False
        permitted = self.permitted_child(store, parent)
        return permitted is not None and permitted.id != node.id

    def blocking_node(self, store: NodeStore, node: SearchNode) -> Optional[SearchNode]:
        # Report the highest level where the path leaves the permitted line.
        path = []
        current: Optional[SearchNode] = node
        while current is not None and not current.is_root:
            path.append(current)
            current = store.parent_of(current)

        for step in reversed(path):
            parent = store.parent_of(step)
            permitted = self.permitted_child(store, parent) if parent is not None else None
            if permitted is not None and permitted.id != step.id:
                return permitted
        return None


def make_ordering(strict: bool) -> OrderingPolicy:
    return StrictOrdering() if strict else RelaxedOrdering()
