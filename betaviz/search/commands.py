"""Render commands emitted by a search session.

A session collects commands while it handles one request (expand, evaluate,
step) and hands them to the consumer as a single batch.
"""

from __future__ import annotations

from typing import Any, Callable, NamedTuple, Optional, Union

from betaviz.search.nodes import NodeStatus, NodeTag


class ClearTree(NamedTuple):
    pass


class CreateNode(NamedTuple):
    node_id: int
    parent_id: Optional[int]
    move: Any
    metadata: dict


class UpdateNodeStatus(NamedTuple):
    node_id: int
    status: NodeStatus
    tags: frozenset[NodeTag]


class UpdateNodeBounds(NamedTuple):
    node_id: int
    alpha: float
    beta: float
    value: Optional[float]


class HighlightBestEdge(NamedTuple):
    parent_id: int
    child_id: int


class MarkPruned(NamedTuple):
    node_id: int


Command = Union[ClearTree, CreateNode, UpdateNodeStatus, UpdateNodeBounds, HighlightBestEdge, MarkPruned]
Batch = tuple[Command, ...]


class CommandBuffer:
    """Collects commands and flushes them as one batch to an optional sink."""

    def __init__(self, sink: Optional[Callable[[Batch], None]] = None) -> None:
        self.sink = sink
        self._pending: list[Command] = []
        self.last_batch: Batch = ()

    def push(self, command: Command) -> None:
        self._pending.append(command)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def discard(self) -> None:
        self._pending = []

    def flush(self) -> Batch:
        """Send everything collected since the last flush. Empty batches are not sent."""
        batch: Batch = tuple(self._pending)
        self._pending = []
        if batch:
            self.last_batch = batch
            if self.sink is not None:
                self.sink(batch)
        return batch
