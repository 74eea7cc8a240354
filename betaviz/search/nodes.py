"""Arena of search-tree nodes keyed by integer id."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Iterator, Optional

from betaviz.game.state import GameState, Move


class NodeStatus(enum.Enum):
    WAIT = "WAIT"
    READY = "READY"
    ACTIVE = "ACTIVE"
    EVALUATED = "EVALUATED"
    PRUNED = "PRUNED"

    @property
    def is_resolved(self) -> bool:
        return self is NodeStatus.EVALUATED or self is NodeStatus.PRUNED


class NodeTag(enum.Enum):
    """Cosmetic markers for the renderer. Never read by the state machine."""

    PERMITTED = "PERMITTED"
    BEST_LINE = "BEST_LINE"
    EXPANDABLE = "EXPANDABLE"
    WIN_PLAYER1 = "WIN_PLAYER1"
    WIN_PLAYER2 = "WIN_PLAYER2"
    DRAW = "DRAW"


@dataclass(eq=False)
class SearchNode:
    id: int
    parent_id: Optional[int]
    state: GameState
    depth: int
    move: Optional[Move] = None
    move_index: int = 0
    is_terminal: bool = False
    at_horizon: bool = False
    children: list[int] = field(default_factory=list)
    status: NodeStatus = NodeStatus.WAIT
    value: Optional[float] = None
    inherited_alpha: float = -math.inf
    inherited_beta: float = math.inf
    alpha: float = -math.inf
    beta: float = math.inf
    expanded: bool = False
    best_child: Optional[int] = None
    tags: set[NodeTag] = field(default_factory=set)

    @property
    def is_maximizing(self) -> bool:
        return self.depth % 2 == 0

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def is_leaf_position(self) -> bool:
        """True if this node is scored directly instead of expanded."""
        return self.is_terminal or self.at_horizon

    @property
    def is_resolved(self) -> bool:
        return self.status.is_resolved


class NodeStore:
    """Owns every node of one search. Ids are list indices and never reused."""

    def __init__(self) -> None:
        self._nodes: list[SearchNode] = []

    def create(
        self,
        state: GameState,
        parent_id: Optional[int],
        depth: int,
        **fields,
    ) -> SearchNode:
        node = SearchNode(id=len(self._nodes), parent_id=parent_id, state=state, depth=depth, **fields)
        self._nodes.append(node)
        if parent_id is not None:
            self._nodes[parent_id].children.append(node.id)
        return node

    def get(self, node_id: Optional[int]) -> Optional[SearchNode]:
        if not isinstance(node_id, int) or isinstance(node_id, bool):
            return None
        if 0 <= node_id < len(self._nodes):
            return self._nodes[node_id]
        return None

    def parent_of(self, node: SearchNode) -> Optional[SearchNode]:
        return self.get(node.parent_id)

    def children_of(self, node: SearchNode) -> list[SearchNode]:
        return [self._nodes[cid] for cid in node.children]

    @property
    def root(self) -> Optional[SearchNode]:
        return self._nodes[0] if self._nodes else None

    def clear(self) -> None:
        self._nodes = []

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[SearchNode]:
        return iter(self._nodes)
