from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from betaviz.game.state import GameState
from betaviz.game.types import Player

Heuristic = Callable[[GameState, Player], float]
MoveOrder = Callable[[GameState, list], list]


@dataclass
class SearchConfig:
    """Configuration for an interactive alpha-beta session."""

    # Depth (in plies) at which open positions become leaves. None = search to the end.
    max_depth: Optional[int] = None
    use_pruning: bool = True
    # Only the first unresolved child of each node may be evaluated.
    strict_order: bool = False
    # Leaf score for the root player. None scores finished games +1 / -1 / 0.
    heuristic: Optional[Heuristic] = None
    move_order: Optional[MoveOrder] = None
    # Credit unexplored positions of pruned subtrees to nodes_pruned.
    estimate_pruned: bool = True
    count_leaves_only: bool = False
    expand_root: bool = True

    def __post_init__(self) -> None:
        assert self.max_depth is None or self.max_depth >= 0, "max_depth must be >= 0"
