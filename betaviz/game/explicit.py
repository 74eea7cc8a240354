"""Toy game trees written out by hand, e.g. [[3, 12, 8], [2, 4, 6], [14, 5, 2]].

Each list is a decision point, each number a final position scored for
player 1. Useful for textbook alpha-beta exercises where the tree shape
matters more than the game.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

from .state import GameState
from .types import Outcome, Player

Tree = Union[float, Sequence["Tree"]]


class ExplicitTreeState(GameState):
    """Position inside a nested-list tree. Moves are child indices."""

    def __init__(self, tree: Tree, path: tuple[int, ...] = ()) -> None:
        self._tree = tree
        self._path = path
        self._node = self._resolve(tree, path)

    @staticmethod
    def _resolve(tree: Tree, path: tuple[int, ...]) -> Tree:
        node = tree
        for index in path:
            assert isinstance(node, (list, tuple)), f"Path {path} runs past a leaf"
            node = node[index]
        return node

    @property
    def path(self) -> tuple[int, ...]:
        return self._path

    @property
    def leaf_value(self) -> Optional[float]:
        """Player 1's score at a leaf, None at a decision point."""
        if isinstance(self._node, (list, tuple)):
            return None
        return float(self._node)

    @property
    def current_player(self) -> Player:
        return Player.ONE if len(self._path) % 2 == 0 else Player.TWO

    @property
    def outcome(self) -> Outcome:
        value = self.leaf_value
        if value is None:
            return Outcome.ONGOING if self._node else Outcome.DRAW
        if value > 0:
            return Outcome.PLAYER1_WIN
        if value < 0:
            return Outcome.PLAYER2_WIN
        return Outcome.DRAW

    def clone(self) -> ExplicitTreeState:
        return ExplicitTreeState(self._tree, self._path)

    def legal_moves(self) -> list[int]:
        if not isinstance(self._node, (list, tuple)):
            return []
        return list(range(len(self._node)))

    def apply_move(self, move: int) -> bool:
        if move not in self.legal_moves():
            return False
        self._path = self._path + (move,)
        self._node = self._node[move]
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExplicitTreeState):
            return NotImplemented
        return self._tree is other._tree and self._path == other._path

    def __hash__(self) -> int:
        return hash((id(self._tree), self._path))

    def __repr__(self) -> str:
        return f"ExplicitTreeState(path={self._path})"


def explicit_leaf_value(state: ExplicitTreeState, root_player: Player) -> float:
    """Heuristic for SearchConfig: the written leaf value, seen from the root player."""
    value = state.leaf_value
    if value is None:
        return 0.0
    return value if root_player is Player.ONE else -value
