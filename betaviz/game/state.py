from __future__ import annotations

import abc
from typing import Any

from betaviz.game.types import Outcome, Player

Move = Any


class GameState(abc.ABC):
    """Position consumed by the search core.

    Implementations mutate only through ``apply_move``; the search never
    shares an instance between two tree nodes.
    """

    @abc.abstractmethod
    def clone(self) -> GameState:
        """Return an independent deep copy."""

    @abc.abstractmethod
    def apply_move(self, move: Move) -> bool:
        """Play ``move`` in place. Returns False (and changes nothing) if illegal."""

    @abc.abstractmethod
    def legal_moves(self) -> list:
        """All legal moves in a stable order. Empty once the game is over."""

    @property
    @abc.abstractmethod
    def outcome(self) -> Outcome:
        """Result of the game so far."""

    @property
    @abc.abstractmethod
    def current_player(self) -> Player:
        """Side to move."""

    @property
    def is_over(self) -> bool:
        return self.outcome.is_over or not self.legal_moves()
