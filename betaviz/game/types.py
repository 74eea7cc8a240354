from __future__ import annotations

import enum
from typing import Optional


class Player(enum.Enum):
    ONE = 1
    TWO = 2

    @property
    def other(self) -> Player:
        return Player.TWO if self is Player.ONE else Player.ONE

    def __str__(self) -> str:
        return f"Player {self.value}"


class Outcome(enum.Enum):
    ONGOING = 0
    PLAYER1_WIN = 1
    PLAYER2_WIN = 2
    DRAW = 3

    @classmethod
    def win_for(cls, player: Player) -> Outcome:
        return cls.PLAYER1_WIN if player is Player.ONE else cls.PLAYER2_WIN

    @property
    def winner(self) -> Optional[Player]:
        if self is Outcome.PLAYER1_WIN:
            return Player.ONE
        if self is Outcome.PLAYER2_WIN:
            return Player.TWO
        return None

    @property
    def is_over(self) -> bool:
        return self is not Outcome.ONGOING
