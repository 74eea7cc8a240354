from __future__ import annotations

from typing import Optional, Sequence

from .state import GameState
from .types import Outcome, Player

BOARD_SIZE = 3
CELL_COUNT = BOARD_SIZE * BOARD_SIZE
EMPTY = 0

WIN_LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
)

# Static preference used by center_corner_order: center, corners, edges
CELL_PRIORITY: tuple[int, ...] = (4, 0, 2, 6, 8, 1, 3, 5, 7)

SYMBOLS = {EMPTY: ".", Player.ONE.value: "X", Player.TWO.value: "O"}


def parse_board(text: str, to_move: Optional[Player] = None) -> Optional[TicTacToeState]:
    """Parse a board such as '110220000' or '1,1,0, 2,2,0, 0,0,0'.

    Cells are read row by row; 0 is empty, 1 and 2 are the players' marks.
    The side to move is inferred from the mark counts unless given.
    Returns None if the text is not a valid position.
    """
    digits = [ch for ch in text if not ch.isspace() and ch not in ",[]"]
    if len(digits) != CELL_COUNT or any(ch not in "012" for ch in digits):
        return None
    cells = [int(ch) for ch in digits]
    ones, twos = cells.count(1), cells.count(2)
    if to_move is None:
        if ones == twos:
            to_move = Player.ONE
        elif ones == twos + 1:
            to_move = Player.TWO
        else:
            return None
    return TicTacToeState(cells, to_move)


def format_board(state: TicTacToeState) -> str:
    """Three text rows, X for player 1 and O for player 2."""
    rows = []
    for r in range(BOARD_SIZE):
        row = state.cells[r * BOARD_SIZE:(r + 1) * BOARD_SIZE]
        rows.append("".join(SYMBOLS[c] for c in row))
    return "\n".join(rows)


class TicTacToeState(GameState):
    """Classic 3x3 tic-tac-toe. Moves are cell indices 0-8, row by row."""

    def __init__(
        self,
        cells: Optional[Sequence[int]] = None,
        current_player: Player = Player.ONE,
    ) -> None:
        self._cells: list[int] = list(cells) if cells is not None else [EMPTY] * CELL_COUNT
        assert len(self._cells) == CELL_COUNT, f"Expected {CELL_COUNT} cells"
        self._current_player = current_player
        self._outcome = self._compute_outcome()

    @property
    def cells(self) -> tuple[int, ...]:
        return tuple(self._cells)

    @property
    def current_player(self) -> Player:
        return self._current_player

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    @property
    def winner(self) -> Optional[Player]:
        return self._outcome.winner

    def clone(self) -> TicTacToeState:
        twin = TicTacToeState.__new__(TicTacToeState)
        twin._cells = list(self._cells)
        twin._current_player = self._current_player
        twin._outcome = self._outcome
        return twin

    def legal_moves(self) -> list[int]:
        if self._outcome.is_over:
            return []
        return [i for i, c in enumerate(self._cells) if c == EMPTY]

    def apply_move(self, move: int) -> bool:
        """Mark ``move`` for the current player and pass the turn."""
        if self._outcome.is_over:
            return False
        if not isinstance(move, int) or not 0 <= move < CELL_COUNT:
            return False
        if self._cells[move] != EMPTY:
            return False
        self._cells[move] = self._current_player.value
        self._outcome = self._compute_outcome()
        self._current_player = self._current_player.other
        return True

    def _compute_outcome(self) -> Outcome:
        for a, b, c in WIN_LINES:
            mark = self._cells[a]
            if mark != EMPTY and mark == self._cells[b] == self._cells[c]:
                return Outcome.win_for(Player(mark))
        if EMPTY not in self._cells:
            return Outcome.DRAW
        return Outcome.ONGOING

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TicTacToeState):
            return NotImplemented
        return self._cells == other._cells and self._current_player is other._current_player

    def __hash__(self) -> int:
        return hash((tuple(self._cells), self._current_player))

    def __repr__(self) -> str:
        return f"TicTacToeState({''.join(str(c) for c in self._cells)}, {self._current_player})"


# ---------------------------------------------------------------------------
# Move ordering and static evaluation
# ---------------------------------------------------------------------------

def center_corner_order(state: GameState, moves: list[int]) -> list[int]:
    """Sort moves center first, then corners, then edges."""
    return sorted(moves, key=CELL_PRIORITY.index)


def tictactoe_heuristic(state: TicTacToeState, root_player: Player) -> float:
    """Score a position for ``root_player``.

    Terminal positions score +1 / -1 / 0. Open positions count open lines
    (two marks and an empty cell = 10, one mark and two empty = 1) and are
    scaled to stay strictly inside (-1, 1).
    """
    outcome = state.outcome
    if outcome.is_over:
        if outcome.winner is None:
            return 0.0
        return 1.0 if outcome.winner is root_player else -1.0

    mine, theirs = root_player.value, root_player.other.value
    score = 0
    for line in WIN_LINES:
        marks = [state.cells[i] for i in line]
        empty = marks.count(EMPTY)
        if marks.count(mine) == 2 and empty == 1:
            score += 10
        elif marks.count(theirs) == 2 and empty == 1:
            score -= 10
        elif marks.count(mine) == 1 and empty == 2:
            score += 1
        elif marks.count(theirs) == 1 and empty == 2:
            score -= 1
    return score / 100
