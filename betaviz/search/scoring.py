"""Root-relative scoring of finished games and the advisory tags that go with it."""

from __future__ import annotations

from betaviz.game.state import GameState
from betaviz.game.types import Outcome, Player
from betaviz.search.nodes import NodeTag

VALUE_WIN = 1.0
VALUE_LOSS = -1.0
VALUE_DRAW = 0.0


def outcome_score(state: GameState, root_player: Player) -> float:
    """+1 if the root player has won, -1 if the opponent has, 0 otherwise."""
    winner = state.outcome.winner
    if winner is None:
        return VALUE_DRAW
    return VALUE_WIN if winner is root_player else VALUE_LOSS


def _win_tag(player: Player) -> NodeTag:
    return NodeTag.WIN_PLAYER1 if player is Player.ONE else NodeTag.WIN_PLAYER2


def outcome_tags(outcome: Outcome) -> set[NodeTag]:
    if outcome.winner is not None:
        return {_win_tag(outcome.winner)}
    if outcome is Outcome.DRAW:
        return {NodeTag.DRAW}
    return set()


def value_tags(value: float, root_player: Player) -> set[NodeTag]:
    """Color an inner node by who wins the line it evaluates to."""
    if value >= VALUE_WIN:
        return {_win_tag(root_player)}
    if value <= VALUE_LOSS:
        return {_win_tag(root_player.other)}
    if value == VALUE_DRAW:
        return {NodeTag.DRAW}
    return set()
