"""Recursive minimax with optional alpha-beta pruning.

The one-shot counterpart of the interactive session: same scoring, same
move ordering, same tie-breaking (first best move in move order).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional

from betaviz.game.state import GameState
from betaviz.game.types import Player
from betaviz.search.analysis import is_terminal_state
from betaviz.search.config import Heuristic, MoveOrder
from betaviz.search.scoring import outcome_score

INF = math.inf


class TraceEvent(NamedTuple):
    kind: str            # "LEAF", "NODE_OPEN", "UPDATE_VAL", "PRUNE", "NODE_CLOSE"
    node: int            # visit number of the node the event belongs to
    depth: int
    score: Optional[float] = None
    alpha: Optional[float] = None
    beta: Optional[float] = None
    move: Any = None


@dataclass
class SearchResult:
    move: Any
    score: float
    nodes_visited: int
    trace: list[TraceEvent] = field(default_factory=list)


class MinimaxEngine:
    """Depth-first minimax from the side to move's point of view."""

    def __init__(
        self,
        heuristic: Optional[Heuristic] = None,
        max_depth: Optional[int] = None,
        use_alpha_beta: bool = True,
        capture_trace: bool = False,
        move_order: Optional[MoveOrder] = None,
    ) -> None:
        self.heuristic = heuristic
        self.max_depth = max_depth
        self.use_alpha_beta = use_alpha_beta
        self.capture_trace = capture_trace
        self.move_order = move_order
        self.nodes_visited = 0
        self.trace: list[TraceEvent] = []

    @property
    def name(self) -> str:
        kind = "AlphaBeta" if self.use_alpha_beta else "Minimax"
        depth = "inf" if self.max_depth is None else self.max_depth
        return f"{kind}(d={depth})"

    def find_best_move(self, state: GameState) -> SearchResult:
        self.nodes_visited = 0
        self.trace = []
        root_player = state.current_player
        score, move = self._minimax(state, 0, -INF, INF, True, root_player)
        return SearchResult(move=move, score=score, nodes_visited=self.nodes_visited, trace=self.trace)

    def _score(self, state: GameState, root_player: Player) -> float:
        if self.heuristic is not None:
            return float(self.heuristic(state, root_player))
        return outcome_score(state, root_player)

    def _minimax(
        self,
        state: GameState,
        depth: int,
        alpha: float,
        beta: float,
        maximizing: bool,
        root_player: Player,
    ) -> tuple[float, Any]:
        self.nodes_visited += 1
        node = self.nodes_visited

        if is_terminal_state(state) or (self.max_depth is not None and depth >= self.max_depth):
            score = self._score(state, root_player)
            self._log("LEAF", node, depth, score=score)
            return score, None

        self._log("NODE_OPEN", node, depth, alpha=alpha, beta=beta)

        moves = state.legal_moves()
        if self.move_order is not None:
            moves = list(self.move_order(state, moves))

        best = -INF if maximizing else INF
        best_move = None
        for move in moves:
            child = state.clone()
            if not child.apply_move(move):
                continue
            score, _ = self._minimax(child, depth + 1, alpha, beta, not maximizing, root_player)

            if best_move is None or (score > best if maximizing else score < best):
                best, best_move = score, move
            self._log("UPDATE_VAL", node, depth, score=best)

            if self.use_alpha_beta:
                if maximizing:
                    alpha = max(alpha, score)
                else:
                    beta = min(beta, score)
                if alpha >= beta:
                    self._log("PRUNE", node, depth, alpha=alpha, beta=beta)
                    break

        self._log("NODE_CLOSE", node, depth, score=best, move=best_move)
        return best, best_move

    def _log(self, kind: str, node: int, depth: int, **fields) -> None:
        if self.capture_trace:
            self.trace.append(TraceEvent(kind, node, depth, **fields))
