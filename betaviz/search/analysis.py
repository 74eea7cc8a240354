"""Counting helpers for materialized and merely reachable parts of a game tree."""

from __future__ import annotations

from typing import Callable, Optional

from betaviz.game.state import GameState
from betaviz.search.nodes import NodeStore, SearchNode

TerminalFn = Callable[[GameState], bool]


def is_terminal_state(state: GameState) -> bool:
    return state.is_over


def count_stored_subtree(
    store: NodeStore,
    start_id: int,
    leaf_only: bool = False,
    include_start: bool = True,
    predicate: Optional[Callable[[SearchNode], bool]] = None,
) -> int:
    """Count materialized nodes below (and including) ``start_id``."""
    start = store.get(start_id)
    if start is None:
        return 0

    count = 0
    stack = [start]
    while stack:
        node = stack.pop()
        if (include_start or node is not start) and (predicate is None or predicate(node)):
            if not leaf_only or not node.children:
                count += 1
        stack.extend(store.children_of(node))
    return count


def count_potential_nodes(
    state: GameState,
    is_terminal: TerminalFn = is_terminal_state,
    leaf_only: bool = False,
    include_start: bool = True,
    max_depth: Optional[int] = None,
    memo: Optional[dict] = None,
) -> int:
    """Count every position reachable from ``state``, materialized or not.

    Branches on legal moves until ``is_terminal`` holds or ``max_depth`` plies
    have been played. With ``leaf_only`` only the final positions count.
    Pass a dict as ``memo`` to share work between calls; it is only used for
    hashable states.
    """
    try:
        hash(state)
    except TypeError:
        memo = None

    nodes, leaves = _count(state, is_terminal, max_depth, memo)
    if leaf_only:
        if not include_start and nodes == 1:
            return 0
        return leaves
    return nodes if include_start else nodes - 1


def _count(
    state: GameState,
    is_terminal: TerminalFn,
    remaining: Optional[int],
    memo: Optional[dict],
) -> tuple[int, int]:
    """Return (nodes, leaves) of the subtree rooted at ``state``."""
    key = (state, remaining)
    if memo is not None and key in memo:
        return memo[key]

    if is_terminal(state) or remaining == 0:
        result = (1, 1)
    else:
        nodes, leaves = 1, 0
        next_remaining = None if remaining is None else remaining - 1
        for move in state.legal_moves():
            child = state.clone()
            if not child.apply_move(move):
                continue
            child_nodes, child_leaves = _count(child, is_terminal, next_remaining, memo)
            nodes += child_nodes
            leaves += child_leaves
        result = (nodes, leaves)

    if memo is not None:
        memo[key] = result
    return result
