"""Interactive alpha-beta search.

The tree is built lazily and evaluated one node per request, in whatever
order the caller chooses. Between two requests every node satisfies:

  * alpha <= beta unless the node is PRUNED
  * a value is set exactly once, when the node becomes EVALUATED
  * an EVALUATED node is never PRUNED
  * a node's inherited bounds equal its parent's bounds at the parent's
    latest recompute
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Optional

from betaviz.game.state import GameState
from betaviz.game.types import Player
from betaviz.search.analysis import count_potential_nodes, count_stored_subtree, is_terminal_state
from betaviz.search.commands import (
    Batch,
    ClearTree,
    CommandBuffer,
    CreateNode,
    HighlightBestEdge,
    MarkPruned,
    UpdateNodeBounds,
    UpdateNodeStatus,
)
from betaviz.search.config import SearchConfig
from betaviz.search.nodes import NodeStatus, NodeStore, NodeTag, SearchNode
from betaviz.search.ordering import OrderingPolicy, make_ordering
from betaviz.search.scoring import VALUE_DRAW, outcome_score, outcome_tags, value_tags

logger = logging.getLogger(__name__)


class RejectReason(enum.Enum):
    NO_SESSION = "no search has been started"
    UNKNOWN_NODE = "no node with this id"
    NOT_READY = "node is not READY"
    NOT_PERMITTED = "another node must be evaluated first"
    TERMINAL = "node is a leaf and cannot be expanded"
    ALREADY_EXPANDED = "node is already expanded"
    RESOLVED = "node is already evaluated or pruned"
    NO_EVALUATED_CHILDREN = "node has no evaluated children"
    COMPLETE = "search is complete"


class StepAction(enum.Enum):
    EXPAND = "expand"
    EVALUATE = "evaluate"


@dataclass(frozen=True)
class StepResult:
    accepted: bool
    node_id: Optional[int] = None
    action: Optional[StepAction] = None
    reason: Optional[RejectReason] = None
    permitted_id: Optional[int] = None

    @classmethod
    def rejected(
        cls,
        reason: RejectReason,
        node_id: Optional[int] = None,
        permitted_id: Optional[int] = None,
    ) -> StepResult:
        return cls(False, node_id=node_id, reason=reason, permitted_id=permitted_id)


@dataclass
class SearchStats:
    nodes_visited: int = 0
    nodes_pruned: int = 0
    evaluated_nodes: int = 0


class SearchSession:
    """One interactive search. Holds the node arena, counters and command buffer."""

    def __init__(self, on_flush: Optional[Callable[[Batch], None]] = None) -> None:
        self.store = NodeStore()
        self.config = SearchConfig()
        self.stats = SearchStats()
        self.commands = CommandBuffer(on_flush)
        self.root_player: Optional[Player] = None
        self._ordering: OrderingPolicy = make_ordering(False)
        self._size_memo: dict = {}

    # ------------------------------------------------------------------
    # Driven interface
    # ------------------------------------------------------------------

    def visualize_search(self, initial_state: GameState, config: Optional[SearchConfig] = None) -> int:
        """Start a new search from ``initial_state``. Returns the root id."""
        self._clear()
        self.config = config if config is not None else SearchConfig()
        self._ordering = make_ordering(self.config.strict_order)
        self.root_player = initial_state.current_player

        root = self._create_node(initial_state.clone(), None, move=None)
        if self.config.expand_root and not root.is_leaf_position:
            self._expand(root)
        self._check_status(root)

        logger.debug(
            "Search started: root player %s, max_depth=%s, pruning=%s, %s",
            self.root_player, self.config.max_depth, self.config.use_pruning, self._ordering.name,
        )
        self.commands.flush()
        return root.id

    def expand(self, node_id: int) -> StepResult:
        """Materialize the children of ``node_id``."""
        node, rejection = self._lookup(node_id)
        if node is None:
            return rejection
        result = self._expand(node)
        self.commands.flush()
        return result

    def evaluate_node(self, node_id: int) -> StepResult:
        """Evaluate a READY node and propagate bounds, cutoffs and statuses."""
        node, rejection = self._lookup(node_id)
        if node is None:
            return rejection
        result = self._evaluate(node)
        self.commands.flush()
        return result

    def check_parent_pruning(self, parent_id: int) -> int:
        """Recompute ``parent_id``'s window and prune on a cutoff. Returns nodes credited."""
        parent, _ = self._lookup(parent_id)
        if parent is None:
            return 0
        saved = self._check_parent_pruning(parent)
        self._propagate_status(parent)
        self.commands.flush()
        return saved

    def prune_subtree(self, node_id: int) -> int:
        """Mark ``node_id`` and its unevaluated descendants PRUNED. Returns how many changed."""
        node, _ = self._lookup(node_id)
        if node is None:
            return 0
        count = self._prune_subtree(node)
        parent = self._parent(node)
        if parent is not None:
            self._propagate_status(parent)
        self.commands.flush()
        return count

    def step(self) -> StepResult:
        """Take the next action of sequential alpha-beta: expand or evaluate one node."""
        root = self.store.root
        if root is None:
            return StepResult.rejected(RejectReason.NO_SESSION)
        if root.status is NodeStatus.EVALUATED:
            return StepResult.rejected(RejectReason.COMPLETE, root.id)

        node = self._frontier(root)
        if node is None:
            result = StepResult.rejected(RejectReason.NOT_READY, root.id)
        elif node.status is NodeStatus.READY:
            result = self._evaluate(node)
        else:
            result = self._expand(node)
        self.commands.flush()
        return result

    def run(self, max_steps: Optional[int] = None) -> int:
        """Step until the root is evaluated (or ``max_steps``). Returns steps taken."""
        steps = 0
        while max_steps is None or steps < max_steps:
            if not self.step().accepted:
                break
            steps += 1
        return steps

    def reset(self) -> None:
        """Discard the whole tree and all counters."""
        self._clear()
        self.commands.flush()

    def get_stats(self) -> SearchStats:
        return dataclasses.replace(self.stats)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def root_id(self) -> Optional[int]:
        root = self.store.root
        return root.id if root is not None else None

    @property
    def is_complete(self) -> bool:
        root = self.store.root
        return root is not None and root.status is NodeStatus.EVALUATED

    @property
    def ordering(self) -> OrderingPolicy:
        return self._ordering

    def root_value(self) -> Optional[float]:
        root = self.store.root
        return root.value if root is not None else None

    def best_move(self) -> Any:
        root = self.store.root
        if root is None or root.best_child is None:
            return None
        return self.store.get(root.best_child).move

    def permitted_node(self) -> Optional[int]:
        """The node the next step() would act on, None once complete."""
        root = self.store.root
        if root is None or root.status is NodeStatus.EVALUATED:
            return None
        node = self._frontier(root)
        return node.id if node is not None else None

    # ------------------------------------------------------------------
    # Tree builder
    # ------------------------------------------------------------------

    def _create_node(self, state: GameState, parent: Optional[SearchNode], move: Any) -> SearchNode:
        depth = parent.depth + 1 if parent is not None else 0
        terminal = is_terminal_state(state)
        at_horizon = not terminal and self.config.max_depth is not None and depth >= self.config.max_depth
        alpha = parent.alpha if parent is not None else -math.inf
        beta = parent.beta if parent is not None else math.inf

        node = self.store.create(
            state,
            parent.id if parent is not None else None,
            depth,
            move=move,
            move_index=len(parent.children) if parent is not None else 0,
            is_terminal=terminal,
            at_horizon=at_horizon,
            inherited_alpha=alpha,
            inherited_beta=beta,
            alpha=alpha,
            beta=beta,
            status=NodeStatus.READY if terminal or at_horizon else NodeStatus.WAIT,
        )
        if not node.is_leaf_position:
            node.tags.add(NodeTag.EXPANDABLE)

        self.commands.push(CreateNode(
            node.id,
            node.parent_id,
            move,
            {
                "depth": depth,
                "is_maximizing": node.is_maximizing,
                "move_index": node.move_index,
                "status": node.status,
                "alpha": alpha,
                "beta": beta,
                "is_terminal": terminal,
                "at_horizon": at_horizon,
            },
        ))
        return node

    def _expand(self, node: SearchNode) -> StepResult:
        if node.is_resolved:
            return StepResult.rejected(RejectReason.RESOLVED, node.id)
        if node.expanded:
            return StepResult.rejected(RejectReason.ALREADY_EXPANDED, node.id)
        if node.is_leaf_position:
            return StepResult.rejected(RejectReason.TERMINAL, node.id)

        moves = node.state.legal_moves()
        if self.config.move_order is not None:
            moves = list(self.config.move_order(node.state, moves))

        for move in moves:
            child_state = node.state.clone()
            if not child_state.apply_move(move):
                logger.warning("Skipping move %r from node %d: rejected by the game state", move, node.id)
                continue
            self._create_node(child_state, node, move)

        node.expanded = True
        self._retag(node, remove=NodeTag.EXPANDABLE)
        if not node.children:
            node.is_terminal = True

        logger.debug("Expanded node %d into %d children", node.id, len(node.children))
        self._sync_ordering(node)
        self._propagate_status(node)
        return StepResult(True, node.id, action=StepAction.EXPAND)

    # ------------------------------------------------------------------
    # Status state machine
    # ------------------------------------------------------------------

    def _set_status(self, node: SearchNode, status: NodeStatus) -> bool:
        if node.status is status:
            return False
        node.status = status
        self.commands.push(UpdateNodeStatus(node.id, status, frozenset(node.tags)))
        if status is NodeStatus.PRUNED:
            self.commands.push(MarkPruned(node.id))
        return True

    def _retag(self, node: SearchNode, add: Optional[NodeTag] = None, remove: Optional[NodeTag] = None) -> None:
        tags = set(node.tags)
        if add is not None:
            tags.add(add)
        if remove is not None:
            tags.discard(remove)
        if tags != node.tags:
            node.tags = tags
            self.commands.push(UpdateNodeStatus(node.id, node.status, frozenset(tags)))

    def _check_status(self, node: SearchNode) -> bool:
        """Move a WAIT/READY node to the status its children call for."""
        if node.status not in (NodeStatus.WAIT, NodeStatus.READY):
            return False

        if node.children:
            done = all(child.is_resolved for child in self.store.children_of(node))
        else:
            done = node.is_leaf_position
        status = NodeStatus.READY if done else NodeStatus.WAIT
        if status is NodeStatus.READY and self._ordering.demotes(self.store, node):
            status = NodeStatus.WAIT
        return self._set_status(node, status)

    def _propagate_status(self, node: SearchNode) -> None:
        """Re-check ``node``, then walk up while statuses keep changing."""
        current: Optional[SearchNode] = node
        while current is not None:
            changed = self._check_status(current)
            parent = self._parent(current)
            if parent is None:
                return
            self._sync_ordering(parent)
            if not changed:
                return
            current = parent

    def _sync_ordering(self, parent: SearchNode) -> None:
        """Tag the permitted child of ``parent`` and hold its READY siblings back."""
        if not self._ordering.strict:
            return
        permitted = self._ordering.permitted_child(self.store, parent)
        for child in self.store.children_of(parent):
            if child is permitted:
                self._retag(child, add=NodeTag.PERMITTED)
            else:
                self._retag(child, remove=NodeTag.PERMITTED)
            self._check_status(child)

    # ------------------------------------------------------------------
    # Evaluator
    # ------------------------------------------------------------------

    def _evaluate(self, node: SearchNode) -> StepResult:
        if node.is_resolved:
            return StepResult.rejected(RejectReason.RESOLVED, node.id)
        blocker = self._ordering.blocking_node(self.store, node)
        if blocker is not None:
            logger.debug("Node %d is not permitted; node %d comes first", node.id, blocker.id)
            return StepResult.rejected(RejectReason.NOT_PERMITTED, node.id, permitted_id=blocker.id)
        if node.status is not NodeStatus.READY:
            return StepResult.rejected(RejectReason.NOT_READY, node.id)

        evaluated = [c for c in self.store.children_of(node) if c.status is NodeStatus.EVALUATED]
        if node.children and not evaluated:
            logger.warning("Node %d has no evaluated children; evaluation skipped", node.id)
            return StepResult.rejected(RejectReason.NO_EVALUATED_CHILDREN, node.id)

        self._set_status(node, NodeStatus.ACTIVE)
        self.stats.nodes_visited += 1

        if not node.children:
            value = self._score_leaf(node)
            tags = outcome_tags(node.state.outcome)
        else:
            best = evaluated[0]
            for child in evaluated[1:]:
                better = child.value > best.value if node.is_maximizing else child.value < best.value
                if better:
                    best = child
            value = best.value
            node.best_child = best.id
            self._retag(best, add=NodeTag.BEST_LINE)
            self.commands.push(HighlightBestEdge(node.id, best.id))
            tags = value_tags(value, self.root_player)

        node.value = value
        node.tags |= tags
        self._set_status(node, NodeStatus.EVALUATED)
        self.stats.evaluated_nodes += 1
        logger.debug("Evaluated node %d = %s", node.id, value)

        self._recompute_bounds(node, force_emit=True)
        self._push_bounds(node)

        parent = self._parent(node)
        if parent is not None:
            self._check_parent_pruning(parent)
            self._propagate_status(parent)
        return StepResult(True, node.id, action=StepAction.EVALUATE)

    def _score_leaf(self, node: SearchNode) -> float:
        if self.config.heuristic is not None:
            value = float(self.config.heuristic(node.state, self.root_player))
        elif node.is_terminal:
            value = outcome_score(node.state, self.root_player)
        else:
            value = VALUE_DRAW
        if math.isnan(value):
            logger.warning("Heuristic returned NaN for node %d; scoring it %s", node.id, VALUE_DRAW)
            value = VALUE_DRAW
        return value

    def _recompute_bounds(self, node: SearchNode, force_emit: bool = False) -> None:
        """Derive alpha/beta from the inherited window and the evaluated children.

        The moving bound is clamped to the other one, so a cutoff shows up
        as alpha == beta and alpha <= beta always holds.
        """
        alpha, beta = node.inherited_alpha, node.inherited_beta
        values = [c.value for c in self.store.children_of(node) if c.status is NodeStatus.EVALUATED]
        if values:
            if node.is_maximizing:
                alpha = min(max(alpha, max(values)), beta)
            else:
                beta = max(min(beta, min(values)), alpha)

        changed = alpha != node.alpha or beta != node.beta
        node.alpha, node.beta = alpha, beta
        if changed or force_emit:
            self.commands.push(UpdateNodeBounds(node.id, alpha, beta, node.value))

    def _push_bounds(self, node: SearchNode) -> None:
        """Hand ``node``'s window down to every unresolved descendant that lags behind."""
        pending = [node]
        while pending:
            current = pending.pop()
            for child in self.store.children_of(current):
                if child.is_resolved:
                    continue
                if child.inherited_alpha == current.alpha and child.inherited_beta == current.beta:
                    continue
                child.inherited_alpha, child.inherited_beta = current.alpha, current.beta
                self._recompute_bounds(child)
                self._cut_off(child)
                pending.append(child)

    def _check_parent_pruning(self, parent: SearchNode) -> int:
        if parent.is_resolved:
            return 0
        self._recompute_bounds(parent)
        saved = self._cut_off(parent)
        self._push_bounds(parent)
        self._sync_ordering(parent)
        return saved

    # ------------------------------------------------------------------
    # Pruning
    # ------------------------------------------------------------------

    def _cut_off(self, node: SearchNode) -> int:
        """Prune the unresolved children of ``node`` if its window has closed."""
        if not self.config.use_pruning or node.is_resolved or node.alpha < node.beta:
            return 0
        victims = [c for c in self.store.children_of(node) if not c.is_resolved]
        if not victims:
            return 0

        saved = 0
        for child in victims:
            estimate = self._estimate_saved(child) if self.config.estimate_pruned else None
            newly_pruned = self._prune_subtree(child)
            saved += newly_pruned if estimate is None else estimate
        self.stats.nodes_pruned += saved
        logger.debug(
            "Cutoff at node %d (alpha=%s, beta=%s): pruned %d children, %d nodes saved",
            node.id, node.alpha, node.beta, len(victims), saved,
        )

        self._check_status(node)
        self._sync_ordering(node)
        return saved

    def _prune_subtree(self, node: SearchNode) -> int:
        count = 0
        stack = [node]
        while stack:
            current = stack.pop()
            if current.is_resolved:
                continue
            current.tags -= {NodeTag.PERMITTED, NodeTag.BEST_LINE, NodeTag.EXPANDABLE}
            self._set_status(current, NodeStatus.PRUNED)
            count += 1
            stack.extend(self.store.children_of(current))
        return count

    def _estimate_saved(self, node: SearchNode) -> int:
        """Positions below ``node`` that will never be evaluated, materialized or not."""
        remaining = None
        if self.config.max_depth is not None:
            remaining = max(self.config.max_depth - node.depth, 0)
        potential = count_potential_nodes(
            node.state,
            leaf_only=self.config.count_leaves_only,
            max_depth=remaining,
            memo=self._size_memo,
        )
        evaluated = count_stored_subtree(
            self.store,
            node.id,
            leaf_only=self.config.count_leaves_only,
            predicate=lambda n: n.status is NodeStatus.EVALUATED,
        )
        return max(1, potential - evaluated)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lookup(self, node_id: int) -> tuple[Optional[SearchNode], StepResult]:
        if self.store.root is None:
            return None, StepResult.rejected(RejectReason.NO_SESSION, node_id)
        node = self.store.get(node_id)
        if node is None:
            return None, StepResult.rejected(RejectReason.UNKNOWN_NODE, node_id)
        return node, StepResult(True, node_id)

    def _parent(self, node: SearchNode) -> Optional[SearchNode]:
        parent = self.store.parent_of(node)
        if parent is None and not node.is_root:
            logger.warning("Node %d refers to missing parent %r; skipping", node.id, node.parent_id)
        return parent

    def _frontier(self, root: SearchNode) -> Optional[SearchNode]:
        """Leftmost node on the unresolved path that can be acted on."""
        node = root
        while True:
            if node.status is NodeStatus.READY:
                return node
            if not node.expanded and not node.is_leaf_position:
                return node
            node = next((c for c in self.store.children_of(node) if not c.is_resolved), None)
            if node is None:
                logger.warning("No unresolved child below an unfinished node")
                return None

    def _clear(self) -> None:
        self.store.clear()
        self.stats = SearchStats()
        self.root_player = None
        self._size_memo = {}
        self.commands.discard()
        self.commands.push(ClearTree())
