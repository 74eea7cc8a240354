"""SVG board renderer + HTML outline of the search tree for Gradio."""

from __future__ import annotations

import html
import math
from typing import Optional

from betaviz.game.tictactoe import BOARD_SIZE, EMPTY, TicTacToeState
from betaviz.game.types import Player
from betaviz.search.nodes import NodeStatus, NodeTag, SearchNode
from betaviz.search.session import SearchSession

# Layout constants
CELL_SIZE = 60
MARGIN = 10
BOARD_PX = MARGIN * 2 + CELL_SIZE * BOARD_SIZE
MARK_INSET = 14

# Colors
BG_COLOR = "#FAFAF7"
LINE_COLOR = "#4A3728"
PLAYER1_COLOR = "#3498DB"
PLAYER2_COLOR = "#E74C3C"
HIGHLIGHT_COLOR = "#F1C40F"

STATUS_COLORS: dict[NodeStatus, str] = {
    NodeStatus.WAIT: "#BDC3C7",
    NodeStatus.READY: "#F39C12",
    NodeStatus.ACTIVE: "#8E44AD",
    NodeStatus.EVALUATED: "#27AE60",
    NodeStatus.PRUNED: "#7F8C8D",
}

# Outline rendering stops after this many nodes
MAX_RENDERED_NODES = 600


def format_bound(value: Optional[float]) -> str:
    if value is None:
        return "—"
    if math.isinf(value):
        return "+∞" if value > 0 else "-∞"
    if float(value).is_integer():
        return f"{int(value):+d}" if value else "0"
    return f"{value:+.2f}"


def render_board_svg(state: TicTacToeState, highlight: Optional[int] = None) -> str:
    """Render a tic-tac-toe position as an SVG string."""
    parts: list[str] = []

    parts.append(
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{BOARD_PX}" height="{BOARD_PX}" '
        f'viewBox="0 0 {BOARD_PX} {BOARD_PX}" '
        f'class="ttt-board">'
    )
    parts.append(f'<rect width="{BOARD_PX}" height="{BOARD_PX}" fill="{BG_COLOR}" rx="4"/>')

    if highlight is not None:
        r, c = divmod(highlight, BOARD_SIZE)
        parts.append(
            f'<rect x="{MARGIN + c * CELL_SIZE}" y="{MARGIN + r * CELL_SIZE}" '
            f'width="{CELL_SIZE}" height="{CELL_SIZE}" fill="{HIGHLIGHT_COLOR}" opacity="0.4"/>'
        )

    # Grid lines
    for i in range(1, BOARD_SIZE):
        offset = MARGIN + i * CELL_SIZE
        end = MARGIN + BOARD_SIZE * CELL_SIZE
        parts.append(
            f'<line x1="{offset}" y1="{MARGIN}" x2="{offset}" y2="{end}" '
            f'stroke="{LINE_COLOR}" stroke-width="2"/>'
        )
        parts.append(
            f'<line x1="{MARGIN}" y1="{offset}" x2="{end}" y2="{offset}" '
            f'stroke="{LINE_COLOR}" stroke-width="2"/>'
        )

    # Marks: circle for player 1, cross for player 2
    for index, mark in enumerate(state.cells):
        if mark == EMPTY:
            continue
        r, c = divmod(index, BOARD_SIZE)
        x0 = MARGIN + c * CELL_SIZE
        y0 = MARGIN + r * CELL_SIZE
        if mark == Player.ONE.value:
            cx, cy = x0 + CELL_SIZE // 2, y0 + CELL_SIZE // 2
            radius = CELL_SIZE // 2 - MARK_INSET
            parts.append(
                f'<circle cx="{cx}" cy="{cy}" r="{radius}" fill="none" '
                f'stroke="{PLAYER1_COLOR}" stroke-width="5" class="mark-p1"/>'
            )
        else:
            a, b = MARK_INSET, CELL_SIZE - MARK_INSET
            parts.append(
                f'<path d="M{x0 + a},{y0 + a} L{x0 + b},{y0 + b} M{x0 + b},{y0 + a} L{x0 + a},{y0 + b}" '
                f'stroke="{PLAYER2_COLOR}" stroke-width="5" class="mark-p2"/>'
            )

    parts.append("</svg>")
    return "\n".join(parts)


def _node_label(node: SearchNode) -> str:
    role = "MAX" if node.is_maximizing else "MIN"
    move = "root" if node.move is None else f"move {html.escape(str(node.move))}"
    parts = [f"#{node.id}", move, role, node.status.value]
    if node.value is not None:
        parts.append(f"v={format_bound(node.value)}")
    if node.status is not NodeStatus.PRUNED:
        parts.append(f"α={format_bound(node.alpha)} β={format_bound(node.beta)}")
    return " · ".join(parts)


def render_tree_html(session: SearchSession, max_nodes: int = MAX_RENDERED_NODES) -> str:
    """Render the materialized tree as nested lists, one line per node."""
    root = session.store.root
    if root is None:
        return '<div class="search-tree"><em>No search running.</em></div>'

    parts: list[str] = ['<div class="search-tree" style="font-family:monospace;font-size:13px">']
    rendered = 0
    # (node, closing) pairs; closing entries end a nested list
    stack: list[tuple[Optional[SearchNode], bool]] = [(root, False)]
    parts.append("<ul>")
    while stack:
        node, closing = stack.pop()
        if closing:
            parts.append("</ul></li>")
            continue
        if rendered >= max_nodes:
            remaining = len(session.store) - rendered
            parts.append(f'<li class="tree-more">… {remaining} more nodes</li>')
            break
        rendered += 1

        color = STATUS_COLORS[node.status]
        weight = "bold" if NodeTag.PERMITTED in node.tags or NodeTag.BEST_LINE in node.tags else "normal"
        marker = " ◀" if NodeTag.PERMITTED in node.tags else ""
        parts.append(
            f'<li class="tree-node status-{node.status.value.lower()}" data-node="{node.id}" '
            f'style="color:{color};font-weight:{weight}">{_node_label(node)}{marker}'
        )

        children = session.store.children_of(node)
        if children and node.status is not NodeStatus.PRUNED:
            parts.append("<ul>")
            stack.append((None, True))
            for child in reversed(children):
                stack.append((child, False))
        else:
            parts.append("</li>")
    parts.append("</ul></div>")
    return "\n".join(parts)
