"""Search tab: step through alpha-beta on a tic-tac-toe position."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Generator, Optional

import gradio as gr

from betaviz.game.tictactoe import (
    TicTacToeState,
    center_corner_order,
    parse_board,
    tictactoe_heuristic,
)
from betaviz.search.config import SearchConfig
from betaviz.search.record import save_search
from betaviz.search.session import SearchSession, StepResult
from betaviz.ui.tree_component import format_bound, render_board_svg, render_tree_html

DEFAULT_BOARD = "110220000"
AUTO_RUN_DELAY = 0.3  # seconds between auto-run steps
AUTO_RUN_MAX_STEPS = 2_000
ORDER_CHOICES = ["Board order", "Center/corner first"]


@dataclass
class SearchView:
    """Per-tab search state held in gr.State."""

    session: SearchSession = field(default_factory=SearchSession)
    initial: Optional[TicTacToeState] = None
    message: str = ""

    @property
    def stats_text(self) -> str:
        stats = self.session.get_stats()
        return (
            f"Visited: {stats.nodes_visited} | Evaluated: {stats.evaluated_nodes} | "
            f"Pruned (est.): {stats.nodes_pruned} | Nodes in tree: {len(self.session.store)}"
        )

    @property
    def status_text(self) -> str:
        if self.initial is None:
            return "Enter a position and press Start."
        if self.session.is_complete:
            return (
                f"Search complete: value {format_bound(self.session.root_value())}, "
                f"best move {self.session.best_move()}"
            )
        nxt = self.session.permitted_node()
        hint = f"Next node: #{nxt}" if nxt is not None else ""
        return " | ".join(p for p in (self.message, hint) if p)


def _outputs(view: SearchView):
    board = render_board_svg(view.initial if view.initial is not None else TicTacToeState(),
                             highlight=view.session.best_move())
    return (
        board,
        render_tree_html(view.session),
        view.status_text,
        view.stats_text,
        view,
    )


def _describe(result: StepResult) -> str:
    if result.accepted:
        return f"{result.action.value.capitalize()} node #{result.node_id}"
    text = f"Rejected: {result.reason.value}"
    if result.permitted_id is not None:
        text += f" (evaluate #{result.permitted_id} first)"
    return text


def _parse_node_id(text: str) -> Optional[int]:
    text = (text or "").strip().lstrip("#")
    try:
        return int(text)
    except ValueError:
        return None


def _start_search(
    board_text: str,
    depth: float,
    use_pruning: bool,
    strict: bool,
    order_choice: str,
    view: SearchView,
):
    state = parse_board(board_text or "")
    if state is None:
        view.message = f"Invalid board: '{board_text}'. Use 9 digits 0/1/2, e.g. {DEFAULT_BOARD}."
        return _outputs(view)

    max_depth = int(depth) if depth else None
    config = SearchConfig(
        max_depth=max_depth,
        use_pruning=use_pruning,
        strict_order=strict,
        heuristic=tictactoe_heuristic if max_depth is not None else None,
        move_order=center_corner_order if order_choice == ORDER_CHOICES[1] else None,
    )
    view.initial = state
    view.session.visualize_search(state, config)
    view.message = f"Started: {state.current_player} to move"
    return _outputs(view)


def _step(view: SearchView):
    view.message = _describe(view.session.step())
    return _outputs(view)


def _auto_run(delay: float, view: SearchView) -> Generator:
    """Generator that yields the tree after each step."""
    for _ in range(AUTO_RUN_MAX_STEPS):
        result = view.session.step()
        view.message = _describe(result)
        yield _outputs(view)
        if not result.accepted or view.session.is_complete:
            break
        time.sleep(delay)


def _evaluate(node_text: str, view: SearchView):
    node_id = _parse_node_id(node_text)
    if node_id is None:
        view.message = f"Invalid node id: '{node_text}'"
    else:
        view.message = _describe(view.session.evaluate_node(node_id))
    return _outputs(view)


def _expand(node_text: str, view: SearchView):
    node_id = _parse_node_id(node_text)
    if node_id is None:
        view.message = f"Invalid node id: '{node_text}'"
    else:
        view.message = _describe(view.session.expand(node_id))
    return _outputs(view)


def _reset(view: SearchView):
    view.session.reset()
    view.initial = None
    view.message = ""
    return _outputs(view)


def _save(view: SearchView) -> str:
    if view.initial is None:
        return "Nothing to save."
    name = "".join(str(c) for c in view.initial.cells)
    return f"Saved: {save_search(view.session, name)}"


def build_search_tab() -> None:
    """Construct the Search tab UI inside a gr.Blocks context."""

    view_state = gr.State(SearchView())

    with gr.Row():
        # Left: position + tree
        with gr.Column(scale=3):
            board_html = gr.HTML(value=render_board_svg(TicTacToeState()), label="Position")
            tree_html = gr.HTML(value=render_tree_html(SearchSession()), label="Search tree")
        # Right: controls
        with gr.Column(scale=1):
            status_text = gr.Textbox(label="Status", interactive=False, lines=2)
            stats_text = gr.Textbox(label="Stats", interactive=False, lines=2)

            gr.Markdown("### New Search")
            board_input = gr.Textbox(
                value=DEFAULT_BOARD,
                label="Board (9 cells, 0 empty / 1 / 2, row by row)",
                lines=1,
            )
            depth_input = gr.Number(value=0, label="Max depth (0 = full game)", precision=0)
            pruning_input = gr.Checkbox(value=True, label="Alpha-beta pruning")
            strict_input = gr.Checkbox(value=False, label="Strict left-to-right order")
            order_input = gr.Radio(choices=ORDER_CHOICES, value=ORDER_CHOICES[0], label="Move order")
            start_btn = gr.Button("Start", variant="primary")

            gr.Markdown("### Drive")
            with gr.Row():
                step_btn = gr.Button("Step")
                run_btn = gr.Button("Auto-run")
            delay_input = gr.Slider(0.0, 2.0, value=AUTO_RUN_DELAY, step=0.1, label="Auto-run delay (s)")
            node_input = gr.Textbox(label="Node id", placeholder="e.g. 3", lines=1)
            with gr.Row():
                eval_btn = gr.Button("Evaluate")
                expand_btn = gr.Button("Expand")
            with gr.Row():
                reset_btn = gr.Button("Reset", variant="stop")
                save_btn = gr.Button("Save Tree")
            save_status = gr.Textbox(label="Save", interactive=False, lines=1)

    outputs = [board_html, tree_html, status_text, stats_text, view_state]

    start_btn.click(
        fn=_start_search,
        inputs=[board_input, depth_input, pruning_input, strict_input, order_input, view_state],
        outputs=outputs,
    )
    step_btn.click(fn=_step, inputs=[view_state], outputs=outputs)
    run_btn.click(fn=_auto_run, inputs=[delay_input, view_state], outputs=outputs)
    eval_btn.click(fn=_evaluate, inputs=[node_input, view_state], outputs=outputs)
    expand_btn.click(fn=_expand, inputs=[node_input, view_state], outputs=outputs)
    reset_btn.click(fn=_reset, inputs=[view_state], outputs=outputs)
    save_btn.click(fn=_save, inputs=[view_state], outputs=[save_status])
