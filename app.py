"""BetaViz — Gradio web app entry point."""

import logging

import gradio as gr

from betaviz.ui.search_tab import build_search_tab

with gr.Blocks(title="BetaViz") as demo:
    gr.Markdown("# BetaViz")
    gr.Markdown(
        "Interactive alpha-beta search on tic-tac-toe. Expand and evaluate the tree "
        "node by node, or let the stepper replay classic left-to-right alpha-beta."
    )

    with gr.Tab("Search"):
        build_search_tab()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    demo.launch(theme=gr.themes.Soft())
