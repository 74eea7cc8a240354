from betaviz.ui.search_tab import (
    ORDER_CHOICES,
    SearchView,
    _auto_run,
    _evaluate,
    _expand,
    _parse_node_id,
    _reset,
    _save,
    _start_search,
    _step,
)


def _started(board="110220000", depth=0, strict=False):
    view = SearchView()
    _start_search(board, depth, True, strict, ORDER_CHOICES[0], view)
    return view


def test_start_search():
    view = _started()
    assert view.initial is not None
    assert view.session.root_id == 0
    assert "Started: Player 1 to move" in view.status_text


def test_start_returns_all_outputs():
    view = SearchView()
    result = _start_search("110220000", 0, True, False, ORDER_CHOICES[1], view)
    assert len(result) == 5
    assert "<svg" in result[0]
    assert "tree-node" in result[1]
    assert result[4] is view


def test_invalid_board():
    view = SearchView()
    _start_search("12", 0, True, False, ORDER_CHOICES[0], view)
    assert view.initial is None
    assert "Invalid board" in view.message


def test_depth_sets_heuristic():
    view = _started(depth=2)
    assert view.session.config.max_depth == 2
    assert view.session.config.heuristic is not None
    assert _started(depth=0).session.config.heuristic is None


def test_step():
    view = _started()
    _step(view)
    assert view.message.startswith("Evaluate node #1")


def test_step_without_search():
    view = SearchView()
    _step(view)
    assert view.message.startswith("Rejected")


def test_strict_rejection_names_permitted_node():
    view = _started(strict=True)
    _expand("2", view)
    _evaluate("#6", view)
    assert view.message.startswith("Rejected")
    assert "evaluate #1 first" in view.message


def test_evaluate_bad_id():
    view = _started()
    _evaluate("abc", view)
    assert "Invalid node id" in view.message


def test_parse_node_id():
    assert _parse_node_id("#3") == 3
    assert _parse_node_id(" 12 ") == 12
    assert _parse_node_id("") is None
    assert _parse_node_id(None) is None


def test_auto_run_completes():
    view = _started()
    frames = list(_auto_run(0.0, view))
    assert frames
    assert view.session.is_complete
    assert "Search complete" in frames[-1][2]
    assert "best move 2" in frames[-1][2]


def test_reset():
    view = _started()
    _reset(view)
    assert view.initial is None
    assert view.session.root_id is None


def test_save_without_search():
    assert _save(SearchView()) == "Nothing to save."
