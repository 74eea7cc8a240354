"""Save and load search trees as JSON files."""

from __future__ import annotations

import json
import math
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from betaviz.search.session import SearchSession

SAVED_SEARCHES_DIR = Path(__file__).resolve().parents[2] / "saved_searches"


def _ensure_dir() -> None:
    SAVED_SEARCHES_DIR.mkdir(exist_ok=True)


def _encode_number(value: Optional[float]):
    """JSON has no infinity; store +-inf as strings."""
    if value is None or not math.isinf(value):
        return value
    return "inf" if value > 0 else "-inf"


def decode_number(value) -> Optional[float]:
    if value == "inf":
        return math.inf
    if value == "-inf":
        return -math.inf
    return value


def _encode_move(move):
    if move is None or isinstance(move, (int, float, str, bool)):
        return move
    if isinstance(move, tuple):
        return list(move)
    return repr(move)


def snapshot(session: SearchSession) -> dict:
    """Plain-data view of the session: config summary, stats and every node."""
    stats = session.get_stats()
    config = session.config
    nodes = []
    for node in session.store:
        nodes.append({
            "id": node.id,
            "parent": node.parent_id,
            "move": _encode_move(node.move),
            "depth": node.depth,
            "maximizing": node.is_maximizing,
            "status": node.status.value,
            "value": _encode_number(node.value),
            "alpha": _encode_number(node.alpha),
            "beta": _encode_number(node.beta),
            "children": list(node.children),
            "tags": sorted(tag.value for tag in node.tags),
        })
    return {
        "root_player": session.root_player.value if session.root_player is not None else None,
        "config": {
            "max_depth": config.max_depth,
            "use_pruning": config.use_pruning,
            "strict_order": config.strict_order,
        },
        "stats": {
            "nodes_visited": stats.nodes_visited,
            "nodes_pruned": stats.nodes_pruned,
            "evaluated_nodes": stats.evaluated_nodes,
        },
        "root_value": _encode_number(session.root_value()),
        "best_move": _encode_move(session.best_move()),
        "nodes": nodes,
    }


def save_search(session: SearchSession, name: str = "search") -> str:
    """Save a session snapshot to a JSON file. Returns the filename."""
    _ensure_dir()
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    filename = f"{timestamp}_{name}.json"
    # Sanitize filename
    filename = filename.replace(" ", "_").replace("(", "").replace(")", "").replace("/", "_")

    record = {"date": datetime.now().isoformat(), "name": name, **snapshot(session)}

    filepath = SAVED_SEARCHES_DIR / filename
    with open(filepath, "w") as f:
        json.dump(record, f, indent=2)

    return filename


def load_search(filename: str) -> dict:
    """Load a saved search. Returns the parsed dict (infinite bounds stay encoded)."""
    filepath = SAVED_SEARCHES_DIR / filename
    with open(filepath) as f:
        return json.load(f)


def list_saved_searches() -> list[str]:
    """Return sorted list of saved search filenames (newest first)."""
    _ensure_dir()
    files = [f for f in os.listdir(SAVED_SEARCHES_DIR) if f.endswith(".json")]
    files.sort(reverse=True)
    return files
