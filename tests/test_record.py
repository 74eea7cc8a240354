"""Tests for search tree save/load functionality."""

import json
import math
import os

import pytest

from betaviz.game.explicit import ExplicitTreeState, explicit_leaf_value
from betaviz.search.config import SearchConfig
from betaviz.search.record import (
    SAVED_SEARCHES_DIR,
    decode_number,
    list_saved_searches,
    load_search,
    save_search,
    snapshot,
)
from betaviz.search.session import SearchSession


@pytest.fixture
def finished_search():
    """Run the textbook three-by-three tree to completion."""
    session = SearchSession()
    session.visualize_search(
        ExplicitTreeState([[3, 12, 8], [2, 4, 6], [14, 5, 2]]),
        SearchConfig(heuristic=explicit_leaf_value),
    )
    session.run()
    return session


@pytest.fixture(autouse=True)
def cleanup_saved_files():
    """Clean up any test-generated save files."""
    yield
    if SAVED_SEARCHES_DIR.exists():
        for f in os.listdir(SAVED_SEARCHES_DIR):
            if "TestSearch" in f:
                os.remove(SAVED_SEARCHES_DIR / f)


class TestSnapshot:
    def test_summary(self, finished_search):
        data = snapshot(finished_search)
        assert data["root_player"] == 1
        assert data["root_value"] == 3.0
        assert data["best_move"] == 0
        assert data["config"] == {"max_depth": None, "use_pruning": True, "strict_order": False}
        assert data["stats"]["evaluated_nodes"] == 11
        assert data["stats"]["nodes_pruned"] == 2

    def test_nodes(self, finished_search):
        nodes = snapshot(finished_search)["nodes"]
        assert len(nodes) == 13
        root = nodes[0]
        assert root["parent"] is None
        assert root["children"] == [1, 2, 3]
        assert root["maximizing"] is True
        assert root["status"] == "EVALUATED"
        assert "BEST_LINE" in nodes[1]["tags"]

    def test_infinite_bounds_are_strings(self, finished_search):
        nodes = snapshot(finished_search)["nodes"]
        assert nodes[0]["beta"] == "inf"
        assert nodes[1]["alpha"] == "-inf"
        json.dumps(nodes)

    def test_empty_session(self):
        data = snapshot(SearchSession())
        assert data["nodes"] == []
        assert data["root_player"] is None
        assert data["root_value"] is None


def test_decode_number():
    assert decode_number("inf") == math.inf
    assert decode_number("-inf") == -math.inf
    assert decode_number(0.5) == 0.5
    assert decode_number(None) is None


class TestSaveSearch:
    def test_save_creates_file(self, finished_search):
        filename = save_search(finished_search, "TestSearch")
        assert filename.endswith(".json")
        assert (SAVED_SEARCHES_DIR / filename).exists()

    def test_save_content(self, finished_search):
        filename = save_search(finished_search, "TestSearch")
        with open(SAVED_SEARCHES_DIR / filename) as f:
            data = json.load(f)
        assert data["name"] == "TestSearch"
        assert data["root_value"] == 3.0
        assert len(data["nodes"]) == 13

    def test_sanitized_name(self, finished_search):
        filename = save_search(finished_search, "TestSearch (depth 2)")
        assert " " not in filename
        assert "(" not in filename


class TestLoadSearch:
    def test_load_roundtrip(self, finished_search):
        filename = save_search(finished_search, "TestSearch")
        data = load_search(filename)
        assert data["best_move"] == 0
        assert decode_number(data["nodes"][0]["beta"]) == math.inf


class TestListSavedSearches:
    def test_list_returns_json_files(self, finished_search):
        filename = save_search(finished_search, "TestSearch")
        assert filename in list_saved_searches()

    def test_list_sorted_newest_first(self):
        files = list_saved_searches()
        assert files == sorted(files, reverse=True)
