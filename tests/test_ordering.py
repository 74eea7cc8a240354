from collections import defaultdict

from betaviz.game.explicit import ExplicitTreeState, explicit_leaf_value
from betaviz.game.tictactoe import parse_board
from betaviz.search.commands import UpdateNodeStatus
from betaviz.search.config import SearchConfig
from betaviz.search.minimax import MinimaxEngine
from betaviz.search.nodes import NodeStatus, NodeTag
from betaviz.search.ordering import RelaxedOrdering, StrictOrdering, make_ordering
from betaviz.search.session import RejectReason, SearchSession

TEXTBOOK_TREE = [[3, 12, 8], [2, 4, 6], [14, 5, 2]]


def strict_session(on_flush=None):
    session = SearchSession(on_flush=on_flush)
    session.visualize_search(
        ExplicitTreeState(TEXTBOOK_TREE),
        SearchConfig(heuristic=explicit_leaf_value, strict_order=True),
    )
    return session


def test_make_ordering():
    assert isinstance(make_ordering(True), StrictOrdering)
    assert isinstance(make_ordering(False), RelaxedOrdering)
    assert make_ordering(True).name == "StrictOrdering"


class TestStrictOrdering:
    def test_first_child_permitted(self):
        session = strict_session()
        assert session.ordering.strict
        tagged = [c.id for c in session.store.children_of(session.store.root) if NodeTag.PERMITTED in c.tags]
        assert tagged == [1]
        assert session.permitted_node() == 1

    def test_later_siblings_wait(self):
        session = strict_session()
        session.expand(1)
        statuses = [session.store.get(i).status for i in (4, 5, 6)]
        assert statuses == [NodeStatus.READY, NodeStatus.WAIT, NodeStatus.WAIT]

    def test_sibling_rejected_with_permitted_id(self):
        session = strict_session()
        session.expand(1)
        result = session.evaluate_node(5)
        assert not result.accepted
        assert result.reason is RejectReason.NOT_PERMITTED
        assert result.permitted_id == 4
        assert session.store.get(5).value is None

    def test_permission_moves_right(self):
        session = strict_session()
        session.expand(1)
        assert session.evaluate_node(4).accepted
        assert session.store.get(5).status is NodeStatus.READY
        assert NodeTag.PERMITTED in session.store.get(5).tags
        assert NodeTag.PERMITTED not in session.store.get(4).tags
        assert session.evaluate_node(5).accepted

    def test_blocked_by_ancestor(self):
        session = strict_session()
        session.expand(2)   # second subtree while the first is untouched
        leaf = session.store.get(4)
        assert leaf.parent_id == 2
        assert leaf.status is NodeStatus.READY
        result = session.evaluate_node(4)
        assert result.reason is RejectReason.NOT_PERMITTED
        assert result.permitted_id == 1

    def test_inner_node_waits_for_its_turn(self):
        session = strict_session()
        session.expand(1)
        for leaf_id in (4, 5, 6):
            session.evaluate_node(leaf_id)
        assert session.store.get(1).status is NodeStatus.READY
        assert session.evaluate_node(1).accepted
        assert session.permitted_node() == 2

    def test_same_result_as_textbook(self):
        session = strict_session()
        session.run()
        assert session.root_value() == 3.0
        assert session.best_move() == 0
        assert session.get_stats().nodes_pruned == 2


class TestStrictRun:
    def test_children_evaluated_left_to_right(self):
        evaluated = []

        def collect(batch):
            for command in batch:
                if isinstance(command, UpdateNodeStatus) and command.status is NodeStatus.EVALUATED:
                    evaluated.append(command.node_id)

        session = SearchSession(on_flush=collect)
        session.visualize_search(parse_board("120000000"), SearchConfig(strict_order=True))
        while session.step().accepted:
            for parent in session.store:
                children = session.store.children_of(parent)
                assert sum(NodeTag.PERMITTED in c.tags for c in children) <= 1
                assert sum(c.status is NodeStatus.READY for c in children) <= 1

        order = defaultdict(list)
        for node_id in evaluated:
            node = session.store.get(node_id)
            if node.parent_id is not None:
                order[node.parent_id].append(node.move_index)
        for indices in order.values():
            assert indices == sorted(indices)
            assert len(set(indices)) == len(indices)

    def test_matches_relaxed_stepping(self):
        state = parse_board("120000000")
        results = {}
        for strict in (True, False):
            session = SearchSession()
            session.visualize_search(state, SearchConfig(strict_order=strict))
            session.run()
            results[strict] = (session.root_value(), session.best_move(), session.get_stats())
        assert results[True] == results[False]

        engine = MinimaxEngine()
        engine.find_best_move(state)
        assert results[True][2].evaluated_nodes == engine.nodes_visited
