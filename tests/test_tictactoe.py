import pytest

from betaviz.game.tictactoe import (
    TicTacToeState,
    center_corner_order,
    format_board,
    parse_board,
    tictactoe_heuristic,
)
from betaviz.game.types import Outcome, Player


class TestParseBoard:
    def test_compact(self):
        state = parse_board("110220000")
        assert state.cells == (1, 1, 0, 2, 2, 0, 0, 0, 0)
        assert state.current_player is Player.ONE

    def test_with_separators(self):
        state = parse_board("[1,1,0, 2,2,0, 0,0,0]")
        assert state.cells == (1, 1, 0, 2, 2, 0, 0, 0, 0)

    def test_infers_player_two(self):
        state = parse_board("100000000")
        assert state.current_player is Player.TWO

    def test_explicit_player(self):
        state = parse_board("220100100", to_move=Player.ONE)
        assert state.current_player is Player.ONE

    def test_invalid(self):
        assert parse_board("") is None
        assert parse_board("11022000") is None    # 8 cells
        assert parse_board("110223000") is None   # bad digit
        assert parse_board("111000000") is None   # impossible counts


def test_format_board():
    state = TicTacToeState([1, 2, 0, 0, 1, 0, 0, 0, 2], Player.ONE)
    assert format_board(state) == "XO.\n.X.\n..O"


class TestTicTacToeState:
    def test_initial_state(self):
        g = TicTacToeState()
        assert g.current_player is Player.ONE
        assert g.outcome is Outcome.ONGOING
        assert g.legal_moves() == list(range(9))

    def test_apply_move_switches_player(self):
        g = TicTacToeState()
        assert g.apply_move(4)
        assert g.cells[4] == 1
        assert g.current_player is Player.TWO

    def test_illegal_moves_rejected(self):
        g = TicTacToeState()
        g.apply_move(4)
        assert not g.apply_move(4)
        assert not g.apply_move(9)
        assert not g.apply_move(-1)
        assert g.current_player is Player.TWO

    def test_row_win(self):
        g = TicTacToeState()
        for move in (0, 3, 1, 4, 2):
            g.apply_move(move)
        assert g.outcome is Outcome.PLAYER1_WIN
        assert g.winner is Player.ONE
        assert g.legal_moves() == []
        assert not g.apply_move(5)

    def test_diagonal_win_player_two(self):
        g = TicTacToeState([1, 1, 2, 1, 2, 0, 0, 0, 0], Player.TWO)
        g.apply_move(6)
        assert g.outcome is Outcome.PLAYER2_WIN

    def test_draw(self):
        g = TicTacToeState([1, 2, 1, 1, 2, 2, 2, 1, 0], Player.ONE)
        g.apply_move(8)
        assert g.outcome is Outcome.DRAW
        assert g.is_over

    def test_clone_is_independent(self):
        g = TicTacToeState()
        g.apply_move(0)
        twin = g.clone()
        twin.apply_move(1)
        assert g.cells[1] == 0
        assert g.current_player is Player.TWO
        assert twin.current_player is Player.ONE

    def test_equality_and_hash(self):
        a = TicTacToeState([1, 0, 0, 0, 0, 0, 0, 0, 0], Player.TWO)
        b = TicTacToeState()
        b.apply_move(0)
        assert a == b
        assert hash(a) == hash(b)
        assert a != TicTacToeState([1, 0, 0, 0, 0, 0, 0, 0, 0], Player.ONE)


def test_center_corner_order():
    assert center_corner_order(TicTacToeState(), list(range(9))) == [4, 0, 2, 6, 8, 1, 3, 5, 7]
    assert center_corner_order(TicTacToeState(), [7, 1, 2]) == [2, 1, 7]


class TestHeuristic:
    def test_terminal_scores(self):
        won = TicTacToeState([1, 1, 1, 2, 2, 0, 0, 0, 0], Player.TWO)
        assert tictactoe_heuristic(won, Player.ONE) == 1.0
        assert tictactoe_heuristic(won, Player.TWO) == -1.0

    def test_empty_board_is_zero(self):
        assert tictactoe_heuristic(TicTacToeState(), Player.ONE) == 0.0

    def test_open_two_favours_owner(self):
        g = TicTacToeState([1, 1, 0, 2, 0, 0, 0, 0, 0], Player.TWO)
        assert tictactoe_heuristic(g, Player.ONE) > 0
        assert tictactoe_heuristic(g, Player.TWO) < 0

    @pytest.mark.parametrize("cells", [
        [1, 1, 0, 1, 1, 0, 0, 0, 0],
        [2, 2, 0, 2, 2, 0, 0, 0, 0],
    ])
    def test_bounded_below_a_win(self, cells):
        score = tictactoe_heuristic(TicTacToeState(cells, Player.ONE), Player.ONE)
        assert -1.0 < score < 1.0
