import numpy as np
import pytest

from block_blast.game import Board, ScoringRules, ShapeKind, is_terminal

from helpers import piece


@pytest.mark.parametrize("lines,expected", [(0, 0), (1, 100), (2, 400), (3, 900), (4, 1600)])
def test_line_clear_combo_score(lines, expected):
    assert ScoringRules().score_for_lines(lines) == expected


def test_multi_line_move_beats_separate_moves():
    rules = ScoringRules()
    assert rules.score_for_lines(2) > 2 * rules.score_for_lines(1)


def test_placement_score_variant():
    rules = ScoringRules(placement_score_per_cell=10)
    assert rules.score_for_move(cells_placed=4, lines=0) == 40
    assert rules.score_for_move(cells_placed=4, lines=1) == 140
    assert ScoringRules().score_for_move(cells_placed=4, lines=0) == 0


def _full_but_one(size=6, hole=(3, 3)):
    grid = np.ones((size, size), dtype=np.int8)
    grid[hole] = 0
    return Board(grid)


def test_terminal_when_only_a_domino_and_one_hole():
    board = _full_but_one()
    assert is_terminal(board, [piece(ShapeKind.LINE2, 1, 2), None, None])
    assert is_terminal(board, [None, piece(ShapeKind.LINE2, 2, 1), None])


def test_not_terminal_when_single_fits_the_hole():
    board = _full_but_one()
    assert not is_terminal(board, [None, piece(ShapeKind.SINGLE, 1, 1), None])
    assert not is_terminal(board, [piece(ShapeKind.LINE2, 1, 2), None, piece(ShapeKind.SINGLE, 1, 1)])


def test_empty_hand_is_never_terminal():
    grid = np.ones((6, 6), dtype=np.int8)
    assert not is_terminal(Board(grid), [None, None, None])


def test_big_piece_on_empty_board_fits():
    assert not is_terminal(Board.empty(6), [piece(ShapeKind.LINE5, 1, 5)])
