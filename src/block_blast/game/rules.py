from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .grid import Board
from .pieces import Piece, Shape


@dataclass
class ScoringRules:
    line_clear_points: int = 100
    # 0 keeps the line-clear-only variant; 10 reproduces the per-cell variant
    placement_score_per_cell: int = 0

    def score_for_lines(self, lines: int) -> int:
        if lines <= 0:
            return 0
        # Combo: L lines in one move are worth L times L single clears
        return lines * self.line_clear_points * max(lines, 1)

    def score_for_move(self, cells_placed: int, lines: int) -> int:
        return cells_placed * self.placement_score_per_cell + self.score_for_lines(lines)


def fits_anywhere(board: Board, shape: Shape) -> bool:
    for row in range(board.size):
        for col in range(board.size):
            if board.can_place(shape, row, col):
                return True
    return False


def is_terminal(board: Board, pieces: Iterable[Optional[Piece]]) -> bool:
    """True when no held piece can be placed anywhere on `board`.

    An all-empty hand is never terminal: a redraw is about to happen.
    """
    live = [p for p in pieces if p is not None]
    if not live:
        return False
    for piece in live:
        if fits_anywhere(board, piece.shape):
            return False
    return True
