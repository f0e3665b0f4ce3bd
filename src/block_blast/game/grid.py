from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .pieces import ColorTag, Shape


Coordinate = Tuple[int, int]

EMPTY = 0
BOARD_SIZES = (6, 8, 10)


class StalePlacementError(ValueError):
    """A placement was not issued by `validate` on the board committing it."""


# Only `Board.validate` holds this, so a hand-built Placement never commits
_ISSUED = object()


@dataclass(frozen=True)
class Placement:
    """A (shape, anchor) pair already accepted by `Board.validate`.

    Obtain one from `Board.validate`; building it directly yields a value
    that `Board.commit` refuses.
    """

    board: "Board"
    shape: Shape
    row: int
    col: int
    _seal: object = field(default=None, init=False, repr=False, compare=False)

    def cells(self) -> List[Coordinate]:
        return [(self.row + r, self.col + c) for r, c in self.shape.cells()]


@dataclass(frozen=True)
class LineSet:
    """Full row and column indices found after a commit, ascending."""

    rows: Tuple[int, ...] = ()
    cols: Tuple[int, ...] = ()

    @property
    def count(self) -> int:
        return len(self.rows) + len(self.cols)

    def __bool__(self) -> bool:
        return self.count > 0


class Board:
    """Square occupancy grid, immutable once built.

    Cells hold 0 for empty and a positive `ColorTag` value when occupied.
    Every operation that changes occupancy returns a new `Board`.
    """

    def __init__(self, cells: np.ndarray) -> None:
        grid = np.array(cells, dtype=np.int8)
        if grid.ndim != 2 or grid.shape[0] != grid.shape[1] or grid.shape[0] == 0:
            raise ValueError(f"board must be a non-empty square grid, got shape {grid.shape}")
        grid.setflags(write=False)
        self._grid = grid
        self.size = int(grid.shape[0])

    @classmethod
    def empty(cls, size: int) -> "Board":
        return cls(np.zeros((int(size), int(size)), dtype=np.int8))

    @property
    def cells(self) -> np.ndarray:
        return self._grid

    def is_inside(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def is_occupied(self, row: int, col: int) -> bool:
        return self._grid[row, col] != EMPTY

    def color_at(self, row: int, col: int) -> Optional[ColorTag]:
        value = int(self._grid[row, col])
        return ColorTag(value) if value != EMPTY else None

    def filled_count(self) -> int:
        return int(np.count_nonzero(self._grid))

    def fill_ratio(self) -> float:
        return float(self.filled_count()) / float(self.size * self.size)

    # ---------- Validation ----------
    def can_place(self, shape: Shape, row: int, col: int) -> bool:
        for r, c in shape.cells():
            target_r = row + r
            target_c = col + c
            if not self.is_inside(target_r, target_c):
                return False
            if self._grid[target_r, target_c] != EMPTY:
                return False
        return True

    def validate(self, shape: Shape, row: int, col: int) -> Optional[Placement]:
        if not self.can_place(shape, row, col):
            return None
        placement = Placement(board=self, shape=shape, row=int(row), col=int(col))
        # Not an init field, so dataclasses.replace drops it as well
        object.__setattr__(placement, "_seal", _ISSUED)
        return placement

    def valid_anchors(self, shape: Shape) -> List[Coordinate]:
        anchors: List[Coordinate] = []
        for row in range(self.size):
            for col in range(self.size):
                if self.can_place(shape, row, col):
                    anchors.append((row, col))
        return anchors

    # ---------- Commit & clear ----------
    def commit(self, placement: Placement) -> "Board":
        """Write a validated placement into a copy of this board."""
        if placement._seal is not _ISSUED:
            raise StalePlacementError("placement was not produced by Board.validate")
        if placement.board is not self:
            raise StalePlacementError("placement was validated against a different board")
        grid = self._grid.copy()
        color = int(placement.shape.color)
        for r, c in placement.cells():
            grid[r, c] = color
        return Board(grid)

    def full_lines(self) -> LineSet:
        occupied = self._grid != EMPTY
        rows = np.flatnonzero(np.all(occupied, axis=1))
        cols = np.flatnonzero(np.all(occupied, axis=0))
        return LineSet(rows=tuple(int(r) for r in rows), cols=tuple(int(c) for c in cols))

    def clear(self, lines: LineSet) -> "Board":
        grid = self._grid.copy()
        if lines.rows:
            grid[list(lines.rows), :] = EMPTY
        if lines.cols:
            grid[:, list(lines.cols)] = EMPTY
        return Board(grid)

    # ---------- Misc ----------
    def to_text(self) -> str:
        return "\n".join("".join("█" if cell else "·" for cell in row) for row in self._grid)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return bool(np.array_equal(self._grid, other._grid))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Board(size={self.size}, filled={self.filled_count()})"
