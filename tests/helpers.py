import numpy as np

from block_blast.game import SHAPE_CATALOG, Board, Piece, ShapeKind


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SequenceRandom:
    """Replays fixed floats in [0, 1) and counts how often it was asked."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def __call__(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


def shape_of(kind: ShapeKind, rows: int, cols: int):
    for shape in SHAPE_CATALOG:
        if shape.kind is kind and shape.matrix.shape == (rows, cols):
            return shape
    raise LookupError(f"no {kind.value} shape of size {rows}x{cols}")


def piece(kind: ShapeKind, rows: int, cols: int, pid: str = "p") -> Piece:
    return Piece(id=pid, shape=shape_of(kind, rows, cols))


def board_from_rows(rows) -> Board:
    """Build a board from strings where '#' is occupied and '.' is empty."""
    return Board(np.array([[1 if ch == "#" else 0 for ch in row] for row in rows], dtype=np.int8))
