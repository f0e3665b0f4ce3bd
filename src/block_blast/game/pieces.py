from __future__ import annotations

import itertools
import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

import numpy as np


RandomSource = Callable[[], float]


class ColorTag(IntEnum):
    YELLOW = 1
    BLUE = 2
    RED = 3
    CYAN = 4
    ORANGE = 5
    GREEN = 6
    PURPLE = 7
    PINK = 8


class ShapeKind(str, Enum):
    """Cosmetic grouping only; gameplay never looks at it."""

    SINGLE = "single"
    LINE2 = "line2"
    LINE3 = "line3"
    LINE4 = "line4"
    LINE5 = "line5"
    SQUARE = "square"
    L = "L"
    J = "J"
    T = "T"
    S = "S"
    Z = "Z"
    CROSS = "cross"


@dataclass(frozen=True, eq=False)
class Shape:
    """Immutable occupancy matrix with a color and a category.

    The matrix is stored as a read-only int8 array so that nothing
    downstream can mutate a catalog entry in place.
    """

    kind: ShapeKind
    matrix: np.ndarray
    color: ColorTag

    def __post_init__(self) -> None:
        matrix = np.array(self.matrix, dtype=np.int8)
        if matrix.ndim != 2:
            raise ValueError("shape matrix must be two-dimensional")
        if not np.any(matrix):
            raise ValueError("shape must occupy at least one cell")
        matrix = (matrix != 0).astype(np.int8)
        matrix.setflags(write=False)
        object.__setattr__(self, "matrix", matrix)

    @property
    def height(self) -> int:
        return int(self.matrix.shape[0])

    @property
    def width(self) -> int:
        return int(self.matrix.shape[1])

    @property
    def area(self) -> int:
        return int(np.count_nonzero(self.matrix))

    def cells(self) -> List[Tuple[int, int]]:
        """Return (row, col) offsets of the occupied cells, row-major."""
        rows, cols = np.nonzero(self.matrix)
        return [(int(r), int(c)) for r, c in zip(rows, cols)]


def _shape(kind: ShapeKind, rows: Sequence[Sequence[int]], color: ColorTag) -> Shape:
    return Shape(kind=kind, matrix=np.array(rows, dtype=np.int8), color=color)


SHAPE_CATALOG: Tuple[Shape, ...] = (
    _shape(ShapeKind.SINGLE, [[1]], ColorTag.YELLOW),
    _shape(ShapeKind.LINE2, [[1, 1]], ColorTag.BLUE),
    _shape(ShapeKind.LINE2, [[1], [1]], ColorTag.BLUE),
    _shape(ShapeKind.LINE3, [[1, 1, 1]], ColorTag.RED),
    _shape(ShapeKind.LINE3, [[1], [1], [1]], ColorTag.RED),
    _shape(ShapeKind.LINE4, [[1, 1, 1, 1]], ColorTag.CYAN),
    _shape(ShapeKind.LINE4, [[1], [1], [1], [1]], ColorTag.CYAN),
    _shape(ShapeKind.LINE5, [[1, 1, 1, 1, 1]], ColorTag.ORANGE),
    _shape(ShapeKind.LINE5, [[1], [1], [1], [1], [1]], ColorTag.ORANGE),
    _shape(ShapeKind.SQUARE, [[1, 1], [1, 1]], ColorTag.GREEN),
    _shape(ShapeKind.SQUARE, [[1, 1, 1], [1, 1, 1], [1, 1, 1]], ColorTag.GREEN),
    _shape(ShapeKind.L, [[1, 0], [1, 0], [1, 1]], ColorTag.PURPLE),
    _shape(ShapeKind.J, [[0, 1], [0, 1], [1, 1]], ColorTag.PURPLE),
    _shape(ShapeKind.L, [[1, 1, 1], [1, 0, 0]], ColorTag.PURPLE),
    _shape(ShapeKind.J, [[1, 0, 0], [1, 1, 1]], ColorTag.PURPLE),
    _shape(ShapeKind.T, [[1, 1, 1], [0, 1, 0]], ColorTag.PINK),
    _shape(ShapeKind.T, [[0, 1, 0], [1, 1, 1]], ColorTag.PINK),
    _shape(ShapeKind.T, [[1, 0], [1, 1], [1, 0]], ColorTag.PINK),
    _shape(ShapeKind.T, [[0, 1], [1, 1], [0, 1]], ColorTag.PINK),
    _shape(ShapeKind.S, [[0, 1, 1], [1, 1, 0]], ColorTag.GREEN),
    _shape(ShapeKind.Z, [[1, 1, 0], [0, 1, 1]], ColorTag.RED),
    _shape(ShapeKind.CROSS, [[0, 1, 0], [1, 1, 1], [0, 1, 0]], ColorTag.BLUE),
)


def catalog_index(shape: Shape, catalog: Sequence[Shape] = SHAPE_CATALOG) -> int:
    """Position of `shape` in `catalog` by identity, or -1."""
    for i, entry in enumerate(catalog):
        if entry is shape:
            return i
    return -1


@dataclass(frozen=True)
class Piece:
    id: str
    shape: Shape


class PieceGenerator:
    """Draws pieces uniformly (with replacement) from a shape catalog.

    `rng` is any zero-argument callable returning a float in [0, 1); when
    omitted a `random.Random(seed)` is used so draws are reproducible.
    """

    def __init__(
        self,
        rng: Optional[RandomSource] = None,
        seed: Optional[int] = None,
        catalog: Sequence[Shape] = SHAPE_CATALOG,
    ) -> None:
        if len(catalog) == 0:
            raise ValueError("shape catalog is empty")
        self.catalog: Tuple[Shape, ...] = tuple(catalog)
        self.rng: RandomSource = rng if rng is not None else random.Random(seed).random
        self._ids = itertools.count(1)

    def draw(self, count: int) -> List[Piece]:
        if count <= 0:
            raise ValueError(f"draw count must be positive, got {count}")
        n = len(self.catalog)
        pieces: List[Piece] = []
        for _ in range(count):
            # clamp guards against sources that return exactly 1.0
            idx = min(int(self.rng() * n), n - 1)
            pieces.append(Piece(id=f"piece-{next(self._ids)}", shape=self.catalog[idx]))
        return pieces


class Hand:
    """Fixed number of ordered slots, each holding a piece or None."""

    def __init__(self, size: int = 3) -> None:
        self.size = int(size)
        self._slots: List[Optional[Piece]] = [None] * self.size

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[Optional[Piece]]:
        return iter(list(self._slots))

    def __getitem__(self, index: int) -> Optional[Piece]:
        return self._slots[index]

    def slots(self) -> List[Optional[Piece]]:
        return list(self._slots)

    def live_pieces(self) -> List[Piece]:
        return [p for p in self._slots if p is not None]

    def is_empty(self) -> bool:
        return all(p is None for p in self._slots)

    def take(self, index: int) -> Piece:
        piece = self._slots[index]
        if piece is None:
            raise ValueError(f"hand slot {index} is empty")
        self._slots[index] = None
        return piece

    def refill(self, pieces: Sequence[Piece]) -> None:
        if not self.is_empty():
            raise ValueError("hand can only be refilled once every slot is empty")
        if len(pieces) != self.size:
            raise ValueError(f"expected {self.size} pieces, got {len(pieces)}")
        self._slots = list(pieces)

    def load(self, slots: Sequence[Optional[Piece]]) -> None:
        """Replace every slot, used when restoring a saved position."""
        if len(slots) != self.size:
            raise ValueError(f"expected {self.size} slots, got {len(slots)}")
        self._slots = list(slots)

    def clear(self) -> None:
        self._slots = [None] * self.size
