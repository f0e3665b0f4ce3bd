"""Game module for Block Blast.

Exports the puzzle engine and supporting classes:
- Board: immutable square grid with validation, commit and line clearing
- Shape / Piece / PieceGenerator / Hand: the shape catalog and the hand of 3
- ScoringRules / is_terminal: combo scoring and the game-over check
- Progression: score, level target and reward state machine
- BlockBlastGame: one play session tying everything together
- ScalarStore / PlayerRecord: persisted high score, coins and preferences
"""

from .grid import BOARD_SIZES, Board, LineSet, Placement, StalePlacementError
from .pieces import (
    SHAPE_CATALOG,
    ColorTag,
    Hand,
    Piece,
    PieceGenerator,
    Shape,
    ShapeKind,
    catalog_index,
)
from .rules import ScoringRules, fits_anywhere, is_terminal
from .progression import LevelReward, Phase, Progression, ProgressionRules, TransitionError
from .storage import JsonFileStore, MemoryStore, PlayerRecord, ScalarStore
from .core import BlockBlastGame, Difficulty, GameConfig, MoveResult, PendingClear

__all__ = [
    "BOARD_SIZES",
    "Board",
    "LineSet",
    "Placement",
    "StalePlacementError",
    "SHAPE_CATALOG",
    "ColorTag",
    "Hand",
    "Piece",
    "PieceGenerator",
    "Shape",
    "ShapeKind",
    "catalog_index",
    "ScoringRules",
    "fits_anywhere",
    "is_terminal",
    "LevelReward",
    "Phase",
    "Progression",
    "ProgressionRules",
    "TransitionError",
    "JsonFileStore",
    "MemoryStore",
    "PlayerRecord",
    "ScalarStore",
    "BlockBlastGame",
    "Difficulty",
    "GameConfig",
    "MoveResult",
    "PendingClear",
]
