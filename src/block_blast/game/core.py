from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .grid import BOARD_SIZES, Board, LineSet
from .pieces import Hand, Piece, PieceGenerator, RandomSource
from .progression import LevelReward, Phase, Progression, ProgressionRules
from .rules import ScoringRules, is_terminal
from .storage import MemoryStore, PlayerRecord, ScalarStore

logger = logging.getLogger(__name__)


Clock = Callable[[], float]


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def board_size(self) -> int:
        return {Difficulty.EASY: 10, Difficulty.MEDIUM: 8, Difficulty.HARD: 6}[self]


@dataclass
class GameConfig:
    board_size: int = 8
    hand_size: int = 3
    random_seed: Optional[int] = None
    # When True, `place` leaves full lines on the board until `apply_clear`
    deferred_clear: bool = False

    def __post_init__(self) -> None:
        if self.board_size not in BOARD_SIZES:
            raise ValueError(f"board_size must be one of {BOARD_SIZES}, got {self.board_size}")
        if self.hand_size <= 0:
            raise ValueError("hand_size must be positive")

    @classmethod
    def for_difficulty(cls, difficulty: Difficulty | str, **kwargs) -> "GameConfig":
        return cls(board_size=Difficulty(difficulty).board_size, **kwargs)


@dataclass(frozen=True)
class PendingClear:
    """Handle for a clear that the caller must apply with `apply_clear`."""

    token: int
    lines: LineSet


@dataclass(frozen=True)
class MoveResult:
    success: bool
    lines: LineSet = LineSet()
    gained: int = 0
    cells_placed: int = 0
    pending: Optional[PendingClear] = None
    progression: Optional[Progression] = None
    game_over: bool = False

    @property
    def lines_cleared(self) -> int:
        return self.lines.count


class BlockBlastGame:
    """One play session: board, hand and progression, single writer.

    The board is replaced, never mutated. With `deferred_clear` the caller
    sees the placed board first and applies the clear later through the
    returned `PendingClear`; any move or reset supersedes an outstanding one.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        progression_rules: Optional[ProgressionRules] = None,
        rng: Optional[RandomSource] = None,
        clock: Optional[Clock] = None,
        store: Optional[ScalarStore] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.progression_rules = progression_rules or ProgressionRules()
        self.clock: Clock = clock or time.monotonic
        self.store = store if store is not None else MemoryStore()
        self.record = PlayerRecord.load(self.store)
        self.generator = PieceGenerator(rng=rng, seed=self.config.random_seed)
        self.hand = Hand(self.config.hand_size)
        self._board = Board.empty(self.config.board_size)
        self._progression = Progression.start(self.clock(), self.progression_rules)
        self._pending: Optional[PendingClear] = None
        self._tokens = 0
        self.total_lines_cleared = 0
        self.total_pieces_placed = 0
        self.reset()

    # ---------- Snapshots ----------
    @property
    def board(self) -> Board:
        return self._board

    @property
    def progression(self) -> Progression:
        return self._progression

    @property
    def pending(self) -> Optional[PendingClear]:
        return self._pending

    @property
    def phase(self) -> Phase:
        return self._progression.phase

    @property
    def score(self) -> int:
        return self._progression.score

    @property
    def level(self) -> int:
        return self._progression.level

    @property
    def game_over(self) -> bool:
        return self._progression.phase is Phase.GAME_OVER

    def elapsed(self) -> float:
        return self._progression.elapsed(self.clock())

    # ---------- Lifecycle ----------
    def reset(self, board_size: Optional[int] = None, seed: Optional[int] = None) -> None:
        """Start a new session; an outstanding clear is discarded."""
        if board_size is not None:
            self.config = replace(self.config, board_size=board_size)
        if seed is not None:
            self.generator = PieceGenerator(rng=random.Random(seed).random)
        self._invalidate_pending()
        self._board = Board.empty(self.config.board_size)
        self.hand = Hand(self.config.hand_size)
        self.hand.refill(self.generator.draw(self.config.hand_size))
        self._progression = Progression.start(self.clock(), self.progression_rules)
        self.total_lines_cleared = 0
        self.total_pieces_placed = 0
        logger.debug("New session on a %dx%d board", self.config.board_size, self.config.board_size)

    def restore(
        self,
        board: Board,
        pieces: Sequence[Optional[Piece]],
        progression: Optional[Progression] = None,
    ) -> None:
        """Replace board, hand and optionally progression with a saved position."""
        if board.size != self.config.board_size:
            raise ValueError(f"board size {board.size} does not match session size {self.config.board_size}")
        self._invalidate_pending()
        self._board = board
        self.hand.load(pieces)
        if progression is not None:
            self._progression = progression
        self._settle()

    # ---------- Queries ----------
    def can_place(self, slot: int, row: int, col: int) -> bool:
        piece = self._piece_at(slot)
        return piece is not None and self._board.can_place(piece.shape, row, col)

    def valid_actions(self) -> List[Tuple[int, int, int]]:
        """Every (slot, row, col) that would be accepted right now."""
        if not self._progression.is_active:
            return []
        actions: List[Tuple[int, int, int]] = []
        for slot, piece in enumerate(self.hand):
            if piece is None:
                continue
            for row, col in self._board.valid_anchors(piece.shape):
                actions.append((slot, row, col))
        return actions

    def _piece_at(self, slot: int) -> Optional[Piece]:
        if slot < 0 or slot >= len(self.hand):
            return None
        return self.hand[slot]

    # ---------- Commands ----------
    def place(self, slot: int, row: int, col: int) -> MoveResult:
        if not self._progression.is_active:
            logger.debug("Rejected move while %s", self.phase.value)
            return MoveResult(success=False, progression=self._progression, game_over=self.game_over)
        piece = self._piece_at(slot)
        if piece is None:
            logger.debug("Rejected move: slot %d holds no piece", slot)
            return MoveResult(success=False, progression=self._progression)
        if self._pending is not None:
            self._flush_pending()
            if not self._progression.is_active:
                return MoveResult(success=False, progression=self._progression, game_over=self.game_over)
        placement = self._board.validate(piece.shape, row, col)
        if placement is None:
            logger.debug("Rejected move: %s does not fit at (%d, %d)", piece.id, row, col)
            return MoveResult(success=False, progression=self._progression)

        placed = self._board.commit(placement)
        lines = placed.full_lines()
        cells = piece.shape.area
        gained = self.rules.score_for_move(cells, lines.count)
        self.hand.take(slot)
        self.total_pieces_placed += 1
        self.total_lines_cleared += lines.count

        before = self._progression
        self._progression = before.add_score(gained, self.clock())
        self.record.record_score(self.store, self._progression.score)
        if self._progression.phase is Phase.LEVEL_COMPLETE and before.phase is Phase.ACTIVE:
            reward = self._progression.reward
            logger.info(
                "Level %d complete with score %d (reward %d + %d)",
                before.level, self._progression.score, reward.base, reward.speed_bonus,
            )

        pending: Optional[PendingClear] = None
        if lines and self.config.deferred_clear:
            self._board = placed
            self._tokens += 1
            pending = PendingClear(token=self._tokens, lines=lines)
            self._pending = pending
        else:
            self._board = placed.clear(lines)
            self._settle()

        return MoveResult(
            success=True,
            lines=lines,
            gained=gained,
            cells_placed=cells,
            pending=pending,
            progression=self._progression,
            game_over=self.game_over,
        )

    def apply_clear(self, pending: PendingClear) -> bool:
        """Apply a deferred clear; stale or already applied handles are ignored."""
        if self._pending is None or pending.token != self._pending.token:
            logger.debug("Ignoring stale clear %d", pending.token)
            return False
        self._board = self._board.clear(self._pending.lines)
        self._pending = None
        self._settle()
        return True

    def claim_reward(self) -> LevelReward:
        reward = self._progression.reward
        self._progression = self._progression.claim(self.clock())
        assert reward is not None
        self.record.add_coins(self.store, reward.total)
        self.record.record_level(self.store, self._progression.level)
        logger.info("Claimed %d coins, now on level %d", reward.total, self._progression.level)
        if self._pending is None:
            self._settle()
        return reward

    def refresh_game_over(self) -> bool:
        """Re-run the terminal check against the current board and hand."""
        if self._pending is None:
            self._settle()
        return self.game_over

    # ---------- Internals ----------
    def _flush_pending(self) -> None:
        assert self._pending is not None
        logger.debug("Applying superseded clear %d before the next move", self._pending.token)
        self._board = self._board.clear(self._pending.lines)
        self._pending = None
        self._settle()

    def _invalidate_pending(self) -> None:
        if self._pending is not None:
            logger.debug("Discarding pending clear %d", self._pending.token)
        self._pending = None

    def _settle(self) -> None:
        if self.hand.is_empty():
            self.hand.refill(self.generator.draw(self.hand.size))
        if self._progression.is_active and is_terminal(self._board, self.hand):
            self._progression = self._progression.end()
            logger.info(
                "Game over at level %d with score %d after %d pieces",
                self._progression.level, self._progression.score, self.total_pieces_placed,
            )

    def get_state(self) -> dict:
        return {
            "grid": np.array(self._board.cells, dtype=np.int8),
            "pieces": [p.id if p is not None else None for p in self.hand],
            "pieces_remaining": len(self.hand.live_pieces()),
            "score": self._progression.score,
            "level": self._progression.level,
            "target_score": self._progression.target_score,
            "phase": self._progression.phase.value,
            "total_lines_cleared": self.total_lines_cleared,
            "total_pieces_placed": self.total_pieces_placed,
            "game_over": self.game_over,
            "filled_ratio": self._board.fill_ratio(),
            "high_score": self.record.high_score,
            "coins": self.record.coins,
        }
