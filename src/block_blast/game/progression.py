"""Score, level target and reward bookkeeping.

`Progression` is an immutable snapshot; every transition returns a new one.
The phases are:

    ACTIVE --score >= target--> LEVEL_COMPLETE --claim--> ACTIVE (level + 1)
    ACTIVE --no piece fits--> GAME_OVER

A fresh session is a new `Progression.start(...)`; GAME_OVER has no other
way out.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class TransitionError(RuntimeError):
    """A progression transition was requested from the wrong phase."""


class Phase(str, Enum):
    ACTIVE = "active"
    LEVEL_COMPLETE = "level_complete"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class ProgressionRules:
    base_level_score: int = 1000
    level_score_step: int = 500
    base_coin_reward: int = 50
    coin_reward_per_level: int = 10
    time_expectation_per_level: float = 45.0
    time_expectation_step: float = 10.0
    speed_bonus_per_second: float = 2.0

    def expected_time(self, level: int) -> float:
        return self.time_expectation_per_level + level * self.time_expectation_step

    def base_reward(self, level: int) -> int:
        return self.base_coin_reward + level * self.coin_reward_per_level

    def speed_bonus(self, level: int, elapsed: float) -> int:
        threshold = self.expected_time(level)
        if elapsed >= threshold:
            return 0
        return int(math.floor(self.speed_bonus_per_second * (threshold - elapsed)))

    def next_target(self, target: int, new_level: int) -> int:
        return target + self.base_level_score + new_level * self.level_score_step


@dataclass(frozen=True)
class LevelReward:
    level: int
    base: int
    speed_bonus: int
    elapsed: float

    @property
    def total(self) -> int:
        return self.base + self.speed_bonus


@dataclass(frozen=True)
class Progression:
    level: int
    score: int
    target_score: int
    level_start: float
    phase: Phase = Phase.ACTIVE
    reward: Optional[LevelReward] = None
    rules: ProgressionRules = field(default_factory=ProgressionRules, repr=False, compare=False)

    @classmethod
    def start(cls, now: float, rules: Optional[ProgressionRules] = None) -> "Progression":
        rules = rules or ProgressionRules()
        return cls(level=1, score=0, target_score=rules.base_level_score, level_start=now, rules=rules)

    @property
    def is_active(self) -> bool:
        return self.phase is Phase.ACTIVE

    def elapsed(self, now: float) -> float:
        return max(0.0, now - self.level_start)

    def progress(self) -> float:
        return min(1.0, self.score / self.target_score) if self.target_score > 0 else 1.0

    def _require(self, phase: Phase, action: str) -> None:
        if self.phase is not phase:
            raise TransitionError(f"cannot {action} while {self.phase.value}")

    def add_score(self, points: int, now: float) -> "Progression":
        self._require(Phase.ACTIVE, "add score")
        if points < 0:
            raise ValueError("score never decreases")
        score = self.score + int(points)
        if score < self.target_score:
            return replace(self, score=score)
        elapsed = self.elapsed(now)
        reward = LevelReward(
            level=self.level,
            base=self.rules.base_reward(self.level),
            speed_bonus=self.rules.speed_bonus(self.level, elapsed),
            elapsed=elapsed,
        )
        return replace(self, score=score, phase=Phase.LEVEL_COMPLETE, reward=reward)

    def claim(self, now: float) -> "Progression":
        self._require(Phase.LEVEL_COMPLETE, "claim a reward")
        level = self.level + 1
        return replace(
            self,
            level=level,
            target_score=self.rules.next_target(self.target_score, level),
            level_start=now,
            phase=Phase.ACTIVE,
            reward=None,
        )

    def end(self) -> "Progression":
        self._require(Phase.ACTIVE, "end the session")
        return replace(self, phase=Phase.GAME_OVER)
