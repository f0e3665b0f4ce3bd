from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

logger = logging.getLogger(__name__)


HIGH_SCORE_KEY = "block-blast-highscore"
COINS_KEY = "block-blast-coins"
MAX_LEVEL_KEY = "block-blast-max-level"
PLAYER_NAME_KEY = "block-blast-player-name"
DIFFICULTY_KEY = "block-blast-difficulty"

DIFFICULTIES = ("easy", "medium", "hard")


class ScalarStore(ABC):
    """Opaque key -> string storage; the latest write wins."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore(ScalarStore):
    def __init__(self, values: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = str(value)


class JsonFileStore(ScalarStore):
    """Keeps every scalar in a single flat JSON object on disk."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._values: Optional[Dict[str, str]] = None

    def _load(self) -> Dict[str, str]:
        if self._values is not None:
            return self._values
        values: Dict[str, str] = {}
        if os.path.exists(self.path):
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    raw = json.load(f)
                if isinstance(raw, dict):
                    values = {str(k): str(v) for k, v in raw.items()}
                else:
                    logger.warning("Ignoring %s: expected a JSON object", self.path)
            except (OSError, ValueError) as exc:
                logger.warning("Could not read %s, starting empty: %s", self.path, exc)
        self._values = values
        return values

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._load()
        values[key] = str(value)
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(values, f, indent=2, sort_keys=True)


def _read_int(store: ScalarStore, key: str, default: int) -> int:
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer value %r for %s", raw, key)
        return default


def _read_choice(store: ScalarStore, key: str, choices: Sequence[str], default: str) -> str:
    raw = store.get(key)
    if raw is None:
        return default
    if raw not in choices:
        logger.warning("Ignoring unknown value %r for %s", raw, key)
        return default
    return raw


@dataclass
class PlayerRecord:
    """Scalars that outlive a session."""

    high_score: int = 0
    coins: int = 0
    max_level: int = 1
    player_name: str = ""
    difficulty: str = "medium"

    @classmethod
    def load(cls, store: ScalarStore) -> "PlayerRecord":
        return cls(
            high_score=_read_int(store, HIGH_SCORE_KEY, 0),
            coins=_read_int(store, COINS_KEY, 0),
            max_level=_read_int(store, MAX_LEVEL_KEY, 1),
            player_name=store.get(PLAYER_NAME_KEY) or "",
            difficulty=_read_choice(store, DIFFICULTY_KEY, DIFFICULTIES, "medium"),
        )

    def record_score(self, store: ScalarStore, score: int) -> bool:
        if score <= self.high_score:
            return False
        self.high_score = score
        store.set(HIGH_SCORE_KEY, str(score))
        return True

    def record_level(self, store: ScalarStore, level: int) -> bool:
        if level <= self.max_level:
            return False
        self.max_level = level
        store.set(MAX_LEVEL_KEY, str(level))
        return True

    def add_coins(self, store: ScalarStore, amount: int) -> int:
        self.coins += amount
        store.set(COINS_KEY, str(self.coins))
        return self.coins

    def save_preferences(self, store: ScalarStore, player_name: str, difficulty: str) -> None:
        self.player_name = player_name
        self.difficulty = difficulty
        store.set(PLAYER_NAME_KEY, player_name)
        store.set(DIFFICULTY_KEY, difficulty)
