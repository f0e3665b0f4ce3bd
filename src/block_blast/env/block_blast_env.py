from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from block_blast.game import SHAPE_CATALOG, Board, BlockBlastGame, GameConfig, Phase, catalog_index


def _compute_action_mask(game: BlockBlastGame) -> np.ndarray:
    size = game.config.board_size
    k = game.config.hand_size
    mask = np.zeros((k, size, size), dtype=np.bool_)
    for slot, row, col in game.valid_actions():
        mask[slot, row, col] = True
    return mask


def board_features(board: Board) -> Dict[str, float]:
    occupied = board.cells != 0
    size = board.size
    row_fill = occupied.sum(axis=1)
    col_fill = occupied.sum(axis=0)
    return {
        "filled_cells": float(occupied.sum()),
        "fill_ratio": board.fill_ratio(),
        "almost_complete_lines": float(np.sum(row_fill >= size - 1) + np.sum(col_fill >= size - 1)),
        "empty_rows": float(np.sum(row_fill == 0)),
        "empty_cols": float(np.sum(col_fill == 0)),
    }


class BlockBlastEnv(gym.Env):
    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 invalid_action_penalty: float = -0.1,
                 step_penalty: float = 0.0,
                 terminal_penalty: float = -1.0,
                 max_episode_steps: int = 10000) -> None:
        super().__init__()
        config = config or GameConfig()
        if config.deferred_clear:
            raise ValueError("BlockBlastEnv needs immediate line clears")
        self.game = BlockBlastGame(config)
        self.render_mode = render_mode
        self.max_episode_steps = int(max_episode_steps)

        # Reward shaping parameters
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.step_penalty = float(step_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.reward_weights: Dict[str, float] = {
            "cells": 0.05,            # reward per cell placed
            "lines": 1.0,             # reward per line cleared
            "lines_sq": 0.5,          # extra for multiple lines (quadratic)
            "score": 0.0,             # engine score delta
            "fill": 0.1,              # penalize growth of the filled fraction
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        size = config.board_size
        k = config.hand_size
        n_shapes = len(SHAPE_CATALOG)

        # grid (0/1), catalog index per slot (-1 for empty)
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(size, size), dtype=np.int8),
                "pieces": spaces.Box(low=-1, high=n_shapes - 1, shape=(k,), dtype=np.int8),
                "pieces_remaining": spaces.Discrete(k + 1),
            }
        )

        # Action: (slot, row, col)
        self.action_space = spaces.MultiDiscrete((k, size, size))

        self._last_obs: Optional[Dict[str, Any]] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        k = self.game.config.hand_size
        grid = (self.game.board.cells != 0).astype(np.int8)
        pieces = np.full((k,), -1, dtype=np.int8)
        for i, piece in enumerate(self.game.hand):
            if piece is not None:
                pieces[i] = catalog_index(piece.shape)
        obs: Dict[str, Any] = {
            "grid": grid,
            "pieces": pieces,
            "pieces_remaining": len(self.game.hand.live_pieces()),
        }
        return obs

    def _get_info(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "action_mask": _compute_action_mask(self.game),
            "valid_actions": self.game.valid_actions(),
            "score": self.game.score,
            "level": self.game.level,
            "steps": self._steps,
            "features": board_features(self.game.board),
        }
        return info

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.game)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is None:
            seed = int(self.np_random.integers(0, 2**31 - 1))
        self.game.reset(seed=seed)
        self._steps = 0
        obs = self._get_obs()
        info = self._get_info()
        self._last_obs = obs
        return obs, info

    def step(self, action: np.ndarray | Tuple[int, int, int]):
        slot, row, col = map(int, action)

        truncated = False
        fill_before = self.game.board.fill_ratio()
        result = self.game.place(slot, row, col)

        reward_components: Dict[str, float] = {}
        if result.success:
            lines = result.lines_cleared
            reward_components["cells"] = self.reward_weights["cells"] * float(result.cells_placed)
            reward_components["lines"] = self.reward_weights["lines"] * float(lines)
            reward_components["lines_sq"] = self.reward_weights["lines_sq"] * float(lines * lines)
            reward_components["score"] = self.reward_weights["score"] * float(result.gained)
            reward_components["fill"] = -self.reward_weights["fill"] * float(
                max(0.0, self.game.board.fill_ratio() - fill_before))
            # No UI to press "claim": collect level rewards straight away
            if self.game.phase is Phase.LEVEL_COMPLETE:
                self.game.claim_reward()
        else:
            reward_components["invalid"] = self.invalid_action_penalty

        reward_components["step"] = self.step_penalty
        terminated = bool(self.game.game_over)
        self._steps += 1
        if self._steps >= self.max_episode_steps:
            truncated = True
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))

        obs = self._get_obs()
        info = self._get_info()
        info["reward_components"] = reward_components
        info["engine_score_delta"] = float(result.gained)
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            grid = self._last_obs["grid"] if self._last_obs is not None else self.game.board.cells
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    color = (70, 200, 120) if grid[y, x] else (30, 30, 36)
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        return None

    def close(self) -> None:
        pass
