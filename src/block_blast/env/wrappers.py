from __future__ import annotations

from typing import Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .block_blast_env import _compute_action_mask


class FlattenDiscreteActionWrapper(gym.ActionWrapper):
    """Exposes the (slot, row, col) placement space as one Discrete index.

    Index order is C-order over (slot, row, col), the same order as the
    flattened `get_action_mask()`.
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        if not isinstance(env.action_space, spaces.MultiDiscrete):
            raise TypeError("expected a MultiDiscrete (slot, row, col) action space")
        self.dims: Tuple[int, ...] = tuple(int(n) for n in env.action_space.nvec)
        self.action_space = spaces.Discrete(int(np.prod(self.dims)))

    def _unflatten(self, idx: int) -> Tuple[int, int, int]:
        slot, row, col = np.unravel_index(int(idx), self.dims)
        return int(slot), int(row), int(col)

    def action(self, action: int):  # type: ignore[override]
        return np.array(self._unflatten(action), dtype=np.int64)

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.env.unwrapped.game).reshape(-1)


class ResampleInvalidActionWrapper(gym.Wrapper):
    """Swaps a rejected placement index for a uniformly drawn legal one.

    For plain PPO, which cannot mask. The running number of swaps in the
    current episode is reported as ``info["resampled"]``.
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        if not isinstance(env.action_space, spaces.Discrete):
            raise TypeError("wrap a FlattenDiscreteActionWrapper, not the raw env")
        self.resampled = 0

    def reset(self, **kwargs):  # type: ignore[override]
        self.resampled = 0
        return self.env.reset(**kwargs)

    def step(self, action):  # type: ignore[override]
        mask = self.get_action_mask()
        action = int(action)
        if not mask[action]:
            legal = np.flatnonzero(mask)
            # No legal index means the episode is already over; let the env reject it
            if legal.size:
                action = int(self.np_random.choice(legal))
                self.resampled += 1
        obs, reward, terminated, truncated, info = self.env.step(action)
        info["resampled"] = self.resampled
        return obs, reward, terminated, truncated, info

    def get_action_mask(self) -> np.ndarray:
        return self.env.get_action_mask()
