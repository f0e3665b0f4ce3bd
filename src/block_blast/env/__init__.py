"""Gymnasium environments for Block Blast."""

from __future__ import annotations

from gymnasium.envs.registration import register

from block_blast.game import Difficulty, GameConfig

ENV_IDS = {
    Difficulty.HARD: "BlockBlast-6x6-v0",
    Difficulty.MEDIUM: "BlockBlast-8x8-v0",
    Difficulty.EASY: "BlockBlast-10x10-v0",
}

for _difficulty, _env_id in ENV_IDS.items():
    register(
        id=_env_id,
        entry_point="block_blast.env.block_blast_env:BlockBlastEnv",
        kwargs={"config": GameConfig.for_difficulty(_difficulty)},
    )

__all__ = ["ENV_IDS"]
