import gymnasium as gym
import numpy as np
import pytest

import block_blast.env  # noqa: F401
from block_blast.env.block_blast_env import BlockBlastEnv
from block_blast.env.wrappers import FlattenDiscreteActionWrapper, ResampleInvalidActionWrapper
from block_blast.game import GameConfig


def test_registered_sizes():
    for env_id, size in [("BlockBlast-6x6-v0", 6), ("BlockBlast-8x8-v0", 8), ("BlockBlast-10x10-v0", 10)]:
        env = gym.make(env_id)
        obs, info = env.reset(seed=0)
        assert obs["grid"].shape == (size, size)
        env.close()


def test_reset_observation_and_mask():
    env = BlockBlastEnv(GameConfig(board_size=8))
    obs, info = env.reset(seed=1)
    assert obs["pieces_remaining"] == 3
    assert np.all(obs["pieces"] >= 0)
    assert not obs["grid"].any()
    assert info["action_mask"].shape == (3, 8, 8)
    assert info["action_mask"].sum() == len(info["valid_actions"])
    assert env.observation_space.contains(obs)


def test_seeded_resets_repeat_the_hand():
    env = BlockBlastEnv()
    first, _ = env.reset(seed=5)
    second, _ = env.reset(seed=5)
    assert np.array_equal(first["pieces"], second["pieces"])


def test_valid_step_places_piece():
    env = BlockBlastEnv()
    obs, info = env.reset(seed=2)
    action = info["valid_actions"][0]
    obs, reward, terminated, truncated, info = env.step(action)
    assert obs["grid"].any()
    assert obs["pieces_remaining"] == 2
    assert "invalid" not in info["reward_components"]
    assert not truncated


def test_invalid_step_is_penalised():
    env = BlockBlastEnv(invalid_action_penalty=-0.5)
    env.reset(seed=2)
    env.step(env.game.valid_actions()[0])
    slot = next(i for i, p in enumerate(env.game.hand) if p is None)
    _, reward, _, _, info = env.step((slot, 0, 0))
    assert info["reward_components"]["invalid"] == -0.5
    assert reward == pytest.approx(-0.5)


def test_deferred_config_rejected():
    with pytest.raises(ValueError):
        BlockBlastEnv(GameConfig(deferred_clear=True))


def test_flatten_wrapper_round_trip():
    env = FlattenDiscreteActionWrapper(BlockBlastEnv(GameConfig(board_size=6)))
    assert env.action_space.n == 3 * 6 * 6
    assert env._unflatten(0) == (0, 0, 0)
    assert env._unflatten(6 * 6 + 6 + 2) == (1, 1, 2)
    env.reset(seed=0)
    assert env.get_action_mask().shape == (108,)


def test_resample_wrapper_replaces_invalid_action():
    env = ResampleInvalidActionWrapper(FlattenDiscreteActionWrapper(BlockBlastEnv(GameConfig(board_size=6))))
    env.reset(seed=0)
    # Occupy (0, 0) with slot 0, then ask slot 0 again: the wrapper picks a legal move instead
    _, _, _, _, info = env.step(0)
    assert info["resampled"] == 0
    _, _, _, _, info = env.step(0)
    assert "invalid" not in info["reward_components"]
    assert info["resampled"] == 1
    env.reset(seed=1)
    assert env.resampled == 0


def test_resample_wrapper_needs_flat_actions():
    with pytest.raises(TypeError):
        ResampleInvalidActionWrapper(BlockBlastEnv(GameConfig(board_size=6)))


def test_random_rollout_until_done():
    env = BlockBlastEnv(GameConfig(board_size=6), max_episode_steps=300)
    obs, info = env.reset(seed=3)
    rng = np.random.default_rng(3)
    done = False
    steps = 0
    while not done:
        valid = info["valid_actions"]
        action = valid[int(rng.integers(len(valid)))]
        obs, reward, terminated, truncated, info = env.step(action)
        done = terminated or truncated
        steps += 1
    assert steps <= 300
    if terminated:
        assert info["valid_actions"] == []
